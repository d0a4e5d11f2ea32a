"""
Shared pytest fixtures.
"""
import logging
import pytest


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Detach handlers bound to per-test captured streams."""
    yield
    logging.getLogger('fitness_connect').handlers.clear()
