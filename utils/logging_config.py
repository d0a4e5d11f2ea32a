"""
Logging configuration with optional Google Cloud Logging integration.
"""
import logging
import sys
import atexit
from typing import Optional
from google.cloud import logging as cloud_logging
from config import get_config

LOGGER_NAME = 'fitness_connect'

# Global reference to cloud logging client for cleanup
_cloud_logging_client = None


def setup_logging(level: Optional[str] = None, use_cloud_logging: bool = False) -> logging.Logger:
    """
    Set up application logging.

    Log records go to stderr so that command results on stdout stay clean.

    Args:
        level: Log level name; falls back to LOG_LEVEL from configuration
        use_cloud_logging: Whether to also ship logs to Google Cloud Logging

    Returns:
        Configured logger instance
    """
    config = get_config()
    level_name = (level or config.log_level or 'INFO').upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Clear any existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if use_cloud_logging and config.gcp_credentials_path:
        try:
            global _cloud_logging_client
            _cloud_logging_client = cloud_logging.Client.from_service_account_json(
                config.gcp_credentials_path
            )

            cloud_handler = _cloud_logging_client.get_default_handler()
            cloud_handler.setLevel(log_level)
            logger.addHandler(cloud_handler)

            atexit.register(_cleanup_cloud_logging)

            logger.debug("Google Cloud Logging initialized successfully")

        except Exception as e:
            logger.warning(f"Failed to initialize Google Cloud Logging: {e}")
            logger.info("Continuing with console logging only")
    elif use_cloud_logging:
        logger.warning("Google Cloud Logging disabled - GCP_CREDENTIALS_PATH is not set")

    # Prevent duplicate logs from root logger
    logger.propagate = False

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (defaults to 'fitness_connect')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f'{LOGGER_NAME}.{name}')
    return logging.getLogger(LOGGER_NAME)


def _cleanup_cloud_logging():
    """
    Flush and close the Google Cloud Logging client at program exit.
    """
    global _cloud_logging_client
    if _cloud_logging_client:
        try:
            for handler in logging.getLogger(LOGGER_NAME).handlers:
                handler.flush()
            _cloud_logging_client.close()
        except Exception:
            # Errors while closing are ignored at shutdown
            pass
        finally:
            _cloud_logging_client = None
