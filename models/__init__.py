# Models package for data models and errors

from .errors import (
    FitnessConnectError,
    ConfigError,
    TokenStoreError,
    StravaAuthenticationError,
    StravaAPIError,
    WithingsAuthenticationError,
    WithingsAPIError,
    NoMeasurementsError,
)
from .token import OAuthToken
from .weight import WeightMeasurement

__all__ = [
    'FitnessConnectError',
    'ConfigError',
    'TokenStoreError',
    'StravaAuthenticationError',
    'StravaAPIError',
    'WithingsAuthenticationError',
    'WithingsAPIError',
    'NoMeasurementsError',
    'OAuthToken',
    'WeightMeasurement',
]
