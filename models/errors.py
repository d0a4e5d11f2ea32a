"""
Exception hierarchy for Fitness Connect.
"""


class FitnessConnectError(Exception):
    """Base exception for every error the CLI reports to the user."""
    pass


class ConfigError(FitnessConnectError):
    """Raised when configuration validation fails."""
    pass


class TokenStoreError(FitnessConnectError):
    """Raised when an OAuth config file cannot be read or written."""
    pass


class StravaAuthenticationError(FitnessConnectError):
    """Raised when Strava authentication fails."""
    pass


class StravaAPIError(FitnessConnectError):
    """Raised when a Strava API call fails."""
    pass


class WithingsAuthenticationError(FitnessConnectError):
    """Raised when Withings authentication fails."""
    pass


class WithingsAPIError(FitnessConnectError):
    """Raised when a Withings API call fails."""
    pass


class NoMeasurementsError(WithingsAPIError):
    """Raised when Withings returns no weight measurement for the period."""

    def __init__(self, message: str = "No measurements available"):
        super().__init__(message)
