"""
Configuration management and environment variable validation for Fitness Connect.
"""
import os
from typing import Dict, List, Optional
from dotenv import load_dotenv

from models.errors import ConfigError

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration backed by environment variables."""

    # Credentials, validated per service when that service is used
    STRAVA_VARS = {
        'STRAVA_CLIENT_ID': 'Strava API client ID',
        'STRAVA_CLIENT_SECRET': 'Strava API client secret',
    }

    WITHINGS_VARS = {
        'WITHINGS_CLIENT_ID': 'Withings API client ID',
        'WITHINGS_CLIENT_SECRET': 'Withings API client secret',
    }

    # Optional environment variables with defaults
    OPTIONAL_VARS = {
        'STRAVA_CONFIG_FILE': 'config.json',
        'STRAVA_REDIRECT_URI': 'http://localhost',
        'WITHINGS_CONFIG_FILE': 'withings_config.json',
        'WITHINGS_REDIRECT_URI': 'http://localhost:8888',
        'TIMEZONE': 'UTC',
        'LOG_LEVEL': 'INFO',
        'API_TIMEOUT': '30',
    }

    def __init__(self):
        """Initialize configuration from the environment."""
        self._config: Dict[str, Optional[str]] = {}
        self._load_environment()

    def _load_environment(self) -> None:
        for var_name in list(self.STRAVA_VARS) + list(self.WITHINGS_VARS):
            self._config[var_name] = os.getenv(var_name) or None

        for var_name, default_value in self.OPTIONAL_VARS.items():
            self._config[var_name] = os.getenv(var_name) or default_value

        self._config['GCP_CREDENTIALS_PATH'] = os.getenv('GCP_CREDENTIALS_PATH') or None

    def _require(self, required: Dict[str, str]) -> None:
        missing_vars: List[str] = [
            f"{var_name} ({description})"
            for var_name, description in required.items()
            if not self._config.get(var_name)
        ]
        if missing_vars:
            error_msg = (
                "Missing required environment variables:\n"
                + "\n".join(f"  - {var}" for var in missing_vars)
                + "\n\nSet them in your environment or .env file."
            )
            raise ConfigError(error_msg)

    def require_strava_credentials(self) -> None:
        """Raise ConfigError unless the Strava client credentials are set."""
        self._require(self.STRAVA_VARS)

    def require_withings_credentials(self) -> None:
        """Raise ConfigError unless the Withings client credentials are set."""
        self._require(self.WITHINGS_VARS)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get configuration value by key."""
        # First check our internal config, then environment, then default
        if self._config.get(key) is not None:
            return self._config[key]
        return os.getenv(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        """Get configuration value as integer."""
        try:
            value = self.get(key, str(default))
            return int(value) if value is not None else default
        except (ValueError, TypeError):
            return default

    @property
    def strava_client_id(self) -> Optional[str]:
        return self._config['STRAVA_CLIENT_ID']

    @property
    def strava_client_secret(self) -> Optional[str]:
        return self._config['STRAVA_CLIENT_SECRET']

    @property
    def strava_config_file(self) -> str:
        return self._config['STRAVA_CONFIG_FILE']

    @property
    def strava_redirect_uri(self) -> str:
        return self._config['STRAVA_REDIRECT_URI']

    @property
    def withings_client_id(self) -> Optional[str]:
        return self._config['WITHINGS_CLIENT_ID']

    @property
    def withings_client_secret(self) -> Optional[str]:
        return self._config['WITHINGS_CLIENT_SECRET']

    @property
    def withings_config_file(self) -> str:
        return self._config['WITHINGS_CONFIG_FILE']

    @property
    def withings_redirect_uri(self) -> str:
        return self._config['WITHINGS_REDIRECT_URI']

    @property
    def gcp_credentials_path(self) -> Optional[str]:
        return self._config.get('GCP_CREDENTIALS_PATH')

    @property
    def timezone(self) -> str:
        return self._config['TIMEZONE']

    @property
    def log_level(self) -> str:
        return self._config['LOG_LEVEL']

    @property
    def api_timeout(self) -> int:
        return self.get_int('API_TIMEOUT', 30)


# Global configuration instance, created on first use
_config_instance = None


def get_config() -> Config:
    """Get the global configuration instance, initializing if needed."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reset_config() -> None:
    """Drop the global configuration instance so the next call re-reads the environment."""
    global _config_instance
    _config_instance = None
