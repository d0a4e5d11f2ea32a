"""
JSON config file storage for OAuth2 tokens.

Each service keeps its own file holding the refresh token; its presence
decides whether a run refreshes the token or starts a new authorization.
"""

import json
from pathlib import Path
from typing import Union

from models.errors import TokenStoreError
from models.token import OAuthToken
from utils.logging_config import get_logger

logger = get_logger(__name__)


class TokenStore:
    """File-backed store for a single service's OAuth2 tokens."""

    def __init__(self, config_file: Union[str, Path]):
        """
        Initialize token store for the given config file.

        Args:
            config_file: Path of the JSON config file
        """
        self.config_file = Path(config_file)

    def exists(self) -> bool:
        """Return True if the config file is present on disk."""
        return self.config_file.exists()

    def load(self) -> OAuthToken:
        """
        Load the stored tokens.

        Returns:
            OAuthToken read from the config file

        Raises:
            TokenStoreError: If the file is unreadable, not JSON or has no refresh token
        """
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise TokenStoreError(f"Failed to read config file {self.config_file}: {e}") from e

        if not isinstance(data, dict) or not data.get('refresh_token'):
            raise TokenStoreError(
                f"Config file {self.config_file} has no refresh token; "
                "delete it to authorize again"
            )

        logger.debug(f"Loaded tokens from {self.config_file}")
        return OAuthToken(
            access_token=data.get('access_token') or None,
            refresh_token=data['refresh_token'],
            expires_at=data.get('expires_at'),
        )

    def save(self, token: OAuthToken) -> None:
        """
        Write tokens to the config file, creating parent directories.

        Args:
            token: Tokens to persist

        Raises:
            TokenStoreError: If the file cannot be written
        """
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(token.to_dict(), f, indent=2)
        except OSError as e:
            raise TokenStoreError(f"Failed to write config file {self.config_file}: {e}") from e

        logger.debug(f"Tokens written to {self.config_file}")
