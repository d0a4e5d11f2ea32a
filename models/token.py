"""
OAuth2 token data model shared by the Strava and Withings clients.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class OAuthToken:
    """Tokens returned by an OAuth2 token endpoint."""

    access_token: Optional[str]
    refresh_token: str
    expires_at: Optional[int] = None

    def __post_init__(self):
        """Validate token data after initialization."""
        # None when a config file holds only a refresh token
        if self.access_token is not None and not (isinstance(self.access_token, str) and self.access_token):
            raise ValueError("Access token must be a non-empty string")
        if not self.refresh_token or not isinstance(self.refresh_token, str):
            raise ValueError("Refresh token must be a non-empty string")

    @classmethod
    def from_response(cls, data: Dict[str, Any], now: Optional[float] = None) -> 'OAuthToken':
        """
        Build a token from a token endpoint payload.

        Strava returns ``expires_at`` directly, Withings only ``expires_in``.

        Args:
            data: Decoded token payload
            now: Reference epoch time used with ``expires_in``

        Returns:
            OAuthToken instance

        Raises:
            ValueError: If the payload lacks a token
        """
        if not data.get('access_token'):
            raise ValueError("Token response has no access token")

        expires_at = data.get('expires_at')
        if expires_at is None and data.get('expires_in') is not None and now is not None:
            expires_at = int(now) + int(data['expires_in'])

        return cls(
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token') or '',
            expires_at=int(expires_at) if expires_at is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert token to a JSON-serializable dictionary."""
        return asdict(self)
