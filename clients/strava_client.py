"""
Strava API client for athlete profile, statistics and weight updates.
"""
import secrets
from typing import Any, Dict, Optional
import requests

from models.errors import StravaAPIError, StravaAuthenticationError, TokenStoreError
from models.token import OAuthToken
from utils.logging_config import get_logger
from utils.oauth_flow import build_authorization_url, request_authorization_code
from utils.token_store import TokenStore

logger = get_logger(__name__)


class StravaClient:
    """Client for interacting with the Strava API on behalf of one athlete."""

    AUTH_URL = "https://www.strava.com/oauth/authorize"
    TOKEN_URL = "https://www.strava.com/oauth/token"
    BASE_URL = "https://www.strava.com/api/v3"

    # profile:write is needed to update the athlete's weight
    SCOPE = "read,profile:read_all,profile:write"

    def __init__(self, client_id: str, client_secret: str, config_file: str = "config.json",
                 redirect_uri: str = "http://localhost", api_timeout: int = 30):
        """
        Initialize Strava client with OAuth2 credentials.

        Args:
            client_id: Strava API client ID
            client_secret: Strava API client secret
            config_file: JSON file holding the refresh token
            redirect_uri: Redirect URI registered for the Strava application
            api_timeout: Request timeout in seconds
        """
        if not client_id or not client_secret:
            raise StravaAuthenticationError("STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET must be provided")

        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.api_timeout = api_timeout
        self.token_store = TokenStore(config_file)

        self.access_token: Optional[str] = None

        self.session = requests.Session()
        self._setup_session()

    def _setup_session(self) -> None:
        """Setup HTTP session with required headers."""
        self.session.headers.update({
            'User-Agent': 'Fitness-Connect/1.0',
            'Accept': 'application/json',
        })

    def close(self) -> None:
        self.session.close()

    def auth_strava(self) -> str:
        """
        Run the OAuth2 authorization flow and store the resulting tokens.

        Returns:
            The new access token

        Raises:
            StravaAuthenticationError: If authorization or the code exchange fails
        """
        state = secrets.token_urlsafe(16)
        authorization_url = build_authorization_url(self.AUTH_URL, {
            'client_id': self.client_id,
            'redirect_uri': self.redirect_uri,
            'response_type': 'code',
            'approval_prompt': 'force',
            'scope': self.SCOPE,
            'state': state,
        })
        code = request_authorization_code(
            authorization_url, StravaAuthenticationError, expected_state=state
        )

        token = self._request_token({
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'code': code,
            'grant_type': 'authorization_code',
        })
        logger.info("Strava authorization successful")
        return token.access_token

    def register(self) -> str:
        """Authorize this application again, replacing any stored tokens."""
        return self.auth_strava()

    def refresh_access_token(self) -> str:
        """
        Exchange the stored refresh token for a new access token.

        Returns:
            The new access token

        Raises:
            StravaAuthenticationError: If the config file is unusable or the refresh fails
        """
        try:
            stored = self.token_store.load()
        except TokenStoreError as e:
            raise StravaAuthenticationError(str(e)) from e

        token = self._request_token({
            'client_id': self.client_id,
            'client_secret': self.client_secret,
            'refresh_token': stored.refresh_token,
            'grant_type': 'refresh_token',
        })
        logger.debug("Strava access token refreshed")
        return token.access_token

    def obtain_access_token(self) -> str:
        """
        Get an access token for this run.

        Refreshes when the config file exists, otherwise starts the
        authorization flow. The token is reused for later calls.

        Returns:
            Access token
        """
        if self.access_token:
            return self.access_token

        if self.token_store.exists():
            logger.debug(f"Refreshing Strava token from {self.token_store.config_file}")
            self.access_token = self.refresh_access_token()
        else:
            logger.info(f"No Strava config file at {self.token_store.config_file}, authorizing")
            self.access_token = self.auth_strava()
        return self.access_token

    def _request_token(self, data: Dict[str, str]) -> OAuthToken:
        try:
            response = self.session.post(self.TOKEN_URL, data=data, timeout=self.api_timeout)
        except requests.exceptions.RequestException as e:
            raise StravaAuthenticationError(f"Token request failed: {e}") from e

        if response.status_code != 200:
            logger.debug(f"Token request failed: {response.status_code} - {response.text}")
            raise StravaAuthenticationError(
                f"Token request failed: {response.status_code} - {response.text}"
            )

        try:
            token = OAuthToken.from_response(response.json())
        except ValueError as e:
            raise StravaAuthenticationError(f"Invalid token response: {e}") from e

        try:
            self.token_store.save(token)
        except TokenStoreError as e:
            raise StravaAuthenticationError(str(e)) from e

        self.access_token = token.access_token
        return token

    def _make_request(self, method: str, path: str, action: str, **kwargs) -> requests.Response:
        """
        Make an authenticated API request.

        Args:
            method: HTTP method
            path: Path below the API base URL
            action: Description used in error messages
            **kwargs: Additional request parameters

        Returns:
            Successful response

        Raises:
            StravaAPIError: On network failure or a non-2xx status
        """
        access_token = self.obtain_access_token()
        kwargs.setdefault('timeout', self.api_timeout)
        headers = kwargs.pop('headers', {})
        headers['Authorization'] = f'Bearer {access_token}'

        url = f"{self.BASE_URL}{path}"
        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except requests.exceptions.RequestException as e:
            raise StravaAPIError(f"Failed to {action}: {e}") from e

        if not response.ok:
            logger.debug(f"{method} {path} returned {response.status_code}: {response.text}")
            raise StravaAPIError(f"Failed to {action}: {response.status_code} - {response.text}")

        return response

    def _get_json(self, path: str, action: str) -> Dict[str, Any]:
        """
        GET an API path and decode its JSON object body.

        Raises:
            StravaAPIError: If the body is not a JSON object
        """
        response = self._make_request('GET', path, action)
        try:
            data = response.json()
        except ValueError as e:
            raise StravaAPIError(f"Failed to {action}: invalid JSON response") from e

        if not isinstance(data, dict):
            raise StravaAPIError(f"Failed to {action}: unexpected response {data!r}")
        return data

    def get_authenticated_athlete(self) -> Dict[str, Any]:
        """
        Retrieve the authenticated athlete's profile.

        Returns:
            Athlete JSON object
        """
        return self._get_json('/athlete', 'get athlete information')

    def get_athlete_stats(self) -> Dict[str, Any]:
        """
        Retrieve activity statistics for the authenticated athlete.

        Returns:
            Athlete stats JSON object
        """
        athlete = self.get_authenticated_athlete()
        athlete_id = athlete.get('id')
        if athlete_id is None:
            raise StravaAPIError("Failed to get athlete ID")

        stats = self._get_json(f'/athletes/{athlete_id}/stats', 'get athlete stats')
        logger.debug(f"Retrieved Strava stats for athlete {athlete_id}")
        return stats

    def update_athlete_weight(self, weight: str) -> str:
        """
        Update the authenticated athlete's weight.

        Args:
            weight: Weight in kilograms

        Returns:
            HTTP status of the update, e.g. "200 OK"
        """
        try:
            weight_value = float(weight)
        except (TypeError, ValueError) as e:
            raise StravaAPIError(f"Invalid weight value: {weight!r}") from e
        if weight_value <= 0:
            raise StravaAPIError(f"Invalid weight value: {weight!r}")

        response = self._make_request(
            'PUT', '/athlete', 'update athlete weight', data={'weight': weight_value}
        )
        return f"{response.status_code} {response.reason}".strip()
