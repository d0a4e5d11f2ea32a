"""
Withings API client for fetching body-weight measurements.
"""
import secrets
import time
from typing import Any, Dict, Optional
import requests

from models.errors import (
    NoMeasurementsError,
    TokenStoreError,
    WithingsAPIError,
    WithingsAuthenticationError,
)
from models.token import OAuthToken
from models.weight import REAL_MEASURE_CATEGORY, WEIGHT_MEASURE_TYPE, WeightMeasurement
from utils.logging_config import get_logger
from utils.oauth_flow import build_authorization_url, request_authorization_code
from utils.token_store import TokenStore

logger = get_logger(__name__)


class WithingsClient:
    """Client for interacting with the Withings API to read weight measurements."""

    AUTH_URL = "https://account.withings.com/oauth2_user/authorize2"
    TOKEN_URL = "https://wbsapi.withings.net/v2/oauth2"
    MEASURE_URL = "https://wbsapi.withings.net/measure"
    SCOPE = "user.metrics"

    def __init__(self, client_id: str, client_secret: str,
                 config_file: str = "withings_config.json",
                 redirect_uri: str = "http://localhost:8888", api_timeout: int = 30):
        """
        Initialize Withings client with OAuth2 credentials.

        Args:
            client_id: Withings API client ID
            client_secret: Withings API client secret
            config_file: JSON file holding the refresh token
            redirect_uri: Callback URL registered for the Withings application
            api_timeout: Request timeout in seconds
        """
        if not client_id or not client_secret:
            raise WithingsAuthenticationError(
                "WITHINGS_CLIENT_ID and WITHINGS_CLIENT_SECRET must be provided"
            )

        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.api_timeout = api_timeout
        self.token_store = TokenStore(config_file)

        self.access_token: Optional[str] = None

        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': 'Fitness-Connect/1.0',
            'Accept': 'application/json',
        })

    def close(self) -> None:
        self.session.close()

    def get_access_code(self) -> str:
        """
        Run the OAuth2 authorization flow and store the resulting tokens.

        Returns:
            The new access token
        """
        state = secrets.token_urlsafe(16)
        authorization_url = build_authorization_url(self.AUTH_URL, {
            'response_type': 'code',
            'client_id': self.client_id,
            'scope': self.SCOPE,
            'redirect_uri': self.redirect_uri,
            'state': state,
        })
        code = request_authorization_code(
            authorization_url, WithingsAuthenticationError, expected_state=state
        )

        token = self._request_token({
            'grant_type': 'authorization_code',
            'code': code,
            'redirect_uri': self.redirect_uri,
        })
        logger.info("Withings authorization successful")
        return token.access_token

    def refresh_token(self) -> str:
        """
        Exchange the stored refresh token for a new access token.

        Withings rotates the refresh token on every use, so the new one is saved.

        Returns:
            The new access token
        """
        try:
            stored = self.token_store.load()
        except TokenStoreError as e:
            raise WithingsAuthenticationError(str(e)) from e

        token = self._request_token({
            'grant_type': 'refresh_token',
            'refresh_token': stored.refresh_token,
        })
        logger.debug("Withings access token refreshed")
        return token.access_token

    def get_access_token(self) -> str:
        """
        Get an access token for this run.

        Refreshes when the config file exists, otherwise starts the
        authorization flow.

        Returns:
            Access token
        """
        if self.access_token:
            return self.access_token

        if self.token_store.exists():
            self.access_token = self.refresh_token()
        else:
            logger.info(f"No Withings config file at {self.token_store.config_file}, authorizing")
            self.access_token = self.get_access_code()
        return self.access_token

    def _request_token(self, data: Dict[str, str]) -> OAuthToken:
        payload = {
            'action': 'requesttoken',
            'client_id': self.client_id,
            'client_secret': self.client_secret,
        }
        payload.update(data)

        try:
            response = self.session.post(self.TOKEN_URL, data=payload, timeout=self.api_timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            raise WithingsAuthenticationError(f"Failed to obtain access token: {e}") from e
        except ValueError as e:
            raise WithingsAuthenticationError(f"Invalid token response: {e}") from e

        if result.get('status') != 0:
            raise WithingsAuthenticationError(
                f"Failed to obtain access token: status {result.get('status')} "
                f"{result.get('error', '')}".strip()
            )

        try:
            token = OAuthToken.from_response(result.get('body') or {}, now=time.time())
        except ValueError as e:
            raise WithingsAuthenticationError(f"Invalid token response: {e}") from e

        try:
            self.token_store.save(token)
        except TokenStoreError as e:
            raise WithingsAuthenticationError(str(e)) from e

        self.access_token = token.access_token
        return token

    def get_measurements(self, lastupdate: str) -> Dict[str, Any]:
        """
        Fetch weight measurement groups updated since a timestamp.

        Args:
            lastupdate: Epoch seconds; only groups updated after it are returned

        Returns:
            Response ``body`` object

        Raises:
            WithingsAPIError: On network failure or a non-zero Withings status
        """
        access_token = self.get_access_token()
        params = {
            'action': 'getmeas',
            'meastype': WEIGHT_MEASURE_TYPE,
            'category': REAL_MEASURE_CATEGORY,
            'lastupdate': lastupdate,
        }

        try:
            response = self.session.get(
                self.MEASURE_URL,
                headers={'Authorization': f'Bearer {access_token}'},
                params=params,
                timeout=self.api_timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            raise WithingsAPIError(f"Measurement request failed: {e}") from e
        except ValueError as e:
            raise WithingsAPIError(f"Invalid measurement response: {e}") from e

        if result.get('status') != 0:
            raise WithingsAPIError(
                f"Measurement request failed: status {result.get('status')} "
                f"{result.get('error', '')}".strip()
            )

        return result.get('body') or {}

    def get_weight_by_date(self, lastupdate: str) -> WeightMeasurement:
        """
        Retrieve the most recent weight measurement since a timestamp.

        Args:
            lastupdate: Epoch seconds after which to look for measurements

        Returns:
            WeightMeasurement of the latest measurement group

        Raises:
            NoMeasurementsError: If no weight was recorded in the period
        """
        body = self.get_measurements(lastupdate)
        groups = body.get('measuregrps') or []
        if not groups:
            raise NoMeasurementsError()

        latest = max(groups, key=lambda group: group.get('date') or 0)
        try:
            measurement = WeightMeasurement.from_measure_group(latest)
        except ValueError as e:
            raise WithingsAPIError(f"Invalid weight measurement: {e}") from e
        if measurement is None:
            raise NoMeasurementsError()

        logger.debug(f"Latest Withings weight: {measurement.grams} g at {measurement.taken_at}")
        return measurement
