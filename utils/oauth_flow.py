"""
Interactive OAuth2 authorization-code flow.
"""
import webbrowser
from typing import Callable, Dict, Optional, Type
from urllib.parse import parse_qs, urlencode, urlparse

from utils.logging_config import get_logger

logger = get_logger(__name__)


def build_authorization_url(auth_url: str, params: Dict[str, str]) -> str:
    """Append the query parameters to the provider's authorization endpoint."""
    return f"{auth_url}?{urlencode(params)}"


def extract_authorization_code(redirect: str, error_cls: Type[Exception],
                               expected_state: Optional[str] = None) -> str:
    """
    Pull the ``code`` parameter out of a redirect URL.

    A bare code (no ``?`` or ``=``) is returned as-is. When ``expected_state``
    is given, a redirect must carry that same ``state`` value.

    Args:
        redirect: Redirect URL pasted by the user, or the code itself
        error_cls: Exception type raised on failure
        expected_state: ``state`` sent in the authorization URL

    Returns:
        Authorization code

    Raises:
        error_cls: If access was denied, the state does not match or no code is present
    """
    redirect = redirect.strip()
    if not redirect:
        raise error_cls("No authorization code provided")

    if '?' not in redirect and '=' not in redirect:
        return redirect

    query = urlparse(redirect).query if '?' in redirect else redirect
    params = parse_qs(query)

    if 'error' in params:
        raise error_cls(f"Authorization denied: {params['error'][0]}")

    if expected_state is not None and params.get('state', [None])[0] != expected_state:
        raise error_cls("Authorization state mismatch")

    codes = params.get('code')
    if not codes or not codes[0]:
        raise error_cls("Redirect URL does not contain an authorization code")
    return codes[0]


def request_authorization_code(authorization_url: str, error_cls: Type[Exception],
                               prompt: Optional[Callable[[str], str]] = None,
                               open_browser: bool = True,
                               expected_state: Optional[str] = None) -> str:
    """
    Ask the user to authorize the application and paste back the redirect.

    Args:
        authorization_url: Fully built authorization URL
        error_cls: Exception type raised on failure
        prompt: Function used to read the user's answer (defaults to input)
        open_browser: Whether to try opening the URL in a browser
        expected_state: ``state`` the redirect must echo back

    Returns:
        Authorization code
    """
    print("Open the following URL to authorize access:")
    print(authorization_url)

    if open_browser:
        try:
            webbrowser.open(authorization_url)
        except webbrowser.Error as e:
            logger.debug(f"Could not open browser: {e}")

    try:
        redirect = (prompt or input)("Paste the URL you were redirected to (or the code): ")
    except EOFError as e:
        raise error_cls("No authorization code provided") from e

    return extract_authorization_code(redirect, error_cls, expected_state)
