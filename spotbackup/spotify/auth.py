from typing import Dict, Iterable, Optional
from urllib.parse import urlencode

import requests

from spotbackup.config import SPOTIFY_AUTH_URL, SPOTIFY_TOKEN_URL
from spotbackup.core import TokenExchangeError, log_warning

TOKEN_REQUEST_TIMEOUT = 30


def build_spotify_auth_url(
    client_id: str,
    redirect_uri: str,
    state: str,
    code_challenge: str,
    scopes: Iterable[str],
) -> str:
    auth_query_parameters = {
        "response_type": "code",
        "client_id": client_id,
        "scope": " ".join(scopes),
        "redirect_uri": redirect_uri,
        "state": state,
        "code_challenge_method": "S256",
        "code_challenge": code_challenge,
    }
    return f"{SPOTIFY_AUTH_URL}?{urlencode(auth_query_parameters)}"


def exchange_code_for_token(
    code: str,
    code_verifier: str,
    *,
    client_id: str,
    redirect_uri: str,
    session: Optional[requests.Session] = None,
) -> Dict:
    """
    Exchange an authorization code for an access token (PKCE grant).

    Returns the token endpoint's JSON body, which always contains
    `access_token`. Raises TokenExchangeError otherwise.
    """
    token_data = {
        "client_id": client_id,
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "code_verifier": code_verifier,
    }
    http = session or requests

    try:
        r = http.post(SPOTIFY_TOKEN_URL, data=token_data, timeout=TOKEN_REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise TokenExchangeError(f"token endpoint unreachable: {e}") from e

    try:
        token_info = r.json()
    except ValueError:
        raise TokenExchangeError(f"token endpoint returned {r.status_code}") from None

    if not isinstance(token_info, dict):
        raise TokenExchangeError(f"token endpoint returned {r.status_code}")

    if not r.ok:
        message = token_info.get("error_description") or token_info.get("error") or r.reason
        log_warning(f"Token exchange rejected ({r.status_code}): {message}")
        raise TokenExchangeError(str(message))

    if not token_info.get("access_token"):
        raise TokenExchangeError(token_info.get("error") or "token endpoint returned no access token")

    return token_info
