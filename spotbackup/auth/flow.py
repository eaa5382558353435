"""OAuth PKCE login flow.

A login attempt goes idle → pending (state stored by start_login) →
fulfilled (complete returns a token) or failed (complete raises). The state
token is consumed by the first callback that presents it, whatever the
outcome.
"""

from dataclasses import dataclass
from typing import List, Optional

import requests

from spotbackup.config import ALL_SCOPES, READ_SCOPES, Config
from spotbackup.core import AuthStateError, ConfigurationError, log_info, log_step
from spotbackup.spotify import build_spotify_auth_url, exchange_code_for_token

from .pkce import STATE_LENGTH, RandomSource, generate_random_string, new_pkce_pair
from .state_store import AuthStateStatus, AuthStateStore

MISSING_STATE_MESSAGE = "OAuth state is missing or invalid. Please restart the login flow."
EXPIRED_STATE_MESSAGE = "OAuth state is expired. Please restart the login flow."


def scopes_for(scope_type: Optional[str]) -> List[str]:
    """
    Scopes to request for a login.

    "read" only needs export permissions; anything else (including "write")
    asks for everything an import needs.
    """
    if scope_type == "read":
        return list(READ_SCOPES)
    return list(ALL_SCOPES)


@dataclass(frozen=True)
class LoginRedirect:
    url: str
    state: str


class OAuthFlow:
    def __init__(
        self,
        config: Config,
        state_store: AuthStateStore,
        *,
        random_source: Optional[RandomSource] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.state_store = state_store
        self.random_source = random_source or RandomSource()
        self.session = session

    def start_login(self, scope_type: Optional[str] = None) -> LoginRedirect:
        if not self.config.client_id:
            raise ConfigurationError("Missing CLIENT_ID configuration")

        pair = new_pkce_pair(self.random_source)
        state = generate_random_string(STATE_LENGTH, self.random_source)
        self.state_store.store_state(state, pair.code_verifier)

        url = build_spotify_auth_url(
            client_id=self.config.client_id,
            redirect_uri=self.config.callback_uri,
            state=state,
            code_challenge=pair.code_challenge,
            scopes=scopes_for(scope_type),
        )
        log_step(f"Login started (scope type: {scope_type or 'all'})")
        return LoginRedirect(url=url, state=state)

    def complete(self, code: str, state: Optional[str]) -> str:
        """
        Resolve a callback into an access token.

        Raises AuthStateError for a missing, unknown or expired state and
        TokenExchangeError when Spotify rejects the code.
        """
        if not state:
            raise AuthStateError(MISSING_STATE_MESSAGE)

        result = self.state_store.take(state)
        if result.status is AuthStateStatus.EXPIRED:
            raise AuthStateError(EXPIRED_STATE_MESSAGE)
        if result.status is not AuthStateStatus.VALID or result.entry is None:
            raise AuthStateError(MISSING_STATE_MESSAGE)

        token_info = exchange_code_for_token(
            code,
            result.entry.code_verifier,
            client_id=self.config.client_id,
            redirect_uri=self.config.callback_uri,
            session=self.session,
        )
        log_info("Login completed, access token issued.")
        return token_info["access_token"]
