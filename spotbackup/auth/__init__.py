"""Public façade for the spotbackup.auth package.

This module exposes the PKCE helpers, the time-bounded store of pending login
attempts with its sweeper, and the OAuth flow controller built on them.
"""

from .flow import (
    EXPIRED_STATE_MESSAGE,
    MISSING_STATE_MESSAGE,
    LoginRedirect,
    OAuthFlow,
    scopes_for,
)
from .pkce import (
    CODE_VERIFIER_LENGTH,
    STATE_LENGTH,
    PkcePair,
    RandomSource,
    generate_code_challenge,
    generate_random_string,
    new_pkce_pair,
)
from .state_store import (
    AuthStateEntry,
    AuthStateResult,
    AuthStateStatus,
    AuthStateStore,
    AuthStateSweeper,
    Clock,
)

__all__ = [
    "OAuthFlow",
    "LoginRedirect",
    "scopes_for",
    "MISSING_STATE_MESSAGE",
    "EXPIRED_STATE_MESSAGE",
    "RandomSource",
    "PkcePair",
    "CODE_VERIFIER_LENGTH",
    "STATE_LENGTH",
    "generate_random_string",
    "generate_code_challenge",
    "new_pkce_pair",
    "Clock",
    "AuthStateEntry",
    "AuthStateResult",
    "AuthStateStatus",
    "AuthStateStore",
    "AuthStateSweeper",
]
