"""Public façade for the spotbackup.spotify package.

This module exposes the Spotify Web API integration: the authorize URL and
PKCE token exchange, and the paginating, rate-limit aware SpotifyClient.
"""

from .auth import build_spotify_auth_url, exchange_code_for_token
from .client import (
    ADD_TRACKS_CHUNK,
    MAX_ATTEMPTS,
    SAVE_TRACKS_CHUNK,
    SpotifyClient,
    retry_delay,
)

__all__ = [
    "build_spotify_auth_url",
    "exchange_code_for_token",
    "SpotifyClient",
    "retry_delay",
    "MAX_ATTEMPTS",
    "ADD_TRACKS_CHUNK",
    "SAVE_TRACKS_CHUNK",
]
