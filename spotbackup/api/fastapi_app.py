from contextlib import asynccontextmanager
from typing import Optional

import requests
from fastapi import FastAPI

from spotbackup import __version__
from spotbackup.api.auth.routes import router as auth_router
from spotbackup.api.backup.routes import router as backup_router
from spotbackup.api.dependencies import ClientFactory
from spotbackup.auth import AuthStateStore, AuthStateSweeper, OAuthFlow, RandomSource
from spotbackup.backup import OriginRegistry
from spotbackup.config import AUTH_STATE_SWEEP_SECONDS, AUTH_STATE_TTL_SECONDS, Config, load_config
from spotbackup.core import configure_logging, log_info
from spotbackup.spotify import SpotifyClient


def default_client_factory(access_token: str, slowdown_ms: float) -> SpotifyClient:
    return SpotifyClient(access_token, slowdown_ms=slowdown_ms)


def create_app(
    config: Optional[Config] = None,
    *,
    state_store: Optional[AuthStateStore] = None,
    sweeper: Optional[AuthStateSweeper] = None,
    random_source: Optional[RandomSource] = None,
    http_session: Optional[requests.Session] = None,
    client_factory: Optional[ClientFactory] = None,
    origin_registry: Optional[OriginRegistry] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Collaborators are injected so tests can supply a fixed random source,
    a fake token endpoint session or a fake Spotify client. The auth state
    sweeper runs for the lifetime of the app (lifespan start/stop).
    """
    configure_logging()

    if config is None:
        config = load_config()
    if state_store is None:
        state_store = AuthStateStore(ttl_seconds=AUTH_STATE_TTL_SECONDS)
    if sweeper is None:
        sweeper = AuthStateSweeper(state_store, interval_seconds=AUTH_STATE_SWEEP_SECONDS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper.start()
        log_info(f"spotbackup is running on {config.uri}")
        yield
        sweeper.stop()

    app = FastAPI(
        title="Spotify Backup API",
        version=__version__,
        description="Back up and restore Spotify playlists and saved tracks.",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.state_store = state_store
    app.state.sweeper = sweeper
    app.state.oauth_flow = OAuthFlow(
        config,
        state_store,
        random_source=random_source,
        session=http_session,
    )
    app.state.client_factory = client_factory or default_client_factory
    # Lives as long as the process; lets re-imports match playlists created earlier.
    app.state.origin_registry = origin_registry or OriginRegistry()

    # Auth routes
    app.include_router(auth_router, tags=["auth"])

    # Backup routes
    app.include_router(backup_router, prefix="/backup", tags=["backup"])

    return app
