from typing import Callable

from fastapi import Header, HTTPException, Request

from spotbackup.auth import OAuthFlow
from spotbackup.backup import OriginRegistry
from spotbackup.config import Config
from spotbackup.spotify import SpotifyClient

ClientFactory = Callable[[str, float], SpotifyClient]


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_oauth_flow(request: Request) -> OAuthFlow:
    return request.app.state.oauth_flow


def get_client_factory(request: Request) -> ClientFactory:
    return request.app.state.client_factory


def get_origin_registry(request: Request) -> OriginRegistry:
    return request.app.state.origin_registry


def get_access_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str:
    """
    Extract the Spotify access token from `Authorization: Bearer <token>`.
    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        config: Config = request.app.state.config
        raise HTTPException(
            status_code=401,
            detail={
                "status": "unauthenticated",
                "message": "Spotify authorization required.",
                "login_url": config.login_url,
            },
        )
    return token.strip()
