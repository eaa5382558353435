import html

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse

from spotbackup.api.dependencies import get_config, get_oauth_flow
from spotbackup.auth import OAuthFlow
from spotbackup.config import Config
from spotbackup.core import AuthStateError, ConfigurationError, TokenExchangeError, log_warning

from .pages import render_token_page

router = APIRouter()

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, max-age=0",
    "Pragma": "no-cache",
}


@router.get("/login")
def login(
    scope_type: str | None = Query(default=None, alias="scopeType"),
    flow: OAuthFlow = Depends(get_oauth_flow),
):
    """
    Start a PKCE login and redirect the browser to Spotify's authorize page.

    scopeType=read only requests export permissions.
    """
    try:
        redirect = flow.start_login(scope_type)
    except ConfigurationError as e:
        return PlainTextResponse(str(e), status_code=500)
    return RedirectResponse(url=redirect.url, status_code=302)


@router.get("/config")
def get_public_config(config: Config = Depends(get_config)) -> JSONResponse:
    """
    Public runtime configuration for the browser app (no secrets).
    """
    return JSONResponse(config.public_dict())


@router.get("/callback")
def auth_callback(
    code: str | None = Query(default=None),
    state: str | None = Query(default=None),
    config: Config = Depends(get_config),
    flow: OAuthFlow = Depends(get_oauth_flow),
):
    """
    Spotify redirect target: exchange the code and hand the token to the opener window.
    """
    if not code:
        return RedirectResponse(url="/#error=missing_code", status_code=302)

    try:
        token = flow.complete(code, state)
    except AuthStateError as e:
        log_warning(f"Rejected OAuth callback: {e}")
        return PlainTextResponse(str(e), status_code=400, headers=NO_STORE_HEADERS)
    except TokenExchangeError as e:
        return HTMLResponse(
            f"Error during getAccessToken: {html.escape(str(e))}. "
            'Restart your session and try again. <a href="/">Home Page</a>',
            status_code=400,
            headers=NO_STORE_HEADERS,
        )

    return HTMLResponse(
        render_token_page(token, config.origin),
        headers=NO_STORE_HEADERS,
    )
