import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

from spotbackup.core.errors import ConfigurationError

load_dotenv()

# Spotify API constants
SPOTIFY_AUTH_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"
SPOTIFY_API_BASE = "https://api.spotify.com/v1"

READ_SCOPES = [
    "user-read-private",
    "user-read-email",
    "playlist-read-private",
    "playlist-read-collaborative",
    "user-library-read",
]
WRITE_SCOPES = [
    "playlist-modify-public",
    "playlist-modify-private",
    "user-library-modify",
]
ALL_SCOPES = READ_SCOPES + WRITE_SCOPES

# Pending login attempts
AUTH_STATE_TTL_SECONDS = 5 * 60
AUTH_STATE_SWEEP_SECONDS = 60

DEFAULT_PORT = 8080
DEFAULT_SLOWDOWN_MS = 100


@dataclass(frozen=True)
class Config:
    port: int
    uri: str
    login_url: str
    callback_uri: str
    client_id: str
    slowdown_import: float
    slowdown_export: float

    @property
    def origin(self) -> str:
        """Scheme, host and port of the public URI (path dropped)."""
        parsed = urlparse(self.uri)
        return f"{parsed.scheme}://{parsed.netloc}"

    def public_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_number(value: Optional[str], default: float) -> float:
    if value is None or value == "":
        return float(default)
    try:
        return float(value)
    except ValueError:
        return float("nan")


def validate_uri(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc)


def build_config(env: Optional[Mapping[str, str]] = None) -> Config:
    """
    Build the runtime configuration from environment variables.

    Values are not validated here, see assert_valid_config().
    """
    if env is None:
        env = os.environ

    port_value = _as_number(env.get("PORT"), DEFAULT_PORT)
    port = int(port_value) if port_value.is_integer() else -1
    uri = (env.get("PUBLIC_URI") or f"http://localhost:{port}").rstrip("/")

    return Config(
        port=port,
        uri=uri,
        login_url=f"{uri}/login",
        callback_uri=f"{uri}/callback",
        client_id=env.get("CLIENT_ID") or "",
        slowdown_import=_as_number(env.get("SLOWDOWN_IMPORT"), DEFAULT_SLOWDOWN_MS),
        slowdown_export=_as_number(env.get("SLOWDOWN_EXPORT"), DEFAULT_SLOWDOWN_MS),
    )


def assert_valid_config(cfg: Config) -> None:
    issues = []
    if not cfg.client_id.strip():
        issues.append("CLIENT_ID must be set")
    if not cfg.uri or not validate_uri(cfg.uri):
        issues.append("PUBLIC_URI must be a valid URL")
    if cfg.port <= 0:
        issues.append("PORT must be a positive integer")
    # NaN fails every comparison
    if not cfg.slowdown_import >= 0:
        issues.append("SLOWDOWN_IMPORT must be a non-negative number")
    if not cfg.slowdown_export >= 0:
        issues.append("SLOWDOWN_EXPORT must be a non-negative number")

    if issues:
        raise ConfigurationError("; ".join(issues))


def load_config(env: Optional[Mapping[str, str]] = None) -> Config:
    cfg = build_config(env)
    assert_valid_config(cfg)
    return cfg
