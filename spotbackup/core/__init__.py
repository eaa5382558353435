"""Public façade for the spotbackup.core package.

This module exposes logging helpers, the error taxonomy and the collection
data model. Callers should import these cross-cutting concerns from this
façade instead of the internal submodules.
"""

from .errors import (
    AuthStateError,
    ConfigurationError,
    MalformedImportError,
    PartialImportFailure,
    RateLimitExceeded,
    RemoteApiError,
    SnapshotError,
    SpotBackupError,
    TokenExchangeError,
)
from .logging_config import configure_logging
from .logging_utils import (
    log_error,
    log_info,
    log_progress,
    log_section,
    log_step,
    log_success,
    log_warning,
)
from .models import (
    AddToPlaylist,
    Collection,
    CreatePlaylistAndAdd,
    MutationAction,
    Playlist,
    SaveTracks,
    Track,
)

__all__ = [
    "configure_logging",
    "log_section",
    "log_info",
    "log_step",
    "log_success",
    "log_warning",
    "log_error",
    "log_progress",
    "SpotBackupError",
    "ConfigurationError",
    "AuthStateError",
    "TokenExchangeError",
    "RemoteApiError",
    "RateLimitExceeded",
    "MalformedImportError",
    "SnapshotError",
    "PartialImportFailure",
    "Track",
    "Playlist",
    "Collection",
    "CreatePlaylistAndAdd",
    "AddToPlaylist",
    "SaveTracks",
    "MutationAction",
]
