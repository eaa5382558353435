"""Error taxonomy shared by the auth flow, the Spotify client and the backup engine."""

from typing import Any, Optional


class SpotBackupError(Exception):
    """Base class for every error raised by spotbackup."""


class ConfigurationError(SpotBackupError):
    """Invalid or incomplete configuration. Fatal at startup."""


class AuthStateError(SpotBackupError):
    """The OAuth state is missing, expired or invalid; the login must restart."""


class TokenExchangeError(SpotBackupError):
    """The token endpoint rejected the authorization code or verifier."""


class RemoteApiError(SpotBackupError):
    """Non-2xx answer (or transport failure) from the Spotify Web API."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceeded(RemoteApiError):
    """HTTP 429 persisted past the retry ceiling."""


class MalformedImportError(SpotBackupError):
    """The backup file is not structurally a collection."""


class SnapshotError(SpotBackupError):
    """Building a collection snapshot failed; carries the progress reached."""

    def __init__(self, message: str, progress: Any = None) -> None:
        super().__init__(message)
        self.progress = progress


class PartialImportFailure(SpotBackupError):
    """
    A mutation action failed in the middle of an import plan.

    - action  : the action that failed
    - index   : its position in the executed plan
    - applied : number of actions fully applied before the failure
    """

    def __init__(self, message: str, action: Any, index: int, applied: int) -> None:
        super().__init__(message)
        self.action = action
        self.index = index
        self.applied = applied
