import logging
import os
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"

# Chatty third-party loggers; requests logs every connection at DEBUG.
_QUIET_LOGGERS = ("urllib3", "httpx")


def _resolve_level(level: Optional[Union[int, str]]) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        # Unknown names map to "Level <name>" strings
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    return level


def configure_logging(level: Optional[Union[int, str]] = None) -> None:
    """
    Configure root logging for spotbackup.

    - Logs go to stdout, level from `level` or LOG_LEVEL (default INFO)
    - Calling it again only adjusts the level (the CLI and the app factory
      both call it)
    - Uvicorn keeps its own handlers
    """
    resolved = _resolve_level(level)
    root = logging.getLogger()

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)

    root.setLevel(resolved)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
