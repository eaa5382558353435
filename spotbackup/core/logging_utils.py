"""Log helpers shared by the snapshot, import and auth code.

Messages go to the "spotbackup" logger with a short marker so a long export
or import stays readable in a terminal. Access tokens and PKCE verifiers are
never passed to these helpers.
"""

import logging

logger = logging.getLogger("spotbackup")


def _log(level: int, marker: str, message: str) -> None:
    if marker:
        logger.log(level, "%s %s", marker, message)
    else:
        logger.log(level, "%s", message)


def log_section(title: str) -> None:
    """Header for one export, import preview or import run."""
    logger.info("=== %s ===", title)


def log_info(message: str) -> None:
    """Plain informational message."""
    _log(logging.INFO, "", message)


def log_step(message: str) -> None:
    """Step of an ongoing export, import or login."""
    _log(logging.INFO, "→", message)


def log_success(message: str) -> None:
    """Completed export, import or snapshot."""
    _log(logging.INFO, "✅", message)


def log_warning(message: str) -> None:
    """Skipped backup entry, retried request and similar."""
    _log(logging.WARNING, "⚠️", message)


def log_error(message: str) -> None:
    """Failure that stops the current operation."""
    _log(logging.ERROR, "❌", message)


def log_progress(current: int, total: int, prefix: str = "") -> None:
    """
    Log "<prefix> current/total (pct%)".

    Spotify sometimes announces a total smaller than what pagination returns;
    the percentage is clamped to 100.
    """
    percent = 100.0 if total <= 0 else min(100.0, max(0.0, current * 100.0 / total))
    label = f"{prefix} " if prefix else ""
    logger.info("%s%d/%d (%.1f%%)", label, current, max(total, 0), percent)
