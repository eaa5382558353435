"""Reading and writing backup files (and the CLI's origin registry) on disk."""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from spotbackup.core import Collection, MalformedImportError, log_success, log_warning

from .backup_file import backup_filename, dump_backup, parse_backup
from .origins import OriginRegistry

PathLike = Union[str, Path]


def _write_atomic(target: Path, text: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, target)
    except Exception:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def save_backup(collection: Collection, path: Optional[PathLike] = None) -> Path:
    """
    Write `collection` as a backup file and return where it went.

    Without a path the dated default name is used in the current directory.
    A path naming an existing directory gets the default name inside it.
    The file is replaced atomically, so an interrupted export never leaves a
    truncated backup behind.
    """
    target = Path(path) if path is not None else Path(backup_filename())
    if target.is_dir():
        target = target / backup_filename()

    _write_atomic(target, dump_backup(collection))
    log_success(f"Backup written to {target}")
    return target


def load_backup(path: PathLike) -> Collection:
    """Read and parse a backup file. Unreadable files raise MalformedImportError."""
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise MalformedImportError(f"Cannot read {path}: {e}") from e
    return parse_backup(raw)


def load_origins(path: PathLike) -> OriginRegistry:
    """
    Load an origin registry saved by save_origins().

    A missing file is an empty registry. A corrupted one is reported and
    treated as empty: at worst a re-import falls back to name matching.
    """
    target = Path(path)
    if not target.exists():
        return OriginRegistry()
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log_warning(f"Ignoring unreadable origin registry {target}: {e}")
        return OriginRegistry()
    return OriginRegistry.from_dict(data)


def save_origins(registry: OriginRegistry, path: PathLike) -> None:
    _write_atomic(Path(path), json.dumps(registry.to_dict(), ensure_ascii=False))
