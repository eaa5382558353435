"""Public façade for the spotbackup.backup package.

This module exposes the backup pipeline: snapshot building, the backup file
codec and its on-disk storage, import reconciliation, plan execution and the
registry of playlists created by imports. Other packages should import
backup behaviour from this façade instead of the internal submodules.
"""

from .backup_file import backup_filename, collection_to_dict, dump_backup, parse_backup
from .executor import ImportResult, execute_plan
from .origins import OriginRegistry
from .reconcile import (
    is_valid_spotify_id,
    is_valid_track_uri,
    match_playlist,
    plan_import,
    summarize_plan,
)
from .snapshot import SnapshotProgress, build_collection
from .storage import load_backup, load_origins, save_backup, save_origins

__all__ = [
    "build_collection",
    "SnapshotProgress",
    "backup_filename",
    "collection_to_dict",
    "dump_backup",
    "parse_backup",
    "save_backup",
    "load_backup",
    "save_origins",
    "load_origins",
    "plan_import",
    "summarize_plan",
    "match_playlist",
    "is_valid_spotify_id",
    "is_valid_track_uri",
    "execute_plan",
    "ImportResult",
    "OriginRegistry",
]
