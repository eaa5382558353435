"""Backup file codec.

Format:
    {
      "playlists": {"<id>": {"id": ..., "name": ..., "tracks": [{"id": ..., "uri": ...}]}},
      "saved": [{"id": ..., "uri": ...}]
    }

parse_backup() only rejects structural problems. Individual bad values
(missing name, malformed uri or id) are kept and skipped later by the
reconciliation step.
"""

import json
from datetime import date
from typing import Any, Dict, List, Optional, Union

from spotbackup.core import Collection, MalformedImportError, Playlist, Track


def _track_to_dict(track: Track) -> Dict[str, Any]:
    return {"id": track.id, "uri": track.uri}


def collection_to_dict(collection: Collection) -> Dict[str, Any]:
    playlists: Dict[str, Any] = {}
    for playlist_id, p in collection.playlists.items():
        entry: Dict[str, Any] = {
            "id": p.id,
            "name": p.name,
            "tracks": [_track_to_dict(t) for t in p.tracks],
        }
        if p.origin_id:
            entry["originId"] = p.origin_id
        playlists[playlist_id] = entry

    return {
        "playlists": playlists,
        "saved": [_track_to_dict(t) for t in collection.saved],
    }


def dump_backup(collection: Collection) -> str:
    return json.dumps(collection_to_dict(collection), ensure_ascii=False)


def backup_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"spotify_backup_{day.year}_{day.month}_{day.day}.json"


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _parse_tracks(raw: Any, where: str) -> List[Track]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedImportError(f"{where}: 'tracks' must be a list")

    tracks: List[Track] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise MalformedImportError(f"{where}: track #{i} must be an object")
        tracks.append(Track(id=_optional_str(item.get("id")), uri=_optional_str(item.get("uri"))))
    return tracks


def parse_backup(data: Union[str, bytes, Dict[str, Any]]) -> Collection:
    """
    Parse a backup (JSON text or already decoded object) into a Collection.

    Raises MalformedImportError if the document is not shaped like a backup.
    """
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise MalformedImportError(f"Invalid JSON file: {e}") from e

    if not isinstance(data, dict):
        raise MalformedImportError("Backup must be a JSON object")

    raw_playlists = data.get("playlists")
    if raw_playlists is None:
        raw_playlists = {}
    if not isinstance(raw_playlists, dict):
        raise MalformedImportError("'playlists' must be an object keyed by playlist id")

    playlists: Dict[str, Playlist] = {}
    for key, raw in raw_playlists.items():
        if not isinstance(raw, dict):
            raise MalformedImportError(f"Playlist {key!r} must be an object")
        playlist_id = _optional_str(raw.get("id")) or str(key)
        playlists[str(key)] = Playlist(
            id=playlist_id,
            name=_optional_str(raw.get("name")),
            tracks=tuple(_parse_tracks(raw.get("tracks"), f"Playlist {key!r}")),
            origin_id=_optional_str(raw.get("originId")),
        )

    raw_saved = data.get("saved")
    if raw_saved is None:
        raw_saved = []
    if not isinstance(raw_saved, list):
        raise MalformedImportError("'saved' must be a list")

    return Collection(
        playlists=playlists,
        saved=tuple(_parse_tracks(raw_saved, "Saved tracks")),
    )
