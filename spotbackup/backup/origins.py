"""Which account playlists were created from which backup playlists.

An import that creates a playlist records `new playlist id -> backup playlist
id` here, per Spotify user. Later snapshots of that user read the mapping back
into Playlist.origin_id, so re-importing the same backup matches those
playlists instead of creating them again (even when the backup holds several
playlists with the same name).
"""

import threading
from typing import Any, Dict, Mapping, Optional


class OriginRegistry:
    def __init__(self, entries: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._entries: Dict[str, Dict[str, str]] = {
            user_id: dict(mapping) for user_id, mapping in (entries or {}).items()
        }
        # Shared by concurrent requests of the HTTP app.
        self._lock = threading.Lock()

    def lookup(self, user_id: Optional[str]) -> Dict[str, str]:
        """Copy of the playlist id -> backup playlist id mapping of `user_id`."""
        if not user_id:
            return {}
        with self._lock:
            return dict(self._entries.get(user_id, {}))

    def record(self, user_id: Optional[str], playlist_id: str, source_id: Optional[str]) -> None:
        if not user_id or not source_id:
            return
        with self._lock:
            self._entries.setdefault(user_id, {})[playlist_id] = source_id

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        with self._lock:
            return {user_id: dict(mapping) for user_id, mapping in self._entries.items()}

    @classmethod
    def from_dict(cls, data: Any) -> "OriginRegistry":
        """Build a registry from to_dict() output; entries that are not string maps are dropped."""
        entries: Dict[str, Dict[str, str]] = {}
        if isinstance(data, dict):
            for user_id, mapping in data.items():
                if not isinstance(mapping, dict):
                    continue
                entries[str(user_id)] = {
                    str(k): v for k, v in mapping.items() if isinstance(v, str) and v
                }
        return cls(entries)
