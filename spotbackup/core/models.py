from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class Track:
    """
    A track reference, as stored in a collection or a backup file.

    Values coming from a backup file are kept verbatim (they may be
    malformed); validation happens in the reconciliation step.
    """

    id: Optional[str]
    uri: Optional[str]


@dataclass(frozen=True)
class Playlist:
    """
    A fully paginated playlist.

    - origin_id : id of the backup playlist this one was created from during
                  an import run (used to match it again on re-import)
    """

    id: str
    name: Optional[str]
    tracks: Tuple[Track, ...] = ()
    origin_id: Optional[str] = None


@dataclass(frozen=True)
class Collection:
    """One account's exportable state: playlists by id plus saved tracks."""

    playlists: Dict[str, Playlist] = field(default_factory=dict)
    saved: Tuple[Track, ...] = ()

    @property
    def track_count(self) -> int:
        return len(self.saved) + sum(len(p.tracks) for p in self.playlists.values())


@dataclass(frozen=True)
class CreatePlaylistAndAdd:
    kind: ClassVar[str] = "create_playlist_and_add"

    name: str
    uris: Tuple[str, ...]
    source_id: Optional[str] = None

    @property
    def label(self) -> str:
        return f"create playlist {self.name!r} with {len(self.uris)} tracks"


@dataclass(frozen=True)
class AddToPlaylist:
    kind: ClassVar[str] = "add_to_playlist"

    playlist_id: str
    uris: Tuple[str, ...]
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return f"add {len(self.uris)} tracks to playlist {self.name or self.playlist_id!r}"


@dataclass(frozen=True)
class SaveTracks:
    kind: ClassVar[str] = "save_tracks"

    ids: Tuple[str, ...]

    @property
    def label(self) -> str:
        return f"save {len(self.ids)} tracks"


MutationAction = Union[CreatePlaylistAndAdd, AddToPlaylist, SaveTracks]
