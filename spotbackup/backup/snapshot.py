from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from spotbackup.core import (
    Collection,
    Playlist,
    SnapshotError,
    SpotBackupError,
    Track,
    log_error,
    log_info,
    log_progress,
    log_step,
    log_success,
)
from spotbackup.spotify import SpotifyClient

from .origins import OriginRegistry


@dataclass
class SnapshotProgress:
    """
    Where a snapshot build currently is.

    - stage           : "profile", "playlists", "playlist_tracks", "saved" or "done"
    - playlists_done  : playlists whose tracks are fully loaded
    - tracks_done     : tracks loaded in the current stage
    """

    stage: str = "profile"
    user_id: Optional[str] = None
    playlists_done: int = 0
    playlists_total: int = 0
    tracks_done: int = 0
    tracks_total: int = 0
    current_playlist: Optional[str] = None


SnapshotProgressCallback = Callable[[SnapshotProgress], None]


def _to_tracks(raw_tracks: List[Dict]) -> List[Track]:
    return [Track(id=t.get("id"), uri=t.get("uri")) for t in raw_tracks]


def _dedup_saved(tracks: List[Track]) -> List[Track]:
    seen = set()
    unique: List[Track] = []
    for t in tracks:
        key = t.id or t.uri
        if key in seen:
            continue
        seen.add(key)
        unique.append(t)
    return unique


def build_collection(
    client: SpotifyClient,
    *,
    on_progress: Optional[SnapshotProgressCallback] = None,
    origin_ids: Optional[Dict[str, str]] = None,
    origin_registry: Optional[OriginRegistry] = None,
) -> Collection:
    """
    Materialize the account's playlists and saved tracks into a Collection.

    Steps run sequentially: profile, playlists, each playlist's tracks, saved
    tracks. Any failure raises SnapshotError carrying the progress reached;
    no partial collection is ever returned.

    origin_ids maps playlist ids created by an import run to the backup
    playlist they came from, so a later re-import can match them again.
    origin_registry supplies the mappings recorded for this user by earlier
    imports; explicit origin_ids win over it.
    """
    progress = SnapshotProgress()

    def report() -> None:
        if on_progress:
            on_progress(replace(progress))

    try:
        log_step("Fetching Spotify profile...")
        report()
        profile = client.get_profile()
        progress.user_id = profile.get("id")
        if not progress.user_id:
            raise SnapshotError("Spotify profile has no user id", progress)

        known_origins = origin_registry.lookup(progress.user_id) if origin_registry else {}
        known_origins.update(origin_ids or {})

        log_step("Fetching playlists...")
        progress.stage = "playlists"
        report()

        def on_playlists_page(count: int, total: int) -> None:
            progress.playlists_total = total
            log_progress(count, total, prefix="  Fetching playlists")
            report()

        stubs = client.get_my_playlists(progress.user_id, on_progress=on_playlists_page)
        progress.playlists_total = len(stubs)
        log_info(f"{len(stubs)} playlists found.")

        progress.stage = "playlist_tracks"
        playlists: Dict[str, Playlist] = {}
        for stub in stubs:
            progress.current_playlist = stub.get("name")
            progress.tracks_done = 0
            progress.tracks_total = 0
            report()

            def on_tracks_page(count: int, total: int) -> None:
                progress.tracks_done = count
                progress.tracks_total = total
                report()

            raw_tracks = client.get_playlist_tracks(stub["href"], on_progress=on_tracks_page)
            # href is only needed until the tracks are resolved
            playlists[stub["id"]] = Playlist(
                id=stub["id"],
                name=stub.get("name"),
                tracks=tuple(_to_tracks(raw_tracks)),
                origin_id=known_origins.get(stub["id"]),
            )
            progress.playlists_done += 1
            log_progress(progress.playlists_done, progress.playlists_total, prefix="  Playlists loaded")

        log_step("Fetching saved tracks...")
        progress.stage = "saved"
        progress.current_playlist = None
        progress.tracks_done = 0
        progress.tracks_total = 0
        report()

        def on_saved_page(count: int, total: int) -> None:
            progress.tracks_done = count
            progress.tracks_total = total
            log_progress(count, total, prefix="  Fetching saved tracks")
            report()

        saved = _dedup_saved(_to_tracks(client.get_my_tracks(on_progress=on_saved_page)))
    except SnapshotError:
        raise
    except SpotBackupError as e:
        log_error(f"Snapshot failed during {progress.stage}: {e}")
        raise SnapshotError(f"Failed to load account data: {e}", replace(progress)) from e

    progress.stage = "done"
    report()

    collection = Collection(playlists=playlists, saved=tuple(saved))
    log_success(
        f"Snapshot ready: {len(playlists)} playlists, {collection.track_count} tracks."
    )
    return collection
