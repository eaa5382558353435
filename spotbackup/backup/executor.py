from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from spotbackup.core import (
    AddToPlaylist,
    Collection,
    CreatePlaylistAndAdd,
    MutationAction,
    PartialImportFailure,
    RemoteApiError,
    SaveTracks,
    SpotBackupError,
    log_error,
    log_progress,
    log_step,
    log_success,
)
from spotbackup.spotify import SpotifyClient

from .origins import OriginRegistry
from .snapshot import build_collection

ExecutionProgressCallback = Callable[[int, int, MutationAction], None]


@dataclass
class ImportResult:
    """
    Outcome of a fully applied plan.

    - created    : new playlist id -> backup playlist id it was created from
    - collection : account state re-read after the import (None if not refreshed)
    """

    applied: List[MutationAction] = field(default_factory=list)
    created: Dict[str, Optional[str]] = field(default_factory=dict)
    collection: Optional[Collection] = None


def _ordered(actions: Sequence[MutationAction]) -> List[MutationAction]:
    # Saved tracks first, playlists keep their relative order.
    return sorted(actions, key=lambda a: 0 if isinstance(a, SaveTracks) else 1)


def execute_plan(
    client: SpotifyClient,
    actions: Sequence[MutationAction],
    *,
    user_id: Optional[str] = None,
    on_progress: Optional[ExecutionProgressCallback] = None,
    origin_ids: Optional[Dict[str, str]] = None,
    origin_registry: Optional[OriginRegistry] = None,
    refresh: bool = True,
) -> ImportResult:
    """
    Apply a mutation plan, one action at a time.

    A failing action raises PartialImportFailure; actions applied before it
    stay applied (Spotify mutations are not transactional). After a complete
    run the collection is rebuilt so it reflects the new remote state;
    origin_ids (plus the playlists created here) are carried into it.

    Every playlist created is recorded in origin_registry right away, so a
    later run matches it even when this one fails halfway.
    """
    plan = _ordered(actions)
    result = ImportResult()
    total = len(plan)

    log_step(f"Applying {total} import actions...")
    for index, action in enumerate(plan):
        if on_progress:
            on_progress(index, total, action)
        try:
            if isinstance(action, SaveTracks):
                client.save_tracks(action.ids)
            elif isinstance(action, CreatePlaylistAndAdd):
                if user_id is None:
                    user_id = client.get_profile().get("id")
                    if not user_id:
                        raise RemoteApiError("Spotify profile has no user id")
                playlist = client.create_playlist(user_id, action.name)
                result.created[playlist["id"]] = action.source_id
                if origin_registry is not None:
                    origin_registry.record(user_id, playlist["id"], action.source_id)
                client.add_tracks_to_playlist(playlist["id"], action.uris)
            elif isinstance(action, AddToPlaylist):
                client.add_tracks_to_playlist(action.playlist_id, action.uris)
            else:
                raise TypeError(f"Unsupported mutation action: {action!r}")
        except SpotBackupError as e:
            log_error(f"Import stopped at step {index + 1}/{total} ({action.label}): {e}")
            raise PartialImportFailure(
                f"Failed to {action.label}: {e}",
                action=action,
                index=index,
                applied=len(result.applied),
            ) from e

        result.applied.append(action)
        log_progress(index + 1, total, prefix="  Import actions")

    if on_progress and total:
        on_progress(total, total, plan[-1])
    log_success(f"Import finished: {len(result.applied)} actions applied.")

    if refresh:
        carried = dict(origin_ids or {})
        carried.update({new_id: src for new_id, src in result.created.items() if src})
        result.collection = build_collection(
            client, origin_ids=carried, origin_registry=origin_registry
        )

    return result
