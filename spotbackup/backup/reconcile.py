"""Diff an imported backup against the current account state.

plan_import() is additive only: it never removes tracks or playlists and
ignores playlist order. The plan is the smallest set of calls that makes every
valid track of the backup present on the account:

  - one SaveTracks for saved tracks missing from the library
  - one AddToPlaylist per matched playlist that misses some tracks
  - one CreatePlaylistAndAdd per unmatched, non-empty playlist
"""

import re
from collections import Counter
from typing import Dict, List, Optional

from spotbackup.core import (
    AddToPlaylist,
    Collection,
    CreatePlaylistAndAdd,
    MutationAction,
    Playlist,
    SaveTracks,
    log_info,
    log_warning,
)

SPOTIFY_ID_RE = re.compile(r"^[A-Za-z0-9]{22}$")
TRACK_URI_RE = re.compile(r"^spotify:track:[A-Za-z0-9]{22}$")


def is_valid_spotify_id(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(SPOTIFY_ID_RE.match(value))


def is_valid_track_uri(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(TRACK_URI_RE.match(value))


def _missing_saved_ids(target: Collection, source: Collection) -> List[str]:
    current = {t.id for t in target.saved if t.id}
    to_save: List[str] = []
    for t in source.saved:
        if not is_valid_spotify_id(t.id):
            log_warning(f"Skipping saved track with invalid id: {t.id!r}")
            continue
        if t.id in current:
            continue
        current.add(t.id)
        to_save.append(t.id)
    return to_save


def _valid_uris(playlist: Playlist) -> List[str]:
    seen = set()
    uris: List[str] = []
    for t in playlist.tracks:
        if not is_valid_track_uri(t.uri):
            log_warning(f"Skipping invalid track URI {t.uri!r} in playlist {playlist.name!r}")
            continue
        if t.uri in seen:
            continue
        seen.add(t.uri)
        uris.append(t.uri)
    return uris


def match_playlist(
    source_playlist: Playlist,
    target: Collection,
    import_name_counts: Counter,
) -> Optional[Playlist]:
    """
    Find the account playlist a backup playlist should be merged into.

    Priority: a playlist created from this very backup playlist (origin id),
    then a playlist with the same name, unless that name is used by several
    playlists of the backup (ambiguous, so a new playlist is created).
    """
    if source_playlist.id:
        for p in target.playlists.values():
            if p.origin_id and p.origin_id == source_playlist.id:
                return p

    if import_name_counts[source_playlist.name] > 1:
        return None

    for p in target.playlists.values():
        if p.name == source_playlist.name:
            return p
    return None


def plan_import(target: Collection, source: Collection) -> List[MutationAction]:
    """
    Compute the mutation plan converging `target` (the account) toward `source` (the backup).

    Malformed entries are skipped with a warning; they never abort the plan.
    """
    actions: List[MutationAction] = []

    to_save = _missing_saved_ids(target, source)
    if to_save:
        actions.append(SaveTracks(ids=tuple(to_save)))

    named = [p for p in source.playlists.values() if p.name]
    name_counts = Counter(p.name for p in named)

    for key, source_playlist in source.playlists.items():
        if not source_playlist.name:
            log_warning(f"Skipping playlist {key!r} with missing name")
            continue

        uris = _valid_uris(source_playlist)
        existing = match_playlist(source_playlist, target, name_counts)

        if existing is not None:
            current = {t.uri for t in existing.tracks if t.uri}
            missing = [u for u in uris if u not in current]
            if missing:
                actions.append(
                    AddToPlaylist(
                        playlist_id=existing.id,
                        uris=tuple(missing),
                        name=source_playlist.name,
                    )
                )
        elif uris:
            actions.append(
                CreatePlaylistAndAdd(
                    name=source_playlist.name,
                    uris=tuple(uris),
                    source_id=source_playlist.id,
                )
            )

    log_info(f"Import plan: {len(actions)} actions.")
    return actions


def summarize_plan(actions: List[MutationAction]) -> Dict[str, int]:
    summary = {
        "actions": len(actions),
        "playlists_to_create": 0,
        "playlists_to_update": 0,
        "tracks_to_add": 0,
        "tracks_to_save": 0,
    }
    for action in actions:
        if isinstance(action, SaveTracks):
            summary["tracks_to_save"] += len(action.ids)
        elif isinstance(action, CreatePlaylistAndAdd):
            summary["playlists_to_create"] += 1
            summary["tracks_to_add"] += len(action.uris)
        elif isinstance(action, AddToPlaylist):
            summary["playlists_to_update"] += 1
            summary["tracks_to_add"] += len(action.uris)
    return summary
