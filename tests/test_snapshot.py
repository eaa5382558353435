import pytest
from conftest import FakeSpotifyClient, track_id, track_uri

from spotbackup.backup import OriginRegistry, build_collection
from spotbackup.core import Playlist, SnapshotError, Track


def _account(**kwargs) -> FakeSpotifyClient:
    return FakeSpotifyClient(
        playlists={
            "p1": {"name": "Road", "tracks": [{"id": track_id(1), "uri": track_uri(1)}]},
            "p2": {"name": "Empty", "tracks": []},
        },
        saved=[
            {"id": track_id(2), "uri": track_uri(2)},
            {"id": track_id(2), "uri": track_uri(2)},
            {"id": track_id(3), "uri": track_uri(3)},
        ],
        **kwargs,
    )


def test_build_collection_walks_profile_playlists_and_saved() -> None:
    client = _account()

    collection = build_collection(client)

    assert [c[0] for c in client.calls] == [
        "get_profile",
        "get_my_playlists",
        "get_playlist_tracks",
        "get_playlist_tracks",
        "get_my_tracks",
    ]
    assert collection.playlists == {
        "p1": Playlist(id="p1", name="Road", tracks=(Track(track_id(1), track_uri(1)),)),
        "p2": Playlist(id="p2", name="Empty", tracks=()),
    }
    # Saved tracks never hold the same id twice.
    assert collection.saved == (
        Track(track_id(2), track_uri(2)),
        Track(track_id(3), track_uri(3)),
    )
    assert collection.track_count == 3


def test_build_collection_attaches_origin_ids() -> None:
    collection = build_collection(_account(), origin_ids={"p1": "backup-7"})

    assert collection.playlists["p1"].origin_id == "backup-7"
    assert collection.playlists["p2"].origin_id is None


def test_build_collection_reports_progress_until_done() -> None:
    seen = []

    build_collection(_account(), on_progress=seen.append)

    stages = [p.stage for p in seen]
    assert stages[0] == "profile"
    assert stages[-1] == "done"
    assert "playlist_tracks" in stages
    assert seen[-1].playlists_done == 2


def test_failure_aborts_with_progress_and_no_collection() -> None:
    client = _account(fail_on={"get_playlist_tracks": 2})

    with pytest.raises(SnapshotError) as excinfo:
        build_collection(client)

    progress = excinfo.value.progress
    assert progress.stage == "playlist_tracks"
    assert progress.playlists_done == 1
    assert progress.playlists_total == 2
    assert "get_my_tracks" not in [c[0] for c in client.calls]


def test_build_collection_reads_origins_recorded_for_the_user() -> None:
    registry = OriginRegistry({"user1": {"p1": "backup-1", "p2": "backup-2"}, "other": {"p2": "x"}})

    collection = build_collection(
        _account(), origin_ids={"p2": "explicit"}, origin_registry=registry
    )

    assert collection.playlists["p1"].origin_id == "backup-1"
    # Explicit origin ids win over the registry.
    assert collection.playlists["p2"].origin_id == "explicit"
