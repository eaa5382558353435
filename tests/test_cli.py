import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from conftest import FakeSpotifyClient, track_id, track_uri

from spotbackup import main as cli_module


def _track(n: int) -> dict:
    return {"id": track_id(n), "uri": track_uri(n)}


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("CLIENT_ID", "test_client_id")
    monkeypatch.setenv("PUBLIC_URI", "http://localhost:8080")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("SLOWDOWN_IMPORT", "0")
    monkeypatch.setenv("SLOWDOWN_EXPORT", "0")


@pytest.fixture
def spotify(monkeypatch):
    fake = FakeSpotifyClient(
        playlists={"t1": {"name": "Road", "tracks": [_track(1)]}},
        saved=[_track(2)],
    )
    monkeypatch.setattr(cli_module, "SpotifyClient", lambda token, slowdown_ms=0: fake)
    return fake


def test_export_writes_backup_file(env, spotify, tmp_path: Path) -> None:
    output = tmp_path / "backup.json"

    result = CliRunner().invoke(
        cli_module.cli, ["export", "--token", "tok", "-o", str(output)]
    )

    assert result.exit_code == 0, result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["playlists"]["t1"]["tracks"] == [_track(1)]
    assert data["saved"] == [_track(2)]


def test_export_fails_on_invalid_configuration(monkeypatch, spotify, tmp_path: Path) -> None:
    monkeypatch.setenv("CLIENT_ID", "")
    monkeypatch.setenv("PORT", "not-a-port")

    result = CliRunner().invoke(
        cli_module.cli, ["export", "--token", "tok", "-o", str(tmp_path / "b.json")]
    )

    assert result.exit_code == 1
    assert not (tmp_path / "b.json").exists()


def test_import_dry_run_does_not_mutate(env, spotify, tmp_path: Path) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text(
        json.dumps(
            {
                "playlists": {"s1": {"id": "s1", "name": "New", "tracks": [_track(3)]}},
                "saved": [_track(4)],
            }
        ),
        encoding="utf-8",
    )

    result = CliRunner().invoke(
        cli_module.cli, ["import", str(backup), "--token", "tok", "--dry-run"]
    )

    assert result.exit_code == 0, result.output
    assert "create_playlist" not in [c[0] for c in spotify.calls]
    assert [t["id"] for t in spotify.saved] == [track_id(2)]


def test_import_applies_missing_items(env, spotify, tmp_path: Path) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text(
        json.dumps(
            {
                "playlists": {"s1": {"id": "s1", "name": "Road", "tracks": [_track(1), _track(5)]}},
                "saved": [_track(2), _track(4)],
            }
        ),
        encoding="utf-8",
    )

    result = CliRunner().invoke(cli_module.cli, ["import", str(backup), "--token", "tok"])

    assert result.exit_code == 0, result.output
    assert spotify.playlists["t1"]["tracks"] == [_track(1), _track(5)]
    assert [t["id"] for t in spotify.saved] == [track_id(2), track_id(4)]


def test_import_rejects_malformed_backup(env, spotify, tmp_path: Path) -> None:
    backup = tmp_path / "backup.json"
    backup.write_text("{ not json", encoding="utf-8")

    result = CliRunner().invoke(cli_module.cli, ["import", str(backup), "--token", "tok"])

    assert result.exit_code == 1
    assert spotify.calls == []


def test_import_with_origins_file_matches_playlists_on_rerun(
    env, monkeypatch, tmp_path: Path
) -> None:
    fake = FakeSpotifyClient()
    monkeypatch.setattr(cli_module, "SpotifyClient", lambda token, slowdown_ms=0: fake)
    backup = tmp_path / "backup.json"
    backup.write_text(
        json.dumps(
            {
                "playlists": {
                    "s1": {"id": "s1", "name": "Mix", "tracks": [_track(1)]},
                    "s2": {"id": "s2", "name": "Mix", "tracks": [_track(2)]},
                },
                "saved": [],
            }
        ),
        encoding="utf-8",
    )
    origins = tmp_path / "origins.json"
    args = ["import", str(backup), "--token", "tok", "--origins", str(origins)]

    first = CliRunner().invoke(cli_module.cli, args)
    second = CliRunner().invoke(cli_module.cli, args)

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    assert sorted(fake.playlists) == ["new1", "new2"]
    assert json.loads(origins.read_text(encoding="utf-8")) == {
        "user1": {"new1": "s1", "new2": "s2"}
    }
