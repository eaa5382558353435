import json
from pathlib import Path

import pytest
from conftest import track_id, track_uri

from spotbackup.backup import backup_filename, load_backup, save_backup
from spotbackup.core import Collection, MalformedImportError, Playlist, Track


def _collection() -> Collection:
    track = Track(id=track_id(1), uri=track_uri(1))
    return Collection(
        playlists={"p1": Playlist(id="p1", name="Café del Mar", tracks=(track,))},
        saved=(track,),
    )


def test_save_backup_creates_parent_dirs_and_leaves_no_temp_file(tmp_path: Path) -> None:
    target = tmp_path / "backups" / "2024" / "backup.json"

    written = save_backup(_collection(), target)

    assert written == target
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["playlists"]["p1"]["name"] == "Café del Mar"
    assert "Café del Mar" in target.read_text(encoding="utf-8")
    assert [p.name for p in target.parent.iterdir()] == ["backup.json"]


def test_save_backup_into_directory_uses_dated_name(tmp_path: Path) -> None:
    written = save_backup(_collection(), tmp_path)

    assert written == tmp_path / backup_filename()
    assert written.exists()


def test_save_backup_replaces_existing_file(tmp_path: Path) -> None:
    target = tmp_path / "backup.json"
    target.write_text('{"old": true}', encoding="utf-8")

    save_backup(Collection(), str(target))

    assert json.loads(target.read_text(encoding="utf-8")) == {"playlists": {}, "saved": []}


def test_load_backup_reads_what_save_backup_wrote(tmp_path: Path) -> None:
    target = save_backup(_collection(), tmp_path / "backup.json")

    assert load_backup(target) == _collection()


def test_load_backup_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MalformedImportError):
        load_backup(tmp_path / "missing.json")
