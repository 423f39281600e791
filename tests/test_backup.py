"""Tests for backing up and merging a pre-existing asset directory."""

from datetime import date

from mdassets.assets.backup import BackupManager
from mdassets.core.model import BackupSession
from mdassets.core.state import RenameLedger


def _manager(sink):
    return BackupManager(sink, today=lambda: date(2024, 3, 9))


def test_prepare_without_assets_creates_empty_dir(tmp_path, sink):
    """Test that a missing asset directory is created and no session returned."""
    session = _manager(sink).prepare(tmp_path)
    
    assert session is None
    assert (tmp_path / "assets").is_dir()
    assert list((tmp_path / "assets").iterdir()) == []


def test_prepare_moves_files_to_dated_backup(tmp_path, sink):
    """Test that existing assets are moved, not copied, into the backup."""
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "a.png").write_bytes(b"a")
    (assets / "b.png").write_bytes(b"b")
    
    session = _manager(sink).prepare(tmp_path)
    
    assert session is not None
    assert session.relative_name == "assets_bak_20240309"
    assert session.assets_dir == assets
    assert list(assets.iterdir()) == []
    assert sorted(p.name for p in session.backup_dir.iterdir()) == ["a.png", "b.png"]


def test_prepare_suffixes_backup_name_on_collision(tmp_path, sink):
    """Test _1, _2 suffixes when same-day backups already exist."""
    (tmp_path / "assets_bak_20240309").mkdir()
    (tmp_path / "assets_bak_20240309_1").mkdir()
    (tmp_path / "assets").mkdir()
    
    session = _manager(sink).prepare(tmp_path)
    
    assert session.relative_name == "assets_bak_20240309_2"


def test_merge_back_records_every_file(tmp_path, sink, store):
    """Test that every merged file gets a ledger entry, renamed or not."""
    backup = tmp_path / "assets_bak_20240309"
    backup.mkdir()
    (backup / "a.png").write_bytes(b"a")
    (backup / "b.png").write_bytes(b"b")
    manager = _manager(sink)
    session = BackupSession(backup_dir=backup, assets_dir=tmp_path / "assets")
    store.put("b.png", b"different")
    ledger = RenameLedger()
    
    merged = manager.merge_back(session, store, ledger)
    
    assert merged == 2
    assert ledger.get("a.png") == "a.png"
    assert ledger.get("b.png") != "b.png"
    assert ledger.get("b.png").startswith("b_")
    assert (store.root / ledger.get("b.png")).read_bytes() == b"b"
    assert (backup / "a.png").exists()


def test_ledger_entries_are_never_overwritten():
    """Test that the first recorded mapping wins."""
    ledger = RenameLedger()
    ledger.record("a.png", "a.png")
    ledger.record("a.png", "a_123.png")
    
    assert ledger.get("a.png") == "a.png"
    assert ledger.get("missing.png", "missing.png") == "missing.png"
    assert len(ledger) == 1
