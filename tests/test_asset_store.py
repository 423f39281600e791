"""Tests for the content-addressed asset store."""

import os
import random
import re
import stat
from datetime import datetime

import pytest

from mdassets.assets.store import AssetStore, compute_file_hash, unique_suffix
from mdassets.core.errors import AssetIOError

PNG_A = b"\x89PNG\r\n\x1a\n" + b"A" * 64
PNG_B = b"\x89PNG\r\n\x1a\n" + b"B" * 64
PNG_C = b"\x89PNG\r\n\x1a\n" + b"C" * 64

RENAMED = re.compile(r"photo_\d{10}\.png")


def test_put_free_name_keeps_it(store):
    """Test that a free desired name is used unchanged."""
    assert store.put("photo.png", PNG_A) == "photo.png"
    assert (store.root / "photo.png").read_bytes() == PNG_A


def test_put_identical_content_is_not_duplicated(store, sink):
    """Test that identical content under the same name is stored once."""
    store.put("photo.png", PNG_A)
    
    assert store.put("photo.png", PNG_A) == "photo.png"
    assert store.names() == ["photo.png"]
    assert any("Identical content" in m for m in sink.messages("warning"))


def test_put_different_content_gets_new_name(store):
    """Test that colliding but different content never overwrites."""
    store.put("photo.png", PNG_A)
    
    assigned = store.put("photo.png", PNG_B)
    
    assert RENAMED.fullmatch(assigned)
    assert (store.root / "photo.png").read_bytes() == PNG_A
    assert (store.root / assigned).read_bytes() == PNG_B
    assert len(store.names()) == 2


def test_put_reuses_renamed_entry_with_same_content(store):
    """Test that repeated colliding content resolves to its earlier rename."""
    store.put("photo.png", PNG_A)
    first = store.put("photo.png", PNG_B)
    
    second = store.put("photo.png", PNG_B)
    third = store.put("photo.png", PNG_C)
    
    assert second == first
    assert third not in ("photo.png", first)
    assert len(store.names()) == 3


def test_put_copies_path_source(tmp_path, store):
    """Test that a path source is copied and left in place."""
    src = tmp_path / "photo.png"
    src.write_bytes(PNG_A)
    
    assert store.put("photo.png", src) == "photo.png"
    assert src.exists()
    assert compute_file_hash(src) == compute_file_hash(store.root / "photo.png")


def test_put_move_removes_source(tmp_path, store):
    """Test that move=True moves the source, also when it is a duplicate."""
    first = tmp_path / "one.tmp"
    first.write_bytes(PNG_A)
    second = tmp_path / "two.tmp"
    second.write_bytes(PNG_A)
    
    assert store.put("photo.png", first, move=True) == "photo.png"
    assert store.put("photo.png", second, move=True) == "photo.png"
    
    assert not first.exists()
    assert not second.exists()
    assert store.names() == ["photo.png"]


def test_put_move_creates_file_with_default_mode(tmp_path, store):
    """Test that a moved private temp file is stored with umask permissions."""
    source = tmp_path / "download.tmp"
    source.write_bytes(PNG_A)
    source.chmod(0o600)
    umask = os.umask(0)
    os.umask(umask)
    
    store.put("photo.png", source, move=True)
    
    mode = stat.S_IMODE((store.root / "photo.png").stat().st_mode)
    assert mode == 0o666 & ~umask
    assert not source.exists()


def test_put_missing_source_raises_asset_io_error(tmp_path, store):
    """Test that I/O failures carry the offending path."""
    with pytest.raises(AssetIOError) as excinfo:
        store.put("photo.png", tmp_path / "missing.png")
    
    assert excinfo.value.path == store.root / "photo.png"


class SequenceRandom(random.Random):
    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)

    def randint(self, a, b):
        return self.values.pop(0)


def test_generated_name_skips_taken_names(tmp_path, sink):
    """Test that a generated name already in use is re-rolled."""
    clock = lambda: datetime(2024, 5, 6, 7, 8, 9, 120000)
    store = AssetStore(tmp_path / "assets", sink, clock=clock, rng=SequenceRandom([11, 12]))
    store.put("photo.png", PNG_A)
    taken = "photo_0708091211.png"
    (store.root / taken).write_bytes(PNG_C)
    
    assigned = store.put("photo.png", PNG_B)
    
    assert assigned == "photo_0708091212.png"
    assert (store.root / taken).read_bytes() == PNG_C
    assert (store.root / assigned).read_bytes() == PNG_B


def test_unique_suffix_format():
    """Test the HHMMSSff + two-digit random suffix."""
    suffix = unique_suffix(datetime(2024, 1, 1, 13, 4, 5, 670000), random.Random(0))
    
    assert suffix.startswith("13040567")
    assert len(suffix) == 10
    assert 10 <= int(suffix[-2:]) <= 98
