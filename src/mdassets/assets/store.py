"""Content-addressed asset store with collision-safe naming."""

import hashlib
import random
import re
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..core.errors import AssetIOError
from ..core.ports import LogSink

AssetSource = Path | bytes


def compute_file_hash(file_path: Path) -> str:
    """Compute the MD5 hex digest of a file."""
    md5 = hashlib.md5(usedforsecurity=False)
    with file_path.open('rb') as f:
        while chunk := f.read(8192):
            md5.update(chunk)
    return md5.hexdigest()


def compute_bytes_hash(data: bytes) -> str:
    return hashlib.md5(data, usedforsecurity=False).hexdigest()


def unique_suffix(now: datetime, rng: random.Random) -> str:
    """Time-based suffix `HHMMSSff` followed by a two-digit random number."""
    hundredths = now.microsecond // 10000
    return f"{now:%H%M%S}{hundredths:02d}{rng.randint(10, 98)}"


class AssetStore:
    """
    The canonical asset directory.

    A desired name is kept when it is free. When it is taken, the content
    digests decide: identical content resolves to the existing entry and
    nothing is written; different content is written under a generated
    `<stem>_<HHMMSSff><NN><ext>` name so existing data is never overwritten.
    """

    def __init__(
        self,
        root: Path,
        sink: LogSink,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ):
        self.root = root
        self.sink = sink
        self.clock = clock
        self.rng = rng or random.Random()

    def put(self, desired_name: str, source: AssetSource, move: bool = False) -> str:
        """
        Store `source` under `desired_name` or a collision-free variant.

        Args:
            desired_name: File name the caller would like to use
            source: Path of a file to copy (or move) in, or raw bytes
            move: Move a source path into the store instead of copying it

        Returns:
            The name the content is stored under

        Raises:
            AssetIOError: If hashing or writing fails
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AssetIOError(self.root, e) from e

        dest = self.root / desired_name
        if not dest.exists():
            self._write(dest, source, move)
            return desired_name

        incoming = self._digest(source)
        if self._digest(dest) == incoming:
            self.sink.emit("warning", f"Identical content already stored, skipping: {desired_name}")
            self._discard(source, move)
            return desired_name

        existing = self._find_renamed(dest, incoming)
        if existing is not None:
            self.sink.emit("warning", f"Identical content already stored as {existing}: {desired_name}")
            self._discard(source, move)
            return existing

        new_name = self._generate_name(dest)
        self.sink.emit("info", f"Name taken by different content, renaming: {desired_name} -> {new_name}")
        self._write(self.root / new_name, source, move)
        return new_name

    def names(self) -> list[str]:
        if not self.root.exists():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_file())

    def _generate_name(self, dest: Path) -> str:
        while True:
            candidate = f"{dest.stem}_{unique_suffix(self.clock(), self.rng)}{dest.suffix}"
            if not (self.root / candidate).exists():
                return candidate

    def _find_renamed(self, dest: Path, digest: str) -> str | None:
        pattern = re.compile(re.escape(dest.stem) + r"_\d{10}" + re.escape(dest.suffix))
        for sibling in sorted(self.root.iterdir()):
            if not pattern.fullmatch(sibling.name) or not sibling.is_file():
                continue
            if self._digest(sibling) == digest:
                return sibling.name
        return None

    def _digest(self, source: AssetSource) -> str:
        if isinstance(source, bytes):
            return compute_bytes_hash(source)
        try:
            return compute_file_hash(source)
        except OSError as e:
            raise AssetIOError(source, e) from e

    def _write(self, dest: Path, source: AssetSource, move: bool) -> None:
        try:
            if isinstance(source, bytes):
                dest.write_bytes(source)
            elif move:
                # fresh file under the umask, not the source mode
                shutil.copyfile(source, dest)
                source.unlink()
            else:
                shutil.copy2(source, dest)
        except OSError as e:
            raise AssetIOError(dest, e) from e

    def _discard(self, source: AssetSource, move: bool) -> None:
        if move and isinstance(source, Path):
            source.unlink(missing_ok=True)
