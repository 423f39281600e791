"""Relocate a pre-existing asset directory and merge it back afterwards."""

import shutil
from collections.abc import Callable
from datetime import date
from pathlib import Path

from ..core.model import BackupSession
from ..core.ports import LogSink
from ..core.state import RenameLedger
from .store import AssetStore


class BackupManager:
    def __init__(
        self,
        sink: LogSink,
        assets_name: str = "assets",
        backup_prefix: str = "assets_bak_",
        today: Callable[[], date] = date.today,
    ):
        self.sink = sink
        self.assets_name = assets_name
        self.backup_prefix = backup_prefix
        self.today = today

    def backup_dir_for(self, target_dir: Path) -> Path:
        """First free `<prefix><YYYYMMDD>` name, then `_1`, `_2`, ..."""
        base = target_dir / f"{self.backup_prefix}{self.today():%Y%m%d}"
        candidate = base
        counter = 1
        while candidate.exists():
            candidate = base.with_name(f"{base.name}_{counter}")
            counter += 1
        return candidate

    def prepare(self, target_dir: Path) -> BackupSession | None:
        """
        Move the contents of an existing asset directory out of the way.

        Args:
            target_dir: Directory holding the documents

        Returns:
            BackupSession if an asset directory existed, None otherwise
        """
        assets_dir = target_dir / self.assets_name
        if not assets_dir.exists():
            assets_dir.mkdir(parents=True)
            self.sink.emit("info", f"Created asset directory: {assets_dir}")
            return None

        backup_dir = self.backup_dir_for(target_dir)
        backup_dir.mkdir()
        self.sink.emit("info", f"Created backup directory: {backup_dir}")

        moved = 0
        for src in sorted(assets_dir.iterdir()):
            if not src.is_file():
                continue
            shutil.move(str(src), str(backup_dir / src.name))
            moved += 1

        self.sink.emit("info", f"Moved {moved} file(s) from {self.assets_name} to {backup_dir.name}")
        return BackupSession(backup_dir=backup_dir, assets_dir=assets_dir)

    def merge_back(self, session: BackupSession, store: AssetStore, ledger: RenameLedger) -> int:
        """
        Put every backed-up file back into the store and record its final name.

        Every file gets a ledger entry, renamed or not, so later lookups are
        uniform.

        Returns:
            Number of files merged
        """
        self.sink.emit("info", f"Restoring images from {session.relative_name} into {store.root.name}")
        merged = 0
        for src in sorted(session.backup_dir.iterdir()):
            if not src.is_file():
                continue
            assigned = store.put(src.name, src)
            ledger.record(src.name, assigned)
            if assigned == src.name:
                self.sink.emit("info", f"Restored: {src.name}")
            else:
                self.sink.emit("info", f"Restored (renamed): {src.name} -> {assigned}")
            merged += 1
        return merged
