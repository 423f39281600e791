"""Canonical asset directory and backup handling."""

from .backup import BackupManager
from .store import AssetStore, compute_file_hash

__all__ = [
    "AssetStore",
    "BackupManager",
    "compute_file_hash",
]
