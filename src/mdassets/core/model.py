from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class RefKind(str, Enum):
    ASSET_LOCAL = "asset_local"  # already under assets/
    BACKUP = "backup"  # under the active backup directory
    REMOTE = "remote"  # http:// or https://
    LOCAL = "local"  # anything else, resolved on disk


@dataclass(frozen=True)
class ImageReference:
    alt: str
    target: str
    text: str  # full "![alt](target)" as it appears in the document

    def with_target(self, new_target: str) -> str:
        return f"![{self.alt}]({new_target})"


@dataclass(frozen=True)
class BackupSession:
    backup_dir: Path
    assets_dir: Path

    @property
    def relative_name(self) -> str:
        return self.backup_dir.name


@dataclass
class RunReport:
    """Aggregate outcome of one pipeline run."""

    target_dir: Path
    assets_dir: Path
    documents: int = 0
    references: int = 0
    backup_name: str | None = None
    errors: list[str] = field(default_factory=list)
    failure: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_dir": str(self.target_dir),
            "assets_dir": str(self.assets_dir),
            "documents": self.documents,
            "references": self.references,
            "backup_name": self.backup_name,
            "errors": list(self.errors),
            "succeeded": self.succeeded,
            "failure": self.failure,
        }
