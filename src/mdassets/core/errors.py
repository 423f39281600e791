"""Error types raised while resolving image references."""

from pathlib import Path
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from .model import RunReport

FetchErrorKind = Literal["unreachable", "http_status", "timeout", "oversized", "empty_body"]


class MdAssetsError(Exception):
    """Base class for all mdassets errors."""


class LocalImageNotFound(MdAssetsError):
    """A local image reference points at a file that does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Local image not found: {path}")


class AssetIOError(MdAssetsError):
    """Hashing or writing a file in the asset store failed."""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Asset store I/O failure on {path}: {cause}")


class RunAlreadyInProgress(MdAssetsError):
    """A second run was requested while one is still active."""

    def __init__(self, target: Path | None = None):
        self.target = target
        where = f" for {target}" if target else ""
        super().__init__(f"A run is already in progress{where}")


class RunFailed(MdAssetsError):
    """An error escaped the phase sequence; the remaining phases were skipped."""

    def __init__(self, report: "RunReport", cause: BaseException):
        self.report = report
        self.cause = cause
        super().__init__(f"Processing failed: {cause}")
