"""Resolve a single image reference to its place in the asset directory."""

import secrets
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

from ..assets.store import AssetStore
from ..core.errors import AssetIOError, LocalImageNotFound
from ..core.model import ImageReference, RefKind
from ..core.ports import LogSink
from ..core.state import ErrorLog, RenameLedger
from ..fetcher import Fetched, ImageFetcher
from .scanner import classify


def fallback_name() -> str:
    return f"image_{secrets.token_hex(4)}.jpg"


def remote_filename(url: str) -> str:
    """Last path segment of the URL without query string, or a generated name."""
    try:
        path = urlparse(url).path
    except ValueError:
        return fallback_name()
    name = PurePosixPath(unquote(path)).name
    return name or fallback_name()


def local_filename(target: str) -> str:
    name = Path(target.split("?")[0]).name
    return name or fallback_name()


def copy_local(store: AssetStore, source: Path, desired_name: str) -> str:
    """
    Copy a local image into the store.
    
    Raises:
        LocalImageNotFound: If `source` is not an existing file
        AssetIOError: If the store cannot hash or write it
    """
    if not source.is_file():
        raise LocalImageNotFound(source)
    return store.put(desired_name, source)


class ReferenceResolver:
    """
    Decide where one reference should point.

    `resolve` returns the new target, or None when the reference is to be
    left exactly as written (already canonical, or failed).
    """

    def __init__(
        self,
        store: AssetStore,
        fetcher: ImageFetcher,
        ledger: RenameLedger,
        errors: ErrorLog,
        sink: LogSink,
        assets_name: str = "assets",
        backup_name: str | None = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.ledger = ledger
        self.errors = errors
        self.sink = sink
        self.assets_name = assets_name
        self.backup_name = backup_name

    def kind_of(self, ref: ImageReference) -> RefKind:
        return classify(ref.target, self.assets_name, self.backup_name)

    def resolve(self, ref: ImageReference, doc_dir: Path) -> str | None:
        kind = self.kind_of(ref)
        if kind is RefKind.ASSET_LOCAL:
            return None
        if kind is RefKind.BACKUP:
            return self._resolve_backup(ref)
        if kind is RefKind.REMOTE:
            return self._resolve_remote(ref)
        return self._resolve_local(ref, doc_dir)

    def is_restore(self, ref: ImageReference, new_target: str) -> bool:
        """True when a backup reference maps back to its own unchanged name."""
        if self.kind_of(ref) is not RefKind.BACKUP:
            return False
        original = ref.target[len(self.backup_name or "") + 1:]
        return new_target == self._asset_target(original)

    def _asset_target(self, name: str) -> str:
        return f"{self.assets_name}/{name}"

    def _resolve_backup(self, ref: ImageReference) -> str:
        original = ref.target[len(self.backup_name or "") + 1:]
        resolved = self.ledger.get(original)
        if resolved is None:
            # tolerated: keep the original name even if the store lacks it
            self.sink.emit("warning", f"No restored file recorded for {original}, keeping its name")
            resolved = original
        return self._asset_target(resolved)

    def _resolve_remote(self, ref: ImageReference) -> str | None:
        result = self.fetcher.fetch(ref.target, remote_filename(ref.target))
        if isinstance(result, Fetched):
            return self._asset_target(result.name)
        self.errors.report(result.message)
        return None

    def _resolve_local(self, ref: ImageReference, doc_dir: Path) -> str | None:
        path = Path(ref.target)
        if not path.is_absolute():
            path = doc_dir / path
        try:
            assigned = copy_local(self.store, path, local_filename(ref.target))
        except (LocalImageNotFound, AssetIOError) as e:
            self.errors.report(str(e))
            return None
        self.sink.emit("success", f"Copied local image: {path} -> {assigned}")
        return self._asset_target(assigned)
