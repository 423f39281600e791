"""Five-phase asset pipeline over one target directory."""

import random
import threading
import time
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path

from .adapters.fs_documents import FsDocuments
from .assets.backup import BackupManager
from .assets.store import AssetStore
from .config import MdAssetsConfig
from .core.errors import RunAlreadyInProgress, RunFailed
from .core.model import BackupSession, RunReport
from .core.ports import DocumentStorage, HttpClient, LogSink
from .core.state import ErrorLog, RenameLedger
from .fetcher import ImageFetcher
from .rewrite.resolver import ReferenceResolver
from .rewrite.rewriter import DocumentRewriter, flush_backup_refs, redirect_asset_refs

# a document failing with one of these is reported and skipped
DOCUMENT_ERRORS = (OSError, UnicodeDecodeError)


def _document_failure(doc: Path, error: Exception) -> str:
    return f"Failed to process {doc.name}: {error}"


class AssetPipeline:
    """
    Gather every image a directory's documents reference into its asset
    directory.

    Phases, in this order:

    1. back up an existing asset directory
    2. point `assets/...` references at the backup
    3. merge the backup into the (now empty) store, filling the rename ledger
    4. resolve and rewrite every document
    5. flush surviving backup references through the ledger

    Phases 2, 3 and 5 only run when a backup was made. One run at a time per
    pipeline; a concurrent request raises RunAlreadyInProgress.
    """

    def __init__(
        self,
        client: HttpClient,
        sink: LogSink,
        config: MdAssetsConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
        today: Callable[[], date] = date.today,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ):
        self.client = client
        self.sink = sink
        self.config = config or MdAssetsConfig()
        self.sleep = sleep
        self.today = today
        self.clock = clock
        self.rng = rng
        self._lock = threading.Lock()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def run(self, target_dir: Path) -> RunReport:
        """
        Process every document in `target_dir`.

        Raises:
            RunAlreadyInProgress: If this pipeline is already running
            RunFailed: If an error escaped the phase sequence
        """
        with self._lock:
            if self._running:
                raise RunAlreadyInProgress(target_dir)
            self._running = True
        try:
            return self._run(Path(target_dir))
        finally:
            with self._lock:
                self._running = False

    def _run(self, target_dir: Path) -> RunReport:
        assets = self.config.assets
        documents = FsDocuments(target_dir, assets.pattern)
        ledger = RenameLedger()
        errors = ErrorLog(self.sink)
        report = RunReport(target_dir=target_dir, assets_dir=target_dir / assets.dir)

        self.sink.emit("info", f"Processing images in {target_dir}")
        try:
            self._phases(target_dir, documents, ledger, errors, report)
        except Exception as e:
            report.errors = errors.messages
            report.failure = str(e)
            self.sink.emit("error", f"Processing failed: {e}")
            raise RunFailed(report, e) from e

        report.errors = errors.messages
        self._summarize(report)
        return report

    def _phases(
        self,
        target_dir: Path,
        documents: DocumentStorage,
        ledger: RenameLedger,
        errors: ErrorLog,
        report: RunReport,
    ) -> None:
        assets = self.config.assets
        backups = BackupManager(self.sink, assets.dir, assets.backup_prefix, self.today)

        self.sink.emit("step", "Step 1: back up the asset directory")
        session = backups.prepare(target_dir)
        store = AssetStore(report.assets_dir, self.sink, self.clock, self.rng)

        if session is not None:
            report.backup_name = session.relative_name
            self.sink.emit("step", "Step 2: point existing references at the backup")
            self.redirect_documents(documents, session, errors)

            self.sink.emit("step", "Step 3: restore backed-up images into the asset directory")
            backups.merge_back(session, store, ledger)

        self.sink.emit("step", "Step 4: resolve images in every document")
        fetch = self.config.fetch
        fetcher = ImageFetcher(
            self.client,
            store,
            self.sink,
            max_attempts=fetch.max_attempts,
            base_delay=fetch.base_delay,
            max_bytes=fetch.max_bytes,
            sleep=self.sleep,
        )
        resolver = ReferenceResolver(
            store,
            fetcher,
            ledger,
            errors,
            self.sink,
            assets_name=assets.dir,
            backup_name=report.backup_name,
        )
        rewriter = DocumentRewriter(documents, resolver, self.sink)

        docs = documents.list_documents()
        for i, doc in enumerate(docs, start=1):
            self.sink.emit("info", f"Processing document ({i}/{len(docs)}): {doc.name}")
            try:
                report.references += rewriter.process(doc)
            except DOCUMENT_ERRORS as e:
                errors.report(_document_failure(doc, e))
        report.documents = len(docs)

        if session is not None:
            self.sink.emit("step", "Step 5: update remaining backup references")
            self.flush_documents(documents, session, ledger, errors)

    def redirect_documents(self, documents: DocumentStorage, session: BackupSession, errors: ErrorLog) -> int:
        """Phase 2. Returns the number of documents rewritten."""
        changed = 0
        for doc in documents.list_documents():
            try:
                content = documents.read(doc)
                new_content, count = redirect_asset_refs(content, session.relative_name, self.config.assets.dir)
                if count:
                    documents.write(doc, new_content)
            except DOCUMENT_ERRORS as e:
                errors.report(_document_failure(doc, e))
                continue
            if count:
                self.sink.emit("info", f"Pointed image references at {session.relative_name}: {doc.name}")
                changed += 1
        return changed

    def flush_documents(
        self, documents: DocumentStorage, session: BackupSession, ledger: RenameLedger, errors: ErrorLog
    ) -> int:
        """Phase 5. Returns the number of documents rewritten."""
        changed = 0
        for doc in documents.list_documents():
            try:
                content = documents.read(doc)
                new_content, count = flush_backup_refs(content, session.relative_name, ledger, self.config.assets.dir)
                if count:
                    documents.write(doc, new_content)
            except DOCUMENT_ERRORS as e:
                errors.report(_document_failure(doc, e))
                continue
            if count:
                self.sink.emit("success", f"Updated backup references: {doc.name}")
                changed += 1
        return changed

    def _summarize(self, report: RunReport) -> None:
        self.sink.emit("success", "Processing complete")
        self.sink.emit("success", f"Documents processed: {report.documents}")
        self.sink.emit("success", f"Image references updated: {report.references}")
        if report.backup_name:
            self.sink.emit("success", f"Backup directory: {report.backup_name}")
        self.sink.emit("success", f"Asset directory: {report.assets_dir.name}")
