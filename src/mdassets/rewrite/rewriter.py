"""Rewrite image references inside documents."""

from pathlib import Path

from ..core.ports import DocumentStorage, LogSink
from ..core.state import RenameLedger
from .resolver import ReferenceResolver
from .scanner import scan_image_refs


def apply_substitutions(text: str, substitutions: dict[str, str]) -> str:
    """
    Replace every occurrence of each old reference text with its new text.
    
    Replacement is literal and document-wide: identical reference syntax
    anywhere in the document maps to the same result.
    """
    for old, new in substitutions.items():
        text = text.replace(old, new)
    return text


def redirect_asset_refs(text: str, backup_name: str, assets_name: str = "assets") -> tuple[str, int]:
    """
    Point `assets/...` references at the backup directory instead.
    
    Returns:
        Tuple of (new_text, number of distinct substitutions)
    """
    prefix = f"{assets_name}/"
    substitutions: dict[str, str] = {}
    for ref in scan_image_refs(text):
        if ref.target.startswith(prefix):
            substitutions[ref.text] = ref.with_target(f"{backup_name}/{ref.target[len(prefix):]}")
    return apply_substitutions(text, substitutions), len(substitutions)


def flush_backup_refs(
    text: str,
    backup_name: str,
    ledger: RenameLedger,
    assets_name: str = "assets",
) -> tuple[str, int]:
    """
    Point surviving backup references at the name the ledger recorded.
    
    Names missing from the ledger are kept as they are.
    
    Returns:
        Tuple of (new_text, number of distinct substitutions)
    """
    prefix = f"{backup_name}/"
    substitutions: dict[str, str] = {}
    for ref in scan_image_refs(text):
        if ref.target.startswith(prefix):
            original = ref.target[len(prefix):]
            name = ledger.get(original, original)
            substitutions[ref.text] = ref.with_target(f"{assets_name}/{name}")
    return apply_substitutions(text, substitutions), len(substitutions)


class DocumentRewriter:
    def __init__(self, documents: DocumentStorage, resolver: ReferenceResolver, sink: LogSink):
        self.documents = documents
        self.resolver = resolver
        self.sink = sink

    def process(self, doc_path: Path) -> int:
        """
        Resolve every image reference of one document and write it back.

        References are resolved one at a time in source order. Failed
        references stay as written; the others are still committed.

        Returns:
            Number of distinct reference texts given a new location; backup
            references restored to their own name are written but not counted
        """
        content = self.documents.read(doc_path)
        substitutions: dict[str, str] = {}
        handled: set[str] = set()
        restored = 0

        for ref in scan_image_refs(content):
            if ref.text in handled:
                continue
            handled.add(ref.text)
            new_target = self.resolver.resolve(ref, doc_path.parent)
            if new_target is None or new_target == ref.target:
                continue
            substitutions[ref.text] = ref.with_target(new_target)
            if self.resolver.is_restore(ref, new_target):
                restored += 1

        if not substitutions:
            self.sink.emit("info", f"Done: {doc_path.name} (no image paths to update)")
            return 0

        self.documents.write(doc_path, apply_substitutions(content, substitutions))
        updated = len(substitutions) - restored
        self.sink.emit("success", f"Done: {doc_path.name} (updated {updated} image path(s), restored {restored})")
        return updated
