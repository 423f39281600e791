"""Image reference scanning, resolution and document rewriting."""

from .resolver import ReferenceResolver
from .rewriter import DocumentRewriter, flush_backup_refs, redirect_asset_refs
from .scanner import classify, scan_image_refs

__all__ = [
    "DocumentRewriter",
    "ReferenceResolver",
    "classify",
    "flush_backup_refs",
    "redirect_asset_refs",
    "scan_image_refs",
]
