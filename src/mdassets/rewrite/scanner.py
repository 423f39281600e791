"""Image reference scanner for Markdown documents."""

import re

from ..core.model import ImageReference, RefKind

# ![alt](target) where target runs to the first unescaped ")"
IMAGE_PATTERN = re.compile(r'!\[(.*?)\]\(((?:\\.|[^\\)\n])*)\)')


def scan_image_refs(text: str) -> list[ImageReference]:
    """
    Find image references, non-overlapping and left to right.
    
    Only inline image syntax is recognized; the rest of the Markdown
    structure is ignored.
    """
    return [
        ImageReference(alt=m.group(1), target=m.group(2), text=m.group(0))
        for m in IMAGE_PATTERN.finditer(text)
    ]


def classify(target: str, assets_name: str = "assets", backup_name: str | None = None) -> RefKind:
    """
    Classify a reference purely by its target string.
    
    Args:
        target: Raw target as written in the document
        assets_name: Name of the canonical asset directory
        backup_name: Relative name of the active backup directory, if any
    
    Returns:
        The reference kind
    """
    if backup_name and target.startswith(f"{backup_name}/"):
        return RefKind.BACKUP
    if target.startswith(f"{assets_name}/"):
        return RefKind.ASSET_LOCAL
    if target.startswith(("http://", "https://")):
        return RefKind.REMOTE
    return RefKind.LOCAL
