from pathlib import Path

from ..core.ports import DocumentStorage


class FsDocuments(DocumentStorage):
    def __init__(self, root: Path, pattern: str = "*.md"):
        self.root = root
        self.pattern = pattern

    def list_documents(self) -> list[Path]:
        if not self.root.exists():
            return []
        return sorted(p for p in self.root.glob(self.pattern) if p.is_file())

    def read(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write(self, path: Path, contents: str) -> None:
        # newline="" keeps the document's own line endings
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(contents)
