"""
Document store: where task lines are read from and written back to.

The core only needs four things from its host: list documents, read one,
replace one, and tell whether one still exists. DocumentStore is that
contract; FileSystemDocumentStore implements it over a directory of Markdown
notes (an Obsidian vault).
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set

log = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".md"


class DocumentNotFoundError(LookupError):
    """Raised when a document identifier no longer resolves."""

    def __init__(self, source_id: str) -> None:
        super().__init__(f"Document '{source_id}' not found")
        self.source_id = source_id


class DocumentStore(ABC):
    """
    Abstract document store.

    Implementations must return documents in a stable order; the task
    snapshot is built in that order.
    """

    @abstractmethod
    def list_documents(self) -> List[str]:
        """Return identifiers of all documents, in a stable order."""

    @abstractmethod
    def exists(self, source_id: str) -> bool:
        """True if the identifier resolves to a document."""

    @abstractmethod
    def read(self, source_id: str) -> str:
        """Return full document content; raises DocumentNotFoundError."""

    @abstractmethod
    def write(self, source_id: str, content: str) -> None:
        """Replace full document content; raises DocumentNotFoundError."""

    def location(self, source_id: str) -> Optional[str]:
        """Host-specific location of a document (e.g. a file path), if any."""
        return None

    def describe(self) -> dict:
        """Diagnostics for status reports."""
        return {"store": type(self).__name__}


class FileSystemDocumentStore(DocumentStore):
    """
    All *.md files under a root directory.

    Identifiers are POSIX paths relative to the root ("Projects/Home.md").
    Any path with a directory component named in exclude_dirs is skipped.
    """

    def __init__(self, root: Path, exclude_dirs: Optional[Iterable[str]] = None) -> None:
        self._root = Path(root)
        self._exclude_dirs: Set[str] = set(exclude_dirs or ())

    @property
    def root(self) -> Path:
        return self._root

    @property
    def exclude_dirs(self) -> Set[str]:
        return set(self._exclude_dirs)

    def _walk(self) -> Iterator[Path]:
        for path in self._root.rglob(f"*{DOCUMENT_SUFFIX}"):
            if not path.is_file():
                continue
            rel = path.relative_to(self._root)
            if any(part in self._exclude_dirs for part in rel.parts[:-1]):
                continue
            yield path

    def list_documents(self) -> List[str]:
        return sorted(p.relative_to(self._root).as_posix() for p in self._walk())

    def path_for(self, source_id: str) -> Path:
        """Resolve an identifier to a path inside the root."""
        path = (self._root / source_id).resolve()
        root = self._root.resolve()
        if path != root and root not in path.parents:
            raise DocumentNotFoundError(source_id)
        return path

    def exists(self, source_id: str) -> bool:
        if not source_id.endswith(DOCUMENT_SUFFIX):
            return False
        try:
            return self.path_for(source_id).is_file()
        except DocumentNotFoundError:
            return False

    def read(self, source_id: str) -> str:
        if not self.exists(source_id):
            raise DocumentNotFoundError(source_id)
        # newline="" keeps CRLF intact so write-back is byte-compatible
        with open(self.path_for(source_id), encoding="utf-8", newline="") as f:
            return f.read()

    def write(self, source_id: str, content: str) -> None:
        if not self.exists(source_id):
            raise DocumentNotFoundError(source_id)
        with open(self.path_for(source_id), "w", encoding="utf-8", newline="") as f:
            f.write(content)
        log.debug("Wrote %s", source_id)

    def location(self, source_id: str) -> Optional[str]:
        return str(self._root / source_id)

    def describe(self) -> dict:
        return {
            "store": type(self).__name__,
            "vault_root": str(self._root),
            "exclude_dirs": sorted(self._exclude_dirs),
        }

    def mtimes(self) -> dict:
        """Return {source_id: mtime} for every document (used by the watcher)."""
        snapshot = {}
        for path in self._walk():
            try:
                snapshot[path.relative_to(self._root).as_posix()] = path.stat().st_mtime
            except OSError:
                pass
        return snapshot
