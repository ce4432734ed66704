"""Document store: the vault that holds notes and their source images.

:class:`DocumentStore` is the narrow interface the synthesiser talks to.
:class:`VaultStore` implements it over a directory of markdown files, the
layout an Obsidian vault uses.  Document ids are vault-relative POSIX paths
(``"journal/Groceries.md"``) so they can be embedded in wikilinks as-is.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from notecap.errors import StoreError

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


def _in_hidden_folder(relative: Path) -> bool:
    # .obsidian/, .trash/ and the like hold config and deleted notes
    return any(part.startswith(".") for part in relative.parts[:-1])


@dataclass(frozen=True)
class Document:
    id: str
    basename: str


class DocumentStore(ABC):
    @abstractmethod
    def list_documents(self) -> list[Document]:
        """Return every note in the store, in a stable order."""
        ...

    @abstractmethod
    def read_text(self, document_id: str) -> str:
        ...

    @abstractmethod
    def create_document(self, path: str, content: str) -> str:
        """Create a new note at *path* and return its id."""
        ...

    @abstractmethod
    def delete_if_exists(self, path: str) -> bool:
        """Delete whatever lives at *path*; return whether anything was removed."""
        ...

    @abstractmethod
    def create_folder_if_missing(self, path: str) -> None:
        ...

    @abstractmethod
    def create_binary(self, path: str, data: bytes) -> str:
        ...

    @abstractmethod
    def rename_or_move(self, document_id: str, new_path: str) -> str:
        ...


class VaultStore(DocumentStore):
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    # ── Path helpers ──────────────────────────────────────────────────────

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise StoreError(f"Path escapes the vault: {path}")
        return self.root.joinpath(*relative.parts)

    def _id_for(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def contains(self, path: Path) -> bool:
        """Whether *path* on disk lives inside this vault."""
        try:
            path.resolve().relative_to(self.root.resolve())
        except ValueError:
            return False
        return True

    def id_for_path(self, path: Path) -> str:
        return path.resolve().relative_to(self.root.resolve()).as_posix()

    # ── DocumentStore ─────────────────────────────────────────────────────

    def list_documents(self) -> list[Document]:
        try:
            paths = sorted(
                p for p in self.root.rglob(f"*{NOTE_SUFFIX}")
                if p.is_file() and not _in_hidden_folder(p.relative_to(self.root))
            )
        except OSError as e:
            raise StoreError(f"Cannot list notes in {self.root}: {e}") from e
        return [Document(id=self._id_for(p), basename=p.stem) for p in paths]

    def read_text(self, document_id: str) -> str:
        try:
            return self._resolve(document_id).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"Cannot read {document_id}: {e}") from e

    def create_document(self, path: str, content: str) -> str:
        target = self._resolve(path)
        if target.exists():
            raise StoreError(f"Document already exists: {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot create {path}: {e}") from e
        logger.debug("created note %s", path)
        return self._id_for(target)

    def delete_if_exists(self, path: str) -> bool:
        target = self._resolve(path)
        if not target.is_file():
            return False
        try:
            target.unlink()
        except OSError as e:
            raise StoreError(f"Cannot delete {path}: {e}") from e
        logger.debug("deleted %s", path)
        return True

    def create_folder_if_missing(self, path: str) -> None:
        try:
            self._resolve(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(f"Cannot create folder {path}: {e}") from e

    def create_binary(self, path: str, data: bytes) -> str:
        target = self._resolve(path)
        if target.exists():
            raise StoreError(f"File already exists: {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}") from e
        return self._id_for(target)

    def rename_or_move(self, document_id: str, new_path: str) -> str:
        source = self._resolve(document_id)
        target = self._resolve(new_path)
        if target.exists():
            raise StoreError(f"Destination already exists: {new_path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            source.rename(target)
        except OSError as e:
            raise StoreError(f"Cannot move {document_id} to {new_path}: {e}") from e
        logger.debug("moved %s -> %s", document_id, new_path)
        return self._id_for(target)
