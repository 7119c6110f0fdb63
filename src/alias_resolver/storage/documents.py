"""
Read-only access to the shared document tree.

The remote tiers only need to locate the application directory, find a named
subdirectory and file inside it, and open a byte stream. ``Document`` and
``DocumentStore`` are small :class:`typing.Protocol` types describing that
surface so a device-specific store and the filesystem-backed
:class:`LocalDocumentStore` satisfy the same static contract.
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional, Protocol

from alias_resolver.errors import TierUnavailableError


class Document(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def is_directory(self) -> bool: ...

    @property
    def is_file(self) -> bool: ...

    def find_file(self, name: str) -> Optional["Document"]: ...

    def list_files(self) -> list["Document"]: ...

    def open_read(self) -> BinaryIO: ...


class DocumentStore(Protocol):
    def app_dir(self) -> Optional[Document]: ...


class LocalDocument:
    """A file or directory on the local filesystem."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_directory(self) -> bool:
        return self.path.is_dir()

    @property
    def is_file(self) -> bool:
        return self.path.is_file()

    def find_file(self, name: str) -> Optional[LocalDocument]:
        candidate = self.path / name
        return LocalDocument(candidate) if candidate.exists() else None

    def list_files(self) -> list[LocalDocument]:
        if not self.is_directory:
            return []
        return [LocalDocument(p) for p in sorted(self.path.iterdir())]

    def open_read(self) -> BinaryIO:
        return self.path.open("rb")

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"LocalDocument({str(self.path)!r})"


class LocalDocumentStore:
    """Filesystem-backed store rooted at ``root``; the app dir is ``root/app_dir_name``."""

    def __init__(self, root: Path | str, app_dir_name: str = "VT5") -> None:
        self.root = Path(root)
        self.app_dir_name = app_dir_name

    def app_dir(self) -> Optional[LocalDocument]:
        doc = LocalDocument(self.root).find_file(self.app_dir_name)
        if doc is None or not doc.is_directory:
            return None
        return doc


def read_document_bytes(documents: DocumentStore, directory: str, filename: str, *, tier: str) -> bytes:
    """
    Return the full contents of ``<app dir>/<directory>/<filename>``.

    :raises TierUnavailableError: When the app dir, subdirectory or file is missing.
    """
    app = documents.app_dir()
    if app is None:
        raise TierUnavailableError(tier, "application directory not found")
    folder = app.find_file(directory)
    if folder is None or not folder.is_directory:
        raise TierUnavailableError(tier, f"directory {directory!r} not found")
    doc = folder.find_file(filename)
    if doc is None or not doc.is_file:
        raise TierUnavailableError(tier, f"file {directory}/{filename} not found")
    with doc.open_read() as stream:
        return stream.read()
