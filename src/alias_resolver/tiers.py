"""
Storage tiers the alias index can be resolved from.

Each tier pairs a :class:`TierDescriptor` (where to look, which format, and
whether a successful load is promoted into the local cache) with a
:class:`Tier` implementation that knows how to load that format and how to
write it back. The loader walks an ordered list of tiers and never needs to
know which concrete formats are involved, so adding a source means appending
a tier to the list returned by :func:`build_default_tiers`.

Default priority:

1. ``local-cache``  - the promoted cache file; never written back.
2. ``vt5bin``       - ``serverdata/alias_index.bin``; write-back optional.
3. ``cbor-gz``      - ``binaries/aliases_optimized.cbor.gz``; bytes copied into the cache.
4. ``master-json``  - ``assets/alias_master.json``; built index serialized into the cache.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, TypeVar

from alias_resolver.cache.local_store import CACHE_FILENAME, FastLocalStore
from alias_resolver.codecs import cbor_gz, master, vt5bin
from alias_resolver.errors import TierUnavailableError, WriteBackError
from alias_resolver.model import AliasIndex
from alias_resolver.storage.documents import DocumentStore, read_document_bytes

logger = logging.getLogger(__name__)

T = TypeVar("T")

SERVERDATA_DIR = "serverdata"
BINARIES_DIR = "binaries"
ASSETS_DIR = "assets"

VT5BIN_FILENAME = "alias_index.bin"
CBOR_GZ_FILENAME = CACHE_FILENAME
MASTER_FILENAME = "alias_master.json"


class TierFormat(str, Enum):
    CACHE = "cache"
    VT5BIN = "vt5bin"
    CBOR_GZ = "cbor_gz"
    MASTER_JSON = "master_json"


@dataclass(slots=True, frozen=True)
class TierDescriptor:
    """Static description of one source in the resolution order."""

    name: str
    directory: str
    filename: str
    format: TierFormat
    write_back: bool = False

    @property
    def location(self) -> str:
        return f"{self.directory}/{self.filename}"


@dataclass(slots=True)
class TierLoad:
    """Result of a successful tier load; ``raw`` keeps the source bytes when useful."""

    index: AliasIndex
    raw: bytes | None = None


class Tier(ABC):
    """One candidate source of the alias index."""

    def __init__(self, descriptor: TierDescriptor) -> None:
        self.descriptor = descriptor

    @property
    def name(self) -> str:
        return self.descriptor.name

    @abstractmethod
    def load(self) -> TierLoad:
        """
        Materialize the index from this tier.

        :raises TierUnavailableError: When the source is missing or unusable.
        """

    def write_back(self, loaded: TierLoad) -> AliasIndex:
        """
        Promote ``loaded`` into the local cache and return the index to hand out.

        Only called when ``descriptor.write_back`` is set.

        :raises WriteBackError: When promotion fails.
        """
        raise WriteBackError(self.descriptor.location, f"tier {self.name!r} does not support write-back")

    def __repr__(self) -> str:  # pragma: no cover - convenience only
        return f"{self.__class__.__name__}({self.descriptor!r})"


class CachedTier(Tier):
    """The local cache itself; a hit is final and never promoted."""

    def __init__(self, store: FastLocalStore) -> None:
        super().__init__(
            TierDescriptor(
                name="local-cache",
                directory=str(store.cache_dir),
                filename=CACHE_FILENAME,
                format=TierFormat.CACHE,
                write_back=False,
            )
        )
        self.store = store

    def load(self) -> TierLoad:
        index = self.store.load_cached()
        if index is None:
            raise TierUnavailableError(self.name, f"no usable cache at {self.store.path}")
        return TierLoad(index=index)


class _RemoteTier(Tier):
    """Tier backed by a file in the shared document tree."""

    def __init__(self, descriptor: TierDescriptor, documents: DocumentStore, store: FastLocalStore) -> None:
        super().__init__(descriptor)
        self.documents = documents
        self.store = store

    def _read(self) -> bytes:
        d = self.descriptor
        data = read_document_bytes(self.documents, d.directory, d.filename, tier=self.name)
        if not data:
            raise TierUnavailableError(self.name, f"{d.location} is empty")
        logger.debug("Read %d bytes from %s (%s)", len(data), d.location, self.name)
        return data

    def _decode(self, fn: Callable[[bytes], T], data: bytes) -> T:
        try:
            return fn(data)
        except (ValueError, OSError, EOFError) as exc:
            raise TierUnavailableError(self.name, f"{self.descriptor.location} is malformed: {exc}") from exc


class BinaryTier(_RemoteTier):
    """Compact ``VT5BIN10`` file decoded straight into the index."""

    def __init__(self, documents: DocumentStore, store: FastLocalStore, *, write_back: bool = False) -> None:
        super().__init__(
            TierDescriptor(
                name="vt5bin",
                directory=SERVERDATA_DIR,
                filename=VT5BIN_FILENAME,
                format=TierFormat.VT5BIN,
                write_back=write_back,
            ),
            documents,
            store,
        )

    def load(self) -> TierLoad:
        return TierLoad(index=self._decode(vt5bin.decode_alias_index, self._read()))

    def write_back(self, loaded: TierLoad) -> AliasIndex:
        self.store.promote(loaded.index)
        return loaded.index


class CompressedTier(_RemoteTier):
    """
    Gzipped CBOR file, byte-compatible with the local cache.

    The bytes are validated in memory first so a corrupt remote file never
    replaces a cache file. Write-back copies them verbatim and re-reads the
    index through the cache path.
    """

    def __init__(self, documents: DocumentStore, store: FastLocalStore, *, write_back: bool = True) -> None:
        super().__init__(
            TierDescriptor(
                name="cbor-gz",
                directory=BINARIES_DIR,
                filename=CBOR_GZ_FILENAME,
                format=TierFormat.CBOR_GZ,
                write_back=write_back,
            ),
            documents,
            store,
        )

    def load(self) -> TierLoad:
        data = self._read()
        return TierLoad(index=self._decode(cbor_gz.decode_index, data), raw=data)

    def write_back(self, loaded: TierLoad) -> AliasIndex:
        if loaded.raw is None:
            raise WriteBackError(self.store.path, "no source bytes to copy")
        self.store.install_bytes(loaded.raw)
        reread = self.store.load_cached()
        if reread is None:
            raise WriteBackError(self.store.path, "installed cache could not be read back")
        return reread


class MasterTier(_RemoteTier):
    """Human-authored master JSON; the only tier that builds the index semantically."""

    def __init__(self, documents: DocumentStore, store: FastLocalStore, *, write_back: bool = True) -> None:
        super().__init__(
            TierDescriptor(
                name="master-json",
                directory=ASSETS_DIR,
                filename=MASTER_FILENAME,
                format=TierFormat.MASTER_JSON,
                write_back=write_back,
            ),
            documents,
            store,
        )

    def load(self) -> TierLoad:
        parsed = self._decode(master.parse_master, self._read())
        return TierLoad(index=parsed.to_alias_index())

    def write_back(self, loaded: TierLoad) -> AliasIndex:
        self.store.promote(loaded.index)
        return loaded.index


def build_default_tiers(
    documents: DocumentStore,
    store: FastLocalStore,
    *,
    binary_write_back: bool = False,
) -> list[Tier]:
    """Return the standard tier list in resolution order."""

    return [
        CachedTier(store),
        BinaryTier(documents, store, write_back=binary_write_back),
        CompressedTier(documents, store),
        MasterTier(documents, store),
    ]


__all__ = [
    "BinaryTier",
    "CachedTier",
    "CompressedTier",
    "MasterTier",
    "Tier",
    "TierDescriptor",
    "TierFormat",
    "TierLoad",
    "build_default_tiers",
]
