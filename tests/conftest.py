import sys
from pathlib import Path

import pytest

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from alias_resolver.codecs import cbor_gz, master, vt5bin  # noqa: E402
from alias_resolver.model import AliasData, AliasMaster, EntityEntry  # noqa: E402
from alias_resolver.storage.documents import LocalDocumentStore  # noqa: E402


class CountingDocumentStore:
    """Wraps a document store and counts every access to the shared tree."""

    def __init__(self, inner):
        self._inner = inner
        self.calls = 0

    def app_dir(self):
        self.calls += 1
        return self._inner.app_dir()


def make_master(timestamp="2025-10-28T12:00:00Z", extra=()):
    entities = [
        EntityEntry(
            entity_id="20",
            canonical="Aalscholver",
            tilename="Aal",
            aliases=(
                AliasData(text="aalscholver", norm="aalscholver", cologne="05247"),
                AliasData(text="aal", norm="aal", cologne="05", source="seed_tilename"),
            ),
        ),
        EntityEntry(
            entity_id="31",
            canonical="Blauwe Reiger",
            tilename=None,
            aliases=(
                AliasData(text="blauwe reiger", norm="blauwe reiger"),
                AliasData(
                    text="reiger",
                    norm="reiger",
                    source="user_field_training",
                    timestamp="2025-11-02T08:15:00Z",
                ),
            ),
        ),
        *extra,
    ]
    return AliasMaster(timestamp=timestamp, entities=tuple(entities))


class TreeBuilder:
    """Lays out the shared document tree (``<root>/VT5/...``) under a temp dir."""

    def __init__(self, root: Path):
        self.root = root
        self.app = root / "VT5"

    def write(self, directory: str, filename: str, data: bytes) -> Path:
        folder = self.app / directory
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / filename
        path.write_bytes(data)
        return path

    def write_master(self, m: AliasMaster) -> Path:
        return self.write("assets", "alias_master.json", master.dump_master(m))

    def write_cbor_gz(self, m: AliasMaster) -> Path:
        return self.write("binaries", "aliases_optimized.cbor.gz", cbor_gz.encode_index(m.to_alias_index()))

    def write_vt5bin(self, m: AliasMaster, **kwargs) -> Path:
        return self.write("serverdata", "alias_index.bin", vt5bin.encode_alias_index(m.to_alias_index(), **kwargs))

    def documents(self) -> CountingDocumentStore:
        return CountingDocumentStore(LocalDocumentStore(self.root, "VT5"))


@pytest.fixture
def sample_master():
    return make_master()


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "shared").mkdir()
    return TreeBuilder(tmp_path / "shared")


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "private" / "cache"


@pytest.fixture
def master_factory():
    return make_master
