"""
Fast local store for the promoted alias index.

The cache is a single gzipped CBOR file in a process-owned directory::

    <cache_dir>/aliases_optimized.cbor.gz

Callers read it with :meth:`FastLocalStore.load_cached`, which treats any
missing, empty or unreadable file as absent. Both write-back paths,
:meth:`FastLocalStore.promote` (serialize an index) and
:meth:`FastLocalStore.install_bytes` (copy an already-encoded file), stage to
a uniquely named ``aliases_optimized.cbor.gz.<random>.tmp`` in the same
directory and finish with :func:`os.replace`. Overlapping writers never share
a staging file; readers observe the old file or one complete new file, and
the last rename wins.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from alias_resolver.codecs import cbor_gz
from alias_resolver.errors import WriteBackError
from alias_resolver.model import AliasIndex

logger = logging.getLogger(__name__)

CACHE_FILENAME = "aliases_optimized.cbor.gz"
_STAGING_SUFFIX = ".tmp"


class FastLocalStore:
    """Reader and writer for the canonical cache file under ``cache_dir``."""

    def __init__(self, cache_dir: Path | str) -> None:
        self.cache_dir = Path(cache_dir)

    @property
    def path(self) -> Path:
        return self.cache_dir / CACHE_FILENAME

    def staging_files(self) -> list[Path]:
        """Staging files currently present in ``cache_dir``."""

        if not self.cache_dir.is_dir():
            return []
        return sorted(self.cache_dir.glob(f"{CACHE_FILENAME}.*{_STAGING_SUFFIX}"))

    def exists(self) -> bool:
        """Return ``True`` if the cache file is present and non-empty."""

        try:
            return self.path.stat().st_size > 0
        except OSError:
            return False

    def load_cached(self) -> AliasIndex | None:
        """Return the cached index, or ``None`` when absent or unreadable."""

        p = self.path
        if not self.exists():
            return None
        try:
            return cbor_gz.decode_index(p.read_bytes())
        except Exception as exc:
            logger.warning("Ignoring unreadable alias cache %s: %s", p, exc)
            return None

    def promote(self, index: AliasIndex) -> None:
        """
        Serialize ``index`` into the cache file.

        :raises WriteBackError: If staging or the final rename fails; the
            canonical file is left as it was.
        """
        try:
            data = cbor_gz.encode_index(index)
        except Exception as exc:
            raise WriteBackError(self.path, f"serialization failed: {exc}") from exc
        self._write_atomic(data)
        logger.info("Promoted alias index to %s (%d records, %d bytes)", self.path, len(index), len(data))

    def install_bytes(self, data: bytes) -> None:
        """
        Install an already-encoded cache file verbatim.

        :raises WriteBackError: If staging or the final rename fails.
        """
        self._write_atomic(data)
        logger.info("Installed alias cache bytes at %s (%d bytes)", self.path, len(data))

    def _write_atomic(self, data: bytes) -> None:
        target = self.path
        tmp: Path | None = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(dir=self.cache_dir, prefix=f"{CACHE_FILENAME}.", suffix=_STAGING_SUFFIX)
            tmp = Path(name)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, target)
        except OSError as exc:
            if tmp is not None:
                try:
                    tmp.unlink(missing_ok=True)
                except OSError:
                    logger.debug("Could not remove staging file %s", tmp)
            raise WriteBackError(target, str(exc)) from exc


__all__ = ["CACHE_FILENAME", "FastLocalStore"]
