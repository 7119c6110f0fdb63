"""
Tiered resolution of the alias index.

:class:`AliasIndexLoader` walks its tiers strictly in order and returns the
index from the first one that loads. Every tier attempt is isolated: any
failure is logged and the next tier is tried. When the winning tier is marked
for write-back the index is promoted into the local cache before ``resolve``
returns; a failed promotion is logged and the loaded index is still returned.

Blocking file I/O runs in a worker thread via :func:`asyncio.to_thread`, one
tier at a time, so cancelling the awaiting task stops resolution between
tier attempts.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Sequence

from alias_resolver.cache.local_store import FastLocalStore
from alias_resolver.config import storage as storage_cfg
from alias_resolver.errors import AllTiersExhaustedError, WriteBackError
from alias_resolver.model import AliasIndex
from alias_resolver.storage.documents import DocumentStore, LocalDocumentStore
from alias_resolver.tiers import Tier, TierLoad, build_default_tiers

logger = logging.getLogger(__name__)


class AliasIndexLoader:
    """Resolve the alias index from an ordered list of tiers."""

    def __init__(self, tiers: Sequence[Tier]):
        self.tiers = list(tiers)

    async def resolve(self) -> AliasIndex:
        """
        Return the index from the highest-priority tier that can supply it.

        :raises AllTiersExhaustedError: When every tier failed.
        """
        attempted: list[tuple[str, str]] = []

        for i, tier in enumerate(self.tiers):
            logger.debug("Trying alias tier %d: %s (%s)", i + 1, tier.name, tier.descriptor.location)
            try:
                loaded = await asyncio.to_thread(tier.load)
            except Exception as exc:
                logger.warning("Alias tier %s unavailable: %s", tier.name, exc)
                attempted.append((tier.name, str(exc)))
                continue

            index, promoted = await self._finish(tier, loaded)
            logger.info(
                "Loaded alias index from %s (%d records%s)",
                tier.name,
                len(index),
                ", promoted to local cache" if promoted else "",
            )
            return index

        logger.warning("All alias index sources failed")
        raise AllTiersExhaustedError(attempted)

    async def _finish(self, tier: Tier, loaded: TierLoad) -> tuple[AliasIndex, bool]:
        if not tier.descriptor.write_back:
            return loaded.index, False
        try:
            index = await asyncio.to_thread(tier.write_back, loaded)
        except WriteBackError as exc:
            logger.warning("Write-back after %s failed: %s", tier.name, exc)
            return loaded.index, False
        except Exception as exc:
            logger.warning("Write-back after %s failed unexpectedly: %s", tier.name, exc)
            return loaded.index, False
        return index, True


async def resolve_alias_index(
    documents: DocumentStore | None = None,
    cache_dir: Path | str | None = None,
    *,
    binary_write_back: bool | None = None,
) -> AliasIndex:
    """
    Resolve the index once using the default tiers.

    Arguments left as ``None`` are taken from :mod:`alias_resolver.config`.
    """
    if documents is None:
        documents = LocalDocumentStore(storage_cfg.ROOT_DIR, storage_cfg.APP_DIR_NAME)
    if cache_dir is None:
        cache_dir = storage_cfg.CACHE_DIR
    if binary_write_back is None:
        binary_write_back = storage_cfg.BINARY_WRITE_BACK

    tiers = build_default_tiers(documents, FastLocalStore(cache_dir), binary_write_back=binary_write_back)
    return await AliasIndexLoader(tiers).resolve()


__all__ = ["AliasIndexLoader", "resolve_alias_index"]
