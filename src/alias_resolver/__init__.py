"""
Tiered loader and self-healing local cache for the alias index.

Typical use from an async caller::

    from alias_resolver import resolve_alias_index, AllTiersExhaustedError

    try:
        index = await resolve_alias_index()
    except AllTiersExhaustedError:
        ...  # disable alias-dependent features
"""

from .errors import AliasIndexError, AllTiersExhaustedError, TierUnavailableError, WriteBackError
from .loader import AliasIndexLoader, resolve_alias_index
from .model import AliasData, AliasIndex, AliasMaster, AliasRecord, EntityEntry

__all__ = [
    "AliasData",
    "AliasIndex",
    "AliasIndexError",
    "AliasIndexLoader",
    "AliasMaster",
    "AliasRecord",
    "AllTiersExhaustedError",
    "EntityEntry",
    "TierUnavailableError",
    "WriteBackError",
    "resolve_alias_index",
]
