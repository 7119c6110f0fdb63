"""
Gzipped CBOR codec for :class:`AliasIndex`.

This is the native format of the local cache file. Remote
``aliases_optimized.cbor.gz`` files use the same encoding, so their bytes can
be installed into the cache verbatim.
"""

from __future__ import annotations

import gzip
import zlib

import cbor2

from alias_resolver.model import AliasIndex


def encode_index(index: AliasIndex) -> bytes:
    """Serialize ``index`` to gzip-compressed CBOR bytes (zeroed gzip mtime, so output is stable)."""

    return gzip.compress(cbor2.dumps(index.to_dict()), mtime=0)


def decode_index(data: bytes) -> AliasIndex:
    """
    Deserialize gzip-compressed CBOR bytes into an :class:`AliasIndex`.

    :raises ValueError: On empty input, a corrupt gzip stream, or a payload
        that is not an index.
    """
    if not data:
        raise ValueError("Empty alias cache payload")
    try:
        raw = gzip.decompress(data)
    except (OSError, EOFError, zlib.error) as exc:
        raise ValueError(f"Corrupt gzip stream: {exc}") from exc
    try:
        payload = cbor2.loads(raw)
    except cbor2.CBORDecodeError as exc:
        raise ValueError(f"Invalid CBOR payload: {exc}") from exc
    return AliasIndex.from_dict(payload)


__all__ = ["encode_index", "decode_index"]
