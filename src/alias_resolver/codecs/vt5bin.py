"""
Reader and writer for the ``VT5BIN10`` binary container.

Layout (little-endian, 40-byte header followed by the payload)::

    0   8s  magic            b"VT5BIN10"
    8   H   header_version   >= 1
    10  H   dataset_kind     100 for the alias index
    12  B   codec            0 = JSON, 1 = CBOR
    13  B   compression      0 = none, 1 = gzip
    14  H   reserved
    16  Q   payload_len      bytes following the header
    24  Q   uncompressed_len
    32  I   record_count     0xFFFFFFFF when unknown (informational)
    36  I   header_crc32     CRC32 of bytes 0..36

The decoded payload may be a wrapped object (``{"json": [index]}``), a list
of index objects, or a single index object. The first index found is used.
"""

from __future__ import annotations

import gzip
import json
import struct
import zlib
from dataclasses import dataclass
from typing import Any

import cbor2

from alias_resolver.model import AliasIndex

MAGIC = b"VT5BIN10"
HEADER_VERSION = 1
HEADER_SIZE = 40
KIND_ALIAS_INDEX = 100

CODEC_JSON = 0
CODEC_CBOR = 1
COMPRESSION_NONE = 0
COMPRESSION_GZIP = 1

_HEADER = struct.Struct("<8sHHBBHQQII")
_CRC_SPAN = 0x24


@dataclass(slots=True, frozen=True)
class VT5Header:
    magic: bytes
    header_version: int
    dataset_kind: int
    codec: int
    compression: int
    reserved: int
    payload_len: int
    uncompressed_len: int
    record_count: int
    header_crc32: int


def parse_header(data: bytes) -> VT5Header:
    """Parse and validate the fixed-size header at the start of ``data``."""

    if len(data) < HEADER_SIZE:
        raise ValueError(f"VT5Bin header truncated: {len(data)} < {HEADER_SIZE} bytes")
    raw = data[:HEADER_SIZE]
    header = VT5Header(*_HEADER.unpack(raw))
    computed = zlib.crc32(raw[:_CRC_SPAN]) & 0xFFFF_FFFF
    if computed != header.header_crc32:
        raise ValueError(
            f"VT5Bin header CRC mismatch: computed {computed:#010x}, stored {header.header_crc32:#010x}"
        )
    if header.magic != MAGIC:
        raise ValueError(f"VT5Bin magic mismatch: {header.magic!r}")
    if header.header_version < HEADER_VERSION:
        raise ValueError(f"VT5Bin header version {header.header_version} is unsupported")
    if header.codec not in (CODEC_JSON, CODEC_CBOR):
        raise ValueError(f"VT5Bin codec {header.codec} is unsupported")
    if header.compression not in (COMPRESSION_NONE, COMPRESSION_GZIP):
        raise ValueError(f"VT5Bin compression {header.compression} is unsupported")
    return header


def _unwrap(payload: Any) -> Any:
    # Wrapped, list and single forms, in that order. A wrapper's own keys are
    # ignored; it is recognised by an index (not a record) inside "json".
    if isinstance(payload, dict) and isinstance(payload.get("json"), list):
        items = payload["json"]
        if items and isinstance(items[0], dict) and "timestamp" in items[0]:
            return items[0]
        if not items and "timestamp" not in payload:
            raise ValueError("VT5Bin wrapped payload is empty")
    if isinstance(payload, list):
        if not payload:
            raise ValueError("VT5Bin list payload is empty")
        return payload[0]
    return payload


def decode_alias_index(data: bytes) -> AliasIndex:
    """
    Decode an alias index from a complete ``VT5BIN10`` file.

    :raises ValueError: On any header, payload or schema mismatch.
    """
    header = parse_header(data)
    if header.dataset_kind != KIND_ALIAS_INDEX:
        raise ValueError(f"VT5Bin dataset kind {header.dataset_kind} is not an alias index")

    payload = data[HEADER_SIZE:HEADER_SIZE + header.payload_len]
    if len(payload) != header.payload_len:
        raise ValueError(f"VT5Bin payload truncated: {len(payload)} of {header.payload_len} bytes")

    if header.compression == COMPRESSION_GZIP:
        try:
            body = gzip.decompress(payload)
        except (OSError, EOFError, zlib.error) as exc:
            raise ValueError(f"VT5Bin gzip payload is corrupt: {exc}") from exc
    else:
        body = payload

    if header.codec == CODEC_CBOR:
        decoded = cbor2.loads(body)
    else:
        decoded = json.loads(body.decode("utf-8"))
    return AliasIndex.from_dict(_unwrap(decoded))


def encode_alias_index(
    index: AliasIndex,
    *,
    codec: int = CODEC_CBOR,
    compression: int = COMPRESSION_GZIP,
) -> bytes:
    """Build a complete ``VT5BIN10`` file holding ``index`` in wrapped form."""

    wrapped = {"json": [index.to_dict()]}
    if codec == CODEC_CBOR:
        body = cbor2.dumps(wrapped)
    elif codec == CODEC_JSON:
        body = json.dumps(wrapped, ensure_ascii=False).encode("utf-8")
    else:
        raise ValueError(f"Unsupported codec: {codec}")

    if compression == COMPRESSION_GZIP:
        payload = gzip.compress(body, mtime=0)
    elif compression == COMPRESSION_NONE:
        payload = body
    else:
        raise ValueError(f"Unsupported compression: {compression}")

    head = _HEADER.pack(
        MAGIC,
        HEADER_VERSION,
        KIND_ALIAS_INDEX,
        codec,
        compression,
        0,
        len(payload),
        len(body),
        len(index.records),
        0,
    )
    crc = zlib.crc32(head[:_CRC_SPAN]) & 0xFFFF_FFFF
    return head[:_CRC_SPAN] + struct.pack("<I", crc) + payload


__all__ = [
    "VT5Header",
    "parse_header",
    "decode_alias_index",
    "encode_alias_index",
    "MAGIC",
    "HEADER_SIZE",
    "KIND_ALIAS_INDEX",
    "CODEC_JSON",
    "CODEC_CBOR",
    "COMPRESSION_NONE",
    "COMPRESSION_GZIP",
]
