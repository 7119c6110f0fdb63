import gzip
import json
import struct
import zlib

import cbor2
import pytest

from alias_resolver.codecs import vt5bin


def _rebuild_header(data: bytes, **overrides) -> bytes:
    fields = list(struct.unpack("<8sHHBBHQQII", data[:40]))
    names = [
        "magic", "header_version", "dataset_kind", "codec", "compression",
        "reserved", "payload_len", "uncompressed_len", "record_count", "header_crc32",
    ]
    for key, value in overrides.items():
        fields[names.index(key)] = value
    head = struct.pack("<8sHHBBHQQII", *fields)
    crc = zlib.crc32(head[:36]) & 0xFFFFFFFF
    return head[:36] + struct.pack("<I", crc) + data[40:]


def _raw_file(body: bytes, *, codec: int, compression: int = vt5bin.COMPRESSION_NONE) -> bytes:
    payload = gzip.compress(body) if compression == vt5bin.COMPRESSION_GZIP else body
    head = struct.pack(
        "<8sHHBBHQQII", b"VT5BIN10", 1, 100, codec, compression, 0, len(payload), len(body), 0xFFFFFFFF, 0
    )
    crc = zlib.crc32(head[:36]) & 0xFFFFFFFF
    return head[:36] + struct.pack("<I", crc) + payload


def test_header_layout(sample_master):
    data = vt5bin.encode_alias_index(sample_master.to_alias_index())
    header = vt5bin.parse_header(data)

    assert header.magic == b"VT5BIN10"
    assert header.header_version == 1
    assert header.dataset_kind == 100
    assert header.codec == vt5bin.CODEC_CBOR
    assert header.compression == vt5bin.COMPRESSION_GZIP
    assert header.payload_len == len(data) - vt5bin.HEADER_SIZE
    assert header.record_count == 4


@pytest.mark.parametrize("codec", [vt5bin.CODEC_CBOR, vt5bin.CODEC_JSON])
@pytest.mark.parametrize("compression", [vt5bin.COMPRESSION_GZIP, vt5bin.COMPRESSION_NONE])
def test_decode_supported_codecs(sample_master, codec, compression):
    index = sample_master.to_alias_index()
    data = vt5bin.encode_alias_index(index, codec=codec, compression=compression)

    assert vt5bin.decode_alias_index(data) == index


def test_decode_accepts_list_and_single_payloads(sample_master):
    index = sample_master.to_alias_index()

    as_list = _raw_file(json.dumps([index.to_dict()]).encode(), codec=vt5bin.CODEC_JSON)
    as_single = _raw_file(cbor2.dumps(index.to_dict()), codec=vt5bin.CODEC_CBOR, compression=vt5bin.COMPRESSION_GZIP)

    assert vt5bin.decode_alias_index(as_list) == index
    assert vt5bin.decode_alias_index(as_single) == index


def test_crc_mismatch_rejected(sample_master):
    data = bytearray(vt5bin.encode_alias_index(sample_master.to_alias_index()))
    data[36] ^= 0xFF

    with pytest.raises(ValueError, match="CRC"):
        vt5bin.parse_header(bytes(data))


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"magic": b"VT5BIN09"}, "magic"),
        ({"header_version": 0}, "version"),
        ({"dataset_kind": 1}, "kind"),
        ({"codec": 7}, "codec"),
        ({"compression": 3}, "compression"),
    ],
)
def test_header_fields_validated(sample_master, overrides, message):
    data = _rebuild_header(vt5bin.encode_alias_index(sample_master.to_alias_index()), **overrides)

    with pytest.raises(ValueError, match=message):
        vt5bin.decode_alias_index(data)


def test_truncated_inputs_rejected(sample_master):
    data = vt5bin.encode_alias_index(sample_master.to_alias_index())

    with pytest.raises(ValueError, match="header truncated"):
        vt5bin.decode_alias_index(data[:20])
    with pytest.raises(ValueError, match="payload truncated"):
        vt5bin.decode_alias_index(data[:-5])


def test_empty_wrapped_payload_rejected():
    data = _raw_file(json.dumps({"json": []}).encode(), codec=vt5bin.CODEC_JSON)

    with pytest.raises(ValueError):
        vt5bin.decode_alias_index(data)


def test_corrupt_deflate_payload_rejected(sample_master):
    data = bytearray(vt5bin.encode_alias_index(sample_master.to_alias_index()))
    # Valid gzip header, reserved deflate block type right after it.
    data[vt5bin.HEADER_SIZE + 10] = 0xFF

    with pytest.raises(ValueError, match="gzip payload is corrupt"):
        vt5bin.decode_alias_index(bytes(data))


def test_wrapper_with_its_own_keys_is_unwrapped(sample_master):
    index = sample_master.to_alias_index()
    wrapped = {"timestamp": "2025-11-01T00:00:00Z", "generator": "export", "json": [index.to_dict()]}

    for codec, body in (
        (vt5bin.CODEC_JSON, json.dumps(wrapped).encode()),
        (vt5bin.CODEC_CBOR, cbor2.dumps(wrapped)),
    ):
        assert vt5bin.decode_alias_index(_raw_file(body, codec=codec)) == index


def test_bare_index_is_not_mistaken_for_wrapper(sample_master):
    index = sample_master.to_alias_index()
    data = _raw_file(json.dumps(index.to_dict()).encode(), codec=vt5bin.CODEC_JSON)

    assert vt5bin.decode_alias_index(data) == index
