import gzip

import cbor2
import pytest

from alias_resolver.codecs import cbor_gz


def test_encoded_cache_is_gzipped_cbor(sample_master):
    index = sample_master.to_alias_index()
    data = cbor_gz.encode_index(index)

    assert data[:2] == b"\x1f\x8b"
    assert cbor2.loads(gzip.decompress(data))["json"][0]["aliasid"] == "20_1"
    assert cbor_gz.decode_index(data) == index


def test_decode_rejects_empty():
    with pytest.raises(ValueError):
        cbor_gz.decode_index(b"")


def test_decode_rejects_non_gzip():
    with pytest.raises(ValueError, match="gzip"):
        cbor_gz.decode_index(b"definitely not gzip")


def test_decode_rejects_wrong_shape():
    with pytest.raises(ValueError):
        cbor_gz.decode_index(gzip.compress(cbor2.dumps({"timestamp": "t"})))


def test_decode_rejects_corrupt_deflate_body(sample_master):
    data = bytearray(cbor_gz.encode_index(sample_master.to_alias_index()))
    # First deflate block header after the 10-byte gzip header; 0xFF is a reserved block type.
    data[10] = 0xFF

    with pytest.raises(ValueError, match="gzip"):
        cbor_gz.decode_index(bytes(data))
