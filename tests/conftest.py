"""
Shared fixtures for the eopub test suite.

Buffers built here are assembled byte by byte, without the encoder, so
decoder tests do not depend on the code they check.
"""

import pytest

from eopub.pub.numbers import encode_number


def raw_record(name: str, payload_size: int = 0, fill: int = 1, chant: str = None) -> bytes:
    """One record: length byte(s), text(s), then ``payload_size`` bytes of ``fill``."""
    name_bytes = name.encode("utf-8")
    out = bytes([len(name_bytes) + 1])
    if chant is not None:
        out += bytes([len(chant.encode("utf-8")) + 1])
    out += name_bytes
    if chant is not None:
        out += chant.encode("utf-8")
    return out + bytes([fill] * payload_size)


def raw_pub(magic: bytes, count: int, records: bytes, version: int = 1) -> bytes:
    """A header with a placeholder checksum followed by ``records``."""
    return magic + bytes([1, 1, 1, 1]) + encode_number(count, 2) + bytes([version]) + records


@pytest.fixture
def sword_buffer() -> bytes:
    """
    EIF file with two records: "Sword" and the eof sentinel.

    Every payload byte is 1 (digit 0) except graphic, type and max_damage.
    """
    payload = bytearray([1] * 58)
    payload[0:2] = encode_number(12, 2)      # graphic
    payload[2] = 10                          # type 9 (weapon)
    payload[11:13] = encode_number(14, 2)    # max_damage
    records = raw_record("Sword") + bytes(payload) + raw_record("eof")
    return raw_pub(b"EIF", 2, records)


@pytest.fixture
def truncated_buffer() -> bytes:
    """EIF file declaring 10 records but holding only 3 complete ones."""
    records = b"".join(raw_record(f"Item{i}", 58) for i in range(3))
    return raw_pub(b"EIF", 10, records)
