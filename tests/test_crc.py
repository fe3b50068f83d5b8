"""
CRC-32 Tests
============

Tests for the checksum engine and the pub header checksum.
"""

import pytest

from eopub.pub.crc import (
    CRC32_TABLE,
    REFERENCE_CRC_VALUES,
    crc32,
    crc32_bitwise,
    encode_checksum,
    patch_pub_checksum,
    pub_checksum,
    verify_pub_checksum,
)
from eopub.pub.numbers import INT_MAX, decode_number


class TestCRC32:
    """Tests for the CRC-32 algorithm."""

    def test_empty(self):
        """CRC-32 of no bytes is 0."""
        assert crc32(b"") == 0x00000000
        assert crc32_bitwise(b"") == 0x00000000

    def test_abc(self):
        """Standard reference value for "abc"."""
        assert crc32(bytes([97, 98, 99])) == 0x352441C2

    def test_check_value(self):
        """The CRC-32 check value for "123456789"."""
        assert crc32(b"123456789") == 0xCBF43926

    @pytest.mark.parametrize("data,expected", list(REFERENCE_CRC_VALUES.items()))
    def test_reference_values(self, data, expected):
        """Both implementations match every reference value."""
        assert crc32(data) == expected
        assert crc32_bitwise(data) == expected

    def test_table_matches_bitwise(self):
        """Table lookup and bit-serial agree on arbitrary data."""
        data = bytes(range(256)) * 3
        assert crc32(data) == crc32_bitwise(data)

    def test_table_shape(self):
        assert len(CRC32_TABLE) == 256
        assert CRC32_TABLE[0] == 0
        assert CRC32_TABLE[1] == 0x77073096


class TestPubChecksum:
    """Tests for the self-including header checksum."""

    def test_placeholder_is_used(self):
        """The stored checksum bytes do not affect the computed value."""
        body = b"EIF" + bytes([9, 9, 9, 9]) + b"\x01\x01\x01"
        other = b"EIF" + bytes([3, 3, 3, 3]) + b"\x01\x01\x01"
        expected = crc32(b"EIF" + bytes([254] * 4) + b"\x01\x01\x01")
        assert pub_checksum(body) == expected
        assert pub_checksum(other) == expected

    def test_patch_and_verify(self):
        """A patched buffer verifies; a modified one does not."""
        buffer = bytearray(b"EIF" + bytes([254] * 4) + b"\x01\x01\x01" + b"\x02abc")
        crc = patch_pub_checksum(buffer)
        assert bytes(buffer[3:7]) == encode_checksum(crc)
        assert verify_pub_checksum(bytes(buffer)) is True

        buffer[-1] = ord("x")
        assert verify_pub_checksum(bytes(buffer)) is False

    def test_halves_compose_the_crc(self):
        """The two 2-byte halves read on decode combine to the wrapped CRC."""
        buffer = bytearray(b"ENF" + bytes([254] * 4) + b"\x01\x01\x01")
        crc = patch_pub_checksum(buffer)
        low = decode_number(buffer[3:5])
        high = decode_number(buffer[5:7])
        assert low + high * 253 ** 2 == crc % INT_MAX

    def test_too_short(self):
        with pytest.raises(ValueError):
            pub_checksum(b"EIF")
        assert verify_pub_checksum(b"EIF") is None
