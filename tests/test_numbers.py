"""
Pub Number Codec Tests
======================

Tests for the base-253 integer encoding used by every numeric field.

Test Categories
---------------
1. Known vectors: specific values and their stored bytes
2. Round trip: boundaries of each width
3. Byte remapping on decode
4. Overflow policies
"""

import logging

import pytest

from eopub.errors import FieldOverflowError
from eopub.pub.numbers import (
    BASE,
    CHAR_MAX,
    INT_MAX,
    SHORT_MAX,
    THREE_MAX,
    OverflowPolicy,
    decode_number,
    encode_number,
    fits,
    max_value,
)


# =============================================================================
# Known Vectors
# =============================================================================

class TestKnownVectors:
    """Stored bytes for specific values."""

    def test_zero(self):
        """Zero is stored as digit 0 (byte 1) in every position."""
        assert encode_number(0, 2) == b"\x01\x01"
        assert decode_number(b"\x01\x01") == 0

    def test_char_max(self):
        """252 is the largest 1-byte value."""
        assert encode_number(252, 1) == b"\xfd"
        assert decode_number(b"\xfd") == 252

    def test_short_max(self):
        """253**2 - 1 fills both positions with digit 252."""
        assert encode_number(BASE ** 2 - 1, 2) == b"\xfd\xfd"
        assert decode_number(b"\xfd\xfd") == BASE ** 2 - 1

    def test_least_significant_digit_first(self):
        """253 carries into the second byte."""
        assert encode_number(253, 2) == b"\x01\x02"
        assert encode_number(1, 2) == b"\x02\x01"

    def test_never_emits_zero_byte(self):
        """No encoded byte is 0x00."""
        for value in (0, 1, 252, 253, 64008, 16194276, 4097152080):
            assert 0 not in encode_number(value, 4)

    def test_single_int_argument(self):
        """A bare int is decoded as a one-byte field."""
        assert decode_number(11) == 10

    def test_constants(self):
        """Exclusive bounds for each width."""
        assert CHAR_MAX == 253
        assert SHORT_MAX == 64009
        assert THREE_MAX == 16194277
        assert INT_MAX == 4097152081


# =============================================================================
# Round Trip
# =============================================================================

class TestRoundTrip:
    """decode(encode(v, w)) == v for values that fit."""

    @pytest.mark.parametrize("width", [1, 2, 3, 4])
    def test_boundaries(self, width):
        """Zero, one, the largest value and a digit boundary survive."""
        top = max_value(width)
        for value in {0, 1, 252, min(253, top), top // 2, top}:
            if value <= top:
                assert decode_number(encode_number(value, width)) == value

    def test_output_length_matches_width(self):
        """Encoding always yields exactly ``width`` bytes."""
        for width in (1, 2, 3, 4):
            assert len(encode_number(7, width)) == width


# =============================================================================
# Decode Remapping
# =============================================================================

class TestDecodeRemap:
    """Bytes 254 and 0 are remapped before taking the digit."""

    def test_254_reads_as_zero(self):
        """Filler bytes decode as 0."""
        assert decode_number(b"\xfe") == 0
        assert decode_number(b"\xfe\xfe\xfe\xfe") == 0

    def test_zero_byte_reads_as_253(self):
        """A stored 0 becomes 254 and then digit 253."""
        assert decode_number(b"\x00") == 253

    def test_remap_applies_per_position(self):
        """Remapping is done for each byte independently."""
        assert decode_number(b"\x02\xfe") == 1


# =============================================================================
# Overflow
# =============================================================================

class TestOverflow:
    """Values that do not fit their width."""

    def test_wrap_is_default(self, caplog):
        """WRAP stores value mod 253**width and logs a warning."""
        with caplog.at_level(logging.WARNING, logger="eopub.pub.numbers"):
            data = encode_number(253, 1, field="weight")
        assert decode_number(data) == 0
        assert "weight" in caplog.text

    def test_wrap_only_touches_own_bytes(self):
        """A wrapped value still produces exactly ``width`` bytes."""
        assert len(encode_number(BASE ** 3 + 5, 2)) == 2
        assert decode_number(encode_number(BASE ** 3 + 5, 2)) == 5

    def test_strict_raises(self):
        """STRICT rejects oversized values."""
        with pytest.raises(FieldOverflowError) as exc_info:
            encode_number(253, 1, OverflowPolicy.STRICT, field="weight")
        assert exc_info.value.field == "weight"
        assert exc_info.value.width == 1

    def test_negative_always_raises(self):
        """Negative values are rejected under either policy."""
        with pytest.raises(FieldOverflowError):
            encode_number(-1, 2)
        with pytest.raises(FieldOverflowError):
            encode_number(-1, 2, OverflowPolicy.STRICT)

    def test_fits(self):
        assert fits(252, 1)
        assert not fits(253, 1)
        assert not fits(-1, 4)

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            encode_number(1, 0)

    def test_policy_from_name(self):
        """Policy names are case-insensitive."""
        assert OverflowPolicy.from_name("STRICT") is OverflowPolicy.STRICT
        assert OverflowPolicy.from_name(" wrap ") is OverflowPolicy.WRAP
        with pytest.raises(ValueError):
            OverflowPolicy.from_name("clamp")
