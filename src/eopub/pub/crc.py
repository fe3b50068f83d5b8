"""
CRC-32 Implementation for Pub Files
===================================

This module implements the CRC-32 checksum stored in the header of every
pub file.

Technical Details
-----------------
- Polynomial: 0xEDB88320 (reflected 0x04C11DB7), bits processed LSB first
- Initial value: 0xFFFFFFFF
- Final XOR: 0xFFFFFFFF

Two implementations are provided: ``crc32_bitwise()`` shifts one bit at a
time and serves as the reference, ``crc32()`` uses a 256-entry lookup
table and produces identical results.

Pub Header Checksum
-------------------
Writers fill the 4 checksum bytes (offsets 3-6) with the placeholder
``FE FE FE FE``, compute the CRC over the whole file *including* that
placeholder, encode the CRC as a 4-byte pub number and write it over the
placeholder. ``pub_checksum()`` reproduces that sequence so a stored
checksum can be verified.

Usage
-----
    from eopub.pub.crc import crc32

    checksum = crc32(b"abc")  # Returns 0x352441C2
"""

from typing import Final, Optional

from eopub.pub.numbers import FILL_BYTE, INT_MAX, INT_SIZE, encode_number

# =============================================================================
# CRC-32 Constants
# =============================================================================

CRC32_POLYNOMIAL: Final[int] = 0xEDB88320
CRC32_INITIAL: Final[int] = 0xFFFFFFFF
CRC32_MASK: Final[int] = 0xFFFFFFFF

# Position of the checksum field inside the pub header
CHECKSUM_OFFSET: Final[int] = 3
CHECKSUM_SIZE: Final[int] = 4


# =============================================================================
# Reference Implementation (bit-serial)
# =============================================================================

def crc32_bitwise(data: bytes) -> int:
    """
    Calculate CRC-32 one bit at a time.

    Args:
        data: Input bytes

    Returns:
        32-bit CRC value

    Example:
        >>> hex(crc32_bitwise(b"abc"))
        '0x352441c2'
    """
    crc = CRC32_INITIAL
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ CRC32_POLYNOMIAL
            else:
                crc >>= 1
    return (crc ^ CRC32_MASK) & CRC32_MASK


# =============================================================================
# Lookup Table Generation
# =============================================================================

def _generate_crc_table() -> tuple[int, ...]:
    """
    Generate the 256-entry CRC-32 lookup table.

    Each entry is the register value after shifting one byte value through
    the eight polynomial steps of the bit-serial algorithm.
    """
    table = []
    for byte_val in range(256):
        crc = byte_val
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ CRC32_POLYNOMIAL
            else:
                crc >>= 1
        table.append(crc)
    return tuple(table)


# Pre-computed CRC lookup table - generated once at import time
CRC32_TABLE: Final[tuple[int, ...]] = _generate_crc_table()


# =============================================================================
# Fast Implementation (table lookup)
# =============================================================================

def crc32(data: bytes) -> int:
    """
    Calculate CRC-32 using table lookup.

    Produces the same result as crc32_bitwise() for every input.

    Args:
        data: Input bytes

    Returns:
        32-bit CRC value

    Example:
        >>> crc32(b"")
        0
        >>> hex(crc32(b"123456789"))
        '0xcbf43926'
    """
    crc = CRC32_INITIAL
    for byte in data:
        crc = CRC32_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return (crc ^ CRC32_MASK) & CRC32_MASK


# =============================================================================
# Pub Header Checksum
# =============================================================================

def pub_checksum(data: bytes) -> int:
    """
    Calculate the checksum a writer would store for a pub file.

    The checksum field (bytes 3-6) is replaced with the ``FE FE FE FE``
    placeholder before the CRC is taken over the complete buffer.

    Args:
        data: Complete pub file bytes (at least the 10-byte header)

    Returns:
        32-bit CRC value

    Raises:
        ValueError: If data is shorter than the checksum field
    """
    end = CHECKSUM_OFFSET + CHECKSUM_SIZE
    if len(data) < end:
        raise ValueError(f"Pub data too short for checksum: {len(data)} bytes")

    buffer = bytearray(data)
    buffer[CHECKSUM_OFFSET:end] = bytes([FILL_BYTE] * CHECKSUM_SIZE)
    return crc32(bytes(buffer))


def encode_checksum(crc: int) -> bytes:
    """
    Encode a CRC value as the 4-byte header field.

    CRC values above the 4-byte range (253**4 - 1) wrap, as they do in
    every existing writer.
    """
    return encode_number(crc % INT_MAX, INT_SIZE, field="checksum")


def patch_pub_checksum(buffer: bytearray) -> int:
    """
    Compute and write the header checksum in place.

    The buffer must already hold the placeholder in bytes 3-6.

    Args:
        buffer: Assembled pub file bytes

    Returns:
        The CRC value that was written
    """
    crc = crc32(bytes(buffer))
    buffer[CHECKSUM_OFFSET:CHECKSUM_OFFSET + CHECKSUM_SIZE] = encode_checksum(crc)
    return crc


def verify_pub_checksum(data: bytes) -> Optional[bool]:
    """
    Check a stored pub checksum against the file contents.

    Args:
        data: Complete pub file bytes

    Returns:
        True or False, or None if the buffer is too short to hold a checksum
    """
    end = CHECKSUM_OFFSET + CHECKSUM_SIZE
    if len(data) < end:
        return None
    expected = encode_checksum(pub_checksum(data))
    return bytes(data[CHECKSUM_OFFSET:end]) == expected


# =============================================================================
# Reference Values for Testing
# =============================================================================

REFERENCE_CRC_VALUES: Final[dict[bytes, int]] = {
    b"": 0x00000000,
    b"a": 0xE8B7BE43,
    b"abc": 0x352441C2,
    b"123456789": 0xCBF43926,
    b"The quick brown fox jumps over the lazy dog": 0x414FA339,
}
