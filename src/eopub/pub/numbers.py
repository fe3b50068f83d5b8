"""
Pub Number Encoding
===================

Integers in pub files are stored as fixed-width sequences of "safe"
bytes: a positional base-253 numeral with the least significant digit
first. Each stored byte holds ``digit + 1``, so the byte 0x00 never
appears inside a numeric field and stays free for use as a terminator.

Widths
------
    Name    Bytes   Largest value
    ----    -----   -------------
    char    1       252
    short   2       64,008
    three   3       16,194,276
    int     4       4,097,152,080

Byte Remapping
--------------
Decoding first maps 254 to 1 and only then maps 0 to 254, before taking
``digit = byte - 1``. Encoding maps a stored 0 to 254, a branch that
cannot fire for digits in 0..252. Both remaps are kept exactly as the
file format's existing readers and writers perform them.

Overflow
--------
Digit extraction only looks at the lowest ``width`` digits, so a value
that is too large wraps modulo ``253 ** width``. This is the default
(``OverflowPolicy.WRAP``) and only ever affects the field's own bytes.
``OverflowPolicy.STRICT`` raises FieldOverflowError instead. Negative
values are always rejected.

Usage
-----
    >>> encode_number(1, 2)
    b'\\x02\\x01'
    >>> decode_number(b'\\x02\\x01')
    1
"""

from enum import Enum
from typing import Final, Iterable, Optional, Union
import logging

from eopub.errors import FieldOverflowError

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

BASE: Final[int] = 253

CHAR_SIZE: Final[int] = 1
SHORT_SIZE: Final[int] = 2
THREE_SIZE: Final[int] = 3
INT_SIZE: Final[int] = 4

# Exclusive upper bounds for each width
CHAR_MAX: Final[int] = BASE
SHORT_MAX: Final[int] = BASE ** 2
THREE_MAX: Final[int] = BASE ** 3
INT_MAX: Final[int] = BASE ** 4

# Byte written for unused payload positions and the checksum placeholder
FILL_BYTE: Final[int] = 254


class OverflowPolicy(Enum):
    """What to do with a value that does not fit its field width."""
    WRAP = "wrap"       # keep the lowest digits (value mod 253**width)
    STRICT = "strict"   # raise FieldOverflowError

    @classmethod
    def from_name(cls, name: str) -> "OverflowPolicy":
        """Look up a policy by case-insensitive name."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(
                f"Invalid overflow policy '{name}'. Choose from: wrap, strict"
            ) from None


# =============================================================================
# Helpers
# =============================================================================

def max_value(width: int) -> int:
    """
    Largest value representable in ``width`` bytes.

    Args:
        width: Field width in bytes (1 or more)

    Returns:
        ``253 ** width - 1``
    """
    if width < 1:
        raise ValueError(f"Field width must be at least 1, got {width}")
    return BASE ** width - 1


def fits(value: int, width: int) -> bool:
    """Check whether a value can be stored in ``width`` bytes without wrapping."""
    return 0 <= value <= max_value(width)


# =============================================================================
# Decoding
# =============================================================================

def decode_number(data: Union[bytes, bytearray, Iterable[int], int]) -> int:
    """
    Decode a base-253 number.

    Args:
        data: The stored bytes, least significant digit first. A single
              int is treated as a one-byte field.

    Returns:
        The decoded unsigned integer

    Example:
        >>> decode_number(bytes([1, 1]))
        0
        >>> decode_number(bytes([253]))
        252
        >>> decode_number(bytes([254]))
        0
    """
    if isinstance(data, int):
        data = (data,)

    result = 0
    multiplier = 1
    for byte in data:
        if byte == 254:
            byte = 1
        if byte == 0:
            byte = 254
        result += (byte - 1) * multiplier
        multiplier *= BASE
    return result


# =============================================================================
# Encoding
# =============================================================================

def encode_number(
    value: int,
    width: int,
    overflow: OverflowPolicy = OverflowPolicy.WRAP,
    field: Optional[str] = None,
) -> bytes:
    """
    Encode an unsigned integer into ``width`` base-253 bytes.

    Args:
        value: The value to encode (must not be negative)
        width: Number of bytes to produce
        overflow: Policy for values above ``max_value(width)``
        field: Field name, used in error and log messages

    Returns:
        Exactly ``width`` bytes, none of them 0x00

    Raises:
        FieldOverflowError: If the value is negative, or too large under
            ``OverflowPolicy.STRICT``

    Example:
        >>> encode_number(0, 2)
        b'\\x01\\x01'
        >>> encode_number(253, 2)
        b'\\x01\\x02'
    """
    if width < 1:
        raise ValueError(f"Field width must be at least 1, got {width}")

    value = int(value)
    name = field or "value"
    if value < 0:
        raise FieldOverflowError(name, value, width)

    if value > max_value(width):
        if overflow is OverflowPolicy.STRICT:
            raise FieldOverflowError(name, value, width)
        logger.warning(
            f"Value {value} for '{name}' exceeds {width}-byte range; "
            f"storing {value % BASE ** width}"
        )

    result = bytearray([FILL_BYTE] * width)
    remaining = value
    for i in range(width):
        result[i] = remaining % BASE + 1
        remaining //= BASE

    for i in range(width):
        if result[i] == 0:
            result[i] = FILL_BYTE

    return bytes(result)
