"""
eopub Error Hierarchy
=====================

This module defines the exception hierarchy for the pub file codec.
All exceptions inherit from PubError, allowing callers to catch every
codec-related error with a single except clause if desired.

Exception Hierarchy
-------------------
PubError (base)
├── PubFormatError - structurally invalid input
│   └── FormatMismatchError - magic tag does not match the active format
├── PubEncodeError - a record collection cannot be serialized
│   └── FieldOverflowError - value does not fit its encoded width
└── UnknownFormatError - no catalog entry for a kind, magic or extension

Recoverable Conditions
----------------------
A buffer that ends before its declared record count is NOT an error. The
decoder stops, keeps every complete record and reports the condition
through ``DecodeResult.status``. Only conditions that make the whole file
unusable are raised.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class PubError(Exception):
    """
    Base exception for all eopub errors.

        try:
            result = ITEM_FORMAT.decode(data)
        except PubError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Decode Errors
# =============================================================================

class PubFormatError(PubError):
    """
    Invalid pub file structure.

    Raised when reading a buffer that:
    - Is shorter than the 10-byte container header
    - Uses a schema whose fields do not fit its payload
    """
    pass


class FormatMismatchError(PubFormatError):
    """
    The magic tag does not match the format being decoded.

    The whole file is rejected; no partial result is produced.

    Attributes:
        expected: The magic tag of the active format (e.g. "EIF")
        actual: The three bytes found at the start of the buffer
    """

    def __init__(self, expected: str, actual: bytes):
        self.expected = expected
        self.actual = actual
        found = actual.decode("ascii", errors="replace")
        super().__init__(
            f"Invalid file type: expected {expected}, got {found!r}"
        )


# =============================================================================
# Encode Errors
# =============================================================================

class PubEncodeError(PubError):
    """
    A record collection cannot be serialized.

    Examples:
        - The eof sentinel is not the last record
        - The version byte is outside 0-255
    """
    pass


class FieldOverflowError(PubEncodeError):
    """
    A value does not fit the width of its encoded field.

    Raised for negative values, for names longer than a 1-byte length
    field allows, and for any oversized value when the overflow policy is
    STRICT.

    Attributes:
        field: Field name (or "name", "record count")
        value: The rejected value
        width: Encoded width in bytes
    """

    def __init__(
        self,
        field: str,
        value: int,
        width: int,
        record_name: Optional[str] = None,
    ):
        self.field = field
        self.value = value
        self.width = width
        self.record_name = record_name
        limit = 253 ** width - 1
        where = f" in record '{record_name}'" if record_name else ""
        super().__init__(
            f"value {value} for field '{field}'{where} does not fit "
            f"{width} byte(s) (0-{limit})"
        )


# =============================================================================
# Catalog Errors
# =============================================================================

class UnknownFormatError(PubError):
    """No schema is registered for the requested kind, magic tag or file."""
    pass
