"""
Pub File Parser
===============

This module decodes pub file bytes into a PubFile.

Decoding Steps
--------------
1. Check the 3-byte magic tag against the active schema. A mismatch
   rejects the whole file (FormatMismatchError).
2. Read the two checksum halves, the declared record count and the
   version byte. The checksum is exposed, not verified, unless the
   ``verify_checksum`` option is set.
3. For record 1..declared count, while bytes remain:
   - read one length byte and the text for every header string
   - a record named "eof" (any case) has no payload
   - otherwise read and decode the schema's fixed payload

Partial Files
-------------
Files in the wild are often hand-edited or written by tools that stop
early. When the buffer ends before the declared count, decoding stops,
any half-read record is dropped, and the result carries
``DecodeStatus.TRUNCATED``. Nothing is raised.

Usage Examples
--------------
    >>> from eopub.pub.parser import decode_pub
    >>> from eopub.pub.records import ItemRecord
    >>> from eopub.pub.schema import ITEM_SCHEMA
    >>> result = decode_pub(data, ITEM_SCHEMA, ItemRecord)
    >>> if result.is_complete:
    ...     for item in result.pub.entries():
    ...         print(item.record_id, item.name)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import logging

from eopub.config import PubConfig
from eopub.errors import FormatMismatchError, PubFormatError
from eopub.pub.crc import verify_pub_checksum
from eopub.pub.numbers import CHAR_SIZE, SHORT_SIZE, decode_number
from eopub.pub.records import PubFile, PubHeader, PubRecord, is_eof_name
from eopub.pub.schema import RecordSchema

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Byte Cursor
# =============================================================================

class PubReader:
    """
    Cursor over a pub buffer with pub-number reads.

    Reads past the end of the buffer raise EOFError; the record loop
    turns that into a TRUNCATED status.
    """

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes, offset: int = 0) -> None:
        self._data = bytes(data)
        self._pos = offset

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def read_bytes(self, size: int) -> bytes:
        if size > self.remaining:
            raise EOFError(
                f"Read of {size} bytes at offset {self._pos} "
                f"exceeds buffer length {len(self._data)}"
            )
        chunk = self._data[self._pos:self._pos + size]
        self._pos += size
        return chunk

    def read_number(self, width: int) -> int:
        return decode_number(self.read_bytes(width))

    def read_byte(self) -> int:
        return self.read_bytes(1)[0]

    def read_string(self, length: int, encoding: str = "utf-8") -> str:
        return self.read_bytes(length).decode(encoding, errors="replace")


# =============================================================================
# Decode Result
# =============================================================================

class DecodeStatus(Enum):
    """How far decoding got."""
    COMPLETE = "complete"     # every declared record was read
    TRUNCATED = "truncated"   # the buffer ended before the declared count


@dataclass
class DecodeResult:
    """
    Outcome of decoding one pub buffer.

    Attributes:
        pub: The decoded file (possibly holding fewer records than declared)
        status: COMPLETE or TRUNCATED
        bytes_consumed: Offset just past the last complete record
        trailing_bytes: Bytes left after the declared count was reached
        checksum_valid: Result of checksum verification, or None when not
            requested
        warnings: Human-readable notes about anomalies
    """
    pub: PubFile
    status: DecodeStatus = DecodeStatus.COMPLETE
    bytes_consumed: int = 0
    trailing_bytes: int = 0
    checksum_valid: Optional[bool] = None
    warnings: list[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.status is DecodeStatus.COMPLETE

    @property
    def records(self) -> list[PubRecord]:
        return self.pub.records


# =============================================================================
# Header
# =============================================================================

def read_header(data: bytes, schema: RecordSchema) -> PubHeader:
    """
    Parse and validate the 10-byte pub header.

    Args:
        data: Pub file bytes
        schema: The expected format

    Returns:
        The parsed header

    Raises:
        FormatMismatchError: If the magic tag is not ``schema.magic``
        PubFormatError: If the buffer is shorter than the header
    """
    magic = bytes(data[0:3])
    if magic != schema.magic.encode("ascii"):
        raise FormatMismatchError(schema.magic, magic)

    if len(data) < PubHeader.HEADER_SIZE:
        raise PubFormatError(
            f"Invalid {schema.magic} file: too small ({len(data)} bytes, "
            f"header needs {PubHeader.HEADER_SIZE})"
        )

    reader = PubReader(data, offset=3)
    return PubHeader(
        magic=schema.magic,
        checksum1=reader.read_number(SHORT_SIZE),
        checksum2=reader.read_number(SHORT_SIZE),
        declared_count=reader.read_number(SHORT_SIZE),
        version=reader.read_byte(),
    )


# =============================================================================
# Records
# =============================================================================

def _read_record(
    reader: PubReader,
    schema: RecordSchema,
    record_class: type[PubRecord],
    record_id: int,
    encoding: str,
) -> PubRecord:
    """Read one record at the cursor. Raises EOFError if the buffer ends inside it."""
    lengths = [reader.read_number(CHAR_SIZE) for _ in schema.text_fields]
    texts = [reader.read_string(length, encoding) for length in lengths]

    if is_eof_name(texts[0]):
        return record_class.from_values(texts, None, record_id=record_id)

    payload = reader.read_bytes(schema.data_size)
    values = schema.decode_payload(payload)
    return record_class.from_values(texts, values, record_id=record_id)


def decode_pub(
    data: bytes,
    schema: RecordSchema,
    record_class: type[PubRecord],
    config: Optional[PubConfig] = None,
) -> DecodeResult:
    """
    Decode a pub buffer.

    Args:
        data: Raw file bytes
        schema: Layout of the expected format
        record_class: Record type to build for each entry
        config: Codec options (defaults to PubConfig())

    Returns:
        DecodeResult with the decoded PubFile and its status

    Raises:
        FormatMismatchError: If the magic tag does not match the schema
        PubFormatError: If the buffer is shorter than the header
    """
    config = config or PubConfig()
    header = read_header(data, schema)

    pub = PubFile(
        magic=header.magic,
        checksum1=header.checksum1,
        checksum2=header.checksum2,
        declared_count=header.declared_count,
        version=header.version,
    )
    result = DecodeResult(pub=pub)

    reader = PubReader(data, offset=PubHeader.HEADER_SIZE)
    logger.debug(
        f"{schema.magic}: {header.declared_count} records declared, "
        f"version {header.version}, {len(data)} bytes"
    )

    consumed = reader.position
    for record_id in range(1, header.declared_count + 1):
        if reader.remaining <= 0:
            result.status = DecodeStatus.TRUNCATED
            result.warnings.append(
                f"Buffer ended after {record_id - 1} of "
                f"{header.declared_count} declared records"
            )
            break

        start = reader.position
        try:
            record = _read_record(reader, schema, record_class, record_id, config.encoding)
        except EOFError:
            result.status = DecodeStatus.TRUNCATED
            result.warnings.append(
                f"Record {record_id} at offset {start} is incomplete; "
                f"kept {record_id - 1} of {header.declared_count} declared records"
            )
            break

        pub.records.append(record)
        consumed = reader.position
        logger.debug(f"Parsed {schema.kind} {record_id} '{record.name}' at offset {start}")

    result.bytes_consumed = consumed
    result.trailing_bytes = len(data) - result.bytes_consumed if result.is_complete else 0

    if result.trailing_bytes:
        result.warnings.append(
            f"{result.trailing_bytes} bytes after the last declared record"
        )

    if config.verify_checksum:
        result.checksum_valid = verify_pub_checksum(data)
        if not result.checksum_valid:
            result.warnings.append(
                f"Checksum mismatch: stored {header.checksum1}/{header.checksum2}"
            )

    for warning in result.warnings:
        logger.warning(f"{schema.magic}: {warning}")

    return result

