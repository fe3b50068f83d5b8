"""
Pub File Builder
================

This module serializes record collections to pub file bytes.

Encoding Steps
--------------
1. Header: magic tag, ``FE FE FE FE`` checksum placeholder, the record
   count as a 2-byte pub number and the version byte.
2. Each record: one length byte plus the text for every header string,
   then (unless the record is the eof sentinel) the fixed payload.
3. The CRC-32 of the assembled buffer is encoded as a 4-byte pub number
   and written over the placeholder.

Usage
-----
    >>> from eopub.pub.builder import PubBuilder
    >>> from eopub.pub.records import ItemRecord
    >>> from eopub.pub.schema import ITEM_SCHEMA
    >>> builder = PubBuilder(ITEM_SCHEMA, ItemRecord)
    >>> builder.add_record(ItemRecord(name="Sword", type=10))
    >>> builder.add_eof()
    >>> data = builder.build()
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union
import logging

from eopub.config import PubConfig
from eopub.errors import FieldOverflowError, PubEncodeError
from eopub.pub.crc import CHECKSUM_SIZE, patch_pub_checksum
from eopub.pub.numbers import (
    CHAR_SIZE,
    FILL_BYTE,
    SHORT_SIZE,
    OverflowPolicy,
    encode_number,
    max_value,
)
from eopub.pub.records import PubFile, PubRecord
from eopub.pub.schema import RecordSchema

# Logger for this module
logger = logging.getLogger(__name__)


# =============================================================================
# Validation
# =============================================================================

def _check_records(records: list[PubRecord]) -> None:
    """The eof sentinel may only appear as the last record."""
    for index, record in enumerate(records[:-1], start=1):
        if record.is_eof:
            raise PubEncodeError(
                f"eof sentinel at position {index} of {len(records)}; "
                f"it must be the last record"
            )

    if len(records) > max_value(SHORT_SIZE):
        raise FieldOverflowError("record count", len(records), SHORT_SIZE)


def _encode_text(text: str, field_name: str, encoding: str) -> bytes:
    """Length byte followed by the text bytes."""
    raw = text.encode(encoding)
    if len(raw) > max_value(CHAR_SIZE):
        raise FieldOverflowError(field_name, len(raw), CHAR_SIZE, record_name=text[:32])
    return encode_number(len(raw), CHAR_SIZE, field=f"{field_name} length") + raw


def encode_record(
    record: PubRecord,
    schema: RecordSchema,
    config: Optional[PubConfig] = None,
) -> bytes:
    """
    Serialize one record (header strings plus payload).

    Args:
        record: The record to encode
        schema: Layout of the target format
        config: Codec options

    Returns:
        Encoded record bytes
    """
    config = config or PubConfig()
    texts = [getattr(record, name, "") or "" for name in schema.text_fields]

    lengths = bytearray()
    body = bytearray()
    for name, text in zip(schema.text_fields, texts):
        encoded = _encode_text(text, name, config.encoding)
        lengths += encoded[:CHAR_SIZE]
        body += encoded[CHAR_SIZE:]

    out = bytes(lengths) + bytes(body)
    if record.is_eof:
        return out

    values = {name: getattr(record, name, 0) for name in schema.field_names()}
    return out + schema.encode_payload(values, config.overflow, record_name=record.name)


# =============================================================================
# Container Encoding
# =============================================================================

def encode_pub(
    pub: PubFile,
    schema: RecordSchema,
    config: Optional[PubConfig] = None,
) -> bytes:
    """
    Serialize a PubFile.

    The stored count is the number of records in ``pub.records`` (the
    sentinel included); ``pub.declared_count`` is ignored.

    Args:
        pub: The file to encode
        schema: Layout of the target format
        config: Codec options

    Returns:
        Complete pub file bytes with the checksum patched in

    Raises:
        PubEncodeError: If the sentinel is misplaced or the version byte
            is out of range
        FieldOverflowError: If a name is too long, the record count does
            not fit, or a value overflows under STRICT
    """
    config = config or PubConfig()
    records = list(pub.records)
    _check_records(records)

    if not 0 <= pub.version <= 255:
        raise PubEncodeError(f"Version byte must be 0-255, got {pub.version}")

    buffer = bytearray(schema.magic.encode("ascii"))
    buffer += bytes([FILL_BYTE] * CHECKSUM_SIZE)
    buffer += encode_number(len(records), SHORT_SIZE, field="record count")
    buffer.append(pub.version)

    for index, record in enumerate(records, start=1):
        buffer += encode_record(record, schema, config)
        logger.debug(f"Encoded {schema.kind} {index} '{record.name}'")

    crc = patch_pub_checksum(buffer)
    logger.debug(f"{schema.magic}: checksum 0x{crc:08X}")
    return bytes(buffer)


# =============================================================================
# Builder
# =============================================================================

@dataclass
class PubBuilder:
    """
    Assembles a pub file record by record.

    Attributes:
        schema: Layout of the target format
        record_class: Record type used for the eof sentinel
        version: Version byte for the header
        config: Codec options

    Example:
        >>> builder = PubBuilder(NPC_SCHEMA, NpcRecord)
        >>> builder.add_record(NpcRecord(name="Crow", hp=10)).add_eof()
        >>> Path("dtn001.enf").write_bytes(builder.build())
    """
    schema: RecordSchema
    record_class: type[PubRecord]
    version: int = 1
    config: PubConfig = field(default_factory=PubConfig)

    # Records in file order
    _records: list[PubRecord] = field(default_factory=list, repr=False)

    # =========================================================================
    # Adding Records
    # =========================================================================

    def add_record(self, record: PubRecord) -> "PubBuilder":
        """
        Append a record.

        Returns:
            Self for method chaining

        Raises:
            PubEncodeError: If the file already ends with the eof sentinel
        """
        if self._records and self._records[-1].is_eof:
            raise PubEncodeError(f"Cannot add '{record.name}' after the eof sentinel")
        record.record_id = len(self._records) + 1
        self._records.append(record)
        logger.debug(f"Added {self.schema.kind} '{record.name}'")
        return self

    def add_records(self, records) -> "PubBuilder":
        for record in records:
            self.add_record(record)
        return self

    def add_eof(self) -> "PubBuilder":
        """Append the eof sentinel."""
        return self.add_record(self.record_class.eof())

    def clear(self) -> "PubBuilder":
        """Remove all records."""
        self._records.clear()
        return self

    # =========================================================================
    # Query Methods
    # =========================================================================

    def get_record_count(self) -> int:
        return len(self._records)

    def to_pub_file(self) -> PubFile:
        return PubFile(
            magic=self.schema.magic,
            records=list(self._records),
            declared_count=len(self._records),
            version=self.version,
        )

    # =========================================================================
    # Building
    # =========================================================================

    def build(self) -> bytes:
        """
        Build the complete pub file.

        Returns:
            Pub file bytes
        """
        data = encode_pub(self.to_pub_file(), self.schema, self.config)
        logger.info(
            f"Built {self.schema.magic} file: {len(self._records)} records, "
            f"{len(data)} bytes"
        )
        return data

    def build_to_file(self, filepath: Union[str, Path]) -> Path:
        """
        Build and write the pub file.

        Returns:
            The path written
        """
        filepath = Path(filepath)
        filepath.write_bytes(self.build())
        return filepath


# =============================================================================
# Convenience Functions
# =============================================================================

def build_pub(
    records: list[PubRecord],
    schema: RecordSchema,
    version: int = 1,
    overflow: OverflowPolicy = OverflowPolicy.WRAP,
) -> bytes:
    """
    Encode a list of records in one call.

    Example:
        >>> data = build_pub([ItemRecord(name="Sword"), ItemRecord.eof()], ITEM_SCHEMA)
    """
    pub = PubFile(magic=schema.magic, records=records, version=version)
    return encode_pub(pub, schema, PubConfig(overflow=overflow))
