"""
Pub File Handling
=================

This package reads and writes the binary "pub" data files of Endless
Online: the item, NPC, class and skill catalogs a server loads at start
and a client caches locally.

Overview
--------
Every pub file is a 10-byte header (magic tag, checksum, record count,
version) followed by records. A record is one length-prefixed name (a
skill also has a chant) and, unless the name is "eof", a fixed-size
payload of base-253 numbers.

This package provides:
- **Number codec**: base-253 integers of width 1-4 (``numbers``)
- **Checksum**: the CRC-32 stored in the header (``crc``)
- **Schemas**: byte layout of each kind's payload (``schema``)
- **Records**: dataclasses for items, NPCs, classes and skills (``records``)
- **Parser / Builder**: container decoding and encoding
- **Formats**: one facade per kind (``ITEM_FORMAT``...)
- **Interchange**: JSON export and import

Quick Start
-----------
Reading an item file:

    >>> from eopub.pub import ITEM_FORMAT
    >>> result = ITEM_FORMAT.read_file("dat001.eif")
    >>> for item in result.pub.entries():
    ...     print(item.record_id, item.name)

Creating a skill file:

    >>> from eopub.pub import SKILL_FORMAT, SkillRecord
    >>> pub = SKILL_FORMAT.new_file([SkillRecord(name="Heal", chant="heal!")])
    >>> SKILL_FORMAT.write_file(pub, "dsl001.esf")
"""

# =============================================================================
# Public API Exports
# =============================================================================

# Number codec
from eopub.pub.numbers import (
    BASE,
    CHAR_SIZE,
    SHORT_SIZE,
    THREE_SIZE,
    INT_SIZE,
    CHAR_MAX,
    SHORT_MAX,
    THREE_MAX,
    INT_MAX,
    OverflowPolicy,
    decode_number,
    encode_number,
    max_value,
    fits,
)

# Checksum utilities
from eopub.pub.crc import (
    crc32,
    crc32_bitwise,
    CRC32_TABLE,
    REFERENCE_CRC_VALUES,
    pub_checksum,
    encode_checksum,
    patch_pub_checksum,
    verify_pub_checksum,
)

# Schemas
from eopub.pub.schema import (
    FieldSpec,
    AliasGroup,
    RecordSchema,
    ITEM_SCHEMA,
    NPC_SCHEMA,
    CLASS_SCHEMA,
    SKILL_SCHEMA,
    SCHEMAS,
    get_schema,
)

# Record types
from eopub.pub.records import (
    EOF_NAME,
    is_eof_name,
    ItemType,
    PubHeader,
    PubRecord,
    ItemRecord,
    NpcRecord,
    ClassRecord,
    SkillRecord,
    PubFile,
    RECORD_CLASSES,
    RawSpecs,
    TeleportScroll,
    EquipmentLook,
    ExpReward,
    HairDye,
    EffectPotion,
    KeyItem,
    Beer,
    variant_class_for,
)

# Container codec
from eopub.pub.parser import (
    PubReader,
    DecodeStatus,
    DecodeResult,
    read_header,
    decode_pub,
)
from eopub.pub.builder import (
    PubBuilder,
    encode_pub,
    encode_record,
    build_pub,
)

# Format facades
from eopub.pub.formats import (
    PubFormat,
    ITEM_FORMAT,
    NPC_FORMAT,
    CLASS_FORMAT,
    SKILL_FORMAT,
    FORMATS,
    get_format,
    detect_format,
    find_pub_files,
    read_pub,
)

# JSON interchange
from eopub.pub.interchange import (
    records_to_json,
    records_from_json,
    export_json,
    import_json,
)

__all__ = [
    # Number codec
    "BASE", "CHAR_SIZE", "SHORT_SIZE", "THREE_SIZE", "INT_SIZE",
    "CHAR_MAX", "SHORT_MAX", "THREE_MAX", "INT_MAX",
    "OverflowPolicy", "decode_number", "encode_number", "max_value", "fits",
    # Checksum
    "crc32", "crc32_bitwise", "CRC32_TABLE", "REFERENCE_CRC_VALUES",
    "pub_checksum", "encode_checksum", "patch_pub_checksum", "verify_pub_checksum",
    # Schemas
    "FieldSpec", "AliasGroup", "RecordSchema",
    "ITEM_SCHEMA", "NPC_SCHEMA", "CLASS_SCHEMA", "SKILL_SCHEMA",
    "SCHEMAS", "get_schema",
    # Records
    "EOF_NAME", "is_eof_name",
    "ItemType",
    "PubHeader", "PubRecord", "ItemRecord", "NpcRecord", "ClassRecord",
    "SkillRecord", "PubFile", "RECORD_CLASSES",
    "RawSpecs", "TeleportScroll", "EquipmentLook", "ExpReward", "HairDye",
    "EffectPotion", "KeyItem", "Beer", "variant_class_for",
    # Container codec
    "PubReader", "DecodeStatus", "DecodeResult", "read_header", "decode_pub",
    "PubBuilder", "encode_pub", "encode_record", "build_pub",
    # Formats
    "PubFormat", "ITEM_FORMAT", "NPC_FORMAT", "CLASS_FORMAT", "SKILL_FORMAT",
    "FORMATS", "get_format", "detect_format", "find_pub_files", "read_pub",
    # Interchange
    "records_to_json", "records_from_json", "export_json", "import_json",
]
