"""
eopub - Endless Online Pub File Codec
=====================================

This package reads and writes the binary "pub" files that hold the item,
NPC, class and skill catalogs of Endless Online.

Main Components
---------------
- **pub**: number codec, checksum, schemas, records and the container
    codec, with one facade per file kind
- **config**: codec options (overflow policy, checksum verification, text
    encoding)
- **cli**: the ``pubtool`` command-line program

Quick Start
-----------
Read an item file and look up a record:
    >>> from eopub import ITEM_FORMAT
    >>> result = ITEM_FORMAT.read_file("dat001.eif")
    >>> result.pub.find("Sword").max_damage
    14

Or use the command-line tool:
    $ pubtool list dat001.eif
    $ pubtool export dat001.eif -o items.json
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

# The pub package is imported first: eopub.config depends on eopub.pub.numbers.
from eopub.pub import (
    OverflowPolicy,
    PubFile,
    PubRecord,
    ItemRecord,
    NpcRecord,
    ClassRecord,
    SkillRecord,
    DecodeResult,
    DecodeStatus,
    PubBuilder,
    PubFormat,
    ITEM_FORMAT,
    NPC_FORMAT,
    CLASS_FORMAT,
    SKILL_FORMAT,
    get_format,
    detect_format,
    read_pub,
)
from eopub.config import PubConfig
from eopub.errors import (
    PubError,
    PubFormatError,
    FormatMismatchError,
    PubEncodeError,
    FieldOverflowError,
    UnknownFormatError,
)

__all__ = [
    "__version__",
    "OverflowPolicy", "PubConfig",
    "PubFile", "PubRecord", "ItemRecord", "NpcRecord", "ClassRecord", "SkillRecord",
    "DecodeResult", "DecodeStatus", "PubBuilder",
    "PubFormat", "ITEM_FORMAT", "NPC_FORMAT", "CLASS_FORMAT", "SKILL_FORMAT",
    "get_format", "detect_format", "read_pub",
    "PubError", "PubFormatError", "FormatMismatchError", "PubEncodeError",
    "FieldOverflowError", "UnknownFormatError",
]
