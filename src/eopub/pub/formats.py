"""
Pub Format Facades
==================

One PubFormat per file kind binds a schema to its record class so that
callers decode and encode without passing both around.

    Facade          Magic   File name    Record class
    ------          -----   ---------    ------------
    ITEM_FORMAT     EIF     dat001.eif   ItemRecord
    NPC_FORMAT      ENF     dtn001.enf   NpcRecord
    CLASS_FORMAT    ECF     dat001.ecf   ClassRecord
    SKILL_FORMAT    ESF     dsl001.esf   SkillRecord

Usage
-----
    >>> from eopub.pub.formats import ITEM_FORMAT
    >>> result = ITEM_FORMAT.read_file("pub/dat001.eif")
    >>> sword = result.pub.find("Sword")
    >>> sword.hp = 10
    >>> ITEM_FORMAT.write_file(result.pub, "pub/dat001.eif")
"""

from pathlib import Path
from typing import Final, Iterable, Optional, Union
import logging

from eopub.config import PubConfig
from eopub.errors import UnknownFormatError
from eopub.pub.builder import PubBuilder, encode_pub
from eopub.pub.parser import DecodeResult, decode_pub
from eopub.pub.records import (
    ClassRecord,
    ItemRecord,
    NpcRecord,
    PubFile,
    PubRecord,
    SkillRecord,
)
from eopub.pub.schema import (
    CLASS_SCHEMA,
    ITEM_SCHEMA,
    NPC_SCHEMA,
    SKILL_SCHEMA,
    RecordSchema,
)

logger = logging.getLogger(__name__)


class PubFormat:
    """
    Decoder and encoder for one pub file kind.

    Args:
        schema: Payload layout and magic tag
        record_class: Record type built for each entry
    """

    def __init__(self, schema: RecordSchema, record_class: type[PubRecord]):
        if record_class.SCHEMA is not schema:
            raise ValueError(
                f"{record_class.__name__} is bound to {record_class.SCHEMA.magic}, "
                f"not {schema.magic}"
            )
        self.schema = schema
        self.record_class = record_class

    def __repr__(self) -> str:
        return f"PubFormat({self.schema.magic}, {self.record_class.__name__})"

    @property
    def kind(self) -> str:
        return self.schema.kind

    @property
    def magic(self) -> str:
        return self.schema.magic

    @property
    def default_filename(self) -> str:
        return self.schema.default_filename

    @property
    def extension(self) -> str:
        return "." + self.magic.lower()

    # =========================================================================
    # Decoding
    # =========================================================================

    def decode(self, data: bytes, config: Optional[PubConfig] = None) -> DecodeResult:
        """
        Decode a buffer of this kind.

        Raises:
            FormatMismatchError: If the buffer holds a different kind
        """
        return decode_pub(data, self.schema, self.record_class, config)

    def read_file(
        self,
        filepath: Union[str, Path],
        config: Optional[PubConfig] = None,
    ) -> DecodeResult:
        """Read and decode a file of this kind."""
        filepath = Path(filepath)
        logger.debug(f"Reading {self.magic} file {filepath}")
        return self.decode(filepath.read_bytes(), config)

    # =========================================================================
    # Encoding
    # =========================================================================

    def encode(self, pub: PubFile, config: Optional[PubConfig] = None) -> bytes:
        """Encode a PubFile as this kind."""
        return encode_pub(pub, self.schema, config)

    def write_file(
        self,
        pub: PubFile,
        filepath: Union[str, Path],
        config: Optional[PubConfig] = None,
    ) -> Path:
        """Encode a PubFile and write it to disk."""
        filepath = Path(filepath)
        data = self.encode(pub, config)
        filepath.write_bytes(data)
        logger.info(f"Wrote {self.magic} file {filepath} ({len(pub)} records, {len(data)} bytes)")
        return filepath

    def new_file(
        self,
        records: Iterable[PubRecord] = (),
        version: Optional[int] = None,
        with_eof: bool = True,
    ) -> PubFile:
        """
        Create an empty (or pre-filled) PubFile of this kind.

        Args:
            records: Initial records
            version: Version byte (defaults to PubConfig().version)
            with_eof: Append the eof sentinel if it is missing
        """
        pub = PubFile(
            magic=self.magic,
            records=list(records),
            version=PubConfig().version if version is None else version,
        )
        if with_eof and not pub.has_eof():
            pub.records.append(self.record_class.eof())
        pub.renumber()
        pub.declared_count = len(pub.records)
        return pub

    def builder(self, config: Optional[PubConfig] = None) -> PubBuilder:
        config = config or PubConfig()
        return PubBuilder(self.schema, self.record_class, version=config.version, config=config)

    def matches(self, data: bytes) -> bool:
        """True if the buffer starts with this kind's magic tag."""
        return bytes(data[:3]) == self.magic.encode("ascii")


# =============================================================================
# Catalog
# =============================================================================

ITEM_FORMAT: Final[PubFormat] = PubFormat(ITEM_SCHEMA, ItemRecord)
NPC_FORMAT: Final[PubFormat] = PubFormat(NPC_SCHEMA, NpcRecord)
CLASS_FORMAT: Final[PubFormat] = PubFormat(CLASS_SCHEMA, ClassRecord)
SKILL_FORMAT: Final[PubFormat] = PubFormat(SKILL_SCHEMA, SkillRecord)

FORMATS: Final[dict[str, PubFormat]] = {
    fmt.kind: fmt for fmt in (ITEM_FORMAT, NPC_FORMAT, CLASS_FORMAT, SKILL_FORMAT)
}


def get_format(key: str) -> PubFormat:
    """
    Look up a facade by kind ("item"), magic tag ("EIF"), extension
    (".eif") or file name ("dat001.eif").

    Raises:
        UnknownFormatError: If nothing matches
    """
    lowered = key.strip().lower().lstrip(".")
    suffix = Path(lowered).suffix.lstrip(".")
    for fmt in FORMATS.values():
        if lowered in (fmt.kind, fmt.magic.lower()) or suffix == fmt.magic.lower():
            return fmt
    raise UnknownFormatError(
        f"Unknown pub format '{key}'. Choose from: {', '.join(FORMATS)}"
    )


def detect_format(data: bytes) -> PubFormat:
    """
    Pick the facade whose magic tag starts the buffer.

    Raises:
        UnknownFormatError: If the tag is not a known kind
    """
    for fmt in FORMATS.values():
        if fmt.matches(data):
            return fmt
    found = bytes(data[:3]).decode("ascii", errors="replace")
    raise UnknownFormatError(f"Unrecognized pub file tag {found!r}")


def find_pub_files(directory: Union[str, Path]) -> dict[str, Path]:
    """
    Locate the conventional pub files in a directory.

    Returns:
        Mapping of kind to path for every conventional file name present
    """
    directory = Path(directory)
    found = {}
    for fmt in FORMATS.values():
        path = directory / fmt.default_filename
        if path.is_file():
            found[fmt.kind] = path
    return found


# =============================================================================
# Convenience Functions
# =============================================================================

def read_pub(filepath: Union[str, Path], config: Optional[PubConfig] = None) -> DecodeResult:
    """
    Read a pub file of any kind, detecting the kind from its magic tag.

    Raises:
        UnknownFormatError: If the tag is not a known kind
    """
    data = Path(filepath).read_bytes()
    return detect_format(data).decode(data, config)
