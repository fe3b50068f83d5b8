"""
Pub Record Schemas
==================

This module describes the fixed payload of each pub file kind: which
bytes hold which field, and which byte ranges are shared by several
field names (alias groups).

Payload Layout
--------------
Every non-sentinel record is followed by a payload of ``data_size`` bytes.
Each field occupies ``width`` bytes starting at ``offset`` (relative to
the start of the payload) and is stored as a base-253 number. Bytes that
no field covers are written as 254 and ignored on read.

Alias Groups
------------
Some byte ranges mean different things depending on the record's type.
Bytes 32-34 of an item payload are a scroll's target map, an armor's
doll graphic, a potion's effect id and so on. An AliasGroup stores one
value under its group name (``spec1``) and lists the names it is known
by; ``authoritative`` names the member that existing writers read when
several are set.

Catalog
-------
    Kind    Magic   Payload   Text fields
    ----    -----   -------   -----------
    item    EIF     58        name
    npc     ENF     39        name
    class   ECF     14        name
    skill   ESF     51        name, chant
"""

from dataclasses import dataclass, field
from typing import Final, Mapping, Optional, Union

from eopub.errors import FieldOverflowError, PubFormatError, UnknownFormatError
from eopub.pub.numbers import (
    CHAR_SIZE,
    FILL_BYTE,
    SHORT_SIZE,
    THREE_SIZE,
    OverflowPolicy,
    decode_number,
    encode_number,
)


# =============================================================================
# Field Descriptors
# =============================================================================

@dataclass(frozen=True)
class FieldSpec:
    """
    One named numeric field inside a record payload.

    Attributes:
        name: Attribute name on the record class
        offset: Byte offset inside the payload
        width: Encoded width in bytes (1-4)
    """
    name: str
    offset: int
    width: int

    @property
    def end(self) -> int:
        """Offset one past the last byte of the field."""
        return self.offset + self.width


@dataclass(frozen=True)
class AliasGroup(FieldSpec):
    """
    A byte range exposed under several names.

    The value is stored once, under ``name``. ``members`` lists every
    alias; ``authoritative`` is the member existing writers take the value
    from.
    """
    members: tuple[str, ...] = ()
    authoritative: str = ""

    def __post_init__(self) -> None:
        if self.authoritative and self.authoritative not in self.members:
            raise PubFormatError(
                f"Alias group '{self.name}': authoritative member "
                f"'{self.authoritative}' is not one of {self.members}"
            )


def _char(name: str, offset: int) -> FieldSpec:
    return FieldSpec(name, offset, CHAR_SIZE)


def _short(name: str, offset: int) -> FieldSpec:
    return FieldSpec(name, offset, SHORT_SIZE)


def _three(name: str, offset: int) -> FieldSpec:
    return FieldSpec(name, offset, THREE_SIZE)


# =============================================================================
# Record Schema
# =============================================================================

@dataclass(frozen=True)
class RecordSchema:
    """
    Layout of one pub file kind.

    Attributes:
        kind: Short catalog name ("item", "npc", "class", "skill")
        magic: 3-byte ASCII tag at the start of the file
        data_size: Fixed payload width in bytes
        fields: Plain numeric fields
        alias_groups: Shared byte ranges with several names
        text_fields: Length-prefixed strings in the record header, in
            file order. The first one is the record name.
        default_filename: Conventional file name for this kind
    """
    kind: str
    magic: str
    data_size: int
    fields: tuple[FieldSpec, ...]
    alias_groups: tuple[AliasGroup, ...] = ()
    text_fields: tuple[str, ...] = ("name",)
    default_filename: str = ""
    _alias_index: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.magic) != 3:
            raise PubFormatError(f"Magic tag must be 3 characters: {self.magic!r}")

        # Every payload byte belongs to at most one field or group
        owner: dict[int, str] = {}
        for spec in self.all_specs():
            if spec.offset < 0 or spec.end > self.data_size:
                raise PubFormatError(
                    f"{self.kind}: field '{spec.name}' ({spec.offset}+{spec.width}) "
                    f"outside {self.data_size}-byte payload"
                )
            for pos in range(spec.offset, spec.end):
                if pos in owner:
                    raise PubFormatError(
                        f"{self.kind}: fields '{owner[pos]}' and '{spec.name}' "
                        f"overlap at byte {pos}"
                    )
                owner[pos] = spec.name

        for group in self.alias_groups:
            for member in group.members:
                self._alias_index[member] = group

    # =========================================================================
    # Introspection
    # =========================================================================

    def all_specs(self) -> tuple[FieldSpec, ...]:
        """Plain fields and alias groups, ordered by offset."""
        return tuple(sorted(self.fields + self.alias_groups, key=lambda s: s.offset))

    def field_names(self) -> list[str]:
        """Names of every stored value (alias groups by group name), in offset order."""
        return [spec.name for spec in self.all_specs()]

    def alias_names(self) -> list[str]:
        """Every alias member name across all groups."""
        return [member for group in self.alias_groups for member in group.members]

    def group_for_alias(self, alias: str) -> Optional[AliasGroup]:
        """Return the alias group a member name belongs to, or None."""
        return self._alias_index.get(alias)

    def unused_offsets(self) -> list[int]:
        """Payload bytes that no field covers."""
        covered = set()
        for spec in self.all_specs():
            covered.update(range(spec.offset, spec.end))
        return [pos for pos in range(self.data_size) if pos not in covered]

    @property
    def header_text_count(self) -> int:
        """Number of length-prefixed strings before each payload."""
        return len(self.text_fields)

    # =========================================================================
    # Payload Codec
    # =========================================================================

    def decode_payload(self, payload: bytes) -> dict[str, int]:
        """
        Decode a fixed payload into field values.

        Args:
            payload: Exactly ``data_size`` bytes

        Returns:
            Mapping of field and alias-group names to values

        Raises:
            PubFormatError: If the payload has the wrong length
        """
        if len(payload) != self.data_size:
            raise PubFormatError(
                f"{self.kind} payload must be {self.data_size} bytes, got {len(payload)}"
            )
        return {
            spec.name: decode_number(payload[spec.offset:spec.end])
            for spec in self.all_specs()
        }

    def encode_payload(
        self,
        values: Mapping[str, int],
        overflow: OverflowPolicy = OverflowPolicy.WRAP,
        record_name: Optional[str] = None,
    ) -> bytes:
        """
        Encode field values into a fixed payload.

        Missing values are written as 0; unused bytes are written as 254.

        Args:
            values: Field and alias-group names to values
            overflow: Policy for values that do not fit their width
            record_name: Used in error messages

        Returns:
            Exactly ``data_size`` bytes
        """
        payload = bytearray([FILL_BYTE] * self.data_size)
        for spec in self.all_specs():
            try:
                encoded = encode_number(
                    values.get(spec.name, 0) or 0, spec.width, overflow, field=spec.name
                )
            except FieldOverflowError as e:
                raise FieldOverflowError(e.field, e.value, e.width, record_name) from e
            payload[spec.offset:spec.end] = encoded
        return bytes(payload)


# =============================================================================
# Item Schema (EIF)
# =============================================================================

ITEM_SCHEMA: Final[RecordSchema] = RecordSchema(
    kind="item",
    magic="EIF",
    data_size=58,
    default_filename="dat001.eif",
    fields=(
        _short("graphic", 0),
        _char("type", 2),
        _char("subtype", 3),
        _char("special", 4),
        _short("hp", 5),
        _short("tp", 7),
        _short("min_damage", 9),
        _short("max_damage", 11),
        _short("accuracy", 13),
        _short("evade", 15),
        _short("armor", 17),
        # byte 19 unused
        _char("str", 20),
        _char("intl", 21),
        _char("wis", 22),
        _char("agi", 23),
        _char("con", 24),
        _char("cha", 25),
        _char("light", 26),
        _char("dark", 27),
        _char("earth", 28),
        _char("air", 29),
        _char("water", 30),
        _char("fire", 31),
        _short("level_req", 37),
        _short("class_req", 39),
        _short("str_req", 41),
        _short("int_req", 43),
        _short("wis_req", 45),
        _short("agi_req", 47),
        _short("con_req", 49),
        _short("cha_req", 51),
        _char("element", 53),
        _char("element_power", 54),
        _char("weight", 55),
        # byte 56 unused
        _char("size", 57),
    ),
    alias_groups=(
        AliasGroup(
            "spec1", 32, THREE_SIZE,
            members=(
                "scroll_map", "doll_graphic", "exp_reward", "hair_color",
                "effect", "key", "beer_potency",
            ),
            authoritative="doll_graphic",
        ),
        AliasGroup(
            "spec2", 35, CHAR_SIZE,
            members=("gender", "scroll_x"),
            authoritative="gender",
        ),
        AliasGroup(
            "spec3", 36, CHAR_SIZE,
            members=("scroll_y", "dual_wield_doll_graphic"),
            authoritative="scroll_y",
        ),
    ),
)


# =============================================================================
# NPC Schema (ENF)
# =============================================================================

NPC_SCHEMA: Final[RecordSchema] = RecordSchema(
    kind="npc",
    magic="ENF",
    data_size=39,
    default_filename="dtn001.enf",
    fields=(
        _short("graphic", 0),
        _char("race", 2),
        _short("boss", 3),
        _short("child", 5),
        _short("type", 7),
        _short("behavior_id", 9),
        _three("hp", 11),
        _short("tp", 14),
        _short("min_damage", 16),
        _short("max_damage", 18),
        _short("accuracy", 20),
        _short("evade", 22),
        _short("armor", 24),
        _char("return_damage", 26),
        _short("element", 27),
        _short("element_damage", 29),
        _short("element_weakness", 31),
        _short("element_weakness_damage", 33),
        _char("level", 35),
        _three("experience", 36),
    ),
)


# =============================================================================
# Class Schema (ECF)
# =============================================================================

CLASS_SCHEMA: Final[RecordSchema] = RecordSchema(
    kind="class",
    magic="ECF",
    data_size=14,
    default_filename="dat001.ecf",
    fields=(
        _char("parent_type", 0),
        _char("stat_group", 1),
        _short("str", 2),
        _short("intl", 4),
        _short("wis", 6),
        _short("agi", 8),
        _short("con", 10),
        _short("cha", 12),
    ),
)


# =============================================================================
# Skill Schema (ESF)
# =============================================================================

SKILL_SCHEMA: Final[RecordSchema] = RecordSchema(
    kind="skill",
    magic="ESF",
    data_size=51,
    default_filename="dsl001.esf",
    text_fields=("name", "chant"),
    fields=(
        _short("icon", 0),
        _short("graphic", 2),
        _short("tp_cost", 4),
        _short("sp_cost", 6),
        _char("cast_time", 8),
        _char("nature", 9),
        # byte 10 unused
        _three("type", 11),
        _char("element", 14),
        _short("element_power", 15),
        _char("target_restrict", 17),
        _char("target_type", 18),
        _char("target_time", 19),
        # byte 20 unused
        _short("max_skill_level", 21),
        _short("min_damage", 23),
        _short("max_damage", 25),
        _short("accuracy", 27),
        _short("evade", 29),
        _short("armor", 31),
        _char("return_damage", 33),
        _short("hp_heal", 34),
        _short("tp_heal", 36),
        _char("sp_heal", 38),
        _short("str", 39),
        _short("intl", 41),
        _short("wis", 43),
        _short("agi", 45),
        _short("con", 47),
        _short("cha", 49),
    ),
)


# =============================================================================
# Catalog Lookup
# =============================================================================

SCHEMAS: Final[dict[str, RecordSchema]] = {
    schema.kind: schema
    for schema in (ITEM_SCHEMA, NPC_SCHEMA, CLASS_SCHEMA, SKILL_SCHEMA)
}


def get_schema(key: Union[str, bytes]) -> RecordSchema:
    """
    Look up a schema by kind ("item") or magic tag ("EIF", b"EIF").

    Raises:
        UnknownFormatError: If nothing matches
    """
    if isinstance(key, (bytes, bytearray)):
        key = bytes(key).decode("ascii", errors="replace")

    lowered = key.strip().lower()
    if lowered in SCHEMAS:
        return SCHEMAS[lowered]
    for schema in SCHEMAS.values():
        if schema.magic.lower() == lowered:
            return schema

    raise UnknownFormatError(
        f"Unknown pub format '{key}'. "
        f"Choose from: {', '.join(s.kind for s in SCHEMAS.values())} "
        f"or {', '.join(s.magic for s in SCHEMAS.values())}"
    )
