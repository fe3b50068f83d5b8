"""
Pub Record Type Definitions
===========================

This module defines the in-memory data structures for pub files.

File Structure Overview
-----------------------
A pub file contains:
1. Header (10 bytes): magic (3), checksum (4), record count (2), version (1)
2. Records (variable), each made of:
   - One length byte per text field, then the text bytes
     (items, NPCs and classes have a name; skills have a name and a chant)
   - A fixed payload described by the kind's RecordSchema
3. A final record named "eof" with no payload

The eof Sentinel
----------------
A record whose name equals "eof" in any letter case closes the list. It
is kept in ``PubFile.records`` so that a decoded file re-encodes to the
same record count, but it has no payload and must be the last record.

Record Ids
----------
Records are numbered from 1 in file order. Game data refers to items,
NPCs, classes and skills by this id.

Item Alias Groups
-----------------
Three byte ranges of the item payload are read differently per item
type. ItemRecord stores them once, as ``spec1``, ``spec2`` and ``spec3``,
and exposes every alias name as a property over the shared value.
The constructor accepts the group names only; ``ItemRecord.create``
also accepts alias names.
``ItemRecord.variant`` returns a typed view chosen by the item type:

    Item type          Variant          spec1          spec2     spec3
    ---------          -------          -----          -----     -----
    Teleport           TeleportScroll   map_id         x         y
    Weapon..Bracer     EquipmentLook    doll_graphic   gender    dual_wield_doll_graphic
    ExpReward          ExpReward        experience
    HairDye            HairDye          hair_color
    EffectPotion       EffectPotion     effect_id
    Key                KeyItem          key_id
    Alcohol            Beer             potency
    (anything else)    RawSpecs         spec1          spec2     spec3
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields as dataclass_fields
from enum import IntEnum
from typing import ClassVar, Iterator, Optional, Union

from eopub.errors import UnknownFormatError
from eopub.pub.schema import (
    CLASS_SCHEMA,
    ITEM_SCHEMA,
    NPC_SCHEMA,
    SKILL_SCHEMA,
    RecordSchema,
)

# Name of the record that terminates a pub file
EOF_NAME = "eof"


def is_eof_name(name: str) -> bool:
    """Check whether a record name is the eof sentinel (case-insensitive)."""
    return name.lower() == EOF_NAME


# =============================================================================
# Item Type
# =============================================================================

class ItemType(IntEnum):
    """Item type discriminant (payload byte 2)."""
    GENERAL = 0
    CURRENCY = 1
    HEAL = 2
    TELEPORT = 3
    SPELL = 4
    EXP_REWARD = 5
    STAT_REWARD = 6
    SKILL_REWARD = 7
    KEY = 8
    WEAPON = 9
    SHIELD = 10
    ARMOR = 11
    HAT = 12
    BOOTS = 13
    GLOVES = 14
    ACCESSORY = 15
    BELT = 16
    NECKLACE = 17
    RING = 18
    ARMLET = 19
    BRACER = 20
    ALCOHOL = 21
    EFFECT_POTION = 22
    HAIR_DYE = 23
    CURE_CURSE = 24

    @classmethod
    def is_equipment(cls, type_byte: int) -> bool:
        """Check if a type byte is a wearable item (weapon through bracer)."""
        return cls.WEAPON <= type_byte <= cls.BRACER

    @classmethod
    def get_name(cls, type_byte: int) -> str:
        """Get a human-readable name for an item type."""
        try:
            return cls(type_byte).name.replace("_", " ").title()
        except ValueError:
            return f"Unknown ({type_byte})"


# =============================================================================
# Pub Header
# =============================================================================

@dataclass
class PubHeader:
    """
    Pub file header (10 bytes).

    Structure:
        Offset  Size    Description
        ------  ----    -----------
        0       3       Magic tag (ASCII, e.g. "EIF")
        3       2       Checksum, first half (pub number)
        5       2       Checksum, second half (pub number)
        7       2       Record count (pub number)
        9       1       Version (raw byte)
    """
    magic: str = "EIF"
    checksum1: int = 0
    checksum2: int = 0
    declared_count: int = 0
    version: int = 1
    HEADER_SIZE: ClassVar[int] = 10

    @property
    def checksum(self) -> tuple[int, int]:
        """Both checksum halves as a pair."""
        return (self.checksum1, self.checksum2)


# =============================================================================
# Item Alias-Group Variants
# =============================================================================

@dataclass(frozen=True)
class RawSpecs:
    """Untyped view of the three item alias groups."""
    spec1: int = 0
    spec2: int = 0
    spec3: int = 0

    def to_specs(self) -> tuple[int, int, int]:
        return (self.spec1, self.spec2, self.spec3)

    @classmethod
    def from_specs(cls, spec1: int, spec2: int, spec3: int) -> "RawSpecs":
        return cls(spec1, spec2, spec3)


@dataclass(frozen=True)
class TeleportScroll:
    """A scroll that warps the player to a map coordinate."""
    map_id: int = 0
    x: int = 0
    y: int = 0

    def to_specs(self) -> tuple[int, int, int]:
        return (self.map_id, self.x, self.y)

    @classmethod
    def from_specs(cls, spec1: int, spec2: int, spec3: int) -> "TeleportScroll":
        return cls(map_id=spec1, x=spec2, y=spec3)


@dataclass(frozen=True)
class EquipmentLook:
    """How a wearable item is drawn on the character."""
    doll_graphic: int = 0
    gender: int = 0
    dual_wield_doll_graphic: int = 0

    def to_specs(self) -> tuple[int, int, int]:
        return (self.doll_graphic, self.gender, self.dual_wield_doll_graphic)

    @classmethod
    def from_specs(cls, spec1: int, spec2: int, spec3: int) -> "EquipmentLook":
        return cls(doll_graphic=spec1, gender=spec2, dual_wield_doll_graphic=spec3)


@dataclass(frozen=True)
class ExpReward:
    experience: int = 0

    def to_specs(self) -> tuple[int, int, int]:
        return (self.experience, 0, 0)

    @classmethod
    def from_specs(cls, spec1: int, spec2: int, spec3: int) -> "ExpReward":
        return cls(experience=spec1)


@dataclass(frozen=True)
class HairDye:
    hair_color: int = 0

    def to_specs(self) -> tuple[int, int, int]:
        return (self.hair_color, 0, 0)

    @classmethod
    def from_specs(cls, spec1: int, spec2: int, spec3: int) -> "HairDye":
        return cls(hair_color=spec1)


@dataclass(frozen=True)
class EffectPotion:
    effect_id: int = 0

    def to_specs(self) -> tuple[int, int, int]:
        return (self.effect_id, 0, 0)

    @classmethod
    def from_specs(cls, spec1: int, spec2: int, spec3: int) -> "EffectPotion":
        return cls(effect_id=spec1)


@dataclass(frozen=True)
class KeyItem:
    key_id: int = 0

    def to_specs(self) -> tuple[int, int, int]:
        return (self.key_id, 0, 0)

    @classmethod
    def from_specs(cls, spec1: int, spec2: int, spec3: int) -> "KeyItem":
        return cls(key_id=spec1)


@dataclass(frozen=True)
class Beer:
    potency: int = 0

    def to_specs(self) -> tuple[int, int, int]:
        return (self.potency, 0, 0)

    @classmethod
    def from_specs(cls, spec1: int, spec2: int, spec3: int) -> "Beer":
        return cls(potency=spec1)


ItemVariant = Union[
    RawSpecs, TeleportScroll, EquipmentLook, ExpReward,
    HairDye, EffectPotion, KeyItem, Beer,
]

_VARIANT_BY_TYPE: dict[int, type] = {
    ItemType.TELEPORT: TeleportScroll,
    ItemType.EXP_REWARD: ExpReward,
    ItemType.HAIR_DYE: HairDye,
    ItemType.EFFECT_POTION: EffectPotion,
    ItemType.KEY: KeyItem,
    ItemType.ALCOHOL: Beer,
}


def variant_class_for(item_type: int) -> type:
    """Return the variant class that gives meaning to an item type's alias groups."""
    if ItemType.is_equipment(item_type):
        return EquipmentLook
    return _VARIANT_BY_TYPE.get(item_type, RawSpecs)


# =============================================================================
# Record Base Class
# =============================================================================

@dataclass
class PubRecord:
    """
    Base class for pub records.

    Subclasses declare one dataclass attribute per schema field, named as
    in the schema, and set ``SCHEMA``. A record named "eof" is the
    sentinel; its numeric attributes are ignored when encoding.

    Attributes:
        name: Record name (text)
        record_id: 1-based position in the file (0 if not yet placed)
    """
    name: str = ""
    record_id: int = field(default=0, compare=False)
    SCHEMA: ClassVar[RecordSchema]

    @classmethod
    def eof(cls, record_id: int = 0) -> "PubRecord":
        """Create the sentinel record that ends a file."""
        return cls(name=EOF_NAME, record_id=record_id)

    @property
    def is_eof(self) -> bool:
        """True if this record is the eof sentinel."""
        return is_eof_name(self.name)

    @property
    def has_payload(self) -> bool:
        """Sentinel records carry no payload."""
        return not self.is_eof

    def texts(self) -> list[str]:
        """Header strings in file order (name first)."""
        return [getattr(self, text, "") for text in self.SCHEMA.text_fields]

    def payload_values(self) -> dict[str, int]:
        """Field values keyed by schema name (alias groups by group name)."""
        return {name: getattr(self, name) for name in self.SCHEMA.field_names()}

    @classmethod
    def from_values(
        cls,
        texts: list[str],
        values: Optional[dict[str, int]] = None,
        record_id: int = 0,
    ) -> "PubRecord":
        """
        Build a record from decoded header strings and payload values.

        Args:
            texts: Header strings in schema order
            values: Decoded payload, or None for the sentinel
            record_id: 1-based position in the file
        """
        kwargs: dict = dict(zip(cls.SCHEMA.text_fields, texts))
        if values:
            kwargs.update(values)
        return cls(record_id=record_id, **kwargs)

    def to_dict(self) -> dict:
        """Plain dictionary of every attribute, for display and JSON."""
        return {f.name: getattr(self, f.name) for f in dataclass_fields(self)}

    def get_display_name(self) -> str:
        return self.name or f"<unnamed {self.SCHEMA.kind} {self.record_id}>"


# =============================================================================
# Item Record (EIF)
# =============================================================================

@dataclass
class ItemRecord(PubRecord):
    """
    Item catalog entry (58-byte payload).

    ``spec1``/``spec2``/``spec3`` hold the shared alias-group values. The
    alias names (``doll_graphic``, ``scroll_map``, ``gender``...) are
    properties that read and write the group they belong to. The
    constructor takes only the group names; use ``create`` to pass alias
    names as keywords.
    """
    SCHEMA: ClassVar[RecordSchema] = ITEM_SCHEMA

    graphic: int = 0
    type: int = ItemType.GENERAL
    subtype: int = 0
    special: int = 0
    hp: int = 0
    tp: int = 0
    min_damage: int = 0
    max_damage: int = 0
    accuracy: int = 0
    evade: int = 0
    armor: int = 0
    str: int = 0
    intl: int = 0
    wis: int = 0
    agi: int = 0
    con: int = 0
    cha: int = 0
    light: int = 0
    dark: int = 0
    earth: int = 0
    air: int = 0
    water: int = 0
    fire: int = 0
    spec1: int = 0
    spec2: int = 0
    spec3: int = 0
    level_req: int = 0
    class_req: int = 0
    str_req: int = 0
    int_req: int = 0
    wis_req: int = 0
    agi_req: int = 0
    con_req: int = 0
    cha_req: int = 0
    element: int = 0
    element_power: int = 0
    weight: int = 0
    size: int = 0

    @classmethod
    def create(cls, **kwargs) -> "ItemRecord":
        """
        Build an item from field and alias keywords.

            >>> ItemRecord.create(name="Robe", type=ItemType.ARMOR, doll_graphic=5)
        """
        aliases = {
            key: kwargs.pop(key)
            for key in list(kwargs)
            if cls.SCHEMA.group_for_alias(key) is not None
        }
        record = cls(**kwargs)
        for alias, value in aliases.items():
            record.set_alias(alias, value)
        return record

    def get_alias(self, alias: str) -> int:
        """Read an alias-group member by name."""
        group = self.SCHEMA.group_for_alias(alias)
        if group is None:
            raise AttributeError(f"'{alias}' is not an item alias")
        return getattr(self, group.name)

    def set_alias(self, alias: str, value: int) -> None:
        """Write an alias-group member by name (updates the shared value)."""
        group = self.SCHEMA.group_for_alias(alias)
        if group is None:
            raise AttributeError(f"'{alias}' is not an item alias")
        setattr(self, group.name, value)

    def aliases(self) -> dict[str, int]:
        """Every alias name with its current value."""
        return {alias: self.get_alias(alias) for alias in self.SCHEMA.alias_names()}

    @property
    def variant(self) -> ItemVariant:
        """Typed view of the alias groups, chosen by the item type."""
        cls = variant_class_for(self.type)
        return cls.from_specs(self.spec1, self.spec2, self.spec3)

    def apply_variant(self, variant: ItemVariant) -> None:
        """Store a variant's values into the alias groups."""
        self.spec1, self.spec2, self.spec3 = variant.to_specs()

    def get_type_name(self) -> str:
        return ItemType.get_name(self.type)


def _alias_property(alias: str) -> property:
    def getter(self: ItemRecord) -> int:
        return self.get_alias(alias)

    def setter(self: ItemRecord, value: int) -> None:
        self.set_alias(alias, value)

    group = ITEM_SCHEMA.group_for_alias(alias)
    return property(getter, setter, doc=f"Alias of {group.name}")


for _alias in ITEM_SCHEMA.alias_names():
    setattr(ItemRecord, _alias, _alias_property(_alias))
del _alias


# =============================================================================
# NPC Record (ENF)
# =============================================================================

@dataclass
class NpcRecord(PubRecord):
    """NPC catalog entry (39-byte payload)."""
    SCHEMA: ClassVar[RecordSchema] = NPC_SCHEMA

    graphic: int = 0
    race: int = 0
    boss: int = 0
    child: int = 0
    type: int = 0
    behavior_id: int = 0
    hp: int = 0
    tp: int = 0
    min_damage: int = 0
    max_damage: int = 0
    accuracy: int = 0
    evade: int = 0
    armor: int = 0
    return_damage: int = 0
    element: int = 0
    element_damage: int = 0
    element_weakness: int = 0
    element_weakness_damage: int = 0
    level: int = 0
    experience: int = 0

    @property
    def is_boss(self) -> bool:
        return bool(self.boss)

    @property
    def is_child(self) -> bool:
        return bool(self.child)


# =============================================================================
# Class Record (ECF)
# =============================================================================

@dataclass
class ClassRecord(PubRecord):
    """Character class entry (14-byte payload)."""
    SCHEMA: ClassVar[RecordSchema] = CLASS_SCHEMA

    parent_type: int = 0
    stat_group: int = 0
    str: int = 0
    intl: int = 0
    wis: int = 0
    agi: int = 0
    con: int = 0
    cha: int = 0


# =============================================================================
# Skill Record (ESF)
# =============================================================================

@dataclass
class SkillRecord(PubRecord):
    """Spell / skill entry (51-byte payload, name and chant)."""
    SCHEMA: ClassVar[RecordSchema] = SKILL_SCHEMA

    chant: str = ""
    icon: int = 0
    graphic: int = 0
    tp_cost: int = 0
    sp_cost: int = 0
    cast_time: int = 0
    nature: int = 0
    type: int = 0
    element: int = 0
    element_power: int = 0
    target_restrict: int = 0
    target_type: int = 0
    target_time: int = 0
    max_skill_level: int = 0
    min_damage: int = 0
    max_damage: int = 0
    accuracy: int = 0
    evade: int = 0
    armor: int = 0
    return_damage: int = 0
    hp_heal: int = 0
    tp_heal: int = 0
    sp_heal: int = 0
    str: int = 0
    intl: int = 0
    wis: int = 0
    agi: int = 0
    con: int = 0
    cha: int = 0


# =============================================================================
# Pub File
# =============================================================================

@dataclass
class PubFile:
    """
    A decoded (or caller-assembled) pub file.

    Attributes:
        magic: 3-letter format tag
        checksum1, checksum2: Checksum halves as read from the header
            (0 for files that have not been encoded yet)
        declared_count: Record count stored in the header
        version: Version byte
        records: Records in file order, eof sentinel included
    """
    magic: str
    records: list[PubRecord] = field(default_factory=list)
    checksum1: int = 0
    checksum2: int = 0
    declared_count: int = 0
    version: int = 1

    @property
    def checksum(self) -> tuple[int, int]:
        return (self.checksum1, self.checksum2)

    @property
    def header(self) -> PubHeader:
        return PubHeader(
            magic=self.magic,
            checksum1=self.checksum1,
            checksum2=self.checksum2,
            declared_count=self.declared_count,
            version=self.version,
        )

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[PubRecord]:
        return iter(self.records)

    def entries(self) -> list[PubRecord]:
        """Records that carry data (the eof sentinel excluded)."""
        return [record for record in self.records if not record.is_eof]

    def has_eof(self) -> bool:
        return bool(self.records) and self.records[-1].is_eof

    def get(self, record_id: int) -> Optional[PubRecord]:
        """Get a record by 1-based id, or None."""
        for record in self.records:
            if record.record_id == record_id:
                return record
        return None

    def find(self, name: str) -> Optional[PubRecord]:
        """Find the first data record with this name (case-insensitive)."""
        wanted = name.lower()
        for record in self.entries():
            if record.name.lower() == wanted:
                return record
        return None

    def renumber(self) -> None:
        """Assign record ids 1..n in list order."""
        for index, record in enumerate(self.records, start=1):
            record.record_id = index

    def with_eof(self) -> "PubFile":
        """Append an eof sentinel if the last record is not one."""
        if not self.has_eof():
            record_class = RECORD_CLASSES.get(self.magic)
            if record_class is None:
                raise UnknownFormatError(f"No record type for pub file tag '{self.magic}'")
            self.records.append(record_class.eof(record_id=len(self.records) + 1))
        return self


# Record type for each pub file tag
RECORD_CLASSES: dict[str, type[PubRecord]] = {
    cls.SCHEMA.magic: cls for cls in (ItemRecord, NpcRecord, ClassRecord, SkillRecord)
}
