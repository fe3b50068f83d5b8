"""
JSON Interchange
================

Export decoded records as a JSON array and import them back.

Each record becomes one object::

    {"id": 1, "name": "Sword", "graphic": 12, "type": 10, ...}

Item objects also carry every alias name (``doll_graphic``,
``scroll_map``...) next to the ``spec1``/``spec2``/``spec3`` group
values. On import either spelling is accepted. Because an exported group
repeats one value under every member name, the member that differs is
the edit: the authoritative member (``doll_graphic``, ``gender``,
``scroll_y``) first, then any other member. Two other members with
different edits are rejected. Alias keys take precedence over the
``spec`` key of their group. The ``id`` key is informational:
imported records are numbered by their position in the array.
"""

from pathlib import Path
from typing import Any, Iterable, Optional, Union
import json
import logging

from eopub.errors import PubFormatError
from eopub.pub.records import PubFile, PubRecord
from eopub.pub.schema import AliasGroup

logger = logging.getLogger(__name__)

# Keys that are never payload fields
_META_KEYS = ("id", "record_id")


def record_to_json(record: PubRecord, include_aliases: bool = True) -> dict[str, Any]:
    """Convert one record to a JSON-ready dictionary."""
    schema = record.SCHEMA
    obj: dict[str, Any] = {"id": record.record_id}
    for text in schema.text_fields:
        obj[text] = getattr(record, text, "")

    if record.is_eof:
        return obj

    for name, value in record.payload_values().items():
        obj[name] = int(value)

    if include_aliases:
        for alias in schema.alias_names():
            obj[alias] = int(getattr(record, alias))

    return obj


def records_to_json(
    records: Iterable[PubRecord],
    include_aliases: bool = True,
) -> list[dict[str, Any]]:
    """Convert records (sentinel included) to a list of dictionaries."""
    return [record_to_json(record, include_aliases) for record in records]


def _group_value(
    group: AliasGroup,
    stored: Optional[int],
    alias_values: dict[str, int],
    record_id: int,
) -> Optional[int]:
    """
    Resolve one alias group from the group key and any member keys.

    An exported object repeats the group value under every member, so
    only a member that differs from the rest carries an edit. The
    authoritative member wins when it differs from the group key;
    otherwise the one other member that differs is taken.

    Raises:
        PubFormatError: If two other members carry different edits
    """
    present = [member for member in group.members if member in alias_values]
    if not present:
        return stored

    authoritative = alias_values.get(group.authoritative)
    if authoritative is not None and (stored is None or authoritative != stored):
        return authoritative

    reference = authoritative if authoritative is not None else stored
    edits = {
        member: alias_values[member]
        for member in present
        if member != group.authoritative and alias_values[member] != reference
    }
    if len(set(edits.values())) > 1:
        raise PubFormatError(
            f"Record {record_id}: conflicting values for {group.name}: "
            + ", ".join(f"{member}={value}" for member, value in edits.items())
        )
    if edits:
        return next(iter(edits.values()))
    return reference if reference is not None else alias_values[present[0]]


def record_from_json(
    obj: dict[str, Any],
    record_class: type[PubRecord],
    record_id: int = 0,
) -> PubRecord:
    """
    Build a record from one JSON object.

    Raises:
        PubFormatError: For unknown keys or non-integer field values
    """
    if not isinstance(obj, dict):
        raise PubFormatError(f"Record {record_id}: expected an object, got {type(obj).__name__}")

    schema = record_class.SCHEMA
    fields = set(schema.field_names())
    aliases = set(schema.alias_names())

    texts = []
    for text in schema.text_fields:
        value = obj.get(text, "")
        if not isinstance(value, str):
            raise PubFormatError(f"Record {record_id}: '{text}' must be a string")
        texts.append(value)

    values: dict[str, int] = {}
    alias_values: dict[str, int] = {}
    for key, value in obj.items():
        if key in schema.text_fields or key in _META_KEYS:
            continue
        if key not in fields and key not in aliases:
            raise PubFormatError(
                f"Record {record_id}: unknown {schema.kind} field '{key}'"
            )
        if isinstance(value, bool) or not isinstance(value, int):
            raise PubFormatError(
                f"Record {record_id}: field '{key}' must be an integer, got {value!r}"
            )
        if key in fields:
            values[key] = value
        else:
            alias_values[key] = value

    for group in schema.alias_groups:
        value = _group_value(group, values.get(group.name), alias_values, record_id)
        if value is not None:
            values[group.name] = value

    return record_class.from_values(texts, values, record_id=record_id)


def records_from_json(
    items: list[dict[str, Any]],
    record_class: type[PubRecord],
) -> list[PubRecord]:
    """Build records from a list of JSON objects, numbered from 1."""
    if not isinstance(items, list):
        raise PubFormatError("Expected a JSON array of records")
    return [
        record_from_json(obj, record_class, record_id=index)
        for index, obj in enumerate(items, start=1)
    ]


# =============================================================================
# File Helpers
# =============================================================================

def export_json(
    pub: PubFile,
    filepath: Union[str, Path],
    include_aliases: bool = True,
    indent: Optional[int] = 2,
) -> Path:
    """Write a PubFile's records to a JSON file."""
    filepath = Path(filepath)
    items = records_to_json(pub.records, include_aliases)
    filepath.write_text(json.dumps(items, indent=indent, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.info(f"Exported {len(items)} {pub.magic} records to {filepath}")
    return filepath


def import_json(
    filepath: Union[str, Path],
    record_class: type[PubRecord],
    version: int = 1,
) -> PubFile:
    """
    Read records from a JSON file into a new PubFile.

    Raises:
        PubFormatError: If the file is not valid JSON or a record is invalid
    """
    filepath = Path(filepath)
    try:
        items = json.loads(filepath.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise PubFormatError(f"Invalid JSON in {filepath}: {e}") from e

    records = records_from_json(items, record_class)
    logger.info(f"Imported {len(records)} {record_class.SCHEMA.magic} records from {filepath}")
    return PubFile(
        magic=record_class.SCHEMA.magic,
        records=records,
        declared_count=len(records),
        version=version,
    )
