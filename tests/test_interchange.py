"""
JSON Interchange Tests
======================
"""

import json

import pytest

from eopub.errors import PubFormatError
from eopub.pub.formats import ITEM_FORMAT, SKILL_FORMAT
from eopub.pub.interchange import (
    export_json,
    import_json,
    record_from_json,
    records_from_json,
    records_to_json,
)
from eopub.pub.records import ItemRecord, ItemType, NpcRecord, SkillRecord


@pytest.fixture
def items():
    return ITEM_FORMAT.new_file([
        ItemRecord(name="Gold", type=ItemType.CURRENCY, graphic=2),
        ItemRecord(name="Robe", type=ItemType.ARMOR, spec1=55, spec2=1),
    ])


class TestExport:
    """Records to JSON objects."""

    def test_fields_and_aliases(self, items):
        objs = records_to_json(items.records)
        assert [o["id"] for o in objs] == [1, 2, 3]
        robe = objs[1]
        assert robe["name"] == "Robe"
        assert robe["spec1"] == 55
        assert robe["doll_graphic"] == 55
        assert robe["gender"] == 1
        assert robe["type"] == ItemType.ARMOR

    def test_without_aliases(self, items):
        objs = records_to_json(items.records, include_aliases=False)
        assert "doll_graphic" not in objs[0]
        assert "spec1" in objs[0]

    def test_eof_has_no_fields(self, items):
        assert records_to_json(items.records)[-1] == {"id": 3, "name": "eof"}

    def test_export_file(self, items, tmp_path):
        path = export_json(items, tmp_path / "items.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data) == 3
        assert data[0]["graphic"] == 2


class TestImport:
    """JSON objects to records."""

    def test_round_trip(self, items, tmp_path):
        path = export_json(items, tmp_path / "items.json")
        pub = import_json(path, ItemRecord)
        assert pub.records == items.records
        assert pub.has_eof()

    def test_alias_names_accepted(self):
        """An alias value is stored in its group."""
        record = record_from_json({"name": "Warp", "type": 3, "scroll_map": 9, "scroll_x": 4}, ItemRecord)
        assert record.spec1 == 9
        assert record.spec2 == 4

    def test_edited_authoritative_aliases_survive(self, items, tmp_path):
        """Edits to doll_graphic, gender and scroll_y in an exported file are kept."""
        path = export_json(items, tmp_path / "items.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        data[1].update(doll_graphic=99, gender=0, scroll_y=7)
        path.write_text(json.dumps(data), encoding="utf-8")

        robe = import_json(path, ItemRecord).find("Robe")
        assert (robe.spec1, robe.spec2, robe.spec3) == (99, 0, 7)

    def test_edited_member_survives(self, items):
        """A changed non-authoritative member is taken when the rest agree."""
        obj = records_to_json(items.records)[1]
        obj["scroll_map"] = 12
        record = record_from_json(obj, ItemRecord)
        assert record.spec1 == 12
        assert record.spec2 == 1

    def test_conflicting_members(self, items):
        obj = records_to_json(items.records)[1]
        obj.update(scroll_map=12, key=13)
        with pytest.raises(PubFormatError, match="spec1"):
            record_from_json(obj, ItemRecord)

    def test_group_key_without_aliases(self, items):
        obj = records_to_json(items.records, include_aliases=False)[1]
        obj["spec1"] = 70
        assert record_from_json(obj, ItemRecord).doll_graphic == 70

    def test_missing_fields_default_to_zero(self):
        record = record_from_json({"name": "Crow"}, NpcRecord)
        assert record.hp == 0

    def test_skill_chant(self):
        record = record_from_json({"name": "Heal", "chant": "hm", "tp_cost": 3}, SkillRecord)
        assert record.chant == "hm"
        assert record.tp_cost == 3

    def test_records_numbered(self):
        records = records_from_json([{"name": "A", "id": 40}, {"name": "B"}], NpcRecord)
        assert [r.record_id for r in records] == [1, 2]

    @pytest.mark.parametrize("obj", [
        {"name": "A", "colour": 1},
        {"name": "A", "hp": "10"},
        {"name": "A", "hp": True},
        {"name": 5},
        ["A"],
    ])
    def test_invalid_objects(self, obj):
        with pytest.raises(PubFormatError):
            record_from_json(obj, NpcRecord)

    def test_not_a_list(self):
        with pytest.raises(PubFormatError):
            records_from_json({"name": "A"}, NpcRecord)

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(PubFormatError):
            import_json(path, SkillRecord)

    def test_imported_file_encodes(self, tmp_path):
        path = tmp_path / "skills.json"
        path.write_text(json.dumps([{"name": "Heal", "chant": "hm", "hp_heal": 50}]), encoding="utf-8")
        pub = import_json(path, SkillRecord).with_eof()
        decoded = SKILL_FORMAT.decode(SKILL_FORMAT.encode(pub)).pub
        assert decoded.find("heal").hp_heal == 50
        assert decoded.has_eof()

    def test_empty_import_gets_typed_eof(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")
        pub = import_json(path, ItemRecord).with_eof()
        assert isinstance(pub.records[0], ItemRecord)
        assert records_to_json(pub.records) == [{"id": 1, "name": "eof"}]
