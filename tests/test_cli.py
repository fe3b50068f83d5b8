"""
pubtool CLI Tests
=================
"""

import json

import pytest
from click.testing import CliRunner

from conftest import raw_pub, raw_record
from eopub.cli.errors import ExitCode
from eopub.cli.pubtool import main
from eopub.pub.formats import ITEM_FORMAT, NPC_FORMAT
from eopub.pub.records import ItemRecord, ItemType, NpcRecord


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def item_file(tmp_path):
    pub = ITEM_FORMAT.new_file([
        ItemRecord(name="Gold", type=ItemType.CURRENCY, graphic=2),
        ItemRecord(name="Sword", type=ItemType.WEAPON, max_damage=14, spec1=33),
    ])
    return ITEM_FORMAT.write_file(pub, tmp_path / "dat001.eif")


@pytest.fixture
def truncated_file(tmp_path, truncated_buffer):
    path = tmp_path / "broken.eif"
    path.write_bytes(truncated_buffer)
    return path


class TestGroup:
    """Tests for the top-level command group."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "Endless Online pub file tool" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "pubtool" in result.output


class TestInfoAndList:
    """Read-only commands."""

    def test_info(self, runner, item_file):
        result = runner.invoke(main, ["info", str(item_file)])
        assert result.exit_code == 0
        assert "EIF (item)" in result.output
        assert "Declared:     3 records" in result.output
        assert "complete" in result.output

    def test_info_truncated(self, runner, truncated_file):
        result = runner.invoke(main, ["info", str(truncated_file)])
        assert result.exit_code == 0
        assert "truncated" in result.output

    def test_list(self, runner, item_file):
        result = runner.invoke(main, ["list", "-v", str(item_file)])
        assert result.exit_code == 0
        assert "Gold" in result.output
        assert "Sword" in result.output
        assert "Total: 2 item records" in result.output

    def test_dump_one(self, runner, item_file):
        result = runner.invoke(main, ["dump", "--id", "2", str(item_file)])
        assert result.exit_code == 0
        assert "[2] Sword" in result.output
        assert "doll_graphic" in result.output
        assert "Gold" not in result.output

    def test_dump_missing_id(self, runner, item_file):
        result = runner.invoke(main, ["dump", "--id", "99", str(item_file)])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_format_mismatch(self, runner, item_file):
        result = runner.invoke(main, ["info", "--format", "npc", str(item_file)])
        assert result.exit_code == ExitCode.PUB_ERROR
        assert "expected ENF" in result.output

    def test_unknown_tag(self, runner, tmp_path):
        path = tmp_path / "x.bin"
        path.write_bytes(b"XYZ" + bytes(7))
        result = runner.invoke(main, ["list", str(path)])
        assert result.exit_code == ExitCode.PUB_ERROR

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(main, ["info", str(tmp_path / "none.eif")])
        assert result.exit_code == 2


class TestValidate:
    """Tests for the validate command."""

    def test_valid(self, runner, item_file):
        result = runner.invoke(main, ["validate", "--verify-checksum", str(item_file)])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_truncated(self, runner, truncated_file):
        result = runner.invoke(main, ["validate", str(truncated_file)])
        assert result.exit_code == ExitCode.PUB_ERROR
        assert "INVALID" in result.output

    def test_bad_checksum(self, runner, tmp_path):
        path = tmp_path / "hand.eif"
        path.write_bytes(raw_pub(b"EIF", 1, raw_record("eof")))
        assert runner.invoke(main, ["validate", str(path)]).exit_code == 0
        result = runner.invoke(main, ["validate", "--verify-checksum", str(path)])
        assert result.exit_code == ExitCode.PUB_ERROR


class TestConversion:
    """export, import and rewrite."""

    def test_export_import(self, runner, item_file, tmp_path):
        out_json = tmp_path / "items.json"
        result = runner.invoke(main, ["export", str(item_file), "-o", str(out_json)])
        assert result.exit_code == 0
        data = json.loads(out_json.read_text(encoding="utf-8"))
        assert data[1]["doll_graphic"] == 33

        out_pub = tmp_path / "copy.eif"
        result = runner.invoke(main, ["import", str(out_json), "-o", str(out_pub), "--format", "item"])
        assert result.exit_code == 0
        assert out_pub.read_bytes() == item_file.read_bytes()

    def test_import_adds_eof(self, runner, tmp_path):
        src = tmp_path / "npcs.json"
        src.write_text(json.dumps([{"name": "Crow", "hp": 10}]), encoding="utf-8")
        out = tmp_path / "dtn001.enf"
        result = runner.invoke(main, ["import", str(src), "-o", str(out), "-f", "npc"])
        assert result.exit_code == 0
        pub = NPC_FORMAT.read_file(out).pub
        assert pub.has_eof()
        assert pub.find("crow").hp == 10

    def test_import_empty_array(self, runner, tmp_path):
        src = tmp_path / "none.json"
        src.write_text("[]", encoding="utf-8")
        out = tmp_path / "dat001.eif"
        result = runner.invoke(main, ["import", str(src), "-o", str(out), "-f", "item"])
        assert result.exit_code == 0
        result = runner.invoke(main, ["export", str(out), "-o", str(tmp_path / "back.json")])
        assert result.exit_code == 0
        data = json.loads((tmp_path / "back.json").read_text(encoding="utf-8"))
        assert data == [{"id": 1, "name": "eof"}]

    def test_import_strict(self, runner, tmp_path):
        src = tmp_path / "npcs.json"
        src.write_text(json.dumps([{"name": "Big", "level": 999}]), encoding="utf-8")
        out = tmp_path / "dtn001.enf"
        result = runner.invoke(main, ["import", str(src), "-o", str(out), "-f", "npc", "--strict"])
        assert result.exit_code == ExitCode.PUB_ERROR
        assert "level" in result.output

    def test_import_bad_json(self, runner, tmp_path):
        src = tmp_path / "bad.json"
        src.write_text(json.dumps([{"name": "X", "wings": 1}]), encoding="utf-8")
        result = runner.invoke(main, ["import", str(src), "-o", str(tmp_path / "o.enf"), "-f", "npc"])
        assert result.exit_code == ExitCode.PUB_ERROR

    def test_rewrite_truncated(self, runner, truncated_file, tmp_path):
        out = tmp_path / "fixed.eif"
        result = runner.invoke(main, ["rewrite", str(truncated_file), "-o", str(out)])
        assert result.exit_code == 0

        fixed = ITEM_FORMAT.read_file(out)
        assert fixed.is_complete
        assert fixed.pub.declared_count == 3
        assert runner.invoke(main, ["validate", "--verify-checksum", str(out)]).exit_code == 0

    def test_env_strict(self, runner, tmp_path, monkeypatch):
        pub = NPC_FORMAT.new_file([NpcRecord(name="Big", level=999)])
        # Written with the default policy, which wraps
        path = NPC_FORMAT.write_file(pub, tmp_path / "dtn001.enf")
        monkeypatch.setenv("EOPUB_OVERFLOW", "strict")
        result = runner.invoke(main, ["rewrite", str(path), "-o", str(tmp_path / "out.enf")])
        assert result.exit_code == 0
