"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner
from conftest import COMPACT_LAYOUT, TARNISHED

from ersave_toolkit.cli import format_play_time, main, slot_file_name
from ersave_toolkit.save import SaveFile, get_stats, verify_checksums


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def save_path(tmp_path, save_bytes):
    path = tmp_path / "ER0000.sl2"
    path.write_bytes(save_bytes)
    return path


@pytest.fixture
def empty_path(tmp_path, empty_save_bytes):
    path = tmp_path / "empty.sl2"
    path.write_bytes(empty_save_bytes)
    return path


def invoke(runner, *args):
    return runner.invoke(main, [str(a) for a in args], obj={"layout": COMPACT_LAYOUT})


class TestFormatPlayTime:
    """Tests for format_play_time."""

    def test_seconds(self):
        assert format_play_time(42) == "42s"

    def test_minutes(self):
        assert format_play_time(125) == "2m 5s"

    def test_hours(self):
        assert format_play_time(3723) == "1h 2m 3s"

    def test_zero(self):
        assert format_play_time(0) == "0s"


class TestSlotFileName:
    """Tests for slot_file_name."""

    def test_plain_name(self):
        assert slot_file_name("Tarnished", ".er") == "Tarnished.er"

    def test_separators_replaced(self):
        assert slot_file_name("Ranni/../x", ".er") == "Ranni_.._x.er"
        assert slot_file_name("a\\b", ".er") == "a_b.er"

    def test_blank_name(self):
        assert slot_file_name("  ", ".er") == "slot.er"


class TestInfo:
    """Tests for the info command."""

    def test_lists_slots(self, runner, save_path):
        result = invoke(runner, "info", save_path)

        assert result.exit_code == 0, result.output
        assert "Tarnished" in result.output
        assert "Melina" in result.output
        assert "1h 2m 3s" in result.output
        assert "Empty Slot" in result.output
        assert "76561198012345678" in result.output

    def test_not_a_save(self, runner, tmp_path):
        path = tmp_path / "bad.sl2"
        path.write_bytes(b"\x00" * 128)

        result = invoke(runner, "info", path)
        assert result.exit_code == 1
        assert "Invalid BND4 magic" in result.output

    def test_version(self, runner):
        result = invoke(runner, "--version")
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestCopy:
    """Tests for the copy command."""

    def test_copy_to_output(self, runner, save_path, empty_path, tmp_path):
        output = tmp_path / "out.sl2"
        result = invoke(runner, "copy", save_path, 3, empty_path, 4, "-o", output)

        assert result.exit_code == 0, result.output
        assert "Copied Tarnished (level 25) to slot 4" in result.output
        slot = SaveFile(output.read_bytes(), COMPACT_LAYOUT).require_slot(4)
        assert slot.character_name == "Tarnished"
        assert slot.active

    def test_copy_overwrites_target(self, runner, save_path, empty_path):
        original = empty_path.read_bytes()
        result = invoke(runner, "copy", save_path, 0, empty_path, 0)

        assert result.exit_code == 0, result.output
        assert empty_path.read_bytes() != original

    def test_slot_out_of_range(self, runner, save_path, empty_path):
        result = invoke(runner, "copy", save_path, 3, empty_path, 10)
        assert result.exit_code == 2


class TestExtractImport:
    """Tests for the extract and import commands."""

    def test_round_trip(self, runner, save_path, empty_path, tmp_path):
        result = invoke(runner, "extract", save_path, 3)
        assert result.exit_code == 0, result.output
        slot_file = tmp_path / "Tarnished.er"
        assert slot_file.exists()
        assert "Ratio:" in result.output

        output = tmp_path / "imported.sl2"
        result = invoke(runner, "import", slot_file, empty_path, 7, "-o", output)
        assert result.exit_code == 0, result.output

        data = output.read_bytes()
        slot = SaveFile(data, COMPACT_LAYOUT).require_slot(7)
        assert slot.character_name == "Tarnished"
        assert slot.character_level == 25
        assert all(status.valid for status in verify_checksums(data, COMPACT_LAYOUT))

    def test_extract_name_with_separators(self, runner, make_save, tmp_path):
        save_path = tmp_path / "ER0000.sl2"
        save_path.write_bytes(make_save({1: {"name": "Ranni/../x", "level": 80}}))

        result = invoke(runner, "extract", save_path, 1)
        assert result.exit_code == 0, result.output
        assert (tmp_path / "Ranni_.._x.er").exists()
        assert sorted(p.name for p in tmp_path.iterdir()) == ["ER0000.sl2", "Ranni_.._x.er"]

    def test_import_garbage(self, runner, empty_path, tmp_path):
        slot_file = tmp_path / "broken.er"
        slot_file.write_bytes(b"garbage")

        result = invoke(runner, "import", slot_file, empty_path, 0)
        assert result.exit_code == 1
        assert "decompress" in result.output


class TestStats:
    """Tests for the stats and set-stats commands."""

    def test_show(self, runner, save_path):
        result = invoke(runner, "stats", save_path, 3)

        assert result.exit_code == 0, result.output
        assert "Vigor" in result.output
        assert "Level:        25" in result.output
        assert "522/522/522" in result.output

    def test_show_empty(self, runner, save_path):
        result = invoke(runner, "stats", save_path, 5)
        assert result.exit_code == 0
        assert "No stats found for slot 5" in result.output

    def test_set_keeps_unspecified(self, runner, save_path):
        result = invoke(runner, "set-stats", save_path, 3, "--vigor", 20, "--custom-attributes")

        assert result.exit_code == 0, result.output
        assert "Level: 25 -> 30" in result.output

        character = get_stats(save_path.read_bytes(), 3, COMPACT_LAYOUT)
        expected = [20] + TARNISHED["attributes"][1:]
        assert list(character.attributes.as_tuple()) == expected
        assert character.level == 30
        assert character.hp[0] != TARNISHED["hp"]

    def test_set_god_mode(self, runner, save_path, tmp_path):
        output = tmp_path / "god.sl2"
        result = invoke(runner, "set-stats", save_path, 3, "--god-mode", "-o", output)

        assert result.exit_code == 0, result.output
        assert get_stats(output.read_bytes(), 3, COMPACT_LAYOUT).hp == (60000, 60000, 60000)

    def test_set_empty_slot(self, runner, save_path):
        result = invoke(runner, "set-stats", save_path, 5, "--vigor", 20)
        assert result.exit_code == 1
        assert "No stats found" in result.output

    def test_attribute_range(self, runner, save_path):
        result = invoke(runner, "set-stats", save_path, 3, "--vigor", 100)
        assert result.exit_code == 2


class TestChecksumCommands:
    """Tests for verify and fix-checksums."""

    def test_verify_ok(self, runner, save_path):
        result = invoke(runner, "verify", save_path)
        assert result.exit_code == 0, result.output
        assert "MISMATCH" not in result.output

    def test_verify_and_fix(self, runner, save_path):
        data = bytearray(save_path.read_bytes())
        data[COMPACT_LAYOUT.slot_data_offset(2)] ^= 0xFF
        save_path.write_bytes(data)

        result = invoke(runner, "verify", save_path)
        assert result.exit_code == 1
        assert "slot 2" in result.output
        assert "MISMATCH" in result.output

        result = invoke(runner, "fix-checksums", save_path)
        assert result.exit_code == 0, result.output

        result = invoke(runner, "verify", save_path)
        assert result.exit_code == 0, result.output
