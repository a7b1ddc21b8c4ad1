"""Tests for slot summary records."""

import struct

import pytest

from ersave_toolkit.save.summary import EMPTY_SLOT_NAME, SummaryRecord


def make_record(name: str, level: int, seconds: int, encoding: str = "utf-16-le") -> bytes:
    raw = bytearray(588)
    raw[:34] = name.encode(encoding).ljust(34, b"\x00")
    struct.pack_into("<ii", raw, 34, level, seconds)
    raw[100:104] = b"\xDE\xAD\xBE\xEF"  # bytes past the known fields
    return bytes(raw)


class TestSummaryRecord:
    """Tests for SummaryRecord."""

    def test_decode(self):
        record = SummaryRecord.decode(make_record("Tarnished", 25, 3723))
        assert record.character_name == "Tarnished"
        assert record.character_level == 25
        assert record.seconds_played == 3723
        assert not record.is_empty

    def test_decode_strips_whitespace(self):
        record = SummaryRecord.decode(make_record("  Ranni ", 80, 0))
        assert record.character_name == "Ranni"

    def test_empty_name(self):
        record = SummaryRecord.decode(bytes(588))
        assert record.character_name == EMPTY_SLOT_NAME
        assert record.is_empty
        assert record.character_level == 0

    def test_big_endian_name(self):
        record = SummaryRecord.decode(make_record("Blaidd", 60, 5, "utf-16-be"), big_endian=True)
        assert record.character_name == "Blaidd"
        assert record.character_level == 60

    def test_too_small(self):
        with pytest.raises(ValueError):
            SummaryRecord.decode(b"\x00" * 20)

    def test_encode_unchanged_is_identity(self):
        raw = make_record("Tarnished", 25, 3723)
        assert SummaryRecord.decode(raw).encode() == raw

    def test_encode_empty_slot_is_identity(self):
        raw = bytes(588)
        assert SummaryRecord.decode(raw).encode() == raw

    def test_encode_changed_fields(self):
        record = SummaryRecord.decode(make_record("Tarnished", 25, 3723))
        changed = SummaryRecord(
            character_name="Melina",
            character_level=30,
            seconds_played=10,
            raw=record.raw,
        )

        decoded = SummaryRecord.decode(changed.encode())
        assert decoded.character_name == "Melina"
        assert decoded.character_level == 30
        assert decoded.seconds_played == 10
        # Unknown bytes survive
        assert decoded.raw[100:104] == b"\xDE\xAD\xBE\xEF"

    def test_encode_name_too_long(self):
        record = SummaryRecord.decode(make_record("Tarnished", 25, 3723))
        changed = SummaryRecord("A" * 20, 25, 3723, record.raw)
        with pytest.raises(ValueError, match="too long"):
            changed.encode()
