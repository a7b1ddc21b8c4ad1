"""Shared fixtures: small synthetic save containers."""

import struct
from typing import Dict, Optional, Sequence

import pytest

from ersave_toolkit.save.checksums import recalculate_checksums
from ersave_toolkit.save.layout import SaveLayout

# Same structure as a real save, shrunk so a whole file is ~12 KB:
# 64-byte header, 12 entries of 32 bytes, UTF-16 names, ten 528-byte slot
# windows from 0x300, the save headers section, then general data.
COMPACT_LAYOUT = SaveLayout(
    slot_data_length=512,
    slot_stride=528,
    save_headers_section_offset=6064,
    save_headers_section_length=6144,
    steam_id_offset=6068,
    active_slot_offset=6164,
    header_data_offset=6174,
    general_data_offset=12224,
    general_data_length=256,
)

STEAM_ID = 76561198012345678

# Attribute block origin inside the save data of generated slots
STATS_OFFSET = 200

ENTRY_COUNT = 12
ENTRY_HEADER_SIZE = 32
NAMES_OFFSET = 0x40 + ENTRY_COUNT * ENTRY_HEADER_SIZE


def put_stats(
    save_data: bytearray,
    attributes: Sequence[int],
    level: int,
    offset: int = STATS_OFFSET,
    hp: int = 0,
    fp: int = 0,
    stamina: int = 0,
) -> None:
    """Write an attribute block the way the game lays it out."""
    for k, value in enumerate(attributes):
        save_data[offset + k * 4] = value
    struct.pack_into("<H", save_data, offset + 44, level)
    if offset < 44:
        return
    for base, value in ((-44, hp), (-32, fp), (-16, stamina)):
        for step in range(3):
            struct.pack_into("<H", save_data, offset + base + step * 4, value)


def build_save(
    characters: Optional[Dict[int, dict]] = None,
    layout: SaveLayout = COMPACT_LAYOUT,
    big_endian: bool = False,
    magic: bytes = b"BND4",
) -> bytes:
    """Build a checksummed BND4 save container.

    ``characters`` maps a slot index to a dict with ``name``, ``level``,
    ``seconds`` and optionally ``attributes`` (placed at ``stats_offset``,
    STATS_OFFSET by default), ``hp``/``fp``/``stamina`` and ``fill`` (byte
    used for the save data).
    """
    characters = characters or {}
    buf = bytearray(layout.minimum_size)

    buf[0:4] = magic
    buf[9] = int(big_endian)
    buf[10] = 0  # bit big-endian, format byte is used as-is
    struct.pack_into("<i", buf, 12, ENTRY_COUNT)
    struct.pack_into("<q", buf, 16, 0x40)
    buf[24:32] = b"00000001"
    struct.pack_into("<q", buf, 32, ENTRY_HEADER_SIZE)
    buf[48] = 1  # unicode names
    buf[49] = 0x24  # 32-bit offsets, uncompressed size, names

    entry_regions = [(layout.slot_checksum_offset(i), layout.slot_stride) for i in range(10)]
    entry_regions.append(
        (layout.save_headers_checksum_offset, layout.checksum_length + layout.save_headers_section_length)
    )
    entry_regions.append(
        (layout.general_data_checksum_offset, layout.checksum_length + layout.general_data_length)
    )

    name_encoding = "utf-16-be" if big_endian else "utf-16-le"
    name_offset = NAMES_OFFSET
    for i, (offset, size) in enumerate(entry_regions):
        struct.pack_into(
            "<B3xiqqii",
            buf,
            0x40 + i * ENTRY_HEADER_SIZE,
            0x40,
            -1,
            size,
            size,
            offset,
            name_offset,
        )
        name = f"USER_DATA{i:03d}".encode(name_encoding) + b"\x00\x00"
        buf[name_offset : name_offset + len(name)] = name
        name_offset += len(name)

    struct.pack_into("<Q", buf, layout.steam_id_offset, STEAM_ID)

    for index, character in characters.items():
        save_data = bytearray([character.get("fill", 0)] * layout.slot_data_length)
        if "attributes" in character:
            put_stats(
                save_data,
                character["attributes"],
                character["level"],
                offset=character.get("stats_offset", STATS_OFFSET),
                hp=character.get("hp", 0),
                fp=character.get("fp", 0),
                stamina=character.get("stamina", 0),
            )
        start = layout.slot_data_offset(index)
        buf[start : start + layout.slot_data_length] = save_data

        summary = layout.summary_offset(index)
        name = character["name"].encode(name_encoding).ljust(34, b"\x00")
        buf[summary : summary + 34] = name
        struct.pack_into("<ii", buf, summary + 34, character["level"], character.get("seconds", 0))
        buf[layout.active_flag_offset(index)] = 1

    recalculate_checksums(buf, layout)
    return bytes(buf)


TARNISHED = {
    "name": "Tarnished",
    "level": 25,
    "seconds": 3723,
    "attributes": [15, 12, 14, 13, 12, 12, 13, 13],
    "hp": 522,
    "fp": 85,
    "stamina": 103,
    "fill": 0,
}

MELINA = {
    "name": "Melina",
    "level": 1,
    "seconds": 42,
    "attributes": [10, 10, 10, 10, 10, 10, 10, 10],
    "hp": 414,
    "fp": 78,
    "stamina": 96,
}


@pytest.fixture
def layout() -> SaveLayout:
    return COMPACT_LAYOUT


@pytest.fixture
def save_bytes() -> bytes:
    """Slot 3 holds Tarnished, slot 0 holds Melina, the rest are empty."""
    return build_save({0: MELINA, 3: TARNISHED})


@pytest.fixture
def empty_save_bytes() -> bytes:
    return build_save()


@pytest.fixture
def make_save():
    return build_save
