"""Character attributes and derived HP/FP/stamina.

The attribute block has no declared offset inside a slot. It is found by
scanning the save data for eight attribute bytes (stride 4) whose sum is
``level + 79`` and whose level field 44 bytes further on equals the level
from the slot's summary record. The first match wins.

Layout around the block origin::

    -44 -40 -36   HP       (current, max, base max), u16 each
    -32 -28 -24   FP
    -16 -12  -8   stamina
      0 .. +28    vigor, mind, endurance, strength, dexterity,
                  intelligence, faith, arcane (1 byte + 3 padding each)
    +44           level, u16
"""

import logging
from dataclasses import astuple, dataclass, fields
from typing import Mapping, Optional, Sequence, Tuple, Union

from ..errors import StatsNotFoundError
from ..utils.binary import BufferLike, read_u16_le, write_i32_le, write_u16_le
from .checksums import recalculate_checksums
from .layout import DEFAULT_LAYOUT, SaveLayout
from .save_file import SaveFile
from .slots import Slot
from .summary import LEVEL_OFFSET as SUMMARY_LEVEL_OFFSET

logger = logging.getLogger(__name__)

ATTRIBUTE_COUNT = 8
ATTRIBUTE_STRIDE = 4
LEVEL_FIELD_OFFSET = 44
# Every attribute starts at 10 or thereabouts; a level 1 character sums to 80
LEVEL_BASE = 79

SCAN_LIMIT = 120000
SCAN_TAIL = 50

HP_OFFSETS = (-44, -40, -36)
FP_OFFSETS = (-32, -28, -24)
STAMINA_OFFSETS = (-16, -12, -8)

# Bytes a block spans before and after its origin
BLOCK_LEAD = -min(HP_OFFSETS)
BLOCK_TAIL = LEVEL_FIELD_OFFSET + 2

GOD_MODE_VALUE = 60000

MAX_TABLE_ATTRIBUTE = 99


def _hp_curve(vigor: int) -> float:
    if vigor <= 25:
        return 300 + 500 * ((vigor - 1) / 24) ** 1.5
    if vigor <= 40:
        return 800 + 650 * ((vigor - 25) / 15) ** 1.1
    if vigor <= 60:
        return 1450 + 450 * (1 - (1 - (vigor - 40) / 20) ** 1.2)
    return 1900 + 200 * (1 - (1 - (vigor - 60) / 39) ** 1.2)


def _fp_curve(mind: int) -> float:
    if mind <= 15:
        return 50 + 45 * (mind - 1) / 14
    if mind <= 35:
        return 95 + 105 * (mind - 15) / 20
    if mind <= 60:
        return 200 + 150 * (1 - (1 - (mind - 35) / 25) ** 1.2)
    return 350 + 100 * (mind - 60) / 39


def _stamina_curve(endurance: int) -> float:
    if endurance <= 15:
        return 80 + 25 * (endurance - 1) / 14
    if endurance <= 30:
        return 105 + 25 * (endurance - 15) / 15
    if endurance <= 50:
        return 130 + 25 * (endurance - 30) / 20
    return 155 + 15 * (endurance - 50) / 49


# Index 0 is attribute value 1
HP_TABLE = tuple(int(_hp_curve(v)) for v in range(1, MAX_TABLE_ATTRIBUTE + 1))
FP_TABLE = tuple(int(_fp_curve(v)) for v in range(1, MAX_TABLE_ATTRIBUTE + 1))
STAMINA_TABLE = tuple(int(_stamina_curve(v)) for v in range(1, MAX_TABLE_ATTRIBUTE + 1))


def _lookup(table: Tuple[int, ...], value: int) -> int:
    value = min(max(value, 1), MAX_TABLE_ATTRIBUTE)
    return table[value - 1]


def derived_hp(vigor: int) -> int:
    return _lookup(HP_TABLE, vigor)


def derived_fp(mind: int) -> int:
    return _lookup(FP_TABLE, mind)


def derived_stamina(endurance: int) -> int:
    return _lookup(STAMINA_TABLE, endurance)


@dataclass(frozen=True)
class Attributes:
    """The eight character attributes, in their on-disk order."""

    vigor: int
    mind: int
    endurance: int
    strength: int
    dexterity: int
    intelligence: int
    faith: int
    arcane: int

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_values(
        cls, values: Union["Attributes", Mapping[str, int], Sequence[int]]
    ) -> "Attributes":
        if isinstance(values, Attributes):
            return values
        if isinstance(values, Mapping):
            return cls(**{name: int(values[name]) for name in cls.names()})
        values = [int(v) for v in values]
        if len(values) != ATTRIBUTE_COUNT:
            raise ValueError(f"Expected {ATTRIBUTE_COUNT} attributes, got {len(values)}")
        return cls(*values)

    def as_tuple(self) -> Tuple[int, ...]:
        return astuple(self)

    def as_dict(self) -> dict:
        return dict(zip(self.names(), self.as_tuple()))

    @property
    def total(self) -> int:
        return sum(self.as_tuple())

    @property
    def level(self) -> int:
        return self.total - LEVEL_BASE


@dataclass(frozen=True)
class CharacterStats:
    """A located attribute block and the values around it."""

    slot_index: int
    offset: int  # absolute offset of the block origin in the container
    attributes: Attributes
    level: int
    hp: Tuple[int, int, int]
    fp: Tuple[int, int, int]
    stamina: Tuple[int, int, int]


def find_stats_offset(save_data: BufferLike, header_level: int) -> int:
    """Return the offset of the attribute block inside ``save_data``."""
    limit = min(SCAN_LIMIT, len(save_data) - SCAN_TAIL)
    if limit <= 0:
        raise StatsNotFoundError(f"Save data too small to hold stats: {len(save_data)} bytes")

    window = ATTRIBUTE_COUNT * ATTRIBUTE_STRIDE
    data = bytes(save_data[: limit + LEVEL_FIELD_OFFSET + 2])
    target_sum = header_level + LEVEL_BASE

    for i in range(limit):
        if sum(data[i : i + window : ATTRIBUTE_STRIDE]) != target_sum:
            continue
        if read_u16_le(data, i + LEVEL_FIELD_OFFSET) == header_level:
            return i

    raise StatsNotFoundError(f"No stats block for level {header_level} in the first {limit} bytes")


def locate_stats(slot: Slot, layout: SaveLayout = DEFAULT_LAYOUT) -> int:
    """Return the absolute offset of a slot's attribute block."""
    relative = find_stats_offset(slot.save_data, slot.character_level)
    # HP/FP/stamina sit in front of the block and must stay inside this slot
    if relative < BLOCK_LEAD or relative + BLOCK_TAIL > len(slot.save_data):
        raise StatsNotFoundError(
            f"Stats block of slot {slot.index} at save data offset {relative} "
            f"does not leave room for its resource fields"
        )
    origin = slot.data_offset + layout.checksum_length + relative
    logger.debug("Stats of slot %s at save data offset %d (absolute %#x)", slot.index, relative, origin)
    return origin


def _read_triple(data: BufferLike, origin: int, offsets: Tuple[int, int, int]) -> Tuple[int, int, int]:
    return tuple(read_u16_le(data, origin + o) for o in offsets)


def read_stats(data: BufferLike, slot_index: int, origin: int) -> CharacterStats:
    """Decode the attribute block at ``origin``."""
    attributes = Attributes(*(data[origin + k * ATTRIBUTE_STRIDE] for k in range(ATTRIBUTE_COUNT)))
    return CharacterStats(
        slot_index=slot_index,
        offset=origin,
        attributes=attributes,
        level=read_u16_le(data, origin + LEVEL_FIELD_OFFSET),
        hp=_read_triple(data, origin, HP_OFFSETS),
        fp=_read_triple(data, origin, FP_OFFSETS),
        stamina=_read_triple(data, origin, STAMINA_OFFSETS),
    )


def get_stats(
    data: BufferLike, slot_index: int, layout: SaveLayout = DEFAULT_LAYOUT
) -> Optional[CharacterStats]:
    """Read a slot's stats, or None if the slot has no attribute block."""
    slot = SaveFile(data, layout).require_slot(slot_index)
    try:
        origin = locate_stats(slot, layout)
    except StatsNotFoundError as e:
        logger.info("No stats for slot %d: %s", slot_index, e)
        return None
    return read_stats(data, slot_index, origin)


def _write_triple(data: bytearray, origin: int, offsets: Tuple[int, int, int], value: int) -> None:
    for o in offsets:
        data[origin + o : origin + o + 2] = write_u16_le(value)


def set_stats(
    data: BufferLike,
    slot_index: int,
    attributes: Union[Attributes, Mapping[str, int], Sequence[int]],
    god_mode: bool = False,
    custom_attributes: bool = False,
    layout: SaveLayout = DEFAULT_LAYOUT,
) -> bytearray:
    """Write new attributes to a slot and return the updated container.

    The level is derived from the attributes and written both to the
    attribute block and to the summary record. With ``god_mode`` every
    HP/FP/stamina value becomes 60000; with ``custom_attributes`` they are
    recomputed from vigor, mind and endurance. All checksums are
    recalculated. ``data`` is left untouched.
    """
    attrs = Attributes.from_values(attributes)
    for name, value in attrs.as_dict().items():
        if not 0 <= value <= 0xFF:
            raise ValueError(f"{name} must be between 0 and 255, got {value}")
    level = attrs.level
    if not 0 <= level <= 0xFFFF:
        raise ValueError(f"Attributes sum to {attrs.total}, which gives an invalid level {level}")

    slot = SaveFile(data, layout).require_slot(slot_index)
    origin = locate_stats(slot, layout)

    updated = bytearray(data)
    for k, value in enumerate(attrs.as_tuple()):
        updated[origin + k * ATTRIBUTE_STRIDE] = value
    updated[origin + LEVEL_FIELD_OFFSET : origin + LEVEL_FIELD_OFFSET + 2] = write_u16_le(level)

    mirror = layout.summary_offset(slot_index) + SUMMARY_LEVEL_OFFSET
    updated[mirror : mirror + 4] = write_i32_le(level)

    if god_mode:
        for offsets in (HP_OFFSETS, FP_OFFSETS, STAMINA_OFFSETS):
            _write_triple(updated, origin, offsets, GOD_MODE_VALUE)
    elif custom_attributes:
        _write_triple(updated, origin, HP_OFFSETS, derived_hp(attrs.vigor))
        _write_triple(updated, origin, FP_OFFSETS, derived_fp(attrs.mind))
        _write_triple(updated, origin, STAMINA_OFFSETS, derived_stamina(attrs.endurance))

    recalculate_checksums(updated, layout)
    logger.info("Set stats of slot %d to level %d", slot_index, level)
    return updated
