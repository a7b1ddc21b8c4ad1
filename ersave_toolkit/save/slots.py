"""Character slots of a save container."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..bnd4 import BND4Entry, BND4Reader
from ..utils.binary import BufferLike
from .layout import DEFAULT_LAYOUT, SaveLayout
from .summary import SummaryRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Slot:
    """One character slot.

    ``checksum`` and ``save_data`` are the entry payload split at the
    checksum length. Slots loaded from a portable file have no index,
    no entry and an inactive flag.
    """

    summary: SummaryRecord
    checksum: memoryview
    save_data: memoryview
    index: Optional[int] = None
    active_flag: int = 0
    entry: Optional[BND4Entry] = None

    @property
    def active(self) -> bool:
        return self.active_flag == 1

    @property
    def header_data(self) -> bytes:
        """The raw summary record."""
        return self.summary.raw

    @property
    def character_name(self) -> str:
        return self.summary.character_name

    @property
    def character_level(self) -> int:
        return self.summary.character_level

    @property
    def seconds_played(self) -> int:
        return self.summary.seconds_played

    @property
    def data_offset(self) -> Optional[int]:
        """Absolute offset of the slot checksum in its container."""
        return self.entry.data_offset if self.entry else None

    def __repr__(self) -> str:
        return (
            f"Slot(index={self.index}, active={self.active}, "
            f"name={self.character_name!r}, level={self.character_level})"
        )


def parse_slot_index(name: Optional[str], layout: SaveLayout = DEFAULT_LAYOUT) -> Optional[int]:
    """Return the slot index encoded in an entry name, or None."""
    if not name or not name.startswith(layout.save_identifier):
        return None
    digits = name[len(layout.save_identifier) :]
    # ASCII digits only
    if not (digits.isascii() and digits.isdecimal()):
        return None
    index = int(digits)
    if index >= layout.slot_count:
        return None
    return index


def extract_slots(
    archive: BND4Reader, data: BufferLike, layout: SaveLayout = DEFAULT_LAYOUT
) -> List[Slot]:
    """Build the slot list of a parsed archive, sorted by index.

    Summary records and active flags are read from their fixed tables in
    ``data``, not from the entry's own bytes.
    """
    view = memoryview(data)
    slots = {}

    for entry in archive.entries:
        index = parse_slot_index(entry.name, layout)
        if index is None:
            if entry.name:
                logger.debug("Skipping non-slot entry %s", entry.name)
            continue
        if index in slots:
            logger.warning("Duplicate entry for slot %d, keeping the first", index)
            continue

        summary_start = layout.summary_offset(index)
        summary_data = view[summary_start : summary_start + layout.header_data_length]
        if len(summary_data) < layout.header_data_length:
            logger.warning("Summary record of slot %d is outside the buffer, skipping", index)
            continue

        slots[index] = Slot(
            summary=SummaryRecord.decode(summary_data, archive.header.big_endian),
            checksum=entry.data[: layout.checksum_length],
            save_data=entry.data[layout.checksum_length :],
            index=index,
            active_flag=view[layout.active_flag_offset(index)],
            entry=entry,
        )

    return [slots[i] for i in sorted(slots)]
