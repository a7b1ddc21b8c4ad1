"""MD5 checksums of the save container.

Every checksum covers a fixed byte range and is stored directly in front
of it:

- one per slot window (slots 0-9)
- one for the save headers section (summary table, active flags, ...)
- one for the general data region at the end of the file

Recalculation runs slots first, then the save headers section, then the
general data. Any checksum that covers other checksums must be written
after them.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import List

from ..errors import OutOfBoundsError
from ..utils.binary import BufferLike
from .layout import DEFAULT_LAYOUT, SaveLayout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChecksumStatus:
    """Stored vs computed digest for one region.

    Only the first ``compare_length`` bytes decide validity.
    """

    region: str
    checksum_offset: int
    stored: bytes
    computed: bytes
    compare_length: int = 16

    @property
    def valid(self) -> bool:
        return self.stored[: self.compare_length] == self.computed[: self.compare_length]


def _digest(data: BufferLike, start: int, length: int) -> bytes:
    if start < 0 or start + length > len(data):
        raise OutOfBoundsError(
            f"Checksum region {start:#x}+{length:#x} exceeds buffer of {len(data):#x} bytes"
        )
    return hashlib.md5(memoryview(data)[start : start + length]).digest()


def _write(data: bytearray, offset: int, digest: bytes) -> None:
    data[offset : offset + len(digest)] = digest


def update_slot_checksum(data: bytearray, index: int, layout: SaveLayout = DEFAULT_LAYOUT) -> bool:
    """Rewrite the checksum of one slot window. Returns True if it changed."""
    checksum_offset = layout.slot_checksum_offset(index)
    digest = _digest(data, layout.slot_data_offset(index), layout.slot_data_length)

    compare = layout.slot_checksum_compare_length
    if bytes(data[checksum_offset : checksum_offset + compare]) == digest[:compare]:
        return False

    _write(data, checksum_offset, digest[: layout.checksum_length])
    logger.debug("Updated checksum of slot %d", index)
    return True


def update_save_headers_checksum(data: bytearray, layout: SaveLayout = DEFAULT_LAYOUT) -> None:
    digest = _digest(data, layout.save_headers_section_offset, layout.save_headers_section_length)
    _write(data, layout.save_headers_checksum_offset, digest)


def update_general_checksum(data: bytearray, layout: SaveLayout = DEFAULT_LAYOUT) -> None:
    digest = _digest(data, layout.general_data_offset, layout.general_data_length)
    _write(data, layout.general_data_checksum_offset, digest)


def recalculate_checksums(data: bytearray, layout: SaveLayout = DEFAULT_LAYOUT) -> bytearray:
    """Recalculate every checksum of a freshly mutated buffer in place."""
    changed = [i for i in range(layout.slot_count) if update_slot_checksum(data, i, layout)]
    update_save_headers_checksum(data, layout)
    update_general_checksum(data, layout)
    logger.info("Recalculated checksums (%d slot checksums changed)", len(changed))
    return data


def verify_checksums(data: BufferLike, layout: SaveLayout = DEFAULT_LAYOUT) -> List[ChecksumStatus]:
    """Compare every stored checksum with a freshly computed one.

    Slot checksums are compared on their first
    ``slot_checksum_compare_length`` bytes, as in ``recalculate_checksums``.
    """
    regions = [
        (
            f"slot {i}",
            layout.slot_checksum_offset(i),
            layout.slot_data_offset(i),
            layout.slot_data_length,
            layout.slot_checksum_compare_length,
        )
        for i in range(layout.slot_count)
    ]
    regions.append(
        (
            "save headers",
            layout.save_headers_checksum_offset,
            layout.save_headers_section_offset,
            layout.save_headers_section_length,
            layout.checksum_length,
        )
    )
    regions.append(
        (
            "general data",
            layout.general_data_checksum_offset,
            layout.general_data_offset,
            layout.general_data_length,
            layout.checksum_length,
        )
    )

    results = []
    for region, checksum_offset, start, length, compare_length in regions:
        computed = _digest(data, start, length)
        stored = bytes(data[checksum_offset : checksum_offset + layout.checksum_length])
        results.append(
            ChecksumStatus(
                region=region,
                checksum_offset=checksum_offset,
                stored=stored,
                computed=computed,
                compare_length=compare_length,
            )
        )
    return results
