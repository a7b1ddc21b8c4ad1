"""Copy slots between containers and move them in and out of portable files.

A portable slot file (``.er``) is a zstd frame holding::

    summary record (588 bytes) | checksum (16 bytes) | save data

with no header of its own.
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import zstandard

from ..errors import DecompressionError, SlotSizeMismatchError, TargetSlotNotFoundError
from ..utils.binary import BufferLike
from .checksums import update_save_headers_checksum
from .layout import DEFAULT_LAYOUT, SaveLayout
from .save_file import SaveFile, write_save_file_atomically
from .slots import Slot
from .summary import SummaryRecord

logger = logging.getLogger(__name__)

# zstd level used for portable slot files
COMPRESSION_LEVEL = 8

EXTRACTED_SLOT_SUFFIX = ".er"


@dataclass(frozen=True)
class ExtractResult:
    """A compressed slot and its size figures."""

    data: bytes
    original_size: int
    compressed_size: int

    @property
    def compression_ratio(self) -> float:
        if not self.compressed_size:
            return 0.0
        return self.original_size / self.compressed_size


def write_slot(
    buffer: bytearray,
    slot: Slot,
    index: int,
    data_offset: int,
    active_flag: int,
    layout: SaveLayout = DEFAULT_LAYOUT,
) -> None:
    """Place a slot's checksum, save data, summary record and active flag."""
    checksum_end = data_offset + layout.checksum_length
    buffer[data_offset:checksum_end] = slot.checksum
    buffer[checksum_end : checksum_end + len(slot.save_data)] = slot.save_data

    summary_start = layout.summary_offset(index)
    buffer[summary_start : summary_start + layout.header_data_length] = slot.summary.encode()

    buffer[layout.active_flag_offset(index)] = active_flag


def copy_slot(
    source: Slot,
    target: Union[SaveFile, BufferLike],
    target_index: int,
    layout: Optional[SaveLayout] = None,
) -> bytearray:
    """Copy ``source`` into slot ``target_index`` of ``target``.

    Returns a new buffer. The target slot is marked active and the copied
    slot checksum and the save headers checksum are refreshed.
    """
    if not isinstance(target, SaveFile):
        target = SaveFile(target, layout or DEFAULT_LAYOUT)
    layout = target.layout

    target_slot = target.get_slot(target_index)
    if target_slot is None:
        raise TargetSlotNotFoundError(f"Target save slot {target_index} not found")

    if len(source.save_data) != len(target_slot.save_data):
        raise SlotSizeMismatchError(
            f"Source save data is {len(source.save_data)} bytes, "
            f"target slot {target_index} holds {len(target_slot.save_data)}"
        )

    data_offset = target_slot.data_offset
    updated = bytearray(target.data)
    write_slot(updated, source, target_index, data_offset, 1, layout)

    digest = hashlib.md5(source.save_data).digest()
    updated[data_offset : data_offset + layout.checksum_length] = digest
    update_save_headers_checksum(updated, layout)

    logger.info("Copied %r into slot %d", source, target_index)
    return updated


def extract_slot(slot: Slot, level: int = COMPRESSION_LEVEL) -> ExtractResult:
    """Compress a slot into a portable blob."""
    combined = b"".join([slot.header_data, slot.checksum, slot.save_data])
    compressed = zstandard.ZstdCompressor(level=level).compress(combined)

    result = ExtractResult(
        data=compressed,
        original_size=len(combined),
        compressed_size=len(compressed),
    )
    logger.info(
        "Extracted %r: %d -> %d bytes (%.2fx)",
        slot,
        result.original_size,
        result.compressed_size,
        result.compression_ratio,
    )
    return result


def import_slot(blob: BufferLike, layout: SaveLayout = DEFAULT_LAYOUT) -> Slot:
    """Decompress a portable blob back into a slot without an index."""
    try:
        decompressed = zstandard.ZstdDecompressor().decompress(bytes(blob))
    except zstandard.ZstdError as e:
        raise DecompressionError(f"Failed to decompress slot file: {e}") from e

    summary_end = layout.header_data_length
    checksum_end = summary_end + layout.checksum_length
    if len(decompressed) < checksum_end:
        raise DecompressionError(
            f"Slot file too small: {len(decompressed)} bytes, need at least {checksum_end}"
        )

    view = memoryview(decompressed)
    return Slot(
        summary=SummaryRecord.decode(view[:summary_end]),
        checksum=view[summary_end:checksum_end],
        save_data=view[checksum_end:],
    )


def write_extracted_slot(path: Path, slot: Slot, level: int = COMPRESSION_LEVEL) -> ExtractResult:
    """Extract a slot to a portable file on disk."""
    result = extract_slot(slot, level)
    write_save_file_atomically(Path(path), result.data)
    return result


def load_extracted_slot(path: Path, layout: SaveLayout = DEFAULT_LAYOUT) -> Slot:
    """Load a portable slot file from disk."""
    return import_slot(Path(path).read_bytes(), layout)
