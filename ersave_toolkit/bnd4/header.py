"""BND4 header and entry table structures."""

from dataclasses import dataclass
from enum import IntFlag
from typing import Optional

# BND4 magic bytes
BND4_MAGIC = b"BND4"

# Fixed part of the archive header, entry headers start right after it
BND4_HEADER_SIZE = 0x40

# Sentinel stored in every entry header after the flags
ENTRY_SENTINEL = -1


class BND4FormatFlag(IntFlag):
    """Bits of the (resolved) format byte.

    Each bit switches an optional field on in every entry header.
    """

    IDS = 0x02
    NAMES1 = 0x04
    NAMES2 = 0x08
    LONG_OFFSETS = 0x10
    COMPRESSION = 0x20

    NAMES = NAMES1 | NAMES2


# Format byte value with its own entry header shape (id + unknown after name)
FORMAT_NAMES_ONLY = 0x04


def reverse_bits(byte: int) -> int:
    """Mirror the 8 bits of a byte (bit 0 becomes bit 7)."""
    result = 0
    for _ in range(8):
        result = (result << 1) | (byte & 1)
        byte >>= 1
    return result


def resolve_format(raw_format: int, bit_big_endian: bool) -> int:
    """Return the format byte with bits in the order the flags expect."""
    keep = bit_big_endian or ((raw_format & 0x01) != 0 and (raw_format & 0x80) == 0)
    return raw_format if keep else reverse_bits(raw_format)


@dataclass(frozen=True)
class BND4Header:
    """BND4 archive header (64 bytes)."""

    magic: bytes  # 4 bytes: "BND4"
    big_endian: bool  # byte 9
    bit_big_endian: bool  # byte 10, stored inverted
    entry_count: int  # 4 bytes
    header_size: int  # 8 bytes
    version: str  # 8 bytes
    entry_header_size: int  # 8 bytes
    unicode: bool  # byte 48
    raw_format: int  # byte 49, as stored
    format: int  # raw_format after optional bit reversal
    extended: int  # byte 50

    @property
    def is_valid(self) -> bool:
        return self.magic == BND4_MAGIC

    def has_flag(self, flag: BND4FormatFlag) -> bool:
        return (self.format & flag) != 0

    @property
    def has_compression(self) -> bool:
        return self.has_flag(BND4FormatFlag.COMPRESSION)

    @property
    def has_long_offsets(self) -> bool:
        return self.has_flag(BND4FormatFlag.LONG_OFFSETS)

    @property
    def has_ids(self) -> bool:
        return self.has_flag(BND4FormatFlag.IDS)

    @property
    def has_names(self) -> bool:
        return self.has_flag(BND4FormatFlag.NAMES)


@dataclass(frozen=True)
class BND4EntryHeader:
    """Per-entry header. Optional fields exist only when the format says so."""

    flags: int
    compressed_size: int
    data_offset: int
    uncompressed_size: Optional[int] = None
    id: Optional[int] = None
    name_offset: Optional[int] = None
    # None when the archive has no names or they are not UTF-16
    name: Optional[str] = None

    @property
    def name_resolved(self) -> bool:
        return self.name is not None


@dataclass(frozen=True)
class BND4Entry:
    """An entry header plus a view of its bytes in the source buffer."""

    header: BND4EntryHeader
    data: memoryview

    @property
    def name(self) -> Optional[str]:
        return self.header.name

    @property
    def data_offset(self) -> int:
        return self.header.data_offset

    def __len__(self) -> int:
        return len(self.data)
