"""Slot summary record (character name, level, play time).

Each slot has a 588-byte record in the summary table of the save headers
section. Only the first 42 bytes are understood:

    0x00  34 bytes  character name, UTF-16, NUL padded
    0x22  4 bytes   character level, signed little-endian
    0x26  4 bytes   seconds played, signed little-endian
"""

import struct
from dataclasses import dataclass

from ..utils.binary import BufferLike

NAME_LENGTH = 34
LEVEL_OFFSET = NAME_LENGTH
SECONDS_PLAYED_OFFSET = LEVEL_OFFSET + 4
SUMMARY_FIELDS_LENGTH = SECONDS_PLAYED_OFFSET + 4

EMPTY_SLOT_NAME = "Empty Slot"


def _name_encoding(big_endian: bool) -> str:
    return "utf-16-be" if big_endian else "utf-16-le"


@dataclass(frozen=True)
class SummaryRecord:
    """Decoded view of a summary record.

    ``raw`` keeps the full record so that encoding gives back the exact
    bytes for any field that was not changed.
    """

    character_name: str
    character_level: int
    seconds_played: int
    raw: bytes
    big_endian: bool = False

    @property
    def is_empty(self) -> bool:
        return self.character_name == EMPTY_SLOT_NAME

    @classmethod
    def decode(cls, data: BufferLike, big_endian: bool = False) -> "SummaryRecord":
        raw = bytes(data)
        if len(raw) < SUMMARY_FIELDS_LENGTH:
            raise ValueError(f"Summary record too small: {len(raw)} bytes")

        name = raw[:NAME_LENGTH].decode(_name_encoding(big_endian), errors="replace")
        name = name.replace("\x00", "").strip()
        level, seconds = struct.unpack_from("<ii", raw, LEVEL_OFFSET)

        return cls(
            character_name=name or EMPTY_SLOT_NAME,
            character_level=level,
            seconds_played=seconds,
            raw=raw,
            big_endian=big_endian,
        )

    def encode(self) -> bytes:
        """Encode back to a full record, patching only changed fields."""
        out = bytearray(self.raw)
        original = SummaryRecord.decode(self.raw, self.big_endian)

        if self.character_name != original.character_name:
            name = "" if self.character_name == EMPTY_SLOT_NAME else self.character_name
            encoded = name.encode(_name_encoding(self.big_endian))
            if len(encoded) > NAME_LENGTH:
                raise ValueError(f"Character name too long: {self.character_name!r}")
            out[:NAME_LENGTH] = encoded.ljust(NAME_LENGTH, b"\x00")

        struct.pack_into("<ii", out, LEVEL_OFFSET, self.character_level, self.seconds_played)
        return bytes(out)
