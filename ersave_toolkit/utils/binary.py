"""Binary reading utilities for little-endian PC save data."""

import struct
from typing import Union

from ..errors import OutOfBoundsError

BufferLike = Union[bytes, bytearray, memoryview]


class BinaryReader:
    """Cursor over an immutable byte buffer.

    Reads are little-endian and advance the position by their width.
    ``read_bytes`` hands back a view into the source buffer instead of a
    copy, so large entry payloads are never duplicated during a parse.
    """

    def __init__(self, data: BufferLike):
        self._data = memoryview(data)
        self._pos = 0

    @property
    def data(self) -> memoryview:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def tell(self) -> int:
        return self._pos

    def seek(self, offset: int) -> int:
        """Move to an absolute position. Bounds are checked on the next read."""
        self._pos = offset
        return self._pos

    def _check(self, size: int) -> None:
        if size < 0 or self._pos < 0 or self._pos + size > len(self._data):
            raise OutOfBoundsError(
                f"Read of {size} bytes at offset {self._pos} exceeds buffer of {len(self._data)} bytes"
            )

    def read_bytes(self, size: int) -> memoryview:
        self._check(size)
        view = self._data[self._pos : self._pos + size]
        self._pos += size
        return view

    def _unpack(self, fmt: str, size: int):
        self._check(size)
        value = struct.unpack_from(fmt, self._data, self._pos)[0]
        self._pos += size
        return value

    def read_u8(self) -> int:
        return self._unpack("<B", 1)

    def read_bool(self) -> bool:
        return self.read_u8() != 0

    def read_u16(self) -> int:
        return self._unpack("<H", 2)

    def read_u32(self) -> int:
        return self._unpack("<I", 4)

    def read_i32(self) -> int:
        return self._unpack("<i", 4)

    def read_u64(self) -> int:
        return self._unpack("<Q", 8)

    def read_i64(self) -> int:
        return self._unpack("<q", 8)

    def read_fixed_string(self, length: int, encoding: str = "ascii") -> str:
        """Read a fixed-length string, stripping null bytes."""
        data = bytes(self.read_bytes(length))
        # Strip null bytes from the end
        data = data.rstrip(b"\x00")
        return data.decode(encoding, errors="replace")

    def read_utf16_cstring(self, big_endian: bool = False) -> str:
        """Read a UTF-16 string terminated by a two-byte null."""
        chars = []
        while True:
            pair = self.read_bytes(2)
            if pair == b"\x00\x00":
                break
            chars.append(bytes(pair))
        encoding = "utf-16-be" if big_endian else "utf-16-le"
        return b"".join(chars).decode(encoding, errors="replace")

    def skip(self, count: int) -> None:
        """Skip forward by count bytes."""
        self._pos += count

    def remaining(self) -> int:
        """Return number of bytes remaining in the buffer."""
        return max(0, len(self._data) - self._pos)

    def peek(self, size: int) -> memoryview:
        """Read bytes without advancing position."""
        self._check(size)
        return self._data[self._pos : self._pos + size]


def read_u16_le(data: BufferLike, offset: int = 0) -> int:
    """Read a little-endian 16-bit unsigned integer from bytes."""
    return struct.unpack_from("<H", data, offset)[0]


def read_i32_le(data: BufferLike, offset: int = 0) -> int:
    """Read a little-endian 32-bit signed integer from bytes."""
    return struct.unpack_from("<i", data, offset)[0]


def read_u64_le(data: BufferLike, offset: int = 0) -> int:
    """Read a little-endian 64-bit unsigned integer from bytes."""
    return struct.unpack_from("<Q", data, offset)[0]


def write_u16_le(value: int) -> bytes:
    """Write a little-endian 16-bit unsigned integer."""
    return struct.pack("<H", value)


def write_i32_le(value: int) -> bytes:
    """Write a little-endian 32-bit signed integer."""
    return struct.pack("<i", value)
