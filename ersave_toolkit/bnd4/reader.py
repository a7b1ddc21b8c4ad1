"""BND4 archive reader."""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..errors import BadMagicError, UnknownTableFormatError
from ..utils.binary import BinaryReader, BufferLike
from .header import (
    BND4_HEADER_SIZE,
    BND4_MAGIC,
    ENTRY_SENTINEL,
    FORMAT_NAMES_ONLY,
    BND4Entry,
    BND4EntryHeader,
    BND4FormatFlag,
    BND4Header,
    resolve_format,
)

logger = logging.getLogger(__name__)


class BND4Reader:
    """Reader for BND4 containers held in memory.

    The whole archive is parsed on construction. Entry payloads are views
    into the buffer that was passed in, which must not be mutated while
    the reader is in use.
    """

    def __init__(self, data: Union[BufferLike, Path]):
        if isinstance(data, Path):
            data = data.read_bytes()
        self._data = data
        self._header: Optional[BND4Header] = None
        self._entries: List[BND4Entry] = []
        self._parse()

    def _parse(self) -> None:
        reader = BinaryReader(self._data)
        self._read_header(reader)
        headers = self._read_entry_headers(reader)
        self._read_entries(reader, headers)
        logger.debug(
            "Parsed BND4 archive: %d entries, format 0x%02X (raw 0x%02X)",
            len(self._entries),
            self._header.format,
            self._header.raw_format,
        )

    @property
    def data(self) -> BufferLike:
        return self._data

    @property
    def header(self) -> BND4Header:
        if not self._header:
            raise RuntimeError("Archive not parsed")
        return self._header

    @property
    def entries(self) -> List[BND4Entry]:
        return self._entries

    def _read_header(self, reader: BinaryReader) -> None:
        """Read the 64-byte BND4 header."""
        magic = bytes(reader.read_bytes(4))
        if magic != BND4_MAGIC:
            raise BadMagicError(f"Invalid BND4 magic: {magic!r}, expected {BND4_MAGIC!r}")

        reader.skip(5)
        big_endian = reader.read_bool()
        bit_big_endian = not reader.read_bool()
        reader.skip(1)
        entry_count = reader.read_i32()
        header_size = reader.read_i64()
        version = reader.read_fixed_string(8)
        entry_header_size = reader.read_i64()
        reader.skip(8)
        unicode = reader.read_bool()

        raw_format = reader.read_u8()
        extended = reader.read_u8()
        reader.seek(BND4_HEADER_SIZE)

        self._header = BND4Header(
            magic=magic,
            big_endian=big_endian,
            bit_big_endian=bit_big_endian,
            entry_count=entry_count,
            header_size=header_size,
            version=version,
            entry_header_size=entry_header_size,
            unicode=unicode,
            raw_format=raw_format,
            format=resolve_format(raw_format, bit_big_endian),
            extended=extended,
        )

    def _read_entry_headers(self, reader: BinaryReader) -> List[BND4EntryHeader]:
        """Read the entry header table.

        The shape of every header is decided once by the resolved format.
        """
        header = self._header
        headers = []

        for i in range(header.entry_count):
            flags = reader.read_u8()
            reader.skip(3)

            sentinel = reader.read_i32()
            if sentinel != ENTRY_SENTINEL:
                raise UnknownTableFormatError(
                    f"Unknown file table format: entry {i} sentinel is {sentinel}, expected {ENTRY_SENTINEL}"
                )

            compressed_size = reader.read_i64()

            uncompressed_size = None
            if header.has_compression:
                uncompressed_size = reader.read_i64()

            if header.has_long_offsets:
                data_offset = reader.read_i64()
            else:
                data_offset = reader.read_i32()

            entry_id = None
            if header.has_ids:
                entry_id = reader.read_i32()

            name_offset = None
            name = None
            if header.has_names:
                name_offset = reader.read_i32()
                if header.unicode:
                    current = reader.tell()
                    reader.seek(name_offset)
                    name = reader.read_utf16_cstring(header.big_endian)
                    reader.seek(current)
                else:
                    logger.warning("Entry %d uses a non-unicode name, leaving it unresolved", i)

            if header.format == FORMAT_NAMES_ONLY:
                entry_id = reader.read_i32()
                reader.skip(4)

            headers.append(
                BND4EntryHeader(
                    flags=flags,
                    compressed_size=compressed_size,
                    data_offset=data_offset,
                    uncompressed_size=uncompressed_size,
                    id=entry_id,
                    name_offset=name_offset,
                    name=name,
                )
            )

        return headers

    def _read_entries(self, reader: BinaryReader, headers: List[BND4EntryHeader]) -> None:
        """Slice out each entry's bytes. Compressed entries are kept as stored."""
        for entry_header in headers:
            reader.seek(entry_header.data_offset)
            data = reader.read_bytes(entry_header.compressed_size)
            self._entries.append(BND4Entry(header=entry_header, data=data))

    def list_files(self) -> List[str]:
        """List the resolved names of all entries."""
        return [e.name for e in self._entries if e.name is not None]

    def get_entry_by_name(self, name: str) -> Optional[BND4Entry]:
        """Find an entry by name."""
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    @classmethod
    def from_file(cls, path: Path) -> "BND4Reader":
        """Load a BND4 archive from disk."""
        return cls(Path(path))

    @classmethod
    def from_bytes(cls, data: BufferLike) -> "BND4Reader":
        """Load a BND4 archive from bytes."""
        return cls(data)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        if self._header:
            return f"BND4Reader(entries={len(self._entries)}, format=0x{self._header.format:02X})"
        return "BND4Reader(invalid)"
