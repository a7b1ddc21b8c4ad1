"""Parsed view of a save container."""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from ..bnd4 import BND4Reader
from ..errors import SlotNotFoundError
from ..utils.binary import BufferLike, read_u64_le
from .layout import DEFAULT_LAYOUT, SaveLayout
from .slots import Slot, extract_slots

logger = logging.getLogger(__name__)


class SaveFile:
    """A BND4 save container with its character slots.

    The view is read-only. Operations that change the container return a
    new buffer, which is parsed again to get a fresh view.
    """

    def __init__(
        self,
        data: Union[BufferLike, Path],
        layout: SaveLayout = DEFAULT_LAYOUT,
        path: Optional[Path] = None,
    ):
        if isinstance(data, Path):
            path = data
            data = data.read_bytes()
        self._data = data
        self._layout = layout
        self.path = path
        self._archive = BND4Reader(data)
        self._slots = extract_slots(self._archive, data, layout)
        logger.info("Loaded save with %d slots%s", len(self._slots), f" from {path}" if path else "")

    @property
    def data(self) -> BufferLike:
        return self._data

    @property
    def layout(self) -> SaveLayout:
        return self._layout

    @property
    def archive(self) -> BND4Reader:
        return self._archive

    @property
    def slots(self) -> List[Slot]:
        return self._slots

    @property
    def active_slots(self) -> List[Slot]:
        return [slot for slot in self._slots if slot.active]

    @property
    def steam_id(self) -> int:
        """Account id stored in the save headers section."""
        return read_u64_le(self._data, self._layout.steam_id_offset)

    def get_slot(self, index: int) -> Optional[Slot]:
        for slot in self._slots:
            if slot.index == index:
                return slot
        return None

    def require_slot(self, index: int) -> Slot:
        slot = self.get_slot(index)
        if slot is None:
            raise SlotNotFoundError(f"Save slot {index} not found")
        return slot

    def to_bytes(self) -> bytearray:
        """Write every parsed slot back into a copy of the backing buffer."""
        from .transfer import write_slot

        out = bytearray(self._data)
        for slot in self._slots:
            write_slot(out, slot, slot.index, slot.data_offset, slot.active_flag, self._layout)
        return out

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the backing buffer to disk atomically."""
        path = Path(path or self.path)
        write_save_file_atomically(path, self._data)
        return path

    @classmethod
    def from_file(cls, path: Path, layout: SaveLayout = DEFAULT_LAYOUT) -> "SaveFile":
        """Load a save container from disk."""
        return cls(Path(path), layout)

    @classmethod
    def from_bytes(cls, data: BufferLike, layout: SaveLayout = DEFAULT_LAYOUT) -> "SaveFile":
        """Load a save container from bytes."""
        return cls(data, layout)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self):
        return iter(self._slots)

    def __repr__(self) -> str:
        return f"SaveFile(slots={len(self._slots)}, active={len(self.active_slots)})"


def load_save_file(path: Path, layout: SaveLayout = DEFAULT_LAYOUT) -> SaveFile:
    return SaveFile.from_file(path, layout)


def write_save_file_atomically(path: Path, data: BufferLike) -> None:
    """Replace ``path`` with ``data`` without leaving a partial file behind."""
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Wrote %d bytes to %s", len(data), path)
