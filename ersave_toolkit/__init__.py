"""Elden Ring save toolkit - inspect, copy and edit character slots in .sl2 saves."""

__version__ = "0.1.0"

from .bnd4 import BND4Reader
from .errors import SaveFileError
from .save import (
    DEFAULT_LAYOUT,
    Attributes,
    SaveFile,
    SaveLayout,
    Slot,
    copy_slot,
    extract_slot,
    get_stats,
    import_slot,
    load_save_file,
    recalculate_checksums,
    set_stats,
    verify_checksums,
    write_save_file_atomically,
)

__all__ = [
    "Attributes",
    "BND4Reader",
    "DEFAULT_LAYOUT",
    "SaveFile",
    "SaveFileError",
    "SaveLayout",
    "Slot",
    "copy_slot",
    "extract_slot",
    "get_stats",
    "import_slot",
    "load_save_file",
    "recalculate_checksums",
    "set_stats",
    "verify_checksums",
    "write_save_file_atomically",
]
