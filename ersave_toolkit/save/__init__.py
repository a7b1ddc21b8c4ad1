"""Save container slots, stats and checksums."""

from .checksums import ChecksumStatus, recalculate_checksums, verify_checksums
from .layout import DEFAULT_LAYOUT, SaveLayout
from .save_file import SaveFile, load_save_file, write_save_file_atomically
from .slots import Slot, extract_slots
from .stats import Attributes, CharacterStats, get_stats, set_stats
from .summary import SummaryRecord
from .transfer import (
    ExtractResult,
    copy_slot,
    extract_slot,
    import_slot,
    load_extracted_slot,
    write_extracted_slot,
)

__all__ = [
    "Attributes",
    "CharacterStats",
    "ChecksumStatus",
    "DEFAULT_LAYOUT",
    "ExtractResult",
    "SaveFile",
    "SaveLayout",
    "Slot",
    "SummaryRecord",
    "copy_slot",
    "extract_slot",
    "extract_slots",
    "get_stats",
    "import_slot",
    "load_extracted_slot",
    "load_save_file",
    "recalculate_checksums",
    "set_stats",
    "verify_checksums",
    "write_extracted_slot",
    "write_save_file_atomically",
]
