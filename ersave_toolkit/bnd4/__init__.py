"""BND4 container parsing."""

from .header import BND4_MAGIC, BND4Entry, BND4EntryHeader, BND4FormatFlag, BND4Header
from .reader import BND4Reader

__all__ = [
    "BND4_MAGIC",
    "BND4Entry",
    "BND4EntryHeader",
    "BND4FormatFlag",
    "BND4Header",
    "BND4Reader",
]
