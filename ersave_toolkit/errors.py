"""Exceptions raised by the save toolkit."""


class SaveFileError(Exception):
    """Base class for all save file errors."""


class BadMagicError(SaveFileError, ValueError):
    """The buffer does not start with the BND4 signature."""


class UnknownTableFormatError(SaveFileError, ValueError):
    """An entry header sentinel field did not hold its expected constant."""


class OutOfBoundsError(SaveFileError, EOFError):
    """A read went past the end of the buffer."""


class SlotNotFoundError(SaveFileError, LookupError):
    """No slot with the requested index exists in the container."""


class TargetSlotNotFoundError(SlotNotFoundError):
    """The destination slot of a copy does not exist."""


class StatsNotFoundError(SaveFileError, LookupError):
    """No attribute block matched the slot's declared level."""


class DecompressionError(SaveFileError, ValueError):
    """A portable slot file could not be decompressed or split."""


class SlotSizeMismatchError(SaveFileError, ValueError):
    """Source and target slot payloads have different lengths."""
