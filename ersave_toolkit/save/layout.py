"""Fixed offsets and lengths of the save container.

None of these are declared in the archive itself; they are properties
of the file format and are applied by absolute position.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SaveLayout:
    """Absolute byte layout of a save container."""

    checksum_length: int = 16
    # Prefix compared before a slot checksum is rewritten. Kept apart from
    # checksum_length; see DESIGN.md.
    slot_checksum_compare_length: int = 15

    slot_count: int = 10
    first_slot_offset: int = 0x300  # checksum of slot 0
    slot_data_length: int = 0x280000
    slot_stride: int = 0x280010

    save_headers_section_offset: int = 0x19003B0
    save_headers_section_length: int = 0x60000
    steam_id_offset: int = 0x19003B4
    active_slot_offset: int = 0x1901D04
    header_data_offset: int = 0x1901D0E
    header_data_length: int = 588

    general_data_offset: int = 0x19603C0
    general_data_length: int = 0x240000

    save_identifier: str = "USER_DATA"

    def slot_checksum_offset(self, index: int) -> int:
        return self.first_slot_offset + index * self.slot_stride

    def slot_data_offset(self, index: int) -> int:
        return self.slot_checksum_offset(index) + self.checksum_length

    def summary_offset(self, index: int) -> int:
        """Start of the summary record for a slot in the summary table."""
        return self.header_data_offset + index * self.header_data_length

    def active_flag_offset(self, index: int) -> int:
        return self.active_slot_offset + index

    @property
    def save_headers_checksum_offset(self) -> int:
        return self.save_headers_section_offset - self.checksum_length

    @property
    def general_data_checksum_offset(self) -> int:
        return self.general_data_offset - self.checksum_length

    @property
    def minimum_size(self) -> int:
        """Smallest buffer that holds every region of this layout."""
        return max(
            self.slot_data_offset(self.slot_count - 1) + self.slot_data_length,
            self.save_headers_section_offset + self.save_headers_section_length,
            self.general_data_offset + self.general_data_length,
        )


DEFAULT_LAYOUT = SaveLayout()
