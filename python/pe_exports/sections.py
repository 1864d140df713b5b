"""
Section table reading and RVA-to-file-offset translation.
"""

import logging
from dataclasses import dataclass

from .errors import EmptySection, NoContainingSection
from .reader import ByteReader
from .types import SectionHeader

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RvaMapping:
    """The section that backs an RVA range, and its RVA-to-offset delta."""

    section: SectionHeader
    delta: int  # PointerToRawData - VirtualAddress; may be negative

    def to_offset(self, rva: int) -> int:
        """Translate an RVA inside the mapped section to a file offset."""
        return rva + self.delta


def read_section_table(reader: ByteReader, count: int) -> list[SectionHeader]:
    """Read count section headers from the current position, in on-disk order."""
    return [reader.read_struct(SectionHeader) for _ in range(count)]


def resolve_rva_range(
    rva: int, size: int, sections: list[SectionHeader]
) -> RvaMapping:
    """Find the first section whose raw data fully contains [rva, rva + size).

    Args:
        rva: Start of the range
        size: Length of the range in bytes
        sections: Section table in on-disk order

    Returns:
        RvaMapping for the matched section

    Raises:
        NoContainingSection: If no section covers the whole range
        EmptySection: If the matched section has no raw data
    """
    for section in sections:
        if section.contains_rva_range(rva, size):
            break
    else:
        raise NoContainingSection(
            "Ungood file: no section (fully) contains the export table."
        )

    if section.SizeOfRawData == 0:
        raise EmptySection(
            "Ungood file: section with export table, is of length zero."
        )

    mapping = RvaMapping(section, section.PointerToRawData - section.VirtualAddress)
    logger.debug(
        "RVA range [0x%x, 0x%x) in section %r, delta %d",
        rva,
        rva + size,
        section.name_str,
        mapping.delta,
    )
    return mapping
