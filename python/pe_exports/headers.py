"""
Header chain validation: DOS header -> NT signature -> COFF header -> optional header.

The optional header comes in two layouts. The variant is chosen once, from
a peeked magic, and recorded as an ImageKind; everything downstream works
against the common OptionalHeader view instead of branching on width.
"""

import enum
import logging
from dataclasses import dataclass

from .errors import BadMagic, UnsupportedImageKind
from .reader import ByteReader
from .types import (
    CoffHeader,
    DataDirectory,
    DosHeader,
    OptionalHeader32,
    OptionalHeader64,
    DOS_MAGIC,
    PE_SIGNATURE,
    IMAGE_DIRECTORY_ENTRY_EXPORT,
    IMAGE_NT_OPTIONAL_HDR32_MAGIC,
    IMAGE_NT_OPTIONAL_HDR64_MAGIC,
    IMAGE_NUMBEROF_DIRECTORY_ENTRIES,
)

logger = logging.getLogger(__name__)


class ImageKind(enum.Enum):
    """Optional header variant, keyed by its magic."""

    PE32 = IMAGE_NT_OPTIONAL_HDR32_MAGIC
    PE32_PLUS = IMAGE_NT_OPTIONAL_HDR64_MAGIC

    @property
    def address_width(self) -> int:
        return 32 if self is ImageKind.PE32 else 64

    @property
    def header_class(self) -> type[OptionalHeader32] | type[OptionalHeader64]:
        return OptionalHeader32 if self is ImageKind.PE32 else OptionalHeader64


@dataclass(frozen=True)
class HeaderChain:
    """Result of validating the headers up to the optional header."""

    kind: ImageKind
    dos_header: DosHeader
    file_header: CoffHeader
    optional_header_offset: int

    @property
    def address_width(self) -> int:
        return self.kind.address_width


@dataclass(frozen=True)
class OptionalHeader:
    """Width-independent view of an optional header and its data directories."""

    kind: ImageKind
    header: OptionalHeader32 | OptionalHeader64
    data_directories: tuple[DataDirectory, ...]

    @property
    def address_width(self) -> int:
        return self.kind.address_width

    @property
    def number_of_rva_and_sizes(self) -> int:
        return self.header.NumberOfRvaAndSizes

    def get_data_directory(self, index: int) -> DataDirectory | None:
        """Get a data directory entry, or None if the header doesn't cover it."""
        if index >= min(self.number_of_rva_and_sizes, len(self.data_directories)):
            return None
        return self.data_directories[index]

    @property
    def export_directory(self) -> DataDirectory | None:
        return self.get_data_directory(IMAGE_DIRECTORY_ENTRY_EXPORT)


def read_header_chain(reader: ByteReader) -> HeaderChain:
    """Validate the header chain from the start of the file.

    On return the reader is positioned at the optional header, whose magic
    has been peeked but not consumed.

    Raises:
        BadMagic: If the MZ or PE signature is missing
        UnsupportedImageKind: If the optional header is not PE32 or PE32+
        IoFailure: If the file is too short or a seek fails
    """
    reader.seek(0, "DOS header")
    dos_header = reader.read_struct(DosHeader)
    if dos_header.e_magic != DOS_MAGIC:
        raise BadMagic("MZ", f"No MZ magic number at start of '{reader.name}'.")

    reader.seek(dos_header.e_lfanew, "PE header")
    if reader.read(len(PE_SIGNATURE)) != PE_SIGNATURE:
        raise BadMagic("PE", f"No PE magic number in PE header of '{reader.name}'.")
    logger.debug("PE header at offset 0x%x", dos_header.e_lfanew)

    file_header = reader.read_struct(CoffHeader)
    optional_header_offset = reader.tell()

    magic = int.from_bytes(reader.peek(2), "little")
    try:
        kind = ImageKind(magic)
    except ValueError:
        raise UnsupportedImageKind(magic) from None
    logger.debug(
        "%s image, %d sections, optional header of %d bytes",
        kind.name,
        file_header.NumberOfSections,
        file_header.SizeOfOptionalHeader,
    )

    return HeaderChain(kind, dos_header, file_header, optional_header_offset)


def read_optional_header(reader: ByteReader, chain: HeaderChain) -> OptionalHeader:
    """Read the optional header selected by the chain, including data directories.

    The section table is taken to follow the 16 data directories directly;
    SizeOfOptionalHeader is not consulted, and the reader is left there.
    """
    reader.seek(chain.optional_header_offset, "optional header")
    header = reader.read_struct(chain.kind.header_class)
    data_directories = tuple(
        reader.read_struct(DataDirectory)
        for _ in range(IMAGE_NUMBEROF_DIRECTORY_ENTRIES)
    )
    return OptionalHeader(chain.kind, header, data_directories)
