"""
PE/COFF type definitions needed to walk from the DOS header to the export table.

Both the PE32 (32-bit) and PE32+ (64-bit) optional header layouts are
described here. Everything is read-only: records are decoded once from
the file and never written back, so only ``from_bytes`` is needed for
parsing. ``to_bytes`` exists so that synthetic images can be assembled
from the same definitions.

References:
- Microsoft PE/COFF Specification
- https://learn.microsoft.com/en-us/windows/win32/debug/pe-format
"""

import struct
from dataclasses import dataclass, astuple
from typing import ClassVar

# =============================================================================
# Constants
# =============================================================================

# DOS Header
DOS_MAGIC = 0x5A4D  # "MZ" in little-endian

# PE Signature
PE_SIGNATURE = b"PE\x00\x00"

# Machine types
IMAGE_FILE_MACHINE_I386 = 0x14C
IMAGE_FILE_MACHINE_AMD64 = 0x8664

# Optional header magic
IMAGE_NT_OPTIONAL_HDR32_MAGIC = 0x10B
IMAGE_NT_OPTIONAL_HDR64_MAGIC = 0x20B  # PE32+
IMAGE_ROM_OPTIONAL_HDR_MAGIC = 0x107

# File characteristics
IMAGE_FILE_EXECUTABLE_IMAGE = 0x0002
IMAGE_FILE_DLL = 0x2000

# Section characteristics
IMAGE_SCN_CNT_INITIALIZED_DATA = 0x00000040
IMAGE_SCN_MEM_READ = 0x40000000

# Data directory indices
IMAGE_DIRECTORY_ENTRY_EXPORT = 0
IMAGE_NUMBEROF_DIRECTORY_ENTRIES = 16

# Structure sizes
DOS_HEADER_SIZE = 64
COFF_HEADER_SIZE = 20
OPTIONAL_HEADER32_SIZE = 224  # Including data directories
OPTIONAL_HEADER64_SIZE = 240  # Including data directories
DATA_DIRECTORY_SIZE = 8
SECTION_HEADER_SIZE = 40
EXPORT_DIRECTORY_SIZE = 40


# =============================================================================
# PE/COFF Structures
# =============================================================================


class _Struct:
    """Shared fixed-layout decode/encode for the records below."""

    STRUCT_FMT: ClassVar[str]
    SIZE: ClassVar[int]

    @classmethod
    def from_bytes(cls, data: bytes | bytearray, offset: int = 0):
        """Parse the record from binary data."""
        if len(data) < offset + cls.SIZE:
            raise ValueError(
                f"Data too short for {cls.__name__}: {len(data)} < {offset + cls.SIZE}"
            )
        fields = struct.unpack_from(cls.STRUCT_FMT, data, offset)
        return cls(*fields)

    def to_bytes(self) -> bytes:
        """Serialize the record to binary data."""
        return struct.pack(self.STRUCT_FMT, *astuple(self))


@dataclass(frozen=True)
class DosHeader(_Struct):
    """DOS MZ header (IMAGE_DOS_HEADER).

    The DOS header is 64 bytes and exists for backwards compatibility.
    The only fields we care about are e_magic and e_lfanew, which points
    to the PE signature. Magic is checked by the header chain, not here.
    """

    e_magic: int  # "MZ" = 0x5A4D
    e_cblp: int
    e_cp: int
    e_crlc: int
    e_cparhdr: int
    e_minalloc: int
    e_maxalloc: int
    e_ss: int
    e_sp: int
    e_csum: int
    e_ip: int
    e_cs: int
    e_lfarlc: int
    e_ovno: int
    e_res: bytes  # 8 bytes reserved
    e_oemid: int
    e_oeminfo: int
    e_res2: bytes  # 20 bytes reserved
    e_lfanew: int  # Offset to PE signature (LONG)

    STRUCT_FMT: ClassVar[str] = "<HHHHHHHHHHHHHH8sHH20si"
    SIZE: ClassVar[int] = DOS_HEADER_SIZE

    @classmethod
    def minimal(cls, e_lfanew: int, e_magic: int = DOS_MAGIC) -> "DosHeader":
        """Build a header with every field zeroed except magic and e_lfanew."""
        return cls(
            e_magic,
            *([0] * 13),
            e_res=b"\x00" * 8,
            e_oemid=0,
            e_oeminfo=0,
            e_res2=b"\x00" * 20,
            e_lfanew=e_lfanew,
        )


@dataclass(frozen=True)
class CoffHeader(_Struct):
    """COFF file header (IMAGE_FILE_HEADER).

    This 20-byte header comes right after the PE signature.
    """

    Machine: int
    NumberOfSections: int
    TimeDateStamp: int
    PointerToSymbolTable: int
    NumberOfSymbols: int
    SizeOfOptionalHeader: int
    Characteristics: int

    STRUCT_FMT: ClassVar[str] = "<HHIIIHH"
    SIZE: ClassVar[int] = COFF_HEADER_SIZE


@dataclass(frozen=True)
class DataDirectory(_Struct):
    """Data directory entry (IMAGE_DATA_DIRECTORY)."""

    VirtualAddress: int  # RVA of the data
    Size: int

    STRUCT_FMT: ClassVar[str] = "<II"
    SIZE: ClassVar[int] = DATA_DIRECTORY_SIZE


@dataclass(frozen=True)
class OptionalHeader32(_Struct):
    """PE32 optional header (IMAGE_OPTIONAL_HEADER32), fixed part only.

    Differs from PE32+ in having BaseOfData and 4-byte ImageBase and
    stack/heap sizes. The data directory array follows the fixed part.
    """

    Magic: int  # 0x10B
    MajorLinkerVersion: int
    MinorLinkerVersion: int
    SizeOfCode: int
    SizeOfInitializedData: int
    SizeOfUninitializedData: int
    AddressOfEntryPoint: int
    BaseOfCode: int
    BaseOfData: int
    ImageBase: int
    SectionAlignment: int
    FileAlignment: int
    MajorOperatingSystemVersion: int
    MinorOperatingSystemVersion: int
    MajorImageVersion: int
    MinorImageVersion: int
    MajorSubsystemVersion: int
    MinorSubsystemVersion: int
    Win32VersionValue: int
    SizeOfImage: int
    SizeOfHeaders: int
    CheckSum: int
    Subsystem: int
    DllCharacteristics: int
    SizeOfStackReserve: int
    SizeOfStackCommit: int
    SizeOfHeapReserve: int
    SizeOfHeapCommit: int
    LoaderFlags: int
    NumberOfRvaAndSizes: int

    # 2 + 1 + 1 + 4*9 + 2*6 + 4*4 + 2*2 + 4*4 + 4*2 = 96 bytes
    STRUCT_FMT: ClassVar[str] = "<HBBIIIIIIIIIHHHHHH" "IIIIHHIIIIII"
    SIZE: ClassVar[int] = 96


@dataclass(frozen=True)
class OptionalHeader64(_Struct):
    """PE32+ optional header (IMAGE_OPTIONAL_HEADER64), fixed part only.

    This header is required for images despite its name.
    The "optional" refers to object files which don't have it.
    """

    Magic: int  # 0x20B
    MajorLinkerVersion: int
    MinorLinkerVersion: int
    SizeOfCode: int
    SizeOfInitializedData: int
    SizeOfUninitializedData: int
    AddressOfEntryPoint: int
    BaseOfCode: int
    ImageBase: int  # 8 bytes for PE32+
    SectionAlignment: int
    FileAlignment: int
    MajorOperatingSystemVersion: int
    MinorOperatingSystemVersion: int
    MajorImageVersion: int
    MinorImageVersion: int
    MajorSubsystemVersion: int
    MinorSubsystemVersion: int
    Win32VersionValue: int
    SizeOfImage: int
    SizeOfHeaders: int
    CheckSum: int
    Subsystem: int
    DllCharacteristics: int
    SizeOfStackReserve: int  # 8 bytes for PE32+
    SizeOfStackCommit: int  # 8 bytes for PE32+
    SizeOfHeapReserve: int  # 8 bytes for PE32+
    SizeOfHeapCommit: int  # 8 bytes for PE32+
    LoaderFlags: int
    NumberOfRvaAndSizes: int

    # 2 + 1 + 1 + 4*6 + 8 + 4*9 + 2*2 + 8*4 + 4*2 = 112 bytes
    STRUCT_FMT: ClassVar[str] = "<HBBIIIIIQIIHHHHHH" "IIIIHHQQQQII"
    SIZE: ClassVar[int] = 112


@dataclass(frozen=True)
class SectionHeader(_Struct):
    """PE/COFF section header (IMAGE_SECTION_HEADER).

    Each section header is 40 bytes.
    """

    Name: bytes  # 8 bytes, null-padded (NOT null-terminated if 8 chars)
    VirtualSize: int
    VirtualAddress: int  # RVA of section
    SizeOfRawData: int  # Size in file
    PointerToRawData: int  # File offset
    PointerToRelocations: int
    PointerToLinenumbers: int
    NumberOfRelocations: int
    NumberOfLinenumbers: int
    Characteristics: int

    STRUCT_FMT: ClassVar[str] = "<8sIIIIIIHHI"
    SIZE: ClassVar[int] = SECTION_HEADER_SIZE

    @property
    def name_str(self) -> str:
        """Get section name as string (strips null padding)."""
        null_pos = self.Name.find(b"\x00")
        if null_pos >= 0:
            return self.Name[:null_pos].decode("ascii", errors="replace")
        return self.Name.decode("ascii", errors="replace")

    @property
    def end_raw_rva(self) -> int:
        """RVA one past the part of the section backed by file data."""
        return self.VirtualAddress + self.SizeOfRawData

    def contains_rva_range(self, rva: int, size: int) -> bool:
        """Check if [rva, rva + size) lies inside this section's raw data."""
        return self.VirtualAddress <= rva and rva + size <= self.end_raw_rva


@dataclass(frozen=True)
class ExportDirectory(_Struct):
    """Export directory table (IMAGE_EXPORT_DIRECTORY).

    AddressOfNames and AddressOfNameOrdinals are parallel arrays of
    NumberOfNames entries; the ordinal of a named export is Base plus
    the 16-bit bias at the same index.
    """

    Characteristics: int
    TimeDateStamp: int
    MajorVersion: int
    MinorVersion: int
    Name: int  # RVA of the module's own name
    Base: int  # Ordinal base, read as a signed 32-bit value
    NumberOfFunctions: int
    NumberOfNames: int
    AddressOfFunctions: int
    AddressOfNames: int
    AddressOfNameOrdinals: int

    STRUCT_FMT: ClassVar[str] = "<IIHHIiIIIII"
    SIZE: ClassVar[int] = EXPORT_DIRECTORY_SIZE


# =============================================================================
# Helper Functions
# =============================================================================


def section_name_to_bytes(name: str) -> bytes:
    """Convert section name string to 8-byte padded bytes.

    Section names are limited to 8 characters in PE/COFF.
    """
    if len(name) > 8:
        raise ValueError(f"Section name too long (max 8 chars): {name}")
    return name.encode("ascii").ljust(8, b"\x00")
