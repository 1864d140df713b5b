"""
pe-exports: list the exports of Windows DLLs without loading them.

The header chain, section table and export directory of a PE32 or PE32+
image are decoded straight from the file on disk:

    from pe_exports import list_exports, write_listing

    result = list_exports(Path("foo.dll"))
    if result.passed:
        write_listing(result.listing, sys.stdout)

The individual stages are available for finer-grained use:

    from pe_exports import ByteReader, read_header_chain, read_optional_header
"""

from .errors import (
    ExportListingError,
    UsageError,
    ImageFormatError,
    BadMagic,
    UnsupportedImageKind,
    NoExportDirectoryEntry,
    DirectorySizeTooSmall,
    NoContainingSection,
    EmptySection,
    IoFailure,
)
from .reader import ByteReader
from .headers import (
    ImageKind,
    HeaderChain,
    OptionalHeader,
    read_header_chain,
    read_optional_header,
)
from .sections import RvaMapping, read_section_table, resolve_rva_range
from .exports import (
    ExportEntry,
    ExportDirectoryInfo,
    read_export_directory,
    enumerate_exports,
    summarize_exports,
)
from .listing import (
    ExportListing,
    ListingResult,
    read_exports,
    list_exports,
    write_listing,
    describe_failure,
)

__all__ = [
    # Errors
    "ExportListingError",
    "UsageError",
    "ImageFormatError",
    "BadMagic",
    "UnsupportedImageKind",
    "NoExportDirectoryEntry",
    "DirectorySizeTooSmall",
    "NoContainingSection",
    "EmptySection",
    "IoFailure",
    # Reader
    "ByteReader",
    # Header chain
    "ImageKind",
    "HeaderChain",
    "OptionalHeader",
    "read_header_chain",
    "read_optional_header",
    # Sections
    "RvaMapping",
    "read_section_table",
    "resolve_rva_range",
    # Exports
    "ExportEntry",
    "ExportDirectoryInfo",
    "read_export_directory",
    "enumerate_exports",
    "summarize_exports",
    # Listing
    "ExportListing",
    "ListingResult",
    "read_exports",
    "list_exports",
    "write_listing",
    "describe_failure",
]
