"""
End-to-end export listing: run the stages over one file and render the result.

The stages raise at the point a check fails. list_exports() is the boundary
where a raised ExportListingError becomes a ListingResult value, so callers
branch on ``result.passed`` instead of catching.

Usage:
    result = list_exports(Path("foo.dll"))
    if result.passed:
        write_listing(result.listing, sys.stdout)
    else:
        print(result.error)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from .errors import ExportListingError
from .exports import (
    ExportDirectoryInfo,
    ExportEntry,
    enumerate_exports,
    read_export_directory,
    summarize_exports,
)
from .headers import read_header_chain, read_optional_header
from .reader import ByteReader
from .sections import read_section_table

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 72


@dataclass(frozen=True)
class ExportListing:
    """Everything the listing shows about one module."""

    address_width: int
    export_info: ExportDirectoryInfo
    entries: list[ExportEntry] = field(default_factory=list)

    @property
    def module_name(self) -> bytes | None:
        return self.export_info.module_name

    @property
    def number_of_functions(self) -> int:
        return self.export_info.directory.NumberOfFunctions

    @property
    def ordinal_base(self) -> int:
        return self.export_info.directory.Base

    @property
    def summary(self) -> str:
        return summarize_exports(self.number_of_functions, self.ordinal_base)


@dataclass
class ListingResult:
    """Outcome of listing one file: a listing on success, the failure otherwise."""

    listing: ExportListing | None = None
    error: ExportListingError | None = None

    @property
    def passed(self) -> bool:
        return self.error is None and self.listing is not None

    def __str__(self) -> str:
        if self.error is not None:
            return f"{self.error.kind}: {self.error}"
        return "Listing PASSED"


def read_exports(reader: ByteReader) -> ExportListing:
    """Walk the header chain and export table of an open image."""
    chain = read_header_chain(reader)
    optional_header = read_optional_header(reader, chain)
    sections = read_section_table(reader, chain.file_header.NumberOfSections)
    info = read_export_directory(reader, optional_header, sections)
    entries = enumerate_exports(reader, info)
    logger.debug("Listed %d named exports from %s", len(entries), reader.name)
    return ExportListing(chain.address_width, info, entries)


def list_exports(path: Path) -> ListingResult:
    """List the exports of the PE file at path.

    The file is open only for the duration of this call. Errors outside
    the ExportListingError hierarchy are not converted and propagate.
    """
    try:
        with ByteReader.open(path) as reader:
            return ListingResult(listing=read_exports(reader))
    except ExportListingError as e:
        logger.debug("Listing %s failed: %s", path, e)
        return ListingResult(error=e)


def _display(name: bytes) -> str:
    return name.decode("utf-8", errors="backslashreplace")


def write_listing(listing: ExportListing, sink: TextIO) -> None:
    """Write the human-readable listing to sink."""
    if listing.module_name:
        sink.write(
            f"{listing.address_width}-bit DLL '{_display(listing.module_name)}'.\n"
        )
    else:
        sink.write(f"{listing.address_width}-bit DLL.\n")

    sink.write(f"{listing.summary}.\n")
    if listing.number_of_functions == 0:
        return

    sink.write(SEPARATOR + "\n")
    for entry in listing.entries:
        sink.write(f"{_display(entry.name)} @{entry.ordinal}\n")


def describe_failure(exc: BaseException) -> list[str]:
    """One line per exception in the cause chain, outermost first."""
    lines = []
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        lines.append(f"{type(current).__name__}: {current}")
        current = current.__cause__ or (
            None if current.__suppress_context__ else current.__context__
        )
    return lines
