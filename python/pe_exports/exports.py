"""
Export directory decoding and export enumeration.

Every RVA reached from the export directory (module name, name pointer
table, name ordinal table, the names themselves) is translated with the
single delta of the section that contains the directory.

Only named exports are enumerated. When NumberOfNames < NumberOfFunctions
the remaining ordinal-only exports are counted in the summary range but
are not listed individually.
"""

import logging
from dataclasses import dataclass
from typing import NamedTuple

from .errors import DirectorySizeTooSmall, NoExportDirectoryEntry
from .headers import OptionalHeader
from .reader import ByteReader
from .sections import RvaMapping, resolve_rva_range
from .types import ExportDirectory, SectionHeader, EXPORT_DIRECTORY_SIZE

logger = logging.getLogger(__name__)


class ExportEntry(NamedTuple):
    """A named export and its ordinal."""

    name: bytes
    ordinal: int


@dataclass(frozen=True)
class ExportDirectoryInfo:
    """A decoded export directory together with how to translate its RVAs."""

    directory: ExportDirectory
    mapping: RvaMapping
    module_name: bytes | None

    @property
    def delta(self) -> int:
        return self.mapping.delta


def read_export_directory(
    reader: ByteReader,
    optional_header: OptionalHeader,
    sections: list[SectionHeader],
) -> ExportDirectoryInfo:
    """Locate and decode the export directory.

    Raises:
        NoExportDirectoryEntry: If the data directory array has no export entry
        DirectorySizeTooSmall: If the entry claims less than one directory record
        NoContainingSection: If no section holds the whole directory
        EmptySection: If the holding section has no raw data
        IoFailure: If a seek or read fails
    """
    entry = optional_header.export_directory
    if entry is None:
        raise NoExportDirectoryEntry(f"No exports found in '{reader.name}'.")

    if entry.Size < EXPORT_DIRECTORY_SIZE:
        raise DirectorySizeTooSmall(
            "Ungood file: claimed size of export dir header is too small."
        )

    mapping = resolve_rva_range(entry.VirtualAddress, entry.Size, sections)

    reader.seek(mapping.to_offset(entry.VirtualAddress), "exports table section")
    directory = reader.read_struct(ExportDirectory)
    logger.debug(
        "Export directory: base %d, %d functions, %d names",
        directory.Base,
        directory.NumberOfFunctions,
        directory.NumberOfNames,
    )

    module_name = None
    if directory.Name:
        reader.seek(mapping.to_offset(directory.Name), "module name")
        module_name = reader.read_cstring()

    return ExportDirectoryInfo(directory, mapping, module_name)


def enumerate_exports(
    reader: ByteReader, info: ExportDirectoryInfo
) -> list[ExportEntry]:
    """List the named exports in name pointer table order.

    Nothing beyond the directory itself is read when it declares no
    functions; the name and ordinal tables may be absent in that case.
    """
    directory = info.directory
    if directory.NumberOfFunctions == 0:
        return []

    count = directory.NumberOfNames

    mapping = info.mapping
    reader.seek(mapping.to_offset(directory.AddressOfNames), "name addresses table")
    name_rvas = reader.read_array("I", count)

    names = []
    for rva in name_rvas:
        reader.seek(mapping.to_offset(rva), "an export name")
        names.append(reader.read_cstring())

    reader.seek(mapping.to_offset(directory.AddressOfNameOrdinals), "ordinals table")
    biases = reader.read_array("H", count)

    return [
        ExportEntry(name, directory.Base + bias) for name, bias in zip(names, biases)
    ]


def summarize_exports(number_of_functions: int, ordinal_base: int) -> str:
    """Describe the export count and ordinal span.

    Depends only on NumberOfFunctions, not on how many exports are named.
    """
    if number_of_functions == 0:
        return "no functions exported"
    if number_of_functions == 1:
        return f"1 function exported, at ordinal {ordinal_base}"
    last_ordinal = ordinal_base + number_of_functions - 1
    return (
        f"{number_of_functions} functions exported, "
        f"at ordinals {ordinal_base}...{last_ordinal}"
    )
