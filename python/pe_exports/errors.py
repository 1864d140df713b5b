"""
Failure kinds raised while listing the exports of a PE image.

Every failure is fatal to the current run. ImageFormatError subclasses are
the expected outcomes of feeding the tool a file that is not a usable DLL;
IoFailure and anything outside this hierarchy are internal failures.
"""

from typing import ClassVar


class ExportListingError(Exception):
    """Base class for all failures reported by pe_exports."""

    kind: ClassVar[str] = "ExportListingError"


class UsageError(ExportListingError):
    """Raised when the command line does not name exactly one file."""

    kind = "UsageError"


class ImageFormatError(ExportListingError, ValueError):
    """Raised when the file fails a structural validation."""

    kind = "ImageFormatError"


class BadMagic(ImageFormatError):
    """DOS or NT signature mismatch; the file is not a PE image at all."""

    kind = "BadMagic"

    def __init__(self, expected: str, message: str | None = None):
        self.expected = expected
        super().__init__(message or f"No {expected} magic number found.")


class UnsupportedImageKind(ImageFormatError):
    """Optional header magic is neither PE32 nor PE32+ (e.g. a ROM image)."""

    kind = "UnsupportedImageKind"

    def __init__(self, magic: int, message: str | None = None):
        self.magic = magic
        super().__init__(
            message
            or f"Not a PE32 (32-bit) or PE32+ (64-bit) file (magic 0x{magic:04X})."
        )


class NoExportDirectoryEntry(ImageFormatError):
    """The data directory array is too short to hold the export entry."""

    kind = "NoExportDirectoryEntry"


class DirectorySizeTooSmall(ImageFormatError):
    """The export directory entry claims fewer bytes than the record needs."""

    kind = "DirectorySizeTooSmall"


class NoContainingSection(ImageFormatError):
    """No single section's raw data covers the export directory."""

    kind = "NoContainingSection"


class EmptySection(ImageFormatError):
    """The section matched for the export directory has no raw data."""

    kind = "EmptySection"


class IoFailure(ExportListingError, OSError):
    """A seek or read against the image failed (bad offset, short read, OS error)."""

    kind = "IoFailure"
