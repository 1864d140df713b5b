"""
Seekable byte reader over a PE image on disk.

ByteReader wraps one binary file handle and turns every failed seek or
short read into an IoFailure. ``read`` advances the position, ``peek``
does not; keeping the two apart avoids consuming bytes that the next
structure read expects to see again.

Usage:
    with ByteReader.open(Path("foo.dll")) as reader:
        dos = reader.read_struct(DosHeader)
        reader.seek(dos.e_lfanew)
"""

import io
import os
import struct
from pathlib import Path
from typing import BinaryIO, TypeVar

from .errors import IoFailure

T = TypeVar("T")

# Chunk size used when scanning for a string terminator
_CSTRING_CHUNK = 64


class ByteReader:
    """Absolute-seek, fixed-size reads against a single binary stream."""

    def __init__(self, stream: BinaryIO, name: str = "<memory>"):
        """Initialize over an already opened binary stream.

        Prefer ByteReader.open() or ByteReader.from_bytes().

        Args:
            stream: Readable, seekable binary stream
            name: Display name of the image (for error messages)
        """
        self._stream = stream
        self.name = name
        try:
            self._size = stream.seek(0, os.SEEK_END)
            stream.seek(0)
        except OSError as e:
            raise IoFailure(f"Cannot determine size of '{name}': {e}") from e

    @classmethod
    def open(cls, path: Path) -> "ByteReader":
        """Open a file read-only in binary mode.

        Raises:
            IoFailure: If the file cannot be opened
        """
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise IoFailure(f"Cannot open '{path}': {e.strerror or e}") from e
        try:
            return cls(stream, str(path))
        except IoFailure:
            stream.close()
            raise

    @classmethod
    def from_bytes(
        cls, data: bytes | bytearray, name: str = "<memory>"
    ) -> "ByteReader":
        """Wrap an in-memory image."""
        return cls(io.BytesIO(bytes(data)), name)

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "ByteReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # =========================================================================
    # Positioning
    # =========================================================================

    @property
    def size(self) -> int:
        """Total size of the image in bytes."""
        return self._size

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, what: str = "data") -> None:
        """Move to an absolute file offset.

        Args:
            offset: Target offset; may come from RVA arithmetic and be negative
            what: Description of the target (for error messages)

        Raises:
            IoFailure: If the offset lies outside the file
        """
        if offset < 0 or offset > self._size:
            raise IoFailure(
                f"Ungood file: a seek to the {what} failed "
                f"(offset {offset:#x} outside file of {self._size:#x} bytes)."
            )
        try:
            self._stream.seek(offset)
        except (OSError, ValueError) as e:
            raise IoFailure(f"Ungood file: a seek to the {what} failed: {e}") from e

    # =========================================================================
    # Reads
    # =========================================================================

    def read(self, n: int) -> bytes:
        """Read exactly n bytes, advancing the position.

        Counts come from the file itself, so a request larger than what is
        left is rejected before any buffer is allocated.

        Raises:
            IoFailure: On a short read or OS error
        """
        position = self.tell()
        available = self._size - position
        if n > available:
            raise IoFailure(
                f"Unexpected end of '{self.name}': wanted {n} bytes at "
                f"{position:#x}, {max(available, 0)} available."
            )
        try:
            data = self._stream.read(n)
        except OSError as e:
            raise IoFailure(f"Read of {n} bytes at {position:#x} failed: {e}") from e
        if len(data) != n:
            raise IoFailure(
                f"Unexpected end of '{self.name}': wanted {n} bytes at "
                f"{position:#x}, got {len(data)}."
            )
        return data

    def peek(self, n: int) -> bytes:
        """Read exactly n bytes without advancing the position."""
        position = self.tell()
        data = self.read(n)
        self._stream.seek(position)
        return data

    def read_struct(self, cls: type[T]) -> T:
        """Read one fixed-layout record (a pe_exports.types class)."""
        return cls.from_bytes(self.read(cls.SIZE))

    def read_array(self, fmt: str, count: int) -> list[int]:
        """Read count consecutive little-endian integers of struct code fmt."""
        if count <= 0:
            return []
        item_size = struct.calcsize("<" + fmt)
        data = self.read(item_size * count)
        return list(struct.unpack(f"<{count}{fmt}", data))

    def read_cstring(self) -> bytes:
        """Read a NUL-terminated byte string, leaving the position after the NUL.

        End of file also terminates the string.
        """
        start = self.tell()
        parts = []
        while True:
            try:
                chunk = self._stream.read(_CSTRING_CHUNK)
            except OSError as e:
                raise IoFailure(f"Read of string at {start:#x} failed: {e}") from e
            if not chunk:
                break
            nul = chunk.find(b"\x00")
            if nul >= 0:
                parts.append(chunk[:nul])
                self._stream.seek(start + sum(len(p) for p in parts) + 1)
                break
            parts.append(chunk)
        return b"".join(parts)
