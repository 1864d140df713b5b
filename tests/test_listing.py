"""Tests for the end-to-end listing pipeline and its rendering."""

import io
from pathlib import Path

from pe_exports import (
    BadMagic,
    ByteReader,
    IoFailure,
    ListingResult,
    NoExportDirectoryEntry,
    UnsupportedImageKind,
    describe_failure,
    list_exports,
    read_exports,
    write_listing,
)
from pe_exports.listing import SEPARATOR
from pe_exports.types import IMAGE_ROM_OPTIONAL_HDR_MAGIC

from pe_test_utils import build_pe_image, write_pe_image


def render(result: ListingResult) -> str:
    sink = io.StringIO()
    write_listing(result.listing, sink)
    return sink.getvalue()


class TestListExports:
    """Tests for list_exports()."""

    def test_pe32_listing(self, pe32_dll: Path):
        result = list_exports(pe32_dll)
        assert result.passed, str(result)
        assert result.error is None
        assert result.listing.address_width == 32
        assert result.listing.module_name == b"test.dll"
        assert result.listing.entries == [
            (b"alpha", 100),
            (b"beta", 102),
            (b"gamma", 101),
        ]

    def test_pe64_listing(self, pe64_dll: Path):
        result = list_exports(pe64_dll)
        assert result.passed, str(result)
        assert result.listing.address_width == 64

    def test_wrong_size_of_optional_header_still_lists(
        self, tmp_path: Path, optional_header_magic: int
    ):
        """Section headers are found right after the data directories."""
        path = write_pe_image(
            tmp_path / "odd.dll",
            names=[b"f"],
            magic=optional_header_magic,
            size_of_optional_header=0xFFFF,
        )
        result = list_exports(path)
        assert result.passed, str(result)
        assert result.listing.entries == [(b"f", 1)]

    def test_missing_file_is_io_failure(self, tmp_path: Path):
        result = list_exports(tmp_path / "missing.dll")
        assert not result.passed
        assert isinstance(result.error, IoFailure)
        assert result.listing is None

    def test_not_a_pe_file(self, tmp_path: Path):
        path = tmp_path / "text.dll"
        path.write_bytes(b"just some text, certainly not an image" * 4)
        result = list_exports(path)
        assert isinstance(result.error, BadMagic)
        assert str(result).startswith("BadMagic: No MZ magic number")

    def test_rom_image_rejected(self, tmp_path: Path):
        path = write_pe_image(
            tmp_path / "rom.dll", names=[b"f"], magic=IMAGE_ROM_OPTIONAL_HDR_MAGIC
        )
        result = list_exports(path)
        assert isinstance(result.error, UnsupportedImageKind)

    def test_no_export_entry(self, tmp_path: Path):
        path = write_pe_image(
            tmp_path / "noexp.dll", names=[b"f"], number_of_rva_and_sizes=0
        )
        result = list_exports(path)
        assert isinstance(result.error, NoExportDirectoryEntry)
        assert str(path) in str(result.error)

    def test_no_functions_is_success(self, no_exports_dll: Path):
        result = list_exports(no_exports_dll)
        assert result.passed
        assert result.listing.entries == []
        assert result.listing.summary == "no functions exported"

    def test_file_is_closed_after_failure(self, tmp_path: Path):
        """The file can be removed right after a failed listing."""
        path = tmp_path / "bad.dll"
        path.write_bytes(b"\x00" * 128)
        assert not list_exports(path).passed
        path.unlink()
        assert not path.exists()


class TestReadExports:
    def test_read_from_memory(self):
        reader = ByteReader.from_bytes(build_pe_image([b"f"], ordinal_base=5))
        listing = read_exports(reader)
        assert listing.entries == [(b"f", 5)]
        assert listing.summary == "1 function exported, at ordinal 5"


class TestWriteListing:
    """Tests for write_listing()."""

    def test_full_listing_text(self, pe32_dll: Path):
        assert render(list_exports(pe32_dll)) == (
            "32-bit DLL 'test.dll'.\n"
            "3 functions exported, at ordinals 100...102.\n"
            f"{SEPARATOR}\n"
            "alpha @100\n"
            "beta @102\n"
            "gamma @101\n"
        )

    def test_width_line_for_each_variant(self, sample_dll: Path):
        result = list_exports(sample_dll)
        first_line = render(result).splitlines()[0]
        assert first_line == f"{result.listing.address_width}-bit DLL 'test.dll'."

    def test_without_module_name(self, tmp_path: Path):
        path = write_pe_image(tmp_path / "anon.dll", names=[b"f"], module_name=None)
        assert render(list_exports(path)).splitlines()[0] == "32-bit DLL."

    def test_no_functions_has_no_separator(self, no_exports_dll: Path):
        assert render(list_exports(no_exports_dll)) == (
            "32-bit DLL 'test.dll'.\nno functions exported.\n"
        )

    def test_summary_spans_unnamed_ordinals(self, tmp_path: Path):
        path = write_pe_image(
            tmp_path / "partial.dll",
            names=[b"first", b"second"],
            ordinal_base=1,
            number_of_functions=10,
        )
        lines = render(list_exports(path)).splitlines()
        assert lines[1] == "10 functions exported, at ordinals 1...10."
        assert lines[3:] == ["first @1", "second @2"]

    def test_separator_is_72_dashes(self):
        assert SEPARATOR == "-" * 72

    def test_non_ascii_name_is_escaped(self, tmp_path: Path):
        path = write_pe_image(tmp_path / "odd.dll", names=[b"bad\xffname"])
        lines = render(list_exports(path)).splitlines()
        assert lines[-1] == "bad\\xffname @1"

    def test_idempotent_output(self, sample_dll: Path):
        assert render(list_exports(sample_dll)) == render(list_exports(sample_dll))


class TestDescribeFailure:
    def test_single_exception(self):
        assert describe_failure(RuntimeError("boom")) == ["RuntimeError: boom"]

    def test_follows_cause_chain(self):
        try:
            try:
                raise KeyError("inner")
            except KeyError as e:
                raise IoFailure("outer") from e
        except IoFailure as e:
            lines = describe_failure(e)
        assert lines == ["IoFailure: outer", "KeyError: 'inner'"]
