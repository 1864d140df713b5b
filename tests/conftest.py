import pytest
import pathlib

from pe_exports.types import (
    IMAGE_NT_OPTIONAL_HDR32_MAGIC,
    IMAGE_NT_OPTIONAL_HDR64_MAGIC,
)
from pe_test_utils import write_pe_image


# Names, biases and base used by the shared DLL fixtures. The ordinal
# bias table is deliberately not in name order.
SAMPLE_NAMES = [b"alpha", b"beta", b"gamma"]
SAMPLE_BIASES = [0, 2, 1]
SAMPLE_BASE = 100


@pytest.fixture(
    params=[IMAGE_NT_OPTIONAL_HDR32_MAGIC, IMAGE_NT_OPTIONAL_HDR64_MAGIC],
    ids=["pe32", "pe32plus"],
)
def optional_header_magic(request) -> int:
    """Parameterizes a test over both optional header variants."""
    return request.param


@pytest.fixture
def sample_dll(tmp_path: pathlib.Path, optional_header_magic: int) -> pathlib.Path:
    """A DLL with three named exports, for each optional header variant."""
    return write_pe_image(
        tmp_path / "sample.dll",
        names=SAMPLE_NAMES,
        biases=SAMPLE_BIASES,
        ordinal_base=SAMPLE_BASE,
        magic=optional_header_magic,
    )


@pytest.fixture
def pe32_dll(tmp_path: pathlib.Path) -> pathlib.Path:
    """A 32-bit DLL with three named exports."""
    return write_pe_image(
        tmp_path / "pe32.dll",
        names=SAMPLE_NAMES,
        biases=SAMPLE_BIASES,
        ordinal_base=SAMPLE_BASE,
        magic=IMAGE_NT_OPTIONAL_HDR32_MAGIC,
    )


@pytest.fixture
def pe64_dll(tmp_path: pathlib.Path) -> pathlib.Path:
    """A 64-bit DLL with three named exports."""
    return write_pe_image(
        tmp_path / "pe64.dll",
        names=SAMPLE_NAMES,
        biases=SAMPLE_BIASES,
        ordinal_base=SAMPLE_BASE,
        magic=IMAGE_NT_OPTIONAL_HDR64_MAGIC,
    )


@pytest.fixture
def no_exports_dll(tmp_path: pathlib.Path) -> pathlib.Path:
    """A DLL whose export directory declares no functions."""
    return write_pe_image(tmp_path / "empty.dll", names=[], ordinal_base=1)
