#!/usr/bin/env python3
"""
Export listing CLI tool.

Lists the named exports of a 32-bit or 64-bit Windows DLL by parsing the
file directly, without loading it.

Usage:
    python -m pe_exports.tools.list_exports <dll> [--verbose]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from pe_exports import (
    ExportListingError,
    ImageFormatError,
    UsageError,
    describe_failure,
    list_exports,
    write_listing,
)


def report_failure(exc: BaseException, err: TextIO) -> None:
    """Write a failure to err.

    Validation and usage failures are one line prefixed with "!"; anything
    else is shown as a bulleted block of the exception and its causes.
    """
    if isinstance(exc, (ImageFormatError, UsageError)):
        print(f"!{exc}", file=err)
        return
    for line in describe_failure(exc):
        print(f"* {line}", file=err)


def run(paths: list[Path], out: TextIO, err: TextIO) -> int:
    """List exports of the single file in paths; return the exit code."""
    try:
        if len(paths) != 1:
            raise UsageError("Specify one argument: the DLL filename or path.")
        result = list_exports(paths[0])
        if not result.passed:
            raise result.error
        write_listing(result.listing, out)
        return 0
    except ExportListingError as e:
        report_failure(e, err)
    except Exception as e:
        logging.getLogger(__name__).debug("Unexpected failure", exc_info=True)
        report_failure(e, err)
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="List the named exports of a PE32 or PE32+ DLL"
    )
    parser.add_argument(
        "paths", type=Path, nargs="*", metavar="dll", help="Path to the DLL"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging of the parse on stderr",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    return run(args.paths, sys.stdout, sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
