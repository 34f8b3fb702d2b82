"""Command line front ends: ``mkfs-builder`` and ``mkfs-adder``."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn, Optional

from .config import (
    ADD_EXIT_FAILURE,
    APP_NAME,
    APP_VERSION,
    EXIT_SUCCESS,
    FORMAT_EXIT_FAILURE,
    MAX_INODES,
    MAX_SIZE_KIB,
    MIN_INODES,
    MIN_SIZE_KIB,
)
from .errors import MiniVSFSError
from .formatter import format_image
from .inserter import add_file


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with the tool's own exit code."""

    def __init__(self, *args, failure_code: int = 2, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.failure_code = failure_code

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(self.failure_code, f"{self.prog}: error: {message}\n")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each layout and allocation step.")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {APP_VERSION}")


def build_format_parser(prog: str = "mkfs-builder") -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=prog,
        description="Create an empty MiniVSFS image.",
        failure_code=FORMAT_EXIT_FAILURE,
    )
    parser.add_argument("--image", required=True, help="Output image path.")
    parser.add_argument(
        "--size-kib",
        type=int,
        required=True,
        help=f"Image size in KiB ({MIN_SIZE_KIB}..{MAX_SIZE_KIB}, multiple of 4).",
    )
    parser.add_argument(
        "--inodes",
        type=int,
        required=True,
        help=f"Inode capacity ({MIN_INODES}..{MAX_INODES}).",
    )
    _add_common_arguments(parser)
    return parser


def build_add_parser(prog: str = "mkfs-adder") -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=prog,
        description="Add one file to the root directory of a MiniVSFS image.",
        failure_code=ADD_EXIT_FAILURE,
    )
    parser.add_argument("--input", required=True, help="Existing image to read.")
    parser.add_argument("--output", required=True, help="Image to write (may equal --input).")
    parser.add_argument("--file", required=True, help="Regular file to add.")
    _add_common_arguments(parser)
    return parser


def run_format(args: argparse.Namespace) -> int:
    if not args.image:
        print("Error: No image filename provided", file=sys.stderr)
        return FORMAT_EXIT_FAILURE
    try:
        result = format_image(args.image, args.size_kib, args.inodes)
    except MiniVSFSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return FORMAT_EXIT_FAILURE
    print(result.summary)
    return EXIT_SUCCESS


def run_add(args: argparse.Namespace) -> int:
    try:
        result = add_file(args.input, args.output, args.file)
    except MiniVSFSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return ADD_EXIT_FAILURE
    print(result.summary, file=sys.stderr)
    return EXIT_SUCCESS


def format_main(argv: Optional[list[str]] = None) -> int:
    args = build_format_parser().parse_args(argv)
    configure_logging(args.verbose)
    return run_format(args)


def add_main(argv: Optional[list[str]] = None) -> int:
    args = build_add_parser().parse_args(argv)
    configure_logging(args.verbose)
    return run_add(args)


def mkfs_builder() -> None:
    raise SystemExit(format_main())


def mkfs_adder() -> None:
    raise SystemExit(add_main())


__all__ = ["add_main", "build_add_parser", "build_format_parser", "format_main", "run_add", "run_format"]
