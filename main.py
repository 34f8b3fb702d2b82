"""Launcher for the MiniVSFS image tools."""
from __future__ import annotations

import argparse
import sys

from minivsfs.cli import add_main, format_main

COMMANDS = {
    "mkfs": format_main,
    "add": add_main,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="minivsfs",
        description="Create MiniVSFS images and add files to them.",
    )
    parser.add_argument("command", choices=sorted(COMMANDS), help="Tool to run.")
    parser.add_argument("arguments", nargs=argparse.REMAINDER, help="Arguments passed to the tool.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    raw_args = list(sys.argv[1:] if argv is None else argv)
    args = parse_args(raw_args)
    return COMMANDS[args.command](args.arguments)


if __name__ == "__main__":
    raise SystemExit(main())
