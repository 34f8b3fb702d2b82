"""Utility helpers used across the MiniVSFS tools."""
from __future__ import annotations

import time
from typing import Optional


def epoch_seconds(now: Optional[int] = None) -> int:
    """Current Unix time in whole seconds unless *now* pins it."""
    if now is not None:
        return int(now)
    return int(time.time())


def base_name(path: str) -> str:
    """Final component of *path*, splitting on either separator.

    A trailing separator yields an empty name.
    """
    return str(path).replace("\\", "/").rsplit("/", 1)[-1]


def blocks_needed(nbytes: int, block_size: int) -> int:
    return (nbytes + block_size - 1) // block_size


def format_bytes(size: int) -> str:
    """Human friendly file size formatting."""
    negative = size < 0
    value = float(abs(size))
    units = ["B", "KB", "MB", "GB", "TB"]
    for unit in units:
        if value < 1024 or unit == units[-1]:
            formatted = f"{int(value)}{unit}" if unit == "B" else f"{value:.1f}{unit}"
            return f"-{formatted}" if negative else formatted
        value /= 1024
    return f"{value:.1f}TB"
