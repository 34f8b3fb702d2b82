"""Layout calculation for new images."""
from __future__ import annotations

import logging
import math

from .config import (
    BLOCK_SIZE,
    INODE_SIZE,
    MAX_INODES,
    MAX_SIZE_KIB,
    MIN_INODES,
    MIN_SIZE_KIB,
    SIZE_KIB_ALIGNMENT,
)
from .errors import ConfigurationError
from .models import ImageLayout

logger = logging.getLogger(__name__)

SUPERBLOCK_BLOCKS = 1
BITMAP_BLOCKS = 1


def validate_format_options(size_kib: int, inode_count: int) -> None:
    if isinstance(size_kib, bool) or not isinstance(size_kib, int):
        raise ConfigurationError(f"Invalid size-kib: {size_kib!r}")
    if isinstance(inode_count, bool) or not isinstance(inode_count, int):
        raise ConfigurationError(f"Invalid inodes count: {inode_count!r}")
    if not MIN_SIZE_KIB <= size_kib <= MAX_SIZE_KIB:
        raise ConfigurationError(
            f"Invalid size-kib: {size_kib} (must be {MIN_SIZE_KIB}..{MAX_SIZE_KIB})"
        )
    if size_kib % SIZE_KIB_ALIGNMENT:
        raise ConfigurationError(
            f"Invalid size-kib: {size_kib} (must be a multiple of {SIZE_KIB_ALIGNMENT})"
        )
    if not MIN_INODES <= inode_count <= MAX_INODES:
        raise ConfigurationError(
            f"Invalid inodes count: {inode_count} (must be {MIN_INODES}..{MAX_INODES})"
        )


def inode_table_blocks(inode_count: int) -> int:
    return math.ceil(inode_count * INODE_SIZE / BLOCK_SIZE)


def compute_layout(size_kib: int, inode_count: int) -> ImageLayout:
    """Partition a ``size_kib`` image holding ``inode_count`` inodes into block extents."""
    validate_format_options(size_kib, inode_count)

    total_blocks = size_kib * 1024 // BLOCK_SIZE
    inode_bitmap_start = SUPERBLOCK_BLOCKS
    data_bitmap_start = inode_bitmap_start + BITMAP_BLOCKS
    inode_table_start = data_bitmap_start + BITMAP_BLOCKS
    table_blocks = inode_table_blocks(inode_count)
    data_region_start = inode_table_start + table_blocks

    layout = ImageLayout(
        total_blocks=total_blocks,
        inode_count=inode_count,
        inode_bitmap_start=inode_bitmap_start,
        inode_bitmap_blocks=BITMAP_BLOCKS,
        data_bitmap_start=data_bitmap_start,
        data_bitmap_blocks=BITMAP_BLOCKS,
        inode_table_start=inode_table_start,
        inode_table_blocks=table_blocks,
        data_region_start=data_region_start,
        data_region_blocks=total_blocks - data_region_start,
    )
    logger.debug("Computed layout %s", layout)
    return layout


__all__ = ["compute_layout", "inode_table_blocks", "validate_format_options"]
