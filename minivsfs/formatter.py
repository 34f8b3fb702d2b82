"""Create new, empty MiniVSFS images."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .bitmap import set_bit
from .config import BLOCK_SIZE, ROOT_INODE, ROOT_PROJECT_ID
from .image import MiniVSFSImage
from .layout import compute_layout
from .models import DirEntry, EntryType, ImageLayout, Inode, InodeMode
from .utils import epoch_seconds, format_bytes

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FormatResult:
    path: Path
    size_kib: int
    layout: ImageLayout

    @property
    def summary(self) -> str:
        return (
            f"Image {self.path} created: {self.layout.total_blocks} blocks "
            f"({self.size_kib} KiB), {self.layout.inode_count} inodes"
        )


def build_image(size_kib: int, inode_count: int, *, now: Optional[int] = None) -> MiniVSFSImage:
    """Lay out and initialise a fresh image in memory."""
    layout = compute_layout(size_kib, inode_count)
    timestamp = epoch_seconds(now)
    image = MiniVSFSImage.blank(layout, mtime_epoch=timestamp)
    image.write_superblock()

    # Root inode and its directory block are the only allocated units.
    set_bit(image.inode_bitmap, ROOT_INODE - 1)
    set_bit(image.data_bitmap, 0)

    root_block = layout.data_region_start
    root = Inode(
        mode=InodeMode.DIRECTORY,
        links=2,
        size_bytes=BLOCK_SIZE,
        atime=timestamp,
        mtime=timestamp,
        ctime=timestamp,
        direct=[root_block],
        proj_id=ROOT_PROJECT_ID,
    )
    image.write_inode(ROOT_INODE - 1, root)

    image.write_dirent(root_block, 0, DirEntry(ROOT_INODE, EntryType.DIRECTORY, b"."))
    image.write_dirent(root_block, 1, DirEntry(ROOT_INODE, EntryType.DIRECTORY, b".."))
    logger.debug("Root directory at block %d", root_block)
    return image


def format_image(
    path: Union[str, Path],
    size_kib: int,
    inode_count: int,
    *,
    now: Optional[int] = None,
) -> FormatResult:
    """Create and format a new image file at *path*, replacing any existing file."""
    image = build_image(size_kib, inode_count, now=now)
    image.save(path)
    layout = image.superblock.layout
    logger.info(
        "Formatted %s: %d blocks (%s), %d inodes, data region %d+%d",
        path,
        layout.total_blocks,
        format_bytes(layout.image_bytes),
        layout.inode_count,
        layout.data_region_start,
        layout.data_region_blocks,
    )
    return FormatResult(path=Path(path), size_kib=size_kib, layout=layout)


__all__ = ["FormatResult", "build_image", "format_image"]
