from __future__ import annotations

from pathlib import Path
from typing import List

from minivsfs.config import BLOCK_SIZE, ROOT_INODE
from minivsfs.formatter import format_image
from minivsfs.image import MiniVSFSImage
from minivsfs.models import DirEntry

FIXED_NOW = 1_700_000_000


def build_formatted_image(path: Path, *, size_kib: int = 180, inodes: int = 128) -> MiniVSFSImage:
    """Format an image at *path* with a pinned clock and return it reloaded."""
    format_image(path, size_kib, inodes, now=FIXED_NOW)
    return MiniVSFSImage.load(path)


def write_source(directory: Path, name: str, size: int) -> Path:
    """Create a file of *size* bytes with a non repeating byte pattern."""
    path = directory / name
    path.write_bytes(bytes((i * 7 + i // 251) & 0xFF for i in range(size)))
    return path


def read_file_bytes(image: MiniVSFSImage, inode_no: int) -> bytes:
    inode = image.read_inode(inode_no - 1)
    data = b"".join(bytes(image.block(block)) for block in inode.blocks)
    return data[: inode.size_bytes]


def root_entries(image: MiniVSFSImage) -> List[DirEntry]:
    root = image.read_inode(ROOT_INODE - 1)
    return [entry for _, entry in image.iter_dirents(root.direct[0]) if not entry.is_free]


def fill_bitmap(bitmap: memoryview) -> None:
    bitmap[:] = b"\xff" * BLOCK_SIZE
