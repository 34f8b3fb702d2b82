"""In-memory representation of a whole MiniVSFS image."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Tuple, Union

from .checksum import seal_dirent, seal_inode, seal_superblock
from .config import BLOCK_SIZE, DIRENT_SIZE, DIRENTS_PER_BLOCK, INODE_SIZE, INODES_PER_BLOCK, MAGIC
from .errors import ImageIOError, InvalidImageError
from .models import SUPERBLOCK_SIZE, DirEntry, ImageLayout, Inode, Superblock

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _check_layout(superblock: Superblock) -> None:
    """Reject superblocks whose extents do not fit the image they describe."""
    total = superblock.total_blocks
    extents = (
        ("inode bitmap", superblock.inode_bitmap_start, superblock.inode_bitmap_blocks),
        ("data bitmap", superblock.data_bitmap_start, superblock.data_bitmap_blocks),
        ("inode table", superblock.inode_table_start, superblock.inode_table_blocks),
        ("data region", superblock.data_region_start, superblock.data_region_blocks),
    )
    for label, start, count in extents:
        if start < 1 or count < 1 or start + count > total:
            raise InvalidImageError(
                f"Not a valid image: {label} extent {start}+{count} outside {total} blocks"
            )
    if superblock.data_region_start + superblock.data_region_blocks != total:
        raise InvalidImageError("Not a valid image: data region does not end the image")
    if not 1 <= superblock.inode_count <= superblock.inode_table_blocks * INODES_PER_BLOCK:
        raise InvalidImageError(
            f"Not a valid image: {superblock.inode_count} inodes in "
            f"{superblock.inode_table_blocks} inode table blocks"
        )
    if superblock.inode_count > superblock.inode_bitmap_blocks * BLOCK_SIZE * 8:
        raise InvalidImageError("Not a valid image: inode bitmap too small")
    if superblock.data_region_blocks > superblock.data_bitmap_blocks * BLOCK_SIZE * 8:
        raise InvalidImageError("Not a valid image: data bitmap too small")


class MiniVSFSImage:
    """A contiguous image buffer with typed accessors for its regions."""

    def __init__(self, data: bytearray, superblock: Superblock) -> None:
        self.img = data
        self.superblock = superblock

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def blank(cls, layout: ImageLayout, *, mtime_epoch: int = 0) -> "MiniVSFSImage":
        """Zero filled image whose superblock describes *layout* (not yet written)."""
        data = bytearray(layout.image_bytes)
        return cls(data, Superblock.from_layout(layout, mtime_epoch=mtime_epoch))

    @classmethod
    def from_bytes(cls, data: bytes) -> "MiniVSFSImage":
        size = len(data)
        if size == 0 or size % BLOCK_SIZE:
            raise InvalidImageError(f"Invalid input image size: {size} bytes")
        superblock = Superblock.unpack(data[:SUPERBLOCK_SIZE])
        if superblock.magic != MAGIC:
            raise InvalidImageError(
                f"Bad superblock magic 0x{superblock.magic:08x} (expected 0x{MAGIC:08x})"
            )
        if superblock.block_size != BLOCK_SIZE:
            raise InvalidImageError(f"Unexpected block size {superblock.block_size}")
        if superblock.total_blocks * BLOCK_SIZE > size:
            raise InvalidImageError(
                f"Image truncated: superblock describes {superblock.total_blocks} blocks, "
                f"file holds {size // BLOCK_SIZE}"
            )
        _check_layout(superblock)
        return cls(bytearray(data), superblock)

    @classmethod
    def load(cls, path: PathLike) -> "MiniVSFSImage":
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise ImageIOError(f"Cannot read image {path}: {exc.strerror or exc}") from exc
        logger.debug("Loaded %s (%d bytes)", path, len(data))
        return cls.from_bytes(data)

    def save(self, path: PathLike) -> None:
        """Write the whole image, truncating any existing file."""
        try:
            Path(path).write_bytes(self.img)
        except OSError as exc:
            raise ImageIOError(f"Cannot write image {path}: {exc.strerror or exc}") from exc
        logger.debug("Wrote %s (%d bytes)", path, len(self.img))

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------
    def block(self, number: int) -> memoryview:
        if not 0 <= number < len(self.img) // BLOCK_SIZE:
            raise InvalidImageError(f"Block {number} outside the image")
        offset = number * BLOCK_SIZE
        return memoryview(self.img)[offset : offset + BLOCK_SIZE]

    def write_block(self, number: int, data: bytes) -> None:
        """Store *data* in block *number*, zero padding the remainder."""
        if len(data) > BLOCK_SIZE:
            raise ValueError(f"{len(data)} bytes do not fit in one block")
        self.block(number)[:] = bytes(data).ljust(BLOCK_SIZE, b"\x00")

    # ------------------------------------------------------------------
    # Superblock
    # ------------------------------------------------------------------
    def write_superblock(self) -> None:
        seal_superblock(self.superblock)
        self.write_block(0, self.superblock.pack())

    # ------------------------------------------------------------------
    # Bitmaps
    # ------------------------------------------------------------------
    @property
    def inode_bitmap(self) -> memoryview:
        return self.block(self.superblock.inode_bitmap_start)

    @property
    def data_bitmap(self) -> memoryview:
        return self.block(self.superblock.data_bitmap_start)

    # ------------------------------------------------------------------
    # Inodes (index 0 holds inode number 1)
    # ------------------------------------------------------------------
    def _inode_offset(self, index: int) -> int:
        if not 0 <= index < self.superblock.inode_count:
            raise IndexError(f"Inode index {index} outside 0..{self.superblock.inode_count - 1}")
        return self.superblock.inode_table_start * BLOCK_SIZE + index * INODE_SIZE

    def inode_bytes(self, index: int) -> bytes:
        offset = self._inode_offset(index)
        return bytes(self.img[offset : offset + INODE_SIZE])

    def read_inode(self, index: int) -> Inode:
        return Inode.unpack(self.inode_bytes(index))

    def write_inode(self, index: int, inode: Inode) -> None:
        seal_inode(inode)
        offset = self._inode_offset(index)
        self.img[offset : offset + INODE_SIZE] = inode.pack()

    # ------------------------------------------------------------------
    # Directory entries
    # ------------------------------------------------------------------
    def _dirent_offset(self, block: int, slot: int) -> int:
        if not 0 <= slot < DIRENTS_PER_BLOCK:
            raise IndexError(f"Directory slot {slot} outside 0..{DIRENTS_PER_BLOCK - 1}")
        self.block(block)
        return block * BLOCK_SIZE + slot * DIRENT_SIZE

    def dirent_bytes(self, block: int, slot: int) -> bytes:
        offset = self._dirent_offset(block, slot)
        return bytes(self.img[offset : offset + DIRENT_SIZE])

    def read_dirent(self, block: int, slot: int) -> DirEntry:
        return DirEntry.unpack(self.dirent_bytes(block, slot))

    def write_dirent(self, block: int, slot: int, entry: DirEntry) -> None:
        seal_dirent(entry)
        offset = self._dirent_offset(block, slot)
        self.img[offset : offset + DIRENT_SIZE] = entry.pack()

    def iter_dirents(self, block: int) -> Iterator[Tuple[int, DirEntry]]:
        for slot in range(DIRENTS_PER_BLOCK):
            yield slot, self.read_dirent(block, slot)


__all__ = ["MiniVSFSImage"]
