"""Add one regular file to the root directory of an existing image."""
from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .bitmap import count_set, find_and_set_first_free
from .config import BLOCK_SIZE, DIRECT_MAX, MAX_FILE_SIZE, NAME_MAX, ROOT_INODE
from .errors import (
    ConfigurationError,
    ImageIOError,
    InvalidImageError,
    NameConflictError,
    ResourceExhaustedError,
)
from .image import MiniVSFSImage
from .models import DirEntry, EntryType, Inode, InodeMode
from .utils import base_name, blocks_needed, epoch_seconds

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(slots=True)
class AddResult:
    name: str
    inode_no: int
    blocks: List[int]
    size_bytes: int

    @property
    def summary(self) -> str:
        return f"Added {self.name} -> inode {self.inode_no}, {len(self.blocks)} blocks"


def entry_name(source: PathLike) -> bytes:
    """Root directory name for *source*: its final path component."""
    name = base_name(str(source)).encode("utf-8", errors="surrogateescape")
    if not 1 <= len(name) <= NAME_MAX:
        raise ConfigurationError(f"Filename length must be 1..{NAME_MAX} bytes, got {len(name)}")
    if any(byte < 0x20 or byte == 0x7F for byte in name):
        raise ConfigurationError(f"Filename contains unprintable bytes: {name!r}")
    return name


def read_source(source: PathLike) -> bytes:
    path = Path(source)
    try:
        info = path.stat()
    except OSError as exc:
        raise ImageIOError(f"Cannot stat {source}: {exc.strerror or exc}") from exc
    if not stat.S_ISREG(info.st_mode):
        raise ConfigurationError(f"{source} is not a regular file")
    if info.st_size > MAX_FILE_SIZE:
        raise ResourceExhaustedError(
            f"File too large: {info.st_size} bytes needs "
            f"{blocks_needed(info.st_size, BLOCK_SIZE)} blocks, limit is {DIRECT_MAX}"
        )
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ImageIOError(f"Cannot read {source}: {exc.strerror or exc}") from exc
    if len(data) > MAX_FILE_SIZE:
        raise ResourceExhaustedError(f"File too large: {len(data)} bytes")
    return data


class FileInserter:
    """Allocate an inode and data blocks for one file and link it into the root."""

    def __init__(self, image: MiniVSFSImage) -> None:
        self.image = image
        self.root, self.root_block = self._load_root()

    def _load_root(self) -> Tuple[Inode, int]:
        """Root inode and its directory block, checked for usability."""
        root = self.image.read_inode(ROOT_INODE - 1)
        if not root.is_directory:
            raise InvalidImageError("Root inode is not a directory")
        root_block = root.direct[0]
        if root_block == 0:
            raise InvalidImageError("Root has no data block")
        self.image.block(root_block)
        return root, root_block

    def find_entry(self, name: bytes) -> Optional[int]:
        """Slot of the used root entry called *name*, if any."""
        for slot, entry in self.image.iter_dirents(self.root_block):
            if not entry.is_free and entry.name == name:
                return slot
        return None

    def find_free_slot(self) -> Optional[int]:
        """First unused slot of the root directory block."""
        for slot, entry in self.image.iter_dirents(self.root_block):
            if entry.is_free:
                return slot
        return None

    def allocate_inode(self) -> int:
        """Claim the lowest free inode and return its table index."""
        superblock = self.image.superblock
        index = find_and_set_first_free(self.image.inode_bitmap, superblock.inode_count)
        if index is None:
            raise ResourceExhaustedError("No free inode")
        logger.debug("Allocated inode index %d", index)
        return index

    def allocate_blocks(self, count: int) -> List[int]:
        """Claim *count* data blocks, returned as absolute block numbers."""
        superblock = self.image.superblock
        bitmap = self.image.data_bitmap
        blocks: List[int] = []
        while len(blocks) < count:
            index = find_and_set_first_free(bitmap, superblock.data_region_blocks)
            if index is None:
                raise ResourceExhaustedError(
                    f"No space for data blocks: needed {count}, found {len(blocks)}"
                )
            blocks.append(superblock.data_region_start + index)
        logger.debug("Allocated data blocks %s", blocks)
        return blocks

    def insert(self, name: bytes, data: bytes, *, now: Optional[int] = None) -> AddResult:
        """Store *data* as a new root entry *name* and reseal touched metadata."""
        if self.find_entry(name) is not None:
            raise NameConflictError(
                f"File with same name already exists in root: {name.decode('utf-8', 'replace')}"
            )
        need = blocks_needed(len(data), BLOCK_SIZE)
        if need > DIRECT_MAX:
            raise ResourceExhaustedError(f"File too large: {len(data)} bytes")

        index = self.allocate_inode()
        blocks = self.allocate_blocks(need)
        for position, block in enumerate(blocks):
            self.image.write_block(block, data[position * BLOCK_SIZE : (position + 1) * BLOCK_SIZE])

        timestamp = epoch_seconds(now)
        inode = Inode(
            mode=InodeMode.FILE,
            links=1,
            size_bytes=len(data),
            atime=timestamp,
            mtime=timestamp,
            ctime=timestamp,
            direct=blocks,
        )
        self.image.write_inode(index, inode)

        slot = self.find_free_slot()
        if slot is None:
            raise ResourceExhaustedError("Root directory full")
        inode_no = index + 1
        self.image.write_dirent(self.root_block, slot, DirEntry(inode_no, EntryType.FILE, name))

        # Every entry added to the root bumps its link count.
        self.root.links += 1
        self.root.mtime = timestamp
        self.image.write_inode(ROOT_INODE - 1, self.root)

        self.image.superblock.mtime_epoch = timestamp
        self.image.write_superblock()

        return AddResult(
            name=name.decode("utf-8", errors="replace"),
            inode_no=inode_no,
            blocks=blocks,
            size_bytes=len(data),
        )


def add_file(
    input_image: PathLike,
    output_image: PathLike,
    source: PathLike,
    *,
    now: Optional[int] = None,
) -> AddResult:
    """Copy *input_image* to *output_image* with *source* added to its root directory.

    Nothing is written unless every check and allocation succeeds.
    """
    image = MiniVSFSImage.load(input_image)
    inserter = FileInserter(image)
    data = read_source(source)
    name = entry_name(source)
    result = inserter.insert(name, data, now=now)
    image.save(output_image)
    superblock = image.superblock
    logger.info(
        "Added %s (%d bytes) to %s as inode %d in blocks %s, %d data blocks free",
        result.name,
        result.size_bytes,
        output_image,
        result.inode_no,
        result.blocks,
        superblock.data_region_blocks - count_set(image.data_bitmap, superblock.data_region_blocks),
    )
    return result


__all__ = ["AddResult", "FileInserter", "add_file", "entry_name", "read_source"]
