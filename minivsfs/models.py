"""On-disk records of a MiniVSFS image and their byte codecs.

Every record is serialised field by field with an explicit little-endian
``struct`` format; nothing relies on native layout or padding.

Superblock (block 0, 116 bytes used, rest of the block zeroed):
    +0   magic              u32
    +4   version            u32
    +8   block_size         u32
    +12  total_blocks       u64
    +20  inode_count        u64
    +28  inode_bitmap_start u64   +36 inode_bitmap_blocks u64
    +44  data_bitmap_start  u64   +52 data_bitmap_blocks  u64
    +60  inode_table_start  u64   +68 inode_table_blocks  u64
    +76  data_region_start  u64   +84 data_region_blocks  u64
    +92  root_inode         u64
    +100 mtime_epoch        u64
    +108 flags              u32
    +112 checksum           u32   crc32 of block[0..4092) with this field zeroed

Inode (128 bytes):
    +0   mode u16  +2 links u16  +4 uid u32  +8 gid u32
    +12  size_bytes u64  +20 atime u64  +28 mtime u64  +36 ctime u64
    +44  direct[12] u32
    +92  reserved_0..2 u32 x3  +104 proj_id u32  +108 uid16_gid16 u32
    +112 xattr_ptr u64
    +120 inode_crc u64         crc32 of bytes [0..120)

Directory entry (64 bytes):
    +0   inode_no u32  +4 type u8  +5 name[58] NUL padded
    +63  checksum u8           XOR of bytes [0..63)
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Tuple

from .config import (
    BLOCK_SIZE,
    DIRECT_MAX,
    DIRENT_SIZE,
    DIRENT_TYPE_DIR,
    DIRENT_TYPE_FILE,
    FS_VERSION,
    INODE_SIZE,
    MAGIC,
    MODE_DIR,
    MODE_FILE,
    NAME_MAX,
    ROOT_INODE,
)

SUPERBLOCK_FORMAT = "<III" + "Q" * 12 + "II"
INODE_FORMAT = f"<HHIIQQQQ{DIRECT_MAX}IIIIIIQQ"
DIRENT_FORMAT = f"<IB{NAME_MAX}sB"

SUPERBLOCK_SIZE = struct.calcsize(SUPERBLOCK_FORMAT)
SUPERBLOCK_CHECKSUM_OFFSET = SUPERBLOCK_SIZE - 4
INODE_CHECKSUM_OFFSET = INODE_SIZE - 8
DIRENT_CHECKSUM_OFFSET = DIRENT_SIZE - 1

class InodeMode(IntEnum):
    """File type stored in ``Inode.mode``."""

    FILE = MODE_FILE
    DIRECTORY = MODE_DIR


class EntryType(IntEnum):
    """File type stored in ``DirEntry.entry_type``."""

    FREE = 0
    FILE = DIRENT_TYPE_FILE
    DIRECTORY = DIRENT_TYPE_DIR


@dataclass(slots=True)
class ImageLayout:
    """Block extents partitioning an image."""

    total_blocks: int
    inode_count: int
    inode_bitmap_start: int
    inode_bitmap_blocks: int
    data_bitmap_start: int
    data_bitmap_blocks: int
    inode_table_start: int
    inode_table_blocks: int
    data_region_start: int
    data_region_blocks: int

    @property
    def image_bytes(self) -> int:
        return self.total_blocks * BLOCK_SIZE


@dataclass(slots=True)
class Superblock:
    """Block 0: image identity and the extents of every region."""

    total_blocks: int
    inode_count: int
    inode_bitmap_start: int
    inode_bitmap_blocks: int
    data_bitmap_start: int
    data_bitmap_blocks: int
    inode_table_start: int
    inode_table_blocks: int
    data_region_start: int
    data_region_blocks: int
    mtime_epoch: int = 0
    flags: int = 0
    checksum: int = 0
    root_inode: int = ROOT_INODE
    magic: int = MAGIC
    version: int = FS_VERSION
    block_size: int = BLOCK_SIZE

    @classmethod
    def from_layout(cls, layout: ImageLayout, *, mtime_epoch: int = 0) -> "Superblock":
        return cls(
            total_blocks=layout.total_blocks,
            inode_count=layout.inode_count,
            inode_bitmap_start=layout.inode_bitmap_start,
            inode_bitmap_blocks=layout.inode_bitmap_blocks,
            data_bitmap_start=layout.data_bitmap_start,
            data_bitmap_blocks=layout.data_bitmap_blocks,
            inode_table_start=layout.inode_table_start,
            inode_table_blocks=layout.inode_table_blocks,
            data_region_start=layout.data_region_start,
            data_region_blocks=layout.data_region_blocks,
            mtime_epoch=mtime_epoch,
        )

    @property
    def layout(self) -> ImageLayout:
        return ImageLayout(
            total_blocks=self.total_blocks,
            inode_count=self.inode_count,
            inode_bitmap_start=self.inode_bitmap_start,
            inode_bitmap_blocks=self.inode_bitmap_blocks,
            data_bitmap_start=self.data_bitmap_start,
            data_bitmap_blocks=self.data_bitmap_blocks,
            inode_table_start=self.inode_table_start,
            inode_table_blocks=self.inode_table_blocks,
            data_region_start=self.data_region_start,
            data_region_blocks=self.data_region_blocks,
        )

    def pack(self) -> bytes:
        """Serialise into a full, zero padded block."""
        raw = struct.pack(
            SUPERBLOCK_FORMAT,
            self.magic,
            self.version,
            self.block_size,
            self.total_blocks,
            self.inode_count,
            self.inode_bitmap_start,
            self.inode_bitmap_blocks,
            self.data_bitmap_start,
            self.data_bitmap_blocks,
            self.inode_table_start,
            self.inode_table_blocks,
            self.data_region_start,
            self.data_region_blocks,
            self.root_inode,
            self.mtime_epoch,
            self.flags,
            self.checksum,
        )
        return raw.ljust(BLOCK_SIZE, b"\x00")

    @classmethod
    def unpack(cls, data: bytes) -> "Superblock":
        if len(data) < SUPERBLOCK_SIZE:
            raise ValueError(f"Superblock needs {SUPERBLOCK_SIZE} bytes, got {len(data)}")
        (
            magic,
            version,
            block_size,
            total_blocks,
            inode_count,
            inode_bitmap_start,
            inode_bitmap_blocks,
            data_bitmap_start,
            data_bitmap_blocks,
            inode_table_start,
            inode_table_blocks,
            data_region_start,
            data_region_blocks,
            root_inode,
            mtime_epoch,
            flags,
            checksum,
        ) = struct.unpack_from(SUPERBLOCK_FORMAT, data, 0)
        return cls(
            total_blocks=total_blocks,
            inode_count=inode_count,
            inode_bitmap_start=inode_bitmap_start,
            inode_bitmap_blocks=inode_bitmap_blocks,
            data_bitmap_start=data_bitmap_start,
            data_bitmap_blocks=data_bitmap_blocks,
            inode_table_start=inode_table_start,
            inode_table_blocks=inode_table_blocks,
            data_region_start=data_region_start,
            data_region_blocks=data_region_blocks,
            mtime_epoch=mtime_epoch,
            flags=flags,
            checksum=checksum,
            root_inode=root_inode,
            magic=magic,
            version=version,
            block_size=block_size,
        )


@dataclass(slots=True)
class Inode:
    """Fixed 128-byte metadata record for one file or directory."""

    mode: int = 0
    links: int = 0
    uid: int = 0
    gid: int = 0
    size_bytes: int = 0
    atime: int = 0
    mtime: int = 0
    ctime: int = 0
    direct: List[int] = field(default_factory=lambda: [0] * DIRECT_MAX)
    reserved: Tuple[int, int, int] = (0, 0, 0)
    proj_id: int = 0
    uid16_gid16: int = 0
    xattr_ptr: int = 0
    checksum: int = 0

    def __post_init__(self) -> None:
        if len(self.direct) > DIRECT_MAX:
            raise ValueError(f"An inode holds at most {DIRECT_MAX} direct pointers")
        self.direct = list(self.direct) + [0] * (DIRECT_MAX - len(self.direct))

    @property
    def is_directory(self) -> bool:
        return self.mode == InodeMode.DIRECTORY

    @property
    def is_regular_file(self) -> bool:
        return self.mode == InodeMode.FILE

    @property
    def blocks(self) -> List[int]:
        """Direct pointers in use, in file order."""
        return [pointer for pointer in self.direct if pointer]

    def pack(self) -> bytes:
        return struct.pack(
            INODE_FORMAT,
            self.mode,
            self.links,
            self.uid,
            self.gid,
            self.size_bytes,
            self.atime,
            self.mtime,
            self.ctime,
            *self.direct,
            *self.reserved,
            self.proj_id,
            self.uid16_gid16,
            self.xattr_ptr,
            self.checksum,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Inode":
        values = struct.unpack_from(INODE_FORMAT, data, 0)
        mode, links, uid, gid, size_bytes, atime, mtime, ctime = values[:8]
        direct = list(values[8 : 8 + DIRECT_MAX])
        rest = values[8 + DIRECT_MAX :]
        return cls(
            mode=mode,
            links=links,
            uid=uid,
            gid=gid,
            size_bytes=size_bytes,
            atime=atime,
            mtime=mtime,
            ctime=ctime,
            direct=direct,
            reserved=tuple(rest[0:3]),
            proj_id=rest[3],
            uid16_gid16=rest[4],
            xattr_ptr=rest[5],
            checksum=rest[6],
        )


@dataclass(slots=True)
class DirEntry:
    """Fixed 64-byte record mapping a name to an inode number."""

    inode_no: int = 0
    entry_type: int = EntryType.FREE
    name: bytes = b""
    checksum: int = 0

    def __post_init__(self) -> None:
        if len(self.name) > NAME_MAX:
            raise ValueError(f"Entry name longer than {NAME_MAX} bytes: {self.name!r}")

    @property
    def is_free(self) -> bool:
        return self.inode_no == 0

    @property
    def display_name(self) -> str:
        return self.name.decode("utf-8", errors="replace")

    def pack(self) -> bytes:
        return struct.pack(DIRENT_FORMAT, self.inode_no, self.entry_type, self.name, self.checksum)

    @classmethod
    def unpack(cls, data: bytes) -> "DirEntry":
        inode_no, entry_type, name, checksum = struct.unpack_from(DIRENT_FORMAT, data, 0)
        return cls(
            inode_no=inode_no,
            entry_type=entry_type,
            name=name.split(b"\x00", 1)[0],
            checksum=checksum,
        )


__all__ = [
    "DirEntry",
    "EntryType",
    "ImageLayout",
    "Inode",
    "InodeMode",
    "Superblock",
]
