"""Checksums sealing superblock, inode and directory entry records."""
from __future__ import annotations

import logging
import struct
from typing import List

from .config import BLOCK_SIZE
from .models import (
    DIRENT_CHECKSUM_OFFSET,
    INODE_CHECKSUM_OFFSET,
    SUPERBLOCK_CHECKSUM_OFFSET,
    DirEntry,
    Inode,
    Superblock,
)

logger = logging.getLogger(__name__)

CRC32_POLYNOMIAL = 0xEDB88320


def _build_crc32_table() -> List[int]:
    table: List[int] = []
    for index in range(256):
        value = index
        for _ in range(8):
            value = (CRC32_POLYNOMIAL ^ (value >> 1)) if value & 1 else value >> 1
        table.append(value)
    return table


CRC32_TABLE = tuple(_build_crc32_table())


def crc32(data: bytes) -> int:
    """Reflected CRC-32 (IEEE 802.3), identical to ``zlib.crc32``."""
    crc = 0xFFFFFFFF
    table = CRC32_TABLE
    for byte in data:
        crc = table[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ 0xFFFFFFFF


def xor8(data: bytes) -> int:
    value = 0
    for byte in data:
        value ^= byte
    return value


# ----------------------------------------------------------------------
# Raw record checksums
# ----------------------------------------------------------------------
def superblock_checksum(block: bytes) -> int:
    """CRC over the first ``BLOCK_SIZE - 4`` bytes with the checksum field zeroed."""
    buffer = bytearray(bytes(block[:BLOCK_SIZE]).ljust(BLOCK_SIZE, b"\x00"))
    struct.pack_into("<I", buffer, SUPERBLOCK_CHECKSUM_OFFSET, 0)
    return crc32(bytes(buffer[: BLOCK_SIZE - 4]))


def inode_checksum(raw: bytes) -> int:
    return crc32(bytes(raw[:INODE_CHECKSUM_OFFSET]))


def dirent_checksum(raw: bytes) -> int:
    return xor8(bytes(raw[:DIRENT_CHECKSUM_OFFSET]))


# ----------------------------------------------------------------------
# Sealing
# ----------------------------------------------------------------------
def seal_superblock(superblock: Superblock) -> int:
    superblock.checksum = 0
    superblock.checksum = superblock_checksum(superblock.pack())
    logger.debug("Sealed superblock, crc=0x%08x", superblock.checksum)
    return superblock.checksum


def seal_inode(inode: Inode) -> int:
    inode.checksum = 0
    inode.checksum = inode_checksum(inode.pack())
    return inode.checksum


def seal_dirent(entry: DirEntry) -> int:
    entry.checksum = 0
    entry.checksum = dirent_checksum(entry.pack())
    return entry.checksum


# ----------------------------------------------------------------------
# Verification
# ----------------------------------------------------------------------
def verify_superblock(block: bytes) -> bool:
    stored = struct.unpack_from("<I", block, SUPERBLOCK_CHECKSUM_OFFSET)[0]
    return stored == superblock_checksum(block)


def verify_inode(raw: bytes) -> bool:
    stored = struct.unpack_from("<Q", raw, INODE_CHECKSUM_OFFSET)[0]
    return stored == inode_checksum(raw)


def verify_dirent(raw: bytes) -> bool:
    return raw[DIRENT_CHECKSUM_OFFSET] == dirent_checksum(raw)


__all__ = [
    "crc32",
    "seal_dirent",
    "seal_inode",
    "seal_superblock",
    "verify_dirent",
    "verify_inode",
    "verify_superblock",
]
