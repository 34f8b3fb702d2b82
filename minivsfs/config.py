"""Configuration constants for the MiniVSFS image tools."""
from __future__ import annotations

APP_NAME = "MiniVSFS"
APP_VERSION = "0.1.0"

# On-disk format. Every value here is part of the image contract; changing one
# produces images that older tools cannot read.
BLOCK_SIZE = 4096
INODE_SIZE = 128
DIRENT_SIZE = 64
DIRECT_MAX = 12
NAME_MAX = 58
MAGIC = 0x4D565346  # "MVFS"
FS_VERSION = 1
ROOT_INODE = 1
ROOT_PROJECT_ID = 2

# Inode modes (POSIX file type bits only)
MODE_FILE = 0o100000
MODE_DIR = 0o040000

# Directory entry types
DIRENT_TYPE_FILE = 1
DIRENT_TYPE_DIR = 2

DIRENTS_PER_BLOCK = BLOCK_SIZE // DIRENT_SIZE
INODES_PER_BLOCK = BLOCK_SIZE // INODE_SIZE
MAX_FILE_SIZE = DIRECT_MAX * BLOCK_SIZE

# Formatter limits
MIN_SIZE_KIB = 180
MAX_SIZE_KIB = 4096
SIZE_KIB_ALIGNMENT = BLOCK_SIZE // 1024
MIN_INODES = 128
MAX_INODES = 512

# Process exit codes
EXIT_SUCCESS = 0
FORMAT_EXIT_FAILURE = 1
ADD_EXIT_FAILURE = 2
