"""Exception hierarchy raised by the MiniVSFS tools."""
from __future__ import annotations


class MiniVSFSError(Exception):
    """Base class for every fatal condition reported by the tools."""


class ConfigurationError(MiniVSFSError, ValueError):
    """Invalid arguments, detected before any image I/O."""


class InvalidImageError(MiniVSFSError):
    """The input does not hold a usable MiniVSFS image."""


class ResourceExhaustedError(MiniVSFSError):
    """No free inode, no free data block, full root directory or oversized file."""


class NameConflictError(MiniVSFSError, FileExistsError):
    """An entry with the requested name already exists in the root directory."""


class ImageIOError(MiniVSFSError, OSError):
    """A file could not be opened, read or written."""


__all__ = [
    "MiniVSFSError",
    "ConfigurationError",
    "InvalidImageError",
    "ResourceExhaustedError",
    "NameConflictError",
    "ImageIOError",
]
