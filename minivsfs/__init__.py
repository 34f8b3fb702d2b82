"""MiniVSFS: build fixed-layout filesystem images and add files to them."""
from __future__ import annotations

from .config import APP_VERSION as __version__
from .errors import (
    ConfigurationError,
    ImageIOError,
    InvalidImageError,
    MiniVSFSError,
    NameConflictError,
    ResourceExhaustedError,
)
from .formatter import FormatResult, build_image, format_image
from .image import MiniVSFSImage
from .inserter import AddResult, FileInserter, add_file
from .layout import compute_layout

__all__ = [
    "AddResult",
    "ConfigurationError",
    "FileInserter",
    "FormatResult",
    "ImageIOError",
    "InvalidImageError",
    "MiniVSFSError",
    "MiniVSFSImage",
    "NameConflictError",
    "ResourceExhaustedError",
    "__version__",
    "add_file",
    "build_image",
    "compute_layout",
    "format_image",
]
