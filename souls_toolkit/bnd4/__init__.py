"""BND4 archive support."""

from .header import BND4_MAGIC, ArchiveInfo, EntryFlags, FileInfo, FormatFlags
from .reader import BND4File, BND4Reader

__all__ = [
    "ArchiveInfo",
    "BND4File",
    "BND4Reader",
    "BND4_MAGIC",
    "EntryFlags",
    "FileInfo",
    "FormatFlags",
]
