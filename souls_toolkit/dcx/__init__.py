"""DCX compressed container support."""

from .header import DCX_HEADER_SIZE, DCX_MAGIC, DCXHeader, is_dcx
from .reader import DCXReader, decompress_dcx

__all__ = ["DCXHeader", "DCXReader", "DCX_HEADER_SIZE", "DCX_MAGIC", "decompress_dcx", "is_dcx"]
