"""Low-level helpers shared by the format readers."""

from .binary import BinaryReader, reverse_bits
from .streams import BoundedReader

__all__ = ["BinaryReader", "BoundedReader", "reverse_bits"]
