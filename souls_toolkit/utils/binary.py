"""Binary reading utilities for FromSoftware container data.

Unlike PS3-era formats, these files switch byte order per archive, so the
reader carries a ``big_endian`` switch that callers may flip after sniffing
the header.
"""

import struct
from io import BytesIO
from typing import BinaryIO, Callable, TypeVar, Union

from ..errors import FormatError

T = TypeVar("T")

# Legacy single-byte names are Shift-JIS (Windows-31J variant)
CSTRING_ENCODING = "cp932"


def reverse_bits(value: int) -> int:
    """Mirror the bit order of a single byte (bit 0 <-> bit 7)."""
    result = 0
    for _ in range(8):
        result = (result << 1) | (value & 1)
        value >>= 1
    return result


class BinaryReader:
    """Helper for reading binary data in a selectable byte order."""

    def __init__(self, data: Union[bytes, BinaryIO], big_endian: bool = False):
        if isinstance(data, (bytes, bytearray, memoryview)):
            self._stream = BytesIO(bytes(data))
        else:
            self._stream = data
        self.big_endian = big_endian

    @property
    def stream(self) -> BinaryIO:
        return self._stream

    @property
    def _order(self) -> str:
        return ">" if self.big_endian else "<"

    def tell(self) -> int:
        return self._stream.tell()

    def seek(self, offset: int, whence: int = 0) -> int:
        return self._stream.seek(offset, whence)

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def read_bytes(self, size: int) -> bytes:
        data = self._stream.read(size)
        if len(data) < size:
            raise EOFError(f"Expected {size} bytes, got {len(data)}")
        return data

    def _unpack(self, fmt: str, size: int) -> int:
        return struct.unpack(self._order + fmt, self.read_bytes(size))[0]

    def read_u8(self) -> int:
        return self.read_bytes(1)[0]

    def read_u16(self) -> int:
        return self._unpack("H", 2)

    def read_u32(self) -> int:
        return self._unpack("I", 4)

    def read_u64(self) -> int:
        return self._unpack("Q", 8)

    def read_i8(self) -> int:
        return self._unpack("b", 1)

    def read_i16(self) -> int:
        return self._unpack("h", 2)

    def read_i32(self) -> int:
        return self._unpack("i", 4)

    def read_i64(self) -> int:
        return self._unpack("q", 8)

    def read_bool(self) -> bool:
        """Read one byte as a boolean. Only 1 is true; nothing is rejected."""
        return self.read_u8() == 1

    def expect(self, expected: bytes, field: str = "data") -> bytes:
        """Read ``len(expected)`` bytes and fail unless they match exactly."""
        offset = self.tell()
        data = self.read_bytes(len(expected))
        if data != expected:
            position = next(i for i, (a, b) in enumerate(zip(data, expected)) if a != b)
            raise FormatError(
                f"Unexpected {field} at offset 0x{offset:X}: {data!r}, expected {expected!r} "
                f"(first mismatch at byte {position})"
            )
        return data

    def _expect_value(self, read: Callable[[], int], value: int, field: str) -> None:
        offset = self.tell()
        actual = read()
        if actual != value:
            raise FormatError(
                f"Unexpected {field} at offset 0x{offset:X}: {actual}, expected {value}"
            )

    def expect_u8(self, value: int, field: str = "byte") -> None:
        self._expect_value(self.read_u8, value, field)

    def expect_i32(self, value: int, field: str = "int32") -> None:
        self._expect_value(self.read_i32, value, field)

    def read_cstring(self) -> str:
        """Read a null-terminated Shift-JIS string."""
        chars = bytearray()
        while True:
            byte = self.read_u8()
            if byte == 0:
                break
            chars.append(byte)
        return chars.decode(CSTRING_ENCODING, errors="replace")

    def read_utf16(self, big_endian: bool) -> str:
        """Read a null-terminated UTF-16 string.

        The terminator is a zero code unit, so bytes are consumed in pairs.
        ``big_endian`` is independent of the reader's integer byte order.
        """
        data = bytearray()
        while True:
            pair = self.read_bytes(2)
            if pair == b"\x00\x00":
                break
            data += pair
        return data.decode("utf-16-be" if big_endian else "utf-16-le", errors="replace")

    def at(self, offset: int, func: Callable[["BinaryReader"], T]) -> T:
        """Run ``func`` with the stream positioned at ``offset``.

        The previous position is restored afterwards, even if ``func`` raises.
        """
        position = self.tell()
        self.seek(offset)
        try:
            return func(self)
        finally:
            self.seek(position)

    def skip(self, count: int) -> None:
        """Skip forward by count bytes."""
        self._stream.seek(count, 1)

    def remaining(self) -> int:
        """Return number of bytes remaining in stream."""
        current = self.tell()
        self._stream.seek(0, 2)  # Seek to end
        end = self.tell()
        self._stream.seek(current)
        return end - current

    def peek(self, size: int) -> bytes:
        """Read bytes without advancing position."""
        data = self._stream.read(size)
        self._stream.seek(-len(data), 1)
        return data
