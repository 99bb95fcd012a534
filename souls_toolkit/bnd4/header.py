"""BND4 header and entry table structures."""

from dataclasses import dataclass
from enum import IntFlag
from typing import Optional, Type, TypeVar

from ..errors import FormatError
from ..utils.binary import BinaryReader, reverse_bits

# BND4 magic bytes
BND4_MAGIC = b"BND4"

# Header size in bytes, independent of flags
BND4_HEADER_SIZE = 64

F = TypeVar("F", bound=IntFlag)


class FormatFlags(IntFlag):
    """Archive-wide format flags, deciding the layout of every entry record."""

    BIG_ENDIAN = 0x01  # Recorded only, byte order comes from the header byte
    SUPPORTS_IDS = 0x02
    SUPPORTS_PATHS = 0x04
    SUPPORTS_NAMES = 0x08
    LONG_OFFSETS = 0x10  # Data offsets are 64-bit
    SUPPORTS_COMPRESSION = 0x20  # Records carry a decompressed size

    @property
    def has_long_offsets(self) -> bool:
        return bool(self & FormatFlags.LONG_OFFSETS)

    @property
    def supports_filenames(self) -> bool:
        return bool(self & (FormatFlags.SUPPORTS_PATHS | FormatFlags.SUPPORTS_NAMES))

    @property
    def supports_ids(self) -> bool:
        return bool(self & FormatFlags.SUPPORTS_IDS)

    @property
    def supports_compression(self) -> bool:
        return bool(self & FormatFlags.SUPPORTS_COMPRESSION)


class EntryFlags(IntFlag):
    """Per-entry flags."""

    HAS_ID = 0x02
    HAS_NAME = 0x04
    HAS_NAME_2 = 0x08
    COMPRESSED = 0x20
    UNK = 0x40

    @property
    def is_compressed(self) -> bool:
        return bool(self & EntryFlags.COMPRESSED)


def parse_flags(flag_type: Type[F], value: int, flags_little_endian: bool, field: str) -> F:
    """Interpret a raw flag byte as ``flag_type``.

    When the archive stores flags big-endian the bit order of the byte is
    reversed first. Bits outside the known set are rejected.
    """
    if not flags_little_endian:
        value = reverse_bits(value)

    known = 0
    for member in flag_type:
        known |= int(member)
    if value & ~known:
        raise FormatError(f"Invalid BND4 {field}: 0x{value:02X}")
    return flag_type(value)


@dataclass(frozen=True)
class ArchiveInfo:
    """BND4 archive header (64 bytes)."""

    unk04: bool
    unk05: bool
    big_endian: bool  # Byte order of every multi-byte integer after this point
    flags_little_endian: bool  # False: flag bytes are stored bit-reversed
    file_count: int  # 4 bytes
    header_size: int  # 8 bytes
    version: bytes  # 8 bytes, opaque
    file_header_size: int  # 8 bytes
    file_header_end: int  # 8 bytes
    unicode: bool  # Names are UTF-16 rather than Shift-JIS
    format: FormatFlags
    extended: bool
    name_buckets_offset: int  # 8 bytes

    @classmethod
    def from_reader(cls, reader: BinaryReader) -> "ArchiveInfo":
        """Parse the header from the start of the archive.

        Switches ``reader`` to the archive's integer byte order as a side effect.
        """
        reader.expect(BND4_MAGIC, "BND4 magic")
        unk04 = reader.read_bool()
        unk05 = reader.read_bool()
        reader.expect(b"\x00\x00\x00", "BND4 header padding")

        big_endian = reader.read_bool()
        flags_little_endian = reader.read_bool()
        reader.read_u8()
        reader.big_endian = big_endian

        file_count = reader.read_u32()
        header_size = reader.read_u64()
        version = reader.read_bytes(8)
        file_header_size = reader.read_u64()
        file_header_end = reader.read_u64()
        unicode = reader.read_bool()
        format = parse_flags(FormatFlags, reader.read_u8(), flags_little_endian, "archive flags")
        extended = reader.read_bool()
        reader.expect_u8(0, "BND4 header padding")
        reader.read_u32()
        name_buckets_offset = reader.read_u64()

        return cls(
            unk04=unk04,
            unk05=unk05,
            big_endian=big_endian,
            flags_little_endian=flags_little_endian,
            file_count=file_count,
            header_size=header_size,
            version=version,
            file_header_size=file_header_size,
            file_header_end=file_header_end,
            unicode=unicode,
            format=format,
            extended=extended,
            name_buckets_offset=name_buckets_offset,
        )


@dataclass(frozen=True)
class FileInfo:
    """A single entry table record.

    Which optional fields exist is decided by the archive's ``FormatFlags``,
    never by the entry itself.
    """

    flags: EntryFlags
    size: int  # Stored (possibly compressed) size
    data_offset: int
    decompressed_size: Optional[int] = None  # Present iff SUPPORTS_COMPRESSION
    id: Optional[int] = None  # Present iff SUPPORTS_IDS
    name_offset: Optional[int] = None  # Present iff names or paths are supported

    @property
    def is_compressed(self) -> bool:
        return self.flags.is_compressed

    @staticmethod
    def record_size(format: FormatFlags) -> int:
        """Size in bytes of one entry record for ``format``."""
        size = 16
        if format.supports_compression:
            size += 8
        size += 8 if format.has_long_offsets else 4
        if format.supports_ids:
            size += 4
        if format.supports_filenames:
            size += 4
        return size

    @classmethod
    def from_reader(
        cls, reader: BinaryReader, format: FormatFlags, flags_little_endian: bool
    ) -> "FileInfo":
        """Parse one record using the reader's current byte order."""
        flags = parse_flags(EntryFlags, reader.read_u8(), flags_little_endian, "entry flags")
        reader.expect(b"\x00\x00\x00", "entry padding")
        reader.expect_i32(-1, "entry marker")

        size = reader.read_u64()
        decompressed_size = reader.read_u64() if format.supports_compression else None
        data_offset = reader.read_u64() if format.has_long_offsets else reader.read_u32()
        id = reader.read_i32() if format.supports_ids else None
        name_offset = reader.read_u32() if format.supports_filenames else None

        return cls(
            flags=flags,
            size=size,
            data_offset=data_offset,
            decompressed_size=decompressed_size,
            id=id,
            name_offset=name_offset,
        )
