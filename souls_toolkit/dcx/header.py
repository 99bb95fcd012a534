"""DCX container header structure."""

from dataclasses import dataclass
from typing import Tuple

from ..utils.binary import BinaryReader

# Section magics
DCX_MAGIC = b"DCX\x00"
DCS_MAGIC = b"DCS\x00"
DCP_MAGIC = b"DCP\x00"
DCA_MAGIC = b"DCA\x00"

# Compression algorithm codes
ALGORITHM_DEFLATE = b"DFLT"
ALGORITHM_KRAKEN = b"KRAK"
ALGORITHM_EDGE = b"EDGE"

# Header size in bytes, always big-endian
DCX_HEADER_SIZE = 76


@dataclass
class DCXHeader:
    """DCX container header (76 bytes, big-endian)."""

    format_magic: bytes  # 4 bytes
    dcs_offset: int  # 4 bytes
    dcp_offset: int  # 4 bytes
    unk1: int  # 4 bytes
    unk2: int  # 4 bytes
    compressed_size: int  # 4 bytes
    size: int  # 4 bytes: decompressed size
    algorithm: bytes  # 4 bytes: "DFLT", "KRAK", "EDGE"
    unk3: Tuple[int, ...]  # 6 x 4 bytes
    dca_magic: bytes  # 4 bytes: "DCA\0", not validated
    dca_size: int  # 4 bytes

    @classmethod
    def from_reader(cls, reader: BinaryReader) -> "DCXHeader":
        """Parse the header at the reader's position.

        The reader's byte order is ignored; DCX headers are always big-endian.
        """
        reader = BinaryReader(reader.stream, big_endian=True)

        reader.expect(DCX_MAGIC, "DCX magic")
        format_magic = reader.read_bytes(4)
        dcs_offset = reader.read_u32()
        dcp_offset = reader.read_u32()
        unk1 = reader.read_u32()
        unk2 = reader.read_u32()

        reader.expect(DCS_MAGIC, "DCS magic")
        compressed_size = reader.read_u32()
        size = reader.read_u32()

        reader.expect(DCP_MAGIC, "DCP magic")
        algorithm = reader.read_bytes(4)
        unk3 = tuple(reader.read_u32() for _ in range(6))

        dca_magic = reader.read_bytes(4)
        dca_size = reader.read_u32()

        return cls(
            format_magic=format_magic,
            dcs_offset=dcs_offset,
            dcp_offset=dcp_offset,
            unk1=unk1,
            unk2=unk2,
            compressed_size=compressed_size,
            size=size,
            algorithm=algorithm,
            unk3=unk3,
            dca_magic=dca_magic,
            dca_size=dca_size,
        )

    @property
    def uses_deflate(self) -> bool:
        return self.algorithm == ALGORITHM_DEFLATE

    @property
    def algorithm_name(self) -> str:
        return self.algorithm.decode("ascii", errors="replace").rstrip("\x00")


def is_dcx(data: bytes) -> bool:
    """Check whether ``data`` starts with a DCX container magic."""
    return data[: len(DCX_MAGIC)] == DCX_MAGIC
