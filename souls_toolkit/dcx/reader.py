"""DCX container reader."""

import io
import logging
import zlib
from typing import BinaryIO

from ..errors import FormatError, UnsupportedAlgorithm
from ..utils.binary import BinaryReader
from .header import DCXHeader

logger = logging.getLogger(__name__)

# Compressed bytes pulled from the source per refill
CHUNK_SIZE = 64 * 1024


class DCXReader(io.RawIOBase):
    """Streaming reader for a DCX compressed container.

    The header is parsed on construction; the payload is decompressed
    incrementally as it is read, never as a whole. The source stream is
    borrowed: closing the reader leaves it open.
    """

    def __init__(self, stream: BinaryIO):
        super().__init__()
        self._source = stream
        self._header = DCXHeader.from_reader(BinaryReader(stream, big_endian=True))

        if not self._header.uses_deflate:
            raise UnsupportedAlgorithm(self._header.algorithm)

        logger.debug(
            "DCX header: algorithm=%s compressed_size=%d size=%d",
            self._header.algorithm_name,
            self._header.compressed_size,
            self._header.size,
        )
        self._decompressor = zlib.decompressobj()
        self._pending = b""

    @property
    def header(self) -> DCXHeader:
        return self._header

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")

        view = memoryview(buffer).cast("B")
        while not self._pending:
            if self._decompressor.eof:
                return 0
            self._pending = self._inflate()

        count = min(len(view), len(self._pending))
        view[:count] = self._pending[:count]
        self._pending = self._pending[count:]
        return count

    def _inflate(self) -> bytes:
        """Decompress the next piece of output, pulling input as needed."""
        data = self._decompressor.unconsumed_tail
        if not data:
            data = self._source.read(CHUNK_SIZE)

        try:
            if not data:
                # Source exhausted before the end-of-stream marker
                tail = self._decompressor.flush()
                if not tail:
                    raise FormatError("DCX deflate stream is truncated")
                return tail
            return self._decompressor.decompress(data, CHUNK_SIZE)
        except zlib.error as e:
            raise FormatError(f"DCX deflate stream is corrupt: {e}") from e


def decompress_dcx(data: bytes) -> bytes:
    """Decompress a complete in-memory DCX container."""
    with DCXReader(io.BytesIO(data)) as reader:
        return reader.read()
