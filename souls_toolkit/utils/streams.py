"""Stream views over a shared file handle."""

import io
from typing import BinaryIO


class BoundedReader(io.RawIOBase):
    """Read-only view of the next ``size`` bytes of ``stream``.

    The view starts wherever ``stream`` is positioned when it is created and
    reads forward only. Reads past the bound behave as end of stream. The
    underlying stream is shared, not owned: closing the view leaves it open.
    """

    def __init__(self, stream: BinaryIO, size: int):
        super().__init__()
        self._stream = stream
        self._remaining = size
        self._position = 0

    @property
    def remaining(self) -> int:
        return self._remaining

    def readable(self) -> bool:
        return True

    def tell(self) -> int:
        """Bytes consumed from the view so far."""
        return self._position

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        if self._remaining <= 0:
            return 0

        view = memoryview(buffer).cast("B")
        want = min(len(view), self._remaining)
        data = self._stream.read(want)
        if not data:
            # Underlying data ended before the bound
            self._remaining = 0
            return 0

        view[: len(data)] = data
        self._remaining -= len(data)
        self._position += len(data)
        return len(data)
