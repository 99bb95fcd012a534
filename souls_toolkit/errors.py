"""Exceptions raised by the container and archive readers."""


class SoulsFormatError(Exception):
    """Base class for all souls_toolkit errors."""


class FormatError(SoulsFormatError, ValueError):
    """The data does not match the expected layout (bad magic, flags, or stream)."""


class UnsupportedAlgorithm(SoulsFormatError):
    """A DCX container uses a compression algorithm that is not implemented."""

    def __init__(self, algorithm: bytes):
        self.algorithm = algorithm
        super().__init__(f"Unsupported DCX compression algorithm: {algorithm!r}")


class IndexOutOfRange(SoulsFormatError, IndexError):
    """An archive entry index outside ``0..entry_count``."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Entry index {index} out of range (archive has {count} entries)")


class EntryInUse(SoulsFormatError, RuntimeError):
    """Another entry of the same archive is still open on the shared stream."""
