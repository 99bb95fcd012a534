"""BND4 archive reader and extractor."""

import io
import logging
import shutil
from pathlib import Path, PureWindowsPath
from typing import BinaryIO, Callable, Iterator, List, Optional, Tuple, Union

from ..dcx import DCXReader
from ..errors import EntryInUse, IndexOutOfRange, UnsupportedAlgorithm
from ..utils.binary import BinaryReader
from ..utils.streams import BoundedReader
from .header import BND4_HEADER_SIZE, ArchiveInfo, FileInfo

logger = logging.getLogger(__name__)


def archive_relative_path(name: str) -> Optional[Path]:
    """Convert an archive member path such as ``N:\\FDP\\data\\a.bin`` to a relative path.

    The drive or root is dropped, as are ``.`` and ``..`` components.
    """
    path = PureWindowsPath(name)
    parts = path.parts[1:] if path.anchor else path.parts
    parts = [part for part in parts if part not in ("", ".", "..")]
    if not parts:
        return None
    return Path(*parts)


class BND4File(io.RawIOBase):
    """An opened archive entry: metadata plus a forward-only byte stream.

    Reads come from the archive's shared stream, so the entry must be closed
    (or fully abandoned) before the next one is opened.
    """

    def __init__(self, index: int, name: Optional[str], info: FileInfo, bounded: BoundedReader):
        super().__init__()
        self.index = index
        self.name = name
        self.info = info
        self._bounded = bounded
        self._stream: io.RawIOBase = bounded
        if info.is_compressed:
            self._stream = DCXReader(bounded)

    @property
    def size(self) -> int:
        return self.info.size

    @property
    def decompressed_size(self) -> Optional[int]:
        return self.info.decompressed_size

    @property
    def id(self) -> Optional[int]:
        return self.info.id

    @property
    def compressed(self) -> bool:
        return self.info.is_compressed

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        return self._stream.readinto(buffer)

    def close(self) -> None:
        if not self.closed:
            self._stream.close()
            self._bounded.close()
        super().close()

    def __repr__(self) -> str:
        return f"BND4File(index={self.index}, name={self.name!r}, size={self.size})"


class BND4Reader:
    """Reader for BND4 (FromSoftware binder) archives.

    ``source`` may be a path, raw bytes, or a seekable binary stream. Files
    opened from a path are owned and closed by the reader; supplied streams
    are only borrowed.
    """

    def __init__(self, source: Union[Path, str, bytes, BinaryIO]):
        self._source = source
        self._file: Optional[BinaryIO] = None
        self._owns_file = False
        self._info: Optional[ArchiveInfo] = None
        self._entries: List[FileInfo] = []
        self._active: Optional[BND4File] = None

    def __enter__(self) -> "BND4Reader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __len__(self) -> int:
        return self.entry_count()

    def open(self) -> None:
        """Open the archive and parse the header and entry table."""
        if isinstance(self._source, (str, Path)):
            self._file = open(self._source, "rb")
            self._owns_file = True
        elif isinstance(self._source, (bytes, bytearray, memoryview)):
            self._file = io.BytesIO(bytes(self._source))
            self._owns_file = True
        else:
            self._file = self._source

        try:
            reader = BinaryReader(self._file)
            self._info = ArchiveInfo.from_reader(reader)
            self._read_entries(reader)
        except Exception:
            self._info = None
            self._entries = []
            self.close()
            raise

    def close(self) -> None:
        """Close the archive file, and any entry still open on it."""
        if self._active is not None:
            self._active.close()
            self._active = None
        if self._file and self._owns_file:
            self._file.close()
        self._file = None
        self._owns_file = False

    @property
    def info(self) -> ArchiveInfo:
        if not self._info:
            raise RuntimeError("Archive not opened")
        return self._info

    @property
    def entries(self) -> List[FileInfo]:
        return self._entries

    def entry_count(self) -> int:
        return self.info.file_count

    def _read_entries(self, reader: BinaryReader) -> None:
        """Read the entry table that follows the header."""
        info = self._info
        logger.debug(
            "BND4 header: %d entries, format=%r, big_endian=%s, flags_little_endian=%s",
            info.file_count,
            info.format,
            info.big_endian,
            info.flags_little_endian,
        )

        # Structural sizes are recorded, not enforced
        record_size = FileInfo.record_size(info.format)
        if info.file_header_size != record_size or info.header_size != BND4_HEADER_SIZE:
            logger.debug(
                "BND4 header sizes disagree with layout: header_size=%d file_header_size=%d "
                "(expected %d and %d)",
                info.header_size,
                info.file_header_size,
                BND4_HEADER_SIZE,
                record_size,
            )

        for _ in range(info.file_count):
            self._entries.append(FileInfo.from_reader(reader, info.format, info.flags_little_endian))

    def _check_index(self, index: int) -> FileInfo:
        if self._file is None:
            raise RuntimeError("Archive not opened")
        count = self.entry_count()
        if not 0 <= index < count:
            raise IndexOutOfRange(index, count)
        return self._entries[index]

    def read_name(self, index: int) -> Optional[str]:
        """Look up the name of an entry without moving the stream position."""
        entry = self._check_index(index)
        if entry.name_offset is None:
            return None

        info = self.info
        reader = BinaryReader(self._file, big_endian=info.big_endian)
        if info.unicode:
            return reader.at(entry.name_offset, lambda r: r.read_utf16(info.big_endian))
        return reader.at(entry.name_offset, lambda r: r.read_cstring())

    def open_entry(self, index: int) -> BND4File:
        """Open an entry as a readable stream.

        Compressed entries are decompressed on the fly through a nested DCX
        reader. Only one entry may be open at a time.
        """
        entry = self._check_index(index)
        if self._active is not None and not self._active.closed:
            raise EntryInUse(
                f"Entry {self._active.index} is still open; close it before opening entry {index}"
            )

        name = self.read_name(index)
        self._file.seek(entry.data_offset)
        bounded = BoundedReader(self._file, entry.size)
        try:
            self._active = BND4File(index, name, entry, bounded)
        except Exception:
            bounded.close()
            raise

        logger.debug(
            "Opened entry %d (%s): offset=0x%X size=%d compressed=%s",
            index,
            name,
            entry.data_offset,
            entry.size,
            entry.is_compressed,
        )
        return self._active

    def iter_entries(self) -> Iterator[BND4File]:
        """Yield every entry in table order, closing each before the next."""
        for index in range(self.entry_count()):
            with self.open_entry(index) as entry:
                yield entry

    def list_files(self) -> List[Tuple[int, Optional[str], int]]:
        """List (index, name, stored size) for every entry."""
        return [(i, self.read_name(i), entry.size) for i, entry in enumerate(self._entries)]

    def extract_all(
        self,
        output_dir: Path,
        progress_callback: Optional[Callable[[int, int, Optional[str]], None]] = None,
    ) -> Iterator[Tuple[int, Optional[str], Path]]:
        """Extract all entries to the output directory.

        Entries keep the directories of their archive path, minus any drive
        prefix. Unnamed entries are written as ``entry_<index>.bin``.
        Entries using an unsupported compression algorithm are skipped.

        Yields (index, name, output_path) for each extracted entry.
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        count = self.entry_count()
        for index in range(count):
            try:
                entry = self.open_entry(index)
            except UnsupportedAlgorithm as e:
                logger.warning("Skipping entry %d: %s", index, e)
                continue

            with entry:
                relative_path = archive_relative_path(entry.name) if entry.name else None
                if relative_path is None:
                    relative_path = Path(f"entry_{index}.bin")

                output_path = output_dir / relative_path
                output_path.parent.mkdir(parents=True, exist_ok=True)
                with open(output_path, "wb") as output:
                    shutil.copyfileobj(entry, output)

            if progress_callback:
                progress_callback(index, count, entry.name)

            yield index, entry.name, output_path
