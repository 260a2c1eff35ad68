"""Sequential reader for files stored in data packs or plain folders."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from os import PathLike
from typing import BinaryIO

from .cipher import Decryptor
from .datapack import Container

logger = logging.getLogger(__name__)


def copy_file_path(path: str) -> str:
    """Return ``path`` with every forward slash turned into a backslash."""
    return path.replace("/", "\\")


@dataclass(frozen=True)
class FileState:
    """Everything needed to reopen a file and continue where reading stopped."""

    path: str
    pack_id: int | None
    offset: int
    size: int
    position: int
    encrypted: bool
    string_no: int = 0
    pos_a: int = 0
    pos_b: int = 0
    nybble_swap: int = 0

    @property
    def in_pack(self) -> bool:
        return self.pack_id is not None


class FileReader:
    """Reads one file at a time, from a loaded data pack or from disk.

    A path found in the container is read from its pack (decrypting it
    when the entry is encrypted); any other path is opened relative to
    ``base_path``.
    """

    def __init__(
        self,
        container: Container | None = None,
        base_path: str | PathLike[str] = "",
    ) -> None:
        self.container = container if container is not None else Container()
        self.base_path = str(base_path)
        self._handle: BinaryIO | None = None
        self._path = ""
        self._pack_id: int | None = None
        self._offset = 0
        self._size = 0
        self._position = 0
        self._decryptor: Decryptor | None = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def path(self) -> str:
        return self._path

    @property
    def size(self) -> int:
        """Size of the open file in bytes."""
        return self._size

    @property
    def in_pack(self) -> bool:
        return self._pack_id is not None

    def _folder_path(self, path: str) -> str:
        return os.path.join(self.base_path, path) if self.base_path else path

    def open(self, path: str) -> FileReader:
        """Open ``path`` for reading; raise FileNotFoundError if it is absent."""
        self.close()
        entry = self.container.find(path)
        if entry is not None:
            handle = open(self.container.packs[entry.pack_id], "rb")
            handle.seek(entry.offset)
            self._handle = handle
            self._path = path.lower()
            self._pack_id = entry.pack_id
            self._offset = entry.offset
            self._size = entry.size
            self._decryptor = Decryptor(entry.size) if entry.encrypted else None
            logger.info("Loaded Data File '%s'", path)
        else:
            full_path = self._folder_path(path)
            try:
                handle = open(full_path, "rb")
            except FileNotFoundError:
                logger.info("Couldn't load file '%s'", path)
                raise
            self._handle = handle
            self._path = full_path
            self._pack_id = None
            self._offset = 0
            self._size = os.fstat(handle.fileno()).st_size
            self._decryptor = None
            logger.info("Loaded File '%s'", path)
        self._position = 0
        return self

    def close(self) -> None:
        """Close the open file, if any."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _require_open(self) -> BinaryIO:
        if self._handle is None:
            raise ValueError("no file is open")
        return self._handle

    def read(self, size: int) -> bytes:
        """Read ``size`` bytes; bytes beyond the end of the data read as zero."""
        if size < 0:
            raise ValueError("cannot read a negative number of bytes")
        handle = self._require_open()
        data = handle.read(size)
        missing = size - len(data)
        if self._decryptor is not None:
            data = self._decryptor.decrypt(data)
            self._decryptor.skip(missing)
        self._position += size
        return data + bytes(missing)

    def read_byte(self) -> int:
        """Read a single byte and return it as an integer."""
        return self.read(1)[0]

    def tell(self) -> int:
        """Position within the open file, counted from its first byte."""
        self._require_open()
        return self._position

    def seek(self, position: int) -> None:
        """Move to ``position`` bytes from the start of the open file."""
        if position < 0:
            raise ValueError("cannot seek to a negative position")
        handle = self._require_open()
        if self._decryptor is not None:
            self._decryptor = Decryptor(self._size)
            self._decryptor.skip(position)
        handle.seek(self._offset + position)
        self._position = position

    def at_end(self) -> bool:
        """True once the position has reached the size of the file."""
        self._require_open()
        return self._position >= self._size

    def save_state(self) -> FileState:
        """Capture the open file and position so reading can resume later."""
        self._require_open()
        decryptor = self._decryptor
        return FileState(
            path=self._path,
            pack_id=self._pack_id,
            offset=self._offset,
            size=self._size,
            position=self._position,
            encrypted=decryptor is not None,
            string_no=decryptor.string_no if decryptor else 0,
            pos_a=decryptor.pos_a if decryptor else 0,
            pos_b=decryptor.pos_b if decryptor else 0,
            nybble_swap=decryptor.nybble_swap if decryptor else 0,
        )

    def restore_state(self, state: FileState) -> None:
        """Reopen the file described by ``state`` and continue from its position."""
        self.close()
        if state.pack_id is not None:
            source = self.container.packs[state.pack_id]
        else:
            source = state.path
        handle = open(source, "rb")
        handle.seek(state.offset + state.position)
        self._handle = handle
        self._path = state.path
        self._pack_id = state.pack_id
        self._offset = state.offset
        self._size = state.size
        self._position = state.position
        if state.encrypted:
            decryptor = Decryptor(state.size)
            decryptor.string_no = state.string_no
            decryptor.pos_a = state.pos_a
            decryptor.pos_b = state.pos_b
            decryptor.nybble_swap = state.nybble_swap
            self._decryptor = decryptor
        else:
            self._decryptor = None

    def __enter__(self) -> FileReader:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()