"""Index of RSDK data packs: signature, entry table and path lookup."""

from __future__ import annotations

import hashlib
import logging
import struct
from dataclasses import dataclass, field
from os import PathLike

logger = logging.getLogger(__name__)

SIGNATURE = b"RSDKvB"
MAX_PACKS = 4
MAX_FILES = 0x1000

_HEADER = struct.Struct("<6sH")
_ENTRY = struct.Struct("<16sII")


class DataPackError(Exception):
    """Raised when a data pack is malformed or the container is full."""


@dataclass(frozen=True)
class PackEntry:
    """One file stored inside a data pack."""

    hash: bytes
    offset: int
    size: int
    encrypted: bool
    pack_id: int


def path_hash(path: str) -> bytes:
    """MD5 digest of the lower-cased path, as used to identify pack entries."""
    return hashlib.md5(path.encode("utf-8").lower()).digest()


def _swap_words(raw: bytes) -> bytes:
    return b"".join(raw[i : i + 4][::-1] for i in range(0, len(raw), 4))


def parse_pack_index(data: bytes, pack_id: int) -> list[PackEntry]:
    """Parse the signature and entry table at the start of a pack."""
    if len(data) < _HEADER.size:
        raise DataPackError("data pack header is truncated")
    signature, count = _HEADER.unpack_from(data)
    if signature != SIGNATURE:
        raise DataPackError("not an RSDK data pack")
    end = _HEADER.size + count * _ENTRY.size
    if len(data) < end:
        raise DataPackError("data pack index is truncated")
    entries = []
    for raw_hash, offset, size in _ENTRY.iter_unpack(data[_HEADER.size : end]):
        entries.append(
            PackEntry(
                hash=_swap_words(raw_hash),
                offset=offset,
                size=size & 0x7FFFFFFF,
                encrypted=bool(size & 0x80000000),
                pack_id=pack_id,
            )
        )
    return entries


@dataclass
class Container:
    """The set of loaded data packs and the entries they hold."""

    packs: list[str] = field(default_factory=list)
    entries: list[PackEntry] = field(default_factory=list)

    def __init__(self) -> None:
        self.packs = []
        self.entries = []

    def add_pack(self, path: str | PathLike[str]) -> list[PackEntry]:
        """Load the index of the pack at ``path`` and return its entries."""
        if len(self.packs) >= MAX_PACKS:
            raise DataPackError(f"at most {MAX_PACKS} data packs can be loaded")
        pack_path = str(path)
        with open(pack_path, "rb") as handle:
            header = handle.read(_HEADER.size)
            if len(header) < _HEADER.size:
                raise DataPackError("data pack header is truncated")
            _, count = _HEADER.unpack(header)
            body = handle.read(count * _ENTRY.size)
        entries = parse_pack_index(header + body, len(self.packs))
        if len(self.entries) + len(entries) > MAX_FILES:
            raise DataPackError(f"at most {MAX_FILES} pack entries can be loaded")
        self.entries.extend(entries)
        self.packs.append(pack_path)
        logger.info("loaded datapack '%s'", pack_path)
        return entries

    def find(self, path: str) -> PackEntry | None:
        """Return the first entry whose hash matches ``path``, or None."""
        wanted = path_hash(path)
        return next((entry for entry in self.entries if entry.hash == wanted), None)

    def clear(self) -> None:
        """Forget every loaded pack and entry."""
        self.packs.clear()
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)