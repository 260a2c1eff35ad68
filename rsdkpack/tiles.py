"""Chunk definitions, tile collision masks and tileset graphics helpers."""

from __future__ import annotations

from array import array
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

TILE_COUNT = 0x400
TILE_SIZE = 0x10
TILE_DATASIZE = TILE_SIZE * TILE_SIZE
TILESET_SIZE = TILE_COUNT * TILE_DATASIZE
CHUNKTILE_COUNT = 0x200 * (8 * 8)
CPATH_COUNT = 2

NO_FLOOR = 0x40
NO_ROOF = -0x40
SOLID_ROOF = 0xF

_CHUNK_ENTRY_SIZE = 3
_MASK_RECORD_SIZE = 1 + 4 + TILE_SIZE // 2 + 2
_HALF = TILE_SIZE // 2


class _ByteSource(Protocol):
    def read(self, size: int) -> bytes: ...

    def read_byte(self) -> int: ...


@dataclass(frozen=True)
class ChunkTile:
    """One 16x16 tile placed inside a 128x128 chunk."""

    tile_index: int
    direction: int
    visual_plane: int
    collision_a: int
    collision_b: int

    @property
    def gfx_data_pos(self) -> int:
        """Offset of the tile's pixels within the tileset graphics."""
        return self.tile_index << 8


def _decode_chunk_entry(e0: int, e1: int, e2: int) -> ChunkTile:
    e0 &= 0x3F
    return ChunkTile(
        tile_index=e1 + ((e0 & 0x3) << 8),
        direction=(e0 >> 2) & 0x3,
        visual_plane=e0 >> 4,
        collision_a=e2 >> 4,
        collision_b=e2 & 0xF,
    )


def read_chunks(reader: _ByteSource) -> list[ChunkTile]:
    """Parse a stage's 128x128 chunk file from an open reader."""
    data = reader.read(_CHUNK_ENTRY_SIZE * CHUNKTILE_COUNT)
    it = iter(data)
    return [_decode_chunk_entry(e0, e1, e2) for e0, e1, e2 in zip(it, it, it)]


def _mask_array() -> array:
    return array("b", bytes(TILE_COUNT * TILE_SIZE))


@dataclass
class CollisionMasks:
    """Height masks, angles and flags of every tile for one collision path."""

    floor_masks: array = field(default_factory=_mask_array)
    l_wall_masks: array = field(default_factory=_mask_array)
    r_wall_masks: array = field(default_factory=_mask_array)
    roof_masks: array = field(default_factory=_mask_array)
    angles: array = field(default_factory=lambda: array("I", bytes(4 * TILE_COUNT)))
    flags: bytearray = field(default_factory=lambda: bytearray(TILE_COUNT))

    @staticmethod
    def _slice(masks: array, tile: int) -> list[int]:
        if not 0 <= tile < TILE_COUNT:
            raise IndexError("tile index out of range")
        start = tile * TILE_SIZE
        return list(masks[start : start + TILE_SIZE])

    def floor(self, tile: int) -> list[int]:
        """Floor heights of each column of ``tile``."""
        return self._slice(self.floor_masks, tile)

    def roof(self, tile: int) -> list[int]:
        """Roof heights of each column of ``tile``."""
        return self._slice(self.roof_masks, tile)

    def left_wall(self, tile: int) -> list[int]:
        """Left wall positions of each row of ``tile``."""
        return self._slice(self.l_wall_masks, tile)

    def right_wall(self, tile: int) -> list[int]:
        """Right wall positions of each row of ``tile``."""
        return self._slice(self.r_wall_masks, tile)


def _first_match(heights: list[int], order: Iterable[int], hit, default: int) -> int:
    return next((h for h in order if hit(heights[h])), default)


def _store_heights(masks: array, base: int, packed: bytes) -> None:
    for i, value in enumerate(packed):
        masks[base + 2 * i] = value >> 4
        masks[base + 2 * i + 1] = value & 0xF


def _read_tile_masks(masks: CollisionMasks, tile: int, record: bytes) -> None:
    base = tile * TILE_SIZE
    head = record[0]
    ceiling = (head >> 4) != 0
    masks.flags[tile] = head & 0xF
    masks.angles[tile] = int.from_bytes(record[1:5], "little")
    packed = record[5 : 5 + _HALF]
    solid_high, solid_low = record[5 + _HALF], record[6 + _HALF]

    floor, roof = masks.floor_masks, masks.roof_masks
    _store_heights(roof if ceiling else floor, base, packed)

    for bits, start in ((solid_high, _HALF), (solid_low, 0)):
        for c in range(_HALF):
            column = base + start + c
            if bits >> c & 1:
                if ceiling:
                    floor[column] = 0
                else:
                    roof[column] = SOLID_ROOF
            else:
                floor[column] = NO_FLOOR
                roof[column] = NO_ROOF

    if ceiling:
        heights = list(roof[base : base + TILE_SIZE])
        hit_for = lambda c: (lambda h: c <= h)  # noqa: E731
    else:
        heights = list(floor[base : base + TILE_SIZE])
        hit_for = lambda c: (lambda h: c >= h)  # noqa: E731

    ascending = range(TILE_SIZE)
    descending = range(TILE_SIZE - 1, -1, -1)
    for c in range(TILE_SIZE):
        hit = hit_for(c)
        masks.l_wall_masks[base + c] = _first_match(heights, ascending, hit, NO_FLOOR)
        masks.r_wall_masks[base + c] = _first_match(heights, descending, hit, NO_ROOF)


def read_collision_masks(reader: _ByteSource) -> tuple[CollisionMasks, ...]:
    """Parse a stage's collision mask file into one mask set per path."""
    paths = tuple(CollisionMasks() for _ in range(CPATH_COUNT))
    data = reader.read(_MASK_RECORD_SIZE * CPATH_COUNT * TILE_COUNT)
    pos = 0
    for tile in range(TILE_COUNT):
        for masks in paths:
            _read_tile_masks(masks, tile, data[pos : pos + _MASK_RECORD_SIZE])
            pos += _MASK_RECORD_SIZE
    return paths


def copy_tile(data: bytearray, dest: int, src: int) -> None:
    """Copy the pixels of tile ``src`` over tile ``dest`` in tileset graphics."""
    for index in (dest, src):
        if not 0 <= index < TILE_COUNT:
            raise IndexError("tile index out of range")
        if (index + 1) * TILE_DATASIZE > len(data):
            raise IndexError("tile lies beyond the end of the tileset data")
    start = src * TILE_DATASIZE
    data[dest * TILE_DATASIZE : (dest + 1) * TILE_DATASIZE] = data[start : start + TILE_DATASIZE]