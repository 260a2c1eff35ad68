import io

import pytest

from rsdkpack.tiles import (
    CHUNKTILE_COUNT,
    NO_FLOOR,
    NO_ROOF,
    SOLID_ROOF,
    TILE_COUNT,
    TILE_DATASIZE,
    TILE_SIZE,
    TILESET_SIZE,
    copy_tile,
    read_chunks,
    read_collision_masks,
)


class BytesSource:
    def __init__(self, data):
        self._buf = io.BytesIO(data)

    def read(self, size):
        data = self._buf.read(size)
        return data + bytes(size - len(data))

    def read_byte(self):
        return self.read(1)[0]


def chunk_entry(plane, direction, index, coll_a, coll_b):
    e0 = (plane << 4) | (direction << 2) | (index >> 8)
    return bytes([e0, index & 0xFF, (coll_a << 4) | coll_b])


def tile_record(ceiling, flags, angle, heights, solid_high, solid_low):
    head = (0x10 if ceiling else 0) | flags
    packed = bytes((heights[i] << 4) | heights[i + 1] for i in range(0, TILE_SIZE, 2))
    return bytes([head]) + angle.to_bytes(4, "little") + packed + bytes([solid_high, solid_low])


def test_read_chunks_count_and_empty():
    chunks = read_chunks(BytesSource(b""))
    assert len(chunks) == CHUNKTILE_COUNT
    assert all(c.tile_index == 0 and c.visual_plane == 0 for c in chunks)


def test_read_chunks_decodes_fields():
    data = chunk_entry(2, 3, 0x2AB, 9, 4) + chunk_entry(1, 0, 0x10, 0, 15)
    chunks = read_chunks(BytesSource(data))
    first, second = chunks[0], chunks[1]
    assert (first.visual_plane, first.direction, first.tile_index) == (2, 3, 0x2AB)
    assert (first.collision_a, first.collision_b) == (9, 4)
    assert (second.visual_plane, second.direction, second.tile_index) == (1, 0, 0x10)
    assert (second.collision_a, second.collision_b) == (0, 15)
    assert first.gfx_data_pos == 0x2AB * 256


def test_read_chunks_ignores_top_bits():
    plain = chunk_entry(1, 2, 0x155, 3, 7)
    flagged = bytes([plain[0] | 0xC0]) + plain[1:]
    assert read_chunks(BytesSource(plain))[0] == read_chunks(BytesSource(flagged))[0]


def test_floor_tile_heights_flags_angle():
    heights = list(range(TILE_SIZE))
    data = tile_record(False, 5, 0x12345678, heights, 0xFF, 0xFF)
    masks = read_collision_masks(BytesSource(data))
    assert len(masks) == 2
    path = masks[0]
    assert path.floor(0) == heights
    assert path.roof(0) == [SOLID_ROOF] * TILE_SIZE
    assert path.flags[0] == 5
    assert path.angles[0] == 0x12345678


def test_floor_staircase_walls():
    heights = list(range(TILE_SIZE))
    data = tile_record(False, 0, 0, heights, 0xFF, 0xFF)
    path = read_collision_masks(BytesSource(data))[0]
    assert path.left_wall(0) == [0] * TILE_SIZE
    assert path.right_wall(0) == heights


def test_empty_floor_tile():
    data = tile_record(False, 0, 0, [0] * TILE_SIZE, 0, 0)
    path = read_collision_masks(BytesSource(data))[0]
    assert path.floor(0) == [NO_FLOOR] * TILE_SIZE
    assert path.roof(0) == [NO_ROOF] * TILE_SIZE
    assert path.left_wall(0) == [NO_FLOOR] * TILE_SIZE
    assert path.right_wall(0) == [NO_ROOF] * TILE_SIZE


def test_solid_bits_select_columns():
    # second byte covers columns 0..7, first byte columns 8..15
    data = tile_record(False, 0, 0, [3] * TILE_SIZE, 0x00, 0x01)
    path = read_collision_masks(BytesSource(data))[0]
    floor = path.floor(0)
    assert floor[0] == 3
    assert floor[1:] == [NO_FLOOR] * (TILE_SIZE - 1)


def test_ceiling_tile():
    heights = [TILE_SIZE - 1] * TILE_SIZE
    data = tile_record(True, 2, 0, heights, 0xFF, 0xFF)
    path = read_collision_masks(BytesSource(data))[0]
    assert path.roof(0) == heights
    assert path.floor(0) == [0] * TILE_SIZE
    assert path.left_wall(0) == [0] * TILE_SIZE
    assert path.right_wall(0) == [TILE_SIZE - 1] * TILE_SIZE
    assert path.flags[0] == 2


def test_records_interleave_paths_and_tiles():
    empty = tile_record(False, 0, 0, [0] * TILE_SIZE, 0, 0)
    marked = tile_record(False, 7, 0, [4] * TILE_SIZE, 0xFF, 0xFF)
    data = empty + marked + marked + empty
    path_a, path_b = read_collision_masks(BytesSource(data))
    assert path_b.flags[0] == 7 and path_a.flags[0] == 0
    assert path_a.flags[1] == 7 and path_b.flags[1] == 0
    assert path_a.floor(1) == [4] * TILE_SIZE
    assert path_b.floor(0) == [4] * TILE_SIZE


def test_mask_accessor_range():
    path = read_collision_masks(BytesSource(b""))[0]
    with pytest.raises(IndexError):
        path.floor(TILE_COUNT)


def test_copy_tile():
    data = bytearray(TILESET_SIZE)
    pattern = bytes(range(TILE_DATASIZE))
    data[3 * TILE_DATASIZE : 4 * TILE_DATASIZE] = pattern
    copy_tile(data, 7, 3)
    assert data[7 * TILE_DATASIZE : 8 * TILE_DATASIZE] == pattern
    assert data[3 * TILE_DATASIZE : 4 * TILE_DATASIZE] == pattern
    assert data[8 * TILE_DATASIZE : 9 * TILE_DATASIZE] == bytes(TILE_DATASIZE)


def test_copy_tile_out_of_range():
    data = bytearray(TILESET_SIZE)
    with pytest.raises(IndexError):
        copy_tile(data, TILE_COUNT, 0)
    with pytest.raises(IndexError):
        copy_tile(bytearray(TILE_DATASIZE), 1, 0)