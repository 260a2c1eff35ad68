"""Act layouts, background layers and parallax settings of a stage."""

from __future__ import annotations

from array import array
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Protocol

LAYER_COUNT = 9
BACKGROUND_LAYER_MAX = LAYER_COUNT - 1
CHUNK_SIZE = 0x80
TILELAYER_CHUNK_W = 0x100
TILELAYER_CHUNK_H = 0x100
TILELAYER_CHUNK_MAX = TILELAYER_CHUNK_W * TILELAYER_CHUNK_H
TILELAYER_SCROLL_MAX = TILELAYER_CHUNK_H * CHUNK_SIZE
FIRST_OBJECT_SLOT = 32
DISABLED_LAYER = 9

_RLE_MARKER = 0xFF


class _ByteSource(Protocol):
    def read(self, size: int) -> bytes: ...

    def read_byte(self) -> int: ...


class LayerType(IntEnum):
    NOSCROLL = 0
    HSCROLL = 1
    VSCROLL = 2
    FLOOR_3D = 3
    SKY_3D = 4


def _layer_type(value: int) -> LayerType | int:
    try:
        return LayerType(value)
    except ValueError:
        return value


def _wrap32(value: int) -> int:
    return ((value + 0x80000000) & 0xFFFFFFFF) - 0x80000000


def _u8(reader: _ByteSource) -> int:
    return reader.read_byte()


def _u16(reader: _ByteSource) -> int:
    return int.from_bytes(reader.read(2), "little")


def _s32(reader: _ByteSource) -> int:
    return int.from_bytes(reader.read(4), "little", signed=True)


def _empty_tiles() -> array:
    return array("H", bytes(2 * TILELAYER_CHUNK_MAX))


@dataclass
class TileLayer:
    """A grid of 128x128 chunks with its scrolling settings."""

    width: int = 0
    height: int = 0
    type: LayerType | int = LayerType.NOSCROLL
    tiles: array = field(default_factory=_empty_tiles)
    line_scroll: bytearray = field(default_factory=lambda: bytearray(TILELAYER_SCROLL_MAX))
    parallax_factor: int = 0
    scroll_speed: int = 0
    scroll_pos: int = 0
    angle: int = 0
    x_pos: int = 0
    y_pos: int = 0
    z_pos: int = 0
    deformation_offset: int = 0
    deformation_offset_w: int = 0

    def tile(self, x: int, y: int) -> int:
        """Chunk index stored at column ``x`` and row ``y``."""
        if not (0 <= x < TILELAYER_CHUNK_W and 0 <= y < TILELAYER_CHUNK_H):
            raise IndexError("chunk position out of range")
        return self.tiles[x + y * TILELAYER_CHUNK_W]

    def _read_tiles(self, reader: _ByteSource) -> None:
        for y in range(self.height):
            row = y * TILELAYER_CHUNK_W
            for x in range(self.width):
                self.tiles[row + x] = _u16(reader)


@dataclass
class ActObject:
    """An object placed in an act layout."""

    type: int
    property_value: int
    x_pos: int
    y_pos: int
    state: int = 0
    direction: int = 0
    scale: int = 512
    rotation: int = 0
    draw_order: int = 3
    priority: int = 0
    alpha: int = 0
    animation: int = 0
    animation_speed: int = 0
    frame: int = 0
    ink_effect: int = 0
    values: list[int] = field(default_factory=lambda: [0, 0, 0, 0])


_OPTIONAL_FIELDS = (
    (0x1, "state", _s32),
    (0x2, "direction", _u8),
    (0x4, "scale", _s32),
    (0x8, "rotation", _s32),
    (0x10, "draw_order", _u8),
    (0x20, "priority", _u8),
    (0x40, "alpha", _u8),
    (0x80, "animation", _u8),
    (0x100, "animation_speed", _s32),
    (0x200, "frame", _u8),
    (0x400, "ink_effect", _u8),
)
_VALUE_FLAGS = (0x800, 0x1000, 0x2000, 0x4000)


@dataclass
class ActLayout:
    """Contents of an act file: title card, foreground layer and objects."""

    title: str = ""
    title_word2: int = 0
    active_layers: tuple[int, int, int, int] = (DISABLED_LAYER,) * 4
    mid_point: int = 0
    foreground: TileLayer = field(default_factory=lambda: TileLayer(type=LayerType.HSCROLL))
    objects: list[ActObject] = field(default_factory=list)

    @property
    def x_boundary(self) -> int:
        """Right edge of the act in pixels."""
        return self.foreground.width * CHUNK_SIZE

    @property
    def y_boundary(self) -> int:
        """Bottom edge of the act in pixels."""
        return self.foreground.height * CHUNK_SIZE

    @property
    def water_level(self) -> int:
        """Initial water level, just below the bottom of the act."""
        return self.y_boundary + 128


def _read_object(reader: _ByteSource) -> ActObject:
    attribs = _u16(reader)
    obj = ActObject(
        type=_u8(reader),
        property_value=_u8(reader),
        x_pos=_s32(reader),
        y_pos=_s32(reader),
    )
    for flag, name, read in _OPTIONAL_FIELDS:
        if attribs & flag:
            setattr(obj, name, read(reader))
    for index, flag in enumerate(_VALUE_FLAGS):
        if attribs & flag:
            obj.values[index] = _s32(reader)
    return obj


def read_act_layout(reader: _ByteSource) -> ActLayout:
    """Parse an act layout file from an open reader."""
    layout = ActLayout()

    length = _u8(reader)
    title = reader.read(length).decode("latin-1")
    word2 = length
    for index, char in enumerate(title):
        if char == "-":
            word2 = index + 1
    layout.title = title
    layout.title_word2 = word2

    layers = reader.read(4)
    layout.active_layers = (layers[0], layers[1], layers[2], layers[3])
    layout.mid_point = _u8(reader)

    foreground = layout.foreground
    foreground.width = _u8(reader)
    reader.read(1)
    foreground.height = _u8(reader)
    reader.read(1)
    foreground._read_tiles(reader)

    object_count = _u16(reader)
    layout.objects = [_read_object(reader) for _ in range(object_count)]
    return layout


@dataclass
class ParallaxEntry:
    """One horizontal or vertical parallax scroll line group."""

    parallax_factor: int = 0
    scroll_speed: int = 0
    scroll_pos: int = 0
    line_pos: int = 0
    deform: int = 0


@dataclass
class Background:
    """Background layers and parallax entries of a stage."""

    layers: list[TileLayer] = field(default_factory=list)
    h_parallax: list[ParallaxEntry] = field(default_factory=list)
    v_parallax: list[ParallaxEntry] = field(default_factory=list)

    def auto_scroll(self) -> None:
        """Advance every parallax entry by its scroll speed."""
        for entry in (*self.h_parallax, *self.v_parallax):
            entry.scroll_pos = _wrap32(entry.scroll_pos + entry.scroll_speed)

    def reset_scroll(self) -> None:
        """Set all scroll positions and deformation offsets back to zero."""
        for layer in self.layers:
            layer.deformation_offset = 0
            layer.deformation_offset_w = 0
            layer.scroll_pos = 0
        for entry in (*self.h_parallax, *self.v_parallax):
            entry.scroll_pos = 0


def _read_parallax(reader: _ByteSource) -> list[ParallaxEntry]:
    entries = []
    for _ in range(_u8(reader)):
        factor = _u16(reader)
        speed = _u8(reader) << 10
        deform = _u8(reader)
        entries.append(ParallaxEntry(parallax_factor=factor, scroll_speed=speed, deform=deform))
    return entries


def _read_line_scroll(reader: _ByteSource, target: bytearray) -> None:
    pos = 0

    def put(value: int, count: int) -> None:
        nonlocal pos
        if pos + count > len(target):
            raise ValueError("line scroll data overflows the layer")
        target[pos : pos + count] = bytes([value]) * count
        pos += count

    while True:
        value = _u8(reader)
        if value != _RLE_MARKER:
            put(value, 1)
            continue
        value = _u8(reader)
        if value == _RLE_MARKER:
            return
        count = _u8(reader) - 1
        if count > 0:
            put(value, count)


def read_backgrounds(reader: _ByteSource) -> Background:
    """Parse a stage's background file from an open reader."""
    layer_count = _u8(reader)
    if layer_count > BACKGROUND_LAYER_MAX:
        raise ValueError(f"at most {BACKGROUND_LAYER_MAX} background layers are supported")
    background = Background()
    background.h_parallax = _read_parallax(reader)
    background.v_parallax = _read_parallax(reader)

    for _ in range(layer_count):
        layer = TileLayer()
        layer.width = _u8(reader)
        reader.read(1)
        layer.height = _u8(reader)
        reader.read(1)
        layer.type = _layer_type(_u8(reader))
        layer.parallax_factor = _u16(reader)
        layer.scroll_speed = _u8(reader) << 10
        _read_line_scroll(reader, layer.line_scroll)
        layer._read_tiles(reader)
        background.layers.append(layer)
    return background


def floor_buffer(tiles: Sequence[int]) -> array:
    """Per-tile lookup for a 3D floor layer built from its chunk grid."""
    if len(tiles) != TILELAYER_CHUNK_MAX:
        raise ValueError(f"expected {TILELAYER_CHUNK_MAX} chunk entries")
    return array(
        "H",
        (
            ((tiles[(x >> 3) + ((y >> 3) << 8)] << 6) + (x & 7) + ((y & 7) << 3)) & 0xFFFF
            for y in range(TILELAYER_CHUNK_H)
            for x in range(TILELAYER_CHUNK_W)
        ),
    )