# rsdkpack

`rsdkpack` reads the data files of RSDK v4 games: the `RSDKvB` data pack
container, its encrypted entries, and the stage files stored in it (act
layouts, backgrounds, 128x128 chunks, collision masks). It also holds the
camera logic that follows a player across a stage.

It has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Reading files

A `Container` (in `rsdkpack.datapack`) holds the index of up to four data
packs and 0x1000 entries; `add_pack` raises `DataPackError` when a pack is
malformed or the container is full. `find` looks a path up by its
`path_hash` (the MD5 of the lower-cased path) and returns a `PackEntry` or
`None`.

A `FileReader` (in `rsdkpack.reader`) opens a path from the packs when the
container knows it, and otherwise from a folder relative to `base_path`.
A missing file raises `FileNotFoundError`.

```python
from rsdkpack.datapack import Container
from rsdkpack.layout import read_act_layout
from rsdkpack.reader import FileReader

container = Container()
container.add_pack("Data.rsdk")

with FileReader(container, base_path="") as reader:
    reader.open("Data/Stages/Zone01/Act1.bin")
    layout = read_act_layout(reader)
    print(layout.title, len(layout.objects))
```

Entries flagged as encrypted in the pack are decrypted as they are read.
`read(size)` always returns `size` bytes, padding with zeros past the end
of the data; `read_byte` returns one byte as an integer. `tell`, `seek`,
`at_end`, `save_state` and `restore_state` work the same way for plain
files and for pack entries: `save_state` returns a `FileState` from which
`restore_state` reopens the file and carries on at the same position.
`copy_file_path` turns forward slashes into backslashes.

## Stage data

- `rsdkpack.layout`: `read_act_layout` returns an `ActLayout` (title card
  text, active layers, the foreground `TileLayer` and its `ActObject`s,
  plus `x_boundary`, `y_boundary` and `water_level`); `read_backgrounds`
  returns a `Background` of tile layers and `ParallaxEntry` lists, with
  `auto_scroll` and `reset_scroll`; `floor_buffer` builds the per-tile
  lookup for a 3D floor layer. `LayerType` names the layer kinds.
- `rsdkpack.tiles`: `read_chunks` returns the `ChunkTile`s of the chunk
  file; `read_collision_masks` returns one `CollisionMasks` per collision
  path, with `floor`, `roof`, `left_wall` and `right_wall` per tile;
  `copy_tile` copies one tile's pixels over another in tileset graphics.
- `rsdkpack.camera`: `Camera` and `Target` with the `follow`,
  `follow_cd_style`, `follow_h_locked`, `follow_locked` and `follow_fixed`
  modes; `update` picks one from the camera's `enabled` and `style`.

## Low-level pieces

`rsdkpack.cipher.Decryptor` implements the pack entry cipher (`decrypt`,
`encrypt`, `skip`); `generate_keys` gives the two key strings for a file
size. `rsdkpack.datapack.parse_pack_index` parses a pack's signature and
entry table from bytes.

## What it does not do

The package does not read the game configuration or stage configuration
files, keeps no stage timer, and has no command-line tool. It does not
decode the tileset GIF, play audio, run scripts or draw anything.