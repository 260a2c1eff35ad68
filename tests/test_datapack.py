import hashlib
import struct

import pytest

from rsdkpack.datapack import (
    Container,
    DataPackError,
    PackEntry,
    parse_pack_index,
    path_hash,
)


def _file_hash(digest: bytes) -> bytes:
    return b"".join(digest[i : i + 4][::-1] for i in range(0, 16, 4))


def _build_pack(files):
    """files: list of (path, offset, size_field)."""
    out = b"RSDKvB" + struct.pack("<H", len(files))
    for path, offset, size in files:
        out += _file_hash(path_hash(path)) + struct.pack("<II", offset, size)
    return out


def test_path_hash_is_case_insensitive_md5():
    assert path_hash("Data/Game/GameConfig.bin") == path_hash("data/game/gameconfig.bin")
    assert path_hash("ABC") == hashlib.md5(b"abc").digest()


def test_hash_words_are_reversed():
    data = b"RSDKvB" + struct.pack("<H", 1) + bytes(range(16)) + struct.pack("<II", 0, 0)
    (entry,) = parse_pack_index(data, 0)
    assert entry.hash == bytes([3, 2, 1, 0, 7, 6, 5, 4, 11, 10, 9, 8, 15, 14, 13, 12])


def test_encrypted_flag_and_size():
    data = _build_pack([("a.bin", 64, 0x80000010), ("b.bin", 80, 0x20)])
    first, second = parse_pack_index(data, 2)
    assert first == PackEntry(path_hash("a.bin"), 64, 0x10, True, 2)
    assert second.encrypted is False
    assert second.size == 0x20
    assert second.offset == 80


def test_bad_signature():
    with pytest.raises(DataPackError):
        parse_pack_index(b"RSDKvA\x00\x00", 0)


def test_truncated_index():
    data = _build_pack([("a.bin", 0, 1)])
    with pytest.raises(DataPackError):
        parse_pack_index(data[:-3], 0)
    with pytest.raises(DataPackError):
        parse_pack_index(b"RSD", 0)


def test_container_add_and_find(tmp_path):
    pack = tmp_path / "Data.rsdk"
    pack.write_bytes(_build_pack([("Data/Game/GameConfig.bin", 100, 50)]))
    container = Container()
    entries = container.add_pack(pack)
    assert len(entries) == 1
    assert container.packs == [str(pack)]
    found = container.find("DATA/GAME/GAMECONFIG.BIN")
    assert found is not None and found.offset == 100 and found.size == 50
    assert container.find("Data/Game/Missing.bin") is None


def test_second_pack_gets_next_id(tmp_path):
    first = tmp_path / "one.rsdk"
    second = tmp_path / "two.rsdk"
    first.write_bytes(_build_pack([("x.bin", 0, 1)]))
    second.write_bytes(_build_pack([("y.bin", 0, 2)]))
    container = Container()
    container.add_pack(first)
    container.add_pack(second)
    assert container.find("y.bin").pack_id == 1
    assert container.find("x.bin").pack_id == 0
    assert len(container) == 2


def test_missing_pack_file(tmp_path):
    container = Container()
    with pytest.raises(FileNotFoundError):
        container.add_pack(tmp_path / "absent.rsdk")
    assert container.packs == []


def test_invalid_pack_not_registered(tmp_path):
    pack = tmp_path / "bad.rsdk"
    pack.write_bytes(b"NOTRSDK!")
    container = Container()
    with pytest.raises(DataPackError):
        container.add_pack(pack)
    assert container.packs == [] and len(container) == 0


def test_pack_limit(tmp_path):
    container = Container()
    for n in range(4):
        pack = tmp_path / f"p{n}.rsdk"
        pack.write_bytes(_build_pack([]))
        container.add_pack(pack)
    extra = tmp_path / "extra.rsdk"
    extra.write_bytes(_build_pack([]))
    with pytest.raises(DataPackError):
        container.add_pack(extra)
    assert len(container.packs) == 4


def test_clear(tmp_path):
    pack = tmp_path / "Data.rsdk"
    pack.write_bytes(_build_pack([("a.bin", 0, 1)]))
    container = Container()
    container.add_pack(pack)
    container.clear()
    assert container.packs == []
    assert container.find("a.bin") is None