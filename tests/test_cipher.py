import hashlib

import pytest

from rsdkpack.cipher import Decryptor, generate_keys


def _unswap(key: bytes) -> bytes:
    return b"".join(key[i : i + 4][::-1] for i in range(0, 16, 4))


PLAIN = bytes(range(256)) * 3 + b"RSDK stage data"


def test_keys_are_word_swapped_md5_of_sizes():
    key_a, key_b = generate_keys(100)
    assert _unswap(key_a) == hashlib.md5(b"100").digest()
    assert _unswap(key_b) == hashlib.md5(b"51").digest()
    assert len(key_a) == len(key_b) == 16


def test_initial_state_from_size():
    dec = Decryptor(0x1FC)
    assert dec.string_no == 0x7F
    assert dec.pos_a == 0
    assert dec.pos_b == 8
    assert dec.nybble_swap == 0


@pytest.mark.parametrize("size", [1, 16, 100, 0x1FC, 4096, 0x7FFFFFFF])
def test_round_trip(size):
    cipher_text = Decryptor(size).encrypt(PLAIN)
    assert len(cipher_text) == len(PLAIN)
    assert cipher_text != PLAIN
    assert Decryptor(size).decrypt(cipher_text) == PLAIN


def test_chunked_decrypt_matches_whole():
    cipher_text = Decryptor(777).encrypt(PLAIN)
    dec = Decryptor(777)
    parts = [dec.decrypt(cipher_text[i : i + 7]) for i in range(0, len(cipher_text), 7)]
    assert b"".join(parts) == PLAIN


def test_skip_matches_reading():
    cipher_text = Decryptor(5000).encrypt(PLAIN)
    dec = Decryptor(5000)
    dec.skip(300)
    assert dec.decrypt(cipher_text[300:]) == PLAIN[300:]


def test_skip_zero_keeps_state():
    dec = Decryptor(42)
    dec.skip(0)
    assert (dec.pos_a, dec.pos_b, dec.nybble_swap) == (0, 8, 0)


def test_skip_negative_rejected():
    with pytest.raises(ValueError):
        Decryptor(42).skip(-1)


def test_positions_stay_within_keys():
    dec = Decryptor(123456)
    for _ in range(5000):
        dec.skip(1)
        assert 0 <= dec.pos_a < 16
        assert 0 <= dec.pos_b < 16
        assert 0 <= dec.string_no <= 0x7F
        assert dec.nybble_swap in (0, 1)


def test_different_sizes_give_different_streams():
    assert Decryptor(100).encrypt(PLAIN) != Decryptor(101).encrypt(PLAIN)
    assert Decryptor(100).decrypt(Decryptor(100).encrypt(b"abc")) == b"abc"