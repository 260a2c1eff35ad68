"""Stream cipher used for encrypted files inside RSDK data packs."""

from __future__ import annotations

import hashlib

_KEY_1 = 0xAAAAAAAB
_KEY_2 = 0x24924925


def _swap_words(digest: bytes) -> bytes:
    """Reverse the byte order of each 32-bit word of a 16-byte digest."""
    return b"".join(digest[i : i + 4][::-1] for i in range(0, len(digest), 4))


def _mul_high(constant: int, value: int) -> int:
    return (constant * value) >> 32


def _key_for(number: int) -> bytes:
    digest = hashlib.md5(str(number & 0xFFFFFFFF).encode("ascii")).digest()
    return _swap_words(digest)


def generate_keys(file_size: int) -> tuple[bytes, bytes]:
    """Return the two 16-byte key strings for a file of the given size."""
    file_size &= 0xFFFFFFFF
    return _key_for(file_size), _key_for((file_size >> 1) + 1)


def _swap_nybbles(value: int) -> int:
    return ((value << 4) + (value >> 4)) & 0xFF


class Decryptor:
    """Keystream state for one encrypted pack entry.

    The state starts at the beginning of the file; each processed byte
    moves it forward by one position.
    """

    def __init__(self, file_size: int) -> None:
        self.file_size = file_size
        self.key_a, self.key_b = generate_keys(file_size)
        self._reset()

    def _reset(self) -> None:
        self.string_no = (self.file_size & 0x1FC) >> 2
        self.pos_a = 0
        self.pos_b = 8
        self.nybble_swap = 0

    def _advance(self) -> None:
        self.pos_a += 1
        self.pos_b += 1
        if self.pos_a <= 0x0F:
            if self.pos_b > 0x0C:
                self.pos_b = 0
                self.nybble_swap ^= 1
        elif self.pos_b <= 0x08:
            self.pos_a = 0
            self.nybble_swap ^= 1
        else:
            self.string_no = (self.string_no + 2) & 0x7F
            key1 = _mul_high(_KEY_1, self.string_no)
            key2 = _mul_high(_KEY_2, self.string_no)
            temp1 = key2 + (self.string_no - key2) // 2
            temp2 = key1 // 8 * 3
            first = (self.string_no - temp1 // 4 * 7) & 0xFF
            if self.nybble_swap:
                self.nybble_swap = 0
                self.pos_a = first
                self.pos_b = (self.string_no - temp2 * 4 + 2) & 0xFF
            else:
                self.nybble_swap = 1
                self.pos_b = first
                self.pos_a = (self.string_no - temp2 * 4 + 3) & 0xFF

    def decrypt(self, data: bytes) -> bytes:
        """Decrypt ``data`` and advance the keystream past it."""
        out = bytearray()
        for value in data:
            value = self.key_b[self.pos_b] ^ self.string_no ^ value
            if self.nybble_swap:
                value = _swap_nybbles(value)
            out.append(value ^ self.key_a[self.pos_a])
            self._advance()
        return bytes(out)

    def encrypt(self, data: bytes) -> bytes:
        """Encrypt ``data`` so that :meth:`decrypt` restores it."""
        out = bytearray()
        for value in data:
            value ^= self.key_a[self.pos_a]
            if self.nybble_swap:
                value = _swap_nybbles(value)
            out.append((value ^ self.key_b[self.pos_b] ^ self.string_no) & 0xFF)
            self._advance()
        return bytes(out)

    def skip(self, count: int) -> None:
        """Advance the keystream by ``count`` bytes without processing data."""
        if count < 0:
            raise ValueError("cannot skip a negative number of bytes")
        for _ in range(count):
            self._advance()