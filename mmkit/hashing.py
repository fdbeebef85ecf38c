"""Integer and string hash functions used for hash tables and read seeding."""

from __future__ import annotations

from typing import Union

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


def int_hash(key: int) -> int:
    """Hash a 32-bit integer: the key itself, truncated to 32 bits."""
    return key & _MASK32


def int64_hash(key: int) -> int:
    """Hash a 64-bit integer to 32 bits by mixing shifted copies of it."""
    key &= _MASK64
    return ((key >> 33) ^ key ^ ((key << 11) & _MASK64)) & _MASK32


def _signed_char(c: int) -> int:
    return c - 256 if c >= 128 else c


def x31_hash_string(s: Union[str, bytes]) -> int:
    """Hash a string with the X31 scheme (h = h * 31 + c), 32 bits wide.

    The string ends at its first NUL character, as a C string would. Bytes
    above 127 are taken as signed characters.
    """
    data = s.encode("utf-8") if isinstance(s, str) else bytes(s)
    data = data.split(b"\0", 1)[0]
    if not data:
        return 0
    h = _signed_char(data[0]) & _MASK32
    for c in data[1:]:
        h = ((h << 5) - h + _signed_char(c)) & _MASK32
    return h


def wang_hash(key: int) -> int:
    """Thomas Wang's 32-bit integer hash; a bijection on 32-bit values."""
    key &= _MASK32
    key = (key + ((key << 15) & _MASK32 ^ _MASK32)) & _MASK32
    key ^= key >> 10
    key = (key + (key << 3)) & _MASK32
    key ^= key >> 6
    key = (key + ((key << 11) & _MASK32 ^ _MASK32)) & _MASK32
    key ^= key >> 16
    return key