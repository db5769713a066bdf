"""A small, fast hash in the style of murmur hash, for in-memory tables."""

from __future__ import annotations

import struct

_MULTIPLIER = 0xC6A4A793
_TAIL_SHIFT = 24
_MASK = 0xFFFFFFFF


def _signed(byte: int) -> int:
    return byte - 256 if byte >= 0x80 else byte


def hash_bytes(data, seed: int = 0) -> int:
    """Return a 32-bit hash of ``data`` mixed with ``seed``.

    Trailing bytes that do not fill a four-byte word are treated as signed.
    """
    data = bytes(data)
    n = len(data)
    h = (seed ^ (n * _MULTIPLIER)) & _MASK

    whole = n - n % 4
    for (word,) in struct.iter_unpack("<I", data[:whole]):
        h = ((h + word) * _MULTIPLIER) & _MASK
        h ^= h >> 16

    tail = [_signed(b) for b in data[whole:]]
    if tail:
        if len(tail) == 3:
            h += tail[2] << 16
        if len(tail) >= 2:
            h += tail[1] << 8
        h = (h + tail[0]) & _MASK
        h = (h * _MULTIPLIER) & _MASK
        h ^= h >> _TAIL_SHIFT
    return h