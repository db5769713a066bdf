"""CRC-32C (Castagnoli) checksums, plus masking for checksums stored in data."""

from __future__ import annotations

_POLY = 0x82F63B78
_MASK32 = 0xFFFFFFFF
_MASK_DELTA = 0xA282EAD8


def _make_table() -> tuple:
    table = []
    for n in range(256):
        crc = n
        for _ in range(8):
            crc = (crc >> 1) ^ _POLY if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_TABLE = _make_table()


def extend(crc: int, data) -> int:
    """Return the CRC-32C of ``A + data``, where ``crc`` is the CRC-32C of ``A``."""
    table = _TABLE
    state = (crc & _MASK32) ^ _MASK32
    for byte in bytes(data):
        state = table[(state ^ byte) & 0xFF] ^ (state >> 8)
    return state ^ _MASK32


def value(data) -> int:
    """Return the CRC-32C of ``data``."""
    return extend(0, data)


def mask(crc: int) -> int:
    """Return a masked form of ``crc``, safe to store inside checksummed data."""
    crc &= _MASK32
    rotated = ((crc >> 15) | (crc << 17)) & _MASK32
    return (rotated + _MASK_DELTA) & _MASK32


def unmask(masked_crc: int) -> int:
    """Return the checksum whose masked form is ``masked_crc``."""
    rot = (masked_crc - _MASK_DELTA) & _MASK32
    return ((rot >> 17) | (rot << 15)) & _MASK32