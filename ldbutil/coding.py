"""Endian-neutral encoding of fixed-width integers, varints and byte strings.

Fixed-width numbers are little endian; varints use seven bits per byte;
strings are prefixed by their length as a varint32.
"""

from __future__ import annotations

import struct
from typing import Optional, Tuple

_U32_MASK = 0xFFFFFFFF
_U64_MASK = (1 << 64) - 1

_FIXED32 = struct.Struct("<I")
_FIXED64 = struct.Struct("<Q")


def _check_unsigned(value: int, bits: int) -> None:
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{value} does not fit in an unsigned {bits}-bit integer")


def encode_fixed32(value: int) -> bytes:
    """Encode a 32-bit unsigned integer as four little-endian bytes."""
    _check_unsigned(value, 32)
    return _FIXED32.pack(value)


def encode_fixed64(value: int) -> bytes:
    """Encode a 64-bit unsigned integer as eight little-endian bytes."""
    _check_unsigned(value, 64)
    return _FIXED64.pack(value)


def _check_fixed(data, offset: int, width: int) -> None:
    if offset < 0 or offset + width > len(data):
        raise ValueError(f"need {width} bytes at offset {offset}")


def decode_fixed32(data, offset: int = 0) -> int:
    """Decode four little-endian bytes at ``offset``."""
    _check_fixed(data, offset, 4)
    return _FIXED32.unpack_from(data, offset)[0]


def decode_fixed64(data, offset: int = 0) -> int:
    """Decode eight little-endian bytes at ``offset``."""
    _check_fixed(data, offset, 8)
    return _FIXED64.unpack_from(data, offset)[0]


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def encode_varint32(value: int) -> bytes:
    """Encode a 32-bit unsigned integer as a varint (1 to 5 bytes)."""
    _check_unsigned(value, 32)
    return _encode_varint(value)


def encode_varint64(value: int) -> bytes:
    """Encode a 64-bit unsigned integer as a varint (1 to 10 bytes)."""
    _check_unsigned(value, 64)
    return _encode_varint(value)


def varint_length(value: int) -> int:
    """Return the number of bytes the varint encoding of ``value`` takes."""
    length = 1
    while value >= 0x80:
        value >>= 7
        length += 1
    return length


def _decode_varint(data, offset: int, limit: Optional[int], max_shift: int,
                   mask: int) -> Tuple[int, int]:
    if limit is None:
        limit = len(data)
    if offset < 0 or limit > len(data):
        raise ValueError("varint range lies outside the data")
    result = 0
    shift = 0
    pos = offset
    while shift <= max_shift and pos < limit:
        byte = data[pos]
        pos += 1
        if byte & 0x80:
            result |= (byte & 0x7F) << shift
        else:
            result |= byte << shift
            return result & mask, pos
        shift += 7
    raise ValueError("truncated or overlong varint")


def decode_varint32(data, offset: int = 0, limit: Optional[int] = None) -> Tuple[int, int]:
    """Parse a varint32 from ``data[offset:limit]``.

    Returns the value and the offset just past it; raises ValueError when
    the bytes end early or the encoding is too long.
    """
    return _decode_varint(data, offset, limit, 28, _U32_MASK)


def decode_varint64(data, offset: int = 0, limit: Optional[int] = None) -> Tuple[int, int]:
    """Parse a varint64 from ``data[offset:limit]``; see ``decode_varint32``."""
    return _decode_varint(data, offset, limit, 63, _U64_MASK)


def encode_length_prefixed(value) -> bytes:
    """Return ``value`` preceded by its length as a varint32."""
    payload = bytes(value)
    return encode_varint32(len(payload)) + payload


def decode_length_prefixed(data, offset: int = 0) -> Tuple[bytes, int]:
    """Parse a length-prefixed byte string at ``offset``.

    Returns the string and the offset just past it.
    """
    length, pos = decode_varint32(data, offset)
    end = pos + length
    if end > len(data):
        raise ValueError("length-prefixed string runs past the end of the data")
    return bytes(data[pos:end]), end