"""Human-readable rendering and parsing of numbers and byte strings."""

from __future__ import annotations

from typing import Optional, Tuple, Union

_U64_MAX = (1 << 64) - 1


def number_to_string(num: int) -> str:
    """Return the decimal text of an unsigned 64-bit number."""
    if not 0 <= num <= _U64_MAX:
        raise ValueError(f"{num} is not an unsigned 64-bit number")
    return str(num)


def escape_string(value) -> str:
    """Return ``value`` as text, escaping non-printable bytes as ``\\xNN``."""
    return "".join(
        chr(b) if 0x20 <= b <= 0x7E else f"\\x{b:02x}" for b in bytes(value)
    )


def _byte_code(c: Union[int, str, bytes]) -> int:
    if isinstance(c, int):
        return c
    raw = c.encode("latin-1") if isinstance(c, str) else bytes(c)
    if len(raw) != 1:
        raise ValueError("expected a single character")
    return raw[0]


def consume_char(data: bytes, c: Union[int, str, bytes]) -> Optional[bytes]:
    """Return ``data`` without its first byte if that byte is ``c``, else None."""
    if data and data[0] == _byte_code(c):
        return data[1:]
    return None


def consume_decimal_number(data: bytes) -> Tuple[int, bytes]:
    """Parse a leading decimal number from ``data``.

    Returns the number and the bytes that follow it. Raises ValueError when
    there are no leading digits or the number overflows 64 bits.
    """
    value = 0
    digits = 0
    limit, last_digit = divmod(_U64_MAX, 10)
    for byte in data:
        if not 0x30 <= byte <= 0x39:
            break
        delta = byte - 0x30
        if value > limit or (value == limit and delta > last_digit):
            raise ValueError("decimal number overflows 64 bits")
        value = value * 10 + delta
        digits += 1
    if digits == 0:
        raise ValueError("no decimal digits")
    return value, data[digits:]