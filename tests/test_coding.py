import pytest

from ldbutil.coding import (
    decode_fixed32,
    decode_fixed64,
    decode_length_prefixed,
    decode_varint32,
    decode_varint64,
    encode_fixed32,
    encode_fixed64,
    encode_length_prefixed,
    encode_varint32,
    encode_varint64,
    varint_length,
)

U64_MAX = (1 << 64) - 1


def test_fixed32():
    count = 100000
    s = b"".join(encode_fixed32(v) for v in range(count))
    for v in range(count):
        assert decode_fixed32(s, v * 4) == v


def test_fixed64():
    values = [
        v
        for power in range(64)
        for v in ((1 << power) - 1, 1 << power, (1 << power) + 1)
    ]
    s = b"".join(encode_fixed64(v) for v in values)
    decoded = [decode_fixed64(s, i * 8) for i in range(len(values))]
    assert len(decoded) == 192
    assert decoded == values


def test_fixed_encoding_is_little_endian():
    assert encode_fixed32(1) == b"\x01\x00\x00\x00"
    assert encode_fixed64(1) == b"\x01" + b"\x00" * 7


def test_varint32():
    values = [((i // 32) << (i % 32)) & 0xFFFFFFFF for i in range(32 * 32)]
    s = b"".join(encode_varint32(v) for v in values)
    pos = 0
    for expected in values:
        actual, nxt = decode_varint32(s, pos)
        assert actual == expected
        assert varint_length(actual) == nxt - pos
        pos = nxt
    assert pos == len(s)


def test_varint64():
    values = [0, 100, U64_MAX, U64_MAX - 1]
    for k in range(64):
        power = 1 << k
        values.extend([power, power - 1, power + 1])
    s = b"".join(encode_varint64(v) for v in values)
    pos = 0
    for expected in values:
        assert pos < len(s)
        actual, nxt = decode_varint64(s, pos)
        assert actual == expected
        assert varint_length(actual) == nxt - pos
        pos = nxt
    assert pos == len(s)


def test_varint32_overflow():
    with pytest.raises(ValueError):
        decode_varint32(b"\x81\x82\x83\x84\x85\x11")


def test_varint32_truncation():
    large_value = (1 << 31) + 100
    s = encode_varint32(large_value)
    for length in range(len(s) - 1):
        with pytest.raises(ValueError):
            decode_varint32(s, 0, length)
    value, end = decode_varint32(s, 0, len(s))
    assert value == large_value
    assert end == len(s)


def test_varint64_overflow():
    with pytest.raises(ValueError):
        decode_varint64(b"\x81\x82\x83\x84\x85\x81\x82\x83\x84\x85\x11")


def test_varint64_truncation():
    large_value = (1 << 63) + 100
    s = encode_varint64(large_value)
    for length in range(len(s) - 1):
        with pytest.raises(ValueError):
            decode_varint64(s, 0, length)
    value, end = decode_varint64(s, 0, len(s))
    assert value == large_value
    assert end == len(s)


def test_strings():
    s = b"".join(
        encode_length_prefixed(v) for v in (b"", b"foo", b"bar", b"x" * 200)
    )
    pos = 0
    v, pos = decode_length_prefixed(s, pos)
    assert v == b""
    v, pos = decode_length_prefixed(s, pos)
    assert v == b"foo"
    v, pos = decode_length_prefixed(s, pos)
    assert v == b"bar"
    v, pos = decode_length_prefixed(s, pos)
    assert v == b"x" * 200
    assert s[pos:] == b""


def test_length_prefixed_runs_past_end():
    data = encode_varint32(10) + b"abc"
    with pytest.raises(ValueError):
        decode_length_prefixed(data)


@pytest.mark.parametrize(
    "encoder, value",
    [
        (encode_fixed32, -1),
        (encode_fixed32, 1 << 32),
        (encode_fixed64, 1 << 64),
        (encode_varint32, 1 << 32),
        (encode_varint64, -5),
    ],
)
def test_out_of_range_values_rejected(encoder, value):
    with pytest.raises(ValueError):
        encoder(value)


def test_decode_fixed_needs_enough_bytes():
    with pytest.raises(ValueError):
        decode_fixed32(b"\x01\x02\x03")
    with pytest.raises(ValueError):
        decode_fixed64(encode_fixed64(7), 1)


def test_varint_lengths_at_boundaries():
    assert varint_length(0) == 1
    assert varint_length(127) == 1
    assert varint_length(128) == 2
    assert varint_length(U64_MAX) == 10
    assert len(encode_varint64(U64_MAX)) == varint_length(U64_MAX)