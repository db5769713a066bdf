import pytest

from ldbutil.comparator import BytewiseComparator, Comparator, bytewise_comparator
from ldbutil.rng import Random

_TEST_CHARS = b"\x00\x01abcde\xfd\xfe\xff"


def _random_key(rnd, length):
    return bytes(_TEST_CHARS[rnd.uniform(len(_TEST_CHARS))] for _ in range(length))


def test_name():
    assert bytewise_comparator().name() == "leveldb.BytewiseComparator"


def test_shared_instance():
    first = bytewise_comparator()
    second = bytewise_comparator()
    assert second is first
    assert first.compare(b"a", b"b") < 0
    assert second.find_short_successor(b"abc") == b"b"


def test_abstract_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Comparator()


@pytest.mark.parametrize(
    "a,b,sign",
    [
        (b"a", b"b", -1),
        (b"b", b"a", 1),
        (b"abc", b"abc", 0),
        (b"ab", b"abc", -1),
        (b"", b"\x00", -1),
        (b"\x7f", b"\x80", -1),
        (b"\xff", b"\x00\xff", 1),
    ],
)
def test_compare_sign(a, b, sign):
    result = BytewiseComparator().compare(a, b)
    assert (result > 0) - (result < 0) == sign


def test_separator_shortens():
    assert bytewise_comparator().find_shortest_separator(b"abcdefg", b"abzzz") == b"abd"


def test_separator_prefix_unchanged():
    cmp = bytewise_comparator()
    assert cmp.find_shortest_separator(b"abc", b"abcdef") == b"abc"
    assert cmp.find_shortest_separator(b"abcdef", b"abc") == b"abcdef"


def test_separator_adjacent_bytes_unchanged():
    assert bytewise_comparator().find_shortest_separator(b"abc1", b"abd") == b"abc1"


def test_separator_ff_byte_unchanged():
    assert bytewise_comparator().find_shortest_separator(b"a\xffx", b"b") == b"a\xffx"


def test_successor_increments_first_byte():
    assert bytewise_comparator().find_short_successor(b"abc") == b"b"


def test_successor_skips_ff():
    assert bytewise_comparator().find_short_successor(b"\xff\xffa\x00") == b"\xff\xffb"


def test_successor_all_ff_unchanged():
    key = b"\xff\xff\xff"
    assert bytewise_comparator().find_short_successor(key) == key


def test_successor_empty_unchanged():
    assert bytewise_comparator().find_short_successor(b"") == b""


def test_separator_invariants_random():
    cmp = bytewise_comparator()
    rnd = Random(301)
    for _ in range(500):
        a = _random_key(rnd, rnd.uniform(8))
        b = _random_key(rnd, rnd.uniform(8))
        if cmp.compare(a, b) >= 0:
            a, b = b, a
        if a == b:
            continue
        sep = cmp.find_shortest_separator(a, b)
        assert cmp.compare(a, sep) <= 0
        assert cmp.compare(sep, b) < 0
        assert len(sep) <= len(a)


def test_successor_invariants_random():
    cmp = bytewise_comparator()
    rnd = Random(17)
    for _ in range(500):
        key = _random_key(rnd, rnd.uniform(8))
        succ = cmp.find_short_successor(key)
        assert cmp.compare(succ, key) >= 0
        assert len(succ) <= len(key)