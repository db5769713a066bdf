"""Orderings over byte-string keys."""

from __future__ import annotations

import abc


class Comparator(abc.ABC):
    """A total order over keys, with helpers for shortening index keys."""

    @abc.abstractmethod
    def name(self) -> str:
        """Return the name identifying this ordering."""

    @abc.abstractmethod
    def compare(self, a: bytes, b: bytes) -> int:
        """Return a negative, zero or positive value as ``a`` is below, equal to or above ``b``."""

    @abc.abstractmethod
    def find_shortest_separator(self, start: bytes, limit: bytes) -> bytes:
        """Return a short key ``k`` with ``start <= k < limit`` where possible, else ``start``."""

    @abc.abstractmethod
    def find_short_successor(self, key: bytes) -> bytes:
        """Return a short key that is ``>= key``."""


class BytewiseComparator(Comparator):
    """Lexicographic order of unsigned bytes."""

    def name(self) -> str:
        return "leveldb.BytewiseComparator"

    def compare(self, a: bytes, b: bytes) -> int:
        a, b = bytes(a), bytes(b)
        return (a > b) - (a < b)

    def find_shortest_separator(self, start: bytes, limit: bytes) -> bytes:
        start, limit = bytes(start), bytes(limit)
        diff_index = 0
        for x, y in zip(start, limit):
            if x != y:
                break
            diff_index += 1
        if diff_index >= min(len(start), len(limit)):
            # One is a prefix of the other: do not shorten.
            return start
        diff_byte = start[diff_index]
        if diff_byte < 0xFF and diff_byte + 1 < limit[diff_index]:
            return start[:diff_index] + bytes([diff_byte + 1])
        return start

    def find_short_successor(self, key: bytes) -> bytes:
        key = bytes(key)
        for i, byte in enumerate(key):
            if byte != 0xFF:
                return key[:i] + bytes([byte + 1])
        # A run of 0xff bytes has no shorter successor.
        return key


_BYTEWISE = BytewiseComparator()


def bytewise_comparator() -> BytewiseComparator:
    """Return the shared bytewise comparator."""
    return _BYTEWISE