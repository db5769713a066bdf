"""A simple, reproducible pseudo-random number generator."""

from __future__ import annotations

_M = 2147483647  # 2**31 - 1
_A = 16807


class Random:
    """Lehmer generator cycling through [1, 2**31 - 2] for a non-zero seed."""

    def __init__(self, seed: int):
        self._seed = seed & 0x7FFFFFFF

    def next(self) -> int:
        """Advance the generator and return the new state."""
        product = self._seed * _A
        seed = (product >> 31) + (product & _M)
        if seed > _M:
            seed -= _M
        self._seed = seed
        return seed

    def uniform(self, n: int) -> int:
        """Return a value uniformly distributed in ``[0, n)``."""
        if n <= 0:
            raise ValueError("n must be positive")
        return self.next() % n

    def one_in(self, n: int) -> bool:
        """Return True roughly once in every ``n`` calls."""
        if n <= 0:
            raise ValueError("n must be positive")
        return self.next() % n == 0

    def skewed(self, max_log: int) -> int:
        """Return a value in ``[0, 2**max_log)`` biased towards small numbers."""
        if max_log < 0:
            raise ValueError("max_log must not be negative")
        return self.uniform(1 << self.uniform(max_log + 1))