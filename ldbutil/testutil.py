"""Helpers for tests: random data generators and an error-injecting Env."""

from __future__ import annotations

import os
import re

from .env import EnvWrapper, WritableFile, default_env
from .rng import Random
from .status import StorageIOError

_TEST_CHARS = b"\x00\x01abcde\xfd\xfe\xff"
_DEFAULT_SEED = 301
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def random_string(rnd: Random, length: int) -> bytes:
    """Return ``length`` random printable ASCII bytes (space through tilde)."""
    return bytes(0x20 + rnd.uniform(95) for _ in range(length))


def random_key(rnd: Random, length: int) -> bytes:
    """Return a random key of ``length`` bytes drawn from boundary-heavy characters."""
    return bytes(_TEST_CHARS[rnd.uniform(len(_TEST_CHARS))] for _ in range(length))


def compressible_string(rnd: Random, compressed_fraction: float, length: int) -> bytes:
    """Return ``length`` bytes that compress to about ``length * compressed_fraction``.

    A random chunk of that size is repeated until the length is reached.
    """
    raw = max(int(length * compressed_fraction), 1)
    chunk = random_string(rnd, raw)
    repeats = -(-length // raw) if length > 0 else 0
    return (chunk * repeats)[:length]


class ErrorEnv(EnvWrapper):
    """An Env over the default one that can be told to fail file creation."""

    def __init__(self):
        super().__init__(default_env())
        self.writable_file_error = False
        self.num_writable_file_errors = 0

    def new_writable_file(self, fname: str) -> WritableFile:
        if self.writable_file_error:
            self.num_writable_file_errors += 1
            raise StorageIOError(fname, "fake error")
        return self.target().new_writable_file(fname)


def tmp_dir() -> str:
    """Return the directory to use for temporary test data."""
    return default_env().get_test_directory()


def random_seed() -> int:
    """Return the seed for randomized tests, from ``TEST_RANDOM_SEED`` or 301."""
    text = os.environ.get("TEST_RANDOM_SEED")
    result = 0
    if text is not None:
        match = _LEADING_INT.match(text)
        if match:
            result = int(match.group(1))
    if result <= 0:
        result = _DEFAULT_SEED
    return result