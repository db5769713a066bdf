"""A bump allocator handing out slices of large pre-allocated blocks."""

from __future__ import annotations

from typing import List, Optional

_BLOCK_SIZE = 4096
_ALIGN = 8
_POINTER_SIZE = 8


class Arena:
    """Carves small writable buffers out of 4 KiB blocks.

    Allocations larger than a quarter block get a block of their own so
    that little space is wasted at the end of a shared block.
    """

    def __init__(self):
        self._blocks: List[bytearray] = []
        self._blocks_memory = 0
        self._current: Optional[bytearray] = None
        self._pos = 0
        self._remaining = 0

    def _new_block(self, size: int) -> bytearray:
        block = bytearray(size)
        self._blocks.append(block)
        self._blocks_memory += size
        return block

    def _fallback(self, nbytes: int) -> memoryview:
        if nbytes > _BLOCK_SIZE // 4:
            return memoryview(self._new_block(nbytes))
        # The rest of the current block is abandoned.
        self._current = self._new_block(_BLOCK_SIZE)
        self._pos = nbytes
        self._remaining = _BLOCK_SIZE - nbytes
        return memoryview(self._current)[0:nbytes]

    def allocate(self, nbytes: int) -> memoryview:
        """Return a writable buffer of ``nbytes`` bytes; zero is not allowed."""
        if nbytes <= 0:
            raise ValueError("allocation size must be positive")
        if nbytes <= self._remaining:
            start = self._pos
            self._pos += nbytes
            self._remaining -= nbytes
            return memoryview(self._current)[start:start + nbytes]
        return self._fallback(nbytes)

    def allocate_aligned(self, nbytes: int) -> memoryview:
        """Like ``allocate``, but the buffer starts on an 8-byte boundary of its block."""
        if nbytes <= 0:
            raise ValueError("allocation size must be positive")
        slop = (-self._pos) % _ALIGN
        needed = nbytes + slop
        if needed <= self._remaining:
            start = self._pos + slop
            self._pos += needed
            self._remaining -= needed
            return memoryview(self._current)[start:start + nbytes]
        # Fresh blocks always start aligned.
        return self._fallback(nbytes)

    def memory_usage(self) -> int:
        """Estimate the bytes held by the arena, including unused block space."""
        return self._blocks_memory + len(self._blocks) * _POINTER_SIZE