"""A reference-counted cache with least-recently-used eviction."""

from __future__ import annotations

import abc
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional

Deleter = Callable[[bytes, Any], None]


@dataclass(eq=False)
class Handle:
    """An entry pinned in a cache; give it back with ``Cache.release``."""

    key: bytes
    value: Any
    charge: int
    deleter: Deleter
    refs: int = 0


class Cache(abc.ABC):
    """Maps byte keys to values, each entry costing a charge against a capacity."""

    @abc.abstractmethod
    def insert(self, key, value, charge, deleter) -> Handle:
        """Add an entry, replacing any with the same key; return a pinned handle."""

    @abc.abstractmethod
    def lookup(self, key) -> Optional[Handle]:
        """Return a pinned handle for ``key``, or None if it is absent."""

    @abc.abstractmethod
    def release(self, handle: Handle) -> None:
        """Unpin a handle returned by ``insert`` or ``lookup``."""

    @abc.abstractmethod
    def value(self, handle: Handle) -> Any:
        """Return the value held by a pinned handle."""

    @abc.abstractmethod
    def erase(self, key) -> None:
        """Drop ``key``; its entry lives on until outstanding handles are released."""

    @abc.abstractmethod
    def new_id(self) -> int:
        """Return a number not returned before by this cache."""


class LRUCache(Cache):
    """Thread-safe cache that evicts the least recently used entries first."""

    def __init__(self, capacity: int):
        self._capacity = capacity
        self._lock = threading.Lock()
        self._usage = 0
        self._last_id = 0
        # Ordered oldest first; doubles as the key index.
        self._table: "OrderedDict[bytes, Handle]" = OrderedDict()

    def _unref(self, entry: Handle) -> None:
        if entry.refs <= 0:
            raise ValueError("handle has already been released")
        entry.refs -= 1
        if entry.refs == 0:
            self._usage -= entry.charge
            entry.deleter(entry.key, entry.value)

    def insert(self, key, value, charge, deleter) -> Handle:
        key = bytes(key)
        entry = Handle(key, value, charge, deleter, refs=2)
        with self._lock:
            old = self._table.pop(key, None)
            self._table[key] = entry
            self._usage += charge
            if old is not None:
                self._unref(old)
            while self._usage > self._capacity and self._table:
                _, victim = self._table.popitem(last=False)
                self._unref(victim)
        return entry

    def lookup(self, key) -> Optional[Handle]:
        key = bytes(key)
        with self._lock:
            entry = self._table.get(key)
            if entry is None:
                return None
            entry.refs += 1
            self._table.move_to_end(key)
            return entry

    def release(self, handle: Handle) -> None:
        with self._lock:
            self._unref(handle)

    def value(self, handle: Handle) -> Any:
        return handle.value

    def erase(self, key) -> None:
        key = bytes(key)
        with self._lock:
            entry = self._table.pop(key, None)
            if entry is not None:
                self._unref(entry)

    def new_id(self) -> int:
        with self._lock:
            self._last_id += 1
            return self._last_id

    def close(self) -> None:
        """Drop every entry, calling deleters of those no longer pinned."""
        with self._lock:
            entries = list(self._table.values())
            self._table.clear()
            for entry in entries:
                self._unref(entry)

    def __enter__(self) -> "LRUCache":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def new_lru_cache(capacity: int) -> LRUCache:
    """Return an empty LRU cache holding at most ``capacity`` total charge."""
    return LRUCache(capacity)