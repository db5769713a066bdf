# ldbutil

Low-level building blocks for a log-structured key-value store.
Pure Python, no third-party dependencies, Python 3.10 or later. The
environment module uses `fcntl`, so the package runs on POSIX systems.

## Modules

| Module | Contents |
| --- | --- |
| `ldbutil.status` | `StatusCode` and the exception hierarchy: `StatusError`, `NotFoundError`, `CorruptionError`, `NotSupportedError`, `InvalidArgumentError`, `StorageIOError` |
| `ldbutil.coding` | Little-endian fixed-width integers, varints and length-prefixed byte strings |
| `ldbutil.hashing` | `hash_bytes(data, seed=0)`, a 32-bit hash for in-memory tables |
| `ldbutil.rng` | `Random`, a small deterministic Lehmer generator |
| `ldbutil.textutil` | `number_to_string`, `escape_string`, `consume_char`, `consume_decimal_number` |
| `ldbutil.crc32c` | CRC-32C checksums (`value`, `extend`) and `mask` / `unmask` for stored checksums |
| `ldbutil.comparator` | `Comparator`, `BytewiseComparator` and `bytewise_comparator()` |
| `ldbutil.arena` | `Arena`, a bump allocator handing out `memoryview` slices of 4 KiB blocks |
| `ldbutil.cache` | `Cache`, `LRUCache`, `Handle` and `new_lru_cache(capacity)` |
| `ldbutil.histogram` | `Histogram`, bucketed statistics with a text report via `str()` |
| `ldbutil.env` | `Env`, `EnvWrapper`, `PosixEnv`, file classes, `FileLock`, `default_env()`, `log`, `write_string_to_file`, `read_file_to_string` |
| `ldbutil.testutil` | `random_string`, `random_key`, `compressible_string`, `ErrorEnv`, `tmp_dir`, `random_seed` |

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

### Binary coding

Encoders return `bytes`; decoders return the value together with the offset
just past it, and raise `ValueError` on truncated or malformed input.

```python
from ldbutil.coding import (
    decode_length_prefixed,
    decode_varint64,
    encode_length_prefixed,
    encode_varint64,
)

data = encode_varint64(300) + encode_length_prefixed(b"foo")
value, offset = decode_varint64(data, 0, len(data))
assert value == 300
text, offset = decode_length_prefixed(data, offset)
assert text == b"foo" and offset == len(data)
```

### Checksums

```python
from ldbutil import crc32c

crc = crc32c.value(b"hello world")
assert crc32c.extend(crc32c.value(b"hello "), b"world") == crc
assert crc32c.unmask(crc32c.mask(crc)) == crc
```

### Comparator

```python
from ldbutil.comparator import bytewise_comparator

cmp = bytewise_comparator()
assert cmp.compare(b"abc", b"abd") < 0
assert cmp.find_shortest_separator(b"abcdef", b"abzzz") == b"abd"
assert cmp.find_short_successor(b"abc") == b"b"
```

### LRU cache with pinned entries

Each entry carries a charge against the capacity. `insert` and `lookup`
return a pinned `Handle` that must be given back with `release`. An entry's
deleter is called once it has been evicted or erased and every handle to it
has been released. `close()` (or leaving a `with` block) drops all entries.

```python
from ldbutil.cache import new_lru_cache

with new_lru_cache(100) as cache:
    handle = cache.insert(b"key", "value", 1, lambda key, value: None)
    assert cache.value(handle) == "value"
    cache.release(handle)

    found = cache.lookup(b"key")
    if found is not None:
        print(cache.value(found))
        cache.release(found)
```

### Histograms

```python
from ldbutil.histogram import Histogram

h = Histogram()
for micros in (3, 7, 12, 150):
    h.add(micros)
print(h.median(), h.percentile(99.0), h.average())
print(h)
```

### Files through the environment

`default_env()` returns a shared `PosixEnv`. Its file objects work as
context managers. `schedule` runs callables in order on one background
thread; `start_thread` runs each on its own thread.

```python
from ldbutil.env import default_env, read_file_to_string, write_string_to_file

env = default_env()
write_string_to_file(env, b"payload", "/tmp/example.dat")
assert read_file_to_string(env, "/tmp/example.dat") == b"payload"

lock = env.lock_file("/tmp/example.lock")
env.unlock_file(lock)
```

`EnvWrapper` forwards every call to another `Env`, so a subclass only
overrides what should differ; `testutil.ErrorEnv` uses this to make
`new_writable_file` fail on demand.

## Errors

Failures are raised as subclasses of `ldbutil.status.StatusError`. `str()`
of an error starts with its kind, e.g. `IO error: /path: No such file or
directory`. File-system failures raise `StorageIOError`.

## What this package does not do

This is a toolkit, not a database: there is no memtable, write-ahead log,
sorted table format, compaction or key-value API, and no command-line tool.
The pieces here are the utilities such a store is built on.