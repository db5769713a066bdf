"""Access to the file system, threads and clock, behind a replaceable interface."""

from __future__ import annotations

import abc
import contextlib
import datetime
import fcntl
import os
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional

from .status import StorageIOError

_READ_CHUNK = 8192
_LOG_LINE_LIMIT = 30000


@contextlib.contextmanager
def _io_errors(name: str) -> Iterator[None]:
    """Turn an OSError raised inside the block into a StorageIOError about ``name``."""
    try:
        yield
    except OSError as exc:
        raise StorageIOError(name, exc.strerror or str(exc)) from exc


class SequentialFile(abc.ABC):
    """A file read from front to back."""

    @abc.abstractmethod
    def read(self, n: int) -> bytes:
        """Return up to ``n`` bytes; fewer (possibly none) at the end of the file."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the file."""

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class RandomAccessFile(abc.ABC):
    """A file read at arbitrary offsets."""

    @abc.abstractmethod
    def size(self) -> int:
        """Return the size of the file when it was opened."""

    @abc.abstractmethod
    def read(self, offset: int, n: int) -> bytes:
        """Return up to ``n`` bytes starting at ``offset``."""

    @abc.abstractmethod
    def close(self) -> None:
        """Release the file."""

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class WritableFile(abc.ABC):
    """A file written sequentially."""

    @abc.abstractmethod
    def append(self, data) -> None:
        """Add ``data`` to the end of the file."""

    @abc.abstractmethod
    def flush(self) -> None:
        """Push buffered data to the operating system."""

    @abc.abstractmethod
    def sync(self) -> None:
        """Make written data durable."""

    @abc.abstractmethod
    def close(self) -> None:
        """Finish writing and release the file."""

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@dataclass
class FileLock:
    """A held lock on a file; give it back with ``Env.unlock_file``."""

    fname: str
    fd: int


class Env(abc.ABC):
    """Everything the storage engine needs from its surroundings."""

    @abc.abstractmethod
    def new_sequential_file(self, fname: str) -> SequentialFile:
        """Open ``fname`` for sequential reading."""

    @abc.abstractmethod
    def new_random_access_file(self, fname: str) -> RandomAccessFile:
        """Open ``fname`` for reading at arbitrary offsets."""

    @abc.abstractmethod
    def new_writable_file(self, fname: str) -> WritableFile:
        """Create or truncate ``fname`` and open it for writing."""

    @abc.abstractmethod
    def file_exists(self, fname: str) -> bool:
        """Return whether ``fname`` exists."""

    @abc.abstractmethod
    def get_children(self, dirname: str) -> List[str]:
        """Return the names of the entries in ``dirname``."""

    @abc.abstractmethod
    def delete_file(self, fname: str) -> None:
        """Remove the file ``fname``."""

    @abc.abstractmethod
    def create_dir(self, name: str) -> None:
        """Create the directory ``name``."""

    @abc.abstractmethod
    def delete_dir(self, name: str) -> None:
        """Remove the empty directory ``name``."""

    @abc.abstractmethod
    def get_file_size(self, fname: str) -> int:
        """Return the size of ``fname`` in bytes."""

    @abc.abstractmethod
    def rename_file(self, src: str, target: str) -> None:
        """Rename ``src`` to ``target``, replacing ``target`` if it exists."""

    @abc.abstractmethod
    def lock_file(self, fname: str) -> FileLock:
        """Create ``fname`` if needed and take an exclusive lock on it."""

    @abc.abstractmethod
    def unlock_file(self, lock: FileLock) -> None:
        """Release a lock taken by ``lock_file``."""

    @abc.abstractmethod
    def schedule(self, function: Callable[..., Any], *args) -> None:
        """Run ``function(*args)`` once on a shared background thread, in call order."""

    @abc.abstractmethod
    def start_thread(self, function: Callable[..., Any], *args) -> None:
        """Run ``function(*args)`` on a new thread."""

    @abc.abstractmethod
    def get_test_directory(self) -> str:
        """Return a directory usable for temporary test data."""

    @abc.abstractmethod
    def logv(self, info_log: WritableFile, fmt: str, *args) -> None:
        """Write a timestamped, formatted line to ``info_log``."""

    @abc.abstractmethod
    def now_micros(self) -> int:
        """Return the current time in microseconds."""

    @abc.abstractmethod
    def sleep_for_microseconds(self, micros: int) -> None:
        """Pause the calling thread for ``micros`` microseconds."""


class EnvWrapper(Env):
    """An Env that forwards every call to another Env; override what differs."""

    def __init__(self, target: Env):
        self._target = target

    def target(self) -> Env:
        """Return the Env calls are forwarded to."""
        return self._target

    def new_sequential_file(self, fname):
        return self._target.new_sequential_file(fname)

    def new_random_access_file(self, fname):
        return self._target.new_random_access_file(fname)

    def new_writable_file(self, fname):
        return self._target.new_writable_file(fname)

    def file_exists(self, fname):
        return self._target.file_exists(fname)

    def get_children(self, dirname):
        return self._target.get_children(dirname)

    def delete_file(self, fname):
        self._target.delete_file(fname)

    def create_dir(self, name):
        self._target.create_dir(name)

    def delete_dir(self, name):
        self._target.delete_dir(name)

    def get_file_size(self, fname):
        return self._target.get_file_size(fname)

    def rename_file(self, src, target):
        self._target.rename_file(src, target)

    def lock_file(self, fname):
        return self._target.lock_file(fname)

    def unlock_file(self, lock):
        self._target.unlock_file(lock)

    def schedule(self, function, *args):
        self._target.schedule(function, *args)

    def start_thread(self, function, *args):
        self._target.start_thread(function, *args)

    def get_test_directory(self):
        return self._target.get_test_directory()

    def logv(self, info_log, fmt, *args):
        self._target.logv(info_log, fmt, *args)

    def now_micros(self):
        return self._target.now_micros()

    def sleep_for_microseconds(self, micros):
        self._target.sleep_for_microseconds(micros)


class _PosixSequentialFile(SequentialFile):
    def __init__(self, fname: str, file):
        self._fname = fname
        self._file = file

    def read(self, n: int) -> bytes:
        with _io_errors(self._fname):
            return self._file.read(n)

    def close(self) -> None:
        self._file.close()


class _PosixRandomAccessFile(RandomAccessFile):
    def __init__(self, fname: str, size: int, fd: int):
        self._fname = fname
        self._size = size
        self._fd: Optional[int] = fd

    def size(self) -> int:
        return self._size

    def read(self, offset: int, n: int) -> bytes:
        if self._fd is None:
            raise StorageIOError(self._fname, "file is closed")
        with _io_errors(self._fname):
            return os.pread(self._fd, n, offset)

    def close(self) -> None:
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None


class _PosixWritableFile(WritableFile):
    def __init__(self, fname: str, file):
        self._fname = fname
        self._file = file

    def _open_file(self):
        if self._file is None:
            raise StorageIOError(self._fname, "file is closed")
        return self._file

    def append(self, data) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        file = self._open_file()
        with _io_errors(self._fname):
            file.write(data)

    def flush(self) -> None:
        file = self._open_file()
        with _io_errors(self._fname):
            file.flush()

    def sync(self) -> None:
        file = self._open_file()
        with _io_errors(self._fname):
            file.flush()
            if hasattr(os, "fdatasync"):
                os.fdatasync(file.fileno())
            else:
                os.fsync(file.fileno())

    def close(self) -> None:
        if self._file is None:
            return
        file, self._file = self._file, None
        with _io_errors(self._fname):
            file.close()


class PosixEnv(Env):
    """An Env backed by the local file system and Python threads."""

    def __init__(self):
        self._lock = threading.Lock()
        self._queue: "queue.Queue[tuple]" = queue.Queue()
        self._bg_thread: Optional[threading.Thread] = None

    def new_sequential_file(self, fname):
        with _io_errors(fname):
            return _PosixSequentialFile(fname, open(fname, "rb"))

    def new_random_access_file(self, fname):
        with _io_errors(fname):
            fd = os.open(fname, os.O_RDONLY)
        try:
            with _io_errors(fname):
                size = os.fstat(fd).st_size
        except StorageIOError:
            os.close(fd)
            raise
        return _PosixRandomAccessFile(fname, size, fd)

    def new_writable_file(self, fname):
        with _io_errors(fname):
            fd = os.open(fname, os.O_CREAT | os.O_RDWR | os.O_TRUNC, 0o644)
            return _PosixWritableFile(fname, os.fdopen(fd, "wb"))

    def file_exists(self, fname):
        return os.access(fname, os.F_OK)

    def get_children(self, dirname):
        """Return the entries of ``dirname``, including ``.`` and ``..``."""
        with _io_errors(dirname):
            names = os.listdir(dirname)
        return [".", ".."] + names

    def delete_file(self, fname):
        with _io_errors(fname):
            os.unlink(fname)

    def create_dir(self, name):
        with _io_errors(name):
            os.mkdir(name, 0o755)

    def delete_dir(self, name):
        with _io_errors(name):
            os.rmdir(name)

    def get_file_size(self, fname):
        with _io_errors(fname):
            return os.stat(fname).st_size

    def rename_file(self, src, target):
        with _io_errors(src):
            os.replace(src, target)

    def lock_file(self, fname):
        with _io_errors(fname):
            fd = os.open(fname, os.O_RDWR | os.O_CREAT, 0o644)
        try:
            fcntl.lockf(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            os.close(fd)
            raise StorageIOError("lock " + fname, exc.strerror or str(exc)) from exc
        return FileLock(fname, fd)

    def unlock_file(self, lock):
        try:
            fcntl.lockf(lock.fd, fcntl.LOCK_UN)
        except OSError as exc:
            raise StorageIOError(exc.strerror or str(exc)) from exc
        finally:
            os.close(lock.fd)

    def _bg_loop(self) -> None:
        while True:
            function, args = self._queue.get()
            function(*args)

    def schedule(self, function, *args):
        with self._lock:
            if self._bg_thread is None:
                self._bg_thread = threading.Thread(target=self._bg_loop, daemon=True)
                self._bg_thread.start()
            self._queue.put((function, args))

    def start_thread(self, function, *args):
        threading.Thread(target=function, args=args, daemon=True).start()

    def get_test_directory(self):
        result = os.environ.get("TEST_TMPDIR", "")
        if not result:
            result = f"/tmp/leveldbtest-{os.geteuid()}"
        # The directory may already exist.
        with contextlib.suppress(StorageIOError):
            self.create_dir(result)
        return result

    def logv(self, info_log, fmt, *args):
        now = datetime.datetime.now()
        header = "%04d/%02d/%02d-%02d:%02d:%02d.%06d %x " % (
            now.year, now.month, now.day, now.hour, now.minute, now.second,
            now.microsecond, threading.get_ident(),
        )
        message = fmt % args if args else fmt
        line = (header + message).encode("utf-8", "backslashreplace")
        if len(line) >= _LOG_LINE_LIMIT:
            line = line[:_LOG_LINE_LIMIT - 1]
        if not line.endswith(b"\n"):
            line += b"\n"
        info_log.append(line)
        info_log.flush()

    def now_micros(self):
        return time.time_ns() // 1000

    def sleep_for_microseconds(self, micros):
        time.sleep(max(micros, 0) / 1_000_000)


_default_env: Optional[PosixEnv] = None
_default_lock = threading.Lock()


def default_env() -> Env:
    """Return the process-wide Env, creating it on first use."""
    global _default_env
    with _default_lock:
        if _default_env is None:
            _default_env = PosixEnv()
        return _default_env


def log(env: Env, info_log: WritableFile, fmt: str, *args) -> None:
    """Write a formatted line to ``info_log`` through ``env``."""
    env.logv(info_log, fmt, *args)


def write_string_to_file(env: Env, data, fname: str) -> None:
    """Write ``data`` to a new file ``fname``; the file is removed on failure."""
    file = env.new_writable_file(fname)
    try:
        try:
            file.append(data)
        finally:
            file.close()
    except StorageIOError:
        with contextlib.suppress(StorageIOError):
            env.delete_file(fname)
        raise


def read_file_to_string(env: Env, fname: str) -> bytes:
    """Return the whole contents of ``fname``."""
    chunks = []
    with env.new_sequential_file(fname) as file:
        while True:
            fragment = file.read(_READ_CHUNK)
            if not fragment:
                break
            chunks.append(fragment)
    return b"".join(chunks)