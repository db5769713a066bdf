import os
import re
import threading

import pytest

from ldbutil.env import (
    EnvWrapper,
    PosixEnv,
    WritableFile,
    default_env,
    log,
    read_file_to_string,
    write_string_to_file,
)
from ldbutil.status import StorageIOError

WAIT_SECONDS = 5.0


@pytest.fixture
def env():
    return default_env()


def test_default_env_is_shared(tmp_path):
    first = default_env()
    second = default_env()
    assert second is first
    assert first.file_exists(str(tmp_path)) is True
    assert second.file_exists(str(tmp_path / "absent")) is False


def test_run_immediately(env):
    called = threading.Event()
    env.schedule(called.set)
    assert called.wait(WAIT_SECONDS)


def test_run_many_in_order(env):
    order = []
    stamps = []
    done = threading.Event()
    start = env.now_micros()

    def run(i):
        order.append(i)
        stamps.append(env.now_micros())
        if i == 4:
            done.set()

    for i in (1, 2, 3, 4):
        env.schedule(run, i)
    assert done.wait(WAIT_SECONDS)
    assert order == [1, 2, 3, 4]
    assert len(stamps) == 4
    assert stamps == sorted(stamps)
    assert stamps[0] >= start


def test_start_thread(env):
    lock = threading.Lock()
    state = {"val": 0, "num_running": 3}
    stamps = []
    start = env.now_micros()

    def body():
        with lock:
            state["val"] += 1
            state["num_running"] -= 1
            stamps.append(env.now_micros())

    for _ in range(3):
        env.start_thread(body)
    for _ in range(500):
        with lock:
            if state["num_running"] == 0:
                break
        env.sleep_for_microseconds(10000)
    assert state == {"val": 3, "num_running": 0}
    assert len(stamps) == 3
    assert min(stamps) >= start


def test_write_and_read_round_trip(env, tmp_path):
    fname = str(tmp_path / "data")
    payload = bytes(range(256)) * 100
    write_string_to_file(env, payload, fname)
    assert env.file_exists(fname)
    assert env.get_file_size(fname) == len(payload)
    assert read_file_to_string(env, fname) == payload


def test_random_access_read(env, tmp_path):
    fname = str(tmp_path / "ra")
    write_string_to_file(env, b"hello world", fname)
    with env.new_random_access_file(fname) as f:
        assert f.size() == 11
        assert f.read(6, 5) == b"world"
        assert f.read(9, 10) == b"ld"


def test_sequential_read_reaches_end(env, tmp_path):
    fname = str(tmp_path / "seq")
    write_string_to_file(env, b"abcdef", fname)
    with env.new_sequential_file(fname) as f:
        assert f.read(4) == b"abcd"
        assert f.read(4) == b"ef"
        assert f.read(4) == b""


def test_missing_file_raises(env, tmp_path):
    fname = str(tmp_path / "missing")
    with pytest.raises(StorageIOError) as info:
        env.new_sequential_file(fname)
    assert str(info.value).startswith("IO error: " + fname)
    with pytest.raises(StorageIOError):
        env.get_file_size(fname)
    with pytest.raises(StorageIOError):
        env.delete_file(fname)


def test_directory_operations(env, tmp_path):
    d = str(tmp_path / "sub")
    env.create_dir(d)
    with pytest.raises(StorageIOError):
        env.create_dir(d)
    write_string_to_file(env, b"x", os.path.join(d, "a"))
    children = env.get_children(d)
    assert sorted(children) == [".", "..", "a"]
    env.rename_file(os.path.join(d, "a"), os.path.join(d, "b"))
    assert sorted(env.get_children(d)) == [".", "..", "b"]
    env.delete_file(os.path.join(d, "b"))
    env.delete_dir(d)
    assert not env.file_exists(d)


def test_writable_file_sync_and_close(env, tmp_path):
    fname = str(tmp_path / "w")
    f = env.new_writable_file(fname)
    f.append(b"abc")
    f.sync()
    f.append(b"def")
    f.close()
    assert read_file_to_string(env, fname) == b"abcdef"
    with pytest.raises(StorageIOError):
        f.append(b"more")


def test_lock_and_unlock(env, tmp_path):
    fname = str(tmp_path / "LOCK")
    lock = env.lock_file(fname)
    assert env.file_exists(fname)
    assert lock.fname == fname
    env.unlock_file(lock)
    again = env.lock_file(fname)
    env.unlock_file(again)
    assert again.fname == fname


def test_log_line_format(env, tmp_path):
    fname = str(tmp_path / "LOG")
    with env.new_writable_file(fname) as info_log:
        log(env, info_log, "value %d of %s", 42, "items")
        log(env, info_log, "already ends\n")
    lines = read_file_to_string(env, fname).decode().splitlines(keepends=True)
    assert len(lines) == 2
    pattern = r"\d{4}/\d{2}/\d{2}-\d{2}:\d{2}:\d{2}\.\d{6} [0-9a-f]+ "
    assert re.fullmatch(pattern + r"value 42 of items\n", lines[0])
    assert re.fullmatch(pattern + r"already ends\n", lines[1])


def test_log_truncates_long_lines(env, tmp_path):
    fname = str(tmp_path / "LOG")
    with env.new_writable_file(fname) as info_log:
        log(env, info_log, "%s", "y" * 50000)
    content = read_file_to_string(env, fname)
    assert len(content) == 30000
    assert content.endswith(b"y\n")


def test_now_micros_advances(env):
    start = env.now_micros()
    env.sleep_for_microseconds(2000)
    assert env.now_micros() - start >= 2000


def test_get_test_directory_uses_variable(monkeypatch, tmp_path):
    target = str(tmp_path / "testdir")
    monkeypatch.setenv("TEST_TMPDIR", target)
    env = PosixEnv()
    assert env.get_test_directory() == target
    assert os.path.isdir(target)
    assert env.get_test_directory() == target


class _FailingFile(WritableFile):
    def __init__(self, inner):
        self._inner = inner

    def append(self, data):
        raise StorageIOError("failing", "append refused")

    def flush(self):
        self._inner.flush()

    def sync(self):
        self._inner.sync()

    def close(self):
        self._inner.close()


class _FailingEnv(EnvWrapper):
    def new_writable_file(self, fname):
        return _FailingFile(self.target().new_writable_file(fname))


def test_env_wrapper_forwards(env, tmp_path):
    wrapper = EnvWrapper(env)
    assert wrapper.target() is env
    fname = str(tmp_path / "wrapped")
    write_string_to_file(wrapper, b"through", fname)
    assert read_file_to_string(env, fname) == b"through"
    assert wrapper.get_file_size(fname) == 7


def test_write_failure_removes_file(env, tmp_path):
    fname = str(tmp_path / "broken")
    failing = _FailingEnv(env)
    with pytest.raises(StorageIOError, match="append refused"):
        write_string_to_file(failing, b"data", fname)
    assert not env.file_exists(fname)