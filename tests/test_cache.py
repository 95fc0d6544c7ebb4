"""Tests for the modification-time validated file cache."""

from __future__ import annotations

import os
import threading
from pathlib import Path

import pytest

from codectx.context.cache import FileCache, ReadWriteLock


def _bump_mtime(path: Path, seconds: int = 5) -> None:
    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


class TestFileCache:
    def test_read_and_cache(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_text("hello")
        cache = FileCache()

        assert cache.get_content(f) == "hello"
        assert cache.reads == 1
        assert str(f) in cache
        assert len(cache) == 1

    def test_second_call_does_not_read(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_text("hello")
        cache = FileCache()

        first = cache.get_content(f)
        second = cache.get_content(f)

        assert first == second == "hello"
        assert cache.reads == 1
        assert cache.hits == 1

    def test_modified_file_is_reread(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_text("old")
        cache = FileCache()
        assert cache.get_content(f) == "old"

        f.write_text("new content")
        _bump_mtime(f)

        assert cache.get_content(f) == "new content"
        assert cache.reads == 2
        entry = cache.get_entry(f)
        assert entry is not None
        assert entry.content == "new content"
        assert entry.mtime_ns == f.stat().st_mtime_ns

    def test_older_mtime_also_invalidates(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_text("one")
        cache = FileCache()
        cache.get_content(f)

        f.write_text("two")
        _bump_mtime(f, seconds=-60)

        assert cache.get_content(f) == "two"

    def test_relative_and_absolute_paths_share_entry(self, tmp_path: Path, monkeypatch):
        f = tmp_path / "a.txt"
        f.write_text("x")
        monkeypatch.chdir(tmp_path)
        cache = FileCache()

        cache.get_content("a.txt")
        cache.get_content(f)
        assert cache.reads == 1
        assert len(cache) == 1

    def test_missing_file_raises_and_caches_nothing(self, tmp_path: Path):
        cache = FileCache()
        with pytest.raises(FileNotFoundError):
            cache.get_content(tmp_path / "missing.txt")
        assert len(cache) == 0

    def test_deleted_file_raises(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_text("here")
        cache = FileCache()
        cache.get_content(f)

        f.unlink()
        with pytest.raises(FileNotFoundError):
            cache.get_content(f)

    def test_directory_raises(self, tmp_path: Path):
        cache = FileCache()
        with pytest.raises(OSError):
            cache.get_content(tmp_path)

    def test_undecodable_bytes_are_replaced(self, tmp_path: Path):
        f = tmp_path / "bin.dat"
        f.write_bytes(b"ok\xff")
        assert FileCache().get_content(f) == "ok\ufffd"

    def test_file_changed_during_read_is_not_cached(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_text("v1")
        cache = FileCache()
        real_read = cache._read

        def read_then_modify(path: str) -> str:
            content = real_read(path)
            if content == "v1":
                f.write_text("v2")
                _bump_mtime(f)
            return content

        cache._read = read_then_modify
        assert cache.get_content(f) == "v1"
        assert cache.get_entry(f) is None

        assert cache.get_content(f) == "v2"
        assert cache.get_content(f) == "v2"
        assert cache.hits == 1

    def test_invalidate_and_clear(self, tmp_path: Path):
        f = tmp_path / "a.txt"
        f.write_text("x")
        cache = FileCache()
        cache.get_content(f)

        assert cache.invalidate(f) is True
        assert cache.invalidate(f) is False
        cache.get_content(f)
        cache.clear()
        assert len(cache) == 0

    def test_concurrent_reads(self, tmp_path: Path):
        paths = []
        for i in range(20):
            p = tmp_path / f"f{i}.txt"
            p.write_text(f"content {i}")
            paths.append(p)
        cache = FileCache()
        errors: list[str] = []

        def worker():
            for i, p in enumerate(paths):
                if cache.get_content(p) != f"content {i}":
                    errors.append(str(p))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        assert errors == []
        assert len(cache) == 20

    def test_slow_read_does_not_block_other_files(self, tmp_path: Path):
        slow = tmp_path / "slow.txt"
        fast = tmp_path / "fast.txt"
        slow.write_text("slow")
        fast.write_text("fast")

        cache = FileCache()
        started = threading.Event()
        release = threading.Event()
        real_read = cache._read

        def blocking_read(path: str) -> str:
            if path.endswith("slow.txt"):
                started.set()
                release.wait(5)
            return real_read(path)

        cache._read = blocking_read
        result: list[str] = []
        t = threading.Thread(target=lambda: result.append(cache.get_content(slow)))
        t.start()
        assert started.wait(5)

        # The slow read is in progress; another file must still be served
        assert cache.get_content(fast) == "fast"
        assert not release.is_set()

        release.set()
        t.join(5)
        assert result == ["slow"]


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(2, timeout=5)

        def reader():
            with lock.read():
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)
        assert not inside.broken

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events: list[str] = []
        writer_in = threading.Event()

        def reader():
            writer_in.wait(5)
            with lock.read():
                events.append("read")

        t = threading.Thread(target=reader)
        t.start()
        with lock.write():
            writer_in.set()
            t.join(0.2)
            events.append("write-done")
        t.join(5)

        assert events == ["write-done", "read"]
