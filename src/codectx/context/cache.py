"""Modification-time validated file content cache.

Entries are keyed by absolute path and are only served while the file's
on-disk ``st_mtime_ns`` equals the stored one. Disk reads happen outside any
lock, so reads of different files never wait on each other; the lock only
guards the entry map itself.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

logger = logging.getLogger("codectx.context.cache")


class ReadWriteLock:
    """Read-preferring reader/writer lock.

    Any number of readers may hold the lock together; a writer holds it alone.
    Readers are admitted whenever no writer is active, so a steady stream of
    readers can delay a writer.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


@dataclass(frozen=True)
class CacheEntry:
    """Content of `path` as it was when the file had modification time `mtime_ns`."""

    path: str
    content: str
    mtime_ns: int


class FileCache:
    """Thread-safe cache of file contents, invalidated by modification time.

    Entries are never evicted; the cache lives as long as its owner.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._lock = ReadWriteLock()
        self._stats_lock = threading.Lock()
        self.hits = 0
        self.reads = 0

    def get_content(self, path: str | os.PathLike[str]) -> str:
        """Return the text of `path`, reading it from disk only when needed.

        Raises:
            OSError: The file could not be read. Nothing is cached.
        """
        key = os.path.abspath(path)

        with self._lock.read():
            entry = self._entries.get(key)

        if entry is not None:
            if self._mtime_ns(key) == entry.mtime_ns:
                with self._stats_lock:
                    self.hits += 1
                logger.debug("cache hit: %s", key)
                return entry.content

        before = self._mtime_ns(key)
        content = self._read(key)
        mtime_ns = self._mtime_ns(key)

        if mtime_ns is None or mtime_ns != before:
            logger.debug("%s changed or vanished while reading, not caching", key)
            return content

        with self._lock.write():
            self._entries[key] = CacheEntry(path=key, content=content, mtime_ns=mtime_ns)
        logger.debug("cached %s (%d chars)", key, len(content))
        return content

    @staticmethod
    def _mtime_ns(path: str) -> int | None:
        try:
            return os.stat(path).st_mtime_ns
        except OSError:
            return None

    def _read(self, path: str) -> str:
        with self._stats_lock:
            self.reads += 1
        with open(path, encoding="utf-8", errors="replace") as fh:
            return fh.read()

    def get_entry(self, path: str | os.PathLike[str]) -> CacheEntry | None:
        """Return the stored entry for `path` without validating it."""
        with self._lock.read():
            return self._entries.get(os.path.abspath(path))

    def invalidate(self, path: str | os.PathLike[str]) -> bool:
        """Drop the entry for `path`. Returns True if one was stored."""
        with self._lock.write():
            return self._entries.pop(os.path.abspath(path), None) is not None

    def clear(self) -> None:
        with self._lock.write():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        with self._lock.read():
            return os.path.abspath(path) in self._entries
