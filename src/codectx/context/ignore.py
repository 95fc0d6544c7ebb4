"""Ignore rules shared by every traversal-based operation."""

from __future__ import annotations

import fnmatch
import logging
import os
import stat
from pathlib import Path
from typing import Iterable

from codectx.context.cache import ReadWriteLock

logger = logging.getLogger("codectx.context.ignore")

DEFAULT_IGNORE_DIRS: tuple[str, ...] = (
    ".git",
    "node_modules",
    "__pycache__",
    "venv",
    ".env",
    ".venv",
)

DEFAULT_IGNORE_FILES: tuple[str, ...] = (".DS_Store", "*.pyc", "*.o", "*.out", "*.log")

# Unioned into the directory set on Kali Linux hosts
SECURITY_DISTRO_IGNORE_DIRS: tuple[str, ...] = (
    ".msf4",
    "metasploit-framework",
    "wordlists",
    "exploitdb",
)

OS_RELEASE = Path("/etc/os-release")


def is_security_distro(os_release: Path = OS_RELEASE) -> bool:
    """Whether the host identifies itself as Kali Linux."""
    try:
        return "ID=kali" in os_release.read_text(errors="replace")
    except OSError:
        return False


class IgnoreRules:
    """Directory-name literals and file glob patterns to exclude.

    Directories match on exact base name, files match any glob against their
    base name. Rules can be added at runtime but never removed.
    """

    def __init__(
        self,
        dirs: Iterable[str] = DEFAULT_IGNORE_DIRS,
        file_patterns: Iterable[str] = DEFAULT_IGNORE_FILES,
        security_distro: bool | None = None,
    ) -> None:
        self._dirs: set[str] = set(dirs)
        self._file_patterns: list[str] = list(file_patterns)
        self._lock = ReadWriteLock()

        if security_distro is None:
            security_distro = is_security_distro()
        self.security_distro = security_distro
        if security_distro:
            self._dirs.update(SECURITY_DISTRO_IGNORE_DIRS)

    @property
    def dirs(self) -> frozenset[str]:
        with self._lock.read():
            return frozenset(self._dirs)

    @property
    def file_patterns(self) -> tuple[str, ...]:
        with self._lock.read():
            return tuple(self._file_patterns)

    def add_ignore_pattern(self, pattern: str) -> None:
        """Add a rule. A trailing path separator makes it a directory name."""
        if pattern.endswith(("/", os.sep)):
            name = pattern.rstrip("/" + os.sep)
            if not name:
                return
            with self._lock.write():
                self._dirs.add(name)
            logger.debug("ignoring directory name %r", name)
        else:
            with self._lock.write():
                self._file_patterns.append(pattern)
            logger.debug("ignoring file pattern %r", pattern)

    def should_ignore(self, path: str | os.PathLike[str]) -> bool:
        """Whether `path` is excluded.

        A path that cannot be stat'ed is never ignored.
        """
        try:
            is_dir = stat.S_ISDIR(os.stat(path).st_mode)
        except OSError:
            return False
        return self.matches(os.path.basename(os.fspath(path).rstrip("/" + os.sep)), is_dir)

    def matches(self, name: str, is_dir: bool) -> bool:
        """Match a base name against the rules without touching the filesystem."""
        with self._lock.read():
            if is_dir:
                return name in self._dirs
            patterns = list(self._file_patterns)
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)
