"""Project tree traversal: structure listings and candidate file search."""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Callable, Iterator

from codectx.context.ignore import IgnoreRules
from codectx.exceptions import OperationCancelledError, ProjectRootError

logger = logging.getLogger("codectx.context.walker")

STRUCTURE_HEADER = "Project Structure:"


@dataclass(frozen=True)
class WalkEntry:
    """A non-ignored file or directory found under the project root."""

    path: str  # absolute
    rel_path: str
    name: str
    depth: int  # 0 for direct children of the root
    is_dir: bool


class ProjectWalker:
    """Walks a project root, pruning ignored directories and skipping ignored files.

    Entries are visited depth-first in lexical name order. Entries that cannot
    be listed or stat'ed are skipped rather than failing the walk.
    """

    def __init__(self, root: str | os.PathLike[str], ignore: IgnoreRules) -> None:
        self.root = os.path.abspath(root)
        self.ignore = ignore

    def walk(self, cancel: threading.Event | None = None) -> Iterator[WalkEntry]:
        """Yield every non-ignored entry under the root.

        Raises:
            ProjectRootError: The root is not a directory, or an entry cannot
                be made relative to it.
            OperationCancelledError: `cancel` was set during the walk.
        """
        if not os.path.isdir(self.root):
            raise ProjectRootError(f"Project root is not a directory: {self.root}")
        yield from self._walk_dir(self.root, 0, cancel)

    def _walk_dir(
        self, directory: str, depth: int, cancel: threading.Event | None
    ) -> Iterator[WalkEntry]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            logger.debug("skipping unreadable directory %s: %s", directory, exc)
            return

        for entry in entries:
            if cancel is not None and cancel.is_set():
                raise OperationCancelledError(f"Walk of {self.root} cancelled")
            try:
                is_dir = entry.is_dir()
                # Linked directories are listed but never walked into
                descend = is_dir and not entry.is_symlink()
            except OSError as exc:
                logger.debug("skipping %s: %s", entry.path, exc)
                continue
            if self.ignore.should_ignore(entry.path):
                continue

            yield WalkEntry(
                path=entry.path,
                rel_path=self.relative(entry.path),
                name=entry.name,
                depth=depth,
                is_dir=is_dir,
            )
            if descend:
                yield from self._walk_dir(entry.path, depth + 1, cancel)

    def relative(self, path: str | os.PathLike[str]) -> str:
        try:
            return os.path.relpath(path, self.root)
        except ValueError as exc:
            raise ProjectRootError(f"Cannot make {path} relative to {self.root}") from exc

    def structure(self, cancel: threading.Event | None = None) -> str:
        """Render an indented tree of the project, directories suffixed with '/'."""
        lines = [STRUCTURE_HEADER]
        for entry in self.walk(cancel):
            indent = "  " * entry.depth
            suffix = "/" if entry.is_dir else ""
            lines.append(f"{indent}{entry.name}{suffix}")
        return "\n".join(lines) + "\n"

    def candidate_files(
        self,
        predicate: Callable[[str], bool],
        limit: int,
        cancel: threading.Event | None = None,
    ) -> list[str]:
        """Absolute paths of files whose relative path satisfies `predicate`.

        The walk stops as soon as `limit` matches have been collected.
        """
        matches: list[str] = []
        if limit <= 0:
            return matches
        for entry in self.walk(cancel):
            if entry.is_dir:
                continue
            if predicate(entry.rel_path):
                matches.append(entry.path)
                if len(matches) >= limit:
                    break
        return matches


class RelevanceFinder:
    """Finds files whose relative path contains a query, case-insensitively.

    Results come back in walk order; there is no ranking.
    """

    def __init__(self, walker: ProjectWalker) -> None:
        self.walker = walker

    def find_relevant(
        self, query: str, max_files: int, cancel: threading.Event | None = None
    ) -> list[str]:
        needle = query.lower()
        return self.walker.candidate_files(
            lambda rel_path: needle in rel_path.lower(), max_files, cancel
        )
