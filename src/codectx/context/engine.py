"""Size-budgeted context assembly and the per-project engine that owns it.

A `ContextEngine` is created once per project root. It owns the ignore rules,
the file cache and the current budget, and every operation goes through it,
so several roots can live side by side in one process.

Usage:
    engine = ContextEngine(root)
    engine.max_context_length = 8000
    text = engine.build_context("src/app.py")
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable

from codectx.config import DEFAULT_MAX_CONTEXT_LENGTH, ContextConfig
from codectx.context.cache import FileCache
from codectx.context.ignore import IgnoreRules
from codectx.context.models import AssembledContext, ContextSection
from codectx.context.related import RelatedFileResolver
from codectx.context.walker import ProjectWalker, RelevanceFinder
from codectx.exceptions import ConfigError, OperationCancelledError, PrimaryFileError

logger = logging.getLogger("codectx.context.engine")


class ContextAssembler:
    """Combines a primary file with its related files under a size budget.

    The primary file is always included in full. Each related file is
    included only if the running total stays within `max_context_length`;
    otherwise a one-line truncation notice takes its place and assembly moves
    on to the next candidate.
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        cache: FileCache,
        resolver: RelatedFileResolver,
        max_context_length: int = DEFAULT_MAX_CONTEXT_LENGTH,
    ) -> None:
        self.root = os.path.abspath(root)
        self.cache = cache
        self.resolver = resolver
        self.max_context_length = max_context_length

    def assemble(
        self, path: str | os.PathLike[str], cancel: threading.Event | None = None
    ) -> AssembledContext:
        """Assemble context for the file at `path`.

        Raises:
            PrimaryFileError: The file itself could not be read.
            OperationCancelledError: `cancel` was set during assembly.
        """
        source = os.path.abspath(path)
        try:
            content = self.cache.get_content(source)
        except OSError as exc:
            raise PrimaryFileError(str(path), exc.strerror or str(exc)) from exc

        budget = self.max_context_length
        primary = ContextSection.primary(self._relative(source), content)
        result = AssembledContext(sections=[primary], budget=budget)
        total = len(primary.body)

        for related_path in self.resolver.find_related(source, content):
            if cancel is not None and cancel.is_set():
                raise OperationCancelledError(f"Context assembly for {source} cancelled")
            try:
                related_content = self.cache.get_content(related_path)
            except OSError as exc:
                logger.debug("skipping unreadable related file %s: %s", related_path, exc)
                continue

            rel = self._relative(related_path)
            section = ContextSection.related(rel, related_content)
            if total + len(section.body) > budget:
                logger.debug(
                    "related file %s (%d chars) exceeds budget %d", rel, len(section.body), budget
                )
                result.sections.append(ContextSection.truncation_notice(rel))
                continue

            result.sections.append(section)
            total += len(section.body)

        result.total_length = total
        return result

    def build_context(
        self, path: str | os.PathLike[str], cancel: threading.Event | None = None
    ) -> str:
        """Assemble and render context for `path` as prompt-ready text."""
        return self.assemble(path, cancel).render()

    def _relative(self, path: str) -> str:
        try:
            return os.path.relpath(path, self.root)
        except ValueError:
            return path


class ContextEngine:
    """All context operations for one project root.

    Relative file paths passed to the engine are taken relative to the root.
    """

    def __init__(
        self, root: str | os.PathLike[str], config: ContextConfig | None = None
    ) -> None:
        config = config or ContextConfig()
        self.root = os.path.abspath(root)
        self.ignore = IgnoreRules(
            dirs=config.ignore_dirs,
            file_patterns=config.ignore_files,
            security_distro=config.security_distro,
        )
        for pattern in config.extra_ignore_patterns:
            self.ignore.add_ignore_pattern(pattern)

        self.cache = FileCache()
        self.walker = ProjectWalker(self.root, self.ignore)
        self.finder = RelevanceFinder(self.walker)
        self.resolver = RelatedFileResolver()
        self.assembler = ContextAssembler(
            self.root, self.cache, self.resolver, config.max_context_length
        )

    @property
    def max_context_length(self) -> int:
        return self.assembler.max_context_length

    @max_context_length.setter
    def max_context_length(self, value: int) -> None:
        if value < 0:
            raise ConfigError(f"max_context_length must be >= 0, got {value}")
        self.assembler.max_context_length = value

    def resolve(self, path: str | os.PathLike[str]) -> str:
        return os.path.normpath(os.path.join(self.root, path))

    def add_ignore_pattern(self, pattern: str) -> None:
        self.ignore.add_ignore_pattern(pattern)

    def should_ignore(self, path: str | os.PathLike[str]) -> bool:
        return self.ignore.should_ignore(self.resolve(path))

    def get_file_content(self, path: str | os.PathLike[str]) -> str:
        return self.cache.get_content(self.resolve(path))

    def structure(self, cancel: threading.Event | None = None) -> str:
        return self.walker.structure(cancel)

    def candidate_files(
        self,
        predicate: Callable[[str], bool],
        limit: int,
        cancel: threading.Event | None = None,
    ) -> list[str]:
        return self.walker.candidate_files(predicate, limit, cancel)

    def find_relevant(
        self, query: str, max_files: int, cancel: threading.Event | None = None
    ) -> list[str]:
        return self.finder.find_relevant(query, max_files, cancel)

    def find_related(self, path: str | os.PathLike[str], content: str | None = None) -> list[str]:
        """Related files for `path`. Reads it through the cache when no content is given."""
        source = self.resolve(path)
        if content is None:
            content = self.cache.get_content(source)
        return self.resolver.find_related(source, content)

    def assemble(
        self, path: str | os.PathLike[str], cancel: threading.Event | None = None
    ) -> AssembledContext:
        return self.assembler.assemble(self.resolve(path), cancel)

    def build_context(
        self, path: str | os.PathLike[str], cancel: threading.Event | None = None
    ) -> str:
        return self.assembler.build_context(self.resolve(path), cancel)

    def relative(self, path: str) -> str:
        return self.walker.relative(path)
