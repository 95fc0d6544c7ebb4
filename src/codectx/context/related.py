"""Related-file heuristics: local imports and same-basename siblings.

Each language contributes a pure parser, ``content -> local import
specifiers``, and a resolver that maps one specifier onto files next to the
source file. Parsing never touches the filesystem, so parsers can be tested
on plain strings.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger("codectx.context.related")

JS_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")
# Suffixes tried, in order, when a JS/TS specifier has no extension
JS_RESOLVE_SUFFIXES = (".js", ".ts", ".jsx", ".tsx")

_GO_IMPORT = re.compile(r'^import\s+(?:[\w.]+\s+)?"([^"]+)"')
_GO_BLOCK_START = re.compile(r"^import\s*\(\s*$")
_GO_BLOCK_SPEC = re.compile(r'^(?:[\w.]+\s+)?"([^"]+)"')

_JS_FROM = re.compile(r"""\bfrom\s+['"]([^'"]+)['"]""")
_JS_BARE_IMPORT = re.compile(r"""^import\s+['"]([^'"]+)['"]""")
_JS_REQUIRE = re.compile(r"""\brequire\(\s*['"]([^'"]+)['"]\s*\)""")

_PY_FROM = re.compile(r"^from\s+(\.+[\w.]*)\s+import\b")


def _is_relative(spec: str) -> bool:
    return spec.startswith(("./", "../"))


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------

def parse_go_imports(content: str) -> list[str]:
    """Relative import paths from single-line and grouped Go imports."""
    specs: list[str] = []
    in_block = False
    for raw in content.splitlines():
        line = raw.strip()
        if in_block:
            if line.startswith(")"):
                in_block = False
                continue
            match = _GO_BLOCK_SPEC.match(line)
        elif _GO_BLOCK_START.match(line):
            in_block = True
            continue
        else:
            match = _GO_IMPORT.match(line)
        if match and _is_relative(match.group(1)):
            specs.append(match.group(1))
    return specs


def parse_js_imports(content: str) -> list[str]:
    """Relative specifiers from ES ``import ... from`` and ``require()`` forms."""
    specs: list[str] = []
    for raw in content.splitlines():
        line = raw.strip()
        found: list[str] = []
        if line.startswith(("import ", "export ")):
            match = _JS_FROM.search(line) or _JS_BARE_IMPORT.match(line)
            if match:
                found.append(match.group(1))
        found.extend(_JS_REQUIRE.findall(line))
        specs.extend(spec for spec in found if _is_relative(spec))
    return specs


def parse_python_imports(content: str) -> list[str]:
    """Dot-prefixed module names from ``from .x import y`` statements."""
    specs: list[str] = []
    for raw in content.splitlines():
        match = _PY_FROM.match(raw.strip())
        if match:
            specs.append(match.group(1))
    return specs


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------

def _files_with_extension(directory: str, ext: str) -> list[str]:
    """Files directly inside `directory` ending in `ext`, sorted by name."""
    try:
        with os.scandir(directory) as it:
            return sorted(
                entry.path
                for entry in it
                if entry.is_file() and os.path.splitext(entry.name)[1] == ext
            )
    except OSError as exc:
        logger.debug("cannot list %s: %s", directory, exc)
        return []


def resolve_go_import(source_dir: str, spec: str, ext: str) -> list[str]:
    target = os.path.normpath(os.path.join(source_dir, spec))
    if os.path.isfile(target):
        return [target]
    if os.path.isdir(target):
        return _files_with_extension(target, ext)
    if os.path.isfile(target + ".go"):
        return [target + ".go"]
    return []


def resolve_js_import(source_dir: str, spec: str, ext: str) -> list[str]:
    target = os.path.normpath(os.path.join(source_dir, spec))
    if os.path.isfile(target):
        return [target]
    for suffix in JS_RESOLVE_SUFFIXES:
        if os.path.isfile(target + suffix):
            return [target + suffix]
    if os.path.isdir(target):
        return _files_with_extension(target, ext)
    return []


def resolve_python_import(source_dir: str, spec: str, ext: str) -> list[str]:
    # Any run of leading dots stays in the source directory
    module = spec.lstrip(".")
    if not module:
        return _files_with_extension(source_dir, ext)

    target = os.path.join(source_dir, *module.split("."))
    if os.path.isfile(target + ".py"):
        return [target + ".py"]
    if os.path.isdir(target):
        return _files_with_extension(target, ext)
    return []


@dataclass(frozen=True)
class ImportStrategy:
    """How one language declares and locates local imports."""

    language: str
    parse: Callable[[str], list[str]]
    resolve: Callable[[str, str, str], list[str]]


_GO = ImportStrategy("go", parse_go_imports, resolve_go_import)
_JS = ImportStrategy("javascript", parse_js_imports, resolve_js_import)
_PY = ImportStrategy("python", parse_python_imports, resolve_python_import)

IMPORT_STRATEGIES: dict[str, ImportStrategy] = {
    ".go": _GO,
    ".py": _PY,
    **{ext: _JS for ext in JS_EXTENSIONS},
}


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class RelatedFileResolver:
    """Proposes files likely relevant to a given file.

    Best effort: a strategy that fails contributes nothing. The result keeps
    discovery order (imports first, then siblings), holds no duplicates and
    never contains the source file itself.
    """

    def __init__(self, strategies: dict[str, ImportStrategy] | None = None) -> None:
        self.strategies = IMPORT_STRATEGIES if strategies is None else strategies

    def find_related(self, path: str | os.PathLike[str], content: str) -> list[str]:
        source = os.path.abspath(path)
        candidates = self.import_targets(source, content) + self.siblings(source)

        seen = {source}
        related: list[str] = []
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                related.append(candidate)
        logger.debug("%d related file(s) for %s", len(related), source)
        return related

    def import_targets(self, source: str, content: str) -> list[str]:
        """Files reached through the source file's local imports."""
        ext = os.path.splitext(source)[1]
        strategy = self.strategies.get(ext)
        if strategy is None:
            return []

        source_dir = os.path.dirname(source)
        targets: list[str] = []
        for spec in strategy.parse(content):
            try:
                targets.extend(strategy.resolve(source_dir, spec, ext))
            except (OSError, ValueError) as exc:
                logger.debug("cannot resolve %s import %r: %s", strategy.language, spec, exc)
        return targets

    def siblings(self, source: str) -> list[str]:
        """Files next to the source sharing its name but not its extension."""
        directory, name = os.path.split(source)
        stem = os.path.splitext(name)[0]
        try:
            with os.scandir(directory) as it:
                return sorted(
                    entry.path
                    for entry in it
                    if entry.name != name
                    and os.path.splitext(entry.name)[0] == stem
                    and not entry.is_dir()
                )
        except OSError as exc:
            logger.debug("cannot list siblings of %s: %s", source, exc)
            return []
