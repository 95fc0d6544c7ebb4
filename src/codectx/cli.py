"""Command-line interface for codectx."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from codectx import __version__
from codectx.config import (
    ProjectConfig,
    find_project_root,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from codectx.context.engine import ContextEngine
from codectx.exceptions import CodeCtxError
from codectx.prompts import build_prompt, detect_language
from codectx.ui.console import Console

console = Console()


def _get_project_root(path: str | None = None) -> Path:
    """Use the given path, else the nearest initialized project, else the cwd."""
    if path:
        root = Path(path).resolve()
        if not root.is_dir():
            console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root
    return find_project_root() or Path.cwd().resolve()


def _load(root: Path) -> tuple[ProjectConfig, ContextEngine]:
    try:
        config = load_config(root)
    except CodeCtxError as exc:
        console.error(str(exc))
        sys.exit(1)
    return config, ContextEngine(root, config.context)


def _resolve_file(root: Path, file: str) -> Path:
    """Files are looked up relative to the cwd first, then the project root."""
    candidate = Path(file)
    if candidate.is_absolute():
        return candidate
    if candidate.exists():
        return candidate.resolve()
    return root / candidate


def _fail(exc: Exception) -> None:
    console.error(str(exc))
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="codectx")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool):
    """codectx - bounded project context for language-model prompts."""
    if verbose:
        console.enable_debug_logging()


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
def init(path: str | None):
    """Write a default .codectx/config.json for a project."""
    root = Path(path or ".").resolve()
    if not root.is_dir():
        console.error(f"Path does not exist: {root}")
        sys.exit(1)

    console.banner()
    config, _ = _load(root)
    config.name = root.name
    config.root_path = str(root)
    save_config(root, config)
    console.success(f"Configuration saved for: {root}")


@main.command()
@click.option("--path", "-p", default=None, help="Path to the project root.")
def structure(path: str | None):
    """Print the project tree, skipping ignored files and directories."""
    root = _get_project_root(path)
    _, engine = _load(root)
    try:
        click.echo(engine.structure(), nl=False)
    except CodeCtxError as exc:
        _fail(exc)


@main.command()
@click.argument("query")
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--max", "max_files", default=10, type=int, help="Maximum files (default: 10).")
def find(query: str, path: str | None, max_files: int):
    """Find files whose path contains QUERY."""
    root = _get_project_root(path)
    _, engine = _load(root)
    try:
        files = engine.find_relevant(query, max_files)
    except CodeCtxError as exc:
        _fail(exc)

    if not files:
        console.warning(f"No files matching '{query}'")
        return
    console.info(f"Found {len(files)} file(s) matching '{query}':")
    console.show_paths([engine.relative(f) for f in files])


@main.command()
@click.argument("file")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def related(file: str, path: str | None):
    """List files related to FILE through imports or a shared name."""
    root = _get_project_root(path)
    _, engine = _load(root)
    try:
        files = engine.find_related(_resolve_file(root, file))
    except OSError as exc:
        _fail(exc)

    if not files:
        console.warning(f"No related files found for '{file}'")
        return
    console.show_paths([engine.relative(f) for f in files])


@main.command()
@click.argument("file")
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--budget", "-b", default=None, type=int, help="Maximum context length in characters.")
@click.option("--summary", is_flag=True, help="Show a summary table instead of the context.")
def context(file: str, path: str | None, budget: int | None, summary: bool):
    """Assemble FILE and its related files into one bounded context block.

    Examples:

        codectx context main.go

        codectx context src/app.ts --budget 4000 --summary
    """
    root = _get_project_root(path)
    _, engine = _load(root)
    try:
        if budget is not None:
            engine.max_context_length = budget
        assembled = engine.assemble(_resolve_file(root, file))
    except CodeCtxError as exc:
        _fail(exc)

    if summary:
        console.show_context_summary(assembled)
    else:
        click.echo(assembled.render(), nl=False)


@main.command()
@click.argument("task")
@click.argument("file")
@click.argument("request")
@click.option("--path", "-p", default=None, help="Path to the project root.")
@click.option("--budget", "-b", default=None, type=int, help="Maximum context length in characters.")
def prompt(task: str, file: str, request: str, path: str | None, budget: int | None):
    """Print the prompt that TASK on FILE would send to the model.

    TASK selects the system prompt (generate, explain, refactor, debug, test, doc).
    """
    root = _get_project_root(path)
    config, engine = _load(root)
    target = _resolve_file(root, file)
    try:
        if budget is not None:
            engine.max_context_length = budget
        text = engine.build_context(target)
    except CodeCtxError as exc:
        _fail(exc)

    click.echo(build_prompt(task, detect_language(str(target)), text, request, config.prompts))


# =========================================================================
# Config Management
# =========================================================================

@main.group("config")
def config_group():
    """View or change the project's .codectx/config.json."""


@config_group.command("show")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_show(path: str | None):
    """Print the effective configuration as JSON."""
    config, _ = _load(_get_project_root(path))
    click.echo(config.model_dump_json(indent=2))


@config_group.command("get")
@click.argument("key")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_get(key: str, path: str | None):
    """Print one value, e.g. context.max_context_length."""
    config, _ = _load(_get_project_root(path))
    try:
        value = get_config_value(config, key)
    except KeyError as exc:
        _fail(CodeCtxError(exc.args[0]))
    click.echo(f"{key} = {json.dumps(value)}")


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_set(key: str, value: str, path: str | None):
    """Set one value. VALUE is read as JSON when it parses, else as a string.

    The new settings are checked by building an engine from them before
    anything is written.
    """
    root = _get_project_root(path)
    config, _ = _load(root)
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    try:
        config = set_config_value(config, key, parsed)
        ContextEngine(root, config.context)
    except KeyError as exc:
        _fail(CodeCtxError(exc.args[0]))
    except CodeCtxError as exc:
        _fail(exc)
    save_config(root, config)
    console.success(f"{key} = {json.dumps(parsed)}")


if __name__ == "__main__":
    main()
