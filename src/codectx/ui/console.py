"""Rich-powered console output for codectx."""

from __future__ import annotations

import logging

from rich.console import Console as RichConsole
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from codectx import __version__
from codectx.context.models import AssembledContext


class Console:
    """Terminal output for codectx using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def banner(self) -> None:
        self.console.print(
            Panel(
                f"[bold cyan]codectx[/bold cyan] [dim]v{__version__}[/dim]\n"
                "[dim]Bounded project context for your prompts[/dim]",
                border_style="cyan",
                padding=(1, 2),
            )
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def enable_debug_logging(self) -> None:
        """Route codectx debug logs through Rich."""
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(console=self.console, show_path=False)],
        )

    def show_paths(self, paths: list[str]) -> None:
        for path in paths:
            self.console.print(f"  [cyan]{path}[/cyan]", highlight=False)

    def show_context_summary(self, context: AssembledContext) -> None:
        """Display what went into an assembled context."""
        table = Table(title="Assembled Context", border_style="cyan")
        table.add_column("Section", style="bold")
        table.add_column("Path", style="cyan")
        table.add_column("Chars", justify="right")

        for section in context.sections:
            table.add_row(section.kind.value, section.path, f"{len(section.body):,}")

        table.add_section()
        table.add_row("total", "", f"{context.total_length:,} / {context.budget:,}")
        self.console.print(table)
