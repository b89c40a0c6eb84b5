"""Shared utility functions for the Woolball scaffolder.

Provides the shared Rich console, coloured status helpers, the startup
banner and the logging setup used by the CLI.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

console = Console()

BANNER_COLOR = "#FFA500"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(verbose: bool = False) -> None:
    """Route stdlib logging through Rich.

    Args:
        verbose: Emit DEBUG records when ``True``; otherwise only warnings
            and errors are shown.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_banner(title: str = "WOOLBALL API") -> None:
    """Print the startup banner."""
    console.print(
        Panel.fit(
            f"[bold {BANNER_COLOR}]{title}[/bold {BANNER_COLOR}]",
            border_style=BANNER_COLOR,
            padding=(1, 6),
        )
    )
    console.print()


def print_summary_table(
    rows: Iterable[tuple[str, ...]],
    columns: tuple[str, ...],
    title: str = "Summary",
) -> None:
    """Print a table with the given column headers.

    Args:
        rows: Row tuples, one value per column.
        columns: Column headers.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    for index, column in enumerate(columns):
        table.add_column(column, style="dim" if index == 0 else None, no_wrap=index == 0)

    for row in rows:
        table.add_row(*(str(value) for value in row))

    console.print(table)
    console.print()


def print_file_list(paths: Iterable[Path], heading: str = "Files created at:") -> None:
    """Print a green heading followed by one blue bullet per path."""
    console.print(f"\n[green]{heading}[/green]")
    for path in paths:
        console.print(f"[blue]- {escape(str(path))}[/blue]", soft_wrap=True)


def print_steps(heading: str, steps: Iterable[str]) -> None:
    """Print a green heading followed by blue instruction lines."""
    console.print(f"\n[green]{heading}[/green]")
    for step in steps:
        console.print(f"[blue]{step}[/blue]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
