"""
Error display and exit-code helpers shared by CLI commands.

Commands run their async body through ``run_command``, which maps the
domain exceptions onto exit codes and prints them consistently.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, Optional, TypeVar

import typer
from rich.console import Console
from rich.panel import Panel

from subfeed.exceptions import (
    EXIT_CODE_GENERAL_ERROR,
    EXIT_CODE_INTERRUPTED,
    EXIT_CODE_SCHEMA_INIT_FAILED,
    SchemaInitError,
    SubfeedError,
)

logger = logging.getLogger(__name__)

# Module-level console for CLI error display
console = Console()

T = TypeVar("T")


def format_error(title: str, message: str, hint: Optional[str] = None) -> str:
    """
    Format an error as ``Error: <title>: <message>`` plus an optional hint.

    Examples
    --------
    >>> format_error("Not Found", "Video abc is not cached")
    '[red]Error: Not Found:[/red] Video abc is not cached'
    """
    text = f"[red]Error: {title}:[/red] {message}"
    if hint:
        text += f"\n[dim]Hint: {hint}[/dim]"
    return text


def print_error_panel(title: str, message: str, hint: Optional[str] = None) -> None:
    """Print an error inside a red panel."""
    console.print(
        Panel(format_error(title, message, hint), title=title, border_style="red")
    )


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def run_command(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run an async command body and translate failures into exit codes.

    Raises
    ------
    typer.Exit
        With ``EXIT_CODE_SCHEMA_INIT_FAILED`` when the cache database cannot
        be opened, ``EXIT_CODE_GENERAL_ERROR`` for other domain errors and
        ``EXIT_CODE_INTERRUPTED`` on Ctrl+C.
    """
    try:
        return asyncio.run(coro)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(code=EXIT_CODE_INTERRUPTED)
    except SchemaInitError as e:
        logger.error("Schema initialization failed: %s", e.message)
        print_error_panel(
            "Database",
            e.message,
            hint="Check that the config directory is writable",
        )
        raise typer.Exit(code=EXIT_CODE_SCHEMA_INIT_FAILED)
    except SubfeedError as e:
        logger.error("Command failed: %s", e.message)
        console.print(format_error(type(e).__name__, e.message))
        raise typer.Exit(code=EXIT_CODE_GENERAL_ERROR)
