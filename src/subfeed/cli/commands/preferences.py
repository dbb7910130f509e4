"""
CLI commands for user preferences.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from subfeed.cli.errors import print_success
from subfeed.config.preferences import UserPreferences
from subfeed.container import container

console = Console()

app = typer.Typer(
    name="preferences",
    help="Show or change user preferences.",
    no_args_is_help=True,
)


def _print_preferences(preferences: UserPreferences) -> None:
    table = Table(title=f"Preferences ({container.preferences_store.path})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in (
        ("Thumbnail preview", preferences.thumbnail_preview),
        ("Auto refresh", preferences.auto_refresh),
    ):
        table.add_row(name, "[green]on[/green]" if value else "[red]off[/red]")
    console.print(table)


@app.command(name="show")
def show() -> None:
    """Show current preferences."""
    _print_preferences(container.preferences_store.load())


@app.command(name="set")
def set_preferences(
    preview: Optional[bool] = typer.Option(
        None, "--preview/--no-preview", help="Show the thumbnail preview panel"
    ),
    auto_refresh: Optional[bool] = typer.Option(
        None,
        "--auto-refresh/--no-auto-refresh",
        help="Refresh the feed in the background every few minutes",
    ),
) -> None:
    """
    Change preferences.

    Examples:
        subfeed preferences set --no-preview
        subfeed preferences set --auto-refresh
    """
    if preview is None and auto_refresh is None:
        console.print("[yellow]Nothing to change[/yellow]")
        raise typer.Exit(code=0)

    updated = container.preferences_store.update(
        thumbnail_preview=preview, auto_refresh=auto_refresh
    )
    print_success("Preferences saved")
    _print_preferences(updated)
