"""
CLI commands for inspecting and clearing the local feed cache.
"""

from __future__ import annotations

from datetime import timedelta

import typer
from rich.console import Console
from rich.table import Table

from subfeed.cli.errors import print_success, run_command
from subfeed.container import container
from subfeed.models.watch_state import CacheStats

console = Console()

app = typer.Typer(
    name="cache",
    help="Manage the local feed cache.",
    no_args_is_help=True,
)


@app.command(name="stats")
def stats() -> None:
    """Show what the cache holds and how much of it is still fresh."""
    result = run_command(_stats_async())
    max_age = container.settings.cache_max_age_minutes

    table = Table(title="Cache", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Database", container.settings.effective_database_url)
    table.add_row("Cached videos", str(result.video_count))
    table.add_row(f"Fresh (< {max_age} min)", str(result.fresh_count))
    table.add_row(
        "Oldest entry",
        result.oldest_cached_at.isoformat(timespec="seconds")
        if result.oldest_cached_at
        else "-",
    )
    table.add_row(
        "Newest entry",
        result.newest_cached_at.isoformat(timespec="seconds")
        if result.newest_cached_at
        else "-",
    )
    table.add_row("Watch later", str(result.watch_later_count))
    table.add_row("Watched", str(result.watched_count))
    console.print(table)


async def _stats_async() -> CacheStats:
    store = container.cache_store
    try:
        await store.ensure_schema()
        return await store.stats(
            timedelta(minutes=container.settings.cache_max_age_minutes)
        )
    finally:
        await store.close()


@app.command(name="clear")
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """
    Delete all cached videos. Watch-later and watch history are kept.

    Examples:
        subfeed cache clear
        subfeed cache clear --yes
    """
    if not yes and not typer.confirm("Delete all cached videos?"):
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(code=0)

    deleted = run_command(_clear_async())
    print_success(f"Removed {deleted} cached videos")


async def _clear_async() -> int:
    store = container.cache_store
    try:
        await store.ensure_schema()
        return await store.clear_videos()
    finally:
        await store.close()
