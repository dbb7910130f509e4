"""
CLI commands for watch-later membership and watch history.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from subfeed.cli.errors import print_success, run_command
from subfeed.container import container
from subfeed.exceptions import EXIT_CODE_INVALID_ARGS
from subfeed.models.video import watch_url
from subfeed.models.youtube_types import is_valid_video_id
from subfeed.utils.formatting import format_time_ago

console = Console()

# Wide enough that every cached row counts when labelling entries
_FOREVER = timedelta(days=365 * 100)

watch_later_app = typer.Typer(
    name="watch-later",
    help="Manage the watch-later list.",
    no_args_is_help=True,
)

watched_app = typer.Typer(
    name="watched",
    help="Manage watch history.",
    no_args_is_help=True,
)


def _validate_video_id(video_id: str) -> str:
    video_id = video_id.strip()
    if not is_valid_video_id(video_id):
        console.print(
            f'[red]Error: Invalid video ID "{video_id}". '
            "Expected 11 characters of A-Z, a-z, 0-9, _ or -[/red]"
        )
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)
    return video_id


async def _titles_by_id() -> dict[str, str]:
    """Titles of cached videos, for labelling list output."""
    videos = await container.cache_store.load_fresh(max_age=_FOREVER)
    return {video.video_id: video.title for video in videos}


def _entries_table(
    title: str, rows: list[tuple[str, datetime]], titles: dict[str, str]
) -> Table:
    now = datetime.now(timezone.utc)
    table = Table(title=title)
    table.add_column("Video ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("When", style="green", no_wrap=True)
    table.add_column("URL", style="dim", no_wrap=True)
    for video_id, when in rows:
        table.add_row(
            video_id,
            titles.get(video_id, "[dim]not cached[/dim]"),
            format_time_ago(when, now),
            watch_url(video_id),
        )
    return table


# -------------------------------------------------------------------------
# watch-later
# -------------------------------------------------------------------------


@watch_later_app.command(name="list")
def list_watch_later(
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", help="Maximum number of entries to show"
    ),
) -> None:
    """List videos saved for later, newest first."""
    run_command(_list_watch_later_async(limit))


async def _list_watch_later_async(limit: Optional[int]) -> None:
    store = container.cache_store
    try:
        await store.ensure_schema()
        entries = await store.list_watch_later()
        titles = await _titles_by_id()
    finally:
        await store.close()

    if not entries:
        console.print("[yellow]Watch-later list is empty[/yellow]")
        return
    rows = [(entry.video_id, entry.added_at) for entry in entries[:limit]]
    console.print(_entries_table(f"Watch Later ({len(entries)})", rows, titles))


@watch_later_app.command(name="toggle")
def toggle_watch_later(
    video_id: str = typer.Argument(..., help="YouTube video ID"),
) -> None:
    """Add a video to the watch-later list, or remove it if present."""
    video_id = _validate_video_id(video_id)
    member = run_command(_toggle_async(video_id, watch_later=True))
    if member:
        print_success(f"Added {video_id} to watch later")
    else:
        print_success(f"Removed {video_id} from watch later")


# -------------------------------------------------------------------------
# watched
# -------------------------------------------------------------------------


@watched_app.command(name="list")
def list_watched(
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", help="Maximum number of entries to show"
    ),
) -> None:
    """List watched videos, most recent first."""
    run_command(_list_watched_async(limit))


async def _list_watched_async(limit: Optional[int]) -> None:
    store = container.cache_store
    try:
        await store.ensure_schema()
        entries = await store.list_watch_history()
        titles = await _titles_by_id()
    finally:
        await store.close()

    if not entries:
        console.print("[yellow]Watch history is empty[/yellow]")
        return
    rows = [(entry.video_id, entry.watched_at) for entry in entries[:limit]]
    console.print(_entries_table(f"Watched ({len(entries)})", rows, titles))


@watched_app.command(name="toggle")
def toggle_watched(
    video_id: str = typer.Argument(..., help="YouTube video ID"),
) -> None:
    """Mark a video as watched, or unmark it if already watched."""
    video_id = _validate_video_id(video_id)
    watched = run_command(_toggle_async(video_id, watch_later=False))
    if watched:
        print_success(f"Marked {video_id} as watched")
    else:
        print_success(f"Marked {video_id} as unwatched")


async def _toggle_async(video_id: str, *, watch_later: bool) -> bool:
    store = container.cache_store
    try:
        await store.ensure_schema()
        if watch_later:
            return await store.toggle_watch_later(video_id)
        return await store.toggle_watched(video_id)
    finally:
        await store.close()
