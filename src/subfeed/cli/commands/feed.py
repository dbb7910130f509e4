"""
CLI command that prints the aggregated subscription feed.

Runs the full pipeline (cache check, paced channel fetches, save) behind a
Rich progress bar, then prints the derived view as a table sized by the
column-layout algorithm.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from subfeed.browse.layout import compute_layout
from subfeed.browse.state import derive_view
from subfeed.cli.errors import run_command
from subfeed.container import container
from subfeed.exceptions import EXIT_CODE_INVALID_ARGS
from subfeed.models.enums import AggregationPhase
from subfeed.models.video import VideoRecord
from subfeed.utils.formatting import age_color, channel_color, format_time_ago, truncate

console = Console()

WATCH_LATER_MARK = "★"
WATCHED_MARK = "●"


def feed(
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Ignore the local cache and fetch every channel"
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l", help="Maximum number of videos to print"
    ),
    watch_later: bool = typer.Option(
        False, "--watch-later", "-w", help="Only show videos saved for later"
    ),
    max_channels: Optional[int] = typer.Option(
        None, "--max-channels", help="Only fetch the first N subscriptions"
    ),
) -> None:
    """
    Show the latest videos from all subscribed channels.

    Examples:
        subfeed feed
        subfeed feed --no-cache --limit 50
        subfeed feed --watch-later
    """
    if limit is not None and limit <= 0:
        console.print("[red]Error: --limit must be a positive integer[/red]")
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)
    if max_channels is not None and max_channels <= 0:
        console.print("[red]Error: --max-channels must be a positive integer[/red]")
        raise typer.Exit(code=EXIT_CODE_INVALID_ARGS)

    run_command(
        _feed_async(
            force_refresh=no_cache,
            limit=limit,
            watch_later_only=watch_later,
            max_channels=max_channels,
        )
    )


async def _feed_async(
    *,
    force_refresh: bool,
    limit: Optional[int],
    watch_later_only: bool,
    max_channels: Optional[int],
) -> None:
    store = container.cache_store
    try:
        await store.ensure_schema()
        service = container.create_feed_service(max_channels=max_channels)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task(AggregationPhase.LOADING_SUBSCRIPTIONS.value, total=None)
            result = await service.fetch_videos(
                force_refresh=force_refresh,
                on_progress=lambda current, total: progress.update(
                    task, completed=current, total=total
                ),
                on_status=lambda label: progress.update(task, description=label),
            )

        watch_later = frozenset(await store.load_watch_later_set())
        watched = frozenset(await store.load_watched_set())
    finally:
        await store.close()

    view = derive_view(result.videos, watch_later, watch_later_only)
    if limit is not None:
        view = view[:limit]

    if not view:
        console.print("[yellow]No videos to show[/yellow]")
        return

    source = "cache" if result.from_cache else f"{len(result.subscriptions)} channels"
    console.print(render_feed_table(view, watch_later, watched, title=f"Feed ({source})"))


def render_feed_table(
    videos: tuple[VideoRecord, ...],
    watch_later: frozenset[str],
    watched: frozenset[str],
    *,
    title: str = "Feed",
    width: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Table:
    """Build the feed table for ``videos`` at the given terminal width."""
    now = now or datetime.now(timezone.utc)
    layout = compute_layout(width or console.width, console.height, show_preview=False)
    columns = layout.columns

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("", width=2, no_wrap=True)
    table.add_column("Channel", width=columns.channel, no_wrap=True)
    table.add_column("Title", width=columns.title, no_wrap=True)
    table.add_column("Published", width=columns.date, no_wrap=True)

    for video in videos:
        marks = (WATCH_LATER_MARK if video.video_id in watch_later else " ") + (
            WATCHED_MARK if video.video_id in watched else " "
        )
        title_style = "dim" if video.video_id in watched else ""
        table.add_row(
            Text(marks, style="yellow"),
            Text(
                truncate(video.channel, columns.channel),
                style=channel_color(video.channel),
            ),
            Text(truncate(video.title, columns.title), style=title_style),
            Text(
                truncate(format_time_ago(video.published, now), columns.date),
                style=age_color(video.published, now),
            ),
        )
    return table
