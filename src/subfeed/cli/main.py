"""
Main CLI entry point for subfeed.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.panel import Panel

from subfeed import __version__
from subfeed.cli.commands import cache, preferences, subscriptions, watch
from subfeed.cli.commands.feed import feed
from subfeed.config.logging_config import configure_logging
from subfeed.container import container

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    name="subfeed",
    help="Terminal feed reader for YouTube channel subscriptions",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add subcommands
app.command(name="feed")(feed)
app.add_typer(subscriptions.app, name="subscriptions", help="Subscription list commands")
app.add_typer(watch.watch_later_app, name="watch-later", help="Watch-later commands")
app.add_typer(watch.watched_app, name="watched", help="Watch history commands")
app.add_typer(cache.app, name="cache", help="Local cache commands")
app.add_typer(preferences.app, name="preferences", help="User preference commands")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]subfeed[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version and exit"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log debug output to the console"
    ),
) -> None:
    """
    subfeed - Terminal feed reader for YouTube channel subscriptions.

    Aggregates the feeds of every subscribed channel, caches them locally
    and tracks what you have watched or saved for later.
    """
    if version:
        console.print(f"subfeed v{__version__}")
        raise typer.Exit(code=0)

    log_file = configure_logging(container.settings, verbose=verbose)
    logger.debug("Logging to %s", log_file)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'subfeed --help' for available commands[/yellow]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
