"""
CLI commands for the subscription list.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from subfeed.cli.errors import format_error, print_success, run_command
from subfeed.container import container
from subfeed.exceptions import (
    EXIT_CODE_GENERAL_ERROR,
    SubscriptionExistsError,
    SubscriptionListError,
)
from subfeed.models.subscription import Subscription
from subfeed.services.subscriptions import resolve_channel

console = Console()

app = typer.Typer(
    name="subscriptions",
    help="Manage subscribed channels.",
    no_args_is_help=True,
)


@app.command(name="list")
def list_subscriptions() -> None:
    """List subscribed channels."""
    subscription_list = container.subscription_list
    try:
        subscriptions = subscription_list.load()
    except SubscriptionListError as e:
        console.print(format_error("Subscriptions", e.message))
        raise typer.Exit(code=EXIT_CODE_GENERAL_ERROR)

    if not subscriptions:
        console.print(
            f"[yellow]No subscriptions in {subscription_list.path}[/yellow]\n"
            "[blue]i[/blue] Use 'subfeed subscriptions add URL' to add one"
        )
        return

    table = Table(title=f"Subscriptions ({len(subscriptions)})")
    table.add_column("Channel ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("URL", style="dim")
    for subscription in subscriptions:
        table.add_row(
            subscription.channel_id, subscription.title, subscription.channel_url or ""
        )
    console.print(table)


@app.command(name="add")
def add_subscription(
    url: str = typer.Argument(
        ..., help="Channel URL (/channel/<id>, /@handle or /c/<name>)"
    ),
) -> None:
    """
    Subscribe to a channel by URL.

    Examples:
        subfeed subscriptions add https://www.youtube.com/@example
        subfeed subscriptions add https://www.youtube.com/channel/UCxxxxxxxxxxxxxxxxxxxxxx
    """
    path = container.subscription_list.path
    created = not path.exists()
    subscription = run_command(_add_async(url))
    if subscription is None:
        raise typer.Exit(code=EXIT_CODE_GENERAL_ERROR)

    if created:
        print_success(f"Created {path} and added: {subscription.title}")
    else:
        print_success(f"Successfully added subscription: {subscription.title}")


async def _add_async(url: str) -> Optional[Subscription]:
    with console.status("Resolving channel…"):
        channel_id, title = await resolve_channel(
            url, feed_url_template=container.settings.feed_url_template
        )
    try:
        return container.subscription_list.add(channel_id, title)
    except SubscriptionExistsError as e:
        console.print(f"[yellow]{e.message}[/yellow]")
        return None
