"""CLI commands for gobbler"""

import sys
from collections.abc import Callable
from datetime import datetime, timedelta

import aiofiles
from rich.console import Console
from rich.markup import escape

from .commands import (
    AddCommand,
    CheckCommand,
    Command,
    ExportCommand,
    ImportCommand,
    LastRanCommand,
    ListCommand,
    RemoveCommand,
)
from .container import Container
from .logging_config import get_logger
from .models import FeedResult, Subscription
from .throttle import utc_now

console = Console(highlight=False, emoji=False)
logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%c"


def print_feed(result: FeedResult, weeks: int) -> None:
    console.print(f"[bold green]{escape(result.subscription_name)}:[/bold green]")

    if result.is_empty:
        console.print(f"    No new posts in the last {weeks} weeks")
        return

    for item in result.items:
        console.print(
            f"    [blue]{item.updated_at.strftime(TIMESTAMP_FORMAT)}[/blue]"
            f" - {escape(item.title)}"
            f" [yellow]({escape(item.id)})[/yellow]"
        )


def print_subscriptions(subscriptions: list[Subscription]) -> None:
    if not subscriptions:
        console.print("No subscriptions added yet")
        return

    for sub in subscriptions:
        console.print(f"{escape(sub.name)} - {escape(sub.url)}")


async def cmd_add(container: Container, command: AddCommand) -> None:
    """Add a feed subscription, checking the url serves a feed first."""
    if command.verify:
        await container.open_feeds()
        await container.feed_source.probe(command.url)

    await container.store.add(command.name, command.url)
    console.print(
        f"Added '{escape(command.name)}' with url '{escape(command.url)}' "
        "to your list of subscriptions"
    )


async def cmd_remove(container: Container, command: RemoveCommand) -> None:
    removed = await container.store.remove(command.name)
    if removed is None:
        console.print(
            f"Failed to remove '{escape(command.name)}' from your list of subscriptions "
            "as you are not subscribed to that feed"
        )
    else:
        console.print(
            f"Successfully removed '{escape(command.name)}' from your list of subscriptions"
        )


async def cmd_list(container: Container, command: ListCommand) -> None:
    print_subscriptions(container.store.list_all())


async def cmd_check(
    container: Container,
    command: CheckCommand,
    now: Callable[[], datetime] = utc_now,
) -> list[FeedResult] | None:
    """List new posts. Returns None when the run was throttled."""
    throttle = None
    if command.run_days is not None:
        throttle = await container.open_state()
        if await throttle.ran_within(command.run_days):
            logger.info("check_skipped", run_days=command.run_days)
            return None

    aggregator = await container.open_feeds()
    since = now() - timedelta(weeks=command.weeks)
    results = await aggregator.run(
        container.store.list_all(),
        since,
        skip_empty=command.hide_empty,
        name_filter=command.filter_name,
        limit=command.limit,
    )
    for result in results:
        print_feed(result, command.weeks)

    if throttle is not None:
        await throttle.mark_ran_now()
    return results


async def cmd_export(container: Container, command: ExportCommand) -> None:
    if command.dest:
        await container.store.export_to(command.dest)
        console.print(f"Exported subscriptions to {escape(command.dest)}")
        return

    async with aiofiles.open(container.store.path, "rb") as f:
        data = await f.read()
    sys.stdout.flush()
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


async def cmd_import(container: Container, command: ImportCommand) -> None:
    """Replace the subscriptions file. Existing subscriptions are overwritten."""
    await container.store.import_from(command.src)
    console.print(
        f"Imported {len(container.store)} subscriptions from {escape(command.src)}"
    )


async def cmd_last_ran(container: Container, command: LastRanCommand) -> None:
    throttle = await container.open_state()
    last_ran_at = await throttle.last_run()
    console.print(f"Gobbler last ran at {last_ran_at.strftime(TIMESTAMP_FORMAT)}")


HANDLERS = {
    AddCommand: cmd_add,
    RemoveCommand: cmd_remove,
    ListCommand: cmd_list,
    CheckCommand: cmd_check,
    ExportCommand: cmd_export,
    ImportCommand: cmd_import,
    LastRanCommand: cmd_last_ran,
}


async def dispatch(container: Container, command: Command):
    handler = HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"unknown command {command!r}")
    logger.debug("command_dispatched", command=type(command).__name__)
    return await handler(container, command)
