#!/usr/bin/env python3
"""
gobbler - keep up with RSS feeds

  gobbler                       list posts from the last 4 weeks
  gobbler add NAME URL          subscribe to a feed
  gobbler remove NAME           unsubscribe from a feed
  gobbler --list                show subscriptions
  gobbler --run-days[=N]        list posts at most once every N days
  gobbler --export [FILE]       copy the subscriptions file
  gobbler --import FILE         replace the subscriptions file
"""

import argparse
import asyncio
import sys

from rich.console import Console

from gobbler.cli import dispatch
from gobbler.commands import (
    AddCommand,
    CheckCommand,
    Command,
    ExportCommand,
    ImportCommand,
    LastRanCommand,
    ListCommand,
    RemoveCommand,
)
from gobbler.config import load_config
from gobbler.container import Container
from gobbler.context import set_run_id
from gobbler.errors import GobblerError
from gobbler.logging_config import setup_logging
from gobbler.models import Config

err_console = Console(stderr=True, highlight=False, emoji=False)

# --run-days given without a value
RUN_DAYS_FROM_CONFIG = object()


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a number") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be positive")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gobbler",
        description="gobbler - keep up with RSS feeds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("-l", "--list", action="store_true", help="List RSS feed subscriptions")
    mode.add_argument(
        "--export",
        nargs="?",
        const="-",
        metavar="FILE",
        help="Copy the subscriptions file to FILE (stdout if omitted)",
    )
    mode.add_argument(
        "--import",
        dest="import_file",
        metavar="FILE",
        help="Replace all subscriptions with the contents of FILE",
    )
    mode.add_argument(
        "--last-ran-at", action="store_true", help="Show when new posts were last listed"
    )

    parser.add_argument(
        "-H", "--hide-empty-feeds", action="store_true", help="Hide feeds with no items"
    )
    parser.add_argument(
        "-w",
        "--weeks",
        type=positive_int,
        metavar="NUM",
        help="Show posts from the last NUM weeks (default: 4)",
    )
    parser.add_argument(
        "-r",
        "--run-days",
        type=positive_int,
        nargs="?",
        const=RUN_DAYS_FROM_CONFIG,
        metavar="NUM",
        help="Show new feed items at most every NUM days (default: 1)",
    )
    parser.add_argument(
        "-f", "--filter-name", metavar="NAME", help="Only show feeds whose name contains NAME"
    )
    parser.add_argument(
        "-n", "--limit", type=positive_int, metavar="NUM", help="Show at most NUM posts per feed"
    )
    parser.add_argument(
        "-s", "--subscriptions-file", metavar="FILE", help="Use FILE to store subscriptions"
    )
    parser.add_argument("--log-level", metavar="LEVEL", help="Log level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    add_parser = subparsers.add_parser("add", help="Add a RSS feed subscription")
    add_parser.add_argument("name", metavar="NAME", help="The name of the blog")
    add_parser.add_argument("url", metavar="URL", help="The url of the blog's RSS feed")
    add_parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Store the url without checking that it serves a feed",
    )

    remove_parser = subparsers.add_parser("remove", help="Remove a RSS feed subscription")
    remove_parser.add_argument("name", metavar="NAME", help="The name of the blog")

    return parser


def build_command(args: argparse.Namespace, cfg: Config) -> Command:
    if args.command == "add":
        return AddCommand(name=args.name, url=args.url, verify=not args.no_verify)
    if args.command == "remove":
        return RemoveCommand(name=args.name)
    if args.list:
        return ListCommand()
    if args.export is not None:
        return ExportCommand(dest=None if args.export == "-" else args.export)
    if args.import_file:
        return ImportCommand(src=args.import_file)
    if args.last_ran_at:
        return LastRanCommand()

    run_days = args.run_days
    if run_days is RUN_DAYS_FROM_CONFIG:
        run_days = cfg.check.run_days
    return CheckCommand(
        weeks=args.weeks or cfg.check.weeks,
        hide_empty=args.hide_empty_feeds,
        run_days=run_days,
        filter_name=args.filter_name,
        limit=args.limit or cfg.check.limit,
    )


async def run(command: Command, cfg: Config) -> None:
    set_run_id()
    async with Container(cfg) as container:
        await dispatch(container, command)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides: dict = {}
    if args.subscriptions_file:
        overrides["subscriptions_file"] = args.subscriptions_file
    if args.log_level:
        overrides["log_level"] = args.log_level

    try:
        cfg = load_config(overrides)
        setup_logging(cfg.log_level, json_output=cfg.json_logs)
        command = build_command(args, cfg)
        asyncio.run(run(command, cfg))
    except (GobblerError, OSError, ValueError) as e:
        err_console.print(str(e), markup=False, soft_wrap=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
