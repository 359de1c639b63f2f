"""Flat-file store for feed subscriptions.

Each subscription is one ``name,url`` line in a UTF-8 text file. Lines are
split at the first comma, so a name containing a comma cannot be stored
faithfully; URLs may contain commas. Names and URLs containing line breaks
are rejected.
"""

import os
from pathlib import Path
from typing import Optional

import aiofiles

from .errors import DuplicateNameError, InvalidSubscriptionError
from .logging_config import get_logger
from .models import Subscription

logger = get_logger(__name__)

SEPARATOR = ","
LINE_BREAKS = ("\n", "\r")


def format_record(name: str, url: str) -> str:
    return f"{name}{SEPARATOR}{url}\n"


def check_single_line(field: str, value: str) -> None:
    if any(ch in value for ch in LINE_BREAKS):
        raise InvalidSubscriptionError(field, value)


def parse_record(line: str) -> Optional[tuple[str, str]]:
    """Split one persisted line into (name, url). Returns None for malformed lines."""
    line = line.rstrip("\r\n")
    name, sep, url = line.partition(SEPARATOR)
    if not sep:
        return None
    return name, url


class SubscriptionStore:
    """Durable mapping of subscription name to feed URL."""

    def __init__(self, path: str):
        self.path = path
        self._feeds: dict[str, str] = {}
        self._open = False
        self._needs_newline = False

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        """Load all subscriptions, creating an empty file if none exists yet."""
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "a+", encoding="utf-8") as f:
            await f.seek(0)
            text = await f.read()

        feeds: dict[str, str] = {}
        skipped = 0
        for line in text.splitlines():
            record = parse_record(line)
            if record is None:
                skipped += 1
                continue
            name, url = record
            feeds[name] = url

        self._feeds = feeds
        self._needs_newline = bool(text) and not text.endswith("\n")
        self._open = True
        logger.debug("subscriptions_loaded", path=self.path, count=len(feeds), skipped=skipped)

    async def close(self) -> None:
        if self._open:
            self._open = False
            logger.debug("subscriptions_closed", path=self.path)

    async def __aenter__(self) -> "SubscriptionStore":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _require_open(self) -> None:
        if not self._open:
            raise RuntimeError("SubscriptionStore not open")

    async def add(self, name: str, url: str) -> None:
        """Add a subscription, appending one line to the backing file.

        Raises:
            InvalidSubscriptionError: If ``name`` or ``url`` contains a line break.
            DuplicateNameError: If ``name`` is already subscribed.

        Nothing is changed when either error is raised.
        """
        self._require_open()
        check_single_line("name", name)
        check_single_line("url", url)
        if name in self._feeds:
            raise DuplicateNameError(name, old_url=self._feeds[name], new_url=url)

        record = format_record(name, url)
        # A hand-edited or imported file may lack its final newline.
        if self._needs_newline:
            record = "\n" + record
        async with aiofiles.open(self.path, "a", encoding="utf-8") as f:
            await f.write(record)
        self._needs_newline = False
        self._feeds[name] = url
        logger.info("subscription_added", name=name, url=url)

    async def remove(self, name: str) -> Optional[str]:
        """Remove a subscription. Returns its URL, or None if it was not stored."""
        self._require_open()
        if name not in self._feeds:
            return None

        url = self._feeds.pop(name)
        await self._rewrite()
        logger.info("subscription_removed", name=name, url=url)
        return url

    async def _rewrite(self) -> None:
        # Truncating rewrite; a crash part-way through loses the tail of the file.
        lines = [format_record(name, url) for name, url in sorted(self._feeds.items())]
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write("".join(lines))
        self._needs_newline = False

    def list_all(self) -> list[Subscription]:
        self._require_open()
        return [Subscription(name, url) for name, url in sorted(self._feeds.items())]

    def get(self, name: str) -> Optional[str]:
        self._require_open()
        return self._feeds.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._feeds

    def __len__(self) -> int:
        return len(self._feeds)

    async def export_to(self, dest: str) -> None:
        """Copy the backing file to ``dest`` byte for byte."""
        await copy_file(self.path, dest)
        logger.info("subscriptions_exported", path=self.path, dest=dest)

    async def import_from(self, src: str) -> None:
        """Replace the backing file with ``src`` and reload. No merging is done."""
        await copy_file(src, self.path)
        logger.info("subscriptions_imported", path=self.path, src=src)
        if self._open:
            await self.open()


async def copy_file(src: str, dest: str) -> None:
    if os.path.abspath(src) == os.path.abspath(dest):
        return
    async with aiofiles.open(src, "rb") as f:
        data = await f.read()
    Path(dest).parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(dest, "wb") as f:
        await f.write(data)
