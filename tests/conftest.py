"""Shared fixtures for gobbler tests."""

import asyncio
import os
import tempfile
from datetime import UTC, datetime, timedelta

import pytest
from rich.console import Console

from gobbler import cli
from gobbler.errors import FeedFetchError
from gobbler.logging_config import setup_logging
from gobbler.models import Config, FeedItem, FetchedFeed

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def make_item(days_ago: float, title: str = "", item_id: str = "") -> FeedItem:
    ts = NOW - timedelta(days=days_ago)
    return FeedItem(
        title=title or f"post {days_ago}",
        id=item_id or f"https://example.com/{days_ago}",
        updated_at=ts,
    )


class FakeSource:
    """Feed source returning canned items, or raising canned errors, per url."""

    def __init__(self, feeds: dict, delays: dict | None = None):
        self.feeds = feeds
        self.delays = delays or {}
        self.calls: list[str] = []

    async def fetch(self, url: str) -> FetchedFeed:
        self.calls.append(url)
        delay = self.delays.get(url)
        if delay:
            await asyncio.sleep(delay)
        outcome = self.feeds[url]
        if isinstance(outcome, BaseException):
            raise outcome
        return FetchedFeed(url=url, format="rss20", items=list(outcome), entry_count=len(outcome))


class FakeClockStore:
    def __init__(self, values: dict | None = None):
        self.values = dict(values or {})

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, timestamp):
        self.values[key] = timestamp


@pytest.fixture
def temp_dir():
    """Create a temporary directory for general file tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def subscriptions_path(temp_dir):
    return os.path.join(temp_dir, "subscriptions.db")


@pytest.fixture
def config(temp_dir):
    return Config(
        base_dir=temp_dir,
        subscriptions_file=os.path.join(temp_dir, "subscriptions.db"),
        state_db=os.path.join(temp_dir, "gobbler.db"),
    )


@pytest.fixture
def fake_source():
    return FakeSource(
        {
            "https://algolia.example/feed": [make_item(1), make_item(3)],
            "https://blog.example/rss": [make_item(40)],
            "https://broken.example/rss": FeedFetchError("https://broken.example/rss", "HTTP 500"),
        }
    )


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route log events to stderr at WARNING so stdout only holds command output."""
    setup_logging("WARNING")


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep rich from wrapping long lines in captured output."""
    monkeypatch.setattr(cli, "console", Console(width=250, highlight=False, emoji=False))


@pytest.fixture
def isolated_home(temp_dir, monkeypatch):
    """Point HOME at a temp dir and clear gobbler env overrides."""
    monkeypatch.setenv("HOME", temp_dir)
    for var in list(os.environ):
        if var.startswith("GOBBLER_"):
            monkeypatch.delenv(var)
    return temp_dir


RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example Blog</title>
    <link>https://example.com</link>
    <description>Posts</description>
    <item>
      <title>Newest post</title>
      <link>https://example.com/posts/3</link>
      <guid isPermaLink="true">https://example.com/posts/3</guid>
      <pubDate>Sun, 18 Oct 2026 10:00:00 +0200</pubDate>
    </item>
    <item>
      <title>Middle post</title>
      <link>https://example.com/posts/2</link>
      <guid isPermaLink="false">post-2</guid>
      <pubDate>Thu, 01 Oct 2026 09:30:00 +0000</pubDate>
    </item>
    <item>
      <title>Oldest post</title>
      <link>https://example.com/posts/1</link>
      <guid isPermaLink="true">https://example.com/posts/1</guid>
      <pubDate>Mon, 01 Jun 2026 08:00:00 +0000</pubDate>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Blog</title>
  <id>urn:uuid:60a76c80-d399-11d9-b93C-0003939e0af6</id>
  <updated>2026-10-18T18:30:02Z</updated>
  <entry>
    <title>Atom entry</title>
    <link href="https://atom.example/entries/1"/>
    <id>urn:uuid:1225c695-cfb8-4ebb-aaaa-80da344efa6a</id>
    <updated>2026-10-18T18:30:02+01:00</updated>
  </entry>
  <entry>
    <title>Undated entry</title>
    <link href="https://atom.example/entries/0"/>
    <id>https://atom.example/entries/0</id>
  </entry>
</feed>
"""

EMPTY_RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Nothing here</title>
    <link>https://empty.example</link>
    <description>No items</description>
  </channel>
</rss>
"""

RSS_091_FEED = """<?xml version="1.0"?>
<rss version="0.91">
  <channel>
    <title>Old school</title>
    <link>https://old.example</link>
    <description>Legacy format</description>
    <item>
      <title>Legacy post</title>
      <link>https://old.example/1</link>
      <pubDate>Sat, 17 Oct 2026 10:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""
