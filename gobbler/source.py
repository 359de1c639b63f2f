"""Fetching and parsing RSS/Atom feeds."""

import asyncio
import warnings
from datetime import UTC, datetime
from typing import Any, Optional
from urllib.parse import urlparse

import aiohttp
import feedparser
from dateutil import parser as date_parser

from .errors import FeedFetchError, InvalidFeedUrlError
from .logging_config import get_logger
from .models import FeedItem, FetchConfig, FetchedFeed

logger = get_logger(__name__)

SUPPORTED_FORMATS = frozenset(["rss20", "atom10"])
ALLOWED_SCHEMES = frozenset(["http", "https"])


# Zone names allowed by RFC 822 dates, as offsets in seconds.
RFC822_ZONES = {
    "UT": 0,
    "UTC": 0,
    "GMT": 0,
    "Z": 0,
    "EST": -5 * 3600,
    "EDT": -4 * 3600,
    "CST": -6 * 3600,
    "CDT": -5 * 3600,
    "MST": -7 * 3600,
    "MDT": -6 * 3600,
    "PST": -8 * 3600,
    "PDT": -7 * 3600,
}


def is_valid_url(url: str) -> bool:
    """Whether ``url`` looks like a link, in a relatively dirty way."""
    return url.startswith("http")


def _entry_value(entry: Any, key: str) -> Any:
    # Checking membership first keeps feedparser from aliasing ``updated`` to ``published``.
    if key in entry:
        return entry[key]
    return None


def _from_struct_time(value: Any) -> Optional[datetime]:
    try:
        return datetime(*value[:6], tzinfo=UTC)
    except (TypeError, ValueError):
        return None


def _parse_timestamp(value: str, parsed: Any = None) -> Optional[datetime]:
    """Parse a feed timestamp, keeping the offset it was written with.

    ``parsed`` is feedparser's normalised UTC ``struct_time`` for the same
    field. It is used when the text carries a zone dateutil cannot resolve.
    """
    dt = None
    if value:
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", date_parser.UnknownTimezoneWarning)
                dt = date_parser.parse(value, tzinfos=RFC822_ZONES)
        except (ValueError, OverflowError):
            dt = None

    if dt is not None and dt.tzinfo is not None:
        return dt
    if parsed:
        from_struct = _from_struct_time(parsed)
        if from_struct is not None:
            return from_struct
    if dt is not None:
        return dt.replace(tzinfo=UTC)
    return None


def parse_entry(entry: Any) -> Optional[FeedItem]:
    """Convert one feedparser entry into a FeedItem.

    Returns None when the entry has no usable timestamp or identifier so the
    caller can drop just that entry.
    """
    updated_at = None
    for key in ("updated", "published"):
        updated_at = _parse_timestamp(
            _entry_value(entry, key) or "", _entry_value(entry, f"{key}_parsed")
        )
        if updated_at is not None:
            break
    if updated_at is None:
        return None

    item_id = (entry.get("id") or "").strip()
    if not is_valid_url(item_id):
        item_id = (entry.get("link") or "").strip() or item_id
    if not item_id:
        return None

    return FeedItem(
        title=(entry.get("title") or "").strip(),
        id=item_id,
        updated_at=updated_at,
    )


def parse_feed(url: str, content: bytes | str) -> FetchedFeed:
    """Parse a feed document.

    Raises:
        FeedFetchError: If the document is not a recognisable feed.
    """
    parsed = feedparser.parse(content)
    version = parsed.get("version", "")
    if not version:
        reason = str(parsed.get("bozo_exception") or "not an RSS or Atom document")
        raise FeedFetchError(url, reason)

    if version not in SUPPORTED_FORMATS:
        logger.warning("unsupported_feed_format", url=url, format=version)

    items = []
    for entry in parsed.entries:
        item = parse_entry(entry)
        if item is None:
            logger.debug("feed_entry_dropped", url=url, entry_id=entry.get("id", ""))
            continue
        items.append(item)

    return FetchedFeed(url=url, format=version, items=items, entry_count=len(parsed.entries))


class FeedSource:
    """Retrieves feeds over HTTP using one shared session."""

    def __init__(self, cfg: FetchConfig | None = None):
        self.cfg = cfg if cfg is not None else FetchConfig()
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            raise RuntimeError("FeedSource not connected. Call connect() first.")
        return self._session

    async def connect(self) -> None:
        async with self._lock:
            if self._session is not None and not self._session.closed:
                return

            connector = aiohttp.TCPConnector(
                limit_per_host=self.cfg.per_host_connections,
                enable_cleanup_closed=True,
            )
            timeout = aiohttp.ClientTimeout(
                total=self.cfg.timeout,
                connect=self.cfg.connect_timeout,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
                headers={"User-Agent": self.cfg.user_agent},
            )
            logger.debug("feed_source_connected", timeout=self.cfg.timeout)

    async def disconnect(self) -> None:
        async with self._lock:
            if self._session is not None and not self._session.closed:
                await self._session.close()
                self._session = None
                logger.debug("feed_source_disconnected")

    async def __aenter__(self) -> "FeedSource":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.disconnect()

    async def fetch(self, url: str) -> FetchedFeed:
        """Download and parse the feed at ``url``.

        Raises:
            FeedFetchError: On HTTP errors, network errors, timeouts or unparseable content.
        """
        try:
            async with self.session.get(url, max_redirects=self.cfg.max_redirects) as resp:
                if resp.status != 200:
                    raise FeedFetchError(url, f"HTTP {resp.status}")
                content = await resp.read()
        except TimeoutError as e:
            raise FeedFetchError(url, "Timeout") from e
        except aiohttp.TooManyRedirects as e:
            raise FeedFetchError(url, "Too many redirects") from e
        except aiohttp.ClientError as e:
            raise FeedFetchError(url, f"Connection: {e}") from e

        return parse_feed(url, content)

    async def probe(self, url: str) -> FetchedFeed:
        """Check that ``url`` serves a feed with at least one entry.

        Raises:
            InvalidFeedUrlError: If it does not.
        """
        parsed = urlparse(url)
        if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.hostname:
            raise InvalidFeedUrlError(url, "expected an http or https url")

        try:
            feed = await self.fetch(url)
        except FeedFetchError as e:
            raise InvalidFeedUrlError(url, e.reason) from e

        if feed.entry_count == 0:
            raise InvalidFeedUrlError(url, "feed has no items")
        return feed
