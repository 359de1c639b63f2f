"""Collect recent posts from every subscribed feed."""

import asyncio
from collections.abc import Iterable
from datetime import datetime
from typing import Optional, Protocol

from .errors import FeedFetchError
from .logging_config import get_logger
from .models import FeedItem, FeedResult, FetchedFeed, Subscription

logger = get_logger(__name__)

DEFAULT_LIMIT = 10


class Source(Protocol):
    async def fetch(self, url: str) -> FetchedFeed: ...


def matches_name(name: str, name_filter: Optional[str]) -> bool:
    """Case-insensitive substring match. No filter matches everything."""
    if not name_filter:
        return True
    return name_filter.lower() in name.lower()


def items_since(items: Iterable[FeedItem], since: datetime) -> list[FeedItem]:
    """Take items until the first one older than ``since``.

    Feeds are expected to list items newest first. Anything after the first
    item older than ``since`` is never looked at, even if it is newer.
    """
    results = []
    for item in items:
        if item.updated_at < since:
            break
        results.append(item)
    return results


class FeedAggregator:
    """Fans out one fetch per subscription and filters the items."""

    def __init__(self, source: Source):
        self.source = source

    async def run(
        self,
        subscriptions: Iterable[Subscription],
        since: datetime,
        *,
        skip_empty: bool = False,
        name_filter: Optional[str] = None,
        limit: Optional[int] = DEFAULT_LIMIT,
    ) -> list[FeedResult]:
        """Collect feeds with items last updated at or after ``since``.

        Results come back in subscription order. Feeds that fail to fetch are
        left out, as are empty feeds when ``skip_empty`` is set.
        """
        if since.tzinfo is None:
            raise ValueError("since must be timezone-aware")

        selected = [s for s in subscriptions if matches_name(s.name, name_filter)]
        logger.info(
            "aggregation_started",
            feeds=len(selected),
            since=since.isoformat(),
            name_filter=name_filter,
        )

        tasks = [self._collect_one(sub, since, limit) for sub in selected]
        collected = await asyncio.gather(*tasks)

        results = []
        for result in collected:
            if result is None:
                continue
            if skip_empty and result.is_empty:
                continue
            results.append(result)

        logger.info(
            "aggregation_complete",
            feeds=len(selected),
            returned=len(results),
            failed=sum(1 for r in collected if r is None),
        )
        return results

    async def _collect_one(
        self, sub: Subscription, since: datetime, limit: Optional[int]
    ) -> Optional[FeedResult]:
        try:
            feed = await self.source.fetch(sub.url)
        except FeedFetchError as e:
            logger.warning("feed_fetch_failed", feed=sub.name, url=sub.url, error=e.reason)
            return None
        except Exception as e:
            logger.error("feed_process_error", feed=sub.name, url=sub.url, error=str(e))
            return None

        items = items_since(feed.items, since)
        if limit is not None:
            items = items[:limit]
        logger.debug("feed_collected", feed=sub.name, items=len(items))
        return FeedResult(subscription_name=sub.name, items=items)
