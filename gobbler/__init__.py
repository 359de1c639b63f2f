"""gobbler - keep up with RSS feeds"""

from .aggregator import DEFAULT_LIMIT, FeedAggregator, items_since, matches_name
from .config import DEFAULT_CONFIG, load_config
from .container import Container
from .database import Database
from .errors import (
    DuplicateNameError,
    FeedFetchError,
    GobblerError,
    InvalidFeedUrlError,
    InvalidSubscriptionError,
)
from .models import (
    CheckConfig,
    Config,
    FeedItem,
    FeedResult,
    FetchConfig,
    FetchedFeed,
    Subscription,
)
from .repositories import ClockStore, StateRepository
from .source import FeedSource, parse_entry, parse_feed
from .subscriptions import SubscriptionStore
from .throttle import RunThrottle

__version__ = "0.1.0"

__all__ = [
    "load_config",
    "DEFAULT_CONFIG",
    "Config",
    "CheckConfig",
    "FetchConfig",
    "Subscription",
    "FeedItem",
    "FeedResult",
    "FetchedFeed",
    "SubscriptionStore",
    "Database",
    "ClockStore",
    "StateRepository",
    "RunThrottle",
    "FeedSource",
    "parse_entry",
    "parse_feed",
    "FeedAggregator",
    "DEFAULT_LIMIT",
    "items_since",
    "matches_name",
    "Container",
    "GobblerError",
    "DuplicateNameError",
    "InvalidSubscriptionError",
    "InvalidFeedUrlError",
    "FeedFetchError",
]
