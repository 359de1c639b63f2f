"""Dependency injection container for gobbler."""

from .aggregator import FeedAggregator
from .database import Database
from .logging_config import get_logger
from .models import Config
from .repositories import StateRepository
from .source import FeedSource
from .subscriptions import SubscriptionStore
from .throttle import RunThrottle

logger = get_logger(__name__)


class Container:
  """DI container for managing gobbler dependencies."""

  def __init__(self, config: Config):
    self.config = config
    self._store: SubscriptionStore | None = None
    self._db: Database | None = None
    self._state_repo: StateRepository | None = None
    self._throttle: RunThrottle | None = None
    self._feed_source: FeedSource | None = None
    self._aggregator: FeedAggregator | None = None

  @property
  def store(self) -> SubscriptionStore:
    if self._store is None:
      self._store = SubscriptionStore(self.config.subscriptions_file)
    return self._store

  @property
  def db(self) -> Database:
    if self._db is None:
      self._db = Database(self.config.state_db)
    return self._db

  @property
  def state_repo(self) -> StateRepository:
    if self._state_repo is None:
      self._state_repo = StateRepository(self.db)
    return self._state_repo

  @property
  def throttle(self) -> RunThrottle:
    if self._throttle is None:
      self._throttle = RunThrottle(self.state_repo)
    return self._throttle

  @property
  def feed_source(self) -> FeedSource:
    if self._feed_source is None:
      self._feed_source = FeedSource(self.config.fetch)
    return self._feed_source

  @property
  def aggregator(self) -> FeedAggregator:
    if self._aggregator is None:
      self._aggregator = FeedAggregator(self.feed_source)
    return self._aggregator

  async def connect(self) -> None:
    """Open the subscription store. State and feeds are opened on demand."""
    await self.store.open()
    logger.debug("container_connected")

  async def open_state(self) -> RunThrottle:
    await self.db.connect()
    return self.throttle

  async def open_feeds(self) -> FeedAggregator:
    await self.feed_source.connect()
    return self.aggregator

  async def disconnect(self) -> None:
    if self._feed_source:
      await self._feed_source.disconnect()
      self._feed_source = None
      self._aggregator = None
    if self._db:
      await self._db.close()
      self._db = None
      self._state_repo = None
      self._throttle = None
    if self._store:
      await self._store.close()
      self._store = None
    logger.debug("container_disconnected")

  async def __aenter__(self) -> "Container":
    await self.connect()
    return self

  async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
    await self.disconnect()
