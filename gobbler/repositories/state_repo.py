"""State repository: the clock store behind the run throttle."""

from typing import Optional, Protocol

from ..database import Database
from ..logging_config import get_logger

logger = get_logger(__name__)


class ClockStore(Protocol):
  """Key/value store holding integer Unix timestamps."""

  async def get(self, key: str) -> Optional[int]: ...

  async def set(self, key: str, timestamp: int) -> None: ...


class StateRepository:
  """Clock store backed by the ``state`` table."""

  def __init__(self, db: Database):
    self._db = db

  async def get(self, key: str) -> Optional[int]:
    return await self._db.get_state(key)

  async def set(self, key: str, timestamp: int) -> None:
    if timestamp < 0:
      raise ValueError("timestamp must not be negative")
    await self._db.set_state(key, timestamp)
