"""Tracks when gobbler last listed feed items."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from .logging_config import get_logger
from .repositories import ClockStore

logger = get_logger(__name__)

LAST_RAN_AT_KEY = "last_ran_at"
EPOCH = datetime.fromtimestamp(0, UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)


class RunThrottle:
    """Answers "did a check already run in the past N days?".

    The comparison is on calendar dates in UTC, not a rolling 24 hour
    window: a run at 23:59 and a check at 00:01 the next day are one day
    apart.
    """

    def __init__(
        self,
        store: ClockStore,
        key: str = LAST_RAN_AT_KEY,
        now: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._key = key
        self._now = now

    async def last_run(self) -> datetime:
        """When the last successful run happened. The Unix epoch if never."""
        timestamp = await self._store.get(self._key)
        if timestamp is None:
            return EPOCH
        return datetime.fromtimestamp(timestamp, UTC)

    async def ran_within(self, n_days: int) -> bool:
        last_ran = (await self.last_run()).date()
        ran_before = (self._now() - timedelta(days=n_days)).astimezone(UTC).date()
        within = last_ran > ran_before
        logger.debug("throttle_checked", last_ran=str(last_ran), cutoff=str(ran_before), within=within)
        return within

    async def mark_ran_now(self) -> datetime:
        now = self._now()
        await self._store.set(self._key, int(now.timestamp()))
        logger.info("run_recorded", at=now.isoformat())
        return now
