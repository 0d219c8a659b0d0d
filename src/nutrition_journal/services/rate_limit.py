"""Per-user quotas on LLM calls."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from nutrition_journal.services.cache import Cache, utc_now

logger = logging.getLogger(__name__)

DAILY_LIMIT = 50
HOURLY_LIMIT = 10
KEY_NAMESPACE = "journal:llm"
EXPIRY_GRACE = timedelta(minutes=5)


@dataclass
class RateLimiter:
    """Soft daily and hourly ceilings on analysis calls.

    The read and the increment are separate cache calls, so two concurrent
    requests from one user may both pass at the ceiling.
    """

    cache: Cache
    daily_limit: int = DAILY_LIMIT
    hourly_limit: int = HOURLY_LIMIT
    disabled: bool = False
    clock: Callable[[], datetime] = utc_now

    def allow(self, user_id: UUID, context: str = "") -> bool:
        """Consume one call from the user's quota, or refuse."""
        if self.disabled:
            return True

        now = self.clock()
        day_key = daily_key(user_id, now)
        hour_key = hourly_key(user_id, now)

        if self._count(day_key) >= self.daily_limit:
            _log_exceeded("daily", day_key, user_id, context)
            return False
        if self._count(hour_key) >= self.hourly_limit:
            _log_exceeded("hourly", hour_key, user_id, context)
            return False

        self._increment(day_key, _end_of_day(now) + EXPIRY_GRACE)
        self._increment(hour_key, _end_of_hour(now) + EXPIRY_GRACE)
        return True

    def _count(self, key: str) -> int:
        value = self.cache.get(key)
        return value if isinstance(value, int) else 0

    def _increment(self, key: str, expires_at: datetime) -> None:
        self.cache.set(key, self._count(key) + 1, expires_at)


def daily_key(user_id: UUID, now: datetime) -> str:
    return f"{KEY_NAMESPACE}:user:{user_id}:day:{now:%Y%m%d}"


def hourly_key(user_id: UUID, now: datetime) -> str:
    return f"{KEY_NAMESPACE}:user:{user_id}:hour:{now:%Y%m%d%H}"


def _end_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)


def _end_of_hour(now: datetime) -> datetime:
    return now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)


def _log_exceeded(limit: str, key: str, user_id: UUID, context: str) -> None:
    logger.warning(
        "LLM rate limit exceeded limit=%s key=%s user_id=%s %s",
        limit,
        key,
        user_id,
        context,
    )
