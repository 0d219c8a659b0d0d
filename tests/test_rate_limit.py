"""Tests for per-user LLM rate limiting."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from nutrition_journal.services.cache import InMemoryCache
from nutrition_journal.services.rate_limit import (
    DAILY_LIMIT,
    HOURLY_LIMIT,
    RateLimiter,
    daily_key,
    hourly_key,
)
from tests.conftest import FakeClock


def test_rate_limiter_rejects_eleventh_call_in_an_hour(rate_limiter) -> None:
    user_id = uuid4()

    allowed = [rate_limiter.allow(user_id) for _ in range(HOURLY_LIMIT)]

    assert all(allowed)
    assert rate_limiter.allow(user_id) is False


def test_rate_limiter_counts_users_separately(rate_limiter) -> None:
    first = uuid4()
    for _ in range(HOURLY_LIMIT):
        rate_limiter.allow(first)

    assert rate_limiter.allow(first) is False
    assert rate_limiter.allow(uuid4()) is True


def test_rate_limiter_hourly_window_resets(rate_limiter, clock) -> None:
    user_id = uuid4()
    for _ in range(HOURLY_LIMIT):
        rate_limiter.allow(user_id)

    clock.advance(timedelta(hours=1))

    assert rate_limiter.allow(user_id) is True


def test_rate_limiter_enforces_daily_limit() -> None:
    clock = FakeClock(now=datetime(2024, 5, 10, 0, 15, tzinfo=UTC))
    limiter = RateLimiter(cache=InMemoryCache(clock=clock), clock=clock)
    user_id = uuid4()

    for _ in range(DAILY_LIMIT // HOURLY_LIMIT):
        assert all(limiter.allow(user_id) for _ in range(HOURLY_LIMIT))
        clock.advance(timedelta(hours=1))

    assert limiter.allow(user_id) is False

    clock.now = datetime(2024, 5, 11, 0, 5, tzinfo=UTC)
    assert limiter.allow(user_id) is True


def test_rate_limiter_rejection_does_not_consume_quota(clock) -> None:
    cache = InMemoryCache(clock=clock)
    limiter = RateLimiter(cache=cache, hourly_limit=1, clock=clock)
    user_id = uuid4()

    limiter.allow(user_id)
    limiter.allow(user_id)
    limiter.allow(user_id)

    assert cache.get(daily_key(user_id, clock.now)) == 1
    assert cache.get(hourly_key(user_id, clock.now)) == 1


def test_rate_limiter_disabled_allows_everything(clock) -> None:
    cache = InMemoryCache(clock=clock)
    limiter = RateLimiter(cache=cache, hourly_limit=0, disabled=True, clock=clock)
    user_id = uuid4()

    assert all(limiter.allow(user_id) for _ in range(HOURLY_LIMIT + 5))
    assert cache.get(hourly_key(user_id, clock.now)) is None


def test_rate_limit_keys_use_calendar_buckets() -> None:
    user_id = uuid4()
    now = datetime(2024, 5, 10, 14, 30, tzinfo=UTC)

    assert daily_key(user_id, now) == f"journal:llm:user:{user_id}:day:20240510"
    assert hourly_key(user_id, now) == f"journal:llm:user:{user_id}:hour:2024051014"


def test_in_memory_cache_expires_entries(clock) -> None:
    cache = InMemoryCache(clock=clock)
    cache.set("counter", 3, clock.now + timedelta(minutes=5))

    assert cache.get("counter") == 3

    clock.advance(timedelta(minutes=5))

    assert cache.get("counter") is None
