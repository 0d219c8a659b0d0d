"""Expiring key-value cache used for usage counters."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class Cache(Protocol):
    """Cache interface with absolute expiry timestamps."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, expires_at: datetime) -> None:
        """Store a value until ``expires_at``."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local cache; counters are not shared across workers."""

    clock: Callable[[], datetime] = utc_now
    _entries: dict[str, _CacheEntry] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        """Return a cached value unless it has expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: object, expires_at: datetime) -> None:
        """Store a value with an absolute expiry."""
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)
