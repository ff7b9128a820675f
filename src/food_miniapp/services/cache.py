"""Simple cache abstractions."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol, TypeVar

T = TypeVar("T")


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def put(self, key: str, value: object) -> None:
        """Insert or overwrite a cached value."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime | None


@dataclass
class InMemoryCache(Cache):
    """Process-lifetime cache; unbounded and non-expiring unless configured."""

    max_entries: int | None
    ttl_seconds: int | None
    _entries: dict[str, _CacheEntry]

    def __init__(
        self, max_entries: int | None = None, ttl_seconds: int | None = None
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._entries = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def put(self, key: str, value: object) -> None:
        """Store a value, evicting the oldest entry when at capacity."""
        expires_at = None
        if self.ttl_seconds is not None:
            expires_at = datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds)
        self._entries.pop(key, None)
        if self.max_entries is not None and len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            self._entries.pop(oldest, None)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)


@dataclass
class SingleFlight:
    """Collapses concurrent calls for the same key into one shared call."""

    _calls: dict[str, "asyncio.Future[object]"]

    def __init__(self) -> None:
        self._calls = {}

    def in_flight(self, key: str) -> bool:
        """Return True while a call for the key is running."""
        return key in self._calls

    async def run(self, key: str, func: Callable[[], Awaitable[T]]) -> T:
        """Await the in-flight call for a key, starting one if there is none.

        Cancelling one caller does not cancel the shared call.
        """
        call = self._calls.get(key)
        if call is None:
            call = asyncio.ensure_future(func())
            self._calls[key] = call
            call.add_done_callback(lambda done: self._forget(key, done))
        return await asyncio.shield(call)

    def _forget(self, key: str, call: "asyncio.Future[object]") -> None:
        if self._calls.get(key) is call:
            del self._calls[key]
