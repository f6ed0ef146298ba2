from __future__ import annotations

from asyncio import Lock
import time
from typing import Any, Awaitable, Callable


class TTLCache:
    """A small in-memory TTL cache with async-safe access.

    Leaderboards are derived from the whole roster and match log, so every
    ladder write clears the cache instead of invalidating individual keys.
    """

    def __init__(self, ttl_seconds: float = 60.0) -> None:
        self._ttl = ttl_seconds
        self._lock = Lock()
        self._store: dict[Any, tuple[Any, float]] = {}

    async def get(self, key: Any) -> Any | None:
        now = time.monotonic()
        async with self._lock:
            entry = self._store.get(key)
            if not entry:
                return None
            value, expires_at = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return value

    async def set(self, key: Any, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        expires_at = time.monotonic() + max(ttl, 0.0)
        async with self._lock:
            if ttl <= 0:
                self._store.pop(key, None)
            else:
                self._store[key] = (value, expires_at)

    async def get_or_compute(
        self, key: Any, compute: Callable[[], Awaitable[Any]]
    ) -> Any:
        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await compute()
        await self.set(key, value)
        return value

    async def clear(self) -> None:
        async with self._lock:
            self._store.clear()


leaderboard_cache = TTLCache(ttl_seconds=60.0)
