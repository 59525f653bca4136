"""In-process TTL cache for taxonomy listings.

Stores values under versioned string keys and supports glob-pattern
invalidation, so a mutation on one taxonomy can drop every cached view of
it at once. Lives for the lifetime of the process; each worker has its own.
"""

from __future__ import annotations

import asyncio
import fnmatch
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from app.config import settings
from app.infra.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CacheInvalidator(Protocol):
    """What the taxonomy core needs from a cache: dropping keys by pattern."""

    async def invalidate(self, patterns: str | Iterable[str]) -> int: ...


class CacheKeys:
    """Versioned key builders, one namespace per taxonomy."""

    def __init__(self, version: str | None = None) -> None:
        self.version = version or settings.cache_version

    def tree(self, namespace: str) -> str:
        return f"{namespace}:{self.version}:tree"

    def flat(self, namespace: str) -> str:
        return f"{namespace}:{self.version}:flat"

    def pattern(self, namespace: str) -> str:
        """Pattern matching every key of one namespace at the current version."""
        return f"{namespace}:{self.version}:*"


@dataclass
class _Entry:
    value: Any
    expires_at: float | None


class TTLCache:
    """Async-safe key/value cache with per-entry TTL.

    A ``ttl`` of 0 or None stores the entry without expiry.
    """

    def __init__(
        self,
        default_ttl: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()
        self._default_ttl = settings.cache_ttl_seconds if default_ttl is None else default_ttl
        self._clock = clock
        # Bumped by every invalidation; remember() skips storing results computed across a bump
        self._generation = 0
        self.hits = 0
        self.misses = 0

    def _expiry(self, ttl: int | None) -> float | None:
        ttl = self._default_ttl if ttl is None else ttl
        if not ttl:
            return None
        return self._clock() + ttl

    def _is_live(self, entry: _Entry) -> bool:
        return entry.expires_at is None or entry.expires_at > self._clock()

    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if not self._is_live(entry):
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return entry.value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        async with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._expiry(ttl))
        logger.debug("Cache set", key=key, ttl=ttl if ttl is not None else self._default_ttl)

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def invalidate(self, patterns: str | Iterable[str]) -> int:
        """Delete every key matching any of the glob ``patterns``.

        Returns:
            Number of keys removed
        """
        if isinstance(patterns, str):
            patterns = [patterns]
        patterns = list(patterns)

        async with self._lock:
            doomed = [
                key
                for key in self._entries
                if any(fnmatch.fnmatchcase(key, pattern) for pattern in patterns)
            ]
            for key in doomed:
                del self._entries[key]
            self._generation += 1

        logger.debug("Cache invalidated", patterns=patterns, removed=len(doomed))
        return len(doomed)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            self._generation += 1

    async def remember(
        self,
        key: str,
        ttl: int | None,
        factory: Callable[[], Awaitable[T]],
    ) -> T:
        """Return the cached value for ``key`` or compute, store and return it.

        A failing factory propagates; nothing is cached in that case. A value
        computed while an invalidation ran is returned but not stored, since
        it may predate the change that triggered the invalidation.
        """
        cached = await self.get(key)
        if cached is not None:
            logger.debug("Cache hit", key=key)
            return cached

        generation = self._generation
        value = await factory()

        async with self._lock:
            stale = generation != self._generation
            if not stale:
                self._entries[key] = _Entry(value=value, expires_at=self._expiry(ttl))

        if stale:
            logger.debug("Cache invalidated during load, not storing", key=key)
        return value

    def __len__(self) -> int:
        return len(self._entries)


# Global singleton instance
_cache: TTLCache | None = None


def get_cache() -> TTLCache:
    """Get or create the global cache singleton."""
    global _cache

    if _cache is None:
        _cache = TTLCache()
        logger.info("Created global TTLCache", default_ttl=settings.cache_ttl_seconds)

    return _cache
