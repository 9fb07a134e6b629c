"""
Single-flight TTL cache for valuation batches.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Generic, Hashable, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    batch: Tuple[T, ...]
    computed_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    refreshes: int = 0


class ValuationCache(Generic[T]):
    """
    Memoize a batch per key for max_age seconds.

    Fresh entries are served without locking. A stale or missing entry is
    recomputed under a per-key lock, so concurrent callers share one compute
    and waiters pick up its result after the lock is released.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[T]] = {}
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self.stats = CacheStats()

    def _fresh(self, key: Hashable, max_age: float) -> Optional[CacheEntry[T]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.computed_at >= max_age:
            return None
        return entry

    def peek(self, key: Hashable) -> Optional[CacheEntry[T]]:
        """Current entry regardless of age."""
        return self._entries.get(key)

    async def get(
        self,
        key: Hashable,
        max_age: float,
        compute: Callable[[], Awaitable[Sequence[T]]],
    ) -> Tuple[T, ...]:
        entry = self._fresh(key, max_age)
        if entry is not None:
            self.stats.hits += 1
            return entry.batch

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another caller may have refreshed while we waited
            entry = self._fresh(key, max_age)
            if entry is not None:
                self.stats.hits += 1
                return entry.batch

            self.stats.misses += 1
            batch = tuple(await compute())
            self._entries[key] = CacheEntry(batch=batch, computed_at=self._clock())
            self.stats.refreshes += 1
            logger.debug(f"Cache refreshed for {key!r} ({len(batch)} items)")
            return batch

    def invalidate(self, key: Hashable) -> None:
        self._entries.pop(key, None)
