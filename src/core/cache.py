"""In-process TTL caching for read-mostly data."""
import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class _Entry(Generic[V]):
    value: V
    stored_at: float


class TTLCache(Generic[K, V]):
    """
    Read-through cache with a fixed time-to-live per entry.

    Entries are replaced wholesale, never edited; `invalidate` drops an entry so the
    next read refetches. Concurrent misses for the same key share a single load: the
    first caller runs the loader while later callers wait on a per-key lock and then
    read the freshly stored value.

    A load that was already running when `invalidate` was called does not store its
    result, since it may have read data from before the write that triggered the
    invalidation.

    The cache is process-local; a multi-process deployment would need a shared
    invalidation channel.
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: dict[K, _Entry[V]] = {}
        # Per-key bookkeeping that exists only while callers are loading or waiting
        self._locks: dict[K, asyncio.Lock] = {}
        self._generations: dict[K, int] = {}
        self._inflight: dict[K, int] = {}

    def _fresh(self, key: K) -> _Entry[V] | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            return None
        return entry

    def peek(self, key: K) -> V | None:
        """Return the cached value if present and fresh, without loading."""
        entry = self._fresh(key)
        return entry.value if entry else None

    async def get_or_load(self, key: K, loader: Callable[[], Awaitable[V]]) -> V:
        """Return the fresh cached value for `key`, calling `loader` on a miss."""
        entry = self._fresh(key)
        if entry is not None:
            logger.debug("%s_hit key=%s", self.name, key)
            return entry.value

        lock = self._locks.setdefault(key, asyncio.Lock())
        self._inflight[key] = self._inflight.get(key, 0) + 1
        try:
            async with lock:
                # Another caller may have loaded while we waited
                entry = self._fresh(key)
                if entry is not None:
                    logger.debug("%s_hit key=%s", self.name, key)
                    return entry.value

                logger.debug("%s_miss key=%s", self.name, key)
                generation = self._generations.get(key, 0)
                value = await loader()
                if self._generations.get(key, 0) == generation:
                    self._entries[key] = _Entry(value=value, stored_at=self._clock())
                return value
        finally:
            self._inflight[key] -= 1
            if not self._inflight[key]:
                del self._inflight[key]
                self._locks.pop(key, None)
                self._generations.pop(key, None)

    def invalidate(self, key: K) -> None:
        """Drop the entry for `key` and discard the result of any load in flight."""
        self._entries.pop(key, None)
        if key in self._inflight:
            self._generations[key] = self._generations.get(key, 0) + 1
        logger.debug("%s_invalidate key=%s", self.name, key)

    def clear(self) -> None:
        """Drop every entry, including loads still in flight."""
        self._entries.clear()
        for key in self._inflight:
            self._generations[key] = self._generations.get(key, 0) + 1
        logger.debug("%s_clear", self.name)

    def __len__(self) -> int:
        return len(self._entries)


def invalidate_after_commit(db: AsyncSession, callback: Callable[[], None]) -> None:
    """
    Run `callback` once the session's current transaction commits.

    Services invalidate immediately (so reads later in the same request see the
    write) and again after commit, so a concurrent request that refetched between
    the flush and the commit cannot leave a stale entry behind.
    """
    event.listen(db.sync_session, "after_commit", lambda _session: callback(), once=True)
