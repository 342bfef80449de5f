"""TTL query cache with stale marking for dashboard collections."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import structlog

from ..config import settings

logger = structlog.get_logger(__name__)

Fetcher = Callable[[str], Awaitable[Any]]
Subscriber = Callable[[str], None]


@dataclass
class CacheEntry:
    data: Any = None
    fetched_at: float = 0.0
    stale: bool = True
    error: Optional[str] = None
    fetch_count: int = 0
    generation: int = 0
    subscribers: List[Subscriber] = field(default_factory=list)


class QueryCache:
    """Caches fetched collections by key and refetches stale entries on read.

    ``invalidate`` only marks entries stale and notifies subscribers; it is
    idempotent and safe to call from any message callback. A key also
    invalidates entries nested under it (``/api/loads`` covers
    ``/api/loads/42``). A fetch that was in flight when its key was
    invalidated still answers its own callers but is not stored.
    """

    def __init__(self, fetcher: Fetcher, ttl_seconds: Optional[float] = None) -> None:
        self._fetcher = fetcher
        self._ttl_seconds = max(
            1.0, float(settings.cache.ttl_seconds if ttl_seconds is None else ttl_seconds)
        )
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, Tuple[int, asyncio.Task]] = {}

    def _entry(self, key: str) -> CacheEntry:
        return self._entries.setdefault(key, CacheEntry())

    def peek(self, key: str) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry else None

    def is_stale(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None or entry.stale:
            return True
        return (time.monotonic() - entry.fetched_at) >= self._ttl_seconds

    async def get(self, key: str, *, force_refresh: bool = False) -> Any:
        """Return cached data for ``key``, fetching when missing, stale or expired.

        Concurrent reads of the same key share one fetch.
        """
        if not force_refresh and not self.is_stale(key):
            return self._entries[key].data

        entry = self._entry(key)
        inflight = self._inflight.get(key)
        # A fetch started before the latest invalidation may carry old data.
        if inflight is None or inflight[0] != entry.generation:
            task = asyncio.get_running_loop().create_task(self._fetch(key, entry.generation))
            self._inflight[key] = (entry.generation, task)
            task.add_done_callback(lambda t, k=key: self._forget(k, t))
        else:
            task = inflight[1]
        return await asyncio.shield(task)

    def _forget(self, key: str, task: asyncio.Task) -> None:
        inflight = self._inflight.get(key)
        if inflight is not None and inflight[1] is task:
            del self._inflight[key]

    async def _fetch(self, key: str, generation: int) -> Any:
        entry = self._entry(key)
        try:
            data = await self._fetcher(key)
        except Exception as exc:
            if entry.generation == generation:
                entry.error = str(exc)
                entry.stale = True
            logger.warning("Query fetch failed", key=key, error=str(exc))
            raise
        if entry.generation != generation:
            logger.debug("Discarded fetch superseded by invalidation", key=key)
            return data
        entry.data = data
        entry.error = None
        entry.stale = False
        entry.fetched_at = time.monotonic()
        entry.fetch_count += 1
        return data

    def set(self, key: str, data: Any) -> None:
        entry = self._entry(key)
        entry.generation += 1
        entry.data = data
        entry.stale = False
        entry.error = None
        entry.fetched_at = time.monotonic()

    def invalidate(self, key: str) -> int:
        """Mark ``key`` and nested keys stale; returns the number of entries touched."""
        prefix = key.rstrip("/") + "/"
        touched = 0
        for entry_key, entry in list(self._entries.items()):
            if entry_key != key and not entry_key.startswith(prefix):
                continue
            entry.stale = True
            entry.generation += 1
            touched += 1
            for subscriber in list(entry.subscribers):
                try:
                    subscriber(entry_key)
                except Exception as exc:
                    logger.error("Cache subscriber failed", key=entry_key, error=str(exc))
        return touched

    def subscribe(self, key: str, subscriber: Subscriber) -> Callable[[], None]:
        """Call ``subscriber(key)`` whenever ``key`` is invalidated."""
        entry = self._entry(key)
        entry.subscribers.append(subscriber)

        def _unsubscribe() -> None:
            if subscriber in entry.subscribers:
                entry.subscribers.remove(subscriber)

        return _unsubscribe

    def clear(self) -> None:
        for _, task in self._inflight.values():
            task.cancel()
        self._inflight.clear()
        self._entries.clear()

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        return {
            key: {
                "stale": self.is_stale(key),
                "fetch_count": entry.fetch_count,
                "error": entry.error,
            }
            for key, entry in self._entries.items()
        }
