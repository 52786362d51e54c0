"""
In-process cache of computed analytics results.

Results are keyed by view name plus request parameters, so identical
requests share one computation, including requests that arrive while the
first one is still running. Entries expire after the TTL (the configured
refresh interval) and the map is capped in size. "Refresh all" drops every
entry; the next request recomputes from a fresh snapshot.
"""
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 512


class ResultCache:
    """
    Map of (name, params) -> (stored_at, result)

    With a TTL set, entries older than the TTL are dropped on access and
    whenever a new entry is stored. Past max_entries the oldest entries
    are evicted first.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_ENTRIES
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[Tuple, Tuple[float, Any]] = {}
        self._pending: Dict[Tuple, asyncio.Future] = {}
        # Bumped by invalidation so computations started earlier are not stored
        self._generation = 0

    @staticmethod
    def make_key(name: str, params: Optional[dict] = None) -> Tuple:
        return (name, tuple(sorted((params or {}).items())))

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, stored_at: float, now: float) -> bool:
        return self.ttl_seconds is not None and now - stored_at > self.ttl_seconds

    def prune(self) -> int:
        """Drop expired entries, returns the number removed"""
        now = self._clock()
        expired = [key for key, (stored_at, _) in self._entries.items() if self._expired(stored_at, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def get(self, name: str, params: Optional[dict] = None) -> Optional[Any]:
        key = self.make_key(name, params)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, result = entry
        if self._expired(stored_at, self._clock()):
            del self._entries[key]
            return None
        return result

    def put(self, name: str, params: Optional[dict], result: Any) -> None:
        key = self.make_key(name, params)
        self._entries.pop(key, None)
        self.prune()
        self._entries[key] = (self._clock(), result)

        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]

    def _finish(self, name: str, params: Optional[dict], key: Tuple, generation: int, task: asyncio.Future):
        self._pending.pop(key, None)
        if task.cancelled() or task.exception() is not None:
            return
        if generation == self._generation:
            self.put(name, params, task.result())

    async def get_or_compute(self, name: str, params: Optional[dict], compute: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the cached result, join a computation already running for
        the same key, or start compute() and store its result.
        """
        cached = self.get(name, params)
        if cached is not None:
            logger.debug(f"Cache hit: {name} {params}")
            return cached

        key = self.make_key(name, params)
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(compute())
            self._pending[key] = task
            generation = self._generation
            task.add_done_callback(lambda t: self._finish(name, params, key, generation, t))
        else:
            logger.debug(f"Joining in-flight computation: {name} {params}")

        # A cancelled caller must not cancel the computation other callers share
        return await asyncio.shield(task)

    def invalidate(self, name: str) -> int:
        """Drop every entry of one view, returns the number removed"""
        keys = [key for key in self._entries if key[0] == name]
        for key in keys:
            del self._entries[key]
        self._generation += 1
        if keys:
            logger.info(f"Invalidated {len(keys)} cached {name} results")
        return len(keys)

    def invalidate_all(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        self._generation += 1
        logger.info(f"Invalidated all cached results ({count} entries)")
        return count


# Shared by API routes and the data refresh job; the TTL follows the
# configured refresh interval once settings are loaded
result_cache = ResultCache(ttl_seconds=DEFAULT_TTL_SECONDS)
