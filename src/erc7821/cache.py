"""
Async memoization for capability probes.

A CapabilityCache maps a key to the result of an awaited producer. Callers
racing on the same key share one in-flight producer. Failed producers leave
no entry behind.
"""

import asyncio
import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)


class CapabilityCache:
    """
    Keyed memoization with optional LRU eviction.

    Args:
        max_entries: Maximum number of stored results (None keeps everything)
    """

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is not None and max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got: {max_entries}")
        self.max_entries = max_entries
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._in_flight: Dict[Hashable, "asyncio.Task[Any]"] = {}

    async def get_or_create(
        self, key: Hashable, producer: Callable[[], Awaitable[Any]]
    ) -> Any:
        """
        Return the cached value for `key`, running `producer` on a miss.

        The producer runs as a task shared by every caller of the same key.
        Cancelling one caller leaves the task running for the others.
        Exceptions raised by the producer propagate to every waiter.
        """
        if key in self._entries:
            self._entries.move_to_end(key)
            logger.debug(f"Cache hit: {key}")
            return self._entries[key]

        task = self._in_flight.get(key)
        if task is None:
            logger.debug(f"Cache miss: {key}")
            task = asyncio.ensure_future(self._produce(key, producer))
            self._in_flight[key] = task
        else:
            logger.debug(f"Awaiting in-flight producer: {key}")
        return await asyncio.shield(task)

    async def _produce(self, key: Hashable, producer: Callable[[], Awaitable[Any]]) -> Any:
        try:
            value = await producer()
        finally:
            self._in_flight.pop(key, None)
        self._store(key, value)
        return value

    def _store(self, key: Hashable, value: Any):
        self._entries[key] = value
        self._entries.move_to_end(key)
        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cache entry: {evicted}")

    def get(self, key: Hashable, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def clear(self):
        """Drop every stored result."""
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide instance used when no cache is injected
_default_cache: Optional[CapabilityCache] = None


def get_default_cache(max_entries: Optional[int] = None) -> CapabilityCache:
    """
    Get the shared process-wide capability cache.

    Args:
        max_entries: Bound applied when the cache is first created
    """
    global _default_cache

    if _default_cache is None:
        _default_cache = CapabilityCache(max_entries=max_entries)

    return _default_cache
