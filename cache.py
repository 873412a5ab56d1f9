#!/usr/bin/env python3
"""
In-process recency cache for extracted articles.

The cache is an explicitly owned object: the service creates one and hands it
to the extractor, so tests can build isolated instances. Entries live only as
long as the process.
"""

from collections import OrderedDict
from threading import Lock
from time import monotonic
from typing import Callable, Generic, Optional, Tuple, TypeVar

from config import get_logger

logger = get_logger("cache")

V = TypeVar("V")


class ResultCache(Generic[V]):
    """Bounded LRU cache keyed by source URL with optional time-based expiry.

    ``get`` refreshes recency; ``put`` inserts or replaces and evicts the least
    recently used entry when the capacity is exceeded. A ``ttl_seconds`` of 0
    keeps entries until they are evicted.
    """

    def __init__(self, capacity: int = 100, ttl_seconds: float = 0,
                 clock: Callable[[], float] = monotonic):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, V]]" = OrderedDict()
        self._lock = Lock()

    def _expired(self, stored_at: float) -> bool:
        return self.ttl_seconds > 0 and self._clock() - stored_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._expired(stored_at):
                del self._entries[key]
                logger.debug(f"Cache entry expired for {key}")
                return None
            self._entries.move_to_end(key)
            return value

    def put(self, key: str, value: V) -> None:
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            self._entries[key] = (self._clock(), value)
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted {evicted} from result cache")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
            return entry is not None and not self._expired(entry[0])

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
