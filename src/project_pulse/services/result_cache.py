"""Short-lived in-memory result cache keyed by repository identity."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Generic, MutableMapping, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    value: V
    expires_at: float


class ResultCache(Generic[V]):
    """TTL cache with an injectable clock and backing store.

    An entry is live while ``clock() <= expires_at``; after that, ``get``
    evicts it and reports a miss.  Concurrent writers for the same key race
    and the last one wins.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        store: MutableMapping[str, CacheEntry[V]] | None = None,
    ) -> None:
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._store: MutableMapping[str, CacheEntry[V]] = {} if store is None else store
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> V | None:
        """Return the live value for *key*, or ``None`` on a miss."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                logger.debug("Cache miss for %s", key)
                return None
            if self._clock() > entry.expires_at:
                del self._store[key]
                logger.debug("Cache entry for %s expired", key)
                return None
            logger.debug("Cache hit for %s", key)
            return entry.value

    def set(self, key: str, value: V) -> None:
        with self._lock:
            self._store[key] = CacheEntry(value=value, expires_at=self._clock() + self._ttl)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
