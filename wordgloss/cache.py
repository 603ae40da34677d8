"""Generic in-memory cache with LRU eviction and per-entry TTL.

A single :class:`TTLCache` implementation backs the vocabulary service, the
translation service and any caller that needs memoisation. Expiration is
enforced lazily on every read; the optional sweeper thread only reclaims
memory for keys nobody asks for any more.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, Generic, Hashable, List, Optional, Tuple, TypeVar

from . import logging_manager as log_mgr
from .config.constants import (
    CACHE_CLEANUP_INTERVAL_SECONDS,
    CACHE_TTL_SECONDS,
    DEFAULT_CACHE_SIZE,
)

logger = log_mgr.get_logger().getChild("cache")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(slots=True)
class CacheEntry(Generic[V]):
    """Stored value together with its creation and expiry timestamps."""

    value: V
    created_at: float
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now <= self.expires_at


@dataclass(slots=True)
class CacheStats:
    """Counters describing cache activity since the last reset."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    sets: int = 0
    size: int = 0
    max_size: int = 0
    hit_rate: float = field(default=0.0)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class TTLCache(Generic[K, V]):
    """Thread-safe key/value store bounded by size and wall-clock age.

    Recency is tracked by access: both :meth:`get` hits and :meth:`set`
    move a key to the most-recently-used end, and inserting beyond
    ``max_size`` evicts from the least-recently-used end.
    """

    def __init__(
        self,
        *,
        max_size: int = DEFAULT_CACHE_SIZE,
        ttl: float = CACHE_TTL_SECONDS,
        cleanup_interval: float = CACHE_CLEANUP_INTERVAL_SECONDS,
        auto_cleanup: bool = False,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.name = name
        self._max_size = max_size
        self._ttl = float(ttl)
        self._cleanup_interval = max(0.01, float(cleanup_interval))
        self._clock = clock
        self._entries: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats(max_size=max_size)
        self._shutdown = threading.Event()
        self._sweeper: Optional[threading.Thread] = None
        if auto_cleanup:
            self.start_auto_cleanup()

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, key: object) -> bool:
        return self.has(key)  # type: ignore[arg-type]

    def get(self, key: K) -> Tuple[Optional[V], bool]:
        """Return ``(value, found)``; an expired entry is evicted and reported as a miss."""

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                return None, False
            if not entry.is_valid(self._clock()):
                del self._entries[key]
                self._stats.expirations += 1
                self._stats.misses += 1
                return None, False
            self._entries.move_to_end(key)
            self._stats.hits += 1
            return entry.value, True

    def get_value(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Convenience wrapper around :meth:`get` returning ``default`` on a miss."""

        value, found = self.get(key)
        return value if found else default

    def set(self, key: K, value: V, ttl: Optional[float] = None) -> None:
        """Insert or replace ``key`` and mark it most recently used."""

        lifetime = self._ttl if ttl is None else float(ttl)
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(value=value, created_at=now, expires_at=now + lifetime)
            self._entries.move_to_end(key)
            self._stats.sets += 1
            while len(self._entries) > self._max_size:
                evicted, _ = self._entries.popitem(last=False)
                self._stats.evictions += 1
                logger.debug(
                    "Evicted least recently used entry",
                    extra={"event": "cache.evicted", "cache": self.name, "key": str(evicted)},
                )

    def has(self, key: K) -> bool:
        """Return whether ``key`` holds a live entry without touching recency."""

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if not entry.is_valid(self._clock()):
                del self._entries[key]
                self._stats.expirations += 1
                return False
            return True

    def delete(self, key: K) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Drop every entry and reset the counters."""

        with self._lock:
            self._entries.clear()
            self._stats = CacheStats(max_size=self._max_size)

    def cleanup(self) -> int:
        """Remove every expired entry and return how many were dropped."""

        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if not entry.is_valid(now)]
            for key in expired:
                del self._entries[key]
            self._stats.expirations += len(expired)
        if expired:
            logger.debug(
                "Removed expired cache entries",
                extra={"event": "cache.cleanup", "cache": self.name, "removed": len(expired)},
            )
        return len(expired)

    def resize(self, max_size: int) -> None:
        """Change the capacity, evicting least recently used entries if needed."""

        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        with self._lock:
            self._max_size = max_size
            self._stats.max_size = max_size
            while len(self._entries) > max_size:
                self._entries.popitem(last=False)
                self._stats.evictions += 1

    def keys(self) -> List[K]:
        """Return live keys ordered from least to most recently used."""

        with self._lock:
            now = self._clock()
            return [key for key, entry in self._entries.items() if entry.is_valid(now)]

    def values(self) -> List[V]:
        with self._lock:
            now = self._clock()
            return [entry.value for entry in self._entries.values() if entry.is_valid(now)]

    def stats(self) -> CacheStats:
        """Return a snapshot of the counters."""

        with self._lock:
            lookups = self._stats.hits + self._stats.misses
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                evictions=self._stats.evictions,
                expirations=self._stats.expirations,
                sets=self._stats.sets,
                size=len(self._entries),
                max_size=self._max_size,
                hit_rate=(self._stats.hits / lookups) if lookups else 0.0,
            )

    def start_auto_cleanup(self) -> None:
        """Start the background sweeper if it is not already running."""

        with self._lock:
            if self._sweeper is not None and self._sweeper.is_alive():
                return
            self._shutdown.clear()
            self._sweeper = threading.Thread(
                target=self._sweep_loop,
                name=f"TTLCache-{self.name}-sweeper",
                daemon=True,
            )
            self._sweeper.start()

    def stop_auto_cleanup(self) -> None:
        self._shutdown.set()
        sweeper = self._sweeper
        if sweeper is not None and sweeper is not threading.current_thread():
            sweeper.join(timeout=1.0)
        self._sweeper = None

    @property
    def auto_cleanup_running(self) -> bool:
        sweeper = self._sweeper
        return sweeper is not None and sweeper.is_alive()

    def close(self) -> None:
        """Stop the sweeper and release every entry."""

        self.stop_auto_cleanup()
        self.clear()

    def _sweep_loop(self) -> None:
        while not self._shutdown.wait(timeout=self._cleanup_interval):
            self.cleanup()


__all__ = ["CacheEntry", "CacheStats", "TTLCache"]
