"""
infrastructure/plan_cache.py

Memoized plans for action libraries without deferred preconditions.

A stored plan is reusable only while everything the search depends on is
unchanged: the library contents, the heuristic and its parameters, the cost
mode, the expansion cap, the start state and the goal. PlanCacheKey holds
exactly those parts. Entries expire
after a TTL and the oldest entries are evicted once the cache is full, both
handled by cachetools.TTLCache.

Usage:
    from infrastructure.plan_cache import get_plan_cache

    cache = get_plan_cache(maxsize=256, ttl=600)
    cached = cache.lookup(key)
    if cached is None:
        cache.store(key, ["RELOAD", "SHOOT"], cost=26)
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Hashable, NamedTuple, Optional, Sequence, Tuple

from cachetools import TTLCache

from component_15_logging_config import get_logger

logger = get_logger(__name__)


class PlanCacheKey(NamedTuple):
    """Identity of a planning problem for memoization."""

    library: Tuple[Hashable, ...]
    heuristic: Hashable
    cumulative_cost: bool
    max_expansions: Optional[int]
    start: Tuple[str, ...]
    goal: Tuple[str, ...]


@dataclass(frozen=True)
class CachedPlan:
    actions: Tuple[str, ...]
    cost: float


@dataclass
class PlanCacheStats:
    hits: int = 0
    misses: int = 0
    stores: int = 0
    evictions: int = 0

    @property
    def lookups(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.lookups if self.lookups else 0.0


class _EvictionReportingCache(TTLCache):
    """TTLCache that reports entries dropped for capacity."""

    def __init__(
        self,
        maxsize: int,
        ttl: int,
        timer: Callable[[], float],
        on_evict: Callable[[PlanCacheKey], None],
    ) -> None:
        super().__init__(maxsize, ttl, timer=timer)
        self._on_evict = on_evict

    def popitem(self):
        key, value = super().popitem()
        self._on_evict(key)
        return key, value


class PlanCache:
    """
    Thread-safe store of found plans.

    Attributes:
        maxsize: Maximum number of stored plans
        ttl: Seconds a plan stays valid
        stats: Hit, miss, store and eviction counters
    """

    def __init__(
        self, maxsize: int, ttl: int, timer: Callable[[], float] = time.monotonic
    ) -> None:
        if maxsize <= 0:
            raise ValueError(f"Plan cache size must be positive, got {maxsize}")
        if ttl <= 0:
            raise ValueError(f"Plan cache TTL must be positive, got {ttl}")

        self.maxsize = maxsize
        self.ttl = ttl
        self.stats = PlanCacheStats()
        self._timer = timer
        self._lock = threading.Lock()
        self._entries = self._new_entries()

    def _new_entries(self) -> _EvictionReportingCache:
        return _EvictionReportingCache(
            self.maxsize, self.ttl, self._timer, self._record_eviction
        )

    def _record_eviction(self, key: PlanCacheKey) -> None:
        self.stats.evictions += 1
        logger.debug("Plan evicted from cache", extra={"goal": key.goal})

    def lookup(self, key: PlanCacheKey) -> Optional[CachedPlan]:
        """Return the stored plan, or None if it is absent or expired."""
        with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                self.stats.misses += 1
                return None
            self.stats.hits += 1

        logger.debug(
            "Plan cache hit", extra={"plan_length": len(cached.actions), "hits": self.stats.hits}
        )
        return cached

    def store(self, key: PlanCacheKey, actions: Sequence[str], cost: float) -> CachedPlan:
        cached = CachedPlan(actions=tuple(actions), cost=cost)
        with self._lock:
            self._entries[key] = cached
            self.stats.stores += 1
        return cached

    def discard(self, key: PlanCacheKey) -> bool:
        """Drop one plan. Returns whether it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every plan and return how many were live."""
        with self._lock:
            self._entries.expire()
            count = len(self._entries)
            # clear() on a cachetools cache goes through popitem()
            self._entries = self._new_entries()

        logger.info("Plan cache cleared", extra={"entries": count})
        return count

    def has_policy(self, maxsize: int, ttl: int) -> bool:
        return self.maxsize == maxsize and self.ttl == ttl

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __repr__(self) -> str:
        return f"PlanCache(maxsize={self.maxsize}, ttl={self.ttl}, stats={self.stats})"


# ============================================================================
# Shared instance
# ============================================================================

_shared_cache: Optional[PlanCache] = None
_shared_lock = threading.Lock()


def get_plan_cache(maxsize: int, ttl: int) -> PlanCache:
    """
    Return the process-wide plan cache.

    The cache is created on first use and rebuilt (empty) when a caller asks
    for a different size or TTL.
    """
    global _shared_cache

    with _shared_lock:
        if _shared_cache is None or not _shared_cache.has_policy(maxsize, ttl):
            if _shared_cache is not None:
                logger.info(
                    "Plan cache policy changed, rebuilding",
                    extra={"maxsize": maxsize, "ttl": ttl},
                )
            _shared_cache = PlanCache(maxsize, ttl)
        return _shared_cache


def current_plan_cache() -> Optional[PlanCache]:
    """The shared cache if one has been created, without creating it."""
    return _shared_cache


def reset_plan_cache() -> None:
    """Forget the shared cache. Intended for tests."""
    global _shared_cache

    with _shared_lock:
        _shared_cache = None
