"""Memory-bounded, time-limited cache of simulated flights.

TrajectoryCache maps a string key, usually built by `make_cache_key`, to a TrajectoryResult.
Entries expire a fixed time after insertion and the least-recently-accessed entry is evicted
when an insertion would exceed the byte budget. The cache is safe to share between threads.

Size accounting is an estimate: every trajectory point is counted as `POINT_SIZE_BYTES`.

Examples:
    ```python
    from py_golfflight.cache import TrajectoryCache, make_cache_key

    with TrajectoryCache(max_size_mb=10) as cache:
        key = make_cache_key(conditions, environment, properties)
        if (result := cache.get(key)) is None:
            result = engine.simulate_flight(conditions.initial_state(properties), environment, properties)
            cache.set(key, result)
        print(cache.get_stats())
    ```
"""
from __future__ import annotations

import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass

from deprecated import deprecated
from typing_extensions import Callable, Dict, NamedTuple, Optional

from py_golfflight.conditions import BallProperties, Environment, LaunchConditions
from py_golfflight.exceptions import InvalidInputError
from py_golfflight.logger import logger
from py_golfflight.trajectory_data import TrajectoryResult

__all__ = (
    'POINT_SIZE_BYTES',
    'DEFAULT_NAMESPACE',
    'CacheEntry',
    'CacheStats',
    'TrajectoryCache',
    'make_cache_key',
)

POINT_SIZE_BYTES: int = 200
DEFAULT_NAMESPACE: str = 'default'
cMaxSizeMB: float = 100.0
cMaxAgeSeconds: float = 3600.0


def make_cache_key(conditions: LaunchConditions, environment: Environment, properties: BallProperties) -> str:
    """Deterministic key for one simulation input.

    Floats are rounded to a fixed precision per field, so inputs that differ only below
    that precision share a key.
    """
    key = {
        'launch': {
            'ball_speed': round(conditions.ball_speed, 3),
            'launch_angle': round(conditions.launch_angle, 3),
            'launch_direction': round(conditions.launch_direction, 3),
            'spin_rate': round(conditions.spin_rate, 1),
            'spin_axis': [round(c, 4) for c in conditions.spin_axis.normalize()],
        },
        'environment': {
            'temperature': round(environment.temperature),
            'pressure': round(environment.pressure, 2),
            'humidity': round(environment.humidity, 2),
            'altitude': round(environment.altitude),
            'wind': [round(c, 2) for c in environment.wind],
        },
        'ball': {
            'mass': round(properties.mass, 5),
            'radius': round(properties.radius, 5),
            'area': round(properties.area, 7),  # type: ignore[arg-type]
            'drag_coefficient': round(properties.drag_coefficient, 3),
            'lift_coefficient': round(properties.lift_coefficient, 3),
            'magnus_coefficient': round(properties.magnus_coefficient, 3),
            'spin_decay_rate': round(properties.spin_decay_rate, 3),
        },
    }
    return json.dumps(key, sort_keys=True)


@dataclass
class CacheEntry:
    """Stored trajectory with its bookkeeping."""

    trajectory: TrajectoryResult
    inserted_at: float
    last_access: float
    access_count: int
    size: int


class CacheStats(NamedTuple):
    """Snapshot of cache counters.

    Attributes:
        hit_rate: hits / (hits + misses), 0.0 before the first lookup.
        memory_usage: Estimated bytes held.
        entry_count: Number of stored trajectories.
        hits: Lookups that returned a trajectory.
        misses: Lookups that returned None, including expired entries.
        evictions: Entries removed to make room.
        namespaces: Per-namespace (hits, misses).
    """

    hit_rate: float
    memory_usage: int
    entry_count: int
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    namespaces: Optional[Dict[str, tuple]] = None


class TrajectoryCache:
    """Thread-safe LRU/TTL cache of TrajectoryResult.

    Attributes:
        max_size_bytes: Byte budget; memory usage never exceeds it.
        max_age: Entry lifetime in seconds, measured from insertion.
    """

    def __init__(self, max_size_mb: float = cMaxSizeMB, max_age_seconds: float = cMaxAgeSeconds,
                 clock: Callable[[], float] = time.monotonic) -> None:
        if max_size_mb <= 0:
            raise InvalidInputError("max_size_mb must be positive", 'max_size_mb', max_size_mb)
        if max_age_seconds <= 0:
            raise InvalidInputError("max_age_seconds must be positive", 'max_age_seconds', max_age_seconds)
        self.max_size_bytes: int = int(max_size_mb * 1024 * 1024)
        self.max_age: float = max_age_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._memory_usage: int = 0
        self._hits: int = 0
        self._misses: int = 0
        self._evictions: int = 0
        self._namespaces: Dict[str, list] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """True if `key` holds an unexpired entry. Not counted as a lookup."""
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[call-overload]
            return entry is not None and self._clock() - entry.inserted_at <= self.max_age

    def __enter__(self) -> TrajectoryCache:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def memory_usage(self) -> int:
        return self._memory_usage

    def _count(self, namespace: str, hit: bool) -> None:
        counters = self._namespaces.setdefault(namespace, [0, 0])
        if hit:
            self._hits += 1
            counters[0] += 1
        else:
            self._misses += 1
            counters[1] += 1

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key)
        self._memory_usage -= entry.size

    def get(self, key: str, namespace: str = DEFAULT_NAMESPACE) -> Optional[TrajectoryResult]:
        """Return the cached trajectory for `key`, or None.

        An entry older than `max_age` is removed and reported as a miss.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._count(namespace, False)
                return None
            now = self._clock()
            if now - entry.inserted_at > self.max_age:
                self._remove(key)
                logger.debug(f"Cache entry expired after {now - entry.inserted_at:.1f}s")
                self._count(namespace, False)
                return None
            entry.last_access = now
            entry.access_count += 1
            self._entries.move_to_end(key)
            self._count(namespace, True)
            return entry.trajectory

    def set(self, key: str, trajectory: TrajectoryResult) -> bool:
        """Store `trajectory` under `key`.

        Replacing a key releases its previous size first. If the entry does not fit, the
        least-recently-accessed entry is evicted once; if it still does not fit it is not stored.

        Returns:
            True if the trajectory was stored.
        """
        size = len(trajectory) * POINT_SIZE_BYTES
        with self._lock:
            if key in self._entries:
                self._remove(key)
            if size > self.max_size_bytes:
                logger.debug(f"Trajectory of {size} bytes exceeds cache budget {self.max_size_bytes}")
                return False
            if self._memory_usage + size > self.max_size_bytes and self._entries:
                _, evicted = self._entries.popitem(last=False)
                self._memory_usage -= evicted.size
                self._evictions += 1
                logger.debug(f"Evicted cache entry of {evicted.size} bytes "
                             f"(accessed {evicted.access_count} times)")
            if self._memory_usage + size > self.max_size_bytes:
                logger.debug(f"Trajectory of {size} bytes does not fit after eviction, not cached")
                return False
            now = self._clock()
            self._entries[key] = CacheEntry(trajectory, now, now, 0, size)
            self._memory_usage += size
            return True

    def get_stats(self) -> CacheStats:
        with self._lock:
            total = self._hits + self._misses
            return CacheStats(
                hit_rate=self._hits / total if total else 0.0,
                memory_usage=self._memory_usage,
                entry_count=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                namespaces={name: tuple(counts) for name, counts in self._namespaces.items()},
            )

    @deprecated(reason="Use `TrajectoryCache.get_stats` instead.")
    def getStats(self) -> CacheStats:
        return self.get_stats()

    def purge_expired(self) -> int:
        """Remove every expired entry; returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if now - e.inserted_at > self.max_age]
            for key in expired:
                self._remove(key)
            return len(expired)

    def clear(self) -> None:
        """Remove all entries and reset counters."""
        with self._lock:
            self._entries.clear()
            self._memory_usage = 0
            self._hits = self._misses = self._evictions = 0
            self._namespaces.clear()

    def close(self) -> None:
        self.clear()
