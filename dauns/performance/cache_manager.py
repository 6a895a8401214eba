"""Scan result cache keyed by file path and validated by modification time.

Entries are evicted least-recently-used first whenever the estimated total
size exceeds the byte budget or the entry count exceeds its maximum.
"""

import os
import time
from collections import OrderedDict
from collections.abc import Sequence
from dataclasses import dataclass, replace
from threading import Lock

from ..analysis.models import VariableInfo
from ..scan_logging import LogCategory, get_category_logger

logger = get_category_logger(LogCategory.CACHE)

DEFAULT_MAX_CACHE_SIZE = 50 * 1024 * 1024
DEFAULT_MAX_ENTRIES = 1000

# Per-variable overhead added to the UTF-16 size of its strings
VARIABLE_OVERHEAD_BYTES = 32


@dataclass
class CachedResult:
    """Cached scan output for one file.

    Attributes:
        variables: Variables produced by the scan.
        last_modified: File mtime (seconds) observed when the entry was written.
        last_accessed: Wall-clock time of the last write or hit.
        size: Estimated size in bytes.
    """

    variables: list[VariableInfo]
    last_modified: float
    last_accessed: float
    size: int


@dataclass
class DependencyInfo:
    dependencies: list[str]
    last_updated: float


@dataclass
class CacheStats:
    hit_count: int = 0
    miss_count: int = 0
    total_requests: int = 0
    cache_size: int = 0
    max_cache_size: int = DEFAULT_MAX_CACHE_SIZE


def estimate_size(variables: Sequence[VariableInfo]) -> int:
    """Approximate memory footprint of a variable list in bytes."""
    return sum(
        2 * len(variable.name)
        + 2 * len(variable.type)
        + 2 * len(variable.declaration_type)
        + VARIABLE_OVERHEAD_BYTES
        for variable in variables
    )


class CacheManager:
    """Thread-safe LRU cache of per-file scan results.

    A cached entry stays valid while its stored modification time is greater
    than or equal to the file's current one. A file that can no longer be
    stat'ed invalidates its entry.
    """

    def __init__(
        self,
        max_cache_size: int = DEFAULT_MAX_CACHE_SIZE,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        self.max_entries = max_entries
        self._file_cache: OrderedDict[str, CachedResult] = OrderedDict()
        self._dependency_cache: dict[str, DependencyInfo] = {}
        self._stats = CacheStats(max_cache_size=max_cache_size)
        self._lock = Lock()

    def get_cached_result(self, file_path: str) -> CachedResult | None:
        """Return the valid cached result for ``file_path``, or None on a miss."""
        with self._lock:
            self._stats.total_requests += 1

            cached = self._file_cache.get(file_path)
            if cached is not None:
                try:
                    current_mtime = os.stat(file_path).st_mtime
                except OSError:
                    logger.debug(f"Dropping cache entry for unreadable {file_path}")
                    self._remove(file_path)
                else:
                    if cached.last_modified >= current_mtime:
                        cached.last_accessed = time.time()
                        self._file_cache.move_to_end(file_path)
                        self._stats.hit_count += 1
                        return cached
                    logger.debug(f"Cache entry for {file_path} is stale")
                    self._remove(file_path)

            self._stats.miss_count += 1
            return None

    def set_cached_result(self, file_path: str, variables: Sequence[VariableInfo]) -> None:
        """Cache ``variables`` under the file's current modification time."""
        try:
            last_modified = os.stat(file_path).st_mtime
        except OSError as e:
            logger.error(f"Error caching result for {file_path}: {e}")
            return

        entry = CachedResult(
            variables=list(variables),
            last_modified=last_modified,
            last_accessed=time.time(),
            size=estimate_size(variables),
        )

        with self._lock:
            self._remove(file_path)
            self._file_cache[file_path] = entry
            self._stats.cache_size += entry.size
            self._evict()

    def invalidate(self, file_path: str) -> bool:
        """Remove the entry for ``file_path``; returns whether one existed."""
        with self._lock:
            return self._remove(file_path)

    def _remove(self, file_path: str) -> bool:
        cached = self._file_cache.pop(file_path, None)
        if cached is None:
            return False
        self._stats.cache_size -= cached.size
        return True

    def _evict(self) -> None:
        while self._stats.cache_size > self._stats.max_cache_size and self._file_cache:
            lru_key = next(iter(self._file_cache))
            logger.debug(f"Evicting {lru_key} (cache size over budget)")
            self._remove(lru_key)

        while len(self._file_cache) > self.max_entries:
            lru_key = next(iter(self._file_cache))
            logger.debug(f"Evicting {lru_key} (entry limit reached)")
            self._remove(lru_key)

    def get_dependency_info(self, file_path: str) -> DependencyInfo | None:
        with self._lock:
            return self._dependency_cache.get(file_path)

    def set_dependency_info(self, file_path: str, dependencies: Sequence[str]) -> None:
        with self._lock:
            self._dependency_cache[file_path] = DependencyInfo(
                dependencies=list(dependencies), last_updated=time.time()
            )

    def get_cache_stats(self) -> CacheStats:
        """Return a snapshot of the statistics."""
        with self._lock:
            return replace(self._stats)

    def get_cache_hit_rate(self) -> float:
        with self._lock:
            if self._stats.total_requests == 0:
                return 0.0
            return self._stats.hit_count / self._stats.total_requests

    def __len__(self) -> int:
        with self._lock:
            return len(self._file_cache)

    def __contains__(self, file_path: object) -> bool:
        with self._lock:
            return file_path in self._file_cache

    def clear_cache(self) -> None:
        """Drop all entries and dependency info, and reset the statistics."""
        with self._lock:
            self._file_cache.clear()
            self._dependency_cache.clear()
            self._stats = CacheStats(max_cache_size=self._stats.max_cache_size)
        logger.debug("Cache cleared")

    def dispose(self) -> None:
        self.clear_cache()
