"""Scan pipeline performance layer: caching, parallel scanning and instrumentation."""

from .async_scanner import (
    AsyncScanner,
    InlineExecutor,
    ScanError,
    WorkerPool,
    scan_file_worker,
)
from .cache_manager import (
    CachedResult,
    CacheManager,
    CacheStats,
    DependencyInfo,
    estimate_size,
)
from .memory import MemoryManager, MemoryStats
from .monitor import (
    OperationStats,
    OperationTimer,
    PerformanceMetrics,
    PerformanceMonitor,
    PerformanceReport,
)

__all__ = [
    "AsyncScanner",
    "InlineExecutor",
    "ScanError",
    "WorkerPool",
    "scan_file_worker",
    "CacheManager",
    "CachedResult",
    "CacheStats",
    "DependencyInfo",
    "estimate_size",
    "MemoryManager",
    "MemoryStats",
    "PerformanceMonitor",
    "PerformanceMetrics",
    "PerformanceReport",
    "OperationStats",
    "OperationTimer",
]
