"""Operation timing, memory sampling and heuristic performance recommendations.

Example usage:
    monitor = PerformanceMonitor()

    with monitor.start_operation("scan_file"):
        scan(path)

    report = monitor.get_performance_report()
    for recommendation in report.recommendations:
        print(recommendation)
"""

import time
from collections import deque
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from threading import Lock
from typing import Any

import psutil

from ..scan_logging import LogCategory, get_category_logger
from ..utils.scheduler import Scheduler, ThreadScheduler

logger = get_category_logger(LogCategory.PERFORMANCE)

MONITOR_TASK_KEY = "performance-monitor"

SLOW_SCAN_THRESHOLD_MS = 1000.0
HIGH_MEMORY_THRESHOLD_BYTES = 100 * 1024 * 1024
RECENT_MEMORY_SAMPLES = 10
LOW_CACHE_HIT_RATE = 0.5
HIGH_ERROR_RATE = 0.05
CACHE_HIT_RATE_STEP = 0.01

OPTIMAL_MESSAGE = "Performance is optimal - no immediate actions required"


def process_rss() -> int:
    """Resident set size of the current process in bytes."""
    return psutil.Process().memory_info().rss


@dataclass
class PerformanceMetrics:
    """Raw metrics; durations are in milliseconds and memory in bytes."""

    scan_duration: list[float] = field(default_factory=list)
    memory_usage: list[int] = field(default_factory=list)
    cache_hit_rate: float = 0.0
    error_rate: float = 0.0
    operation_counts: dict[str, int] = field(default_factory=dict)
    operation_durations: dict[str, list[float]] = field(default_factory=dict)


@dataclass
class OperationStats:
    count: int
    average_duration: float


@dataclass
class PerformanceReport:
    """Summary produced by ``PerformanceMonitor.get_performance_report``.

    Attributes:
        average_scan_time: Mean duration (ms) of recent operations named "*scan*".
        memory_trend: Recent memory samples in bytes, oldest first.
        cache_efficiency: Smoothed cache hit rate in [0, 1].
        error_rate: Errors per started operation.
        recommendations: Human-readable advice, never empty.
        operation_stats: Per-operation call counts and mean durations.
    """

    average_scan_time: float
    memory_trend: list[int]
    cache_efficiency: float
    error_rate: float
    recommendations: list[str]
    operation_stats: dict[str, OperationStats]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class OperationTimer:
    """Handle for one running operation; ``end()`` records it exactly once."""

    def __init__(self, monitor: "PerformanceMonitor", operation_name: str):
        self.monitor = monitor
        self.operation_name = operation_name
        self.start_time = time.perf_counter()
        self.duration_ms: float | None = None

    def end(self) -> float:
        """Stop the timer and return the elapsed milliseconds."""
        if self.duration_ms is None:
            self.duration_ms = (time.perf_counter() - self.start_time) * 1000
            self.monitor._end_operation(self.operation_name, self.duration_ms)
        return self.duration_ms

    def __enter__(self) -> "OperationTimer":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.end()
        if exc_type is not None:
            self.monitor.record_error()


def _average(values) -> float:
    return sum(values) / len(values) if values else 0.0


class PerformanceMonitor:
    """Collects rolling-window timing and memory metrics.

    All mutations happen under one lock so timers may be ended from
    scanner worker threads.
    """

    def __init__(
        self,
        window_size: int = 100,
        sample_interval_seconds: float = 5.0,
        memory_sampler: Callable[[], int] | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.window_size = window_size
        self.sample_interval_seconds = sample_interval_seconds
        self.memory_sampler = memory_sampler or process_rss
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or ThreadScheduler(name="dauns-monitor")
        self._lock = Lock()
        self._reset_state()

    def _reset_state(self) -> None:
        self._scan_durations: deque[float] = deque(maxlen=self.window_size)
        self._memory_usage: deque[int] = deque(maxlen=self.window_size)
        self._operation_counts: dict[str, int] = {}
        self._operation_durations: dict[str, deque[float]] = {}
        self._cache_hit_rate = 0.0
        self._error_rate = 0.0
        self._error_count = 0
        self._total_operations = 0

    def start_operation(self, operation_name: str) -> OperationTimer:
        """Count the operation and start timing it."""
        with self._lock:
            self._total_operations += 1
            self._operation_counts[operation_name] = (
                self._operation_counts.get(operation_name, 0) + 1
            )
        return OperationTimer(self, operation_name)

    def _end_operation(self, operation_name: str, duration_ms: float) -> None:
        memory = self._sample_memory()
        with self._lock:
            durations = self._operation_durations.setdefault(
                operation_name, deque(maxlen=self.window_size)
            )
            durations.append(duration_ms)
            if "scan" in operation_name:
                self._scan_durations.append(duration_ms)
            if memory is not None:
                self._memory_usage.append(memory)

        logger.debug(
            f"[PERF] {operation_name}: {duration_ms:.2f}ms",
            extra={"duration_ms": duration_ms, "operation": operation_name},
        )

    def _sample_memory(self) -> int | None:
        try:
            return self.memory_sampler()
        except (psutil.Error, OSError) as e:
            logger.warning(f"Memory sampling failed: {e}")
            return None

    def record_memory_sample(self) -> None:
        memory = self._sample_memory()
        if memory is not None:
            with self._lock:
                self._memory_usage.append(memory)

    def record_error(self) -> None:
        with self._lock:
            self._error_count += 1
            self._error_rate = self._error_count / max(self._total_operations, 1)

    def record_cache_hit(self) -> None:
        with self._lock:
            self._cache_hit_rate = min(1.0, self._cache_hit_rate + CACHE_HIT_RATE_STEP)

    def record_cache_miss(self) -> None:
        with self._lock:
            self._cache_hit_rate = max(0.0, self._cache_hit_rate - CACHE_HIT_RATE_STEP)

    def start_monitoring(self, interval_seconds: float | None = None) -> None:
        """Sample memory periodically until ``stop_monitoring``."""
        self.scheduler.schedule_interval(
            MONITOR_TASK_KEY,
            interval_seconds or self.sample_interval_seconds,
            self.record_memory_sample,
        )

    def stop_monitoring(self) -> None:
        self.scheduler.cancel(MONITOR_TASK_KEY)

    def is_monitoring(self) -> bool:
        return self.scheduler.is_pending(MONITOR_TASK_KEY)

    def get_performance_report(self) -> PerformanceReport:
        with self._lock:
            return PerformanceReport(
                average_scan_time=_average(self._scan_durations),
                memory_trend=list(self._memory_usage),
                cache_efficiency=self._cache_hit_rate,
                error_rate=self._error_rate,
                recommendations=self._generate_recommendations(),
                operation_stats={
                    name: OperationStats(
                        count=count,
                        average_duration=_average(
                            self._operation_durations.get(name, ())
                        ),
                    )
                    for name, count in self._operation_counts.items()
                },
            )

    def _generate_recommendations(self) -> list[str]:
        recommendations = []

        if _average(self._scan_durations) > SLOW_SCAN_THRESHOLD_MS:
            recommendations.append("Consider enabling caching for large files")
            recommendations.append(
                "Large file scanning may benefit from async processing"
            )

        if len(self._memory_usage) > RECENT_MEMORY_SAMPLES:
            recent = list(self._memory_usage)[-RECENT_MEMORY_SAMPLES:]
            if _average(recent) > HIGH_MEMORY_THRESHOLD_BYTES:
                recommendations.append(
                    "High memory usage detected - consider clearing caches periodically"
                )

        if self._cache_hit_rate < LOW_CACHE_HIT_RATE:
            recommendations.append(
                "Low cache hit rate - consider adjusting cache invalidation strategy"
            )

        if self._error_rate > HIGH_ERROR_RATE:
            recommendations.append(
                "High error rate detected - check error logs for patterns"
            )

        return recommendations or [OPTIMAL_MESSAGE]

    def get_metrics(self) -> PerformanceMetrics:
        """Return a copy of the raw metrics."""
        with self._lock:
            return PerformanceMetrics(
                scan_duration=list(self._scan_durations),
                memory_usage=list(self._memory_usage),
                cache_hit_rate=self._cache_hit_rate,
                error_rate=self._error_rate,
                operation_counts=dict(self._operation_counts),
                operation_durations={
                    name: list(durations)
                    for name, durations in self._operation_durations.items()
                },
            )

    def reset_metrics(self) -> None:
        with self._lock:
            self._reset_state()

    def dispose(self) -> None:
        self.stop_monitoring()
        self.reset_metrics()
        if self._owns_scheduler:
            self.scheduler.dispose()
