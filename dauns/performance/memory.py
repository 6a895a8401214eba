"""Process memory monitoring with threshold-triggered cleanup."""

import gc
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Literal

import psutil

from ..scan_logging import LogCategory, get_category_logger
from ..utils.scheduler import Scheduler, ThreadScheduler

logger = get_category_logger(LogCategory.MEMORY)

MEMORY_TASK_KEY = "memory-monitor"
MB = 1024 * 1024
MEDIUM_PRESSURE_RATIO = 0.7

HIGH_MEMORY_NOTICE = (
    "dauns is using a lot of memory. Consider restarting it if performance degrades."
)

MemoryPressure = Literal["low", "medium", "high", "critical"]


@dataclass(frozen=True)
class MemoryStats:
    """Memory usage of the process.

    Attributes:
        rss: Resident set size in bytes.
        vms: Virtual memory size in bytes.
        percent: RSS as a percentage of total physical memory.
    """

    rss: float
    vms: float
    percent: float

    @property
    def rss_mb(self) -> float:
        return self.rss / MB


def sample_process_memory() -> MemoryStats:
    process = psutil.Process()
    info = process.memory_info()
    return MemoryStats(rss=info.rss, vms=info.vms, percent=process.memory_percent())


class MemoryManager:
    """Samples memory periodically and runs cleanup callbacks above thresholds.

    Above the warning threshold the registered callbacks run and a garbage
    collection is requested. Above the critical threshold the user is also
    notified through ``notifier``.
    """

    def __init__(
        self,
        warning_mb: float = 100,
        critical_mb: float = 200,
        check_interval_seconds: float = 30.0,
        history_limit: int = 100,
        memory_sampler: Callable[[], MemoryStats] | None = None,
        notifier: Callable[[str], None] | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.set_memory_thresholds(warning_mb, critical_mb)
        self.check_interval_seconds = check_interval_seconds
        self.memory_sampler = memory_sampler or sample_process_memory
        self.notifier = notifier or logger.warning
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or ThreadScheduler(name="dauns-memory")
        self._cleanup_callbacks: list[Callable[[], None]] = []
        self._history: deque[MemoryStats] = deque(maxlen=history_limit)
        self._lock = Lock()

    def set_memory_thresholds(self, warning_mb: float, critical_mb: float) -> None:
        if warning_mb <= 0 or critical_mb < warning_mb:
            raise ValueError(
                "Memory thresholds must satisfy 0 < warning_mb <= critical_mb"
            )
        self.warning_mb = warning_mb
        self.critical_mb = critical_mb

    def get_current_memory_usage(self) -> MemoryStats:
        return self.memory_sampler()

    def get_memory_usage_history(self) -> list[MemoryStats]:
        with self._lock:
            return list(self._history)

    def get_average_memory_usage(self) -> MemoryStats:
        """Mean of the recorded history, or the current usage when it is empty."""
        history = self.get_memory_usage_history()
        if not history:
            return self.get_current_memory_usage()
        count = len(history)
        return MemoryStats(
            rss=sum(stats.rss for stats in history) / count,
            vms=sum(stats.vms for stats in history) / count,
            percent=sum(stats.percent for stats in history) / count,
        )

    def register_cleanup_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self._cleanup_callbacks.append(callback)

    def unregister_cleanup_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._cleanup_callbacks:
                self._cleanup_callbacks.remove(callback)

    def _run_cleanup_callbacks(self) -> None:
        with self._lock:
            callbacks = list(self._cleanup_callbacks)
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error during cleanup callback: {e}", exc_info=True)

    def perform_cleanup(self) -> None:
        logger.info("Performing memory cleanup")
        self._run_cleanup_callbacks()
        gc.collect()

    def _perform_critical_cleanup(self) -> None:
        logger.info("Performing critical memory cleanup")
        self._run_cleanup_callbacks()
        gc.collect()
        self.notifier(HIGH_MEMORY_NOTICE)

    def check_memory(self) -> MemoryPressure:
        """Run one monitoring tick: sample, record, and clean up if needed.

        Returns:
            Pressure band of the sample that was taken.
        """
        try:
            usage = self.get_current_memory_usage()
        except (psutil.Error, OSError) as e:
            logger.warning(f"Memory sampling failed: {e}")
            return "low"

        with self._lock:
            self._history.append(usage)

        usage_mb = usage.rss_mb
        if usage_mb > self.critical_mb:
            logger.warning(f"Critical memory usage: {usage_mb:.2f}MB")
            self._perform_critical_cleanup()
        elif usage_mb > self.warning_mb:
            logger.warning(f"High memory usage: {usage_mb:.2f}MB")
            self.perform_cleanup()
        return self._pressure_for(usage_mb)

    def monitor_memory_usage(self, interval_seconds: float | None = None) -> None:
        """Check memory periodically until ``dispose``."""
        self.scheduler.schedule_interval(
            MEMORY_TASK_KEY,
            interval_seconds or self.check_interval_seconds,
            self.check_memory,
        )

    def stop_monitoring(self) -> None:
        self.scheduler.cancel(MEMORY_TASK_KEY)

    def get_memory_pressure(self) -> MemoryPressure:
        return self._pressure_for(self.get_current_memory_usage().rss_mb)

    def _pressure_for(self, usage_mb: float) -> MemoryPressure:
        if usage_mb > self.critical_mb:
            return "critical"
        if usage_mb > self.warning_mb:
            return "high"
        if usage_mb > self.warning_mb * MEDIUM_PRESSURE_RATIO:
            return "medium"
        return "low"

    def dispose(self) -> None:
        self.stop_monitoring()
        with self._lock:
            self._cleanup_callbacks.clear()
            self._history.clear()
        if self._owns_scheduler:
            self.scheduler.dispose()
