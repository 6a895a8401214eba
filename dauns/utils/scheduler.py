"""Keyed, cancellable task scheduling.

A single scheduler owns every pending timer of the components that use it,
so ``dispose()`` deterministically cancels all outstanding work.

- ``ThreadScheduler`` runs callbacks on timer threads.
- ``ManualScheduler`` runs callbacks when its virtual clock is advanced.
"""

import heapq
import itertools
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field

from ..scan_logging import get_logger

Callback = Callable[[], None]


def _run_callback(key: str, callback: Callback) -> None:
    """Run a scheduled callback, logging instead of propagating its errors."""
    try:
        callback()
    except Exception as e:
        get_logger().error(f"Scheduled task {key!r} failed: {e}", exc_info=True)


class Scheduler(ABC):
    """Owns one pending task per key."""

    @abstractmethod
    def schedule(self, key: str, delay_seconds: float, callback: Callback) -> None:
        """Run ``callback`` once after ``delay_seconds``, replacing any task with ``key``."""

    @abstractmethod
    def schedule_interval(
        self, key: str, interval_seconds: float, callback: Callback
    ) -> None:
        """Run ``callback`` every ``interval_seconds`` until cancelled."""

    @abstractmethod
    def cancel(self, key: str) -> bool:
        """Cancel the task with ``key``; returns whether one was pending."""

    @abstractmethod
    def cancel_all(self) -> None:
        """Cancel every pending task."""

    @abstractmethod
    def pending_count(self) -> int: ...

    @abstractmethod
    def is_pending(self, key: str) -> bool: ...

    def dispose(self) -> None:
        self.cancel_all()


class _TimerTask:
    """Handle for one scheduled callback on a ThreadScheduler."""

    def __init__(self, key: str, callback: Callback):
        self.key = key
        self.callback = callback
        self.stop_event = threading.Event()
        self.thread: threading.Thread | None = None

    def cancel(self) -> None:
        self.stop_event.set()


class ThreadScheduler(Scheduler):
    """Scheduler backed by daemon timer threads.

    A task that was replaced or cancelled never runs, even when its thread
    has already woken up: the thread re-checks ownership under the lock.
    """

    def __init__(self, name: str = "dauns-scheduler"):
        self.name = name
        self._tasks: dict[str, _TimerTask] = {}
        self._lock = threading.Lock()

    def schedule(self, key: str, delay_seconds: float, callback: Callback) -> None:
        task = _TimerTask(key, callback)

        def run() -> None:
            if task.stop_event.wait(delay_seconds):
                return
            with self._lock:
                if self._tasks.get(key) is not task:
                    return
                del self._tasks[key]
            _run_callback(key, callback)

        self._start(task, run)

    def schedule_interval(
        self, key: str, interval_seconds: float, callback: Callback
    ) -> None:
        task = _TimerTask(key, callback)

        def run() -> None:
            while not task.stop_event.wait(interval_seconds):
                with self._lock:
                    if self._tasks.get(key) is not task:
                        return
                _run_callback(key, callback)

        self._start(task, run)

    def _start(self, task: _TimerTask, target: Callback) -> None:
        task.thread = threading.Thread(
            target=target, name=f"{self.name}:{task.key}", daemon=True
        )
        with self._lock:
            previous = self._tasks.get(task.key)
            if previous is not None:
                previous.cancel()
            self._tasks[task.key] = task
        task.thread.start()

    def cancel(self, key: str) -> bool:
        with self._lock:
            task = self._tasks.pop(key, None)
        if task is None:
            return False
        task.cancel()
        return True

    def cancel_all(self) -> None:
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
        for task in tasks:
            task.cancel()

    def pending_count(self) -> int:
        with self._lock:
            return len(self._tasks)

    def is_pending(self, key: str) -> bool:
        with self._lock:
            return key in self._tasks


@dataclass(order=True)
class _ManualEntry:
    due: float
    sequence: int
    key: str = field(compare=False)
    callback: Callback = field(compare=False)
    interval: float | None = field(compare=False, default=None)


class ManualScheduler(Scheduler):
    """Deterministic scheduler driven by ``advance()`` instead of wall-clock time.

    Example:
        >>> scheduler = ManualScheduler()
        >>> scheduler.schedule("file", 0.3, lambda: print("fired"))
        >>> scheduler.advance(0.3)
        fired
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[_ManualEntry] = []
        self._active: dict[str, _ManualEntry] = {}
        self._sequence = itertools.count()

    def _push(
        self, key: str, delay: float, callback: Callback, interval: float | None
    ) -> None:
        entry = _ManualEntry(
            due=self.now + delay,
            sequence=next(self._sequence),
            key=key,
            callback=callback,
            interval=interval,
        )
        self._active[key] = entry
        heapq.heappush(self._queue, entry)

    def schedule(self, key: str, delay_seconds: float, callback: Callback) -> None:
        self._push(key, delay_seconds, callback, None)

    def schedule_interval(
        self, key: str, interval_seconds: float, callback: Callback
    ) -> None:
        self._push(key, interval_seconds, callback, interval_seconds)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every task that falls due in order.

        Returns:
            Number of callbacks run.
        """
        target = self.now + seconds
        fired = 0
        while self._queue and self._queue[0].due <= target:
            entry = heapq.heappop(self._queue)
            if self._active.get(entry.key) is not entry:
                continue
            self.now = entry.due
            if entry.interval is None:
                del self._active[entry.key]
            else:
                self._push(entry.key, entry.interval, entry.callback, entry.interval)
            _run_callback(entry.key, entry.callback)
            fired += 1
        self.now = target
        return fired

    def cancel(self, key: str) -> bool:
        return self._active.pop(key, None) is not None

    def cancel_all(self) -> None:
        self._active.clear()
        self._queue.clear()

    def pending_count(self) -> int:
        return len(self._active)

    def is_pending(self, key: str) -> bool:
        return key in self._active
