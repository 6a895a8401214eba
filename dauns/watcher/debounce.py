"""Per-key trailing-edge debouncing of file and workspace updates."""

from collections.abc import Callable

from ..scan_logging import LogCategory, get_category_logger
from ..utils.scheduler import Scheduler, ThreadScheduler

logger = get_category_logger(LogCategory.WATCHER)

WORKSPACE_KEY = "__workspace_update__"


class DebounceManager:
    """Debounces update callbacks, one independent timer per key.

    Every call restarts the key's timer, so the callback runs once after
    ``delay_ms`` of quiet. Keys are file paths or the reserved workspace key.
    """

    def __init__(self, delay_ms: int = 300, scheduler: Scheduler | None = None):
        self._delay_ms = delay_ms
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or ThreadScheduler(name="dauns-debounce")
        self._keys: set[str] = set()

    def debounce_file_update(self, key: str, callback: Callable[[], None]) -> None:
        """Schedule ``callback`` for ``key``, cancelling any pending one."""
        self._keys.add(key)
        self.scheduler.schedule(key, self._delay_ms / 1000.0, callback)
        logger.debug(f"Debounced update for {key} ({self._delay_ms}ms)")

    def debounce_workspace_update(self, callback: Callable[[], None]) -> None:
        self.debounce_file_update(WORKSPACE_KEY, callback)

    def cancel_pending_update(self, key: str) -> bool:
        self._keys.discard(key)
        return self.scheduler.cancel(key)

    def cancel_all_pending_updates(self) -> None:
        for key in list(self._keys):
            self.scheduler.cancel(key)
        self._keys.clear()

    def get_pending_update_count(self) -> int:
        self._keys = {key for key in self._keys if self.scheduler.is_pending(key)}
        return len(self._keys)

    def set_debounce_delay(self, delay_ms: int) -> None:
        """Change the delay used by subsequent calls; pending timers keep theirs."""
        if delay_ms < 0:
            raise ValueError("Debounce delay must be non-negative")
        self._delay_ms = delay_ms

    def get_debounce_delay(self) -> int:
        return self._delay_ms

    def dispose(self) -> None:
        self.cancel_all_pending_updates()
        if self._owns_scheduler:
            self.scheduler.dispose()
