"""File system event handling that feeds changes into the scan pipeline."""

import threading
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from ..scan_logging import LogCategory, get_category_logger
from ..scanner import UpdateCallback, VariableScanner

logger = get_category_logger(LogCategory.WATCHER)


class ScanEventHandler(FileSystemEventHandler):
    """Forwards file events for supported files to a VariableScanner.

    Created and modified files are rescanned after the debounce delay;
    deleted files are dropped from the cache. A move counts as a delete
    of the source and a create of the destination.
    """

    def __init__(
        self,
        scanner: VariableScanner,
        on_update: UpdateCallback | None = None,
        root: str | Path | None = None,
    ):
        super().__init__()
        self.scanner = scanner
        self.on_update = on_update
        self.root = Path(root).resolve() if root is not None else None

        self.events_received = 0
        self.events_forwarded = 0
        self.events_ignored = 0

    def on_created(self, event: Any) -> None:
        if not event.is_directory:
            self._handle_file_event(event.src_path, "created")

    def on_modified(self, event: Any) -> None:
        if not event.is_directory:
            self._handle_file_event(event.src_path, "modified")

    def on_deleted(self, event: Any) -> None:
        if not event.is_directory:
            self._handle_file_event(event.src_path, "deleted")

    def on_moved(self, event: Any) -> None:
        if not event.is_directory:
            self._handle_file_event(event.src_path, "deleted")
            self._handle_file_event(event.dest_path, "created")

    def should_process_file(self, file_path: str) -> bool:
        """Supported extension and no skipped directory below the watched root."""
        path = Path(file_path)
        skip_dirs = self.scanner.async_scanner.skip_dirs
        if any(part in skip_dirs for part in self._relative_dirs(path)):
            return False
        return self.scanner.async_scanner.is_supported_file(path.name)

    def _relative_dirs(self, path: Path) -> tuple[str, ...]:
        if self.root is None:
            return path.parent.parts
        try:
            return path.resolve().relative_to(self.root).parent.parts
        except ValueError:
            return path.parent.parts

    def _handle_file_event(self, file_path: str, event_type: str) -> None:
        self.events_received += 1
        if isinstance(file_path, bytes):
            file_path = file_path.decode()

        if not self.should_process_file(file_path):
            self.events_ignored += 1
            return

        logger.debug(f"{event_type}: {file_path}")
        if event_type == "deleted":
            self.scanner.notify_file_deleted(file_path)
        else:
            self.scanner.notify_file_changed(file_path, self.on_update)
        self.events_forwarded += 1

    def get_stats(self) -> dict[str, int]:
        return {
            "events_received": self.events_received,
            "events_forwarded": self.events_forwarded,
            "events_ignored": self.events_ignored,
            "pending_updates": self.scanner.debounce.get_pending_update_count(),
        }


def watch_directory(
    path: str | Path,
    scanner: VariableScanner,
    on_update: UpdateCallback | None = None,
    stop_event: threading.Event | None = None,
) -> ScanEventHandler:
    """Watch ``path`` recursively until interrupted or ``stop_event`` is set.

    Returns:
        The handler, so callers can inspect its event statistics.
    """
    handler = ScanEventHandler(scanner, on_update, root=path)
    stop_event = stop_event or threading.Event()

    observer = Observer()
    observer.schedule(handler, str(path), recursive=True)
    observer.start()
    logger.info(f"Watching {path}")

    try:
        while not stop_event.wait(1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Stopping file watcher")
    finally:
        observer.stop()
        observer.join(timeout=3)
        if observer.is_alive():
            logger.warning("File watcher did not stop cleanly")

    return handler
