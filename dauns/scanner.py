"""Scan pipeline facade wiring parsers, cache, debouncing and instrumentation.

Example usage:
    scanner = VariableScanner(load_config(project_path))
    variables = scanner.scan_file("src/app.js")
    results = scanner.scan_workspace("src")
    scanner.dispose()
"""

from collections.abc import Callable, Mapping
from pathlib import Path

from .analysis.models import ImportInfo, ReferenceInfo, VariableInfo
from .analysis.parser import LanguageParser, ParserRegistry
from .analysis.usage import (
    CrossReferenceMap,
    CrossReferenceTracker,
    UnusedVariable,
    UnusedVariableDetector,
)
from .config.models import DaunsConfig
from .performance.async_scanner import AsyncScanner, ScanError
from .performance.cache_manager import CacheManager
from .performance.memory import MemoryManager
from .performance.monitor import PerformanceMonitor, PerformanceReport
from .scan_logging import LogCategory, get_category_logger
from .utils.scheduler import Scheduler, ThreadScheduler
from .watcher.debounce import DebounceManager

logger = get_category_logger(LogCategory.SCANNER)

UpdateCallback = Callable[[str, list[VariableInfo]], None]


class VariableScanner:
    """Owns one instance of every scan pipeline component.

    All timers (debounce, monitoring, memory checks) live on a single
    scheduler, so ``dispose()`` cancels every outstanding task.
    """

    def __init__(
        self,
        config: DaunsConfig | None = None,
        registry: ParserRegistry | None = None,
        scheduler: Scheduler | None = None,
        monitor: PerformanceMonitor | None = None,
        memory_manager: MemoryManager | None = None,
    ):
        self.config = config or DaunsConfig()
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or ThreadScheduler()
        self.registry = registry or ParserRegistry()

        self.cache = CacheManager(
            max_cache_size=self.config.cache.max_cache_size_bytes,
            max_entries=self.config.cache.max_entries,
        )
        self.debounce = DebounceManager(
            delay_ms=self.config.debounce.delay_ms, scheduler=self.scheduler
        )
        self.monitor = monitor or PerformanceMonitor(
            window_size=self.config.monitor.window_size,
            sample_interval_seconds=self.config.monitor.sample_interval_seconds,
            scheduler=self.scheduler,
        )
        self.memory_manager = memory_manager or MemoryManager(
            warning_mb=self.config.memory.warning_mb,
            critical_mb=self.config.memory.critical_mb,
            check_interval_seconds=self.config.memory.check_interval_seconds,
            history_limit=self.config.memory.history_limit,
            scheduler=self.scheduler,
        )
        self.memory_manager.register_cleanup_callback(self.cache.clear_cache)

        scan = self.config.scan
        self.async_scanner = AsyncScanner(
            registry=self.registry,
            cache=self.cache,
            monitor=self.monitor,
            max_workers=scan.max_workers,
            executor=scan.executor,
            skip_dirs=scan.effective_skip_dirs,
            extensions=scan.file_extensions or None,
            max_file_size_kb=scan.max_file_size_kb,
        )

    def get_parser(self, file_path: str | Path) -> LanguageParser:
        """Parser for ``file_path``.

        Raises:
            ScanError: If no parser handles the extension.
        """
        parser = self.registry.get_parser_for_file(file_path)
        if parser is None:
            raise ScanError(str(file_path), "unsupported file type")
        return parser

    @staticmethod
    def _read(file_path: str | Path) -> str:
        try:
            return Path(file_path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise ScanError(str(file_path), str(e)) from e

    def _visible(self, variables: list[VariableInfo]) -> list[VariableInfo]:
        if self.config.analysis.show_function_variables:
            return variables
        return [variable for variable in variables if variable.type != "function"]

    def scan_file(self, file_path: str | Path) -> list[VariableInfo]:
        return self._visible(self.async_scanner.scan_file(file_path))

    def scan_content(self, content: str, file_path: str | Path) -> list[VariableInfo]:
        """Scan unsaved content as if it were the file at ``file_path``."""
        parser = self.get_parser(file_path)
        with self.monitor.start_operation("scan_content"):
            variables = parser.parse_variables(content, str(file_path))
        return self._visible(variables)

    def parse_imports(self, file_path: str | Path) -> list[ImportInfo]:
        parser = self.get_parser(file_path)
        with self.monitor.start_operation("parse_imports"):
            return parser.parse_imports(self._read(file_path))

    def find_references(self, file_path: str | Path, name: str) -> list[ReferenceInfo]:
        parser = self.get_parser(file_path)
        with self.monitor.start_operation("find_references"):
            return parser.get_variable_references(self._read(file_path), name)

    def find_unused_variables(self, file_path: str | Path) -> list[UnusedVariable]:
        parser = self.get_parser(file_path)
        content = self._read(file_path)
        variables = self.async_scanner.scan_file(file_path)
        return UnusedVariableDetector.find_unused_variables(
            content, variables, parser.WORD_CHARS
        )

    def notify_file_changed(
        self, file_path: str | Path, on_update: UpdateCallback | None = None
    ) -> None:
        """Debounce a change; once quiet, invalidate, rescan and report."""
        file_path = str(file_path)

        def rescan() -> None:
            self.cache.invalidate(file_path)
            try:
                variables = self.scan_file(file_path)
            except ScanError as e:
                logger.warning(f"Rescan failed: {e}")
                return
            if on_update is not None:
                on_update(file_path, variables)

        self.debounce.debounce_file_update(file_path, rescan)

    def notify_file_deleted(self, file_path: str | Path) -> None:
        file_path = str(file_path)
        self.debounce.cancel_pending_update(file_path)
        self.cache.invalidate(file_path)
        logger.debug(f"Dropped {file_path} after deletion")

    def scan_workspace(self, root: str | Path) -> dict[str, list[VariableInfo]]:
        results = self.async_scanner.scan_workspace(root)
        return {path: self._visible(variables) for path, variables in results.items()}

    async def scan_workspace_async(
        self, root: str | Path
    ) -> dict[str, list[VariableInfo]]:
        results = await self.async_scanner.scan_workspace_async(root)
        return {path: self._visible(variables) for path, variables in results.items()}

    def cross_reference(
        self, results: Mapping[str, list[VariableInfo]]
    ) -> CrossReferenceMap:
        """Track every occurrence of every scanned variable across scanned files."""
        documents = {}
        for file_path in results:
            try:
                documents[file_path] = self._read(file_path)
            except ScanError as e:
                logger.warning(f"Skipping cross-reference for {e}")
        with self.monitor.start_operation("cross_reference"):
            return CrossReferenceTracker.track_cross_references(documents, results)

    def find_hotspot_variables(self, root: str | Path) -> list[VariableInfo]:
        """Variables referenced at least ``analysis.hotspot_threshold`` times."""
        cross_references = self.cross_reference(self.scan_workspace(root))
        return CrossReferenceTracker.find_hotspot_variables(
            cross_references, self.config.analysis.hotspot_threshold
        )

    def start_monitoring(self) -> None:
        """Start periodic memory sampling and memory-pressure checks."""
        self.monitor.start_monitoring()
        self.memory_manager.monitor_memory_usage()

    def get_performance_report(self) -> PerformanceReport:
        return self.monitor.get_performance_report()

    def dispose(self) -> None:
        self.debounce.dispose()
        self.monitor.dispose()
        self.memory_manager.dispose()
        self.cache.dispose()
        if self._owns_scheduler:
            self.scheduler.dispose()
