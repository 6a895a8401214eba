"""Workspace scanning with pluggable parallel executors.

Every executor runs the same picklable ``scan_file_worker`` and reports a
status dictionary per file, so switching between inline, thread and process
execution never changes what callers see.
"""

import asyncio
import gc
import logging
import os
import traceback
from collections.abc import Iterable, Iterator
from concurrent.futures import (
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from pathlib import Path
from typing import Any, Literal

from ..analysis.models import VariableInfo
from ..analysis.parser import ParserRegistry
from ..scan_logging import LogCategory, get_category_logger
from .cache_manager import CacheManager
from .monitor import PerformanceMonitor

logger = get_category_logger(LogCategory.SCANNER)

DEFAULT_SKIP_DIRS = ("node_modules", ".git", "dist", "build")

ExecutorKind = Literal["inline", "thread", "process"]

WorkerArgs = tuple[str, ParserRegistry, int | None]


class ScanError(Exception):
    """Raised when a single requested file cannot be scanned."""

    def __init__(self, file_path: str, message: str):
        super().__init__(f"{file_path}: {message}")
        self.file_path = file_path
        self.message = message


def init_worker() -> None:
    """Initialize a worker process with quiet logging."""
    logging.basicConfig(level=logging.ERROR)
    gc.collect()


def scan_file_worker(args: WorkerArgs) -> dict[str, Any]:
    """Read and scan one file.

    Args:
        args: Tuple of (file_path, parser_registry, max_file_size_bytes).

    Returns:
        Dictionary with a ``status`` of ``success``, ``skipped``, ``no_parser``
        or ``error`` plus the serialized variables or the failure reason.
    """
    file_path, registry, max_file_size = args

    try:
        parser = registry.get_parser_for_file(file_path)
        if parser is None:
            return {"status": "no_parser", "file_path": file_path}

        if max_file_size is not None:
            file_size = os.path.getsize(file_path)
            if file_size > max_file_size:
                return {
                    "status": "skipped",
                    "file_path": file_path,
                    "reason": f"File too large: {file_size} bytes",
                }

        with open(file_path, encoding="utf-8", errors="replace") as f:
            content = f.read()

        variables = parser.parse_variables(content, file_path)
        return {
            "status": "success",
            "file_path": file_path,
            "variables": [variable.to_dict() for variable in variables],
            "variable_count": len(variables),
        }

    except Exception as e:
        return {
            "status": "error",
            "file_path": file_path,
            "error": str(e),
            "traceback": traceback.format_exc(),
        }


class InlineExecutor(Executor):
    """Executor that runs each task synchronously inside ``submit``."""

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as e:
            future.set_exception(e)
        return future


class WorkerPool:
    """Bounded pool that fans scan tasks out and yields results as they finish."""

    def __init__(self, max_workers: int = 4, executor: ExecutorKind = "inline"):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if executor not in ("inline", "thread", "process"):
            raise ValueError(f"Unknown executor kind: {executor}")
        self.max_workers = max_workers
        self.executor_kind = executor

    def create_executor(self) -> Executor:
        if self.executor_kind == "thread":
            return ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="dauns-scan"
            )
        if self.executor_kind == "process":
            return ProcessPoolExecutor(
                max_workers=self.max_workers, initializer=init_worker
            )
        return InlineExecutor()

    def create_async_executor(self) -> Executor:
        """Executor for the asyncio scan; inline work moves to one background thread
        so the event loop keeps running while files are read and parsed.
        """
        if self.executor_kind == "inline":
            return ThreadPoolExecutor(max_workers=1, thread_name_prefix="dauns-scan")
        return self.create_executor()

    def run(self, tasks: Iterable[WorkerArgs]) -> Iterator[dict[str, Any]]:
        """Run ``scan_file_worker`` over ``tasks``, in completion order."""
        tasks = list(tasks)
        if not tasks:
            return

        with self.create_executor() as executor:
            future_to_file = {
                executor.submit(scan_file_worker, args): args[0] for args in tasks
            }
            for future in as_completed(future_to_file):
                yield _future_result(future, future_to_file[future])


def _future_result(future: Future, file_path: str) -> dict[str, Any]:
    try:
        return future.result()
    except Exception as e:
        return {"status": "error", "file_path": file_path, "error": str(e)}


async def _await_result(future: Future, file_path: str) -> dict[str, Any]:
    try:
        return await asyncio.wrap_future(future)
    except Exception as e:
        return {"status": "error", "file_path": file_path, "error": str(e)}


class AsyncScanner:
    """Walks a workspace and scans every supported file.

    Cached results are reused while valid; fresh results are written back.
    A file that fails to read or scan is logged and left out of the result.
    """

    def __init__(
        self,
        registry: ParserRegistry | None = None,
        cache: CacheManager | None = None,
        monitor: PerformanceMonitor | None = None,
        max_workers: int = 4,
        executor: ExecutorKind = "inline",
        skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
        extensions: Iterable[str] | None = None,
        max_file_size_kb: int | None = None,
    ):
        self.registry = registry or ParserRegistry()
        self.cache = cache
        self.monitor = monitor
        self.pool = WorkerPool(max_workers=max_workers, executor=executor)
        self.skip_dirs = frozenset(skip_dirs)
        self.extensions = (
            frozenset(extension.lower() for extension in extensions)
            if extensions
            else None
        )
        self.max_file_size = (
            max_file_size_kb * 1024 if max_file_size_kb is not None else None
        )

    def is_supported_file(self, file_name: str) -> bool:
        extension = Path(file_name).suffix.lower()
        if self.extensions is not None and extension not in self.extensions:
            return False
        return self.registry.get_parser(extension) is not None

    def get_workspace_files(self, root: str | Path) -> list[str]:
        """Collect supported files under ``root``, never entering skipped directories."""

        def on_error(error: OSError) -> None:
            logger.warning(f"Error reading workspace directory: {error}")

        files = []
        for directory, dir_names, file_names in os.walk(root, onerror=on_error):
            dir_names[:] = sorted(
                name for name in dir_names if name not in self.skip_dirs
            )
            files.extend(
                os.path.join(directory, name)
                for name in sorted(file_names)
                if self.is_supported_file(name)
            )
        return files

    def _worker_args(self, file_path: str) -> WorkerArgs:
        return (file_path, self.registry, self.max_file_size)

    def _lookup_cache(self, file_path: str) -> list[VariableInfo] | None:
        if self.cache is None:
            return None
        cached = self.cache.get_cached_result(file_path)
        if self.monitor is not None:
            if cached is None:
                self.monitor.record_cache_miss()
            else:
                self.monitor.record_cache_hit()
        return cached.variables if cached is not None else None

    def _handle_result(self, result: dict[str, Any]) -> list[VariableInfo] | None:
        """Turn a worker status dict into variables, or None if the file is omitted."""
        file_path = result["file_path"]
        status = result["status"]

        if status == "success":
            variables = [VariableInfo.from_dict(data) for data in result["variables"]]
            if self.cache is not None:
                self.cache.set_cached_result(file_path, variables)
            logger.debug(
                f"Scanned {file_path}: {len(variables)} variables",
                extra={"file_path": file_path, "variable_count": len(variables)},
            )
            return variables

        if status == "skipped":
            logger.info(f"Skipping {file_path}: {result['reason']}")
        elif status == "no_parser":
            logger.debug(f"No parser for {file_path}")
        else:
            logger.error(f"Error scanning file {file_path}: {result['error']}")
            if self.monitor is not None:
                self.monitor.record_error()
        return None

    def _timer(self, operation: str):
        if self.monitor is None:
            return None
        return self.monitor.start_operation(operation)

    def scan_file(self, file_path: str | Path) -> list[VariableInfo]:
        """Scan a single file, using the cache when it is still valid.

        Raises:
            ScanError: If the file has no parser or cannot be read.
        """
        file_path = str(file_path)
        timer = self._timer("scan_file")
        try:
            cached = self._lookup_cache(file_path)
            if cached is not None:
                return cached

            result = scan_file_worker(self._worker_args(file_path))
            if result["status"] == "no_parser":
                raise ScanError(file_path, "unsupported file type")
            if result["status"] == "skipped":
                raise ScanError(file_path, result["reason"])

            variables = self._handle_result(result)
            if variables is None:
                raise ScanError(file_path, result["error"])
            return variables
        finally:
            if timer is not None:
                timer.end()

    def _split_cached(
        self, files: list[str]
    ) -> tuple[dict[str, list[VariableInfo]], list[str]]:
        results: dict[str, list[VariableInfo]] = {}
        pending = []
        for file_path in files:
            cached = self._lookup_cache(file_path)
            if cached is not None:
                results[file_path] = cached
            else:
                pending.append(file_path)
        return results, pending

    def scan_workspace(self, root: str | Path) -> dict[str, list[VariableInfo]]:
        """Scan every supported file under ``root`` and block until all finish."""
        timer = self._timer("scan_workspace")
        try:
            files = self.get_workspace_files(root)
            results, pending = self._split_cached(files)
            logger.info(
                f"Scanning {len(pending)} files under {root} "
                f"({len(results)} served from cache)"
            )

            for result in self.pool.run(self._worker_args(path) for path in pending):
                variables = self._handle_result(result)
                if variables is not None:
                    results[result["file_path"]] = variables
            return results
        finally:
            if timer is not None:
                timer.end()

    async def scan_workspace_async(
        self, root: str | Path
    ) -> dict[str, list[VariableInfo]]:
        """Asyncio variant of ``scan_workspace`` awaiting the same per-file fan-out."""
        timer = self._timer("scan_workspace_async")
        try:
            files = await asyncio.to_thread(self.get_workspace_files, root)
            results, pending = await asyncio.to_thread(self._split_cached, files)
            if not pending:
                return results

            with self.pool.create_async_executor() as executor:
                tasks = [
                    _await_result(
                        executor.submit(scan_file_worker, self._worker_args(path)), path
                    )
                    for path in pending
                ]
                for completed in asyncio.as_completed(tasks):
                    result = await completed
                    variables = await asyncio.to_thread(self._handle_result, result)
                    if variables is not None:
                        results[result["file_path"]] = variables
            return results
        finally:
            if timer is not None:
                timer.end()
