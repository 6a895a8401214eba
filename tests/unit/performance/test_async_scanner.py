"""Tests for workspace walking and parallel file scanning."""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock

import pytest

from dauns.analysis.parser import LanguageParser, ParserRegistry
from dauns.performance.async_scanner import (
    AsyncScanner,
    InlineExecutor,
    ScanError,
    WorkerPool,
    scan_file_worker,
)
from dauns.performance.cache_manager import CacheManager


class ExplodingParser(LanguageParser):
    LANGUAGE = "boom"
    SUPPORTED_EXTENSIONS = (".boom",)

    def parse_variables(self, content, file_path):
        raise RuntimeError("parser exploded")

    def parse_imports(self, content):
        return []


class LoopRecordingParser(LanguageParser):
    LANGUAGE = "rec"
    SUPPORTED_EXTENSIONS = (".rec",)

    def __init__(self):
        self.calls = []

    def parse_variables(self, content, file_path):
        try:
            asyncio.get_running_loop()
            self.calls.append("event-loop")
        except RuntimeError:
            self.calls.append("worker")
        return []

    def parse_imports(self, content):
        return []


@pytest.fixture
def exploding_registry():
    registry = ParserRegistry()
    registry.register_parser(ExplodingParser())
    return registry


class TestScanFileWorker:
    def test_success(self, sample_workspace):
        path = str(sample_workspace / "app.js")

        result = scan_file_worker((path, ParserRegistry(), None))

        assert result["status"] == "success"
        assert result["variable_count"] == 2
        assert [v["name"] for v in result["variables"]] == ["greeting", "count"]

    def test_no_parser(self, sample_workspace):
        result = scan_file_worker((str(sample_workspace / "notes.txt"), ParserRegistry(), None))

        assert result["status"] == "no_parser"

    def test_too_large_is_skipped(self, sample_workspace):
        path = str(sample_workspace / "app.js")

        result = scan_file_worker((path, ParserRegistry(), 10))

        assert result["status"] == "skipped"
        assert result["reason"].startswith("File too large")

    def test_missing_file_is_an_error(self, tmp_path):
        result = scan_file_worker((str(tmp_path / "gone.js"), ParserRegistry(), None))

        assert result["status"] == "error"
        assert "traceback" in result

    def test_parser_exception_is_an_error(self, tmp_path, exploding_registry):
        path = tmp_path / "x.boom"
        path.write_text("anything")

        result = scan_file_worker((str(path), exploding_registry, None))

        assert result["status"] == "error"
        assert result["error"] == "parser exploded"


class TestWorkerPool:
    def test_rejects_invalid_configuration(self):
        with pytest.raises(ValueError):
            WorkerPool(max_workers=0)
        with pytest.raises(ValueError):
            WorkerPool(executor="gpu")

    def test_inline_executor_captures_exceptions(self):
        future = InlineExecutor().submit(lambda: 1 / 0)

        assert isinstance(future.exception(), ZeroDivisionError)

    def test_empty_task_list(self):
        assert list(WorkerPool().run([])) == []


class TestWorkspaceFiles:
    def test_skips_configured_directories_and_unsupported_files(
        self, sample_workspace, expected_workspace_files
    ):
        files = AsyncScanner().get_workspace_files(sample_workspace)

        assert set(files) == expected_workspace_files
        assert len(files) == len(expected_workspace_files)

    def test_extension_filter(self, sample_workspace):
        scanner = AsyncScanner(extensions=[".PY", ".json"])

        files = scanner.get_workspace_files(sample_workspace)

        assert sorted(f.rsplit("/", 1)[1] for f in files) == ["data.json", "util.py"]

    def test_custom_skip_dirs(self, sample_workspace):
        scanner = AsyncScanner(skip_dirs=["src"])

        files = scanner.get_workspace_files(sample_workspace)

        assert str(sample_workspace / "node_modules" / "lib" / "index.js") in files
        assert not any("/src/" in f for f in files)

    def test_is_supported_file(self):
        scanner = AsyncScanner()

        assert scanner.is_supported_file("App.VUE")
        assert not scanner.is_supported_file("README.md")


class TestScanWorkspace:
    @pytest.mark.parametrize("executor", ["inline", "thread", "process"])
    def test_executors_produce_identical_results(
        self, sample_workspace, expected_workspace_files, executor
    ):
        scanner = AsyncScanner(executor=executor, max_workers=2)

        results = scanner.scan_workspace(sample_workspace)

        assert set(results) == expected_workspace_files
        assert [v.name for v in results[str(sample_workspace / "app.js")]] == [
            "greeting",
            "count",
        ]
        assert [v.name for v in results[str(sample_workspace / "data.json")]] == [
            "server",
            "port",
            "debug",
        ]

    def test_failing_files_are_left_out_and_counted(
        self, sample_workspace, exploding_registry
    ):
        (sample_workspace / "bad.boom").write_text("x")
        monitor = MagicMock()
        scanner = AsyncScanner(registry=exploding_registry, monitor=monitor)

        results = scanner.scan_workspace(sample_workspace)

        assert str(sample_workspace / "bad.boom") not in results
        assert str(sample_workspace / "app.js") in results
        monitor.record_error.assert_called_once()

    def test_results_are_cached_and_reused(self, sample_workspace):
        cache = CacheManager()
        scanner = AsyncScanner(cache=cache)

        first = scanner.scan_workspace(sample_workspace)
        second = scanner.scan_workspace(sample_workspace)

        assert first == second
        stats = cache.get_cache_stats()
        assert stats.miss_count == 5
        assert stats.hit_count == 5

    def test_max_file_size_skips_large_files(self, sample_workspace):
        (sample_workspace / "big.js").write_text("const big = 1;\n" * 200)
        scanner = AsyncScanner(max_file_size_kb=1)

        results = scanner.scan_workspace(sample_workspace)

        assert str(sample_workspace / "big.js") not in results
        assert str(sample_workspace / "app.js") in results

    def test_empty_workspace(self, tmp_path):
        assert AsyncScanner().scan_workspace(tmp_path) == {}

    @pytest.mark.parametrize("executor", ["inline", "thread"])
    def test_async_scan_matches_blocking_scan(
        self, sample_workspace, expected_workspace_files, executor
    ):
        scanner = AsyncScanner(executor=executor)

        results = asyncio.run(scanner.scan_workspace_async(sample_workspace))

        assert set(results) == expected_workspace_files
        assert results == AsyncScanner().scan_workspace(sample_workspace)

    def test_async_scan_records_errors(self, sample_workspace, exploding_registry):
        (sample_workspace / "bad.boom").write_text("x")
        monitor = MagicMock()
        scanner = AsyncScanner(registry=exploding_registry, monitor=monitor)

        results = asyncio.run(scanner.scan_workspace_async(sample_workspace))

        assert str(sample_workspace / "bad.boom") not in results
        monitor.record_error.assert_called_once()


class TestScanFile:
    def test_scan_file_and_monitor_hooks(self, sample_workspace):
        monitor = MagicMock()
        scanner = AsyncScanner(cache=CacheManager(), monitor=monitor)
        path = sample_workspace / "util.py"

        variables = scanner.scan_file(path)
        scanner.scan_file(path)

        assert [(v.name, v.type) for v in variables] == [("ratio", "float"), ("name", "str")]
        monitor.start_operation.assert_called_with("scan_file")
        monitor.record_cache_miss.assert_called_once()
        monitor.record_cache_hit.assert_called_once()

    def test_unsupported_file(self, sample_workspace):
        with pytest.raises(ScanError, match="unsupported file type"):
            AsyncScanner().scan_file(sample_workspace / "notes.txt")

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(ScanError) as exc_info:
            AsyncScanner().scan_file(tmp_path / "missing.py")

        assert exc_info.value.file_path == str(tmp_path / "missing.py")

    def test_too_large_file(self, sample_workspace):
        (sample_workspace / "big.js").write_text("x" * 2048)

        with pytest.raises(ScanError, match="File too large"):
            AsyncScanner(max_file_size_kb=1).scan_file(sample_workspace / "big.js")


class TestAsyncScanDoesNotBlockTheLoop:
    @pytest.mark.parametrize("executor", ["inline", "thread"])
    def test_parsing_runs_off_the_event_loop(self, tmp_path, executor):
        parser = LoopRecordingParser()
        registry = ParserRegistry()
        registry.register_parser(parser)
        for name in ("a.rec", "b.rec", "c.rec"):
            (tmp_path / name).write_text("x")
        scanner = AsyncScanner(registry=registry, executor=executor)

        results = asyncio.run(scanner.scan_workspace_async(tmp_path))

        assert len(results) == 3
        assert parser.calls == ["worker", "worker", "worker"]

    def test_concurrent_task_advances_during_scan(self, sample_workspace):
        scanner = AsyncScanner()
        ticks = []

        async def ticker(stop):
            while not stop.is_set():
                ticks.append(1)
                await asyncio.sleep(0)

        async def main():
            stop = asyncio.Event()
            task = asyncio.create_task(ticker(stop))
            results = await scanner.scan_workspace_async(sample_workspace)
            stop.set()
            await task
            return results

        results = asyncio.run(main())

        assert len(results) == 5
        assert len(ticks) > 1

    def test_inline_pool_uses_a_background_thread_for_async_scans(self):
        pool = WorkerPool(executor="inline")

        with pool.create_async_executor() as executor:
            assert isinstance(executor, ThreadPoolExecutor)
        assert isinstance(pool.create_executor(), InlineExecutor)
