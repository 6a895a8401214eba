"""Tests for terminal output formatting."""

import io
import json

import pytest

from dauns.cli.output import OutputConfig, OutputManager, should_use_color


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


def make_output(streams, **kwargs):
    stdout, stderr = streams
    kwargs.setdefault("use_color", False)
    return OutputManager(OutputConfig(stream=stdout, err_stream=stderr, **kwargs))


class TestShouldUseColor:
    def test_explicit_flag_wins(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")

        assert should_use_color(explicit_flag=True) is True

    def test_no_color_disables_even_when_empty(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        monkeypatch.setenv("FORCE_COLOR", "1")

        assert should_use_color() is False

    def test_force_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("FORCE_COLOR", "1")

        assert should_use_color(stream=io.StringIO()) is True

    def test_non_tty_stream(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("FORCE_COLOR", raising=False)

        assert should_use_color(stream=io.StringIO()) is False

    def test_from_flags(self):
        config = OutputConfig.from_flags(verbose=True, no_color=True)

        assert config.use_color is False
        assert config.verbose is True


class TestMessages:
    def test_plain_symbols(self, streams):
        output = make_output(streams)

        output.success("done")
        output.warning("careful")
        output.info("note")
        output.error("broken")

        stdout, stderr = streams
        assert stdout.getvalue() == "[OK] done\n[WARN] careful\n[INFO] note\n"
        assert stderr.getvalue() == "[FAIL] broken\n"

    def test_colored_symbols(self, streams):
        output = make_output(streams, use_color=True)

        output.success("done")

        assert streams[0].getvalue() == "\033[92m✓\033[0m done\n"
        assert output.colorize("x", "bold") == "\033[1mx\033[0m"

    def test_forced_color_survives_a_piped_stream(self, streams, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("FORCE_COLOR", "1")
        config = OutputConfig.from_flags()
        config.stream, config.err_stream = streams
        output = OutputManager(config)

        output.error("broken")

        assert streams[1].getvalue() == "\033[91m✗\033[0m broken\n"

    def test_quiet_suppresses_all_but_forced_and_errors(self, streams):
        output = make_output(streams, quiet=True)

        output.info("hidden")
        output.success("hidden")
        output.header("Hidden")
        output.plain("hidden")
        output.plain("shown", force=True)
        output.warning("shown too", force=True)
        output.error("err")

        stdout, stderr = streams
        assert stdout.getvalue() == "shown\n[WARN] shown too\n"
        assert stderr.getvalue() == "[FAIL] err\n"

    def test_debug_only_when_verbose(self, streams):
        make_output(streams).debug("hidden")
        make_output(streams, verbose=True).debug("visible")

        assert streams[0].getvalue() == "DEBUG: visible\n"

    def test_header(self, streams):
        make_output(streams).header("Report")

        assert streams[0].getvalue() == "Report\n======\n"


class TestStructuredOutput:
    def test_json_is_never_suppressed(self, streams):
        make_output(streams, quiet=True).json({"a": [1, 2]})

        assert json.loads(streams[0].getvalue()) == {"a": [1, 2]}

    @pytest.mark.parametrize(
        "kwargs, expected",
        [
            ({"total": 3, "success": 3, "duration_ms": 12.4}, "[OK] 3 total | 3 successful | 12ms"),
            ({"total": 3, "success": 2, "failed": 1}, "[FAIL] 3 total | 2 successful | 1 failed"),
            ({"total": 0, "duration_ms": 2500}, "[OK] 0 total | 2.5s"),
        ],
    )
    def test_summary(self, streams, kwargs, expected):
        make_output(streams, quiet=True).summary(**kwargs)

        assert streams[0].getvalue() == expected + "\n"
