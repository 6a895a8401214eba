"""CLI output with colour, quiet and verbose handling.

Honours the NO_COLOR convention (https://no-color.org/) and falls back to
plain-text status markers when colour is off.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

import click


def should_use_color(
    explicit_flag: bool | None = None,
    stream: TextIO | None = None,
) -> bool:
    """Decide whether to colourise output.

    Priority: explicit flag, then NO_COLOR, then FORCE_COLOR, then TTY detection.
    """
    if explicit_flag is not None:
        return explicit_flag

    # Any value, including empty, disables colour
    if "NO_COLOR" in os.environ:
        return False

    if "FORCE_COLOR" in os.environ:
        return True

    stream = stream or sys.stdout
    return bool(hasattr(stream, "isatty") and stream.isatty())


@dataclass
class OutputConfig:
    """Output behaviour for one CLI invocation."""

    use_color: bool = True
    quiet: bool = False
    verbose: bool = False
    stream: TextIO = field(default_factory=lambda: sys.stdout)
    err_stream: TextIO = field(default_factory=lambda: sys.stderr)

    @classmethod
    def from_flags(
        cls,
        verbose: bool = False,
        quiet: bool = False,
        no_color: bool = False,
    ) -> OutputConfig:
        use_color = should_use_color(explicit_flag=False if no_color else None)
        return cls(use_color=use_color, quiet=quiet, verbose=verbose)


class OutputManager:
    """Formats scan results and status messages for the terminal.

    Example:
        >>> output = OutputManager(OutputConfig(use_color=False))
        >>> output.success("Scanned 3 files")
        [OK] Scanned 3 files
    """

    COLORS = {
        "green": "\033[92m",
        "red": "\033[91m",
        "yellow": "\033[93m",
        "blue": "\033[94m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "reset": "\033[0m",
    }

    # (colour, glyph, plain-text fallback)
    SYMBOLS = {
        "success": ("green", "✓", "[OK]"),
        "error": ("red", "✗", "[FAIL]"),
        "warning": ("yellow", "⚠", "[WARN]"),
        "info": ("blue", "ℹ", "[INFO]"),
    }

    def __init__(self, config: OutputConfig | None = None):
        self.config = config or OutputConfig()

    def _get_symbol(self, symbol_type: str) -> str:
        color, glyph, plain = self.SYMBOLS.get(symbol_type, self.SYMBOLS["info"])
        return self.colorize(glyph, color) if self.config.use_color else plain

    def colorize(self, text: str, color: str) -> str:
        if not self.config.use_color:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def _output(
        self,
        message: str,
        symbol_type: str | None = None,
        err: bool = False,
        force: bool = False,
    ) -> None:
        """Write one line; quiet mode drops it unless ``err`` or ``force``."""
        if self.config.quiet and not err and not force:
            return

        stream = self.config.err_stream if err else self.config.stream
        line = f"{self._get_symbol(symbol_type)} {message}" if symbol_type else message
        click.echo(line, file=stream, color=self.config.use_color)

    def success(self, message: str, force: bool = False) -> None:
        self._output(message, symbol_type="success", force=force)

    def error(self, message: str) -> None:
        """Write an error to stderr, even in quiet mode."""
        self._output(message, symbol_type="error", err=True, force=True)

    def warning(self, message: str, force: bool = False) -> None:
        self._output(message, symbol_type="warning", force=force)

    def info(self, message: str) -> None:
        self._output(message, symbol_type="info")

    def debug(self, message: str) -> None:
        if self.config.verbose:
            self._output(f"DEBUG: {self.colorize(message, 'dim')}")

    def header(self, title: str) -> None:
        if self.config.quiet:
            return
        self._output(self.colorize(title, "bold"))
        self._output("=" * len(title))

    def plain(self, message: str, force: bool = False) -> None:
        self._output(message, force=force)

    def json(self, data: Any) -> None:
        """Write machine-readable output; never suppressed."""
        self._output(json.dumps(data, indent=2, default=str), force=True)

    def summary(
        self,
        total: int,
        success: int = 0,
        failed: int = 0,
        duration_ms: float | None = None,
    ) -> None:
        """Write a one-line count summary, even in quiet mode."""
        parts = [f"{total} total"]
        if success > 0:
            parts.append(f"{success} successful")
        if failed > 0:
            parts.append(f"{failed} failed")
        if duration_ms is not None:
            if duration_ms < 1000:
                parts.append(f"{duration_ms:.0f}ms")
            else:
                parts.append(f"{duration_ms / 1000:.1f}s")

        symbol = "error" if failed > 0 else "success"
        self._output(" | ".join(parts), symbol_type=symbol, force=True)
