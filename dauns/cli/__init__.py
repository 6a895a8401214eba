"""CLI support package.

Modules:
    output: OutputManager for consistent output with color/quiet support
    errors: Structured error types with recovery suggestions
    main: The ``dauns`` click command group
"""

from .errors import (
    CLIError,
    ConfigurationError,
    ErrorCategory,
    PathNotFoundError,
    ScanFailedError,
    UnsupportedFileError,
    handle_exception,
)
from .output import OutputConfig, OutputManager, should_use_color

__all__ = [
    "OutputConfig",
    "OutputManager",
    "should_use_color",
    "CLIError",
    "ErrorCategory",
    "PathNotFoundError",
    "UnsupportedFileError",
    "ConfigurationError",
    "ScanFailedError",
    "handle_exception",
]
