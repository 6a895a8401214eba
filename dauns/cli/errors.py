"""Structured CLI errors with recovery suggestions."""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of CLI errors for organization and handling."""

    CONFIGURATION = "configuration"  # Invalid config files or values
    FILE_SYSTEM = "file_system"  # Missing paths, permissions
    VALIDATION = "validation"  # Invalid arguments
    SCANNING = "scanning"  # File could not be scanned
    RUNTIME = "runtime"  # Unexpected errors


@dataclass
class CLIError(Exception):
    """Base class for structured CLI errors.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional additional details.
        exit_code: Exit code used when this error terminates the CLI.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = 1

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def format(self, use_color: bool = True) -> str:
        """Format the error and its suggestion for display."""
        red = "\033[91m" if use_color else ""
        cyan = "\033[96m" if use_color else ""
        dim = "\033[2m" if use_color else ""
        reset = "\033[0m" if use_color else ""

        lines = [f"{red}Error:{reset} {self.message}"]

        if self.suggestion:
            lines.append(f"{cyan}Suggestion:{reset} {self.suggestion}")

        if self.details:
            for key, value in self.details.items():
                lines.append(f"{dim}  {key}: {value}{reset}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format(use_color=False)


class PathNotFoundError(CLIError):
    """A file or directory given on the command line does not exist."""

    def __init__(self, path: str):
        super().__init__(
            category=ErrorCategory.FILE_SYSTEM,
            message=f"Path not found: {path}",
            suggestion="Verify the path exists and you have read permissions",
            details={"path": path},
            exit_code=1,
        )


class UnsupportedFileError(CLIError):
    """No registered parser handles the file's extension."""

    def __init__(self, path: str, supported: list[str] | None = None):
        suggestion = "Run 'dauns extensions' to list supported file types"
        super().__init__(
            category=ErrorCategory.VALIDATION,
            message=f"Unsupported file type: {path}",
            suggestion=suggestion,
            details={"supported": ", ".join(sorted(supported))} if supported else None,
            exit_code=2,
        )


class ConfigurationError(CLIError):
    """Error in a configuration file or setting."""

    def __init__(
        self,
        message: str,
        config_file: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion=suggestion
            or "Check your configuration file syntax and field values",
            details={"config_file": config_file} if config_file else None,
            exit_code=1,
        )


class ScanFailedError(CLIError):
    """A requested file could not be read or scanned."""

    def __init__(self, message: str, file_path: str | None = None):
        super().__init__(
            category=ErrorCategory.SCANNING,
            message=message,
            suggestion="Check the file is readable text in a supported format",
            details={"file": file_path} if file_path else None,
            exit_code=1,
        )


def handle_exception(
    error: Exception,
    use_color: bool = True,
    verbose: bool = False,
) -> tuple[str, int]:
    """Convert any exception to formatted output and an exit code."""
    if isinstance(error, CLIError):
        message = error.format(use_color=use_color)
        exit_code = error.exit_code
    else:
        red = "\033[91m" if use_color else ""
        reset = "\033[0m" if use_color else ""
        message = f"{red}Error:{reset} {error}"
        exit_code = 1

    if verbose:
        message += "\n\nTraceback:\n" + "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )

    return message, exit_code
