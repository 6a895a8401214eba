"""Click-based command line interface for the variable scanner."""

import functools
import time
from pathlib import Path
from typing import Any

import click

from .. import __version__
from ..analysis.models import VariableInfo
from ..config.config_loader import ConfigLoader
from ..performance.async_scanner import ScanError
from ..scan_logging import setup_logging
from ..scanner import VariableScanner
from .errors import (
    CLIError,
    PathNotFoundError,
    ScanFailedError,
    UnsupportedFileError,
    handle_exception,
)
from .output import OutputConfig, OutputManager


def handle_cli_errors(f: Any) -> Any:
    """Render CLIError and scan failures with suggestions and exit with their code."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        ctx = click.get_current_context()
        output: OutputManager = ctx.obj["output"]
        try:
            return f(*args, **kwargs)
        except CLIError as e:
            message, exit_code = handle_exception(
                e, use_color=output.config.use_color, verbose=output.config.verbose
            )
            click.echo(message, err=True)
            ctx.exit(exit_code)

    return wrapper


def get_scanner(ctx: click.Context, target: Path) -> VariableScanner:
    """Build a scanner configured for the project containing ``target``."""
    project_path = target if target.is_dir() else target.parent
    config = ConfigLoader(project_path, config_file=ctx.obj["config_file"]).load()
    scanner = VariableScanner(config)
    ctx.call_on_close(scanner.dispose)
    return scanner


def require_file(scanner: VariableScanner, file_path: str) -> Path:
    path = Path(file_path)
    if not path.exists():
        raise PathNotFoundError(file_path)
    if not scanner.registry.is_supported(path):
        raise UnsupportedFileError(file_path, scanner.registry.get_supported_extensions())
    return path


def run_scan(action: Any, file_path: str) -> Any:
    try:
        return action()
    except ScanError as e:
        raise ScanFailedError(f"Failed to scan {file_path}: {e.message}", file_path) from e


def format_variable(variable: VariableInfo) -> str:
    location = f"{variable.line}:{variable.character}"
    return (
        f"  {location:>8}  {variable.declaration_type:<22} "
        f"{variable.name}: {variable.type}  [{variable.scope}]"
    )


def print_variables(
    output: OutputManager, file_path: str, variables: list[VariableInfo]
) -> None:
    output.plain(output.colorize(f"{file_path} ({len(variables)} variables)", "bold"))
    for variable in variables:
        output.plain(format_variable(variable))


def print_report(output: OutputManager, scanner: VariableScanner) -> None:
    report = scanner.get_performance_report()
    output.header("Performance Report")
    output.plain(f"Average scan time: {report.average_scan_time:.2f}ms")
    output.plain(f"Cache efficiency:  {report.cache_efficiency:.2f}")
    output.plain(f"Error rate:        {report.error_rate:.2%}")
    for name, stats in sorted(report.operation_stats.items()):
        output.plain(
            f"  {name}: {stats.count} calls, avg={stats.average_duration:.2f}ms"
        )
    output.plain("Recommendations:")
    for recommendation in report.recommendations:
        output.plain(f"  - {recommendation}")


@click.group()
@click.version_option(version=__version__, prog_name="dauns")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file path (JSON or YAML)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write logs to this rotating file",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Format of the log file",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    config_file: str | None,
    log_file: Path | None,
    log_format: str,
) -> None:
    """Dauns - variable extraction and cross-reference scanner."""
    setup_logging(
        quiet=quiet, verbose=verbose, log_file=log_file, log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj["output"] = OutputManager(
        OutputConfig.from_flags(verbose=verbose, quiet=quiet, no_color=no_color)
    )
    ctx.obj["config_file"] = config_file


@cli.command()
@click.argument("path", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.option("--report", is_flag=True, help="Show a performance report")
@click.pass_context
@handle_cli_errors
def scan(ctx: click.Context, path: str, as_json: bool, report: bool) -> None:
    """Scan a file or every supported file under a directory."""
    output: OutputManager = ctx.obj["output"]
    target = Path(path)
    if not target.exists():
        raise PathNotFoundError(path)

    scanner = get_scanner(ctx, target)
    start = time.perf_counter()
    if target.is_dir():
        results = scanner.scan_workspace(target)
    else:
        require_file(scanner, path)
        results = {path: run_scan(lambda: scanner.scan_file(target), path)}
    duration_ms = (time.perf_counter() - start) * 1000

    if as_json:
        data: dict[str, Any] = {
            file_path: [variable.to_dict() for variable in variables]
            for file_path, variables in results.items()
        }
        if report:
            data = {
                "results": data,
                "report": scanner.get_performance_report().to_dict(),
            }
        output.json(data)
        return

    for file_path, variables in sorted(results.items()):
        print_variables(output, file_path, variables)
    total_variables = sum(len(variables) for variables in results.values())
    output.summary(total=len(results), success=len(results), duration_ms=duration_ms)
    output.info(f"{total_variables} variables found")
    if report:
        print_report(output, scanner)


@cli.command()
@click.argument("file", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.pass_context
@handle_cli_errors
def variables(ctx: click.Context, file: str, as_json: bool) -> None:
    """List the variables declared in FILE."""
    output: OutputManager = ctx.obj["output"]
    scanner = get_scanner(ctx, Path(file))
    path = require_file(scanner, file)
    found = run_scan(lambda: scanner.scan_file(path), file)

    if as_json:
        output.json([variable.to_dict() for variable in found])
    else:
        print_variables(output, file, found)


@cli.command()
@click.argument("file", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.pass_context
@handle_cli_errors
def imports(ctx: click.Context, file: str, as_json: bool) -> None:
    """List the import statements in FILE."""
    output: OutputManager = ctx.obj["output"]
    scanner = get_scanner(ctx, Path(file))
    path = require_file(scanner, file)
    found = run_scan(lambda: scanner.parse_imports(path), file)

    if as_json:
        output.json([info.to_dict() for info in found])
        return
    if not found:
        output.info("No imports found")
    for info in found:
        output.plain(f"  {info.line}:{info.character}  {info.type.value:<8} {info.name} <- {info.path}")


@cli.command()
@click.argument("file", type=click.Path())
@click.argument("name")
@click.pass_context
@handle_cli_errors
def references(ctx: click.Context, file: str, name: str) -> None:
    """Show every occurrence of NAME in FILE."""
    output: OutputManager = ctx.obj["output"]
    scanner = get_scanner(ctx, Path(file))
    path = require_file(scanner, file)
    found = run_scan(lambda: scanner.find_references(path, name), file)

    output.info(f"{len(found)} references to {name}")
    for reference in found:
        output.plain(f"  {reference.line}:{reference.character}  {reference.context}")


@cli.command()
@click.argument("file", type=click.Path())
@click.pass_context
@handle_cli_errors
def unused(ctx: click.Context, file: str) -> None:
    """List variables in FILE that are never used after their declaration."""
    output: OutputManager = ctx.obj["output"]
    scanner = get_scanner(ctx, Path(file))
    path = require_file(scanner, file)
    found = run_scan(lambda: scanner.find_unused_variables(path), file)

    if not found:
        output.success("No unused variables found")
        return
    output.warning(f"{len(found)} unused variables", force=True)
    for item in found:
        output.plain(format_variable(item.variable))


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.pass_context
@handle_cli_errors
def hotspots(ctx: click.Context, path: str) -> None:
    """List variables referenced many times across the files under PATH."""
    output: OutputManager = ctx.obj["output"]
    scanner = get_scanner(ctx, Path(path))
    found = scanner.find_hotspot_variables(path)

    threshold = scanner.config.analysis.hotspot_threshold
    output.info(f"{len(found)} variables with at least {threshold} references")
    for variable in found:
        output.plain(f"  {variable.name}  ({variable.file_path}:{variable.line})")


@cli.command()
@click.pass_context
def extensions(ctx: click.Context) -> None:
    """List the file extensions that have a parser."""
    output: OutputManager = ctx.obj["output"]
    scanner = VariableScanner()
    try:
        for extension in sorted(scanner.registry.get_supported_extensions()):
            parser = scanner.registry.get_parser(extension)
            output.plain(f"{extension:<8} {parser.language}", force=True)
    finally:
        scanner.dispose()


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.pass_context
@handle_cli_errors
def watch(ctx: click.Context, path: str) -> None:
    """Rescan files under PATH whenever they change (Ctrl+C to stop)."""
    from ..watcher.handler import watch_directory

    output: OutputManager = ctx.obj["output"]
    scanner = get_scanner(ctx, Path(path))

    def on_update(file_path: str, found: list[VariableInfo]) -> None:
        output.info(f"{file_path}: {len(found)} variables")

    results = scanner.scan_workspace(path)
    output.success(f"Initial scan: {len(results)} files")
    output.info("Watching for changes. Press Ctrl+C to stop")
    scanner.start_monitoring()
    handler = watch_directory(path, scanner, on_update)
    stats = handler.get_stats()
    output.info(
        f"Stopped after {stats['events_forwarded']} forwarded events "
        f"({stats['events_ignored']} ignored)"
    )


def main() -> None:
    cli(obj={})
