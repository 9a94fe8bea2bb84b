"""
slocount CLI Entry Point.

This module implements the command-line interface for slocount, a tool that
counts source lines of code. Every line of every input file is classified as
logical (code), comment or empty using the comment grammar of the file's
language, and the per-file results are aggregated into a report.

Commands:

1.  **count**: Collect input files (paths, globs, directories with `-r`, or
    paths on stdin), count them on a worker pool, print the summary tables and
    optionally export the report.
2.  **report**: Same pipeline as `count`, for producing a report file.
3.  **process**: Load a stored report, display it and optionally re-export it
    in another format.
4.  **compare**: Diff two stored reports and display or export the deltas.

Usage:
    $ slocount count src -r --details
    $ slocount report src -r -o sloc.json --checksum
    $ slocount compare old.json new.json -e diff.csv

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Tables, colours and progress bars.
    - structlog: Diagnostics on stderr (SLOCOUNT_LOG_LEVEL, SLOCOUNT_LOG_FORMAT).
"""

from contextlib import contextmanager
from pathlib import Path
import time
from typing import Annotated, Iterator, Optional

from rich import print as pr
import structlog
import typer

from adapters.filesystem import PathCollector
from constants import LARGE_RUN_FILE_COUNT
from core.comparison import compare as compare_reports
from core.config import AppConfig
from core.counter import count_files, resolve_worker_count
from core.exceptions import FileIOError, SlocError
from core.language import LanguageDetector
from core.logging import setup_logging
from core.metrics import MetricsLogger
from core.report import Report
from core.serialization import (
    detect_format,
    load_report,
    save_comparison,
    save_report,
)
from models import OutputFormat, SortMetric
from ui.console_output import ConsoleOutput
from ui.progress_display import NoOpProgressDisplay, RichProgressDisplay
from utils import console, format_number

log = structlog.get_logger("slocount.cli")

app = typer.Typer(
    help="Count source lines of code: logical, comment and empty lines.",
    no_args_is_help=True,
)


@app.callback()
def main() -> None:
    """Count source lines of code: logical, comment and empty lines."""
    setup_logging()


def parse_override(value: str) -> tuple[str, str]:
    """
    Parse a `--language-override` value of the form `ext=lang`.

    Raises:
        typer.BadParameter: If either side is missing.
    """
    ext, sep, language = value.partition("=")
    ext, language = ext.strip(), language.strip()
    if not sep or not ext or not language:
        raise typer.BadParameter(
            f"Invalid override '{value}', expected EXT=LANGUAGE (e.g. h=cpp)"
        )
    return ext, language


def build_detector(
    config_path: Path | None, overrides: list[str] | None = None
) -> LanguageDetector:
    """
    Create the language detector for a run.

    Built-in languages are registered first, then the definitions from
    `config_path`, then the extension overrides.

    Raises:
        ConfigInvalidError: If the configuration file carries an invalid language.
        typer.BadParameter: If an override is malformed.
    """
    detector = LanguageDetector()
    if config_path is not None:
        detector.load_from_config(config_path)
    for value in overrides or []:
        ext, language = parse_override(value)
        detector.add_override(ext, language)
    return detector


def resolve_format(
    fmt: OutputFormat | None, path: Path | None, default: OutputFormat
) -> OutputFormat:
    """Explicit format first, then the output file's suffix, then `default`."""
    if fmt is not None:
        return fmt
    if path is not None and path.suffix.lstrip(".").lower() in {f.value for f in OutputFormat}:
        return detect_format(path)
    return default


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn raised errors into friendly messages and exit code 1."""
    try:
        yield
    except (typer.Exit, typer.BadParameter):
        raise
    except FileIOError as e:
        print_file_io_err(e)
    except SlocError as e:
        print_sloc_err(e)
    except Exception as e:  # noqa: BLE001
        # Catch-all so users never see a raw Python stack trace
        print_unexpected_err(e)


def run_count(
    paths: list[str],
    detector: LanguageDetector,
    recursive: bool,
    read_stdin: bool,
    threads: int,
    show_progress: bool,
    ignore_preprocessor: bool = False,
    checksum: bool = False,
    metrics: MetricsLogger | None = None,
) -> Report:
    """
    Collect, count and aggregate: the pipeline shared by `count` and `report`.

    Raises:
        PathNotFoundError: If an explicit input path does not exist.
    """
    files = PathCollector(recursive=recursive, read_stdin=read_stdin).collect(paths)
    if not files:
        pr("[yellow]Warning:[/yellow] No files to count.")

    display = RichProgressDisplay() if show_progress else NoOpProgressDisplay()
    result = count_files(
        files,
        detector,
        ignore_preprocessor=ignore_preprocessor,
        threads=threads,
        progress_display=display,
        metrics=metrics,
    )

    report = Report.from_files(result.files, result.unsupported_files)
    if checksum:
        report.calculate_checksum()

    log.info(
        "cli.count_finished",
        files=report.summary.total_files,
        unsupported=report.summary.unsupported_files,
        errors=len(result.errors),
    )
    return report


@app.command()
def count(
    paths: Annotated[
        Optional[list[str]],
        typer.Argument(help="Files, directories or glob patterns to count."),
    ] = None,
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="Descend into directories.")
    ] = False,
    stdin: Annotated[
        bool, typer.Option("--stdin", help="Also read file paths from stdin, one per line.")
    ] = False,
    fmt: Annotated[
        Optional[OutputFormat],
        typer.Option("--format", "-f", case_sensitive=False, help="Export format."),
    ] = None,
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Export the report to this file.")
    ] = None,
    sort: Annotated[
        Optional[SortMetric],
        typer.Option("--sort", "-s", case_sensitive=False, help="Sort tables by metric."),
    ] = None,
    language_override: Annotated[
        Optional[list[str]],
        typer.Option(
            "--language-override",
            help="Count files with extension EXT as LANGUAGE (EXT=LANGUAGE). Repeatable.",
        ),
    ] = None,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", help="TOML configuration file.")
    ] = None,
    no_progress: Annotated[
        bool, typer.Option("--no-progress", help="Do not draw a progress bar.")
    ] = False,
    threads: Annotated[
        Optional[int],
        typer.Option("--threads", "-j", min=0, help="Worker threads (0 = one per CPU)."),
    ] = None,
    checksum: Annotated[
        bool, typer.Option("--checksum", help="Add a SHA-256 checksum to the report.")
    ] = False,
    ignore_preprocessor: Annotated[
        bool,
        typer.Option(
            "--ignore-preprocessor", help="Count preprocessor directives as empty lines."
        ),
    ] = False,
    details: Annotated[
        bool, typer.Option("--details", help="Show per-file rows and unsupported files.")
    ] = False,
    enable_metrics: Annotated[
        bool, typer.Option("--enable-metrics", help="Append performance metrics to a log file.")
    ] = False,
    metrics_file: Annotated[
        Optional[Path], typer.Option("--metrics-file", help="Metrics log file.")
    ] = None,
):
    """
    Count lines of code and display the summary.

    With `--output` the report is also exported, in `--format` or the format
    matching the output file's suffix.
    """
    with handle_errors():
        config = AppConfig.with_cli_overrides(config_path, enable_metrics, metrics_file)
        detector = build_detector(config_path, language_override)
        workers = resolve_worker_count(
            threads if threads is not None else config.performance.default_threads
        )

        metrics = MetricsLogger.from_config(config.performance)
        metrics.init_session(
            "count",
            f"paths={paths or []} recursive={recursive} threads={workers}",
        )
        metrics.log_system_info()

        start = time.perf_counter()
        report = run_count(
            paths or [],
            detector,
            recursive=recursive or config.defaults.recursive,
            read_stdin=stdin,
            threads=workers,
            show_progress=not (no_progress or config.defaults.no_progress),
            ignore_preprocessor=ignore_preprocessor,
            checksum=checksum,
            metrics=metrics,
        )
        elapsed = time.perf_counter() - start

        ConsoleOutput(sort, details).display_summary(report)

        if output is not None:
            out_format = resolve_format(fmt, output, config.defaults.output_format)
            save_report(report, output, out_format)
            pr(f"\n[green]Report exported to {output} ({out_format})[/green]")

        print_performance(report, elapsed, workers)
        metrics.log_completion(report.summary.total_files, report.summary.total_lines)


@app.command()
def report(
    paths: Annotated[
        list[str], typer.Argument(help="Files, directories or glob patterns to count.")
    ],
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Report file to write.")
    ],
    fmt: Annotated[
        Optional[OutputFormat],
        typer.Option("--format", "-f", case_sensitive=False, help="Report format."),
    ] = None,
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="Descend into directories.")
    ] = False,
    checksum: Annotated[
        bool, typer.Option("--checksum", help="Add a SHA-256 checksum to the report.")
    ] = False,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", help="TOML configuration file.")
    ] = None,
    threads: Annotated[
        Optional[int],
        typer.Option("--threads", "-j", min=0, help="Worker threads (0 = one per CPU)."),
    ] = None,
):
    """Count lines of code and write the report to a file."""
    with handle_errors():
        config = AppConfig.with_cli_overrides(config_path)
        detector = build_detector(config_path)
        workers = resolve_worker_count(
            threads if threads is not None else config.performance.default_threads
        )

        result = run_count(
            paths,
            detector,
            recursive=recursive or config.defaults.recursive,
            read_stdin=False,
            threads=workers,
            show_progress=True,
            checksum=checksum,
        )
        ConsoleOutput().display_summary(result)

        out_format = resolve_format(fmt, output, config.defaults.output_format)
        save_report(result, output, out_format)
        pr(f"\n[green]Report written to {output} ({out_format})[/green]")


@app.command()
def process(
    report_path: Annotated[Path, typer.Argument(help="Stored report (json, xml or csv).")],
    sort: Annotated[
        Optional[SortMetric],
        typer.Option("--sort", "-s", case_sensitive=False, help="Sort tables by metric."),
    ] = None,
    export: Annotated[
        Optional[Path], typer.Option("--export", "-e", help="Re-export the report to this file.")
    ] = None,
    fmt: Annotated[
        Optional[OutputFormat],
        typer.Option("--format", "-f", case_sensitive=False, help="Export format."),
    ] = None,
    details: Annotated[
        bool, typer.Option("--details", help="Show per-file rows and unsupported files.")
    ] = False,
):
    """Display a stored report, optionally converting it to another format."""
    with handle_errors():
        loaded = load_report(report_path)
        ConsoleOutput(sort, details).display_summary(loaded)

        if export is not None:
            out_format = resolve_format(fmt, export, OutputFormat.JSON)
            save_report(loaded, export, out_format)
            pr(f"\n[green]Report exported to {export} ({out_format})[/green]")


@app.command()
def compare(
    report1: Annotated[Path, typer.Argument(help="Baseline report.")],
    report2: Annotated[Path, typer.Argument(help="Report to compare with the baseline.")],
    export: Annotated[
        Optional[Path], typer.Option("--export", "-e", help="Export the comparison to this file.")
    ] = None,
    fmt: Annotated[
        Optional[OutputFormat],
        typer.Option("--format", "-f", case_sensitive=False, help="Export format."),
    ] = None,
):
    """Show what changed between two stored reports (REPORT2 minus REPORT1)."""
    with handle_errors():
        comparison = compare_reports(load_report(report1), load_report(report2))
        ConsoleOutput().display_comparison(comparison)

        if export is not None:
            out_format = resolve_format(fmt, export, OutputFormat.JSON)
            save_comparison(comparison, export, out_format)
            pr(f"\n[green]Comparison exported to {export} ({out_format})[/green]")


def print_performance(report: Report, elapsed: float, workers: int) -> None:
    """Print throughput, plus a short recap for large runs."""
    total_lines = report.summary.total_lines
    rate = total_lines / elapsed if elapsed > 0 else 0.0
    console.print(
        f"\n[dim]Performance: {format_number(int(rate))} lines/sec ({workers} threads)[/dim]"
    )
    if report.summary.total_files > LARGE_RUN_FILE_COUNT:
        console.print(
            f"[dim]Processed {format_number(report.summary.total_files)} files, "
            f"{format_number(total_lines)} lines in {elapsed:.2f}s[/dim]"
        )


def print_sloc_err(e: SlocError) -> None:
    """
    Displays a user-friendly message for an expected slocount error
    (missing path, invalid configuration, malformed report).

    Raises:
        typer.Exit: Always raises with exit code 1.
    """
    pr(f"❌ [bold red]Error:[/bold red] {e.message}")
    if e.original_exception:
        pr(f"\nTechnical details: {e.original_exception}")
    raise typer.Exit(code=1) from e


def print_file_io_err(e: FileIOError) -> None:
    """
    Displays a user-friendly error message for file I/O operation failures.

    Prints formatted error messages to inform the user about file read/write
    issues, including the file path and diagnostic information for troubleshooting.

    Args:
        e (FileIOError): The exception that was raised, containing error details
            and file path information.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]File I/O Error[/bold red]")
    pr(f"The app encountered an error while working with files: {e.message}")
    if e.file_path:
        pr(f"File path: [yellow]{e.file_path}[/yellow]")

    pr("\n[yellow]Quick Fix:[/yellow] Check that the path exists and is accessible.")
    if e.original_exception:
        pr(f"\nTechnical details: {e.original_exception}")

    raise typer.Exit(code=1) from e


def print_unexpected_err(e: Exception) -> None:
    """
    Displays a user-friendly error message for unexpected errors.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Unexpected Error[/bold red]")
    pr("An unexpected error occurred while processing your request.")
    pr(f"\n[yellow]Error Type:[/yellow] {type(e).__name__}")
    pr(f"[yellow]Error Message:[/yellow] {str(e)}")

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Error Type: {type(e).__name__}")
    pr(f"Error Message: {e}")
    if e.__cause__:
        pr(f"Caused by: {e.__cause__}")

    raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
