"""
Console rendering of reports and comparisons with Rich tables.

Nothing here mutates the report; sorting works on copies. All output goes to
the console passed in (stdout by default), so tests can render into a
recording Console.
"""

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from constants import MAX_DETAILED_FILES, MAX_LISTED_CHANGED_FILES
from core.comparison import ComparisonResult
from core.models import FileStats, LanguageStats
from core.report import Report
from models import SortMetric
from utils import console as default_console
from utils import format_delta, format_number


def _percent(part: int, whole: int) -> str:
    return f"{(part / whole * 100) if whole else 0.0:.2f} %"


def sort_languages(
    languages: list[LanguageStats], metric: SortMetric | None
) -> list[LanguageStats]:
    """
    Order language rows for display.

    Count metrics sort descending; NAME, LANGUAGE and no metric sort by
    language name.
    """
    if metric is SortMetric.TOTAL:
        return sorted(languages, key=lambda s: s.total_lines, reverse=True)
    if metric is SortMetric.LOGICAL:
        return sorted(languages, key=lambda s: s.logical_lines, reverse=True)
    if metric is SortMetric.COMMENT:
        return sorted(languages, key=lambda s: s.comment_lines, reverse=True)
    if metric is SortMetric.EMPTY:
        return sorted(languages, key=lambda s: s.empty_lines, reverse=True)
    return sorted(languages, key=lambda s: s.language)


def sort_files(files: list[FileStats], metric: SortMetric | None) -> list[FileStats]:
    """Order file rows for display; without a metric the report order is kept."""
    if metric is SortMetric.TOTAL:
        return sorted(files, key=lambda f: f.total_lines, reverse=True)
    if metric is SortMetric.LOGICAL:
        return sorted(files, key=lambda f: f.logical_lines, reverse=True)
    if metric is SortMetric.COMMENT:
        return sorted(files, key=lambda f: f.comment_lines, reverse=True)
    if metric is SortMetric.EMPTY:
        return sorted(files, key=lambda f: f.empty_lines, reverse=True)
    if metric is SortMetric.NAME:
        return sorted(files, key=lambda f: f.path)
    if metric is SortMetric.LANGUAGE:
        return sorted(files, key=lambda f: f.language)
    return list(files)


class ConsoleOutput:
    """
    Renders reports and comparisons.

    Attributes:
        sort_metric: Ordering of the language and file tables.
        details: Also show per-file rows and the unsupported files.
    """

    def __init__(
        self,
        sort_metric: SortMetric | None = None,
        details: bool = False,
        console: Console | None = None,
    ):
        self.sort_metric = sort_metric
        self.details = details
        self.console = console if console is not None else default_console

    def display_summary(self, report: Report) -> None:
        """Print the global and language summaries, then details and checksum."""
        self.console.print(Rule("[bold cyan]Source Lines of Code (SLOC) Report", style="blue"))
        self._global_summary(report)
        self._language_summary(report)

        if self.details:
            if len(report.files) <= MAX_DETAILED_FILES:
                self._file_details(report)
            else:
                self.console.print(
                    f"\n[yellow]({format_number(len(report.files))} files processed, "
                    "export the report to see every file)[/yellow]"
                )
            if report.unsupported_files:
                self.console.print("\n[bold red]Unsupported Files (not counted):[/bold red]")
                for path in report.unsupported_files:
                    self.console.print(f"  - {escape(path)}")

        if report.checksum is not None:
            self.console.print(f"\n[bold]Checksum[/bold]: [green]{report.checksum}[/green]")

    def _global_summary(self, report: Report) -> None:
        s = report.summary
        table = Table(title="Global Summary", title_style="bold green", title_justify="left")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")
        table.add_column("%", justify="right")

        table.add_row("Total Files", format_number(s.total_files), "")
        table.add_row("Unsupported Files", format_number(s.unsupported_files), "")
        table.add_row("Languages", format_number(s.languages_count), "")
        table.add_row("Total Lines", format_number(s.total_lines), "100.00 %")
        for label, value in (
            ("Logical Lines", s.logical_lines),
            ("Comment Lines", s.comment_lines),
            ("Empty Lines", s.empty_lines),
        ):
            table.add_row(label, format_number(value), _percent(value, s.total_lines))
        self.console.print(table)

    def _language_summary(self, report: Report) -> None:
        if not report.languages:
            self.console.print("\n[yellow]No supported files were counted.[/yellow]")
            return

        table = Table(title="Language Summary", title_style="bold green", title_justify="left")
        table.add_column("Language", style="bold")
        for header in ("Files", "Total", "Logical", "Comment", "Empty", "Density %"):
            table.add_column(header, justify="right")

        for lang in sort_languages(report.languages, self.sort_metric):
            table.add_row(
                escape(lang.language),
                format_number(lang.file_count),
                format_number(lang.total_lines),
                format_number(lang.logical_lines),
                format_number(lang.comment_lines),
                format_number(lang.empty_lines),
                # logical share of the language's lines
                _percent(lang.logical_lines, lang.total_lines),
            )
        self.console.print(table)

    def _file_details(self, report: Report) -> None:
        table = Table(title="File Details", title_style="bold green", title_justify="left")
        table.add_column("File")
        table.add_column("Language")
        for header in ("Total", "Logical", "Comment", "Empty"):
            table.add_column(header, justify="right")

        for f in sort_files(report.files, self.sort_metric):
            table.add_row(
                escape(f.path),
                escape(f.language),
                format_number(f.total_lines),
                format_number(f.logical_lines),
                format_number(f.comment_lines),
                format_number(f.empty_lines),
            )
        self.console.print(table)

    def display_comparison(self, comparison: ComparisonResult) -> None:
        """Print timestamps, global and language deltas, and file changes."""
        self.console.print(Rule("[bold cyan]Report Comparison", style="blue"))
        self.console.print("\n[bold]Timestamps:[/bold]")
        self.console.print(
            f"  Report 1: {comparison.report1_generated:%Y-%m-%d %H:%M:%S UTC}"
        )
        self.console.print(
            f"  Report 2: {comparison.report2_generated:%Y-%m-%d %H:%M:%S UTC}"
        )

        g = comparison.global_delta
        table = Table(title="Global Changes", title_style="bold green", title_justify="left")
        table.add_column("Metric", style="bold")
        table.add_column("Delta", justify="right")
        table.add_row("Files", format_delta(g.files_delta))
        table.add_row("Total Lines", format_delta(g.total_lines_delta))
        table.add_row("Logical Lines", format_delta(g.logical_lines_delta))
        table.add_row("Empty Lines", format_delta(g.empty_lines_delta))
        table.add_row("Languages", format_delta(g.languages_delta))
        self.console.print(table)

        if comparison.language_deltas:
            table = Table(
                title="Language Changes", title_style="bold green", title_justify="left"
            )
            table.add_column("Language", style="bold")
            for header in ("Files Δ", "Total Δ", "Logical Δ", "Empty Δ"):
                table.add_column(header, justify="right")
            for d in comparison.language_deltas:
                table.add_row(
                    escape(d.language),
                    format_delta(d.files_delta),
                    format_delta(d.total_lines_delta),
                    format_delta(d.logical_lines_delta),
                    format_delta(d.empty_lines_delta),
                )
            self.console.print(table)

        self._file_changes("New Files", "green", "+", comparison.new_files)
        self._file_changes("Removed Files", "red", "-", comparison.removed_files)
        self._file_changes(
            "Modified Files",
            "yellow",
            "~",
            [
                f"{escape(d.path)} ({format_delta(d.total_lines_delta)})"
                for d in comparison.modified_files
            ],
            escaped=True,
        )

        if comparison.is_empty:
            self.console.print("\n[green]No differences.[/green]")

    def _file_changes(
        self,
        title: str,
        colour: str,
        marker: str,
        entries: list[str],
        escaped: bool = False,
    ) -> None:
        if not entries:
            return
        self.console.print(f"\n[bold {colour}]{title}[/bold {colour}]: {len(entries)}")
        if len(entries) > MAX_LISTED_CHANGED_FILES:
            return
        for entry in entries:
            text = entry if escaped else escape(entry)
            self.console.print(f"  {marker} [{colour}]{text}[/{colour}]")
