"""
Structural diff between two reports.

`compare(a, b)` is directional: every delta is `b - a`. Files are matched by
path; identical files are left out entirely, and languages whose file count
and total line count did not change are left out of the language deltas.
"""

from dataclasses import dataclass, field
from datetime import datetime

from core.models import LanguageStats
from core.report import Report


@dataclass(frozen=True)
class GlobalDelta:
    files_delta: int = 0
    total_lines_delta: int = 0
    logical_lines_delta: int = 0
    empty_lines_delta: int = 0
    languages_delta: int = 0


@dataclass(frozen=True)
class LanguageDelta:
    language: str
    files_delta: int = 0
    total_lines_delta: int = 0
    logical_lines_delta: int = 0
    empty_lines_delta: int = 0


@dataclass(frozen=True)
class FileDelta:
    path: str
    total_lines_delta: int = 0
    logical_lines_delta: int = 0
    empty_lines_delta: int = 0


@dataclass(frozen=True)
class ComparisonResult:
    """
    Read-only delta of report2 relative to report1.

    Attributes:
        report1_generated: Timestamp of the baseline report.
        report2_generated: Timestamp of the compared report.
        global_delta: Summary deltas, always present.
        language_deltas: Non-zero language deltas, sorted by language.
        new_files: Paths only in report2, sorted.
        removed_files: Paths only in report1, sorted.
        modified_files: Deltas of files present in both with different counts,
            sorted by path.
    """

    report1_generated: datetime
    report2_generated: datetime
    global_delta: GlobalDelta
    language_deltas: list[LanguageDelta] = field(default_factory=list)
    new_files: list[str] = field(default_factory=list)
    removed_files: list[str] = field(default_factory=list)
    modified_files: list[FileDelta] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True if the two reports describe the same files with the same counts."""
        return (
            not self.language_deltas
            and not self.new_files
            and not self.removed_files
            and not self.modified_files
            and self.global_delta == GlobalDelta()
        )


def compare(report1: Report, report2: Report) -> ComparisonResult:
    """
    Compute the delta of `report2` relative to `report1`.

    Args:
        report1: Baseline report.
        report2: Report compared against the baseline.

    Returns:
        The ComparisonResult.
    """
    files1 = {f.path: f for f in report1.files}
    files2 = {f.path: f for f in report2.files}

    new_files: list[str] = []
    modified_files: list[FileDelta] = []
    for path, file2 in files2.items():
        file1 = files1.get(path)
        if file1 is None:
            new_files.append(path)
            continue
        delta = FileDelta(
            path=path,
            total_lines_delta=file2.total_lines - file1.total_lines,
            logical_lines_delta=file2.logical_lines - file1.logical_lines,
            empty_lines_delta=file2.empty_lines - file1.empty_lines,
        )
        if delta != FileDelta(path):
            modified_files.append(delta)

    removed_files = [path for path in files1 if path not in files2]

    s1, s2 = report1.summary, report2.summary
    global_delta = GlobalDelta(
        files_delta=s2.total_files - s1.total_files,
        total_lines_delta=s2.total_lines - s1.total_lines,
        logical_lines_delta=s2.logical_lines - s1.logical_lines,
        empty_lines_delta=s2.empty_lines - s1.empty_lines,
        languages_delta=s2.languages_count - s1.languages_count,
    )

    return ComparisonResult(
        report1_generated=report1.generated_at,
        report2_generated=report2.generated_at,
        global_delta=global_delta,
        language_deltas=_language_deltas(report1.languages, report2.languages),
        new_files=sorted(new_files),
        removed_files=sorted(removed_files),
        modified_files=sorted(modified_files, key=lambda d: d.path),
    )


def _language_deltas(
    languages1: list[LanguageStats], languages2: list[LanguageStats]
) -> list[LanguageDelta]:
    stats1 = {s.language: s for s in languages1}
    stats2 = {s.language: s for s in languages2}

    deltas = []
    for language in sorted(stats1.keys() | stats2.keys()):
        a = stats1.get(language, LanguageStats(language))
        b = stats2.get(language, LanguageStats(language))
        delta = LanguageDelta(
            language=language,
            files_delta=b.file_count - a.file_count,
            total_lines_delta=b.total_lines - a.total_lines,
            logical_lines_delta=b.logical_lines - a.logical_lines,
            empty_lines_delta=b.empty_lines - a.empty_lines,
        )
        # Only file count and total lines decide whether a language changed
        if delta.files_delta or delta.total_lines_delta:
            deltas.append(delta)
    return deltas
