"""
Report model: aggregation of per-file stats and content checksumming.

A Report is built once per count run (or loaded from a stored report). Its
per-language and global summaries are derived at construction time; only the
optional checksum may be attached afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import hashlib

from constants import REPORT_FORMAT_VERSION
from core.models import FileStats, GlobalSummary, LanguageStats


@dataclass
class Report:
    """
    Aggregated line-count report.

    Attributes:
        format_version: Version of the interchange schema.
        generated_at: Construction time, timezone-aware UTC.
        files: Per-file stats, in the order they were given.
        languages: Per-language totals, sorted by language name.
        summary: Totals across all files.
        unsupported_files: Paths excluded from every statistic.
        checksum: Optional lower-case hex SHA-256 of the file stats.
    """

    format_version: str
    generated_at: datetime
    files: list[FileStats]
    languages: list[LanguageStats]
    summary: GlobalSummary
    unsupported_files: list[str] = field(default_factory=list)
    checksum: str | None = None

    @classmethod
    def from_files(
        cls,
        files: list[FileStats],
        unsupported_files: list[str] | None = None,
        generated_at: datetime | None = None,
    ) -> "Report":
        """
        Aggregate per-file stats into a report.

        Files are grouped by language name; the language list is sorted by name
        so the result does not depend on the order files were counted in.

        Args:
            files: Stats of every supported file.
            unsupported_files: Paths of files that were not counted.
            generated_at: Timestamp to record; defaults to now (UTC).

        Returns:
            A new Report without checksum.
        """
        unsupported = list(unsupported_files or [])
        languages = calculate_language_stats(files)
        summary = GlobalSummary(
            total_files=len(files),
            total_lines=sum(f.total_lines for f in files),
            logical_lines=sum(f.logical_lines for f in files),
            comment_lines=sum(f.comment_lines for f in files),
            empty_lines=sum(f.empty_lines for f in files),
            languages_count=len(languages),
            unsupported_files=len(unsupported),
        )
        return cls(
            format_version=REPORT_FORMAT_VERSION,
            generated_at=generated_at or datetime.now(timezone.utc),
            files=list(files),
            languages=languages,
            summary=summary,
            unsupported_files=unsupported,
        )

    def calculate_checksum(self) -> str:
        """
        Compute and attach the SHA-256 checksum of the file stats.

        Files are hashed in path order, not in scan order, so the digest only
        depends on the counted content. For each file the path, language and the
        total, logical, comment and empty counts (as decimal text) are fed to the
        digest back to back.

        Returns:
            The lower-case hex digest, also stored in `checksum`.
        """
        digest = hashlib.sha256()
        for file in sorted(self.files, key=lambda f: f.path):
            digest.update(file.path.encode("utf-8"))
            digest.update(file.language.encode("utf-8"))
            for count in (
                file.total_lines,
                file.logical_lines,
                file.comment_lines,
                file.empty_lines,
            ):
                digest.update(str(count).encode("utf-8"))

        self.checksum = digest.hexdigest()
        return self.checksum


def calculate_language_stats(files: list[FileStats]) -> list[LanguageStats]:
    by_language: dict[str, LanguageStats] = {}
    for file in files:
        by_language.setdefault(file.language, LanguageStats(file.language)).add(file)
    return sorted(by_language.values(), key=lambda stats: stats.language)
