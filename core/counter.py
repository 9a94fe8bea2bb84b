"""
Per-file line counting and the parallel counting pipeline.

`count_lines` is the pure core: it folds the comment parser over the lines of
one file. `count_file` adds language detection and file reading. `count_files`
runs `count_file` for a whole batch on a bounded thread pool and sorts the
outcomes into supported stats and unsupported paths.

Determinism is left to the report: results are collected in completion order
and only sorted when the Report is built.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
import os
from pathlib import Path
from typing import Iterable

import structlog

from constants import UNKNOWN_LANGUAGE
from core.comments import CommentParser
from core.exceptions import FileReadError
from core.file_io import FileReader, FilesystemFileReader
from core.language import LanguageDetector
from core.metrics import MetricsLogger
from core.models import CountResult, FileStats, Language, LineType, MultilineState
from ui.progress import ProgressState
from ui.progress_display import ProgressDisplay, RichProgressDisplay

log = structlog.get_logger("slocount.counter")


def split_lines(content: str) -> list[str]:
    """
    Split decoded file content into lines with their terminators stripped.

    Only "\\n" separates lines; a trailing "\\r" is dropped from each line so
    CRLF files count like LF files. A final terminator does not start an extra
    empty line, and empty content has no lines.
    """
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def count_lines(
    path: str,
    lines: Iterable[str],
    language: Language | None,
    ignore_preprocessor: bool = False,
) -> FileStats:
    """
    Count the lines of one file.

    With a language, every line is classified by CommentParser: EMPTY lines go
    to `empty_lines`, COMMENT lines to `comment_lines`, LOGICAL and MIXED lines
    to `logical_lines`. Without a language, non-blank lines are logical and
    blank lines empty, and the file is labelled UNKNOWN_LANGUAGE.

    Args:
        path: Path recorded in the stats.
        lines: The file's lines, without terminators.
        language: Detected grammar, or None.
        ignore_preprocessor: Classify preprocessor directives as empty.

    Returns:
        FileStats whose three categories always sum to `total_lines`.
    """
    stats = FileStats(
        path=path, language=language.name if language else UNKNOWN_LANGUAGE
    )

    if language is None:
        for line in lines:
            stats.total_lines += 1
            if line.strip():
                stats.logical_lines += 1
            else:
                stats.empty_lines += 1
        return stats

    parser = CommentParser(language, ignore_preprocessor)
    state = MultilineState()
    for line in lines:
        stats.total_lines += 1
        line_type, state = parser.parse(line, state)
        if line_type is LineType.EMPTY:
            stats.empty_lines += 1
        elif line_type is LineType.COMMENT:
            stats.comment_lines += 1
        else:
            stats.logical_lines += 1

    return stats


def count_file(
    path: Path,
    detector: LanguageDetector,
    ignore_preprocessor: bool = False,
    file_reader: FileReader | None = None,
) -> FileStats:
    """
    Detect the language of one file and count its lines.

    Args:
        path: File to count.
        detector: Shared, read-only language detector.
        ignore_preprocessor: Classify preprocessor directives as empty.
        file_reader: Optional reader; defaults to FilesystemFileReader. Tests pass
            a MockFileReader.

    Returns:
        FileStats; `language` is UNKNOWN_LANGUAGE when no grammar matched.

    Raises:
        FileReadError: If the file cannot be read.
    """
    reader = file_reader if file_reader is not None else FilesystemFileReader()
    language = detector.detect(path)
    content = reader.read_file(path)
    return count_lines(str(path), split_lines(content), language, ignore_preprocessor)


def resolve_worker_count(threads: int) -> int:
    """Number of workers for `threads`; 0 or less means one per CPU."""
    return threads if threads > 0 else (os.cpu_count() or 1)


def count_files(
    paths: list[Path],
    detector: LanguageDetector,
    ignore_preprocessor: bool = False,
    threads: int = 0,
    progress_display: ProgressDisplay | None = None,
    file_reader: FileReader | None = None,
    metrics: MetricsLogger | None = None,
) -> CountResult:
    """
    Count a batch of files on a bounded worker pool.

    Files whose language is unknown, and files that cannot be read, are listed
    as unsupported; a failing file never aborts the batch.

    Args:
        paths: Files to count.
        detector: Language detector, fully set up and no longer mutated.
        ignore_preprocessor: Classify preprocessor directives as empty.
        threads: Worker count; 0 means one per available CPU.
        progress_display: Optional progress display. If None, defaults to
            `RichProgressDisplay`. For testing, pass `NoOpProgressDisplay()`.
        file_reader: Optional reader shared by all workers.
        metrics: Optional metrics logger.

    Returns:
        CountResult with supported stats, unsupported paths and read errors.
    """
    result = CountResult()
    if not paths:
        return result

    workers = resolve_worker_count(threads)
    display = (
        progress_display if progress_display is not None else RichProgressDisplay()
    )

    with display as rpd, ThreadPoolExecutor(max_workers=workers) as pool:
        rpd.on_start(f"Counting {len(paths)} files...", total=len(paths))

        futures = {
            pool.submit(count_file, path, detector, ignore_preprocessor, file_reader): path
            for path in paths
        }
        for future in as_completed(futures):
            path = futures[future]
            try:
                stats = future.result()
            except FileReadError as e:
                log.warning("counter.read_failed", path=str(path), error=e.message)
                result.errors[str(path)] = e.message
                result.unsupported_files.append(str(path))
                if metrics is not None:
                    metrics.log_metric("file_errors", 1)
            else:
                if stats.language == UNKNOWN_LANGUAGE:
                    result.unsupported_files.append(stats.path)
                else:
                    result.files.append(stats)
            rpd.on_update(advance=1)

        rpd.on_complete(
            f"Counted {len(result.files)} files "
            f"({len(result.unsupported_files)} unsupported).",
            completed=len(paths),
            state=ProgressState.WARNING if result.errors else ProgressState.COMPLETE,
        )

    if metrics is not None:
        metrics.log_metric("thread_count", workers)
        metrics.log_metric("files_processed_successfully", len(result.files))

    return result
