"""
Core data models for the counting and reporting pipeline.

This module defines the immutable language grammar, the per-line classification
types and the per-file / per-language / global statistics records produced while
scanning a source tree.
"""

from dataclasses import dataclass, field
from enum import Enum

from models import LanguageDefinition


@dataclass(frozen=True)
class Language:
    """
    Immutable comment grammar of one programming language.

    Attributes:
        name: Human-readable name used as the language key in reports.
        extensions: File extensions (without the leading dot) that select this
            language during detection.
        single_line_markers: Markers that start a comment running to end of line.
            Order matters: they are checked in the declared order.
        multi_line_markers: (start, end) marker pairs for block comments.
        nested: True if block comments can nest, requiring depth tracking.
        preprocessor_prefix: Prefix of preprocessor directives, if the language
            has any.
    """

    name: str
    extensions: frozenset[str] = frozenset()
    single_line_markers: tuple[str, ...] = ()
    multi_line_markers: tuple[tuple[str, str], ...] = ()
    nested: bool = False
    preprocessor_prefix: str | None = None

    @classmethod
    def from_definition(cls, definition: LanguageDefinition) -> "Language":
        """
        Build a Language from a raw (already validated) definition mapping.

        Args:
            definition: A LanguageDefinition, as found in BUILTIN_LANGUAGES or in
                a parsed configuration file.

        Returns:
            The equivalent immutable Language.
        """
        return cls(
            name=definition["name"],
            extensions=frozenset(ext.lstrip(".") for ext in definition["extensions"]),
            single_line_markers=tuple(definition["single_line_comment"]),
            multi_line_markers=tuple(
                (start, end) for start, end in definition["multi_line_comment"]
            ),
            nested=definition.get("nested_comments", False),
            preprocessor_prefix=definition.get("preprocessor_prefix"),
        )


class LineType(Enum):
    EMPTY = "empty"
    COMMENT = "comment"
    LOGICAL = "logical"
    # Code followed by a single-line comment; counted as logical.
    MIXED = "mixed"


@dataclass(frozen=True)
class MultilineState:
    """
    Block-comment state carried from one line of a file to the next.

    A fresh state is created for every file; it is never shared between files.

    Attributes:
        in_comment: True while an unterminated block comment is open.
        depth: Nesting depth, only meaningful for languages with nested comments.
        end_marker: Closing marker of the currently open block comment, for
            languages without nesting that declare several marker pairs.
    """

    in_comment: bool = False
    depth: int = 0
    end_marker: str | None = None


@dataclass
class FileStats:
    """
    Line counts for a single file.

    `total_lines` always equals `logical_lines + comment_lines + empty_lines`:
    mixed code+comment lines are folded into `logical_lines`.
    """

    path: str
    language: str
    total_lines: int = 0
    logical_lines: int = 0
    comment_lines: int = 0
    empty_lines: int = 0


@dataclass
class LanguageStats:
    language: str
    file_count: int = 0
    total_lines: int = 0
    logical_lines: int = 0
    comment_lines: int = 0
    empty_lines: int = 0

    def add(self, file_stats: FileStats) -> None:
        """Fold one file's counts into this language's totals."""
        self.file_count += 1
        self.total_lines += file_stats.total_lines
        self.logical_lines += file_stats.logical_lines
        self.comment_lines += file_stats.comment_lines
        self.empty_lines += file_stats.empty_lines


@dataclass
class GlobalSummary:
    total_files: int = 0
    total_lines: int = 0
    logical_lines: int = 0
    comment_lines: int = 0
    empty_lines: int = 0
    languages_count: int = 0
    unsupported_files: int = 0


@dataclass
class CountResult:
    """
    Outcome of counting a batch of files.

    Attributes:
        files: Stats for every file whose language was detected, in completion
            order (no ordering guarantee).
        unsupported_files: Paths that matched no language or could not be read.
        errors: Read failures keyed by path, for diagnostics.
    """

    files: list[FileStats] = field(default_factory=list)
    unsupported_files: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
