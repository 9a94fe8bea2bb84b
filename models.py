"""
Type definitions and data models used across the slocount CLI application.

This module contains shared type definitions including enums and TypedDict
structures that are used throughout the codebase for type safety and consistency.
"""

from enum import StrEnum
from typing import NotRequired, TypedDict


class OutputFormat(StrEnum):
    """
    Enumeration of the wire encodings a report can be written to or read from.

    The enum values double as the file suffixes used when a format has to be
    derived from a path (e.g. "report.xml" -> OutputFormat.XML).
    """

    JSON = "json"
    XML = "xml"
    CSV = "csv"


class SortMetric(StrEnum):
    """
    Enumeration of the metrics the console tables can be sorted by.

    Count-based metrics sort descending, name-based metrics sort ascending.
    """

    TOTAL = "total"
    LOGICAL = "logical"
    COMMENT = "comment"
    EMPTY = "empty"
    NAME = "name"
    LANGUAGE = "language"


class LanguageDefinition(TypedDict):
    """
    Type definition for a raw language definition.

    This TypedDict describes the shape of a language entry both in the built-in
    BUILTIN_LANGUAGES mapping and in the `[languages.<key>]` tables of a TOML
    configuration file. It is converted into an immutable `core.models.Language`
    before being registered with the detector.

    Attributes:
        name: Human-readable language name (e.g., "Rust"). Used as the language
            key in reports.
        extensions: File extensions without the leading dot (e.g., "rs").
        single_line_comment: Markers that start a comment running to end of line,
            checked in declared order (e.g., "//").
        multi_line_comment: (start, end) marker pairs for block comments.
        nested_comments: True if block comments can nest (e.g., Rust).
        preprocessor_prefix: Prefix of preprocessor directives (e.g., "#" for C).
    """

    name: str
    extensions: list[str]
    single_line_comment: list[str]
    multi_line_comment: list[tuple[str, str]]
    nested_comments: NotRequired[bool]
    preprocessor_prefix: NotRequired[str | None]
