"""
Application-wide constants and configuration mappings.

This module defines the built-in language grammars and the fixed values shared
by the counting pipeline, the report codecs and the CLI: report format version,
sentinel names, default file names and CSV layout.
"""

from typing import Final, Mapping
from models import LanguageDefinition


# Built-in language grammars keyed by registry key.
# Each entry lists the file extensions (without the leading dot) that select the
# language and the comment delimiters the line classifier uses for it.
# External configuration can add new keys or replace any of these by key.
BUILTIN_LANGUAGES: Final[Mapping[str, LanguageDefinition]] = {
    "rust": {
        "name": "Rust",
        "extensions": ["rs"],
        "single_line_comment": ["//"],
        "multi_line_comment": [("/*", "*/")],
        "nested_comments": True,
    },
    "c": {
        "name": "C",
        "extensions": ["c", "h"],
        "single_line_comment": ["//"],
        "multi_line_comment": [("/*", "*/")],
        "preprocessor_prefix": "#",
    },
    "cpp": {
        "name": "C++",
        "extensions": ["cpp", "cc", "cxx", "hpp", "hh", "hxx"],
        "single_line_comment": ["//"],
        "multi_line_comment": [("/*", "*/")],
        "preprocessor_prefix": "#",
    },
    "python": {
        "name": "Python",
        "extensions": ["py", "pyw"],
        "single_line_comment": ["#"],
        "multi_line_comment": [("'''", "'''"), ('"""', '"""')],
    },
    "javascript": {
        "name": "JavaScript",
        "extensions": ["js", "jsx", "mjs"],
        "single_line_comment": ["//"],
        "multi_line_comment": [("/*", "*/")],
    },
    "typescript": {
        "name": "TypeScript",
        "extensions": ["ts", "tsx"],
        "single_line_comment": ["//"],
        "multi_line_comment": [("/*", "*/")],
    },
    "java": {
        "name": "Java",
        "extensions": ["java"],
        "single_line_comment": ["//"],
        "multi_line_comment": [("/*", "*/")],
    },
    "go": {
        "name": "Go",
        "extensions": ["go"],
        "single_line_comment": ["//"],
        "multi_line_comment": [("/*", "*/")],
    },
    "ruby": {
        "name": "Ruby",
        "extensions": ["rb"],
        "single_line_comment": ["#"],
        "multi_line_comment": [("=begin", "=end")],
    },
    "shell": {
        "name": "Shell",
        "extensions": ["sh", "bash", "zsh"],
        "single_line_comment": ["#"],
        "multi_line_comment": [],
    },
    "sql": {
        "name": "SQL",
        "extensions": ["sql"],
        "single_line_comment": ["--"],
        "multi_line_comment": [("/*", "*/")],
    },
    "html": {
        "name": "HTML",
        "extensions": ["html", "htm"],
        "single_line_comment": [],
        "multi_line_comment": [("<!--", "-->")],
    },
    "css": {
        "name": "CSS",
        # "//" only appears in SCSS/SASS, harmless for plain CSS
        "extensions": ["css", "scss", "sass"],
        "single_line_comment": ["//"],
        "multi_line_comment": [("/*", "*/")],
    },
    "yaml": {
        "name": "YAML",
        "extensions": ["yaml", "yml"],
        "single_line_comment": ["#"],
        "multi_line_comment": [],
    },
    "toml": {
        "name": "TOML",
        "extensions": ["toml"],
        "single_line_comment": ["#"],
        "multi_line_comment": [],
    },
}

# Language name recorded for files no registered grammar matched.
UNKNOWN_LANGUAGE: Final[str] = "Unknown"

# Version stamped into every report as `reportFormatVersion`.
REPORT_FORMAT_VERSION: Final[str] = "1.0"

# Defaults for the optional configuration file.
DEFAULT_METRICS_FILE: Final[str] = "sloc_metrics.log"
DEFAULT_OUTPUT_FILE_BASE: Final[str] = "sloc-report"

# CSV report layout. The marker row separates the per-file table from the
# trailing list of unsupported files.
CSV_FILE_HEADER: Final[tuple[str, ...]] = (
    "Path",
    "Language",
    "Total Lines",
    "Logical Lines",
    "Comment Lines",
    "Empty Lines",
)
CSV_UNSUPPORTED_MARKER: Final[str] = "--- Unsupported Files (not counted) ---"
CSV_COMPARISON_HEADER: Final[tuple[str, ...]] = (
    "Type",
    "Name",
    "Files Delta",
    "Total Delta",
    "Logical Delta",
    "Empty Delta",
)

# Console output limits.
MAX_DETAILED_FILES: Final[int] = 20
MAX_LISTED_CHANGED_FILES: Final[int] = 10
LARGE_RUN_FILE_COUNT: Final[int] = 1000
