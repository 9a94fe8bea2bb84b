"""
Shared fixtures for core module tests.

This module provides reusable pytest fixtures for testing core functionality,
including mock factories, test data builders, and common test objects.
"""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from core.file_io import MockFileReader
from core.language import LanguageDetector
from core.models import FileStats, Language
from core.report import Report
from ui.progress_display import NoOpProgressDisplay

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def detector():
    """Detector with the built-in languages."""
    return LanguageDetector()


@pytest.fixture
def c_like():
    """C-style grammar without nesting."""
    return Language(
        name="C",
        extensions=frozenset({"c"}),
        single_line_markers=("//",),
        multi_line_markers=(("/*", "*/"),),
        preprocessor_prefix="#",
    )


@pytest.fixture
def rust_like():
    """C-style grammar with nested block comments."""
    return Language(
        name="Rust",
        extensions=frozenset({"rs"}),
        single_line_markers=("//",),
        multi_line_markers=(("/*", "*/"),),
        nested=True,
    )


@pytest.fixture
def python_like():
    """Grammar with two same-marker block pairs."""
    return Language(
        name="Python",
        extensions=frozenset({"py"}),
        single_line_markers=("#",),
        multi_line_markers=(('"""', '"""'), ("'''", "'''")),
    )


@pytest.fixture
def progress_display():
    """Progress display for testing."""
    return NoOpProgressDisplay()


@pytest.fixture
def tracking_progress_display():
    """Progress display that tracks calls for testing."""
    mock = MagicMock()
    mock.calls = []

    # Track calls as (method_name, *args)
    def make_tracker(method_name):
        def tracker(*args, **kwargs):
            if method_name == "update":
                mock.calls.append(
                    (method_name, kwargs.get("advance"), kwargs.get("description"))
                )
            else:
                mock.calls.append((method_name, *args))

        return tracker

    mock.on_start = make_tracker("start")
    mock.on_update = make_tracker("update")
    mock.on_complete = make_tracker("complete")
    mock.__enter__ = MagicMock(return_value=mock)
    mock.__exit__ = MagicMock(return_value=None)

    return mock


@pytest.fixture
def mock_file_reader_factory():
    """Factory for creating MockFileReader instances with file content mappings."""

    def _factory(file_contents: dict[str, str]):
        """
        Create a MockFileReader configured with file content mappings.

        Args:
            file_contents: Dictionary mapping file names to their content.
                Keys are file names (e.g., "main.rs"), values are file content strings.

        Returns:
            MockFileReader instance configured to return content based on file name.
        """

        def read_file_side_effect(path: Path) -> str:
            return file_contents.get(path.name, "")

        return MockFileReader(read_file_fn=read_file_side_effect)

    return _factory


@pytest.fixture
def file_stats_factory():
    """Factory for FileStats whose counters add up."""

    def _factory(path="src/main.rs", language="Rust", logical=10, comment=3, empty=2):
        return FileStats(
            path=path,
            language=language,
            total_lines=logical + comment + empty,
            logical_lines=logical,
            comment_lines=comment,
            empty_lines=empty,
        )

    return _factory


@pytest.fixture
def sample_report(file_stats_factory):
    """Three files in two languages plus one unsupported file."""
    files = [
        file_stats_factory("src/main.rs", "Rust", 10, 3, 2),
        file_stats_factory("src/lib.rs", "Rust", 20, 5, 4),
        file_stats_factory("app/run.py", "Python", 7, 1, 1),
    ]
    return Report.from_files(files, ["README"], generated_at=FIXED_TIME)
