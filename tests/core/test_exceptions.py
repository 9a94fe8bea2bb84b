"""
Tests for the exceptions module.

Tests cover:
- SlocError: default message, original exception, diagnostic info
- PathNotFoundError: path attribute and message
- FileIOError and its subclasses: file path, inheritance
- ConfigInvalidError, SerializationError, DeserializationError
"""

import os

import pytest

from core.exceptions import (
    ConfigInvalidError,
    DeserializationError,
    FileIOError,
    FileReadError,
    FileWriteError,
    InvalidFilePathError,
    PathNotFoundError,
    SerializationError,
    SlocError,
)


# ============================================================================
# Tests for SlocError
# ============================================================================


@pytest.mark.unit
def test_sloc_error_default_message():
    """SlocError should have a default message when none provided."""
    error = SlocError()

    assert str(error) == "An error occurred while counting lines"
    assert error.message == "An error occurred while counting lines"
    assert error.original_exception is None


@pytest.mark.unit
def test_sloc_error_diagnostic_info_without_cause():
    """Diagnostic info should be filled in even without a cause."""
    error = SlocError("boom")

    assert error.diagnostic_info == {
        "type": "Unknown",
        "details": "No details",
        "os_name": os.name,
    }


@pytest.mark.unit
def test_sloc_error_diagnostic_info_with_cause():
    """Diagnostic info should describe the original exception."""
    cause = PermissionError("denied")
    error = SlocError("boom", original_exception=cause)

    assert error.original_exception is cause
    assert error.diagnostic_info["type"] == "PermissionError"
    assert error.diagnostic_info["details"] == "denied"


# ============================================================================
# Tests for PathNotFoundError
# ============================================================================


@pytest.mark.unit
def test_path_not_found_error():
    """The message should name the missing path."""
    error = PathNotFoundError("src/missing.rs")

    assert error.path == "src/missing.rs"
    assert error.message == "File not found: src/missing.rs"
    assert isinstance(error, SlocError)


@pytest.mark.unit
def test_path_not_found_error_custom_message():
    """A custom message should replace the default one."""
    assert PathNotFoundError("x", message="gone").message == "gone"


# ============================================================================
# Tests for FileIOError and subclasses
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "cls, default",
    [
        (FileIOError, "A file I/O error occurred"),
        (InvalidFilePathError, "Invalid file path"),
        (FileReadError, "Failed to read file"),
        (FileWriteError, "Failed to write file"),
    ],
)
def test_file_io_errors_defaults(cls, default):
    """Each file error should carry its default message and no path."""
    error = cls()

    assert error.message == default
    assert error.file_path is None
    assert isinstance(error, FileIOError)
    assert isinstance(error, SlocError)


@pytest.mark.unit
def test_file_io_error_with_path_and_cause():
    """file_path and the cause should be kept."""
    cause = OSError("disk full")
    error = FileWriteError("Cannot write", file_path="out.json", original_exception=cause)

    assert error.file_path == "out.json"
    assert error.original_exception is cause
    assert error.diagnostic_info["type"] == "OSError"


# ============================================================================
# Tests for the remaining errors
# ============================================================================


@pytest.mark.unit
@pytest.mark.parametrize(
    "cls, default",
    [
        (ConfigInvalidError, "Invalid configuration"),
        (SerializationError, "Failed to serialize report"),
        (DeserializationError, "Failed to deserialize report"),
    ],
)
def test_other_errors_defaults(cls, default):
    """Configuration and codec errors should be SlocErrors with defaults."""
    error = cls()

    assert error.message == default
    assert isinstance(error, SlocError)
    assert not isinstance(error, FileIOError)
