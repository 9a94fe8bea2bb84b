"""
Custom exception classes for the slocount CLI.

This module defines application-specific exceptions that are raised during
path collection, configuration loading, file reading and report import/export.
These exceptions provide structured error information and diagnostic data
to help with debugging and error reporting.

Language detection failure is deliberately not an exception: files without a
matching grammar are routed to the report's unsupported-files list.
"""

import os
from typing import Optional


class SlocError(Exception):
    """
    Base exception for every error raised by slocount.

    Attributes:
        message: A human-readable error message describing what went wrong.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing diagnostic information including
            exception type, details, and OS name.
    """

    default_message = "An error occurred while counting lines"

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        self.original_exception = original_exception
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }


class PathNotFoundError(SlocError):
    """
    Raised when an explicitly requested input path does not exist.

    Paths produced by glob expansion or read from stdin are skipped with a
    warning instead; only paths typed by the user abort the run.
    """

    default_message = "Path not found"

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(message=message or f"File not found: {path}")


class FileIOError(SlocError):
    """
    Base exception for file I/O errors.

    Attributes:
        file_path: The path of the file involved, if known.
    """

    default_message = "A file I/O error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message=message, original_exception=original_exception)
        self.file_path = file_path


class InvalidFilePathError(FileIOError):
    """Raised when a path cannot be used for writing (missing or read-only parent)."""

    default_message = "Invalid file path"


class FileReadError(FileIOError):
    """
    Raised when an existing file cannot be read.

    During a scan this is caught per file and the file is reported as
    unsupported; it never aborts the batch.
    """

    default_message = "Failed to read file"


class FileWriteError(FileIOError):
    """Raised when a report or comparison cannot be written to disk."""

    default_message = "Failed to write file"


class ConfigInvalidError(SlocError):
    """
    Raised when a configuration file or a language definition is malformed.

    Loading is all-or-nothing: when this is raised, no language from the
    offending source has been registered.
    """

    default_message = "Invalid configuration"


class SerializationError(SlocError):
    """Raised when a report or comparison cannot be encoded."""

    default_message = "Failed to serialize report"


class DeserializationError(SlocError):
    """Raised when a stored report does not match the interchange schema."""

    default_message = "Failed to deserialize report"
