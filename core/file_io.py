import os
from pathlib import Path
from typing import Callable, Protocol

from core.exceptions import FileReadError, FileWriteError, InvalidFilePathError


class FileReader(Protocol):
    """
    Protocol defining the interface for file reading operations.

    This protocol specifies methods for reading files, allowing different
    implementations for production (filesystem) and testing (mocks).
    """

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Invalid UTF-8 sequences are replaced, never rejected.

        Args:
            file_path: The path to the file to read.

        Returns:
            The decoded file content.

        Raises:
            FileReadError: If the file does not exist or cannot be read.
        """


class FileWriter(Protocol):
    """
    Protocol defining the interface for file writing operations.

    This protocol specifies methods for writing data to files, allowing different
    implementations for production (filesystem) and testing (mocks).
    """

    def write_file(self, data: str, mode: str = "w") -> None:
        """
        Write data to a file.

        Args:
            data: String data to write.
            mode: File mode ("w" for write/truncate, "a" for append). Defaults to "w".
        """


class FilesystemFileReader:

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        The file is read as bytes and decoded with errors="replace", so invalid
        UTF-8 sequences become U+FFFD instead of failing the read. A leading
        byte-order mark is dropped. Line terminators are left untouched.

        Args:
            file_path: The path to the file to read.

        Returns:
            The decoded file content.

        Raises:
            FileReadError: If the path is not a readable file.
        """
        try:
            return file_path.read_bytes().decode("utf-8-sig", errors="replace")
        except OSError as e:
            raise FileReadError(
                message=f"Failed to read file: {file_path}",
                file_path=str(file_path),
                original_exception=e,
            ) from e


class FilesystemFileWriter:
    def __init__(self, file_path: Path | None = None):
        self.file_path = file_path

    @classmethod
    def from_path(cls, file_path: Path) -> "FilesystemFileWriter":
        """
        Create a writer instance with an explicit file path.

        Args:
            file_path: The path to the file to manage.

        Returns:
            FilesystemFileWriter instance configured for the given path.

        Raises:
            InvalidFilePathError: If file_path is invalid (e.g., parent directory
                doesn't exist or is not writable).
        """
        parent = file_path.parent
        if not parent.exists():
            raise InvalidFilePathError(
                message=f"Parent directory does not exist: {parent}",
                file_path=str(file_path),
            )
        if not os.access(parent, os.W_OK):
            raise InvalidFilePathError(
                message=f"Parent directory is not writable: {parent}",
                file_path=str(file_path),
            )

        return cls(file_path)

    def write_file(self, data: str, mode: str = "w") -> None:
        """
        Writes data to the output file.

        Args:
            data: String data to write
            mode: File mode ("w" for write/truncate, "a" for append)

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing to the file fails.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        try:
            # newline="" keeps the CSV writer's own line terminators intact
            with open(self.file_path, mode, encoding="utf-8", newline="") as f:
                f.write(data)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e


class MockFileReader:
    """
    Mock implementation of FileReader for testing.

    Returns configurable file contents, allowing tests to control file reading
    behavior without requiring filesystem operations or actual file I/O.
    """

    def __init__(
        self,
        return_value: str | None = None,
        read_file_fn: Callable[[Path], str] | None = None,
    ):
        """
        Initialize MockFileReader with configurable reading behavior.

        Args:
            return_value: If provided, always returns this value regardless of input.
                Takes precedence over read_file_fn if both are provided.
            read_file_fn: Optional callable that takes a file path and returns file content.
                If return_value is None, this will be used. If both are None,
                defaults to returning empty string. It may raise FileReadError to
                simulate unreadable files.

        Attributes (for test inspection):
            read_file_calls: List of file paths passed to read_file()
        """
        self.return_value = return_value
        self.read_file_fn = read_file_fn

        # Track calls for test inspection
        self.read_file_calls: list[Path] = []

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file (returns configured value, tracks call).

        Args:
            file_path: The path to the file to read.

        Returns:
            The configured return value or result of read_file_fn, or empty string by default.
        """
        self.read_file_calls.append(file_path)
        if self.return_value is not None:
            return self.return_value
        if self.read_file_fn is not None:
            return self.read_file_fn(file_path)
        return ""  # Default: return empty string


class MockFileWriter:
    """
    Mock implementation of FileWriter for testing.

    Tracks all method calls and optionally stores written data, allowing tests
    to verify writer interactions and inspect written content without filesystem operations.
    """

    def __init__(self, store_written_data: bool = False):
        """
        Initialize MockFileWriter with configurable behavior.

        Args:
            store_written_data: If True, stores all written data in attributes for inspection.
                Defaults to False for minimal memory usage.

        Attributes (for test inspection):
            write_file_calls: List of tuples (data, mode) passed to write_file()
            written_data: If store_written_data=True, accumulates all written string data
        """
        self.store_written_data = store_written_data

        self.write_file_calls: list[tuple[str, str]] = []
        self.written_data: str = ""

    def write_file(self, data: str, mode: str = "w") -> None:
        """
        Write data to a file (tracks call, optionally stores data).

        Args:
            data: String data to write.
            mode: File mode ("w" for write/truncate, "a" for append). Defaults to "w".
        """
        self.write_file_calls.append((data, mode))
        if self.store_written_data:
            if mode == "w":
                self.written_data = data
            else:  # mode == "a"
                self.written_data += data
