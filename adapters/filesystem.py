"""
Filesystem adapter for input path discovery.

Turns the raw PATHS arguments (files, directories, glob patterns) and,
optionally, newline-separated paths on stdin into the list of files to count.
The result is sorted and free of duplicates so repeated runs over the same
tree count files in the same order.
"""

import glob
import os
from pathlib import Path
import sys
from typing import Iterable, TextIO

import structlog

from core.exceptions import PathNotFoundError
from utils import err_console

log = structlog.get_logger("slocount.filesystem")

_GLOB_CHARS = ("*", "?", "[")


def _warn(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {message}", highlight=False)


class PathCollector:
    """
    Collects the files named on the command line.

    Attributes:
        recursive: Descend into directories instead of skipping them.
        read_stdin: Also read one path per line from `stdin`.
        stdin: Stream read when `read_stdin` is set; defaults to sys.stdin.
    """

    def __init__(
        self,
        recursive: bool = False,
        read_stdin: bool = False,
        stdin: TextIO | None = None,
    ):
        self.recursive = recursive
        self.read_stdin = read_stdin
        self.stdin = stdin

    def collect(self, path_args: Iterable[str]) -> list[Path]:
        """
        Resolve path arguments to a sorted, de-duplicated list of files.

        - Paths read from stdin that do not exist are skipped with a warning.
        - Arguments containing `*`, `?` or `[` are expanded as globs (`**`
          matches across directories); a pattern matching nothing only warns.
        - A directory is walked when `recursive` is set and skipped with a
          warning otherwise. Directory symlinks are followed.

        Args:
            path_args: The PATHS arguments, in command-line order.

        Returns:
            The files to count.

        Raises:
            PathNotFoundError: If a literal (non-glob) argument does not exist.
        """
        paths: list[Path] = []

        if self.read_stdin:
            stream = self.stdin if self.stdin is not None else sys.stdin
            for line in stream:
                entry = line.strip()
                if not entry:
                    continue
                path = Path(entry)
                if path.exists():
                    self._add(path, paths, from_pattern=True)
                else:
                    _warn(f"Path does not exist: {entry}")

        for arg in path_args:
            if any(c in arg for c in _GLOB_CHARS):
                matches = sorted(glob.glob(arg, recursive=True))
                if not matches:
                    _warn(f"No files match pattern: {arg}")
                for match in matches:
                    self._add(Path(match), paths, from_pattern=True)
            else:
                path = Path(arg)
                if not path.exists():
                    raise PathNotFoundError(arg)
                self._add(path, paths, from_pattern=False)

        unique = sorted(set(paths))
        log.debug("filesystem.paths_collected", count=len(unique))
        return unique

    def _add(self, path: Path, paths: list[Path], from_pattern: bool) -> None:
        if path.is_file():
            paths.append(path)
        elif path.is_dir():
            if self.recursive:
                paths.extend(self._walk(path))
            elif not from_pattern:
                _warn(f"{path} is a directory. Use -r for recursive traversal.")

    def _walk(self, root: Path) -> list[Path]:
        def on_error(error: OSError) -> None:
            _warn(f"Error accessing {error.filename}: {error.strerror}")

        files = []
        for dirpath, _dirnames, filenames in os.walk(
            root, onerror=on_error, followlinks=True
        ):
            for name in filenames:
                candidate = Path(dirpath) / name
                if candidate.is_file():
                    files.append(candidate)
        return files
