"""
Progress reporting seam between the counting pipeline and the terminal.

`count_files` only talks to a ProgressDisplay. The CLI passes a
RichProgressDisplay, or NoOpProgressDisplay when `--no-progress` is set; tests
pass NoOpProgressDisplay or a tracking mock.

Calls arrive from the thread that drains the worker pool, never from the
workers themselves.
"""

from types import TracebackType
from typing import Protocol

from rich.console import Console
from rich.progress import Progress, TaskID

from ui.progress import (
    ProgressState,
    create_progress,
    create_task,
    update_progress,
)


class ProgressDisplay(Protocol):
    """
    Progress reporting interface.

    Lifecycle: `__enter__`, `on_start` once, `on_update` per counted file,
    `on_complete` once, `__exit__`.
    """

    def __enter__(self) -> "ProgressDisplay":
        """Enter the progress context."""

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the progress context."""

    def on_start(self, description: str, total: int | None) -> None:
        """
        Begin a task.

        Args:
            description: Text shown next to the bar.
            total: Number of files to count; None for an indeterminate bar.
        """

    def on_update(
        self, *, advance: int | None = None, description: str | None = None
    ) -> None:
        """
        Advance the counter, replace the description, or both.

        At least one of `advance` or `description` must be given.
        """

    def on_complete(
        self,
        description: str,
        completed: int,
        total: int | None = None,
        state: ProgressState = ProgressState.COMPLETE,
    ) -> None:
        """
        Finish the task.

        Args:
            description: Final text to display.
            completed: Number of files handled.
            total: Replaces the task total when given.
            state: Colour of the final description; WARNING when some files
                could not be counted.
        """


class RichProgressDisplay:
    """
    ProgressDisplay drawn with a Rich progress bar on stderr.

    Must be used as a context manager; the Progress is created on entry.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def __enter__(self) -> "RichProgressDisplay":
        self._progress = create_progress(self._console)
        self._progress.__enter__()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._progress:
            self._progress.__exit__(exc_type, exc_val, exc_tb)

    def _require_progress(self) -> Progress:
        if not self._progress:
            raise RuntimeError(
                "RichProgressDisplay must be used as a context manager. "
                "Use: with RichProgressDisplay() as rpd:"
            )
        return self._progress

    def on_start(self, description: str, total: int | None) -> None:
        """
        Add the counting task to the bar.

        Raises:
            RuntimeError: If used outside a `with` block.
        """
        self._task = create_task(self._require_progress(), description, total=total)

    def on_update(
        self, *, advance: int | None = None, description: str | None = None
    ) -> None:
        """
        Advance the counter and/or replace the description.

        A new description is shown in the IN_PROGRESS colour.

        Raises:
            RuntimeError: If used outside a `with` block or before on_start().
            ValueError: If neither advance nor description is given.
        """
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_update()")

        if not (advance or description):
            raise ValueError(
                "At least one of 'advance' or 'description' must be provided to on_update()"
            )

        if description:
            update_progress(
                progress,
                self._task,
                ProgressState.IN_PROGRESS,
                advance=advance,
                description=description,
            )
        else:
            update_progress(progress, self._task, advance=advance)

    def on_complete(
        self,
        description: str,
        completed: int,
        total: int | None = None,
        state: ProgressState = ProgressState.COMPLETE,
    ) -> None:
        """
        Show the final count and description in the colour of `state`.

        Raises:
            RuntimeError: If used outside a `with` block or before on_start().
        """
        progress = self._require_progress()
        if self._task is None:
            raise RuntimeError("on_start() must be called before on_complete()")

        update_progress(
            progress,
            self._task,
            state,
            completed=completed,
            total=total,
            description=description,
        )


class NoOpProgressDisplay:
    """ProgressDisplay that draws nothing; used for `--no-progress` and tests."""

    def __enter__(self) -> "NoOpProgressDisplay":
        return self

    def __exit__(self, *args) -> None:
        pass

    def on_start(self, description: str, total: int | None) -> None:
        pass

    def on_update(
        self, *, advance: int | None = None, description: str | None = None
    ) -> None:
        pass

    def on_complete(
        self,
        description: str,
        completed: int,
        total: int | None = None,
        state: ProgressState = ProgressState.COMPLETE,
    ) -> None:
        pass
