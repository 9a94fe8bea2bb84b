"""
Progress bar creation and management using Rich.

Progress is drawn on stderr so that a report printed to stdout can be piped
without progress frames mixed into it. Each task's description is wrapped in
the markup colour of its ProgressState.
"""

from enum import StrEnum
from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class ProgressState(StrEnum):
    """
    Progress bar states, valued by the Rich colour used for the description.

    Attributes:
        IN_PROGRESS: Files are still being counted.
        COMPLETE: Every file was handled.
        WARNING: Finished, but some files could not be counted.
        ERROR: The run was aborted.
    """

    IN_PROGRESS = "magenta"
    COMPLETE = "green"
    WARNING = "yellow"
    ERROR = "red"


def create_progress(console: Console | None = None) -> Progress:
    """
    Create a Progress showing a spinner, the description, a bar, the
    `done/total` file count and the elapsed time.

    Args:
        console: Console to draw on; defaults to a stderr console.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console if console is not None else Console(stderr=True),
        transient=False,
    )


def create_task(progress: Progress, description: str, total: Optional[int]) -> TaskID:
    """Add an IN_PROGRESS task; a None total makes it indeterminate."""
    return progress.add_task(f"[{ProgressState.IN_PROGRESS}]{description}", total=total)


def update_progress(
    progress: Progress,
    task: TaskID,
    progress_state: Optional[ProgressState] = None,
    total: Optional[float] = None,
    completed: Optional[float] = None,
    advance: Optional[float] = None,
    description: Optional[str] = None,
) -> None:
    """
    Update a task's counters and, optionally, its state and description.

    `progress_state` and `description` go together: the description is
    rendered in the state's colour.

    Raises:
        ValueError: If only one of progress_state and description is given.
    """
    if bool(progress_state) != bool(description):
        raise ValueError("progress_state and description must be provided together.")

    # Rich treats description=None as "clear", so it is only passed when set
    if description:
        progress.update(
            task,
            total=total,
            completed=completed,
            advance=advance,
            description=f"[{progress_state}]{description}",
        )
    else:
        progress.update(task, total=total, completed=completed, advance=advance)
