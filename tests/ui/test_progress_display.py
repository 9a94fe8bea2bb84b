"""
Tests for the progress_display module.

Tests cover:
- RichProgressDisplay: context manager, on_start, on_update, on_complete, error cases
- NoOpProgressDisplay: no-op lifecycle

Note: RichProgressDisplay tests mock create_progress to avoid drawing.
"""

from unittest.mock import MagicMock

import pytest

from ui.progress import ProgressState
from ui.progress_display import NoOpProgressDisplay, RichProgressDisplay


@pytest.fixture
def mock_progress(mocker):
    progress = MagicMock()
    mocker.patch("ui.progress_display.create_progress", return_value=progress)
    return progress


@pytest.fixture
def started_display(mock_progress, mocker):
    """A RichProgressDisplay inside its context with a started task."""
    mocker.patch("ui.progress_display.create_task", return_value=7)
    display = RichProgressDisplay()
    display.__enter__()
    display.on_start("Counting 3 files...", total=3)
    return display


# ============================================================================
# Tests for the context manager
# ============================================================================


@pytest.mark.unit
@pytest.mark.mock
def test_enter_creates_and_enters_progress(mock_progress, mocker):
    """__enter__ should create the Progress with the given console."""
    console = MagicMock()
    create = mocker.patch("ui.progress_display.create_progress", return_value=mock_progress)

    display = RichProgressDisplay(console=console)
    with display as rpd:
        assert rpd is display
        assert display._progress is mock_progress

    create.assert_called_once_with(console)
    mock_progress.__enter__.assert_called_once()
    mock_progress.__exit__.assert_called_once_with(None, None, None)


@pytest.mark.unit
@pytest.mark.mock
def test_exit_forwards_exception(mock_progress):
    """__exit__ should pass exception details to the Progress."""
    display = RichProgressDisplay()
    error = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        with display:
            raise error

    exc_type, exc_val, _ = mock_progress.__exit__.call_args.args
    assert exc_type is RuntimeError
    assert exc_val is error


@pytest.mark.unit
def test_exit_without_enter():
    """__exit__ should be harmless before __enter__."""
    RichProgressDisplay().__exit__(None, None, None)


# ============================================================================
# Tests for on_start / on_update / on_complete
# ============================================================================


@pytest.mark.unit
@pytest.mark.mock
def test_on_start_creates_task(mock_progress, mocker):
    """on_start should add a task with the total."""
    create_task = mocker.patch("ui.progress_display.create_task", return_value=7)

    with RichProgressDisplay() as display:
        display.on_start("Counting 3 files...", total=3)

    create_task.assert_called_once_with(mock_progress, "Counting 3 files...", total=3)
    assert display._task == 7


@pytest.mark.unit
@pytest.mark.parametrize(
    "call",
    [
        lambda d: d.on_start("x", total=1),
        lambda d: d.on_update(advance=1),
        lambda d: d.on_complete("done", completed=1),
    ],
)
def test_calls_outside_context_raise(call):
    """Every callback should require the context manager."""
    with pytest.raises(RuntimeError, match="context manager"):
        call(RichProgressDisplay())


@pytest.mark.unit
@pytest.mark.mock
@pytest.mark.parametrize(
    "call",
    [
        lambda d: d.on_update(advance=1),
        lambda d: d.on_complete("done", completed=1),
    ],
)
def test_calls_before_on_start_raise(mock_progress, call):
    """Updating before on_start should raise."""
    with RichProgressDisplay() as display:
        with pytest.raises(RuntimeError, match="on_start"):
            call(display)


@pytest.mark.unit
@pytest.mark.mock
def test_on_update_advance_only(started_display, mocker):
    """An advance alone should keep the description."""
    update = mocker.patch("ui.progress_display.update_progress")

    started_display.on_update(advance=1)

    update.assert_called_once_with(started_display._progress, 7, advance=1)


@pytest.mark.unit
@pytest.mark.mock
def test_on_update_with_description(started_display, mocker):
    """A description should be shown in the IN_PROGRESS colour."""
    update = mocker.patch("ui.progress_display.update_progress")

    started_display.on_update(advance=2, description="Counting main.rs")

    update.assert_called_once_with(
        started_display._progress,
        7,
        ProgressState.IN_PROGRESS,
        advance=2,
        description="Counting main.rs",
    )


@pytest.mark.unit
@pytest.mark.mock
def test_on_update_without_arguments_raises(started_display):
    """on_update needs an advance or a description."""
    with pytest.raises(ValueError):
        started_display.on_update()


@pytest.mark.unit
@pytest.mark.mock
@pytest.mark.parametrize("state", [ProgressState.COMPLETE, ProgressState.WARNING])
def test_on_complete_uses_state(started_display, mocker, state):
    """on_complete should colour the final description by state."""
    update = mocker.patch("ui.progress_display.update_progress")

    started_display.on_complete("Counted 3 files.", completed=3, state=state)

    update.assert_called_once_with(
        started_display._progress,
        7,
        state,
        completed=3,
        total=None,
        description="Counted 3 files.",
    )


# ============================================================================
# Tests for NoOpProgressDisplay
# ============================================================================


@pytest.mark.unit
def test_noop_progress_display_full_lifecycle():
    """NoOpProgressDisplay should accept the whole lifecycle silently."""
    display = NoOpProgressDisplay()

    with display as d:
        assert d is display
        d.on_start("Counting", total=2)
        d.on_update(advance=1)
        d.on_update(description="still counting")
        d.on_complete("done", completed=2, state=ProgressState.WARNING)
