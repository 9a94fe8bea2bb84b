"""
General utility functions for the CLI application.
"""

from rich.console import Console

console: Console = Console()
err_console: Console = Console(stderr=True)


def format_number(value: int) -> str:
    """
    Format an integer with thousands separators.

    Args:
        value: The number to format.

    Returns:
        str: e.g. "1,234,567".
    """
    return f"{value:,}"


def format_delta(value: int) -> str:
    """
    Format a signed delta as Rich markup.

    Positive values are green with a leading "+", negative values red and zero
    is dimmed. Separators are applied like in `format_number`.

    Args:
        value: The delta to format.

    Returns:
        str: Markup such as "[green]+1,200[/green]".
    """
    if value > 0:
        return f"[green]+{value:,}[/green]"
    if value < 0:
        return f"[red]{value:,}[/red]"
    return "[dim]0[/dim]"
