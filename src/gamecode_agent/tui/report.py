"""
RESULT block display for command outcomes.

Renders service responses, feedback messages and stored sessions.
"""

from typing import Any, Optional

from rich.table import Table
from rich.text import Text

from ..models import MessageKind
from .console import ReportConsole, get_console


def print_result(
    content: str,
    *,
    success: bool = True,
    title: Optional[str] = None,
    console: Optional[ReportConsole] = None,
) -> None:
    """
    Print a RESULT block.

    Args:
        content: The result content to display
        success: Whether the command succeeded
        title: Custom title (overrides default "[RESULT]")
        console: Console to use (defaults to global console)
    """
    console = console or get_console()

    text = Text()
    status_icon = "✓" if success else "✗"
    status_style = console.config.color_success if success else console.config.color_error
    text.append(f"{status_icon} ", style=f"bold {status_style}")
    text.append(content)

    console.print_panel(text, title or "[RESULT]", status_style)


def print_error(
    error_message: str,
    *,
    error_type: Optional[str] = None,
    suggestion: Optional[str] = None,
    console: Optional[ReportConsole] = None,
) -> None:
    """
    Print an error block.

    Args:
        error_message: The error message
        error_type: Type/category of error
        suggestion: Suggestion for resolution
        console: Console to use (defaults to global console)
    """
    console = console or get_console()

    content = Text()
    content.append("Error", style="bold red")
    if error_type:
        content.append(f" ({error_type})", style="dim red")
    content.append("\n\n")
    content.append(error_message)

    if suggestion:
        content.append("\n\n")
        content.append(suggestion, style="italic")

    console.print_panel(content, "[ERROR]", console.config.color_error)


def print_feedback(
    messages: list[dict[str, Any]],
    *,
    success: bool,
    console: Optional[ReportConsole] = None,
) -> None:
    """
    Print the feedback messages of a submission, in page order.

    Args:
        messages: ``{"text", "type"}`` dicts as returned by the service
        success: Overall submission verdict
        console: Console to use (defaults to global console)
    """
    console = console or get_console()

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Kind", style="dim")
    table.add_column("Message")

    for message in messages:
        kind = MessageKind(message.get("type", MessageKind.INFO.value))
        table.add_row(Text(kind.value, style=console.config.color_for(kind)), message.get("text", ""))

    if not messages:
        table.add_row("-", Text("No feedback on the page", style="dim"))

    border = console.config.color_success if success else console.config.color_error
    console.print_panel(table, "[FEEDBACK]", border)


def print_sessions(
    rows: list[tuple[str, Optional[int]]],
    *,
    console: Optional[ReportConsole] = None,
) -> None:
    """
    Print stored sessions.

    Args:
        rows: (session id, age in ms) pairs
        console: Console to use (defaults to global console)
    """
    console = console or get_console()

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Session", style="bold")
    table.add_column("Age")

    for session_id, age_ms in rows:
        if age_ms is None:
            age = "-"
        else:
            minutes = age_ms // 60000
            age = f"{minutes // 60}h {minutes % 60:02d}m"
        table.add_row(session_id, age)

    if not rows:
        table.add_row(Text("No active sessions", style="dim"), "")

    console.print_panel(table, "[SESSIONS]", console.config.color_info)
