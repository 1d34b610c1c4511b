"""
Rich TUI Interface Module

Provides terminal output for the game code agent command line.
Uses the Rich library for formatted, colorful output.
"""

from gamecode_agent.tui.console import (
    ReportConsole,
    TUIConfig,
    get_console,
)
from gamecode_agent.tui.report import (
    print_error,
    print_feedback,
    print_result,
    print_sessions,
)

__all__ = [
    "ReportConsole",
    "TUIConfig",
    "get_console",
    "print_error",
    "print_feedback",
    "print_result",
    "print_sessions",
]
