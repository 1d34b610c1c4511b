"""
Rich TUI Console Setup

Provides the console used by the command line. Configured via environment
variables for customizable appearance.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.style import Style
from rich.theme import Theme

from ..models import MessageKind


@dataclass
class TUIConfig:
    """
    TUI configuration loaded from environment variables.

    Attributes:
        color_success: Color for success feedback and results
        color_error: Color for error feedback and failures
        color_warning: Color for warning feedback
        color_info: Color for info feedback
        show_timestamps: Whether to display timestamps
    """

    color_success: str = "green"
    color_error: str = "red"
    color_warning: str = "yellow"
    color_info: str = "blue"
    show_timestamps: bool = True

    @classmethod
    def from_env(cls) -> "TUIConfig":
        """Load configuration from environment variables."""
        return cls(
            color_success=os.getenv("COLOR_SUCCESS", "green"),
            color_error=os.getenv("COLOR_ERROR", "red"),
            color_warning=os.getenv("COLOR_WARNING", "yellow"),
            color_info=os.getenv("COLOR_INFO", "blue"),
            show_timestamps=os.getenv("SHOW_TIMESTAMPS", "true").lower() == "true",
        )

    def color_for(self, kind: MessageKind) -> str:
        return {
            MessageKind.SUCCESS: self.color_success,
            MessageKind.ERROR: self.color_error,
            MessageKind.WARNING: self.color_warning,
            MessageKind.INFO: self.color_info,
        }[kind]


def create_theme(config: TUIConfig) -> Theme:
    """Create a Rich theme from TUI configuration."""
    return Theme(
        {
            "success": Style(color=config.color_success, bold=True),
            "error": Style(color=config.color_error, bold=True),
            "warning": Style(color=config.color_warning, bold=True),
            "info": Style(color=config.color_info, bold=True),
            "timestamp": Style(dim=True),
            "label": Style(bold=True),
        }
    )


class ReportConsole:
    """
    Rich console wrapper for command line reports.

    Prints titled panels with consistent styling and optional timestamps.
    """

    def __init__(self, config: Optional[TUIConfig] = None, console: Optional[Console] = None):
        """
        Initialize the report console.

        Args:
            config: TUI configuration. If None, loads from environment.
            console: Underlying Rich console (one is created if None)
        """
        self.config = config or TUIConfig.from_env()
        self._theme = create_theme(self.config)
        self.console = console or Console(theme=self._theme)

    def _get_timestamp(self) -> str:
        """Get formatted timestamp if enabled."""
        if self.config.show_timestamps:
            return datetime.now().strftime("%H:%M:%S")
        return ""

    def title(self, label: str) -> str:
        timestamp = self._get_timestamp()
        return f"{timestamp} {label}" if timestamp else label

    def print_panel(self, content, label: str, border_style: str) -> None:
        panel = Panel(
            content,
            title=self.title(label),
            title_align="left",
            border_style=border_style,
            padding=(0, 1),
        )
        self.console.print(panel)

    def print(self, *args, **kwargs) -> None:
        """Passthrough to underlying Rich console."""
        self.console.print(*args, **kwargs)


# Global console instance
_console: Optional[ReportConsole] = None


def get_console() -> ReportConsole:
    """Get or create the global console instance."""
    global _console
    if _console is None:
        _console = ReportConsole()
    return _console
