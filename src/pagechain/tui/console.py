"""
Rich Console Output

Terminal output for the pagechain runner. Configured via environment
variables for customizable appearance.
"""

import os
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

from rich.console import Console
from rich.panel import Panel
from rich.style import Style
from rich.text import Text
from rich.theme import Theme


BlockType = Literal["info", "error"]


@dataclass
class TUIConfig:
    """
    TUI configuration loaded from environment variables.

    Attributes:
        color_info: Color for INFO blocks (runner status)
        color_error: Color for ERROR blocks (failures)
        show_timestamps: Whether to display timestamps
    """

    color_info: str = "cyan"
    color_error: str = "red"
    show_timestamps: bool = True

    @classmethod
    def from_env(cls) -> "TUIConfig":
        """Load configuration from environment variables."""
        return cls(
            color_info=os.getenv("COLOR_INFO", "cyan"),
            color_error=os.getenv("COLOR_ERROR", "red"),
            show_timestamps=os.getenv("SHOW_TIMESTAMPS", "true").lower() == "true",
        )


def create_theme(config: TUIConfig) -> Theme:
    """Create a Rich theme from TUI configuration."""
    return Theme(
        {
            "info": Style(color=config.color_info, bold=True),
            "info.text": Style(color=config.color_info),
            "error": Style(color=config.color_error, bold=True),
            "error.text": Style(color=config.color_error),
            "timestamp": Style(dim=True),
        }
    )


class RunnerConsole:
    """
    Rich console wrapper for runner output.

    Prints status and errors as titled panels with optional timestamps.
    """

    def __init__(self, config: Optional[TUIConfig] = None, console: Optional[Console] = None):
        """
        Args:
            config: TUI configuration. If None, loads from environment.
            console: Rich console to print to (default: stdout)
        """
        self.config = config or TUIConfig.from_env()
        self._theme = create_theme(self.config)
        self.console = console or Console(theme=self._theme)

    def _get_timestamp(self) -> str:
        if self.config.show_timestamps:
            return datetime.now().strftime("%H:%M:%S")
        return ""

    def print_block(self, content: str | Text, block_type: BlockType, title: Optional[str] = None) -> None:
        """
        Print a styled block to the console.

        Args:
            content: Text to display
            block_type: "info" or "error"
            title: Optional title to override the default label
        """
        color = self.config.color_info if block_type == "info" else self.config.color_error
        block_title = title or f"[{block_type.upper()}]"

        timestamp = self._get_timestamp()
        if timestamp:
            block_title = f"{timestamp} {block_title}"

        self.console.print(
            Panel(
                content,
                title=block_title,
                title_align="left",
                border_style=color,
                padding=(0, 1),
            )
        )

    def print_info(self, content: str, title: Optional[str] = None) -> None:
        self.print_block(content, "info", title)

    def print_error(self, message: str, error_type: Optional[str] = None) -> None:
        content = Text()
        content.append("Error", style="bold red")
        if error_type:
            content.append(f" ({error_type})", style="dim red")
        content.append("\n\n")
        content.append(message)
        self.print_block(content, "error")

    def print_summary(self, success: bool, exit_code: int) -> None:
        """Print the final outcome of a test run."""
        text = Text()
        if success:
            text.append("Tests passed", style="bold green")
        else:
            text.append("Tests failed", style="bold red")
            text.append(f" (pytest exit code {exit_code})", style="dim")
        self.print_block(text, "info" if success else "error", title="[SUMMARY]")


# Global console instance
_console: Optional[RunnerConsole] = None


def get_console() -> RunnerConsole:
    """Get or create the global console instance."""
    global _console
    if _console is None:
        _console = RunnerConsole()
    return _console
