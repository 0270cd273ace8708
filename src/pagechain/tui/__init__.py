"""
Rich TUI Module

Terminal output for the pagechain runner, built on the Rich library.
"""

from pagechain.tui.console import (
    BlockType,
    RunnerConsole,
    TUIConfig,
    get_console,
)

__all__ = [
    "BlockType",
    "RunnerConsole",
    "TUIConfig",
    "get_console",
]
