"""
Chain Engine

Scheduling core behind the Chain builder:
- Commands and their shared execution context
- Deferred single-flight scheduler with a settle-once completion
- Frame stack for nested iframe contexts
- Repeat blocks
- Console-error capture and page loading
"""

from .commands import (
    Command,
    EnterFrame,
    Evaluate,
    ExecutionContext,
    ExitFrames,
    Invoke,
    RepeatEnd,
    RepeatStart,
    ReportConsoleErrors,
    SetHtml,
    Wait,
    run_command,
)
from .completion import Completion
from .console_errors import install_console_capture, report_console_errors
from .errors import (
    ChainError,
    ChainInternalError,
    ChainStructureError,
    ConsoleErrorsReported,
    FrameError,
    FrameNotFoundError,
    NavigationError,
)
from .frames import FrameStack
from .models import TOP_FRAME_ID, BrowserElement, ConsoleErrorReport, FrameEntry
from .navigation import bootstrap_page, goto_with_retry
from .repeat import RepeatController, RepeatSession
from .scheduler import ChainScheduler

__all__ = [
    # Commands
    "Command",
    "EnterFrame",
    "Evaluate",
    "ExecutionContext",
    "ExitFrames",
    "Invoke",
    "RepeatEnd",
    "RepeatStart",
    "ReportConsoleErrors",
    "SetHtml",
    "Wait",
    "run_command",
    # Scheduling
    "ChainScheduler",
    "Completion",
    "RepeatController",
    "RepeatSession",
    # Frames
    "FrameStack",
    "FrameEntry",
    "TOP_FRAME_ID",
    # Console errors and loading
    "install_console_capture",
    "report_console_errors",
    "bootstrap_page",
    "goto_with_retry",
    # Models
    "BrowserElement",
    "ConsoleErrorReport",
    # Errors
    "ChainError",
    "ChainInternalError",
    "ChainStructureError",
    "ConsoleErrorsReported",
    "FrameError",
    "FrameNotFoundError",
    "NavigationError",
]
