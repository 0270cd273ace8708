"""
Chain Commands

Commands are immutable records describing one unit of chain work. The
scheduler pops them off its queue and hands them to run_command() together
with the chain's shared ExecutionContext.

Repeat-control commands (RepeatStart, RepeatEnd) are interpreted by the
scheduler itself, since they rearrange its queues.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from ..config import ChainConfig
from .console_errors import report_console_errors
from .errors import ChainInternalError
from .frames import FrameStack

logger = logging.getLogger(__name__)


# Calls the user's function source with the positional args spread out.
EVALUATE_WRAPPER = "(args) => ({script})(...args)"

WAIT_SCRIPT = """(wait) => new Promise((resolve) => {
    setTimeout(() => resolve(true), wait);
})"""

SET_HTML_SCRIPT = "(el, html) => { el.innerHTML = html; }"


@dataclass
class ExecutionContext:
    """
    State shared by every command of one chain.

    Attributes:
        page: Playwright Page the chain drives
        frames: Frame stack; its top is where commands evaluate
        config: Settings read at chain construction
        last_eval: Result of the most recent eval() command
    """

    page: Any
    frames: FrameStack
    config: ChainConfig = field(default_factory=ChainConfig)
    last_eval: Any = None

    @property
    def current_frame(self) -> Any:
        return self.frames.current.frame


@dataclass(frozen=True)
class Evaluate:
    script: str
    args: tuple = ()


@dataclass(frozen=True)
class Wait:
    milliseconds: float


@dataclass(frozen=True)
class Invoke:
    callback: Callable[[ExecutionContext], Optional[Awaitable[None]]]
    label: str = "callback"


@dataclass(frozen=True)
class SetHtml:
    markup: str


@dataclass(frozen=True)
class EnterFrame:
    frame_id: str


@dataclass(frozen=True)
class ExitFrames:
    levels: int = 1


@dataclass(frozen=True)
class ReportConsoleErrors:
    throw_on_error: bool = False


@dataclass
class RepeatBlock:
    """Commands recorded between repeat_begin() and repeat_end()."""

    count: int
    commands: list = field(default_factory=list)


@dataclass(frozen=True)
class RepeatStart:
    block: RepeatBlock


@dataclass(frozen=True)
class RepeatEnd:
    stats: Optional[Callable[[float], None]] = None


Command = Union[
    Evaluate,
    Wait,
    Invoke,
    SetHtml,
    EnterFrame,
    ExitFrames,
    ReportConsoleErrors,
    RepeatStart,
    RepeatEnd,
]


def describe(command: Command) -> str:
    """Short human-readable description for logs."""
    match command:
        case Evaluate():
            return "eval"
        case Wait(milliseconds=ms):
            return f"wait({ms})"
        case Invoke(label=label):
            return label
        case SetHtml():
            return "html"
        case EnterFrame(frame_id=frame_id):
            return f"frame({frame_id!r})"
        case ExitFrames(levels=levels):
            return f"unframe({levels})"
        case ReportConsoleErrors(throw_on_error=throw):
            return f"report_console_errors(throw={throw})"
        case RepeatStart(block=block):
            return f"repeat_begin({block.count})"
        case RepeatEnd():
            return "repeat_end"
    return type(command).__name__


async def run_command(command: Command, context: ExecutionContext) -> None:
    """
    Execute one command against the context's current frame.

    Args:
        command: Command to execute
        context: Shared chain state

    Raises:
        Whatever the command raises; the scheduler turns it into a chain
        failure.
    """
    match command:
        case Evaluate(script=script, args=args):
            context.last_eval = await context.current_frame.evaluate(
                EVALUATE_WRAPPER.format(script=script), list(args)
            )

        case Wait(milliseconds=ms):
            await context.current_frame.evaluate(WAIT_SCRIPT, ms)

        case Invoke(callback=callback):
            result = callback(context)
            if inspect.isawaitable(result):
                await result

        case SetHtml(markup=markup):
            body = await context.current_frame.query_selector("body")
            if body is not None:
                await body.evaluate(SET_HTML_SCRIPT, markup)
            await asyncio.sleep(context.config.html_settle_ms / 1000)

        case EnterFrame(frame_id=frame_id):
            await context.frames.enter(frame_id)

        case ExitFrames(levels=levels):
            context.frames.exit(levels)

        case ReportConsoleErrors(throw_on_error=throw_on_error):
            await report_console_errors(
                context.current_frame,
                throw_on_error=throw_on_error,
                frame_id=context.frames.current.frame_id,
            )

        case RepeatStart() | RepeatEnd():
            raise ChainInternalError(f"{describe(command)} reached run_command(); repeat control belongs to the scheduler")

        case _:
            raise TypeError(f"Unknown chain command: {command!r}")
