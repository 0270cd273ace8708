"""
Chain Builder

Fluent API for scripting page interactions in UI tests.

Every method queues work and returns the chain; nothing runs until the
event loop gets a turn. Awaiting the chain waits for every queued command
and raises the first failure.

Usage:
    >>> await (
    ...     Chain(page, "<iframe id='editor' src='editor.html'></iframe>")
    ...     .frame("editor")
    ...     .focus_element("#title")
    ...     .press_tab()
    ...     .active_element(lambda el: assert_focused(el, "#body"))
    ...     .repeat_begin(3)
    ...     .press_down()
    ...     .repeat_end()
    ...     .unframe()
    ... )
"""

import inspect
import logging
from functools import partial
from typing import Any, Callable, Optional

from .config import ChainConfig
from .engine import actions
from .engine.commands import (
    Command,
    EnterFrame,
    Evaluate,
    ExecutionContext,
    ExitFrames,
    Invoke,
    ReportConsoleErrors,
    SetHtml,
    Wait,
)
from .engine.completion import Completion
from .engine.frames import FrameStack
from .engine.models import BrowserElement
from .engine.navigation import bootstrap_page
from .engine.scheduler import ChainScheduler
from .markup import render_markup

logger = logging.getLogger(__name__)


DEBUG_WAIT_MS = 3_600_000


class Chain:
    """
    Awaitable sequence of page interactions.

    Must be created inside a running event loop (e.g., an async test).

    Args:
        page: Playwright Page the chain drives
        markup: Optional HTML to render into <body> first
        config: Chain settings (default: read from environment once, now)
    """

    def __init__(
        self,
        page: Any,
        markup: Any = None,
        config: Optional[ChainConfig] = None,
    ):
        self.page = page
        self.config = config or ChainConfig.from_env()
        self.context = ExecutionContext(
            page=page,
            frames=FrameStack(page),
            config=self.config,
        )
        self._scheduler = ChainScheduler(self.context)

        if markup is not None:
            self.html(markup)

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    @property
    def completion(self) -> Completion:
        return self._scheduler.completion

    @property
    def last_eval(self) -> Any:
        return self.context.last_eval

    def done(self) -> bool:
        return self._scheduler.completion.done()

    def add_done_callback(self, callback: Callable[[Completion], None]) -> "Chain":
        self._scheduler.completion.add_done_callback(callback)
        return self

    def __await__(self):
        return self._scheduler.completion.__await__()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _add(self, command: Command) -> "Chain":
        self._scheduler.schedule(command)
        return self

    def _invoke(self, label: str, callback: Callable[[ExecutionContext], Any]) -> "Chain":
        return self._add(Invoke(callback, label))

    def _report_console_errors(self, throw_on_error: bool = False) -> "Chain":
        return self._add(ReportConsoleErrors(throw_on_error))

    # ------------------------------------------------------------------
    # Content and frames
    # ------------------------------------------------------------------

    def html(self, markup: Any) -> "Chain":
        """Replace the current frame's <body> content."""
        return self._add(SetHtml(render_markup(markup)))

    def load(self, path: str, ready: Optional[str] = None) -> "Chain":
        """
        Navigate the page to a fixture served by the dev server.

        Retries failed loads (see ChainConfig.load_retries). Entered frames
        are dropped since navigation replaces them.

        Args:
            path: Fixture path relative to the tests directory
            ready: Optional JavaScript predicate to wait for after loading
        """

        async def _load(context: ExecutionContext) -> None:
            context.frames.reset()
            await bootstrap_page(context.page, path, context.config, ready)

        return self._invoke(f"load({path!r})", _load)

    def frame(self, *frame_ids: str) -> "Chain":
        """Enter nested iframes by id, outermost first."""
        for frame_id in frame_ids:
            self._add(EnterFrame(frame_id))
        return self

    def unframe(self, levels: int = 1) -> "Chain":
        """Leave `levels` entered iframes."""
        return self._add(ExitFrames(levels))

    # ------------------------------------------------------------------
    # Script and timing
    # ------------------------------------------------------------------

    def wait(self, milliseconds: float) -> "Chain":
        """Wait inside the current frame, using the page's own timers."""
        self._add(Wait(milliseconds))
        return self._report_console_errors(True)

    def debug(self, milliseconds: float = DEBUG_WAIT_MS) -> "Chain":
        """Pause for manual inspection (an hour by default)."""

        def _announce(context: ExecutionContext) -> None:
            logger.warning(
                f"Chain paused for {milliseconds / 1000:.0f}s in frame "
                f"'{context.frames.current.frame_id}' for debugging"
            )

        self._invoke("debug", _announce)
        return self.wait(milliseconds)

    def eval(self, script: str, *args: Any) -> "Chain":
        """
        Evaluate a JavaScript function in the current frame.

        The result becomes the value passed to the next check().

        Args:
            script: JavaScript function source, e.g. "(a, b) => a + b"
            *args: JSON-serializable arguments spread into the call
        """
        self._add(Evaluate(script, tuple(args)))
        return self._report_console_errors(True)

    def check(self, callback: Callable[[Any], Any]) -> "Chain":
        """Call `callback(last_eval)`; raising (e.g. an assert) fails the chain."""

        async def _check(context: ExecutionContext) -> None:
            result = callback(context.last_eval)
            if inspect.isawaitable(result):
                await result

        return self._invoke("check", _check)

    def call(self, callback: Callable[[ExecutionContext], Any]) -> "Chain":
        """Run an arbitrary (sync or async) callback with the execution context."""
        return self._invoke(getattr(callback, "__name__", "call"), callback)

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def press(
        self,
        key: str,
        *,
        delay: Optional[float] = None,
        shift: bool = False,
        ctrl: bool = False,
        alt: bool = False,
        meta: bool = False,
    ) -> "Chain":
        """Press a key, optionally holding modifiers."""
        modifiers = tuple(actions.modifier_keys(shift, ctrl, alt, meta))
        self._invoke(
            f"press({key!r})",
            partial(actions.press_key, key=key, modifiers=modifiers, delay=delay),
        )
        return self._report_console_errors(True)

    def _press_key(
        self,
        key: str,
        shift: bool = False,
        ctrl: bool = False,
        alt: bool = False,
        meta: bool = False,
    ) -> "Chain":
        return self.press(key, shift=shift, ctrl=ctrl, alt=alt, meta=meta)

    def press_tab(self, shift: bool = False, ctrl: bool = False, alt: bool = False, meta: bool = False) -> "Chain":
        return self._press_key("Tab", shift, ctrl, alt, meta)

    def press_esc(self, shift: bool = False, ctrl: bool = False, alt: bool = False, meta: bool = False) -> "Chain":
        return self._press_key("Escape", shift, ctrl, alt, meta)

    def press_enter(self, shift: bool = False, ctrl: bool = False, alt: bool = False, meta: bool = False) -> "Chain":
        return self._press_key("Enter", shift, ctrl, alt, meta)

    def press_up(self, shift: bool = False, ctrl: bool = False, alt: bool = False, meta: bool = False) -> "Chain":
        return self._press_key("ArrowUp", shift, ctrl, alt, meta)

    def press_down(self, shift: bool = False, ctrl: bool = False, alt: bool = False, meta: bool = False) -> "Chain":
        return self._press_key("ArrowDown", shift, ctrl, alt, meta)

    def press_left(self, shift: bool = False, ctrl: bool = False, alt: bool = False, meta: bool = False) -> "Chain":
        return self._press_key("ArrowLeft", shift, ctrl, alt, meta)

    def press_right(self, shift: bool = False, ctrl: bool = False, alt: bool = False, meta: bool = False) -> "Chain":
        return self._press_key("ArrowRight", shift, ctrl, alt, meta)

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def click(self, selector: str) -> "Chain":
        """Click an element in the current frame. Console errors are logged, not raised."""
        self._invoke(f"click({selector!r})", partial(actions.click, selector=selector))
        return self._report_console_errors()

    def scroll_to(self, selector: str, x: float, y: float) -> "Chain":
        """Scroll an element (waiting for it to appear) to the given offsets."""
        return self._invoke(
            f"scroll_to({selector!r})",
            partial(actions.scroll_to, selector=selector, x=x, y=y),
        )

    def active_element(self, callback: Callable[[Optional[BrowserElement]], None]) -> "Chain":
        """Pass a snapshot of the focused element (or None) to `callback`."""
        self._invoke("active_element", partial(actions.active_element, callback=callback))
        return self._report_console_errors(True)

    def remove_element(self, selector: Optional[str] = None, deferred: bool = False) -> "Chain":
        """Remove an element (default: the focused one), optionally on the next page tick."""
        self._invoke(
            "remove_element",
            partial(actions.remove_element, selector=selector, deferred=deferred),
        )
        return self._report_console_errors(True)

    def focus_element(self, selector: str) -> "Chain":
        """Focus an element, firing focus events even if the window is unfocused."""
        self._invoke(f"focus_element({selector!r})", partial(actions.focus_element, selector=selector))
        return self._report_console_errors(True)

    # ------------------------------------------------------------------
    # Repeat blocks
    # ------------------------------------------------------------------

    def repeat_begin(self, count: int) -> "Chain":
        """Start a block that runs `count` times; close it with repeat_end()."""
        self._scheduler.repeats.begin(count)
        return self

    def repeat_end(self, stats: Optional[Callable[[float], None]] = None) -> "Chain":
        """
        Close the innermost repeat block.

        Args:
            stats: Optional callback receiving the block's total run time in
                milliseconds
        """
        self._scheduler.repeats.end(stats)
        return self
