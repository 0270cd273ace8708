"""
Shared fixtures and in-memory Playwright fakes.

FakePage / FakeFrame interpret the script constants the engine publishes,
so chains can run end to end without a browser.
"""

import asyncio
from typing import Any, Callable, Optional

import pytest
from playwright.async_api import Error as PlaywrightError

from pagechain.config import ChainConfig
from pagechain.engine.actions import ACTIVE_ELEMENT_SCRIPT, FOCUS_ELEMENT_SCRIPT
from pagechain.engine.commands import EVALUATE_WRAPPER, SET_HTML_SCRIPT, WAIT_SCRIPT
from pagechain.engine.console_errors import DRAIN_CAPTURE_SCRIPT, INSTALL_CAPTURE_SCRIPT
from pagechain.engine.frames import iframe_selector


class FakeElement:
    """Element handle: <body> of a frame, or an <iframe> with content."""

    def __init__(self, owner: "FakeFrame", content: Optional["FakeFrame"] = None):
        self.owner = owner
        self.content = content

    async def content_frame(self) -> Optional["FakeFrame"]:
        return self.content

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        if script == SET_HTML_SCRIPT:
            self.owner.body_html = arg
        return None


class FakeFrame:
    """Stand-in for a Playwright Frame."""

    def __init__(self, name: str = "main"):
        self.name = name
        self.iframes: dict[str, Optional[FakeFrame]] = {}
        self.handlers: dict[str, Callable[..., Any]] = {}
        self.console_errors: list[list[str]] = []
        self.capture_installs = 0
        self.body_html: Optional[str] = None
        self.active: Optional[dict] = None
        self.selectors: set[str] = set()
        self.focused: Optional[str] = None
        self.calls: list[tuple] = []

    def add_iframe(self, frame_id: str, frame: Optional["FakeFrame"] = None) -> "FakeFrame":
        """Add an <iframe id=frame_id>; None content simulates a detached frame."""
        child = frame if frame is not None else FakeFrame(frame_id)
        self.iframes[frame_id] = child
        return child

    def on_eval(self, script: str, handler: Callable[..., Any]) -> None:
        """Answer Chain.eval(script, *args) with handler(*args)."""
        self.handlers[EVALUATE_WRAPPER.format(script=script)] = handler

    async def query_selector(self, selector: str) -> Optional[FakeElement]:
        self.calls.append(("query_selector", selector))
        if selector == "body":
            return FakeElement(self)
        for frame_id, content in self.iframes.items():
            if selector == iframe_selector(frame_id):
                return FakeElement(self, content)
        return None

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", script, arg))

        if script == INSTALL_CAPTURE_SCRIPT:
            self.capture_installs += 1
            return None
        if script == DRAIN_CAPTURE_SCRIPT:
            drained, self.console_errors = self.console_errors, []
            return drained
        if script == WAIT_SCRIPT:
            await asyncio.sleep(arg / 1000)
            return True
        if script == ACTIVE_ELEMENT_SCRIPT:
            return self.active
        if script == FOCUS_ELEMENT_SCRIPT:
            if arg not in self.selectors:
                raise PlaywrightError(f"focus_element: could not find element with selector {arg}")
            self.focused = arg
            return None
        if script in self.handlers:
            return self.handlers[script](*arg)
        return None

    async def wait_for_function(self, predicate: str) -> None:
        self.calls.append(("wait_for_function", predicate))

    async def wait_for_selector(self, selector: str) -> None:
        self.calls.append(("wait_for_selector", selector))

    async def click(self, selector: str) -> None:
        self.calls.append(("click", selector))


class FakeKeyboard:
    def __init__(self):
        self.events: list[tuple] = []

    async def down(self, key: str) -> None:
        self.events.append(("down", key))

    async def up(self, key: str) -> None:
        self.events.append(("up", key))

    async def press(self, key: str, delay: Optional[float] = None) -> None:
        self.events.append(("press", key) if delay is None else ("press", key, delay))


class FakeResponse:
    def __init__(self, ok: bool = True, status_text: str = "OK"):
        self.ok = ok
        self.status_text = status_text


class FakePage(FakeFrame):
    """Stand-in for a Playwright Page."""

    def __init__(self):
        super().__init__("page")
        self.keyboard = FakeKeyboard()
        self.goto_results: list[Any] = []
        self.visited: list[str] = []

    def response(self, ok: bool = True, status_text: str = "OK") -> FakeResponse:
        return FakeResponse(ok, status_text)

    async def goto(self, url: str) -> Any:
        self.visited.append(url)
        result = self.goto_results.pop(0) if self.goto_results else FakeResponse()
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def config(tmp_path) -> ChainConfig:
    """Fast settings: no retry delay, no settle pause."""
    return ChainConfig(
        port=8123,
        tests_dir=tmp_path,
        load_retries=4,
        retry_delay=0,
        html_settle_ms=0,
    )
