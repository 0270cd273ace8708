"""
Unit tests for the Chain builder facade.

Covers:
- Fluent returns and queued command shapes
- Keyboard presses with modifiers
- eval()/check() data flow
- Element actions (active_element, focus_element, remove_element, scroll_to)
- html() markup rendering
"""

import logging

import pytest
from playwright.async_api import Error as PlaywrightError

from pagechain.chain import Chain
from pagechain.engine.actions import REMOVE_ELEMENT_SCRIPT, SCROLL_SCRIPT, modifier_keys
from pagechain.engine.commands import (
    EnterFrame,
    Evaluate,
    Invoke,
    ReportConsoleErrors,
    RepeatStart,
    SetHtml,
    Wait,
)
from pagechain.engine.errors import FrameNotFoundError
from pagechain.engine.models import BrowserElement


class Snippet:
    """Minimal object implementing the __html__ protocol."""

    def __init__(self, text: str):
        self.text = text

    def __html__(self) -> str:
        return f"<p>{self.text}</p>"


def queued(chain: Chain) -> list:
    return list(chain._scheduler.queue)


class TestBuilderShape:
    """What each builder method queues."""

    @pytest.mark.asyncio
    async def test_methods_return_the_chain(self, page, config):
        chain = Chain(page, config=config)

        assert chain.wait(1) is chain
        assert chain.frame() is chain
        assert chain.call(lambda ctx: None) is chain
        assert chain.repeat_begin(1).repeat_end() is chain

        await chain

    @pytest.mark.asyncio
    async def test_throwing_report_after_wait_and_eval(self, page, config):
        chain = Chain(page, config=config).wait(5).eval("() => 1", 2, "x")

        assert queued(chain) == [
            Wait(5),
            ReportConsoleErrors(True),
            Evaluate("() => 1", (2, "x")),
            ReportConsoleErrors(True),
        ]
        await chain

    @pytest.mark.asyncio
    async def test_click_reports_without_throwing(self, page, config):
        chain = Chain(page, config=config).click("#go")

        commands = queued(chain)
        assert isinstance(commands[0], Invoke)
        assert commands[1] == ReportConsoleErrors(False)
        await chain

    @pytest.mark.asyncio
    async def test_commands_without_report(self, page, config):
        chain = (
            Chain(page, config=config)
            .html("<b>hi</b>")
            .scroll_to("#list", 0, 0)
            .check(lambda value: None)
            .frame("a", "b")
        )

        commands = queued(chain)
        assert commands[0] == SetHtml("<b>hi</b>")
        assert [type(c) for c in commands[1:3]] == [Invoke, Invoke]
        assert commands[3:] == [EnterFrame("a"), EnterFrame("b")]
        assert not any(isinstance(c, ReportConsoleErrors) for c in commands)

        with pytest.raises(FrameNotFoundError):
            await chain

    @pytest.mark.asyncio
    async def test_repeat_block_is_recorded_separately(self, page, config):
        chain = Chain(page, config=config).repeat_begin(2).wait(1)

        commands = queued(chain)
        assert len(commands) == 1
        assert isinstance(commands[0], RepeatStart)
        assert commands[0].block.commands == [Wait(1), ReportConsoleErrors(True)]

        chain.repeat_end()
        await chain

    @pytest.mark.asyncio
    async def test_initial_markup(self, page, config):
        await Chain(page, "<main>app</main>", config=config)

        assert page.body_html == "<main>app</main>"

    @pytest.mark.asyncio
    async def test_html_accepts_html_protocol(self, page, config):
        await Chain(page, config=config).html(Snippet("rich"))

        assert page.body_html == "<p>rich</p>"

    @pytest.mark.asyncio
    async def test_html_rejects_other_objects(self, page, config):
        chain = Chain(page, config=config)

        with pytest.raises(TypeError, match="Cannot render int"):
            chain.html(42)

        await chain


class TestKeyboard:
    def test_modifier_order(self):
        assert modifier_keys(shift=True, ctrl=True, alt=True, meta=True) == [
            "Shift",
            "Control",
            "Alt",
            "Meta",
        ]
        assert modifier_keys() == []

    @pytest.mark.asyncio
    async def test_plain_press(self, page, config):
        await Chain(page, config=config).press_enter()

        assert page.keyboard.events == [("press", "Enter")]

    @pytest.mark.asyncio
    async def test_modifiers_held_around_press(self, page, config):
        await Chain(page, config=config).press_tab(shift=True, ctrl=True)

        assert page.keyboard.events == [
            ("down", "Shift"),
            ("down", "Control"),
            ("press", "Tab"),
            ("up", "Shift"),
            ("up", "Control"),
        ]

    @pytest.mark.asyncio
    async def test_press_with_delay(self, page, config):
        await Chain(page, config=config).press("a", delay=25, meta=True)

        assert page.keyboard.events == [("down", "Meta"), ("press", "a", 25), ("up", "Meta")]

    @pytest.mark.asyncio
    async def test_named_keys(self, page, config):
        await (
            Chain(page, config=config)
            .press_esc()
            .press_up()
            .press_down()
            .press_left()
            .press_right()
        )

        assert [event[1] for event in page.keyboard.events] == [
            "Escape",
            "ArrowUp",
            "ArrowDown",
            "ArrowLeft",
            "ArrowRight",
        ]

    @pytest.mark.asyncio
    async def test_keyboard_used_inside_frames(self, page, config):
        page.add_iframe("editor")

        await Chain(page, config=config).frame("editor").press_down()

        assert page.keyboard.events == [("press", "ArrowDown")]


class TestEvalAndCheck:
    @pytest.mark.asyncio
    async def test_check_receives_last_eval(self, page, config):
        page.on_eval("(a, b) => a + b", lambda a, b: a + b)
        seen = []

        chain = Chain(page, config=config).eval("(a, b) => a + b", 2, 3).check(seen.append)
        await chain

        assert seen == [5]
        assert chain.last_eval == 5

    @pytest.mark.asyncio
    async def test_failed_assertion_fails_chain(self, page, config):
        page.on_eval("() => 'wrong'", lambda: "wrong")

        def expect_right(value):
            assert value == "right"

        with pytest.raises(AssertionError):
            await Chain(page, config=config).eval("() => 'wrong'").check(expect_right)

    @pytest.mark.asyncio
    async def test_async_check(self, page, config):
        seen = []

        async def record(value):
            seen.append(value)

        await Chain(page, config=config).check(record)

        assert seen == [None]

    @pytest.mark.asyncio
    async def test_async_call_receives_context(self, page, config):
        seen = []

        async def inspect_context(ctx):
            seen.append(ctx.page)

        await Chain(page, config=config).call(inspect_context)

        assert seen == [page]


class TestElements:
    @pytest.mark.asyncio
    async def test_active_element_snapshot(self, page, config):
        page.active = {
            "tag": "button",
            "text_content": "Save",
            "attributes": {"id": "save", "tabindex": "0"},
        }
        seen = []

        await Chain(page, config=config).active_element(seen.append)

        assert seen == [
            BrowserElement(tag="button", text_content="Save", attributes={"id": "save", "tabindex": "0"})
        ]

    @pytest.mark.asyncio
    async def test_active_element_none(self, page, config):
        seen = []

        await Chain(page, config=config).active_element(seen.append)

        assert seen == [None]

    @pytest.mark.asyncio
    async def test_focus_element(self, page, config):
        page.selectors.add("#name")

        await Chain(page, config=config).focus_element("#name")

        assert page.focused == "#name"

    @pytest.mark.asyncio
    async def test_focus_missing_element_fails(self, page, config):
        with pytest.raises(PlaywrightError, match="could not find element with selector #nope"):
            await Chain(page, config=config).focus_element("#nope")

    @pytest.mark.asyncio
    async def test_remove_focused_element_by_default(self, page, config):
        await Chain(page, config=config).remove_element().remove_element("#toast", deferred=True)

        removals = [call for call in page.calls if call[1] == REMOVE_ELEMENT_SCRIPT]
        assert [call[2] for call in removals] == [["", False], ["#toast", True]]

    @pytest.mark.asyncio
    async def test_scroll_waits_for_element(self, page, config):
        await Chain(page, config=config).scroll_to("#list", 0, 250)

        assert page.calls[0] == ("wait_for_selector", "#list")
        assert page.calls[1] == ("evaluate", SCROLL_SCRIPT, ["#list", 0, 250])

    @pytest.mark.asyncio
    async def test_click_in_current_frame(self, page, config):
        editor = page.add_iframe("editor")

        await Chain(page, config=config).frame("editor").click("#bold")

        assert ("click", "#bold") in editor.calls
        assert ("click", "#bold") not in page.calls


class TestDebug:
    @pytest.mark.asyncio
    async def test_debug_announces_pause(self, page, config, caplog):
        with caplog.at_level(logging.WARNING, logger="pagechain"):
            await Chain(page, config=config).debug(10)

        assert "paused" in caplog.text
        assert "'_top'" in caplog.text
