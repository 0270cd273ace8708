"""
Unit tests for the frame stack and frame()/unframe() chain commands.
"""

import asyncio

import pytest

from pagechain.chain import Chain
from pagechain.engine.errors import FrameError, FrameNotFoundError
from pagechain.engine.frames import FrameStack, iframe_selector
from pagechain.engine.models import TOP_FRAME_ID


def test_iframe_selector():
    assert iframe_selector("editor") == "iframe[id='editor']"


class TestFrameStack:
    """FrameStack push/pop behavior against fake frames."""

    def test_starts_at_page(self, page):
        frames = FrameStack(page)

        assert frames.current.frame_id == TOP_FRAME_ID
        assert frames.current.frame is page
        assert frames.current.is_top
        assert frames.depth == 0
        assert len(frames) == 1

    @pytest.mark.asyncio
    async def test_enter_pushes_and_installs_capture(self, page):
        editor = page.add_iframe("editor")
        frames = FrameStack(page)

        entry = await frames.enter("editor")

        assert entry.frame is editor
        assert frames.current.frame_id == "editor"
        assert frames.path == [TOP_FRAME_ID, "editor"]
        assert editor.capture_installs == 1
        assert page.capture_installs == 0

    @pytest.mark.asyncio
    async def test_enter_nested(self, page):
        outer = page.add_iframe("outer")
        inner = outer.add_iframe("inner")
        frames = FrameStack(page)

        await frames.enter("outer")
        await frames.enter("inner")

        assert frames.current.frame is inner
        assert frames.depth == 2

    @pytest.mark.asyncio
    async def test_missing_top_level_frame(self, page):
        frames = FrameStack(page)

        with pytest.raises(FrameNotFoundError) as exc_info:
            await frames.enter("missing-id")

        assert str(exc_info.value) == '<iframe id="missing-id"> is not available'
        assert exc_info.value.parent_id is None
        assert frames.depth == 0

    @pytest.mark.asyncio
    async def test_missing_nested_frame_names_parent(self, page):
        page.add_iframe("outer")
        frames = FrameStack(page)
        await frames.enter("outer")

        with pytest.raises(FrameNotFoundError) as exc_info:
            await frames.enter("nope")

        assert str(exc_info.value) == '<iframe id="nope"> is not available in <iframe id="outer">'
        assert frames.current.frame_id == "outer"

    @pytest.mark.asyncio
    async def test_detached_iframe_is_not_available(self, page):
        page.iframes["detached"] = None
        frames = FrameStack(page)

        with pytest.raises(FrameNotFoundError, match="detached"):
            await frames.enter("detached")

    @pytest.mark.asyncio
    async def test_exit_pops_levels(self, page):
        page.add_iframe("outer").add_iframe("inner")
        frames = FrameStack(page)
        await frames.enter("outer")
        await frames.enter("inner")

        current = frames.exit(2)

        assert current.is_top
        assert frames.depth == 0

    def test_exit_below_page_fails(self, page):
        frames = FrameStack(page)

        with pytest.raises(FrameError, match="Not enough levels to unframe"):
            frames.exit()

        assert frames.current.frame is page

    @pytest.mark.asyncio
    async def test_partial_exit_keeps_popped_levels(self, page):
        page.add_iframe("editor")
        frames = FrameStack(page)
        await frames.enter("editor")

        with pytest.raises(FrameError):
            frames.exit(3)

        assert frames.current.is_top

    @pytest.mark.asyncio
    async def test_reset(self, page):
        page.add_iframe("outer").add_iframe("inner")
        frames = FrameStack(page)
        await frames.enter("outer")
        await frames.enter("inner")

        frames.reset()

        assert frames.path == [TOP_FRAME_ID]


class TestChainFrames:
    """frame()/unframe() as chain commands."""

    @pytest.mark.asyncio
    async def test_missing_frame_fails_chain(self, page, config):
        ran = []
        chain = Chain(page, config=config).frame("missing-id").call(lambda ctx: ran.append(True))

        with pytest.raises(FrameNotFoundError) as exc_info:
            await chain

        assert "missing-id" in str(exc_info.value)
        await asyncio.sleep(0.01)
        assert ran == []

    @pytest.mark.asyncio
    async def test_frame_accepts_several_ids(self, page, config):
        page.add_iframe("outer").add_iframe("inner")
        seen = []

        await Chain(page, config=config).frame("outer", "inner").call(
            lambda ctx: seen.append(ctx.frames.path)
        )

        assert seen == [[TOP_FRAME_ID, "outer", "inner"]]

    @pytest.mark.asyncio
    async def test_nested_missing_frame_through_chain(self, page, config):
        page.add_iframe("outer")

        with pytest.raises(FrameNotFoundError, match='in <iframe id="outer">'):
            await Chain(page, config=config).frame("outer", "missing")

    @pytest.mark.asyncio
    async def test_commands_target_current_frame(self, page, config):
        editor = page.add_iframe("editor")
        page.on_eval("() => document.title", lambda: "page")
        editor.on_eval("() => document.title", lambda: "editor")
        titles = []

        await (
            Chain(page, config=config)
            .eval("() => document.title")
            .check(titles.append)
            .frame("editor")
            .eval("() => document.title")
            .check(titles.append)
            .unframe()
            .eval("() => document.title")
            .check(titles.append)
        )

        assert titles == ["page", "editor", "page"]

    @pytest.mark.asyncio
    async def test_unframe_without_frames_fails(self, page, config):
        with pytest.raises(FrameError, match="Not enough levels"):
            await Chain(page, config=config).unframe()
