"""
Frame Stack

Tracks the nested iframe context a chain is currently executing in.

The stack always holds the page itself at the bottom (identifier "_top").
frame() commands push same-origin iframes found by id in the current frame;
unframe() commands pop them again. Commands evaluate against whichever
frame is current when they run.
"""

import logging
from typing import Any

from .console_errors import install_console_capture
from .errors import FrameError, FrameNotFoundError
from .models import TOP_FRAME_ID, FrameEntry

logger = logging.getLogger(__name__)


def iframe_selector(frame_id: str) -> str:
    """CSS selector for an iframe element by id."""
    return f"iframe[id='{frame_id}']"


class FrameStack:
    """
    Stack of entered frames, sentinel page entry at the bottom.

    Usage:
        >>> frames = FrameStack(page)
        >>> await frames.enter("editor")
        >>> frames.current.frame_id
        'editor'
        >>> frames.exit()
    """

    def __init__(self, page: Any):
        """
        Initialize with the top-level page as the sentinel entry.

        Args:
            page: Playwright Page instance
        """
        self._entries: list[FrameEntry] = [FrameEntry(frame_id=TOP_FRAME_ID, frame=page)]

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def current(self) -> FrameEntry:
        """The frame commands currently run against."""
        return self._entries[-1]

    @property
    def depth(self) -> int:
        """Number of entered iframes above the page."""
        return len(self._entries) - 1

    @property
    def path(self) -> list[str]:
        """Frame identifiers from the page down to the current frame."""
        return [entry.frame_id for entry in self._entries]

    async def enter(self, frame_id: str) -> FrameEntry:
        """
        Enter the iframe with the given id inside the current frame.

        Installs console-error capture in the new frame.

        Args:
            frame_id: id attribute of the iframe element

        Returns:
            The new current FrameEntry

        Raises:
            FrameNotFoundError: If no such iframe (or its content frame) exists
        """
        parent = self.current
        handle = await parent.frame.query_selector(iframe_selector(frame_id))

        if handle is not None:
            content_frame = await handle.content_frame()

            if content_frame is not None:
                entry = FrameEntry(frame_id=frame_id, frame=content_frame)
                self._entries.append(entry)
                logger.info(f"Entered frame: {' > '.join(self.path)}")
                await install_console_capture(content_frame)
                return entry

        raise FrameNotFoundError(
            frame_id,
            parent_id=None if parent.is_top else parent.frame_id,
        )

    def exit(self, levels: int = 1) -> FrameEntry:
        """
        Leave entered frames one level at a time.

        Args:
            levels: How many frames to leave

        Returns:
            The new current FrameEntry

        Raises:
            FrameError: If fewer than `levels` frames are entered; the frames
                that could be left stay left
        """
        for _ in range(levels):
            if len(self._entries) <= 1:
                raise FrameError("Not enough levels to unframe")
            left = self._entries.pop()
            logger.info(f"Left frame '{left.frame_id}'")

        return self.current

    def reset(self) -> None:
        """Drop every entered frame, keeping the page sentinel."""
        del self._entries[1:]
