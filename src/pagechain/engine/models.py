"""
Data models for chain execution.

This module defines Pydantic models exchanged across the engine:
- FrameEntry: One level of the frame stack (identifier + Playwright frame)
- BrowserElement: Snapshot of a DOM element taken inside the page
- ConsoleErrorReport: console.error() calls drained from a frame
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


TOP_FRAME_ID = "_top"


class FrameEntry(BaseModel):
    """Frame stack entry.

    Pairs the iframe id used to enter a frame with the Playwright Page or
    Frame that scripts are evaluated in. The bottom entry of every stack is
    the page itself under the TOP_FRAME_ID identifier.

    The frame is stored as Any so Pydantic does not try to validate
    Playwright objects.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    frame_id: str
    """iframe id attribute, or TOP_FRAME_ID for the page."""

    frame: Any
    """Playwright Page or Frame evaluated against."""

    @property
    def is_top(self) -> bool:
        return self.frame_id == TOP_FRAME_ID


class BrowserElement(BaseModel):
    """Snapshot of a DOM element.

    Produced by the active-element action. Attribute values are strings as
    returned by getAttribute(); attributes with null values are omitted.
    """

    tag: str
    """Lowercase tag name (e.g., "button")."""

    text_content: Optional[str] = None
    """Element textContent."""

    attributes: dict[str, str] = Field(default_factory=dict)
    """Attribute name -> value."""


class ConsoleErrorReport(BaseModel):
    """console.error() calls captured in a frame.

    Each call is the list of its arguments, stringified in the page.
    """

    frame_id: str = TOP_FRAME_ID
    """Frame the calls were drained from."""

    calls: list[list[str]] = Field(default_factory=list)
    """Captured calls in the order they happened."""

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def is_empty(self) -> bool:
        return not self.calls

    @property
    def message(self) -> str:
        """Combined message enumerating each call in order."""
        lines = [f"{index}. {' '.join(args)}" for index, args in enumerate(self.calls, start=1)]
        return f"Had {self.count} console.error() calls in the browser:\n" + "\n".join(lines)
