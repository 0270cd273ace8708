"""
Chain Errors

Exception hierarchy for chain execution failures.

ChainError and its subclasses are caller-visible failures: they settle a
chain's completion as failed and are what an awaiting test observes.
ChainInternalError signals a defect in repeat-session bookkeeping and is
deliberately kept outside the ChainError hierarchy.
"""

from typing import Optional


class ChainError(RuntimeError):
    """Base error for chain execution failures."""


class NavigationError(ChainError):
    """Page load failed (bad response or exhausted retries)."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class FrameError(ChainError):
    """Frame topology failure (entering or leaving iframes)."""


class FrameNotFoundError(FrameError):
    """The requested iframe does not exist in the current frame."""

    def __init__(self, frame_id: str, parent_id: Optional[str] = None):
        message = f'<iframe id="{frame_id}"> is not available'
        if parent_id is not None:
            message += f' in <iframe id="{parent_id}">'
        super().__init__(message)
        self.frame_id = frame_id
        self.parent_id = parent_id


class ChainStructureError(ChainError):
    """Malformed chain: unmatched repeat markers or invalid repeat count."""


class ConsoleErrorsReported(ChainError):
    """console.error() calls were captured under a throw-on-error policy."""

    def __init__(self, message: str, calls: list[list[str]]):
        super().__init__(message)
        self.calls = calls


class ChainInternalError(RuntimeError):
    """
    Repeat-session bookkeeping is inconsistent.

    Raised only when the scheduler's own state is corrupt; never caused by
    caller misuse.
    """
