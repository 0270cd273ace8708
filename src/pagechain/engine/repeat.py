"""
Repeat-Block Controller

Implements repeat_begin(count) ... repeat_end() on top of the scheduler.

At build time each open block becomes the scheduler's build queue, so the
commands added inside it are recorded in the block instead of the chain.
The block's RepeatStart marker sits in the enclosing queue and its RepeatEnd
marker is the block's last command.

At run time RepeatStart snapshots the block as an immutable template,
remembers the queue it interrupted and activates a fresh copy of the
template. Each RepeatEnd either activates another fresh copy or, after the
last iteration, restores the interrupted queue.
"""

import copy
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional

from .commands import Command, RepeatBlock, RepeatEnd, RepeatStart
from .errors import ChainInternalError, ChainStructureError

if TYPE_CHECKING:
    from .scheduler import ChainScheduler

logger = logging.getLogger(__name__)


MISSING_END_MESSAGE = "repeat_begin() is missing corresponding repeat_end()"
MISSING_BEGIN_MESSAGE = "repeat_end() is missing corresponding repeat_begin()"


@dataclass
class RepeatSession:
    """Runtime state of one active repeat block."""

    template: tuple
    remaining: int
    restore_queue: deque
    started_at: float


def _fresh_queue(template: tuple) -> deque:
    return deque(copy.copy(command) for command in template)


class RepeatController:
    """Build-time and run-time bookkeeping for nested repeat blocks."""

    def __init__(self, scheduler: "ChainScheduler"):
        self._scheduler = scheduler
        # Enclosing build queues of the blocks still open at build time
        self._building: list = []
        # Active sessions, innermost last
        self._sessions: list[RepeatSession] = []

    @property
    def open_blocks(self) -> int:
        return len(self._building)

    @property
    def active_sessions(self) -> int:
        return len(self._sessions)

    def begin(self, count: int) -> None:
        """Open a block that will run `count` times."""
        if count < 1:
            self._scheduler.fail(ChainStructureError("repeat_begin() must be called with repeats > 0"))
            return

        block = RepeatBlock(count=count)
        self._scheduler.schedule(RepeatStart(block))
        self._building.append(self._scheduler.build_queue)
        self._scheduler.build_queue = block.commands

    def end(self, stats: Optional[Callable[[float], None]] = None) -> None:
        """Close the innermost open block."""
        if not self._building:
            self._scheduler.fail(ChainStructureError(MISSING_BEGIN_MESSAGE))
            return

        self._scheduler.schedule(RepeatEnd(stats))
        self._scheduler.build_queue = self._building.pop()

    def start(self, command: RepeatStart) -> None:
        """Run a RepeatStart marker: begin the first iteration."""
        template = tuple(command.block.commands)
        session = RepeatSession(
            template=template,
            remaining=command.block.count - 1,
            restore_queue=self._scheduler.queue,
            started_at=time.perf_counter(),
        )
        self._sessions.append(session)
        logger.debug(f"Repeat block started: {command.block.count} iteration(s), depth {len(self._sessions)}")
        self._scheduler.queue = _fresh_queue(template)

    def finish_iteration(self, command: RepeatEnd) -> None:
        """Run a RepeatEnd marker: loop again or resume the enclosing queue."""
        if not self._sessions:
            raise ChainInternalError("Repeat session stack is empty at repeat_end()")

        session = self._sessions[-1]

        if session.remaining > 0:
            session.remaining -= 1
            self._scheduler.queue = _fresh_queue(session.template)
            return

        self._sessions.pop()
        self._scheduler.queue = session.restore_queue

        elapsed_ms = (time.perf_counter() - session.started_at) * 1000
        logger.info(f"Repeat block finished in {elapsed_ms:.1f}ms")

        if command.stats is not None:
            command.stats(elapsed_ms)

    def check_drained(self) -> None:
        """
        Called when the active queue runs dry.

        Raises:
            ChainStructureError: If a session's template ended without its
                RepeatEnd (the block was still open when it started)
        """
        if self._sessions:
            raise ChainStructureError(MISSING_END_MESSAGE)
