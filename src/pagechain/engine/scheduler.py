"""
Chain Scheduler

Owns a chain's command queue and drains it one command per event-loop turn.

Draining starts as soon as the scheduler exists, but every step is deferred
with loop.call_soon(), so all commands added in the same synchronous turn
are queued before the first one runs. Exactly one command executes at a
time; the first failure settles the completion and stops draining for good.
"""

import asyncio
import logging
from collections import deque
from typing import Optional

from .commands import Command, ExecutionContext, RepeatEnd, RepeatStart, describe, run_command
from .completion import Completion
from .errors import ChainInternalError, ChainStructureError
from .repeat import MISSING_END_MESSAGE, RepeatController

logger = logging.getLogger(__name__)


class ChainScheduler:
    """
    Deferred, single-flight command queue.

    Attributes:
        context: Shared state handed to every command
        completion: Settles once the queue drains or a command fails
        queue: Queue currently being drained
        build_queue: Queue new commands are appended to (differs from
            `queue` while repeat blocks are being recorded or run)
        repeats: Repeat-block bookkeeping
    """

    def __init__(self, context: ExecutionContext):
        self._loop = asyncio.get_running_loop()
        self.context = context
        self.completion = Completion(self._loop)
        self.queue: deque = deque()
        self.build_queue = self.queue
        self.repeats = RepeatController(self)
        self._pending: Optional[asyncio.Handle] = None
        self._running: Optional[asyncio.Task] = None
        self._executed = 0
        self._arm()

    @property
    def executed(self) -> int:
        """Number of commands run so far, repeat markers included."""
        return self._executed

    @property
    def is_running(self) -> bool:
        """True while a command is executing."""
        return self._running is not None

    def schedule(self, command: Command) -> None:
        """Append a command to the current build queue."""
        if self.completion.done():
            logger.debug(f"Chain already settled, {describe(command)} will not run")
        self.build_queue.append(command)

    def fail(self, error: BaseException) -> None:
        """Settle the chain as failed and stop draining."""
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

        if self.completion.fail(error):
            logger.error(f"Chain failed: {error}")

    def _arm(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
        self._pending = self._loop.call_soon(self._drain_step)

    def _drain_step(self) -> None:
        self._pending = None

        if self.completion.done():
            return

        if self.repeats.open_blocks:
            self.fail(ChainStructureError(MISSING_END_MESSAGE))
            return

        if not self.queue:
            try:
                self.repeats.check_drained()
            except ChainStructureError as e:
                self.fail(e)
                return
            logger.debug(f"Chain drained after {self._executed} command(s)")
            self.completion.settle()
            return

        command = self.queue.popleft()
        self._running = self._loop.create_task(self._execute(command))

    async def _execute(self, command: Command) -> None:
        logger.debug(f"Running {describe(command)}")
        self._executed += 1

        try:
            match command:
                case RepeatStart():
                    self.repeats.start(command)
                case RepeatEnd():
                    self.repeats.finish_iteration(command)
                case _:
                    await run_command(command, self.context)
        except ChainInternalError as e:
            logger.critical(f"Chain state is inconsistent: {e}")
            self.fail(e)
            return
        except Exception as e:
            logger.debug(f"{describe(command)} failed: {e}")
            self.fail(e)
            return
        except BaseException as e:
            # pytest.fail()/skip() outcomes settle the chain like any failure
            self.fail(e)
            if isinstance(e, (KeyboardInterrupt, SystemExit, asyncio.CancelledError)):
                raise
            return
        finally:
            self._running = None

        self._arm()
