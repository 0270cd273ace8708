"""
Completion Signal

Single-assignment success/failure result of a whole chain, backed by an
asyncio.Future. The first settle wins; later settles are ignored.
"""

import asyncio
from typing import Callable, Optional


def _mark_retrieved(future: asyncio.Future) -> None:
    if not future.cancelled():
        future.exception()


class Completion:
    """
    Settle-once result of a chain.

    Usage:
        >>> completion = Completion()
        >>> completion.add_done_callback(lambda c: print(c.failed))
        >>> completion.fail(RuntimeError("boom"))
        True
        >>> completion.fail(RuntimeError("ignored"))
        False
        >>> await completion  # raises RuntimeError("boom")
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future = self._loop.create_future()
        # Failures are logged by the scheduler; mark them retrieved so an
        # unawaited chain does not warn again at garbage collection
        self._future.add_done_callback(_mark_retrieved)

    def settle(self) -> bool:
        """Settle as success. Returns False if already settled."""
        if self._future.done():
            return False
        self._future.set_result(None)
        return True

    def fail(self, error: BaseException) -> bool:
        """Settle as failure. Returns False if already settled."""
        if self._future.done():
            return False
        self._future.set_exception(error)
        return True

    def done(self) -> bool:
        return self._future.done()

    @property
    def failed(self) -> bool:
        return self._future.done() and self._future.exception() is not None

    def exception(self) -> Optional[BaseException]:
        """
        The failure, or None on success.

        Raises:
            asyncio.InvalidStateError: If not settled yet
        """
        return self._future.exception()

    def add_done_callback(self, callback: Callable[["Completion"], None]) -> None:
        """Call `callback(completion)` once settled (immediately scheduled if already settled)."""
        self._future.add_done_callback(lambda _future: callback(self))

    async def wait(self, timeout: Optional[float] = None) -> None:
        """
        Wait for the chain to finish.

        Args:
            timeout: Seconds to wait; the chain keeps running on timeout

        Raises:
            asyncio.TimeoutError: If the timeout elapses first
            The chain's failure, if it failed
        """
        await asyncio.wait_for(asyncio.shield(self._future), timeout)

    def __await__(self):
        return self._future.__await__()
