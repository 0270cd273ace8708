"""
Console-Error Capture

Wraps console.error() inside a page or frame so every call is buffered,
and drains that buffer after actions to surface errors the page logged.
"""

import logging
from typing import Any, Optional

from .errors import ConsoleErrorsReported
from .models import TOP_FRAME_ID, ConsoleErrorReport

logger = logging.getLogger(__name__)


# Installs once per window; the buffer field doubles as the marker.
INSTALL_CAPTURE_SCRIPT = """() => {
    if (!window.__pagechainConsoleErrors) {
        window.__pagechainConsoleErrors = [];
        const origConsoleError = console.error;
        console.error = function (...args) {
            origConsoleError.apply(console, args);
            window.__pagechainConsoleErrors.push(args.map((a) => `${a}`));
        };
    }
}"""

DRAIN_CAPTURE_SCRIPT = """() => {
    const ret = window.__pagechainConsoleErrors || [];
    window.__pagechainConsoleErrors = [];
    return ret;
}"""


async def install_console_capture(frame: Any, ready: Optional[str] = None) -> None:
    """
    Install console.error() capture in a page or frame.

    Args:
        frame: Playwright Page or Frame
        ready: Optional JavaScript predicate; when given, block until it
            evaluates truthy inside the frame
    """
    await frame.query_selector("body")
    await frame.evaluate(INSTALL_CAPTURE_SCRIPT)

    if ready:
        logger.debug("Waiting for page readiness predicate")
        await frame.wait_for_function(ready)


async def report_console_errors(
    frame: Any,
    throw_on_error: bool = False,
    frame_id: str = TOP_FRAME_ID,
) -> ConsoleErrorReport:
    """
    Drain captured console.error() calls from a frame.

    Reading and clearing happen in one evaluation, so no call is reported
    twice.

    Args:
        frame: Playwright Page or Frame
        throw_on_error: Raise when anything was captured
        frame_id: Frame identifier recorded in the report

    Returns:
        ConsoleErrorReport with the drained calls

    Raises:
        ConsoleErrorsReported: If calls were captured and throw_on_error is set
    """
    calls = await frame.evaluate(DRAIN_CAPTURE_SCRIPT)
    report = ConsoleErrorReport(frame_id=frame_id, calls=calls or [])

    if report.is_empty:
        return report

    logger.error(report.message)

    if throw_on_error:
        raise ConsoleErrorsReported(report.message, report.calls)

    return report
