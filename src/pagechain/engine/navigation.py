"""
Page Loading

Loads fixture pages from the dev server with a bounded retry, then prepares
them for a chain (console-error capture, optional readiness predicate).
"""

import asyncio
import itertools
import logging
from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError

from ..config import ChainConfig
from .console_errors import install_console_capture
from .errors import NavigationError

logger = logging.getLogger(__name__)

# Cache-busting query value, unique per load within the process
_load_counter = itertools.count(1)


def fixture_url(config: ChainConfig, path: str) -> str:
    """Dev-server URL for a fixture page, with a cache-busting query."""
    return f"{config.base_url}/{path.lstrip('/')}?rnd={next(_load_counter)}"


async def goto_with_retry(
    page: Any,
    path: str,
    config: Optional[ChainConfig] = None,
) -> Any:
    """
    Navigate to a fixture page, retrying failed attempts.

    An attempt fails when navigation raises a Playwright error or the
    response is missing or not ok. Failed attempts are logged and followed
    by a fixed delay.

    Args:
        page: Playwright Page instance
        path: Fixture path relative to the tests directory
        config: Chain settings (default: from environment)

    Returns:
        The successful Playwright Response

    Raises:
        NavigationError: After config.load_retries failed attempts
    """
    config = config or ChainConfig.from_env()

    for attempt in range(1, config.load_retries + 1):
        url = fixture_url(config, path)

        try:
            response = await page.goto(url)

            if response is None or not response.ok:
                status_text = response.status_text if response is not None else "no response"
                raise NavigationError(
                    f"Failed to load {config.tests_dir / path.lstrip('/')}: {status_text}",
                    path=path,
                )

            return response

        except (PlaywrightError, NavigationError) as e:
            logger.warning(
                f"Failed to connect to test page {url} "
                f"(attempt {attempt}/{config.load_retries}): {e}"
            )
            if attempt < config.load_retries:
                await asyncio.sleep(config.retry_delay)

    raise NavigationError(f"Failed to connect to {path} after multiple retries", path=path)


async def bootstrap_page(
    page: Any,
    path: str,
    config: Optional[ChainConfig] = None,
    ready: Optional[str] = None,
) -> None:
    """
    Load a fixture page and install console-error capture in it.

    Args:
        page: Playwright Page instance
        path: Fixture path relative to the tests directory
        config: Chain settings (default: from environment)
        ready: Optional JavaScript predicate to wait for after loading

    Raises:
        NavigationError: If the page could not be loaded
    """
    await goto_with_retry(page, path, config)
    await install_console_capture(page, ready)
