#!/usr/bin/env python
"""
Keyboard Navigation Example

Renders a small toolbar into a blank page and walks it with the keyboard,
reporting how long the repeated key presses took.

Usage:
    python examples/keyboard_navigation.py

Requirements:
    - pagechain installed: pip install -e .
    - Chromium for Playwright: playwright install chromium
"""

import asyncio

from pagechain.browser import BrowserConfig, BrowserController
from pagechain.chain import Chain
from pagechain.config import ChainConfig, configure_logging

TOOLBAR = """
<div role="toolbar">
  <button id="bold">Bold</button>
  <button id="italic">Italic</button>
  <button id="underline">Underline</button>
  <button id="strike">Strike</button>
</div>
"""


async def main():
    """Tab through the toolbar and print the focused button."""
    configure_logging()

    # Set headless=False to watch the chain run
    async with BrowserController(BrowserConfig(headless=True)) as browser:
        await (
            Chain(browser.current_page, TOOLBAR, config=ChainConfig())
            .focus_element("#bold")
            .repeat_begin(3)
            .press_tab()
            .repeat_end(lambda ms: print(f"3 tab presses took {ms:.0f}ms"))
            .active_element(lambda el: print(f"Focused: <{el.tag} id={el.attributes.get('id')}>"))
            .press_tab(shift=True)
            .active_element(lambda el: print(f"After shift+tab: <{el.tag} id={el.attributes.get('id')}>"))
        )


if __name__ == "__main__":
    asyncio.run(main())
