"""
Browser Module

Playwright browser lifecycle for pagechain test runs.
"""

from .controller import BrowserController, BrowserConfig

__all__ = [
    "BrowserController",
    "BrowserConfig",
]
