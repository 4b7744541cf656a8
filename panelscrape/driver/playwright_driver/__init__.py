"""Playwright-based driver for interface-driven extraction.

This module provides a driver that opens a catalog page in a real browser,
clicks its actionable elements one at a time and hands static DOM snapshots
to the extractor.
"""

from panelscrape.driver.playwright_driver.playwright_driver import (
    PlaywrightDriver,
    PlaywrightElement,
    PlaywrightPanel,
)

__all__ = ["PlaywrightDriver", "PlaywrightElement", "PlaywrightPanel"]
