"""Integration tests for the Playwright driver against the mock catalog.

These tests launch a real Chromium and are skipped when no browser is
installed (``playwright install chromium``).
"""

import pytest

from panelscrape.common.exceptions import PageLoadException
from panelscrape.common.settings import ExtractionSettings
from panelscrape.data_types import SkipReason, WaitForSelector
from panelscrape.demo.catalog import DemoIconCatalog, DemoIconCatalogReady
from panelscrape.demo.data import ICONS
from panelscrape.driver.playwright_driver import PlaywrightDriver
from tests.utils import collect_records

WORKING_ICONS = [icon for icon in ICONS if not icon.broken]


@pytest.fixture(scope="session")
def require_browser():
    """Skip unless Chromium can be launched."""
    sync_api = pytest.importorskip("playwright.sync_api")
    try:
        with sync_api.sync_playwright() as p:
            p.chromium.launch(headless=True).close()
    except Exception as e:
        pytest.skip(f"Chromium not available: {e}")


def _catalog(base, url, **overrides):
    """Point a demo catalog at the mock server."""
    attrs = {"url": url, "rate_limits": None, **overrides}
    return type(f"Mock{base.__name__}", (base,), attrs)()


@pytest.mark.usefixtures("require_browser")
class TestPlaywrightDriver:
    """End-to-end extraction in a real browser."""

    @pytest.mark.asyncio
    async def test_fixed_delay_extraction(self, server_url):
        """Working icons become records in page order; the broken one is skipped."""
        catalog = _catalog(DemoIconCatalog, f"{server_url}/?delay=50")

        async with PlaywrightDriver.open(catalog) as driver:
            result = await driver.run()

        assert result.to_dicts() == [
            {"Code point": icon.code_point, "Icon name": icon.name}
            for icon in WORKING_ICONS
        ]
        assert len(result.skipped) == 1
        assert result.skipped[0].element == "button #4 (bug_report)"
        assert result.skipped[0].reason is SkipReason.STRUCTURE_MISMATCH

    @pytest.mark.asyncio
    async def test_readiness_polling(self, server_url):
        """A slow panel is read as soon as its ready marker appears."""
        catalog = _catalog(DemoIconCatalogReady, f"{server_url}/?delay=300")
        settings = ExtractionSettings.from_catalog(
            catalog, settle_delay_ms=0, poll_interval_ms=50, max_elements=3
        )

        async with PlaywrightDriver.open(catalog, settings=settings) as driver:
            result = await driver.run()

        assert [r["Icon name"] for r in result] == ["home", "search", "settings"]

    @pytest.mark.asyncio
    async def test_broken_panel_not_ready(self, server_url):
        """A panel that never shows the ready marker times out."""
        catalog = _catalog(
            DemoIconCatalogReady, f"{server_url}/?icons=bug_report&delay=10"
        )
        settings = ExtractionSettings.from_catalog(catalog, ready_timeout_ms=300)

        async with PlaywrightDriver.open(catalog, settings=settings) as driver:
            result = await driver.run()

        assert len(result) == 0
        assert result.skipped[0].reason is SkipReason.PANEL_NOT_READY

    @pytest.mark.asyncio
    async def test_delay_shorter_than_render(self, server_url):
        """A settle delay shorter than the render time yields skips."""
        catalog = _catalog(
            DemoIconCatalog, f"{server_url}/?delay=3000", settle_delay_ms=50
        )
        settings = ExtractionSettings.from_catalog(catalog, max_elements=2)

        async with PlaywrightDriver.open(catalog, settings=settings) as driver:
            result = await driver.run()

        assert len(result) == 0
        assert [s.reason for s in result.skipped] == [
            SkipReason.STRUCTURE_MISMATCH,
            SkipReason.STRUCTURE_MISMATCH,
        ]

    @pytest.mark.asyncio
    async def test_discovery_filters_candidates(self, server_url):
        """The decoy button without aria-haspopup is not discovered."""
        catalog = _catalog(DemoIconCatalog, f"{server_url}/")

        async with PlaywrightDriver.open(catalog) as driver:
            await driver.page.goto(catalog.url)
            elements = await driver.discover()

        assert [e.description for e in elements] == [
            f"button #{i} ({icon.name})" for i, icon in enumerate(ICONS)
        ]

    @pytest.mark.asyncio
    async def test_on_record_streams_records(self, server_url):
        callback, records = collect_records()
        catalog = _catalog(
            DemoIconCatalog, f"{server_url}/?icons=home,menu&delay=0", settle_delay_ms=100
        )

        async with PlaywrightDriver.open(catalog, on_record=callback) as driver:
            await driver.run()

        assert records == [
            {"Code point": "e88a", "Icon name": "home"},
            {"Code point": "e5d2", "Icon name": "menu"},
        ]

    @pytest.mark.asyncio
    async def test_empty_page(self, server_url):
        """A page without actionable elements yields an empty result set."""
        catalog = _catalog(DemoIconCatalog, f"{server_url}/empty", await_list=[])

        async with PlaywrightDriver.open(catalog) as driver:
            result = await driver.run()

        assert len(result) == 0
        assert result.skipped == []

    @pytest.mark.asyncio
    async def test_await_list_timeout(self, server_url):
        """An await_list condition that never holds aborts the run."""
        catalog = _catalog(
            DemoIconCatalog,
            f"{server_url}/",
            await_list=[WaitForSelector("#never-there", timeout=300)],
        )

        async with PlaywrightDriver.open(catalog) as driver:
            with pytest.raises(PageLoadException):
                await driver.run()
