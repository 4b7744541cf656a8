"""Playwright driver for interface-driven extraction.

This driver operates a real browser for a catalog declaration while keeping
extraction pure:

1. Open the catalog page and wait for its await_list conditions
2. Discover actionable elements with the catalog's ElementQuery
3. Activate elements by clicking them, one at a time
4. Serialize the rendered DOM after each activation and parse it with LXML
5. Hand only static PageElement snapshots to the FieldExtractor

Key features:
- Per-element discovery filtering (container AND every attribute predicate)
- DOM snapshot model: no live browser references reach extraction code
- Fixed settle delay or bounded readiness polling per activation
- Rate limiting of activations via pyrate_limiter
- Browser lifecycle management through an async context manager
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from playwright.async_api import (
    Browser,
    Locator,
    Page,
    async_playwright,
)
from playwright.async_api import (
    TimeoutError as PlaywrightTimeoutError,
)
from pyrate_limiter import InMemoryBucket, Limiter

from panelscrape.common.exceptions import PageLoadException
from panelscrape.common.lxml_page_element import LxmlPageElement
from panelscrape.common.selector_utils import selector_type
from panelscrape.common.settings import ExtractionSettings
from panelscrape.data_types import (
    BaseCatalog,
    ResultSet,
    WaitForLoadState,
    WaitForSelector,
    WaitForTimeout,
)
from panelscrape.extractor import InteractiveExtractor, RecordCallback

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pyrate_limiter import Rate

    from panelscrape.data_types import PageWaitCondition

logger = logging.getLogger(__name__)

_ATTRIBUTES_JS = (
    "el => Object.fromEntries(Array.from(el.attributes, a => [a.name, a.value]))"
)


def playwright_selector(selector: str) -> str:
    """Prefix XPath selectors so Playwright never guesses the engine."""
    if selector_type(selector) == "xpath":
        return f"xpath={selector}"
    return selector


class PlaywrightElement:
    """An actionable element backed by a Playwright locator.

    Attributes:
        locator: Locator resolving to exactly this element.
        description: Human-readable description used in logs and records.
        timeout_ms: Maximum time a click may take.
    """

    def __init__(self, locator: Locator, description: str, timeout_ms: int) -> None:
        self.locator = locator
        self.description = description
        self.timeout_ms = timeout_ms

    async def activate(self) -> None:
        await self.locator.click(timeout=self.timeout_ms)

    def __repr__(self) -> str:
        return f"PlaywrightElement({self.description!r})"


class PlaywrightPanel:
    """Panel source that snapshots the whole rendered page."""

    def __init__(self, page: Page) -> None:
        self.page = page

    async def snapshot(self, element_description: str = "") -> LxmlPageElement:
        content = await self.page.content()
        return LxmlPageElement.from_html(content, element_description)


class PlaywrightDriver:
    """Playwright-based driver for one catalog declaration.

    Args:
        catalog: The catalog to extract.
        page: Playwright page to operate.
        settings: Timing and policy settings (default: from the catalog).
        rate_limiter: Optional limiter; one token per activation.
        on_record: Optional callback receiving each record dict.

    Example:
        async with PlaywrightDriver.open(IconCatalog()) as driver:
            result = await driver.run()
        print(result.to_json())
    """

    def __init__(
        self,
        catalog: BaseCatalog,
        page: Page,
        settings: ExtractionSettings | None = None,
        rate_limiter: Limiter | None = None,
        on_record: RecordCallback | None = None,
    ) -> None:
        """Initialize the Playwright driver.

        Note: Use PlaywrightDriver.open() to get a browser-backed instance.
        """
        self.catalog = catalog
        self.page = page
        self.settings = settings or ExtractionSettings.from_catalog(catalog)
        self.rate_limiter = rate_limiter
        self.on_record = on_record

    @classmethod
    @asynccontextmanager
    async def open(
        cls,
        catalog: BaseCatalog,
        browser_type: str = "chromium",
        headless: bool = True,
        viewport: dict[str, int] | None = None,
        user_agent: str | None = None,
        locale: str = "en-US",
        timezone_id: str = "America/New_York",
        settings: ExtractionSettings | None = None,
        rates: list[Rate] | None = None,
        on_record: RecordCallback | None = None,
    ) -> AsyncIterator[PlaywrightDriver]:
        """Open a browser for the catalog as an async context manager.

        Args:
            catalog: The catalog to extract.
            browser_type: "chromium", "firefox", or "webkit" (default: "chromium").
            headless: Run browser in headless mode (default: True).
            viewport: Browser viewport size (default: None = 1280x720).
            user_agent: Custom user agent string (default: browser default).
            locale: Browser locale (default: "en-US").
            timezone_id: Browser timezone (default: "America/New_York").
            settings: Timing and policy settings (default: from the catalog).
            rates: Rate limits overriding catalog.rate_limits.
            on_record: Optional callback receiving each record dict.

        Yields:
            Initialized PlaywrightDriver instance.
        """
        if viewport is None:
            viewport = {"width": 1280, "height": 720}

        rate_limiter = None
        effective_rates = rates or catalog.rate_limits
        if effective_rates:
            rate_limiter = Limiter(InMemoryBucket(list(effective_rates)))
            logger.info(
                f"Rate limiter initialized with {len(effective_rates)} rate(s): "
                + ", ".join(f"{r.limit}/{r.interval}ms" for r in effective_rates)
            )

        playwright = await async_playwright().start()
        try:
            browser_launcher = getattr(playwright, browser_type)
            browser: Browser = await browser_launcher.launch(headless=headless)

            try:
                context_kwargs: dict[str, Any] = {
                    "viewport": viewport,
                    "locale": locale,
                    "timezone_id": timezone_id,
                }
                if user_agent:
                    context_kwargs["user_agent"] = user_agent

                browser_context = await browser.new_context(**context_kwargs)

                try:
                    page = await browser_context.new_page()
                    yield cls(
                        catalog=catalog,
                        page=page,
                        settings=settings,
                        rate_limiter=rate_limiter,
                        on_record=on_record,
                    )
                finally:
                    await browser_context.close()

            finally:
                await browser.close()

        finally:
            await playwright.stop()

    async def run(self) -> ResultSet:
        """Open the catalog page, discover its elements and extract them.

        Returns:
            The completed ResultSet.

        Raises:
            ValueError: If the catalog declaration is incomplete.
            PageLoadException: If the page or its await_list never settled.
        """
        self.catalog.check()
        url = self.catalog.url

        logger.info(f"Opening {url}")
        try:
            await self.page.goto(url, wait_until="domcontentloaded")
        except PlaywrightTimeoutError as e:
            raise PageLoadException(url, f"navigation timeout: {e}") from e
        await self._process_await_list(self.page, self.catalog.await_list)

        elements = await self.discover()

        extractor = InteractiveExtractor(
            fields=self.catalog.fields,
            panel=PlaywrightPanel(self.page),
            section_selector=self.catalog.section_selector,
            settings=self.settings,
            ready=self.catalog.ready,
            rate_limiter=self.rate_limiter,
            on_record=self.on_record,
        )
        return await extractor.extract_all(elements)

    async def discover(self) -> list[PlaywrightElement]:
        """Find the actionable elements of the current page.

        Every candidate inside every container is checked against the
        query's predicates using that candidate's own attributes.

        Returns:
            Matching elements in document order.
        """
        query = self.catalog.element_query
        assert query is not None, "Catalog must declare element_query"

        candidates = self.page.locator(playwright_selector(query.container)).locator(
            playwright_selector(query.candidate)
        )
        count = await candidates.count()

        elements: list[PlaywrightElement] = []
        for i in range(count):
            candidate = candidates.nth(i)
            attributes: dict[str, str] = await candidate.evaluate(_ATTRIBUTES_JS)
            if not query.matches(attributes):
                continue

            label = attributes.get("aria-label") or (
                (await candidate.text_content()) or ""
            ).strip()
            description = f"{query.candidate} #{i}"
            if label:
                description = f"{description} ({label})"

            elements.append(
                PlaywrightElement(
                    candidate, description, self.settings.activation_timeout_ms
                )
            )

        logger.info(
            f"Discovered {len(elements)} actionable element(s) "
            f"among {count} candidate(s)"
        )
        return elements

    async def _process_await_list(
        self, page: Page, await_list: list[PageWaitCondition]
    ) -> None:
        """Wait for page-load conditions before discovery.

        Raises:
            PageLoadException: If a wait condition times out.
        """
        for condition in await_list:
            try:
                if isinstance(condition, WaitForSelector):
                    await page.wait_for_selector(
                        playwright_selector(condition.selector),
                        state=condition.state,
                        timeout=condition.timeout,
                    )

                elif isinstance(condition, WaitForLoadState):
                    await page.wait_for_load_state(
                        condition.state, timeout=condition.timeout
                    )

                elif isinstance(condition, WaitForTimeout):
                    await asyncio.sleep(condition.timeout / 1000.0)

                else:
                    logger.warning(
                        f"Unknown wait condition type: {type(condition)}"
                    )

            except PlaywrightTimeoutError as e:
                raise PageLoadException(
                    page.url, f"wait condition timeout: {condition}"
                ) from e
