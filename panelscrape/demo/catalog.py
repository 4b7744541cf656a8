"""Catalog declaration for the demo icon catalog.

Run the demo website first (``python -m panelscrape.demo.run_demo``), then::

    panelscrape run panelscrape.demo.catalog:DemoIconCatalog
"""

from pyrate_limiter import Duration, Rate

from panelscrape.data_types import (
    AttributePredicate,
    BaseCatalog,
    CatalogStatus,
    ElementQuery,
    FieldLocator,
    WaitForSelector,
)


class DemoIconCatalog(BaseCatalog):
    """Icon name and code point of every icon on the demo site.

    Uses the fixed settle delay; see DemoIconCatalogReady for the polling
    variant.
    """

    url = "http://127.0.0.1:8080/"
    element_query = ElementQuery(
        container="[role='listbox'][aria-label='Icons']",
        candidate="button",
        predicates=(
            AttributePredicate("role", "option"),
            AttributePredicate("aria-haspopup", "dialog"),
        ),
    )
    section_selector = "//aside[@id='detail']//section"
    fields = [
        FieldLocator("Code point", "Code point", ".//code"),
        FieldLocator("Icon name", "Icon name", ".//span[@class='value']"),
    ]

    settle_delay_ms = 400
    rate_limits = [Rate(10, Duration.SECOND)]
    await_list = [WaitForSelector("[role='listbox'] button")]

    status = CatalogStatus.ACTIVE
    version = "2026-10-19"
    description = "Demo icon catalog (fixed settle delay)"


class DemoIconCatalogReady(DemoIconCatalog):
    """Same extraction, waiting for the panel's ready marker instead."""

    ready = WaitForSelector("//aside[@id='detail']/div[@class='ready']", timeout=2000)
    description = "Demo icon catalog (readiness polling)"
