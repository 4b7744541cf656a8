"""PageElement protocol for driver-agnostic panel reading.

A PageElement is always backed by static parsed HTML. The driver is
responsible for obtaining that HTML, for example by serializing the live
browser DOM right after an activation has settled. Extraction code never
touches live browser objects.
"""

from __future__ import annotations

from typing import Protocol


class PageElement(Protocol):
    """Protocol for querying a static snapshot of a panel.

    All query methods support count validation and raise
    HTMLStructuralAssumptionException if the actual count doesn't match
    expectations.
    """

    def query_xpath(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[PageElement]:
        """Query elements by XPath selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        ...

    def query_xpath_strings(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[str]:
        """Query string values (text nodes, attributes) by XPath selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        ...

    def query_css(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[PageElement]:
        """Query elements by CSS selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        ...

    def query(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[PageElement]:
        """Query elements by a selector of either type.

        XPath or CSS is decided by selector_utils.selector_type().
        """
        ...

    def text_content(self) -> str:
        """Visible text content of the element and its descendants."""
        ...

    def get_attribute(self, name: str) -> str | None:
        """Value of the attribute, or None if it doesn't exist."""
        ...

    def tag_name(self) -> str:
        """Tag name as a lowercase string."""
        ...

    def attributes(self) -> dict[str, str]:
        """All attributes of the element."""
        ...
