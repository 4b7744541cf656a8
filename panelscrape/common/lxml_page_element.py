"""LxmlPageElement implementation wrapping CheckedHtmlElement.

This is the PageElement implementation every driver hands to the extractor.
Panel snapshots are parsed once with lxml.html and queried through
CheckedHtmlElement so that count expectations are enforced.
"""

from __future__ import annotations

from lxml import html

from panelscrape.common.checked_html import CheckedHtmlElement
from panelscrape.common.selector_utils import selector_type


class LxmlPageElement:
    """Implementation of the PageElement protocol wrapping CheckedHtmlElement.

    Attributes:
        _element: The underlying CheckedHtmlElement.
    """

    def __init__(self, element: CheckedHtmlElement):
        self._element = element

    @classmethod
    def from_html(
        cls, content: str, element_description: str = ""
    ) -> LxmlPageElement:
        """Parse an HTML document or fragment into a page element.

        Args:
            content: Serialized HTML, typically a full DOM snapshot.
            element_description: Description of the activated element the
                snapshot was taken for, used in error messages.

        Returns:
            LxmlPageElement rooted at the parsed document.
        """
        return cls(
            CheckedHtmlElement(
                html.fromstring(content), element_description
            )
        )

    def query_xpath(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[LxmlPageElement]:
        """Query elements by XPath selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        checked_elements = self._element.checked_xpath(
            selector, description, min_count, max_count
        )
        return [LxmlPageElement(elem) for elem in checked_elements]

    def query_xpath_strings(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[str]:
        """Query string values by XPath selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        return self._element.checked_xpath(
            selector, description, min_count, max_count, type=str
        )

    def query_css(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[LxmlPageElement]:
        """Query elements by CSS selector.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.
        """
        checked_elements = self._element.checked_css(
            selector, description, min_count, max_count
        )
        return [LxmlPageElement(elem) for elem in checked_elements]

    def query(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[LxmlPageElement]:
        """Query elements by XPath or CSS, whichever the selector looks like."""
        if selector_type(selector) == "xpath":
            return self.query_xpath(selector, description, min_count, max_count)
        return self.query_css(selector, description, min_count, max_count)

    def text_content(self) -> str:
        return self._element.text_content()

    def get_attribute(self, name: str) -> str | None:
        return self._element.get(name)

    def tag_name(self) -> str:
        return self._element.tag.lower()

    def attributes(self) -> dict[str, str]:
        """All attributes of the element as a plain dict."""
        return dict(self._element.attrib)
