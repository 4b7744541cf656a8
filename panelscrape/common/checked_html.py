"""Checked HTML element wrapper for count-validated querying.

CheckedHtmlElement wraps an lxml.html.HtmlElement and validates selector
results against expected counts, so that a panel which has not rendered (or
whose markup changed) fails loudly with HTMLStructuralAssumptionException
instead of yielding silently empty values.
"""

from __future__ import annotations

from typing import overload

from lxml.html import HtmlElement

from panelscrape.common.exceptions import (
    HTMLStructuralAssumptionException,
)


class CheckedHtmlElement:
    """Wrapper around HtmlElement with validated selectors.

    checked_xpath() and checked_css() compare the number of results with the
    expected min/max counts and raise HTMLStructuralAssumptionException on a
    mismatch. Results are wrapped again so nested queries stay checked.
    """

    def __init__(self, element: HtmlElement, element_description: str = "") -> None:
        """Initialize the checked element wrapper.

        Args:
            element: The lxml HtmlElement to wrap.
            element_description: Description of the activated element whose
                panel this tree belongs to, used for error context.
        """
        self._element = element
        self._element_description = element_description

    @overload
    def checked_xpath(
        self,
        xpath: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
        *,
        type: type[str],
    ) -> list[str]: ...

    @overload
    def checked_xpath(
        self,
        xpath: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[CheckedHtmlElement]: ...

    def checked_xpath(
        self,
        xpath: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
        *,
        type: type[str] | None = None,
    ) -> list[CheckedHtmlElement] | list[str]:
        """Execute XPath query with count validation.

        Args:
            xpath: XPath expression to execute.
            description: Human-readable description of what's being selected.
            min_count: Minimum number of results expected (default: 1).
            max_count: Maximum number of results expected (None = unlimited).
            type: Pass `str` to return only string results (text/attributes).
                If omitted, returns only CheckedHtmlElements.

        Returns:
            List of matching results filtered by type.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match expectations.

        Example::

            panel = CheckedHtmlElement(lxml.html.fromstring(html))
            sections = panel.checked_xpath("//section", "panel sections")
            codes = panel.checked_xpath("//code/text()", "codes", type=str)
        """
        results = self._element.xpath(xpath)
        if not isinstance(results, list):
            # Scalar XPath results (string(), count()) are treated as one string
            results = [str(results)]

        if type is str:
            filtered: list[str] = [str(r) for r in results if isinstance(r, str)]
            self._check_count(
                xpath, "xpath", description, min_count, max_count,
                len(filtered), is_element_query=False,
            )
            return filtered

        wrapped: list[CheckedHtmlElement] = [
            CheckedHtmlElement(r, self._element_description)
            for r in results
            if isinstance(r, HtmlElement)
        ]
        self._check_count(
            xpath, "xpath", description, min_count, max_count, len(wrapped)
        )
        return wrapped

    def checked_css(
        self,
        selector: str,
        description: str,
        min_count: int = 1,
        max_count: int | None = None,
    ) -> list[CheckedHtmlElement]:
        """Execute CSS selector query with count validation.

        Args:
            selector: CSS selector expression.
            description: Human-readable description of what's being selected.
            min_count: Minimum number of elements expected (default: 1).
            max_count: Maximum number of elements expected (None = unlimited).

        Returns:
            List of matching CheckedHtmlElements.

        Raises:
            HTMLStructuralAssumptionException: If count doesn't match
                expectations or the selector cannot be compiled.
        """
        try:
            results = self._element.cssselect(selector)
        except Exception as e:
            raise HTMLStructuralAssumptionException(
                selector=selector,
                selector_type="css",
                description=description,
                expected_min=min_count,
                expected_max=max_count,
                actual_count=0,
                element=self._element_description,
            ) from e

        self._check_count(
            selector, "css", description, min_count, max_count, len(results)
        )
        return [
            CheckedHtmlElement(result, self._element_description)
            for result in results
        ]

    def _check_count(
        self,
        selector: str,
        selector_type: str,
        description: str,
        min_count: int,
        max_count: int | None,
        actual_count: int,
        is_element_query: bool = True,
    ) -> None:
        if actual_count < min_count or (
            max_count is not None and actual_count > max_count
        ):
            raise HTMLStructuralAssumptionException(
                selector=selector,
                selector_type=selector_type,
                description=description,
                expected_min=min_count,
                expected_max=max_count,
                actual_count=actual_count,
                element=self._element_description,
                is_element_query=is_element_query,
            )

    def __getattr__(self, name: str):
        """Delegate all other attributes to the wrapped element."""
        return getattr(self._element, name)
