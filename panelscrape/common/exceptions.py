"""Exception types for extraction failures.

Two kinds of failure exist while processing one element: the element could
not be activated, or the transient panel it produced could not be read. Both
are recovered by the extractor, which turns them into skip diagnostics.
"""

from typing import Any


class ExtractionAssumptionException(Exception):
    """Base class for extraction assumption violations.

    Extraction makes assumptions about how a panel is structured and how
    quickly it renders. When one of these assumptions is violated, the
    subclass carries enough context to tell which element was being read and
    what was expected.
    """

    def __init__(
        self,
        message: str,
        element: str = "",
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable description of the assumption violation.
            element: Description of the element whose panel was being read.
            context: Optional dict of additional context (selector, counts, etc).
        """
        self.message = message
        self.element = element
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context.

        Returns:
            Formatted error message string.
        """
        parts = [self.message]
        if self.element:
            parts.append(f"Element: {self.element}")

        if self.context:
            parts.append("Context:")
            for key, value in self.context.items():
                parts.append(f"  {key}: {value}")

        return "\n".join(parts)


class HTMLStructuralAssumptionException(ExtractionAssumptionException):
    """Raised when panel HTML doesn't match expectations.

    Raised when an XPath or CSS selector returns a different number of nodes
    than expected: no candidate sections in the panel, or a matching section
    that lacks the value node. Usually the panel has not rendered yet or the
    page markup has changed.

    Attributes:
        selector: The XPath or CSS selector that was used.
        selector_type: Type of selector ("xpath" or "css").
        is_element_query: True if querying for elements, False for strings.
    """

    def __init__(
        self,
        selector: str,
        selector_type: str,
        description: str,
        expected_min: int,
        expected_max: int | None,
        actual_count: int,
        element: str = "",
        is_element_query: bool = True,
    ) -> None:
        """Initialize the exception.

        Args:
            selector: The XPath or CSS selector that was used.
            selector_type: Type of selector ("xpath" or "css").
            description: Human-readable description of what was being selected.
            expected_min: Minimum number of nodes expected.
            expected_max: Maximum number of nodes expected (None = unlimited).
            actual_count: Actual number of nodes found.
            element: Description of the element whose panel was being read.
            is_element_query: True if querying for elements (default), False for strings.
        """
        self.selector = selector
        self.selector_type = selector_type
        self.description = description
        self.expected_min = expected_min
        self.expected_max = expected_max
        self.actual_count = actual_count
        self.is_element_query = is_element_query

        if expected_max is None:
            expected_str = f"at least {expected_min}"
        elif expected_min == expected_max:
            expected_str = f"exactly {expected_min}"
        else:
            expected_str = f"between {expected_min} and {expected_max}"

        message = (
            f"HTML structure mismatch: Expected {expected_str} "
            f"nodes for '{description}', but found {actual_count}"
        )

        context = {
            "selector": selector,
            "selector_type": selector_type,
            "expected_min": expected_min,
            "expected_max": expected_max
            if expected_max is not None
            else "unlimited",
            "actual_count": actual_count,
        }

        super().__init__(message, element, context)


class PanelNotReadyException(ExtractionAssumptionException):
    """Raised when the readiness selector never appeared in the panel.

    Attributes:
        selector: The readiness selector that was polled.
        attempts: How many snapshots were checked.
        timeout_ms: The configured readiness timeout in milliseconds.
    """

    def __init__(
        self,
        selector: str,
        attempts: int,
        timeout_ms: int,
        element: str = "",
    ) -> None:
        self.selector = selector
        self.attempts = attempts
        self.timeout_ms = timeout_ms

        message = (
            f"Panel not ready: '{selector}' absent after {attempts} "
            f"snapshot(s) ({timeout_ms}ms)"
        )
        super().__init__(
            message,
            element,
            {"selector": selector, "attempts": attempts},
        )


class AmbiguousFieldException(ExtractionAssumptionException):
    """Raised when several panel sections match one field marker.

    Only raised under TieBreak.ERROR; the FIRST and LAST policies resolve the
    ambiguity instead.

    Attributes:
        field_name: The field whose marker matched more than once.
        marker: The marker text.
        match_count: Number of matching sections.
    """

    def __init__(
        self,
        field_name: str,
        marker: str,
        match_count: int,
        element: str = "",
    ) -> None:
        self.field_name = field_name
        self.marker = marker
        self.match_count = match_count

        message = (
            f"Field '{field_name}' is ambiguous: marker '{marker}' "
            f"matched {match_count} sections"
        )
        super().__init__(
            message,
            element,
            {"field": field_name, "marker": marker, "matches": match_count},
        )


class PageLoadException(Exception):
    """Raised when the catalog page could not be opened or never settled.

    Unlike per-element failures this ends the run: without the page there
    is nothing to discover.

    Attributes:
        url: The page URL.
        message: Human-readable error message.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.message = f"Could not load {url}: {reason}"
        super().__init__(self.message)


class ActivationException(Exception):
    """Raised when an element could not be activated.

    Wraps whatever the element's activation raised (a click timeout, a
    detached node, an unexpected UI state).

    Attributes:
        element: Description of the element.
        message: Human-readable error message.
    """

    def __init__(self, element: str, cause: BaseException) -> None:
        """Initialize the exception.

        Args:
            element: Description of the element.
            cause: The exception raised by the activation.
        """
        self.element = element
        self.message = (
            f"Activation of {element} failed: {type(cause).__name__}: {cause}"
        )
        super().__init__(self.message)
