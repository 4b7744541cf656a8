"""Data types for the extractor and its drivers.

This module defines the values passed between a catalog declaration, the
driver that operates the browser, and the extractor that reads panels:

1. Declarative - catalogs are classes whose ClassVars describe a target page
2. Immutable - locators, queries and records are frozen dataclasses
3. Explicit - every element ends as either an ExtractionRecord or a
   SkippedElement, never as a silent gap
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from pyrate_limiter import Rate


# =============================================================================
# Catalog metadata
# =============================================================================


class CatalogStatus(Enum):
    """Status of a catalog declaration's lifecycle.

    Values:
        IN_DEVELOPMENT: Selectors are still being worked out.
        ACTIVE: Catalog is working and maintained.
        RETIRED: The target page changed and the catalog is no longer kept up.
    """

    IN_DEVELOPMENT = "in_development"
    ACTIVE = "active"
    RETIRED = "retired"


class TieBreak(Enum):
    """Policy for a field marker that matches more than one panel section.

    Values:
        FIRST: The first matching section in document order wins.
        LAST: Every matching section is read and the last one wins.
        ERROR: More than one match is an extraction failure.
    """

    FIRST = "first"
    LAST = "last"
    ERROR = "error"


# =============================================================================
# Discovery
# =============================================================================


@dataclass(frozen=True)
class AttributePredicate:
    """Requirement on one attribute of a candidate element.

    Attributes:
        name: Attribute name, e.g. "aria-haspopup".
        value: Required value. None only requires the attribute to be present.
    """

    name: str
    value: str | None = None

    def matches(self, attributes: Mapping[str, str]) -> bool:
        if self.name not in attributes:
            return False
        return self.value is None or attributes[self.name] == self.value


@dataclass(frozen=True)
class ElementQuery:
    """Structural description of the actionable elements on a page.

    A candidate is actionable when it sits inside a `container` AND every
    predicate holds on the candidate's own attributes.

    Attributes:
        container: Selector for the grouping container(s).
        candidate: Selector for candidate controls, relative to a container.
        predicates: Attribute predicates that must all match.
    """

    container: str
    candidate: str = "button"
    predicates: tuple[AttributePredicate, ...] = ()

    def matches(self, attributes: Mapping[str, str]) -> bool:
        """Check one candidate's attributes against every predicate."""
        return all(p.matches(attributes) for p in self.predicates)


# =============================================================================
# Extraction
# =============================================================================


@dataclass(frozen=True)
class FieldLocator:
    """How to find one field's value inside a transient panel.

    Attributes:
        name: Key under which the value is stored, e.g. "Code point".
        marker: Text searched for in each candidate panel section.
        value_selector: XPath or CSS selector, relative to the matching
            section, for the node holding the value.
        attribute: If set, the value is this attribute of the node rather
            than its text.
    """

    name: str
    marker: str
    value_selector: str
    attribute: str | None = None


@dataclass(frozen=True)
class ExtractionRecord:
    """Fields extracted for one successfully processed element.

    The mapping is partial: a field whose marker matched no section is
    absent, not present with an empty value.

    Attributes:
        index: Position of the element in the activation order.
        element: Human-readable description of the element.
        values: Read-only mapping of field name to extracted text.
    """

    index: int
    element: str
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Since the dataclass is frozen, we need to use object.__setattr__
        object.__setattr__(
            self, "values", MappingProxyType(dict(self.values))
        )

    def __getitem__(self, name: str) -> str:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def keys(self):
        return self.values.keys()

    def to_dict(self) -> dict[str, str]:
        return dict(self.values)


class SkipReason(Enum):
    """Why an element contributed no record.

    Values:
        ACTIVATION_FAILED: Activating the element raised.
        PANEL_NOT_READY: The readiness selector never appeared.
        STRUCTURE_MISMATCH: Panel sections or a value node were missing.
        AMBIGUOUS_FIELD: A marker matched several sections under TieBreak.ERROR.
        EXTRACTION_ERROR: Any other error while reading the panel.
    """

    ACTIVATION_FAILED = "activation_failed"
    PANEL_NOT_READY = "panel_not_ready"
    STRUCTURE_MISMATCH = "structure_mismatch"
    AMBIGUOUS_FIELD = "ambiguous_field"
    EXTRACTION_ERROR = "extraction_error"

    @property
    def kind(self) -> str:
        """Either "activation" or "extraction"."""
        if self is SkipReason.ACTIVATION_FAILED:
            return "activation"
        return "extraction"


@dataclass(frozen=True)
class SkippedElement:
    """Diagnostic for an element that was dropped from the result set.

    Attributes:
        index: Position of the element in the activation order.
        element: Human-readable description of the element.
        reason: Classification of the failure.
        error: The failure's message.
    """

    index: int
    element: str
    reason: SkipReason
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "element": self.element,
            "reason": self.reason.value,
            "error": self.error,
        }


class ResultSet:
    """Ordered records of a run, with the skipped elements alongside.

    Iteration, indexing and len() cover records only, in activation order.
    The skipped diagnostics are kept in `skipped`.
    """

    def __init__(self, field_names: tuple[str, ...] = ()) -> None:
        self.field_names = field_names
        self.records: list[ExtractionRecord] = []
        self.skipped: list[SkippedElement] = []

    def add_record(self, record: ExtractionRecord) -> None:
        self.records.append(record)

    def add_skip(self, skipped: SkippedElement) -> None:
        self.skipped.append(skipped)

    @property
    def attempted(self) -> int:
        """Number of elements processed, successfully or not."""
        return len(self.records) + len(self.skipped)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ExtractionRecord]:
        return iter(self.records)

    def __getitem__(self, index: int) -> ExtractionRecord:
        return self.records[index]

    def __repr__(self) -> str:
        return (
            f"ResultSet(records={len(self.records)}, "
            f"skipped={len(self.skipped)})"
        )

    def to_dicts(self) -> list[dict[str, str]]:
        """Records as plain field-keyed dicts, in activation order."""
        return [record.to_dict() for record in self.records]

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dicts(), indent=indent, ensure_ascii=False)


# =============================================================================
# Wait conditions
# =============================================================================


@dataclass(frozen=True)
class WaitForSelector:
    """Wait for a selector to appear.

    In a catalog's `await_list` the driver waits on the live page, honoring
    `state`. As a catalog's `ready` condition it replaces the fixed settle
    delay: the extractor polls panel snapshots until the selector matches,
    which only checks presence.

    Attributes:
        selector: CSS or XPath selector to wait for.
        state: 'attached', 'detached', 'visible' or 'hidden'. Defaults to 'visible'.
        timeout: Optional timeout in milliseconds. If None, uses the default.
    """

    selector: str
    state: str = "visible"
    timeout: int | None = None


@dataclass(frozen=True)
class WaitForLoadState:
    """Wait for a page load state before discovery.

    Attributes:
        state: Load state to wait for ('load', 'domcontentloaded', 'networkidle').
        timeout: Optional timeout in milliseconds. If None, uses Playwright's default.
    """

    state: str = "load"
    timeout: int | None = None


@dataclass(frozen=True)
class WaitForTimeout:
    """Wait for a fixed amount of time before discovery.

    Attributes:
        timeout: Time to wait in milliseconds.
    """

    timeout: int


PageWaitCondition = WaitForSelector | WaitForLoadState | WaitForTimeout


# =============================================================================
# Catalog declaration
# =============================================================================


class BaseCatalog:
    """Base class for catalog declarations.

    A catalog describes one page whose elements each open a transient detail
    panel: where the page is, how to find its actionable elements, where the
    panel's sections are, which fields to read, and how to pace the run.

    Example:
        class IconCatalog(BaseCatalog):
            url = "https://example.com/icons"
            element_query = ElementQuery(
                container="[aria-label='Icons']",
                candidate="button",
                predicates=(
                    AttributePredicate("role", "option"),
                    AttributePredicate("aria-haspopup", "dialog"),
                ),
            )
            section_selector = "//aside//section"
            fields = [
                FieldLocator("Code point", "Code point", ".//code"),
            ]

    Class Attributes:
        url: Page to open before discovery.
        element_query: Discovery criteria for actionable elements.
        section_selector: Selector for the candidate sections of a panel.
        fields: Ordered field locators.
        settle_delay_ms: Fixed wait after each activation.
        ready: Optional readiness condition replacing the fixed wait.
        tie_break: Policy for markers matching several sections.
        rate_limits: Optional pyrate_limiter rates applied to activations.
        await_list: Conditions to wait for after the page loads.
        status: Lifecycle status.
        version: Version string for this catalog (e.g., "2026-10-01").
        description: One-line description shown by the CLI.
    """

    url: ClassVar[str] = ""
    element_query: ClassVar[ElementQuery | None] = None
    section_selector: ClassVar[str] = ""
    fields: ClassVar[list[FieldLocator]] = []

    settle_delay_ms: ClassVar[int] = 500
    ready: ClassVar[WaitForSelector | None] = None
    tie_break: ClassVar[TieBreak] = TieBreak.FIRST
    rate_limits: ClassVar[list[Rate] | None] = None
    await_list: ClassVar[list[PageWaitCondition]] = []

    status: ClassVar[CatalogStatus] = CatalogStatus.IN_DEVELOPMENT
    version: ClassVar[str] = ""
    description: ClassVar[str] = ""

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(locator.name for locator in cls.fields)

    @classmethod
    def check(cls) -> None:
        """Verify that the declaration is complete.

        Raises:
            ValueError: If a required class attribute is missing or the field
                names are not unique.
        """
        missing = [
            name
            for name in ("url", "element_query", "section_selector", "fields")
            if not getattr(cls, name)
        ]
        if missing:
            raise ValueError(
                f"{cls.__name__} must declare: {', '.join(missing)}"
            )
        names = cls.field_names()
        if len(set(names)) != len(names):
            raise ValueError(f"{cls.__name__} has duplicate field names")
