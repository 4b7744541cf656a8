"""Sequential interactive extraction.

InteractiveExtractor walks an ordered collection of actionable elements. For
each one it activates the element, waits for the transient panel to settle,
takes a static snapshot of the panel and reads the configured fields from it.
Exactly one panel is live at a time, so elements are processed strictly one
after another: the next activation never starts before the current element
has produced a record or been skipped.

A failing element never aborts the run. It is recorded as a SkippedElement
with a SkipReason and the loop moves on.

Example::

    extractor = InteractiveExtractor(
        fields=[FieldLocator("Icon name", "Icon name", ".//span")],
        panel=panel,
        section_selector="//aside//section",
    )
    result = await extractor.extract_all(elements)
    print(result.to_json())
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from panelscrape.common.exceptions import (
    ActivationException,
    AmbiguousFieldException,
    HTMLStructuralAssumptionException,
    PanelNotReadyException,
)
from panelscrape.common.selector_utils import targets_elements
from panelscrape.common.settings import ExtractionSettings
from panelscrape.data_types import (
    ExtractionRecord,
    FieldLocator,
    ResultSet,
    SkippedElement,
    SkipReason,
    TieBreak,
    WaitForSelector,
)

if TYPE_CHECKING:
    from panelscrape.common.page_element import PageElement

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]
RecordCallback = Callable[[dict[str, str]], None]
# (tag, sorted attributes, text) of one readiness marker node
Marker = tuple[str, tuple[tuple[str, str], ...], str]


class ActionableElement(Protocol):
    """A UI control whose activation produces a transient panel."""

    description: str

    async def activate(self) -> None: ...


class PanelSource(Protocol):
    """Provides static snapshots of the currently live panel."""

    async def snapshot(self, element_description: str = "") -> PageElement: ...


class FieldExtractor:
    """Reads named fields out of one panel snapshot.

    Candidate sections are selected with `section_selector`. For each field
    locator, sections whose text contains the locator's marker are matched in
    document order and the value is read from the matching section with the
    locator's sub-selector. A field with no matching section is left out of
    the result.

    Args:
        fields: Ordered field locators.
        section_selector: XPath or CSS selector for candidate panel sections.
        tie_break: Which matching section wins when several match one marker.
    """

    def __init__(
        self,
        fields: Sequence[FieldLocator],
        section_selector: str,
        tie_break: TieBreak = TieBreak.FIRST,
    ) -> None:
        self.fields = tuple(fields)
        self.section_selector = section_selector
        self.tie_break = tie_break

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(locator.name for locator in self.fields)

    def extract(self, panel: PageElement, element: str = "") -> dict[str, str]:
        """Extract every locatable field from a panel snapshot.

        Args:
            panel: Snapshot of the page (or panel) after activation.
            element: Description of the activated element, for errors.

        Returns:
            Field name to value, in locator order, for matched fields only.

        Raises:
            HTMLStructuralAssumptionException: If the panel has no candidate
                sections, or a matching section lacks the value node.
            AmbiguousFieldException: If a marker matches several sections
                under TieBreak.ERROR.
        """
        sections = panel.query(
            self.section_selector, "panel sections", min_count=1
        )
        texts = [section.text_content() for section in sections]

        values: dict[str, str] = {}
        for locator in self.fields:
            matching = [
                section
                for section, text in zip(sections, texts)
                if locator.marker in text
            ]
            if not matching:
                continue

            if self.tie_break is TieBreak.ERROR and len(matching) > 1:
                raise AmbiguousFieldException(
                    locator.name, locator.marker, len(matching), element
                )
            if self.tie_break is not TieBreak.LAST:
                matching = matching[:1]

            # Under LAST every match overwrites the previous one
            for section in matching:
                values[locator.name] = self._read_value(
                    section, locator, element
                )

        return values

    def _read_value(
        self, section: PageElement, locator: FieldLocator, element: str
    ) -> str:
        description = f"value of '{locator.name}'"

        if not targets_elements(locator.value_selector):
            strings = section.query_xpath_strings(
                locator.value_selector, description, min_count=1
            )
            return strings[0].strip()

        node = section.query(locator.value_selector, description, min_count=1)[0]
        if locator.attribute is None:
            return node.text_content().strip()

        value = node.get_attribute(locator.attribute)
        if value is None:
            raise HTMLStructuralAssumptionException(
                selector=f"{locator.value_selector} @{locator.attribute}",
                selector_type="attribute",
                description=description,
                expected_min=1,
                expected_max=1,
                actual_count=0,
                element=element,
                is_element_query=False,
            )
        return value.strip()


def _classify(error: Exception) -> SkipReason:
    if isinstance(error, ActivationException):
        return SkipReason.ACTIVATION_FAILED
    if isinstance(error, PanelNotReadyException):
        return SkipReason.PANEL_NOT_READY
    if isinstance(error, AmbiguousFieldException):
        return SkipReason.AMBIGUOUS_FIELD
    if isinstance(error, HTMLStructuralAssumptionException):
        return SkipReason.STRUCTURE_MISMATCH
    return SkipReason.EXTRACTION_ERROR


class InteractiveExtractor:
    """Activates elements one at a time and accumulates extraction records.

    After each activation the extractor settles before reading the panel:

    - With no readiness condition, it sleeps for `settings.settle_delay_ms`.
      This is a best-effort wait; a panel that renders slower than the delay
      yields a skipped element rather than a longer wait.
    - With a readiness condition, it polls panel snapshots for the condition's
      selector every `settings.poll_interval_ms`, for at most
      `settings.ready_attempts` snapshots, and reads the first snapshot in
      which a marker produced by this activation is present. One extra
      snapshot before each activation records the markers already shown.

    Args:
        fields: Ordered field locators.
        panel: Source of panel snapshots.
        section_selector: XPath or CSS selector for candidate panel sections.
        settings: Timing and policy settings (default: ExtractionSettings()).
        ready: Optional readiness condition replacing the fixed delay.
        rate_limiter: Optional pyrate_limiter Limiter; one token is acquired
            before each activation.
        on_record: Optional callback invoked with each record's dict as soon
            as it is extracted.
        sleep: Coroutine function used for every wait (default: asyncio.sleep).
    """

    def __init__(
        self,
        fields: Sequence[FieldLocator],
        panel: PanelSource,
        section_selector: str,
        settings: ExtractionSettings | None = None,
        ready: WaitForSelector | None = None,
        rate_limiter: Any | None = None,
        on_record: RecordCallback | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.settings = settings or ExtractionSettings()
        self.field_extractor = FieldExtractor(
            fields, section_selector, self.settings.tie_break
        )
        self.panel = panel
        self.rate_limiter = rate_limiter
        self.on_record = on_record
        self._sleep = sleep

        if ready is not None and not targets_elements(ready.selector):
            logger.warning(
                f"Readiness selector {ready.selector!r} does not target "
                f"elements; using the {self.settings.settle_delay_ms}ms "
                f"settle delay instead"
            )
            ready = None
        self.ready = ready

    async def extract_all(
        self, elements: Iterable[ActionableElement]
    ) -> ResultSet:
        """Process every element in order and return the result set.

        Args:
            elements: Already-discovered actionable elements, in the order
                they should be activated.

        Returns:
            ResultSet with one record per successful element, in activation
            order, and one SkippedElement per failed element.
        """
        result = ResultSet(self.field_extractor.field_names)
        limit = self.settings.max_elements

        for index, element in enumerate(elements):
            if limit is not None and index >= limit:
                logger.info(f"Stopping after {limit} element(s)")
                break

            outcome = await self._process(index, element)
            if isinstance(outcome, SkippedElement):
                result.add_skip(outcome)
                continue

            result.add_record(outcome)
            if self.on_record:
                self.on_record(outcome.to_dict())

        logger.info(
            f"Extracted {len(result)} record(s) from {result.attempted} "
            f"element(s), {len(result.skipped)} skipped"
        )
        return result

    async def _process(
        self, index: int, element: ActionableElement
    ) -> ExtractionRecord | SkippedElement:
        description = getattr(element, "description", "") or f"element {index}"

        if self.rate_limiter is not None:
            await self.rate_limiter.try_acquire_async(
                name="activation", weight=1
            )

        try:
            baseline: tuple[Marker, ...] = ()
            if self.ready is not None:
                baseline = self._markers(await self.panel.snapshot(description))

            try:
                await element.activate()
            except Exception as e:
                raise ActivationException(description, e) from e

            snapshot = await self._settle(description, baseline)
            values = self.field_extractor.extract(snapshot, description)

        except Exception as e:
            reason = _classify(e)
            logger.warning(f"Skipping {description} ({reason.value}): {e}")
            return SkippedElement(
                index=index, element=description, reason=reason, error=str(e)
            )

        logger.debug(f"Extracted {len(values)} field(s) from {description}")
        return ExtractionRecord(index=index, element=description, values=values)

    def _markers(self, snapshot: PageElement) -> tuple[Marker, ...]:
        """Identify the readiness marker nodes present in a snapshot."""
        assert self.ready is not None
        return tuple(
            (
                node.tag_name(),
                tuple(sorted(node.attributes().items())),
                node.text_content(),
            )
            for node in snapshot.query(
                self.ready.selector, "readiness marker", min_count=0
            )
        )

    async def _settle(
        self, description: str, baseline: tuple[Marker, ...] = ()
    ) -> PageElement:
        """Wait for the panel of the latest activation and snapshot it.

        With a readiness selector, `baseline` holds the markers present just
        before the activation. The previous element's panel stays up until
        the new one renders, so a marker only counts once it differs from
        the baseline, or once the markers have disappeared and come back.

        Raises:
            PanelNotReadyException: If no marker of this activation appeared.
        """
        if self.ready is None:
            await self._sleep(self.settings.settle_delay_ms / 1000.0)
            return await self.panel.snapshot(description)

        cleared = not baseline
        attempts = self.settings.ready_attempts
        interval = self.settings.poll_interval_ms / 1000.0
        for attempt in range(1, attempts + 1):
            snapshot = await self.panel.snapshot(description)
            markers = self._markers(snapshot)
            if markers and (cleared or markers != baseline):
                logger.debug(
                    f"Panel for {description} ready after {attempt} poll(s)"
                )
                return snapshot
            if not markers:
                cleared = True
            if attempt < attempts:
                await self._sleep(interval)

        raise PanelNotReadyException(
            self.ready.selector,
            attempts,
            self.settings.ready_timeout_ms,
            description,
        )


async def extract_all(
    elements: Iterable[ActionableElement],
    fields: Sequence[FieldLocator],
    settle_delay_ms: int,
    *,
    panel: PanelSource,
    section_selector: str,
    tie_break: TieBreak = TieBreak.FIRST,
    on_record: RecordCallback | None = None,
    sleep: SleepFunc = asyncio.sleep,
) -> ResultSet:
    """Activate each element, wait `settle_delay_ms`, and extract its fields.

    Convenience wrapper around InteractiveExtractor for the fixed-delay case.

    Raises:
        pydantic.ValidationError: If settle_delay_ms is negative.
    """
    settings = ExtractionSettings(
        settle_delay_ms=settle_delay_ms, tie_break=tie_break
    )
    extractor = InteractiveExtractor(
        fields,
        panel,
        section_selector,
        settings=settings,
        on_record=on_record,
        sleep=sleep,
    )
    return await extractor.extract_all(elements)
