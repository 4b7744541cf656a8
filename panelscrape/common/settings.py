"""Validated runtime settings for an extraction run.

Catalog classes declare their defaults as class variables; the CLI may
override any of them. Both sources are merged into an ExtractionSettings
instance so that bad values (a negative delay, a zero poll interval) are
rejected before the browser starts.

Example::

    from panelscrape.common.settings import ExtractionSettings

    settings = ExtractionSettings.from_catalog(MyCatalog, settle_delay_ms=250)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from panelscrape.data_types import TieBreak

if TYPE_CHECKING:
    from panelscrape.data_types import BaseCatalog


class ExtractionSettings(BaseModel):
    """Timing and policy settings for InteractiveExtractor.

    Attributes:
        settle_delay_ms: Fixed wait after each activation when no readiness
            signal is available.
        ready_timeout_ms: Upper bound on how long to poll for the readiness
            selector after an activation.
        poll_interval_ms: Wait between readiness polls.
        activation_timeout_ms: How long the driver lets a single click take.
        tie_break: Which section wins when several match one field marker.
        max_elements: Process at most this many discovered elements.
    """

    model_config = ConfigDict(frozen=True)

    settle_delay_ms: int = Field(default=500, ge=0)
    ready_timeout_ms: int = Field(default=5000, ge=0)
    poll_interval_ms: int = Field(default=100, gt=0)
    activation_timeout_ms: int = Field(default=5000, gt=0)
    tie_break: TieBreak = TieBreak.FIRST
    max_elements: int | None = Field(default=None, ge=1)

    @classmethod
    def from_catalog(
        cls, catalog: type[BaseCatalog] | BaseCatalog, **overrides: Any
    ) -> ExtractionSettings:
        """Build settings from a catalog's declarations plus overrides.

        Overrides whose value is None are ignored so CLI options that were
        not given fall through to the catalog's defaults.

        Raises:
            pydantic.ValidationError: If a value is out of range.
        """
        values: dict[str, Any] = {
            "settle_delay_ms": catalog.settle_delay_ms,
            "tie_break": catalog.tie_break,
        }
        if catalog.ready is not None and catalog.ready.timeout is not None:
            values["ready_timeout_ms"] = catalog.ready.timeout
        values.update(
            {key: value for key, value in overrides.items() if value is not None}
        )
        return cls.model_validate(values)

    @property
    def ready_attempts(self) -> int:
        """Number of readiness polls before giving up.

        One immediate poll plus one after each poll interval until the
        timeout is covered.
        """
        return 1 + -(-self.ready_timeout_ms // self.poll_interval_ms)
