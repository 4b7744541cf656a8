"""Test utilities shared by extractor and driver tests."""

from collections.abc import Callable
from typing import Any

from panelscrape.data_types import FieldLocator

EMPTY_PANEL = "<html><body><aside id='detail'></aside></body></html>"

SECTION_SELECTOR = "//aside[@id='detail']//section"

ICON_FIELDS = [
    FieldLocator("Code point", "Code point", ".//code"),
    FieldLocator("Icon name", "Icon name", ".//code"),
]


def panel_html(*sections: tuple[str, str]) -> str:
    """Build a page whose detail panel holds one section per (label, value).

    Example:
        panel_html(("Icon name", "home"), ("Code point", "e88a"))
    """
    body = "".join(
        f'<section class="detail"><h3>{label}</h3><code>{value}</code></section>'
        for label, value in sections
    )
    return f"<html><body><aside id='detail'>{body}</aside></body></html>"


def collect_records() -> tuple[Callable[[dict], None], list[dict]]:
    """Create an on_record callback that collects records in a list.

    Returns:
        A tuple of (callback_function, records_list).

    Example:
        callback, records = collect_records()
        extractor = InteractiveExtractor(..., on_record=callback)
        await extractor.extract_all(elements)
        assert len(records) > 0
    """
    records: list[dict] = []

    def callback(record: dict) -> None:
        records.append(record)

    return callback, records


def event_kinds(events: list[tuple[Any, ...]]) -> list[str]:
    """Reduce an event log to its event names, e.g. ["activate", "sleep"]."""
    return [event[0] for event in events]


class FakeLimiter:
    """Stand-in for pyrate_limiter.Limiter that records every acquisition."""

    def __init__(self, events: list[tuple[Any, ...]] | None = None) -> None:
        self.calls: list[tuple[str, int]] = []
        self.events = events

    async def try_acquire_async(self, name: str = "pyrate", weight: int = 1) -> bool:
        self.calls.append((name, weight))
        if self.events is not None:
            self.events.append(("acquire", name, None))
        return True
