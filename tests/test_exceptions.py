"""Tests for exception messages and context."""

from panelscrape.common.exceptions import (
    ActivationException,
    AmbiguousFieldException,
    ExtractionAssumptionException,
    HTMLStructuralAssumptionException,
    PageLoadException,
    PanelNotReadyException,
)


class TestExtractionAssumptionException:
    """Base class formatting."""

    def test_message_only(self):
        assert str(ExtractionAssumptionException("broken")) == "broken"

    def test_element_and_context(self):
        error = ExtractionAssumptionException(
            "broken", element="button #2", context={"selector": "//x"}
        )
        assert str(error) == "broken\nElement: button #2\nContext:\n  selector: //x"


class TestHTMLStructuralAssumptionException:
    """Expected-count wording."""

    def _error(self, expected_min, expected_max, actual):
        return HTMLStructuralAssumptionException(
            selector="//section",
            selector_type="xpath",
            description="panel sections",
            expected_min=expected_min,
            expected_max=expected_max,
            actual_count=actual,
        )

    def test_at_least(self):
        assert "Expected at least 1 nodes for 'panel sections', but found 0" in str(
            self._error(1, None, 0)
        )

    def test_exactly(self):
        assert "Expected exactly 1 nodes" in str(self._error(1, 1, 3))

    def test_between(self):
        error = self._error(1, 2, 3)
        assert "Expected between 1 and 2 nodes" in str(error)
        assert error.context["expected_max"] == 2

    def test_unlimited_in_context(self):
        assert self._error(1, None, 0).context["expected_max"] == "unlimited"

    def test_is_assumption_exception(self):
        assert isinstance(self._error(1, None, 0), ExtractionAssumptionException)


class TestOtherExceptions:
    def test_panel_not_ready(self):
        error = PanelNotReadyException("div.ready", 4, 300, "button #1")
        assert error.attempts == 4
        assert "'div.ready' absent after 4 snapshot(s) (300ms)" in str(error)
        assert "Element: button #1" in str(error)

    def test_ambiguous_field(self):
        error = AmbiguousFieldException("Code point", "Code point", 2)
        assert str(error).startswith(
            "Field 'Code point' is ambiguous: marker 'Code point' matched 2 sections"
        )

    def test_activation_wraps_cause(self):
        error = ActivationException("button #0", TimeoutError("30000ms exceeded"))
        assert str(error) == (
            "Activation of button #0 failed: TimeoutError: 30000ms exceeded"
        )

    def test_page_load(self):
        error = PageLoadException("http://example.test/", "navigation timeout")
        assert str(error) == "Could not load http://example.test/: navigation timeout"
        assert error.url == "http://example.test/"
