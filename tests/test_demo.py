"""Tests for the demo icon catalog website and its catalog declaration."""

import pytest
import uvicorn
from click.testing import CliRunner
from fastapi.testclient import TestClient

from panelscrape.common.lxml_page_element import LxmlPageElement
from panelscrape.demo.app import app
from panelscrape.demo.catalog import DemoIconCatalog, DemoIconCatalogReady
from panelscrape.demo.data import ICONS, catalog_page_html
from panelscrape.demo.run_demo import main as run_demo


@pytest.fixture
def client():
    return TestClient(app)


class TestDemoApp:
    def test_catalog_page(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "const DELAY = 150;" in response.text

    def test_delay_parameter(self, client):
        assert "const DELAY = 900;" in client.get("/?delay=900").text

    def test_delay_out_of_range(self, client):
        assert client.get("/?delay=-1").status_code == 422

    def test_icons_api(self, client):
        data = client.get("/api/icons").json()
        assert [icon["name"] for icon in data] == [icon.name for icon in ICONS]
        assert data[0] == {
            "name": "home",
            "code_point": "e88a",
            "category": "Actions",
            "broken": False,
        }

    def test_icon_detail(self, client):
        assert client.get("/api/icons/menu").json()["code_point"] == "e5d2"
        assert client.get("/api/icons/unknown").status_code == 404


class TestCatalogPage:
    """The static markup the catalog declaration relies on."""

    def test_buttons_match_discovery_query(self):
        """Every icon button passes the query; the decoy button does not."""
        page = LxmlPageElement.from_html(catalog_page_html())
        container = page.query(
            DemoIconCatalog.element_query.container, "container", max_count=1
        )[0]
        buttons = container.query(DemoIconCatalog.element_query.candidate, "buttons")

        matching = [
            b.get_attribute("aria-label")
            for b in buttons
            if DemoIconCatalog.element_query.matches(b.attributes())
        ]

        assert len(buttons) == len(ICONS) + 1
        assert matching == [icon.name for icon in ICONS]

    def test_icon_subset(self):
        page = LxmlPageElement.from_html(catalog_page_html(ICONS[:2]))
        assert len(page.query("[data-icon]", "icon buttons")) == 2

    def test_panel_initially_empty(self):
        page = LxmlPageElement.from_html(catalog_page_html())
        panel = page.query("//aside[@id='detail']", "panel", max_count=1)[0]
        assert panel.text_content().strip() == ""


class TestDemoCatalogDeclaration:
    def test_complete(self):
        DemoIconCatalog.check()
        DemoIconCatalogReady.check()

    def test_field_names(self):
        assert DemoIconCatalog.field_names() == ("Code point", "Icon name")

    def test_ready_variant(self):
        assert DemoIconCatalog.ready is None
        assert DemoIconCatalogReady.ready.timeout == 2000
        assert DemoIconCatalogReady.settle_delay_ms == DemoIconCatalog.settle_delay_ms


class TestRunDemo:
    """The launcher hands its options to uvicorn without binding a port."""

    @pytest.fixture
    def served(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs))
        )
        return calls

    def test_defaults(self, served):
        result = CliRunner().invoke(run_demo, [])

        assert result.exit_code == 0, result.output
        assert "http://127.0.0.1:8080/" in result.output
        assert served == [
            (app, {"host": "127.0.0.1", "port": 8080, "log_level": "info"})
        ]

    def test_options(self, served):
        result = CliRunner().invoke(
            run_demo,
            ["--host", "0.0.0.0", "--port", "9001", "--log-level", "warning"],
        )

        assert result.exit_code == 0, result.output
        assert served[0][1] == {
            "host": "0.0.0.0",
            "port": 9001,
            "log_level": "warning",
        }

    def test_port_out_of_range(self, served):
        result = CliRunner().invoke(run_demo, ["--port", "0"])

        assert result.exit_code == 2
        assert served == []
