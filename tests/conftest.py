"""Shared fixtures for extractor and driver tests."""

import asyncio
import socket
import threading
from collections.abc import Generator
from contextlib import closing

import pytest
from aiohttp import web

from panelscrape.common.lxml_page_element import LxmlPageElement
from tests.mock_server import create_app
from tests.utils import EMPTY_PANEL, panel_html

# =============================================================================
# Synthetic UI: a clock, a panel slot and elements that fill it
# =============================================================================


class FakeClock:
    """Controllable clock whose sleep() advances time instantly.

    Every call is recorded in the shared event log so tests can assert on
    the interleaving of activations, sleeps and snapshots.
    """

    def __init__(self, events: list[tuple]) -> None:
        self.now = 0.0
        self.events = events
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.events.append(("sleep", seconds, self.now))
        self.now += seconds


class FakePanel:
    """The single transient panel slot shared by every element.

    An element replaces the panel's content when activated; the new content
    becomes visible `render_delay` seconds later on the fake clock. With
    `clears` off the previous content stays up until then, the way a panel
    that is re-rendered in place behaves.
    """

    def __init__(self, clock: FakeClock, clears: bool = True) -> None:
        self.clock = clock
        self.clears = clears
        self.content = EMPTY_PANEL
        self.pending: str | None = None
        self.visible_at = 0.0

    def show(self, content: str, render_delay: float) -> None:
        if self.clears:
            self.content = EMPTY_PANEL
        self.pending = content
        self.visible_at = self.clock.now + render_delay

    async def snapshot(self, element_description: str = "") -> LxmlPageElement:
        if self.pending is not None and self.clock.now >= self.visible_at:
            self.content = self.pending
            self.pending = None
        self.clock.events.append(("snapshot", element_description, self.clock.now))
        return LxmlPageElement.from_html(self.content, element_description)


class FakeElement:
    """An actionable element that fills the panel (or fails) on activation."""

    def __init__(
        self,
        description: str,
        panel: FakePanel,
        content: str | None = None,
        render_delay: float = 0.0,
        fail: bool = False,
    ) -> None:
        self.description = description
        self.panel = panel
        self.content = content if content is not None else EMPTY_PANEL
        self.render_delay = render_delay
        self.fail = fail

    async def activate(self) -> None:
        self.panel.clock.events.append(
            ("activate", self.description, self.panel.clock.now)
        )
        if self.fail:
            raise RuntimeError(f"{self.description} is detached")
        self.panel.show(self.content, self.render_delay)


@pytest.fixture
def events() -> list[tuple]:
    return []


@pytest.fixture
def clock(events: list[tuple]) -> FakeClock:
    return FakeClock(events)


@pytest.fixture
def panel(clock: FakeClock) -> FakePanel:
    return FakePanel(clock)


@pytest.fixture
def make_element(panel: FakePanel):
    """Factory fixture building FakeElements bound to the shared panel."""

    def _make(
        description: str,
        *sections: tuple[str, str],
        render_delay: float = 0.0,
        fail: bool = False,
        content: str | None = None,
    ) -> FakeElement:
        if content is None and sections:
            content = panel_html(*sections)
        return FakeElement(
            description,
            panel,
            content=content,
            render_delay=render_delay,
            fail=fail,
        )

    return _make


# =============================================================================
# aiohttp test server for the browser integration tests
# =============================================================================


def find_free_port() -> int:
    """Find a free port on localhost."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class AioHttpTestServer:
    """Wrapper to run aiohttp server in a background thread."""

    def __init__(self, app: web.Application, port: int) -> None:
        self.app = app
        self.port = port
        self.host = "127.0.0.1"
        self._loop: asyncio.AbstractEventLoop | None = None
        self._runner: web.AppRunner | None = None
        self._thread: threading.Thread | None = None
        self._started = threading.Event()

    @property
    def url(self) -> str:
        """Get the base URL of the server."""
        return f"http://{self.host}:{self.port}"

    def start(self) -> None:
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        self._started.wait(timeout=5.0)

    def _run_server(self) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        async def start() -> None:
            self._runner = web.AppRunner(self.app)
            await self._runner.setup()
            site = web.TCPSite(self._runner, self.host, self.port)
            await site.start()

        self._loop.run_until_complete(start())
        self._started.set()
        self._loop.run_forever()

    def stop(self) -> None:
        """Stop the server and clean up resources."""
        if self._loop and self._runner:
            runner = self._runner
            future = asyncio.run_coroutine_threadsafe(
                runner.cleanup(), self._loop
            )
            future.result(timeout=2.0)

        if self._loop:
            self._loop.call_soon_threadsafe(self._loop.stop)

        if self._thread:
            self._thread.join(timeout=2.0)


@pytest.fixture
def catalog_server() -> Generator[AioHttpTestServer, None, None]:
    """Start an aiohttp server serving the demo icon catalog page.

    Yields:
        AioHttpTestServer instance with the catalog app running.
    """
    server = AioHttpTestServer(create_app(), find_free_port())
    server.start()
    yield server
    server.stop()


@pytest.fixture
def server_url(catalog_server: AioHttpTestServer) -> str:
    return catalog_server.url
