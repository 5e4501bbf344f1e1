"""
Shared fixtures: an in-memory page graph standing in for the fetcher and a
local aiohttp server for the integration tests.
"""

import asyncio
import threading
from collections import Counter
from typing import Dict, Optional

import pytest
from aiohttp import web


def page(*links: str) -> str:
    """Build a minimal HTML page holding the given links."""
    anchors = "\n".join(f'<a href="{link}">{link}</a>' for link in links)
    return f"<html><body>\n{anchors}\n</body></html>"


class FakeWeb:
    """
    Fetch collaborator backed by a dict of address -> content.

    Unknown addresses yield empty content. Fetching an address listed in
    `gates` blocks until that gate is released.
    """

    def __init__(self, pages: Dict[str, str]):
        self.pages = pages
        self.calls = Counter()
        self.gates: Dict[str, threading.Event] = {}
        self.entered: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    def gate(self, url: str) -> threading.Event:
        """Make fetches of `url` block until the returned event is set."""
        self.gates[url] = threading.Event()
        self.entered[url] = threading.Event()
        return self.gates[url]

    def __call__(self, url: str) -> str:
        with self._lock:
            self.calls[url] += 1
        if url in self.gates:
            self.entered[url].set()
            self.gates[url].wait(10)
        return self.pages.get(url, '')


@pytest.fixture
def fake_web():
    """Factory for FakeWeb instances."""
    return FakeWeb


class LocalServer:
    """aiohttp application served from a background thread."""

    def __init__(self):
        self.routes: Dict[str, tuple] = {}
        self.base_url: Optional[str] = None
        self._loop = asyncio.new_event_loop()
        self._runner: Optional[web.AppRunner] = None
        self._thread: Optional[threading.Thread] = None

    def add(self, path: str, body: str, content_type: str = 'text/html', status: int = 200):
        self.routes[path] = (body, content_type, status)

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _handle(self, request: web.Request) -> web.Response:
        route = self.routes.get(request.path)
        if route is None:
            return web.Response(status=404, text="not found")
        body, content_type, status = route
        return web.Response(status=status, text=body, content_type=content_type)

    def start(self):
        app = web.Application()
        app.router.add_get('/{tail:.*}', self._handle)
        self._runner = web.AppRunner(app)
        self._loop.run_until_complete(self._runner.setup())
        site = web.TCPSite(self._runner, '127.0.0.1', 0)
        self._loop.run_until_complete(site.start())
        host, port = self._runner.addresses[0][:2]
        self.base_url = f"http://{host}:{port}"

        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

    def stop(self):
        future = asyncio.run_coroutine_threadsafe(self._runner.cleanup(), self._loop)
        future.result(timeout=5)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()


@pytest.fixture
def http_server():
    """A running local HTTP server; register pages with `add(path, body)`."""
    server = LocalServer()
    server.start()
    yield server
    server.stop()
