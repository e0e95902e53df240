"""Shared fixtures: local HTTP endpoints standing in for the uptime monitor."""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer


class MockEndpoint:
    """Records every heartbeat request it receives."""

    def __init__(self, respond: Callable[[MockEndpoint, int], Awaitable[web.Response]]) -> None:
        self.respond = respond
        self.hits: list[float] = []
        # Client (host, port) per request; repeats mean a reused connection
        self.peers: list[object] = []
        self.in_flight = 0
        self.max_in_flight = 0
        # Set on teardown so hanging handlers can finish
        self.release = asyncio.Event()
        self.server: TestServer | None = None

    @property
    def url(self) -> str:
        assert self.server is not None
        return str(self.server.make_url("/heartbeat"))

    async def handle(self, request: web.Request) -> web.Response:
        self.hits.append(time.monotonic())
        self.peers.append(request.transport.get_extra_info("peername") if request.transport else None)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            return await self.respond(self, len(self.hits))
        finally:
            self.in_flight -= 1


async def respond_ok(_endpoint: MockEndpoint, _n: int) -> web.Response:
    return web.Response(text="ok")


async def respond_500(_endpoint: MockEndpoint, _n: int) -> web.Response:
    return web.Response(status=500, text="boom")


async def respond_hang(endpoint: MockEndpoint, _n: int) -> web.Response:
    await endpoint.release.wait()
    return web.Response(text="too late")


RESPONDERS = {"ok": respond_ok, "500": respond_500, "hang": respond_hang}


@pytest_asyncio.fixture
async def make_endpoint() -> AsyncIterator[Callable[..., Awaitable[MockEndpoint]]]:
    """Factory starting a MockEndpoint on a free local port."""
    endpoints: list[MockEndpoint] = []

    async def _make(respond: str | Callable[[MockEndpoint, int], Awaitable[web.Response]] = "ok") -> MockEndpoint:
        if isinstance(respond, str):
            respond = RESPONDERS[respond]
        endpoint = MockEndpoint(respond)
        app = web.Application()
        app.router.add_get("/heartbeat", endpoint.handle)
        endpoint.server = TestServer(app)
        await endpoint.server.start_server()
        endpoints.append(endpoint)
        return endpoint

    yield _make

    for endpoint in endpoints:
        endpoint.release.set()
        assert endpoint.server is not None
        await endpoint.server.close()


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    """Poll a predicate on the event loop until it holds or a deadline passes."""

    async def _wait(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() > deadline:
                raise AssertionError(f"condition not met within {timeout}s")
            await asyncio.sleep(0.01)

    return _wait
