import asyncio
import logging
from types import SimpleNamespace

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pathgate.providers import AsyncInMemoryCounter
from pathgate.throttler import AsyncDefaultHandler, Throttler


class FakeTimer:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class SendRecorder:
    """Collects ASGI send messages and exposes the relayed response."""

    def __init__(self):
        self.messages: list[dict] = []

    async def __call__(self, message: dict):
        self.messages.append(message)

    @property
    def start(self) -> dict:
        starts = [m for m in self.messages if m["type"] == "http.response.start"]
        assert len(starts) == 1, self.messages
        return starts[0]

    @property
    def status(self) -> int:
        return self.start["status"]

    @property
    def header_list(self) -> list[tuple[str, str]]:
        return [
            (bytes(name).decode("latin1").lower(), bytes(value).decode("latin1"))
            for name, value in self.start["headers"]
        ]

    @property
    def headers(self) -> dict[str, str]:
        return dict(self.header_list)

    @property
    def body(self) -> bytes:
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        )


@pytest.fixture(scope="session")
def logger():
    _logger = logging.getLogger("pathgate-test")
    _logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    console_format = logging.Formatter(
        "%(name)s | %(levelname)s | %(asctime)s | %(message)s"
    )
    console_handler.setFormatter(console_format)

    _logger.addHandler(console_handler)

    return _logger


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
async def throttler(timer: FakeTimer):
    handler = AsyncDefaultHandler(AsyncInMemoryCounter(timer_func=timer))
    _throttler = Throttler(handler=handler, keyspace="pathgate-pytest")
    yield _throttler
    await _throttler.clear()


@pytest.fixture
def send():
    return SendRecorder()


@pytest.fixture
def make_scope():
    def _make_scope(
        path: str,
        method: str = "GET",
        headers: list[tuple[bytes, bytes]] | None = None,
        query_string: bytes = b"",
        client: tuple[str, int] | None = ("10.0.0.1", 51000),
    ) -> dict:
        return {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "headers": [[name, value] for name, value in (headers or [(b"host", b"gateway")])],
            "client": client,
        }

    return _make_scope


@pytest.fixture
def make_receive():
    def _make_receive(body: bytes = b"", chunks: list[bytes] | None = None, disconnect_after: float | None = None):
        """Yield the request body, then block like a live connection.

        disconnect_after: seconds after the body before the client goes away.
        """
        parts = chunks if chunks is not None else [body]
        messages = [
            {"type": "http.request", "body": part, "more_body": i < len(parts) - 1}
            for i, part in enumerate(parts)
        ]

        async def receive():
            if messages:
                return messages.pop(0)
            if disconnect_after is not None:
                await asyncio.sleep(disconnect_after)
                return {"type": "http.disconnect"}
            await asyncio.Event().wait()

        return receive

    return _make_receive


@pytest.fixture
async def backend():
    """A local backend that records every call it receives."""
    calls: list[dict] = []

    async def handle(request: web.Request) -> web.StreamResponse:
        body = await request.read()
        calls.append(
            {
                "method": request.method,
                "path_qs": request.path_qs,
                "headers": request.headers.copy(),
                "body": body,
            }
        )

        if request.path == "/auth/login":
            return web.Response(body=b'{"token":"x"}', content_type="application/json")
        if request.path.endswith("/missing"):
            return web.Response(status=404, text="product not found")
        if request.path.endswith("/broken"):
            return web.Response(status=503, text="maintenance")
        if request.path.endswith("/slow"):
            await asyncio.sleep(2)
            return web.Response(text="late")
        if request.path.endswith("/truncated"):
            response = web.StreamResponse()
            response.content_length = 100
            await response.prepare(request)
            await response.write(b"partial")
            request.transport.close()
            return response
        if request.path.endswith("/cookies"):
            response = web.Response(text="ok")
            response.headers.add("Set-Cookie", "a=1")
            response.headers.add("Set-Cookie", "b=2")
            return response
        return web.Response(body=body or b"ok", headers={"X-Backend-Path": request.path_qs})

    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", handle)
    server = TestServer(app)
    await server.start_server()
    yield SimpleNamespace(url=f"http://{server.host}:{server.port}", calls=calls)
    await server.close()
