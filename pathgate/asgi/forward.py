"""
Request forwarding service for the gateway.

ForwardService relays one HTTP request to the backend bound to its route and
streams the backend response back unchanged. Transport failures are returned
as GatewayError values, never retried.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional

import aiohttp
from yarl import URL

from pathgate._logs import logger as default_logger
from pathgate.errors import ClientDisconnect
from pathgate.interface import ILogger
from pathgate.routing import Route

from .reporter import ErrorKind, GatewayError

HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)

# defaults aiohttp would otherwise add to requests that did not carry them
SKIP_AUTO_HEADERS = ("User-Agent", "Accept", "Accept-Encoding", "Content-Type")


@dataclass(frozen=True, slots=True, kw_only=True)
class ForwardRequest:
    method: str
    url: str
    headers: tuple[tuple[str, str], ...]
    body: bytes
    path: str

    @classmethod
    def from_scope(cls, scope: dict, route: Route, body: bytes = b"") -> "ForwardRequest":
        path = scope.get("path", "/")
        query_string = scope.get("query_string", b"").decode("latin1")
        return cls(
            method=scope.get("method", "GET"),
            url=route.target_url(path, query_string),
            headers=tuple(extract_headers(scope)),
            body=body,
            path=path,
        )


def extract_headers(scope: dict) -> List[tuple[str, str]]:
    """Request headers in order, duplicates kept, hop-by-hop headers dropped."""
    headers = []
    for header_name, header_value in scope.get("headers", []):
        name = header_name.decode("latin1")
        if name.lower() in HOP_BY_HOP_HEADERS:
            continue
        headers.append((name, header_value.decode("latin1")))
    return headers


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, (asyncio.TimeoutError, aiohttp.ServerTimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(
        exc,
        (
            aiohttp.ServerDisconnectedError,
            aiohttp.ClientPayloadError,
            aiohttp.ClientResponseError,
        ),
    ):
        return ErrorKind.PROTOCOL_ERROR
    if isinstance(exc, aiohttp.ClientConnectionError):
        return ErrorKind.CONNECTION_ERROR
    return ErrorKind.FORWARDING_ERROR


class ForwardService:
    """Service for forwarding HTTP requests to backend servers."""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None,
        logger: Optional[ILogger] = None,
        chunk_size: int = 8192,
    ):
        """
        Initialize the ForwardService.

        Args:
            session: Optional aiohttp ClientSession (will create one if not provided)
            timeout: Total seconds allowed per backend call, None keeps aiohttp's default
            logger: Logger for disconnect and debug events
            chunk_size: Size of the chunks relayed from the backend body
        """
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None
        self._logger = logger or default_logger
        self._chunk_size = chunk_size

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp ClientSession."""
        if self._session is None:
            # bodies are relayed as-is, content-encoding included
            self._session = aiohttp.ClientSession(
                auto_decompress=False, skip_auto_headers=SKIP_AUTO_HEADERS
            )
        return self._session

    async def close(self):
        """Close the aiohttp session."""
        if self._session:
            await self._session.close()
            self._session = None

    async def _collect_request_body(self, receive: Callable) -> bytes:
        """Collect the complete request body from ASGI receive callable."""
        body = b""
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                raise ClientDisconnect()
            if message["type"] == "http.request":
                body += message.get("body", b"")
                if not message.get("more_body", False):
                    break
        return body

    async def _wait_for_disconnect(self, receive: Callable) -> None:
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            await asyncio.sleep(0)

    async def _send_response_headers(
        self, send: Callable, response: aiohttp.ClientResponse
    ):
        """Send response headers to ASGI send callable."""
        response_headers = [
            [name, value]
            for name, value in response.raw_headers
            if name.decode("latin1").lower() not in HOP_BY_HOP_HEADERS
        ]

        await send(
            {
                "type": "http.response.start",
                "status": response.status,
                "headers": response_headers,
            }
        )

    async def _stream_response_body(
        self, send: Callable, response: aiohttp.ClientResponse
    ):
        """Stream response body from backend to client."""
        async for chunk in response.content.iter_chunked(self._chunk_size):
            await send(
                {
                    "type": "http.response.body",
                    "body": chunk,
                    "more_body": True,
                }
            )

        await send(
            {
                "type": "http.response.body",
                "body": b"",
                "more_body": False,
            }
        )

    async def _relay(self, request: ForwardRequest, send: Callable) -> Optional[GatewayError]:
        session = await self._get_session()
        options = {"timeout": self._timeout} if self._timeout else {}
        response_started = False

        try:
            async with session.request(
                method=request.method,
                url=URL(request.url, encoded=True),
                headers=list(request.headers),
                data=request.body or None,
                allow_redirects=False,
                skip_auto_headers=SKIP_AUTO_HEADERS,
                **options,
            ) as response:
                await self._send_response_headers(send, response)
                response_started = True
                await self._stream_response_body(send, response)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            return GatewayError(
                kind=classify_error(exc),
                message=str(exc) or exc.__class__.__name__,
                path=request.path,
                response_started=response_started,
            )
        return None

    async def forward(
        self, request: ForwardRequest, receive: Callable, send: Callable
    ) -> Optional[GatewayError]:
        """Relay request once; a client disconnect abandons the backend call."""
        relay = asyncio.ensure_future(self._relay(request, send))
        watcher = asyncio.ensure_future(self._wait_for_disconnect(receive))
        try:
            done, _ = await asyncio.wait(
                {relay, watcher}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (relay, watcher):
                if not task.done():
                    task.cancel()
            await asyncio.gather(relay, watcher, return_exceptions=True)

        if relay in done:
            return relay.result()

        self._logger.debug(
            "Client disconnected, abandoned %s %s", request.method, request.url
        )
        return None

    async def forward_http_request(
        self, scope: dict, receive: Callable, send: Callable, route: Route
    ) -> Optional[GatewayError]:
        """Forward HTTP request to the backend bound to route."""
        try:
            body = await self._collect_request_body(receive)
        except ClientDisconnect:
            self._logger.debug(
                "Client disconnected before %s was forwarded", scope.get("path", "/")
            )
            return None

        request = ForwardRequest.from_scope(scope, route, body)
        return await self.forward(request, receive, send)
