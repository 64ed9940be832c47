import math
from typing import Callable, Optional

from pathgate._logs import logger as default_logger
from pathgate.config import GatewayConfig, RateLimitConfig
from pathgate.errors import RouteNotFoundError
from pathgate.interface import ILogger
from pathgate.routing import RouteTable
from pathgate.throttler import (
    AsyncDefaultHandler,
    AsyncRedisHandler,
    KeyMaker,
    QuotaExceedsError,
    Throttler,
)
from pathgate.throttler.interface import AsyncThrottleHandler

from .forward import ForwardService
from .identity import client_identity
from .reporter import ErrorReporter
from .responses import send_error_response


def apply_rate_limit(
    handler: Callable,
    throttler: Optional[Throttler],
    rate_limit_config: Optional[RateLimitConfig],
    keymaker: KeyMaker,
) -> Callable:
    """Apply rate limiting wrapper to handler."""
    if throttler is None or rate_limit_config is None:
        return handler

    async def rate_limit_wrapper(scope: dict, receive: Callable, send: Callable):
        try:
            await throttler.ensure(
                keymaker(scope),
                quota=rate_limit_config.quota,
                duration=rate_limit_config.duration,
            )
        except QuotaExceedsError as qe:
            await send_error_response(
                send,
                rate_limit_config.error_status,
                rate_limit_config.error_message,
                headers=[("retry-after", str(max(math.ceil(qe.time_remains), 1)))],
            )
            return
        await handler(scope, receive, send)

    return rate_limit_wrapper


class ASGIGateway:
    """
    ASGI application that routes requests by path prefix to backend services.

    Every HTTP request passes the rate limiter first, is then matched against
    the route table and forwarded once to the matched backend. Forwarding
    failures go to the error reporter; unmatched paths get a 404.
    """

    def __init__(
        self,
        *,
        config: GatewayConfig,
        throttler: Optional[Throttler] = None,
        forward_service: Optional[ForwardService] = None,
        reporter: Optional[ErrorReporter] = None,
        keymaker: Optional[KeyMaker] = None,
        logger: Optional[ILogger] = None,
    ):
        """
        Initialize the ASGI Gateway.

        Args:
            config: Gateway configuration with routes and rate limit settings
            throttler: Throttler instance for rate limiting
            forward_service: Service performing the backend calls
            reporter: Error reporter for forwarding failures
            keymaker: Derives the rate limit identity from an ASGI scope
            logger: Logger for routing events
        """
        self.config = config
        self.route_table = RouteTable(config.routes)
        self._logger = logger or default_logger

        self._throttler = throttler or Throttler(
            handler=AsyncDefaultHandler(),
            keyspace=f"{config.keyspace}:throttler",
            logger=self._logger,
        )
        self._forward_service = forward_service or ForwardService(
            timeout=config.forward.timeout, logger=self._logger
        )
        self._reporter = reporter or ErrorReporter(logger=self._logger)
        self._keymaker = keymaker or (
            lambda scope: client_identity(scope, config.trusted_hops)
        )

        self._handler = apply_rate_limit(
            self.dispatch, self._throttler, config.rate_limit, self._keymaker
        )

    @property
    def throttler(self) -> Throttler:
        return self._throttler

    @property
    def forward_service(self) -> ForwardService:
        return self._forward_service

    async def dispatch(self, scope: dict, receive: Callable, send: Callable):
        """Resolve the route for an admitted request and forward it."""
        method = scope.get("method", "GET")
        path = scope.get("path", "/")

        route = self.route_table.resolve(path)
        if route is None:
            not_found = RouteNotFoundError(method, path)
            self._logger.info(str(not_found))
            await send_error_response(send, 404, str(not_found))
            return

        error = await self._forward_service.forward_http_request(
            scope, receive, send, route
        )
        if error is not None:
            await self._reporter.report(error, send)

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        """ASGI application entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] == "websocket":
            await send({"type": "websocket.close", "code": 1000})
            return

        if scope["type"] != "http":
            return

        await self._handler(scope, receive, send)

    async def _handle_lifespan(self, receive: Callable, send: Callable):
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                self._logger.info(
                    "API Gateway serving %d routes", len(self.route_table)
                )
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.close()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def close(self):
        """Close gateway resources."""
        await self._forward_service.close()
        await self._throttler.close()


def create_gateway(
    config: GatewayConfig,
    throttle_handler: Optional[AsyncThrottleHandler] = None,
    forward_service: Optional[ForwardService] = None,
    reporter: Optional[ErrorReporter] = None,
    logger: Optional[ILogger] = None,
) -> ASGIGateway:
    """
    Factory function to create an ASGI Gateway.

    Args:
        config: Gateway configuration
        throttle_handler: Counter backend for the rate limiter; Redis when
            config.redis_url is set, in-memory otherwise
        forward_service: Service performing the backend calls
        reporter: Error reporter for forwarding failures
        logger: Logger shared by all gateway components

    Returns:
        Configured ASGIGateway instance
    """
    if throttle_handler is None:
        if config.redis_url:
            throttle_handler = AsyncRedisHandler.from_url(config.redis_url)
        else:
            throttle_handler = AsyncDefaultHandler()

    throttler = Throttler(
        handler=throttle_handler,
        keyspace=f"{config.keyspace}:throttler",
        logger=logger,
    )
    return ASGIGateway(
        config=config,
        throttler=throttler,
        forward_service=forward_service,
        reporter=reporter,
        logger=logger,
    )
