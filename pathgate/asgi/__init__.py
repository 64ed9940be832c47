"""
Pathgate ASGI module

The gateway application, its forwarding engine and the error reporter.
"""

from .forward import ForwardRequest, ForwardService
from .gateway import ASGIGateway, apply_rate_limit, create_gateway
from .identity import client_identity
from .reporter import ErrorKind, ErrorReporter, GatewayError

__all__ = [
    # Main classes
    "ASGIGateway",
    "ForwardService",
    "ErrorReporter",
    # Values
    "ForwardRequest",
    "GatewayError",
    "ErrorKind",
    # Helpers
    "apply_rate_limit",
    "client_identity",
    # Factory functions
    "create_gateway",
]
