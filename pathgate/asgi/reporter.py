from dataclasses import dataclass
from enum import auto
from typing import Callable, Optional

from pathgate._logs import logger as default_logger
from pathgate.errors import ForwardingError
from pathgate.interface import ILogger, LowerNameEnum

from .responses import send_error_response


class ErrorKind(str, LowerNameEnum):
    CONNECTION_ERROR = auto()
    TIMEOUT = auto()
    PROTOCOL_ERROR = auto()
    FORWARDING_ERROR = auto()


@dataclass(frozen=True, slots=True, kw_only=True)
class GatewayError:
    kind: ErrorKind
    message: str
    path: str
    response_started: bool = False

    def to_exception(self) -> ForwardingError:
        return ForwardingError(self.kind.value, self.message, self.path)


class ErrorReporter:
    """Turns a failed forwarding attempt into one log event and one 500 response."""

    def __init__(self, logger: Optional[ILogger] = None, status: int = 500):
        self._logger = logger or default_logger
        self._status = status

    def log(self, error: GatewayError) -> None:
        self._logger.error(
            "Proxy Error [%s]: %s",
            error.kind.value,
            error.message,
            extra={
                "error_kind": error.kind.value,
                "error_message": error.message,
                "request_path": error.path,
            },
        )

    async def report(self, error: GatewayError, send: Callable) -> None:
        """Log error once and answer the client.

        Raises:
            ForwardingError: the backend failed after its status line was
                relayed; the server has to abort the connection so the
                truncated body is not taken for a complete one.
        """
        self.log(error)

        if error.response_started:
            raise error.to_exception()

        await send_error_response(send, self._status, f"Proxy Error: {error.message}")
