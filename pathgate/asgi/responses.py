from typing import Callable, Optional, Sequence

PLAIN_TEXT = "text/plain; charset=utf-8"


async def send_error_response(
    send: Callable,
    status: int,
    message: str,
    content_type: str = PLAIN_TEXT,
    headers: Optional[Sequence[tuple[str, str]]] = None,
):
    """Send a complete, single-chunk error response."""
    body = message.encode()
    response_headers = [
        [b"content-type", content_type.encode()],
        [b"content-length", str(len(body)).encode()],
    ]
    for name, value in headers or ():
        response_headers.append([name.encode("latin1"), value.encode("latin1")])

    await send(
        {
            "type": "http.response.start",
            "status": status,
            "headers": response_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
