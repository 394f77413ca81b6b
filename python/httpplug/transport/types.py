"""Transport interfaces consumed by the plugin client."""

from concurrent.futures import Future
from typing import Any, Protocol, runtime_checkable

from httpplug.request import Request
from httpplug.response import Response


@runtime_checkable
class HttpClient(Protocol):
    """Blocking HTTP transport."""

    def send(self, request: Request) -> Response:
        """Send the request and wait for the response. Raises TransportError when no response could be received."""
        ...


@runtime_checkable
class HttpAsyncClient(Protocol):
    """Non-blocking HTTP transport."""

    def send_async(self, request: Request) -> Future[Response]:
        """Start sending the request and return a future of the response."""
        ...


class CoroutineTransport(Protocol):
    """Transport implemented as a coroutine, run on an event loop by AsyncioHttpClient."""

    async def handle(self, request: Request) -> Response: ...


def is_http_client(obj: Any) -> bool:
    return callable(getattr(obj, "send", None))


def is_http_async_client(obj: Any) -> bool:
    return callable(getattr(obj, "send_async", None))
