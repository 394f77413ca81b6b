"""Transports the plugin client delegates to, and adapters between blocking and non-blocking transports."""

from concurrent.futures import Future
from typing import Self

from httpplug.promise import settle
from httpplug.request import Request
from httpplug.response import Response
from httpplug.transport.loop import LoopThread
from httpplug.transport.types import (
    CoroutineTransport,
    HttpAsyncClient,
    HttpClient,
    is_http_async_client,
    is_http_client,
)


class EmulatedHttpAsyncClient:
    """Expose a blocking transport as a non-blocking one.

    `send_async` sends eagerly on the calling thread and returns an already resolved future.
    """

    def __init__(self, client: HttpClient) -> None:
        self._client = client

    @property
    def client(self) -> HttpClient:
        return self._client

    def send(self, request: Request) -> Response:
        return self._client.send(request)

    def send_async(self, request: Request) -> Future[Response]:
        return settle(self._client.send, request)

    def close(self) -> None:
        if callable(close := getattr(self._client, "close", None)):
            close()


class AsyncioHttpClient:
    """Run a coroutine transport on an asyncio event loop thread.

    When no loop thread is given, one is started and owned by this client and stopped by `close()`.
    """

    def __init__(self, transport: CoroutineTransport, loop_thread: LoopThread | None = None) -> None:
        self._transport = transport
        self._owns_loop = loop_thread is None
        self._loop_thread = loop_thread or LoopThread()

    @property
    def loop_thread(self) -> LoopThread:
        return self._loop_thread

    def send_async(self, request: Request) -> Future[Response]:
        return self._loop_thread.submit(self._transport.handle(request))

    def close(self) -> None:
        if self._owns_loop:
            self._loop_thread.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


__all__ = [
    "AsyncioHttpClient",
    "CoroutineTransport",
    "EmulatedHttpAsyncClient",
    "HttpAsyncClient",
    "HttpClient",
    "LoopThread",
    "is_http_async_client",
    "is_http_client",
]
