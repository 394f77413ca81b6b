"""Transports backed by pyreqwest clients."""

from typing import TYPE_CHECKING, Any

from pyreqwest.exceptions import (
    ClientClosedError,
    ConnectError,
    ConnectTimeoutError,
    PoolTimeoutError,
    ReadTimeoutError,
)

from httpplug.exceptions import TransportError
from httpplug.request import Request
from httpplug.response import Response

if TYPE_CHECKING:
    from pyreqwest.client import Client, SyncClient

TRANSPORT_ERRORS = (ClientClosedError, ConnectError, ConnectTimeoutError, PoolTimeoutError, ReadTimeoutError)


class PyreqwestClient:
    """Blocking transport sending requests with a pyreqwest SyncClient.

    Build the client without `error_for_status` so that error responses reach the plugins.
    """

    def __init__(self, client: "SyncClient") -> None:
        self._client = client

    def send(self, request: Request) -> Response:
        builder = self._client.request(request.method, request.url).headers(request.headers.raw_items())
        if request.body:
            builder = builder.body_bytes(request.body)
        try:
            resp = builder.build().send()
            body = resp.bytes().to_bytes()
        except TRANSPORT_ERRORS as exc:
            raise TransportError(str(exc), request) from exc
        return to_response(resp, body)

    def close(self) -> None:
        self._client.close()


class PyreqwestTransport:
    """Coroutine transport sending requests with a pyreqwest async Client. Run it with AsyncioHttpClient."""

    def __init__(self, client: "Client") -> None:
        self._client = client

    async def handle(self, request: Request) -> Response:
        builder = self._client.request(request.method, request.url).headers(request.headers.raw_items())
        if request.body:
            builder = builder.body_bytes(request.body)
        try:
            resp = await builder.build().send()
            body = (await resp.bytes()).to_bytes()
        except TRANSPORT_ERRORS as exc:
            raise TransportError(str(exc), request) from exc
        return to_response(resp, body)


def to_response(resp: Any, body: bytes) -> Response:
    """Convert a pyreqwest response with its already read body."""
    return Response(
        resp.status,
        headers=list(resp.headers.items()),
        body=body,
        version=str(resp.version).removeprefix("HTTP/"),
    )
