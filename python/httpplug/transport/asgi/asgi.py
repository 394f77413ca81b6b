import asyncio
from collections.abc import AsyncIterator, Callable, Coroutine
from datetime import timedelta
from typing import Any
from urllib.parse import unquote

from httpplug.exceptions import TransportError
from httpplug.request import Request
from httpplug.response import Response


class ASGITransport:
    """Transport that routes requests into an in-process ASGI application."""

    def __init__(
        self,
        app: Callable,
        *,
        timeout: timedelta | None = None,
        scope_update: Callable[[dict[str, Any], Request], Coroutine[Any, Any, None]] | None = None,
    ):
        """Initialize the ASGI transport.

        Args:
            app: ASGI application callable
            timeout: Timeout for ASGI operations (default: 5 seconds)
            scope_update: Optional coroutine to modify the ASGI scope per request
        """
        self._app = app
        self._scope_update = scope_update
        self._timeout = timeout or timedelta(seconds=5)
        self._lifespan_input_queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._lifespan_output_queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self._lifespan_task: asyncio.Task[None] | None = None
        self._state: dict[str, Any] = {}

    async def __aenter__(self):
        async def wrapped_lifespan():
            await self._app(
                {"type": "lifespan", "asgi": {"version": "3.0"}, "state": self._state},
                self._lifespan_input_queue.get,
                self._lifespan_output_queue.put,
            )

        self._lifespan_task = asyncio.create_task(wrapped_lifespan())
        await self._send_lifespan("startup")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self._send_lifespan("shutdown")
        self._lifespan_task = None

    async def _send_lifespan(self, action: str) -> None:
        assert self._lifespan_task

        await self._lifespan_input_queue.put({"type": f"lifespan.{action}"})
        message = await asyncio.wait_for(self._lifespan_output_queue.get(), timeout=self._timeout.total_seconds())

        if message["type"] == f"lifespan.{action}.failed":
            await asyncio.sleep(0)
            if self._lifespan_task.done() and (exc := self._lifespan_task.exception()) is not None:
                raise exc
            raise RuntimeError(message)

    async def handle(self, request: Request) -> Response:
        scope = await self._request_to_asgi_scope(request)
        body_parts = self._asgi_body_parts(request)

        send_queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

        async def receive() -> dict[str, Any]:
            if part := await anext(body_parts, None):
                return part
            return {"type": "http.disconnect"}

        async def send(message: dict[str, Any]) -> None:
            await send_queue.put(message)

        try:
            await self._app(scope, receive, send)
            return await self._asgi_response_to_response(send_queue)
        except TimeoutError as exc:
            msg = f"ASGI application did not complete the response in {self._timeout.total_seconds()}s"
            raise TransportError(msg, request) from exc

    async def _request_to_asgi_scope(self, request: Request) -> dict[str, Any]:
        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": request.version,
            "method": request.method,
            "scheme": request.scheme or "http",
            "path": unquote(request.path),
            "raw_path": request.path.encode(),
            "root_path": "",
            "query_string": request.query.encode(),
            "headers": [[name.lower().encode(), value.encode()] for name, value in request.headers.raw_items()],
            "server": (request.host or "localhost", request.port or (443 if request.scheme == "https" else 80)),
            "state": self._state.copy(),
        }
        if self._scope_update is not None:
            await self._scope_update(scope, request)
        return scope

    async def _asgi_body_parts(self, request: Request) -> AsyncIterator[dict[str, Any]]:
        yield {"type": "http.request", "body": request.body, "more_body": False}

    async def _asgi_response_to_response(self, send_queue: asyncio.Queue[dict[str, Any]]) -> Response:
        status = 500
        headers: list[tuple[str, str]] = []
        body_parts = []

        while True:
            message = await asyncio.wait_for(send_queue.get(), timeout=self._timeout.total_seconds())

            if message["type"] == "http.response.start":
                status = message["status"]
                headers = [(k.decode(), v.decode()) for k, v in message.get("headers", [])]

            elif message["type"] == "http.response.body":
                if body := message.get("body"):
                    body_parts.append(body)

                if not message.get("more_body", False):
                    break

        return Response(status, headers=headers, body=b"".join(body_parts))
