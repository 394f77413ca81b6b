"""Usage examples for httpplug.

The examples talk to an in-process ASGI application, no network access is needed.

Run directly:
    uv run python -m examples.plugin_client
"""

import logging
import sys
from concurrent.futures import Future

from starlette.applications import Starlette
from starlette.requests import Request as StarletteRequest
from starlette.responses import JSONResponse, RedirectResponse, Response as StarletteResponse
from starlette.routing import Route

from httpplug.client import PluginClient, PluginClientBuilder
from httpplug.exceptions import ClientError, LoopError
from httpplug.plugins import (
    AddHostPlugin,
    AuthenticationPlugin,
    BearerAuth,
    ContentLengthPlugin,
    ErrorPlugin,
    HeaderDefaultsPlugin,
    LoggerPlugin,
    RedirectPlugin,
    plugin_from_callable,
)
from httpplug.plugins.types import Continuation
from httpplug.request import Request
from httpplug.response import Response
from httpplug.transport import AsyncioHttpClient
from httpplug.transport.asgi import ASGITransport


async def _echo(request: StarletteRequest) -> JSONResponse:
    return JSONResponse(
        {
            "method": request.method,
            "path": request.url.path,
            "authorization": request.headers.get("authorization"),
            "user_agent": request.headers.get("user-agent"),
            "body": (await request.body()).decode(),
        },
    )


async def _moved(_: StarletteRequest) -> RedirectResponse:
    return RedirectResponse("/echo", status_code=302)


async def _missing(_: StarletteRequest) -> StarletteResponse:
    return StarletteResponse("nothing here", status_code=404)


app = Starlette(
    routes=[
        Route("/echo", _echo, methods=["GET", "POST"]),
        Route("/moved", _moved, methods=["GET", "POST"]),
        Route("/missing", _missing),
    ],
)


def example_plugin_stack() -> None:
    """Example 1: Common plugins"""
    client = (
        PluginClientBuilder()
        .with_plugin(AddHostPlugin("http://api.local"))
        .with_plugin(HeaderDefaultsPlugin({"User-Agent": "httpplug-example"}))
        .with_plugin(AuthenticationPlugin(BearerAuth("secret")))
        .with_plugin(ContentLengthPlugin())
        .with_plugin(ErrorPlugin())
        .build(AsyncioHttpClient(ASGITransport(app)))
    )
    with client:
        resp = client.send(Request.json("POST", "/echo", {"message": "hello"}))
        print({"example": "plugin_stack", "status": resp.status, "echo": resp.json()})


def example_redirect() -> None:
    """Example 2: Follow redirects"""
    with PluginClient(AsyncioHttpClient(ASGITransport(app)), [RedirectPlugin(), ErrorPlugin()]) as client:
        resp = client.send(Request("POST", "http://api.local/moved", body="form"))
        print({"example": "redirect", "status": resp.status, "echo": resp.json()})


def example_error_plugin() -> None:
    """Example 3: Error responses as exceptions"""
    with PluginClient(AsyncioHttpClient(ASGITransport(app)), [ErrorPlugin()]) as client:
        try:
            client.send(Request("GET", "http://api.local/missing"))
        except ClientError as e:
            print({"example": "error_plugin", "error": e.message, "body": e.response.text()})


def example_send_async() -> None:
    """Example 4: Non-blocking sends"""
    with PluginClient(AsyncioHttpClient(ASGITransport(app)), [ErrorPlugin()]) as client:
        futures = [client.send_async(Request("GET", f"http://api.local/echo?n={i}")) for i in range(3)]
        print({"example": "send_async", "statuses": [f.result(timeout=5).status for f in futures]})


def example_custom_plugin() -> None:
    """Example 5: Callable plugin with a retry"""
    attempts: list[str] = []

    def retry_not_found(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        attempts.append(request.path)
        if request.path != "/missing":
            return next_(request)
        return first(request.with_url("http://api.local/echo"))

    with PluginClient(AsyncioHttpClient(ASGITransport(app)), [plugin_from_callable(retry_not_found)]) as client:
        resp = client.send(Request("GET", "http://api.local/missing"))
        print({"example": "custom_plugin", "status": resp.status, "attempts": attempts})


def example_loop_guard() -> None:
    """Example 6: Restart loop protection"""

    def always_restart(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        return first(request)

    client = PluginClient(AsyncioHttpClient(ASGITransport(app)), [plugin_from_callable(always_restart)], max_restarts=3)
    with client:
        try:
            client.send(Request("GET", "http://api.local/echo"))
        except LoopError as e:
            print({"example": "loop_guard", "error": e.message})


def example_logging() -> None:
    """Example 7: Request logging"""
    logger = logging.getLogger("example")
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        with PluginClient(AsyncioHttpClient(ASGITransport(app)), [LoggerPlugin(logger)]) as client:
            client.send(Request("GET", "http://api.local/echo"))
    finally:
        logger.removeHandler(handler)


if __name__ == "__main__":
    from examples._utils import run_examples

    run_examples(sys.modules[__name__])
