"""Plugins modifying request headers before the request is forwarded."""

from collections.abc import Iterable
from concurrent.futures import Future

from httpplug.http import Headers
from httpplug.plugins.types import Continuation
from httpplug.request import Request
from httpplug.response import Response
from httpplug.types import HeadersType


class HeaderDefaultsPlugin:
    """Set headers only when the request does not have them yet."""

    def __init__(self, headers: HeadersType) -> None:
        self._headers = Headers(headers)

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        return next_(request.with_headers(request.headers.merge_defaults(self._headers)))


class HeaderSetPlugin:
    """Set headers, replacing any existing values."""

    def __init__(self, headers: HeadersType) -> None:
        self._headers = Headers(headers)

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        headers = request.headers
        for name in self._headers:
            headers = headers.set(name, self._headers.get_all(name))
        return next_(request.with_headers(headers))


class HeaderAppendPlugin:
    """Append header values, keeping existing ones."""

    def __init__(self, headers: HeadersType) -> None:
        self._headers = Headers(headers)

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        headers = request.headers
        for name, value in self._headers.raw_items():
            headers = headers.add(name, value)
        return next_(request.with_headers(headers))


class HeaderRemovePlugin:
    """Remove headers from the request."""

    def __init__(self, names: Iterable[str]) -> None:
        self._names = tuple(names)

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        headers = request.headers
        for name in self._names:
            headers = headers.remove(name)
        return next_(request.with_headers(headers))


class ContentLengthPlugin:
    """Set Content-Length from the body when the request has a body but no length."""

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        if request.body and "content-length" not in request.headers:
            request = request.with_header("Content-Length", str(len(request.body)))
        return next_(request)
