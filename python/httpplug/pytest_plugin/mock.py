"""Module providing a mock HTTP transport for testing code that uses httpplug clients."""

from concurrent.futures import Future
from re import Pattern
from typing import Any, Literal, Self, assert_never
from urllib.parse import parse_qs

import orjson
import pytest

from httpplug.exceptions import TransportError
from httpplug.http import Headers
from httpplug.promise import settle
from httpplug.pytest_plugin.internal.matcher import InternalMatcher
from httpplug.pytest_plugin.types import (
    BodyContentMatcher,
    CustomHandler,
    CustomMatcher,
    JsonMatcher,
    Matcher,
    MethodMatcher,
    QueryMatcher,
    UrlMatcher,
)
from httpplug.request import Request
from httpplug.response import Response


class Mock:
    """Class representing a single mock rule."""

    def __init__(self, method: MethodMatcher | None = None, path: UrlMatcher | None = None) -> None:
        """Do not use directly. Instead, use ClientMocker.mock()."""
        self._method_matcher = InternalMatcher(method) if method is not None else None
        self._path_matcher = InternalMatcher(path) if path is not None else None
        self._query_matcher: dict[str, InternalMatcher] | InternalMatcher | None = None
        self._header_matchers: dict[str, InternalMatcher] = {}
        self._body_matcher: tuple[InternalMatcher, Literal["content", "json"]] | None = None
        self._custom_matcher: CustomMatcher | None = None
        self._custom_handler: CustomHandler | None = None

        self._status = 200
        self._headers = Headers()
        self._body = b""
        self._version = "1.1"
        self._error: Exception | None = None
        self._error_message: str | None = None
        self._using_response_builder = False

        self._matched_requests: list[Request] = []
        self._unmatched_requests_repr: list[str] = []

    def assert_called(
        self,
        *,
        count: int | None = None,
        min_count: int | None = None,
        max_count: int | None = None,
    ) -> None:
        """Assert that this mock was called the expected number of times. By default, exactly once."""
        if count is None and min_count is None and max_count is None:
            count = 1

        if self._assertion_passes(count, min_count, max_count):
            return

        from httpplug.pytest_plugin.internal.assert_message import format_assert_called_error

        raise AssertionError(format_assert_called_error(self, count=count, min_count=min_count, max_count=max_count))

    def _assertion_passes(
        self,
        count: int | None,
        min_count: int | None,
        max_count: int | None,
    ) -> bool:
        actual_count = len(self._matched_requests)
        if count is not None:
            return actual_count == count

        min_satisfied = min_count is None or actual_count >= min_count
        max_satisfied = max_count is None or actual_count <= max_count

        return min_satisfied and max_satisfied

    def get_requests(self) -> list[Request]:
        """Get all captured requests by this mock."""
        return [*self._matched_requests]

    def get_call_count(self) -> int:
        """Get the total number of calls to this mock."""
        return len(self._matched_requests)

    def reset_requests(self) -> None:
        """Reset all captured requests for this mock."""
        self._matched_requests.clear()

    def match_query(self, query: QueryMatcher) -> Self:
        """Set a matcher to match the entire query string or specific query parameters."""
        if isinstance(query, dict):
            self._query_matcher = {k: InternalMatcher(v) for k, v in query.items()}
        else:
            self._query_matcher = InternalMatcher(query)
        return self

    def match_query_param(self, name: str, value: Matcher | list[str]) -> Self:
        """Set a matcher to match a specific query parameter."""
        if not isinstance(self._query_matcher, dict):
            self._query_matcher = {}
        self._query_matcher[name] = InternalMatcher(value)
        return self

    def match_header(self, name: str, value: Matcher) -> Self:
        """Set a matcher to match a specific request header."""
        self._header_matchers[name] = InternalMatcher(value)
        return self

    def match_body(self, matcher: BodyContentMatcher) -> Self:
        """Set a matcher to match request bodies as raw content (text or bytes)."""
        self._body_matcher = (InternalMatcher(matcher), "content")
        return self

    def match_body_json(self, matcher: JsonMatcher) -> Self:
        """Set a matcher to match JSON request bodies."""
        self._body_matcher = (InternalMatcher(matcher), "json")
        return self

    def match_request(self, matcher: CustomMatcher) -> Self:
        """Set a custom matcher to match requests."""
        self._custom_matcher = matcher
        return self

    def match_request_with_response(self, handler: CustomHandler) -> Self:
        """Set a custom handler to generate the response for matched requests. Returning None means no match."""
        assert not self._using_response_builder, "Cannot use response builder and custom handler together"
        self._custom_handler = handler
        return self

    def with_status(self, status: int) -> Self:
        """Set the mocked response status code."""
        self._use_response_builder()
        self._status = status
        return self

    def with_header(self, name: str, value: str) -> Self:
        """Add a header to the mocked response."""
        self._use_response_builder()
        self._headers = self._headers.add(name, value)
        return self

    def with_body_bytes(self, body: bytes | bytearray | memoryview) -> Self:
        """Set the mocked response body to the given bytes."""
        self._use_response_builder()
        self._body = bytes(body)
        return self

    def with_body_text(self, body: str) -> Self:
        """Set the mocked response body to the given text."""
        self._use_response_builder()
        self._body = body.encode()
        return self

    def with_body_json(self, json_body: Any) -> Self:
        """Set the mocked response body to the given JSON-serializable object."""
        self._use_response_builder()
        self._body = orjson.dumps(json_body)
        if "content-type" not in self._headers:
            self._headers = self._headers.set("Content-Type", "application/json")
        return self

    def with_version(self, version: str) -> Self:
        """Set the mocked response HTTP version."""
        self._use_response_builder()
        self._version = version
        return self

    def with_error(self, error: Exception | str = "Mocked transport error") -> Self:
        """Fail matched requests instead of responding. A message is raised as TransportError."""
        self._error = error if isinstance(error, Exception) else None
        self._error_message = error if isinstance(error, str) else None
        return self

    def _use_response_builder(self) -> None:
        assert self._custom_handler is None, "Cannot use response builder and custom handler together"
        self._using_response_builder = True

    def _handle(self, request: Request) -> Response | None:
        matches = {
            "method": self._matches_method(request),
            "path": self._matches_path(request),
            "query": self._match_query(request),
            "headers": self._match_headers(request),
            "body": self._match_body(request),
            "custom": self._matches_custom(request),
        }

        response: Response | None = None
        if all(matches.values()):
            response = self._custom_handler(request) if self._custom_handler else self._response()
            matches["handler"] = response is not None

        if response is None:
            from httpplug.pytest_plugin.internal.assert_message import format_unmatched_request

            self._unmatched_requests_repr.append(
                format_unmatched_request(request, unmatched={k for k, matched in matches.items() if not matched}),
            )
            return None

        self._matched_requests.append(request)
        if self._error is not None:
            raise self._error
        if self._error_message is not None:
            raise TransportError(self._error_message, request)
        return response

    def _response(self) -> Response:
        return Response(self._status, headers=self._headers, body=self._body, version=self._version)

    def _matches_method(self, request: Request) -> bool:
        return self._method_matcher is None or self._method_matcher.matches(request.method)

    def _matches_path(self, request: Request) -> bool:
        return self._path_matcher is None or self._path_matcher.matches(request.path)

    def _match_headers(self, request: Request) -> bool:
        for header_name, expected_value in self._header_matchers.items():
            actual_value = request.headers.get(header_name)
            if actual_value is None or not expected_value.matches(actual_value):
                return False
        return True

    def _match_body(self, request: Request) -> bool:
        if self._body_matcher is None:
            return True

        matcher, kind = self._body_matcher
        if kind == "json":
            try:
                return matcher.matches(orjson.loads(request.body))
            except orjson.JSONDecodeError:
                return False
        elif kind == "content":
            if isinstance(matcher.matcher, bytes):
                return matcher.matches(request.body)
            try:
                return matcher.matches(request.body.decode())
            except UnicodeDecodeError:
                return False
        else:
            assert_never(kind)

    def _match_query(self, request: Request) -> bool:
        if self._query_matcher is None:
            return True

        query_dict = _query_dict(request.query)

        if isinstance(self._query_matcher, dict):
            for key, expected_value in self._query_matcher.items():
                actual_value = query_dict.get(key)
                if actual_value is None or not expected_value.matches(actual_value):
                    return False
            return True
        if isinstance(self._query_matcher.matcher, str | Pattern):
            return self._query_matcher.matches(request.query)
        return self._query_matcher.matches(query_dict)

    def _matches_custom(self, request: Request) -> bool:
        return self._custom_matcher is None or bool(self._custom_matcher(request))


def _query_dict(query: str) -> dict[str, str | list[str]]:
    return {k: v[0] if len(v) == 1 else v for k, v in parse_qs(query, keep_blank_values=True).items()}


class ClientMocker:
    """Mock HTTP transport. Pass it as the client of a PluginClient and declare responses with mock rules.

    Rules are checked in declaration order and the first matching rule responds. Unmatched requests fail with
    TransportError, or with AssertionError in strict mode.
    """

    def __init__(self) -> None:
        """Initialize the ClientMocker."""
        self._mocks: list[Mock] = []
        self._strict = False

    def mock(self, method: MethodMatcher | None = None, path: UrlMatcher | None = None) -> Mock:
        """Add a mock rule for requests matching the given criteria."""
        mock = Mock(method, path)
        self._mocks.append(mock)
        return mock

    def get(self, path: UrlMatcher | None = None) -> Mock:
        """Mock GET requests to the given path."""
        return self.mock("GET", path)

    def post(self, path: UrlMatcher | None = None) -> Mock:
        """Mock POST requests to the given path."""
        return self.mock("POST", path)

    def put(self, path: UrlMatcher | None = None) -> Mock:
        """Mock PUT requests to the given path."""
        return self.mock("PUT", path)

    def patch(self, path: UrlMatcher | None = None) -> Mock:
        """Mock PATCH requests to the given path."""
        return self.mock("PATCH", path)

    def delete(self, path: UrlMatcher | None = None) -> Mock:
        """Mock DELETE requests to the given path."""
        return self.mock("DELETE", path)

    def head(self, path: UrlMatcher | None = None) -> Mock:
        """Mock HEAD requests to the given path."""
        return self.mock("HEAD", path)

    def options(self, path: UrlMatcher | None = None) -> Mock:
        """Mock OPTIONS requests to the given path."""
        return self.mock("OPTIONS", path)

    def strict(self, enabled: bool = True) -> Self:
        """Enable strict mode - unmatched requests will raise an AssertionError."""
        self._strict = enabled
        return self

    def get_requests(self) -> list[Request]:
        """Get all captured requests in all mocks."""
        return [request for mock in self._mocks for request in mock.get_requests()]

    def get_call_count(self) -> int:
        """Get the total number of calls in all mocks."""
        return sum(mock.get_call_count() for mock in self._mocks)

    def clear(self) -> None:
        """Remove all mocks."""
        self._mocks.clear()

    def reset_requests(self) -> None:
        """Reset all captured requests in all mocks."""
        for mock in self._mocks:
            mock.reset_requests()

    def send(self, request: Request) -> Response:
        for mock in self._mocks:
            if (response := mock._handle(request)) is not None:
                return response

        msg = f"No mock rule matched request: {request.method} {request.url}"
        if self._strict:
            raise AssertionError(msg)
        raise TransportError(msg, request)

    def send_async(self, request: Request) -> Future[Response]:
        return settle(self.send, request)


@pytest.fixture
def httpplug_mocker() -> ClientMocker:
    """Fixture that provides a ClientMocker transport for mocking HTTP requests in tests."""
    return ClientMocker()


__all__ = [
    "ClientMocker",
    "Mock",
    "httpplug_mocker",
]
