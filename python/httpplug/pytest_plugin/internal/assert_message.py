from typing import TYPE_CHECKING

import orjson

from httpplug.pytest_plugin.internal.matcher import InternalMatcher
from httpplug.request import Request

if TYPE_CHECKING:
    from httpplug.pytest_plugin.mock import Mock


def format_assert_called_error(
    mock: "Mock",
    *,
    count: int | None = None,
    min_count: int | None = None,
    max_count: int | None = None
) -> str:
    actual_count = len(mock._matched_requests)
    error_parts = ["Mock was not called as expected."]

    # Add expected vs actual count information
    if count is not None:
        error_parts.append(f"Expected exactly {count} call(s), but got {actual_count}.")
    else:
        expectations = []
        if min_count is not None:
            expectations.append(f"at least {min_count}")
        if max_count is not None:
            expectations.append(f"at most {max_count}")
        expected_desc = " and ".join(expectations)
        error_parts.append(f"Expected {expected_desc} call(s), but got {actual_count}.")

    error_parts.append("\nMock configuration:")
    error_parts.append(_format_mock_matchers(mock))

    if mock._unmatched_requests_repr:
        error_parts.append(f"\nUnmatched requests ({len(mock._unmatched_requests_repr)}):")
        for i, request_repr in enumerate(mock._unmatched_requests_repr[-5:], 1):
            error_parts.append(f"  {i}. {request_repr}")
        if len(mock._unmatched_requests_repr) > 5:
            error_parts.append(f"  ... and {len(mock._unmatched_requests_repr) - 5} more")

    if mock._matched_requests:
        error_parts.append(f"\nMatched requests ({len(mock._matched_requests)}):")
        for i, request in enumerate(mock._matched_requests[-3:], 1):
            error_parts.append(f"  {i}. {request.method} {request.url}")
        if len(mock._matched_requests) > 3:
            error_parts.append(f"  ... and {len(mock._matched_requests) - 3} more")

    return "\n".join(error_parts)


def format_unmatched_request(request: Request, unmatched: set[str]) -> str:
    """Describe a request that did not match a mock, naming the failed matchers."""
    parts = [f"{request.method} {request.url}"]
    if "headers" in unmatched:
        parts.append(f"headers={dict(request.headers)!r}")
    if "body" in unmatched:
        parts.append(f"body={request.body[:100]!r}")
    return f"{' '.join(parts)} (unmatched: {', '.join(sorted(unmatched))})"


def _format_mock_matchers(mock: "Mock") -> str:
    parts = [
        f"  Method: {mock._method_matcher if mock._method_matcher is not None else 'Any'}",
        f"  Path: {mock._path_matcher if mock._path_matcher is not None else 'Any'}",
    ]

    if mock._query_matcher is not None:
        parts.append(_format_query_matcher(mock._query_matcher))

    if mock._header_matchers:
        header_parts = [f"{name}: {value}" for name, value in mock._header_matchers.items()]
        parts.append(f"  Headers: {', '.join(header_parts)}")

    if mock._body_matcher is not None:
        parts.append(_format_body_matcher(*mock._body_matcher))

    if mock._custom_matcher is not None:
        parts.append(f"  Custom matcher: {mock._custom_matcher.__name__}")

    if mock._custom_handler is not None:
        parts.append(f"  Custom handler: {mock._custom_handler.__name__}")

    return "\n".join(parts)


def _format_query_matcher(query_matcher: dict[str, InternalMatcher] | InternalMatcher) -> str:
    if isinstance(query_matcher, dict):
        query_parts = [f"{k}={v}" for k, v in query_matcher.items()]
        return f"  Query: {', '.join(query_parts)}"
    return f"  Query: {query_matcher}"


def _format_body_matcher(matcher: InternalMatcher, kind: str) -> str:
    if kind == "json":
        try:
            return f"  Body (JSON): {orjson.dumps(matcher.matcher).decode()}"
        except TypeError:
            return f"  Body (JSON): {matcher}"
    if isinstance(matcher.matcher, bytes):
        return f"  Body (bytes): {matcher.matcher!r}"
    return f"  Body (text): {matcher}"
