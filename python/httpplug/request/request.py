from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Self
from urllib.parse import SplitResult, urlencode, urlsplit, urlunsplit

import orjson

from httpplug.http import Headers
from httpplug.types import BodyType, HeadersType, QueryParams


def _to_bytes(body: BodyType | None) -> bytes:
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode()
    return bytes(body)


@dataclass(frozen=True, slots=True)
class Request:
    """HTTP request passed through the plugin chain.

    Requests are immutable. Plugins that need a different request create a modified copy with one of the `with_*`
    methods and forward the copy, so a request object seen by one plugin is never changed under it by another.
    """

    method: str
    url: str
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    version: str = "1.1"
    extensions: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __init__(
        self,
        method: str,
        url: str,
        headers: HeadersType | None = None,
        body: BodyType | None = None,
        version: str = "1.1",
        extensions: Mapping[str, Any] | None = None,
    ) -> None:
        object.__setattr__(self, "method", method.upper())
        object.__setattr__(self, "url", str(url))
        object.__setattr__(self, "headers", Headers(headers))
        object.__setattr__(self, "body", _to_bytes(body))
        object.__setattr__(self, "version", version)
        object.__setattr__(self, "extensions", MappingProxyType(dict(extensions or {})))

    @classmethod
    def json(cls, method: str, url: str, data: Any, headers: HeadersType | None = None) -> Self:
        """Create a request with an orjson serialized body and a JSON content type."""
        hdrs = Headers(headers)
        if "content-type" not in hdrs:
            hdrs = hdrs.set("Content-Type", "application/json")
        return cls(method, url, hdrs, orjson.dumps(data))

    @property
    def _split(self) -> SplitResult:
        return urlsplit(self.url)

    @property
    def scheme(self) -> str:
        return self._split.scheme

    @property
    def host(self) -> str | None:
        return self._split.hostname

    @property
    def port(self) -> int | None:
        return self._split.port

    @property
    def path(self) -> str:
        return self._split.path or "/"

    @property
    def query(self) -> str:
        return self._split.query

    @property
    def target(self) -> str:
        """Request target as sent on the request line: path and query string."""
        return f"{self.path}?{self.query}" if self.query else self.path

    def with_method(self, method: str) -> Self:
        return replace(self, method=method)

    def with_url(self, url: str) -> Self:
        return replace(self, url=url)

    def with_query(self, params: QueryParams) -> Self:
        """Return a copy with the params appended to the query string."""
        parts = self._split
        extra = urlencode(list(params.items()) if isinstance(params, Mapping) else list(params), doseq=True)
        query = f"{parts.query}&{extra}" if parts.query else extra
        return replace(self, url=urlunsplit(parts._replace(query=query)))

    def with_header(self, name: str, value: str) -> Self:
        """Return a copy with the header replaced."""
        return replace(self, headers=self.headers.set(name, value))

    def with_added_header(self, name: str, value: str) -> Self:
        """Return a copy with the value appended to the header."""
        return replace(self, headers=self.headers.add(name, value))

    def without_header(self, name: str) -> Self:
        return replace(self, headers=self.headers.remove(name))

    def with_headers(self, headers: HeadersType) -> Self:
        """Return a copy with all headers replaced."""
        return replace(self, headers=headers)

    def with_body(self, body: BodyType | None) -> Self:
        return replace(self, body=body)

    def with_version(self, version: str) -> Self:
        return replace(self, version=version)

    def with_extension(self, key: str, value: Any) -> Self:
        """Return a copy carrying the value under key. Extensions pass data down the plugin chain, they are not sent."""
        return replace(self, extensions={**self.extensions, key: value})

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.url}>"
