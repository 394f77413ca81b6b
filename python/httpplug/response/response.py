from dataclasses import dataclass, field, replace
from http import HTTPStatus
from typing import Any, Self

import orjson

from httpplug.http import Headers
from httpplug.types import BodyType, HeadersType

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def reason_phrase(status: int) -> str:
    """Standard reason phrase of a status code, empty for unknown codes."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


@dataclass(frozen=True, slots=True)
class Response:
    """HTTP response returned through the plugin chain. Immutable, use `with_*` methods to derive a changed copy."""

    status: int
    reason: str = ""
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    version: str = "1.1"

    def __init__(
        self,
        status: int = 200,
        reason: str | None = None,
        headers: HeadersType | None = None,
        body: BodyType | None = None,
        version: str = "1.1",
    ) -> None:
        status = int(status)
        if not 100 <= status <= 599:
            msg = f"Invalid status code: {status}"
            raise ValueError(msg)
        if isinstance(body, str):
            body = body.encode()
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "reason", reason or reason_phrase(status))
        object.__setattr__(self, "headers", Headers(headers))
        object.__setattr__(self, "body", bytes(body) if body is not None else b"")
        object.__setattr__(self, "version", version)

    @classmethod
    def json_response(cls, data: Any, status: int = 200, headers: HeadersType | None = None) -> Self:
        """Create a response with an orjson serialized body and a JSON content type."""
        hdrs = Headers(headers)
        if "content-type" not in hdrs:
            hdrs = hdrs.set("Content-Type", "application/json")
        return cls(status, headers=hdrs, body=orjson.dumps(data))

    @property
    def is_redirect(self) -> bool:
        return self.status in REDIRECT_STATUSES and "location" in self.headers

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)

    def json(self) -> Any:
        return orjson.loads(self.body)

    def with_status(self, status: int, reason: str | None = None) -> Self:
        """Return a copy with the status changed. Reason defaults to the standard phrase of the new status."""
        return replace(self, status=status, reason=reason or reason_phrase(status))

    def with_header(self, name: str, value: str) -> Self:
        return replace(self, headers=self.headers.set(name, value))

    def without_header(self, name: str) -> Self:
        return replace(self, headers=self.headers.remove(name))

    def with_body(self, body: BodyType | None) -> Self:
        return replace(self, body=body)

    def __repr__(self) -> str:
        return f"<Response [{self.status} {self.reason}]>"
