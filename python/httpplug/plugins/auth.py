"""Authentication plugin and the authentication methods it can apply."""

import base64
from concurrent.futures import Future
from typing import Protocol

from httpplug.plugins.types import Continuation
from httpplug.request import Request
from httpplug.response import Response


class Authentication(Protocol):
    """Authentication method applied to every request by AuthenticationPlugin."""

    def authenticate(self, request: Request) -> Request:
        """Return a copy of the request carrying the credentials."""
        ...


class BasicAuth:
    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._password = password

    def authenticate(self, request: Request) -> Request:
        token = base64.b64encode(f"{self._username}:{self._password}".encode()).decode("ascii")
        return request.with_header("Authorization", f"Basic {token}")


class BearerAuth:
    def __init__(self, token: str) -> None:
        self._token = token

    def authenticate(self, request: Request) -> Request:
        return request.with_header("Authorization", f"Bearer {self._token}")


class HeaderAuth:
    """Credentials sent in a custom header, e.g. an API key."""

    def __init__(self, name: str, value: str) -> None:
        self._name = name
        self._value = value

    def authenticate(self, request: Request) -> Request:
        return request.with_header(self._name, self._value)


class AuthenticationPlugin:
    """Authenticate every request with the given method."""

    def __init__(self, authentication: Authentication) -> None:
        self._authentication = authentication

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        return next_(self._authentication.authenticate(request))
