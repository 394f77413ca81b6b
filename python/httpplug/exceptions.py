"""Exception classes."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpplug.request import Request
    from httpplug.response import Response


class HttpPlugError(Exception):
    """Base class for all httpplug errors."""


class ConfigurationError(HttpPlugError):
    """Invalid client construction: unsupported transport or bad options."""


class RequestError(HttpPlugError):
    """Error tied to a request that went through the plugin chain."""

    def __init__(self, message: str, request: "Request") -> None:
        super().__init__(message)
        self.request = request

    @property
    def message(self) -> str:
        return str(self)


class TransportError(RequestError):
    """The underlying transport failed to produce a response."""


class HttpError(RequestError):
    """A response was received but it is an error."""

    def __init__(self, message: str, request: "Request", response: "Response") -> None:
        super().__init__(message, request)
        self.response = response

    @property
    def status(self) -> int:
        return self.response.status


class ClientError(HttpError):
    """Response with a 4xx status code."""


class ServerError(HttpError):
    """Response with a 5xx status code."""


class LoopError(RequestError):
    """The plugin chain was restarted more times than allowed by max_restarts."""


class TooManyRedirectsError(RequestError):
    """Redirect limit of the redirect plugin reached."""


class CircularRedirectionError(RequestError):
    """A redirect points back to an url already visited by the same request."""
