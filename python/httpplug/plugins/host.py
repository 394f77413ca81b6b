from concurrent.futures import Future
from urllib.parse import urlsplit, urlunsplit

from httpplug.exceptions import ConfigurationError
from httpplug.plugins.types import Continuation
from httpplug.request import Request
from httpplug.response import Response


class AddHostPlugin:
    """Send requests to the scheme, host and port of a base url.

    By default only requests without a host are rewritten, so relative urls like "/users" can be used with the client.
    With `replace=True` every request is redirected to the base url host.
    """

    def __init__(self, base_url: str, *, replace: bool = False) -> None:
        parts = urlsplit(base_url)
        if not parts.scheme or not parts.netloc:
            msg = f"Base url must contain a scheme and a host: {base_url!r}"
            raise ConfigurationError(msg)
        self._scheme = parts.scheme
        self._netloc = parts.netloc
        self._base_path = parts.path.rstrip("/")
        self._replace = replace

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        parts = urlsplit(request.url)
        if self._replace or not parts.netloc:
            path = parts.path if parts.netloc else f"{self._base_path}/{parts.path.lstrip('/')}"
            url = urlunsplit((self._scheme, self._netloc, path, parts.query, parts.fragment))
            request = request.with_url(url).with_header("Host", self._netloc)
        return next_(request)
