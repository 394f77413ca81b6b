import logging
from collections.abc import Iterable
from concurrent.futures import Future
from urllib.parse import urljoin, urlsplit

from httpplug.exceptions import CircularRedirectionError, TooManyRedirectsError
from httpplug.plugins.types import Continuation
from httpplug.promise import then
from httpplug.request import Request
from httpplug.response import Response

logger = logging.getLogger(__name__)

HISTORY_EXTENSION = "httpplug.redirect_history"

# status -> (switches method to GET unless GET/HEAD, is a multiple choice)
REDIRECT_CODES: dict[int, tuple[bool, bool]] = {
    300: (True, True),
    301: (True, False),
    302: (True, False),
    303: (True, False),
    307: (False, False),
    308: (False, False),
}

_BODY_HEADERS = ("Content-Length", "Content-Type", "Transfer-Encoding")


class RedirectPlugin:
    """Follow redirect responses by restarting the chain with the redirected request.

    The redirected request goes through every plugin again, so authentication, headers and logging apply to it too.
    Redirect history travels with the request in its extensions. The number of redirects is bounded by the client's
    `max_restarts` option, and additionally by `max_redirects` when given.
    """

    def __init__(
        self,
        *,
        preserve_header: bool | Iterable[str] = True,
        use_default_for_multiple: bool = True,
        max_redirects: int | None = None,
    ) -> None:
        """Initialize the redirect plugin.

        Args:
            preserve_header: True keeps all headers on redirect, False drops them all, a list keeps only those named
            use_default_for_multiple: Follow the Location header of a 300 Multiple Choices response
            max_redirects: Maximum redirects for one request, the client's restart budget applies when None
        """
        if isinstance(preserve_header, bool):
            self._preserve: bool | frozenset[str] = preserve_header
        else:
            self._preserve = frozenset(name.lower() for name in preserve_header)
        self._use_default_for_multiple = use_default_for_multiple
        self._max_redirects = max_redirects

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        def follow(response: Response) -> Response | Future[Response]:
            if response.status not in REDIRECT_CODES or "location" not in response.headers:
                return response

            switch_method, multiple = REDIRECT_CODES[response.status]
            if multiple and not self._use_default_for_multiple:
                return response

            target = urljoin(request.url, response.headers["location"])
            history: tuple[str, ...] = (*request.extensions.get(HISTORY_EXTENSION, ()), request.url)
            if target in history:
                msg = f"Circular redirection detected to {target}"
                raise CircularRedirectionError(msg, request)
            if self._max_redirects is not None and len(history) > self._max_redirects:
                msg = f"Maximum number of redirects ({self._max_redirects}) reached"
                raise TooManyRedirectsError(msg, request)

            redirect = self._build_redirect_request(request, target, switch_method)
            logger.debug("Following %d redirect from %s to %s", response.status, request.url, target)
            return first(redirect.with_extension(HISTORY_EXTENSION, history))

        return then(next_(request), follow)

    def _build_redirect_request(self, request: Request, target: str, switch_method: bool) -> Request:
        redirect = request.with_url(target)

        if switch_method and request.method not in ("GET", "HEAD"):
            redirect = redirect.with_method("GET").with_body(None)
            for name in _BODY_HEADERS:
                redirect = redirect.without_header(name)

        if self._preserve is False:
            redirect = redirect.with_headers(())
        elif self._preserve is not True:
            kept = [(n, v) for n, v in redirect.headers.raw_items() if n.lower() in self._preserve]
            redirect = redirect.with_headers(kept)

        if urlsplit(target).netloc != urlsplit(request.url).netloc:
            redirect = redirect.without_header("Host")
        return redirect
