import logging
import time
from concurrent.futures import Future

from httpplug.exceptions import HttpError
from httpplug.plugins.types import Continuation
from httpplug.promise import then
from httpplug.request import Request
from httpplug.response import Response


class LoggerPlugin:
    """Log each request, its response and its elapsed time, or the error it failed with."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._level = level

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        start = time.perf_counter()
        self._logger.log(self._level, "Sending request: %s %s", request.method, request.url)

        def on_response(response: Response) -> Response:
            self._logger.log(
                self._level,
                "Received response: %d %s for %s %s in %.1f ms",
                response.status, response.reason, request.method, request.url, _elapsed_ms(start),
            )
            return response

        def on_error(exc: BaseException) -> Response:
            if isinstance(exc, HttpError):
                self._logger.error(
                    "Error response: %d %s for %s %s in %.1f ms",
                    exc.status, exc.response.reason, request.method, request.url, _elapsed_ms(start),
                )
            else:
                self._logger.error(
                    "Request failed: %s %s: %r in %.1f ms", request.method, request.url, exc, _elapsed_ms(start),
                )
            raise exc

        return then(next_(request), on_response, on_error)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000
