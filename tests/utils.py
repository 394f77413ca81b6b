from collections.abc import Callable
from concurrent.futures import Future

from httpplug.plugins.types import Continuation
from httpplug.request import Request
from httpplug.response import Response


class BlockingTransport:
    """Blocking transport answering with a handler, recording the requests it receives."""

    def __init__(self, handler: Callable[[Request], Response] | None = None) -> None:
        self.handler = handler or (lambda _: Response(200, body=b"ok"))
        self.requests: list[Request] = []
        self.closed = False

    def send(self, request: Request) -> Response:
        self.requests.append(request)
        return self.handler(request)

    def close(self) -> None:
        self.closed = True


class AsyncTransport:
    """Non-blocking transport returning pending futures that the test resolves."""

    def __init__(self) -> None:
        self.pending: list[tuple[Request, Future[Response]]] = []

    def send_async(self, request: Request) -> Future[Response]:
        future: Future[Response] = Future()
        self.pending.append((request, future))
        return future

    def resolve_all(self, response: Response | None = None) -> None:
        for _, future in self.pending:
            if not future.done():
                future.set_result(response or Response(200))


class DualTransport(BlockingTransport):
    """Transport with both send forms, counting which one was used."""

    def __init__(self, handler: Callable[[Request], Response] | None = None) -> None:
        super().__init__(handler)
        self.async_calls = 0

    def send_async(self, request: Request) -> Future[Response]:
        self.async_calls += 1
        future: Future[Response] = Future()
        future.set_result(self.send(request))
        return future


class RecordingPlugin:
    """Plugin appending its name to a shared log on the way in and on the way out."""

    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        self.log.append(f"{self.name}:in")
        future = next_(request.with_added_header("X-Trace", self.name))
        future.add_done_callback(lambda _: self.log.append(f"{self.name}:out"))
        return future
