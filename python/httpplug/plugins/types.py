"""Plugin types and interfaces."""

from collections.abc import Callable
from concurrent.futures import Future
from typing import Protocol, runtime_checkable

from httpplug.request import Request
from httpplug.response import Response

Continuation = Callable[[Request], Future[Response]]


@runtime_checkable
class Plugin(Protocol):
    """Plugin interface for intercepting the request/response exchange of a PluginClient."""

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        """Handle the request and return a future of the response.

        Call `next_(request)` to pass the (possibly modified) request to the rest of the chain. Call `first(request)`
        to restart the whole chain from its first plugin, e.g. to resend after re-authenticating or following a
        redirect. Restarts are bounded by the client's `max_restarts` option.
        A plugin may also short-circuit by returning `promise.fulfilled(response)` or `promise.rejected(error)`, or
        transform the outcome of `next_`/`first` with `promise.then`.

        HTTP level conditions must be reported as a rejected future, not by raising. The same plugin instance serves
        all requests of the client, possibly concurrently, so per-request state must not be stored on the plugin.

        Args:
            request: Request to process at this position of the chain
            next_: Rest of the chain after this plugin
            first: Entry point of the whole chain

        Returns:
            Future resolving to the response or rejected with an error.
        """
        ...


PluginCallable = Callable[[Request, Continuation, Continuation], Future[Response]]
