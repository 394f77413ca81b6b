from concurrent.futures import Future

from httpplug.plugins.types import Continuation, PluginCallable
from httpplug.request import Request
from httpplug.response import Response


class FunctionPlugin:
    """Plugin delegating to a plain function with the handle_request signature."""

    def __init__(self, fn: PluginCallable) -> None:
        self._fn = fn

    @property
    def fn(self) -> PluginCallable:
        return self._fn

    def handle_request(self, request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        return self._fn(request, next_, first)

    def __repr__(self) -> str:
        return f"FunctionPlugin({getattr(self._fn, '__name__', self._fn)!r})"


def plugin_from_callable(fn: PluginCallable) -> FunctionPlugin:
    """Wrap a function taking (request, next_, first) into a plugin."""
    return FunctionPlugin(fn)
