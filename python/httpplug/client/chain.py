"""Composition of plugins into a single request handler."""

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future

from httpplug.exceptions import LoopError
from httpplug.plugins.types import Continuation, Plugin
from httpplug.promise import rejected
from httpplug.request import Request
from httpplug.response import Response

logger = logging.getLogger(__name__)


class PluginChain:
    """Plugins folded around a terminal transport call, built for a single logical request.

    The first plugin is the outermost one and sees the request first, the last plugin is next to the terminal call.
    The chain object itself is the `first` continuation handed to every plugin. Each entry through it is counted, and
    entering more than `max_restarts` times after the initial call rejects with LoopError instead of running the
    plugins again.
    """

    def __init__(self, plugins: Iterable[Plugin], terminal: Continuation, max_restarts: int) -> None:
        self._plugins = tuple(plugins)
        self._max_restarts = max_restarts
        self._entries = 0
        self._lock = threading.Lock()

        handler: Continuation = _guard_terminal(terminal)
        for plugin in reversed(self._plugins):
            handler = self._link(plugin, handler)
        self._handler = handler

        logger.debug("Built plugin chain: %s", [type(p).__name__ for p in self._plugins])

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return self._plugins

    @property
    def entries(self) -> int:
        """Number of times the chain was entered so far, the initial call included."""
        return self._entries

    def __call__(self, request: Request) -> Future[Response]:
        with self._lock:
            if self._entries > self._max_restarts:
                logger.warning(
                    "Plugin chain restarted more than %d times for %s %s", self._max_restarts, request.method,
                    request.url,
                )
                return rejected(LoopError("Too many restarts in plugin client", request))
            if self._entries:
                logger.debug("Restarting plugin chain (%d/%d)", self._entries, self._max_restarts)
            self._entries += 1
        return self._handler(request)

    def _link(self, plugin: Plugin, next_: Continuation) -> Continuation:
        def handle(request: Request) -> Future[Response]:
            try:
                result = plugin.handle_request(request, next_, self)
            except Exception as exc:
                logger.debug("Plugin %s raised %r", type(plugin).__name__, exc)
                return rejected(exc)
            if not isinstance(result, Future):
                msg = f"{type(plugin).__name__}.handle_request must return a Future, got {type(result).__name__}"
                return rejected(TypeError(msg))
            return result

        return handle


def _guard_terminal(terminal: Callable[[Request], Future[Response]]) -> Continuation:
    def call(request: Request) -> Future[Response]:
        try:
            return terminal(request)
        except Exception as exc:
            return rejected(exc)

    return call


def build_chain(plugins: Iterable[Plugin], terminal: Continuation, max_restarts: int = 10) -> PluginChain:
    """Compose plugins and a terminal call into a guarded entry point."""
    return PluginChain(plugins, terminal, max_restarts)
