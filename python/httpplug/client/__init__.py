"""Plugin client and its builder."""

from collections.abc import Iterable
from concurrent.futures import Future
from typing import Any, Self

from pydantic import ValidationError

from httpplug.client.chain import PluginChain, build_chain
from httpplug.client.types import PluginClientOptions
from httpplug.exceptions import ConfigurationError
from httpplug.plugins.types import Plugin
from httpplug.promise import settle, wait
from httpplug.request import Request
from httpplug.response import Response
from httpplug.transport import EmulatedHttpAsyncClient, HttpAsyncClient, HttpClient
from httpplug.transport.types import is_http_async_client, is_http_client


class PluginClient:
    """Decorator around an HTTP transport running every request through an ordered list of plugins.

    The first plugin sees the request first and the response last. The plugin list may be changed between requests;
    each request works on a snapshot of the list taken when it is sent.
    """

    def __init__(
        self,
        client: HttpClient | HttpAsyncClient,
        plugins: Iterable[Plugin] = (),
        options: PluginClientOptions | None = None,
        **option_kwargs: Any,
    ) -> None:
        """Initialize the plugin client.

        Args:
            client: Transport with a blocking `send`, a non-blocking `send_async`, or both
            plugins: Initial plugins, outermost first
            options: Client options. Alternatively pass them as keyword arguments, e.g. `max_restarts=3`

        Raises:
            ConfigurationError: If the client supports neither send form or the options are invalid.
        """
        if is_http_async_client(client):
            self._client: Any = client
        elif is_http_client(client):
            self._client = EmulatedHttpAsyncClient(client)
        else:
            msg = f"Client must provide send() or send_async(), got {type(client).__name__}"
            raise ConfigurationError(msg)

        self._plugins: list[Plugin] = list(plugins)
        self._options = self._configure(options, option_kwargs)

    @staticmethod
    def _configure(options: PluginClientOptions | None, option_kwargs: dict[str, Any]) -> PluginClientOptions:
        if options is not None and option_kwargs:
            msg = "Pass options either as PluginClientOptions or as keyword arguments, not both"
            raise ConfigurationError(msg)
        if options is not None:
            return options
        try:
            return PluginClientOptions(**option_kwargs)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid plugin client options: {exc}") from exc

    @property
    def options(self) -> PluginClientOptions:
        return self._options

    @property
    def client(self) -> HttpClient | HttpAsyncClient:
        """The transport requests are finally sent with."""
        return self._client

    def add_plugin(self, plugin: Plugin) -> None:
        """Append a plugin. It becomes the innermost plugin, closest to the transport."""
        self._plugins.append(plugin)

    def get_plugins(self) -> list[Plugin]:
        """Return a copy of the active plugins."""
        return [*self._plugins]

    def set_plugins(self, plugins: Iterable[Plugin] = ()) -> None:
        """Replace all plugins."""
        self._plugins = list(plugins)

    def send(self, request: Request) -> Response:
        """Send the request through the plugins and wait for the response.

        The blocking send of the transport is used when it has one, so a blocking transport is never driven through
        its asynchronous emulation.

        Raises:
            HttpPlugError: Any error produced by the plugins, the loop guard or the transport.
        """
        if not is_http_client(self._client):
            return wait(self.send_async(request))

        chain = self._create_chain(lambda req: settle(self._client.send, req))
        return wait(chain(request))

    def send_async(self, request: Request) -> Future[Response]:
        """Send the request through the plugins without blocking. Errors are reported through the returned future."""
        chain = self._create_chain(self._client.send_async)
        return chain(request)

    def _create_chain(self, terminal: Any) -> PluginChain:
        return build_chain(self._plugins, terminal, self._options.max_restarts)

    def close(self) -> None:
        """Close the wrapped transport if it supports closing."""
        if callable(close := getattr(self._client, "close", None)):
            close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class PluginClientBuilder:
    """Fluent builder of a PluginClient."""

    def __init__(self) -> None:
        self._plugins: list[Plugin] = []
        self._options: dict[str, Any] = {}

    def with_plugin(self, plugin: Plugin) -> Self:
        """Append a plugin. Plugins run in the order they are added."""
        self._plugins.append(plugin)
        return self

    def with_plugins(self, plugins: Iterable[Plugin]) -> Self:
        self._plugins.extend(plugins)
        return self

    def max_restarts(self, value: int) -> Self:
        """Set how many times the chain may be restarted for a single request."""
        self._options["max_restarts"] = value
        return self

    def build(self, client: HttpClient | HttpAsyncClient) -> PluginClient:
        return PluginClient(client, self._plugins, **self._options)


__all__ = [
    "PluginChain",
    "PluginClient",
    "PluginClientBuilder",
    "PluginClientOptions",
    "build_chain",
]
