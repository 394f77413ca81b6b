from concurrent.futures import Future

import pytest

from httpplug.client import PluginClient, PluginClientBuilder, PluginClientOptions
from httpplug.exceptions import ClientError, ConfigurationError, LoopError, TransportError
from httpplug.plugins import ErrorPlugin, HeaderSetPlugin, plugin_from_callable
from httpplug.plugins.types import Continuation
from httpplug.promise import wait
from httpplug.request import Request
from httpplug.response import Response
from httpplug.transport import EmulatedHttpAsyncClient

from tests.utils import AsyncTransport, BlockingTransport, DualTransport, RecordingPlugin


class NoTransport:
    def request(self, request: Request) -> Response:
        return Response(200)


def always_restart(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
    return first(request)


def test_rejects_unsupported_client() -> None:
    with pytest.raises(ConfigurationError, match="must provide send\\(\\) or send_async\\(\\), got NoTransport"):
        PluginClient(NoTransport())  # type: ignore[arg-type]


def test_wraps_blocking_client(blocking_transport: BlockingTransport) -> None:
    client = PluginClient(blocking_transport)

    assert isinstance(client.client, EmulatedHttpAsyncClient)
    assert client.client.client is blocking_transport


def test_keeps_async_client(async_transport: AsyncTransport, dual_transport: DualTransport) -> None:
    assert PluginClient(async_transport).client is async_transport
    assert PluginClient(dual_transport).client is dual_transport


def test_default_options(blocking_transport: BlockingTransport) -> None:
    assert PluginClient(blocking_transport).options.max_restarts == 10


def test_options(blocking_transport: BlockingTransport) -> None:
    assert PluginClient(blocking_transport, max_restarts=3).options.max_restarts == 3
    options = PluginClientOptions(max_restarts=0)
    assert PluginClient(blocking_transport, options=options).options is options


@pytest.mark.parametrize("kwargs", [{"max_restarts": -1}, {"max_restarts": "many"}, {"unknown_option": 1}])
def test_invalid_options(blocking_transport: BlockingTransport, kwargs: dict) -> None:
    with pytest.raises(ConfigurationError, match="Invalid plugin client options"):
        PluginClient(blocking_transport, **kwargs)


def test_options_both_ways(blocking_transport: BlockingTransport) -> None:
    with pytest.raises(ConfigurationError, match="not both"):
        PluginClient(blocking_transport, options=PluginClientOptions(), max_restarts=1)


def test_options_frozen() -> None:
    options = PluginClientOptions()
    with pytest.raises(ValueError):
        options.max_restarts = 1  # type: ignore[misc]


def test_plugin_list(blocking_transport: BlockingTransport) -> None:
    p1, p2, p3 = ErrorPlugin(), ErrorPlugin(), ErrorPlugin()
    client = PluginClient(blocking_transport, [p1])

    client.add_plugin(p2)
    assert client.get_plugins() == [p1, p2]

    client.get_plugins().append(p3)
    assert client.get_plugins() == [p1, p2]

    client.set_plugins([p3])
    assert client.get_plugins() == [p3]

    client.set_plugins()
    assert client.get_plugins() == []


def test_empty_plugins_sync(req: Request) -> None:
    response = Response(201)
    transport = BlockingTransport(lambda _: response)

    assert PluginClient(transport).send(req) is response
    assert transport.requests == [req]


def test_empty_plugins_async(req: Request, async_transport: AsyncTransport) -> None:
    response = Response(201)
    future = PluginClient(async_transport).send_async(req)

    assert not future.done()
    assert async_transport.pending[0][0] is req
    async_transport.resolve_all(response)
    assert wait(future) is response


def test_send_prefers_blocking(req: Request, dual_transport: DualTransport) -> None:
    client = PluginClient(dual_transport, [ErrorPlugin()])

    assert client.send(req).status == 200
    assert dual_transport.async_calls == 0
    assert len(dual_transport.requests) == 1

    assert wait(client.send_async(req)).status == 200
    assert dual_transport.async_calls == 1


def test_send_on_async_only_transport(req: Request) -> None:
    class ImmediateAsync:
        def send_async(self, request: Request) -> Future[Response]:
            future: Future[Response] = Future()
            future.set_result(Response(202, headers={"X-Got": request.headers.get("X-Set", "")}))
            return future

    client = PluginClient(ImmediateAsync(), [HeaderSetPlugin({"X-Set": "1"})])

    sync_response = client.send(req)
    async_response = client.send_async(req).result()

    assert sync_response == async_response
    assert sync_response.headers["X-Got"] == "1"


def test_send_raises_plugin_errors(req: Request) -> None:
    client = PluginClient(BlockingTransport(lambda _: Response(404)), [ErrorPlugin()])

    with pytest.raises(ClientError, match="404 Not Found"):
        client.send(req)

    future = client.send_async(req)
    assert isinstance(future.exception(), ClientError)


def test_send_transport_error(req: Request) -> None:
    def fail(request: Request) -> Response:
        raise TransportError("Connection refused", request)

    client = PluginClient(BlockingTransport(fail), [ErrorPlugin()])

    with pytest.raises(TransportError, match="Connection refused"):
        client.send(req)
    assert isinstance(client.send_async(req).exception(), TransportError)


@pytest.mark.parametrize("max_restarts", [0, 2, 10])
def test_loop_protection(req: Request, blocking_transport: BlockingTransport, max_restarts: int) -> None:
    client = PluginClient(blocking_transport, [plugin_from_callable(always_restart)], max_restarts=max_restarts)

    with pytest.raises(LoopError):
        client.send(req)
    with pytest.raises(LoopError):
        wait(client.send_async(req))
    assert blocking_transport.requests == []


def test_restart_budget_per_call(req: Request, blocking_transport: BlockingTransport) -> None:
    def restart_once(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        if "X-Again" in request.headers:
            return next_(request)
        return first(request.with_header("X-Again", "1"))

    client = PluginClient(blocking_transport, [plugin_from_callable(restart_once)], max_restarts=1)

    for _ in range(3):
        assert client.send(req).status == 200
    assert len(blocking_transport.requests) == 3


def test_snapshot_between_calls(req: Request, async_transport: AsyncTransport) -> None:
    log: list[str] = []
    client = PluginClient(async_transport, [RecordingPlugin("a", log)])

    first_future = client.send_async(req)
    client.add_plugin(RecordingPlugin("b", log))
    second_future = client.send_async(req)

    async_transport.resolve_all()
    wait(first_future)
    wait(second_future)

    first_request, second_request = (r for r, _ in async_transport.pending)
    assert first_request.headers.get_all("X-Trace") == ["a"]
    assert second_request.headers.get_all("X-Trace") == ["a", "b"]
    assert log == ["a:in", "a:in", "b:in", "a:out", "b:out", "a:out"]


def test_set_plugins_does_not_affect_in_flight(req: Request, async_transport: AsyncTransport) -> None:
    log: list[str] = []
    client = PluginClient(async_transport, [RecordingPlugin("a", log)])

    future = client.send_async(req)
    client.set_plugins([])
    async_transport.resolve_all()

    wait(future)
    assert log == ["a:in", "a:out"]


def test_plugins_shared_between_calls(req: Request, blocking_transport: BlockingTransport) -> None:
    log: list[str] = []
    plugin = RecordingPlugin("shared", log)
    client = PluginClient(blocking_transport, [plugin])

    client.send(req)
    client.send(req)

    assert log == ["shared:in", "shared:out"] * 2


def test_builder(req: Request, blocking_transport: BlockingTransport) -> None:
    log: list[str] = []
    client = (
        PluginClientBuilder()
        .with_plugin(RecordingPlugin("a", log))
        .with_plugins([RecordingPlugin("b", log), ErrorPlugin()])
        .max_restarts(4)
        .build(blocking_transport)
    )

    assert client.options.max_restarts == 4
    assert len(client.get_plugins()) == 3
    client.send(req)
    assert blocking_transport.requests[0].headers.get_all("X-Trace") == ["a", "b"]


def test_builder_invalid_option(blocking_transport: BlockingTransport) -> None:
    with pytest.raises(ConfigurationError):
        PluginClientBuilder().max_restarts(-5).build(blocking_transport)


def test_context_manager_closes_transport(blocking_transport: BlockingTransport) -> None:
    with PluginClient(blocking_transport) as client:
        assert isinstance(client, PluginClient)
    assert blocking_transport.closed


def test_close_without_transport_close(async_transport: AsyncTransport) -> None:
    PluginClient(async_transport).close()
