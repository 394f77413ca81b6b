from concurrent.futures import Future

import pytest

from httpplug.client import build_chain
from httpplug.exceptions import LoopError
from httpplug.plugins import plugin_from_callable
from httpplug.plugins.types import Continuation
from httpplug.promise import fulfilled, rejected, wait
from httpplug.request import Request
from httpplug.response import Response

from tests.utils import RecordingPlugin


def terminal(request: Request) -> Future[Response]:
    return fulfilled(Response(200, headers=[("X-Seen", v) for v in request.headers.get_all("X-Trace")]))


@pytest.mark.parametrize("count", [1, 2, 5])
def test_plugins_run_in_list_order(req: Request, count: int) -> None:
    log: list[str] = []
    plugins = [RecordingPlugin(f"p{i}", log) for i in range(count)]

    resp = wait(build_chain(plugins, terminal)(req))

    names = [f"p{i}" for i in range(count)]
    assert resp.headers.get_all("X-Seen") == names
    assert log == [f"{n}:in" for n in names] + [f"{n}:out" for n in reversed(names)]


def test_nested_application_equivalence(req: Request) -> None:
    seen: list[tuple[str, Request]] = []

    def make(name: str):
        def handle(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
            seen.append((name, request))
            return next_(request.with_header("X-Last", name))
        return plugin_from_callable(handle)

    p1, p2 = make("p1"), make("p2")
    wait(build_chain([p1, p2], terminal)(req))

    assert seen[0] == ("p1", req)
    assert seen[1][0] == "p2"
    assert seen[1][1].headers["X-Last"] == "p1"


def test_empty_chain_calls_terminal(req: Request) -> None:
    received: list[Request] = []

    def record(request: Request) -> Future[Response]:
        received.append(request)
        return fulfilled(Response(204))

    assert wait(build_chain([], record)(req)).status == 204
    assert received == [req]


def test_every_plugin_gets_same_first(req: Request) -> None:
    firsts: list[Continuation] = []

    def handle(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        firsts.append(first)
        return next_(request)

    chain = build_chain([plugin_from_callable(handle) for _ in range(3)], terminal)
    wait(chain(req))

    assert len(firsts) == 3
    assert all(f is chain for f in firsts)


def test_first_restarts_from_first_plugin(req: Request) -> None:
    log: list[str] = []

    def restart_once(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        if "X-Restarted" in request.headers:
            return next_(request)
        return first(request.with_header("X-Restarted", "1"))

    chain = build_chain([RecordingPlugin("outer", log), plugin_from_callable(restart_once)], terminal)
    resp = wait(chain(req))

    assert resp.headers.get_all("X-Seen") == ["outer", "outer"]
    assert log.count("outer:in") == 2
    assert chain.entries == 2


@pytest.mark.parametrize("max_restarts", [0, 1, 3, 10])
def test_loop_guard(req: Request, max_restarts: int) -> None:
    entries: list[int] = []

    def always_restart(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        entries.append(1)
        return first(request)

    chain = build_chain([plugin_from_callable(always_restart)], terminal, max_restarts=max_restarts)

    with pytest.raises(LoopError, match="Too many restarts") as exc_info:
        wait(chain(req))

    assert exc_info.value.request is req
    assert len(entries) == max_restarts + 1
    assert chain.entries == max_restarts + 1


def test_loop_guard_allows_budget(req: Request) -> None:
    restarts_left = [3]

    def restart_three_times(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        if restarts_left[0]:
            restarts_left[0] -= 1
            return first(request)
        return next_(request)

    chain = build_chain([plugin_from_callable(restart_three_times)], terminal, max_restarts=3)

    assert wait(chain(req)).status == 200


def test_loop_guard_rejects_without_forwarding(req: Request) -> None:
    calls: list[Request] = []

    def record(request: Request) -> Future[Response]:
        calls.append(request)
        return fulfilled(Response(200))

    chain = build_chain([], record, max_restarts=0)
    wait(chain(req))

    with pytest.raises(LoopError):
        wait(chain(req))
    assert len(calls) == 1


def test_chains_count_independently(req: Request) -> None:
    chain1 = build_chain([], terminal, max_restarts=0)
    chain2 = build_chain([], terminal, max_restarts=0)

    wait(chain1(req))
    wait(chain2(req))
    assert chain1.entries == chain2.entries == 1


def test_plugin_raising_rejects(req: Request) -> None:
    def broken(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        raise ValueError("Test error")

    future = build_chain([plugin_from_callable(broken)], terminal)(req)

    assert future.done()
    with pytest.raises(ValueError, match="Test error"):
        wait(future)


def test_plugin_not_returning_future(req: Request) -> None:
    def wrong(request: Request, next_: Continuation, first: Continuation) -> Response:
        return Response(200)

    future = build_chain([plugin_from_callable(wrong)], terminal)(req)  # type: ignore[arg-type]

    with pytest.raises(TypeError, match="must return a Future, got Response"):
        wait(future)


def test_terminal_raising_rejects(req: Request) -> None:
    def broken(request: Request) -> Future[Response]:
        raise ConnectionError("down")

    with pytest.raises(ConnectionError, match="down"):
        wait(build_chain([], broken)(req))


def test_short_circuit(req: Request) -> None:
    calls: list[Request] = []

    def record(request: Request) -> Future[Response]:
        calls.append(request)
        return fulfilled(Response(200))

    def cached(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        return fulfilled(Response(203))

    def deny(request: Request, next_: Continuation, first: Continuation) -> Future[Response]:
        return rejected(PermissionError("denied"))

    assert wait(build_chain([plugin_from_callable(cached)], record)(req)).status == 203
    with pytest.raises(PermissionError):
        wait(build_chain([plugin_from_callable(deny)], record)(req))
    assert calls == []


def test_chain_snapshots_plugins(req: Request) -> None:
    log: list[str] = []
    plugins = [RecordingPlugin("a", log)]
    chain = build_chain(plugins, terminal)
    plugins.append(RecordingPlugin("b", log))

    wait(chain(req))

    assert chain.plugins == (plugins[0],)
    assert log == ["a:in", "a:out"]
