"""Deferred results of the plugin chain.

A deferred result is a plain `concurrent.futures.Future`. These helpers create already resolved futures and attach
transformations that run when a future resolves, without blocking the calling thread.
"""

from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, TypeVar

T = TypeVar("T")
U = TypeVar("U")

OnFulfilled = Callable[[T], U | Future[U]]
OnRejected = Callable[[BaseException], U | Future[U]]


def fulfilled(value: T) -> Future[T]:
    """Return a future already resolved with the value."""
    future: Future[T] = Future()
    future.set_result(value)
    return future


def rejected(exc: BaseException) -> Future[Any]:
    """Return a future already rejected with the exception."""
    future: Future[Any] = Future()
    future.set_exception(exc)
    return future


def settle(fn: Callable[..., T], *args: Any) -> Future[T]:
    """Call fn and capture its outcome, return value or raised exception, in a resolved future."""
    try:
        return fulfilled(fn(*args))
    except Exception as exc:
        return rejected(exc)


def then(
    future: Future[T],
    on_fulfilled: OnFulfilled[T, U] | None = None,
    on_rejected: OnRejected[U] | None = None,
) -> Future[U]:
    """Attach callbacks run when the future resolves and return a future of their outcome.

    A callback may return a value, return another future (its outcome is adopted) or raise (the returned future is
    rejected with the exception). A missing callback passes the value or the failure through unchanged. Callbacks
    run immediately on the calling thread when the future is already resolved, otherwise on the thread resolving it.
    """
    derived: Future[U] = Future()

    def resolve(source: Future[T]) -> None:
        if source.cancelled():
            derived.cancel()
            return
        try:
            if (exc := source.exception()) is None:
                result = on_fulfilled(source.result()) if on_fulfilled is not None else source.result()
            elif on_rejected is not None:
                result = on_rejected(exc)
            else:
                derived.set_exception(exc)
                return
        except Exception as err:
            derived.set_exception(err)
            return
        except BaseException as err:
            derived.set_exception(err)
            raise

        if isinstance(result, Future):
            result.add_done_callback(lambda inner: _adopt(inner, derived))
        else:
            derived.set_result(result)

    future.add_done_callback(resolve)
    return derived


def wait(future: Future[T], timeout: float | None = None) -> T:
    """Block until the future resolves. Return its value or raise its failure."""
    return future.result(timeout)


def _adopt(source: Future[T], target: Future[T]) -> None:
    if source.cancelled():
        target.cancel()
    elif (exc := source.exception()) is not None:
        target.set_exception(exc)
    else:
        target.set_result(source.result())


__all__ = [
    "fulfilled",
    "rejected",
    "settle",
    "then",
    "wait",
]
