import asyncio
import queue
from asyncio import AbstractEventLoop
from collections.abc import Coroutine
from concurrent.futures import Future
from threading import Thread
from typing import Any, Self, TypeVar

T = TypeVar("T")


class LoopThread:
    """Asyncio event loop running on a daemon thread.

    Coroutines are submitted from any thread and their outcome is exposed as a `concurrent.futures.Future`.
    """

    def __init__(self, name: str = "httpplug-loop") -> None:
        loop_chan: queue.Queue[AbstractEventLoop] = queue.Queue(maxsize=1)
        self._stopped = asyncio.Event()

        def runner() -> None:
            with asyncio.Runner() as asyncio_runner:
                loop_chan.put_nowait(asyncio_runner.get_loop())
                asyncio_runner.run(self._stopped.wait())

        self._thread = Thread(target=runner, name=name, daemon=True)
        self._thread.start()
        self._loop = loop_chan.get(timeout=5)

    @property
    def loop(self) -> AbstractEventLoop:
        return self._loop

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def submit(self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        """Schedule the coroutine on the loop thread."""
        if not self.running:
            coro.close()
            msg = "Event loop thread is closed"
            raise RuntimeError(msg)
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def close(self, timeout: float = 5.0) -> None:
        if not self.running:
            return
        self._loop.call_soon_threadsafe(self._stopped.set)
        self._thread.join(timeout=timeout)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
