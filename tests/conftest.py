from collections.abc import Generator

import pytest

from httpplug.request import Request
from httpplug.transport import LoopThread

from tests.utils import AsyncTransport, BlockingTransport, DualTransport


@pytest.fixture
def req() -> Request:
    return Request("GET", "http://example.com/path?q=1", {"Accept": "application/json"})


@pytest.fixture
def blocking_transport() -> BlockingTransport:
    return BlockingTransport()


@pytest.fixture
def async_transport() -> AsyncTransport:
    return AsyncTransport()


@pytest.fixture
def dual_transport() -> DualTransport:
    return DualTransport()


@pytest.fixture
def loop_thread() -> Generator[LoopThread, None, None]:
    with LoopThread() as thread:
        yield thread
