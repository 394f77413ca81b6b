"""httpplug pytest plugin for HTTP transport mocking."""

from .mock import ClientMocker, Mock, httpplug_mocker

__all__ = [
    "ClientMocker",
    "Mock",
    "httpplug_mocker",
]
