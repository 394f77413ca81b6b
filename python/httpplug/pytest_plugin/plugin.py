import pytest

from .mock import httpplug_mocker  # noqa: F401  load the httpplug_mocker fixture


def pytest_configure(config: pytest.Config) -> None:
    """Configure the pytest plugin."""
    config.addinivalue_line(
        "markers",
        "httpplug: mark test to use httpplug HTTP transport mocking"
    )
