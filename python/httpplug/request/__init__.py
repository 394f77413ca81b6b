"""Request class."""

from httpplug.request.request import Request

__all__ = [
    "Request",
]
