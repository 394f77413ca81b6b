"""Response class."""

from httpplug.response.response import Response, reason_phrase

__all__ = [
    "Response",
    "reason_phrase",
]
