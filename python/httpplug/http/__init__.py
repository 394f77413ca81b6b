"""HTTP utils classes and types."""

from httpplug.http.headers import Headers

__all__ = [
    "Headers",
]
