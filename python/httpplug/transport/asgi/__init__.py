from httpplug.transport.asgi.asgi import ASGITransport

__all__ = ["ASGITransport"]
