"""httpplug - HTTP client decorator running requests through a chain of plugins.

Features:
- Ordered, mutable plugin chain around any blocking or non-blocking HTTP transport
- Plugins can rewrite requests, short-circuit, transform responses or restart the chain
- Restart loop protection with a configurable budget
- Blocking and non-blocking sends with a single failure channel
- Typed errors for 4xx and 5xx responses
- Bundled plugins for headers, authentication, base urls, redirects and logging
- Transports for pyreqwest clients and in-process ASGI applications
- Mocking and testing utilities
"""
