"""Plugins intercepting the requests of a PluginClient."""

from httpplug.plugins.auth import Authentication, AuthenticationPlugin, BasicAuth, BearerAuth, HeaderAuth
from httpplug.plugins.error import ErrorPlugin
from httpplug.plugins.function import FunctionPlugin, plugin_from_callable
from httpplug.plugins.headers import (
    ContentLengthPlugin,
    HeaderAppendPlugin,
    HeaderDefaultsPlugin,
    HeaderRemovePlugin,
    HeaderSetPlugin,
)
from httpplug.plugins.host import AddHostPlugin
from httpplug.plugins.logger import LoggerPlugin
from httpplug.plugins.redirect import RedirectPlugin
from httpplug.plugins.types import Continuation, Plugin

__all__ = [
    "AddHostPlugin",
    "Authentication",
    "AuthenticationPlugin",
    "BasicAuth",
    "BearerAuth",
    "ContentLengthPlugin",
    "Continuation",
    "ErrorPlugin",
    "FunctionPlugin",
    "HeaderAppendPlugin",
    "HeaderAuth",
    "HeaderDefaultsPlugin",
    "HeaderRemovePlugin",
    "HeaderSetPlugin",
    "LoggerPlugin",
    "Plugin",
    "RedirectPlugin",
    "plugin_from_callable",
]
