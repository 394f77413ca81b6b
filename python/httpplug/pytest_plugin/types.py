"""Types used in the pytest plugin."""

from collections.abc import Callable
from re import Pattern
from typing import Any

from dirty_equals import DirtyEquals

from httpplug.request import Request
from httpplug.response import Response

Matcher = DirtyEquals[Any] | str | Pattern[str]
JsonMatcher = DirtyEquals[Any] | Any

MethodMatcher = Matcher | set[str]
UrlMatcher = Matcher
QueryMatcher = dict[str, Matcher | list[str]] | Matcher
BodyContentMatcher = bytes | Matcher
CustomMatcher = Callable[[Request], bool]
CustomHandler = Callable[[Request], Response | None]
