from re import Pattern
from typing import Any


class InternalMatcher:
    """Match a value against a string, a compiled regex, a set of alternatives or any object comparing by equality.

    Equality covers dirty_equals matchers, which compare loosely.
    """

    def __init__(self, matcher: Any) -> None:
        self.matcher = matcher

    def matches(self, value: Any) -> bool:
        if isinstance(self.matcher, Pattern):
            return isinstance(value, str) and self.matcher.search(value) is not None
        if isinstance(self.matcher, set | frozenset):
            return value in self.matcher
        return bool(self.matcher == value)

    def __repr__(self) -> str:
        if isinstance(self.matcher, Pattern):
            return f"{self.matcher.pattern} (regex)"
        if isinstance(self.matcher, set | frozenset):
            return " or ".join(sorted(self.matcher))
        return str(self.matcher)
