from collections.abc import Iterable, Iterator, Mapping
from typing import Self

from httpplug.types import HeadersType


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive multi-map of HTTP headers.

    Original name casing and insertion order are kept. Mapping access returns all values of a header joined with
    ", ". Use `get_all` for the individual values. Mutators return a new instance.
    """

    __slots__ = ("_items",)

    def __init__(self, headers: HeadersType | None = None) -> None:
        """Create headers from a mapping, a sequence of (name, value) pairs or another Headers."""
        if headers is None:
            items: tuple[tuple[str, str], ...] = ()
        elif isinstance(headers, Headers):
            items = headers._items
        elif isinstance(headers, Mapping):
            items = tuple((str(k), str(v)) for k, v in headers.items())
        else:
            items = tuple((str(k), str(v)) for k, v in headers)
        self._items = items

    def __getitem__(self, name: str) -> str:
        values = self.get_all(name)
        if not values:
            raise KeyError(name)
        return ", ".join(values)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._items:
            if (key := name.lower()) not in seen:
                seen.add(key)
                yield name

    def __len__(self) -> int:
        return len({name.lower() for name, _ in self._items})

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = name.lower()
        return any(n.lower() == key for n, _ in self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self._normalized() == other._normalized()
        if isinstance(other, Mapping):
            return self._normalized() == Headers(other)._normalized()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._normalized())

    def __repr__(self) -> str:
        return f"Headers({list(self._items)!r})"

    def _normalized(self) -> tuple[tuple[str, str], ...]:
        return tuple((name.lower(), value) for name, value in self._items)

    def get_all(self, name: str) -> list[str]:
        """Return all values of the header, in insertion order."""
        key = name.lower()
        return [value for n, value in self._items if n.lower() == key]

    def raw_items(self) -> list[tuple[str, str]]:
        """Return all (name, value) pairs, repeated names included."""
        return list(self._items)

    def set(self, name: str, value: str | Iterable[str]) -> Self:
        """Return a copy with all values of the header replaced."""
        values = [value] if isinstance(value, str) else list(value)
        return type(self)((*self.remove(name)._items, *((name, v) for v in values)))

    def add(self, name: str, value: str) -> Self:
        """Return a copy with the value appended to the header."""
        return type(self)((*self._items, (name, value)))

    def remove(self, name: str) -> Self:
        """Return a copy without the header. Missing headers are ignored."""
        key = name.lower()
        return type(self)(tuple((n, v) for n, v in self._items if n.lower() != key))

    def merge_defaults(self, defaults: HeadersType) -> Self:
        """Return a copy where headers from `defaults` are added unless already present."""
        missing = [(n, v) for n, v in Headers(defaults)._items if n not in self]
        return type(self)((*self._items, *missing))
