"""Category registry for custom (non-primitive) types."""

from collections.abc import Iterator, Mapping
from enum import StrEnum, auto
from types import MappingProxyType

from .errors import SourceLocation, UnresolvedType


class Category(StrEnum):
    """How a custom type crosses the FFI boundary."""

    ENUM = auto()  # Passed as its integer index
    STRUCT = auto()  # Passed as an opaque pointer, converted with toDart()
    PRIM = auto()  # Primitive-like wrapper


class CategoryRegistry(Mapping[str, Category]):
    """Read-only mapping of custom type name to its category.

    Built once per generation pass and never mutated afterwards.
    """

    def __init__(self, categories: Mapping[str, Category] | None = None):
        self._categories = MappingProxyType(dict(categories or {}))

    def __getitem__(self, name: str) -> Category:
        return self._categories[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def __repr__(self) -> str:
        return f"CategoryRegistry({dict(self._categories)!r})"

    def lookup(self, name: str, location: SourceLocation | None = None) -> Category:
        """Return the category of `name` or fail the pass."""
        try:
            return self._categories[name]
        except KeyError:
            raise UnresolvedType(f"Unknown type {name}", location) from None
