"""Projection of host (Rust) type descriptors onto client (Dart) descriptors."""

from .errors import UnsupportedType, ValidationError
from .registry import CategoryRegistry
from .types import (
    DartBool,
    DartCustom,
    DartInt32,
    DartInt64,
    DartList,
    DartString,
    DartType,
    DartUnit,
    RustBool,
    RustCustom,
    RustInt32,
    RustInt64,
    RustString,
    RustType,
    RustUnit,
    RustVec,
)


def project(source: RustType, registry: CategoryRegistry) -> DartType:
    """Translate a host type into its Dart view.

    Custom types keep the category they were scanned with; the registry is only
    consulted to confirm the name is known and agrees on that category.
    """
    return _project(source, registry, nested=False)


def _project(source: RustType, registry: CategoryRegistry, nested: bool) -> DartType:
    match source:
        case RustInt32(nullable=nullable):
            return DartInt32(nullable)
        case RustInt64(nullable=nullable):
            return DartInt64(nullable)
        case RustBool(nullable=nullable):
            return DartBool(nullable)
        case RustString(nullable=nullable):
            return DartString(nullable)
        case RustCustom(nullable=nullable, category=category, name=name):
            registered = registry.lookup(name)
            if registered != category:
                raise ValidationError(
                    f"{name} is registered as {registered}, but referenced as {category}"
                )
            return DartCustom(nullable, category, name)
        case RustVec(nullable=nullable, inner=inner):
            return DartList(nullable, _project(inner, registry, nested=True))
        case RustUnit():
            if nested:
                raise UnsupportedType("() cannot be used as a collection item")
            return DartUnit()
        case _:
            raise TypeError(f"Not a Rust type: {source!r}")
