"""Naming helpers shared by the generators."""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_camel_case(name: str) -> str:
    """Convert snake_case to camelCase."""
    parts = [p for p in name.split("_") if p]
    if not parts:
        return name
    return parts[0] + "".join(p[:1].upper() + p[1:] for p in parts[1:])


def to_snake_case(name: str) -> str:
    """Convert CamelCase to snake_case. Already snake_case names pass through."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()
