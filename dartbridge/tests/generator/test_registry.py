"""Tests for the category registry."""

import pytest

from dartbridge.generator.errors import SourceLocation, UnresolvedType
from dartbridge.generator.registry import Category, CategoryRegistry


def describe_category_registry():
    def looks_up_categories(expect, registry):
        expect(registry.lookup("Filter")) == Category.ENUM
        expect(registry.lookup("Todo")) == Category.STRUCT
        expect(registry.lookup("Id")) == Category.PRIM

    def fails_with_location(expect, registry):
        with pytest.raises(UnresolvedType) as exc:
            registry.lookup("Nope", SourceLocation(3, 7))
        expect(exc.value.location) == SourceLocation(3, 7)
        expect(str(exc.value)) == "3:7: Unknown type Nope"

    def is_read_only(expect, registry):
        with pytest.raises(TypeError):
            registry["Other"] = Category.ENUM  # type: ignore[index]

    def is_isolated_from_its_source(expect):
        source = {"Filter": Category.ENUM}
        registry = CategoryRegistry(source)
        source["Todo"] = Category.STRUCT
        expect("Todo" in registry) == False
        expect(len(registry)) == 1

