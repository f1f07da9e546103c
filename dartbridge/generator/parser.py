"""Definition file parser using Lark."""

import os
import re
from dataclasses import dataclass, replace
from typing import Any, TypeVar

from lark import Lark, Token
from lark.visitors import Transformer

from dartbridge.log import get_logger

from .errors import SourceLocation, UnsupportedType, ValidationError
from .registry import Category, CategoryRegistry
from .types import (
    Definitions,
    EnumDef,
    ExportDef,
    FieldDef,
    MessageDef,
    MessageVariant,
    MethodDef,
    ModelDef,
    PrimDef,
    RustBool,
    RustCustom,
    RustInt32,
    RustInt64,
    RustString,
    RustType,
    RustUnit,
    RustVec,
    StructDef,
)

logger = get_logger("generator.parser")

_g_parser: Lark | None = None

# Host type keywords and the descriptor each one maps to
PRIMITIVE_TYPE_MAP: dict[str, type] = {
    "i8": RustInt32,
    "i16": RustInt32,
    "i32": RustInt32,
    "u8": RustInt32,
    "u16": RustInt32,
    "u32": RustInt32,
    "i64": RustInt64,
    "u64": RustInt64,
    "isize": RustInt64,
    "usize": RustInt64,
    "bool": RustBool,
    "String": RustString,
    "str": RustString,
    "CString": RustString,
}

_HEADER_COMMENT = re.compile(r"^\s*#\s?(.*)$")


@dataclass
class _TypeRef:
    """A type expression as written, before registry resolution."""

    name: str
    param: "_TypeRef | None"
    location: SourceLocation


@dataclass
class _Field:
    name: str
    type: _TypeRef
    location: SourceLocation


@dataclass
class _Struct:
    name: str
    fields: list[_Field]
    location: SourceLocation


@dataclass
class _Model(_Struct):
    pass


@dataclass
class _Variant:
    name: str
    args: list[_TypeRef]
    location: SourceLocation


@dataclass
class _Message:
    name: str
    model: str
    variants: list[_Variant]
    location: SourceLocation


@dataclass
class _Method:
    name: str
    params: list[_Field]
    returns: _TypeRef | None
    location: SourceLocation


@dataclass
class _Export:
    model: str
    methods: list[_Method]
    location: SourceLocation


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _names(args: list[Any]) -> list[Token]:
    return [v for v in args if isinstance(v, Token) and v.type == "NAME"]


def _loc(token: Token) -> SourceLocation:
    return SourceLocation(token.line or 0, token.column or 0)


class TreeTransformer(Transformer):
    """Transform parse tree into declarations with unresolved types."""

    def start(self, args: list[Any]) -> list[Any]:
        return list(args)

    def type_expr(self, args: list[Any]) -> "_TypeRef":
        return args[0]

    def prim(self, args: list[Any]) -> PrimDef:
        name = args[0]
        return PrimDef(name=str(name), location=_loc(name))

    def enum(self, args: list[Any]) -> EnumDef:
        name, *variants = _names(args)
        return EnumDef(name=str(name), variants=[str(v) for v in variants], location=_loc(name))

    def struct(self, args: list[Any]) -> _Struct:
        name = args[0]
        return _Struct(name=str(name), fields=_filter(args, _Field), location=_loc(name))

    def model(self, args: list[Any]) -> _Model:
        name = args[0]
        return _Model(name=str(name), fields=_filter(args, _Field), location=_loc(name))

    def field(self, args: list[Any]) -> _Field:
        name, type_ref = args
        return _Field(name=str(name), type=type_ref, location=_loc(name))

    def message(self, args: list[Any]) -> _Message:
        name, model = _names(args)
        return _Message(
            name=str(name),
            model=str(model),
            variants=_filter(args, _Variant),
            location=_loc(name),
        )

    def variant(self, args: list[Any]) -> _Variant:
        name = args[0]
        return _Variant(name=str(name), args=_filter(args, _TypeRef), location=_loc(name))

    def export(self, args: list[Any]) -> _Export:
        model = args[0]
        return _Export(model=str(model), methods=_filter(args, _Method), location=_loc(model))

    def method(self, args: list[Any]) -> _Method:
        name = args[0]
        returns = _filter(args, _TypeRef)
        return _Method(
            name=str(name),
            params=_filter(args, _Field),
            returns=returns[0] if returns else None,
            location=_loc(name),
        )

    def named(self, args: list[Any]) -> _TypeRef:
        return _TypeRef(name=str(args[0]), param=None, location=_loc(args[0]))

    def generic(self, args: list[Any]) -> _TypeRef:
        name, param = args
        return _TypeRef(name=str(name), param=param, location=_loc(name))

    def unit(self, args: list[Any]) -> _TypeRef:
        return _TypeRef(name="()", param=None, location=_loc(args[0]))


def _resolve(ref: _TypeRef, registry: CategoryRegistry, *, allow_unit: bool = False) -> RustType:
    """Turn a written type into a host descriptor, resolving custom names."""
    if ref.name == "()":
        if not allow_unit:
            raise UnsupportedType("() is only valid as a return type", ref.location)
        return RustUnit()

    if ref.name in ("Option", "Vec") and ref.param is None:
        raise ValidationError(f"{ref.name} expects a type parameter", ref.location)

    if ref.name == "Option":
        if ref.param.name == "Option":
            raise ValidationError("Option<Option<T>> is not supported", ref.location)
        inner = _resolve(ref.param, registry)
        return replace(inner, nullable=True)

    if ref.name == "Vec":
        return RustVec(nullable=False, inner=_resolve(ref.param, registry))

    if ref.param is not None:
        raise ValidationError(f"{ref.name} does not take a type parameter", ref.location)

    if ref.name in PRIMITIVE_TYPE_MAP:
        return PRIMITIVE_TYPE_MAP[ref.name](nullable=False)

    category = registry.lookup(ref.name, ref.location)
    return RustCustom(nullable=False, category=category, name=ref.name)


def _build_registry(items: list[Any]) -> CategoryRegistry:
    categories: dict[str, Category] = {}
    for item in items:
        if isinstance(item, PrimDef):
            category = Category.PRIM
        elif isinstance(item, EnumDef):
            category = Category.ENUM
        elif isinstance(item, _Struct):
            category = Category.STRUCT
        else:
            continue

        if item.name in categories:
            raise ValidationError(f"{item.name} is declared more than once", item.location)
        if item.name in PRIMITIVE_TYPE_MAP or item.name in ("Option", "Vec"):
            raise ValidationError(f"{item.name} shadows a built-in type", item.location)
        categories[item.name] = category
    return CategoryRegistry(categories)


def _check_unique(names: list[tuple[str, SourceLocation]], what: str) -> None:
    seen: set[str] = set()
    for name, location in names:
        if name in seen:
            raise ValidationError(f"{what} {name} is declared more than once", location)
        seen.add(name)


def _resolve_fields(fields: list[_Field], registry: CategoryRegistry, owner: str) -> list[FieldDef]:
    _check_unique([(f.name, f.location) for f in fields], f"{owner} field")
    return [FieldDef(f.name, _resolve(f.type, registry), f.location) for f in fields]


def validate(definitions: Definitions) -> None:
    """Validate cross references between declarations."""
    models = {model.name for model in definitions.models}

    for message in definitions.messages:
        if message.model not in models:
            raise ValidationError(
                f"{message.name} is sent to {message.model}, but that model is not declared",
                message.location,
            )

    for export in definitions.exports:
        if export.model not in models:
            raise ValidationError(
                f"Exported methods for {export.model}, but that model is not declared",
                export.location,
            )

    for model in definitions.models:
        variants = [v for msg in definitions.messages_for(model.name) for v in msg.variants]
        _check_unique([(v.name, v.location) for v in variants], f"{model.name} message")
        methods = definitions.exports_for(model.name)
        _check_unique([(m.name, m.location) for m in methods], f"{model.name} method")


def _header_comments(text: str) -> list[str]:
    comments: list[str] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        match = _HEADER_COMMENT.match(line)
        if match is None:
            break
        comments.append(match.group(1))
    return comments


def _get_parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/defs.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr", start=["start", "type_expr"])
    return _g_parser


def parse_type(text: str, registry: CategoryRegistry | None = None) -> RustType:
    """Parse a single type expression such as `Option<Vec<Todo>>`."""
    tree = _get_parser().parse(text, start="type_expr")
    if registry is None:
        registry = CategoryRegistry()
    return _resolve(TreeTransformer().transform(tree), registry, allow_unit=True)


def parse(text: str) -> Definitions:
    """Parse a definition file."""
    tree = _get_parser().parse(text, start="start")
    items = TreeTransformer().transform(tree)

    registry = _build_registry(items)

    definitions = Definitions(registry=registry, comments=_header_comments(text))
    for item in items:
        if isinstance(item, PrimDef):
            definitions.prims.append(item)
        elif isinstance(item, EnumDef):
            if len(set(item.variants)) != len(item.variants):
                raise ValidationError(f"{item.name} has duplicate variants", item.location)
            definitions.enums.append(item)
        elif isinstance(item, _Model):
            fields = _resolve_fields(item.fields, registry, item.name)
            definitions.models.append(ModelDef(item.name, fields, item.location))
        elif isinstance(item, _Struct):
            fields = _resolve_fields(item.fields, registry, item.name)
            definitions.structs.append(StructDef(item.name, fields, item.location))
        elif isinstance(item, _Message):
            variants = [
                MessageVariant(v.name, [_resolve(a, registry) for a in v.args], v.location)
                for v in item.variants
            ]
            definitions.messages.append(
                MessageDef(item.name, item.model, variants, item.location)
            )
        elif isinstance(item, _Export):
            methods = [
                MethodDef(
                    m.name,
                    _resolve_fields(m.params, registry, m.name),
                    _resolve(m.returns, registry, allow_unit=True) if m.returns else RustUnit(),
                    m.location,
                )
                for m in item.methods
            ]
            definitions.exports.append(ExportDef(item.model, methods, item.location))

    validate(definitions)

    logger.debug(
        "Parsed %d enums, %d structs, %d prims, %d models, %d messages, %d exports",
        len(definitions.enums),
        len(definitions.structs),
        len(definitions.prims),
        len(definitions.models),
        len(definitions.messages),
        len(definitions.exports),
    )

    return definitions
