"""Type descriptors and definitions for binding generation.

Two parallel families describe the same shapes:

- `RustType` variants are what the definition scanner discovers on the host side.
- `DartType` variants are the client view produced by the projector. Renderers
  only accept `DartType`, so every custom name passes through registry
  resolution before any text is produced.
"""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin

from .errors import SourceLocation
from .registry import Category, CategoryRegistry

# --- Host (Rust) side ---


@dataclass(frozen=True)
class RustInt32(DataClassJsonMixin):
    nullable: bool = False


@dataclass(frozen=True)
class RustInt64(DataClassJsonMixin):
    nullable: bool = False


@dataclass(frozen=True)
class RustBool(DataClassJsonMixin):
    nullable: bool = False


@dataclass(frozen=True)
class RustString(DataClassJsonMixin):
    nullable: bool = False


@dataclass(frozen=True)
class RustUnit(DataClassJsonMixin):
    """No value. Only valid as a bare return type."""


@dataclass(frozen=True)
class RustCustom(DataClassJsonMixin):
    """A named enum, struct or primitive-like type."""

    nullable: bool
    category: Category
    name: str


@dataclass(frozen=True)
class RustVec(DataClassJsonMixin):
    """Homogeneous ordered collection.

    `nullable` applies to the collection itself, never to `inner`.
    """

    nullable: bool
    inner: "RustType"


RustType = RustInt32 | RustInt64 | RustBool | RustString | RustUnit | RustCustom | RustVec

# --- Client (Dart) side ---


@dataclass(frozen=True)
class DartInt32(DataClassJsonMixin):
    nullable: bool = False


@dataclass(frozen=True)
class DartInt64(DataClassJsonMixin):
    nullable: bool = False


@dataclass(frozen=True)
class DartBool(DataClassJsonMixin):
    nullable: bool = False


@dataclass(frozen=True)
class DartString(DataClassJsonMixin):
    nullable: bool = False


@dataclass(frozen=True)
class DartUnit(DataClassJsonMixin):
    pass


@dataclass(frozen=True)
class DartCustom(DataClassJsonMixin):
    nullable: bool
    category: Category
    name: str


@dataclass(frozen=True)
class DartList(DataClassJsonMixin):
    nullable: bool
    inner: "DartType"


DartType = DartInt32 | DartInt64 | DartBool | DartString | DartUnit | DartCustom | DartList


def rust_type_name(t: RustType) -> str:
    """Render a host type back to Rust-like notation, e.g. `Option<Vec<Todo>>`."""
    match t:
        case RustInt32():
            base = "i32"
        case RustInt64():
            base = "i64"
        case RustBool():
            base = "bool"
        case RustString():
            base = "String"
        case RustUnit():
            return "()"
        case RustCustom():
            base = t.name
        case RustVec():
            base = f"Vec<{rust_type_name(t.inner)}>"
        case _:
            raise TypeError(f"Not a Rust type: {t!r}")
    return f"Option<{base}>" if t.nullable else base


# --- Definitions discovered by the parser ---


@dataclass
class FieldDef(DataClassJsonMixin):
    """A named, typed field of a struct or model."""

    name: str
    type: RustType
    location: SourceLocation | None = None


@dataclass
class StructDef(DataClassJsonMixin):
    """A struct exposed to Dart through an opaque pointer."""

    name: str
    fields: list[FieldDef]
    location: SourceLocation | None = None


@dataclass
class ModelDef(DataClassJsonMixin):
    """The root model struct owned by the compiled core."""

    name: str
    fields: list[FieldDef]
    location: SourceLocation | None = None


@dataclass
class EnumDef(DataClassJsonMixin):
    """A fieldless enum. Variant order defines the raw integer codes."""

    name: str
    variants: list[str]
    location: SourceLocation | None = None


@dataclass
class PrimDef(DataClassJsonMixin):
    """A primitive-like type declared by name only."""

    name: str
    location: SourceLocation | None = None


@dataclass
class MessageVariant(DataClassJsonMixin):
    name: str
    args: list[RustType]
    location: SourceLocation | None = None


@dataclass
class MessageDef(DataClassJsonMixin):
    """Messages that update a model when sent across the boundary."""

    name: str
    model: str
    variants: list[MessageVariant]
    location: SourceLocation | None = None


@dataclass
class MethodDef(DataClassJsonMixin):
    """An exported model method. `returns` is `RustUnit` when nothing is returned."""

    name: str
    params: list[FieldDef]
    returns: RustType
    location: SourceLocation | None = None


@dataclass
class ExportDef(DataClassJsonMixin):
    model: str
    methods: list[MethodDef]
    location: SourceLocation | None = None


@dataclass
class Definitions:
    """Everything discovered in one definition file."""

    registry: CategoryRegistry
    enums: list[EnumDef] = field(default_factory=list)
    structs: list[StructDef] = field(default_factory=list)
    prims: list[PrimDef] = field(default_factory=list)
    models: list[ModelDef] = field(default_factory=list)
    messages: list[MessageDef] = field(default_factory=list)
    exports: list[ExportDef] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)

    def messages_for(self, model: str) -> list[MessageDef]:
        return [m for m in self.messages if m.model == model]

    def exports_for(self, model: str) -> list[MethodDef]:
        return [method for e in self.exports if e.model == model for method in e.methods]
