"""Dart code generator for dartbridge definitions.

The four renderers below only accept projected `DartType` values:

- `render_type_name` produces the Dart type (`int?`, `List<Todo>`, ...)
- `render_type_attribute` produces the FFI width annotation for integers
- `render_argument_expr` converts a Dart argument into a raw FFI argument
- `render_return_expr` converts a raw FFI result into a Dart value
"""

from dataclasses import dataclass

from jinja2 import Environment, PackageLoader

from dartbridge import __version__
from dartbridge.log import get_logger

from .errors import UnsupportedType
from .projector import project
from .registry import Category, CategoryRegistry
from .types import (
    DartBool,
    DartCustom,
    DartInt32,
    DartInt64,
    DartList,
    DartString,
    DartType,
    DartUnit,
    Definitions,
    FieldDef,
    MethodDef,
    ModelDef,
    RustType,
    RustUnit,
    StructDef,
)
from .util import to_camel_case, to_snake_case

logger = get_logger("generator.dart")

env = Environment(
    loader=PackageLoader("dartbridge.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("dart.dart.j2")

# Import prefix of `dart:ffi` in generated code
DART_FFI = "dart_ffi"
# String extension that copies a Dart string into native memory
STRING_TO_NATIVE_INT8 = "toNativeInt8"
# Method generated structs and collections expose to produce client values
TO_DART = "toDart"

NULLABLE = "?"

# Integer widths pinned for the FFI call mechanism
TYPE_ATTRIBUTES = {
    DartInt32: f"@{DART_FFI}.Int32()",
    DartInt64: f"@{DART_FFI}.Int64()",
}


def _nullable(text: str, nullable: bool) -> str:
    return f"{text}{NULLABLE}" if nullable else text


def _slot(slot: int | str) -> str:
    """Integer slots are positional arguments, text slots are used as-is."""
    if isinstance(slot, int):
        return f"arg{slot}"
    return slot


def _reject_unit_items(target: DartType) -> None:
    while isinstance(target, DartList):
        if isinstance(target.inner, DartUnit):
            raise UnsupportedType("() cannot be used as a collection item")
        target = target.inner


def render_type_name(target: DartType, raw: bool) -> str:
    """Render a Dart type.

    With `raw` enums render as their `int` index, which is how they cross the
    FFI boundary. Otherwise enums render by name. Unit renders as an empty
    string.
    """
    match target:
        case DartInt32(nullable=nullable) | DartInt64(nullable=nullable):
            return _nullable("int", nullable)
        case DartBool(nullable=nullable):
            return _nullable("bool", nullable)
        case DartString(nullable=nullable):
            return _nullable("String", nullable)
        case DartCustom(nullable=nullable, category=Category.ENUM, name=name):
            return _nullable("int" if raw else name, nullable)
        case DartCustom(nullable=nullable, name=name):
            return _nullable(name, nullable)
        case DartList(inner=DartUnit()):
            raise UnsupportedType("() cannot be used as a collection item")
        case DartList(nullable=nullable, inner=inner):
            return _nullable(f"List<{render_type_name(inner, raw)}>", nullable)
        case DartUnit():
            return ""
        case _:
            raise TypeError(f"Not a Dart type: {target!r}")


def render_type_attribute(target: DartType) -> str | None:
    """Return the FFI integer width annotation, if the type has one."""
    return TYPE_ATTRIBUTES.get(type(target))


def render_argument_expr(target: DartType, slot: int | str) -> str:
    """Render the expression that turns a Dart argument into a raw FFI argument."""
    _reject_unit_items(target)
    arg = _slot(slot)
    match target:
        case DartBool(nullable=True):
            return f"{arg} == null ? 0 : {arg} ? 1 : 0"
        case DartBool():
            return f"{arg} ? 1 : 0"
        case DartString(nullable=True):
            return f"{arg}?.{STRING_TO_NATIVE_INT8}()"
        case DartString():
            return f"{arg}.{STRING_TO_NATIVE_INT8}()"
        # TODO: nullable ints, custom types and lists need their own raw encoding
        # once the native side defines one; they pass through unchanged for now.
        case DartInt32() | DartInt64() | DartCustom() | DartList():
            return arg
        case DartUnit():
            raise UnsupportedType("() cannot be passed as an argument")
        case _:
            raise TypeError(f"Not a Dart type: {target!r}")


def render_return_expr(target: DartType, snippet: str) -> str:
    """Render the expression that turns a raw FFI result `snippet` into a Dart value."""
    _reject_unit_items(target)
    match target:
        case DartInt32(nullable=True) | DartInt64(nullable=True) | DartBool(nullable=True):
            return f"{snippet}{NULLABLE}"
        case DartInt32() | DartInt64() | DartBool():
            return snippet
        # Raw strings are already converted to Dart strings
        case DartString(nullable=True):
            return f"{snippet}{NULLABLE}"
        case DartString():
            return snippet
        case DartCustom(nullable=True, category=Category.ENUM, name=name):
            return (
                f"() {{ final x = {snippet}; return x != null ? {name}.values[x] : null; }}()"
            )
        case DartCustom(category=Category.ENUM, name=name):
            return f"{name}.values[{snippet}]"
        case DartCustom(nullable=True) | DartList(nullable=True):
            return f"{snippet}?.{TO_DART}()"
        # Lists map every item through its own toDart() before materializing
        case DartCustom() | DartList():
            return f"{snippet}.{TO_DART}()"
        case DartUnit():
            raise UnsupportedType("Converting () to Dart makes no sense")
        case _:
            raise TypeError(f"Not a Dart type: {target!r}")


@dataclass(frozen=True)
class RenderOptions:
    """Selects how a type name is rendered.

    raw: render enums as their integer index (FFI signatures)
    include_type_attribute: prefix integer types with their FFI width annotation
    """

    raw: bool = False
    include_type_attribute: bool = False

    @classmethod
    def plain(cls) -> "RenderOptions":
        return cls(raw=False, include_type_attribute=False)

    @classmethod
    def raw_only(cls) -> "RenderOptions":
        return cls(raw=True, include_type_attribute=False)

    @classmethod
    def attr(cls) -> "RenderOptions":
        return cls(raw=False, include_type_attribute=True)

    @classmethod
    def attr_raw(cls) -> "RenderOptions":
        return cls(raw=True, include_type_attribute=True)

    def render(self, target: DartType) -> str:
        type_name = render_type_name(target, self.raw)
        if not self.include_type_attribute:
            return type_name
        attribute = render_type_attribute(target)
        if attribute is None:
            return type_name
        return f"{attribute} {type_name}"


def render_dart_type(source: RustType, registry: CategoryRegistry, options: RenderOptions) -> str:
    """Project a host type and render its Dart type name."""
    return options.render(project(source, registry))


def render_dart_and_ffi_type(
    source: RustType, registry: CategoryRegistry, raw: bool
) -> tuple[str, str | None]:
    """Return the Dart type name together with its FFI attribute."""
    target = project(source, registry)
    return render_type_name(target, raw), render_type_attribute(target)


def render_to_dart_for_arg(source: RustType, registry: CategoryRegistry, snippet: str) -> str:
    """Project a host type and render the conversion of `snippet` into Dart."""
    return render_return_expr(project(source, registry), snippet)


def accessor_symbol(owner: str, field: str) -> str:
    """Native symbol that reads `field` from a struct or model pointer."""
    return f"rid_{to_snake_case(owner)}_{field}"


def message_symbol(variant: str) -> str:
    return f"rid_msg_{variant}"


def export_symbol(model: str, method: str) -> str:
    return f"rid_export_{model}_{method}"


def render(definitions: Definitions, library: str = "generated_bindings") -> str:
    """Render parsed definitions to a Dart library."""
    registry = definitions.registry

    def _field_type(t: RustType) -> str:
        return render_dart_type(t, registry, RenderOptions.plain())

    def _raw_type(t: RustType) -> str:
        return render_dart_type(t, registry, RenderOptions.raw_only()) or "void"

    def _raw_param(t: RustType, name: str) -> str:
        return f"{render_dart_type(t, registry, RenderOptions.attr_raw())} {name}"

    def _to_dart(t: RustType, snippet: str) -> str:
        return render_to_dart_for_arg(t, registry, snippet)

    def _to_ffi(t: RustType, slot: int | str) -> str:
        return render_argument_expr(project(t, registry), slot)

    def _getter(owner: StructDef | ModelDef, field: FieldDef) -> str:
        call = f"_bindings.{accessor_symbol(owner.name, field.name)}(this)"
        return (
            f"{_field_type(field.type)} get {to_camel_case(field.name)} => "
            f"{_to_dart(field.type, call)};"
        )

    def _native_signatures() -> list[str]:
        lines: list[str] = []
        for owner in [*definitions.structs, *definitions.models]:
            for field in owner.fields:
                lines.append(
                    f"{_raw_type(field.type)} {accessor_symbol(owner.name, field.name)}"
                    f"({DART_FFI}.Pointer<Raw{owner.name}> ptr);"
                )
        for model in definitions.models:
            ptr = f"{DART_FFI}.Pointer<Raw{model.name}> ptr"
            for message in definitions.messages_for(model.name):
                for variant in message.variants:
                    params = [ptr] + [
                        _raw_param(arg, f"arg{i}") for i, arg in enumerate(variant.args)
                    ]
                    lines.append(f"void {message_symbol(variant.name)}({', '.join(params)});")
            for method in definitions.exports_for(model.name):
                params = [ptr] + [_raw_param(p.type, p.name) for p in method.params]
                lines.append(
                    f"{_raw_type(method.returns)} {export_symbol(model.name, method.name)}"
                    f"({', '.join(params)});"
                )
        return lines

    def _message_methods(model: ModelDef) -> list[str]:
        lines: list[str] = []
        for message in definitions.messages_for(model.name):
            for variant in message.variants:
                params = ", ".join(
                    f"{_field_type(arg)} arg{i}" for i, arg in enumerate(variant.args)
                )
                args = "".join(f", {_to_ffi(arg, i)}" for i, arg in enumerate(variant.args))
                lines.append(
                    f"void msg{variant.name}({params}) => "
                    f"_bindings.{message_symbol(variant.name)}(this{args});"
                )
        return lines

    def _export_method(model: ModelDef, method: MethodDef) -> str:
        names = [to_camel_case(p.name) for p in method.params]
        params = ", ".join(f"{_field_type(p.type)} {n}" for p, n in zip(method.params, names))
        args = "".join(f", {_to_ffi(p.type, n)}" for p, n in zip(method.params, names))
        call = f"_bindings.{export_symbol(model.name, method.name)}(this{args})"
        if isinstance(method.returns, RustUnit):
            return f"void {to_camel_case(method.name)}({params}) => {call};"
        return (
            f"{_field_type(method.returns)} {to_camel_case(method.name)}({params}) => "
            f"{_to_dart(method.returns, call)};"
        )

    for model in definitions.models:
        logger.debug(
            "Rendering model %s (%d fields, %d exports)",
            model.name,
            len(model.fields),
            len(definitions.exports_for(model.name)),
        )

    return template.render(
        version=__version__,
        library=library,
        comments=definitions.comments,
        enums=definitions.enums,
        structs=definitions.structs,
        models=definitions.models,
        field_type=_field_type,
        getter=_getter,
        native_signatures=_native_signatures(),
        message_methods=_message_methods,
        export_method=_export_method,
        exports_for=definitions.exports_for,
        to_camel_case=to_camel_case,
        dart_ffi=DART_FFI,
        to_native=STRING_TO_NATIVE_INT8,
        to_dart=TO_DART,
    )
