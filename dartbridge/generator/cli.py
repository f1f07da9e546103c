"""Command-line interface for dartbridge code generation."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click
from dataclasses_json import DataClassJsonMixin
from lark.exceptions import UnexpectedInput
from rich.console import Console
from rich.table import Table

from dartbridge.generator import dart, parse, parse_type
from dartbridge.generator.dart import RenderOptions
from dartbridge.generator.errors import GenerationError
from dartbridge.generator.projector import project
from dartbridge.generator.registry import CategoryRegistry
from dartbridge.generator.types import Definitions, RustType, rust_type_name
from dartbridge.log import configure_logging, get_logger

logger = get_logger("cli")


@dataclass
class TypeRow(DataClassJsonMixin):
    """One rendered field, parameter or return value."""

    owner: str
    member: str
    rust: str
    dart: str
    raw: str
    attribute: str | None


def _fail(source: str, err: Exception) -> NoReturn:
    if isinstance(err, GenerationError):
        logger.debug("%s", err.message, extra={"source": source, "location": err.location})
    else:
        logger.debug("%s", err, extra={"source": source})
    click.echo(f"error: {source}:{err}", err=True)
    sys.exit(1)


def _load(input_file: str) -> Definitions:
    with open(input_file, encoding="utf-8") as f:
        text = f.read()
    try:
        return parse(text)
    except (GenerationError, UnexpectedInput) as err:
        _fail(input_file, err)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write logs to this file",
)
def cli(verbose: bool, log_file: Path | None) -> None:
    """Dartbridge Dart FFI binding generator."""
    configure_logging(verbose=verbose, log_file=log_file)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input definition file")
@click.option("--output", "-o", "output_file", required=True, help="Output Dart file")
@click.option("--library", default="generated_bindings", help="Dart library name")
def gen(input_file: str, output_file: str, library: str) -> None:
    """Generate Dart bindings from a definition file."""
    definitions = _load(input_file)

    try:
        generated_file = dart.render(definitions, library=library)
    except GenerationError as err:
        _fail(input_file, err)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)

    logger.info("Wrote %s", output_file)


def _row(definitions: Definitions, owner: str, member: str, t: RustType) -> TypeRow:
    target = project(t, definitions.registry)
    return TypeRow(
        owner=owner,
        member=member,
        rust=rust_type_name(t),
        dart=dart.render_type_name(target, raw=False) or "void",
        raw=dart.render_type_name(target, raw=True) or "void",
        attribute=dart.render_type_attribute(target),
    )


def collect_rows(definitions: Definitions) -> list[TypeRow]:
    """Project every field, message argument and exported signature."""
    rows: list[TypeRow] = []
    for owner in [*definitions.structs, *definitions.models]:
        for field in owner.fields:
            rows.append(_row(definitions, owner.name, field.name, field.type))

    for message in definitions.messages:
        for variant in message.variants:
            for i, arg in enumerate(variant.args):
                rows.append(_row(definitions, message.name, f"{variant.name}.arg{i}", arg))

    for export in definitions.exports:
        for method in export.methods:
            for param in method.params:
                member = f"{method.name}({param.name})"
                rows.append(_row(definitions, export.model, member, param.type))
            rows.append(_row(definitions, export.model, f"{method.name} ->", method.returns))
    return rows


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input definition file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display how every declared type projects to Dart."""
    definitions = _load(input_file)
    rows = collect_rows(definitions)

    if output_json:
        print(json.dumps([row.to_dict() for row in rows], indent=2))
    else:
        _output_plain(definitions, rows)


def _output_plain(definitions: Definitions, rows: list[TypeRow]) -> None:
    """Output projections using rich text formatting."""
    console = Console()

    console.print("[bold cyan]Types[/bold cyan]")
    type_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    type_table.add_column("Name", style="white")
    type_table.add_column("Category", style="dim")
    for name, category in definitions.registry.items():
        type_table.add_row(name, category.value)
    console.print(type_table)
    console.print()

    console.print("[bold cyan]Projections[/bold cyan]")
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Owner", style="white")
    table.add_column("Member", style="white")
    table.add_column("Rust", style="yellow")
    table.add_column("Dart", style="green")
    table.add_column("Raw", style="green")
    table.add_column("Attribute", style="dim")
    for row in rows:
        table.add_row(row.owner, row.member, row.rust, row.dart, row.raw, row.attribute or "")
    console.print(table)


@cli.command()
@click.argument("type_expr")
@click.option(
    "--defs", "-d", "defs_file", default=None, help="Definition file declaring custom types"
)
@click.option("--raw", is_flag=True, default=False, help="Render enums as their integer index")
@click.option("--attr", is_flag=True, default=False, help="Prefix integer FFI width attributes")
@click.option("--argument", "slot", default=None, help="Also render argument conversion for SLOT")
@click.option("--returns", "snippet", default=None, help="Also render return conversion of SNIPPET")
def types(
    type_expr: str,
    defs_file: str | None,
    raw: bool,
    attr: bool,
    slot: str | None,
    snippet: str | None,
) -> None:
    """Render a single Rust TYPE_EXPR as Dart."""
    registry = _load(defs_file).registry if defs_file else CategoryRegistry()

    try:
        t = parse_type(type_expr, registry)
        target = project(t, registry)
        print(RenderOptions(raw=raw, include_type_attribute=attr).render(target))
        if slot is not None:
            print(dart.render_argument_expr(target, int(slot) if slot.isdigit() else slot))
        if snippet is not None:
            print(dart.render_return_expr(target, snippet))
    except (GenerationError, UnexpectedInput) as err:
        _fail(type_expr, err)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
