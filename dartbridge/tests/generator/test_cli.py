"""Tests for CLI interface."""

import json
import os
import tempfile

from click.testing import CliRunner

from dartbridge.generator.cli import cli


def write_defs(text):
    with tempfile.NamedTemporaryFile("w", suffix=".rid", delete=False) as f:
        f.write(text)
        return f.name


def describe_gen_command():
    def generates_dart_code(expect, todo_file):
        runner = CliRunner()
        with tempfile.NamedTemporaryFile(suffix=".dart", delete=False) as f:
            output_file = f.name

        try:
            result = runner.invoke(cli, ["gen", "-i", todo_file, "-o", output_file])
            expect(result.exit_code) == 0
            with open(output_file) as f:
                content = f.read()
            expect("enum Filter {" in content) == True
            expect("library generated_bindings;" in content) == True
        finally:
            os.unlink(output_file)

    def uses_library_name(expect, todo_file):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            output_file = os.path.join(tmpdir, "todo.dart")
            result = runner.invoke(
                cli, ["gen", "-i", todo_file, "-o", output_file, "--library", "todo"]
            )
            expect(result.exit_code) == 0
            with open(output_file) as f:
                expect("library todo;" in f.read()) == True

    def writes_log_file(expect, todo_file):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, "gen.log")
            output_file = os.path.join(tmpdir, "todo.dart")
            result = runner.invoke(
                cli, ["-v", "--log-file", log_file, "gen", "-i", todo_file, "-o", output_file]
            )
            expect(result.exit_code) == 0
            with open(log_file) as f:
                log = f.read()
            expect("Rendering model Model" in log) == True
            expect("Wrote" in log) == True

    def reports_unresolved_types(expect):
        input_file = write_defs("struct Todo {\n  owner: User\n}\n")
        try:
            result = CliRunner().invoke(cli, ["gen", "-i", input_file, "-o", "/tmp/out.dart"])
            expect(result.exit_code) == 1
            expect("2:10: Unknown type User" in result.output) == True
        finally:
            os.unlink(input_file)

    def logs_failures_with_their_location(expect):
        input_file = write_defs("struct Todo {\n  owner: User\n}\n")
        with tempfile.TemporaryDirectory() as tmpdir:
            log_file = os.path.join(tmpdir, "gen.log")
            output_file = os.path.join(tmpdir, "todo.dart")
            try:
                result = CliRunner().invoke(
                    cli, ["-v", "--log-file", log_file, "gen", "-i", input_file, "-o", output_file]
                )
                expect(result.exit_code) == 1
                with open(log_file) as f:
                    expect(f"{input_file}:2:10: Unknown type User" in f.read()) == True
            finally:
                os.unlink(input_file)

    def reports_syntax_errors(expect):
        input_file = write_defs("this is not valid syntax")
        try:
            result = CliRunner().invoke(cli, ["gen", "-i", input_file, "-o", "/tmp/out.dart"])
            expect(result.exit_code) == 1
            expect("error:" in result.output) == True
        finally:
            os.unlink(input_file)

    def fails_with_missing_input(expect):
        result = CliRunner().invoke(
            cli, ["gen", "-i", "/nonexistent/file.rid", "-o", "/tmp/out.dart"]
        )
        expect(result.exit_code) != 0

    def requires_all_options(expect):
        result = CliRunner().invoke(cli, ["gen", "-i", "defs.rid"])
        expect(result.exit_code) != 0
        expect("Missing option" in result.output) == True


def describe_info_command():
    def prints_tables(expect, todo_file):
        result = CliRunner().invoke(cli, ["info", "-i", todo_file])
        expect(result.exit_code) == 0
        expect("Projections" in result.output) == True
        expect("Types" in result.output) == True
        expect("Filter" in result.output) == True

    def prints_json(expect, todo_file):
        result = CliRunner().invoke(cli, ["info", "-i", todo_file, "--json"])
        expect(result.exit_code) == 0
        rows = json.loads(result.output)
        by_member = {(row["owner"], row["member"]): row for row in rows}

        filter_row = by_member[("Model", "filter")]
        expect(filter_row["dart"]) == "Filter"
        expect(filter_row["raw"]) == "int"
        expect(filter_row["attribute"]) == None

        id_row = by_member[("Todo", "id")]
        expect(id_row["rust"]) == "i32"
        expect(id_row["attribute"]) == "@dart_ffi.Int32()"

        expect(by_member[("Model", "filtered_todos ->")]["dart"]) == "List<Todo>"


def describe_types_command():
    def renders_builtin_types(expect):
        result = CliRunner().invoke(cli, ["types", "Option<Vec<i32>>"])
        expect(result.exit_code) == 0
        expect(result.output) == "List<int>?\n"

    def renders_with_options_and_conversions(expect, todo_file):
        result = CliRunner().invoke(
            cli,
            [
                "types",
                "Option<Filter>",
                "-d",
                todo_file,
                "--raw",
                "--returns",
                "raw",
                "--argument",
                "0",
            ],
        )
        expect(result.exit_code) == 0
        lines = result.output.splitlines()
        expect(lines[0]) == "int?"
        expect(lines[1]) == "arg0"
        expect(lines[2]) == (
            "() { final x = raw; return x != null ? Filter.values[x] : null; }()"
        )

    def renders_attributes(expect):
        result = CliRunner().invoke(cli, ["types", "u64", "--attr"])
        expect(result.output) == "@dart_ffi.Int64() int\n"

    def rejects_unit_arguments(expect):
        result = CliRunner().invoke(cli, ["types", "()", "--argument", "0"])
        expect(result.exit_code) == 1
        expect("cannot be passed as an argument" in result.output) == True

    def rejects_unknown_types(expect):
        result = CliRunner().invoke(cli, ["types", "Todo"])
        expect(result.exit_code) == 1
        expect("Unknown type Todo" in result.output) == True


def describe_main_group():
    def shows_help(expect):
        result = CliRunner().invoke(cli, ["--help"])
        expect(result.exit_code) == 0
        expect("gen" in result.output) == True
        expect("info" in result.output) == True
        expect("types" in result.output) == True
