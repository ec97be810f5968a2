"""javacheck CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from javacheck import __version__

if TYPE_CHECKING:
    from javacheck.tree.nodes import SyntaxTree


@click.group()
@click.version_option(version=__version__, prog_name="javacheck")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """javacheck - structural rules for Java code."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_or_exit(file: Path) -> SyntaxTree:
    from javacheck.tree.java_parser import JavaSyntaxError, parse_file

    try:
        return parse_file(file)
    except JavaSyntaxError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@main.command()
@click.argument(
    "paths",
    nargs=-1,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--rules",
    "rules_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Rules file (default: .javacheck/rules.yml).",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Exit 1 on any violation, warnings included.",
)
def lint(
    paths: tuple[Path, ...],
    *,
    rules_path: Path | None,
    fmt: str | None,
    strict: bool,
) -> None:
    """Check Java sources against the rules in rules.yml.

    PATHS are files or directories (default: current directory).
    Exit codes: 0 = clean or warnings only, 1 = error violations, file
    errors, or any violation with --strict, 2 = configuration error.
    """
    from javacheck.linter import LintError
    from javacheck.linter import format_json as _format_json
    from javacheck.linter import format_porcelain as _format_porcelain
    from javacheck.linter import format_rich as _format_rich
    from javacheck.linter import lint as run_lint

    # Resolve output format: explicit flag > TTY detection.
    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        result = run_lint(list(paths) or [Path.cwd()], rules_path=rules_path)
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    formatters = {
        "rich": _format_rich,
        "json": _format_json,
        "porcelain": _format_porcelain,
    }
    output = formatters[fmt](result)
    if output:
        click.echo(output)

    if fmt == "porcelain":
        for error in result.errors:
            click.echo(f"Error: {error.file_path}: {error.message}", err=True)

    if result.error_count or result.errors or (strict and result.violations):
        sys.exit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def tree(file: Path, *, output_json: bool) -> None:
    """Print the syntax tree javacheck builds for FILE."""
    from javacheck.tree.render import render_tree, tree_to_dict

    syntax_tree = _parse_or_exit(file)

    if output_json:
        click.echo(json.dumps(tree_to_dict(syntax_tree.root), indent=2))
    else:
        from rich.console import Console

        console = Console()
        render_tree(syntax_tree, console)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--line", "line", required=True, type=int, help="Line of the use site.")
@click.option("--name", "name", required=True, help="Identifier to resolve.")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def resolve(file: Path, *, line: int, name: str, output_json: bool) -> None:
    """Show which declaration each use of NAME on LINE binds to."""
    from javacheck.query.declarations import declared_name
    from javacheck.query.resolver import resolve_declaration
    from javacheck.tree.nodes import NodeKind

    syntax_tree = _parse_or_exit(file)
    uses = [
        node
        for node in syntax_tree.iter_nodes()
        if node.kind is NodeKind.IDENT and node.line == line and node.text == name
    ]
    if not uses:
        click.echo(f"Error: no identifier '{name}' on line {line}", err=True)
        sys.exit(1)

    bindings = []
    for use in uses:
        # The name slot of a declaration is not a use.
        previous = use.previous_sibling
        if previous is not None and previous.kind is NodeKind.TYPE:
            continue
        bindings.append(resolve_declaration(use))

    if output_json:
        output = [
            {
                "name": name,
                "line": line,
                "declaration": None
                if declaration is None
                else {
                    "kind": declaration.kind.name,
                    "name": declared_name(declaration),
                    "line": declaration.line,
                },
            }
            for declaration in bindings
        ]
        click.echo(json.dumps(output, indent=2))
        return

    if not bindings:
        click.echo(f"'{name}' on line {line} is a declaration, not a use.")
    for declaration in bindings:
        if declaration is None:
            click.echo(f"{name} (line {line}) -> unresolved")
        else:
            kind = declaration.kind.name
            click.echo(f"{name} (line {line}) -> {kind} at line {declaration.line}")
