"""
Root Typer application for the tablemap CLI.

Both commands take a fully-qualified class name (``package.module.Class``),
import it, and print what tablemap derives from its constructor.
"""

from __future__ import annotations

import typer
from typer import Typer

from tablemap.cli.utils import (
    describe_payload,
    output_error,
    output_json,
    print_description,
    print_statements,
    statements_payload,
)
from tablemap.errors import TablemapError
from tablemap.logging import configure_logging
from tablemap.metadata.classifier import TypeClassifier
from tablemap.metadata.introspection import locate_type
from tablemap.metadata.mapping import EntityMapping
from tablemap.settings import get_settings

app = Typer(
    name="tablemap",
    help="tablemap: inspect the table mapping derived from a class constructor.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from tablemap import __version__

        try:
            v = pkg_version("tablemap")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"tablemap {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """tablemap CLI: describe mapped types and the SQL their repositories run."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def describe(
    type_name: str = typer.Argument(..., metavar="TYPE", help="Fully-qualified class name"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show the kind, identity type and properties of a mapped type."""
    try:
        payload = describe_payload(TypeClassifier.for_type(locate_type(type_name)))
    except TablemapError as exc:
        output_error(exc)
        return

    if json_out:
        output_json(payload)
    else:
        print_description(payload)


@app.command()
def sql(
    type_name: str = typer.Argument(..., metavar="TYPE", help="Fully-qualified entity class name"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show the table, columns and INSERT/UPDATE/DELETE statements for an entity."""
    try:
        payload = statements_payload(EntityMapping.for_type(locate_type(type_name)))
    except TablemapError as exc:
        output_error(exc)
        return

    if json_out:
        output_json(payload)
    else:
        print_statements(payload)
