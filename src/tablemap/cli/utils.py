"""
CLI utility helpers: consoles, payload builders and output formatting.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tablemap.errors import TablemapError
from tablemap.metadata.classifier import TypeClassifier
from tablemap.metadata.mapping import EntityMapping

console = Console()
err_console = Console(stderr=True)


# ── Payloads ─────────────────────────────────────────────────────────────


def describe_payload(classifier: TypeClassifier) -> dict[str, Any]:
    """Plain-dict view of a classifier, as printed by ``tablemap describe``."""
    return {
        "type": classifier.name,
        "kind": classifier.kind.value,
        "id_type": classifier.id_type,
        "properties": [
            {
                "name": prop.name,
                "declared_type": prop.declared_type,
                "is_array": prop.is_array,
                "nullable": prop.nullable,
                "accessor": prop.accessor,
                "nested": prop.nested.kind.value if prop.nested else None,
            }
            for prop in classifier.properties
        ],
    }


def statements_payload(mapping: EntityMapping) -> dict[str, Any]:
    """Table, columns and persistence statements for one entity."""
    return {
        "table": mapping.table,
        "columns": list(mapping.column_names),
        "insert": f"INSERT INTO {mapping.table} ({mapping.columns}) VALUES ({mapping.bindings})",
        "update": f"UPDATE {mapping.table} SET {mapping.columns_equal_bindings} WHERE id = :id",
        "delete": f"DELETE FROM {mapping.table} WHERE id = :id",
    }


# ── Output helpers ───────────────────────────────────────────────────────


def output_error(error: TablemapError) -> None:
    """Render a tablemap error to stderr and exit with status 1."""
    err_console.print(
        f"[bold red]Error[/bold red] ({error.category.value}, {type(error).__name__}): "
        f"{escape(error.message)}",
        soft_wrap=True,
    )
    raise typer.Exit(code=1)


def output_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_description(payload: dict[str, Any]) -> None:
    console.print(f"[bold]{escape(payload['type'])}[/bold]", soft_wrap=True)
    console.print(f"  [cyan]kind[/cyan]: {payload['kind']}")
    if payload["id_type"]:
        console.print(f"  [cyan]id_type[/cyan]: {escape(payload['id_type'])}", soft_wrap=True)

    table = Table(show_lines=False, pad_edge=False)
    for column in ("name", "declared_type", "is_array", "nullable", "accessor", "nested"):
        table.add_column(column, overflow="fold")
    for prop in payload["properties"]:
        table.add_row(*(escape(str(value)) if value is not None else "-" for value in prop.values()))
    console.print(table)


def print_statements(payload: dict[str, Any]) -> None:
    console.print(f"  [cyan]table[/cyan]: {payload['table']}")
    console.print(f"  [cyan]columns[/cyan]: {', '.join(payload['columns'])}", soft_wrap=True)
    for key in ("insert", "update", "delete"):
        console.print(payload[key], soft_wrap=True, highlight=False, markup=False)
