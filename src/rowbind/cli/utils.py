"""
CLI utility helpers for database access, output and error exit.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from rowbind.core.connection import connect
from rowbind.core.database import Database
from rowbind.core.errors import RowbindError
from rowbind.core.settings import get_settings

console = Console()
err_console = Console(stderr=True)


# ── Database helper ──────────────────────────────────────────────────────


def open_database(database: str | None = None) -> Database:
    """Open ``database``, or the configured ``ROWBIND_DATABASE_URL``."""
    settings = get_settings()
    return connect(
        database or settings.database_url,
        autocommit=settings.autocommit,
        echo=settings.echo_sql,
    )


@contextmanager
def database_session(database: str | None = None) -> Iterator[Database]:
    """Open a database for one command and close its connection afterwards."""
    db = open_database(database)
    try:
        yield db
    finally:
        db.conn.close()


# ── Output helpers ───────────────────────────────────────────────────────


def output_rows(rows: list[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render rows as a Rich table (or JSON)."""
    if as_json:
        console.print_json(json.dumps(rows, default=str))
        return
    if not rows:
        console.print("[dim]No rows.[/dim]")
        return
    _print_table(rows, title=title)


def output_row(row: dict[str, Any] | None, *, as_json: bool = False, title: str = "") -> None:
    """Render a single row as key-value pairs (or JSON)."""
    if as_json:
        console.print_json(json.dumps(row, default=str))
        return
    if row is None:
        console.print("[dim]No row.[/dim]")
        return
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in row.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")


def fail(error: RowbindError) -> NoReturn:
    """Print a library error and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    raise typer.Exit(code=1)


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    columns: list[str] = []
    for row in rows:
        for column in row:
            if column not in columns:
                columns.append(column)
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for column in columns:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*("" if row.get(c) is None else str(row.get(c)) for c in columns))
    console.print(table)
