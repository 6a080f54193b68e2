"""
Root Typer application for the rowbind CLI.

Commands::

    rowbind rows TABLE [--id ID]...             rows of a table
    rowbind referenced TABLE ID TARGET          to-one traversal
    rowbind referencing TABLE ID SOURCE         to-many traversal

Every command accepts ``--database/-d`` (default ``ROWBIND_DATABASE_URL``)
and ``--json``.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from rowbind.cli.utils import database_session, fail, output_row, output_rows
from rowbind.core.database import Database
from rowbind.core.errors import NotFoundError, RowbindError
from rowbind.core.logging import configure_logging
from rowbind.core.settings import get_settings
from rowbind.mapper.result import Result
from rowbind.mapper.row import Row

app = Typer(
    name="rowbind",
    help="rowbind: inspect rows and walk relationships.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("rowbind")
        except PackageNotFoundError:
            from rowbind import __version__ as v
        typer.echo(f"rowbind {v}")
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
    """Inspect rows and relationships of a database."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


# ── Commands ─────────────────────────────────────────────────────────────


def _load_row(db: Database, table: str, row_id: int) -> Row:
    rows = db.fetch_all(db.select(table).where_in("id", [row_id]))
    row = Result.from_rows(rows, table, db).get(row_id)
    if row is None:
        raise NotFoundError(f"No row with ID {row_id} in '{table}'.").with_context(
            table=table, row_id=row_id
        )
    return row


@app.command()
def rows(
    table: str = typer.Argument(..., help="Table name"),
    ids: list[int] | None = typer.Option(None, "--id", "-i", help="Restrict to these ids"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List rows of a table."""
    try:
        with database_session(database) as db:
            statement = db.select(table)
            if ids:
                statement.where_in("id", ids)
            result = Result.from_rows(db.fetch_all(statement), table, db)
            output_rows(result.to_dicts(), as_json=json_out, title=table)
    except RowbindError as e:
        fail(e)


@app.command()
def referenced(
    table: str = typer.Argument(..., help="Source table"),
    row_id: int = typer.Argument(..., help="Source row ID"),
    target: str = typer.Argument(..., help="Referenced table"),
    via: str | None = typer.Option(None, "--via", help="Referencing column (default TARGET_id)"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the TARGET row referenced by a row of TABLE."""
    try:
        with database_session(database) as db:
            related = _load_row(db, table, row_id).referenced(target, via_column=via)
            output_row(
                related.to_dict() if related is not None else None,
                as_json=json_out,
                title=f"{target} referenced by {table} #{row_id}",
            )
    except RowbindError as e:
        fail(e)


@app.command()
def referencing(
    table: str = typer.Argument(..., help="Referenced table"),
    row_id: int = typer.Argument(..., help="Referenced row ID"),
    source: str = typer.Argument(..., help="Referencing table"),
    via: str | None = typer.Option(None, "--via", help="Referencing column (default TABLE_id)"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List the SOURCE rows referencing a row of TABLE."""
    try:
        with database_session(database) as db:
            related = _load_row(db, table, row_id).referencing(source, via_column=via)
            output_rows(
                [row.to_dict() for row in related],
                as_json=json_out,
                title=f"{source} referencing {table} #{row_id}",
            )
    except RowbindError as e:
        fail(e)
