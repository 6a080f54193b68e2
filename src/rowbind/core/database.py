"""Dialect-aware data-access boundary.

Provides :class:`Database`, the production implementation of
:class:`~rowbind.core.protocols.DataAccess`.  It pairs a
:class:`~rowbind.core.protocols.Connection` with a
:class:`~rowbind.core.dialect.Dialect` so that the row tracking engine and
the repositories issue **portable** SQL without referencing any specific
database driver.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                           Database                                 │
    │                                                                    │
    │   conn: Connection        ← protocol from rowbind.core.protocols   │
    │   dialect: Dialect        ← from rowbind.core.dialect              │
    │                                                                    │
    │   select(table)            → Select                                │
    │   fetch_all(statement)     → list[dict]                            │
    │   fetch_in(t, col, values) → list[dict]                            │
    │   query(sql, params)       → list[dict]                            │
    │   insert(table, values)    → new id                                │
    │   update(t, values, id)    → affected rows                         │
    │   delete(table, id)        → affected rows                         │
    └────────────────────────────────────────────────────────────────────┘

Driver exceptions are wrapped in :class:`~rowbind.core.errors.QueryError`
with the original exception chained as ``cause``.

Usage:
    >>> db = Database(SqliteConnection(":memory:"))
    >>> _ = db.execute("CREATE TABLE author (id INTEGER PRIMARY KEY, name TEXT)")
    >>> db.insert("author", {"name": "Ann"})
    1
    >>> db.fetch_in("author", "id", [1])
    [{'id': 1, 'name': 'Ann'}]

Tags:
    database, data-access, abstraction, portability, rowbind
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from rowbind.core.dialect import Dialect, SQLiteDialect
from rowbind.core.errors import InvalidArgumentError, QueryError
from rowbind.core.logging import get_logger
from rowbind.core.protocols import Connection
from rowbind.core.statement import Select

logger = get_logger(__name__)


class Database:
    """Data-access boundary over a ``Connection`` and a ``Dialect``.

    Parameters:
        conn: Any object satisfying the :class:`Connection` protocol.
        dialect: SQL dialect to use.  Defaults to :class:`SQLiteDialect`.
        autocommit: Commit after every INSERT/UPDATE/DELETE.
        echo: Log executed statements at INFO instead of DEBUG.
    """

    def __init__(
        self,
        conn: Connection,
        dialect: Dialect | None = None,
        *,
        autocommit: bool = True,
        echo: bool = False,
    ) -> None:
        self.conn = conn
        self.dialect: Dialect = dialect or SQLiteDialect()
        self.autocommit = autocommit
        self.echo = echo

    # -- Statements --------------------------------------------------------

    def select(self, table: str) -> Select:
        """Return a fresh ``SELECT * FROM table`` for this dialect."""
        return Select(table, self.dialect)

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute a statement and return the raw cursor/result."""
        if self.echo:
            logger.info("query_executed", sql=sql, params=len(params))
        else:
            logger.debug("query_executed", sql=sql, params=len(params))
        try:
            return self.conn.execute(sql, params)
        except Exception as e:
            raise QueryError(f"Statement failed: {e}", cause=e).with_context(sql=sql) from e

    # -- Reads -------------------------------------------------------------

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a SELECT and return rows as dicts.

        Mapping-like rows (``sqlite3.Row``, psycopg2 ``DictRow``) are
        converted directly; plain tuples are zipped with the cursor's
        DB-API 2.0 ``description``.
        """
        cursor = self.execute(sql, params)
        try:
            rows = cursor.fetchall()
        except Exception as e:
            raise QueryError(f"Fetch failed: {e}", cause=e).with_context(sql=sql) from e
        if not rows:
            return []

        if hasattr(rows[0], "keys"):
            return [dict(row) for row in rows]

        description = getattr(cursor, "description", None)
        if not description:
            raise QueryError("Cursor returned rows without column names.").with_context(sql=sql)
        columns = [desc[0] for desc in description]
        return [dict(zip(columns, row, strict=False)) for row in rows]

    def fetch_all(self, statement: Select) -> list[dict[str, Any]]:
        """Render and execute a :class:`Select`."""
        sql, params = statement.render()
        return self.query(sql, params)

    def fetch_in(self, table: str, column: str, values: Iterable[Any]) -> list[dict[str, Any]]:
        """Return all rows of ``table`` whose ``column`` is in ``values``."""
        return self.fetch_all(self.select(table).where_in(column, values))

    # -- Writes ------------------------------------------------------------

    def insert(self, table: str, values: Mapping[str, Any]) -> Any:
        """Insert one row from a dict and return its identifier.

        A non-null ``id`` in ``values`` wins over the driver's
        ``lastrowid``.
        """
        if not values:
            raise InvalidArgumentError(f"Cannot insert an empty row into '{table}'.")
        columns = list(values.keys())
        cursor = self.execute(self.dialect.insert(table, columns), tuple(values.values()))
        new_id = (
            values["id"] if values.get("id") is not None else getattr(cursor, "lastrowid", None)
        )
        self._maybe_commit()
        return new_id

    def update(self, table: str, values: Mapping[str, Any], row_id: Any) -> int:
        """Update the row with ``id = row_id``; returns affected row count."""
        if not values:
            return 0
        columns = list(values.keys())
        params = tuple(values.values()) + (row_id,)
        cursor = self.execute(self.dialect.update(table, columns), params)
        affected = getattr(cursor, "rowcount", -1)
        self._maybe_commit()
        return affected

    def delete(self, table: str, row_id: Any) -> int:
        """Delete the row with ``id = row_id``; returns affected row count."""
        cursor = self.execute(self.dialect.delete(table), (row_id,))
        affected = getattr(cursor, "rowcount", -1)
        self._maybe_commit()
        return affected

    def commit(self) -> None:
        """Commit the current transaction."""
        self.conn.commit()

    def _maybe_commit(self) -> None:
        if self.autocommit:
            self.conn.commit()

    def __repr__(self) -> str:
        return f"Database({self.conn!r}, dialect={self.dialect.name!r})"


__all__ = [
    "Database",
]
