"""Fluent, dialect-aware SELECT builder.

The batch-loading selects issued by the row tracking engine are built as
:class:`Select` objects so that caller-supplied filters can refine them
(extra ``WHERE`` conditions, ordering, limits) before they execute.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                             Select                                 │
    │                                                                    │
    │   where(cond, *params)   cond uses ``?`` markers                   │
    │   where_in(col, values)  col qualified with table when bare        │
    │   order_by(*exprs)                                                 │
    │   limit(n) / offset(n)                                             │
    │                                                                    │
    │   render()  → (sql, params)   ``?`` → dialect placeholders         │
    │   digest()  → fingerprint used in relationship cache keys          │
    └────────────────────────────────────────────────────────────────────┘

Usage:
    >>> stmt = Select("book", SQLiteDialect())
    >>> _ = stmt.where_in("id", [1, 2]).where("pubdate > ?", "2000-01-01").order_by("title")
    >>> stmt.render()
    ('SELECT * FROM "book" WHERE "book"."id" IN (?, ?) AND (pubdate > ?) ORDER BY title', (1, 2, '2000-01-01'))

The builder is mutable: every method changes the statement in place and
returns it so calls can be chained.

Tags:
    statement, select, sql-builder, dialect, rowbind
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from rowbind.core.dialect import Dialect, SQLiteDialect
from rowbind.core.errors import InvalidArgumentError
from rowbind.core.hashing import statement_fingerprint


class Select:
    """Mutable ``SELECT`` statement over a single table.

    Parameters:
        table: Table to select from.
        dialect: SQL dialect used when rendering.  Defaults to SQLite.
        columns: Column list; ``"*"`` by default.
    """

    def __init__(self, table: str, dialect: Dialect | None = None, columns: str = "*") -> None:
        self.table = table
        self.dialect: Dialect = dialect or SQLiteDialect()
        self.columns = columns
        self._conditions: list[tuple[str, tuple[Any, ...]]] = []
        self._order: list[str] = []
        self._limit: int | None = None
        self._offset: int | None = None

    # -- Building ----------------------------------------------------------

    def where(self, condition: str, *params: Any) -> Select:
        """Add a condition, ANDed with the existing ones.

        ``condition`` uses ``?`` as parameter marker regardless of dialect;
        the number of markers must match the number of ``params``.
        """
        if condition.count("?") != len(params):
            raise InvalidArgumentError(
                f"Condition {condition!r} has {condition.count('?')} markers "
                f"but {len(params)} parameters were given."
            )
        self._conditions.append((f"({condition})", params))
        return self

    def where_in(self, column: str, values: Iterable[Any]) -> Select:
        """Restrict ``column`` to ``values``.  An empty set matches nothing."""
        values = tuple(values)
        if "." not in column:
            column = f"{self.table}.{column}"
        quoted = self.dialect.quote_identifier(column)
        if not values:
            self._conditions.append(("1 = 0", ()))
        else:
            markers = ", ".join("?" for _ in values)
            self._conditions.append((f"{quoted} IN ({markers})", values))
        return self

    def order_by(self, *expressions: str) -> Select:
        self._order.extend(expressions)
        return self

    def limit(self, limit: int | None) -> Select:
        self._limit = limit
        return self

    def offset(self, offset: int | None) -> Select:
        self._offset = offset
        return self

    # -- Rendering ---------------------------------------------------------

    def render(self) -> tuple[str, tuple[Any, ...]]:
        """Return the SQL text (with dialect placeholders) and bound params."""
        sql = f"SELECT {self.columns} FROM {self.dialect.quote_identifier(self.table)}"
        params: list[Any] = []
        if self._conditions:
            rendered = []
            for condition, condition_params in self._conditions:
                rendered.append(self._bind(condition, len(params)))
                params.extend(condition_params)
            sql += " WHERE " + " AND ".join(rendered)
        if self._order:
            sql += " ORDER BY " + ", ".join(self._order)
        limit = self.dialect.limit_clause(self._limit, self._offset)
        if limit:
            sql += f" {limit}"
        return sql, tuple(params)

    def digest(self) -> str:
        """Fingerprint of the rendered statement and its parameters."""
        return statement_fingerprint(*self.render())

    def _bind(self, condition: str, start: int) -> str:
        rewritten, idx = [], start
        for ch in condition:
            if ch == "?":
                rewritten.append(self.dialect.placeholder(idx))
                idx += 1
            else:
                rewritten.append(ch)
        return "".join(rewritten)

    def __str__(self) -> str:
        return self.render()[0]

    def __repr__(self) -> str:
        return f"Select({self.table!r}, conditions={len(self._conditions)})"


__all__ = [
    "Select",
]
