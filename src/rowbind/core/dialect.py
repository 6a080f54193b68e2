"""SQL dialect abstraction for database-agnostic statement building.

Provides a ``Dialect`` protocol and concrete implementations for the
supported backends.  The statement builder and the ``Database`` data
access use ``Dialect`` methods to generate SQL fragments (placeholders,
identifier quoting, DML, row limiting) without importing or referencing
any specific database driver.

Manifesto:
    Mapper code must be portable across SQLite, PostgreSQL, MySQL and
    Oracle. Without a dialect layer, the batch-loading selects and the
    INSERT/UPDATE/DELETE payloads built from modified snapshots would be
    littered with backend-specific syntax.

    - **One interface:** Dialect protocol for all SQL generation
    - **Zero coupling:** Mapper code never imports database drivers
    - **Testable:** SQLiteDialect for tests, PostgreSQLDialect for prod

Architecture::

    ┌──────────┐ ┌──────────────┐ ┌────────────┐ ┌────────────────┐
    │ SQLite   │ │ PostgreSQL   │ │  MySQL     │ │  Oracle        │
    │ ?, ?, ?  │ │ %s, %s, %s   │ │ %s, %s     │ │ :1, :2         │
    │ "name"   │ │ "name"       │ │ `name`     │ │ "name"         │
    │ LIMIT n  │ │ LIMIT n      │ │ LIMIT n    │ │ FETCH NEXT n   │
    └──────────┘ └──────────────┘ └────────────┘ └────────────────┘

Examples:
    >>> from rowbind.core.dialect import get_dialect, SQLiteDialect
    >>> d = SQLiteDialect()
    >>> d.placeholders(3)
    '?, ?, ?'
    >>> d.quote_identifier("book.author_id")
    '"book"."author_id"'

Guardrails:
    ❌ DON'T: Write backend-specific SQL in the mapper
    ✅ DO: Use Dialect methods for placeholders, quoting and DML

Tags:
    dialect, sql, abstraction, portability, database, rowbind

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract.

    Every method returns a **SQL fragment** (string) that is valid for
    the target database.
    """

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    # -- Placeholder generation --------------------------------------------

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index).

        ``index`` is ignored by dialects that use anonymous placeholders
        (SQLite ``?``, MySQL ``%s``) but required by numbered styles
        (Oracle ``:1``).
        """
        ...

    def placeholders(self, count: int, start: int = 0) -> str:
        """Comma-separated placeholder list starting at ``start``."""
        ...

    # -- Identifiers -------------------------------------------------------

    def quote_identifier(self, name: str) -> str:
        """Quote a (possibly ``table.column`` qualified) identifier."""
        ...

    # -- DML helpers -------------------------------------------------------

    def insert(self, table: str, columns: Sequence[str]) -> str:
        """``INSERT INTO table (cols) VALUES (...)`` with placeholders."""
        ...

    def update(self, table: str, columns: Sequence[str], key_column: str = "id") -> str:
        """``UPDATE table SET col = ? ... WHERE key = ?`` with placeholders.

        The key placeholder comes last.
        """
        ...

    def delete(self, table: str, key_column: str = "id") -> str:
        """``DELETE FROM table WHERE key = ?``."""
        ...

    # -- Row limiting ------------------------------------------------------

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        """Trailing clause restricting the number of returned rows."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class _BaseDialect:
    """Shared DML rendering.  Subclasses define placeholders and quoting."""

    quote_char = '"'

    def __init__(self, *, qmark: bool = False) -> None:
        # qmark: always render ``?`` (connections that rewrite markers themselves)
        self.qmark = qmark

    @property
    def name(self) -> str:
        raise NotImplementedError

    def placeholder(self, index: int) -> str:
        if self.qmark:
            return "?"
        return self._native_placeholder(index)

    def _native_placeholder(self, index: int) -> str:
        raise NotImplementedError

    def placeholders(self, count: int, start: int = 0) -> str:
        return ", ".join(self.placeholder(start + i) for i in range(count))

    def quote_identifier(self, name: str) -> str:
        q = self.quote_char
        return ".".join(f"{q}{part.replace(q, q + q)}{q}" for part in name.split("."))

    def insert(self, table: str, columns: Sequence[str]) -> str:
        cols = ", ".join(self.quote_identifier(c) for c in columns)
        ph = self.placeholders(len(columns))
        return f"INSERT INTO {self.quote_identifier(table)} ({cols}) VALUES ({ph})"

    def update(self, table: str, columns: Sequence[str], key_column: str = "id") -> str:
        sets = ", ".join(
            f"{self.quote_identifier(c)} = {self.placeholder(i)}" for i, c in enumerate(columns)
        )
        key_ph = self.placeholder(len(columns))
        return (
            f"UPDATE {self.quote_identifier(table)} SET {sets} "
            f"WHERE {self.quote_identifier(key_column)} = {key_ph}"
        )

    def delete(self, table: str, key_column: str = "id") -> str:
        return (
            f"DELETE FROM {self.quote_identifier(table)} "
            f"WHERE {self.quote_identifier(key_column)} = {self.placeholder(0)}"
        )

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts = []
        if limit is not None:
            parts.append(f"LIMIT {int(limit)}")
        if offset is not None:
            if limit is None:
                parts.append("LIMIT -1")
            parts.append(f"OFFSET {int(offset)}")
        return " ".join(parts)

    def __repr__(self) -> str:
        if self.qmark:
            return f"{self.__class__.__name__}(qmark=True)"
        return f"{self.__class__.__name__}()"


class SQLiteDialect(_BaseDialect):
    """SQLite dialect: ``?`` placeholders, ``"double quoted"`` identifiers."""

    @property
    def name(self) -> str:
        return "sqlite"

    def _native_placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"


class PostgreSQLDialect(_BaseDialect):
    """PostgreSQL dialect: ``%s`` placeholders (psycopg2).

    For SQLAlchemy-backed connections the bridge rewrites ``?`` markers,
    so construct it with ``qmark=True`` there.
    """

    @property
    def name(self) -> str:
        return "postgresql"

    def _native_placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts = []
        if limit is not None:
            parts.append(f"LIMIT {int(limit)}")
        if offset is not None:
            parts.append(f"OFFSET {int(offset)}")
        return " ".join(parts)


class MySQLDialect(_BaseDialect):
    """MySQL dialect: ``%s`` placeholders, backtick identifiers."""

    quote_char = "`"

    @property
    def name(self) -> str:
        return "mysql"

    def _native_placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        if limit is None and offset is None:
            return ""
        # MySQL has no "all rows" limit keyword, so use max BIGINT UNSIGNED
        clause = f"LIMIT {int(limit) if limit is not None else 18446744073709551615}"
        if offset is not None:
            clause += f" OFFSET {int(offset)}"
        return clause


class OracleDialect(_BaseDialect):
    """Oracle dialect: ``:1, :2`` numbered placeholders, ``FETCH NEXT``."""

    @property
    def name(self) -> str:
        return "oracle"

    def _native_placeholder(self, index: int) -> str:
        return f":{index + 1}"

    def limit_clause(self, limit: int | None, offset: int | None) -> str:
        parts = []
        if offset is not None:
            parts.append(f"OFFSET {int(offset)} ROWS")
        if limit is not None:
            parts.append(f"FETCH NEXT {int(limit)} ROWS ONLY")
        return " ".join(parts)


# =========================================================================
# Registry / Factory
# =========================================================================

# Pre-instantiated singletons (dialects are stateless)
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
    "mysql": MySQLDialect(),
    "oracle": OracleDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.

    Example:
        >>> get_dialect("postgresql").placeholders(2)
        '%s, %s'
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (drivers or test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "MySQLDialect",
    "OracleDialect",
    "get_dialect",
    "register_dialect",
]
