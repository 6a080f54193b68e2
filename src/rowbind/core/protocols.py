"""
Canonical protocol definitions for rowbind.

This module defines the structural contracts between the row tracking
engine and the outside world. The engine never imports a database driver:
it only talks to something shaped like :class:`DataAccess`, which in turn
talks to something shaped like :class:`Connection`.

Manifesto:
    Protocols define contracts without inheritance. They enable:
    - **Decoupling:** The row engine depends on shape, not implementation
    - **Testability:** A recording fake satisfies DataAccess in unit tests
    - **Portability:** Same mapper code on sqlite3 and SQLAlchemy sessions

Architecture:
    ::

        protocols.py (YOU ARE HERE)
        ├── Connection   : sync DB protocol (sqlite3, SQLAlchemy bridge)
        ├── Filter       : statement-modification callback
        └── DataAccess   : data-access boundary used by Result / Repository

    Consumers:
        mapper/result.py, mapper/repository.py, core/database.py

Guardrails:
    ❌ DON'T: Duplicate these protocols in other modules
    ✅ DO: Import from rowbind.core.protocols

    ❌ DON'T: Add async methods to Connection
    ✅ DO: Keep the row engine synchronous

Tags:
    protocol, connection, data-access, contracts, rowbind

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rowbind.core.statement import Select


# ---------------------------------------------------------------------------
# Database Connection Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Connection(Protocol):
    """
    Minimal SYNCHRONOUS connection interface for database operations.

    Architecture:
        ::

            Connection Protocol:
            ┌────────────────────────────────────────────────────────┐
            │ execute(sql, params)   → cursor-like object            │
            │ executemany(sql, list) → cursor-like object            │
            │ fetchone()             → Get one result row            │
            │ fetchall()             → Get all result rows           │
            │ commit()               → Commit transaction            │
            │ rollback()             → Rollback transaction          │
            └────────────────────────────────────────────────────────┘

            Implementations:
            ┌────────────────────────────────────────────────────────┐
            │ sqlite3.Connection       (native)                      │
            │ SqliteConnection         (rowbind.core.sqlite_conn)    │
            │ SAConnectionBridge       (rowbind.core.bridge)         │
            └────────────────────────────────────────────────────────┘

    The object returned by ``execute`` must expose ``fetchall()`` and,
    for non-mapping rows, a DB-API 2.0 ``description``.
    """

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute SQL statement with optional parameters. SYNC."""
        ...

    def executemany(self, sql: str, params: list[tuple]) -> Any:
        """Execute SQL statement for multiple parameter sets. SYNC."""
        ...

    def commit(self) -> None:
        """Commit current transaction. SYNC."""
        ...

    def rollback(self) -> None:
        """Rollback current transaction. SYNC."""
        ...


class Filter(Protocol):
    """Statement-modification callback.

    Receives the base ``Select`` (already restricted to the batch of ids
    being resolved) plus any bound filter arguments, and mutates it in
    place (``where``, ``order_by``, ``limit``...). The return value is
    ignored.
    """

    def __call__(self, statement: Select, *args: Any) -> Any: ...


# ---------------------------------------------------------------------------
# Data-access boundary
# ---------------------------------------------------------------------------


@runtime_checkable
class DataAccess(Protocol):
    """
    Data-access boundary consumed by the row tracking engine.

    Architecture:
        ::

            DataAccess Protocol:
            ┌──────────────────────────────────────────────────────────┐
            │ select(table)                  → Select (mutable)        │
            │ fetch_all(statement)           → list[dict]              │
            │ fetch_in(table, column, vals)  → list[dict]              │
            │ insert(table, values)          → new row id              │
            │ update(table, values, row_id)  → affected rows           │
            │ delete(table, row_id)          → affected rows           │
            └──────────────────────────────────────────────────────────┘

    ``rowbind.core.database.Database`` is the production implementation.
    """

    def select(self, table: str) -> Select:
        """Return a fresh ``SELECT * FROM table`` statement."""
        ...

    def fetch_all(self, statement: Select) -> list[dict[str, Any]]:
        """Execute a select statement and return rows as dicts."""
        ...

    def fetch_in(self, table: str, column: str, values: Iterable[Any]) -> list[dict[str, Any]]:
        """Return all rows of ``table`` whose ``column`` is in ``values``."""
        ...

    def insert(self, table: str, values: Mapping[str, Any]) -> Any:
        """Insert one row and return its identifier."""
        ...

    def update(self, table: str, values: Mapping[str, Any], row_id: Any) -> int:
        """Update the row with the given id and return the affected row count."""
        ...

    def delete(self, table: str, row_id: Any) -> int:
        """Delete the row with the given id and return the affected row count."""
        ...


__all__ = [
    "Connection",
    "Filter",
    "DataAccess",
]
