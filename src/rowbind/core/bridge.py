"""SQLAlchemy engine factory and Connection bridge.

Manifesto:
    The row engine only needs the ``Connection`` protocol.  Applications
    that already own a SQLAlchemy ``Session`` (or want SQLAlchemy's
    drivers for PostgreSQL / MySQL) should be able to hand that session to
    ``Database`` without a second connection.  ``SAConnectionBridge`` wraps
    a SA Session to satisfy ``rowbind.core.protocols.Connection``.

This module provides:

* ``create_engine``        -- Create a SA engine from a URL.
* ``SAConnectionBridge``   -- Wraps a SA ``Session``: ``?`` markers are
  rewritten to named ``:pN`` binds, results expose ``fetchall``,
  ``description``, ``lastrowid`` and ``rowcount``.

Tags:
    sqlalchemy, session, engine, bridge, connection, rowbind

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session


def create_engine(url: str = "sqlite://", *, echo: bool = False, **kwargs: Any) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql://…``, etc.)
    echo:
        If ``True``, SQLAlchemy logs all SQL.
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """
    engine = _sa_create_engine(url, echo=echo, **kwargs)

    if url.startswith("sqlite"):
        # SQLite ships with foreign keys off
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class SAConnectionBridge:
    """Adapter that makes a SQLAlchemy ``Session`` look like ``rowbind.core.protocols.Connection``.

    Implements: ``execute``, ``executemany``, ``fetchone``, ``fetchall``,
    ``commit``, ``rollback``.  ``execute`` returns the bridge itself, which
    doubles as the cursor.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._last_result: Any = None

    # --- execute / executemany ---

    def execute(self, sql: str, parameters: Sequence[Any] | None = None) -> SAConnectionBridge:
        if parameters:
            # SA text() needs named params: rewrite ? → :p0, :p1, ...
            rewritten, idx = [], 0
            for ch in sql:
                if ch == "?":
                    rewritten.append(f":p{idx}")
                    idx += 1
                else:
                    rewritten.append(ch)
            mapping = {f"p{i}": v for i, v in enumerate(parameters)}
            self._last_result = self._session.execute(text("".join(rewritten)), mapping)
        else:
            self._last_result = self._session.execute(text(sql))
        return self

    def executemany(self, sql: str, seq_of_parameters: Sequence[Sequence[Any]]) -> SAConnectionBridge:
        for params in seq_of_parameters:
            self.execute(sql, params)
        return self

    # --- fetch ---

    def fetchone(self) -> tuple[Any, ...] | None:
        if self._last_result is None or not self._last_result.returns_rows:
            return None
        row = self._last_result.fetchone()
        return tuple(row) if row is not None else None

    def fetchall(self) -> list[tuple[Any, ...]]:
        if self._last_result is None or not self._last_result.returns_rows:
            return []
        return [tuple(r) for r in self._last_result.fetchall()]

    # --- transaction ---

    def commit(self) -> None:
        self._session.commit()

    def rollback(self) -> None:
        self._session.rollback()

    def close(self) -> None:
        self._session.close()

    # --- properties ---

    @property
    def description(self) -> list[tuple[Any, ...]] | None:
        """DB-API 2.0 compatible description from the last result."""
        if self._last_result is None or not self._last_result.returns_rows:
            return None
        keys = list(self._last_result.keys())
        return [(k, None, None, None, None, None, None) for k in keys]

    @property
    def lastrowid(self) -> Any:
        if self._last_result is None:
            return None
        return getattr(self._last_result, "lastrowid", None)

    @property
    def rowcount(self) -> int:
        if self._last_result is None:
            return -1
        return self._last_result.rowcount

    @property
    def session(self) -> Session:
        """Access the underlying SA session (e.g., for ORM queries)."""
        return self._session


__all__ = [
    "create_engine",
    "SAConnectionBridge",
]
