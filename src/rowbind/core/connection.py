"""Connection factory: create database connections from URL strings.

This is the **single entry point** for turning a configured database URL
into something the row engine can use.  ``create_connection()`` returns a
raw :class:`~rowbind.core.protocols.Connection`; ``connect()`` goes one
step further and returns a ready :class:`~rowbind.core.database.Database`
with the matching dialect.

Supported URL schemes
---------------------
==================  ==========================================  ============
Scheme              Example                                     Backend
==================  ==========================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``       SQLite RAM
``sqlite``          ``sqlite:///path/to/library.db``             SQLite file
``(file path)``     ``./data/library.db``                        SQLite file
``postgresql``      ``postgresql://user:pw@host:port/db``        PostgreSQL
``mysql``           ``mysql+pymysql://user:pw@host/db``          MySQL
``oracle``          ``oracle+oracledb://user:pw@host/db``        Oracle
==================  ==========================================  ============

SQLite goes through :class:`~rowbind.core.sqlite_conn.SqliteConnection`;
every other backend goes through SQLAlchemy and
:class:`~rowbind.core.bridge.SAConnectionBridge`.

Usage
-----
::

    from rowbind.core.connection import connect, create_connection

    conn, info = create_connection("sqlite:///library.db")
    print(info)
    # ConnectionInfo(backend='sqlite', persistent=True, path='/abs/library.db')

    db = connect("memory")
    db.insert("author", {"name": "Ann"})
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy.orm import Session

from rowbind.core.bridge import SAConnectionBridge, create_engine
from rowbind.core.database import Database
from rowbind.core.dialect import get_dialect
from rowbind.core.errors import ConfigError, DatabaseConnectionError
from rowbind.core.logging import get_logger
from rowbind.core.sqlite_conn import SqliteConnection

logger = get_logger(__name__)


# ── ConnectionInfo ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about a database connection."""

    backend: str
    """Backend identifier: ``"sqlite"``, ``"postgresql"``, etc."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """The original URL or path used to create the connection."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""

    def __repr__(self) -> str:
        parts = [f"backend={self.backend!r}", f"persistent={self.persistent}"]
        if self.resolved_path:
            parts.append(f"path={self.resolved_path!r}")
        else:
            parts.append(f"url={self.url!r}")
        return f"ConnectionInfo({', '.join(parts)})"

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"


# ── Backends ─────────────────────────────────────────────────────────────

_SA_BACKENDS = ("postgresql", "postgres", "mysql", "oracle")


def _create_sqlite_memory() -> tuple[Any, ConnectionInfo]:
    conn = SqliteConnection(":memory:")
    return conn, ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")


def _create_sqlite_file(path_str: str) -> tuple[Any, ConnectionInfo]:
    path = Path(path_str)
    path.parent.mkdir(parents=True, exist_ok=True)
    resolved = str(path.resolve())
    conn = SqliteConnection(resolved)
    info = ConnectionInfo(backend="sqlite", persistent=True, url=path_str, resolved_path=resolved)
    return conn, info


def _create_sqlalchemy(backend: str, url: str, echo: bool) -> tuple[Any, ConnectionInfo]:
    """Create a connection for a server database via the SQLAlchemy bridge."""
    try:
        engine = create_engine(url, echo=echo)
        session = Session(bind=engine)
        # Open eagerly so a bad URL fails here rather than on the first query
        session.connection()
    except Exception as e:
        raise DatabaseConnectionError(f"Cannot connect to {backend}: {e}", cause=e) from e
    return SAConnectionBridge(session), ConnectionInfo(backend=backend, persistent=True, url=url)


# ── URL parsing ──────────────────────────────────────────────────────────


def _parse_url(db: str | None) -> tuple[str, str]:
    """Parse a database URL into (scheme, target).

    ``scheme`` is one of ``"memory"``, ``"sqlite"``, ``"file"`` or a
    SQLAlchemy backend name (``"postgresql"``, ``"mysql"``, ``"oracle"``).

    Raises:
        ConfigError: For a URL scheme no backend handles.
    """
    if db is None or db in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    for prefix in ("sqlite:///", "sqlite://"):
        if db.startswith(prefix):
            path = db[len(prefix):]
            if not path or path == ":memory:":
                return "memory", ":memory:"
            return "sqlite", path

    if "://" in db:
        scheme = db.split("://", 1)[0].split("+", 1)[0].lower()
        if scheme in _SA_BACKENDS:
            return ("postgresql" if scheme == "postgres" else scheme), db
        raise ConfigError(
            f"Unsupported database URL scheme {scheme!r}. "
            f"Supported: memory, sqlite, {', '.join(_SA_BACKENDS)}"
        )

    # Bare file path, treated as a SQLite file
    return "file", db


# ── Main factory ─────────────────────────────────────────────────────────


def create_connection(
    db: str | None = None,
    *,
    data_dir: str | None = None,
    echo: bool = False,
) -> tuple[Any, ConnectionInfo]:
    """Create a database connection from a URL, path, or keyword.

    Parameters
    ----------
    db:
        ``None``/``"memory"`` for in-memory SQLite, a file path, a
        ``sqlite:///`` URL, or any SQLAlchemy URL for a supported server
        backend.
    data_dir:
        For SQLite paths, resolve relative paths within this directory.
    echo:
        Forwarded to SQLAlchemy for server backends.

    Returns
    -------
    tuple[Connection, ConnectionInfo]

    Raises
    ------
    ConfigError
        Unknown URL scheme.
    DatabaseConnectionError
        The server backend could not be reached.
    """
    scheme, target = _parse_url(db)

    if scheme == "memory":
        conn, info = _create_sqlite_memory()
    elif scheme in ("sqlite", "file"):
        if data_dir and not Path(target).is_absolute():
            target = str(Path(data_dir) / target)
        conn, info = _create_sqlite_file(target)
    else:
        conn, info = _create_sqlalchemy(scheme, target, echo)

    logger.debug("connection_created", backend=info.backend, persistent=info.persistent)
    return conn, info


def connect(
    db: str | None = None,
    *,
    autocommit: bool = True,
    echo: bool = False,
    data_dir: str | None = None,
) -> Database:
    """Create a :class:`Database` for ``db`` with the backend's dialect.

    SQLAlchemy-backed connections rewrite ``?`` markers themselves, so
    their dialect renders ``?`` placeholders while keeping the backend's
    quoting and row-limiting rules.
    """
    conn, info = create_connection(db, data_dir=data_dir, echo=echo)
    dialect = get_dialect(info.backend)
    if not info.is_sqlite:
        dialect = type(dialect)(qmark=True)
    return Database(conn, dialect, autocommit=autocommit, echo=echo)


__all__ = [
    "ConnectionInfo",
    "create_connection",
    "connect",
]
