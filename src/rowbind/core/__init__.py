"""rowbind.core -- data-access boundary and cross-cutting concerns.

Architecture::

    Layer 1 -- Contracts & Errors
        protocols.py     Connection, Filter, DataAccess
        errors.py        RowbindError hierarchy (NotFound, InvalidState, ...)

    Layer 2 -- SQL
        dialect.py       SQLite / PostgreSQL / MySQL / Oracle dialects
        statement.py     Fluent, mutable Select builder
        hashing.py       Statement fingerprints for cache keys

    Layer 3 -- Database access
        sqlite_conn.py   sqlite3 adapter
        bridge.py        SQLAlchemy engine factory + session bridge
        database.py      Database (DataAccess implementation)
        connection.py    create_connection / connect from URLs

    Layer 4 -- Cross-Cutting Concerns
        logging.py       structlog configuration
        settings.py      RowbindSettings (pydantic-settings)
"""

from rowbind.core.connection import ConnectionInfo, connect, create_connection
from rowbind.core.database import Database
from rowbind.core.dialect import (
    Dialect,
    MySQLDialect,
    OracleDialect,
    PostgreSQLDialect,
    SQLiteDialect,
    get_dialect,
)
from rowbind.core.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    InvalidArgumentError,
    InvalidMethodCallError,
    InvalidStateError,
    InvalidValueError,
    MemberAccessError,
    MultiplicityError,
    NotFoundError,
    QueryError,
    RowbindError,
)
from rowbind.core.protocols import Connection, DataAccess, Filter
from rowbind.core.statement import Select

__all__ = [
    # protocols
    "Connection",
    "DataAccess",
    "Filter",
    # errors
    "ErrorCategory",
    "ErrorContext",
    "RowbindError",
    "NotFoundError",
    "InvalidStateError",
    "MultiplicityError",
    "InvalidArgumentError",
    "InvalidValueError",
    "MemberAccessError",
    "InvalidMethodCallError",
    "ConfigError",
    "DatabaseError",
    "QueryError",
    "DatabaseConnectionError",
    # sql
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "MySQLDialect",
    "OracleDialect",
    "get_dialect",
    "Select",
    # database
    "Database",
    "ConnectionInfo",
    "create_connection",
    "connect",
]
