"""
Structured error types for rowbind.

Provides a typed hierarchy of errors with metadata for categorization,
reporting, and root cause analysis through error chaining.

Every failure raised by the row tracking engine, the entity layer, the
repository layer and the data-access boundary is a RowbindError. Each
error carries:
- **Category:** What kind of error (not found, state, argument, database...)
- **Retryable:** Whether the operation can be retried automatically
- **Context:** Table, column, row id and relationship involved
- **Cause:** Chained underlying exception for root cause analysis

Manifesto:
    - **Typed Error Hierarchy:** One error type per failure kind
    - **Pythonic Bases:** NotFoundError is a LookupError, MemberAccessError
      is an AttributeError, so ``hasattr()`` and ``except KeyError``-style
      callers keep working
    - **Rich Context:** Errors carry the row coordinates they refer to
    - **Error Chaining:** Driver exceptions are preserved as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       RowbindError                              │
        │  (category, retryable, context, cause)                         │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                 │
        │  NotFoundError      InvalidStateError    InvalidArgumentError   │
        │  (NOT_FOUND)        (STATE)              (ARGUMENT)             │
        │                          │                                      │
        │                     MultiplicityError                           │
        │                                                                 │
        │  InvalidValueError  MemberAccessError    InvalidMethodCallError │
        │  (VALUE)            (ACCESS)             (ACCESS)               │
        │                                                                 │
        │  ConfigError        DatabaseError                               │
        │  (CONFIG)           (DATABASE)                                  │
        │                          │                                      │
        │                     QueryError  DatabaseConnectionError         │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = NotFoundError("Missing row with ID 7.").with_context(table="book", row_id=7)
    >>> error.context.row_id
    7
    >>> error.to_dict()["category"]
    'NOT_FOUND'

Guardrails:
    ❌ DON'T: Raise plain Exception from the mapper
    ✅ DO: Use the RowbindError subclass matching the failure kind

    ❌ DON'T: Swallow driver exceptions
    ✅ DO: Wrap them in QueryError with cause=

Tags:
    error-handling, exception-hierarchy, error-context, rowbind

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        NOT_FOUND: Referenced row or column does not exist
        STATE: Operation violates row lifecycle rules
        ARGUMENT: Malformed input to a public operation
        VALUE: Value does not fit the declared field type
        ACCESS: Undeclared or read-only member access
        DATABASE: Driver, query or connection failures
        CONFIG: Missing or invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    NOT_FOUND = "NOT_FOUND"
    STATE = "STATE"
    ARGUMENT = "ARGUMENT"
    VALUE = "VALUE"
    ACCESS = "ACCESS"
    DATABASE = "DATABASE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields for the row coordinates an error refers to. Anything else
    goes into ``metadata``. ``to_dict()`` serializes only the fields that
    are set.

    Examples:
        >>> ctx = ErrorContext(table="book", column="author_id")
        >>> ctx.to_dict()
        {'table': 'book', 'column': 'author_id'}

    Attributes:
        table: Table name of the row store involved
        column: Column being read or written
        row_id: Row identifier inside the store
        relationship: Relationship descriptor (repr) being resolved
        sql: Statement text for database errors
        metadata: Additional key-value pairs
    """

    table: str | None = None
    column: str | None = None
    row_id: Any = None
    relationship: str | None = None
    sql: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "column", "row_id", "relationship", "sql"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class RowbindError(Exception):
    """
    Base exception for all rowbind errors.

    Subclasses set ``default_category`` and ``default_retryable`` so raising
    sites only pass a message (and optionally context and cause).

    Examples:
        >>> error = RowbindError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

        Chaining a driver error:

        >>> try:
        ...     raise OSError("disk I/O error")
        ... except OSError as e:
        ...     error = QueryError("SELECT failed", cause=e)
        >>> error.cause
        OSError('disk I/O error')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RowbindError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("Missing row").with_context(table="book", row_id=3)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# ROW STORE ERRORS
# =============================================================================


class NotFoundError(RowbindError, LookupError):
    """Referenced row id or column does not exist in the store."""

    default_category = ErrorCategory.NOT_FOUND


class InvalidStateError(RowbindError):
    """
    Operation violates row lifecycle rules.

    Raised for writes to ``id`` on attached rows, writes introducing new
    columns on attached rows, detaching an already detached row,
    commit-create on a persisted row, and relationship resolution on a
    store without a bound data access.
    """

    default_category = ErrorCategory.STATE


class MultiplicityError(InvalidStateError):
    """A to-one-or-zero relationship matched more than one row."""


class InvalidArgumentError(RowbindError, ValueError):
    """Malformed input to a public operation."""

    default_category = ErrorCategory.ARGUMENT


# =============================================================================
# ENTITY ERRORS
# =============================================================================


class InvalidValueError(RowbindError, ValueError):
    """Value cannot be stored in (or read from) a declared entity field."""

    default_category = ErrorCategory.VALUE


class MemberAccessError(RowbindError, AttributeError):
    """Access to an undeclared or read-only entity member."""

    default_category = ErrorCategory.ACCESS


class InvalidMethodCallError(RowbindError):
    """Operation is not supported for the given field kind."""

    default_category = ErrorCategory.ACCESS


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(RowbindError):
    """Missing or invalid configuration."""

    default_category = ErrorCategory.CONFIG


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(RowbindError):
    """Database operation error."""

    default_category = ErrorCategory.DATABASE


class QueryError(DatabaseError):
    """Statement execution failed."""


class DatabaseConnectionError(DatabaseError):
    """Database connection could not be established."""

    default_retryable = True


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, RowbindError):
        return error.retryable
    return isinstance(error, (ConnectionError, BrokenPipeError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, RowbindError):
        return error.category
    if isinstance(error, LookupError):
        return ErrorCategory.NOT_FOUND
    if isinstance(error, ValueError):
        return ErrorCategory.ARGUMENT
    if isinstance(error, AttributeError):
        return ErrorCategory.ACCESS
    return ErrorCategory.UNKNOWN


__all__ = [
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
    "is_retryable",
    "categorize_error",
]
