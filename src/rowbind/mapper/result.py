"""Row store: tracked rows of one table projection plus relationship caches.

A :class:`Result` is the arena behind every :class:`~rowbind.mapper.row.Row`.
It owns the row data, knows which columns were changed since the last
persist, which rows are not persisted yet, and which related row stores
have already been loaded.

Manifesto:
    Resolving relationships row by row costs one query per row (N+1).
    A Result therefore always resolves a relationship for *all* of its
    rows at once: the first access to ``book.author`` for any book in the
    store loads the authors of every book in the store with a single
    ``IN`` query, and later accesses are served from the cache.

    - **Arena:** rows live here, handles are ``(store, id)`` pairs
    - **Batch loading:** one query per (table, column, filter) per store
    - **Consistent caches:** writing a join column drops stale entries
    - **No partial mutation:** validation always precedes mutation

Architecture:
    ::

        Result
        ├── rows          id → {column: value}
        ├── modified      id → {column, ...}
        ├── detached      {id, ...}
        ├── table / data_access
        ├── referenced    CacheKey → Result   (to-one, via source column)
        └── referencing   CacheKey → Result   (to-many, via target column)

        State per row id:

            ┌──────────┐  detach()       ┌──────────┐
            │ attached │ ──────────────► │ detached │
            │          │ ◄────────────── │          │
            └──────────┘  commit_create  └──────────┘

        Relationship access:

            referenced_row / referencing_rows
                 │
                 ├── CacheKey(table, column[, digest]) in cache? ─► hit
                 │
                 └── miss: Select ... WHERE table.col IN (<ids of all rows>)
                           → filter(statement) → fetch_all → Result → cache

Guardrails:
    ❌ DON'T: Share one Result graph between threads
    ✅ DO: Keep a Result graph per request / unit of work

    ❌ DON'T: Expect a deleted row's handles to keep working
    ✅ DO: Drop handles after ``Repository.delete``

Examples:
    >>> books = Result.from_rows(
    ...     [{"id": 1, "author_id": 10}, {"id": 2, "author_id": 10}], "book", db
    ... )
    >>> author = books.resolve_to_one(1, HasOne("author_id", "author"))
    >>> books.resolve_to_one(2, HasOne("author_id", "author")) == author
    True

Tags:
    result, row-store, tracking, relationships, cache, batch-loading, rowbind

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from rowbind.core.errors import (
    InvalidArgumentError,
    InvalidStateError,
    MultiplicityError,
    NotFoundError,
)
from rowbind.core.logging import get_logger
from rowbind.core.protocols import DataAccess, Filter
from rowbind.mapper.relationship import BelongsTo, BelongsToOne, HasMany, HasOne
from rowbind.mapper.row import Row

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheKey:
    """Relationship cache key.

    ``digest`` fingerprints the filter-modified statement; it is ``None``
    for unfiltered loads, so filtered and unfiltered loads never share an
    entry.
    """

    table: str
    column: str
    digest: str | None = None

    def __str__(self) -> str:
        base = f"{self.table}({self.column})"
        return f"{base}#{self.digest}" if self.digest else base


class Result:
    """Tracked rows of one table plus their relationship caches.

    Use :meth:`from_rows` for persisted rows and :meth:`detached` for a
    fresh, not yet persisted row.
    """

    def __init__(
        self,
        rows: dict[Any, dict[str, Any]],
        table: str | None = None,
        data_access: DataAccess | None = None,
    ) -> None:
        self._rows = rows
        self._modified: dict[Any, set[str]] = {}
        self._detached: set[Any] = set()
        self._table = table
        self._data_access = data_access
        self._referenced: dict[CacheKey, Result] = {}
        self._referencing: dict[CacheKey, Result] = {}

    # -- Construction ------------------------------------------------------

    @classmethod
    def from_rows(
        cls,
        data: Mapping[str, Any] | Iterable[Mapping[str, Any]],
        table: str | None,
        data_access: DataAccess | None,
    ) -> Result:
        """Create an attached store from one row or an iterable of rows.

        A single row is keyed by its ``id`` (``0`` when it has none).  In a
        list, rows without ``id`` get the next free integer key.

        Raises:
            InvalidArgumentError: ``data`` is not a mapping or an iterable
                of mappings.
        """
        rows: dict[Any, dict[str, Any]] = {}
        if isinstance(data, Mapping):
            row_id = data.get("id")
            rows[0 if row_id is None else row_id] = dict(data)
        elif isinstance(data, Iterable) and not isinstance(data, (str, bytes)):
            for record in data:
                if not isinstance(record, Mapping):
                    raise InvalidArgumentError(
                        f"Row data must be a mapping, got {type(record).__name__}."
                    ).with_context(table=table)
                row_id = record.get("id")
                if row_id is None:
                    row_id = cls._next_key(rows)
                rows[row_id] = dict(record)
        else:
            raise InvalidArgumentError(
                "Invalid row data: only a mapping or an iterable of mappings is supported, "
                f"got {type(data).__name__}."
            ).with_context(table=table)
        return cls(rows, table, data_access)

    @classmethod
    def detached(cls) -> Result:
        """Create a store with one empty, detached row under id ``0``."""
        result = cls({0: {}})
        result._detached.add(0)
        return result

    @staticmethod
    def _next_key(rows: Mapping[Any, Any]) -> int:
        int_keys = [k for k in rows if isinstance(k, int) and not isinstance(k, bool)]
        return max(int_keys) + 1 if int_keys else 0

    # -- Properties --------------------------------------------------------

    @property
    def table(self) -> str | None:
        return self._table

    @property
    def data_access(self) -> DataAccess | None:
        return self._data_access

    # -- Row access --------------------------------------------------------

    def get(self, row_id: Any = 0) -> Row | None:
        """Return a handle to ``row_id``, or ``None`` if the store lacks it."""
        if row_id not in self._rows:
            return None
        return Row(self, row_id)

    def read(self, row_id: Any, column: str) -> Any:
        try:
            return self._rows[row_id][column]
        except KeyError:
            raise NotFoundError(f"Missing '{column}' value for requested row.").with_context(
                table=self._table, column=column, row_id=row_id
            ) from None

    def write(self, row_id: Any, column: str, value: Any) -> None:
        """Set ``column`` of ``row_id`` and mark it modified.

        Cached relationships joined through ``column`` are dropped, and a
        write to ``id`` drops every cached referencing store.

        Raises:
            NotFoundError: No row ``row_id``.
            InvalidStateError: New column, or ``id``, on an attached row.
        """
        row = self._require_row(row_id)
        if row_id not in self._detached:
            if column not in row:
                raise InvalidStateError(f"Missing field '{column}' in row.").with_context(
                    table=self._table, column=column, row_id=row_id
                )
            if column == "id":
                raise InvalidStateError("ID can only be set in detached rows.").with_context(
                    table=self._table, column=column, row_id=row_id
                )
        row[column] = value
        self._modified.setdefault(row_id, set()).add(column)
        self._drop_dependent_caches(column)

    def has_column(self, row_id: Any, column: object) -> bool:
        row = self._rows.get(row_id)
        return row is not None and column in row

    def as_dict(self, row_id: Any) -> dict[str, Any]:
        return dict(self._require_row(row_id))

    # -- Tracking ----------------------------------------------------------

    def is_modified(self, row_id: Any) -> bool:
        return bool(self._modified.get(row_id))

    def is_detached(self, row_id: Any) -> bool:
        """True for detached rows and for ids the store does not hold."""
        return row_id not in self._rows or row_id in self._detached

    def detach(self, row_id: Any) -> None:
        """Mark an attached row detached; all of its columns become modified."""
        row = self._rows.get(row_id)
        if row is None:
            raise InvalidStateError(f"Cannot detach missing row with ID {row_id}.").with_context(
                table=self._table, row_id=row_id
            )
        if row_id in self._detached:
            raise InvalidStateError(f"Row with ID {row_id} is already detached.").with_context(
                table=self._table, row_id=row_id
            )
        self._detached.add(row_id)
        self._modified.setdefault(row_id, set()).update(row)

    def mark_clean(self, row_id: Any) -> None:
        self._modified.pop(row_id, None)

    def modified_snapshot(self, row_id: Any) -> dict[str, Any]:
        """Column → value for the modified columns of ``row_id``, in row order."""
        changed = self._modified.get(row_id)
        if not changed:
            return {}
        row = self._rows[row_id]
        return {column: value for column, value in row.items() if column in changed}

    def commit_create(
        self, new_id: Any, old_id: Any, table: str, data_access: DataAccess
    ) -> None:
        """Turn detached row ``old_id`` into the persisted row ``new_id``.

        The store is left holding exactly one clean, attached row made of
        ``id = new_id`` and the modified columns of ``old_id``.
        """
        if old_id not in self._rows:
            raise InvalidStateError(f"Missing detached row with ID {old_id}.").with_context(
                table=self._table, row_id=old_id
            )
        if old_id not in self._detached:
            raise InvalidStateError("Result is not in detached state.").with_context(
                table=self._table, row_id=old_id
            )
        data: dict[str, Any] = {"id": new_id}
        for column, value in self.modified_snapshot(old_id).items():
            if column != "id":
                data[column] = value
        self._rows = {new_id: data}
        for key in (new_id, old_id):
            self._modified.pop(key, None)
            self._detached.discard(key)
        self._table = table
        self._data_access = data_access
        self._referenced.clear()
        self._referencing.clear()

    # -- Relationship primitives -------------------------------------------

    def referenced_row(
        self,
        row_id: Any,
        table: str,
        filter: Filter | None = None,
        via_column: str | None = None,
    ) -> Row | None:
        """Row of ``table`` whose ``id`` equals ``row_id``'s ``via_column``.

        ``via_column`` defaults to ``<table>_id``.  The referenced rows of
        every row in this store are loaded together and cached.
        """
        data_access = self._require_data_access(
            "Cannot get referenced row for result without a data access instance."
        )
        via_column = via_column or f"{table}_id"
        value = self.read(row_id, via_column)
        referenced = self._load(
            self._referenced, data_access, table, via_column, "id", self._distinct(via_column), filter
        )
        if value is None:
            return None
        return referenced.get(value)

    def referencing_rows(
        self,
        row_id: Any,
        table: str,
        filter: Filter | None = None,
        via_column: str | None = None,
    ) -> list[Row]:
        """Rows of ``table`` whose ``via_column`` equals ``row_id``, in fetch order.

        ``via_column`` defaults to ``<this table>_id``.
        """
        if self._table is None:
            raise InvalidStateError("Cannot get referencing rows for detached result.")
        data_access = self._require_data_access("Cannot get referencing rows for detached result.")
        self._require_row(row_id)
        via_column = via_column or f"{self._table}_id"
        referencing = self._load(
            self._referencing, data_access, table, via_column, via_column, self._distinct("id"), filter
        )
        return [
            Row(referencing, key)
            for key, data in referencing._rows.items()
            if data.get(via_column) == row_id
        ]

    # -- Relationship resolution -------------------------------------------

    def resolve_to_one(
        self, row_id: Any, relationship: HasOne, filter: Filter | None = None
    ) -> Row | None:
        if not isinstance(relationship, HasOne):
            raise InvalidArgumentError(
                f"resolve_to_one expects HasOne, got {type(relationship).__name__}."
            )
        return self.referenced_row(
            row_id, relationship.target_table, filter, relationship.column_referencing_target_table
        )

    def resolve_to_many(
        self, row_id: Any, relationship: BelongsTo, filter: Filter | None = None
    ) -> list[Row]:
        """Rows referencing ``row_id``; at most one for :class:`BelongsToOne`.

        Raises:
            MultiplicityError: A ``BelongsToOne`` matched more than one row.
        """
        if not isinstance(relationship, BelongsTo):
            raise InvalidArgumentError(
                f"resolve_to_many expects BelongsTo, got {type(relationship).__name__}."
            )
        rows = self.referencing_rows(
            row_id, relationship.target_table, filter, relationship.column_referencing_source_table
        )
        if isinstance(relationship, BelongsToOne) and len(rows) > 1:
            raise MultiplicityError(
                f"There cannot be more than one entity referencing row {row_id} "
                f"in table '{relationship.target_table}'."
            ).with_context(
                table=relationship.target_table,
                column=relationship.column_referencing_source_table,
                row_id=row_id,
                relationship="BelongsToOne",
            )
        return rows

    def resolve_many_to_many(
        self, row_id: Any, relationship: HasMany, filter: Filter | None = None
    ) -> list[Row]:
        """Target rows linked to ``row_id`` through the relationship table.

        The filter applies to the target table only.  Join rows pointing at
        a missing target are skipped.
        """
        if not isinstance(relationship, HasMany):
            raise InvalidArgumentError(
                f"resolve_many_to_many expects HasMany, got {type(relationship).__name__}."
            )
        targets = []
        for join_row in self.referencing_rows(
            row_id, relationship.relationship_table, None, relationship.column_referencing_source_table
        ):
            target = join_row.referenced(
                relationship.target_table, filter, relationship.column_referencing_target_table
            )
            if target is not None:
                targets.append(target)
        return targets

    def invalidate_relationship_cache(
        self, table: str | None = None, column: str | None = None
    ) -> None:
        """Drop cached related stores matching ``table`` and/or ``column``.

        With neither given, both caches are cleared.
        """
        dropped = 0
        for cache in (self._referenced, self._referencing):
            if table is None and column is None:
                dropped += len(cache)
                cache.clear()
                continue
            stale = [
                key
                for key in cache
                if (table is None or key.table == table) and (column is None or key.column == column)
            ]
            for key in stale:
                del cache[key]
            dropped += len(stale)
        if dropped:
            logger.debug(
                "relationship_cache_invalidated", table=table, column=column, dropped=dropped
            )

    # -- Container protocol ------------------------------------------------

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._rows

    def __iter__(self) -> Iterator[Row]:
        for row_id in list(self._rows):
            yield Row(self, row_id)

    def ids(self) -> list[Any]:
        return list(self._rows)

    def to_dicts(self) -> list[dict[str, Any]]:
        return [dict(row) for row in self._rows.values()]

    def __repr__(self) -> str:
        return f"Result(table={self._table!r}, rows={len(self._rows)}, detached={len(self._detached)})"

    # -- Internals ---------------------------------------------------------

    def _require_row(self, row_id: Any) -> dict[str, Any]:
        try:
            return self._rows[row_id]
        except KeyError:
            raise NotFoundError(f"Missing row with ID {row_id}.").with_context(
                table=self._table, row_id=row_id
            ) from None

    def _require_data_access(self, message: str) -> DataAccess:
        if self._data_access is None:
            raise InvalidStateError(message).with_context(table=self._table)
        return self._data_access

    def _distinct(self, column: str) -> list[Any]:
        """Distinct non-null values of ``column`` over all rows, first-seen order."""
        values = (row.get(column) for row in self._rows.values())
        return list(dict.fromkeys(v for v in values if v is not None))

    def _load(
        self,
        cache: dict[CacheKey, Result],
        data_access: DataAccess,
        table: str,
        via_column: str,
        match_column: str,
        ids: list[Any],
        filter: Filter | None,
    ) -> Result:
        statement = data_access.select(table).where_in(match_column, ids)
        key = CacheKey(table, via_column)
        if filter is not None:
            filter(statement)
            key = CacheKey(table, via_column, statement.digest())

        cached = cache.get(key)
        if cached is not None:
            return cached

        logger.debug("relationship_cache_miss", key=str(key), source=self._table, ids=len(ids))
        rows = data_access.fetch_all(statement) if ids else []
        loaded = Result.from_rows(rows, table, data_access)
        cache[key] = loaded
        return loaded

    def _drop_dependent_caches(self, column: str) -> None:
        stale = [key for key in self._referenced if key.column == column]
        for key in stale:
            del self._referenced[key]
        dropped = len(stale)
        if column == "id" and self._referencing:
            dropped += len(self._referencing)
            self._referencing.clear()
        if dropped:
            logger.debug("relationship_cache_invalidated", column=column, dropped=dropped)


__all__ = [
    "CacheKey",
    "Result",
]
