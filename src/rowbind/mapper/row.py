"""Row handle: a (Result, row id) reference.

A :class:`Row` owns no data.  Every read, write and relationship traversal
is forwarded to the :class:`~rowbind.mapper.result.Result` it points into,
so two handles to the same row id in the same store always observe the
same values.

Tags:
    row, handle, delegation, rowbind
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rowbind.core.protocols import DataAccess, Filter
    from rowbind.mapper.relationship import BelongsTo, HasMany, HasOne
    from rowbind.mapper.result import Result


class Row:
    """Handle to one row of a :class:`Result`.

    Equality is store identity plus row id, never field contents.  The id
    is re-pointed by :meth:`commit_create`, so do not keep handles of
    detached rows as dict keys across a commit.
    """

    __slots__ = ("_result", "_id")

    def __init__(self, result: Result, row_id: Any) -> None:
        self._result = result
        self._id = row_id

    @property
    def result(self) -> Result:
        return self._result

    @property
    def id(self) -> Any:
        """Key of the row inside its store (synthetic ``0`` for detached rows)."""
        return self._id

    # -- Fields ------------------------------------------------------------

    def read(self, column: str) -> Any:
        return self._result.read(self._id, column)

    def write(self, column: str, value: Any) -> None:
        self._result.write(self._id, column, value)

    def __getitem__(self, column: str) -> Any:
        return self.read(column)

    def __setitem__(self, column: str, value: Any) -> None:
        self.write(column, value)

    def __contains__(self, column: object) -> bool:
        return self._result.has_column(self._id, column)

    def to_dict(self) -> dict[str, Any]:
        return self._result.as_dict(self._id)

    # -- State -------------------------------------------------------------

    def is_modified(self) -> bool:
        return self._result.is_modified(self._id)

    def is_detached(self) -> bool:
        return self._result.is_detached(self._id)

    def detach(self) -> None:
        self._result.detach(self._id)

    def mark_clean(self) -> None:
        self._result.mark_clean(self._id)

    def modified_snapshot(self) -> dict[str, Any]:
        return self._result.modified_snapshot(self._id)

    def commit_create(self, new_id: Any, table: str, data_access: DataAccess) -> None:
        """Persist-transition the row and re-point this handle to ``new_id``."""
        self._result.commit_create(new_id, self._id, table, data_access)
        self._id = new_id

    # -- Relationships -----------------------------------------------------

    def referenced(
        self, table: str, filter: Filter | None = None, via_column: str | None = None
    ) -> Row | None:
        return self._result.referenced_row(self._id, table, filter, via_column)

    def referencing(
        self, table: str, filter: Filter | None = None, via_column: str | None = None
    ) -> list[Row]:
        return self._result.referencing_rows(self._id, table, filter, via_column)

    def resolve_to_one(self, relationship: HasOne, filter: Filter | None = None) -> Row | None:
        return self._result.resolve_to_one(self._id, relationship, filter)

    def resolve_to_many(self, relationship: BelongsTo, filter: Filter | None = None) -> list[Row]:
        return self._result.resolve_to_many(self._id, relationship, filter)

    def resolve_many_to_many(
        self, relationship: HasMany, filter: Filter | None = None
    ) -> list[Row]:
        return self._result.resolve_many_to_many(self._id, relationship, filter)

    def invalidate_relationship_cache(
        self, table: str | None = None, column: str | None = None
    ) -> None:
        self._result.invalidate_relationship_cache(table, column)

    # -- Identity ----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._result is other._result and self._id == other._id

    def __hash__(self) -> int:
        return hash((id(self._result), self._id))

    def __repr__(self) -> str:
        return f"Row(table={self._result.table!r}, id={self._id!r})"


__all__ = [
    "Row",
]
