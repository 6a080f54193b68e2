"""Repository base class: persistence of entities through a DataAccess.

Manifesto:
    Entities track what changed; repositories decide what SQL that means.
    A repository never inspects entity fields directly.  It asks the
    entity for its modified snapshot and turns that into exactly one
    INSERT or UPDATE.

    - **Detached → INSERT:** the new id is adopted by the entity in place
    - **Attached → UPDATE:** only the modified columns are written
    - **Unmodified → nothing:** no statement is issued

Architecture:
    ::

        class BookRepository(Repository):      table "book", entity "Book"
            ...

        persist(entity)
          ├── not modified        → None
          ├── detached            → data_access.insert → entity.mark_as_created
          └── attached            → data_access.update → entity.mark_as_updated

        create_entities(rows)     → one shared Result, {id: Entity}

Examples:
    >>> class AuthorRepository(Repository):
    ...     pass
    >>> repo = AuthorRepository(db)
    >>> author = Author()
    >>> author.name = "Ann"
    >>> repo.persist(author)
    1

Tags:
    repository, persistence, insert, update, delete, rowbind

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from rowbind.core.errors import (
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from rowbind.core.logging import get_logger
from rowbind.core.protocols import DataAccess
from rowbind.mapper.entity import Entity
from rowbind.mapper.reflection import resolve_entity_class
from rowbind.mapper.result import Result

logger = get_logger(__name__)

_NAME_PATTERN = re.compile(r"([a-z0-9]+)repository$", re.IGNORECASE)


class Repository:
    """Base class for entity repositories.

    Set ``table`` and ``entity_class`` on the subclass, or name it
    ``<Entity>Repository`` to have both derived from the class name.
    ``entity_class`` may be a class or a registered entity name.
    """

    table: str | None = None
    entity_class: type[Entity] | str | None = None

    def __init__(self, data_access: DataAccess) -> None:
        self.data_access = data_access

    # -- Names -------------------------------------------------------------

    def get_table(self) -> str:
        if self.table is not None:
            return self.table
        match = _NAME_PATTERN.search(type(self).__name__)
        if match is None:
            raise InvalidStateError("Cannot determine table name.").with_context(
                repository=type(self).__name__
            )
        return match.group(1).lower()

    def get_entity_class(self) -> type[Entity]:
        entity_class = self.entity_class
        if entity_class is None:
            match = _NAME_PATTERN.search(type(self).__name__)
            if match is None:
                raise InvalidStateError("Cannot determine entity class name.").with_context(
                    repository=type(self).__name__
                )
            entity_class = match.group(1)
        if isinstance(entity_class, str):
            try:
                return resolve_entity_class(entity_class)
            except NotFoundError as e:
                raise InvalidStateError(
                    f"Cannot determine entity class: '{entity_class}' is not registered.",
                    cause=e,
                ) from e
        return entity_class

    # -- Persistence -------------------------------------------------------

    def persist(self, entity: Entity) -> Any:
        """Store the modified fields of ``entity``.

        Returns the new id for a detached entity, the affected row count
        for an attached one, and ``None`` when nothing was modified.
        """
        self._check_entity_type(entity)
        if not entity.is_modified():
            return None
        table = self.get_table()
        values = entity.modified_data()
        if entity.is_detached():
            inserted = self.data_access.insert(table, values)
            new_id = values["id"] if values.get("id") is not None else inserted
            entity.mark_as_created(new_id, table, self.data_access)
            logger.info("entity_created", table=table, id=new_id, columns=len(values))
            return new_id

        row_id = entity.row.read("id")
        affected = self.data_access.update(table, values, row_id)
        entity.mark_as_updated()
        logger.info("entity_updated", table=table, id=row_id, columns=len(values))
        return affected

    def delete(self, entity_or_id: Entity | Any) -> int:
        """Delete an entity (or the row with the given id).

        A deleted entity is left detached, with every field modified, so
        persisting it again re-inserts it.
        """
        table = self.get_table()
        entity = None
        if isinstance(entity_or_id, Entity):
            entity = entity_or_id
            self._check_entity_type(entity)
            if entity.is_detached():
                raise InvalidStateError("Cannot delete detached entity.").with_context(table=table)
            row_id = entity.row.read("id")
        else:
            row_id = entity_or_id
        affected = self.data_access.delete(table, row_id)
        if entity is not None:
            entity.detach()
        logger.info("entity_deleted", table=table, id=row_id)
        return affected

    # -- Loading -----------------------------------------------------------

    def create_entity(
        self,
        row: Mapping[str, Any],
        entity_class: type[Entity] | None = None,
        table: str | None = None,
    ) -> Entity:
        """Wrap one loaded row in an attached entity."""
        entity_class = entity_class or self.get_entity_class()
        result = Result.from_rows(row, table or self.get_table(), self.data_access)
        return entity_class(next(iter(result)))

    def create_entities(
        self,
        rows: Iterable[Mapping[str, Any]],
        entity_class: type[Entity] | None = None,
        table: str | None = None,
    ) -> dict[Any, Entity]:
        """Wrap loaded rows in entities sharing one :class:`Result`.

        Sharing the store is what lets relationship access on any of the
        entities batch-load for all of them.
        """
        entity_class = entity_class or self.get_entity_class()
        result = Result.from_rows(list(rows), table or self.get_table(), self.data_access)
        return {row.id: entity_class(row) for row in result}

    def find(self, row_id: Any) -> Entity:
        """Load the entity with ``id = row_id``.

        Raises:
            NotFoundError: No such row.
        """
        table = self.get_table()
        rows = self.data_access.fetch_all(self.data_access.select(table).where_in("id", [row_id]))
        if not rows:
            raise NotFoundError(f"Entity with ID {row_id} was not found.").with_context(
                table=table, row_id=row_id
            )
        return self.create_entity(rows[0])

    def find_all(self) -> list[Entity]:
        """Load every row of the table, in fetch order."""
        rows = self.data_access.fetch_all(self.data_access.select(self.get_table()))
        return list(self.create_entities(rows).values())

    # -- Internals ---------------------------------------------------------

    def _check_entity_type(self, entity: Entity) -> None:
        entity_class = self.get_entity_class()
        if not isinstance(entity, entity_class):
            raise InvalidArgumentError(
                f"Repository {type(self).__name__} cannot handle {type(entity).__name__} entity."
            )


__all__ = [
    "Repository",
]
