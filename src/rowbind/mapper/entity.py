"""Entity base class: typed, declared fields over a Row handle.

An :class:`Entity` wraps one :class:`~rowbind.mapper.row.Row`.  Field
values are read from and written to that row, coerced to the declared
types; relationship fields resolve through the row's store so that
sibling entities loaded together share one batch query per relationship.

Manifesto:
    Field access must be explicit and predictable:

    - **Declared:** only names declared with ``Field`` (or real Python
      attributes) exist; anything else is a ``MemberAccessError``
    - **Typed:** ``int``, ``float``, ``str`` and ``bool`` values are
      coerced, other types are checked
    - **Relationship-aware:** relationship fields return entities, and
      assigning a to-one relationship rewrites the foreign key

Architecture:
    ::

        book.author
          │
          ▼
        Field.__get__ → Entity.get("author")
          │  get_reflection(Book)["author"] → Property(relationship=HasOne)
          ▼
        _RELATIONSHIP_READERS[HasOne](entity, property, filter)
          │
          ▼
        row.resolve_to_one(...) → Row → Author(row)

Examples:
    >>> class Author(Entity):
    ...     id = Field(int)
    ...     name = Field(str)
    >>> author = Author()
    >>> author.name = "Ann"
    >>> author.modified_data()
    {'name': 'Ann'}

Tags:
    entity, active-record, typed-fields, relationships, rowbind

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from rowbind.core.errors import (
    InvalidMethodCallError,
    InvalidValueError,
    MemberAccessError,
)
from rowbind.core.protocols import DataAccess, Filter
from rowbind.mapper.reflection import Property, get_reflection, register_entity
from rowbind.mapper.relationship import BelongsToMany, BelongsToOne, HasMany, HasOne
from rowbind.mapper.result import Result
from rowbind.mapper.row import Row


class Entity:
    """Base class for domain entities.

    Subclasses are registered by class name when they are defined, so
    relationship fields can name their target type as a string.
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        register_entity(cls)

    def __init__(self, row: Row | None = None) -> None:
        object.__setattr__(self, "_row", row if row is not None else Result.detached().get())

    @property
    def row(self) -> Row:
        return self._row

    # -- Field access ------------------------------------------------------

    def get(self, name: str, *filter_args: Any) -> Any:
        """Value of field ``name``; ``filter_args`` are passed to its filters."""
        prop = self._property(name)
        if prop.has_relationship:
            reader = _RELATIONSHIP_READERS[type(prop.relationship)]
            return reader(self, prop, _compose_filters(prop, filter_args))

        value = self._row.read(prop.column)
        if value is None:
            if not prop.nullable:
                raise InvalidValueError(f"Property '{name}' cannot be null.")
            return None
        if prop.collection:
            if not isinstance(value, list):
                raise InvalidValueError(
                    f"Property '{name}' is expected to contain a list of '{_type_name(prop)}' instances."
                )
        elif prop.is_basic_type:
            return _coerce(prop, value)
        elif not isinstance(value, prop.resolve_type()):
            raise InvalidValueError(
                f"Property '{name}' is expected to contain an instance of '{_type_name(prop)}', "
                f"instance of '{type(value).__name__}' given."
            )
        return value

    def set(self, name: str, value: Any) -> None:
        """Validate, coerce and write ``value`` to field ``name``."""
        prop = self._property(name)
        if not prop.is_writable:
            raise MemberAccessError(f"Cannot write to read only property '{name}'.")
        if prop.has_relationship:
            self._set_relationship(prop, value)
            return
        if value is None:
            if not prop.nullable:
                raise InvalidValueError(f"Property '{name}' cannot be null.")
        elif prop.collection:
            if not isinstance(value, list):
                raise InvalidValueError(
                    f"Unexpected value type: list of '{_type_name(prop)}' expected, "
                    f"{type(value).__name__} given."
                )
        elif prop.is_basic_type:
            value = _coerce(prop, value)
        elif not isinstance(value, prop.resolve_type()):
            raise InvalidValueError(
                f"Unexpected value type: '{_type_name(prop)}' expected, {type(value).__name__} given."
            )
        self._row.write(prop.column, value)

    def assign(self, values: Mapping[str, Any], whitelist: Iterable[str] | None = None) -> None:
        """Set several fields at once, optionally restricted to ``whitelist``."""
        allowed = set(whitelist) if whitelist is not None else None
        for name, value in values.items():
            if allowed is None or name in allowed:
                setattr(self, name, value)

    def _set_relationship(self, prop: Property, value: Any) -> None:
        if value is not None and not isinstance(value, Entity):
            raise InvalidValueError(
                "Only entities can be assigned to fields with relationships."
            )
        relationship = prop.relationship
        if not isinstance(relationship, HasOne):
            raise InvalidMethodCallError(
                f"Only fields with a HasOne relationship can be assigned ('{prop.name}')."
            )
        column = relationship.column_referencing_target_table
        if value is None:
            if not prop.nullable:
                raise InvalidValueError(f"Property '{prop.name}' cannot be null.")
            self._row.write(column, None)
        else:
            if value.is_detached():
                raise InvalidValueError(
                    "Detached entity must be stored in database before use in relationships."
                )
            self._row.write(column, value.row.read("id"))
        self._row.invalidate_relationship_cache(relationship.target_table, column)

    def _property(self, name: str) -> Property:
        prop = get_reflection(type(self)).get_property(name)
        if prop is None:
            raise MemberAccessError(f"Undefined property: {name}")
        return prop

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        raise MemberAccessError(f"Undefined property: {name}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            object.__setattr__(self, name, value)
            return
        raise MemberAccessError(f"Undefined property: {name}")

    # -- State -------------------------------------------------------------

    def is_modified(self) -> bool:
        return self._row.is_modified()

    def is_detached(self) -> bool:
        return self._row.is_detached()

    def detach(self) -> None:
        self._row.detach()

    def modified_data(self) -> dict[str, Any]:
        return self._row.modified_snapshot()

    def mark_as_updated(self) -> None:
        self._row.mark_clean()

    def mark_as_created(self, id: Any, table: str, data_access: DataAccess) -> None:
        self._row.commit_create(id, table, data_access)

    def __repr__(self) -> str:
        row_id = self._row.read("id") if "id" in self._row else None
        return f"{type(self).__name__}(id={row_id!r})"


# ── Relationship readers ─────────────────────────────────────────────────


def _read_has_one(entity: Entity, prop: Property, filter: Filter | None) -> Any:
    row = entity.row.resolve_to_one(prop.relationship, filter)
    if row is None:
        if not prop.nullable:
            raise InvalidValueError(f"Property '{prop.name}' cannot be null.")
        return None
    return prop.resolve_type()(row)


def _read_has_many(entity: Entity, prop: Property, filter: Filter | None) -> list[Any]:
    target = prop.resolve_type()
    return [target(row) for row in entity.row.resolve_many_to_many(prop.relationship, filter)]


def _read_belongs_to_one(entity: Entity, prop: Property, filter: Filter | None) -> Any:
    rows = entity.row.resolve_to_many(prop.relationship, filter)
    if not rows:
        if not prop.nullable:
            raise InvalidValueError(f"Property '{prop.name}' cannot be null.")
        return None
    return prop.resolve_type()(rows[0])


def _read_belongs_to_many(entity: Entity, prop: Property, filter: Filter | None) -> list[Any]:
    target = prop.resolve_type()
    return [target(row) for row in entity.row.resolve_to_many(prop.relationship, filter)]


_RELATIONSHIP_READERS: dict[type, Callable[[Entity, Property, Filter | None], Any]] = {
    HasOne: _read_has_one,
    HasMany: _read_has_many,
    BelongsToOne: _read_belongs_to_one,
    BelongsToMany: _read_belongs_to_many,
}


# ── Helpers ──────────────────────────────────────────────────────────────


def _compose_filters(prop: Property, args: tuple[Any, ...]) -> Filter | None:
    if not prop.filters:
        return None

    def apply(statement: Any) -> None:
        for callback in prop.filters:
            callback(statement, *args)

    return apply


def _coerce(prop: Property, value: Any) -> Any:
    target = prop.type
    if isinstance(value, target) and not (target is int and isinstance(value, bool)):
        return value
    if target is bool:
        if isinstance(value, str):
            return value not in ("", "0")
        return bool(value)
    try:
        return target(value)
    except (TypeError, ValueError) as e:
        raise InvalidValueError(
            f"Cannot convert value {value!r} to {target.__name__}.", cause=e
        ) from e


def _type_name(prop: Property) -> str:
    return prop.type if isinstance(prop.type, str) else prop.type.__name__


__all__ = [
    "Entity",
]
