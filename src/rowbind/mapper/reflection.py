"""Schema registry: declared entity fields and their resolved properties.

Entities declare their fields explicitly at class level::

    class Book(Entity):
        id = Field(int)
        title = Field(str)
        pubdate = Field(str, nullable=True)
        author = Field("Author", relationship=HasOne("author_id", "author"))
        tags = Field("Tag", relationship=HasMany("book_id", "book_tag", "tag_id", "tag"))

The first time an entity type is used, its declarations (including those
inherited from base entities) are collected into an immutable
:class:`EntityReflection`.  Reflections are built once per type under a
single registry lock and never change afterwards.

Architecture:
    ::

        Field (class attribute, descriptor)
          │  __set_name__ → name
          ▼
        EntityReflection(cls)        MRO walk, bases first
          └── name → Property        frozen

        _reflections: type → EntityReflection     (get_reflection)
        _entities:    name → entity type          (register_entity /
                                                   resolve_entity_class)

Tags:
    reflection, schema-registry, entity, descriptor, rowbind
"""

from __future__ import annotations

import builtins
import threading
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from rowbind.core.errors import InvalidArgumentError, NotFoundError
from rowbind.mapper.relationship import BelongsToMany, BelongsToOne, HasMany, HasOne

BASIC_TYPES: tuple[type, ...] = (int, float, str, bool)

_RELATIONSHIP_TYPES = (HasOne, HasMany, BelongsToOne, BelongsToMany)
_COLLECTION_RELATIONSHIPS = (HasMany, BelongsToMany)


@dataclass(frozen=True)
class Property:
    """Resolved, immutable view of one declared entity field."""

    name: str
    type: type | str
    column: str
    nullable: bool = False
    read_only: bool = False
    relationship: Any = None
    collection: bool = False
    filters: tuple[Callable[..., Any], ...] = ()

    @property
    def is_basic_type(self) -> bool:
        return self.type in BASIC_TYPES

    @property
    def is_writable(self) -> bool:
        return not self.read_only

    @property
    def has_relationship(self) -> bool:
        return self.relationship is not None

    def resolve_type(self) -> type:
        """The declared type, looking entity names up in the registry."""
        if isinstance(self.type, str):
            return resolve_entity_class(self.type)
        return self.type


class Field:
    """Class-level field declaration.

    Parameters:
        type: ``int``, ``float``, ``str``, ``bool``, any class, or the name
            of a registered entity class.
        column: Column holding the value.  Defaults to the attribute name,
            or to the referencing column for ``HasOne`` relationships.
        nullable: Whether ``None`` is an acceptable value.
        read_only: Reject writes through the entity.
        relationship: A ``HasOne``, ``HasMany``, ``BelongsToOne`` or
            ``BelongsToMany`` descriptor.
        collection: The value is a list of ``type``.  Implied by ``HasMany``
            and ``BelongsToMany``.
        filters: Callables ``(statement, *args)`` applied to the batch
            select whenever the relationship is loaded.
    """

    def __init__(
        self,
        type: type | str,
        *,
        column: str | None = None,
        nullable: bool = False,
        read_only: bool = False,
        relationship: Any = None,
        collection: bool = False,
        filters: tuple[Callable[..., Any], ...] | list[Callable[..., Any]] = (),
    ) -> None:
        if not isinstance(type, (str, builtins.type)):
            raise InvalidArgumentError(f"Field type must be a class or an entity name, got {type!r}.")
        if relationship is not None:
            if not isinstance(relationship, _RELATIONSHIP_TYPES):
                raise InvalidArgumentError(
                    f"Unsupported relationship {relationship!r}."
                )
            expected = isinstance(relationship, _COLLECTION_RELATIONSHIPS)
            if collection and not expected:
                raise InvalidArgumentError(
                    f"{relationship.__class__.__name__} relationships hold a single entity."
                )
            collection = expected
        elif filters:
            raise InvalidArgumentError("Filters only apply to relationship fields.")
        self.type = type
        self.column = column
        self.nullable = nullable
        self.read_only = read_only
        self.relationship = relationship
        self.collection = collection
        self.filters = tuple(filters)
        self.name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.get(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance.set(self.name, value)

    def to_property(self) -> Property:
        if self.name is None:
            raise InvalidArgumentError("Field is not bound to an entity attribute.")
        column = self.column
        if column is None:
            if isinstance(self.relationship, HasOne):
                column = self.relationship.column_referencing_target_table
            else:
                column = self.name
        return Property(
            name=self.name,
            type=self.type,
            column=column,
            nullable=self.nullable,
            read_only=self.read_only,
            relationship=self.relationship,
            collection=self.collection,
            filters=self.filters,
        )

    def __repr__(self) -> str:
        return f"Field({self.type!r}, name={self.name!r})"


class EntityReflection(Mapping[str, Property]):
    """Name → :class:`Property` for one entity type, inherited fields included."""

    def __init__(self, entity_class: type) -> None:
        self.entity_class = entity_class
        properties: dict[str, Property] = {}
        for klass in reversed(entity_class.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, Field):
                    properties[name] = value.to_property()
        self._properties = MappingProxyType(properties)

    def get_property(self, name: str) -> Property | None:
        return self._properties.get(name)

    def __getitem__(self, name: str) -> Property:
        return self._properties[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"EntityReflection({self.entity_class.__name__}, properties={list(self._properties)})"


# ── Registry ─────────────────────────────────────────────────────────────

_reflections: dict[type, EntityReflection] = {}
_entities: dict[str, type] = {}
_registry_lock = threading.Lock()


def get_reflection(entity_class: type) -> EntityReflection:
    """Return the reflection of ``entity_class``, building it on first use."""
    reflection = _reflections.get(entity_class)
    if reflection is not None:
        return reflection
    with _registry_lock:
        if entity_class not in _reflections:
            _reflections[entity_class] = EntityReflection(entity_class)
        return _reflections[entity_class]


def register_entity(entity_class: type, name: str | None = None) -> None:
    """Make ``entity_class`` resolvable by name (its class name by default)."""
    with _registry_lock:
        _entities[name or entity_class.__name__] = entity_class


def resolve_entity_class(name: str) -> type:
    """Look up a registered entity type by name.

    Raises:
        NotFoundError: No entity registered under ``name``.
    """
    try:
        return _entities[name]
    except KeyError:
        raise NotFoundError(f"Unknown entity class '{name}'.") from None


__all__ = [
    "BASIC_TYPES",
    "Property",
    "Field",
    "EntityReflection",
    "get_reflection",
    "register_entity",
    "resolve_entity_class",
]
