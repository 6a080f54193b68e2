"""rowbind.mapper -- the row tracking engine and the entity layer on top of it.

Reading order::

    relationship.py   HasOne / BelongsToOne / BelongsToMany / HasMany
    row.py            Row: (Result, row id) handle
    result.py         Result: rows, modification state, relationship caches
    reflection.py     Field declarations and the entity schema registry
    entity.py         Entity base class
    repository.py     Repository base class (persist / delete / find)
"""

from rowbind.mapper.entity import Entity
from rowbind.mapper.reflection import (
    EntityReflection,
    Field,
    Property,
    get_reflection,
    register_entity,
    resolve_entity_class,
)
from rowbind.mapper.relationship import (
    BelongsTo,
    BelongsToMany,
    BelongsToOne,
    HasMany,
    HasOne,
    Relationship,
)
from rowbind.mapper.repository import Repository
from rowbind.mapper.result import CacheKey, Result
from rowbind.mapper.row import Row

__all__ = [
    "Result",
    "Row",
    "CacheKey",
    "HasOne",
    "BelongsTo",
    "BelongsToOne",
    "BelongsToMany",
    "HasMany",
    "Relationship",
    "Field",
    "Property",
    "EntityReflection",
    "get_reflection",
    "register_entity",
    "resolve_entity_class",
    "Entity",
    "Repository",
]
