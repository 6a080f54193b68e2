"""Relationship descriptors.

A descriptor is an immutable value naming the tables and columns that link
a source row to its related rows.  Descriptors carry no behaviour: the
resolver functions on :class:`~rowbind.mapper.result.Result` read them and
decide which batch query to issue.

Architecture::

    HasOne       source.<column_referencing_target_table> → target.id
    BelongsTo    target.<column_referencing_source_table> → source.id
      ├── BelongsToOne    (at most one match expected)
      └── BelongsToMany   (any number of matches)
    HasMany      source.id ← relationship_table.<column_referencing_source_table>
                 relationship_table.<column_referencing_target_table> → target.id

Example::

    book → author       HasOne("author_id", "author")
    author → books      BelongsToMany("author_id", "book")
    book → tags         HasMany("book_id", "book_tag", "tag_id", "tag")

Tags:
    relationship, descriptor, has-one, has-many, belongs-to, rowbind
"""

from __future__ import annotations

from dataclasses import dataclass, fields

from rowbind.core.errors import InvalidArgumentError


def _check_names(descriptor: object) -> None:
    for f in fields(descriptor):  # type: ignore[arg-type]
        value = getattr(descriptor, f.name)
        if not isinstance(value, str) or not value:
            raise InvalidArgumentError(
                f"{type(descriptor).__name__}.{f.name} must be a non-empty string, got {value!r}."
            ).with_context(relationship=type(descriptor).__name__)


@dataclass(frozen=True)
class HasOne:
    """The source row holds a column referencing one target row."""

    column_referencing_target_table: str
    target_table: str

    def __post_init__(self) -> None:
        _check_names(self)


@dataclass(frozen=True)
class BelongsTo:
    """Target rows hold a column referencing the source row.

    Use :class:`BelongsToOne` or :class:`BelongsToMany` to state the
    expected multiplicity.
    """

    column_referencing_source_table: str
    target_table: str

    def __post_init__(self) -> None:
        _check_names(self)


@dataclass(frozen=True)
class BelongsToOne(BelongsTo):
    """At most one target row references the source row."""


@dataclass(frozen=True)
class BelongsToMany(BelongsTo):
    """Any number of target rows reference the source row."""


@dataclass(frozen=True)
class HasMany:
    """Many-to-many link through a relationship (join) table."""

    column_referencing_source_table: str
    relationship_table: str
    column_referencing_target_table: str
    target_table: str

    def __post_init__(self) -> None:
        _check_names(self)


Relationship = HasOne | BelongsTo | HasMany


__all__ = [
    "HasOne",
    "BelongsTo",
    "BelongsToOne",
    "BelongsToMany",
    "HasMany",
    "Relationship",
]
