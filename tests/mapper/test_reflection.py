"""Tests for Field declarations and the entity schema registry."""

import datetime

import pytest

from rowbind.core.errors import InvalidArgumentError, NotFoundError
from rowbind.mapper.entity import Entity
from rowbind.mapper.reflection import (
    EntityReflection,
    Field,
    Property,
    get_reflection,
    register_entity,
    resolve_entity_class,
)
from rowbind.mapper.relationship import BelongsToMany, BelongsToOne, HasMany, HasOne
from tests._support.library import Author, Book


class Stamped(Entity):
    id = Field(int, read_only=True)
    created = Field(datetime.date, nullable=True)


class Ticket(Stamped):
    subject = Field(str)
    owner = Field("Author", relationship=HasOne("owner_id", "author"))


class TestField:
    def test_rejects_non_type(self):
        with pytest.raises(InvalidArgumentError):
            Field(42)

    def test_rejects_unknown_relationship(self):
        with pytest.raises(InvalidArgumentError, match="Unsupported relationship"):
            Field("Author", relationship=("author_id", "author"))

    def test_collection_implied_by_to_many(self):
        assert Field("Book", relationship=BelongsToMany("author_id", "book")).collection
        assert Field("Tag", relationship=HasMany("book_id", "book_tag", "tag_id", "tag")).collection
        assert not Field("Book", relationship=BelongsToOne("author_id", "book")).collection

    def test_collection_with_single_relationship(self):
        with pytest.raises(InvalidArgumentError, match="single entity"):
            Field("Author", relationship=HasOne("author_id", "author"), collection=True)

    def test_filters_need_relationship(self):
        with pytest.raises(InvalidArgumentError, match="Filters"):
            Field(str, filters=(lambda statement: None,))

    def test_unbound_field(self):
        with pytest.raises(InvalidArgumentError, match="not bound"):
            Field(int).to_property()

    def test_class_access_returns_field(self):
        assert isinstance(Book.title, Field)
        assert Book.title.name == "title"


class TestProperty:
    def test_column_defaults_to_name(self):
        prop = get_reflection(Book)["title"]
        assert prop == Property(name="title", type=str, column="title")
        assert prop.is_basic_type
        assert prop.is_writable
        assert not prop.has_relationship

    def test_has_one_column_defaults_to_foreign_key(self):
        prop = get_reflection(Book)["author"]
        assert prop.column == "author_id"
        assert prop.has_relationship
        assert prop.resolve_type() is Author

    def test_explicit_column(self):
        class Renamed(Entity):
            label = Field(str, column="name")

        assert get_reflection(Renamed)["label"].column == "name"

    def test_read_only(self):
        assert not get_reflection(Stamped)["id"].is_writable

    def test_non_basic_type(self):
        prop = get_reflection(Stamped)["created"]
        assert not prop.is_basic_type
        assert prop.resolve_type() is datetime.date


class TestEntityReflection:
    def test_inherited_fields_first(self):
        assert list(get_reflection(Ticket)) == ["id", "created", "subject", "owner"]

    def test_mapping_protocol(self):
        reflection = get_reflection(Ticket)
        assert isinstance(reflection, EntityReflection)
        assert len(reflection) == 4
        assert "subject" in reflection
        assert reflection.get_property("missing") is None
        with pytest.raises(KeyError):
            reflection["missing"]

    def test_built_once_per_type(self):
        assert get_reflection(Ticket) is get_reflection(Ticket)
        assert get_reflection(Stamped) is not get_reflection(Ticket)

    def test_repr(self):
        assert repr(get_reflection(Stamped)) == (
            "EntityReflection(Stamped, properties=['id', 'created'])"
        )


class TestEntityRegistry:
    def test_subclasses_register_by_name(self):
        assert resolve_entity_class("Ticket") is Ticket

    def test_register_alias(self):
        register_entity(Ticket, "SupportTicket")
        assert resolve_entity_class("SupportTicket") is Ticket

    def test_unknown_name(self):
        with pytest.raises(NotFoundError, match="Unknown entity class 'Nope'"):
            resolve_entity_class("Nope")
