"""Tests for Repository persistence and loading."""

import pytest
from structlog.testing import capture_logs

from rowbind.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from rowbind.mapper.repository import Repository
from tests._support.library import (
    Author,
    AuthorRepository,
    Book,
    BookRepository,
    Tag,
    TagRepository,
)


class CatalogueRepository(Repository):
    table = "book"
    entity_class = "Book"


class Store(Repository):
    pass


class GhostRepository(Repository):
    entity_class = "Ghost"


class TestNames:
    def test_derived_from_class_name(self, db):
        repo = BookRepository(db)
        assert repo.get_table() == "book"
        assert repo.get_entity_class() is Book

    def test_explicit(self, db):
        repo = CatalogueRepository(db)
        assert repo.get_table() == "book"
        assert repo.get_entity_class() is Book

    def test_underivable(self, db):
        with pytest.raises(InvalidStateError, match="Cannot determine table name"):
            Store(db).get_table()
        with pytest.raises(InvalidStateError, match="Cannot determine entity class name"):
            Store(db).get_entity_class()

    def test_unregistered_entity_name(self, db):
        with pytest.raises(InvalidStateError, match="'Ghost' is not registered") as exc_info:
            GhostRepository(db).get_entity_class()
        assert isinstance(exc_info.value.cause, NotFoundError)


class TestPersist:
    def test_insert_new_entity(self, recording):
        author = Author()
        author.name = "Dee"
        with capture_logs() as logs:
            new_id = AuthorRepository(recording).persist(author)

        assert new_id == 4
        assert recording.writes == [("insert", "author", {"name": "Dee"})]
        assert author.id == 4
        assert not author.is_detached()
        assert not author.is_modified()
        assert recording.inner.fetch_in("author", "id", [4])[0]["name"] == "Dee"
        assert any(e["event"] == "entity_created" and e["id"] == 4 for e in logs)

    def test_insert_with_explicit_id(self, db):
        tag = Tag()
        tag.assign({"id": 40, "name": "poetry"})
        assert TagRepository(db).persist(tag) == 40
        assert tag.id == 40

    def test_created_entity_resolves_relationships(self, db):
        author = Author()
        author.name = "Dee"
        AuthorRepository(db).persist(author)
        assert author.books == []

    def test_unmodified_is_noop(self, recording):
        book = BookRepository(recording).find(1)
        assert BookRepository(recording).persist(book) is None
        assert recording.writes == []

    def test_update_modified_columns_only(self, recording):
        book = BookRepository(recording).find(1)
        book.title = "First, revised"
        assert BookRepository(recording).persist(book) == 1
        assert recording.writes == [("update", "book", {"title": "First, revised"})]
        assert not book.is_modified()
        assert BookRepository(recording).find(1).title == "First, revised"

    def test_wrong_entity_type(self, db):
        with pytest.raises(InvalidArgumentError, match="cannot handle Author"):
            BookRepository(db).persist(Author())


class TestDelete:
    def test_delete_entity_detaches_it(self, db):
        repo = AuthorRepository(db)
        author = repo.find(3)
        assert repo.delete(author) == 1
        assert author.is_detached()
        assert author.modified_data() == {"id": 3, "name": "Cy", "web": None}
        with pytest.raises(NotFoundError):
            repo.find(3)

    def test_deleted_entity_can_be_reinserted(self, db):
        repo = AuthorRepository(db)
        author = repo.find(3)
        repo.delete(author)
        assert repo.persist(author) == 3
        assert repo.find(3).name == "Cy"

    def test_copy_with_cleared_id_gets_new_id(self, db):
        repo = AuthorRepository(db)
        author = repo.find(1)
        author.detach()
        author.row.write("id", None)
        assert repo.persist(author) == 4
        assert author.id == 4
        assert not author.is_detached()
        assert repo.find(4).name == "Ann"

    def test_delete_by_id(self, db):
        assert AuthorRepository(db).delete(3) == 1
        assert AuthorRepository(db).delete(3) == 0

    def test_delete_detached(self, db):
        with pytest.raises(InvalidStateError, match="Cannot delete detached entity"):
            AuthorRepository(db).delete(Author())


class TestLoading:
    def test_find(self, db):
        book = BookRepository(db).find(3)
        assert isinstance(book, Book)
        assert book.title == "Third"

    def test_find_missing(self, db):
        with pytest.raises(NotFoundError, match="Entity with ID 99 was not found"):
            BookRepository(db).find(99)

    def test_find_all(self, db):
        assert sorted(author.name for author in AuthorRepository(db).find_all()) == [
            "Ann",
            "Ben",
            "Cy",
        ]

    def test_create_entities_share_store(self, db):
        books = BookRepository(db).create_entities(db.query("SELECT * FROM book"))
        assert set(books) == {1, 2, 3}
        assert books[1].row.result is books[3].row.result

    def test_create_entity_with_explicit_class(self, db):
        tag = BookRepository(db).create_entity({"id": 9, "name": "misc"}, Tag, "tag")
        assert isinstance(tag, Tag)
        assert tag.row.result.table == "tag"
