"""Tests for the relationship descriptors."""

import dataclasses

import pytest

from rowbind.core.errors import InvalidArgumentError
from rowbind.mapper.relationship import BelongsTo, BelongsToMany, BelongsToOne, HasMany, HasOne


class TestDescriptors:
    def test_has_one_fields(self):
        rel = HasOne("author_id", "author")
        assert rel.column_referencing_target_table == "author_id"
        assert rel.target_table == "author"

    def test_belongs_to_variants_share_base(self):
        assert isinstance(BelongsToOne("book_id", "cover"), BelongsTo)
        assert isinstance(BelongsToMany("author_id", "book"), BelongsTo)

    def test_has_many_fields(self):
        rel = HasMany("book_id", "book_tag", "tag_id", "tag")
        assert rel.relationship_table == "book_tag"
        assert rel.column_referencing_target_table == "tag_id"

    def test_value_equality(self):
        assert HasOne("author_id", "author") == HasOne("author_id", "author")
        assert BelongsToOne("book_id", "cover") != BelongsToMany("book_id", "cover")

    def test_frozen(self):
        rel = HasOne("author_id", "author")
        with pytest.raises(dataclasses.FrozenInstanceError):
            rel.target_table = "reviewer"

    def test_hashable(self):
        assert len({HasOne("a_id", "a"), HasOne("a_id", "a")}) == 1


class TestValidation:
    @pytest.mark.parametrize("bad", ["", None, 3])
    def test_names_must_be_non_empty_strings(self, bad):
        with pytest.raises(InvalidArgumentError) as exc_info:
            HasOne(bad, "author")
        assert exc_info.value.context.relationship == "HasOne"

    def test_has_many_checks_every_name(self):
        with pytest.raises(InvalidArgumentError, match="relationship_table"):
            HasMany("book_id", "", "tag_id", "tag")
