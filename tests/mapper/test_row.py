"""Tests for Row handles."""

import pytest

from rowbind.core.errors import InvalidStateError, NotFoundError
from rowbind.mapper.result import Result
from rowbind.mapper.row import Row


@pytest.fixture
def result():
    return Result.from_rows([{"id": 1, "name": "Ann"}, {"id": 2, "name": "Ben"}], "author", None)


class TestFieldAccess:
    def test_read_write(self, result):
        row = result.get(1)
        row.write("name", "Anne")
        assert row.read("name") == "Anne"
        assert row.is_modified()

    def test_item_access(self, result):
        row = result.get(2)
        row["name"] = "Benjamin"
        assert row["name"] == "Benjamin"

    def test_contains(self, result):
        row = result.get(1)
        assert "name" in row
        assert "web" not in row

    def test_to_dict(self, result):
        assert result.get(1).to_dict() == {"id": 1, "name": "Ann"}

    def test_errors_propagate(self, result):
        row = result.get(1)
        with pytest.raises(NotFoundError):
            row.read("web")
        with pytest.raises(InvalidStateError):
            row.write("id", 5)


class TestAliasing:
    def test_handles_share_store(self, result):
        first, second = result.get(1), result.get(1)
        first.write("name", "Anne")
        assert second.read("name") == "Anne"
        assert second.is_modified()

    def test_equality_is_store_and_id(self, result):
        other = Result.from_rows([{"id": 1, "name": "Ann"}], "author", None)
        assert result.get(1) == result.get(1)
        assert result.get(1) != result.get(2)
        assert result.get(1) != other.get(1)
        assert len({result.get(1), result.get(1)}) == 1

    def test_not_equal_to_other_types(self, result):
        assert result.get(1) != {"id": 1, "name": "Ann"}


class TestState:
    def test_detach_and_mark_clean(self, result):
        row = result.get(2)
        row.detach()
        assert row.is_detached()
        assert row.modified_snapshot() == {"id": 2, "name": "Ben"}
        row.mark_clean()
        assert not row.is_modified()

    def test_commit_create_repoints_handle(self, recording):
        row = Result.detached().get()
        assert row.id == 0
        row.write("name", "Dee")
        row.commit_create(7, "author", recording)

        assert row.id == 7
        assert row.read("id") == 7
        assert row.read("name") == "Dee"
        assert not row.is_detached()
        assert not row.is_modified()
        assert len(row.result) == 1

    def test_repr(self, result):
        assert repr(result.get(1)) == "Row(table='author', id=1)"
        assert repr(Row(Result.detached(), 0)) == "Row(table=None, id=0)"
