"""Tests for the rowbind CLI commands."""

import json
import sqlite3

import pytest
from typer.testing import CliRunner

from rowbind.cli import utils as cli_utils
from rowbind.cli.app import app
from rowbind.core.connection import connect
from rowbind.core.settings import get_settings

runner = CliRunner()


def _json(result) -> object:
    return json.loads(result.stdout)


class TestRoot:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "rows" in result.output
        assert "referencing" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("rowbind ")


class TestRows:
    def test_table_output(self, library_file):
        result = runner.invoke(app, ["rows", "author", "-d", str(library_file)])
        assert result.exit_code == 0
        for name in ("Ann", "Ben", "Cy"):
            assert name in result.stdout

    def test_json_with_ids(self, library_file):
        result = runner.invoke(
            app, ["rows", "book", "--id", "1", "--id", "3", "-d", str(library_file), "--json"]
        )
        assert result.exit_code == 0
        assert [row["title"] for row in _json(result)] == ["First", "Third"]

    def test_no_rows(self, library_file):
        result = runner.invoke(app, ["rows", "book", "-i", "99", "-d", str(library_file)])
        assert result.exit_code == 0
        assert "No rows." in result.stdout

    def test_database_from_environment(self, library_file, monkeypatch):
        monkeypatch.setenv("ROWBIND_DATABASE_URL", f"sqlite:///{library_file}")
        get_settings(_force_reload=True)
        result = runner.invoke(app, ["rows", "tag", "--json"])
        assert result.exit_code == 0
        assert len(_json(result)) == 3

    def test_unknown_table(self, library_file):
        result = runner.invoke(app, ["rows", "missing", "-d", str(library_file)])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert "DATABASE" in result.output


class TestReferenced:
    def test_default_via_column(self, library_file):
        result = runner.invoke(
            app, ["referenced", "book", "3", "author", "-d", str(library_file), "--json"]
        )
        assert result.exit_code == 0
        assert _json(result)["name"] == "Ben"

    def test_explicit_via_column(self, library_file):
        result = runner.invoke(
            app,
            ["referenced", "book", "1", "author", "--via", "reviewer_id", "-d", str(library_file)],
        )
        assert result.exit_code == 0
        assert "Ben" in result.stdout

    def test_null_reference(self, library_file):
        result = runner.invoke(
            app,
            ["referenced", "book", "2", "author", "--via", "reviewer_id", "-d", str(library_file)],
        )
        assert result.exit_code == 0
        assert "No row." in result.stdout

    def test_missing_source_row(self, library_file):
        result = runner.invoke(app, ["referenced", "book", "99", "author", "-d", str(library_file)])
        assert result.exit_code == 1
        assert "NOT_FOUND" in result.output
        assert "No row with ID 99 in 'book'" in result.output

    def test_missing_via_column(self, library_file):
        result = runner.invoke(app, ["referenced", "author", "1", "tag", "-d", str(library_file)])
        assert result.exit_code == 1
        assert "tag_id" in result.output


class TestReferencing:
    def test_default_via_column(self, library_file):
        result = runner.invoke(
            app, ["referencing", "author", "1", "book", "-d", str(library_file), "--json"]
        )
        assert result.exit_code == 0
        assert [row["title"] for row in _json(result)] == ["First", "Second"]

    def test_explicit_via_column(self, library_file):
        result = runner.invoke(
            app,
            [
                "referencing", "author", "1", "book",
                "--via", "reviewer_id",
                "-d", str(library_file),
                "--json",
            ],
        )
        assert result.exit_code == 0
        assert [row["id"] for row in _json(result)] == [3]

    def test_nothing_referencing(self, library_file):
        result = runner.invoke(app, ["referencing", "author", "3", "book", "-d", str(library_file)])
        assert result.exit_code == 0
        assert "No rows." in result.stdout


class TestConnectionLifecycle:
    def _track(self, monkeypatch) -> list:
        opened = []

        def tracking_connect(*args, **kwargs):
            db = connect(*args, **kwargs)
            opened.append(db)
            return db

        monkeypatch.setattr(cli_utils, "connect", tracking_connect)
        return opened

    def _assert_closed(self, opened):
        assert len(opened) == 1
        with pytest.raises(sqlite3.ProgrammingError):
            opened[0].conn.raw.execute("SELECT 1")

    def test_rows_closes_connection(self, library_file, monkeypatch):
        opened = self._track(monkeypatch)
        result = runner.invoke(app, ["rows", "author", "-d", str(library_file)])
        assert result.exit_code == 0
        self._assert_closed(opened)

    def test_closed_after_error(self, library_file, monkeypatch):
        opened = self._track(monkeypatch)
        result = runner.invoke(app, ["referenced", "book", "99", "author", "-d", str(library_file)])
        assert result.exit_code == 1
        self._assert_closed(opened)

    def test_referencing_closes_connection(self, library_file, monkeypatch):
        opened = self._track(monkeypatch)
        result = runner.invoke(app, ["referencing", "author", "1", "book", "-d", str(library_file)])
        assert result.exit_code == 0
        self._assert_closed(opened)
