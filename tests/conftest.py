"""
Shared pytest fixtures for rowbind tests.

This module provides:
- An in-memory SQLite library database (author, book, tag, book_tag)
- ``RecordingDataAccess``: a DataAccess wrapper that records every batch
  fetch, used to assert how many queries relationship resolution issues
- Logging/settings isolation between tests
"""

import sys
from pathlib import Path
from typing import Generator

import pytest
import structlog

# Ensure rowbind package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rowbind.core.database import Database
from rowbind.core.logging import clear_context
from rowbind.core.settings import get_settings
from rowbind.core.sqlite_conn import SqliteConnection

from tests._support.recording import RecordingDataAccess


LIBRARY_SCHEMA = """
CREATE TABLE author (
    id   INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    web  TEXT
);
CREATE TABLE book (
    id          INTEGER PRIMARY KEY,
    author_id   INTEGER NOT NULL REFERENCES author(id),
    reviewer_id INTEGER REFERENCES author(id),
    title       TEXT NOT NULL,
    pubdate     TEXT,
    available   INTEGER NOT NULL DEFAULT 1
);
CREATE TABLE tag (
    id   INTEGER PRIMARY KEY,
    name TEXT NOT NULL
);
CREATE TABLE book_tag (
    id      INTEGER PRIMARY KEY,
    book_id INTEGER NOT NULL REFERENCES book(id) ON DELETE CASCADE,
    tag_id  INTEGER NOT NULL REFERENCES tag(id)
);
"""

LIBRARY_DATA = """
INSERT INTO author (id, name, web) VALUES
    (1, 'Ann', 'https://ann.example'),
    (2, 'Ben', NULL),
    (3, 'Cy', NULL);
INSERT INTO book (id, author_id, reviewer_id, title, pubdate, available) VALUES
    (1, 1, 2, 'First', '2001-01-01', 1),
    (2, 1, NULL, 'Second', '2005-05-05', 0),
    (3, 2, 1, 'Third', '1999-09-09', 1);
INSERT INTO tag (id, name) VALUES
    (1, 'fiction'),
    (2, 'fantasy'),
    (3, 'history');
INSERT INTO book_tag (id, book_id, tag_id) VALUES
    (1, 1, 1),
    (2, 1, 2),
    (3, 3, 3);
"""


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def sqlite_conn() -> Generator[SqliteConnection, None, None]:
    """In-memory SQLite connection with the library schema and data."""
    conn = SqliteConnection(":memory:")
    conn.executescript(LIBRARY_SCHEMA)
    conn.executescript(LIBRARY_DATA)
    yield conn
    conn.close()


@pytest.fixture
def db(sqlite_conn: SqliteConnection) -> Database:
    return Database(sqlite_conn)


@pytest.fixture
def recording(db: Database) -> RecordingDataAccess:
    return RecordingDataAccess(db)


@pytest.fixture
def library_file(tmp_path: Path) -> Path:
    """File-based SQLite library database (for CLI tests)."""
    path = tmp_path / "library.db"
    conn = SqliteConnection(str(path))
    conn.executescript(LIBRARY_SCHEMA)
    conn.executescript(LIBRARY_DATA)
    conn.commit()
    conn.close()
    return path


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_logging_and_settings() -> Generator[None, None, None]:
    """Undo ``configure_logging`` / cached settings from the previous test."""
    yield
    structlog.reset_defaults()
    clear_context()
    get_settings(_force_reload=True)
