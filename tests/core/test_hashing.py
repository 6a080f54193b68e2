"""Tests for rowbind.core.hashing."""

from rowbind.core.hashing import compute_hash, statement_fingerprint


class TestComputeHash:
    def test_deterministic(self):
        assert compute_hash("a", 1) == compute_hash("a", 1)

    def test_order_dependent(self):
        assert compute_hash("a", "b") != compute_hash("b", "a")

    def test_type_sensitive(self):
        assert compute_hash(1) != compute_hash("1")

    def test_length(self):
        assert len(compute_hash("x")) == 32
        assert len(compute_hash("x", length=12)) == 12


class TestStatementFingerprint:
    def test_params_as_list_or_tuple(self):
        assert statement_fingerprint("SELECT ?", [1]) == statement_fingerprint("SELECT ?", (1,))

    def test_sql_sensitive(self):
        assert statement_fingerprint("SELECT 1", ()) != statement_fingerprint("SELECT 2", ())
