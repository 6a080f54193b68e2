"""
Deterministic hashing utilities for statement fingerprints.

Relationship caches in :class:`rowbind.mapper.result.Result` are keyed by
``(table, column)``.  When a caller-supplied filter modifies the batch
select, the key additionally carries a fingerprint of the rendered
statement, so two different filters never share a cached row store.

Manifesto:
    Cache keys must be stable and reproducible:
    - **Deterministic:** Same statement + params → same fingerprint, always
    - **Order-dependent:** (a, b) ≠ (b, a)
    - **Type-agnostic:** Values are converted with ``repr()`` so ``1`` and
      ``'1'`` produce different fingerprints

Examples:
    >>> compute_hash("SELECT 1", (1,)) == compute_hash("SELECT 1", (1,))
    True
    >>> compute_hash("SELECT 1", (1,)) == compute_hash("SELECT 1", ("1",))
    False

Tags:
    hashing, utility, cache-key, rowbind
"""

from __future__ import annotations

import hashlib
from typing import Any


def compute_hash(*values: Any, length: int = 32) -> str:
    """
    Compute deterministic hash from values.

    Joins the ``repr()`` of every value with a '|' delimiter, then computes
    SHA-256.

    Args:
        *values: Values to hash
        length: Hex digest length (default 32 = 128 bits)

    Returns:
        Hex string of specified length
    """
    content = "|".join(repr(v) for v in values)
    return hashlib.sha256(content.encode()).hexdigest()[:length]


def statement_fingerprint(sql: str, params: tuple) -> str:
    """Fingerprint of a rendered statement and its bound parameters."""
    return compute_hash(sql, tuple(params))


__all__ = [
    "compute_hash",
    "statement_fingerprint",
]
