"""
rowbind - row tracking and relationship resolution for typed entities.

Binds database rows to typed entities, tracks which fields changed since
they were loaded, and resolves declared relationships lazily with one
batch query per relationship and row store.

Layout:
    rowbind.core     data access: connections, dialects, statements, errors,
                     logging, settings
    rowbind.mapper   row tracking engine (Result / Row), relationship
                     descriptors, entities, repositories
    rowbind.cli      ``rowbind`` command line interface
"""

__version__ = "0.1.0"

from rowbind.mapper import *  # noqa: E402,F403
from rowbind.mapper import __all__ as _mapper_all  # noqa: E402

__all__ = ["__version__", *_mapper_all]
