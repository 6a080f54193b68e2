"""
CLI layer for rowbind.

Inspect rows and walk relationships of any database the library can
connect to.  This package handles only terminal transport: argument
parsing, coloured output and table formatting.

Entry point::

    rowbind --help
"""

from rowbind.cli.app import app

__all__ = ["app"]
