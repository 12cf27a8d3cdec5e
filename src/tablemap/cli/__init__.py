"""
CLI layer for tablemap.

Provides a Typer application that prints derived mapping metadata. All
mapping logic lives in ``tablemap.metadata``; this package handles only
terminal transport: argument parsing, coloured output, and JSON.

Entry point::

    tablemap --help
"""

from tablemap.cli.app import app

__all__ = ["app"]
