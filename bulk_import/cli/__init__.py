"""Command line interface (``python -m bulk_import.cli``)."""

from .app import main

__all__ = ["main"]
