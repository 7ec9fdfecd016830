"""
cqlexec CLI - Command line tool for running statements.
"""

from __future__ import annotations

from .main import app, main

__all__ = ["main", "app"]
