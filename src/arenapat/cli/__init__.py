"""Command-line interface for inspecting, verifying and upgrading pattern files.

This package contains the core command logic, making scripts/ optional and deletable.
"""

from arenapat.cli.main import main

__all__ = ['main']
