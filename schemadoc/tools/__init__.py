"""
CLI tools for schemadoc.

This module provides command-line tools for:
- schema: Export rendered documentation for the types of a module

Invariants:
    - Tools work offline and only import the module they document
"""

from .schema_cli import SchemaCLI

__all__ = ["SchemaCLI"]
