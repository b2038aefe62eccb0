"""
Error types for schemadoc.

This module defines the exceptions raised by the library:
- SchemaDocError: Base exception
- SchemaContractError: Structural misuse of a schema node
- SchemaNotFoundError: Registry lookup for an unknown key

Invariants:
    - All errors inherit from SchemaDocError
    - Malformed or unknown types never raise; they resolve to opaque nodes
    - SchemaContractError signals a programming error and is never caught
      inside the library
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SchemaDocError(Exception):
    """Base exception for all schemadoc errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "SCHEMADOC_ERROR"
        self.details = details or {}


class SchemaContractError(SchemaDocError):
    """A schema node was built or accessed in a way its shape forbids.

    Raised when:
    - An array-only accessor is used on a non-array property
    - An object-only accessor is used on a non-object property
    - A container kind is used where a leaf kind is required
    - A node is constructed with missing children
    """

    def __init__(
        self,
        message: str,
        node: Optional[str] = None,
        expected: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="SCHEMA_CONTRACT_ERROR",
            details={"node": node, "expected": expected},
        )
        self.node = node
        self.expected = expected


class SchemaNotFoundError(SchemaDocError):
    """No entry is registered under the requested key."""

    def __init__(
        self,
        key: str,
        registry: Optional[str] = None,
    ) -> None:
        where = f" in {registry}" if registry else ""
        super().__init__(
            f"No entry registered under '{key}'{where}",
            code="SCHEMA_NOT_FOUND",
            details={"key": key, "registry": registry},
        )
        self.key = key
        self.registry = registry
