"""
Registries for schemadoc.

Registries are the deduplicating keyed stores shared by every resolution of
one documentation build:
- SchemaRegistry: resolved schema trees keyed by type_key of the requested type
- ErrorRegistry: documented error responses keyed by exception name
- HeaderRegistry: documented request headers keyed by header name

Invariants:
    - register() is idempotent: the first writer wins, later writers with the
      same key are ignored and the stored value never changes
    - All reads and writes are safe from concurrent threads without
      caller-side locking
    - Registries are plain objects owned by a session; there is no global
      instance
    - Fingerprint changes when any registered schema changes

How to change safely:
    - Keys must stay derived from the requested (unsubstituted) type
    - Keep to_dict() sorted by key so fingerprints are deterministic

Example:
    >>> registry = SchemaRegistry()
    >>> registry.register_type(Box[Address], schema)
    'Box.Address'
    >>> registry.get("Box.Address") is schema
    True
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Dict, Generic, Iterable, Optional, TypeVar, Union

from ..errors import SchemaContractError, SchemaNotFoundError
from .generics import type_key
from .types import PropertyKind, Schema

logger = logging.getLogger(__name__)

V = TypeVar("V")


class DocRegistry(Generic[V]):
    """Thread-safe, first-writer-wins keyed store.

    Thread-safety:
        - Writes take the internal lock
        - Reads take the same lock so they never observe a partial write

    Args:
        name: Registry name used in log and error messages
    """

    def __init__(self, name: str = "registry") -> None:
        self.name = name
        self._entries: Dict[str, V] = {}
        self._lock = threading.Lock()

    def register(self, key: str, value: V) -> bool:
        """Store ``value`` under ``key`` unless the key is already taken.

        Args:
            key: Stable registry key
            value: Value to store

        Returns:
            True if stored, False if an earlier value was kept
        """
        with self._lock:
            if key in self._entries:
                logger.debug(f"{self.name}: '{key}' already registered, keeping first value")
                return False
            self._entries[key] = value
            logger.debug(f"{self.name}: registered '{key}'")
            return True

    def get(self, key: str) -> Optional[V]:
        """Get the value stored under ``key``, or None if absent."""
        with self._lock:
            return self._entries.get(key)

    def require(self, key: str) -> V:
        """Get the value stored under ``key``.

        Raises:
            SchemaNotFoundError: If nothing is registered under ``key``
        """
        with self._lock:
            if key not in self._entries:
                raise SchemaNotFoundError(key, registry=self.name)
            return self._entries[key]

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def items(self) -> list[tuple[str, V]]:
        """Snapshot of all entries in registration order."""
        with self._lock:
            return list(self._entries.items())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, entries={len(self)})"


class SchemaRegistry(DocRegistry[Schema]):
    """Resolved schema trees keyed by the requested type.

    Example:
        >>> registry.register_type(Page[User], registry_schema)
        'Page.User'
        >>> registry.fingerprint()
        'sha256:abc123...'
    """

    def __init__(self) -> None:
        super().__init__("schemas")

    def register_type(self, tp: Any, schema: Schema) -> str:
        """Register ``schema`` under the stable key of ``tp``.

        Args:
            tp: The type as originally requested (before substitution)
            schema: Its resolved tree

        Returns:
            The registry key, whether or not this call stored the schema
        """
        key = type_key(tp)
        self.register(key, schema)
        return key

    def get_type(self, tp: Any) -> Optional[Schema]:
        return self.get(type_key(tp))

    def to_dict(self) -> dict:
        """Registered schema trees as plain dicts, sorted by key."""
        entries = dict(self.items())
        return {key: entries[key].to_dict() for key in sorted(entries)}

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    def fingerprint(self) -> str:
        """Compute SHA-256 fingerprint of the registered schemas.

        Returns:
            Fingerprint string in format 'sha256:<hash>'
        """
        canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'), default=str)
        hash_bytes = hashlib.sha256(canonical.encode('utf-8')).hexdigest()
        return f"sha256:{hash_bytes}"


@dataclass(frozen=True)
class ApiError:
    """A documented error response.

    Attributes:
        status: HTTP status of the response
        description: Human readable meaning of the error
        exception_name: Qualified name of the exception that produces it
        error_code: Application error code, if any
        body_ref: SchemaRegistry key of the response body, if any
    """

    status: HTTPStatus
    description: str
    exception_name: str
    error_code: Optional[str] = None
    body_ref: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "status", HTTPStatus(self.status))
        except ValueError as e:
            raise SchemaContractError(
                f"Invalid HTTP status {self.status!r} for {self.exception_name}",
                node="ApiError",
                expected="HTTP status code",
            ) from e

    @classmethod
    def for_exception(
        cls,
        exception_type: type[BaseException],
        status: Union[int, HTTPStatus],
        description: str,
        error_code: Optional[str] = None,
        body_ref: Optional[str] = None,
    ) -> ApiError:
        return cls(
            status=status,
            description=description,
            exception_name=exception_name(exception_type),
            error_code=error_code,
            body_ref=body_ref,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.name,
            "status_code": self.status.value,
            "description": self.description,
            "exception": self.exception_name,
            "error_code": self.error_code,
            "body_ref": self.body_ref,
        }


def exception_name(exception_type: type[BaseException]) -> str:
    """Qualified name used as the ErrorRegistry key."""
    return f"{exception_type.__module__}.{exception_type.__qualname__}"


class ErrorRegistry(DocRegistry[ApiError]):
    """Documented error responses keyed by exception name."""

    def __init__(self) -> None:
        super().__init__("errors")

    def register_error(self, error: ApiError) -> str:
        self.register(error.exception_name, error)
        return error.exception_name

    def error_refs(self, exception_types: Iterable[type[BaseException]]) -> list[str]:
        """Keys of the given exception types that have a registered error.

        Unregistered exception types are skipped.
        """
        refs = []
        for exc_type in exception_types:
            key = exception_name(exc_type)
            if key in self:
                refs.append(key)
        return refs

    def to_dict(self) -> dict:
        entries = dict(self.items())
        return {key: entries[key].to_dict() for key in sorted(entries)}


@dataclass(frozen=True)
class ApiHeader:
    """A documented request header.

    Attributes:
        name: Header name as sent on the wire
        kind: Leaf kind of the header value
        required: Whether the header must be sent
        description: Human readable meaning of the header
    """

    name: str
    kind: PropertyKind = PropertyKind.STRING
    required: bool = False
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaContractError("Header name cannot be empty", node="ApiHeader")
        if not self.kind.is_leaf:
            raise SchemaContractError(
                f"Header '{self.name}' cannot carry container kind '{self.kind.value}'",
                node="ApiHeader",
                expected="leaf kind",
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.kind.display_name,
            "required": self.required,
            "description": self.description,
        }


class HeaderRegistry(DocRegistry[ApiHeader]):
    """Documented request headers keyed by header name."""

    def __init__(self) -> None:
        super().__init__("headers")

    def add_header(self, header: ApiHeader) -> bool:
        return self.register(header.name, header)

    def add_headers(self, headers: Iterable[ApiHeader]) -> None:
        for header in headers:
            self.add_header(header)

    def get_header(self, name: str) -> Optional[ApiHeader]:
        return self.get(name)

    def headers(self) -> list[ApiHeader]:
        return [header for _, header in self.items()]

    def to_dict(self) -> dict:
        entries = dict(self.items())
        return {name: entries[name].to_dict() for name in sorted(entries)}
