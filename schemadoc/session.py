"""
Documentation build session.

A DocumentationSession owns everything one documentation build shares: the
schema, error and header registries plus the resolver that feeds them. There
is no process-wide state; two sessions never see each other's entries.

Invariants:
    - Registries are shared by all resolutions of the session and are
      internally locked
    - Each resolution runs with its own context, so document_types() may
      resolve concurrently
    - Schemas are registered under the key of the type as requested,
      wrappers included

How to change safely:
    - Keep the session a thin composition; resolution rules belong in
      schemadoc.schema
    - New registries need a section in snapshot()

Example:
    >>> session = DocumentationSession(Settings(base_packages=["myapp"]))
    >>> key = session.document_type(Optional[User])
    >>> session.render_ref(key)["model"]
    {'id': 'uuid', 'name': 'string'}
"""

from __future__ import annotations

import logging
from collections import abc
from concurrent.futures import ThreadPoolExecutor
from http import HTTPStatus
from typing import Any, Iterable, Mapping, Optional, Union, get_args, get_origin

from .config import Settings
from .schema.classifier import classify, unwrap
from .schema.fields import FieldProvider, ModuleBoundary, ReflectiveFieldProvider
from .schema.generics import type_key
from .schema.registry import ApiError, ApiHeader, ErrorRegistry, HeaderRegistry, SchemaRegistry
from .schema.resolver import SchemaResolver
from .schema.types import PropertyKind, Schema
from .view.renderer import render, render_response

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

_ASYNC_WRAPPERS = (abc.Awaitable, abc.Coroutine)


def unwrap_return_type(tp: Any) -> Any:
    """Strip Optional, Annotated and awaitable wrappers from a return type.

    ``Awaitable[Optional[User]]`` and ``Coroutine[Any, Any, User]`` both
    become ``User``.
    """
    while True:
        tp = unwrap(tp)
        if get_origin(tp) in _ASYNC_WRAPPERS:
            args = get_args(tp)
            tp = args[-1] if args else None
            continue
        return tp


class DocumentationSession:
    """Resolver plus registries for one documentation build.

    Args:
        settings: Session settings (defaults from the environment)
        field_provider: Field source (defaults to ReflectiveFieldProvider)
        boundary: Expansion predicate (defaults to ModuleBoundary)
        extra_kinds: Additional class to kind mappings for the classifier
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        field_provider: Optional[FieldProvider] = None,
        boundary: Optional[Any] = None,
        extra_kinds: Optional[Mapping[type, PropertyKind]] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.field_provider = field_provider or ReflectiveFieldProvider(
            platform_modules=self.settings.platform_modules,
            skip_private=self.settings.skip_private_fields,
        )
        self.boundary = boundary or ModuleBoundary(
            base_packages=self.settings.base_packages,
            platform_modules=self.settings.platform_modules,
        )
        self.extra_kinds = dict(extra_kinds or {})
        self.resolver = SchemaResolver(self.field_provider, self.boundary, self.extra_kinds)

        self.schemas = SchemaRegistry()
        self.errors = ErrorRegistry()
        self.headers = HeaderRegistry()

    # Core operations

    def resolve_schema(self, tp: Any) -> Schema:
        return self.resolver.resolve(tp)

    def register_and_get_ref(self, tp: Any, schema: Schema) -> str:
        return self.schemas.register_type(tp, schema)

    def render(self, schema: Optional[Schema], include_metadata: bool = False) -> dict[str, Any]:
        return render(schema, include_metadata)

    # Types

    def document_type(self, tp: Any) -> Optional[str]:
        """Resolve and register a request or response type.

        Wrappers are removed before resolution, but the schema is registered
        under the key of ``tp`` as given. Leaf types and classes outside the
        boundary have nothing to document.

        Args:
            tp: Type as it appears in a signature

        Returns:
            Registry key, or None when the type is not documented
        """
        inner = unwrap_return_type(tp)
        if inner is None:
            return None

        kind = classify(inner, self.extra_kinds)
        if kind.is_leaf:
            logger.debug(f"Skipping leaf type {type_key(tp)}")
            return None
        if kind is PropertyKind.OBJECT and not self.boundary(inner):
            logger.debug(f"Skipping {type_key(tp)}: outside documented packages")
            return None

        key = type_key(tp)
        if key in self.schemas:
            return key
        return self.register_and_get_ref(tp, self.resolve_schema(inner))

    def document_types(self, types: Iterable[Any]) -> list[Optional[str]]:
        """Document several types concurrently.

        Returns:
            Registry keys in input order (None for undocumented types)
        """
        types = list(types)
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            keys = list(pool.map(self.document_type, types))
        logger.info(f"Documented {sum(k is not None for k in keys)} of {len(types)} types")
        return keys

    def render_ref(self, key: str, include_metadata: bool = False) -> dict[str, Any]:
        """Render the schema registered under ``key``.

        Raises:
            SchemaNotFoundError: If no schema is registered under ``key``
        """
        return render(self.schemas.require(key), include_metadata)

    # Errors

    def document_error(
        self,
        exception_type: type[BaseException],
        status: Union[int, HTTPStatus],
        description: str,
        error_code: Optional[str] = None,
        body_type: Any = None,
    ) -> str:
        """Register the error response an exception type produces.

        Args:
            exception_type: Exception class that maps to this response
            status: HTTP status of the response
            description: Human readable meaning
            error_code: Application error code, if any
            body_type: Response body type, documented like any other type

        Returns:
            ErrorRegistry key (the exception's qualified name)
        """
        body_ref = self.document_type(body_type) if body_type is not None else None
        error = ApiError.for_exception(
            exception_type,
            status=status,
            description=description,
            error_code=error_code,
            body_ref=body_ref,
        )
        return self.errors.register_error(error)

    def render_error(self, key: str) -> dict[str, Any]:
        """Render a registered error with its response body.

        Raises:
            SchemaNotFoundError: If no error is registered under ``key``
        """
        error = self.errors.require(key)
        response = render_response(self.schemas.get(error.body_ref)) if error.body_ref else None
        return {
            "status": error.status.name,
            "status_code": error.status.value,
            "description": error.description,
            "error_code": error.error_code,
            "response": response,
        }

    # Headers

    def document_headers(self, *headers: ApiHeader) -> None:
        self.headers.add_headers(headers)

    # Export

    def snapshot(self, include_metadata: bool = True) -> dict[str, Any]:
        """Everything documented so far, rendered.

        Returns:
            Dict with version, fingerprint, schemas, errors and headers
        """
        schemas = dict(self.schemas.items())
        snapshot = {
            "version": SNAPSHOT_VERSION,
            "fingerprint": self.schemas.fingerprint(),
            "schemas": {key: render(schemas[key], include_metadata) for key in sorted(schemas)},
            "errors": {key: self.render_error(key) for key in sorted(self.errors.keys())},
            "headers": self.headers.to_dict(),
        }
        logger.info(
            f"Snapshot built with {len(schemas)} schemas, {len(self.errors)} errors, "
            f"{len(self.headers)} headers, fingerprint={snapshot['fingerprint']}"
        )
        return snapshot
