"""
Schema resolution for schemadoc.

SchemaResolver turns a type hint into a schema tree. It substitutes generic
parameters, classifies the result, and recurses into arrays, maps and
documentation-owned classes. Recursion is bounded by a path-scoped guard:
a class already being expanded on the current path resolves to a reference
marker instead of a second expansion.

Invariants:
    - Every resolve() call starts from a fresh ResolutionContext
    - Contexts are immutable values passed down the recursion; sibling
      branches never see each other's path
    - Generic substitution happens before the guard check and classification
    - A raw generic class is expanded as its all-Any instantiation
    - The guard also matches a generic field declaration re-entered with a
      type at least as large, so polymorphic recursion terminates
    - Malformed types degrade to NULL leaves or opaque objects, never raise
    - Map keys are leaf kinds; container keys collapse to STRING

How to change safely:
    - Do not cache contexts on the resolver; it is shared across threads
    - New field metadata sources belong in _describe/_example_of, not in
      the providers

Example:
    >>> resolver = SchemaResolver(ReflectiveFieldProvider(), ModuleBoundary(["myapp"]))
    >>> schema = resolver.resolve(Node)
    >>> schema.properties["children"].element
    ObjectSchema(properties=mappingproxy({}), ref='Node')
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, TypeVar, get_origin

from .classifier import classify, enum_values, unwrap
from .constraints import allowed_values, is_required, resolve_constraints
from .fields import FieldDescriptor, FieldProvider
from .generics import (
    GenericBindingContext,
    element_type,
    generic_origin_and_args,
    map_types,
    top_instantiation,
    type_key,
    type_size,
)
from .markers import Description, FieldInfo
from .types import ArraySchema, MapSchema, ObjectSchema, Property, PropertyKind, Schema, ValueSchema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionContext:
    """Per-branch resolution state.

    Attributes:
        bindings: Generic bindings visible on this branch
        path: Classes currently being expanded between the root and here
        sites: Field declarations (owner class, type as written) entered on
            this branch, mapped to the class expanded under them
    """

    bindings: GenericBindingContext = dataclass_field(default_factory=GenericBindingContext)
    path: frozenset[Any] = frozenset()
    sites: Mapping[tuple[Any, Any], Any] = dataclass_field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sites", MappingProxyType(dict(self.sites)))

    def on_path(self, tp: Any) -> bool:
        return tp in self.path

    def cycle_target(self, tp: Any, site: Optional[tuple[Any, Any]] = None) -> Optional[Any]:
        """The class on this path that ``tp`` re-enters, or None.

        Besides an exact match, a declaration re-entered with an instantiation
        at least as large as the previous one is a cycle, e.g.
        ``child: Nested[list[T]]`` inside ``Nested[T]``. A shrinking chain such
        as ``Box[Box[int]]`` is finite and keeps expanding.
        """
        if tp in self.path:
            return tp
        previous = self.sites.get(site) if site is not None else None
        if previous is not None and type_size(tp) >= type_size(previous):
            return previous
        return None

    def enter(self, tp: Any, site: Optional[tuple[Any, Any]] = None) -> ResolutionContext:
        """Derive the context for the fields of ``tp``."""
        sites = self.sites
        if site is not None:
            sites = {**self.sites, site: tp}
        return ResolutionContext(
            bindings=self.bindings.merge(GenericBindingContext.for_type(tp)),
            path=self.path | {tp},
            sites=sites,
        )

    @property
    def depth(self) -> int:
        return len(self.path)


def _kind_of(schema: Schema) -> PropertyKind:
    if isinstance(schema, ValueSchema):
        return schema.kind
    if isinstance(schema, ArraySchema):
        return PropertyKind.ARRAY
    if isinstance(schema, MapSchema):
        return PropertyKind.MAP
    return PropertyKind.OBJECT


class SchemaResolver:
    """Builds schema trees from type hints.

    Args:
        field_provider: Source of field descriptors for expandable classes
        boundary: Predicate deciding whether a class may be expanded
        extra_kinds: Additional class to kind mappings for the classifier
    """

    def __init__(
        self,
        field_provider: FieldProvider,
        boundary: Callable[[Any], bool],
        extra_kinds: Optional[Mapping[type, PropertyKind]] = None,
    ) -> None:
        self.field_provider = field_provider
        self.boundary = boundary
        self.extra_kinds = dict(extra_kinds or {})

    def resolve(self, tp: Any) -> Schema:
        """Resolve a type hint into a schema tree.

        Args:
            tp: Any type hint; None resolves to a NULL leaf

        Returns:
            The root schema node
        """
        logger.debug(f"Resolving schema for {type_key(tp)}")
        return self._resolve(tp, ResolutionContext())

    def _resolve(self, tp: Any, ctx: ResolutionContext, owner: Any = None) -> Schema:
        if tp is None:
            return ValueSchema(PropertyKind.NULL)

        declared = unwrap(tp)
        tp = top_instantiation(unwrap(ctx.bindings.substitute(declared)))
        site = _site(owner, declared, tp)
        try:
            target = ctx.cycle_target(tp, site)
            if target is not None:
                logger.debug(f"Cycle on {type_key(target)} at depth {ctx.depth}, emitting reference")
                return ObjectSchema.reference(type_key(target))
            kind = classify(tp, self.extra_kinds)
        except TypeError as e:
            logger.debug(f"Unclassifiable type {tp!r}: {e}")
            return ValueSchema(PropertyKind.NULL)

        if kind is PropertyKind.ARRAY:
            return ArraySchema(self._resolve(element_type(_as_written(declared, tp)), ctx, owner))
        if kind is PropertyKind.MAP:
            return self._resolve_map(_as_written(declared, tp), ctx, owner)
        if kind is PropertyKind.OBJECT:
            return self._resolve_object(tp, ctx, site)
        if kind is PropertyKind.ENUM:
            return ValueSchema(kind, enum_values(tp))
        return ValueSchema(kind)

    def _resolve_map(self, tp: Any, ctx: ResolutionContext, owner: Any = None) -> MapSchema:
        key_type, value_type = map_types(tp)
        key_kind = classify(ctx.bindings.substitute(key_type), self.extra_kinds)
        if key_kind.is_container:
            key_kind = PropertyKind.STRING
        return MapSchema(key_kind, self._resolve(value_type, ctx, owner))

    def _resolve_object(
        self, tp: Any, ctx: ResolutionContext, site: Optional[tuple[Any, Any]] = None
    ) -> ObjectSchema:
        if not self.boundary(tp):
            return ObjectSchema()

        child = ctx.enter(tp, site)
        fields = self.field_provider.fields_of(tp)
        logger.debug(f"Expanding {type_key(tp)} with {len(fields)} fields at depth {child.depth}")
        return ObjectSchema.of(*(self._resolve_property(f, child) for f in fields))

    def _resolve_property(self, descriptor: FieldDescriptor, ctx: ResolutionContext) -> Property:
        value = self._resolve(descriptor.declared_type, ctx, descriptor.owner)

        constraints = resolve_constraints(descriptor.markers)
        if isinstance(value, ValueSchema) and value.kind is PropertyKind.ENUM and value.values:
            constraints.add(allowed_values(value.values))

        return Property(
            name=descriptor.name,
            kind=_kind_of(value),
            value=value,
            required=is_required(descriptor.markers),
            description=_describe(descriptor),
            example=_example_of(descriptor),
            constraints=frozenset(constraints),
        )


def _describe(descriptor: FieldDescriptor) -> Optional[str]:
    """Description marker, else FieldInfo marker, else native field info."""
    for marker in descriptor.markers:
        if isinstance(marker, Description):
            return marker.value
    for marker in descriptor.markers:
        if isinstance(marker, FieldInfo) and marker.description:
            return marker.description
    return descriptor.description or None


def _example_of(descriptor: FieldDescriptor) -> Any:
    for marker in descriptor.markers:
        if isinstance(marker, FieldInfo) and marker.example is not None:
            return marker.example
    return descriptor.example


def _site(owner: Any, declared: Any, tp: Any) -> Optional[tuple[Any, Any]]:
    """Declaration site of a generic field type, keyed on the owner's raw class."""
    if owner is None or isinstance(declared, TypeVar) or declared == tp:
        return None
    origin, _ = generic_origin_and_args(owner)
    return (origin or owner, declared)


def _as_written(declared: Any, tp: Any) -> Any:
    """The container as written when substitution kept its shape."""
    origin = get_origin(declared)
    return declared if origin is not None and origin is get_origin(tp) else tp
