"""
Schema module for schemadoc.

This module provides the schema resolution engine, including:
- Schema tree nodes (ValueSchema, ObjectSchema, ArraySchema, MapSchema, Property)
- Type classification and generic parameter binding
- Field discovery and the expansion boundary
- The recursive SchemaResolver
- Registries for schemas, errors and headers

Invariants:
    - Schema nodes are immutable once constructed
    - Resolution state is per call; registries are the only shared state
    - Registry keys derive from the requested type, including generic arguments

How to change safely:
    - Add new leaf kinds to PropertyKind together with a classifier rule
    - Add new marker types to markers.py and teach constraints.py to read them
    - Keep resolver contexts immutable
"""

from .classifier import classify, enum_values, raw_class, unwrap
from .constraints import allowed_values, is_required, resolve_constraints
from .fields import FieldDescriptor, FieldProvider, ModuleBoundary, ReflectiveFieldProvider
from .generics import GenericBindingContext, element_type, map_types, type_key
from .markers import (
    Description,
    FieldInfo,
    JsonIgnore,
    JsonName,
    Max,
    Min,
    NotBlank,
    NotEmpty,
    NotNull,
    Pattern,
    Size,
)
from .registry import (
    ApiError,
    ApiHeader,
    DocRegistry,
    ErrorRegistry,
    HeaderRegistry,
    SchemaRegistry,
    exception_name,
)
from .resolver import ResolutionContext, SchemaResolver
from .types import (
    ArraySchema,
    MapSchema,
    ObjectSchema,
    Property,
    PropertyKind,
    Schema,
    ValueSchema,
)

__all__ = [
    # Types
    "PropertyKind",
    "Schema",
    "ValueSchema",
    "ObjectSchema",
    "ArraySchema",
    "MapSchema",
    "Property",
    # Markers
    "Description",
    "FieldInfo",
    "NotNull",
    "NotBlank",
    "NotEmpty",
    "Size",
    "Min",
    "Max",
    "Pattern",
    "JsonIgnore",
    "JsonName",
    # Classification and generics
    "classify",
    "enum_values",
    "raw_class",
    "unwrap",
    "GenericBindingContext",
    "type_key",
    "element_type",
    "map_types",
    # Constraints
    "allowed_values",
    "is_required",
    "resolve_constraints",
    # Fields
    "FieldDescriptor",
    "FieldProvider",
    "ReflectiveFieldProvider",
    "ModuleBoundary",
    # Resolution
    "SchemaResolver",
    "ResolutionContext",
    # Registries
    "DocRegistry",
    "SchemaRegistry",
    "ErrorRegistry",
    "HeaderRegistry",
    "ApiError",
    "ApiHeader",
    "exception_name",
]
