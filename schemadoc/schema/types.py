"""
Core schema node definitions for schemadoc.

This module defines the resolved schema tree:
- PropertyKind: Semantic category of a node
- ValueSchema: Leaf value (string, number, enum, ...)
- ObjectSchema: Ordered set of named properties, or a reference marker
- ArraySchema: Homogeneous list of one element schema
- MapSchema: Leaf-kind keys mapped to one value schema
- Property: A named field wrapping a nested schema plus field metadata

Invariants:
    - Every node has exactly one kind
    - Nodes are frozen; trees are built bottom-up and never mutated
    - ObjectSchema property names are unique and match Property.name
    - A reference marker is an ObjectSchema with a ref and no properties
    - MapSchema keys and ValueSchema kinds are always leaf kinds

How to change safely:
    - New leaf kinds must also get a classifier rule and an example default
    - Never add mutators; derive new nodes instead

Example:
    >>> tags = Property("tags", PropertyKind.ARRAY, ArraySchema(ValueSchema(PropertyKind.STRING)))
    >>> user = ObjectSchema({"tags": tags})
    >>> user.properties["tags"].element
    ValueSchema(kind=<PropertyKind.STRING: 'string'>, values=())
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from ..errors import SchemaContractError


class PropertyKind(Enum):
    """Semantic kind of a schema node.

    The value of each member is its display name in rendered views.
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ENUM = "enum"
    UUID = "uuid"
    DATE = "date"
    TIME = "time"
    DATE_TIME = "date-time"
    DURATION = "duration"
    PERIOD = "period"
    URI = "uri"
    BINARY = "binary"
    OBJECT = "object"
    ARRAY = "array"
    MAP = "map"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def is_container(self) -> bool:
        return self in _CONTAINER_KINDS

    @property
    def is_leaf(self) -> bool:
        return self not in _CONTAINER_KINDS

    @classmethod
    def from_str(cls, value: str) -> PropertyKind:
        """Convert a display name to a PropertyKind.

        Raises:
            ValueError: If value is not a valid kind
        """
        for kind in cls:
            if kind.value == value:
                return kind
        valid = [k.value for k in cls]
        raise ValueError(f"Invalid property kind '{value}'. Valid kinds: {valid}")


_CONTAINER_KINDS = frozenset({PropertyKind.OBJECT, PropertyKind.ARRAY, PropertyKind.MAP})


@dataclass(frozen=True)
class ValueSchema:
    """Leaf node.

    Attributes:
        kind: Leaf kind of the value
        values: Allowed values for ENUM leaves (constant names or literals)
    """

    kind: PropertyKind
    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.kind.is_leaf:
            raise SchemaContractError(
                f"ValueSchema cannot carry container kind '{self.kind.value}'",
                node="ValueSchema",
                expected="leaf kind",
            )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": "value", "kind": self.kind.value}
        if self.values:
            result["values"] = list(self.values)
        return result


@dataclass(frozen=True)
class ObjectSchema:
    """Object node: an ordered, read-only mapping of field name to Property.

    An ObjectSchema with ``ref`` set and no properties is a reference marker:
    a terminal stand-in for a type already being expanded on the current path.
    An ObjectSchema with neither is an opaque placeholder.
    """

    properties: Mapping[str, Property] = dataclass_field(default_factory=dict)
    ref: Optional[str] = None

    def __post_init__(self) -> None:
        props = dict(self.properties)
        for name, prop in props.items():
            if not isinstance(prop, Property):
                raise SchemaContractError(
                    f"ObjectSchema entry '{name}' is not a Property",
                    node="ObjectSchema",
                    expected="Property",
                )
            if prop.name != name:
                raise SchemaContractError(
                    f"ObjectSchema key '{name}' does not match property name '{prop.name}'",
                    node="ObjectSchema",
                )
        if self.ref is not None and props:
            raise SchemaContractError(
                f"Reference marker '{self.ref}' cannot have properties",
                node="ObjectSchema",
            )
        object.__setattr__(self, "properties", MappingProxyType(props))

    @classmethod
    def reference(cls, name: str) -> ObjectSchema:
        """Create a reference marker pointing at ``name``."""
        return cls(ref=name)

    @classmethod
    def of(cls, *properties: Property) -> ObjectSchema:
        """Create an object from properties in declaration order."""
        return cls({p.name: p for p in properties})

    @property
    def is_reference(self) -> bool:
        return self.ref is not None

    @property
    def is_empty(self) -> bool:
        return not self.properties

    def __len__(self) -> int:
        return len(self.properties)

    def to_dict(self) -> dict[str, Any]:
        if self.ref is not None:
            return {"type": "object", "ref": self.ref}
        return {
            "type": "object",
            "properties": {name: p.to_dict() for name, p in self.properties.items()},
        }


@dataclass(frozen=True)
class ArraySchema:
    """Array node with exactly one element schema."""

    element: Schema

    def __post_init__(self) -> None:
        if not isinstance(self.element, _SCHEMA_NODES):
            raise SchemaContractError(
                "ArraySchema requires an element schema",
                node="ArraySchema",
                expected="Schema",
            )

    def to_dict(self) -> dict[str, Any]:
        return {"type": "array", "element": self.element.to_dict()}


@dataclass(frozen=True)
class MapSchema:
    """Map node: leaf-kind keys, one value schema."""

    key_kind: PropertyKind
    value: Schema

    def __post_init__(self) -> None:
        if not self.key_kind.is_leaf:
            raise SchemaContractError(
                f"Map keys must be a leaf kind, got '{self.key_kind.value}'",
                node="MapSchema",
                expected="leaf kind",
            )
        if not isinstance(self.value, _SCHEMA_NODES):
            raise SchemaContractError(
                "MapSchema requires a value schema",
                node="MapSchema",
                expected="Schema",
            )

    def to_dict(self) -> dict[str, Any]:
        return {"type": "map", "key": self.key_kind.value, "value": self.value.to_dict()}


@dataclass(frozen=True)
class Property:
    """A named field within an object.

    Attributes:
        name: Field name as it appears in the payload
        kind: Kind of the field's (substituted) type
        value: Nested schema of the field
        required: Whether a "must be present" marker was declared
        description: Declared description, if any
        example: Declared example value, if any
        constraints: Constraint strings such as ``MIN_LENGTH:3``
    """

    name: str
    kind: PropertyKind
    value: Schema
    required: bool = False
    description: Optional[str] = None
    example: Any = None
    constraints: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not self.name:
            raise SchemaContractError("Property name cannot be empty", node="Property")
        if not isinstance(self.value, _SCHEMA_NODES):
            raise SchemaContractError(
                f"Property '{self.name}' requires a value schema",
                node="Property",
                expected="Schema",
            )
        object.__setattr__(self, "constraints", frozenset(self.constraints))

    @property
    def element(self) -> Schema:
        """Element schema of an array property.

        Raises:
            SchemaContractError: If the property does not hold an array
        """
        if not isinstance(self.value, ArraySchema):
            raise SchemaContractError(
                f"Property '{self.name}' is not an array",
                node=type(self.value).__name__,
                expected="ArraySchema",
            )
        return self.value.element

    @property
    def fields(self) -> Mapping[str, Property]:
        """Nested properties of an object property.

        Raises:
            SchemaContractError: If the property does not hold an object
        """
        if not isinstance(self.value, ObjectSchema):
            raise SchemaContractError(
                f"Property '{self.name}' is not an object",
                node=type(self.value).__name__,
                expected="ObjectSchema",
            )
        return self.value.properties

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": "property",
            "name": self.name,
            "kind": self.kind.value,
            "value": self.value.to_dict(),
        }
        if self.required:
            result["required"] = True
        if self.description is not None:
            result["description"] = self.description
        if self.example is not None:
            result["example"] = self.example
        if self.constraints:
            result["constraints"] = sorted(self.constraints)
        return result


Schema = Union[ValueSchema, ObjectSchema, ArraySchema, MapSchema, Property]

_SCHEMA_NODES = (ValueSchema, ObjectSchema, ArraySchema, MapSchema, Property)
