"""
Schema view rendering.

Pure functions over a resolved schema tree. Dispatch is an isinstance chain
over the five node types; an unknown node is a contract violation.

Example:
    >>> render_model(ObjectSchema.of(Property("tags", PropertyKind.ARRAY,
    ...     ArraySchema(ValueSchema(PropertyKind.STRING)))))
    {'tags': ['string']}
"""

from __future__ import annotations

from typing import Any, Optional

from ..errors import SchemaContractError
from ..schema.types import ArraySchema, MapSchema, ObjectSchema, Property, PropertyKind, Schema, ValueSchema

MODEL_KEY = "model"
EXAMPLE_MODEL_KEY = "example_model"
METADATA_KEY = "metadata"

REF_KEY = "$ref"
ARRAY_MARK = "[0]"
MAP_MARK = "{}"

EXAMPLE_DEFAULTS: dict[PropertyKind, Any] = {
    PropertyKind.STRING: "hello",
    PropertyKind.NUMBER: 123,
    PropertyKind.BOOLEAN: True,
    PropertyKind.UUID: "550e8400-e29b-41d4-a716-446655440000",
    PropertyKind.DATE_TIME: "2025-01-29T10:15:30Z",
    PropertyKind.DATE: "2025-01-29",
    PropertyKind.TIME: "10:15:30",
    PropertyKind.DURATION: "PT15M",
    PropertyKind.PERIOD: "P1D",
    PropertyKind.URI: "https://example.com",
}

_FALLBACK_MAP_KEY = "key"


def _unknown(schema: Any) -> SchemaContractError:
    return SchemaContractError(
        f"Cannot render node of type {type(schema).__name__}",
        node=type(schema).__name__,
        expected="Schema",
    )


def _single(item: Any) -> list[Any]:
    return [] if item is None else [item]


def render(schema: Optional[Schema], include_metadata: bool = False) -> dict[str, Any]:
    """Render all views of a schema tree.

    Args:
        schema: Root node; None renders to an empty dict
        include_metadata: Add the metadata view

    Returns:
        Dict with "model", "example_model" and optionally "metadata"
    """
    if schema is None:
        return {}
    result: dict[str, Any] = {
        MODEL_KEY: render_model(schema),
        EXAMPLE_MODEL_KEY: render_example(schema),
    }
    if include_metadata:
        result[METADATA_KEY] = build_metadata(schema)
    return result


def render_request(schema: Optional[Schema]) -> dict[str, Any]:
    """Request bodies are documented with metadata."""
    return render(schema, include_metadata=True)


def render_response(schema: Optional[Schema]) -> dict[str, Any]:
    return render(schema, include_metadata=False)


def render_model(schema: Schema) -> Any:
    """Structural skeleton: kind names at leaves, one element per array."""
    if isinstance(schema, Property):
        return render_model(schema.value)
    if isinstance(schema, ValueSchema):
        return schema.kind.display_name
    if isinstance(schema, ObjectSchema):
        if schema.is_reference:
            return {REF_KEY: schema.ref}
        return {name: render_model(prop) for name, prop in schema.properties.items()}
    if isinstance(schema, ArraySchema):
        return _single(render_model(schema.element))
    if isinstance(schema, MapSchema):
        return {schema.key_kind.display_name: render_model(schema.value)}
    raise _unknown(schema)


def render_example(schema: Schema) -> Any:
    """Example payload with the same shape as the model.

    Declared examples win over defaults. Binary and null leaves have no
    default and render as None; arrays of them render empty.
    """
    if isinstance(schema, Property):
        if schema.example is not None:
            return schema.example
        return render_example(schema.value)
    if isinstance(schema, ValueSchema):
        if schema.kind is PropertyKind.ENUM:
            return schema.values[0] if schema.values else None
        return EXAMPLE_DEFAULTS.get(schema.kind)
    if isinstance(schema, ObjectSchema):
        if schema.is_reference:
            return {}
        return {name: render_example(prop) for name, prop in schema.properties.items()}
    if isinstance(schema, ArraySchema):
        return _single(render_example(schema.element))
    if isinstance(schema, MapSchema):
        return {_sample_key(schema.key_kind): render_example(schema.value)}
    raise _unknown(schema)


def _sample_key(kind: PropertyKind) -> str:
    sample = EXAMPLE_DEFAULTS.get(kind)
    return _FALLBACK_MAP_KEY if sample is None else str(sample)


def build_metadata(schema: Schema) -> dict[str, dict[str, Any]]:
    """Flat field path to metadata map for leaf fields.

    Paths are dot-joined field names; array elements append ``[0]`` and map
    values append ``{}``. A leaf reached through arrays or maps is reported
    at its element path with the metadata of the property that holds it.

    Example:
        >>> build_metadata(order_schema)
        {'id': {...}, 'items[0].sku': {...}, 'tags[0]': {...}}
    """
    out: dict[str, dict[str, Any]] = {}
    _collect(schema, "", None, out)
    return out


def _entry(prop: Property) -> dict[str, Any]:
    return {
        "description": prop.description,
        "required": prop.required,
        "constraints": sorted(prop.constraints),
    }


def _collect(schema: Schema, path: str, owner: Optional[Property], out: dict[str, dict[str, Any]]) -> None:
    if isinstance(schema, Property):
        path = f"{path}.{schema.name}" if path else schema.name
        if isinstance(schema.value, ValueSchema):
            out[path] = _entry(schema)
        else:
            _collect(schema.value, path, schema, out)
    elif isinstance(schema, ValueSchema):
        if owner is not None and path:
            out[path] = _entry(owner)
    elif isinstance(schema, ObjectSchema):
        for prop in schema.properties.values():
            _collect(prop, path, None, out)
    elif isinstance(schema, ArraySchema):
        _collect(schema.element, path + ARRAY_MARK, owner, out)
    elif isinstance(schema, MapSchema):
        _collect(schema.value, path + MAP_MARK, owner, out)
    else:
        raise _unknown(schema)
