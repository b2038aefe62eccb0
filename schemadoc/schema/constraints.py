"""
Constraint vocabulary for schema properties.

Constraints are plain strings attached to a Property, e.g. ``NOT_NULL``,
``MIN_LENGTH:3`` or ``ALLOWED_VALUES:[A, B, C]``. They are derived from
field markers (our own and the ``annotated_types`` markers pydantic emits).
"""

from __future__ import annotations

from typing import Any, Iterable

import annotated_types

from .markers import Max, Min, NotBlank, NotEmpty, NotNull, Pattern, Size

NOT_NULL = "NOT_NULL"
NOT_BLANK = "NOT_BLANK"
NOT_EMPTY = "NOT_EMPTY"

ALLOWED_VALUES = "ALLOWED_VALUES"
MIN_LENGTH = "MIN_LENGTH"
MAX_LENGTH = "MAX_LENGTH"
MIN_VALUE = "MIN_VALUE"
MAX_VALUE = "MAX_VALUE"
EXCLUSIVE_MIN_VALUE = "EXCLUSIVE_MIN_VALUE"
EXCLUSIVE_MAX_VALUE = "EXCLUSIVE_MAX_VALUE"
REGEX = "REGEX"

_REQUIRED_MARKERS = (NotNull, NotBlank, NotEmpty)


def _format(name: str, value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{name}:{value}"


def min_length(value: int) -> str:
    return _format(MIN_LENGTH, value)


def max_length(value: int) -> str:
    return _format(MAX_LENGTH, value)


def min_value(value: Any) -> str:
    return _format(MIN_VALUE, value)


def max_value(value: Any) -> str:
    return _format(MAX_VALUE, value)


def regex(pattern: str) -> str:
    return _format(REGEX, pattern)


def allowed_values(values: Iterable[str]) -> str:
    """Format the allowed-values constraint, preserving declaration order."""
    return f"{ALLOWED_VALUES}:[{', '.join(values)}]"


def resolve_constraints(markers: Iterable[Any]) -> set[str]:
    """Extract constraint strings from field markers.

    Unknown markers are ignored.

    Args:
        markers: Marker objects declared on a field

    Returns:
        Set of formatted constraint strings
    """
    result: set[str] = set()

    for marker in markers:
        if isinstance(marker, NotNull):
            result.add(NOT_NULL)
        elif isinstance(marker, NotBlank):
            result.add(NOT_BLANK)
        elif isinstance(marker, NotEmpty):
            result.add(NOT_EMPTY)
        elif isinstance(marker, Size):
            if marker.min > 0:
                result.add(min_length(marker.min))
            if marker.max is not None:
                result.add(max_length(marker.max))
        elif isinstance(marker, Min):
            result.add(min_value(marker.value))
        elif isinstance(marker, Max):
            result.add(max_value(marker.value))
        elif isinstance(marker, Pattern):
            result.add(regex(marker.regexp))
        # annotated_types markers, as produced by pydantic Field(...)
        elif isinstance(marker, annotated_types.Len):
            if marker.min_length > 0:
                result.add(min_length(marker.min_length))
            if marker.max_length is not None:
                result.add(max_length(marker.max_length))
        elif isinstance(marker, annotated_types.MinLen):
            if marker.min_length > 0:
                result.add(min_length(marker.min_length))
        elif isinstance(marker, annotated_types.MaxLen):
            result.add(max_length(marker.max_length))
        elif isinstance(marker, annotated_types.Ge):
            result.add(min_value(marker.ge))
        elif isinstance(marker, annotated_types.Le):
            result.add(max_value(marker.le))
        elif isinstance(marker, annotated_types.Gt):
            result.add(_format(EXCLUSIVE_MIN_VALUE, marker.gt))
        elif isinstance(marker, annotated_types.Lt):
            result.add(_format(EXCLUSIVE_MAX_VALUE, marker.lt))
        elif isinstance(getattr(marker, "pattern", None), str):
            result.add(regex(marker.pattern))

    return result


def is_required(markers: Iterable[Any]) -> bool:
    """Whether the markers declare that the value must be present."""
    return any(isinstance(m, _REQUIRED_MARKERS) for m in markers)
