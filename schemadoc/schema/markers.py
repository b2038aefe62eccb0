"""
Field markers for schemadoc.

Markers are attached to fields through ``typing.Annotated`` and are read by
the field provider while a schema is resolved. They work the same on
dataclasses, pydantic models and plain annotated classes.

Example:
    >>> from typing import Annotated
    >>> @dataclass
    ... class CreateUser:
    ...     username: Annotated[str, NotBlank(), Size(min=3, max=10)]
    ...     email: Annotated[str, Description("Primary contact address")]
    ...     nickname: Annotated[str, FieldInfo(description="Shown in UI", example="ace")]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Description:
    """Explicit description of a field. Wins over FieldInfo.description."""

    value: str


@dataclass(frozen=True)
class FieldInfo:
    """Documentation metadata for a field.

    Attributes:
        description: Used when no Description marker is present
        example: Example value rendered in the example payload
    """

    description: str = ""
    example: Any = None


@dataclass(frozen=True)
class NotNull:
    """The field must be present."""


@dataclass(frozen=True)
class NotBlank:
    """The field must be present and contain non-whitespace text."""


@dataclass(frozen=True)
class NotEmpty:
    """The field must be present and non-empty."""


@dataclass(frozen=True)
class Size:
    """Length bounds. ``min=0`` and ``max=None`` mean unbounded."""

    min: int = 0
    max: Optional[int] = None


@dataclass(frozen=True)
class Min:
    """Lower numeric bound (inclusive)."""

    value: float


@dataclass(frozen=True)
class Max:
    """Upper numeric bound (inclusive)."""

    value: float


@dataclass(frozen=True)
class Pattern:
    """Regular expression the value must match."""

    regexp: str


@dataclass(frozen=True)
class JsonIgnore:
    """Exclude the field from the schema."""


@dataclass(frozen=True)
class JsonName:
    """Payload name of the field when it differs from the attribute name."""

    value: str
