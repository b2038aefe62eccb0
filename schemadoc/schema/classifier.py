"""
Type classification for schemadoc.

Maps a Python type hint to the PropertyKind used in the schema tree.
Classification is total and pure: every input yields a defined kind, and
anything unrecognized is an OBJECT.

Invariants:
    - Annotated, Optional and NewType wrappers are removed before classifying
    - bool is checked before numbers (bool subclasses int)
    - Enums are checked before numbers and strings (IntEnum, StrEnum)
    - datetime is checked before date (datetime subclasses date)
"""

from __future__ import annotations

import io
import numbers
import types
import typing
from collections import abc
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Annotated, Literal, Mapping, Optional, TypeVar, Union, get_args, get_origin
from urllib.parse import ParseResult, SplitResult
from uuid import UUID

from pydantic import AnyUrl

from .types import PropertyKind

_NONE_TYPE = type(None)
_UNION_TYPES = (Union, types.UnionType)

_BINARY_TYPES = (bytes, bytearray, memoryview, io.IOBase, typing.IO)
_SEQUENCE_TYPES = (list, tuple, set, frozenset, abc.Sequence, abc.Set)
# Abstract iterables matched by identity; their subclass hooks would also
# match any class defining __iter__ (pydantic models among them).
_ABSTRACT_ITERABLES = (abc.Collection, abc.Iterable, abc.Iterator, abc.Generator)
_URI_TYPES = (AnyUrl, ParseResult, SplitResult)


def unwrap(tp: Any) -> Any:
    """Strip Annotated, Optional and NewType wrappers.

    ``Optional[X]`` and ``X | None`` become ``X``; unions with more than one
    non-None member are returned unchanged.
    """
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp = get_args(tp)[0]
            continue
        if origin in _UNION_TYPES:
            members = [a for a in get_args(tp) if a is not _NONE_TYPE]
            if len(members) == 1:
                tp = members[0]
                continue
            return tp
        supertype = getattr(tp, "__supertype__", None)
        if supertype is not None:
            tp = supertype
            continue
        return tp


def raw_class(tp: Any) -> Optional[type]:
    """Return the runtime class behind a type hint, or None if there is none."""
    origin = get_origin(tp)
    if origin is not None:
        return origin if isinstance(origin, type) and origin not in _UNION_TYPES else None
    if isinstance(tp, type):
        return tp
    return None


def enum_values(tp: Any) -> tuple[str, ...]:
    """Constant names of an Enum, or the values of a Literal."""
    tp = unwrap(tp)
    if get_origin(tp) is Literal:
        return tuple(str(arg) for arg in get_args(tp))
    raw = raw_class(tp)
    if raw is not None and issubclass(raw, Enum):
        return tuple(member.name for member in raw)
    return ()


def classify(
    tp: Any,
    extra_kinds: Optional[Mapping[type, PropertyKind]] = None,
) -> PropertyKind:
    """Determine the PropertyKind of a type hint.

    Args:
        tp: Type hint to inspect (already substituted through generic bindings)
        extra_kinds: Additional class to kind mappings, checked first

    Returns:
        The inferred PropertyKind; OBJECT for anything unrecognized
    """
    tp = unwrap(tp)

    if tp is None or tp is _NONE_TYPE:
        return PropertyKind.NULL
    if tp is Any or isinstance(tp, TypeVar):
        return PropertyKind.OBJECT

    origin = get_origin(tp)
    if origin is Literal:
        return PropertyKind.ENUM
    if origin in _UNION_TYPES:
        return PropertyKind.OBJECT

    raw = raw_class(tp)
    if raw is None:
        return PropertyKind.OBJECT

    if extra_kinds:
        for cls, kind in extra_kinds.items():
            if issubclass(raw, cls):
                return kind

    if issubclass(raw, bool):
        return PropertyKind.BOOLEAN
    if issubclass(raw, Enum):
        return PropertyKind.ENUM
    if issubclass(raw, numbers.Number):
        return PropertyKind.NUMBER
    if issubclass(raw, str):
        return PropertyKind.STRING
    if issubclass(raw, _BINARY_TYPES):
        return PropertyKind.BINARY

    if raw in _ABSTRACT_ITERABLES or issubclass(raw, _SEQUENCE_TYPES):
        return PropertyKind.ARRAY
    if issubclass(raw, abc.Mapping):
        return PropertyKind.MAP

    if issubclass(raw, UUID):
        return PropertyKind.UUID
    if issubclass(raw, datetime):
        return PropertyKind.DATE_TIME
    if issubclass(raw, date):
        return PropertyKind.DATE
    if issubclass(raw, time):
        return PropertyKind.TIME
    if issubclass(raw, timedelta):
        return PropertyKind.DURATION
    if issubclass(raw, _URI_TYPES):
        return PropertyKind.URI

    return PropertyKind.OBJECT
