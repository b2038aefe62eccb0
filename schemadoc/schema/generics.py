"""
Generic type-parameter binding for schemadoc.

A GenericBindingContext maps TypeVars to the concrete types they stand for at
one point of the type graph. Contexts are immutable: descending into an object
derives a child context and merges it over the parent, with child entries
taking precedence (lexical scoping).

Also provides the stable naming used as registry keys and the helpers that
read element/key/value arguments of container types.

Invariants:
    - Contexts are values; nothing here holds shared mutable state
    - An unbound TypeVar resolves to its declared bound, else to Any
    - Substitution never raises; unsubstitutable aliases come back unchanged
    - A raw generic class is the same type as its all-Any instantiation
    - type_key is derived from the type as written, before substitution

Example:
    >>> T = TypeVar("T")
    >>> class Box(Generic[T]): ...
    >>> ctx = GenericBindingContext.for_type(Box[int])
    >>> ctx.resolve(T)
    <class 'int'>
    >>> ctx.substitute(list[T])
    list[int]
    >>> type_key(Box[list[int]])
    'Box.list.int'
"""

from __future__ import annotations

import logging
import types
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from types import MappingProxyType
from typing import (
    Annotated,
    Any,
    Generic,
    Literal,
    Mapping,
    Optional,
    Protocol,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from .classifier import raw_class

logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)
_UNION_TYPES = (Union, types.UnionType)
_PARAMETER_ROOTS = (Generic, Protocol)


def _pydantic_generic_metadata(tp: Any) -> Optional[Mapping[str, Any]]:
    if not isinstance(tp, type):
        return None
    return getattr(tp, "__pydantic_generic_metadata__", None)


def generic_origin_and_args(tp: Any) -> tuple[Optional[type], tuple[Any, ...]]:
    """Split a parameterized type into its raw class and actual arguments.

    Handles typing aliases (``Box[int]``, ``list[str]``) and pydantic
    parametrized models, which are real subclasses carrying their origin in
    ``__pydantic_generic_metadata__``.

    Returns:
        (origin, args), or (None, ()) when the type is not parameterized
    """
    meta = _pydantic_generic_metadata(tp)
    if meta and meta.get("origin") is not None:
        return meta["origin"], tuple(meta.get("args", ()))

    origin = get_origin(tp)
    if isinstance(origin, type) and origin not in _PARAMETER_ROOTS and origin is not types.UnionType:
        return origin, get_args(tp)
    return None, ()


def type_parameters(cls: Any) -> tuple[TypeVar, ...]:
    """Declared type parameters of a generic class, in order."""
    meta = _pydantic_generic_metadata(cls)
    if meta is not None:
        return tuple(meta.get("parameters", ()))
    return tuple(getattr(cls, "__parameters__", ()))


def _free_parameters(tp: Any) -> tuple[TypeVar, ...]:
    """TypeVars still open in an alias such as ``list[T]`` or ``Page[T]``."""
    meta = _pydantic_generic_metadata(tp)
    if meta is not None:
        if meta.get("origin") is None:
            return ()
        return tuple(meta.get("parameters", ()))
    if get_origin(tp) is None:
        return ()
    return tuple(getattr(tp, "__parameters__", ()))


@dataclass(frozen=True)
class GenericBindingContext:
    """Immutable TypeVar to type bindings for one traversal branch.

    Attributes:
        bindings: Mapping from TypeVar to the type bound to it
    """

    bindings: Mapping[TypeVar, Any] = dataclass_field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bindings", MappingProxyType(dict(self.bindings)))

    @classmethod
    def empty(cls) -> GenericBindingContext:
        return cls()

    @classmethod
    def for_type(cls, tp: Any) -> GenericBindingContext:
        """Derive the bindings a type introduces.

        Binds the raw class's declared parameters to the actual arguments by
        position (missing arguments become Any), then walks the class
        hierarchy so parameters of generic base classes are bound as well,
        e.g. ``class AddressPage(Page[Address])`` binds Page's ``T``.

        Args:
            tp: A class or parameterized type

        Returns:
            Context holding only the bindings introduced by ``tp``
        """
        bindings: dict[TypeVar, Any] = {}

        origin, args = generic_origin_and_args(tp)
        if origin is not None:
            for i, param in enumerate(type_parameters(origin)):
                bindings[param] = args[i] if i < len(args) else Any

        raw = origin or raw_class(tp)
        start = tp if isinstance(tp, type) else raw
        if start is not None:
            _bind_hierarchy(start, bindings)

        return cls(bindings)

    def resolve(self, tp: Any) -> Any:
        """Resolve a TypeVar to its bound type; return other types unchanged."""
        if isinstance(tp, TypeVar):
            if tp in self.bindings:
                return self.bindings[tp]
            return tp.__bound__ if tp.__bound__ is not None else Any
        return tp

    def substitute(self, tp: Any) -> Any:
        """Replace every TypeVar inside ``tp`` with its binding.

        ``list[T]`` with ``T -> Address`` becomes ``list[Address]``.
        """
        if isinstance(tp, TypeVar):
            return self.resolve(tp)
        params = _free_parameters(tp)
        if not params:
            return tp
        try:
            return tp[tuple(self.resolve(p) for p in params)]
        except TypeError as e:
            logger.debug(f"Could not substitute parameters of {tp!r}: {e}")
            return tp

    def merge(self, child: GenericBindingContext) -> GenericBindingContext:
        """Overlay ``child`` on this context; child entries win."""
        if not child.bindings:
            return self
        if not self.bindings:
            return child
        return GenericBindingContext({**self.bindings, **child.bindings})

    def __len__(self) -> int:
        return len(self.bindings)


def top_instantiation(tp: Any) -> Any:
    """Parameterize a raw generic class with Any, so ``Tree`` becomes ``Tree[Any]``.

    Other types, including already parameterized ones, come back unchanged.
    """
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return tp
    meta = _pydantic_generic_metadata(tp)
    if meta is not None and meta.get("origin") is not None:
        return tp
    params = type_parameters(tp)
    if not params:
        return tp
    try:
        return tp[tuple(Any for _ in params)]
    except TypeError as e:
        logger.debug(f"Could not instantiate {tp!r} with Any: {e}")
        return tp


def _bind_hierarchy(cls: type, bindings: dict[TypeVar, Any]) -> None:
    """Bind parameters of generic ancestors, most derived first."""
    for klass in getattr(cls, "__mro__", ()):
        if klass is object:
            break
        ancestors = list(klass.__dict__.get("__orig_bases__", ()))
        if klass is not cls:
            ancestors.append(klass)
        for base in ancestors:
            origin, args = generic_origin_and_args(base)
            if origin is None:
                continue
            current = GenericBindingContext(bindings)
            for i, param in enumerate(type_parameters(origin)):
                if param not in bindings:
                    arg = args[i] if i < len(args) else Any
                    bindings[param] = current.substitute(arg)


def type_key(tp: Any) -> str:
    """Stable, collision-free name for a type as written.

    Plain classes use their simple name; parameterized types append the keys
    of their arguments separated by dots, so ``Box[Address]`` and
    ``Box[Contact]`` never collide.

    Example:
        >>> type_key(dict[str, list[Tag]])
        'dict.str.list.Tag'
    """
    if tp is None or tp is _NONE_TYPE:
        return "None"
    if tp is Any:
        return "Any"
    if isinstance(tp, TypeVar):
        return tp.__name__

    origin = get_origin(tp)
    if origin is Annotated:
        return type_key(get_args(tp)[0])
    if origin in _UNION_TYPES:
        return ".".join(["Union", *(type_key(a) for a in get_args(tp))])
    if origin is Literal:
        return ".".join(["Literal", *(str(a) for a in get_args(tp))])

    generic_origin, args = generic_origin_and_args(tp)
    if generic_origin is not None:
        return ".".join([generic_origin.__name__, *(type_key(a) for a in args)])

    if isinstance(tp, type):
        return tp.__name__
    return getattr(tp, "__name__", None) or str(tp)


def element_type(tp: Any) -> Any:
    """Element type of a collection; Any when the collection is raw."""
    args = get_args(tp)
    return args[0] if args else Any


def map_types(tp: Any) -> tuple[Any, Any]:
    """(key type, value type) of a mapping; raw mappings are ``str -> Any``."""
    args = get_args(tp)
    key = args[0] if len(args) > 0 else str
    value = args[1] if len(args) > 1 else Any
    return key, value


def type_size(tp: Any) -> int:
    """Number of nodes in a type expression; ``Box[list[int]]`` has three."""
    _, args = generic_origin_and_args(tp)
    if not args:
        args = get_args(tp)
    return 1 + sum(type_size(a) for a in args if not isinstance(a, (str, int, bool)))
