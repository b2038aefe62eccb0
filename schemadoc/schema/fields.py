"""
Field discovery for schemadoc.

The resolver never reflects on classes directly. It asks a FieldProvider for
FieldDescriptors and a boundary predicate for whether a class may be
expanded. ReflectiveFieldProvider is the default provider; it understands
pydantic models, dataclasses and plain annotated classes.

Invariants:
    - Inherited fields come first, in base-class declaration order
    - A field redeclared by a subclass keeps its base position, with the
      subclass's type and markers
    - ClassVar and InitVar pseudo-fields are never reported
    - JsonIgnore removes a field; JsonName renames it

How to change safely:
    - Any new provider must return fields in payload order
    - Keep descriptor construction free of schema logic; markers are
      interpreted by the resolver
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Iterable, Optional, Protocol, get_origin, get_type_hints

from pydantic import BaseModel

from .classifier import raw_class, unwrap
from .generics import generic_origin_and_args
from .markers import JsonIgnore, JsonName

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDescriptor:
    """One declared field of a class.

    Attributes:
        name: Payload name (after JsonName or a pydantic alias)
        declared_type: Field type with the outer Annotated layer removed
        markers: Metadata objects declared with the type
        owner: Class that declared the field
        description: Native description (pydantic Field or dataclass metadata)
        example: Native example (pydantic Field or dataclass metadata)
    """

    name: str
    declared_type: Any
    markers: tuple[Any, ...] = ()
    owner: Optional[type] = None
    description: Optional[str] = None
    example: Any = None


class FieldProvider(Protocol):
    """Source of field descriptors for expandable classes."""

    def fields_of(self, tp: Any) -> list[FieldDescriptor]: ...


def in_modules(module: str, prefixes: Iterable[str]) -> bool:
    """Whether ``module`` is one of ``prefixes`` or a submodule of one."""
    return any(module == p or module.startswith(p + ".") for p in prefixes)


def _class_of(tp: Any) -> Optional[type]:
    tp = unwrap(tp)
    origin, _ = generic_origin_and_args(tp)
    return origin or raw_class(tp)


def _split_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(hint) is Annotated:
        return hint.__origin__, tuple(hint.__metadata__)
    return hint, ()


def _is_pseudo_field(hint: Any) -> bool:
    if hint is ClassVar or get_origin(hint) is ClassVar:
        return True
    return hint is dataclasses.InitVar or isinstance(hint, dataclasses.InitVar)


def _rename(name: str, markers: tuple[Any, ...]) -> str:
    for marker in markers:
        if isinstance(marker, JsonName):
            return marker.value
    return name


def _ignored(markers: tuple[Any, ...]) -> bool:
    return any(isinstance(m, JsonIgnore) for m in markers)


def _evaluate_each(klass: type, annotations: dict[str, Any]) -> dict[str, Any]:
    """Evaluate a class's own annotations one at a time.

    An unresolvable forward reference leaves only its own field as a raw
    string; the other fields keep their Annotated markers.
    """
    localns = dict(vars(klass))
    hints: dict[str, Any] = {}
    for name, hint in annotations.items():
        if not isinstance(hint, str):
            hints[name] = hint
            continue
        holder = type(klass.__name__, (), {"__annotations__": {name: hint}, "__module__": klass.__module__})
        try:
            hints[name] = get_type_hints(holder, localns=localns, include_extras=True)[name]
        except Exception as e:
            logger.warning(
                f"Unresolvable annotation {klass.__qualname__}.{name}: {e}; its markers are ignored"
            )
    return hints


class ReflectiveFieldProvider:
    """Field provider backed by runtime type introspection.

    Args:
        platform_modules: Modules whose classes are never walked for fields
        skip_private: Skip attributes whose name starts with an underscore
    """

    def __init__(self, platform_modules: Iterable[str] = (), skip_private: bool = True) -> None:
        self.platform_modules = tuple(platform_modules)
        self.skip_private = skip_private

    def fields_of(self, tp: Any) -> list[FieldDescriptor]:
        """List the payload fields of a class or parameterized class.

        Args:
            tp: Class, pydantic parametrized model, or typing alias

        Returns:
            Descriptors in payload order; empty when ``tp`` has no class
        """
        tp = unwrap(tp)
        if isinstance(tp, type) and issubclass(tp, BaseModel):
            return self._model_fields(tp)

        cls = _class_of(tp)
        if cls is None:
            return []
        if issubclass(cls, BaseModel):
            return self._model_fields(cls)
        return self._annotated_fields(cls)

    def _model_fields(self, model: type[BaseModel]) -> list[FieldDescriptor]:
        result = []
        for name, info in model.model_fields.items():
            markers = tuple(info.metadata)
            if info.exclude is True or _ignored(markers):
                continue
            payload_name = info.serialization_alias or info.alias or name
            result.append(
                FieldDescriptor(
                    name=_rename(payload_name, markers),
                    declared_type=info.annotation,
                    markers=markers,
                    owner=model,
                    description=info.description,
                    example=info.examples[0] if info.examples else None,
                )
            )
        return result

    def _annotated_fields(self, cls: type) -> list[FieldDescriptor]:
        try:
            hints: Optional[dict[str, Any]] = get_type_hints(cls, include_extras=True)
        except Exception as e:
            logger.debug(f"Could not evaluate annotations of {cls.__qualname__} at once: {e}")
            hints = None

        collected: dict[str, FieldDescriptor] = {}
        for klass in reversed(self._lineage(cls)):
            natives = self._native_info(klass)
            annotations = inspect.get_annotations(klass)
            own = hints if hints is not None else _evaluate_each(klass, annotations)
            for name, raw_hint in annotations.items():
                if self.skip_private and name.startswith("_"):
                    continue
                hint = own.get(name, raw_hint)
                if _is_pseudo_field(hint):
                    continue
                declared, markers = _split_annotated(hint)
                if _ignored(markers):
                    collected.pop(name, None)
                    continue
                description, example = natives.get(name, (None, None))
                collected[name] = FieldDescriptor(
                    name=_rename(name, markers),
                    declared_type=declared,
                    markers=markers,
                    owner=klass,
                    description=description,
                    example=example,
                )
        return list(collected.values())

    def _lineage(self, cls: type) -> list[type]:
        """The class and its ancestors up to the first platform class."""
        lineage = []
        for klass in cls.__mro__:
            if klass is object or in_modules(klass.__module__, self.platform_modules):
                break
            lineage.append(klass)
        return lineage

    @staticmethod
    def _native_info(klass: type) -> dict[str, tuple[Optional[str], Any]]:
        if not dataclasses.is_dataclass(klass):
            return {}
        return {
            f.name: (f.metadata.get("description"), f.metadata.get("example"))
            for f in dataclasses.fields(klass)
            if f.metadata
        }


class ModuleBoundary:
    """Decides which classes are documentation-owned and may be expanded.

    A class is expandable when its module is one of ``base_packages`` or a
    submodule of one. With no base packages configured, every class outside
    ``platform_modules`` is expandable.

    Example:
        >>> boundary = ModuleBoundary(["myapp"], ["pydantic"])
        >>> boundary(myapp.models.User)
        True
        >>> boundary(datetime)
        False
    """

    def __init__(self, base_packages: Iterable[str] = (), platform_modules: Iterable[str] = ()) -> None:
        self.base_packages = tuple(base_packages)
        self.platform_modules = tuple(platform_modules)

    def __call__(self, tp: Any) -> bool:
        cls = _class_of(tp)
        if cls is None:
            return False
        module = getattr(cls, "__module__", "") or ""
        if in_modules(module, self.platform_modules):
            return False
        if not self.base_packages:
            return True
        return in_modules(module, self.base_packages)

    def __repr__(self) -> str:
        return f"ModuleBoundary(base_packages={list(self.base_packages)})"
