"""
Unit tests for generic bindings and type keys.

Tests cover:
- Positional binding of parameterized types
- Bindings inherited from generic base classes
- Pydantic parametrized models
- Substitution, merging and scoping
- Stable registry keys
"""

from typing import Any, Optional, TypeVar

import pytest

from schemadoc.schema.generics import (
    GenericBindingContext,
    element_type,
    map_types,
    top_instantiation,
    type_key,
    type_size,
)
from tests.domain.api import Contact, Envelope
from tests.domain.models import Address, AddressPage, Box, Page, Tag, Tree, Wrapper

T = Box.__parameters__[0]
P = Page.__parameters__[0]
W = Wrapper.__parameters__[0]

K = TypeVar("K")
Bounded = TypeVar("Bounded", bound=str)


class TestForType:
    """Tests for GenericBindingContext.for_type."""

    def test_positional_binding(self):
        ctx = GenericBindingContext.for_type(Box[Address])

        assert ctx.resolve(T) is Address

    def test_raw_type_has_no_bindings(self):
        assert len(GenericBindingContext.for_type(Address)) == 0

    def test_unparameterized_generic(self):
        """A raw generic class binds nothing; its parameters resolve to Any."""
        ctx = GenericBindingContext.for_type(Box)

        assert ctx.resolve(T) is Any

    def test_base_class_binding(self):
        """Subclassing Page[Address] binds Page's parameter."""
        ctx = GenericBindingContext.for_type(AddressPage)

        assert ctx.resolve(P) is Address

    def test_pydantic_parametrized_model(self):
        ctx = GenericBindingContext.for_type(Envelope[Contact])
        param = Envelope.__pydantic_generic_metadata__["parameters"][0]

        assert ctx.resolve(param) is Contact


class TestResolve:
    """Tests for resolve and substitute."""

    def test_unbound_uses_declared_bound(self):
        ctx = GenericBindingContext()

        assert ctx.resolve(Bounded) is str
        assert ctx.resolve(K) is Any

    def test_non_typevar_unchanged(self):
        assert GenericBindingContext().resolve(int) is int

    def test_substitute_nested(self):
        ctx = GenericBindingContext({T: Address})

        assert ctx.substitute(list[T]) == list[Address]
        assert ctx.substitute(dict[str, Optional[T]]) == dict[str, Optional[Address]]
        assert ctx.substitute(Box[T]) == Box[Address]

    def test_substitute_plain_type(self):
        assert GenericBindingContext({T: Address}).substitute(Tag) is Tag

    def test_substitute_unbound_defaults_to_any(self):
        assert GenericBindingContext().substitute(list[T]) == list[Any]

    def test_bindings_are_read_only(self):
        ctx = GenericBindingContext({T: Address})

        with pytest.raises(TypeError):
            ctx.bindings[T] = Tag


class TestMerge:
    """Tests for scoping."""

    def test_child_wins(self):
        parent = GenericBindingContext({T: Address, W: int})
        child = GenericBindingContext({T: Tag})

        merged = parent.merge(child)

        assert merged.resolve(T) is Tag
        assert merged.resolve(W) is int

    def test_merge_leaves_parent_unchanged(self):
        parent = GenericBindingContext({T: Address})
        parent.merge(GenericBindingContext({T: Tag}))

        assert parent.resolve(T) is Address


class TestTypeKey:
    """Tests for type_key."""

    def test_plain_class(self):
        assert type_key(Address) == "Address"

    def test_distinct_instantiations(self):
        """Box[Address] and Box[Tag] never collide."""
        assert type_key(Box[Address]) == "Box.Address"
        assert type_key(Box[Tag]) == "Box.Tag"

    def test_nested_arguments(self):
        assert type_key(dict[str, list[Tag]]) == "dict.str.list.Tag"

    def test_pydantic_parametrized(self):
        assert type_key(Envelope[Contact]) == "Envelope.Contact"

    def test_optional(self):
        assert type_key(Optional[Address]) == "Union.Address.None"

    def test_special_forms(self):
        assert type_key(Any) == "Any"
        assert type_key(None) == "None"
        assert type_key(T) == "T"


class TestContainerArguments:
    """Tests for element_type and map_types."""

    def test_element_type(self):
        assert element_type(list[Tag]) is Tag
        assert element_type(list) is Any

    def test_map_types(self):
        assert map_types(dict[int, Tag]) == (int, Tag)
        assert map_types(dict) == (str, Any)


class TestTopInstantiation:
    """Tests for top_instantiation and type_size."""

    def test_raw_generic_gets_any(self):
        assert top_instantiation(Tree) == Tree[Any]
        assert type_key(top_instantiation(Box)) == "Box.Any"

    def test_other_types_unchanged(self):
        assert top_instantiation(Address) is Address
        assert top_instantiation(Box[Tag]) == Box[Tag]
        assert top_instantiation(list) is list
        assert top_instantiation(AddressPage) is AddressPage

    def test_pydantic_raw_model(self):
        assert type_key(top_instantiation(Envelope)) == "Envelope.Any"

    def test_type_size(self):
        assert type_size(int) == 1
        assert type_size(Box[list[int]]) == 3
        assert type_size(Envelope[Contact]) == 2
