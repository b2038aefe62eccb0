"""Dataclass and plain-class fixtures."""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, Generic, Optional, TypeVar
from uuid import UUID

from schemadoc.schema.markers import (
    Description,
    FieldInfo,
    JsonIgnore,
    JsonName,
    Max,
    Min,
    NotBlank,
    NotNull,
    Pattern,
    Size,
)
from tests.external import GeoPoint

T = TypeVar("T")
U = TypeVar("U")


class Status(Enum):
    A = "a"
    B = "b"
    C = "c"


@dataclass
class Tag:
    name: str


@dataclass
class Address:
    street: Annotated[str, NotBlank(), Description("Street and number")]
    city: str
    zip_code: Annotated[str, Pattern(r"^\d{5}$")]
    location: Optional[GeoPoint] = None


@dataclass
class Node:
    id: str
    children: list[Node] = field(default_factory=list)


@dataclass
class Category:
    name: str
    subcategories: dict[str, Category] = field(default_factory=dict)


@dataclass
class Author:
    name: str
    books: list[Book] = field(default_factory=list)


@dataclass
class Book:
    title: str
    author: Optional[Author] = None


@dataclass
class Box(Generic[T]):
    item: T
    label: str = ""


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int = 0


@dataclass
class AddressPage(Page[Address]):
    pass


@dataclass
class Wrapper(Generic[U]):
    box: Box[U]
    extras: dict[str, U] = field(default_factory=dict)


@dataclass
class Tree(Generic[T]):
    value: T
    children: list[Tree[T]] = field(default_factory=list)


@dataclass
class Nested(Generic[T]):
    value: T
    child: Optional[Nested[list[T]]] = None


@dataclass
class Order:
    id: UUID
    boxes: list[Box[Address]]
    first: Box[Tag]
    second: Box[Tag]


@dataclass
class Price:
    amount: Annotated[Decimal, FieldInfo(description="Unit price", example=Decimal("9.99"))]
    currency: str = "EUR"


@dataclass
class CreateUser:
    username: Annotated[
        str,
        NotNull(),
        Size(min=3, max=10),
        FieldInfo(description="Login name", example="alice"),
    ]
    email: Annotated[str, Description("Primary contact address"), FieldInfo(description="Unused")]
    status: Status
    age: Annotated[int, Min(18), Max(130)]
    tags: list[str]
    addresses: dict[str, Address]
    nickname: Optional[str] = field(
        default=None, metadata={"description": "Shown in the UI", "example": "ace"}
    )
    password: Annotated[str, JsonIgnore()] = ""
    created_at: Annotated[Optional[datetime], JsonName("createdAt")] = None
    _secret: str = ""
    kind: ClassVar[str] = "user"
    invite_code: InitVar[Optional[str]] = None

    def __post_init__(self, invite_code: Optional[str]) -> None:
        pass


class Entity:
    id: UUID
    created: date


class Customer(Entity):
    name: str
    id: Annotated[UUID, NotNull()]
    payload: Any
    meta: dict
