from __future__ import annotations

import abc
import collections.abc
import dataclasses
import datetime
import enum
import typing

from spearmint import Transient


@dataclasses.dataclass
class Profile:
    id: int
    bio: str
    website: str


@dataclasses.dataclass
class User:
    id: int
    name: str
    birthdate: datetime.date
    active: bool
    country: str
    address: str
    profile: Profile


class Point:
    x: int
    y: int


@dataclasses.dataclass
class Node:
    value: int
    next: Node


@dataclasses.dataclass
class Parent:
    name: str
    child: Child


@dataclasses.dataclass
class Child:
    name: str
    parent: Parent


@dataclasses.dataclass
class LinkedNode:
    value: int
    next: LinkedNode | None = None


class Color(enum.Enum):
    RED = "red"
    GREEN = "green"
    BLUE = "blue"


class Empty(enum.Enum):
    pass


class Account:
    balance: int
    cache: typing.Annotated[dict[str, int], Transient]
    registry: typing.ClassVar[dict[str, int]] = {}


@dataclasses.dataclass
class Session:
    token: str
    cache: typing.Annotated[dict[str, int], Transient] = dataclasses.field(default_factory=dict)


class Guarded:
    """Setter always fails; the field is still assignable."""

    value: int

    def set_value(self, value: int) -> None:
        raise RuntimeError("setter is disabled")


class Locked:
    """Neither the setter nor direct assignment work."""

    value: int

    def set_value(self, value: int) -> None:
        raise RuntimeError("setter is disabled")

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{name} is read-only")


class Thermostat:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self._target = 0.0

    @property
    def target(self) -> float:
        return self._target

    @target.setter
    def target(self, value: float) -> None:
        self.calls.append("target")
        self._target = value

    def set_mode(self, mode: Color) -> None:
        self.calls.append("mode")
        self.mode = mode


class Exploding:
    def __init__(self, value: int) -> None:
        raise ValueError("cannot build")


class Shape(abc.ABC):
    @abc.abstractmethod
    def area(self) -> float: ...

    def name(self) -> str:
        return "shape"


class Square(Shape):
    def __init__(self, side: int) -> None:
        self.side = side

    def area(self) -> float:
        return float(self.side**2)


class Circle(Shape):
    radius: float

    def area(self) -> float:
        return 3.14 * self.radius**2


class Repository(typing.Protocol):
    name: str

    def count(self) -> int: ...

    def find(self, key: str) -> User: ...


T = typing.TypeVar("T")


@dataclasses.dataclass
class Box(typing.Generic[T]):
    item: T
    items: list[T]


class IntBox(Box[int]):
    pass


@dataclasses.dataclass
class Inventory:
    tags: set[str]
    counts: dict[str, int]
    matrix: tuple[int, ...]
    pair: tuple[str, int]
    colors: list[Color]


@dataclasses.dataclass
class Service:
    repository: Repository
    shape: Shape


@dataclasses.dataclass
class Positional:
    label: str

    def __init__(self, label: str, /) -> None:
        self.label = label


class Bag(collections.abc.Collection[int]):
    pass


class ListBag(list[int], Bag):
    pass
