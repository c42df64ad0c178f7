from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import types
import typing

from spearmint.exceptions import UnresolvableTypeError

NoneType = type(None)

TypeVarMap = typing.Mapping[object, "TypeDescriptor"]


class TypeDescriptor:
    """Structural identity of a generation target."""

    __slots__ = ()

    @property
    def origin(self) -> object:
        raise NotImplementedError


@dataclasses.dataclass(frozen=True, slots=True)
class Named(TypeDescriptor):
    type: type

    @property
    def origin(self) -> type:
        return self.type

    def __str__(self) -> str:
        return _type_name(self.type)


@dataclasses.dataclass(frozen=True, slots=True)
class Parameterized(TypeDescriptor):
    type: object
    args: tuple[typing.Any, ...]

    @property
    def origin(self) -> object:
        return self.type

    def __str__(self) -> str:
        if self.type is typing.Union:
            return " | ".join(str(arg) for arg in self.args)
        if self.type is typing.Literal:
            return "Literal[{}]".format(", ".join(repr(arg) for arg in self.args))
        return "{}[{}]".format(_type_name(self.type), ", ".join(str(arg) for arg in self.args))


@dataclasses.dataclass(frozen=True, slots=True)
class ArrayOf(TypeDescriptor):
    element: TypeDescriptor

    @property
    def origin(self) -> type:
        return tuple

    def __str__(self) -> str:
        return f"tuple[{self.element}, ...]"


@dataclasses.dataclass(frozen=True, slots=True)
class Unbound(TypeDescriptor):
    variable: object = typing.Any

    @property
    def origin(self) -> None:
        return None

    def __str__(self) -> str:
        if isinstance(self.variable, (typing.TypeVar, typing.ParamSpec, typing.TypeVarTuple)):
            return f"~{self.variable.__name__}"
        if self.variable is inspect.Parameter.empty:
            return "?"
        return _type_name(self.variable)


def _type_name(tp: object) -> str:
    if tp is typing.Any:
        return "Any"
    return typing.cast(str, getattr(tp, "__name__", None) or repr(tp))


_QUALIFIERS = (typing.Annotated, typing.ClassVar, typing.Final, typing.Required, typing.NotRequired)


def _is_unbound_marker(annotation: object) -> bool:
    return annotation is typing.Any or annotation is object or annotation is inspect.Parameter.empty


def describe(annotation: object, typevars: TypeVarMap | None = None) -> TypeDescriptor:
    if isinstance(annotation, TypeDescriptor):
        return annotation

    if annotation is None or annotation is NoneType:
        return Named(NoneType)

    if _is_unbound_marker(annotation):
        return Unbound(annotation)

    if isinstance(annotation, (typing.TypeVar, typing.ParamSpec, typing.TypeVarTuple)):
        if typevars and annotation in typevars:
            return typevars[annotation]
        return Unbound(annotation)

    if isinstance(annotation, dataclasses.InitVar):
        return describe(annotation.type, typevars)

    if isinstance(annotation, typing.NewType):
        return describe(annotation.__supertype__, typevars)

    if isinstance(annotation, typing.TypeAliasType):
        return describe(annotation.__value__, typevars)

    if isinstance(annotation, (str, typing.ForwardRef)):
        raise UnresolvableTypeError(f"Unresolved forward reference {annotation!r}.")

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin in _QUALIFIERS:
        return describe(args[0], typevars) if args else Unbound()

    if origin is typing.Literal:
        return Parameterized(typing.Literal, args)

    if origin is typing.Union or origin is types.UnionType:
        return Parameterized(typing.Union, tuple(describe(arg, typevars) for arg in args))

    if origin is not None and not args:
        return describe(origin, typevars)

    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return ArrayOf(describe(args[0], typevars))

    if origin is collections.abc.Callable:
        return Parameterized(collections.abc.Callable, (describe(args[-1], typevars),))

    if origin is not None:
        return Parameterized(origin, tuple(describe(arg, typevars) for arg in args))

    if isinstance(annotation, type):
        return Named(annotation)

    raise UnresolvableTypeError(f"Unsupported type annotation {annotation!r}.")


def origin_class(descriptor: TypeDescriptor) -> type | None:
    origin = descriptor.origin
    return origin if isinstance(origin, type) else None
