from __future__ import annotations

import dataclasses
import datetime
import decimal
import fractions
import inspect
import types
import typing
import uuid

from spearmint.descriptors import Parameterized, TypeDescriptor, describe, origin_class
from spearmint.exceptions import ConfigurationError, UnresolvableTypeError


class Transient:
    """Excludes an attribute from population: ``cache: Annotated[dict, Transient]``.

    Transient constructor parameters must have a default, which is left to apply.
    """


PRIMITIVE_DEFAULTS: typing.Mapping[type, typing.Callable[[], object]] = types.MappingProxyType(
    {
        bool: bool,
        int: int,
        float: float,
        complex: complex,
        str: str,
        bytes: bytes,
        bytearray: bytearray,
        decimal.Decimal: decimal.Decimal,
        fractions.Fraction: fractions.Fraction,
        datetime.date: lambda: datetime.date(1970, 1, 1),
        datetime.datetime: lambda: datetime.datetime(1970, 1, 1),
        datetime.time: datetime.time,
        datetime.timedelta: datetime.timedelta,
        uuid.UUID: lambda: uuid.UUID(int=0),
    }
)


def is_primitive(cls: object) -> bool:
    return isinstance(cls, type) and cls in PRIMITIVE_DEFAULTS


def is_protocol(cls: object) -> bool:
    return isinstance(cls, type) and bool(getattr(cls, "_is_protocol", False))


def is_abstract(cls: object) -> bool:
    return isinstance(cls, type) and (inspect.isabstract(cls) or is_protocol(cls))


@dataclasses.dataclass(frozen=True, slots=True)
class Parameter:
    name: str
    descriptor: TypeDescriptor
    positional_only: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class Setter:
    name: str
    field_name: str
    descriptor: TypeDescriptor
    is_property: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class Field:
    name: str
    descriptor: TypeDescriptor


def _is_transient(annotation: object) -> bool:
    if typing.get_origin(annotation) is not typing.Annotated:
        return False
    _, *metadata = typing.get_args(annotation)
    return any(meta is Transient or isinstance(meta, Transient) for meta in metadata)


def _is_excluded(annotation: object) -> bool:
    origin = typing.get_origin(annotation)
    if origin is typing.ClassVar or isinstance(annotation, dataclasses.InitVar):
        return True
    if origin is typing.Annotated:
        return _is_transient(annotation) or _is_excluded(typing.get_args(annotation)[0])
    return False


class Inspector:
    """Lists what structural generation can fill in on a class.

    Every method takes a descriptor so type arguments of generic classes
    are substituted into the reported annotations.
    """

    def __init__(self, setter_prefix: str = "set_") -> None:
        self.setter_prefix = setter_prefix

    def type_arguments(self, descriptor: TypeDescriptor) -> dict[object, TypeDescriptor]:
        cls = origin_class(descriptor)
        typevars: dict[object, TypeDescriptor] = {}
        if cls is None:
            return typevars

        if isinstance(descriptor, Parameterized):
            typevars.update(zip(getattr(cls, "__parameters__", ()), descriptor.args))
        self._collect_base_arguments(cls, typevars)
        return typevars

    def _collect_base_arguments(self, cls: type, typevars: dict[object, TypeDescriptor]) -> None:
        for base in vars(cls).get("__orig_bases__", ()):
            origin = typing.get_origin(base)
            if not isinstance(origin, type) or origin is typing.Generic:
                continue

            for param, arg in zip(getattr(origin, "__parameters__", ()), typing.get_args(base)):
                if param not in typevars:
                    typevars[param] = describe(arg, typevars)
            self._collect_base_arguments(origin, typevars)

    def constructor(self, descriptor: TypeDescriptor) -> list[Parameter]:
        cls = _require_class(descriptor)
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            return []

        typevars = self.type_arguments(descriptor)
        hints = dict(self.hints(cls))
        for method_name in ("__new__", "__init__"):
            method = getattr(cls, method_name, None)
            if inspect.isfunction(method):
                hints.update(self.hints(method, owner=cls))

        parameters: list[Parameter] = []
        for parameter in signature.parameters.values():
            if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            annotation = hints.get(parameter.name, parameter.annotation)
            if _is_transient(annotation):
                if parameter.default is inspect.Parameter.empty:
                    raise ConfigurationError(
                        f'Transient constructor parameter "{parameter.name}" of {descriptor} must have a default.'
                    )
                continue
            parameters.append(
                Parameter(
                    name=parameter.name,
                    descriptor=describe(annotation, typevars),
                    positional_only=parameter.kind is inspect.Parameter.POSITIONAL_ONLY,
                )
            )
        return parameters

    def setters(self, descriptor: TypeDescriptor) -> list[Setter]:
        cls = _require_class(descriptor)
        typevars = self.type_arguments(descriptor)
        found: dict[str, Setter | None] = {}

        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name, member in vars(klass).items():
                found[name] = self._as_setter(name, member, cls, typevars)

        return [setter for setter in found.values() if setter is not None]

    def _as_setter(
        self,
        name: str,
        member: object,
        owner: type,
        typevars: dict[object, TypeDescriptor],
    ) -> Setter | None:
        if isinstance(member, property):
            if member.fset is None:
                return None
            annotation = _first_argument_annotation(member.fset, self.hints(member.fset, owner=owner))
            if annotation is inspect.Parameter.empty and member.fget is not None:
                annotation = self.hints(member.fget, owner=owner).get("return", annotation)
            return Setter(name, name, describe(annotation, typevars), is_property=True)

        if not name.startswith(self.setter_prefix) or len(name) == len(self.setter_prefix):
            return None
        if not inspect.isfunction(member):
            return None

        parameters = list(inspect.signature(member).parameters.values())
        positional = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        if len(parameters) != 2 or any(parameter.kind not in positional for parameter in parameters):
            return None

        annotation = _first_argument_annotation(member, self.hints(member, owner=owner))
        return Setter(name, name[len(self.setter_prefix) :], describe(annotation, typevars))

    def fields(self, descriptor: TypeDescriptor) -> list[Field]:
        cls = _require_class(descriptor)
        typevars = self.type_arguments(descriptor)

        fields: list[Field] = []
        for name, annotation in self.hints(cls).items():
            if name.startswith("__") or _is_excluded(annotation):
                continue
            if isinstance(inspect.getattr_static(cls, name, None), property):
                continue
            fields.append(Field(name, describe(annotation, typevars)))
        return fields

    def hints(self, obj: object, owner: type | None = None) -> dict[str, object]:
        if not (inspect.isclass(obj) or inspect.isfunction(obj)):
            return {}

        owner = owner or typing.cast(type, obj)
        try:
            return typing.get_type_hints(obj, localns={owner.__name__: owner}, include_extras=True)
        except NameError as exc:
            raise UnresolvableTypeError(f"Cannot resolve annotations of {obj!r}: {exc}") from exc


def _first_argument_annotation(func: typing.Callable[..., object], hints: dict[str, object]) -> object:
    parameters = list(inspect.signature(func).parameters.values())
    if len(parameters) < 2:
        return inspect.Parameter.empty
    return hints.get(parameters[1].name, parameters[1].annotation)


def _require_class(descriptor: TypeDescriptor) -> type:
    cls = origin_class(descriptor)
    if cls is None:
        raise UnresolvableTypeError(f"{descriptor} does not describe a class.")
    return cls
