from __future__ import annotations

import inspect
import logging
import typing

from spearmint.descriptors import TypeDescriptor, describe, origin_class
from spearmint.exceptions import ConstructionError, UnresolvableTypeError
from spearmint.introspection import Inspector, is_protocol

logger = logging.getLogger(__name__)

# object's own implementations are kept for these
IDENTITY_METHODS = frozenset({"__eq__", "__ne__", "__hash__", "__repr__", "__str__"})

Produce = typing.Callable[[TypeDescriptor], object]


def create_stand_in(descriptor: TypeDescriptor, produce: Produce, inspector: Inspector) -> object:
    return instantiate_stand_in(stand_in_class(descriptor, produce, inspector), descriptor)


def stand_in_class(descriptor: TypeDescriptor, produce: Produce, inspector: Inspector) -> type:
    """Subclass an abstract class or protocol so that its methods return generated values.

    Every public method, every abstract or protocol member and every protocol
    attribute answers with ``produce(<its return type>)``, computed on each call.
    ``__init__`` of the abstract class is never run.
    """
    cls = origin_class(descriptor)
    if cls is None:
        raise UnresolvableTypeError(f"Cannot create a stand-in for {descriptor}.")

    typevars = inspector.type_arguments(descriptor)
    intercepted = set(getattr(cls, "__abstractmethods__", ())) | set(getattr(cls, "__protocol_attrs__", ()))
    namespace: dict[str, object] = {
        "__module__": cls.__module__,
        "__qualname__": f"{cls.__qualname__}StandIn",
        "__stand_in__": True,
    }

    def returns(func: typing.Callable[..., object] | None) -> typing.Callable[[], object]:
        def compute() -> object:
            hints = inspector.hints(func, owner=cls) if func is not None else {}
            return produce(describe(hints.get("return", inspect.Parameter.empty), typevars))

        return compute

    for name, member in _members(cls).items():
        if name in IDENTITY_METHODS:
            if name in intercepted:
                namespace[name] = getattr(object, name)
            continue
        if name.startswith("_") and name not in intercepted:
            continue

        match member:
            case property():
                namespace[name] = property(_getter(returns(member.fget)))
            case staticmethod() | classmethod():
                namespace[name] = staticmethod(_function(name, returns(member.__func__)))
            case _ if inspect.isfunction(member):
                namespace[name] = _method(name, returns(member))

    if is_protocol(cls):
        for name, annotation in inspector.hints(cls).items():
            if name.startswith("_") or name in namespace:
                continue
            field = describe(annotation, typevars)
            namespace[name] = property(_getter(lambda field=field: produce(field)))

    stand_in = type(cls)(f"{cls.__name__}StandIn", (cls,), namespace)
    logger.debug("Created stand-in %s for %s.", stand_in.__qualname__, descriptor)
    return stand_in


def instantiate_stand_in(stand_in: type, descriptor: TypeDescriptor) -> object:
    try:
        return object.__new__(stand_in)
    except TypeError as exc:
        raise ConstructionError(f"Cannot instantiate a stand-in for {descriptor}.", target=descriptor) from exc


def _members(cls: type) -> dict[str, object]:
    members: dict[str, object] = {}
    for klass in reversed(cls.__mro__):
        if klass is object or klass is typing.Generic or klass is typing.Protocol:
            continue
        members.update(vars(klass))
    return members


def _method(name: str, compute: typing.Callable[[], object]) -> typing.Callable[..., object]:
    def method(self: object, *args: object, **kwargs: object) -> object:
        return compute()

    method.__name__ = method.__qualname__ = name
    return method


def _function(name: str, compute: typing.Callable[[], object]) -> typing.Callable[..., object]:
    def function(*args: object, **kwargs: object) -> object:
        return compute()

    function.__name__ = function.__qualname__ = name
    return function


def _getter(compute: typing.Callable[[], object]) -> typing.Callable[[object], object]:
    def getter(self: object) -> object:
        return compute()

    return getter
