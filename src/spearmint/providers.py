from __future__ import annotations

import collections
import collections.abc
import concurrent.futures
import enum
import random
import typing

from spearmint.descriptors import (
    ArrayOf,
    Named,
    NoneType,
    Parameterized,
    TypeDescriptor,
    Unbound,
    origin_class,
)
from spearmint.exceptions import ConstructionError, UnresolvableTypeError
from spearmint.introspection import is_abstract, is_protocol

if typing.TYPE_CHECKING:
    from spearmint.cycles import GenerationPath
    from spearmint.factories import ObjectFactory

T_co = typing.TypeVar("T_co", covariant=True)

# attempts per wanted element when elements must be distinct
DISTINCT_ATTEMPTS = 10


@typing.runtime_checkable
class Provider(typing.Protocol[T_co]):
    def recognizes(self, descriptor: TypeDescriptor) -> bool: ...

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> T_co: ...


ProviderFactory = typing.Callable[["ObjectFactory", random.Random], Provider[typing.Any]]


class FactoryProvider:
    """Base class for providers created per factory.

    The class itself is a ``ProviderFactory``: the builder calls it with the
    factory being built and its random source.
    """

    __slots__ = ("factory", "rng")

    def __init__(self, factory: ObjectFactory, rng: random.Random) -> None:
        self.factory = factory
        self.rng = rng

    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        raise NotImplementedError

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Any:
        raise NotImplementedError

    def random_size(self) -> int:
        return self.rng.randint(self.factory.min_size, self.factory.max_size)

    def generate_many(self, descriptor: TypeDescriptor, path: GenerationPath, size: int) -> list[typing.Any]:
        return [self.factory.generate(descriptor, path) for _ in range(size)]

    def generate_distinct(self, descriptor: TypeDescriptor, path: GenerationPath, size: int) -> list[typing.Any]:
        values: dict[typing.Any, None] = {}
        attempts = size * DISTINCT_ATTEMPTS
        while len(values) < size and attempts > 0:
            attempts -= 1
            value = self.factory.generate(descriptor, path)
            try:
                values[value] = None
            except TypeError as exc:
                raise ConstructionError(f"Generated {descriptor} value is not hashable.", target=descriptor) from exc

        if len(values) < self.factory.min_size:
            raise ConstructionError(
                f"Could only generate {len(values)} distinct {descriptor} values, "
                f"at least {self.factory.min_size} are required.",
                target=descriptor,
            )
        return list(values)


def _args(descriptor: TypeDescriptor, count: int) -> tuple[TypeDescriptor, ...]:
    args = descriptor.args if isinstance(descriptor, Parameterized) else ()
    return tuple(args[:count]) + (Unbound(),) * (count - len(args))


class NoneProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return isinstance(descriptor, Unbound) or descriptor == Named(NoneType)

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> None:
        return None


class LiteralProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return isinstance(descriptor, Parameterized) and descriptor.type is typing.Literal

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> object:
        return self.rng.choice(typing.cast(Parameterized, descriptor).args)


class EnumProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return isinstance(descriptor, Named) and issubclass(descriptor.type, enum.Enum)

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> enum.Enum | None:
        members = list(typing.cast(type[enum.Enum], descriptor.origin))
        return self.rng.choice(members) if members else None


class TypeProvider(FactoryProvider):
    """``type[X]`` produces ``X`` itself, or a concrete subclass when ``X`` is abstract."""

    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return descriptor.origin is type

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> type:
        (target,) = _args(descriptor, 1)
        if isinstance(target, Unbound):
            return object

        if isinstance(target, Parameterized) and target.type is typing.Union:
            target = self.rng.choice(target.args)

        cls = origin_class(target)
        if cls is None:
            raise UnresolvableTypeError(f"Cannot produce a class for {descriptor}.")
        if is_abstract(cls):
            concrete = self.factory.resolvers.resolve(target)
            if concrete is not None:
                return typing.cast(type, concrete.origin)
        return cls


class ArrayProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return isinstance(descriptor, ArrayOf)

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> tuple[typing.Any, ...]:
        element = typing.cast(ArrayOf, descriptor).element
        return tuple(self.generate_many(element, path, self.random_size()))


class TupleProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return descriptor.origin is tuple and isinstance(descriptor, (Named, Parameterized))

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> tuple[typing.Any, ...]:
        if not isinstance(descriptor, Parameterized):
            return ()
        return tuple(self.factory.generate(arg, path) for arg in descriptor.args)


class TypedDictProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return typing.is_typeddict(descriptor.origin)

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> dict[str, typing.Any]:
        return {
            field.name: self.factory.generate_member(descriptor, field.descriptor, field.name, path)
            for field in self.factory.inspector.fields(descriptor)
        }


_MAPPINGS: dict[object, type] = {
    dict: dict,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
    collections.OrderedDict: collections.OrderedDict,
    collections.defaultdict: collections.defaultdict,
}


class MapProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        cls = origin_class(descriptor)
        if cls is None or isinstance(descriptor, ArrayOf):
            return False
        if cls in _MAPPINGS:
            return True
        return issubclass(cls, dict) and not issubclass(cls, collections.Counter) and not typing.is_typeddict(cls)

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Any:
        cls = typing.cast(type, origin_class(descriptor))
        container = _MAPPINGS.get(cls, cls)
        try:
            mapping = container()
        except Exception as exc:
            raise ConstructionError(f"Failed to create mapping {descriptor}.", target=descriptor) from exc

        if not isinstance(descriptor, Parameterized):
            return mapping

        key, value = _args(descriptor, 2)
        for generated in self.generate_distinct(key, path, self.random_size()):
            mapping[generated] = self.factory.generate(value, path)
        return mapping


_ITERATORS = frozenset({collections.abc.Iterator, collections.abc.Generator})


class IteratorProvider(FactoryProvider):
    """Iterators are filled eagerly so their elements are generated under the current path."""

    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return descriptor.origin in _ITERATORS

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Iterator[typing.Any]:
        if not isinstance(descriptor, Parameterized):
            return iter(())
        (element,) = _args(descriptor, 1)
        elements = self.generate_many(element, path, self.random_size())
        return (item for item in elements)


_COLLECTIONS: dict[object, type] = {
    list: list,
    set: set,
    frozenset: frozenset,
    collections.deque: collections.deque,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Reversible: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}


class CollectionProvider(FactoryProvider):
    """Lists, sets, deques and the abstract collection types they stand for.

    Other abstract iterables must be resolved to a concrete class, otherwise
    generation fails.
    """

    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        cls = origin_class(descriptor)
        if cls is None or isinstance(descriptor, ArrayOf):
            return False
        if cls in _COLLECTIONS:
            return True
        if issubclass(cls, (list, set, frozenset, collections.deque)):
            return True
        if not issubclass(cls, collections.abc.Iterable) or is_protocol(cls):
            return False
        if issubclass(cls, (collections.abc.Iterator, collections.abc.Mapping)):
            return False
        return cls.__module__ == "collections.abc" or is_abstract(cls)

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Any:
        cls = typing.cast(type, origin_class(descriptor))
        container = _COLLECTIONS.get(cls)
        if container is None and not is_abstract(cls):
            container = cls

        if container is None:
            concrete = self.factory.resolvers.resolve(descriptor)
            if concrete is None:
                raise UnresolvableTypeError(f"No concrete collection type is known for {descriptor}.")
            return self.factory.generate(concrete, path)

        elements: list[typing.Any] = []
        if isinstance(descriptor, Parameterized):
            (element,) = _args(descriptor, 1)
            size = self.random_size()
            if issubclass(container, (set, frozenset)):
                elements = self.generate_distinct(element, path, size)
            else:
                elements = self.generate_many(element, path, size)

        try:
            return container(elements)
        except Exception as exc:
            raise ConstructionError(f"Failed to create collection {descriptor}.", target=descriptor) from exc


_NONE = Named(NoneType)


class OptionalProvider(FactoryProvider):
    """``X | None`` produces an ``X``; ``None`` only comes back when ``X`` has to terminate a cycle."""

    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return (
            isinstance(descriptor, Parameterized)
            and descriptor.type is typing.Union
            and _NONE in descriptor.args
            and len(descriptor.args) > 1
        )

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Any:
        remaining = tuple(arg for arg in typing.cast(Parameterized, descriptor).args if arg != _NONE)
        target = remaining[0] if len(remaining) == 1 else Parameterized(typing.Union, remaining)
        return self.factory.generate(target, path)


class UnionProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return isinstance(descriptor, Parameterized) and descriptor.type is typing.Union

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Any:
        return self.factory.generate(self.rng.choice(typing.cast(Parameterized, descriptor).args), path)


class FutureProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return descriptor.origin is concurrent.futures.Future

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> concurrent.futures.Future[typing.Any]:
        future: concurrent.futures.Future[typing.Any] = concurrent.futures.Future()
        result = None
        if isinstance(descriptor, Parameterized):
            (value,) = _args(descriptor, 1)
            result = self.factory.generate(value, path)
        future.set_result(result)
        return future


class CallableProvider(FactoryProvider):
    """Callables return a freshly generated value of their return type on every call."""

    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return descriptor.origin is collections.abc.Callable

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Callable[..., typing.Any]:
        (returns,) = _args(descriptor, 1)
        factory = self.factory

        def generated(*args: typing.Any, **kwargs: typing.Any) -> typing.Any:
            return factory.generate(returns)

        return generated


class AbstractProvider(FactoryProvider):
    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return isinstance(descriptor, (Named, Parameterized)) and is_abstract(descriptor.origin)

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Any:
        return self.factory.generate_abstract(descriptor, path)
