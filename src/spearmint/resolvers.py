from __future__ import annotations

import collections
import logging
import typing

from spearmint.descriptors import TypeDescriptor, describe, origin_class
from spearmint.exceptions import ConfigurationError
from spearmint.introspection import is_abstract

logger = logging.getLogger(__name__)


class Resolver(typing.Protocol):
    def resolve(self, descriptor: TypeDescriptor) -> object | None: ...


class NullResolver:
    def resolve(self, descriptor: TypeDescriptor) -> None:
        return None


class MappingResolver:
    __slots__ = ("_mapping",)

    def __init__(self, mapping: typing.Mapping[object, object]) -> None:
        self._mapping = {describe(abstract): concrete for abstract, concrete in mapping.items()}

    def resolve(self, descriptor: TypeDescriptor) -> object | None:
        concrete = self._mapping.get(descriptor)
        if concrete is None:
            cls = origin_class(descriptor)
            if cls is not None:
                concrete = self._mapping.get(describe(cls))
        return concrete

    def __repr__(self) -> str:
        return f"MappingResolver({len(self._mapping)} types)"


class SubclassResolver:
    """Picks the first concrete subclass found walking ``__subclasses__()`` breadth first."""

    def resolve(self, descriptor: TypeDescriptor) -> type | None:
        cls = origin_class(descriptor)
        if cls is None:
            return None

        queue = collections.deque(_subclasses(cls))
        seen: set[type] = set()
        while queue:
            candidate = queue.popleft()
            if candidate in seen:
                continue
            seen.add(candidate)
            if _is_candidate(candidate):
                return candidate
            queue.extend(_subclasses(candidate))
        return None


def _subclasses(cls: type) -> list[type]:
    try:
        return cls.__subclasses__()
    except TypeError:
        # type.__subclasses__ is unbound for metaclasses
        return type.__subclasses__(cls)


def _is_candidate(cls: type) -> bool:
    return not is_abstract(cls) and not vars(cls).get("__stand_in__", False)


class ResolverChain:
    __slots__ = ("_resolvers",)

    def __init__(self, resolvers: typing.Iterable[Resolver]) -> None:
        self._resolvers = tuple(resolvers)

    def resolve(self, descriptor: TypeDescriptor) -> TypeDescriptor | None:
        for resolver in self._resolvers:
            resolved = resolver.resolve(descriptor)
            if resolved is None:
                continue

            concrete = describe(resolved)
            if is_abstract(origin_class(concrete)):
                raise ConfigurationError(
                    f"Resolver {resolver!r} resolved {descriptor} to {concrete}, which is not a concrete type."
                )

            logger.debug("Resolved %s to %s using %r.", descriptor, concrete, resolver)
            return concrete
        return None

    def __iter__(self) -> typing.Iterator[Resolver]:
        return iter(self._resolvers)

    def __len__(self) -> int:
        return len(self._resolvers)
