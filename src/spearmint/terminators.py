from __future__ import annotations

import typing

from spearmint.cycles import PathNode
from spearmint.descriptors import Named
from spearmint.exceptions import UnresolvableCycleError
from spearmint.introspection import is_abstract


class CycleTerminator(typing.Protocol):
    def can_terminate(self, cycle: PathNode) -> bool: ...

    def terminate(self, cycle: PathNode) -> object: ...


class NullTerminator:
    def can_terminate(self, cycle: PathNode) -> bool:
        return True

    def terminate(self, cycle: PathNode) -> None:
        return None


class StubTerminator:
    """Breaks a cycle with a bare instance of the cycling class: no ``__init__``, no fields."""

    def can_terminate(self, cycle: PathNode) -> bool:
        descriptor = cycle.descriptor
        if not isinstance(descriptor, Named):
            return False
        cls = descriptor.type
        return cls.__module__ != "builtins" and cls.__new__ is object.__new__ and not is_abstract(cls)

    def terminate(self, cycle: PathNode) -> object:
        return object.__new__(typing.cast(Named, cycle.descriptor).type)


class TerminatorChain:
    __slots__ = ("_terminators",)

    def __init__(self, terminators: typing.Iterable[CycleTerminator]) -> None:
        self._terminators = tuple(terminators)

    def resolve(self, cycle: PathNode) -> object:
        for terminator in self._terminators:
            if terminator.can_terminate(cycle):
                return terminator.terminate(cycle)

        raise UnresolvableCycleError(
            f"Unable to terminate cycle {cycle}, configure the factory with an appropriate cycle terminator."
        )

    def __iter__(self) -> typing.Iterator[CycleTerminator]:
        return iter(self._terminators)

    def __len__(self) -> int:
        return len(self._terminators)
