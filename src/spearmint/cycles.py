from __future__ import annotations

import contextlib
import typing

from spearmint.descriptors import TypeDescriptor
from spearmint.exceptions import PathStateError


class PathNode:
    __slots__ = ("descriptor", "next", "previous")

    def __init__(self, descriptor: TypeDescriptor) -> None:
        self.descriptor = descriptor
        self.next: PathNode | None = None
        self.previous: PathNode | None = None

    def segment(self) -> list[TypeDescriptor]:
        descriptors: list[TypeDescriptor] = []
        node: PathNode | None = self
        while node is not None:
            descriptors.append(node.descriptor)
            node = node.next
        return descriptors

    def __str__(self) -> str:
        return " -> ".join(str(descriptor) for descriptor in self.segment())

    def __repr__(self) -> str:
        return f"<PathNode {self}>"


class GenerationPath:
    """Types currently under construction, in the order generation entered them.

    Given A -> B -> C, entering A again returns the node of A and leaves
    the path as is; the caller must then terminate the cycle instead of recursing.
    """

    __slots__ = ("_head", "_index", "_tail")

    def __init__(self) -> None:
        self._index: dict[TypeDescriptor, PathNode] = {}
        self._head: PathNode | None = None
        self._tail: PathNode | None = None

    def enter(self, descriptor: TypeDescriptor) -> PathNode | None:
        existing = self._index.get(descriptor)
        if existing is not None:
            return existing

        node = PathNode(descriptor)
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
            node.previous = self._tail
        self._tail = node
        self._index[descriptor] = node
        return None

    def exit(self) -> None:
        tail = self._tail
        if tail is None:
            raise PathStateError("Cannot exit an empty generation path.")

        del self._index[tail.descriptor]
        self._tail = tail.previous
        if self._tail is None:
            self._head = None
        else:
            self._tail.next = None
        tail.previous = None

    @contextlib.contextmanager
    def scope(self, descriptor: TypeDescriptor) -> typing.Iterator[PathNode | None]:
        cycle = self.enter(descriptor)
        if cycle is not None:
            yield cycle
            return

        try:
            yield None
        finally:
            self.exit()

    @property
    def tail(self) -> PathNode | None:
        return self._tail

    def __contains__(self, descriptor: object) -> bool:
        return descriptor in self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> typing.Iterator[TypeDescriptor]:
        node = self._head
        while node is not None:
            yield node.descriptor
            node = node.next

    def __str__(self) -> str:
        return " -> ".join(str(descriptor) for descriptor in self)
