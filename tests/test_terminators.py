import pytest

from spearmint.cycles import GenerationPath, PathNode
from spearmint.descriptors import Named, describe
from spearmint.exceptions import UnresolvableCycleError
from spearmint.terminators import NullTerminator, StubTerminator, TerminatorChain
from tests.assets import Node, Repository, Shape


def _cycle(descriptor: object) -> PathNode:
    path = GenerationPath()
    path.enter(describe(descriptor))
    node = path.enter(describe(descriptor))
    assert node is not None
    return node


class _Refusing:
    def can_terminate(self, cycle: PathNode) -> bool:
        return False

    def terminate(self, cycle: PathNode) -> object:
        raise AssertionError("never called")


class _Fixed:
    def __init__(self, value: object) -> None:
        self.value = value

    def can_terminate(self, cycle: PathNode) -> bool:
        return True

    def terminate(self, cycle: PathNode) -> object:
        return self.value


class TestNullTerminator:
    def test_terminates_with_none(self) -> None:
        terminator = NullTerminator()
        assert terminator.can_terminate(_cycle(Node))
        assert terminator.terminate(_cycle(Node)) is None


class TestStubTerminator:
    def test_returns_uninitialized_instance(self) -> None:
        terminator = StubTerminator()
        cycle = _cycle(Node)
        assert terminator.can_terminate(cycle)

        stub = terminator.terminate(cycle)
        assert isinstance(stub, Node)
        assert not hasattr(stub, "value")

    def test_skips_builtins_and_abstract_types(self) -> None:
        terminator = StubTerminator()
        assert not terminator.can_terminate(_cycle(int))
        assert not terminator.can_terminate(_cycle(Shape))
        assert not terminator.can_terminate(_cycle(Repository))
        assert not terminator.can_terminate(_cycle(list[Node]))


class TestTerminatorChain:
    def test_first_capable_terminator_wins(self) -> None:
        chain = TerminatorChain([_Refusing(), _Fixed("first"), _Fixed("second")])
        assert chain.resolve(_cycle(Node)) == "first"

    def test_fails_when_nobody_terminates(self) -> None:
        chain = TerminatorChain([_Refusing()])
        with pytest.raises(UnresolvableCycleError, match="Unable to terminate cycle Node"):
            chain.resolve(_cycle(Node))

    def test_empty_chain_fails(self) -> None:
        with pytest.raises(UnresolvableCycleError):
            TerminatorChain([]).resolve(_cycle(Named(Node)))

    def test_iterates_in_order(self) -> None:
        first, second = _Refusing(), NullTerminator()
        chain = TerminatorChain([first, second])
        assert list(chain) == [first, second]
        assert len(chain) == 2
