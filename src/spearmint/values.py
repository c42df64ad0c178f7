from __future__ import annotations

import builtins
import copy
import decimal
import itertools
import random
import typing
import uuid
from string import ascii_letters, digits

from spearmint.config import global_config

if typing.TYPE_CHECKING:
    import faker as fakerlib

    from spearmint.cycles import GenerationPath
    from spearmint.descriptors import TypeDescriptor
    from spearmint.factories import ObjectFactory

T = typing.TypeVar("T")


class Value[T]:
    """Provider for bindings: accepts any type and produces a value chosen by the caller."""

    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return True

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> T:
        raise NotImplementedError

    def for_factory(self, factory: ObjectFactory) -> Value[T]:
        """Return the value to use inside ``factory``."""
        return self


class StaticValue(Value[T]):
    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"StaticValue({self.value!r})"


class LazyValue(Value[T]):
    __slots__ = ("_func",)

    def __init__(self, func: typing.Callable[[TypeDescriptor], T]) -> None:
        self._func = func

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> T:
        return self._func(descriptor)


PS = typing.ParamSpec("PS")


class CallValue(Value[T]):
    __slots__ = ("_args", "_func", "_kwargs")

    def __init__(
        self,
        func: typing.Callable[PS, T],
        *args: PS.args,
        **kwargs: PS.kwargs,
    ) -> None:
        self._args = args
        self._kwargs = kwargs
        self._func = func

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> T:
        return self._func(*self._args, **self._kwargs)


class SequenceValue(Value[T | str | int]):
    __slots__ = ("_counter", "_format", "_func", "_start")

    def __init__(
        self,
        format: str | typing.Callable[[int], T] | None = None,
        *,
        start: int = 1,
    ) -> None:
        self._func: typing.Callable[[int], T] | None = None
        self._format: str | None = None

        if callable(format):
            self._func = format
        else:
            self._format = format

        self._start = start
        self._counter = itertools.count(start)

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> T | str | int:
        n = next(self._counter)

        if self._func is not None:
            return self._func(n)

        if self._format is not None:
            return self._format.format(n)

        return n


class RandomValue(Value[T]):
    """Draws from the process-wide ``random`` module, or from the factory's source once bound."""

    __slots__ = ("_func", "_source")

    def __init__(self, func: typing.Callable[[typing.Any], T]) -> None:
        self._func = func
        self._source: typing.Any = random

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> T:
        return self._func(self._source)

    def for_factory(self, factory: ObjectFactory) -> RandomValue[T]:
        value = copy.copy(self)
        value._source = factory.random
        return value


def _decimal(source: random.Random, min: float, max: float, places: int) -> decimal.Decimal:
    value = decimal.Decimal(str(source.uniform(min, max)))
    quantum = decimal.Decimal("1").scaleb(-places)
    return value.quantize(quantum, rounding=decimal.ROUND_HALF_UP)


class _Gen:
    def decimal(
        self,
        min: builtins.float,
        max: builtins.float,
        places: builtins.int = 2,
    ) -> Value[decimal.Decimal]:
        return RandomValue(lambda source: _decimal(source, min, max, places))

    def normal(self, mean: builtins.float, stdev: builtins.float) -> Value[builtins.float]:
        if stdev < 0:
            raise ValueError("stdev must be >= 0.")
        return RandomValue(lambda source: source.gauss(mean, stdev))

    def sample(self, sequence: typing.Sequence[T], k: builtins.int) -> Value[list[T]]:
        return RandomValue(lambda source: source.sample(sequence, k=k))

    def choices(
        self,
        sequence: typing.Sequence[T],
        k: builtins.int = 1,
        *,
        weights: typing.Sequence[builtins.float] | None = None,
    ) -> Value[list[T]]:
        return RandomValue(lambda source: source.choices(sequence, k=k, weights=weights))

    def uuid4(self) -> Value[uuid.UUID]:
        return RandomValue(lambda source: uuid.UUID(int=source.getrandbits(128), version=4))

    def string(self, length: builtins.int, alphabet: str = ascii_letters + digits) -> Value[str]:
        if length < 0:
            raise ValueError("length must be >= 0.")
        if not alphabet and length > 0:
            raise ValueError("alphabet cannot be empty when length > 0.")
        return RandomValue(lambda source: "".join(source.choices(alphabet, k=length)))

    def bool(self) -> Value[builtins.bool]:
        return RandomValue(lambda source: source.choice([True, False]))

    def bytes(self, n: builtins.int) -> Value[builtins.bytes]:
        if n < 0:
            raise ValueError("n must be >= 0.")
        return RandomValue(lambda source: source.randbytes(n))

    def int(self, min: builtins.int, max: builtins.int) -> Value[builtins.int]:
        return RandomValue(lambda source: source.randint(min, max))

    def float(self, min: builtins.float, max: builtins.float) -> Value[builtins.float]:
        return RandomValue(lambda source: source.uniform(min, max))

    def choice(self, sequence: typing.Sequence[T]) -> Value[T]:
        return RandomValue(lambda source: source.choice(sequence))


class FakeValue(Value[T]):
    """Calls a method of the configured faker, or of the factory's faker once bound."""

    __slots__ = ("_args", "_faker", "_kwargs", "_method_name")

    def __init__(self, method_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:
        self._method_name = method_name
        self._args = args
        self._kwargs = kwargs
        self._faker: fakerlib.Faker | None = None

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> T:
        method = getattr(global_config.faker if self._faker is None else self._faker, self._method_name)
        return typing.cast(T, method(*self._args, **self._kwargs))

    def for_factory(self, factory: ObjectFactory) -> FakeValue[T]:
        value = copy.copy(self)
        value._faker = factory.faker
        return value

    def __repr__(self) -> str:
        return f"FakeValue({self._method_name!r})"


class FakerProxy:
    def __getattr__(self, name: str) -> typing.Callable[..., FakeValue[typing.Any]]:
        def value_factory(*args: typing.Any, **kwargs: typing.Any) -> FakeValue[typing.Any]:
            return FakeValue(name, *args, **kwargs)

        return value_factory


def as_provider(value: object) -> object:
    if callable(getattr(value, "recognizes", None)) and callable(getattr(value, "produce", None)):
        return value
    return StaticValue(value)
