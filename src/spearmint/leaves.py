from __future__ import annotations

import datetime
import decimal
import fractions
import typing
import uuid

import faker

from spearmint.descriptors import Named, TypeDescriptor
from spearmint.providers import FactoryProvider

if typing.TYPE_CHECKING:
    from spearmint.cycles import GenerationPath

MAX_BUFFER_LENGTH = 64
MAX_TIMEDELTA_SECONDS = 86400 * 365

Generate = typing.Callable[[faker.Faker], object]


class FakerProvider(FactoryProvider):
    """Leaf values drawn from the factory's faker, keyed by exact type."""

    generators: typing.ClassVar[dict[type, Generate]] = {}

    def recognizes(self, descriptor: TypeDescriptor) -> bool:
        return isinstance(descriptor, Named) and descriptor.type in self.generators

    def produce(self, descriptor: TypeDescriptor, path: GenerationPath) -> object:
        return self.generators[typing.cast(Named, descriptor).type](self.factory.faker)


class PrimitiveProvider(FakerProvider):
    generators: typing.ClassVar[dict[type, Generate]] = {
        bool: lambda fake: fake.boolean(),
        int: lambda fake: fake.pyint(min_value=-9999, max_value=9999),
        float: lambda fake: fake.pyfloat(),
        complex: lambda fake: complex(fake.pyfloat(), fake.pyfloat()),
    }


class StringProvider(FakerProvider):
    generators: typing.ClassVar[dict[type, Generate]] = {
        str: lambda fake: fake.pystr(),
    }


class BufferProvider(FakerProvider):
    generators: typing.ClassVar[dict[type, Generate]] = {
        bytes: lambda fake: fake.binary(length=fake.random_int(0, MAX_BUFFER_LENGTH)),
        bytearray: lambda fake: bytearray(fake.binary(length=fake.random_int(0, MAX_BUFFER_LENGTH))),
    }


class BigNumberProvider(FakerProvider):
    generators: typing.ClassVar[dict[type, Generate]] = {
        decimal.Decimal: lambda fake: fake.pydecimal(),
        fractions.Fraction: lambda fake: fractions.Fraction(fake.pyint(min_value=-9999), fake.pyint(min_value=1)),
    }


class DateProvider(FakerProvider):
    generators: typing.ClassVar[dict[type, Generate]] = {
        datetime.date: lambda fake: fake.date_object(),
        datetime.datetime: lambda fake: fake.date_time(),
        datetime.time: lambda fake: fake.time_object(),
        datetime.timedelta: lambda fake: datetime.timedelta(seconds=fake.random_int(0, MAX_TIMEDELTA_SECONDS)),
    }


class UUIDProvider(FakerProvider):
    generators: typing.ClassVar[dict[type, Generate]] = {
        uuid.UUID: lambda fake: fake.uuid4(cast_to=None),
    }
