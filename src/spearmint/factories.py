from __future__ import annotations

import functools
import logging
import random
import typing

import faker as fakerlib

from spearmint import leaves, providers
from spearmint.bindings import Binding, BindingTable
from spearmint.config import global_config
from spearmint.cycles import GenerationPath
from spearmint.descriptors import ArrayOf, TypeDescriptor, Unbound, describe, origin_class
from spearmint.exceptions import ConfigurationError, ConstructionError, UnresolvableTypeError
from spearmint.introspection import PRIMITIVE_DEFAULTS, Inspector, is_abstract, is_primitive
from spearmint.providers import Provider, ProviderFactory
from spearmint.proxies import instantiate_stand_in, stand_in_class
from spearmint.resolvers import Resolver, ResolverChain
from spearmint.terminators import CycleTerminator, NullTerminator, TerminatorChain

logger = logging.getLogger(__name__)

T = typing.TypeVar("T")

DEFAULT_MIN_SIZE = 1
DEFAULT_MAX_SIZE = 10

# order matters: leaves -> enums and literals -> containers -> unions -> abstract types
DEFAULT_PROVIDERS: tuple[ProviderFactory, ...] = (
    providers.NoneProvider,
    leaves.PrimitiveProvider,
    leaves.StringProvider,
    leaves.BufferProvider,
    leaves.BigNumberProvider,
    leaves.DateProvider,
    leaves.UUIDProvider,
    providers.LiteralProvider,
    providers.EnumProvider,
    providers.TypeProvider,
    providers.ArrayProvider,
    providers.TupleProvider,
    providers.TypedDictProvider,
    providers.MapProvider,
    providers.IteratorProvider,
    providers.CollectionProvider,
    providers.OptionalProvider,
    providers.UnionProvider,
    providers.FutureProvider,
    providers.CallableProvider,
    providers.AbstractProvider,
)


class ObjectFactory:
    """Generates populated values for arbitrary types.

    A built factory is immutable and can be shared between threads: each
    top-level ``generate`` call tracks the types it is constructing on its
    own ``GenerationPath``, which providers pass along when they recurse.
    """

    def __init__(
        self,
        *,
        bindings: BindingTable,
        provider_factories: typing.Sequence[ProviderFactory],
        resolvers: ResolverChain,
        terminators: TerminatorChain,
        inspector: Inspector,
        min_size: int,
        max_size: int,
        fail_on_missing_primitive_provider: bool,
        rng: random.Random,
        faker: fakerlib.Faker,
    ) -> None:
        self._resolvers = resolvers
        self._terminators = terminators
        self._inspector = inspector
        self._min_size = min_size
        self._max_size = max_size
        self._fail_on_missing_primitive_provider = fail_on_missing_primitive_provider
        self._random = rng
        self._faker = faker
        self._providers: tuple[Provider[typing.Any], ...] = tuple(
            provider_factory(self, rng) for provider_factory in provider_factories
        )
        self._bindings = bindings.for_factory(self)
        self._stand_in_classes = functools.cache(
            lambda descriptor: stand_in_class(descriptor, self.generate, self._inspector)
        )

    @staticmethod
    def builder() -> ObjectFactoryBuilder:
        return ObjectFactoryBuilder()

    @classmethod
    def default(cls, seed: int | None = None) -> ObjectFactory:
        builder = ObjectFactoryBuilder()
        if seed is not None:
            builder.seed(seed)
        return builder.build()

    @property
    def min_size(self) -> int:
        return self._min_size

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def random(self) -> random.Random:
        return self._random

    @property
    def faker(self) -> fakerlib.Faker:
        return self._faker

    @property
    def resolvers(self) -> ResolverChain:
        return self._resolvers

    @property
    def inspector(self) -> Inspector:
        return self._inspector

    @property
    def bindings(self) -> BindingTable:
        return self._bindings

    @property
    def providers(self) -> tuple[Provider[typing.Any], ...]:
        return self._providers

    @typing.overload
    def generate(self, annotation: type[T], path: GenerationPath | None = None) -> T: ...

    @typing.overload
    def generate(self, annotation: object, path: GenerationPath | None = None) -> typing.Any: ...

    def generate(self, annotation: object, path: GenerationPath | None = None) -> typing.Any:
        """Generate a value for a type annotation or a ``TypeDescriptor``.

        Providers generating nested values must pass their ``path`` along;
        omitting it starts an independent generation.
        """
        descriptor = describe(annotation)
        if path is None:
            path = GenerationPath()

        with path.scope(descriptor) as cycle:
            if cycle is not None:
                logger.debug("Terminating cycle %s.", cycle)
                return self._terminators.resolve(cycle)

            provider = self._find_provider(descriptor)
            if provider is not None:
                return provider.produce(descriptor, path)
            return self._generate_structure(descriptor, path)

    def generate_batch(self, annotation: object, count: int) -> list[typing.Any]:
        return [self.generate(annotation) for _ in range(count)]

    def generate_abstract(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Any:
        concrete = self._resolvers.resolve(descriptor)
        if concrete is not None:
            return self.generate(concrete, path)
        return instantiate_stand_in(self._stand_in_classes(descriptor), descriptor)

    def _find_provider(self, descriptor: TypeDescriptor) -> Provider[typing.Any] | None:
        provider = self._bindings.global_type(descriptor)
        if provider is not None:
            return provider

        for candidate in self._providers:
            if candidate.recognizes(descriptor):
                return candidate
        return None

    def _generate_structure(self, descriptor: TypeDescriptor, path: GenerationPath) -> typing.Any:
        if isinstance(descriptor, Unbound):
            return None

        cls = origin_class(descriptor)
        if cls is None or isinstance(descriptor, ArrayOf):
            raise UnresolvableTypeError(f"No provider recognizes {descriptor}.")

        if is_primitive(cls):
            if self._fail_on_missing_primitive_provider:
                raise ConstructionError(f"Provider not found for primitive type {descriptor}.", target=descriptor)
            return PRIMITIVE_DEFAULTS[cls]()

        if is_abstract(cls):
            return self.generate_abstract(descriptor, path)

        return self._generate_object(descriptor, cls, path)

    def _generate_object(self, descriptor: TypeDescriptor, cls: type, path: GenerationPath) -> object:
        parameters = self._inspector.constructor(descriptor)
        args: list[object] = []
        kwargs: dict[str, object] = {}
        for parameter in parameters:
            value = self.generate_member(descriptor, parameter.descriptor, parameter.name, path)
            if parameter.positional_only:
                args.append(value)
            else:
                kwargs[parameter.name] = value

        try:
            instance = cls(*args, **kwargs)
        except Exception as exc:
            raise ConstructionError(f"Failed to create instance of {descriptor}.", target=descriptor) from exc

        assigned = {parameter.name for parameter in parameters}
        for setter in self._inspector.setters(descriptor):
            if setter.field_name in assigned:
                continue

            value = self.generate_member(descriptor, setter.descriptor, setter.field_name, path)
            try:
                if setter.is_property:
                    setattr(instance, setter.name, value)
                else:
                    getattr(instance, setter.name)(value)
            except Exception:
                logger.debug(
                    "Setter %s of %s failed, leaving %s to field assignment.",
                    setter.name,
                    descriptor,
                    setter.field_name,
                    exc_info=True,
                )
                continue
            assigned.add(setter.field_name)

        for field in self._inspector.fields(descriptor):
            if field.name in assigned:
                continue

            value = self.generate_member(descriptor, field.descriptor, field.name, path)
            try:
                setattr(instance, field.name, value)
            except Exception as exc:
                raise ConstructionError.for_field(descriptor, field.name) from exc

        return instance

    def generate_member(
        self,
        container: TypeDescriptor,
        member: TypeDescriptor,
        name: str,
        path: GenerationPath,
    ) -> object:
        """Generate the value of member ``name`` of ``container``, honouring the bindings for it."""
        # a global type binding applies wherever its type appears, unless a field name binding matches
        provider = self._bindings.resolve_name(container, name)
        if provider is None and self._bindings.global_type(member) is None:
            provider = self._bindings.resolve_type(container, member)
        if provider is not None:
            return provider.produce(member, path)
        return self.generate(member, path)


class ObjectFactoryBuilder:
    def __init__(self) -> None:
        self._bindings: list[Binding] = []
        self._providers: list[ProviderFactory] = list(DEFAULT_PROVIDERS)
        self._additional_providers: list[ProviderFactory] = []
        self._resolvers: list[Resolver] = []
        self._terminators: list[CycleTerminator] = []
        self._fallback_terminator: CycleTerminator | None = NullTerminator()
        self._inspector = Inspector()
        self._min_size = DEFAULT_MIN_SIZE
        self._max_size = DEFAULT_MAX_SIZE
        self._fail_on_missing_primitive_provider = False
        self._random: random.Random | None = None
        self._seed: int | None = None
        self._faker: fakerlib.Faker | None = None
        self._locale: str | None = None

    def bindings(self, *bindings: Binding) -> typing.Self:
        self._bindings.extend(bindings)
        return self

    def providers(self, *provider_factories: ProviderFactory) -> typing.Self:
        """Replace the default provider chain."""
        self._providers = _callables(provider_factories, "Provider factories")
        return self

    def additional_providers(self, *provider_factories: ProviderFactory) -> typing.Self:
        """Add providers consulted before the default chain."""
        self._additional_providers.extend(_callables(provider_factories, "Provider factories"))
        return self

    def resolvers(self, *resolvers: Resolver) -> typing.Self:
        self._resolvers.extend(resolvers)
        return self

    def terminators(self, *terminators: CycleTerminator) -> typing.Self:
        self._terminators.extend(terminators)
        return self

    def fallback_terminator(self, terminator: CycleTerminator | None) -> typing.Self:
        """Set the terminator tried after all others; ``None`` lets unterminated cycles fail."""
        self._fallback_terminator = terminator
        return self

    def inspector(self, inspector: Inspector) -> typing.Self:
        if inspector is None:
            raise ConfigurationError("Inspector must not be None.")
        self._inspector = inspector
        return self

    def min_size(self, min_size: int) -> typing.Self:
        if min_size < 0:
            raise ConfigurationError("Min size must be non-negative.")
        self._min_size = min_size
        return self

    def max_size(self, max_size: int) -> typing.Self:
        if max_size < 0:
            raise ConfigurationError("Max size must be non-negative.")
        self._max_size = max_size
        return self

    def fail_on_missing_primitive_provider(self, fail: bool = True) -> typing.Self:
        self._fail_on_missing_primitive_provider = fail
        return self

    def random(self, rng: random.Random) -> typing.Self:
        if rng is None:
            raise ConfigurationError("Random must not be None.")
        self._random = rng
        return self

    def seed(self, seed: int) -> typing.Self:
        self._seed = seed
        return self

    def faker(self, faker: fakerlib.Faker) -> typing.Self:
        self._faker = faker
        return self

    def locale(self, locale: str) -> typing.Self:
        self._locale = locale
        return self

    def copy(self) -> ObjectFactoryBuilder:
        builder = ObjectFactoryBuilder()
        builder._bindings = list(self._bindings)
        builder._providers = list(self._providers)
        builder._additional_providers = list(self._additional_providers)
        builder._resolvers = list(self._resolvers)
        builder._terminators = list(self._terminators)
        builder._fallback_terminator = self._fallback_terminator
        builder._inspector = self._inspector
        builder._min_size = self._min_size
        builder._max_size = self._max_size
        builder._fail_on_missing_primitive_provider = self._fail_on_missing_primitive_provider
        builder._random = self._random
        builder._seed = self._seed
        builder._faker = self._faker
        builder._locale = self._locale
        return builder

    def build(self) -> ObjectFactory:
        if self._max_size < self._min_size:
            raise ConfigurationError("Max size must be greater than or equal to min size.")

        bindings = BindingTable.from_bindings(self._bindings)

        rng = self._random
        if rng is None:
            rng = random.Random(self._seed if self._seed is not None else global_config.seed)

        fake = self._faker
        if fake is None:
            fake = fakerlib.Faker(self._locale or global_config.locale)
            fake.seed_instance(rng.getrandbits(64))

        terminators = list(self._terminators)
        if self._fallback_terminator is not None:
            terminators.append(self._fallback_terminator)

        return ObjectFactory(
            bindings=bindings,
            provider_factories=(*self._additional_providers, *self._providers),
            resolvers=ResolverChain(self._resolvers),
            terminators=TerminatorChain(terminators),
            inspector=self._inspector,
            min_size=self._min_size,
            max_size=self._max_size,
            fail_on_missing_primitive_provider=self._fail_on_missing_primitive_provider,
            rng=rng,
            faker=fake,
        )


def _callables(provider_factories: typing.Iterable[ProviderFactory], what: str) -> list[ProviderFactory]:
    provider_factories = list(provider_factories)
    for provider_factory in provider_factories:
        if not callable(provider_factory):
            raise ConfigurationError(f"{what} must be callables taking (factory, random), got {provider_factory!r}.")
    return provider_factories
