from __future__ import annotations

import dataclasses
import types
import typing

from spearmint.descriptors import Named, TypeDescriptor, describe, origin_class
from spearmint.exceptions import ConfigurationError
from spearmint.values import as_provider

if typing.TYPE_CHECKING:
    from spearmint.factories import ObjectFactory
    from spearmint.providers import Provider


class Binding:
    __slots__ = ()


@dataclasses.dataclass(frozen=True, slots=True)
class GlobalTypeBinding(Binding):
    field_type: TypeDescriptor
    provider: Provider


@dataclasses.dataclass(frozen=True, slots=True)
class GlobalNameBinding(Binding):
    field_name: str
    provider: Provider


@dataclasses.dataclass(frozen=True, slots=True)
class LocalTypeBinding(Binding):
    container: TypeDescriptor
    field_type: TypeDescriptor
    provider: Provider


@dataclasses.dataclass(frozen=True, slots=True)
class LocalNameBinding(Binding):
    container: TypeDescriptor
    field_name: str
    provider: Provider


@typing.overload
def bind(target: str, provider: object, /) -> GlobalNameBinding: ...


@typing.overload
def bind(target: object, provider: object, /) -> GlobalTypeBinding: ...


@typing.overload
def bind(container: object, target: str, provider: object, /) -> LocalNameBinding: ...


@typing.overload
def bind(container: object, target: object, provider: object, /) -> LocalTypeBinding: ...


def bind(*args: object) -> Binding:
    """Override generation for a type or a field name, globally or inside one container type.

    ``bind(int, gen.int(1, 5))`` binds every ``int``, ``bind("email", fake.email())``
    every field named ``email``, ``bind(User, "email", ...)`` only ``User.email``.
    Plain values are bound as static values.
    """
    match args:
        case (str() as field_name, provider):
            return GlobalNameBinding(field_name, typing.cast("Provider", as_provider(provider)))
        case (field_type, provider):
            return GlobalTypeBinding(describe(field_type), typing.cast("Provider", as_provider(provider)))
        case (container, str() as field_name, provider):
            return LocalNameBinding(describe(container), field_name, typing.cast("Provider", as_provider(provider)))
        case (container, field_type, provider):
            return LocalTypeBinding(
                describe(container),
                describe(field_type),
                typing.cast("Provider", as_provider(provider)),
            )
    raise TypeError(f"bind() takes 2 or 3 arguments, got {len(args)}.")


class BindingTable:
    __slots__ = ("_global_names", "_global_types", "_local_names", "_local_types")

    def __init__(
        self,
        global_types: typing.Mapping[TypeDescriptor, Provider],
        global_names: typing.Mapping[str, Provider],
        local_types: typing.Mapping[tuple[TypeDescriptor, TypeDescriptor], Provider],
        local_names: typing.Mapping[tuple[TypeDescriptor, str], Provider],
    ) -> None:
        self._global_types = types.MappingProxyType(dict(global_types))
        self._global_names = types.MappingProxyType(dict(global_names))
        self._local_types = types.MappingProxyType(dict(local_types))
        self._local_names = types.MappingProxyType(dict(local_names))

    @classmethod
    def from_bindings(cls, bindings: typing.Iterable[Binding]) -> BindingTable:
        global_types: dict[TypeDescriptor, Provider] = {}
        global_names: dict[str, Provider] = {}
        local_types: dict[tuple[TypeDescriptor, TypeDescriptor], Provider] = {}
        local_names: dict[tuple[TypeDescriptor, str], Provider] = {}

        def register[K](registry: dict[K, Provider], key: K, provider: Provider, scope: str) -> None:
            if key in registry:
                raise ConfigurationError(f"Cannot provide multiple {scope} bindings for {key!r}.")
            registry[key] = provider

        for binding in bindings:
            match binding:
                case GlobalTypeBinding(field_type, provider):
                    register(global_types, field_type, provider, "global type")
                case GlobalNameBinding(field_name, provider):
                    register(global_names, field_name, provider, "global field name")
                case LocalTypeBinding(container, field_type, provider):
                    register(local_types, (container, field_type), provider, "field type")
                case LocalNameBinding(container, field_name, provider):
                    register(local_names, (container, field_name), provider, "field name")
                case _:
                    raise ConfigurationError(f"Unrecognized binding {binding!r}.")

        return cls(global_types, global_names, local_types, local_names)

    def for_factory(self, factory: ObjectFactory) -> BindingTable:
        """Copy of the table whose values draw from ``factory``'s random source and faker."""

        def bound[K](registry: typing.Mapping[K, Provider]) -> dict[K, Provider]:
            return {key: _bound_provider(provider, factory) for key, provider in registry.items()}

        return BindingTable(
            bound(self._global_types),
            bound(self._global_names),
            bound(self._local_types),
            bound(self._local_names),
        )

    def global_type(self, descriptor: TypeDescriptor) -> Provider | None:
        return self._global_types.get(descriptor)

    def resolve(
        self,
        container: TypeDescriptor,
        field_type: TypeDescriptor,
        field_name: str,
    ) -> Provider | None:
        """Local field name, then global field name, then local field type."""
        provider = self.resolve_name(container, field_name)
        if provider is None:
            provider = self.resolve_type(container, field_type)
        return provider

    def resolve_name(self, container: TypeDescriptor, field_name: str) -> Provider | None:
        for key in _container_keys(container):
            provider = self._local_names.get((key, field_name))
            if provider is not None:
                return provider
        return self._global_names.get(field_name)

    def resolve_type(self, container: TypeDescriptor, field_type: TypeDescriptor) -> Provider | None:
        for key in _container_keys(container):
            provider = self._local_types.get((key, field_type))
            if provider is not None:
                return provider
        return None

    def __len__(self) -> int:
        return len(self._global_types) + len(self._global_names) + len(self._local_types) + len(self._local_names)


def _container_keys(container: TypeDescriptor) -> tuple[TypeDescriptor, ...]:
    cls = origin_class(container)
    if cls is None or isinstance(container, Named):
        return (container,)
    return (container, Named(cls))


def _bound_provider(provider: Provider, factory: ObjectFactory) -> Provider:
    for_factory = getattr(provider, "for_factory", None)
    return provider if for_factory is None else for_factory(factory)
