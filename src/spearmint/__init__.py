from spearmint import values
from spearmint.bindings import bind
from spearmint.config import configure
from spearmint.factories import ObjectFactory, ObjectFactoryBuilder
from spearmint.introspection import Transient
from spearmint.resolvers import MappingResolver, SubclassResolver
from spearmint.terminators import NullTerminator, StubTerminator


gen = values._Gen()
fake = values.FakerProxy()
static = values.StaticValue
call = values.CallValue
lazy = values.LazyValue
seq = values.SequenceValue


__all__ = [
    "MappingResolver",
    "NullTerminator",
    "ObjectFactory",
    "ObjectFactoryBuilder",
    "StubTerminator",
    "SubclassResolver",
    "Transient",
    "bind",
    "call",
    "configure",
    "fake",
    "gen",
    "lazy",
    "seq",
    "static",
]
