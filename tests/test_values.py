import decimal
import random
import uuid

import faker
import pytest

from spearmint import ObjectFactoryBuilder, values
from spearmint.config import global_config
from spearmint.cycles import GenerationPath
from spearmint.descriptors import Named, Unbound

INT = Named(int)


class TestStaticValue:
    def test_returns_same_value(self) -> None:
        value = "test"
        provider = values.StaticValue(value)
        assert provider.produce(INT, GenerationPath()) == "test"

    def test_recognizes_any_descriptor(self) -> None:
        provider = values.StaticValue(1)
        assert provider.recognizes(INT)
        assert provider.recognizes(Unbound())


class TestLazyValue:
    def test_returns_callback_result(self) -> None:
        provider = values.LazyValue(lambda descriptor: "ok")
        assert provider.produce(INT, GenerationPath()) == "ok"

    def test_receives_requested_descriptor(self) -> None:
        provider = values.LazyValue(lambda descriptor: str(descriptor))
        assert provider.produce(Named(str), GenerationPath()) == "str"


class TestCallValue:
    def test_calls_callback_without_args(self) -> None:
        provider = values.CallValue(lambda: "done")
        assert provider.produce(INT, GenerationPath()) == "done"

    def test_passes_positional_args(self) -> None:
        provider = values.CallValue(lambda a, b: a + b, 2, 3)
        assert provider.produce(INT, GenerationPath()) == 5

    def test_passes_keyword_args(self) -> None:
        provider = values.CallValue(
            lambda *, first, last: f"{first} {last}",
            first="Ada",
            last="Lovelace",
        )
        assert provider.produce(INT, GenerationPath()) == "Ada Lovelace"

    def test_passes_positional_and_keyword_args(self) -> None:
        provider = values.CallValue(
            lambda greeting, *, name: f"{greeting}, {name}",
            "Hello",
            name="Alex",
        )
        assert provider.produce(INT, GenerationPath()) == "Hello, Alex"


class TestSequenceValue:
    def test_default_sequence_starts_at_one(self) -> None:
        provider = values.SequenceValue()
        assert provider.produce(INT, GenerationPath()) == 1

    def test_default_sequence_increments_each_call(self) -> None:
        provider = values.SequenceValue()
        assert provider.produce(INT, GenerationPath()) == 1
        assert provider.produce(INT, GenerationPath()) == 2
        assert provider.produce(INT, GenerationPath()) == 3

    def test_custom_start_value(self) -> None:
        provider = values.SequenceValue(start=10)
        assert provider.produce(INT, GenerationPath()) == 10
        assert provider.produce(INT, GenerationPath()) == 11

    def test_string_format_applied(self) -> None:
        provider = values.SequenceValue(format="user-{:03d}")
        assert provider.produce(INT, GenerationPath()) == "user-001"
        assert provider.produce(INT, GenerationPath()) == "user-002"

    def test_callable_format_applied(self) -> None:
        provider = values.SequenceValue(format=lambda n: n * 10)
        assert provider.produce(INT, GenerationPath()) == 10
        assert provider.produce(INT, GenerationPath()) == 20

    def test_instances_are_independent(self) -> None:
        first = values.SequenceValue()
        second = values.SequenceValue()
        assert first.produce(INT, GenerationPath()) == 1
        assert first.produce(INT, GenerationPath()) == 2
        assert second.produce(INT, GenerationPath()) == 1


class TestGen:
    def test_decimal_quantizes_places(self) -> None:
        value = values._Gen().decimal(1.0, 2.0, places=3).produce(INT, GenerationPath())
        assert isinstance(value, decimal.Decimal)
        assert value.as_tuple().exponent == -3

    def test_normal_returns_float(self) -> None:
        value = values._Gen().normal(10.0, 2.0).produce(INT, GenerationPath())
        assert isinstance(value, float)

    def test_normal_rejects_negative_stdev(self) -> None:
        with pytest.raises(ValueError, match="stdev must be >= 0"):
            values._Gen().normal(10.0, -1.0)

    def test_sample_returns_k_items(self) -> None:
        value = values._Gen().sample([1, 2, 3, 4], 2).produce(INT, GenerationPath())
        assert len(value) == 2
        assert set(value).issubset({1, 2, 3, 4})

    def test_choices_returns_list_of_length_k(self) -> None:
        value = values._Gen().choices(["a", "b"], k=3).produce(INT, GenerationPath())
        assert len(value) == 3
        assert set(value).issubset({"a", "b"})

    def test_uuid4_returns_uuid(self) -> None:
        value = values._Gen().uuid4().produce(INT, GenerationPath())
        assert isinstance(value, uuid.UUID)

    def test_string_returns_requested_length(self) -> None:
        value = values._Gen().string(12, "abc").produce(INT, GenerationPath())
        assert len(value) == 12
        assert set(value).issubset({"a", "b", "c"})

    def test_string_rejects_negative_length(self) -> None:
        with pytest.raises(ValueError, match="length must be >= 0"):
            values._Gen().string(-1)

    def test_string_rejects_empty_alphabet_with_positive_length(self) -> None:
        with pytest.raises(ValueError, match="alphabet cannot be empty"):
            values._Gen().string(1, "")

    def test_bool_returns_bool(self) -> None:
        value = values._Gen().bool().produce(INT, GenerationPath())
        assert isinstance(value, bool)

    def test_bytes_returns_requested_length(self) -> None:
        value = values._Gen().bytes(8).produce(INT, GenerationPath())
        assert isinstance(value, bytes)
        assert len(value) == 8

    def test_bytes_rejects_negative_n(self) -> None:
        with pytest.raises(ValueError, match="n must be >= 0"):
            values._Gen().bytes(-1)

    def test_int_within_bounds(self) -> None:
        value = values._Gen().int(5, 10).produce(INT, GenerationPath())
        assert 5 <= value <= 10

    def test_float_within_bounds(self) -> None:
        value = values._Gen().float(1.5, 2.5).produce(INT, GenerationPath())
        assert 1.5 <= value <= 2.5

    def test_choice_returns_member_from_sequence(self) -> None:
        value = values._Gen().choice(["x", "y", "z"]).produce(INT, GenerationPath())
        assert value in {"x", "y", "z"}

    def test_uuid4_is_version_4(self) -> None:
        assert values._Gen().uuid4().produce(INT, GenerationPath()).version == 4

    def test_bound_to_factory_random(self) -> None:
        factory = ObjectFactoryBuilder().faker(faker.Faker()).random(random.Random(8)).build()
        value = values._Gen().int(0, 10**9).for_factory(factory)
        assert value.produce(INT, GenerationPath()) == random.Random(8).randint(0, 10**9)

    def test_binding_copies_the_value(self) -> None:
        value = values._Gen().bool()
        factory = ObjectFactoryBuilder().seed(1).build()
        assert value.for_factory(factory) is not value


class TestFakeValue:
    def test_calls_faker_method(self) -> None:
        value = values.FakerProxy().email().produce(INT, GenerationPath())
        assert isinstance(value, str)
        assert "@" in value

    def test_passes_arguments(self) -> None:
        value = values.FakerProxy().pyint(min_value=3, max_value=3).produce(INT, GenerationPath())
        assert value == 3

    def test_uses_configured_faker(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class _Fake:
            def first_name(self) -> str:
                return "Ada"

        monkeypatch.setattr(global_config, "faker", _Fake())
        assert values.FakeValue("first_name").produce(INT, GenerationPath()) == "Ada"

    def test_bound_to_factory_faker(self) -> None:
        class _Fake:
            def first_name(self) -> str:
                return "Grace"

        factory = ObjectFactoryBuilder().faker(_Fake()).build()  # type: ignore[arg-type]
        value = values.FakeValue("first_name").for_factory(factory)
        assert value.produce(INT, GenerationPath()) == "Grace"


class TestForFactory:
    def test_other_values_are_kept(self) -> None:
        factory = ObjectFactoryBuilder().seed(1).build()
        for value in (values.StaticValue(1), values.SequenceValue(), values.CallValue(lambda: 1)):
            assert value.for_factory(factory) is value


class TestAsProvider:
    def test_wraps_plain_values(self) -> None:
        provider = values.as_provider(42)
        assert isinstance(provider, values.StaticValue)
        assert provider.value == 42

    def test_keeps_providers(self) -> None:
        provider = values.SequenceValue()
        assert values.as_provider(provider) is provider
