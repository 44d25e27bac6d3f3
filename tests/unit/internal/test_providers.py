from __future__ import annotations

import inspect

import pytest

from wirebind._internal.providers import (
    Lifetime,
    ProviderDependenciesExtractor,
    ProviderDependency,
    ProviderReturnTypeExtractor,
    ProvidersRegistrations,
    ProviderSpec,
    RegistrationValidator,
)
from wirebind.exceptions import WireBindInvalidRegistrationError


class ServiceA:
    pass


class ServiceB:
    pass


DEFAULT_SERVICE_A = ServiceA()


class Consumer:
    def __init__(self, a: ServiceA, /, b: ServiceB, *, label: str = "consumer") -> None:
        self.a = a
        self.b = b
        self.label = label


def build_consumer(
    a: ServiceA = DEFAULT_SERVICE_A,
    *args: int,
    b: ServiceB,
    **kwargs: str,
) -> Consumer:
    return Consumer(a, b)


def build_with_optional_untyped(a: ServiceA, tag="default") -> Consumer:
    return Consumer(a, ServiceB(), label=tag)


def build_with_required_untyped(a) -> Consumer:
    return Consumer(a, ServiceB())


def build_without_return():
    return ServiceA()


def _instance_spec(provides: type[object]) -> ProviderSpec:
    return ProviderSpec(provides=provides, instance=provides())


def test_add_returns_previous_spec_for_same_key() -> None:
    registrations = ProvidersRegistrations()
    first_spec = _instance_spec(ServiceA)
    second_spec = _instance_spec(ServiceA)

    assert registrations.add(first_spec) is None
    assert registrations.add(second_spec) is first_spec
    assert registrations.find_by_type(ServiceA) is second_spec
    assert ServiceB not in registrations


def test_registrations_are_keyed_independently() -> None:
    registrations = ProvidersRegistrations()
    a_spec = _instance_spec(ServiceA)
    b_spec = _instance_spec(ServiceB)
    registrations.add(a_spec)
    registrations.add(b_spec)

    assert registrations.find_by_type(ServiceA) is a_spec
    assert registrations.find_by_type(ServiceB) is b_spec
    assert ServiceA in registrations
    assert Consumer not in registrations


def test_find_by_type_returns_none_for_unhashable_keys() -> None:
    registrations = ProvidersRegistrations()

    assert registrations.find_by_type({"key": "value"}) is None
    assert [ServiceA] not in registrations


def test_spec_kind_flags() -> None:
    instance_spec = _instance_spec(ServiceA)
    concrete_spec = ProviderSpec(
        provides=Consumer,
        concrete_type=Consumer,
        lifetime=Lifetime.TRANSIENT,
    )

    assert instance_spec.is_instance
    assert not concrete_spec.is_instance
    assert concrete_spec.builder is Consumer


def test_extract_from_concrete_type_keeps_parameter_kinds_and_defaults() -> None:
    dependencies = ProviderDependenciesExtractor().extract_from_concrete_type(Consumer)

    assert dependencies == [
        ProviderDependency(
            name="a",
            provides=ServiceA,
            kind=inspect.Parameter.POSITIONAL_ONLY,
            has_default=False,
        ),
        ProviderDependency(
            name="b",
            provides=ServiceB,
            kind=inspect.Parameter.POSITIONAL_OR_KEYWORD,
            has_default=False,
        ),
        ProviderDependency(
            name="label",
            provides=str,
            kind=inspect.Parameter.KEYWORD_ONLY,
            has_default=True,
        ),
    ]


def test_extract_from_factory_skips_variadic_parameters() -> None:
    dependencies = ProviderDependenciesExtractor().extract_from_factory(build_consumer)

    assert [(dependency.name, dependency.provides) for dependency in dependencies] == [
        ("a", ServiceA),
        ("b", ServiceB),
    ]
    assert dependencies[0].has_default


def test_extract_skips_unannotated_parameters_with_defaults() -> None:
    dependencies = ProviderDependenciesExtractor().extract_from_factory(build_with_optional_untyped)

    assert [dependency.name for dependency in dependencies] == ["a"]


def test_extract_rejects_unannotated_required_parameters() -> None:
    with pytest.raises(
        WireBindInvalidRegistrationError,
        match="Unable to infer dependency for parameter 'a' of provider",
    ):
        ProviderDependenciesExtractor().extract_from_factory(build_with_required_untyped)


def test_return_type_extractor_uses_resolved_return_annotation() -> None:
    assert ProviderReturnTypeExtractor().extract_from_factory(build_consumer) is Consumer


def test_return_type_extractor_rejects_missing_return_annotation() -> None:
    with pytest.raises(WireBindInvalidRegistrationError, match="pass 'provides' explicitly"):
        ProviderReturnTypeExtractor().extract_from_factory(build_without_return)


def test_registration_validator_accepts_concrete_classes_and_sync_factories() -> None:
    validator = RegistrationValidator()

    validator.validate_concrete_type(Consumer)
    validator.validate_factory(build_consumer)
    validator.validate_factory(Consumer)


def test_registration_validator_rejects_generic_aliases() -> None:
    with pytest.raises(WireBindInvalidRegistrationError, match="must be a class"):
        RegistrationValidator().validate_concrete_type(list[int])
