from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeAlias, TypeVar

from wirebind._internal.inspection import CallableInspector
from wirebind._internal.type_checks import is_none_annotation, is_runtime_class
from wirebind.exceptions import WireBindInvalidCallableError, WireBindInvalidRegistrationError

T = TypeVar("T")

UserDependency: TypeAlias = Any
"""A dependency key registered or requested by the user's code."""

ConcreteTypeProvider: TypeAlias = type[T]
"""A concrete type that can be instantiated to produce a dependency."""

FactoryProvider: TypeAlias = Callable[..., T]
"""A synchronous factory function that produces a dependency."""


class Lifetime(str, Enum):
    """Define cache behavior for provider results."""

    TRANSIENT = "transient"
    """Build a new value for every resolution call."""

    SINGLETON = "singleton"
    """Build the value once and share it for the lifetime of the container."""


@dataclass(frozen=True, slots=True)
class ProviderDependency:
    """A provider parameter satisfied from the container."""

    name: str
    provides: UserDependency
    kind: inspect._ParameterKind
    has_default: bool


@dataclass(kw_only=True)
class ProviderSpec:
    """Describe how a single dependency key is produced and cached.

    Exactly one provider source is set: an instance, a concrete type, or a
    factory.
    """

    provides: UserDependency
    """The dependency key that this provider supplies."""

    instance: Any = None
    """A pre-built value, for instance providers."""
    concrete_type: ConcreteTypeProvider[Any] | None = None
    """A class instantiated on resolution, for concrete providers."""
    factory: FactoryProvider[Any] | None = None
    """A function called on resolution, for factory providers."""
    dependencies: list[ProviderDependency] = field(default_factory=list)
    """Parameters of the concrete type or factory resolved from the container."""
    lifetime: Lifetime | None = None
    """Cache behavior. ``None`` for instance providers."""

    @property
    def is_instance(self) -> bool:
        return self.concrete_type is None and self.factory is None

    @property
    def builder(self) -> Callable[..., Any]:
        builder = self.concrete_type or self.factory
        if builder is None:  # pragma: no cover - guarded by is_instance
            msg = f"Provider for {self.provides!r} has no builder."
            raise WireBindInvalidRegistrationError(msg)
        return builder


class ProvidersRegistrations:
    """Store provider specs indexed by dependency key.

    Registration keys are unique: adding a spec for an existing dependency key
    replaces the previous spec.
    """

    def __init__(self) -> None:
        self._registrations_by_type: dict[UserDependency, ProviderSpec] = {}

    def add(self, spec: ProviderSpec) -> ProviderSpec | None:
        """Add a provider specification and return the one it replaced, if any.

        Args:
            spec: Provider specification to register.

        """
        previous_spec = self._registrations_by_type.get(spec.provides)
        self._registrations_by_type[spec.provides] = spec
        return previous_spec

    def find_by_type(self, dep_type: UserDependency) -> ProviderSpec | None:
        """Get a provider specification by dependency key, if it exists.

        Unhashable keys are never registered and yield ``None``.

        Args:
            dep_type: Dependency key to look up.

        """
        try:
            return self._registrations_by_type.get(dep_type)
        except TypeError:
            return None

    def __contains__(self, dep_type: object) -> bool:
        return self.find_by_type(dep_type) is not None


@dataclass(slots=True)
class ProviderDependenciesExtractor:
    """Extract container-resolved dependencies from provider objects."""

    inspector: CallableInspector = field(default_factory=CallableInspector)

    def extract_from_concrete_type(
        self,
        concrete_type: ConcreteTypeProvider[Any],
    ) -> list[ProviderDependency]:
        """Extract dependencies from a concrete type's constructor.

        Args:
            concrete_type: Concrete class provider to inspect.

        """
        return self._extract_dependencies(provider=concrete_type)

    def extract_from_factory(self, factory: FactoryProvider[Any]) -> list[ProviderDependency]:
        """Extract dependencies from a factory's parameters.

        Args:
            factory: Factory provider callable to inspect.

        """
        return self._extract_dependencies(provider=factory)

    def _extract_dependencies(self, *, provider: Callable[..., Any]) -> list[ProviderDependency]:
        try:
            inspection = self.inspector.inspect_callable(provider)
        except WireBindInvalidCallableError as error:
            raise WireBindInvalidRegistrationError(str(error)) from error

        dependencies: list[ProviderDependency] = []
        for inspected_parameter in inspection.parameters:
            if inspected_parameter.is_variadic:
                continue
            parameter = inspected_parameter.parameter
            has_default = parameter.default is not inspect.Parameter.empty
            if not inspected_parameter.has_dependency_key:
                if has_default:
                    continue
                msg = (
                    f"Unable to infer dependency for parameter '{parameter.name}' of "
                    f"provider '{inspection.name}': add a resolvable type annotation."
                )
                raise WireBindInvalidRegistrationError(msg)
            dependencies.append(
                ProviderDependency(
                    name=parameter.name,
                    provides=inspected_parameter.annotation,
                    kind=parameter.kind,
                    has_default=has_default,
                ),
            )
        return dependencies


@dataclass(slots=True)
class ProviderReturnTypeExtractor:
    """Infer the dependency key a factory provides from its return annotation."""

    inspector: CallableInspector = field(default_factory=CallableInspector)

    def extract_from_factory(self, factory: FactoryProvider[Any]) -> UserDependency:
        """Return the resolved return annotation of ``factory``.

        Args:
            factory: Factory provider callable to inspect.

        Raises:
            WireBindInvalidRegistrationError: If the return annotation is
                missing or cannot be evaluated.

        """
        try:
            inspection = self.inspector.inspect_callable(factory)
        except WireBindInvalidCallableError as error:
            raise WireBindInvalidRegistrationError(str(error)) from error

        return_annotation = inspection.return_annotation
        if is_none_annotation(return_annotation) or isinstance(return_annotation, str):
            msg = (
                f"Unable to infer the provided type of factory '{inspection.name}': "
                "add a return annotation or pass 'provides' explicitly."
            )
            raise WireBindInvalidRegistrationError(msg)
        return return_annotation


class RegistrationValidator:
    """Validate registrations before creating provider specs."""

    def validate_concrete_type(self, concrete_type: object) -> None:
        """Validate that a concrete provider is instantiable."""
        if not is_runtime_class(concrete_type):
            msg = f"Concrete provider must be a class, got {concrete_type!r}."
            raise WireBindInvalidRegistrationError(msg)

        if inspect.isabstract(concrete_type):
            msg = f"Concrete provider '{concrete_type.__qualname__}' cannot be an abstract class."
            raise WireBindInvalidRegistrationError(msg)

    def validate_factory(self, factory: object) -> None:
        """Validate that a factory is a synchronous callable."""
        if not callable(factory):
            msg = f"Factory provider must be callable, got {factory!r}."
            raise WireBindInvalidRegistrationError(msg)
        if inspect.iscoroutinefunction(factory) or inspect.isasyncgenfunction(factory):
            msg = (
                f"Factory provider {factory!r} is asynchronous; resolution is synchronous, "
                "register a pre-built instance instead."
            )
            raise WireBindInvalidRegistrationError(msg)
