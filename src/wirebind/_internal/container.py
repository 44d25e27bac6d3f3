from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any, Literal, TypeVar, cast, overload

from wirebind._internal.providers import (
    ConcreteTypeProvider,
    FactoryProvider,
    Lifetime,
    ProviderDependenciesExtractor,
    ProviderReturnTypeExtractor,
    ProvidersRegistrations,
    ProviderSpec,
    RegistrationValidator,
)
from wirebind.exceptions import (
    WireBindDependencyNotRegisteredError,
    WireBindInvalidRegistrationError,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)
_MISSING: Any = object()


class Container:
    """Register providers by dependency key and resolve them synchronously.

    Dependency keys are usually concrete types or protocols, but any hashable
    annotation works, including ``typing.Annotated`` tokens. The container is
    strict: only registered keys resolve, and ``can_resolve`` answers that
    question without building anything. This makes it a ``ResourceRegistry``
    for ``DelegateInjector``.

    Constructor and factory parameters are resolved from the same container
    using their type annotations. Singletons are built once under a lock;
    transient providers build a new value per ``resolve`` call.
    """

    def __init__(self, *, default_lifetime: Lifetime = Lifetime.TRANSIENT) -> None:
        """Initialize an empty container.

        Args:
            default_lifetime: Lifetime used by registrations that omit
                ``lifetime``.

        Examples:
            .. code-block:: python

                container = Container()
                singleton_container = Container(default_lifetime=Lifetime.SINGLETON)

        """
        self._default_lifetime = Lifetime(default_lifetime)
        self._providers_registrations = ProvidersRegistrations()
        self._provider_dependencies_extractor = ProviderDependenciesExtractor()
        self._provider_return_type_extractor = ProviderReturnTypeExtractor()
        self._registration_validator = RegistrationValidator()
        self._singletons: dict[Any, Any] = {}
        self._singletons_lock = threading.RLock()

    # region Registration Methods
    def add_instance(
        self,
        instance: T,
        *,
        provides: Any | Literal["infer"] = "infer",
    ) -> None:
        """Register a pre-built instance as a provider.

        Re-registering the same dependency key overrides the previous spec.

        Args:
            instance: Instance value to return on resolution.
            provides: Dependency key to bind. Use ``"infer"`` to bind by
                ``type(instance)``.

        Raises:
            WireBindInvalidRegistrationError: If ``provides`` is ``None``.

        Examples:
            .. code-block:: python

                settings = Settings(api_url="https://api.example.com")
                container.add_instance(settings)

                resolved = container.resolve(Settings)

        """
        resolved_provides = self._resolve_registration_provides(
            provides=provides,
            inferred=lambda: type(instance),
            method_name="add_instance",
        )
        self._register(ProviderSpec(provides=resolved_provides, instance=instance))

    def add_concrete(
        self,
        concrete_type: ConcreteTypeProvider[Any],
        *,
        provides: Any | Literal["infer"] = "infer",
        lifetime: Lifetime | Literal["from_container"] = "from_container",
    ) -> None:
        """Register a concrete type provider.

        Constructor parameters are resolved from the container by annotation.
        Parameters with defaults are skipped when their key is not registered.

        Args:
            concrete_type: Class instantiated on resolution.
            provides: Dependency key to bind, for example a protocol the class
                implements. ``"infer"`` binds ``concrete_type`` itself.
            lifetime: Cache behavior, or ``"from_container"`` for the
                container default.

        Raises:
            WireBindInvalidRegistrationError: If ``concrete_type`` is not an
                instantiable class, a constructor parameter has no usable
                annotation, or ``provides``/``lifetime`` are invalid.

        Examples:
            .. code-block:: python

                container.add_concrete(SqlUserRepository, provides=UserRepository)
                container.add_concrete(Clock, lifetime=Lifetime.SINGLETON)

        """
        self._registration_validator.validate_concrete_type(concrete_type)
        resolved_provides = self._resolve_registration_provides(
            provides=provides,
            inferred=lambda: concrete_type,
            method_name="add_concrete",
        )
        self._register(
            ProviderSpec(
                provides=resolved_provides,
                concrete_type=concrete_type,
                dependencies=self._provider_dependencies_extractor.extract_from_concrete_type(
                    concrete_type,
                ),
                lifetime=self._resolve_registration_lifetime(lifetime, method_name="add_concrete"),
            ),
        )

    def add_factory(
        self,
        factory: FactoryProvider[Any],
        *,
        provides: Any | Literal["infer"] = "infer",
        lifetime: Lifetime | Literal["from_container"] = "from_container",
    ) -> None:
        """Register a factory function provider.

        Factory parameters are resolved from the container by annotation.

        Args:
            factory: Synchronous callable producing the dependency.
            provides: Dependency key to bind. ``"infer"`` uses the factory's
                return annotation.
            lifetime: Cache behavior, or ``"from_container"`` for the
                container default.

        Raises:
            WireBindInvalidRegistrationError: If the factory is not a
                synchronous callable, its provided type cannot be inferred, or
                ``provides``/``lifetime`` are invalid.

        Examples:
            .. code-block:: python

                def build_client(settings: Settings) -> HttpClient:
                    return HttpClient(settings.api_url)


                container.add_factory(build_client, lifetime=Lifetime.SINGLETON)

        """
        self._registration_validator.validate_factory(factory)
        resolved_provides = self._resolve_registration_provides(
            provides=provides,
            inferred=lambda: self._provider_return_type_extractor.extract_from_factory(factory),
            method_name="add_factory",
        )
        self._register(
            ProviderSpec(
                provides=resolved_provides,
                factory=factory,
                dependencies=self._provider_dependencies_extractor.extract_from_factory(factory),
                lifetime=self._resolve_registration_lifetime(lifetime, method_name="add_factory"),
            ),
        )

    # endregion Registration Methods

    # region Resolution Methods
    def can_resolve(self, dependency: Any) -> bool:
        """Return whether ``dependency`` is registered, without resolving it.

        Args:
            dependency: Dependency key to check.

        """
        return dependency in self._providers_registrations

    @overload
    def resolve(self, dependency: type[T]) -> T: ...

    @overload
    def resolve(self, dependency: Any) -> Any: ...

    def resolve(self, dependency: Any) -> Any:
        """Resolve a dependency synchronously.

        Args:
            dependency: Dependency key to resolve.

        Returns:
            Resolved dependency value.

        Raises:
            WireBindDependencyNotRegisteredError: If ``dependency`` or one of its
                required provider dependencies is not registered.

        Examples:
            .. code-block:: python

                container.add_concrete(Service)
                service = container.resolve(Service)

        """
        spec = self._providers_registrations.find_by_type(dependency)
        if spec is None:
            raise WireBindDependencyNotRegisteredError(dependency)
        if spec.is_instance:
            return spec.instance
        if spec.lifetime is Lifetime.SINGLETON:
            return self._resolve_singleton(spec)
        return self._build(spec)

    # endregion Resolution Methods

    def _register(self, spec: ProviderSpec) -> None:
        with self._singletons_lock:
            previous_spec = self._providers_registrations.add(spec)
            if previous_spec is not None:
                self._singletons.pop(spec.provides, None)
        logger.debug(
            "Registered provider for %r (lifetime=%s, replaced=%s)",
            spec.provides,
            spec.lifetime.value if spec.lifetime else "instance",
            previous_spec is not None,
        )

    def _resolve_singleton(self, spec: ProviderSpec) -> Any:
        value = self._singletons.get(spec.provides, _MISSING)
        if value is not _MISSING:
            return value
        with self._singletons_lock:
            value = self._singletons.get(spec.provides, _MISSING)
            if value is _MISSING:
                value = self._build(spec)
                self._singletons[spec.provides] = value
            return value

    def _build(self, spec: ProviderSpec) -> Any:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        positional_gap = False
        for dependency in spec.dependencies:
            is_positional = dependency.kind is inspect.Parameter.POSITIONAL_ONLY
            # Positional-only values after a skipped default cannot be placed.
            if is_positional and positional_gap:
                continue
            if not self.can_resolve(dependency.provides):
                if dependency.has_default:
                    positional_gap = positional_gap or is_positional
                    continue
                raise WireBindDependencyNotRegisteredError(dependency.provides)
            value = self.resolve(dependency.provides)
            if is_positional:
                args.append(value)
            else:
                kwargs[dependency.name] = value
        return spec.builder(*args, **kwargs)

    def _resolve_registration_provides(
        self,
        *,
        provides: Any,
        inferred: Callable[[], Any],
        method_name: str,
    ) -> Any:
        provides_value = cast("Any", provides)
        if provides_value is None:
            msg = f"{method_name}() parameter 'provides' must not be None; use 'infer'."
            raise WireBindInvalidRegistrationError(msg)
        if isinstance(provides_value, str):
            if provides_value != "infer":
                msg = f"{method_name}() parameter 'provides' must be a dependency key or 'infer'."
                raise WireBindInvalidRegistrationError(msg)
            return inferred()
        return provides_value

    def _resolve_registration_lifetime(self, lifetime: Any, *, method_name: str) -> Lifetime:
        if isinstance(lifetime, Lifetime):
            return lifetime
        if lifetime == "from_container":
            return self._default_lifetime
        msg = f"{method_name}() parameter 'lifetime' must be Lifetime or 'from_container'."
        raise WireBindInvalidRegistrationError(msg)
