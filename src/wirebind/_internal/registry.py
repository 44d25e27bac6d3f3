from __future__ import annotations

from typing import Any, Protocol, TypeVar, overload, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class ResourceRegistry(Protocol):
    """Protocol for the type-keyed lookup consumed by ``DelegateInjector``.

    The injector only reads from the registry: it asks ``can_resolve`` for each
    annotated parameter and calls ``resolve`` once for every key reported as
    resolvable. Thread safety of concurrent lookups is the registry's own
    contract.
    """

    @overload
    def resolve(self, dependency: type[T]) -> T: ...

    @overload
    def resolve(self, dependency: Any) -> Any: ...

    def resolve(self, dependency: Any) -> Any:
        """Resolve the given dependency and return its instance.

        Args:
            dependency: Dependency key to resolve.

        """

    def can_resolve(self, dependency: Any) -> bool:
        """Return whether ``dependency`` has a provider, without resolving it.

        Args:
            dependency: Dependency key to check.

        """
