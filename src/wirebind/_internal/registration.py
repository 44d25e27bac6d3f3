from __future__ import annotations

from wirebind._internal.container import Container
from wirebind._internal.injector import DelegateInjector
from wirebind._internal.invoker import DelegateInvoker
from wirebind._internal.providers import Lifetime
from wirebind._internal.registry import ResourceRegistry


def add_delegate_injection(container: Container) -> Container:
    """Register the services required for delegate injection.

    The container itself is registered as ``ResourceRegistry`` so that
    ``DelegateInjector`` binds from the same registrations it is resolved
    from. ``DelegateInjector`` and ``DelegateInvoker`` are singletons.

    Args:
        container: Container to register into.

    Returns:
        The same container, for chaining further registrations.

    Examples:
        .. code-block:: python

            container = add_delegate_injection(Container())
            invoker = container.resolve(DelegateInvoker)

    """
    container.add_instance(container, provides=ResourceRegistry)
    container.add_concrete(DelegateInjector, lifetime=Lifetime.SINGLETON)
    container.add_concrete(DelegateInvoker, lifetime=Lifetime.SINGLETON)
    return container


__all__ = ["add_delegate_injection"]
