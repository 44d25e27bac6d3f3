"""Shared pytest fixtures for wirebind tests."""

import pytest

from wirebind import Container, DelegateInjector, DelegateInvoker


@pytest.fixture()
def container() -> Container:
    """Empty container with transient default lifetime."""
    return Container()


@pytest.fixture()
def injector(container: Container) -> DelegateInjector:
    """Injector reading from the ``container`` fixture."""
    return DelegateInjector(container)


@pytest.fixture()
def invoker(injector: DelegateInjector) -> DelegateInvoker:
    """Invoker binding through the ``injector`` fixture."""
    return DelegateInvoker(injector)
