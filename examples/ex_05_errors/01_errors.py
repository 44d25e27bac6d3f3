"""Common error classes for troubleshooting.

This module triggers representative error paths and prints exception type names
so you can recognize each error category quickly.
"""

from __future__ import annotations

import asyncio
from typing import Any, cast

from wirebind import (
    Container,
    DelegateInjector,
    DelegateInvoker,
    InvocationShape,
    WireBindDependencyNotRegisteredError,
    WireBindError,
    WireBindInvalidRegistrationError,
    WireBindInvalidShapeError,
    WireBindNullArgumentError,
    WireBindUnsupportedShapeError,
)


class MissingDependency:
    pass


class Service:
    def __init__(self, missing: MissingDependency) -> None:
        self.missing = missing


def takes_value(value: int) -> None:
    pass


def returns_value() -> int:
    return 1


def handle(service: Service) -> None:
    pass


def main() -> None:
    container = Container()
    injector = DelegateInjector(container)
    invoker = DelegateInvoker(injector)

    try:
        injector.bind(cast("Any", None))
    except WireBindNullArgumentError as error:
        print(f"null={type(error).__name__}")  # => null=WireBindNullArgumentError

    try:
        injector.bind_as(InvocationShape.SYNC, takes_value)
    except WireBindInvalidShapeError as error:
        print(f"invalid_shape={type(error).__name__}")  # => invalid_shape=WireBindInvalidShapeError

    try:
        asyncio.run(invoker.invoke(returns_value))
    except WireBindUnsupportedShapeError as error:
        print(f"unsupported={type(error).__name__}")  # => unsupported=WireBindUnsupportedShapeError

    container.add_concrete(Service)
    try:
        injector.bind(handle)
    except WireBindDependencyNotRegisteredError as error:
        print(f"missing={type(error).__name__}")  # => missing=WireBindDependencyNotRegisteredError

    try:
        container.add_instance(object(), provides=None)
    except WireBindInvalidRegistrationError as error:
        print(f"registration={type(error).__name__}")  # => registration=WireBindInvalidRegistrationError

    print(f"base={issubclass(WireBindUnsupportedShapeError, WireBindError)}")  # => base=True


if __name__ == "__main__":
    main()
