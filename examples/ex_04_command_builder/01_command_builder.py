"""A UI command builder on top of the injector.

UI toolkits usually model user actions as command objects with ``execute`` and
``can_execute``. ``CommandBuilder`` takes business-logic callables whose
dependencies live in the container, binds them once, and wraps the result in a
command. It is itself resolved from the container, next to the injector.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from wirebind import (
    CancellationToken,
    Container,
    DelegateInjector,
    InvocationShape,
    Lifetime,
    WireBindInvalidShapeError,
    add_delegate_injection,
    classify_shape,
)


class Command:
    def __init__(self, execute: Callable[[], None], can_execute: Callable[[], bool]) -> None:
        self._execute = execute
        self._can_execute = can_execute

    def can_execute(self) -> bool:
        return self._can_execute()

    def execute(self) -> None:
        if self.can_execute():
            self._execute()


class AsyncCommand:
    def __init__(
        self,
        execute: Callable[[CancellationToken], Awaitable[Any]],
        can_execute: Callable[[], bool],
    ) -> None:
        self._execute = execute
        self._can_execute = can_execute
        self._token = CancellationToken()

    def can_execute(self) -> bool:
        return self._can_execute()

    def cancel(self) -> None:
        self._token.cancel()

    async def execute(self) -> None:
        if self.can_execute():
            await self._execute(self._token)


def _always() -> bool:
    return True


class CommandBuilder:
    def __init__(self, injector: DelegateInjector) -> None:
        self._injector = injector

    def command(
        self,
        execute: Callable[..., Any],
        can_execute: Callable[[], bool] = _always,
    ) -> Command:
        return Command(self._injector.bind_as(InvocationShape.SYNC, execute), can_execute)

    def async_command(
        self,
        execute: Callable[..., Any],
        can_execute: Callable[[], bool] = _always,
    ) -> AsyncCommand:
        bound = self._injector.bind(execute)
        shape = classify_shape(bound)
        if shape is InvocationShape.ASYNC_CANCELLABLE:
            return AsyncCommand(bound, can_execute)
        if shape is InvocationShape.ASYNC:
            return AsyncCommand(lambda _token: bound(), can_execute)
        msg = f"Cannot build an async command from shape '{shape.value}'."
        raise WireBindInvalidShapeError(msg)


class Dependency:
    def get_text(self) -> str:
        return "text from dependency"


def executed_business_logic(dependency: Dependency) -> None:
    print(f"executed: {dependency.get_text()}")  # => executed: text from dependency


async def refresh(dependency: Dependency, token: CancellationToken) -> None:
    await asyncio.sleep(0)
    print(f"refreshed={not token.is_cancelled}")  # => refreshed=True


def main() -> None:
    container = add_delegate_injection(Container())
    container.add_concrete(CommandBuilder, lifetime=Lifetime.SINGLETON)
    container.add_concrete(Dependency, lifetime=Lifetime.SINGLETON)

    builder = container.resolve(CommandBuilder)

    command = builder.command(executed_business_logic)
    if command.can_execute():
        command.execute()

    asyncio.run(builder.async_command(refresh).execute())

    def needs_value(value: int) -> None:
        pass

    try:
        builder.command(needs_value)
    except WireBindInvalidShapeError as error:
        print(f"rejected={type(error).__name__}")  # => rejected=WireBindInvalidShapeError


if __name__ == "__main__":
    main()
