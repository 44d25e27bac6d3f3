"""One async contract for four callable shapes.

``DelegateInvoker`` binds a callable through the injector and then runs it if
what is left is one of:

1. ``() -> None``
2. ``(CancellationToken) -> None``
3. ``async () -> None``
4. ``async (CancellationToken) -> None``

Only shapes that declare a ``CancellationToken`` parameter receive the token.
"""

from __future__ import annotations

import asyncio

from wirebind import (
    CancellationToken,
    Container,
    DelegateInjector,
    DelegateInvoker,
    InvocationShape,
    WireBindOperationCancelledError,
    add_delegate_injection,
    classify_shape,
)


class AuditLog:
    def __init__(self) -> None:
        self.entries: list[str] = []


def sync_step(log: AuditLog) -> None:
    log.entries.append("sync")


def sync_cancellable_step(log: AuditLog, token: CancellationToken) -> None:
    log.entries.append(f"sync_cancellable:{token.is_cancelled}")


async def async_step(log: AuditLog) -> None:
    await asyncio.sleep(0)
    log.entries.append("async")


async def async_cancellable_step(log: AuditLog, token: CancellationToken) -> None:
    await asyncio.sleep(0)
    token.raise_if_cancelled()
    log.entries.append("async_cancellable")


async def run() -> None:
    container = add_delegate_injection(Container())
    log = AuditLog()
    container.add_instance(log)
    invoker = container.resolve(DelegateInvoker)

    token = CancellationToken()
    for step in (sync_step, sync_cancellable_step, async_step, async_cancellable_step):
        await invoker.invoke(step, cancellation=token)
    print(f"entries={len(log.entries)}")  # => entries=4
    print(f"token_seen={log.entries[1]}")  # => token_seen=sync_cancellable:False
    print(f"last={log.entries[-1]}")  # => last=async_cancellable

    cancelled = CancellationToken.cancelled()
    await invoker.invoke(sync_step, cancellation=cancelled)
    try:
        await invoker.invoke(async_cancellable_step, cancellation=cancelled)
    except WireBindOperationCancelledError as error:
        print(f"cancelled={type(error).__name__}")  # => cancelled=WireBindOperationCancelledError

    invoker.invoke_sync(sync_step)
    print(f"sync_calls={log.entries.count('sync')}")  # => sync_calls=3

    injector = container.resolve(DelegateInjector)
    bound_step = injector.bind(async_cancellable_step)
    print(f"shape={classify_shape(bound_step).name}")  # => shape=ASYNC_CANCELLABLE
    print(f"is_async={InvocationShape.ASYNC.is_async}")  # => is_async=True


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
