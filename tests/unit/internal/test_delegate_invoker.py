from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable
from typing import Any

import pytest

from wirebind import (
    CancellationToken,
    Container,
    DelegateInjector,
    DelegateInvoker,
    WireBindNullArgumentError,
    WireBindOperationCancelledError,
    WireBindUnsupportedShapeError,
)


class AuditLog:
    def __init__(self) -> None:
        self.entries: list[str] = []

    def write(self, entry: str) -> None:
        self.entries.append(entry)


class PriorityToken(CancellationToken):
    __slots__ = ()


class Worker:
    def __init__(self) -> None:
        self.tokens: list[CancellationToken] = []

    async def run(self, log: AuditLog, token: CancellationToken) -> None:
        self.tokens.append(token)
        log.write("worker")


class RecordingRegistry:
    def __init__(self, values: dict[Any, Any]) -> None:
        self.values = values
        self.resolved: list[Any] = []

    def can_resolve(self, dependency: Any) -> bool:
        return dependency in self.values

    def resolve(self, dependency: Any) -> Any:
        self.resolved.append(dependency)
        return self.values[dependency]


def sync_procedure(log: AuditLog) -> None:
    log.write("sync")


def sync_cancellable(log: AuditLog, token: CancellationToken) -> None:
    log.write(f"sync_cancellable:{token.is_cancelled}")


async def async_procedure(log: AuditLog) -> None:
    await asyncio.sleep(0)
    log.write("async")


async def async_cancellable(log: AuditLog, token: CancellationToken) -> None:
    token.raise_if_cancelled()
    await asyncio.sleep(0)
    log.write("async_cancellable")


async def _write_later(log: AuditLog, entry: str) -> None:
    await asyncio.sleep(0)
    log.write(entry)


def schedule(log: AuditLog) -> Awaitable[None]:
    return _write_later(log, "scheduled")


def priority(log: AuditLog, token: PriorityToken) -> None:
    log.write(type(token).__name__)


def keyword_token(log: AuditLog, *, token: CancellationToken) -> None:
    log.write("keyword")


def returns_value(log: AuditLog) -> int:
    return len(log.entries)


def needs_name(log: AuditLog, name: str) -> None:
    log.write(name)


def fail(log: AuditLog) -> None:
    msg = "procedure failed"
    raise ValueError(msg)


async def fail_async(log: AuditLog) -> None:
    msg = "async procedure failed"
    raise ValueError(msg)


@pytest.fixture()
def log(container: Container) -> AuditLog:
    audit_log = AuditLog()
    container.add_instance(audit_log)
    return audit_log


@pytest.mark.asyncio
async def test_invoke_runs_sync_procedure(invoker: DelegateInvoker, log: AuditLog) -> None:
    await invoker.invoke(sync_procedure)

    assert log.entries == ["sync"]


@pytest.mark.asyncio
async def test_invoke_passes_token_verbatim_to_sync_cancellable_procedure(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    seen: list[CancellationToken] = []

    def capture(audit: AuditLog, token: CancellationToken) -> None:
        seen.append(token)

    token = CancellationToken()

    await invoker.invoke(sync_cancellable, cancellation=token)
    await invoker.invoke(capture, cancellation=token)

    assert log.entries == ["sync_cancellable:False"]
    assert seen == [token]
    assert seen[0] is token


@pytest.mark.asyncio
async def test_invoke_awaits_async_procedure(invoker: DelegateInvoker, log: AuditLog) -> None:
    await invoker.invoke(async_procedure)

    assert log.entries == ["async"]


@pytest.mark.asyncio
async def test_invoke_passes_token_to_async_cancellable_procedure(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    worker = Worker()
    token = CancellationToken()

    await invoker.invoke(async_cancellable, cancellation=token)
    await invoker.invoke(worker.run, cancellation=token)

    assert log.entries == ["async_cancellable", "worker"]
    assert worker.tokens == [token]


@pytest.mark.asyncio
async def test_invoke_uses_fresh_uncancelled_token_when_omitted(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    worker = Worker()

    await invoker.invoke(worker.run)
    await invoker.invoke(worker.run)

    first, second = worker.tokens
    assert isinstance(first, CancellationToken)
    assert not first.is_cancelled
    assert first is not second


@pytest.mark.asyncio
async def test_pre_cancelled_token_is_observed_by_async_cancellable_procedure(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    with pytest.raises(WireBindOperationCancelledError, match="The operation was cancelled"):
        await invoker.invoke(async_cancellable, cancellation=CancellationToken.cancelled())

    assert log.entries == []


@pytest.mark.asyncio
async def test_procedure_without_token_parameter_ignores_cancelled_token(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    cancelled = CancellationToken.cancelled()

    await invoker.invoke(sync_procedure, cancellation=cancelled)
    await invoker.invoke(async_procedure, cancellation=cancelled)

    assert log.entries == ["sync", "async"]


@pytest.mark.asyncio
async def test_invoke_awaits_sync_callable_declaring_awaitable_result(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    await invoker.invoke(schedule)

    assert log.entries == ["scheduled"]


@pytest.mark.asyncio
async def test_invoke_awaits_awaitable_returned_by_unannotated_lambda(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    await invoker.invoke(lambda: _write_later(log, "lambda"))

    assert log.entries == ["lambda"]


@pytest.mark.asyncio
async def test_invoke_accepts_procedure_annotated_with_local_class(
    container: Container,
    invoker: DelegateInvoker,
) -> None:
    class LocalAudit:
        def __init__(self) -> None:
            self.tokens: list[CancellationToken] = []

    audit = LocalAudit()
    container.add_instance(audit)
    token = CancellationToken()

    async def work(dependency: LocalAudit, token: CancellationToken) -> None:
        assert isinstance(dependency, LocalAudit)
        dependency.tokens.append(token)

    await invoker.invoke(work, cancellation=token)

    assert audit.tokens == [token]


@pytest.mark.asyncio
async def test_token_parameter_may_be_a_cancellation_token_subclass(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    await invoker.invoke(priority, cancellation=PriorityToken())

    assert log.entries == ["PriorityToken"]


@pytest.mark.asyncio
async def test_invoke_binds_explicit_arguments(invoker: DelegateInvoker) -> None:
    audit_log = AuditLog()

    await invoker.invoke(sync_procedure, audit_log)
    await invoker.invoke(async_cancellable, audit_log, cancellation=CancellationToken())

    assert audit_log.entries == ["sync", "async_cancellable"]


@pytest.mark.asyncio
async def test_invoke_reuses_already_bound_callable() -> None:
    audit_log = AuditLog()
    registry = RecordingRegistry({AuditLog: audit_log})
    injector = DelegateInjector(registry)
    invoker = DelegateInvoker(injector)

    bound = injector.bind(sync_procedure)
    await invoker.invoke(bound)
    await invoker.invoke(bound)
    invoker.invoke_sync(bound)

    assert registry.resolved == [AuditLog]
    assert audit_log.entries == ["sync", "sync", "sync"]


@pytest.mark.asyncio
async def test_invoke_rebinds_unbound_callable_on_every_call() -> None:
    audit_log = AuditLog()
    registry = RecordingRegistry({AuditLog: audit_log})
    invoker = DelegateInvoker(DelegateInjector(registry))

    await invoker.invoke(sync_procedure)
    await invoker.invoke(sync_procedure)

    assert registry.resolved == [AuditLog, AuditLog]


@pytest.mark.asyncio
async def test_invoke_propagates_sync_failures(invoker: DelegateInvoker, log: AuditLog) -> None:
    with pytest.raises(ValueError, match="procedure failed"):
        await invoker.invoke(fail)


@pytest.mark.asyncio
async def test_invoke_propagates_async_failures(invoker: DelegateInvoker, log: AuditLog) -> None:
    with pytest.raises(ValueError, match="async procedure failed"):
        await invoker.invoke(fail_async)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("func", "rendered_shape"),
    [
        pytest.param(needs_name, "(name: str) -> None", id="free-parameter"),
        pytest.param(returns_value, "() -> int", id="returns-value"),
        pytest.param(keyword_token, "(*, token: wirebind._internal", id="keyword-only-token"),
    ],
)
async def test_invoke_rejects_unsupported_shapes(
    invoker: DelegateInvoker,
    log: AuditLog,
    func: Any,
    rendered_shape: str,
) -> None:
    with pytest.raises(WireBindUnsupportedShapeError) as exc_info:
        await invoker.invoke(func)

    message = str(exc_info.value)
    assert f"Callable '{func.__qualname__}' of shape '{rendered_shape}" in message
    assert "Supported shapes are" in message
    assert log.entries == []


@pytest.mark.asyncio
async def test_invoke_rejects_none_callable(invoker: DelegateInvoker) -> None:
    with pytest.raises(WireBindNullArgumentError, match="Argument 'func' must not be None"):
        await invoker.invoke(None)  # type: ignore[arg-type]


def test_invoke_sync_runs_sync_procedure(invoker: DelegateInvoker, log: AuditLog) -> None:
    invoker.invoke_sync(sync_procedure)
    invoker.invoke_sync(sync_procedure, AuditLog())

    assert log.entries == ["sync"]


@pytest.mark.parametrize(
    ("func", "shape_value"),
    [
        pytest.param(sync_cancellable, "(CancellationToken) -> None", id="sync-cancellable"),
        pytest.param(async_procedure, "async () -> None", id="async"),
        pytest.param(
            async_cancellable,
            "async (CancellationToken) -> None",
            id="async-cancellable",
        ),
    ],
)
def test_invoke_sync_rejects_shapes_other_than_sync(
    invoker: DelegateInvoker,
    log: AuditLog,
    func: Any,
    shape_value: str,
) -> None:
    with pytest.raises(
        WireBindUnsupportedShapeError,
        match=re.escape(f"invoke_sync() only supports '() -> None', got '{shape_value}'"),
    ):
        invoker.invoke_sync(func)

    assert log.entries == []


def test_invoke_sync_rejects_unsupported_shapes(invoker: DelegateInvoker, log: AuditLog) -> None:
    with pytest.raises(WireBindUnsupportedShapeError, match="is not supported"):
        invoker.invoke_sync(needs_name)


def test_invoke_sync_rejects_callable_returning_awaitable(
    invoker: DelegateInvoker,
    log: AuditLog,
) -> None:
    with pytest.raises(WireBindUnsupportedShapeError, match="cannot await the result"):
        invoker.invoke_sync(lambda: _write_later(log, "lambda"))

    assert log.entries == []


def test_invoke_sync_rejects_none_callable(invoker: DelegateInvoker) -> None:
    with pytest.raises(WireBindNullArgumentError):
        invoker.invoke_sync(None)  # type: ignore[arg-type]


def test_invoker_rejects_none_injector() -> None:
    with pytest.raises(WireBindNullArgumentError, match="Argument 'injector' must not be None"):
        DelegateInvoker(None)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_invoke_logs_dispatched_shape(
    invoker: DelegateInvoker,
    log: AuditLog,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.DEBUG, logger="wirebind._internal.invoker"):
        await invoker.invoke(async_cancellable)

    assert "Invoking 'async_cancellable' as ASYNC_CANCELLABLE" in caplog.text
