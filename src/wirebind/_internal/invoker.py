from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

from wirebind._internal.cancellation import CancellationToken
from wirebind._internal.injector import DelegateInjector, get_binding
from wirebind._internal.shapes import InvocationShape, shape_of, unsupported_shape_message
from wirebind.exceptions import WireBindNullArgumentError, WireBindUnsupportedShapeError

logger = logging.getLogger(__name__)


class DelegateInvoker:
    """Drive callables of the four recognized shapes through one async contract.

    Callables are bound through the injector first, so parameters the
    registry can resolve disappear before the shape is classified. After
    binding the callable must be one of:

    - ``() -> None``
    - ``(CancellationToken) -> None``
    - ``async () -> None``
    - ``async (CancellationToken) -> None``

    The invoker performs no scheduling of its own: synchronous callables run
    inline on the caller's thread and asynchronous ones are awaited directly.
    Cancellation is cooperative; only callables declaring a
    ``CancellationToken`` parameter ever see the token.
    """

    def __init__(self, injector: DelegateInjector) -> None:
        """Initialize an invoker that binds callables with ``injector``.

        Args:
            injector: Injector used to bind callables before dispatch.

        Raises:
            WireBindNullArgumentError: If ``injector`` is ``None``.

        """
        if injector is None:
            raise WireBindNullArgumentError("injector")
        self._injector = injector

    async def invoke(
        self,
        func: Callable[..., Any],
        *explicit_args: Any,
        cancellation: CancellationToken | None = None,
    ) -> None:
        """Bind ``func`` and run it to completion.

        Args:
            func: Callable to bind and invoke.
            *explicit_args: Explicit arguments forwarded to ``DelegateInjector.bind``.
            cancellation: Token passed verbatim to cancellable shapes. A fresh,
                never-cancelled token is used when omitted.

        Raises:
            WireBindNullArgumentError: If ``func`` is ``None``.
            WireBindUnsupportedShapeError: If the bound callable is not one of
                the four recognized shapes.

        Notes:
            Exceptions raised by the callable propagate unchanged. A synchronous
            callable that returns an awaitable, such as ``lambda: refresh()``, has
            that awaitable awaited. Result values are not returned; call the
            bound callable directly when you need one.

        Examples:
            .. code-block:: python

                async def refresh(cache: Cache, token: CancellationToken) -> None:
                    token.raise_if_cancelled()
                    await cache.refresh()


                await invoker.invoke(refresh, cancellation=token)

        """
        bound, shape = self._prepare(func, explicit_args)
        token = cancellation if cancellation is not None else CancellationToken()
        logger.debug("Invoking '%s' as %s", _name(bound), shape.name)

        if shape is InvocationShape.ASYNC_CANCELLABLE:
            await bound(token)
        elif shape is InvocationShape.ASYNC:
            await bound()
        elif shape is InvocationShape.SYNC_CANCELLABLE:
            await _complete(bound, bound(token))
        elif shape is InvocationShape.SYNC:
            await _complete(bound, bound())
        else:  # pragma: no cover - InvocationShape is closed
            msg = f"Unhandled invocation shape {shape!r}."
            raise WireBindUnsupportedShapeError(msg)

    def invoke_sync(self, func: Callable[..., Any], *explicit_args: Any) -> None:
        """Bind ``func`` and call it synchronously.

        Only the ``() -> None`` shape is accepted.

        Args:
            func: Callable to bind and invoke.
            *explicit_args: Explicit arguments forwarded to ``DelegateInjector.bind``.

        Raises:
            WireBindNullArgumentError: If ``func`` is ``None``.
            WireBindUnsupportedShapeError: If the bound callable is not a
                synchronous procedure without parameters, or if it
                returns an awaitable.

        """
        bound, shape = self._prepare(func, explicit_args)
        if shape is not InvocationShape.SYNC:
            msg = (
                f"invoke_sync() only supports '{InvocationShape.SYNC.value}', "
                f"got '{shape.value}' for callable '{_name(bound)}'."
            )
            raise WireBindUnsupportedShapeError(msg)
        logger.debug("Invoking '%s' synchronously", _name(bound))
        result = bound()
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            msg = (
                f"invoke_sync() cannot await the result of callable '{_name(bound)}'; "
                "use invoke() instead."
            )
            raise WireBindUnsupportedShapeError(msg)

    def _prepare(
        self,
        func: Callable[..., Any],
        explicit_args: tuple[Any, ...],
    ) -> tuple[Callable[..., Any], InvocationShape]:
        if func is None:
            raise WireBindNullArgumentError("func")

        if get_binding(func) is not None and not explicit_args:
            bound = func
        else:
            bound = self._injector.bind(func, *explicit_args)
        inspection = self._injector.inspect(bound)

        shape = shape_of(inspection)
        if shape is None:
            raise WireBindUnsupportedShapeError(unsupported_shape_message(inspection))
        return bound, shape


async def _complete(bound: Callable[..., Any], result: object) -> None:
    if inspect.isawaitable(result):
        logger.debug("Awaiting result returned by '%s'", _name(bound))
        await result


def _name(callable_obj: Callable[..., Any]) -> str:
    return getattr(callable_obj, "__qualname__", None) or repr(callable_obj)


__all__ = ["DelegateInvoker"]
