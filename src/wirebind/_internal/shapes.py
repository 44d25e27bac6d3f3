from __future__ import annotations

import inspect
from collections.abc import Callable
from enum import Enum
from typing import Any

from wirebind._internal.cancellation import CancellationToken
from wirebind._internal.inspection import CallableInspection, CallableInspector
from wirebind._internal.type_checks import (
    awaited_result_annotation,
    is_awaitable_annotation,
    is_none_annotation,
    is_runtime_class,
)
from wirebind.exceptions import WireBindUnsupportedShapeError

_POSITIONAL_KINDS = frozenset(
    {inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD},
)
_SUPPORTED_SHAPES_HINT = (
    "Supported shapes are '() -> None', '(CancellationToken) -> None', "
    "'async () -> None' and 'async (CancellationToken) -> None'."
)


class InvocationShape(Enum):
    """Closed set of callable shapes accepted by ``DelegateInvoker``."""

    SYNC = "() -> None"
    """Synchronous procedure without parameters."""

    SYNC_CANCELLABLE = "(CancellationToken) -> None"
    """Synchronous procedure receiving the caller's cancellation token."""

    ASYNC = "async () -> None"
    """Asynchronous procedure without parameters."""

    ASYNC_CANCELLABLE = "async (CancellationToken) -> None"
    """Asynchronous procedure receiving the caller's cancellation token."""

    @property
    def is_async(self) -> bool:
        return self in {InvocationShape.ASYNC, InvocationShape.ASYNC_CANCELLABLE}

    @property
    def is_cancellable(self) -> bool:
        return self in {InvocationShape.SYNC_CANCELLABLE, InvocationShape.ASYNC_CANCELLABLE}


def shape_of(inspection: CallableInspection) -> InvocationShape | None:
    """Return the invocation shape of an inspected callable, or ``None`` if unrecognized.

    Args:
        inspection: Descriptor of the callable, usually the residual callable
            produced by ``DelegateInjector.bind``.

    """
    return_annotation = inspection.return_annotation
    is_async = inspection.is_async
    if not is_async and is_awaitable_annotation(return_annotation):
        is_async = True
        return_annotation = awaited_result_annotation(return_annotation)
    if not is_none_annotation(return_annotation):
        return None

    parameters = inspection.signature.parameters
    if not parameters:
        return InvocationShape.ASYNC if is_async else InvocationShape.SYNC
    if len(parameters) == 1:
        (parameter,) = parameters.values()
        if _is_cancellation_parameter(parameter):
            if is_async:
                return InvocationShape.ASYNC_CANCELLABLE
            return InvocationShape.SYNC_CANCELLABLE
    return None


def classify_shape(
    callable_obj: Callable[..., Any],
    *,
    inspector: CallableInspector | None = None,
) -> InvocationShape:
    """Classify a callable into one of the four recognized invocation shapes.

    Args:
        callable_obj: Callable to classify.
        inspector: Optional inspector instance to reuse.

    Raises:
        WireBindUnsupportedShapeError: If the callable matches none of the shapes.

    Examples:
        .. code-block:: python

            async def work(token: CancellationToken) -> None: ...


            assert classify_shape(work) is InvocationShape.ASYNC_CANCELLABLE

    """
    inspection = (inspector or CallableInspector()).inspect_callable(callable_obj)
    shape = shape_of(inspection)
    if shape is None:
        raise WireBindUnsupportedShapeError(unsupported_shape_message(inspection))
    return shape


def describe_shape(inspection: CallableInspection) -> str:
    """Render the shape of a callable for error messages."""
    prefix = "async " if inspection.is_async else ""
    return f"{prefix}{inspection.signature}"


def unsupported_shape_message(inspection: CallableInspection) -> str:
    return (
        f"Callable '{inspection.name}' of shape '{describe_shape(inspection)}' is not supported. "
        f"{_SUPPORTED_SHAPES_HINT}"
    )


def _is_cancellation_parameter(parameter: inspect.Parameter) -> bool:
    if parameter.kind not in _POSITIONAL_KINDS:
        return False
    annotation = parameter.annotation
    return is_runtime_class(annotation) and issubclass(annotation, CancellationToken)
