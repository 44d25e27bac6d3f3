from __future__ import annotations

import inspect
import types
from collections.abc import Awaitable, Coroutine
from typing import Any, TypeGuard, get_args, get_origin

_AWAITABLE_ORIGINS: tuple[type[Any], ...] = (Awaitable, Coroutine)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_none_annotation(annotation: object) -> bool:
    """Return true when annotation declares that nothing is returned.

    Args:
        annotation: Resolved annotation, possibly ``inspect.Signature.empty`` or
            the unevaluated string ``"None"``.

    """
    return (
        annotation is inspect.Signature.empty
        or annotation is None
        or annotation is type(None)
        or (isinstance(annotation, str) and annotation.strip() == "None")
    )


def is_awaitable_annotation(annotation: object) -> bool:
    """Return true when annotation is ``Awaitable[...]``/``Coroutine[...]`` or a bare alias of them.

    Args:
        annotation: Resolved annotation, possibly ``inspect.Signature.empty``.

    """
    origin = get_origin(annotation) or annotation
    return is_runtime_class(origin) and issubclass(origin, _AWAITABLE_ORIGINS)


def awaited_result_annotation(annotation: object) -> Any:
    """Return ``T`` from ``Awaitable[T]``/``Coroutine[Any, Any, T]``, or ``empty`` for bare aliases.

    Args:
        annotation: Annotation accepted by ``is_awaitable_annotation``.

    """
    annotation_args = get_args(annotation)
    if not annotation_args:
        return inspect.Signature.empty
    return annotation_args[-1]


__all__ = [
    "awaited_result_annotation",
    "is_awaitable_annotation",
    "is_none_annotation",
    "is_runtime_class",
]
