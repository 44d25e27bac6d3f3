from __future__ import annotations

import functools
import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, get_type_hints

from wirebind.exceptions import WireBindInvalidCallableError

_VARIADIC_KINDS = frozenset({inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD})


@dataclass(frozen=True, slots=True)
class InspectedParameter:
    """Declared parameter metadata with its annotation resolved where possible."""

    parameter: inspect.Parameter
    position: int

    @property
    def name(self) -> str:
        return self.parameter.name

    @property
    def annotation(self) -> Any:
        return self.parameter.annotation

    @property
    def is_variadic(self) -> bool:
        return self.parameter.kind in _VARIADIC_KINDS

    @property
    def has_dependency_key(self) -> bool:
        """Whether the annotation can be used as an explicit-argument or registry key."""
        annotation = self.parameter.annotation
        return annotation is not inspect.Parameter.empty and not isinstance(annotation, str)


@dataclass(frozen=True, slots=True)
class CallableInspection:
    """Transient descriptor of a callable, derived once per bind call."""

    callable_obj: Callable[..., Any]
    name: str
    signature: inspect.Signature
    parameters: tuple[InspectedParameter, ...]
    receiver: object | None
    is_async: bool

    @property
    def return_annotation(self) -> Any:
        return self.signature.return_annotation


@dataclass(slots=True)
class CallableInspector:
    """Inspect callables into ordered, annotation-resolved parameter descriptors."""

    def inspect_callable(self, callable_obj: Callable[..., Any]) -> CallableInspection:
        """Build a descriptor for ``callable_obj``.

        Args:
            callable_obj: Function, bound method, class, or callable instance.

        Raises:
            WireBindInvalidCallableError: If the object is not callable or has no
                inspectable signature.

        """
        name = self.callable_name(callable_obj)
        if not callable(callable_obj):
            msg = f"Object '{name}' is not callable."
            raise WireBindInvalidCallableError(msg)
        try:
            signature = inspect.signature(callable_obj)
        except (TypeError, ValueError) as error:
            msg = f"Callable '{name}' has no inspectable signature: {error}"
            raise WireBindInvalidCallableError(msg) from error

        signature = self.resolve_signature_annotations(
            signature=signature,
            resolved_annotations=self.resolved_annotations(callable_obj=callable_obj),
        )
        parameters = tuple(
            InspectedParameter(parameter=parameter, position=position)
            for position, parameter in enumerate(signature.parameters.values())
        )
        return CallableInspection(
            callable_obj=callable_obj,
            name=name,
            signature=signature,
            parameters=parameters,
            receiver=self.resolve_receiver(callable_obj=callable_obj),
            is_async=self.is_async_callable(callable_obj=callable_obj),
        )

    def resolved_annotations(self, *, callable_obj: Callable[..., Any]) -> dict[str, Any]:
        """Resolve callable annotations with extras.

        When the annotations cannot be resolved together, each one is evaluated
        on its own and the ones that still fail are left out of the mapping.
        """
        owner = self._annotations_owner(callable_obj)
        local_namespace = self._closure_namespace(owner)
        try:
            return get_type_hints(owner, localns=local_namespace, include_extras=True)
        except (AttributeError, NameError, TypeError, SyntaxError):
            return self._resolve_each_annotation(owner=owner, local_namespace=local_namespace)

    def resolve_signature_annotations(
        self,
        *,
        signature: inspect.Signature,
        resolved_annotations: dict[str, Any],
    ) -> inspect.Signature:
        """Replace string annotations in ``signature`` with their evaluated values."""
        if not resolved_annotations:
            return signature
        parameters = [
            parameter.replace(
                annotation=resolved_annotations.get(parameter.name, parameter.annotation),
            )
            for parameter in signature.parameters.values()
        ]
        return_annotation = resolved_annotations.get("return", signature.return_annotation)
        return signature.replace(parameters=parameters, return_annotation=return_annotation)

    def resolve_receiver(self, *, callable_obj: Callable[..., Any]) -> object | None:
        """Return the instance a callable is bound to, or ``None`` for free functions."""
        if inspect.isclass(callable_obj) or isinstance(callable_obj, functools.partial):
            return None
        if inspect.isroutine(callable_obj):
            receiver = getattr(callable_obj, "__self__", None)
            return None if isinstance(receiver, types.ModuleType) else receiver
        return callable_obj

    def is_async_callable(self, *, callable_obj: Callable[..., Any]) -> bool:
        """Return whether calling ``callable_obj`` produces a coroutine."""
        if inspect.iscoroutinefunction(callable_obj):
            return True
        if inspect.isroutine(callable_obj) or inspect.isclass(callable_obj):
            return False
        return inspect.iscoroutinefunction(getattr(type(callable_obj), "__call__", None))

    def callable_name(self, callable_obj: object) -> str:
        """Return a readable name for error messages."""
        return getattr(
            callable_obj,
            "__qualname__",
            getattr(callable_obj, "__name__", repr(callable_obj)),
        )

    def _annotations_owner(self, callable_obj: Callable[..., Any]) -> Any:
        if isinstance(callable_obj, functools.partial):
            return self._annotations_owner(callable_obj.func)
        if inspect.isclass(callable_obj):
            return callable_obj.__init__
        if inspect.isroutine(callable_obj):
            return callable_obj
        call = getattr(type(callable_obj), "__call__", None)
        if inspect.isfunction(call):
            return call
        return callable_obj

    def _closure_namespace(self, owner: Any) -> dict[str, Any] | None:
        function = inspect.unwrap(getattr(owner, "__func__", owner))
        if not inspect.isfunction(function) or not function.__closure__:
            return None
        try:
            return dict(inspect.getclosurevars(function).nonlocals)
        except ValueError:
            return None

    def _resolve_each_annotation(
        self,
        *,
        owner: Any,
        local_namespace: dict[str, Any] | None,
    ) -> dict[str, Any]:
        function = inspect.unwrap(getattr(owner, "__func__", owner))
        annotations = getattr(function, "__annotations__", None)
        if not isinstance(annotations, dict):
            return {}
        global_namespace = getattr(function, "__globals__", {})
        resolved: dict[str, Any] = {}
        for name, annotation in annotations.items():
            if not isinstance(annotation, str):
                resolved[name] = annotation
                continue
            try:
                resolved[name] = eval(annotation, global_namespace, local_namespace)  # noqa: S307
            except (AttributeError, NameError, TypeError, SyntaxError):
                continue
        return resolved
