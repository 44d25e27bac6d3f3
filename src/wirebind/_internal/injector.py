from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, cast

from wirebind._internal.inspection import (
    CallableInspection,
    CallableInspector,
    InspectedParameter,
)
from wirebind._internal.policies import ExplicitArgumentPolicy
from wirebind._internal.registry import ResourceRegistry
from wirebind._internal.shapes import InvocationShape, describe_shape, shape_of
from wirebind.exceptions import (
    WireBindAmbiguousArgumentError,
    WireBindInvalidShapeError,
    WireBindNullArgumentError,
)

logger = logging.getLogger(__name__)

BINDING_ATTRIBUTE = "__wirebind_binding__"
_NO_MATCH: Any = object()


@dataclass(frozen=True, slots=True)
class DelegateBinding:
    """Describe how a bound callable was produced.

    Attached to every callable returned by ``DelegateInjector.bind`` under
    ``__wirebind_binding__``. Read it with ``get_binding``.
    """

    target: Callable[..., Any]
    """The original callable the bound callable forwards to."""
    receiver: object | None
    """Instance the target is bound to, or ``None`` for free functions and classes."""
    bound_values: Mapping[str, Any]
    """Values fixed at bind time, by parameter name."""
    residual_signature: inspect.Signature
    """Signature of the bound callable: the parameters left free."""
    is_async: bool
    """Whether the bound callable is a coroutine function."""


@dataclass(frozen=True, slots=True)
class _ParameterSlot:
    parameter: inspect.Parameter
    value: Any = _NO_MATCH

    @property
    def is_free(self) -> bool:
        return self.value is _NO_MATCH


def get_binding(callable_obj: object) -> DelegateBinding | None:
    """Return binding metadata of a callable produced by ``DelegateInjector.bind``.

    Args:
        callable_obj: Any object; non-bound callables return ``None``.

    """
    binding = getattr(callable_obj, BINDING_ATTRIBUTE, None)
    if isinstance(binding, DelegateBinding):
        return binding
    return None


class DelegateInjector:
    """Bind callable parameters from explicit arguments and a resource registry.

    ``bind`` inspects the declared parameters of a callable once and classifies
    each of them, in declaration order:

    1. an explicit argument whose runtime type is exactly the annotation is bound
       as a constant;
    2. otherwise, if the registry can resolve the annotation, it is resolved
       immediately and the value is bound as a constant;
    3. otherwise the parameter stays free and appears in the bound callable's
       signature at its original relative position.

    Resolution happens exactly once per ``bind`` call. Calling the bound
    callable repeatedly reuses the same resolved values, even for registry
    keys that would produce a new instance on every lookup.
    """

    def __init__(
        self,
        registry: ResourceRegistry,
        *,
        explicit_argument_policy: ExplicitArgumentPolicy = ExplicitArgumentPolicy.ERROR,
    ) -> None:
        """Initialize an injector reading from ``registry``.

        Args:
            registry: Registry consulted for annotated parameters.
            explicit_argument_policy: What to do when several explicit
                arguments share the runtime type of one parameter.

        Raises:
            WireBindNullArgumentError: If ``registry`` is ``None``.

        Examples:
            .. code-block:: python

                container = Container()
                container.add_concrete(Clock, lifetime=Lifetime.SINGLETON)

                injector = DelegateInjector(container)
                lenient = DelegateInjector(
                    container,
                    explicit_argument_policy=ExplicitArgumentPolicy.FIRST_MATCH,
                )

        """
        if registry is None:
            raise WireBindNullArgumentError("registry")
        self._registry = registry
        self._explicit_argument_policy = ExplicitArgumentPolicy(explicit_argument_policy)
        self._inspector = CallableInspector()

    @property
    def registry(self) -> ResourceRegistry:
        return self._registry

    def inspect(self, func: Callable[..., Any]) -> CallableInspection:
        """Return the parameter descriptor ``bind`` would classify.

        Args:
            func: Callable to inspect.

        """
        if func is None:
            raise WireBindNullArgumentError("func")
        return self._inspector.inspect_callable(func)

    def bind(self, func: Callable[..., Any], *explicit_args: Any) -> Callable[..., Any]:
        """Bind explicit arguments and registry values to ``func``.

        Args:
            func: Function, bound method, class, or callable instance.
            *explicit_args: Values matched to parameters by exact runtime type.
                Arguments matching no parameter are ignored.

        Returns:
            A new callable taking only the free parameters. It is a coroutine
            function when ``func`` is one.

        Raises:
            WireBindNullArgumentError: If ``func`` is ``None``.
            WireBindInvalidCallableError: If ``func`` cannot be inspected.
            WireBindAmbiguousArgumentError: If several explicit arguments match
                one parameter under ``ExplicitArgumentPolicy.ERROR``.

        Notes:
            Errors raised by the registry while resolving propagate unchanged.

        Examples:
            .. code-block:: python

                def handle(request_id: int, repository: Repository) -> str: ...


                bound = injector.bind(handle)
                bound(42)

        """
        bound, _ = self._bind(func, explicit_args)
        return bound

    def bind_as(
        self,
        shape: InvocationShape,
        func: Callable[..., Any],
        *explicit_args: Any,
    ) -> Callable[..., Any]:
        """Bind ``func`` and require the result to have the given invocation shape.

        Args:
            shape: Shape the bound callable must reduce to.
            func: Callable to bind.
            *explicit_args: Values matched to parameters by exact runtime type.

        Raises:
            WireBindInvalidShapeError: If the residual signature is not ``shape``.

        Examples:
            .. code-block:: python

                command = injector.bind_as(InvocationShape.SYNC, save_document)
                command()

        """
        if shape is None:
            raise WireBindNullArgumentError("shape")
        requested_shape = InvocationShape(shape)
        bound, residual = self._bind(func, explicit_args)
        actual_shape = shape_of(residual)
        if actual_shape is not requested_shape:
            actual = actual_shape.value if actual_shape else "unsupported"
            msg = (
                f"Callable '{residual.name}' bound to shape '{describe_shape(residual)}' "
                f"({actual}) cannot be used as '{requested_shape.value}'."
            )
            raise WireBindInvalidShapeError(msg)
        return bound

    def _bind(
        self,
        func: Callable[..., Any],
        explicit_args: tuple[Any, ...],
    ) -> tuple[Callable[..., Any], CallableInspection]:
        if func is None:
            raise WireBindNullArgumentError("func")
        inspection = self._inspector.inspect_callable(func)
        slots = tuple(
            self._classify_parameter(
                inspection=inspection,
                inspected_parameter=inspected_parameter,
                explicit_args=explicit_args,
            )
            for inspected_parameter in inspection.parameters
        )
        self._log_unmatched_explicit_arguments(
            inspection=inspection,
            slots=slots,
            explicit_args=explicit_args,
        )

        residual_signature = inspection.signature.replace(
            parameters=[slot.parameter for slot in slots if slot.is_free],
        )
        bound = self._build_bound_callable(
            inspection=inspection,
            slots=slots,
            residual_signature=residual_signature,
        )
        logger.debug(
            "Bound '%s': %d of %d parameters fixed, residual signature %s",
            inspection.name,
            sum(1 for slot in slots if not slot.is_free),
            len(slots),
            residual_signature,
        )
        residual = CallableInspection(
            callable_obj=bound,
            name=inspection.name,
            signature=residual_signature,
            parameters=tuple(
                InspectedParameter(parameter=parameter, position=position)
                for position, parameter in enumerate(residual_signature.parameters.values())
            ),
            receiver=inspection.receiver,
            is_async=inspection.is_async,
        )
        return bound, residual

    def _classify_parameter(
        self,
        *,
        inspection: CallableInspection,
        inspected_parameter: InspectedParameter,
        explicit_args: tuple[Any, ...],
    ) -> _ParameterSlot:
        parameter = inspected_parameter.parameter
        if inspected_parameter.is_variadic or not inspected_parameter.has_dependency_key:
            logger.debug("Parameter '%s' of '%s' left free", parameter.name, inspection.name)
            return _ParameterSlot(parameter=parameter)

        explicit_value = self._match_explicit_argument(
            inspection=inspection,
            inspected_parameter=inspected_parameter,
            explicit_args=explicit_args,
        )
        if explicit_value is not _NO_MATCH:
            logger.debug(
                "Parameter '%s' of '%s' bound from explicit argument",
                parameter.name,
                inspection.name,
            )
            return _ParameterSlot(parameter=parameter, value=explicit_value)

        annotation = inspected_parameter.annotation
        if self._registry.can_resolve(annotation):
            value = self._registry.resolve(annotation)
            logger.debug(
                "Parameter '%s' of '%s' bound from registry key %r",
                parameter.name,
                inspection.name,
                annotation,
            )
            return _ParameterSlot(parameter=parameter, value=value)

        logger.debug("Parameter '%s' of '%s' left free", parameter.name, inspection.name)
        return _ParameterSlot(parameter=parameter)

    def _match_explicit_argument(
        self,
        *,
        inspection: CallableInspection,
        inspected_parameter: InspectedParameter,
        explicit_args: tuple[Any, ...],
    ) -> Any:
        annotation = inspected_parameter.annotation
        matches = [argument for argument in explicit_args if type(argument) is annotation]
        if not matches:
            return _NO_MATCH
        if len(matches) > 1 and self._explicit_argument_policy is ExplicitArgumentPolicy.ERROR:
            raise WireBindAmbiguousArgumentError(
                callable_name=inspection.name,
                parameter_name=inspected_parameter.name,
                annotation=annotation,
            )
        return matches[0]

    def _log_unmatched_explicit_arguments(
        self,
        *,
        inspection: CallableInspection,
        slots: tuple[_ParameterSlot, ...],
        explicit_args: tuple[Any, ...],
    ) -> None:
        if not explicit_args or not logger.isEnabledFor(logging.DEBUG):
            return
        declared_types = [slot.parameter.annotation for slot in slots]
        for argument in explicit_args:
            if not any(type(argument) is declared for declared in declared_types):
                logger.debug(
                    "Explicit argument of type '%s' matches no parameter of '%s'",
                    type(argument).__qualname__,
                    inspection.name,
                )

    def _build_bound_callable(
        self,
        *,
        inspection: CallableInspection,
        slots: tuple[_ParameterSlot, ...],
        residual_signature: inspect.Signature,
    ) -> Callable[..., Any]:
        target = inspection.callable_obj

        def _call_arguments(
            args: tuple[Any, ...],
            kwargs: dict[str, Any],
        ) -> tuple[list[Any], dict[str, Any]]:
            bound_arguments = residual_signature.bind(*args, **kwargs)
            bound_arguments.apply_defaults()
            arguments = bound_arguments.arguments
            call_args: list[Any] = []
            call_kwargs: dict[str, Any] = {}
            for slot in slots:
                parameter = slot.parameter
                value = arguments[parameter.name] if slot.is_free else slot.value
                if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
                    call_args.extend(value)
                elif parameter.kind is inspect.Parameter.VAR_KEYWORD:
                    call_kwargs.update(value)
                elif parameter.kind is inspect.Parameter.KEYWORD_ONLY:
                    call_kwargs[parameter.name] = value
                else:
                    call_args.append(value)
            return call_args, call_kwargs

        if inspection.is_async:

            @functools.wraps(target, updated=())
            async def _async_bound(*args: Any, **kwargs: Any) -> Any:
                call_args, call_kwargs = _call_arguments(args, kwargs)
                async_target = cast("Callable[..., Awaitable[Any]]", target)
                return await async_target(*call_args, **call_kwargs)

            bound_callable: Callable[..., Any] = _async_bound
        else:

            @functools.wraps(target, updated=())
            def _sync_bound(*args: Any, **kwargs: Any) -> Any:
                call_args, call_kwargs = _call_arguments(args, kwargs)
                return target(*call_args, **call_kwargs)

            bound_callable = _sync_bound

        bound_callable.__signature__ = residual_signature  # type: ignore[attr-defined]
        bound_callable.__dict__[BINDING_ATTRIBUTE] = DelegateBinding(
            target=target,
            receiver=inspection.receiver,
            bound_values=MappingProxyType(
                {slot.parameter.name: slot.value for slot in slots if not slot.is_free},
            ),
            residual_signature=residual_signature,
            is_async=inspection.is_async,
        )
        return bound_callable
