from wirebind._internal.cancellation import CancellationToken
from wirebind._internal.container import Container
from wirebind._internal.injector import DelegateBinding, DelegateInjector, get_binding
from wirebind._internal.inspection import CallableInspection, InspectedParameter
from wirebind._internal.invoker import DelegateInvoker
from wirebind._internal.policies import ExplicitArgumentPolicy
from wirebind._internal.providers import Lifetime
from wirebind._internal.registration import add_delegate_injection
from wirebind._internal.registry import ResourceRegistry
from wirebind._internal.shapes import InvocationShape, classify_shape
from wirebind.exceptions import (
    WireBindAmbiguousArgumentError,
    WireBindDependencyNotRegisteredError,
    WireBindError,
    WireBindInvalidCallableError,
    WireBindInvalidRegistrationError,
    WireBindInvalidShapeError,
    WireBindNullArgumentError,
    WireBindOperationCancelledError,
    WireBindUnsupportedShapeError,
)

__all__ = [
    "CallableInspection",
    "CancellationToken",
    "Container",
    "DelegateBinding",
    "DelegateInjector",
    "DelegateInvoker",
    "ExplicitArgumentPolicy",
    "InspectedParameter",
    "InvocationShape",
    "Lifetime",
    "ResourceRegistry",
    "WireBindAmbiguousArgumentError",
    "WireBindDependencyNotRegisteredError",
    "WireBindError",
    "WireBindInvalidCallableError",
    "WireBindInvalidRegistrationError",
    "WireBindInvalidShapeError",
    "WireBindNullArgumentError",
    "WireBindOperationCancelledError",
    "WireBindUnsupportedShapeError",
    "add_delegate_injection",
    "classify_shape",
    "get_binding",
]
