class WireBindError(Exception):
    """Represent a base class for all wirebind-specific failures.

    Catch this type when you want to handle any wirebind error path without
    matching each concrete exception class individually.
    """


class WireBindNullArgumentError(WireBindError, TypeError):
    """Signal that a required argument was ``None``.

    Raised by ``DelegateInjector.bind``, ``DelegateInjector.bind_as``,
    ``DelegateInvoker.invoke`` and ``DelegateInvoker.invoke_sync`` when the
    callable to bind or invoke is missing. The error is raised at the call
    boundary and never wrapped.
    """

    def __init__(self, parameter_name: str) -> None:
        self.parameter_name = parameter_name
        super().__init__(f"Argument '{parameter_name}' must not be None.")


class WireBindInvalidCallableError(WireBindError):
    """Signal that the object passed for binding is not callable.

    Typical fix is passing a function, bound method, or an instance that
    implements ``__call__``.
    """


class WireBindAmbiguousArgumentError(WireBindError):
    """Signal that several explicit arguments match one declared parameter type.

    Raised by ``DelegateInjector.bind`` under the default
    ``ExplicitArgumentPolicy.ERROR`` when two or more explicit arguments share
    the runtime type a parameter is annotated with.

    Typical fixes include passing a single argument per type or constructing
    the injector with ``ExplicitArgumentPolicy.FIRST_MATCH`` to take the
    earliest matching argument.
    """

    def __init__(self, *, callable_name: str, parameter_name: str, annotation: object) -> None:
        self.callable_name = callable_name
        self.parameter_name = parameter_name
        self.annotation = annotation
        type_name = getattr(annotation, "__qualname__", repr(annotation))
        super().__init__(
            f"Callable '{callable_name}' parameter '{parameter_name}' matches more than one "
            f"explicit argument of type '{type_name}'.",
        )


class WireBindInvalidShapeError(WireBindError):
    """Signal that a bound callable does not reduce to the requested shape.

    Raised by ``DelegateInjector.bind_as`` when the residual signature left
    after binding is not the requested ``InvocationShape`` (for example
    requesting ``InvocationShape.SYNC`` while a free parameter remains).

    Typical fixes include registering the missing dependencies, passing them
    as explicit arguments, or requesting the matching shape.
    """


class WireBindUnsupportedShapeError(WireBindError):
    """Signal that a callable is not one of the four recognized invocation shapes.

    Raised by ``classify_shape``, ``DelegateInvoker.invoke`` and
    ``DelegateInvoker.invoke_sync``. Recognized shapes are zero-parameter or
    single ``CancellationToken`` parameter callables, synchronous or
    asynchronous, that do not return a value. ``invoke_sync`` only accepts
    the zero-parameter synchronous shape.
    """


class WireBindDependencyNotRegisteredError(WireBindError):
    """Signal that a dependency key has no provider.

    Raised by ``Container.resolve`` when no registration exists for the key
    or for one of the provider's required dependencies. Registry failures
    raised while binding propagate unchanged.

    Typical fix is registering the dependency with ``add_instance``,
    ``add_concrete`` or ``add_factory``.
    """

    def __init__(self, dependency: object) -> None:
        self.dependency = dependency
        name = getattr(dependency, "__qualname__", repr(dependency))
        super().__init__(f"Dependency '{name}' is not registered.")


class WireBindInvalidRegistrationError(WireBindError):
    """Signal invalid registration arguments.

    Raised by ``Container.add_instance``, ``Container.add_concrete`` and
    ``Container.add_factory`` when ``provides``/``lifetime`` values are
    invalid or a provider cannot be inspected.
    """


class WireBindOperationCancelledError(WireBindError):
    """Signal that a cooperative cancellation was observed.

    Raised by ``CancellationToken.raise_if_cancelled`` from inside a
    cancellable callable. The invoker propagates it like any other failure.
    """
