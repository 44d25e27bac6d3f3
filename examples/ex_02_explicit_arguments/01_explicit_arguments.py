"""Explicit arguments take precedence over the container.

Values passed to ``bind`` after the callable are matched to parameters by
exact runtime type. A matched parameter is never resolved from the container.
Two explicit arguments of the same type are rejected unless the injector uses
``ExplicitArgumentPolicy.FIRST_MATCH``.
"""

from __future__ import annotations

from wirebind import (
    Container,
    DelegateInjector,
    ExplicitArgumentPolicy,
    WireBindAmbiguousArgumentError,
)


class Dependency:
    def __init__(self) -> None:
        self.value = 0


def compute(i: int, dependency: Dependency) -> int:
    dependency.value = i + 2
    return dependency.value + 1


def main() -> None:
    container = Container()
    container.add_concrete(Dependency)
    injector = DelegateInjector(container)

    mine = Dependency()
    bound = injector.bind(compute, mine)
    print(f"result={bound(88)}")  # => result=91
    print(f"explicit_mutated={mine.value}")  # => explicit_mutated=90

    try:
        injector.bind(compute, Dependency(), Dependency())
    except WireBindAmbiguousArgumentError as error:
        print(f"ambiguous={type(error).__name__}")  # => ambiguous=WireBindAmbiguousArgumentError

    first, second = Dependency(), Dependency()
    lenient = DelegateInjector(
        container,
        explicit_argument_policy=ExplicitArgumentPolicy.FIRST_MATCH,
    )
    lenient.bind(compute, first, second)(1)
    print(f"first_match={(first.value, second.value)}")  # => first_match=(3, 0)


if __name__ == "__main__":
    main()
