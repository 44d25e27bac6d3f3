"""Quickstart: bind registry dependencies once, keep the rest as parameters.

``DelegateInjector.bind`` looks at each annotated parameter. Keys the
container can resolve are resolved right away and fixed into the returned
callable; everything else stays a parameter. The resolved values are reused
on every call, even for transient registrations.
"""

from __future__ import annotations

import inspect

from wirebind import Container, DelegateInjector, get_binding


class Counter:
    def __init__(self) -> None:
        self.value = 0

    def get(self) -> int:
        self.value += 1
        return self.value


class Greeter:
    def __init__(self, greeting: str) -> None:
        self.greeting = greeting

    def greet(self, name: str, counter: Counter) -> str:
        return f"{self.greeting} {name} #{counter.get()}"


def add(i: int, counter: Counter) -> int:
    return i + counter.get()


def main() -> None:
    container = Container()
    container.add_concrete(Counter)
    injector = DelegateInjector(container)

    bound_add = injector.bind(add)
    print(f"signature={inspect.signature(bound_add)}")  # => signature=(i: int) -> int
    print(f"first={bound_add(99)}")  # => first=100
    print(f"second={bound_add(99)}")  # => second=101

    rebound_add = injector.bind(add)
    print(f"rebound={rebound_add(99)}")  # => rebound=100

    greeter = Greeter("hello")
    greet = injector.bind(greeter.greet)
    print(greet("ada"))  # => hello ada #1

    binding = get_binding(greet)
    assert binding is not None
    print(f"receiver_is_greeter={binding.receiver is greeter}")  # => receiver_is_greeter=True


if __name__ == "__main__":
    main()
