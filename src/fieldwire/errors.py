"""Exceptions raised while wiring, initialising and tearing down objects."""

from typing import Any

__all__ = [
    "DependencyError",
    "InstantiationError",
    "FieldInjectionError",
    "InvocationError",
    "SelfReferenceError",
    "RegistrationError",
    "ShutdownError",
]


class DependencyError(Exception):
    """Base class for every error raised by the injector."""

    pass


class InstantiationError(DependencyError):
    """Raised when the instance supplier cannot produce an instance of a type."""

    def __init__(self, cls: Any, reason: str = "Cannot instantiate"):
        self.cls = cls
        super().__init__(f"{reason}: {cls!r}")


class FieldInjectionError(DependencyError):
    """Raised when a resolved value cannot be written into an injectable field."""

    def __init__(self, field: Any, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"Cannot set field: {field} with value {value!r}")


class InvocationError(DependencyError):
    """Raised when a lifecycle callback fails."""

    def __init__(self, method: Any):
        self.method = method
        super().__init__(f"Problem invoking {method}")


class SelfReferenceError(DependencyError):
    """Raised when a singleton declares an injectable field of its own type."""

    def __init__(self, cls: type, field: Any):
        self.cls = cls
        self.field = field
        super().__init__(
            f"Singleton {cls.__qualname__} cannot inject itself into field {field}"
        )


class RegistrationError(DependencyError):
    """Raised when an instance cannot be tracked as a presenter."""

    pass


class ShutdownError(DependencyError):
    """Raised after teardown when one or more pre-destroy callbacks failed.

    Attributes:
        failures: Pairs of (instance, exception) in the order they occurred.
    """

    def __init__(self, failures: list[tuple[Any, Exception]]):
        self.failures = failures
        described = ", ".join(f"{type(i).__qualname__}: {e}" for i, e in failures)
        super().__init__(f"{len(failures)} pre-destroy callback(s) failed: {described}")
