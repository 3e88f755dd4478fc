"""Markers identifying injectable fields and lifecycle callbacks.

Fields are marked through ``typing.Annotated`` metadata, in the same way a
qualifier is attached to a dependency:

    >>> class Presenter:
    ...     service: Annotated[GreetingService, Inject]
    ...     greeting: Annotated[str, Inject]
    ...
    ...     @post_construct
    ...     def start(self):
    ...         ...
    ...
    ...     @pre_destroy
    ...     def stop(self):
    ...         ...

Lifecycle markers are recorded on the decorated function under
``__lifecycle_markers__``.
"""

import inspect
from typing import Any, Callable

from fieldwire.errors import DependencyError

__all__ = ["Inject", "PostConstruct", "PreDestroy", "post_construct", "pre_destroy"]

MARKERS_ATTRIBUTE = "__lifecycle_markers__"


class Inject:
    """Field marker. Use the class itself or an instance in ``Annotated`` metadata."""

    pass


class PostConstruct:
    """Method marker: invoked once all fields of the instance are assigned."""

    pass


class PreDestroy:
    """Method marker: invoked when the injector forgets the instance."""

    pass


def set_marker(target: Any, marker: type) -> Any:
    func = getattr(target, "__func__", target)
    _require_no_arguments(func, marker, isinstance(target, staticmethod))

    markers = getattr(func, MARKERS_ATTRIBUTE, frozenset())
    setattr(func, MARKERS_ATTRIBUTE, markers | {marker})
    return target


def markers_of(target: Any) -> frozenset:
    func = getattr(target, "__func__", target)
    return getattr(func, MARKERS_ATTRIBUTE, frozenset())


def post_construct(target: Callable) -> Callable:
    """Mark a no-argument method to run after injection has completed."""
    return set_marker(target, PostConstruct)


def pre_destroy(target: Callable) -> Callable:
    """Mark a no-argument method to run when the injector is shut down."""
    return set_marker(target, PreDestroy)


def _require_no_arguments(func: Callable, marker: type, is_static: bool):
    if not callable(func):
        raise DependencyError(f"@{marker.__name__} target {func!r} is not callable")

    required = [
        p
        for p in inspect.signature(func).parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)
    ]
    # the bound receiver (self or cls) is supplied on invocation
    allowed = 0 if is_static else 1
    if len(required) > allowed:
        raise DependencyError(
            f"@{marker.__name__} method {func.__qualname__} must not take arguments, "
            f"but requires {[p.name for p in required[allowed:]]}"
        )
