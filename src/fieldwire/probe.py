"""Reflective access to the injectable members of a class.

The probe only ever looks at members declared directly on one class. Callers
walk the class chain themselves via :func:`class_chain`, most-derived class
first, so that members of a subclass are always processed before those of its
bases.
"""

import inspect
import sys
import types
from typing import Annotated, Any, ClassVar, Optional, Union, get_args, get_origin, get_type_hints

from fieldwire.domain import DeclaredField, DeclaredMethod
from fieldwire.errors import DependencyError, FieldInjectionError, InvocationError
from fieldwire.markers import markers_of

__all__ = [
    "VALUE_TYPES",
    "class_chain",
    "declared_fields",
    "declared_methods",
    "has_marker",
    "set_field",
    "invoke",
    "is_value_type",
    "constructible_type",
]

# Fundamental types the instance supplier is never asked to construct.
VALUE_TYPES = (str, bytes, bool, int, float, complex)


def class_chain(cls: type) -> list[type]:
    """Return the class followed by its bases in method resolution order, without ``object``."""
    return [c for c in cls.__mro__ if c is not object]


def declared_fields(cls: type) -> list[DeclaredField]:
    """Return the annotated attributes declared directly on ``cls``, in declaration order.

    Annotations are resolved with ``get_type_hints`` so that string (forward
    reference) annotations yield real types. Only the annotations of ``cls``
    itself are resolved, so a broken base class does not affect its subclasses.
    ``ClassVar`` annotations are not instance fields and are skipped. An
    ``Inject`` marker may sit inside ``Optional``, as in
    ``Optional[Annotated[Service, Inject]]``.

    Args:
        cls: The class to inspect.

    Returns:
        One DeclaredField per annotated instance attribute of ``cls``.

    Raises:
        DependencyError: If the annotations of the class cannot be resolved.
    """
    try:
        own = inspect.get_annotations(cls)
        hints = _own_type_hints(cls, own) if own else {}
    except (NameError, TypeError, AttributeError) as ex:
        raise DependencyError(
            f"Cannot resolve annotations of {cls.__qualname__}: {ex}"
        ) from ex

    return [
        _make_field(cls, name, hints.get(name, annotation))
        for name, annotation in own.items()
        if not _is_class_var(hints.get(name, annotation))
    ]


def declared_methods(cls: type) -> list[DeclaredMethod]:
    """Return the functions, staticmethods and classmethods declared directly on ``cls``."""
    return [
        DeclaredMethod(cls, name, member, markers_of(member))
        for name, member in vars(cls).items()
        if inspect.isfunction(member) or isinstance(member, (staticmethod, classmethod))
    ]


def has_marker(member: Union[DeclaredField, DeclaredMethod], marker: type) -> bool:
    """Test whether a declared field or method carries the given marker.

    Example:
        >>> [f.name for f in declared_fields(Presenter) if has_marker(f, Inject)]
        ['service', 'greeting']
    """
    if isinstance(member, DeclaredField):
        return any(m is marker or isinstance(m, marker) for m in member.metadata)
    return marker in member.markers


def set_field(instance: Any, field: DeclaredField, value: Any):
    try:
        setattr(instance, field.name, value)
    except (AttributeError, TypeError, ValueError) as ex:
        raise FieldInjectionError(field, value) from ex


def invoke(instance: Any, method: DeclaredMethod) -> Any:
    """Call the method as declared on its owner, bound to ``instance``.

    The declaring class's own function is called rather than whatever the
    instance's class resolves the name to, so an overridden method in a base
    class still runs its own body.

    Raises:
        InvocationError: If the method raises.
    """
    bound = method.member.__get__(instance, type(instance))
    try:
        return bound()
    except Exception as ex:
        raise InvocationError(method) from ex


def is_value_type(declared_type: Any) -> bool:
    """Return True for types that hold plain values rather than services.

    ``object`` and ``Any`` are value types, as is any subclass of one of
    :data:`VALUE_TYPES`. ``Optional[X]`` is judged by ``X``.

    Example:
        >>> is_value_type(str), is_value_type(Optional[int]), is_value_type(Database)
        (True, True, False)
    """
    candidate = _unwrap_optional(declared_type)
    if candidate is object or candidate is Any:
        return True
    return _is_plain_class(candidate) and issubclass(candidate, VALUE_TYPES)


def constructible_type(declared_type: Any) -> Optional[type]:
    """Return the class to instantiate for a field, or None if it must not be constructed.

    Value types are never constructed, and neither are annotations that do not
    denote a single plain class (unions, callables, parameterised generics).
    """
    candidate = _unwrap_optional(declared_type)
    if not _is_plain_class(candidate) or is_value_type(candidate):
        return None
    return candidate


def _own_type_hints(cls: type, own: dict) -> dict:
    # a bare holder class keeps get_type_hints from walking the bases of cls
    holder = type(cls.__name__, (), {"__annotations__": dict(own), "__module__": cls.__module__})
    module = sys.modules.get(cls.__module__)
    return get_type_hints(
        holder,
        globalns=getattr(module, "__dict__", {}),
        localns=dict(vars(cls)),
        include_extras=True,
    )


def _make_field(cls: type, name: str, annotation: Any) -> DeclaredField:
    annotation = _unwrap_optional(annotation)
    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        return DeclaredField(cls, name, base_type, tuple(metadata))
    return DeclaredField(cls, name, annotation, ())


def _is_class_var(annotation: Any) -> bool:
    if get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _unwrap_optional(declared_type: Any) -> Any:
    if get_origin(declared_type) in (Union, types.UnionType):
        members = [a for a in get_args(declared_type) if a is not type(None)]
        if len(members) == 1:
            return members[0]
    return declared_type


def _is_plain_class(candidate: Any) -> bool:
    return inspect.isclass(candidate) and get_origin(candidate) is None and candidate is not Any
