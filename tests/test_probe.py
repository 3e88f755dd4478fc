from dataclasses import dataclass
from typing import Annotated, Any, Callable, ClassVar, Optional, Union

import pytest

from fieldwire.errors import DependencyError, FieldInjectionError, InvocationError
from fieldwire.markers import Inject, PostConstruct, PreDestroy, post_construct, pre_destroy
from fieldwire.probe import (
    class_chain,
    constructible_type,
    declared_fields,
    declared_methods,
    has_marker,
    invoke,
    is_value_type,
    set_field,
)


class Service:
    pass


class OtherService:
    pass


class Base:
    base_service: Annotated[Service, Inject]
    plain: int

    @post_construct
    def base_ready(self):
        self.calls.append("base_ready")

    def helper(self):
        pass


class Child(Base):
    instances: ClassVar[int] = 0
    child_service: Annotated[Service, Inject()]
    name: Annotated[str, Inject]
    __secret: Annotated[OtherService, Inject]

    def __init__(self):
        self.calls = []

    @pre_destroy
    def child_closing(self):
        self.calls.append("child_closing")

    @post_construct
    def broken(self):
        raise RuntimeError("boom")


@dataclass(frozen=True)
class Frozen:
    service: Annotated[Optional[Service], Inject] = None


def test_class_chain_is_most_derived_first_without_object():
    assert class_chain(Child) == [Child, Base]
    assert class_chain(object) == []


def test_declared_fields_are_own_annotations_in_declaration_order():
    fields = declared_fields(Child)

    assert [f.name for f in fields] == ["child_service", "name", "_Child__secret"]
    assert all(f.owner is Child for f in fields)
    assert fields[0].declared_type is Service
    assert isinstance(fields[0].metadata[0], Inject)
    assert fields[2].declared_type is OtherService


def test_declared_fields_of_base_are_not_inherited():
    assert [f.name for f in declared_fields(Base)] == ["base_service", "plain"]


def test_declared_fields_of_unannotated_class():
    assert declared_fields(Service) == []


def test_unresolvable_annotation_raises():
    class Broken:
        service: "DoesNotExist"

    with pytest.raises(DependencyError, match="Cannot resolve annotations of"):
        declared_fields(Broken)


def test_has_marker_on_fields():
    markers = {f.name: has_marker(f, Inject) for f in declared_fields(Base)}
    assert markers == {"base_service": True, "plain": False}

    assert all(has_marker(f, Inject) for f in declared_fields(Child))


def test_declared_methods_and_markers():
    methods = {m.name: m for m in declared_methods(Child)}

    assert {"__init__", "child_closing", "broken"} <= set(methods)
    assert has_marker(methods["child_closing"], PreDestroy)
    assert not has_marker(methods["child_closing"], PostConstruct)
    assert has_marker(methods["broken"], PostConstruct)

    assert [m.name for m in declared_methods(Base) if not m.name.startswith("__")] == [
        "base_ready",
        "helper",
    ]


def test_set_field_assigns_mangled_private_name():
    child = Child()
    secret = next(f for f in declared_fields(Child) if f.name == "_Child__secret")
    service = OtherService()

    set_field(child, secret, service)

    assert child._Child__secret is service


def test_set_field_failure_names_field_and_value():
    field = declared_fields(Frozen)[0]

    with pytest.raises(FieldInjectionError, match=r"Cannot set field: Frozen.service with value") as info:
        set_field(Frozen(), field, Service())

    assert info.value.field is field


def test_invoke_calls_declared_function_bound_to_instance():
    child = Child()
    base_ready = next(m for m in declared_methods(Base) if m.name == "base_ready")

    invoke(child, base_ready)

    assert child.calls == ["base_ready"]


def test_invoke_wraps_failures():
    broken = next(m for m in declared_methods(Child) if m.name == "broken")

    with pytest.raises(InvocationError, match=r"Problem invoking Child.broken\(\)") as info:
        invoke(Child(), broken)

    assert isinstance(info.value.__cause__, RuntimeError)


@pytest.mark.parametrize(
    "declared_type",
    [str, bytes, int, bool, float, complex, Optional[int], object, Any],
)
def test_value_types(declared_type):
    assert is_value_type(declared_type)
    assert constructible_type(declared_type) is None


def test_string_subclass_is_a_value_type():
    class Name(str):
        pass

    assert is_value_type(Name)


def test_constructible_types():
    assert constructible_type(Service) is Service
    assert constructible_type(Optional[Service]) is Service
    assert constructible_type(Service | None) is Service


@pytest.mark.parametrize(
    "declared_type",
    [Union[Service, OtherService], Callable[[], Service], list[Service], dict[str, int]],
)
def test_non_class_annotations_are_not_constructible(declared_type):
    assert not is_value_type(declared_type)
    assert constructible_type(declared_type) is None


class OptionalHolder:
    typing_optional: Optional[Annotated[Service, Inject]]
    union_none: Annotated[OtherService, Inject] | None


def test_inject_marker_inside_optional_is_detected():
    fields = declared_fields(OptionalHolder)

    assert [f.name for f in fields if has_marker(f, Inject)] == ["typing_optional", "union_none"]
    assert [f.declared_type for f in fields] == [Service, OtherService]


class BrokenBase:
    missing: "DoesNotExist"


class HealthySubclass(BrokenBase):
    service: Annotated[Service, Inject]


def test_broken_base_annotations_do_not_affect_subclass():
    assert [f.name for f in declared_fields(HealthySubclass)] == ["service"]

    with pytest.raises(DependencyError, match="Cannot resolve annotations of BrokenBase"):
        declared_fields(BrokenBase)
