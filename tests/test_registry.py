import gc

import pytest

from fieldwire.errors import RegistrationError
from fieldwire.registry import Registry


class Model:
    pass


class Presenter:
    pass


class ComparedPresenter:
    def __eq__(self, other):
        return isinstance(other, ComparedPresenter)


class SlottedPresenter:
    __slots__ = ("value",)


@pytest.fixture
def registry():
    return Registry()


def test_singleton_absent_until_put(registry):
    assert registry.get_singleton(Model) is None
    assert not registry.has_singleton(Model)


def test_put_if_absent_keeps_first_instance(registry):
    first, second = Model(), Model()

    assert registry.put_singleton_if_absent(Model, first) is first
    assert registry.put_singleton_if_absent(Model, second) is first
    assert registry.get_singleton(Model) is first


def test_force_set_replaces_existing(registry):
    first, second = Model(), Model()
    registry.put_singleton_if_absent(Model, first)

    registry.force_set_singleton(Model, second)

    assert registry.get_singleton(Model) is second


def test_singleton_entry_does_not_keep_its_type_alive(registry):
    ephemeral = type("Ephemeral", (), {})
    registry.put_singleton_if_absent(ephemeral, "value")
    assert registry.snapshot_singletons() == ["value"]

    del ephemeral
    gc.collect()

    assert registry.snapshot_singletons() == []


def test_track_presenter_is_idempotent(registry):
    presenter = Presenter()

    registry.track_presenter(presenter)
    registry.track_presenter(presenter)

    assert registry.snapshot_presenters() == [presenter]
    assert registry.is_tracked(presenter)


def test_presenters_are_tracked_by_identity(registry):
    first, second = ComparedPresenter(), ComparedPresenter()

    registry.track_presenter(first)
    registry.track_presenter(second)

    tracked = registry.snapshot_presenters()
    assert len(tracked) == 2
    assert any(p is first for p in tracked) and any(p is second for p in tracked)


def test_presenters_are_not_kept_alive(registry):
    kept, dropped = Presenter(), Presenter()
    registry.track_presenter(kept)
    registry.track_presenter(dropped)

    del dropped
    gc.collect()

    assert registry.snapshot_presenters() == [kept]


def test_untrackable_presenter_raises(registry):
    with pytest.raises(RegistrationError, match="do not support weak references"):
        registry.track_presenter(SlottedPresenter())


def test_clear_all(registry):
    presenter = Presenter()
    registry.put_singleton_if_absent(Model, Model())
    registry.track_presenter(presenter)

    registry.clear_all()

    assert registry.snapshot_singletons() == []
    assert registry.snapshot_presenters() == []
    assert not registry.is_tracked(presenter)


def test_none_entry_counts_as_absent(registry):
    model = Model()
    registry.force_set_singleton(Model, None)

    assert not registry.has_singleton(Model)
    assert registry.snapshot_singletons() == []
    assert registry.put_singleton_if_absent(Model, model) is model
    assert registry.get_singleton(Model) is model
