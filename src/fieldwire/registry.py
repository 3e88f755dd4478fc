"""Process-wide stores of wired singletons and presenters."""

import threading
import weakref
from typing import Any, Optional

from fieldwire.errors import RegistrationError

__all__ = ["Registry"]


class _PresenterSet:
    """A set of objects by identity that does not keep its members alive.

    ``weakref.WeakSet`` hashes its members, which fails for objects that
    define ``__eq__`` without ``__hash__``; members here are keyed by ``id``
    and dropped by the weak reference callback when they are collected.
    """

    def __init__(self):
        self._refs: dict[int, weakref.ref] = {}

    def add(self, instance: Any):
        key = id(instance)
        existing = self._refs.get(key)
        if existing is not None and existing() is instance:
            return

        def discard(ref: weakref.ref, refs=self._refs):
            if refs.get(key) is ref:
                del refs[key]

        try:
            self._refs[key] = weakref.ref(instance, discard)
        except TypeError as ex:
            raise RegistrationError(
                f"{type(instance).__qualname__} instances cannot be tracked as presenters "
                "because they do not support weak references"
            ) from ex

    def __contains__(self, instance: Any) -> bool:
        ref = self._refs.get(id(instance))
        return ref is not None and ref() is instance

    def __len__(self) -> int:
        return len(self.snapshot())

    def snapshot(self) -> list[Any]:
        return [obj for obj in (ref() for ref in list(self._refs.values())) if obj is not None]

    def clear(self):
        self._refs.clear()


class Registry:
    """Holds singletons by type and tracks presenters weakly.

    The singleton map holds its keys weakly: an entry disappears once nothing
    else references the type. Values are held strongly.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._singletons: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()
        self._presenters = _PresenterSet()

    def get_singleton(self, cls: type) -> Optional[Any]:
        return self._singletons.get(cls)

    def put_singleton_if_absent(self, cls: type, instance: Any) -> Any:
        """Publish ``instance`` for ``cls`` unless another instance was published first.

        An entry holding None counts as absent and is replaced.

        Returns:
            The instance that ends up published for ``cls``.
        """
        with self._lock:
            existing = self._singletons.get(cls)
            if existing is None:
                self._singletons[cls] = instance
                return instance
            return existing

    def force_set_singleton(self, cls: type, instance: Any):
        with self._lock:
            self._singletons[cls] = instance

    def has_singleton(self, cls: type) -> bool:
        return self._singletons.get(cls) is not None

    def track_presenter(self, instance: Any):
        with self._lock:
            self._presenters.add(instance)

    def is_tracked(self, instance: Any) -> bool:
        return instance in self._presenters

    def snapshot_singletons(self) -> list[Any]:
        with self._lock:
            return [instance for instance in self._singletons.values() if instance is not None]

    def snapshot_presenters(self) -> list[Any]:
        with self._lock:
            return self._presenters.snapshot()

    def clear_all(self):
        with self._lock:
            self._presenters.clear()
            self._singletons.clear()
