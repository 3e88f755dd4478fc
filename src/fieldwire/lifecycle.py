"""Invocation of post-construct and pre-destroy callbacks."""

from typing import Any

from loguru import logger

from fieldwire.errors import InvocationError
from fieldwire.markers import PostConstruct, PreDestroy
from fieldwire.probe import class_chain, declared_methods, has_marker, invoke
from fieldwire.registry import Registry

__all__ = ["LifecycleDriver"]


class LifecycleDriver:
    """Drives the lifecycle callbacks of wired objects.

    Callbacks are found on every class of the instance's class chain, most
    derived class first, and within one class in declaration order.
    """

    def initialize(self, instance: Any):
        """Invoke every ``@post_construct`` method of ``instance``.

        Raises:
            InvocationError: On the first callback that fails.
        """
        self._invoke_marked(instance, PostConstruct)

    def destroy(self, instance: Any):
        """Invoke every ``@pre_destroy`` method of ``instance``.

        Raises:
            InvocationError: On the first callback that fails.
        """
        self._invoke_marked(instance, PreDestroy)

    def teardown(self, registry: Registry) -> list[tuple[Any, InvocationError]]:
        """Destroy every singleton, then every live presenter, and empty the registry.

        Each object is destroyed at most once, even when it is registered as a
        singleton for several types or also tracked as a presenter. A failing
        object does not stop the teardown of the others.

        Args:
            registry: The registry whose objects are being forgotten.

        Returns:
            The (instance, error) pairs of objects whose pre-destroy failed.
        """
        failures = []
        destroyed: set[int] = set()

        singletons = registry.snapshot_singletons()
        self._destroy_all(singletons, destroyed, failures)
        presenters = registry.snapshot_presenters()
        self._destroy_all(presenters, destroyed, failures)

        registry.clear_all()
        logger.debug(
            "Destroyed {} singleton(s) and {} presenter(s)", len(singletons), len(presenters)
        )
        return failures

    def _destroy_all(self, instances: list[Any], destroyed: set[int], failures: list):
        for instance in instances:
            if id(instance) in destroyed:
                continue
            destroyed.add(id(instance))
            try:
                self.destroy(instance)
            except InvocationError as ex:
                logger.exception("Pre-destroy of {!r} failed", instance)
                failures.append((instance, ex))

    @staticmethod
    def _invoke_marked(instance: Any, marker: type):
        for cls in class_chain(type(instance)):
            for method in declared_methods(cls):
                if has_marker(method, marker):
                    logger.trace("Invoking @{} {}", marker.__name__, method)
                    invoke(instance, method)
