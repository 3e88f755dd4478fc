"""The injector handle and the process-wide facade bound to a default handle.

Applications that can pass a handle around should create their own
:class:`Injector`. The module-level functions delegate to
:data:`default_injector` for callers, such as UI toolkit hooks, that can only
reach global state.

Example:
    >>> class GreetingService:
    ...     def greet(self, name):
    ...         return f"Hello {name}"
    >>>
    >>> class GreetingPresenter:
    ...     service: Annotated[GreetingService, Inject]
    ...     name: Annotated[str, Inject]
    >>>
    >>> presenter = instantiate_presenter(GreetingPresenter, {"name": "Dominic"})
    >>> presenter.service.greet(presenter.name)
    'Hello Dominic'
"""

from typing import Any, TypeVar

from loguru import logger

from fieldwire.configurator import ConfigurationSource, Configurator
from fieldwire.errors import ShutdownError
from fieldwire.lifecycle import LifecycleDriver
from fieldwire.registry import Registry
from fieldwire.resolver import Context, InstanceSupplier, Resolver

__all__ = [
    "Injector",
    "default_injector",
    "set_instance_supplier",
    "reset_instance_supplier",
    "set_configuration_source",
    "reset_configuration_source",
    "instantiate_model_or_service",
    "set_model_or_service",
    "instantiate_presenter",
    "register_existing_and_inject",
    "inject_members",
    "forget_all",
]

T = TypeVar("T")


class Injector:
    """Wires presenters, models and services, and drives their lifecycle callbacks.

    Models and services are singletons per type. Presenters are created fresh on
    every request and tracked weakly, so the host may drop them at any time;
    those still alive are destroyed by :meth:`forget_all`.
    """

    def __init__(self):
        self.registry = Registry()
        self.configurator = Configurator()
        self.lifecycle = LifecycleDriver()
        self.resolver = Resolver(self.registry, self.configurator, self.lifecycle)

    def set_instance_supplier(self, supplier: InstanceSupplier):
        """Replace the function used to turn a type into a raw, unwired instance."""
        self.resolver.set_instance_supplier(supplier)

    def reset_instance_supplier(self):
        self.resolver.reset_instance_supplier()

    def set_configuration_source(self, source: ConfigurationSource):
        self.configurator.install(source)

    def reset_configuration_source(self):
        self.configurator.clear()

    def instantiate_model_or_service(self, cls: type[T], context: Context = None) -> T:
        """Return the singleton of ``cls``, creating and wiring it on first request.

        Args:
            cls: The model or service type.
            context: Values by field name, consulted after the configuration source.

        Returns:
            The same instance for every call until :meth:`forget_all`.
        """
        return self.resolver.instantiate_singleton(cls, context)

    def set_model_or_service(self, cls: type[T], instance: T):
        """Publish ``instance`` as the singleton of ``cls``, replacing any existing one."""
        self.registry.force_set_singleton(cls, instance)

    def instantiate_presenter(self, cls: type[T], context: Context = None) -> T:
        return self.resolver.instantiate_presenter(cls, context)

    def register_existing_and_inject(self, instance: T, context: Context = None) -> T:
        """Wire and initialise an object created elsewhere, then track it as a presenter.

        Args:
            instance: An already existing (legacy) object interested in injection.
            context: Values by field name, consulted after the configuration source.

        Returns:
            ``instance``, with its fields injected.
        """
        return self.resolver.register_existing(instance, context)

    def inject_members(self, instance: Any, context: Context = None):
        """Inject the fields of ``instance`` without initialising or tracking it."""
        self.resolver.inject_members(instance, context)

    def forget_all(self):
        """Destroy every tracked object and reset the injector.

        Every singleton and every presenter still alive has its ``@pre_destroy``
        methods invoked. The registries are then emptied, and the instance
        supplier and configuration source reset, even if some callbacks failed.

        Raises:
            ShutdownError: If any pre-destroy callback failed.
        """
        try:
            failures = self.lifecycle.teardown(self.registry)
        finally:
            self.reset_instance_supplier()
            self.reset_configuration_source()
            logger.info("Injector reset")

        if failures:
            raise ShutdownError(failures)


default_injector = Injector()


def set_instance_supplier(supplier: InstanceSupplier):
    default_injector.set_instance_supplier(supplier)


def reset_instance_supplier():
    default_injector.reset_instance_supplier()


def set_configuration_source(source: ConfigurationSource):
    default_injector.set_configuration_source(source)


def reset_configuration_source():
    default_injector.reset_configuration_source()


def instantiate_model_or_service(cls: type[T], context: Context = None) -> T:
    return default_injector.instantiate_model_or_service(cls, context)


def set_model_or_service(cls: type[T], instance: T):
    default_injector.set_model_or_service(cls, instance)


def instantiate_presenter(cls: type[T], context: Context = None) -> T:
    return default_injector.instantiate_presenter(cls, context)


def register_existing_and_inject(instance: T, context: Context = None) -> T:
    return default_injector.register_existing_and_inject(instance, context)


def inject_members(instance: Any, context: Context = None):
    default_injector.inject_members(instance, context)


def forget_all():
    default_injector.forget_all()
