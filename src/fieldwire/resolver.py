"""Resolution of injectable fields and instantiation of singletons and presenters.

Each field marked with :class:`~fieldwire.markers.Inject` receives the first
value found in this order:

1. the configurator, queried with the declaring class and the field name;
2. the injection context, queried with the bare field name;
3. the singleton of the field's declared type, created on first use, unless
   that type is a value type (see :func:`fieldwire.probe.is_value_type`).

A field for which every source comes up empty is left untouched.
"""

from typing import Any, Callable, Mapping, Optional, TypeVar, Union

from loguru import logger

from fieldwire.configurator import Configurator
from fieldwire.domain import DeclaredField
from fieldwire.errors import DependencyError, InstantiationError, SelfReferenceError
from fieldwire.lifecycle import LifecycleDriver
from fieldwire.markers import Inject
from fieldwire.probe import class_chain, constructible_type, declared_fields, has_marker, set_field
from fieldwire.registry import Registry

__all__ = [
    "Context",
    "InstanceSupplier",
    "Resolver",
    "as_context_function",
    "default_instance_supplier",
]

T = TypeVar("T")

Context = Union[Callable[[str], Any], Mapping[str, Any], None]
InstanceSupplier = Callable[[type], Any]


def default_instance_supplier(cls: type) -> Any:
    """Instantiate ``cls`` through its no-argument constructor."""
    try:
        return cls()
    except Exception as ex:
        raise InstantiationError(cls) from ex


def _no_context(_field_name: str) -> Any:
    return None


def as_context_function(context: Context) -> Callable[[str], Any]:
    """Normalise an injection context into a function from field name to value.

    Args:
        context: None, a mapping of field names to values, or a callable.

    Raises:
        DependencyError: If the context is neither.
    """
    if context is None:
        return _no_context
    if isinstance(context, Mapping):
        return context.get
    if callable(context):
        return context
    raise DependencyError(f"Injection context {context!r} is neither a mapping nor callable")


class Resolver:
    """Creates and wires objects using a registry, a configurator and a lifecycle driver."""

    def __init__(self, registry: Registry, configurator: Configurator, lifecycle: LifecycleDriver):
        self._registry = registry
        self._configurator = configurator
        self._lifecycle = lifecycle
        self.instance_supplier: InstanceSupplier = default_instance_supplier

    def set_instance_supplier(self, supplier: InstanceSupplier):
        self.instance_supplier = supplier

    def reset_instance_supplier(self):
        self.instance_supplier = default_instance_supplier

    def instantiate_singleton(self, cls: type[T], context: Context = None) -> T:
        """Return the singleton for ``cls``, creating and wiring it on first request.

        A freshly created instance is fully injected and initialised before it
        is published. If another instance was published for ``cls`` meanwhile,
        the fresh one is discarded without being destroyed.

        Raises:
            InstantiationError: If the instance supplier fails.
            SelfReferenceError: If ``cls`` declares an injectable field of its own type.
        """
        existing = self._registry.get_singleton(cls)
        if existing is not None:
            return existing

        instance = self._create(cls)
        self.inject_and_initialize(instance, context, building=cls)

        published = self._registry.put_singleton_if_absent(cls, instance)
        if published is instance:
            logger.debug("Published singleton {}", cls.__qualname__)
        else:
            logger.debug("Discarded {} instance, another was published first", cls.__qualname__)
        return published

    def instantiate_presenter(self, cls: type[T], context: Context = None) -> T:
        """Create, wire and track a new instance of ``cls``. Presenters are never cached."""
        return self.register_existing(self._create(cls), context)

    def register_existing(self, instance: T, context: Context = None) -> T:
        self.inject_and_initialize(instance, context)
        self._registry.track_presenter(instance)
        logger.debug("Tracking presenter {!r}", instance)
        return instance

    def inject_and_initialize(
        self, instance: T, context: Context = None, building: Optional[type] = None
    ) -> T:
        self.inject_members(instance, context, building)
        self._lifecycle.initialize(instance)
        return instance

    def inject_members(self, instance: Any, context: Context = None, building: Optional[type] = None):
        """Assign every injectable field declared on the instance's class chain.

        Fields of a subclass are assigned before those of its bases. A field
        name redeclared by a subclass is assigned once, from the subclass
        declaration.

        Args:
            instance: The object to wire.
            context: Per-call values by field name.
            building: The singleton type ``instance`` is being built for, if any.
        """
        lookup = as_context_function(context)
        seen: set[str] = set()

        for cls in class_chain(type(instance)):
            logger.debug("Injecting members of {} into {!r}", cls.__qualname__, instance)
            for field in declared_fields(cls):
                if field.name in seen or not has_marker(field, Inject):
                    continue
                seen.add(field.name)

                value = self._resolve(field, lookup, building)
                if value is not None:
                    set_field(instance, field, value)

    def _resolve(
        self, field: DeclaredField, lookup: Callable[[str], Any], building: Optional[type]
    ) -> Any:
        value = self._configurator.lookup(field.owner, field.name)
        if value is not None:
            return value

        value = lookup(field.name)
        logger.trace("Injection context for {}: {!r}", field, value)
        if value is not None:
            return value

        target = constructible_type(field.declared_type)
        if target is None:
            logger.trace("Leaving {} unassigned", field)
            return None
        if target is building:
            raise SelfReferenceError(building, field)
        return self.instantiate_singleton(target, lookup)

    def _create(self, cls: type) -> Any:
        try:
            instance = self.instance_supplier(cls)
        except DependencyError:
            raise
        except Exception as ex:
            raise InstantiationError(cls) from ex

        if instance is None:
            raise InstantiationError(cls, "Instance supplier returned None for")
        return instance
