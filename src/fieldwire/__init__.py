"""Fieldwire field injection for presenter-based UI applications.

Fieldwire wires three kinds of objects: presenters, created fresh for every
view; models and services, shared per type for the whole process; and
existing objects handed in for wiring after the fact. Injectable fields are
declared with ``Annotated`` type hints and filled from, in order, a
configuration source, a per-call injection context, and the singleton of the
field's type.

Key Features:
    - Field injection through standard ``Annotated`` type hints
    - Inherited fields and lifecycle callbacks honoured up the class chain
    - Weak tracking of presenters, so the UI decides when they go away
    - ``@post_construct`` and ``@pre_destroy`` lifecycle callbacks

Basic Usage:
    >>> from typing import Annotated
    >>> from fieldwire.markers import Inject, post_construct
    >>> from fieldwire.injector import instantiate_presenter, forget_all
    >>>
    >>> class Database:
    ...     pass
    >>>
    >>> class UserPresenter:
    ...     db: Annotated[Database, Inject]
    ...
    ...     @post_construct
    ...     def load(self):
    ...         ...
    >>>
    >>> presenter = instantiate_presenter(UserPresenter)
    >>> forget_all()

The framework consists of several core modules:
    - injector: The Injector handle and the process-wide facade
    - resolver: Field resolution and instantiation
    - lifecycle: Post-construct and pre-destroy invocation
    - registry: Singleton and presenter stores
    - configurator: Configuration sources
    - probe: Reflection over declared fields and methods
    - markers: Inject, post_construct and pre_destroy
    - domain: Core domain models (DeclaredField, DeclaredMethod, ConfigurationKey)
    - errors: Framework-specific exceptions
"""
