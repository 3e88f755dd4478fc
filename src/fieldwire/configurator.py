"""Caller-installed configuration consulted before any other value source.

A configuration source is any callable taking a :class:`ConfigurationKey`
(a pair of the declaring class and the field name) and returning a value, or
None when it has nothing to say about that field.
"""

import os
from typing import Any, Callable, Mapping, Optional

from loguru import logger

from fieldwire.domain import ConfigurationKey

__all__ = [
    "ConfigurationSource",
    "Configurator",
    "properties_source",
    "environment_source",
    "chain_sources",
]

ConfigurationSource = Callable[[ConfigurationKey], Any]


class Configurator:
    """Holds at most one configuration source."""

    def __init__(self):
        self._source: Optional[ConfigurationSource] = None

    def install(self, source: ConfigurationSource):
        """Replace the current configuration source."""
        self._source = source

    def clear(self):
        self._source = None

    @property
    def is_installed(self) -> bool:
        return self._source is not None

    def lookup(self, owner: type, field_name: str) -> Any:
        """Query the installed source for a field declared on ``owner``.

        Returns:
            The configured value, or None if no source is installed or the
            source has no value for the field.
        """
        if self._source is None:
            return None
        value = self._source(ConfigurationKey(owner, field_name))
        logger.trace("Configuration for {}.{}: {!r}", owner.__qualname__, field_name, value)
        return value


def properties_source(properties: Mapping[str, Any], prefix: str = "") -> ConfigurationSource:
    """Build a source answering from a flat mapping of property names.

    Keys are tried from most to least specific, each with ``prefix`` prepended:
    the fully qualified ``module.Class.field``, then ``Class.field``, then the
    bare field name.

    Example:
        >>> source = properties_source({"GreetingPresenter.greeting": "Hi", "timeout": 5})
        >>> source(ConfigurationKey(GreetingPresenter, "greeting"))
        'Hi'
    """

    def source(key: ConfigurationKey) -> Any:
        owner, field_name = key
        candidates = (
            f"{owner.__module__}.{owner.__qualname__}.{field_name}",
            f"{owner.__qualname__}.{field_name}",
            field_name,
        )
        return next(
            (properties[prefix + c] for c in candidates if prefix + c in properties),
            None,
        )

    return source


def environment_source(prefix: str = "") -> ConfigurationSource:
    """Build a source answering from process environment variables.

    The environment is read at lookup time, so variables set after the source
    is installed are still seen.
    """

    def source(key: ConfigurationKey) -> Any:
        return properties_source(os.environ, prefix)(key)

    return source


def chain_sources(*sources: ConfigurationSource) -> ConfigurationSource:
    """Build a source returning the first non-None answer of ``sources``."""

    def source(key: ConfigurationKey) -> Any:
        for candidate in sources:
            value = candidate(key)
            if value is not None:
                return value
        return None

    return source
