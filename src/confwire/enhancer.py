# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Generate subclasses of full configuration classes that route bean method calls.

Inside a full configuration class, one bean method may call another one on
``self``. The generated subclass redirects such calls to the bean lookup so that
singleton beans are created once, even when a factory method calls another
factory method directly.
"""

from __future__ import annotations

import functools
import logging
import types
from collections.abc import Callable, Mapping
from typing import Any, Final

from .errors import DefinitionStoreError
from .interfaces.registry import DefinitionRegistryProtocol
from .interfaces.strategies import BeanLookup
from .metadata.classes import ClassResolver
from .models import PRESERVE_TARGET_CLASS_ATTRIBUTE, ComponentDefinition, ConfigurationKind

LOGGER = logging.getLogger(__name__)

BEAN_FACTORY_ATTRIBUTE: Final[str] = "_confwire_bean_factory"
ENHANCED_SUFFIX: Final[str] = "$$Enhanced"


class EnhancedConfiguration:
    """Base mixed into every generated configuration subclass."""

    _confwire_bean_factory: BeanLookup | None = None
    _confwire_bean_methods: Mapping[str, str] = types.MappingProxyType({})

    def set_bean_factory(self, factory: BeanLookup) -> None:
        """Attach the bean lookup used to resolve intercepted calls."""

        setattr(self, BEAN_FACTORY_ATTRIBUTE, factory)


class ConfigurationEnhancer:
    """Swap full configuration classes for intercepting subclasses."""

    def __init__(self, resolver: ClassResolver | None = None) -> None:
        self._resolver = resolver or ClassResolver()
        self._cache: dict[tuple[type, tuple[tuple[str, str], ...]], type] = {}

    def enhance(self, registry: DefinitionRegistryProtocol) -> list[str]:
        """Enhance every definition tagged as full configuration.

        Args:
            registry: Registry processed by :class:`ConfigurationProcessor`.

        Returns:
            list[str]: Names of the enhanced definitions.

        Raises:
            DefinitionStoreError: If a tagged definition is not stored in the registry.
            ClassResolutionError: If a configuration class cannot be loaded.
        """

        enhanced: list[str] = []
        for name in registry.names():
            definition = registry.get(name)
            if definition.configuration_kind is not ConfigurationKind.FULL:
                continue
            self._check_stored(registry, name, definition)
            if definition.bean_class is not None and issubclass(definition.bean_class, EnhancedConfiguration):
                continue
            target = self._resolver.resolve(definition.class_name or "")
            definition.bean_class = self.enhance_class(target, self._bean_methods(registry, definition))
            definition.attributes[PRESERVE_TARGET_CLASS_ATTRIBUTE] = True
            LOGGER.info("replaced %s with enhanced subclass for '%s'", definition.class_name, name)
            enhanced.append(name)
        return enhanced

    def enhance_class(self, target: type, bean_methods: Mapping[str, str]) -> type:
        """Return a subclass of ``target`` intercepting ``bean_methods``.

        Args:
            target: Configuration class to subclass.
            bean_methods: Mapping of method names to the bean names they produce.

        Returns:
            type: Cached or newly generated subclass.
        """

        key = (target, tuple(sorted(bean_methods.items())))
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        namespace: dict[str, Any] = {
            "__module__": target.__module__,
            "__qualname__": f"{target.__qualname__}{ENHANCED_SUFFIX}",
            "_confwire_bean_methods": types.MappingProxyType(dict(bean_methods)),
        }
        for method_name, bean_name in bean_methods.items():
            function = getattr(target, method_name, None)
            if not isinstance(function, types.FunctionType):
                continue
            namespace[method_name] = _intercept(function, bean_name)
        enhanced = types.new_class(
            f"{target.__name__}{ENHANCED_SUFFIX}",
            (target, EnhancedConfiguration),
            exec_body=lambda body: body.update(namespace),
        )
        self._cache[key] = enhanced
        return enhanced

    @staticmethod
    def _check_stored(registry: DefinitionRegistryProtocol, name: str, definition: ComponentDefinition) -> None:
        if not definition.committed or not registry.contains(name) or registry.get(name) is not definition:
            raise DefinitionStoreError(f"'{name}' is tagged as full configuration but is not stored in the registry")
        if definition.class_name is None:
            raise DefinitionStoreError(f"'{name}' is tagged as full configuration but has no class")

    @staticmethod
    def _bean_methods(registry: DefinitionRegistryProtocol, definition: ComponentDefinition) -> dict[str, str]:
        owners = {definition.name}
        for name in registry.names():
            if registry.get(name).proxy_target == definition.name:
                owners.add(name)
        methods: dict[str, str] = {}
        for name in registry.names():
            factory = registry.get(name).factory
            if factory is not None and not factory.is_static and factory.bean_name in owners:
                methods.setdefault(factory.method_name, name)
        return methods


def _intercept(function: Callable[..., Any], bean_name: str) -> Callable[..., Any]:
    @functools.wraps(function)
    def interceptor(self: Any, *args: Any, **kwargs: Any) -> Any:
        factory: BeanLookup | None = getattr(self, BEAN_FACTORY_ATTRIBUTE, None)
        if factory is None or factory.is_currently_in_creation(bean_name):
            return function(self, *args, **kwargs)
        return factory.get_bean(bean_name, *args, **kwargs)

    return interceptor


__all__ = ["BEAN_FACTORY_ATTRIBUTE", "ConfigurationEnhancer", "EnhancedConfiguration"]
