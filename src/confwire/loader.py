# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Materialise parsed configuration classes into registry definitions."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .conditions import ConditionEvaluator
from .definitions import build_definition, register_definition
from .interfaces.registry import DefinitionRegistryProtocol
from .interfaces.strategies import NameGenerator, ScopeResolver
from .models import (
    CONFIGURATION_CLASS_ATTRIBUTE,
    ORDER_ATTRIBUTE,
    SINGLETON_SCOPE,
    ComponentDefinition,
    FactoryReference,
    ProxyMode,
    SourceKind,
)
from .naming import QualifiedNameGenerator
from .parser.model import BeanMethod, ConfigurationClass
from .registry import ImportRegistry
from .scope import AnnotationScopeResolver

LOGGER = logging.getLogger(__name__)


class ConfigurationDefinitionLoader:
    """Register the definitions contributed by parsed configuration classes."""

    def __init__(
        self,
        registry: DefinitionRegistryProtocol,
        *,
        import_registry: ImportRegistry,
        conditions: ConditionEvaluator,
        scope_resolver: ScopeResolver | None = None,
        imported_name_generator: NameGenerator | None = None,
    ) -> None:
        self._registry = registry
        self._import_registry = import_registry
        self._conditions = conditions
        self._scope_resolver = scope_resolver or AnnotationScopeResolver()
        self._name_generator = imported_name_generator or QualifiedNameGenerator()

    def load(self, configuration_classes: Iterable[ConfigurationClass]) -> None:
        """Register definitions for ``configuration_classes`` in order."""

        for config_class in configuration_classes:
            self._load(config_class)

    def _load(self, config_class: ConfigurationClass) -> None:
        if self._skipped(config_class):
            LOGGER.debug("skipping %s: excluded by the active profiles", config_class.class_name)
            self._import_registry.remove_importing_class(config_class.class_name)
            return
        if config_class.is_imported:
            self._register_imported(config_class)
        for method in config_class.bean_methods:
            self._register_bean_method(config_class, method)
        for registrar, importing in config_class.registrars:
            LOGGER.debug("invoking registrar %r for %s", registrar, importing.class_name)
            before = set(self._registry.names())
            registrar.register_definitions(importing, self._registry)
            self._mark_registrar_definitions(before)
        self._tag(config_class)

    def _mark_registrar_definitions(self, before: set[str]) -> None:
        for name in self._registry.names():
            if name in before:
                continue
            definition = self._registry.get(name)
            if definition.source_kind is not SourceKind.IMPORTED_REGISTRAR:
                definition.source_kind = SourceKind.IMPORTED_REGISTRAR

    def _skipped(self, config_class: ConfigurationClass) -> bool:
        if self._conditions.should_skip(config_class.metadata):
            return True
        if not config_class.is_imported:
            return False
        return all(self._conditions.should_skip(importer) for importer in config_class.imported_by)

    def _register_imported(self, config_class: ConfigurationClass) -> None:
        for name in self._registry.names():
            existing = self._registry.get(name)
            if existing.class_name == config_class.class_name and existing.source_kind is not SourceKind.IMPORTED:
                config_class.bean_name = existing.name
                return
        importer = config_class.imported_by[0].class_name
        definition = build_definition(
            config_class.metadata,
            SourceKind.IMPORTED,
            scope=self._scope_resolver.resolve(config_class.metadata),
            description=f"imported by {importer}",
        )
        definition.name = self._name_generator.generate(definition, self._registry)
        stored = register_definition(self._registry, definition)
        config_class.bean_name = stored[0].name
        LOGGER.debug("registered imported configuration class %s as '%s'", config_class.class_name, definition.name)

    def _register_bean_method(self, config_class: ConfigurationClass, method: BeanMethod) -> None:
        if self._conditions.should_skip(method.metadata):
            return
        name = method.bean_name
        if self._overridden(config_class, method):
            return
        declared_scope = method.metadata.attributes("scope") or {}
        proxy_mode = declared_scope.get("proxy_mode", ProxyMode.DEFAULT)
        lazy = method.metadata.attributes("lazy") or config_class.metadata.attributes("lazy")
        depends_on = method.metadata.attributes("depends_on")
        order = method.metadata.attributes("order")
        definition = ComponentDefinition(
            name=name,
            source_kind=SourceKind.BEAN_METHOD,
            scope=declared_scope.get("value") or SINGLETON_SCOPE,
            proxy_mode=ProxyMode.NO if proxy_mode is ProxyMode.DEFAULT else proxy_mode,
            lazy_init=bool(lazy and lazy["value"]),
            primary=method.metadata.is_annotated("primary"),
            autowire_candidate=method.autowire_candidate,
            aliases=method.aliases,
            depends_on=tuple(depends_on["value"]) if depends_on is not None else (),
            factory=FactoryReference(
                method_name=method.metadata.name,
                bean_name=None if method.is_static else config_class.bean_name,
                class_name=config_class.class_name,
            ),
            description=method.describe(),
            attributes={ORDER_ATTRIBUTE: order["value"]} if order is not None else {},
        )
        existing = self._registry.get(name) if self._registry.contains(name) else None
        if existing is not None and existing.source_kind is SourceKind.SCANNED:
            LOGGER.info("bean method %s replaces scanned definition '%s'", method.describe(), existing.name)
            self._registry.remove(existing.name)
            if existing.proxy_target is not None and self._registry.contains(existing.proxy_target):
                self._registry.remove(existing.proxy_target)
        register_definition(self._registry, definition)

    def _overridden(self, config_class: ConfigurationClass, method: BeanMethod) -> bool:
        # Another method of the same class already claimed the name.
        if not self._registry.contains(method.bean_name):
            return False
        factory = self._registry.get(method.bean_name).factory
        if factory is None or factory.class_name != config_class.class_name:
            return False
        if factory.method_name == method.metadata.name:
            return False
        LOGGER.debug("keeping %s.%s for '%s'", factory.class_name, factory.method_name, method.bean_name)
        return True

    def _tag(self, config_class: ConfigurationClass) -> None:
        name = config_class.bean_name
        if name is None or not self._registry.contains(name):
            return
        definition = self._registry.get(name)
        if definition.proxy_target is not None:
            definition = self._registry.get(definition.proxy_target)
        definition.attributes[CONFIGURATION_CLASS_ATTRIBUTE] = config_class.kind.value
        LOGGER.debug("tagged '%s' as %s configuration", definition.name, config_class.kind.value)


__all__ = ["ConfigurationDefinitionLoader"]
