# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

import pytest

from confwire import (
    AnnotatedDefinitionReader,
    ConfigurationEnhancer,
    ConfigurationProcessor,
    DefinitionRegistry,
    DefinitionStoreError,
    EnhancedConfiguration,
    Environment,
)
from confwire.enhancer import BEAN_FACTORY_ATTRIBUTE
from confwire.models import PRESERVE_TARGET_CLASS_ATTRIBUTE, ComponentDefinition


class FakeLookup:
    """Minimal bean lookup caching singletons and tracking creation."""

    def __init__(self, config) -> None:
        self.config = config
        self.singletons: dict[str, object] = {}
        self.creating: set[str] = set()
        self.calls: list[str] = []

    def get_bean(self, name: str, *args: object, **kwargs: object) -> object:
        self.calls.append(name)
        if name not in self.singletons:
            self.creating.add(name)
            try:
                self.singletons[name] = getattr(self.config, name)(*args, **kwargs)
            finally:
                self.creating.discard(name)
        return self.singletons[name]

    def is_currently_in_creation(self, name: str) -> bool:
        return name in self.creating


@pytest.fixture
def wired(source_tree):
    source_tree.write(
        "wired/config.py",
        """
        from confwire import bean, configuration

        class Widget:
            pass

        class Service:
            def __init__(self, widget):
                self.widget = widget

        @configuration
        class WiredConfig:
            @bean
            def widget(self):
                return Widget()

            @bean
            def service(self):
                return Service(self.widget())

            @staticmethod
            @bean
            def clock():
                return object()

        @configuration(proxy_bean_methods=False)
        class LiteConfig:
            @bean
            def gadget(self):
                return object()
        """,
    )
    registry = DefinitionRegistry()
    reader = source_tree.reader()
    AnnotatedDefinitionReader(registry, reader=reader).register("wired.config.WiredConfig", "wired.config.LiteConfig")
    ConfigurationProcessor(source_tree.settings(), environment=Environment(environ={})).process(registry)
    return registry


def test_enhance_replaces_full_configuration_classes(wired) -> None:
    enhanced = ConfigurationEnhancer().enhance(wired)

    assert enhanced == ["wiredConfig"]
    definition = wired.get("wiredConfig")
    assert issubclass(definition.bean_class, EnhancedConfiguration)
    assert definition.bean_class.__name__ == "WiredConfig$$Enhanced"
    assert definition.attributes[PRESERVE_TARGET_CLASS_ATTRIBUTE] is True
    assert wired.get("liteConfig").bean_class is None
    assert dict(definition.bean_class._confwire_bean_methods) == {"widget": "widget", "service": "service"}


def test_enhance_is_idempotent(wired) -> None:
    enhancer = ConfigurationEnhancer()
    enhancer.enhance(wired)
    first = wired.get("wiredConfig").bean_class

    assert enhancer.enhance(wired) == []
    assert wired.get("wiredConfig").bean_class is first


def test_intercepted_calls_go_through_the_lookup(wired) -> None:
    ConfigurationEnhancer().enhance(wired)
    config = wired.get("wiredConfig").bean_class()
    lookup = FakeLookup(config)
    config.set_bean_factory(lookup)

    service = lookup.get_bean("service")

    assert service.widget is lookup.get_bean("widget")
    assert lookup.calls == ["service", "widget", "widget"]


def test_enhanced_instances_without_lookup_call_through(wired) -> None:
    ConfigurationEnhancer().enhance(wired)
    config = wired.get("wiredConfig").bean_class()

    assert getattr(config, BEAN_FACTORY_ATTRIBUTE) is None
    assert config.widget() is not config.widget()
    assert type(config).clock() is not None


def test_enhance_class_caches_generated_subclasses() -> None:
    class Plain:
        def make(self):
            return object()

    enhancer = ConfigurationEnhancer()

    first = enhancer.enhance_class(Plain, {"make": "thing"})
    assert enhancer.enhance_class(Plain, {"make": "thing"}) is first
    assert enhancer.enhance_class(Plain, {}) is not first
    assert first.make.__name__ == "make"


class _CopyingRegistry(DefinitionRegistry):
    def get(self, name: str) -> ComponentDefinition:
        return super().get(name).model_copy()


def test_enhance_requires_stored_definitions(wired) -> None:
    copying = _CopyingRegistry()
    for definition in wired:
        copying.put(definition.name, definition)

    with pytest.raises(DefinitionStoreError, match="wiredConfig"):
        ConfigurationEnhancer().enhance(copying)
