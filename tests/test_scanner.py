# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

import pytest

from confwire import ComponentScanner, DefinitionConflictError, Environment, ProxyMode, SourceKind
from confwire.conditions import ConditionEvaluator
from confwire.filters import GlobPatternFilter, TypeFilterSet
from confwire.models import ProblemKind
from confwire.naming import QualifiedNameGenerator
from confwire.proxy import scoped_target_name
from confwire.scope import AnnotationScopeResolver


@pytest.fixture
def store(source_tree):
    source_tree.write(
        "store/services.py",
        """
        from abc import ABC, abstractmethod
        from confwire import component, lazy, lookup, order, primary, scope, service, ProxyMode

        @service
        @primary
        @order(3)
        class OrderService:
            pass

        @component("cart")
        @scope("session", proxy_mode=ProxyMode.TARGET_CLASS)
        class ShoppingCart:
            pass

        @component
        @scope("request")
        @lazy
        class RequestLog:
            pass

        @component
        class AbstractGateway(ABC):
            @abstractmethod
            def send(self):
                ...

        @component
        class CommandRunner(ABC):
            @lookup("command")
            @abstractmethod
            def create_command(self):
                ...

        class Helper:
            pass
        """,
    )
    source_tree.write(
        "store/profiles.py",
        """
        from confwire import component, profile

        @component
        @profile("cloud")
        class CloudOnly:
            pass

        @component
        @profile("!cloud")
        class LocalOnly:
            pass
        """,
    )
    return source_tree


def _scanner(tree, registry, **options):
    return ComponentScanner(registry, locator=tree.locator(), reader=tree.reader(), **options)


def test_scan_registers_components(store, registry) -> None:
    found = _scanner(store, registry).scan("store")
    names = [definition.name for definition in found]

    assert names == [
        "cloudOnly",
        "localOnly",
        "orderService",
        "cart",
        scoped_target_name("cart"),
        "requestLog",
        "commandRunner",
    ]
    order_service = registry.get("orderService")
    assert order_service.source_kind is SourceKind.SCANNED
    assert order_service.primary
    assert order_service.attributes["confwire.order"] == 3
    assert order_service.description.endswith("services.py")
    assert "helper" not in registry
    assert "abstractGateway" not in registry


def test_scoped_proxy_pair(store, registry) -> None:
    _scanner(store, registry).scan("store")

    proxy = registry.get("cart")
    target = registry.get("scopedTarget.cart")
    assert proxy.proxy_target == "scopedTarget.cart"
    assert proxy.scope == "singleton"
    assert proxy.proxy_mode is ProxyMode.TARGET_CLASS
    assert target.scope == "session"
    assert target.proxy_mode is ProxyMode.NO
    assert not target.autowire_candidate
    assert target.class_name == proxy.class_name == "store.services.ShoppingCart"


def test_default_proxy_mode_applies_to_undecided_scopes(store, registry) -> None:
    scanner = _scanner(store, registry, scope_resolver=AnnotationScopeResolver(ProxyMode.INTERFACES))
    scanner.scan("store.services")

    assert registry.get("requestLog").proxy_target == "scopedTarget.requestLog"
    assert registry.get("requestLog").proxy_mode is ProxyMode.INTERFACES
    assert registry.get("scopedTarget.requestLog").lazy_init
    assert registry.get("cart").proxy_mode is ProxyMode.TARGET_CLASS
    assert registry.get("orderService").proxy_target is None


def test_scan_is_idempotent(store, registry) -> None:
    first = _scanner(store, registry).scan("store")
    second = _scanner(store, registry).scan("store", "store.services")

    assert [definition.name for definition in second] == [definition.name for definition in first]
    assert all(a is b for a, b in zip(first, second, strict=True))
    assert len(registry) == len(first)


def test_module_names_list_that_module_alone(store) -> None:
    locator = store.locator()

    assert [handle.module for handle in locator.list_resources("store.services")] == ["store.services"]
    assert [handle.module for handle in locator.list_resources("store")] == [
        "store",
        "store.profiles",
        "store.services",
    ]
    assert locator.list_resources("store.missing") == []


def test_profiles_skip_candidates(store, registry) -> None:
    conditions = ConditionEvaluator(Environment(active_profiles=["cloud"], environ={}))
    _scanner(store, registry, conditions=conditions).scan("store.profiles")

    assert registry.names() == ("cloudOnly",)


def test_filters_and_lazy_default(store, registry) -> None:
    filters = TypeFilterSet([GlobPatternFilter("*.Helper")])
    _scanner(store, registry, filters=filters, lazy_init=True).scan("store.services")

    assert registry.get("helper").lazy_init
    assert registry.get("requestLog").lazy_init


def test_declaring_class_is_excluded(store, registry) -> None:
    _scanner(store, registry, declaring_class="store.services.OrderService").scan("store")

    assert "orderService" not in registry


def test_unknown_package_yields_nothing(store, registry) -> None:
    assert _scanner(store, registry).scan("nowhere") == ()
    assert _scanner(store, registry).scan() == ()
    assert len(registry) == 0


def test_unreadable_modules_become_problems(source_tree, registry) -> None:
    source_tree.write("broken/good.py", "from confwire import component\n\n@component\nclass Good:\n    pass\n")
    source_tree.write("broken/bad.py", "class Bad(:\n")
    scanner = _scanner(source_tree, registry)

    scanner.scan("broken")

    assert registry.names() == ("good",)
    assert [problem.kind for problem in scanner.problems] == [ProblemKind.UNREADABLE_METADATA]
    assert scanner.problems[0].subject == "broken.bad"


def test_conflicting_names_raise(source_tree, registry) -> None:
    source_tree.write("clash/one.py", "from confwire import component\n\n@component\nclass Widget:\n    pass\n")
    source_tree.write("clash/two.py", "from confwire import component\n\n@component\nclass Widget:\n    pass\n")

    with pytest.raises(DefinitionConflictError, match="widget"):
        _scanner(source_tree, registry).scan("clash")


def test_qualified_names_avoid_conflicts(source_tree, registry) -> None:
    source_tree.write("clash/one.py", "from confwire import component\n\n@component\nclass Widget:\n    pass\n")
    source_tree.write("clash/two.py", "from confwire import component\n\n@component\nclass Widget:\n    pass\n")

    _scanner(source_tree, registry, name_generator=QualifiedNameGenerator()).scan("clash")

    assert registry.names() == ("clash.one.Widget", "clash.two.Widget")


def test_lookalike_decorators_are_not_components(source_tree, registry) -> None:
    source_tree.write("fo/lib.py", "def component(cls):\n    return cls\n")
    source_tree.write("fo/app.py", "from fo.lib import component\n\n\n@component\nclass NotOurs:\n    pass\n")

    assert _scanner(source_tree, registry).scan("fo") == ()
    assert len(registry) == 0
