# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

import pytest

from confwire import FilterConfigurationError, FilterKind, type_filter
from confwire.errors import ClassResolutionError
from confwire.filters import (
    AnnotationTypeFilter,
    AssignableTypeFilter,
    GlobPatternFilter,
    RegexPatternFilter,
    TypeFilterSet,
    build_filter_set,
    filters_for,
)
from confwire.metadata import ClassResolver
from confwire.models import FilterSpec


@pytest.fixture
def shop(source_tree):
    source_tree.write(
        "shop/model.py",
        """
        from confwire import component, service

        class Base:
            pass

        class Middle(Base):
            pass

        @service
        class OrderService(Middle):
            pass

        @component
        class OrderServiceTest:
            pass

        class Plain(Base):
            pass
        """,
    )
    return source_tree.reader()


def _read(reader, simple: str):
    return reader.read_class(f"shop.model.{simple}")


def test_annotation_filter_follows_stereotypes(shop) -> None:
    component_filter = AnnotationTypeFilter("confwire.component")
    direct_only = AnnotationTypeFilter("component", consider_meta_annotations=False)

    assert component_filter.match(_read(shop, "OrderService"), shop)
    assert not direct_only.match(_read(shop, "OrderService"), shop)
    assert direct_only.match(_read(shop, "OrderServiceTest"), shop)
    assert not component_filter.match(_read(shop, "Plain"), shop)


def test_annotation_filter_requires_known_annotation() -> None:
    with pytest.raises(FilterConfigurationError, match="not an annotation type"):
        AnnotationTypeFilter("shop.model.Base")


def test_assignable_filter_walks_base_classes(shop) -> None:
    assignable = AssignableTypeFilter("shop.model.Base")

    assert assignable.match(_read(shop, "OrderService"), shop)
    assert assignable.match(_read(shop, "Base"), shop)
    assert not assignable.match(_read(shop, "OrderServiceTest"), shop)


def test_assignable_filter_stops_at_unreadable_bases(source_tree) -> None:
    source_tree.write(
        "shop/external.py",
        """
        import requests

        class Session(requests.Session):
            pass
        """,
    )
    reader = source_tree.reader()

    assert not AssignableTypeFilter("shop.model.Base").match(reader.read_class("shop.external.Session"), reader)


def test_pattern_filters(shop) -> None:
    service = _read(shop, "OrderService")

    assert GlobPatternFilter("shop.*.Order*").match(service, shop)
    assert RegexPatternFilter(r"shop\.model\.Order\w+").match(service, shop)
    assert not RegexPatternFilter(r"Order\w+").match(service, shop)
    with pytest.raises(FilterConfigurationError, match="invalid filter expression"):
        RegexPatternFilter("(")


def test_filter_set_exclusion_wins(shop) -> None:
    filters = TypeFilterSet(exclude=[RegexPatternFilter(r".*Test")])

    assert filters.matches(_read(shop, "OrderService"), shop)
    assert not filters.matches(_read(shop, "OrderServiceTest"), shop)
    assert not filters.matches(_read(shop, "Plain"), shop)
    filters.add_include(AssignableTypeFilter("shop.model.Base"))
    assert filters.matches(_read(shop, "Plain"), shop)


def test_filter_set_without_defaults_matches_only_includes(shop) -> None:
    filters = TypeFilterSet([GlobPatternFilter("*.Plain")], use_default_filters=False)

    assert filters.include_filters and not filters.exclude_filters
    assert filters.matches(_read(shop, "Plain"), shop)
    assert not filters.matches(_read(shop, "OrderService"), shop)


def test_filter_spec_shapes_are_checked() -> None:
    resolver = ClassResolver()

    with pytest.raises(FilterConfigurationError, match="take patterns"):
        filters_for(FilterSpec(kind=FilterKind.REGEX, classes=("shop.X",)), resolver=resolver)
    with pytest.raises(FilterConfigurationError, match="take classes"):
        filters_for(FilterSpec(kind=FilterKind.ASSIGNABLE_TYPE, patterns=("*",)), resolver=resolver)
    with pytest.raises(FilterConfigurationError):
        filters_for(FilterSpec(kind=FilterKind.ANNOTATION), resolver=resolver)


def test_type_filter_builds_specs() -> None:
    spec = type_filter(FilterKind.GLOB, pattern=["shop.*", "lab.*"])

    assert spec == FilterSpec(kind=FilterKind.GLOB, patterns=("shop.*", "lab.*"))
    assert type_filter("annotation", "service").classes == ("service",)


def test_custom_filters_are_instantiated_and_prepared(source_tree) -> None:
    source_tree.write(
        "lab/filters.py",
        """
        from confwire import EnvironmentAware

        class OnlyWidgets(EnvironmentAware):
            def match(self, candidate, reader):
                return candidate.simple_name.endswith("Widget")

        class NotAFilter:
            pass
        """,
    )
    prepared: list[object] = []
    resolver = ClassResolver()

    built = filters_for(
        type_filter(FilterKind.CUSTOM, "lab.filters.OnlyWidgets"),
        resolver=resolver,
        prepare=prepared.append,
    )

    assert type(built[0]).__name__ == "OnlyWidgets"
    assert prepared == built
    with pytest.raises(FilterConfigurationError, match="does not implement"):
        filters_for(type_filter(FilterKind.CUSTOM, "lab.filters.NotAFilter"), resolver=resolver)
    with pytest.raises(ClassResolutionError):
        filters_for(type_filter(FilterKind.CUSTOM, "lab.filters.Missing"), resolver=resolver)


def test_build_filter_set_combines_specs(shop) -> None:
    filters = build_filter_set(
        [type_filter(FilterKind.ASSIGNABLE_TYPE, "shop.model.Base")],
        [type_filter(FilterKind.ANNOTATION, "service")],
        use_default_filters=False,
        resolver=ClassResolver(),
    )

    assert filters.matches(_read(shop, "Plain"), shop)
    assert not filters.matches(_read(shop, "OrderService"), shop)
    assert not filters.matches(_read(shop, "OrderServiceTest"), shop)
