# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

from pathlib import Path

import pytest

from confwire.conditions import ConditionEvaluator
from confwire.environment import (
    ACTIVE_PROFILES_PROPERTY,
    EnvironPropertySource,
    Environment,
    MapPropertySource,
    load_property_source,
)
from confwire.errors import PropertySourceError
from confwire.models import MethodMetadata


def test_environ_source_supports_relaxed_names() -> None:
    source = EnvironPropertySource({"APP_BASE_PACKAGE": "shop", "plain": "value"})

    assert source.get("app.base-package") == "shop"
    assert source.get("plain") == "value"
    assert source.get("missing") is None


def test_map_source_flattens_nested_tables() -> None:
    source = MapPropertySource("defaults", {"app": {"scan": {"base": "shop"}}, "debug": True})

    assert source.get("app.scan.base") == "shop"
    assert "debug" in source
    assert sorted(source) == ["app.scan.base", "debug"]
    assert len(source) == 2


def test_environment_precedence() -> None:
    environment = Environment(property_sources=[MapPropertySource("base", {"key": "base", "only": "base"})], environ={})
    environment.add_declared(MapPropertySource("declared", {"key": "declared"}))
    environment.add_last(MapPropertySource("fallback", {"key": "fallback", "last": "fallback"}))

    assert environment.get_property("key") == "declared"
    assert environment.get_property("only") == "base"
    assert environment.get_property("last") == "fallback"
    assert environment.get_property("missing", "default") == "default"
    assert [source.name for source in environment.property_sources] == ["declared", "base", "fallback"]

    overridden = Environment(property_sources=[MapPropertySource("base", {"key": "base"})], environ={"KEY": "env"})
    assert overridden.get_property("key") == "env"


def test_declared_sources_are_added_once() -> None:
    environment = Environment(environ={})
    environment.add_declared(MapPropertySource("app", {"key": "first"}))
    environment.add_declared(MapPropertySource("app", {"key": "second"}))

    assert environment.get_property("key") == "first"
    assert environment.contains_source("app")


def test_placeholders_resolve_nested_and_defaults() -> None:
    environment = Environment(
        property_sources=[MapPropertySource("app", {"root": "shop", "scan": "${root}.api"})],
        environ={},
    )

    assert environment.resolve_placeholders("${scan}") == "shop.api"
    assert environment.resolve_placeholders("${missing:fallback}") == "fallback"
    assert environment.resolve_placeholders("${missing}") == "${missing}"
    assert environment.resolve_placeholders("plain") == "plain"


def test_active_profiles_from_properties_and_negation() -> None:
    environment = Environment(
        property_sources=[MapPropertySource("app", {ACTIVE_PROFILES_PROPERTY: "dev, cloud"})],
        environ={},
    )

    assert environment.active_profiles == ("dev", "cloud")
    assert environment.accepts_profiles(["prod", "dev"])
    assert not environment.accepts_profiles(["prod"])
    assert environment.accepts_profiles(["!prod"])
    assert not environment.accepts_profiles(["!dev"])
    assert Environment(active_profiles=["qa"], environ={}).active_profiles == ("qa",)


def test_condition_evaluator_requires_every_declaration() -> None:
    evaluator = ConditionEvaluator(Environment(active_profiles=["dev"], environ={}))
    method = MethodMetadata(
        name="tool",
        declaring_class="shop.Config",
        annotations={"profile": ({"value": ("dev",)}, {"value": ("cloud",)})},
    )

    assert evaluator.should_skip(method)
    assert not evaluator.should_skip(method.model_copy(update={"annotations": {"profile": ({"value": ("dev",)},)}}))


@pytest.mark.parametrize(
    ("filename", "content"),
    [
        ("app.properties", "# comment\n! also a comment\napp.name = shop\napp.port: 8080\n"),
        ("app.toml", '[app]\nname = "shop"\nport = "8080"\n'),
        ("app.json", '{"app": {"name": "shop", "port": "8080"}}'),
    ],
)
def test_load_property_source_formats(tmp_path: Path, filename: str, content: str) -> None:
    path = tmp_path / filename
    path.write_text(content, encoding="utf-8")

    source = load_property_source(path)

    assert source.name == str(path)
    assert source.get("app.name") == "shop"
    assert str(source.get("app.port")) == "8080"


def test_load_property_source_errors(tmp_path: Path) -> None:
    broken = tmp_path / "broken.toml"
    broken.write_text("[app\n", encoding="utf-8")
    listing = tmp_path / "list.json"
    listing.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(PropertySourceError, match="cannot load"):
        load_property_source(broken)
    with pytest.raises(PropertySourceError, match="table at its root"):
        load_property_source(listing)
    with pytest.raises(PropertySourceError):
        load_property_source(tmp_path / "missing.properties")
