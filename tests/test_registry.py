# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

import pytest

from confwire import ComponentDefinition, DefinitionConflictError, DefinitionRegistry, RegistryStateError, SourceKind
from confwire.models import CandidateMetadata
from confwire.registry import ImportRegistry


def _definition(name: str, class_name: str = "pkg.Thing", **fields: object) -> ComponentDefinition:
    fields.setdefault("description", "pkg/thing.py")
    return ComponentDefinition(name=name, source_kind=SourceKind.SCANNED, class_name=class_name, **fields)


def test_register_identical_content_is_noop(registry: DefinitionRegistry) -> None:
    first = registry.register(_definition("thing"))
    second = registry.register(_definition("thing"))

    assert second is first
    assert registry.count() == 1
    assert first.committed


def test_register_same_origin_overrides(registry: DefinitionRegistry) -> None:
    registry.register(_definition("thing"))
    replacement = registry.register(_definition("thing", scope="prototype"))

    assert registry.get("thing") is replacement
    assert registry.get("thing").scope == "prototype"


def test_register_conflicting_origin_raises(registry: DefinitionRegistry) -> None:
    registry.register(_definition("thing"))

    with pytest.raises(DefinitionConflictError, match="thing"):
        registry.register(_definition("thing", class_name="other.Thing", description="other/thing.py"))


def test_register_all_is_atomic(registry: DefinitionRegistry) -> None:
    registry.register(_definition("taken"))
    batch = [
        _definition("fresh", class_name="pkg.Fresh"),
        _definition("taken", class_name="elsewhere.Taken", description="elsewhere.py"),
    ]

    with pytest.raises(DefinitionConflictError):
        registry.register_all(batch)

    assert registry.names() == ("taken",)
    assert not batch[0].committed


def test_register_all_rejects_conflicts_within_batch(registry: DefinitionRegistry) -> None:
    batch = [_definition("dup"), _definition("dup", class_name="pkg.Other", description="other.py")]

    with pytest.raises(DefinitionConflictError):
        registry.register_all(batch)
    assert len(registry) == 0


def test_aliases_resolve_to_definition(registry: DefinitionRegistry) -> None:
    stored = registry.register(_definition("primary", aliases=("secondary", "tertiary")))

    assert registry.get("secondary") is stored
    assert "tertiary" in registry
    assert registry.aliases("primary") == ("secondary", "tertiary")
    with pytest.raises(DefinitionConflictError):
        registry.register(_definition("secondary", class_name="pkg.Other", description="x.py"))


def test_remove_drops_definition_and_aliases(registry: DefinitionRegistry) -> None:
    registry.register(_definition("thing", aliases=("widget",)))

    removed = registry.remove("widget")

    assert removed.name == "thing"
    assert "thing" not in registry
    assert "widget" not in registry
    registry.register(_definition("widget", class_name="pkg.Widget"))
    assert registry.get("widget").class_name == "pkg.Widget"
    with pytest.raises(KeyError):
        registry.remove("thing")


def test_singletons_are_published_once(registry: DefinitionRegistry) -> None:
    registry.register_singleton("shared", 42)

    assert registry.contains_singleton("shared")
    assert registry.get_singleton("shared") == 42
    with pytest.raises(RegistryStateError):
        registry.register_singleton("shared", 43)


def test_registry_dunder_helpers(registry: DefinitionRegistry) -> None:
    registry.register(_definition("alpha", class_name="pkg.Alpha"))
    registry.register(_definition("beta", class_name="pkg.Beta"))

    assert len(registry) == 2
    assert [definition.name for definition in registry] == ["alpha", "beta"]
    assert "missing" not in registry
    assert "alpha" in repr(registry)
    assert [definition.name for definition in registry.definitions_for_class("pkg.Beta")] == ["beta"]


def test_import_registry_tracks_latest_importer() -> None:
    imports = ImportRegistry()
    first = CandidateMetadata(class_name="pkg.First", module="pkg", package_name="pkg", qualname="First")
    second = CandidateMetadata(class_name="pkg.Second", module="pkg", package_name="pkg", qualname="Second")

    imports.register_import(first, "pkg.Imported")
    imports.register_import(second, "pkg.Imported")

    assert imports.importing_class_for("pkg.Imported") == second
    imports.remove_importing_class("pkg.Second")
    assert imports.importing_class_for("pkg.Imported") == first
    assert imports.as_mapping() == {"pkg.Imported": "pkg.First"}
    assert imports.importing_class_for("pkg.Unknown") is None
