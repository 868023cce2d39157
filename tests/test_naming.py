# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

import pytest

from confwire import ComponentDefinition, DefinitionRegistry, SourceKind, stereotype
from confwire.annotations import DEFAULT_ANNOTATIONS
from confwire.models import CandidateMetadata
from confwire.naming import NAME_GENERATORS, QualifiedNameGenerator, ShortNameGenerator, decapitalize


def _definition(qualname: str, annotations: dict | None = None, module: str = "shop.parts") -> ComponentDefinition:
    metadata = CandidateMetadata(
        class_name=f"{module}.{qualname}",
        module=module,
        package_name="shop",
        qualname=qualname,
        annotations=annotations or {},
    )
    return ComponentDefinition(
        name=metadata.class_name,
        source_kind=SourceKind.SCANNED,
        class_name=metadata.class_name,
        metadata=metadata,
    )


@pytest.mark.parametrize(
    ("simple", "expected"),
    [
        ("Root", "root"),
        ("URLService", "urlService"),
        ("URL", "url"),
        ("IO2Port", "io2Port"),
        ("already", "already"),
        ("", ""),
    ],
)
def test_decapitalize(simple: str, expected: str) -> None:
    assert decapitalize(simple) == expected


def test_short_names_use_simple_class_name() -> None:
    generator = ShortNameGenerator()

    assert generator.generate(_definition("OrderService"), DefinitionRegistry()) == "orderService"
    assert generator.generate(_definition("Outer.Inner"), DefinitionRegistry()) == "outer.Inner"


def test_explicit_stereotype_names_win() -> None:
    generator = ShortNameGenerator()
    declared = _definition("OrderService", {"service": ({"value": "orders"},)})

    assert generator.generate(declared, DefinitionRegistry()) == "orders"


def test_custom_stereotypes_contribute_names() -> None:
    annotations = DEFAULT_ANNOTATIONS.copy()
    stereotype("gadget", "component", registry=annotations)
    declared = _definition("Widget", {"gadget": ({"value": "fancyWidget"},)})

    assert ShortNameGenerator(annotations).generate(declared, DefinitionRegistry()) == "fancyWidget"
    assert QualifiedNameGenerator(annotations).generate(declared, DefinitionRegistry()) == "fancyWidget"
    assert ShortNameGenerator().generate(declared, DefinitionRegistry()) == "widget"
    assert "gadget" not in DEFAULT_ANNOTATIONS


def test_scope_value_is_not_a_name() -> None:
    definition = _definition("Session", {"scope": ({"value": "request"},), "component": ({"value": ""},)})

    assert ShortNameGenerator().generate(definition, DefinitionRegistry()) == "session"
    assert QualifiedNameGenerator().generate(definition, DefinitionRegistry()) == "shop.parts.Session"


def test_qualified_names_and_generator_table() -> None:
    definition = ComponentDefinition(name="tmp", source_kind=SourceKind.IMPORTED, class_name="shop.parts.Config")

    assert QualifiedNameGenerator().generate(definition, DefinitionRegistry()) == "shop.parts.Config"
    assert ShortNameGenerator().generate(definition, DefinitionRegistry()) == "config"
    assert set(NAME_GENERATORS) == {"short", "qualified"}


def test_name_requires_a_class() -> None:
    definition = ComponentDefinition(name="orphan", source_kind=SourceKind.EXPLICIT)

    with pytest.raises(ValueError, match="without a class"):
        ShortNameGenerator().generate(definition, DefinitionRegistry())
