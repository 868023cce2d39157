# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Build component definitions from class metadata and register them."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .interfaces.registry import DefinitionRegistryProtocol
from .models import ORDER_ATTRIBUTE, CandidateMetadata, ComponentDefinition, ProxyMode, SourceKind
from .proxy import create_scoped_proxy
from .scope import ScopeMetadata

LOGGER = logging.getLogger(__name__)


def build_definition(
    metadata: CandidateMetadata,
    source_kind: SourceKind,
    *,
    scope: ScopeMetadata | None = None,
    lazy_default: bool = False,
    description: str | None = None,
) -> ComponentDefinition:
    """Return an unnamed definition for the class described by ``metadata``.

    The definition is provisionally named after the qualified class name; callers
    assign the final name with a name generator.

    Args:
        metadata: Metadata of the component class.
        source_kind: How the definition was derived.
        scope: Resolved scope metadata; defaults to a singleton without proxy.
        lazy_default: Lazy-init flag used when ``@lazy`` is not declared.
        description: Origin recorded on the definition.

    Returns:
        ComponentDefinition: Definition carrying the common class-level settings.
    """

    resolved = scope or ScopeMetadata()
    lazy = metadata.attributes("lazy")
    depends_on = metadata.attributes("depends_on")
    order = metadata.attributes("order")
    attributes = {ORDER_ATTRIBUTE: order["value"]} if order is not None else {}
    return ComponentDefinition(
        name=metadata.class_name,
        source_kind=source_kind,
        class_name=metadata.class_name,
        scope=resolved.scope_name,
        proxy_mode=resolved.proxy_mode,
        lazy_init=lazy["value"] if lazy is not None else lazy_default,
        primary=metadata.is_annotated("primary"),
        depends_on=tuple(depends_on["value"]) if depends_on is not None else (),
        description=description or metadata.source_path or metadata.class_name,
        metadata=metadata,
        attributes=attributes,
    )


def register_definition(
    registry: DefinitionRegistryProtocol,
    definition: ComponentDefinition,
) -> tuple[ComponentDefinition, ...]:
    """Register ``definition``, splitting it into proxy and target when scoped.

    Args:
        registry: Registry receiving the definition.
        definition: Named definition with a concrete proxy mode.

    Returns:
        tuple[ComponentDefinition, ...]: Definitions stored in the registry, the
        proxy first when a proxy was created.
    """

    if definition.proxy_mode is ProxyMode.NO:
        return (registry.register(definition),)
    proxy, target = create_scoped_proxy(definition)
    registry.register_all([proxy, target])
    LOGGER.debug("registered scoped proxy '%s' for target '%s'", proxy.name, target.name)
    return registry.get(proxy.name), registry.get(target.name)


def definitions_for_class(registry: DefinitionRegistryProtocol, class_name: str) -> list[ComponentDefinition]:
    """Return every registered definition whose class is ``class_name``."""

    found = []
    for name in registry.names():
        definition = registry.get(name)
        if definition.class_name == class_name:
            found.append(definition)
    return found


def order_of(definition: ComponentDefinition) -> int | None:
    """Return the ``@order`` value recorded on ``definition``."""

    value = definition.attributes.get(ORDER_ATTRIBUTE)
    return value if isinstance(value, int) else None


def sort_by_order(definitions: Sequence[ComponentDefinition]) -> list[ComponentDefinition]:
    """Sort ``definitions`` by ascending ``@order``; unordered ones keep their position after them."""

    ordered = [definition for definition in definitions if order_of(definition) is not None]
    unordered = [definition for definition in definitions if order_of(definition) is None]
    ordered.sort(key=lambda definition: definition.attributes[ORDER_ATTRIBUTE])
    return ordered + unordered


__all__ = [
    "build_definition",
    "definitions_for_class",
    "order_of",
    "register_definition",
    "sort_by_order",
]
