# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Register explicitly named classes as component definitions."""

from __future__ import annotations

from collections.abc import Sequence

from .annotations import class_name_of
from .definitions import build_definition, register_definition
from .interfaces.metadata import MetadataReader
from .interfaces.registry import DefinitionRegistryProtocol
from .interfaces.strategies import NameGenerator, ScopeResolver
from .models import ComponentDefinition, SourceKind
from .naming import ShortNameGenerator
from .scope import AnnotationScopeResolver


class AnnotatedDefinitionReader:
    """Turn classes handed over by the caller into explicit definitions."""

    def __init__(
        self,
        registry: DefinitionRegistryProtocol,
        *,
        reader: MetadataReader,
        name_generator: NameGenerator | None = None,
        scope_resolver: ScopeResolver | None = None,
    ) -> None:
        self._registry = registry
        self._reader = reader
        self._name_generator = name_generator or ShortNameGenerator()
        self._scope_resolver = scope_resolver or AnnotationScopeResolver()

    def register(self, *classes: str | type) -> list[ComponentDefinition]:
        """Register each class in ``classes`` and return the stored definitions.

        Args:
            classes: Classes or qualified class names.

        Returns:
            list[ComponentDefinition]: Stored definitions, proxies followed by
            their targets for scoped classes.

        Raises:
            ClassResolutionError: If a class cannot be located.
            DefinitionConflictError: If a name is already taken by other content.
        """

        stored: list[ComponentDefinition] = []
        for value in classes:
            metadata = self._reader.read_class(class_name_of(value))
            definition = build_definition(
                metadata,
                SourceKind.EXPLICIT,
                scope=self._scope_resolver.resolve(metadata),
                description=f"explicit registration of {metadata.class_name}",
            )
            definition.name = self._name_generator.generate(definition, self._registry)
            stored.extend(register_definition(self._registry, definition))
        return stored


def register_classes(
    registry: DefinitionRegistryProtocol,
    reader: MetadataReader,
    classes: Sequence[str | type],
) -> list[ComponentDefinition]:
    """Register ``classes`` with the default naming and scope strategies."""

    return AnnotatedDefinitionReader(registry, reader=reader).register(*classes)


__all__ = ["AnnotatedDefinitionReader", "register_classes"]
