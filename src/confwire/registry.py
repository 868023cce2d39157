# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Component definition registry shared by the scanner, parser, and processor."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Final

from .errors import DefinitionConflictError, RegistryStateError
from .interfaces.registry import DefinitionRegistryProtocol
from .models import CandidateMetadata, ComponentDefinition

LOGGER = logging.getLogger(__name__)

IMPORT_REGISTRY_NAME: Final[str] = "confwire.internal.importRegistry"


class DefinitionRegistry(DefinitionRegistryProtocol):
    """Store component definitions keyed by their assigned name."""

    def __init__(self) -> None:
        """Initialise an empty registry."""

        self._definitions: dict[str, ComponentDefinition] = {}
        self._aliases: dict[str, str] = {}
        self._singletons: dict[str, object] = {}

    def names(self) -> Sequence[str]:
        """Return registered definition names in registration order."""

        return tuple(self._definitions)

    def get(self, name: str) -> ComponentDefinition:
        """Return the definition registered under ``name`` or one of its aliases.

        Args:
            name: Definition name or alias.

        Returns:
            ComponentDefinition: Stored definition.

        Raises:
            KeyError: If nothing is registered under ``name``.
        """

        return self._definitions[self.canonical_name(name)]

    def put(self, name: str, definition: ComponentDefinition) -> None:
        """Store ``definition`` under ``name`` without conflict checks.

        Args:
            name: Registry key; the definition is renamed to match it.
            definition: Definition to store.
        """

        if definition.name != name:
            definition.name = name
        self._definitions[name] = definition
        definition.mark_committed()

    def remove(self, name: str) -> ComponentDefinition:
        """Remove the definition ``name`` together with its aliases.

        Args:
            name: Definition name or alias.

        Returns:
            ComponentDefinition: The removed definition.

        Raises:
            KeyError: If nothing is registered under ``name``.
        """

        canonical = self.canonical_name(name)
        definition = self._definitions.pop(canonical)
        for alias in self.aliases(canonical):
            del self._aliases[alias]
        LOGGER.debug("removed definition '%s'", canonical)
        return definition

    def contains(self, name: str) -> bool:
        """Return whether ``name`` is a registered definition name or alias."""

        return name in self._definitions or name in self._aliases

    def count(self) -> int:
        """Return the number of registered definitions."""

        return len(self._definitions)

    def register(self, definition: ComponentDefinition) -> ComponentDefinition:
        """Register ``definition`` under its own name.

        Registering identical content again is a no-op, registering different
        content from the same origin overrides the previous definition, and
        registering different content from another origin is rejected.

        Args:
            definition: Definition to register.

        Returns:
            ComponentDefinition: Definition stored under the name afterwards.

        Raises:
            DefinitionConflictError: If another origin registered different
                content under the same name.
        """

        stored = self._plan(definition)
        if stored is not definition:
            return stored
        self.put(definition.name, definition)
        for alias in definition.aliases:
            self.register_alias(definition.name, alias)
        return definition

    def register_all(self, definitions: Sequence[ComponentDefinition]) -> None:
        """Register ``definitions`` so that either all or none are committed.

        Args:
            definitions: Definitions to register together.

        Raises:
            DefinitionConflictError: If any definition conflicts with the
                registry or with another member of the batch.
        """

        seen: dict[str, ComponentDefinition] = {}
        for definition in definitions:
            previous = seen.get(definition.name)
            if previous is not None and previous.content() != definition.content():
                raise DefinitionConflictError(definition.name, previous.origin, definition.origin)
            seen[definition.name] = definition
            self._plan(definition)
        for definition in definitions:
            self.register(definition)

    def register_alias(self, name: str, alias: str) -> None:
        """Register ``alias`` for the definition ``name``.

        Raises:
            DefinitionConflictError: If ``alias`` is already used by another definition.
        """

        if alias == name:
            return
        if alias in self._definitions:
            raise DefinitionConflictError(alias, self._definitions[alias].origin, f"alias of '{name}'")
        existing = self._aliases.get(alias)
        if existing is not None and existing != name:
            raise DefinitionConflictError(alias, f"alias of '{existing}'", f"alias of '{name}'")
        self._aliases[alias] = name

    def canonical_name(self, name: str) -> str:
        """Return the definition name that ``name`` refers to."""

        return self._aliases.get(name, name)

    def aliases(self, name: str) -> tuple[str, ...]:
        """Return aliases registered for ``name``."""

        return tuple(alias for alias, target in self._aliases.items() if target == name)

    def definitions_for_class(self, class_name: str) -> list[ComponentDefinition]:
        """Return definitions whose target class is ``class_name``."""

        return [definition for definition in self._definitions.values() if definition.class_name == class_name]

    def register_singleton(self, name: str, value: object) -> None:
        """Publish ``value`` under ``name``.

        Raises:
            RegistryStateError: If a value is already published under ``name``.
        """

        if name in self._singletons:
            raise RegistryStateError(f"shared entry '{name}' is already published")
        self._singletons[name] = value

    def contains_singleton(self, name: str) -> bool:
        """Return whether a shared entry is published under ``name``."""

        return name in self._singletons

    def get_singleton(self, name: str) -> object:
        """Return the shared entry published under ``name``.

        Raises:
            KeyError: If nothing is published under ``name``.
        """

        return self._singletons[name]

    def _plan(self, definition: ComponentDefinition) -> ComponentDefinition:
        existing = self._definitions.get(definition.name)
        if existing is None or existing is definition:
            target = self._aliases.get(definition.name)
            if target is not None:
                raise DefinitionConflictError(definition.name, f"alias of '{target}'", definition.origin)
            return definition
        if existing.content() == definition.content():
            LOGGER.debug("definition '%s' already registered with identical content", definition.name)
            return existing
        if existing.origin == definition.origin:
            LOGGER.info("overriding definition '%s' declared by %s", definition.name, definition.origin)
            return definition
        raise DefinitionConflictError(definition.name, existing.origin, definition.origin)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[ComponentDefinition]:
        return iter(tuple(self._definitions.values()))

    def __repr__(self) -> str:
        names = ", ".join(self._definitions)
        return f"DefinitionRegistry(names=[{names}])"


class ImportRegistry:
    """Record which class imported which, for import-aware post-processing."""

    def __init__(self) -> None:
        self._importing: dict[str, list[CandidateMetadata]] = {}

    def register_import(self, importing: CandidateMetadata, imported_class: str) -> None:
        """Record that ``importing`` imported ``imported_class``."""

        entries = self._importing.setdefault(imported_class, [])
        if all(entry.class_name != importing.class_name for entry in entries):
            entries.append(importing)

    def importing_class_for(self, imported_class: str) -> CandidateMetadata | None:
        """Return the metadata of the class that most recently imported ``imported_class``."""

        entries = self._importing.get(imported_class)
        return entries[-1] if entries else None

    def remove_importing_class(self, importing_class: str) -> None:
        """Forget every import declared by ``importing_class``."""

        for imported, entries in list(self._importing.items()):
            remaining = [entry for entry in entries if entry.class_name != importing_class]
            if remaining:
                self._importing[imported] = remaining
            else:
                del self._importing[imported]

    def as_mapping(self) -> Mapping[str, str]:
        """Return a mapping of imported class names to their latest importer."""

        return {imported: entries[-1].class_name for imported, entries in self._importing.items()}

    def __len__(self) -> int:
        return len(self._importing)

    def __repr__(self) -> str:
        return f"ImportRegistry(imports={self.as_mapping()!r})"


__all__ = ["DefinitionRegistry", "IMPORT_REGISTRY_NAME", "ImportRegistry"]
