# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Interface describing the component definition registry."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..models import ComponentDefinition


@runtime_checkable
class DefinitionRegistryProtocol(Protocol):
    """Describe the behaviour required from definition registries."""

    @abstractmethod
    def names(self) -> Sequence[str]:
        """Return registered definition names in registration order."""

        raise NotImplementedError("DefinitionRegistryProtocol.names must be implemented")

    @abstractmethod
    def get(self, name: str) -> ComponentDefinition:
        """Return the definition registered under ``name`` or an alias of it.

        Raises:
            KeyError: If nothing is registered under ``name``.
        """

        raise NotImplementedError("DefinitionRegistryProtocol.get must be implemented")

    @abstractmethod
    def put(self, name: str, definition: ComponentDefinition) -> None:
        """Store ``definition`` under ``name`` unconditionally."""

        raise NotImplementedError("DefinitionRegistryProtocol.put must be implemented")

    @abstractmethod
    def remove(self, name: str) -> ComponentDefinition:
        """Remove and return the definition registered under ``name``.

        Raises:
            KeyError: If nothing is registered under ``name``.
        """

        raise NotImplementedError("DefinitionRegistryProtocol.remove must be implemented")

    @abstractmethod
    def contains(self, name: str) -> bool:
        """Return whether a definition is registered under ``name``."""

        raise NotImplementedError("DefinitionRegistryProtocol.contains must be implemented")

    @abstractmethod
    def count(self) -> int:
        """Return the number of registered definitions."""

        raise NotImplementedError("DefinitionRegistryProtocol.count must be implemented")

    @abstractmethod
    def register(self, definition: ComponentDefinition) -> ComponentDefinition:
        """Register ``definition`` under its own name.

        Returns:
            ComponentDefinition: The stored definition, which is the existing one
            when an identical definition was already registered.

        Raises:
            DefinitionConflictError: If a different source registered different
                content under the same name.
        """

        raise NotImplementedError("DefinitionRegistryProtocol.register must be implemented")

    @abstractmethod
    def register_all(self, definitions: Sequence[ComponentDefinition]) -> None:
        """Register ``definitions`` atomically."""

        raise NotImplementedError("DefinitionRegistryProtocol.register_all must be implemented")

    @abstractmethod
    def register_singleton(self, name: str, value: object) -> None:
        """Publish a shared object under ``name``."""

        raise NotImplementedError("DefinitionRegistryProtocol.register_singleton must be implemented")

    @abstractmethod
    def contains_singleton(self, name: str) -> bool:
        """Return whether a shared object is published under ``name``."""

        raise NotImplementedError("DefinitionRegistryProtocol.contains_singleton must be implemented")

    @abstractmethod
    def get_singleton(self, name: str) -> object:
        """Return the shared object published under ``name``."""

        raise NotImplementedError("DefinitionRegistryProtocol.get_singleton must be implemented")


__all__ = ["DefinitionRegistryProtocol"]
