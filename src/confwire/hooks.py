# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Extension points invoked while configuration classes are processed."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .environment import Environment
    from .interfaces.registry import DefinitionRegistryProtocol
    from .interfaces.resources import ResourceLocator
    from .models import CandidateMetadata


class ImportSelector(ABC):
    """Select further configuration classes to import."""

    @abstractmethod
    def select_imports(self, metadata: CandidateMetadata) -> Sequence[str | type]:
        """Return classes to import on behalf of the importing class.

        Args:
            metadata: Metadata of the class declaring the import.

        Returns:
            Sequence[str | type]: Qualified class names or classes to import.
        """


class ImportRegistrar(ABC):
    """Register definitions directly against the registry."""

    @abstractmethod
    def register_definitions(self, metadata: CandidateMetadata, registry: DefinitionRegistryProtocol) -> None:
        """Register definitions on behalf of the importing class.

        Args:
            metadata: Metadata of the class declaring the import.
            registry: Live definition registry.
        """


class EnvironmentAware:
    """Mixin for strategies that need the active environment."""

    def set_environment(self, environment: Environment) -> None:
        self.environment = environment


class RegistryAware:
    """Mixin for strategies that need the definition registry."""

    def set_registry(self, registry: DefinitionRegistryProtocol) -> None:
        self.registry = registry


class ResourceLocatorAware:
    """Mixin for strategies that need the resource locator."""

    def set_resource_locator(self, locator: ResourceLocator) -> None:
        self.resource_locator = locator


def invoke_aware_methods(
    target: object,
    *,
    environment: Environment,
    registry: DefinitionRegistryProtocol,
    locator: ResourceLocator,
) -> None:
    """Inject collaborators into ``target`` according to the mixins it implements.

    Args:
        target: Freshly instantiated filter, selector, or registrar.
        environment: Active environment.
        registry: Definition registry under construction.
        locator: Resource locator used for scanning.
    """

    if isinstance(target, EnvironmentAware):
        target.set_environment(environment)
    if isinstance(target, RegistryAware):
        target.set_registry(registry)
    if isinstance(target, ResourceLocatorAware):
        target.set_resource_locator(locator)


SELECTOR_CLASS_NAMES = frozenset({f"{__name__}.ImportSelector", "confwire.ImportSelector"})
REGISTRAR_CLASS_NAMES = frozenset({f"{__name__}.ImportRegistrar", "confwire.ImportRegistrar"})

__all__ = [
    "EnvironmentAware",
    "ImportRegistrar",
    "ImportSelector",
    "REGISTRAR_CLASS_NAMES",
    "RegistryAware",
    "ResourceLocatorAware",
    "SELECTOR_CLASS_NAMES",
    "invoke_aware_methods",
]
