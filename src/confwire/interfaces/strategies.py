# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Strategy interfaces selected when a scanner or parser is set up."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..models import CandidateMetadata, ComponentDefinition

if TYPE_CHECKING:
    from ..scope import ScopeMetadata
    from .metadata import MetadataReader
    from .registry import DefinitionRegistryProtocol


@runtime_checkable
class TypeFilter(Protocol):
    """Accept or reject scan candidates based on their metadata."""

    @abstractmethod
    def match(self, candidate: CandidateMetadata, reader: MetadataReader) -> bool:
        """Return whether ``candidate`` satisfies the filter.

        Args:
            candidate: Metadata of the class under consideration.
            reader: Metadata reader for inspecting related classes.

        Returns:
            bool: ``True`` when the filter matches.
        """

        raise NotImplementedError


@runtime_checkable
class NameGenerator(Protocol):
    """Assign registry names to definitions."""

    @abstractmethod
    def generate(self, definition: ComponentDefinition, registry: DefinitionRegistryProtocol) -> str:
        """Return the name under which ``definition`` should be registered."""

        raise NotImplementedError


@runtime_checkable
class ScopeResolver(Protocol):
    """Derive scope and proxy policy from candidate metadata."""

    @abstractmethod
    def resolve(self, candidate: CandidateMetadata) -> ScopeMetadata:
        """Return the concrete scope metadata for ``candidate``."""

        raise NotImplementedError


@runtime_checkable
class BeanLookup(Protocol):
    """Container entry point used by enhanced configuration instances."""

    @abstractmethod
    def get_bean(self, name: str, *args: object, **kwargs: object) -> object:
        """Return the instance registered under ``name``.

        Args:
            name: Registry name of the bean.
            args: Explicit factory arguments, for non-singleton beans.
            kwargs: Explicit keyword factory arguments.

        Returns:
            object: Bean instance.
        """

        raise NotImplementedError

    @abstractmethod
    def is_currently_in_creation(self, name: str) -> bool:
        """Return whether the container is currently creating ``name``."""

        raise NotImplementedError


__all__ = ["BeanLookup", "NameGenerator", "ScopeResolver", "TypeFilter"]
