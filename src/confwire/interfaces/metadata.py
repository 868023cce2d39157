# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Interfaces for reading class metadata without executing class bodies."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..models import CandidateMetadata
from .resources import ResourceHandle


@runtime_checkable
class MetadataReader(Protocol):
    """Deliver :class:`CandidateMetadata` for resources and class names."""

    @abstractmethod
    def read(self, handle: ResourceHandle) -> Sequence[CandidateMetadata]:
        """Return metadata for every class declared in ``handle``.

        Args:
            handle: Resource returned by a :class:`ResourceLocator`.

        Returns:
            Sequence[CandidateMetadata]: Metadata in declaration order, nested
            classes following their enclosing class.

        Raises:
            MetadataReadError: If the resource cannot be parsed.
        """

        raise NotImplementedError

    @abstractmethod
    def read_class(self, class_name: str) -> CandidateMetadata:
        """Return metadata for the class named ``class_name``.

        Args:
            class_name: Qualified class name.

        Returns:
            CandidateMetadata: Metadata describing the class.

        Raises:
            ClassResolutionError: If the class cannot be located.
            MetadataReadError: If the declaring module cannot be parsed.
        """

        raise NotImplementedError

    @abstractmethod
    def clear_cache(self) -> None:
        """Drop cached metadata."""

        raise NotImplementedError


__all__ = ["MetadataReader"]
