# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Custom exceptions raised while building the configuration model."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Problem


class ConfwireError(RuntimeError):
    """Base class for every error raised by confwire."""


class SettingsError(ConfwireError):
    """Raised when ``[tool.confwire]`` settings are invalid."""


class FilterConfigurationError(ConfwireError):
    """Raised when a type filter declaration is malformed."""


class MetadataReadError(ConfwireError):
    """Raised when class metadata cannot be read from a source file."""


class ClassResolutionError(ConfwireError):
    """Raised when a declared class name cannot be located or loaded."""

    def __init__(self, class_name: str, reason: str | None = None) -> None:
        """Record the unresolved ``class_name`` alongside an optional reason.

        Args:
            class_name: Qualified class name that could not be resolved.
            reason: Optional human-readable explanation.
        """

        self.class_name = class_name
        message = f"cannot resolve class '{class_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PropertySourceError(ConfwireError):
    """Raised when a declared property source cannot be loaded."""


class RegistryStateError(ConfwireError):
    """Raised when the registry is used in a way that breaks its lifecycle."""


class DefinitionConflictError(ConfwireError):
    """Raised when two different sources register different content under one name."""

    def __init__(self, name: str, existing: str, incoming: str) -> None:
        self.name = name
        super().__init__(
            f"conflicting definitions for '{name}': already registered from {existing}, "
            f"cannot register different content from {incoming}",
        )


class DefinitionStoreError(ConfwireError):
    """Raised when an operation touches a definition the registry does not store."""


class CircularImportProblem(ConfwireError):
    """Signal an import cycle detected on the import stack."""

    def __init__(self, chain: Sequence[str]) -> None:
        """Capture the import chain that closed the cycle.

        Args:
            chain: Class names from the outermost importer to the re-imported class.
        """

        self.chain = tuple(chain)
        super().__init__("circular import detected: " + " -> ".join(self.chain))


class ProblemsDetectedError(ConfwireError):
    """Raised when validation reports fatal problems."""

    def __init__(self, problems: Sequence[Problem]) -> None:
        self.problems = tuple(problems)
        lines = "\n".join(f"  - {problem.describe()}" for problem in self.problems)
        super().__init__(f"configuration problems detected:\n{lines}")


__all__ = [
    "CircularImportProblem",
    "ClassResolutionError",
    "ConfwireError",
    "DefinitionConflictError",
    "DefinitionStoreError",
    "FilterConfigurationError",
    "MetadataReadError",
    "ProblemsDetectedError",
    "PropertySourceError",
    "RegistryStateError",
    "SettingsError",
]
