# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Interfaces for locating class resources without importing them."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class ResourceHandle:
    """Source file holding one module's class declarations."""

    path: Path
    module: str
    is_package: bool = False

    @property
    def package_name(self) -> str:
        """Return the package that owns the module."""

        if self.is_package:
            return self.module
        return self.module.rpartition(".")[0]


@runtime_checkable
class ResourceLocator(Protocol):
    """Map packages and modules onto source resources."""

    @abstractmethod
    def list_resources(self, base_package: str, pattern: str) -> Sequence[ResourceHandle]:
        """Return resources under ``base_package`` matching ``pattern``.

        Args:
            base_package: Dotted package name to search.
            pattern: Glob pattern relative to the package directory.

        Returns:
            Sequence[ResourceHandle]: Matching resources in a stable order. An
            unknown package yields an empty sequence.
        """

        raise NotImplementedError

    @abstractmethod
    def locate_module(self, module: str) -> ResourceHandle | None:
        """Return the resource holding ``module`` or ``None`` when absent.

        Args:
            module: Dotted module name.

        Returns:
            ResourceHandle | None: Resource for the module when it exists.
        """

        raise NotImplementedError


__all__ = ["ResourceHandle", "ResourceLocator"]
