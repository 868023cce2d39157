# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem resource locator mapping dotted packages onto source files."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from ..interfaces.resources import ResourceHandle, ResourceLocator

LOGGER = logging.getLogger(__name__)

DEFAULT_RESOURCE_PATTERN: Final[str] = "**/*.py"
SOURCE_SUFFIX: Final[str] = ".py"
PACKAGE_MARKER: Final[str] = "__init__"
ALWAYS_EXCLUDE_DIRS: Final[frozenset[str]] = frozenset({"__pycache__", "node_modules", "site-packages"})


class FilesystemResourceLocator(ResourceLocator):
    """Locate module sources under a list of search paths without importing them."""

    def __init__(self, search_paths: Iterable[Path | str] | None = None) -> None:
        """Create a locator that searches ``search_paths``.

        Args:
            search_paths: Directories that play the role of import roots. When
                omitted the entries of :data:`sys.path` are consulted on every
                lookup.
        """

        self._search_paths = None if search_paths is None else tuple(Path(entry) for entry in search_paths)

    @property
    def search_paths(self) -> tuple[Path, ...]:
        """Return the existing directories consulted by the locator."""

        entries = self._search_paths
        if entries is None:
            entries = tuple(Path(entry or ".") for entry in sys.path)
        resolved: list[Path] = []
        for entry in entries:
            if not entry.is_dir():
                continue
            candidate = entry.resolve()
            if candidate not in resolved:
                resolved.append(candidate)
        return tuple(resolved)

    def package_directories(self, package: str) -> list[Path]:
        """Return every directory that contributes to ``package``.

        Args:
            package: Dotted package name.

        Returns:
            list[Path]: Directories in search-path order. Namespace packages may
            span several roots.
        """

        parts = _split_dotted(package)
        if not parts:
            return []
        return [root.joinpath(*parts) for root in self.search_paths if root.joinpath(*parts).is_dir()]

    def list_resources(self, base_package: str, pattern: str = DEFAULT_RESOURCE_PATTERN) -> Sequence[ResourceHandle]:
        """Return module resources beneath ``base_package`` matching ``pattern``.

        A name that denotes a plain module rather than a package yields that
        module alone.

        Args:
            base_package: Dotted package or module name.
            pattern: Glob pattern relative to each package directory.

        Returns:
            Sequence[ResourceHandle]: Sorted, de-duplicated module resources.
        """

        directories = self.package_directories(base_package)
        if not directories:
            module = self.locate_module(base_package)
            if module is None or module.is_package:
                return []
            LOGGER.debug("%s is a module; listing it alone", base_package)
            return [module]
        handles: list[ResourceHandle] = []
        seen: set[Path] = set()
        for directory in directories:
            for path in sorted(directory.glob(pattern)):
                if not path.is_file() or path.suffix != SOURCE_SUFFIX:
                    continue
                relative = path.relative_to(directory)
                if any(part in ALWAYS_EXCLUDE_DIRS or part.startswith(".") for part in relative.parts[:-1]):
                    continue
                resolved = path.resolve()
                if resolved in seen:
                    continue
                handle = _handle_for(base_package, relative, resolved)
                if handle is None:
                    LOGGER.debug("skipping %s: not an importable module path", path)
                    continue
                seen.add(resolved)
                handles.append(handle)
        return handles

    def locate_module(self, module: str) -> ResourceHandle | None:
        """Return the resource that holds ``module``.

        Args:
            module: Dotted module name.

        Returns:
            ResourceHandle | None: Resource when a matching source file exists.
        """

        parts = _split_dotted(module)
        if not parts:
            return None
        for root in self.search_paths:
            package_init = root.joinpath(*parts, f"{PACKAGE_MARKER}{SOURCE_SUFFIX}")
            if package_init.is_file():
                return ResourceHandle(path=package_init, module=module, is_package=True)
            module_file = root.joinpath(*parts[:-1], f"{parts[-1]}{SOURCE_SUFFIX}")
            if module_file.is_file():
                return ResourceHandle(path=module_file, module=module)
        return None

    def __repr__(self) -> str:
        return f"FilesystemResourceLocator(search_paths={self._search_paths!r})"


def _split_dotted(name: str) -> tuple[str, ...]:
    parts = tuple(name.strip().split("."))
    if not all(part.isidentifier() for part in parts):
        return ()
    return parts


def _handle_for(base_package: str, relative: Path, path: Path) -> ResourceHandle | None:
    parts = list(relative.with_suffix("").parts)
    is_package = parts[-1] == PACKAGE_MARKER
    if is_package:
        parts = parts[:-1]
    if not all(part.isidentifier() for part in parts):
        return None
    module = ".".join((base_package, *parts))
    return ResourceHandle(path=path, module=module, is_package=is_package)


__all__ = [
    "ALWAYS_EXCLUDE_DIRS",
    "DEFAULT_RESOURCE_PATTERN",
    "FilesystemResourceLocator",
]
