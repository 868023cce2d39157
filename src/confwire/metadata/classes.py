# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Load classes by qualified name for the few steps that need runtime objects."""

from __future__ import annotations

import logging
from importlib import import_module
from types import ModuleType
from typing import TypeVar

from ..errors import ClassResolutionError

LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class ClassResolver:
    """Resolve qualified class names to classes by importing their modules.

    The resolver is the only collaborator that executes user code.  Scanning
    and parsing rely on the static metadata reader; the resolver is reserved for
    instantiating import selectors, registrars, custom filters and name
    generators, and for the enhancement pass.
    """

    def __init__(self) -> None:
        self._cache: dict[str, type] = {}

    def resolve(self, class_name: str) -> type:
        """Return the class named ``class_name``.

        Args:
            class_name: Qualified name such as ``"app.config.Root"`` or
                ``"app.config.Outer.Inner"``.

        Returns:
            type: Loaded class.

        Raises:
            ClassResolutionError: If the module cannot be imported or the name
                does not refer to a class.
        """

        if cached := self._cache.get(class_name):
            return cached
        module, remainder = self._import_owner(class_name)
        value: object = module
        for attribute in remainder:
            try:
                value = getattr(value, attribute)
            except AttributeError as exc:
                raise ClassResolutionError(class_name, f"'{attribute}' not found") from exc
        if not isinstance(value, type):
            raise ClassResolutionError(class_name, "not a class")
        self._cache[class_name] = value
        LOGGER.debug("resolved class %s", class_name)
        return value

    def instantiate(self, class_name: str, expected: type[_T]) -> _T | None:
        """Instantiate ``class_name`` when it is a subclass of ``expected``.

        Args:
            class_name: Qualified class name.
            expected: Required base class.

        Returns:
            _T | None: New instance, or ``None`` when the class does not derive
            from ``expected``.
        """

        cls = self.resolve(class_name)
        if not issubclass(cls, expected):
            return None
        return cls()

    def _import_owner(self, class_name: str) -> tuple[ModuleType, list[str]]:
        parts = class_name.split(".")
        for index in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:index])
            try:
                return import_module(module_name), parts[index:]
            except ModuleNotFoundError as exc:
                missing = exc.name or ""
                if missing and not (module_name == missing or module_name.startswith(f"{missing}.")):
                    raise ClassResolutionError(class_name, f"missing dependency '{missing}'") from exc
            except ImportError as exc:
                raise ClassResolutionError(class_name, str(exc)) from exc
        raise ClassResolutionError(class_name, "no importable module")

    def clear_cache(self) -> None:
        """Forget previously resolved classes."""

        self._cache.clear()


__all__ = ["ClassResolver"]
