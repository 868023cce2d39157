# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Environment holding property sources, active profiles, and placeholder resolution."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any, Final

from .sources import EnvironPropertySource, PropertySource

LOGGER = logging.getLogger(__name__)

ACTIVE_PROFILES_PROPERTY: Final[str] = "confwire.profiles.active"
MAX_PLACEHOLDER_PASSES: Final[int] = 10
_PLACEHOLDER: Final[re.Pattern[str]] = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")


class Environment:
    """Resolve properties and profiles for configuration processing."""

    def __init__(
        self,
        *,
        property_sources: Iterable[PropertySource] = (),
        active_profiles: Iterable[str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Create an environment.

        Args:
            property_sources: Initial sources, highest precedence first.
            active_profiles: Explicit active profiles; when omitted they are
                read from the ``confwire.profiles.active`` property.
            environ: Environment variables, defaulting to :data:`os.environ`.
        """

        self._environ = EnvironPropertySource(environ)
        self._sources: list[PropertySource] = list(property_sources)
        self._active_profiles = None if active_profiles is None else tuple(active_profiles)

    @property
    def property_sources(self) -> tuple[PropertySource, ...]:
        """Return declared sources, highest precedence first."""

        return tuple(self._sources)

    def add_declared(self, source: PropertySource) -> None:
        """Add a source declared by configuration; later declarations win."""

        if self.contains_source(source.name):
            LOGGER.debug("property source %s already registered", source.name)
            return
        self._sources.insert(0, source)

    def add_last(self, source: PropertySource) -> None:
        """Add ``source`` with the lowest precedence."""

        self._sources.append(source)

    def contains_source(self, name: str) -> bool:
        """Return whether a source called ``name`` is registered."""

        return any(source.name == name for source in self._sources)

    def get_property(self, key: str, default: Any = None) -> Any:
        """Return the value of ``key`` from the highest-precedence source.

        Environment variables take precedence over declared sources.
        """

        value = self._environ.get(key)
        if value is not None:
            return value
        for source in self._sources:
            value = source.get(key)
            if value is not None:
                return value
        return default

    def resolve_placeholders(self, text: str) -> str:
        """Replace ``${key}`` and ``${key:default}`` placeholders in ``text``.

        Unresolvable placeholders without a default are left untouched.
        """

        def _replace(match: re.Match[str]) -> str:
            value = self.get_property(match.group(1).strip())
            if value is not None:
                return str(value)
            if match.group(2) is not None:
                return match.group(2)
            return match.group(0)

        resolved = text
        for _ in range(MAX_PLACEHOLDER_PASSES):
            updated = _PLACEHOLDER.sub(_replace, resolved)
            if updated == resolved:
                break
            resolved = updated
        return resolved

    @property
    def active_profiles(self) -> tuple[str, ...]:
        """Return the active profiles."""

        if self._active_profiles is not None:
            return self._active_profiles
        raw = self.get_property(ACTIVE_PROFILES_PROPERTY, "")
        if isinstance(raw, (list, tuple)):
            return tuple(str(item) for item in raw)
        return tuple(item.strip() for item in str(raw).split(",") if item.strip())

    def accepts_profiles(self, profiles: Iterable[str]) -> bool:
        """Return whether any of ``profiles`` is active.

        A profile prefixed with ``!`` matches when that profile is not active.
        """

        active = set(self.active_profiles)
        for profile in profiles:
            if profile.startswith("!"):
                if profile[1:] not in active:
                    return True
            elif profile in active:
                return True
        return False

    def __repr__(self) -> str:
        names = ", ".join(source.name for source in self._sources)
        return f"Environment(sources=[{names}], profiles={self.active_profiles!r})"


__all__ = ["ACTIVE_PROFILES_PROPERTY", "Environment"]
