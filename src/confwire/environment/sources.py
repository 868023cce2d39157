# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Property sources backed by mappings, TOML, JSON, and ``key=value`` files."""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any, Final

from ..errors import PropertySourceError

KEY_VALUE_SEPARATORS: Final[tuple[str, ...]] = ("=", ":")
COMMENT_PREFIXES: Final[tuple[str, ...]] = ("#", "!")


class PropertySource:
    """Named, read-only view over flat property keys."""

    def __init__(self, name: str, properties: Mapping[str, Any]) -> None:
        self.name = name
        self._properties = dict(properties)

    def get(self, key: str) -> Any | None:
        """Return the value stored under ``key`` or ``None``."""

        return self._properties.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._properties

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, keys={len(self._properties)})"


class MapPropertySource(PropertySource):
    """Property source built from a possibly nested mapping."""

    def __init__(self, name: str, payload: Mapping[str, Any]) -> None:
        super().__init__(name, _flatten(payload))


class EnvironPropertySource(PropertySource):
    """Expose process environment variables, also under relaxed names.

    ``app.base-package`` is looked up as itself and as ``APP_BASE_PACKAGE``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        super().__init__("environ", environ if environ is not None else os.environ)

    def get(self, key: str) -> Any | None:
        value = super().get(key)
        if value is None:
            value = super().get(key.upper().replace(".", "_").replace("-", "_"))
        return value


def load_property_source(path: Path, *, name: str | None = None) -> MapPropertySource:
    """Load ``path`` into a property source chosen by file suffix.

    Args:
        path: ``.toml``, ``.json``, or ``key=value`` (``.properties``/``.env``) file.
        name: Optional source name; defaults to the path.

    Returns:
        MapPropertySource: Loaded property source.

    Raises:
        PropertySourceError: If the file cannot be read or decoded.
    """

    source_name = name or str(path)
    try:
        if path.suffix == ".toml":
            with path.open("rb") as handle:
                payload: Any = tomllib.load(handle)
        elif path.suffix == ".json":
            payload = json.loads(path.read_text(encoding="utf-8"))
        else:
            payload = _parse_key_values(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise PropertySourceError(f"cannot load property source {path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise PropertySourceError(f"property source {path} must contain a table at its root")
    return MapPropertySource(source_name, payload)


def _parse_key_values(text: str) -> dict[str, str]:
    properties: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith(COMMENT_PREFIXES):
            continue
        positions = [line.find(separator) for separator in KEY_VALUE_SEPARATORS if separator in line]
        if not positions:
            properties[line] = ""
            continue
        index = min(positions)
        properties[line[:index].strip()] = line[index + 1 :].strip()
    return properties


def _flatten(payload: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in payload.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


__all__ = [
    "EnvironPropertySource",
    "MapPropertySource",
    "PropertySource",
    "load_property_source",
]
