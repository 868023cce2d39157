# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Project-level settings read from ``[tool.confwire]`` in ``pyproject.toml``."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import SettingsError
from .metadata.locator import DEFAULT_RESOURCE_PATTERN
from .models import ProxyMode

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "confwire"
ACTIVE_PROFILES_ENV: Final[str] = "CONFWIRE_ACTIVE_PROFILES"

_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class ConfwireSettings(BaseModel):
    """Settings applied to scanning and configuration processing."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    search_paths: list[Path] = Field(default_factory=list)
    resource_pattern: str = DEFAULT_RESOURCE_PATTERN
    default_proxy_mode: ProxyMode = ProxyMode.NO
    use_default_filters: bool = True
    active_profiles: list[str] = Field(default_factory=list)
    strict: bool = False
    name_generator: Literal["short", "qualified"] = "short"

    @field_validator("default_proxy_mode", mode="before")
    @classmethod
    def _coerce_proxy_mode(cls, value: Any) -> ProxyMode:
        mode = ProxyMode.from_value(value)
        if mode is ProxyMode.DEFAULT:
            raise ValueError("default_proxy_mode must be one of no, interfaces, target_class")
        return mode

    @field_validator("active_profiles", mode="before")
    @classmethod
    def _split_profiles(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def resolved_search_paths(self, root: Path) -> list[Path]:
        """Return search paths anchored at ``root``."""

        return [path if path.is_absolute() else (root / path) for path in self.search_paths]


def load_settings(root: Path, *, env: Mapping[str, str] | None = None) -> ConfwireSettings:
    """Load settings for the project rooted at ``root``.

    Args:
        root: Directory that may contain ``pyproject.toml``.
        env: Environment used for ``$VAR`` expansion and profile overrides.

    Returns:
        ConfwireSettings: Settings from ``[tool.confwire]`` or defaults.

    Raises:
        SettingsError: If the file cannot be parsed or the section is invalid.
    """

    environ = os.environ if env is None else env
    payload = _expand_env(_read_section(root / PYPROJECT_FILENAME), environ)
    override = environ.get(ACTIVE_PROFILES_ENV)
    if override is not None:
        payload["active_profiles"] = override
    try:
        settings = ConfwireSettings.model_validate(payload)
    except ValidationError as exc:
        raise SettingsError(f"invalid [tool.confwire] settings in {root / PYPROJECT_FILENAME}: {exc}") from exc
    if not settings.search_paths:
        settings.search_paths = [root]
    return settings


def _read_section(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise SettingsError(f"cannot read {path}: {exc}") from exc
    tool_section = document.get(PYPROJECT_TOOL_KEY)
    if not isinstance(tool_section, Mapping):
        return {}
    section = tool_section.get(PYPROJECT_SECTION_KEY)
    if not isinstance(section, Mapping):
        return {}
    return {key.replace("-", "_"): value for key, value in section.items()}


def _expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    return {key: _expand_env_value(value, env) for key, value in data.items()}


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda match: env.get(match.group(1) or match.group(2), match.group(0)), value)
    if isinstance(value, list):
        return [_expand_env_value(item, env) for item in value]
    if isinstance(value, Mapping):
        return {key: _expand_env_value(item, env) for key, item in value.items()}
    return value


__all__ = ["ACTIVE_PROFILES_ENV", "ConfwireSettings", "load_settings"]
