# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

from pathlib import Path

import pytest

from confwire import ConfwireSettings, ProxyMode, load_settings
from confwire.errors import SettingsError


def _write_pyproject(root: Path, body: str) -> None:
    (root / "pyproject.toml").write_text(body, encoding="utf-8")


def test_defaults_without_pyproject(tmp_path: Path) -> None:
    settings = load_settings(tmp_path, env={})

    assert settings.search_paths == [tmp_path]
    assert settings.resource_pattern == "**/*.py"
    assert settings.default_proxy_mode is ProxyMode.NO
    assert settings.name_generator == "short"
    assert not settings.strict


def test_tool_section_is_loaded_with_env_expansion(tmp_path: Path) -> None:
    _write_pyproject(
        tmp_path,
        """
[tool.confwire]
search-paths = ["src", "$EXTRA_ROOT"]
default-proxy-mode = "target_class"
active-profiles = "dev,cloud"
name-generator = "qualified"
strict = true
""",
    )

    settings = load_settings(tmp_path, env={"EXTRA_ROOT": "/opt/plugins"})

    assert settings.search_paths == [Path("src"), Path("/opt/plugins")]
    assert settings.resolved_search_paths(tmp_path) == [tmp_path / "src", Path("/opt/plugins")]
    assert settings.default_proxy_mode is ProxyMode.TARGET_CLASS
    assert settings.active_profiles == ["dev", "cloud"]
    assert settings.name_generator == "qualified"
    assert settings.strict


def test_profile_environment_variable_overrides_file(tmp_path: Path) -> None:
    _write_pyproject(tmp_path, '[tool.confwire]\nactive-profiles = ["dev"]\n')

    settings = load_settings(tmp_path, env={"CONFWIRE_ACTIVE_PROFILES": "prod, eu"})

    assert settings.active_profiles == ["prod", "eu"]


@pytest.mark.parametrize(
    "body",
    [
        "[tool.confwire]\nunknown-key = 1\n",
        '[tool.confwire]\ndefault-proxy-mode = "default"\n',
        '[tool.confwire]\nname-generator = "random"\n',
        "[tool.confwire\n",
    ],
)
def test_invalid_settings_raise(tmp_path: Path, body: str) -> None:
    _write_pyproject(tmp_path, body)

    with pytest.raises(SettingsError):
        load_settings(tmp_path, env={})


def test_assignment_is_validated() -> None:
    settings = ConfwireSettings()

    with pytest.raises(ValueError):
        settings.default_proxy_mode = "sometimes"
