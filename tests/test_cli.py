# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from confwire.cli import app


@pytest.fixture
def project(source_tree):
    source_tree.write(
        "cliapp/config.py",
        """
        from confwire import bean, component_scan, configuration

        @configuration
        @component_scan("cliapp.parts")
        class CliConfig:
            @bean
            def engine(self):
                return object()

            @bean
            def car(self):
                return (self.engine(),)
        """,
    )
    source_tree.write(
        "cliapp/parts/wheel.py",
        """
        from confwire import component, profile

        @component
        class Wheel:
            pass

        @component
        @profile("racing")
        class Spoiler:
            pass
        """,
    )
    (source_tree.root.parent / "pyproject.toml").write_text(
        '[tool.confwire]\nsearch-paths = ["src"]\n',
        encoding="utf-8",
    )
    return source_tree.root.parent


def test_scan_json(project) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["scan", "cliapp.parts", "--root", str(project), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [entry["name"] for entry in payload["definitions"]] == ["wheel"]
    assert payload["definitions"][0]["source_kind"] == "scanned"


def test_scan_with_profile_table(project) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["scan", "cliapp", "--root", str(project), "--profile", "racing"])

    assert result.exit_code == 0, result.output
    assert "Scanned components" in result.stdout


def test_process_json(project) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["process", "cliapp.config.CliConfig", "--root", str(project), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    names = {entry["name"] for entry in payload["definitions"]}
    assert names == {"cliConfig", "wheel", "engine", "car"}
    assert payload["rounds"] == 1
    assert payload["configuration_classes"] == ["cliapp.config.CliConfig"]
    assert payload["problems"] == []


def test_process_enhance(project) -> None:
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["process", "cliapp.config.CliConfig", "--root", str(project), "--enhance", "--json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    config = next(entry for entry in payload["definitions"] if entry["name"] == "cliConfig")
    assert config["bean_class"] == "cliapp.config.CliConfig$$Enhanced"


def test_process_unknown_class_fails(project) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["process", "cliapp.config.Missing", "--root", str(project)])

    assert result.exit_code == 1
    assert "Missing" in result.stdout


def test_invalid_settings_exit_code(tmp_path) -> None:
    (tmp_path / "pyproject.toml").write_text("[tool.confwire]\nbogus = 1\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, ["scan", "anything", "--root", str(tmp_path)])

    assert result.exit_code == 2


def test_help_lists_commands() -> None:
    result = CliRunner().invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "process" in result.stdout
    assert "scan" in result.stdout
