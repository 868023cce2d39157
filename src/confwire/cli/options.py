# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared Typer option declarations."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root holding pyproject.toml and the packages."),
]
PATTERN_OPTION = Annotated[
    str | None,
    typer.Option("--pattern", "-p", help="Resource glob below each package (default from settings)."),
]
JSON_OPTION = Annotated[
    bool,
    typer.Option("--json", help="Emit JSON instead of tables."),
]
ENHANCE_OPTION = Annotated[
    bool,
    typer.Option("--enhance", help="Import full configuration classes and enhance them."),
]
PROFILE_OPTION = Annotated[
    list[str] | None,
    typer.Option("--profile", help="Active profile; repeat for several."),
]
VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log processing decisions to stderr."),
]
PACKAGES_ARGUMENT = Annotated[
    list[str],
    typer.Argument(help="Dotted package names to scan."),
]
CLASSES_ARGUMENT = Annotated[
    list[str],
    typer.Argument(help="Qualified names of the root configuration classes."),
]

__all__ = [
    "CLASSES_ARGUMENT",
    "ENHANCE_OPTION",
    "JSON_OPTION",
    "PACKAGES_ARGUMENT",
    "PATTERN_OPTION",
    "PROFILE_OPTION",
    "ROOT_OPTION",
    "VERBOSE_OPTION",
]
