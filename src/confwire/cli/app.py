# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application for scanning packages and processing configuration classes."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from pathlib import Path

import typer
from rich.console import Console

from ..conditions import ConditionEvaluator
from ..enhancer import ConfigurationEnhancer
from ..environment import Environment
from ..errors import ConfwireError, ProblemsDetectedError
from ..filters import TypeFilterSet
from ..metadata import AstMetadataReader, FilesystemResourceLocator
from ..naming import NAME_GENERATORS
from ..processor import ConfigurationProcessor
from ..registration import AnnotatedDefinitionReader
from ..registry import DefinitionRegistry
from ..scanner import ComponentScanner
from ..scope import AnnotationScopeResolver
from ..settings import ConfwireSettings, load_settings
from .logging_setup import configure_logging
from .options import (
    CLASSES_ARGUMENT,
    ENHANCE_OPTION,
    JSON_OPTION,
    PACKAGES_ARGUMENT,
    PATTERN_OPTION,
    PROFILE_OPTION,
    ROOT_OPTION,
    VERBOSE_OPTION,
)
from .rendering import build_definitions_table, build_problems_table, render_json
from .typer_ext import create_typer

app = create_typer(help="Resolve annotated configuration classes into component definitions.", no_args_is_help=True)

CONFIGURATION_ERROR_EXIT = 2
PROCESSING_ERROR_EXIT = 1


@app.command("scan", help="Scan packages and list the components found.")
def scan_command(
    packages: PACKAGES_ARGUMENT,
    root: ROOT_OPTION = Path("."),
    pattern: PATTERN_OPTION = None,
    profile: PROFILE_OPTION = None,
    json_output: JSON_OPTION = False,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Scan ``packages`` below ``root`` and print the registered definitions."""

    console = Console()
    configure_logging(verbose=verbose)
    settings = _settings(root, profile, console)
    locator = FilesystemResourceLocator(settings.search_paths)
    registry = DefinitionRegistry()
    scanner = ComponentScanner(
        registry,
        locator=locator,
        reader=AstMetadataReader(locator),
        filters=TypeFilterSet(use_default_filters=settings.use_default_filters),
        scope_resolver=AnnotationScopeResolver(settings.default_proxy_mode),
        name_generator=NAME_GENERATORS[settings.name_generator](),
        conditions=ConditionEvaluator(Environment(active_profiles=settings.active_profiles)),
        resource_pattern=pattern or settings.resource_pattern,
    )
    try:
        definitions = scanner.scan(*packages)
    except ConfwireError as exc:
        console.print(f"[red]error:[/red] {exc}")
        raise typer.Exit(code=PROCESSING_ERROR_EXIT) from exc
    if json_output:
        typer.echo(render_json(definitions))
        return
    console.print(build_definitions_table(definitions, title="Scanned components"))
    if scanner.problems:
        console.print(build_problems_table(scanner.problems))


@app.command("process", help="Register root configuration classes and resolve them.")
def process_command(
    classes: CLASSES_ARGUMENT,
    root: ROOT_OPTION = Path("."),
    profile: PROFILE_OPTION = None,
    enhance: ENHANCE_OPTION = False,
    json_output: JSON_OPTION = False,
    verbose: VERBOSE_OPTION = False,
) -> None:
    """Process ``classes`` as explicit roots and print the resulting registry."""

    console = Console()
    configure_logging(verbose=verbose)
    settings = _settings(root, profile, console)
    processor = ConfigurationProcessor(settings)
    registry = DefinitionRegistry()
    try:
        AnnotatedDefinitionReader(registry, reader=processor.reader).register(*classes)
        report = processor.process(registry)
        if enhance:
            _extend_sys_path(settings.search_paths)
            ConfigurationEnhancer(processor.resolver).enhance(registry)
    except ProblemsDetectedError as exc:
        console.print(build_problems_table(exc.problems))
        raise typer.Exit(code=PROCESSING_ERROR_EXIT) from exc
    except ConfwireError as exc:
        console.print(f"[red]error:[/red] {exc}")
        raise typer.Exit(code=PROCESSING_ERROR_EXIT) from exc
    if json_output:
        typer.echo(render_json(registry, report))
        return
    console.print(build_definitions_table(registry, title=f"Registry after {report.rounds} round(s)"))
    if report.problems:
        console.print(build_problems_table(report.problems))


def _settings(root: Path, profiles: list[str] | None, console: Console) -> ConfwireSettings:
    root = root.resolve()
    try:
        settings = load_settings(root)
    except ConfwireError as exc:
        console.print(f"[red]error:[/red] {exc}")
        raise typer.Exit(code=CONFIGURATION_ERROR_EXIT) from exc
    settings.search_paths = settings.resolved_search_paths(root)
    if profiles:
        settings.active_profiles = list(profiles)
    return settings


def _extend_sys_path(paths: Iterable[Path]) -> None:
    for path in reversed([str(path) for path in paths]):
        if path not in sys.path:
            sys.path.insert(0, path)


__all__ = ["app"]
