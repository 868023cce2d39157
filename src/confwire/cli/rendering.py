# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Rendering helpers for the confwire CLI."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from typing import Any

from rich import box
from rich.table import Table

from ..models import ComponentDefinition, Problem
from ..processor import ProcessingReport


def build_definitions_table(definitions: Iterable[ComponentDefinition], *, title: str = "Definitions") -> Table:
    """Return a rich table listing ``definitions``.

    Args:
        definitions: Definitions to list.
        title: Table title.

    Returns:
        Table: Rich table ready for rendering.
    """

    table = Table(title=title, box=box.SIMPLE, expand=True)
    table.add_column("Name", style="bold")
    table.add_column("Source")
    table.add_column("Class", overflow="fold")
    table.add_column("Scope")
    table.add_column("Proxy")
    table.add_column("Factory", overflow="fold")
    table.add_column("Configuration")
    for definition in definitions:
        factory = definition.factory
        table.add_row(
            definition.name,
            definition.source_kind.value,
            definition.class_name or "-",
            definition.scope,
            definition.proxy_target or definition.proxy_mode.value,
            f"{factory.bean_name or factory.class_name}.{factory.method_name}" if factory else "-",
            definition.configuration_kind.value if definition.configuration_kind else "-",
        )
    return table


def build_problems_table(problems: Sequence[Problem]) -> Table:
    """Return a rich table listing soft ``problems``."""

    table = Table(title="Problems", box=box.SIMPLE, expand=True)
    table.add_column("Kind", style="bold yellow")
    table.add_column("Subject", overflow="fold")
    table.add_column("Message", overflow="fold")
    for problem in problems:
        table.add_row(problem.kind.value, problem.subject, problem.message)
    return table


def definition_payload(definition: ComponentDefinition) -> dict[str, Any]:
    """Return a JSON-serialisable view of ``definition``."""

    payload = definition.model_dump(mode="json", exclude={"metadata", "bean_class"})
    if definition.bean_class is not None:
        payload["bean_class"] = f"{definition.bean_class.__module__}.{definition.bean_class.__qualname__}"
    return payload


def render_json(definitions: Iterable[ComponentDefinition], report: ProcessingReport | None = None) -> str:
    """Return the JSON document printed by ``--json``."""

    document: dict[str, Any] = {"definitions": [definition_payload(definition) for definition in definitions]}
    if report is not None:
        document["rounds"] = report.rounds
        document["configuration_classes"] = list(report.configuration_classes)
        document["problems"] = [problem.model_dump(mode="json") for problem in report.problems]
    return json.dumps(document, indent=2, sort_keys=True, default=str)


__all__ = ["build_definitions_table", "build_problems_table", "definition_payload", "render_json"]
