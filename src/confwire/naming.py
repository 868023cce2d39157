# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Name generators assigning registry keys to component definitions."""

from __future__ import annotations

from typing import Final

from .annotations import DEFAULT_ANNOTATIONS, AnnotationRegistry
from .interfaces.registry import DefinitionRegistryProtocol
from .interfaces.strategies import NameGenerator
from .models import ComponentDefinition

NAMING_ANNOTATIONS: Final[tuple[str, ...]] = ("configuration", "component")


def decapitalize(simple_name: str) -> str:
    """Lower-case the leading run of capitals in ``simple_name``.

    The last capital of a run is kept when it starts the next word, so
    ``URLService`` becomes ``urlService`` while ``URL`` becomes ``url``.

    Args:
        simple_name: Unqualified class name.

    Returns:
        str: Conventional short name.
    """

    if not simple_name or not simple_name[0].isupper():
        return simple_name
    run = 0
    while run < len(simple_name) and simple_name[run].isupper():
        run += 1
    if run == 1 or run == len(simple_name):
        return simple_name[:run].lower() + simple_name[run:]
    if not simple_name[run].isalpha():
        return simple_name[:run].lower() + simple_name[run:]
    return simple_name[: run - 1].lower() + simple_name[run - 1 :]


def explicit_name(
    definition: ComponentDefinition,
    annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS,
) -> str | None:
    """Return the name declared on the definition's stereotype, if any.

    Args:
        definition: Definition whose metadata is inspected.
        annotations: Registry used to recognise stereotypes.

    Returns:
        str | None: Declared name, or ``None`` when none was given.
    """

    metadata = definition.metadata
    if metadata is None:
        return None
    for name, declared in metadata.annotations.items():
        if name not in NAMING_ANNOTATIONS and "component" not in annotations.meta_annotations(name):
            continue
        for attributes in declared:
            value = attributes.get("value")
            if isinstance(value, str) and value:
                return value
    return None


class ShortNameGenerator(NameGenerator):
    """Name definitions after their simple class name.

    Nested classes keep their enclosing class in the name (``outer.Inner``).
    """

    def __init__(self, annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS) -> None:
        self._annotations = annotations

    def generate(self, definition: ComponentDefinition, registry: DefinitionRegistryProtocol) -> str:
        declared = explicit_name(definition, self._annotations)
        if declared:
            return declared
        if definition.metadata is not None:
            qualname = definition.metadata.qualname
        elif definition.class_name:
            qualname = definition.class_name.rsplit(".", 1)[-1]
        else:
            raise ValueError("cannot generate a name for a definition without a class")
        head, _, rest = qualname.partition(".")
        return f"{decapitalize(head)}.{rest}" if rest else decapitalize(head)

    def __repr__(self) -> str:
        return "ShortNameGenerator()"


class QualifiedNameGenerator(NameGenerator):
    """Name definitions after their fully qualified class name."""

    def __init__(self, annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS) -> None:
        self._annotations = annotations

    def generate(self, definition: ComponentDefinition, registry: DefinitionRegistryProtocol) -> str:
        declared = explicit_name(definition, self._annotations)
        if declared:
            return declared
        if not definition.class_name:
            raise ValueError("cannot generate a name for a definition without a class")
        return definition.class_name

    def __repr__(self) -> str:
        return "QualifiedNameGenerator()"


NAME_GENERATORS: Final[dict[str, type[NameGenerator]]] = {
    "short": ShortNameGenerator,
    "qualified": QualifiedNameGenerator,
}

__all__ = [
    "NAME_GENERATORS",
    "QualifiedNameGenerator",
    "ShortNameGenerator",
    "decapitalize",
    "explicit_name",
]
