# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Working representation of configuration classes while they are parsed."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..annotations import CONFIGURATION_DIRECTIVES
from ..errors import CircularImportProblem
from ..models import CandidateMetadata, ConfigurationKind, MethodMetadata

if TYPE_CHECKING:
    from ..hooks import ImportRegistrar


class ParseState(Enum):
    """Lifecycle of one configuration class inside the parser."""

    UNVISITED = "unvisited"
    VISITING = "visiting"
    PARSED = "parsed"
    REJECTED = "rejected"


def configuration_kind(metadata: CandidateMetadata) -> ConfigurationKind | None:
    """Return whether ``metadata`` describes a full, lite, or no configuration class.

    ``@configuration`` classes proxying bean methods are full. Classes declaring
    ``@configuration(proxy_bean_methods=False)``, a configuration directive, or a
    ``@bean`` method are lite.
    """

    if metadata.is_abstract and not metadata.has_bean_methods:
        return None
    attributes = metadata.attributes("configuration")
    if attributes is not None and attributes.get("proxy_bean_methods", True):
        return ConfigurationKind.FULL
    if attributes is not None or any(name in metadata.annotations for name in CONFIGURATION_DIRECTIVES):
        return ConfigurationKind.LITE
    return ConfigurationKind.LITE if metadata.has_bean_methods else None


def is_configuration_candidate(metadata: CandidateMetadata) -> bool:
    """Return whether ``metadata`` declares further components."""

    return configuration_kind(metadata) is not None


@dataclass(frozen=True, slots=True)
class BeanMethod:
    """Bean-producing method collected from a configuration class or its bases."""

    metadata: MethodMetadata
    configuration_class: str

    @property
    def names(self) -> tuple[str, ...]:
        attributes = self.metadata.attributes("bean") or {}
        return tuple(attributes.get("value", ()))

    @property
    def bean_name(self) -> str:
        """Return the declared bean name, defaulting to the method name."""

        names = self.names
        return names[0] if names else self.metadata.name

    @property
    def aliases(self) -> tuple[str, ...]:
        return self.names[1:]

    @property
    def autowire_candidate(self) -> bool:
        attributes = self.metadata.attributes("bean") or {}
        return bool(attributes.get("autowire_candidate", True))

    @property
    def is_static(self) -> bool:
        return self.metadata.is_static or self.metadata.is_classmethod

    def describe(self) -> str:
        return f"{self.configuration_class}.{self.metadata.name}"


@dataclass(slots=True, eq=False)
class ConfigurationClass:
    """One configuration source and everything collected from it.

    Attributes:
        metadata: Metadata of the configuration class.
        bean_name: Registry name of the class, once known.
        imported_by: Metadata of the classes that imported this one.
        bean_methods: Bean methods found on the class and its superclasses.
        registrars: Deferred registrars paired with the importing metadata.
    """

    metadata: CandidateMetadata
    bean_name: str | None = None
    imported_by: list[CandidateMetadata] = field(default_factory=list)
    bean_methods: list[BeanMethod] = field(default_factory=list)
    registrars: list[tuple[ImportRegistrar, CandidateMetadata]] = field(default_factory=list)

    @property
    def class_name(self) -> str:
        return self.metadata.class_name

    @property
    def is_imported(self) -> bool:
        """Return whether the class was pulled in by an import or as a member class."""

        return bool(self.imported_by)

    @property
    def kind(self) -> ConfigurationKind:
        return configuration_kind(self.metadata) or ConfigurationKind.LITE

    def add_bean_method(self, method: MethodMetadata) -> None:
        """Collect ``method`` unless a subclass already declared the same method."""

        if any(existing.metadata.name == method.name for existing in self.bean_methods):
            return
        self.bean_methods.append(BeanMethod(method, self.class_name))

    def merge_imported_by(self, other: ConfigurationClass) -> None:
        """Record the importers of ``other`` on this class."""

        for importer in other.imported_by:
            if all(existing.class_name != importer.class_name for existing in self.imported_by):
                self.imported_by.append(importer)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ConfigurationClass) and other.class_name == self.class_name

    def __hash__(self) -> int:
        return hash(self.class_name)

    def __repr__(self) -> str:
        return f"ConfigurationClass({self.class_name!r}, bean_name={self.bean_name!r})"


class ImportStack:
    """Ordered set of configuration classes whose imports are being processed."""

    def __init__(self) -> None:
        self._entries: dict[str, CandidateMetadata] = {}

    def push(self, metadata: CandidateMetadata) -> None:
        """Push ``metadata``.

        Raises:
            CircularImportProblem: If the class is already on the stack.
        """

        if metadata.class_name in self._entries:
            raise CircularImportProblem([*self._entries, metadata.class_name])
        self._entries[metadata.class_name] = metadata

    def pop(self) -> CandidateMetadata:
        """Pop and return the most recently pushed class."""

        name = next(reversed(self._entries))
        return self._entries.pop(name)

    def chain(self, class_name: str) -> tuple[str, ...]:
        """Return the stack followed by ``class_name``."""

        return (*self._entries, class_name)

    def __contains__(self, class_name: object) -> bool:
        return class_name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ImportStack({' -> '.join(self._entries)})"


__all__ = [
    "BeanMethod",
    "ConfigurationClass",
    "ImportStack",
    "ParseState",
    "configuration_kind",
    "is_configuration_candidate",
]
