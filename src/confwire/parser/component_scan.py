# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Turn ``@component_scan`` declarations into configured scanner runs."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any, Final

from ..annotations import DEFAULT_ANNOTATIONS, AnnotationRegistry
from ..conditions import ConditionEvaluator
from ..environment import Environment
from ..errors import ClassResolutionError
from ..filters import build_filter_set
from ..interfaces.metadata import MetadataReader
from ..interfaces.registry import DefinitionRegistryProtocol
from ..interfaces.resources import ResourceLocator
from ..interfaces.strategies import NameGenerator
from ..metadata.classes import ClassResolver
from ..metadata.locator import DEFAULT_RESOURCE_PATTERN
from ..models import CandidateMetadata, ComponentDefinition, Problem, ProxyMode
from ..naming import ShortNameGenerator
from ..scanner import ComponentScanner
from ..scope import AnnotationScopeResolver

LOGGER = logging.getLogger(__name__)

PACKAGE_DELIMITERS: Final[re.Pattern[str]] = re.compile(r"[,;\s]+")


class ComponentScanDirectiveParser:
    """Run one component scan per ``@component_scan`` declaration."""

    def __init__(
        self,
        registry: DefinitionRegistryProtocol,
        *,
        locator: ResourceLocator,
        reader: MetadataReader,
        resolver: ClassResolver,
        environment: Environment,
        conditions: ConditionEvaluator,
        prepare: Callable[[object], None],
        default_proxy_mode: ProxyMode = ProxyMode.NO,
        use_default_filters: bool = True,
        resource_pattern: str = DEFAULT_RESOURCE_PATTERN,
        name_generator: NameGenerator | None = None,
        annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS,
    ) -> None:
        self._registry = registry
        self._locator = locator
        self._reader = reader
        self._resolver = resolver
        self._environment = environment
        self._conditions = conditions
        self._prepare = prepare
        self._default_proxy_mode = default_proxy_mode
        self._use_default_filters = use_default_filters
        self._resource_pattern = resource_pattern
        self._name_generator = name_generator or ShortNameGenerator()
        self._annotations = annotations
        self._problems: list[Problem] = []

    @property
    def problems(self) -> tuple[Problem, ...]:
        return tuple(self._problems)

    def parse(self, attributes: Mapping[str, Any], declaring: CandidateMetadata) -> tuple[ComponentDefinition, ...]:
        """Scan the packages named by one ``@component_scan`` declaration.

        Args:
            attributes: Bound attributes of the declaration.
            declaring: Metadata of the class carrying the declaration.

        Returns:
            tuple[ComponentDefinition, ...]: Definitions registered by the scan.

        Raises:
            FilterConfigurationError: If a filter declaration is malformed.
            ClassResolutionError: If a referenced class cannot be resolved.
        """

        scoped_proxy = attributes.get("scoped_proxy", ProxyMode.DEFAULT)
        scope_resolver = AnnotationScopeResolver(
            self._default_proxy_mode if scoped_proxy is ProxyMode.DEFAULT else scoped_proxy,
        )
        filters = build_filter_set(
            attributes.get("include_filters", ()),
            attributes.get("exclude_filters", ()),
            use_default_filters=self._use_default_filters and attributes.get("use_default_filters", True),
            resolver=self._resolver,
            prepare=self._prepare,
            annotations=self._annotations,
        )
        scanner = ComponentScanner(
            self._registry,
            locator=self._locator,
            reader=self._reader,
            filters=filters,
            scope_resolver=scope_resolver,
            name_generator=self._scan_name_generator(attributes.get("name_generator")),
            conditions=self._conditions,
            resource_pattern=attributes.get("resource_pattern") or self._resource_pattern,
            lazy_init=attributes.get("lazy_init", False),
            declaring_class=declaring.class_name,
        )
        packages = self._base_packages(attributes, declaring)
        LOGGER.debug("%s scans %s", declaring.class_name, ", ".join(packages))
        definitions = scanner.scan(*packages)
        self._problems.extend(scanner.problems)
        return definitions

    def _base_packages(self, attributes: Mapping[str, Any], declaring: CandidateMetadata) -> list[str]:
        packages: list[str] = []
        for raw in attributes.get("base_packages", ()):
            resolved = self._environment.resolve_placeholders(raw)
            packages.extend(token for token in PACKAGE_DELIMITERS.split(resolved) if token)
        for class_name in attributes.get("base_package_classes", ()):
            packages.append(self._reader.read_class(class_name).package_name)
        if not packages:
            packages.append(declaring.package_name)
        return list(dict.fromkeys(packages))

    def _scan_name_generator(self, class_name: str | None) -> NameGenerator:
        if class_name is None:
            return self._name_generator
        generator = self._resolver.resolve(class_name)()
        if not isinstance(generator, NameGenerator):
            raise ClassResolutionError(class_name, "does not implement NameGenerator.generate")
        self._prepare(generator)
        return generator


__all__ = ["ComponentScanDirectiveParser"]
