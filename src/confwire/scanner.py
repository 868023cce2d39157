# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Discover components below base packages and register their definitions."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from .conditions import ConditionEvaluator
from .definitions import build_definition, definitions_for_class, register_definition
from .errors import MetadataReadError
from .filters import ClassNameExcludeFilter, TypeFilterSet
from .interfaces.metadata import MetadataReader
from .interfaces.registry import DefinitionRegistryProtocol
from .interfaces.resources import ResourceLocator
from .interfaces.strategies import NameGenerator, ScopeResolver
from .metadata.locator import DEFAULT_RESOURCE_PATTERN
from .models import CandidateMetadata, ComponentDefinition, Problem, ProblemKind, ProblemSeverity, SourceKind
from .naming import ShortNameGenerator
from .scope import AnnotationScopeResolver

LOGGER = logging.getLogger(__name__)


class ComponentScanner:
    """Scan packages for component classes without importing them.

    Each surviving candidate is turned into a :class:`ComponentDefinition`,
    named, scoped, and registered. Scoped candidates requesting a proxy are
    registered as a proxy and target pair.
    """

    def __init__(
        self,
        registry: DefinitionRegistryProtocol,
        *,
        locator: ResourceLocator,
        reader: MetadataReader,
        filters: TypeFilterSet | None = None,
        scope_resolver: ScopeResolver | None = None,
        name_generator: NameGenerator | None = None,
        conditions: ConditionEvaluator | None = None,
        resource_pattern: str = DEFAULT_RESOURCE_PATTERN,
        lazy_init: bool = False,
        declaring_class: str | None = None,
    ) -> None:
        """Create a scanner writing into ``registry``.

        Args:
            registry: Registry receiving scanned definitions.
            locator: Locator enumerating resources below base packages.
            reader: Metadata reader for candidate classes.
            filters: Include and exclude filters; defaults to the component filter.
            scope_resolver: Scope resolver; defaults to annotation-based resolution.
            name_generator: Name generator; defaults to short class names.
            conditions: Profile evaluator; when omitted no candidate is skipped.
            resource_pattern: Glob pattern selecting resources below each package.
            lazy_init: Lazy-init flag for candidates without ``@lazy``.
            declaring_class: Class declaring the scan, which is always excluded.
        """

        self._registry = registry
        self._locator = locator
        self._reader = reader
        self._filters = filters or TypeFilterSet()
        if declaring_class is not None:
            self._filters.add_exclude(ClassNameExcludeFilter([declaring_class]))
        self._scope_resolver = scope_resolver or AnnotationScopeResolver()
        self._name_generator = name_generator or ShortNameGenerator()
        self._conditions = conditions
        self._resource_pattern = resource_pattern
        self._lazy_init = lazy_init
        self._problems: list[Problem] = []

    @property
    def problems(self) -> tuple[Problem, ...]:
        """Return soft problems collected by previous scans."""

        return tuple(self._problems)

    def scan(self, *base_packages: str) -> tuple[ComponentDefinition, ...]:
        """Scan ``base_packages`` and register the components found.

        Args:
            base_packages: Dotted package names.

        Returns:
            tuple[ComponentDefinition, ...]: Registered definitions in discovery
            order, including definitions that were already registered with
            identical content.

        Raises:
            DefinitionConflictError: If a candidate clashes with a definition
                registered from elsewhere.
        """

        found: list[ComponentDefinition] = []
        for candidate in self.find_candidates(*base_packages):
            definition = build_definition(
                candidate,
                SourceKind.SCANNED,
                scope=self._scope_resolver.resolve(candidate),
                lazy_default=self._lazy_init,
            )
            definition.name = self._name_generator.generate(definition, self._registry)
            existing = self._compatible_existing(definition)
            if existing is not None:
                found.append(existing)
                continue
            found.extend(register_definition(self._registry, definition))
        LOGGER.debug("scan of %s produced %d definitions", ", ".join(base_packages), len(found))
        return tuple(found)

    def find_candidates(self, *base_packages: str) -> Iterator[CandidateMetadata]:
        """Yield metadata for classes below ``base_packages`` that qualify as components."""

        seen: set[str] = set()
        for base_package in base_packages:
            for handle in self._locator.list_resources(base_package, self._resource_pattern):
                try:
                    classes = self._reader.read(handle)
                except MetadataReadError as exc:
                    self._record(handle.module, str(exc))
                    continue
                for candidate in classes:
                    if candidate.class_name in seen:
                        continue
                    seen.add(candidate.class_name)
                    if self._accepts(candidate):
                        yield candidate

    def _accepts(self, candidate: CandidateMetadata) -> bool:
        try:
            matched = self._filters.matches(candidate, self._reader)
        except MetadataReadError as exc:
            self._record(candidate.class_name, str(exc))
            return False
        if not matched:
            return False
        if candidate.is_abstract and not candidate.annotated_methods("lookup"):
            LOGGER.debug("ignoring abstract candidate %s", candidate.class_name)
            return False
        if self._conditions is not None and self._conditions.should_skip(candidate):
            return False
        registered = definitions_for_class(self._registry, candidate.class_name)
        if any(existing.source_kind is SourceKind.IMPORTED for existing in registered):
            LOGGER.debug("%s is already registered as an imported configuration class", candidate.class_name)
            return False
        return True

    def _compatible_existing(self, definition: ComponentDefinition) -> ComponentDefinition | None:
        # A class registered explicitly under the same name wins over the scanned copy.
        if not self._registry.contains(definition.name):
            return None
        existing = self._registry.get(definition.name)
        if existing.source_kind is SourceKind.SCANNED or existing.class_name != definition.class_name:
            return None
        LOGGER.debug("keeping existing definition '%s' for %s", existing.name, definition.class_name)
        return existing

    def _record(self, subject: str, message: str) -> None:
        LOGGER.warning("skipping %s: %s", subject, message)
        self._problems.append(
            Problem(
                kind=ProblemKind.UNREADABLE_METADATA,
                severity=ProblemSeverity.WARNING,
                subject=subject,
                message=message,
            ),
        )

    def __repr__(self) -> str:
        return f"ComponentScanner(filters={self._filters!r}, pattern={self._resource_pattern!r})"


__all__ = ["ComponentScanner"]
