# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Drive configuration parsing to a fixpoint over a definition registry."""

from __future__ import annotations

import logging
import weakref
from collections.abc import Iterable
from dataclasses import dataclass
from functools import partial

from .annotations import DEFAULT_ANNOTATIONS, AnnotationRegistry
from .conditions import ConditionEvaluator
from .definitions import sort_by_order
from .environment import Environment
from .errors import ClassResolutionError, MetadataReadError, ProblemsDetectedError, RegistryStateError
from .hooks import invoke_aware_methods
from .interfaces.metadata import MetadataReader
from .interfaces.registry import DefinitionRegistryProtocol
from .interfaces.resources import ResourceLocator
from .loader import ConfigurationDefinitionLoader
from .metadata import AstMetadataReader, ClassResolver, FilesystemResourceLocator
from .models import ComponentDefinition, Problem, ProblemKind, ProblemSeverity, SourceKind
from .naming import NAME_GENERATORS, QualifiedNameGenerator
from .parser import ComponentScanDirectiveParser, ConfigurationClassParser, is_configuration_candidate
from .registry import IMPORT_REGISTRY_NAME
from .scope import AnnotationScopeResolver
from .settings import ConfwireSettings

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProcessingReport:
    """Summary of one :meth:`ConfigurationProcessor.process` run.

    Attributes:
        rounds: Number of parse and materialise rounds executed.
        configuration_classes: Materialised configuration classes in order.
        problems: Soft problems collected during the run.
    """

    rounds: int = 0
    configuration_classes: tuple[str, ...] = ()
    problems: tuple[Problem, ...] = ()


class ConfigurationProcessor:
    """Process the configuration classes registered in a registry until nothing new appears.

    A processor accepts each registry instance once. Every round parses the
    current candidates, validates the result, registers the definitions
    contributed by newly parsed classes, and selects configuration classes
    that appeared in the registry during the round as the next candidates.
    """

    def __init__(
        self,
        settings: ConfwireSettings | None = None,
        *,
        locator: ResourceLocator | None = None,
        reader: MetadataReader | None = None,
        resolver: ClassResolver | None = None,
        environment: Environment | None = None,
        annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS,
    ) -> None:
        """Create a processor.

        Args:
            settings: Settings; defaults to :class:`ConfwireSettings` defaults.
            locator: Resource locator; defaults to the settings' search paths.
            reader: Metadata reader; defaults to an AST reader over ``locator``.
            resolver: Class resolver for user hooks.
            environment: Environment; defaults to one with the settings' profiles.
            annotations: Annotation registry recognised by the reader and filters.
        """

        self.settings = settings or ConfwireSettings()
        self.locator = locator or FilesystemResourceLocator(self.settings.search_paths or None)
        self.reader = reader or AstMetadataReader(self.locator, annotations=annotations)
        self.resolver = resolver or ClassResolver()
        self.environment = environment or Environment(active_profiles=self.settings.active_profiles or None)
        self._annotations = annotations
        self._processed: weakref.WeakSet[DefinitionRegistryProtocol] = weakref.WeakSet()

    def process(self, registry: DefinitionRegistryProtocol) -> ProcessingReport:
        """Resolve every configuration class reachable from ``registry``.

        Args:
            registry: Registry holding the root configuration classes.

        Returns:
            ProcessingReport: Rounds, materialised classes and soft problems.

        Raises:
            RegistryStateError: If ``registry`` was processed before.
            ProblemsDetectedError: If validation reports fatal problems.
            ClassResolutionError: If a referenced class cannot be resolved.
            DefinitionConflictError: If two sources register different content
                under one name.
        """

        if registry in self._processed:
            raise RegistryStateError(f"{registry!r} has already been processed")
        self._processed.add(registry)
        problems: list[Problem] = []
        candidates = sort_by_order(self._candidates(registry, registry.names(), problems))
        if not candidates:
            LOGGER.debug("no configuration classes found in %r", registry)
            self._check(problems)
            return ProcessingReport(problems=tuple(problems))
        parser, loader = self._create_pipeline(registry)
        materialized: dict[str, None] = {}
        known = set(registry.names())
        rounds = 0
        while candidates:
            rounds += 1
            parser.parse(candidates)
            self._check(parser.validate())
            fresh = [config for config in parser.configuration_classes if config.class_name not in materialized]
            loader.load(fresh)
            materialized.update(dict.fromkeys(config.class_name for config in fresh))
            LOGGER.info("round %d materialised %d configuration classes", rounds, len(fresh))
            current = registry.names()
            added = [name for name in current if name not in known]
            known.update(current)
            candidates = [
                definition
                for definition in self._candidates(registry, added, problems)
                if definition.class_name not in materialized
            ]
        registry.register_singleton(IMPORT_REGISTRY_NAME, parser.import_registry)
        self.reader.clear_cache()
        problems.extend(problem for problem in parser.validate() if problem not in problems)
        self._check(problems)
        return ProcessingReport(rounds=rounds, configuration_classes=tuple(materialized), problems=tuple(problems))

    def _candidates(
        self,
        registry: DefinitionRegistryProtocol,
        names: Iterable[str],
        problems: list[Problem],
    ) -> list[ComponentDefinition]:
        found: list[ComponentDefinition] = []
        for name in names:
            definition = registry.get(name)
            if not self._is_candidate(definition, problems):
                continue
            found.append(definition)
        return found

    def _is_candidate(self, definition: ComponentDefinition, problems: list[Problem]) -> bool:
        if definition.configuration_kind is not None or definition.proxy_target is not None:
            return False
        if definition.class_name is None or definition.source_kind is SourceKind.BEAN_METHOD:
            return False
        if definition.metadata is None:
            try:
                definition.metadata = self.reader.read_class(definition.class_name)
            except ClassResolutionError:
                LOGGER.debug("no readable source for %s; not a configuration candidate", definition.class_name)
                return False
            except MetadataReadError as exc:
                problems.append(
                    Problem(
                        kind=ProblemKind.UNREADABLE_METADATA,
                        severity=ProblemSeverity.WARNING,
                        subject=definition.name,
                        message=str(exc),
                    ),
                )
                return False
        return is_configuration_candidate(definition.metadata)

    def _check(self, problems: list[Problem]) -> None:
        fatal = [problem for problem in problems if problem.is_fatal or self.settings.strict]
        if fatal:
            raise ProblemsDetectedError(fatal)

    def _create_pipeline(
        self,
        registry: DefinitionRegistryProtocol,
    ) -> tuple[ConfigurationClassParser, ConfigurationDefinitionLoader]:
        prepare = partial(
            invoke_aware_methods,
            environment=self.environment,
            registry=registry,
            locator=self.locator,
        )
        conditions = ConditionEvaluator(self.environment)
        scan_parser = ComponentScanDirectiveParser(
            registry,
            locator=self.locator,
            reader=self.reader,
            resolver=self.resolver,
            environment=self.environment,
            conditions=conditions,
            prepare=prepare,
            default_proxy_mode=self.settings.default_proxy_mode,
            use_default_filters=self.settings.use_default_filters,
            resource_pattern=self.settings.resource_pattern,
            name_generator=NAME_GENERATORS[self.settings.name_generator](self._annotations),
            annotations=self._annotations,
        )
        parser = ConfigurationClassParser(
            registry,
            reader=self.reader,
            resolver=self.resolver,
            environment=self.environment,
            conditions=conditions,
            scan_parser=scan_parser,
            prepare=prepare,
        )
        loader = ConfigurationDefinitionLoader(
            registry,
            import_registry=parser.import_registry,
            conditions=conditions,
            scope_resolver=AnnotationScopeResolver(self.settings.default_proxy_mode),
            imported_name_generator=QualifiedNameGenerator(self._annotations),
        )
        return parser, loader

    def __repr__(self) -> str:
        return f"ConfigurationProcessor(settings={self.settings!r})"


__all__ = ["ConfigurationProcessor", "ProcessingReport"]
