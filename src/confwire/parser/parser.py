# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Parse configuration classes into :class:`ConfigurationClass` records."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from ..annotations import class_name_of
from ..conditions import ConditionEvaluator
from ..environment import Environment, load_property_source
from ..errors import CircularImportProblem, ClassResolutionError, MetadataReadError, PropertySourceError
from ..filters import AssignableTypeFilter
from ..hooks import REGISTRAR_CLASS_NAMES, SELECTOR_CLASS_NAMES, ImportRegistrar, ImportSelector
from ..interfaces.metadata import MetadataReader
from ..interfaces.registry import DefinitionRegistryProtocol
from ..metadata.classes import ClassResolver
from ..models import (
    CandidateMetadata,
    ComponentDefinition,
    ConfigurationKind,
    Problem,
    ProblemKind,
    ProblemSeverity,
    SourceKind,
)
from ..registry import ImportRegistry
from .component_scan import ComponentScanDirectiveParser
from .model import ConfigurationClass, ImportStack, ParseState, is_configuration_candidate

LOGGER = logging.getLogger(__name__)

FRAMEWORK_MODULE_PREFIXES: Final[tuple[str, ...]] = (
    "builtins.",
    "typing.",
    "typing_extensions.",
    "abc.",
    "collections.",
    "enum.",
    "confwire.",
)


def is_framework_class(class_name: str) -> bool:
    """Return whether ``class_name`` belongs to the runtime or to confwire itself."""

    return class_name.startswith(FRAMEWORK_MODULE_PREFIXES)


class ConfigurationClassParser:
    """Visit configuration classes, following members, scans, imports, and superclasses.

    The parser keeps its state across fixpoint rounds: a class parsed in one
    round is not parsed again in a later one, and problems accumulate until
    :meth:`validate` reports them.
    """

    def __init__(
        self,
        registry: DefinitionRegistryProtocol,
        *,
        reader: MetadataReader,
        resolver: ClassResolver,
        environment: Environment,
        conditions: ConditionEvaluator,
        scan_parser: ComponentScanDirectiveParser,
        prepare: Callable[[object], None],
    ) -> None:
        """Create a parser.

        Args:
            registry: Registry being processed.
            reader: Metadata reader for imported, member and super classes.
            resolver: Class resolver used to instantiate selectors and registrars.
            environment: Environment receiving declared property sources.
            conditions: Evaluator for ``@profile`` declarations.
            scan_parser: Handler for ``@component_scan`` declarations.
            prepare: Callback injecting collaborators into user hooks.
        """

        self._registry = registry
        self._reader = reader
        self._resolver = resolver
        self._environment = environment
        self._conditions = conditions
        self._scan_parser = scan_parser
        self._prepare = prepare
        self._import_stack = ImportStack()
        self._import_registry = ImportRegistry()
        self._classes: dict[str, ConfigurationClass] = {}
        self._states: dict[str, ParseState] = {}
        self._rejections: dict[str, ProblemKind] = {}
        self._known_superclasses: dict[str, str] = {}
        self._problems: list[Problem] = []

    @property
    def configuration_classes(self) -> tuple[ConfigurationClass, ...]:
        """Return parsed configuration classes in completion order."""

        return tuple(self._classes.values())

    @property
    def import_registry(self) -> ImportRegistry:
        return self._import_registry

    def state_of(self, class_name: str) -> ParseState:
        """Return the parse state of ``class_name``."""

        return self._states.get(class_name, ParseState.UNVISITED)

    def parse(self, candidates: Iterable[ComponentDefinition]) -> None:
        """Parse every configuration class named by ``candidates``.

        Cycles and unreadable metadata reject the affected candidate and are
        recorded as problems; other candidates are still parsed.

        Args:
            candidates: Registry definitions of configuration classes.

        Raises:
            ClassResolutionError: If a referenced class cannot be located.
        """

        for definition in candidates:
            if definition.class_name and self.state_of(definition.class_name) is ParseState.REJECTED:
                continue
            try:
                metadata = definition.metadata or self._reader.read_class(definition.class_name or "")
                self._process(ConfigurationClass(metadata, bean_name=definition.name))
            except CircularImportProblem as exc:
                self._reject(ProblemKind.CIRCULAR_IMPORT, exc.chain[-1], str(exc))
            except MetadataReadError as exc:
                self._reject(ProblemKind.UNREADABLE_METADATA, definition.class_name or definition.name, str(exc))
        for problem in self._scan_parser.problems:
            if problem not in self._problems:
                self._problems.append(problem)

    def validate(self) -> list[Problem]:
        """Return every problem found so far, including structural ones.

        Structural problems are errors: full configuration classes and their
        instance bean methods must not be final, and one bean name must not be
        declared by bean methods of different configuration classes.
        """

        problems = list(self._problems)
        declared: dict[str, str] = {}
        for config_class in self._classes.values():
            if config_class.kind is ConfigurationKind.FULL:
                problems.extend(self._final_problems(config_class))
            for method in config_class.bean_methods:
                owner = declared.setdefault(method.bean_name, config_class.class_name)
                if owner != config_class.class_name:
                    problems.append(
                        Problem(
                            kind=ProblemKind.BEAN_NAME_COLLISION,
                            severity=ProblemSeverity.ERROR,
                            subject=method.describe(),
                            message=f"bean name '{method.bean_name}' is already declared by {owner}",
                        ),
                    )
        return problems

    def _final_problems(self, config_class: ConfigurationClass) -> list[Problem]:
        problems = []
        if config_class.metadata.is_final:
            problems.append(
                Problem(
                    kind=ProblemKind.FINAL_CONFIGURATION_CLASS,
                    severity=ProblemSeverity.ERROR,
                    subject=config_class.class_name,
                    message="configuration classes proxying bean methods must not be final",
                ),
            )
        for method in config_class.bean_methods:
            if method.metadata.is_final and not method.is_static:
                problems.append(
                    Problem(
                        kind=ProblemKind.FINAL_BEAN_METHOD,
                        severity=ProblemSeverity.ERROR,
                        subject=method.describe(),
                        message="bean methods of proxying configuration classes must be overridable",
                    ),
                )
        return problems

    def _process(self, config_class: ConfigurationClass) -> None:
        name = config_class.class_name
        if self._conditions.should_skip(config_class.metadata):
            return
        state = self.state_of(name)
        if state is ParseState.REJECTED:
            self._raise_rejected(name)
        existing = self._classes.get(name)
        if existing is not None:
            if config_class.is_imported:
                if existing.is_imported:
                    existing.merge_imported_by(config_class)
                return
            if not existing.is_imported:
                return
            LOGGER.debug("%s was imported before; parsing it as a declared class instead", name)
            del self._classes[name]
            self._known_superclasses = {
                base: owner for base, owner in self._known_superclasses.items() if owner != name
            }
        self._states[name] = ParseState.VISITING
        pending: deque[CandidateMetadata] = deque([config_class.metadata])
        while pending:
            pending.extend(self._process_source(config_class, pending.popleft()))
        self._classes[name] = config_class
        self._states[name] = ParseState.PARSED
        LOGGER.debug("parsed %s with %d bean methods", name, len(config_class.bean_methods))

    def _process_source(self, config_class: ConfigurationClass, source: CandidateMetadata) -> list[CandidateMetadata]:
        self._process_member_classes(config_class, source)
        for attributes in source.all_attributes("property_source"):
            self._process_property_source(attributes, source)
        for attributes in source.all_attributes("component_scan"):
            self._scan_parser.parse(attributes, source)
        imports = [name for attributes in source.all_attributes("import_config") for name in attributes["value"]]
        self._process_imports(config_class, imports)
        for method in source.annotated_methods("bean"):
            config_class.add_bean_method(method)
        return self._superclasses(config_class, source)

    def _process_member_classes(self, config_class: ConfigurationClass, source: CandidateMetadata) -> None:
        members = [self._reader.read_class(name) for name in source.member_class_names]
        members = [member for member in members if is_configuration_candidate(member)]
        if not members:
            return
        self._import_stack.push(config_class.metadata)
        try:
            for member in members:
                if member.class_name in self._import_stack:
                    raise CircularImportProblem(self._import_stack.chain(member.class_name))
                self._process(ConfigurationClass(member, imported_by=[config_class.metadata]))
        finally:
            self._import_stack.pop()

    def _process_property_source(self, attributes: Mapping[str, Any], source: CandidateMetadata) -> None:
        base = Path(source.source_path).parent if source.source_path else Path.cwd()
        for location in attributes["value"]:
            path = Path(self._environment.resolve_placeholders(location))
            if not path.is_absolute():
                path = base / path
            if not path.is_file():
                if attributes.get("ignore_resource_not_found"):
                    LOGGER.debug("property source %s not found; ignoring", path)
                    continue
                raise PropertySourceError(f"{source.class_name}: property source {path} does not exist")
            self._environment.add_declared(load_property_source(path))

    def _process_imports(self, config_class: ConfigurationClass, class_names: Sequence[str]) -> None:
        if not class_names:
            return
        self._import_stack.push(config_class.metadata)
        try:
            self._import_candidates(config_class, class_names)
        finally:
            self._import_stack.pop()

    def _import_candidates(self, config_class: ConfigurationClass, class_names: Sequence[str]) -> None:
        importing = config_class.metadata
        for class_name in class_names:
            candidate = self._reader.read_class(class_name)
            if self._inherits(candidate, SELECTOR_CLASS_NAMES):
                selector = self._instantiate(class_name, ImportSelector)
                selected = [class_name_of(value) for value in selector.select_imports(importing)]
                LOGGER.debug("%s selected %s", class_name, ", ".join(selected) or "nothing")
                self._import_candidates(config_class, selected)
            elif self._inherits(candidate, REGISTRAR_CLASS_NAMES):
                registrar = self._instantiate(class_name, ImportRegistrar)
                config_class.registrars.append((registrar, importing))
            else:
                if class_name in self._import_stack:
                    raise CircularImportProblem(self._import_stack.chain(class_name))
                self._import_registry.register_import(importing, class_name)
                self._process(self._imported_class(candidate, importing))

    def _imported_class(self, candidate: CandidateMetadata, importing: CandidateMetadata) -> ConfigurationClass:
        for name in self._registry.names():
            existing = self._registry.get(name)
            if existing.class_name == candidate.class_name and existing.source_kind is not SourceKind.IMPORTED:
                return ConfigurationClass(candidate, bean_name=existing.name)
        return ConfigurationClass(candidate, imported_by=[importing])

    def _superclasses(self, config_class: ConfigurationClass, source: CandidateMetadata) -> list[CandidateMetadata]:
        found = []
        for base in source.base_names:
            if is_framework_class(base) or base in self._known_superclasses:
                continue
            try:
                metadata = self._reader.read_class(base)
            except ClassResolutionError:
                LOGGER.debug("superclass %s of %s is outside the search paths", base, source.class_name)
                continue
            self._known_superclasses[base] = config_class.class_name
            found.append(metadata)
        return found

    def _inherits(self, candidate: CandidateMetadata, class_names: frozenset[str]) -> bool:
        return any(AssignableTypeFilter(name).match(candidate, self._reader) for name in class_names)

    def _instantiate(self, class_name: str, expected: type[Any]) -> Any:
        instance = self._resolver.instantiate(class_name, expected)
        if instance is None:
            raise ClassResolutionError(class_name, f"does not derive from {expected.__name__}")
        self._prepare(instance)
        return instance

    def _reject(self, kind: ProblemKind, subject: str, message: str) -> None:
        rejected = [name for name, state in self._states.items() if state is ParseState.VISITING]
        for name in rejected:
            self._states[name] = ParseState.REJECTED
            self._rejections[name] = kind
        self._discard_imports_of(rejected)
        LOGGER.warning("rejected %s: %s", subject, message)
        problem = Problem(kind=kind, severity=ProblemSeverity.WARNING, subject=subject, message=message)
        if problem not in self._problems:
            self._problems.append(problem)

    def _discard_imports_of(self, importers: Iterable[str]) -> None:
        # Classes reachable only through rejected importers are forgotten.
        pending = list(importers)
        while pending:
            importer = pending.pop()
            self._import_registry.remove_importing_class(importer)
            for name, config_class in list(self._classes.items()):
                if not config_class.is_imported:
                    continue
                config_class.imported_by = [
                    metadata for metadata in config_class.imported_by if metadata.class_name != importer
                ]
                if config_class.imported_by:
                    continue
                LOGGER.debug("dropping %s: imported only by rejected classes", name)
                del self._classes[name]
                self._states.pop(name, None)
                self._known_superclasses = {
                    base: owner for base, owner in self._known_superclasses.items() if owner != name
                }
                pending.append(name)

    def _raise_rejected(self, class_name: str) -> None:
        if self._rejections.get(class_name) is ProblemKind.CIRCULAR_IMPORT:
            raise CircularImportProblem(self._import_stack.chain(class_name))
        raise MetadataReadError(f"{class_name} was rejected earlier")


__all__ = ["ConfigurationClassParser", "FRAMEWORK_MODULE_PREFIXES", "is_framework_class"]
