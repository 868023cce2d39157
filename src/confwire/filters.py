# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Type filters deciding which scan candidates become components."""

from __future__ import annotations

import logging
import re
from collections import deque
from collections.abc import Callable, Iterable, Sequence
from fnmatch import fnmatchcase
from typing import Final

from .annotations import DEFAULT_ANNOTATIONS, AnnotationRegistry
from .errors import ClassResolutionError, FilterConfigurationError
from .interfaces.metadata import MetadataReader
from .interfaces.strategies import TypeFilter
from .metadata.classes import ClassResolver
from .models import CandidateMetadata, FilterKind, FilterSpec

LOGGER = logging.getLogger(__name__)

DEFAULT_COMPONENT_ANNOTATION: Final[str] = "component"


class AnnotationTypeFilter(TypeFilter):
    """Match candidates declaring an annotation directly or through a stereotype."""

    def __init__(
        self,
        annotation: str,
        *,
        consider_meta_annotations: bool = True,
        annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS,
    ) -> None:
        """Create a filter for ``annotation``.

        Args:
            annotation: Annotation name, optionally qualified (``confwire.service``).
            consider_meta_annotations: Whether stereotypes carrying the
                annotation also match.
            annotations: Registry the annotation must be known to.

        Raises:
            FilterConfigurationError: If ``annotation`` is not a registered annotation.
        """

        name = annotation.rsplit(".", 1)[-1]
        if name not in annotations:
            raise FilterConfigurationError(f"'{annotation}' is not an annotation type")
        self.annotation = name
        self.consider_meta_annotations = consider_meta_annotations

    def match(self, candidate: CandidateMetadata, reader: MetadataReader) -> bool:
        if self.annotation in candidate.annotations:
            return True
        return self.consider_meta_annotations and self.annotation in candidate.meta_annotations

    def __repr__(self) -> str:
        return f"AnnotationTypeFilter({self.annotation!r})"


class AssignableTypeFilter(TypeFilter):
    """Match candidates that are, or derive from, a given class.

    Base classes are followed through the metadata reader; bases outside the
    search paths end the walk along that branch.
    """

    def __init__(self, class_name: str) -> None:
        self.class_name = class_name

    def match(self, candidate: CandidateMetadata, reader: MetadataReader) -> bool:
        if candidate.class_name == self.class_name:
            return True
        seen: set[str] = set()
        pending = deque(candidate.base_names)
        while pending:
            base = pending.popleft()
            if base == self.class_name:
                return True
            if base in seen:
                continue
            seen.add(base)
            try:
                pending.extend(reader.read_class(base).base_names)
            except ClassResolutionError:
                LOGGER.debug("base %s of %s is not readable; skipping", base, candidate.class_name)
        return False

    def __repr__(self) -> str:
        return f"AssignableTypeFilter({self.class_name!r})"


class GlobPatternFilter(TypeFilter):
    """Match qualified class names against a shell-style pattern."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern

    def match(self, candidate: CandidateMetadata, reader: MetadataReader) -> bool:
        return fnmatchcase(candidate.class_name, self.pattern)

    def __repr__(self) -> str:
        return f"GlobPatternFilter({self.pattern!r})"


class RegexPatternFilter(TypeFilter):
    """Match qualified class names against a regular expression."""

    def __init__(self, pattern: str) -> None:
        try:
            self._compiled = re.compile(pattern)
        except re.error as exc:
            raise FilterConfigurationError(f"invalid filter expression {pattern!r}: {exc}") from exc
        self.pattern = pattern

    def match(self, candidate: CandidateMetadata, reader: MetadataReader) -> bool:
        return self._compiled.fullmatch(candidate.class_name) is not None

    def __repr__(self) -> str:
        return f"RegexPatternFilter({self.pattern!r})"


class ClassNameExcludeFilter(TypeFilter):
    """Match exactly the listed class names."""

    def __init__(self, class_names: Iterable[str]) -> None:
        self.class_names = frozenset(class_names)

    def match(self, candidate: CandidateMetadata, reader: MetadataReader) -> bool:
        return candidate.class_name in self.class_names

    def __repr__(self) -> str:
        return f"ClassNameExcludeFilter({sorted(self.class_names)!r})"


class TypeFilterSet:
    """Ordered include and exclude filters evaluated for every candidate.

    A candidate is accepted when it matches at least one include filter and no
    exclude filter. With default filters enabled, the ``component``
    annotation filter is the first include filter.
    """

    def __init__(
        self,
        include: Iterable[TypeFilter] = (),
        exclude: Iterable[TypeFilter] = (),
        *,
        use_default_filters: bool = True,
        annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS,
    ) -> None:
        self._include: list[TypeFilter] = []
        self._exclude: list[TypeFilter] = list(exclude)
        if use_default_filters:
            self._include.append(AnnotationTypeFilter(DEFAULT_COMPONENT_ANNOTATION, annotations=annotations))
        self._include.extend(include)

    @property
    def include_filters(self) -> tuple[TypeFilter, ...]:
        return tuple(self._include)

    @property
    def exclude_filters(self) -> tuple[TypeFilter, ...]:
        return tuple(self._exclude)

    def add_include(self, type_filter: TypeFilter) -> None:
        self._include.append(type_filter)

    def add_exclude(self, type_filter: TypeFilter) -> None:
        self._exclude.append(type_filter)

    def matches(self, candidate: CandidateMetadata, reader: MetadataReader) -> bool:
        """Return whether ``candidate`` passes the include and exclude filters."""

        for type_filter in self._exclude:
            if type_filter.match(candidate, reader):
                LOGGER.debug("%s excluded by %r", candidate.class_name, type_filter)
                return False
        return any(type_filter.match(candidate, reader) for type_filter in self._include)

    def __repr__(self) -> str:
        return f"TypeFilterSet(include={self._include!r}, exclude={self._exclude!r})"


def filters_for(
    spec: FilterSpec,
    *,
    resolver: ClassResolver,
    prepare: Callable[[object], None] | None = None,
    annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS,
) -> list[TypeFilter]:
    """Build type filters from a declarative :class:`FilterSpec`.

    Args:
        spec: Filter declaration from ``component_scan``.
        resolver: Class resolver used to load custom filter classes.
        prepare: Callback invoked on each custom filter before first use.
        annotations: Registry used to validate annotation filters.

    Returns:
        list[TypeFilter]: One filter per declared class or pattern.

    Raises:
        FilterConfigurationError: If the declaration is malformed or a custom
            filter does not implement :class:`TypeFilter`.
    """

    _check_shape(spec)
    if spec.kind is FilterKind.ANNOTATION:
        return [AnnotationTypeFilter(name, annotations=annotations) for name in spec.classes]
    if spec.kind is FilterKind.ASSIGNABLE_TYPE:
        return [AssignableTypeFilter(name) for name in spec.classes]
    if spec.kind is FilterKind.GLOB:
        return [GlobPatternFilter(pattern) for pattern in spec.patterns]
    if spec.kind is FilterKind.REGEX:
        return [RegexPatternFilter(pattern) for pattern in spec.patterns]
    return [_custom_filter(name, resolver, prepare) for name in spec.classes]


def _check_shape(spec: FilterSpec) -> None:
    if spec.kind in (FilterKind.GLOB, FilterKind.REGEX):
        if spec.classes or not spec.patterns:
            raise FilterConfigurationError(f"{spec.kind.value} filters take patterns, not classes")
        return
    if spec.patterns or not spec.classes:
        raise FilterConfigurationError(f"{spec.kind.value} filters take classes, not patterns")


def _custom_filter(
    class_name: str,
    resolver: ClassResolver,
    prepare: Callable[[object], None] | None,
) -> TypeFilter:
    cls = resolver.resolve(class_name)
    try:
        instance = cls()
    except TypeError as exc:
        raise FilterConfigurationError(f"cannot instantiate custom filter {class_name}: {exc}") from exc
    if not isinstance(instance, TypeFilter):
        raise FilterConfigurationError(f"{class_name} does not implement TypeFilter.match")
    if prepare is not None:
        prepare(instance)
    return instance


def build_filter_set(
    include: Sequence[FilterSpec],
    exclude: Sequence[FilterSpec],
    *,
    use_default_filters: bool,
    resolver: ClassResolver,
    prepare: Callable[[object], None] | None = None,
    annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS,
) -> TypeFilterSet:
    """Return a :class:`TypeFilterSet` for declarative include and exclude filters."""

    def _build(specs: Sequence[FilterSpec]) -> list[TypeFilter]:
        built: list[TypeFilter] = []
        for spec in specs:
            built.extend(filters_for(spec, resolver=resolver, prepare=prepare, annotations=annotations))
        return built

    return TypeFilterSet(
        _build(include),
        _build(exclude),
        use_default_filters=use_default_filters,
        annotations=annotations,
    )


__all__ = [
    "AnnotationTypeFilter",
    "AssignableTypeFilter",
    "ClassNameExcludeFilter",
    "DEFAULT_COMPONENT_ANNOTATION",
    "GlobPatternFilter",
    "RegexPatternFilter",
    "TypeFilterSet",
    "build_filter_set",
    "filters_for",
]
