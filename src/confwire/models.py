# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Data models shared by the scanner, parser, and registry."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

SINGLETON_SCOPE: Final[str] = "singleton"
PROTOTYPE_SCOPE: Final[str] = "prototype"
CONFIGURATION_CLASS_ATTRIBUTE: Final[str] = "confwire.configurationClass"
ORDER_ATTRIBUTE: Final[str] = "confwire.order"
PRESERVE_TARGET_CLASS_ATTRIBUTE: Final[str] = "confwire.preserveTargetClass"

AnnotationAttributes = Mapping[str, Any]


class ProxyMode(str, Enum):
    """Enumerate scoped proxy policies."""

    DEFAULT = "default"
    NO = "no"
    INTERFACES = "interfaces"
    TARGET_CLASS = "target_class"

    @classmethod
    def from_value(cls, raw: object) -> ProxyMode:
        """Return the proxy mode described by ``raw``.

        Args:
            raw: Enum member, declared string, or evaluated attribute reference
                such as ``confwire.ProxyMode.INTERFACES``.

        Returns:
            ProxyMode: Matching enum member.

        Raises:
            ValueError: If ``raw`` does not name a known proxy mode.
        """

        if isinstance(raw, ProxyMode):
            return raw
        if isinstance(raw, ClassRef):
            raw = raw.name.rsplit(".", 1)[-1]
        token = str(raw).strip().lower()
        for member in cls:
            if token in (member.value, member.name.lower()):
                return member
        raise ValueError(f"unknown proxy mode: {raw!r}")


class SourceKind(str, Enum):
    """Describe how a component definition was derived."""

    SCANNED = "scanned"
    EXPLICIT = "explicit"
    IMPORTED = "imported"
    BEAN_METHOD = "bean_method"
    IMPORTED_REGISTRAR = "imported_registrar"


class ConfigurationKind(str, Enum):
    """Distinguish proxied ("full") from plain ("lite") configuration classes."""

    FULL = "full"
    LITE = "lite"


class FilterKind(str, Enum):
    """Enumerate the supported type filter kinds."""

    ANNOTATION = "annotation"
    ASSIGNABLE_TYPE = "assignable_type"
    GLOB = "glob"
    REGEX = "regex"
    CUSTOM = "custom"


class ProblemSeverity(str, Enum):
    """Severity attached to a collected problem."""

    WARNING = "warning"
    ERROR = "error"


class ProblemKind(str, Enum):
    """Categorise collected problems."""

    CIRCULAR_IMPORT = "circular_import"
    UNREADABLE_METADATA = "unreadable_metadata"
    FINAL_CONFIGURATION_CLASS = "final_configuration_class"
    FINAL_BEAN_METHOD = "final_bean_method"
    BEAN_NAME_COLLISION = "bean_name_collision"


class ClassRef(BaseModel):
    """Reference to a class or attribute recovered from source without importing it."""

    model_config = ConfigDict(frozen=True)

    name: str

    @property
    def simple_name(self) -> str:
        """Return the last dotted segment of the reference."""

        return self.name.rsplit(".", 1)[-1]


class CallSpec(BaseModel):
    """Call expression recovered from a decorator argument."""

    model_config = ConfigDict(frozen=True)

    function: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = Field(default_factory=dict)


class _Annotated(BaseModel):
    """Shared behaviour for metadata carrying decorator annotations."""

    model_config = ConfigDict(frozen=True)

    annotations: dict[str, tuple[dict[str, Any], ...]] = Field(default_factory=dict)
    meta_annotations: frozenset[str] = frozenset()

    def is_annotated(self, name: str) -> bool:
        """Return whether ``name`` is declared directly or as a meta-annotation.

        Args:
            name: Annotation name such as ``"component"``.

        Returns:
            bool: ``True`` when the annotation is present.
        """

        return name in self.annotations or name in self.meta_annotations

    def attributes(self, name: str) -> dict[str, Any] | None:
        """Return the attributes of the first declaration of ``name``.

        Args:
            name: Annotation name declared directly on the element.

        Returns:
            dict[str, Any] | None: Attributes, or ``None`` when not declared.
        """

        declared = self.annotations.get(name)
        return declared[0] if declared else None

    def all_attributes(self, name: str) -> tuple[dict[str, Any], ...]:
        """Return the attributes of every declaration of ``name``."""

        return self.annotations.get(name, ())


class MethodMetadata(_Annotated):
    """Read-only view of one method declaration."""

    name: str
    declaring_class: str
    is_static: bool = False
    is_classmethod: bool = False
    is_final: bool = False
    is_abstract: bool = False
    lineno: int | None = None


class CandidateMetadata(_Annotated):
    """Read-only view of one class recovered from its source."""

    class_name: str
    module: str
    package_name: str
    qualname: str
    base_names: tuple[str, ...] = ()
    enclosing_class_name: str | None = None
    member_class_names: tuple[str, ...] = ()
    methods: tuple[MethodMetadata, ...] = ()
    is_abstract: bool = False
    is_final: bool = False
    source_path: str | None = None

    @property
    def simple_name(self) -> str:
        """Return the unqualified class name."""

        return self.qualname.rsplit(".", 1)[-1]

    def annotated_methods(self, name: str) -> tuple[MethodMetadata, ...]:
        """Return methods carrying the ``name`` annotation."""

        return tuple(method for method in self.methods if method.is_annotated(name))

    @property
    def has_bean_methods(self) -> bool:
        """Return whether the class declares bean-producing methods."""

        return bool(self.annotated_methods("bean"))

    @property
    def is_concrete(self) -> bool:
        """Return whether the class can be instantiated directly."""

        return not self.is_abstract


class FactoryReference(BaseModel):
    """Locate the factory method that produces a definition's instance."""

    model_config = ConfigDict(frozen=True)

    method_name: str
    bean_name: str | None = None
    class_name: str | None = None

    @property
    def is_static(self) -> bool:
        """Return whether the factory method is invoked without an instance."""

        return self.bean_name is None


class ComponentDefinition(BaseModel):
    """Unit of registration held by the definition registry."""

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    name: str = Field(min_length=1)
    source_kind: SourceKind
    class_name: str | None = None
    scope: str = SINGLETON_SCOPE
    proxy_mode: ProxyMode = ProxyMode.NO
    lazy_init: bool = False
    primary: bool = False
    autowire_candidate: bool = True
    aliases: tuple[str, ...] = ()
    depends_on: tuple[str, ...] = ()
    factory: FactoryReference | None = None
    proxy_target: str | None = None
    description: str | None = None
    metadata: CandidateMetadata | None = Field(default=None, repr=False)
    attributes: dict[str, Any] = Field(default_factory=dict)
    bean_class: type | None = Field(default=None, repr=False)

    _committed: bool = PrivateAttr(default=False)

    @property
    def committed(self) -> bool:
        """Return whether the registry stores this exact instance."""

        return self._committed

    def mark_committed(self) -> None:
        """Record that the registry now stores this instance."""

        self._committed = True

    def content(self) -> dict[str, Any]:
        """Return the fields compared when checking for identical re-registration."""

        return self.model_dump(
            mode="json",
            exclude={"metadata", "attributes", "bean_class", "description"},
        )

    @property
    def origin(self) -> str:
        """Return a description of where the definition was declared."""

        return self.description or self.source_kind.value

    @property
    def configuration_kind(self) -> ConfigurationKind | None:
        """Return the configuration tag set during materialisation, if any."""

        raw = self.attributes.get(CONFIGURATION_CLASS_ATTRIBUTE)
        return ConfigurationKind(raw) if raw is not None else None


class FilterSpec(BaseModel):
    """Declarative description of one type filter."""

    model_config = ConfigDict(frozen=True)

    kind: FilterKind
    classes: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()


class Problem(BaseModel):
    """Problem collected while parsing configuration classes."""

    model_config = ConfigDict(frozen=True)

    kind: ProblemKind
    severity: ProblemSeverity
    subject: str
    message: str

    @property
    def is_fatal(self) -> bool:
        """Return whether the problem aborts processing."""

        return self.severity is ProblemSeverity.ERROR

    def describe(self) -> str:
        """Return a one-line description naming the offending declaration."""

        return f"[{self.kind.value}] {self.subject}: {self.message}"


__all__ = [
    "AnnotationAttributes",
    "CONFIGURATION_CLASS_ATTRIBUTE",
    "CallSpec",
    "CandidateMetadata",
    "ClassRef",
    "ComponentDefinition",
    "ConfigurationKind",
    "FactoryReference",
    "FilterKind",
    "FilterSpec",
    "MethodMetadata",
    "ORDER_ATTRIBUTE",
    "PRESERVE_TARGET_CLASS_ATTRIBUTE",
    "PROTOTYPE_SCOPE",
    "Problem",
    "ProblemKind",
    "ProblemSeverity",
    "ProxyMode",
    "SINGLETON_SCOPE",
    "SourceKind",
]
