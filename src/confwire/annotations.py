# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Decorators that declare components, configuration classes, and their directives.

Every decorator is backed by an :class:`AnnotationType` whose *binder* turns the
decorator arguments into a normalised attribute mapping.  The same binder is
used twice: at runtime, when the decorator records its attributes on the
decorated object, and by the static metadata reader, which evaluates decorator
arguments from source and binds them without importing the module.  Keeping a
single binder guarantees that both views agree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Final, TypeVar

from .models import CallSpec, ClassRef, FilterKind, FilterSpec, ProxyMode

ANNOTATIONS_ATTRIBUTE: Final[str] = "__confwire_annotations__"
FRAMEWORK_PACKAGE: Final[str] = "confwire"

_T = TypeVar("_T")


class AnnotationRegistry:
    """Track known annotation names and their meta-annotations."""

    def __init__(self) -> None:
        self._types: dict[str, AnnotationType] = {}

    def register(self, annotation: AnnotationType) -> AnnotationType:
        """Register ``annotation`` and return it unchanged.

        Args:
            annotation: Annotation type to register.

        Returns:
            AnnotationType: The registered annotation type.

        Raises:
            ValueError: If a meta-annotation is unknown.
        """

        for meta in annotation.meta:
            if meta not in self._types:
                raise ValueError(f"unknown meta-annotation '{meta}' for '{annotation.name}'")
        self._types[annotation.name] = annotation
        return annotation

    def get(self, name: str) -> AnnotationType | None:
        """Return the annotation type registered under ``name``."""

        return self._types.get(name)

    def copy(self) -> AnnotationRegistry:
        """Return a registry holding the same annotation types, for extension."""

        extended = AnnotationRegistry()
        extended._types = dict(self._types)
        return extended

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def meta_annotations(self, name: str) -> frozenset[str]:
        """Return every meta-annotation reachable from ``name``.

        Args:
            name: Annotation name to expand.

        Returns:
            frozenset[str]: Transitive meta-annotation names, excluding ``name``.
        """

        found: set[str] = set()
        pending = list(self._types[name].meta) if name in self._types else []
        while pending:
            current = pending.pop()
            if current in found:
                continue
            found.add(current)
            annotation = self._types.get(current)
            if annotation is not None:
                pending.extend(annotation.meta)
        found.discard(name)
        return frozenset(found)


DEFAULT_ANNOTATIONS = AnnotationRegistry()


@dataclass(frozen=True, slots=True)
class AnnotationType:
    """Decorator factory bound to a named annotation."""

    name: str
    binder: Callable[..., dict[str, Any]]
    meta: tuple[str, ...] = ()
    bare: bool = True
    module: str | None = None

    def declared_by(self, qualified: str) -> bool:
        """Return whether a decorator resolving to ``qualified`` is this annotation.

        Annotations pinned to a module only match decorators imported from it or
        its submodules. Unpinned stereotypes match by name.
        """

        if qualified.rsplit(".", 1)[-1] != self.name:
            return False
        return self.module is None or qualified.startswith(f"{self.module}.")

    def bind(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        """Return normalised attributes for the given decorator arguments.

        Raises:
            TypeError: If the arguments do not match the annotation's signature.
        """

        return self.binder(*args, **kwargs)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self.bare and len(args) == 1 and not kwargs and _is_decoratable(args[0]):
            return _record(args[0], self.name, self.bind())
        attributes = self.bind(*args, **kwargs)

        def decorator(target: _T) -> _T:
            return _record(target, self.name, attributes)

        return decorator

    def __repr__(self) -> str:
        return f"@{self.name}"


def _is_decoratable(value: object) -> bool:
    return isinstance(value, (type, staticmethod, classmethod)) or (callable(value) and not isinstance(value, str))


def _record(target: _T, name: str, attributes: dict[str, Any]) -> _T:
    holder = target.__func__ if isinstance(target, (staticmethod, classmethod)) else target
    declared = vars(holder).get(ANNOTATIONS_ATTRIBUTE)
    if declared is None:
        declared = {}
        setattr(holder, ANNOTATIONS_ATTRIBUTE, declared)
    declared.setdefault(name, []).append(attributes)
    return target


def declared_annotations(target: object) -> dict[str, list[dict[str, Any]]]:
    """Return the annotations recorded at runtime directly on ``target``."""

    holder = target.__func__ if isinstance(target, (staticmethod, classmethod)) else target
    return dict(vars(holder).get(ANNOTATIONS_ATTRIBUTE, {}))


def class_name_of(value: object) -> str:
    """Return a qualified class name for a runtime class, reference, or string.

    Args:
        value: Runtime class, :class:`ClassRef`, annotation type, or dotted name.

    Returns:
        str: Qualified name usable by the metadata reader.

    Raises:
        TypeError: If ``value`` cannot name a class.
    """

    if isinstance(value, type):
        return f"{value.__module__}.{value.__qualname__}"
    if isinstance(value, ClassRef):
        return value.name
    if isinstance(value, AnnotationType):
        return value.name
    if isinstance(value, str) and value:
        return value
    raise TypeError(f"cannot derive a class name from {value!r}")


def _enum_token(raw: object) -> object:
    if isinstance(raw, ClassRef):
        return raw.simple_name
    return raw


def _names(values: Iterable[object]) -> tuple[str, ...]:
    return tuple(str(value) for value in values)


def _stereotype_binder(value: str = "", *, name: str = "") -> dict[str, Any]:
    return {"value": name or value}


def _configuration_binder(value: str = "", *, name: str = "", proxy_bean_methods: bool = True) -> dict[str, Any]:
    return {"value": name or value, "proxy_bean_methods": bool(proxy_bean_methods)}


def _scope_binder(value: str = "", *, proxy_mode: object = ProxyMode.DEFAULT) -> dict[str, Any]:
    return {"value": value, "proxy_mode": ProxyMode.from_value(proxy_mode)}


def _flag_binder(value: bool = True) -> dict[str, Any]:
    return {"value": bool(value)}


def _marker_binder() -> dict[str, Any]:
    return {}


def _order_binder(value: int) -> dict[str, Any]:
    return {"value": int(value)}


def _string_list_binder(*value: str) -> dict[str, Any]:
    return {"value": _names(value)}


def _bean_binder(*names: str, name: str = "", autowire_candidate: bool = True) -> dict[str, Any]:
    declared = ((name,) if name else ()) + _names(names)
    return {"value": declared, "autowire_candidate": bool(autowire_candidate)}


def _import_binder(*classes: object) -> dict[str, Any]:
    if not classes:
        raise TypeError("import_config requires at least one class")
    return {"value": tuple(class_name_of(value) for value in classes)}


def _lookup_binder(value: str = "") -> dict[str, Any]:
    return {"value": value}


def _property_source_binder(*locations: str, ignore_resource_not_found: bool = False) -> dict[str, Any]:
    if not locations:
        raise TypeError("property_source requires at least one location")
    return {"value": _names(locations), "ignore_resource_not_found": bool(ignore_resource_not_found)}


def type_filter(kind: object, *classes: object, pattern: str | Iterable[str] | None = None) -> FilterSpec:
    """Declare a type filter for :func:`component_scan`.

    Args:
        kind: :class:`FilterKind` member or its name.
        classes: Annotation types or classes, depending on ``kind``.
        pattern: Glob or regular expression pattern(s) for pattern kinds.

    Returns:
        FilterSpec: Declarative filter description.
    """

    token = _enum_token(kind)
    resolved_kind = token if isinstance(token, FilterKind) else FilterKind(str(token).lower())
    if pattern is None:
        patterns: tuple[str, ...] = ()
    elif isinstance(pattern, str):
        patterns = (pattern,)
    else:
        patterns = _names(pattern)
    return FilterSpec(
        kind=resolved_kind,
        classes=tuple(class_name_of(value) for value in classes),
        patterns=patterns,
    )


def _filter_spec(value: object) -> FilterSpec:
    if isinstance(value, FilterSpec):
        return value
    if isinstance(value, CallSpec) and value.function.rsplit(".", 1)[-1] == "type_filter":
        return type_filter(*value.args, **value.kwargs)
    raise TypeError(f"filters must be declared with type_filter(), got {value!r}")


def _component_scan_binder(
    *base_packages: str,
    base_package_classes: Iterable[object] = (),
    include_filters: Iterable[object] = (),
    exclude_filters: Iterable[object] = (),
    use_default_filters: bool = True,
    lazy_init: bool = False,
    resource_pattern: str | None = None,
    scoped_proxy: object = ProxyMode.DEFAULT,
    name_generator: object = None,
) -> dict[str, Any]:
    return {
        "base_packages": _names(base_packages),
        "base_package_classes": tuple(class_name_of(value) for value in base_package_classes),
        "include_filters": tuple(_filter_spec(value) for value in include_filters),
        "exclude_filters": tuple(_filter_spec(value) for value in exclude_filters),
        "use_default_filters": bool(use_default_filters),
        "lazy_init": bool(lazy_init),
        "resource_pattern": resource_pattern,
        "scoped_proxy": ProxyMode.from_value(scoped_proxy),
        "name_generator": None if name_generator is None else class_name_of(name_generator),
    }


def stereotype(
    name: str,
    *meta: str,
    registry: AnnotationRegistry = DEFAULT_ANNOTATIONS,
    module: str | None = None,
) -> AnnotationType:
    """Define a component stereotype decorator carrying ``meta`` annotations.

    Args:
        name: Decorator name as it appears in source.
        meta: Meta-annotations carried by the stereotype (``"component"`` at least
            when scanned classes should be picked up by the default filters).
        registry: Annotation registry receiving the definition.
        module: Package the decorator must be imported from to be recognised
            when reading source. Unset stereotypes are recognised by name.

    Returns:
        AnnotationType: Decorator usable as ``@name`` or ``@name("bean_name")``.
    """

    return registry.register(AnnotationType(name, _stereotype_binder, tuple(meta), module=module))


def _define(name: str, binder: Callable[..., dict[str, Any]], *meta: str, bare: bool = True) -> AnnotationType:
    return DEFAULT_ANNOTATIONS.register(AnnotationType(name, binder, tuple(meta), bare, FRAMEWORK_PACKAGE))


component = _define("component", _stereotype_binder)
service = stereotype("service", "component", module=FRAMEWORK_PACKAGE)
repository = stereotype("repository", "component", module=FRAMEWORK_PACKAGE)
controller = stereotype("controller", "component", module=FRAMEWORK_PACKAGE)
configuration = _define("configuration", _configuration_binder, "component")

scope = _define("scope", _scope_binder, bare=False)
lazy = _define("lazy", _flag_binder)
primary = _define("primary", _marker_binder)
order = _define("order", _order_binder, bare=False)
profile = _define("profile", _string_list_binder, bare=False)
depends_on = _define("depends_on", _string_list_binder, bare=False)
lookup = _define("lookup", _lookup_binder)

bean = _define("bean", _bean_binder)
import_config = _define("import_config", _import_binder, bare=False)
component_scan = _define("component_scan", _component_scan_binder, bare=False)
property_source = _define("property_source", _property_source_binder, bare=False)

CONFIGURATION_DIRECTIVES: Final[tuple[str, ...]] = ("component_scan", "import_config", "property_source")


__all__ = [
    "ANNOTATIONS_ATTRIBUTE",
    "AnnotationRegistry",
    "AnnotationType",
    "CONFIGURATION_DIRECTIVES",
    "DEFAULT_ANNOTATIONS",
    "FRAMEWORK_PACKAGE",
    "bean",
    "class_name_of",
    "component",
    "component_scan",
    "configuration",
    "controller",
    "declared_annotations",
    "depends_on",
    "import_config",
    "lazy",
    "lookup",
    "order",
    "primary",
    "profile",
    "property_source",
    "repository",
    "scope",
    "service",
    "stereotype",
    "type_filter",
]
