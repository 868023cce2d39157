# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Read class metadata from module source with :mod:`ast`.

Nothing in this module imports user code.  Decorator arguments are evaluated by
a deliberately small literal evaluator: constants and containers evaluate to
themselves, names and attribute chains become :class:`ClassRef` objects
resolved against the module's imports, and calls become :class:`CallSpec`
descriptors.  The decorator's annotation binder then normalises the evaluated
arguments exactly as it would at runtime.
"""

from __future__ import annotations

import ast
import builtins
import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final

from ..annotations import DEFAULT_ANNOTATIONS, AnnotationRegistry
from ..errors import ClassResolutionError, MetadataReadError
from ..interfaces.metadata import MetadataReader
from ..interfaces.resources import ResourceHandle, ResourceLocator
from ..models import CallSpec, CandidateMetadata, ClassRef, MethodMetadata

LOGGER = logging.getLogger(__name__)

MAX_ALIAS_HOPS: Final[int] = 8
_FINAL_DECORATORS: Final[frozenset[str]] = frozenset({"typing.final", "typing_extensions.final"})
_ABSTRACT_DECORATORS: Final[frozenset[str]] = frozenset({"abc.abstractmethod"})
_PROTOCOL_BASES: Final[frozenset[str]] = frozenset({"typing.Protocol", "typing_extensions.Protocol"})


class _Unevaluable(Exception):
    """Raised when a decorator argument is not a static expression."""

    def __init__(self, node: ast.AST) -> None:
        super().__init__(f"unsupported expression '{ast.unparse(node)}' at line {getattr(node, 'lineno', '?')}")


@dataclass(frozen=True, slots=True)
class ParsedModule:
    """Classes and import aliases recovered from one module."""

    handle: ResourceHandle
    classes: tuple[CandidateMetadata, ...]
    aliases: Mapping[str, str]

    def find(self, qualname: str) -> CandidateMetadata | None:
        """Return the class declared as ``qualname`` in this module."""

        for candidate in self.classes:
            if candidate.qualname == qualname:
                return candidate
        return None


class AstMetadataReader(MetadataReader):
    """Produce :class:`CandidateMetadata` by parsing source files."""

    def __init__(self, locator: ResourceLocator, *, annotations: AnnotationRegistry = DEFAULT_ANNOTATIONS) -> None:
        """Create a reader backed by ``locator``.

        Args:
            locator: Resource locator used to find module sources by name.
            annotations: Annotation registry defining recognised decorators.
        """

        self._locator = locator
        self._annotations = annotations
        self._cache: dict[tuple[Path, int], ParsedModule] = {}
        self._alias_cache: dict[tuple[Path, int], Mapping[str, str]] = {}

    @property
    def locator(self) -> ResourceLocator:
        """Return the resource locator backing the reader."""

        return self._locator

    def read(self, handle: ResourceHandle) -> Sequence[CandidateMetadata]:
        """Return metadata for every class declared in ``handle``."""

        return self.parse_module(handle).classes

    def parse_module(self, handle: ResourceHandle) -> ParsedModule:
        """Parse ``handle`` returning its classes and import aliases.

        Args:
            handle: Module resource.

        Returns:
            ParsedModule: Parsed module view, cached by path and mtime.

        Raises:
            MetadataReadError: If the file cannot be read or parsed.
        """

        cache_key = _cache_key(handle)
        if cached := self._cache.get(cache_key):
            return cached
        tree = _parse_source(handle, cache_key[0])
        parsed = _ModuleParser(handle, tree, self._annotations, self.resolve_export).parse()
        self._cache[cache_key] = parsed
        LOGGER.debug("read %d classes from %s", len(parsed.classes), handle.path)
        return parsed

    def read_class(self, class_name: str) -> CandidateMetadata:
        """Return metadata for ``class_name``, following re-exports.

        Raises:
            ClassResolutionError: If no module declares or re-exports the class.
        """

        target = class_name
        for _ in range(MAX_ALIAS_HOPS):
            parsed, qualname = self._module_for(target, original=class_name)
            found = parsed.find(qualname)
            if found is not None:
                return found
            head, _, rest = qualname.partition(".")
            alias = parsed.aliases.get(head)
            if alias is None:
                break
            target = f"{alias}.{rest}" if rest else alias
        raise ClassResolutionError(class_name, "no such class in its module")

    def resolve_export(self, qualified: str) -> str:
        """Follow re-exports of ``qualified`` to the module that binds it.

        Only import statements of the modules along the way are read, so a
        module re-exporting ``confwire.component`` resolves to it.

        Args:
            qualified: Dotted name as seen from an importing module.

        Returns:
            str: Name in the defining module, or ``qualified`` when it cannot be
            followed through the search paths.

        Raises:
            MetadataReadError: If a module along the way cannot be parsed.
        """

        current = qualified
        for _ in range(MAX_ALIAS_HOPS):
            module, _, name = current.rpartition(".")
            handle = self._locator.locate_module(module) if module else None
            if handle is None:
                break
            target = self._module_aliases(handle).get(name)
            if target is None or target == current:
                break
            current = target
        return current

    def clear_cache(self) -> None:
        """Drop every parsed module."""

        self._cache.clear()
        self._alias_cache.clear()

    def _module_aliases(self, handle: ResourceHandle) -> Mapping[str, str]:
        cache_key = _cache_key(handle)
        if parsed := self._cache.get(cache_key):
            return parsed.aliases
        aliases = self._alias_cache.get(cache_key)
        if aliases is None:
            aliases = _import_aliases(_parse_source(handle, cache_key[0]), handle)
            self._alias_cache[cache_key] = aliases
        return aliases

    def _module_for(self, class_name: str, *, original: str) -> tuple[ParsedModule, str]:
        parts = class_name.split(".")
        for index in range(len(parts) - 1, 0, -1):
            handle = self._locator.locate_module(".".join(parts[:index]))
            if handle is not None:
                return self.parse_module(handle), ".".join(parts[index:])
        raise ClassResolutionError(original, "no module found on the search paths")

    def __repr__(self) -> str:
        return f"AstMetadataReader(locator={self._locator!r})"


class _ModuleParser:
    """Translate a parsed module tree into metadata records."""

    def __init__(
        self,
        handle: ResourceHandle,
        tree: ast.Module,
        annotations: AnnotationRegistry,
        resolve_export: Callable[[str], str],
    ) -> None:
        self._handle = handle
        self._tree = tree
        self._annotations = annotations
        self._resolve_export = resolve_export
        self._aliases: dict[str, str] = {}
        self._classes: list[CandidateMetadata] = []

    def parse(self) -> ParsedModule:
        self._aliases = _import_aliases(self._tree, self._handle)
        for node in self._tree.body:
            if isinstance(node, ast.ClassDef):
                self._read_class(node, enclosing=None)
        return ParsedModule(handle=self._handle, classes=tuple(self._classes), aliases=dict(self._aliases))

    def _read_class(self, node: ast.ClassDef, enclosing: tuple[str, str] | None) -> str:
        module = self._handle.module
        qualname = f"{enclosing[1]}.{node.name}" if enclosing else node.name
        class_name = f"{module}.{qualname}"
        annotations, flags = self._read_decorators(node.decorator_list, class_name)
        bases = tuple(self._base_name(base) for base in node.bases)
        methods = tuple(
            self._read_method(child, class_name)
            for child in node.body
            if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef))
        )
        position = len(self._classes)
        members = tuple(
            self._read_class(child, (class_name, qualname)) for child in node.body if isinstance(child, ast.ClassDef)
        )
        metadata = CandidateMetadata(
            class_name=class_name,
            module=module,
            package_name=self._handle.package_name,
            qualname=qualname,
            base_names=bases,
            enclosing_class_name=enclosing[0] if enclosing else None,
            member_class_names=members,
            methods=methods,
            annotations=annotations,
            meta_annotations=self._meta(annotations),
            is_abstract=any(method.is_abstract for method in methods) or bool(_PROTOCOL_BASES.intersection(bases)),
            is_final="final" in flags,
            source_path=str(self._handle.path),
        )
        self._classes.insert(position, metadata)
        return class_name

    def _read_method(self, node: ast.FunctionDef | ast.AsyncFunctionDef, class_name: str) -> MethodMetadata:
        annotations, flags = self._read_decorators(node.decorator_list, f"{class_name}.{node.name}")
        return MethodMetadata(
            name=node.name,
            declaring_class=class_name,
            annotations=annotations,
            meta_annotations=self._meta(annotations),
            is_static="staticmethod" in flags,
            is_classmethod="classmethod" in flags,
            is_final="final" in flags,
            is_abstract="abstractmethod" in flags,
            lineno=node.lineno,
        )

    def _read_decorators(
        self,
        decorators: Sequence[ast.expr],
        subject: str,
    ) -> tuple[dict[str, tuple[dict[str, Any], ...]], set[str]]:
        collected: dict[str, list[dict[str, Any]]] = {}
        flags: set[str] = set()
        for decorator in decorators:
            target = decorator.func if isinstance(decorator, ast.Call) else decorator
            if not isinstance(target, (ast.Name, ast.Attribute)):
                continue
            try:
                qualified = self._resolve(target)
            except _Unevaluable:
                continue
            simple = qualified.rsplit(".", 1)[-1]
            if qualified in ("builtins.staticmethod", "builtins.classmethod"):
                flags.add(simple)
                continue
            if qualified in _FINAL_DECORATORS:
                flags.add("final")
                continue
            if qualified in _ABSTRACT_DECORATORS:
                flags.add("abstractmethod")
                continue
            annotation = self._annotations.get(simple)
            if annotation is not None and not annotation.declared_by(qualified):
                qualified = self._resolve_export(qualified)
                annotation = self._annotations.get(qualified.rsplit(".", 1)[-1])
            if annotation is None or not annotation.declared_by(qualified):
                continue
            simple = annotation.name
            try:
                if isinstance(decorator, ast.Call):
                    args = [self._evaluate(arg) for arg in decorator.args]
                    kwargs = {kw.arg: self._evaluate(kw.value) for kw in decorator.keywords if kw.arg}
                    attributes = annotation.bind(*args, **kwargs)
                else:
                    attributes = annotation.bind()
            except _Unevaluable as exc:
                raise MetadataReadError(f"{subject}: @{simple}: {exc}") from exc
            except (TypeError, ValueError) as exc:
                raise MetadataReadError(f"{subject}: invalid @{simple} declaration: {exc}") from exc
            collected.setdefault(simple, []).append(attributes)
        return {name: tuple(values) for name, values in collected.items()}, flags

    def _meta(self, annotations: Mapping[str, object]) -> frozenset[str]:
        meta: set[str] = set()
        for name in annotations:
            meta.update(self._annotations.meta_annotations(name))
        return frozenset(meta)

    def _base_name(self, node: ast.expr) -> str:
        if isinstance(node, ast.Subscript):
            node = node.value
        if isinstance(node, (ast.Name, ast.Attribute)):
            try:
                return self._resolve(node)
            except _Unevaluable:
                pass
        return ast.unparse(node)

    def _resolve(self, node: ast.Name | ast.Attribute) -> str:
        if isinstance(node, ast.Name):
            if node.id in self._aliases:
                return self._aliases[node.id]
            if hasattr(builtins, node.id):
                return f"builtins.{node.id}"
            return f"{self._handle.module}.{node.id}"
        if isinstance(node.value, (ast.Name, ast.Attribute)):
            return f"{self._resolve(node.value)}.{node.attr}"
        raise _Unevaluable(node)

    def _evaluate(self, node: ast.expr) -> Any:
        if isinstance(node, ast.Constant):
            return node.value
        if isinstance(node, (ast.List, ast.Tuple, ast.Set)):
            return tuple(self._evaluate(element) for element in node.elts)
        if isinstance(node, ast.Dict):
            return {
                self._evaluate(key): self._evaluate(value)
                for key, value in zip(node.keys, node.values, strict=True)
                if key is not None
            }
        if isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.USub):
            operand = self._evaluate(node.operand)
            if isinstance(operand, (int, float)):
                return -operand
        if isinstance(node, (ast.Name, ast.Attribute)):
            return ClassRef(name=self._resolve(node))
        if isinstance(node, ast.Call) and isinstance(node.func, (ast.Name, ast.Attribute)):
            return CallSpec(
                function=self._resolve(node.func),
                args=tuple(self._evaluate(arg) for arg in node.args),
                kwargs={kw.arg: self._evaluate(kw.value) for kw in node.keywords if kw.arg},
            )
        raise _Unevaluable(node)


def _cache_key(handle: ResourceHandle) -> tuple[Path, int]:
    try:
        resolved = handle.path.resolve()
        return resolved, resolved.stat().st_mtime_ns
    except OSError as exc:
        raise MetadataReadError(f"cannot stat {handle.path}: {exc}") from exc


def _parse_source(handle: ResourceHandle, path: Path) -> ast.Module:
    try:
        return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except (OSError, UnicodeDecodeError, SyntaxError) as exc:
        raise MetadataReadError(f"cannot parse {handle.path}: {exc}") from exc


def _import_aliases(tree: ast.Module, handle: ResourceHandle) -> dict[str, str]:
    """Map names bound by imports and class statements to qualified names."""

    aliases: dict[str, str] = {}
    for node in _module_level(tree.body):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.asname:
                    aliases[alias.asname] = alias.name
                else:
                    head = alias.name.partition(".")[0]
                    aliases[head] = head
        elif isinstance(node, ast.ImportFrom):
            source = _absolute_module(node, handle.package_name)
            for alias in node.names:
                if alias.name != "*":
                    aliases[alias.asname or alias.name] = f"{source}.{alias.name}"
    for node in tree.body:
        if isinstance(node, ast.ClassDef):
            aliases[node.name] = f"{handle.module}.{node.name}"
    return aliases


def _absolute_module(node: ast.ImportFrom, package_name: str) -> str:
    if not node.level:
        return node.module or ""
    package = package_name.split(".")
    base = package[: len(package) - (node.level - 1)]
    return ".".join([*base, node.module] if node.module else base)


def _module_level(body: Sequence[ast.stmt]) -> Iterator[ast.stmt]:
    """Yield module-level statements, descending into ``if`` and ``try`` blocks."""

    for node in body:
        yield node
        if isinstance(node, ast.If):
            yield from _module_level(node.body)
            yield from _module_level(node.orelse)
        elif isinstance(node, ast.Try):
            yield from _module_level(node.body)
            for handler in node.handlers:
                yield from _module_level(handler.body)
            yield from _module_level(node.orelse)


__all__ = ["AstMetadataReader", "ParsedModule"]
