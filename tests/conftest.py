# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import importlib
import sys
import textwrap
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from confwire import ConfigurationProcessor, ConfwireSettings, DefinitionRegistry
from confwire.metadata import AstMetadataReader, FilesystemResourceLocator


@dataclass
class SourceTree:
    """Throwaway import root that tests populate with modules."""

    root: Path
    top_level: set[str] = field(default_factory=set)

    def write(self, relative: str, source: str = "") -> Path:
        """Write ``source`` to ``relative`` and create missing package markers."""

        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        current = path.parent
        while current != self.root:
            marker = current / "__init__.py"
            if not marker.exists():
                marker.write_text("", encoding="utf-8")
            current = current.parent
        path.write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
        self.top_level.add(Path(relative).parts[0].removesuffix(".py"))
        return path

    def locator(self) -> FilesystemResourceLocator:
        return FilesystemResourceLocator([self.root])

    def reader(self) -> AstMetadataReader:
        return AstMetadataReader(self.locator())

    def settings(self, **overrides: object) -> ConfwireSettings:
        return ConfwireSettings(search_paths=[self.root], **overrides)

    def processor(self, **overrides: object) -> ConfigurationProcessor:
        return ConfigurationProcessor(self.settings(**overrides))


@pytest.fixture
def source_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[SourceTree]:
    """Provide an import root on ``sys.path`` and unload its modules afterwards."""

    root = tmp_path / "src"
    root.mkdir()
    monkeypatch.syspath_prepend(str(root))
    tree = SourceTree(root)
    yield tree
    for name in list(sys.modules):
        if name.split(".")[0] in tree.top_level:
            del sys.modules[name]
    importlib.invalidate_caches()


@pytest.fixture
def registry() -> DefinitionRegistry:
    return DefinitionRegistry()
