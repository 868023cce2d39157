# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Reflection-free metadata access: resource location, source reading, class loading."""

from __future__ import annotations

from .classes import ClassResolver
from .locator import DEFAULT_RESOURCE_PATTERN, FilesystemResourceLocator
from .reader import AstMetadataReader, ParsedModule

__all__ = [
    "AstMetadataReader",
    "ClassResolver",
    "DEFAULT_RESOURCE_PATTERN",
    "FilesystemResourceLocator",
    "ParsedModule",
]
