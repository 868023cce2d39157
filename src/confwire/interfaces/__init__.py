# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Protocols describing the collaborators of the configuration model builder."""

from __future__ import annotations

from .metadata import MetadataReader
from .registry import DefinitionRegistryProtocol
from .resources import ResourceHandle, ResourceLocator
from .strategies import BeanLookup, NameGenerator, ScopeResolver, TypeFilter

__all__ = [
    "BeanLookup",
    "DefinitionRegistryProtocol",
    "MetadataReader",
    "NameGenerator",
    "ResourceHandle",
    "ResourceLocator",
    "ScopeResolver",
    "TypeFilter",
]
