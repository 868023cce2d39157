# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Annotation-driven configuration model builder.

Decorate classes with :func:`component`, :func:`configuration` and friends,
register root configuration classes in a :class:`DefinitionRegistry`, and run
:class:`ConfigurationProcessor` to resolve every component they declare.
"""

from __future__ import annotations

from .annotations import (
    bean,
    component,
    component_scan,
    configuration,
    controller,
    depends_on,
    import_config,
    lazy,
    lookup,
    order,
    primary,
    profile,
    property_source,
    repository,
    scope,
    service,
    stereotype,
    type_filter,
)
from .enhancer import ConfigurationEnhancer, EnhancedConfiguration
from .environment import Environment
from .errors import (
    ClassResolutionError,
    ConfwireError,
    DefinitionConflictError,
    DefinitionStoreError,
    FilterConfigurationError,
    ProblemsDetectedError,
    RegistryStateError,
)
from .hooks import EnvironmentAware, ImportRegistrar, ImportSelector, RegistryAware, ResourceLocatorAware
from .models import ComponentDefinition, FilterKind, ProxyMode, SourceKind
from .processor import ConfigurationProcessor, ProcessingReport
from .registration import AnnotatedDefinitionReader
from .registry import IMPORT_REGISTRY_NAME, DefinitionRegistry, ImportRegistry
from .scanner import ComponentScanner
from .settings import ConfwireSettings, load_settings

__version__ = "0.1.0"

__all__ = [
    "AnnotatedDefinitionReader",
    "ClassResolutionError",
    "ComponentDefinition",
    "ComponentScanner",
    "ConfigurationEnhancer",
    "ConfigurationProcessor",
    "ConfwireError",
    "ConfwireSettings",
    "DefinitionConflictError",
    "DefinitionRegistry",
    "DefinitionStoreError",
    "EnhancedConfiguration",
    "Environment",
    "EnvironmentAware",
    "FilterConfigurationError",
    "FilterKind",
    "IMPORT_REGISTRY_NAME",
    "ImportRegistrar",
    "ImportRegistry",
    "ImportSelector",
    "ProblemsDetectedError",
    "ProcessingReport",
    "ProxyMode",
    "RegistryAware",
    "RegistryStateError",
    "ResourceLocatorAware",
    "SourceKind",
    "bean",
    "component",
    "component_scan",
    "configuration",
    "controller",
    "depends_on",
    "import_config",
    "lazy",
    "load_settings",
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
