# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Configuration class parsing."""

from __future__ import annotations

from .component_scan import ComponentScanDirectiveParser
from .model import (
    BeanMethod,
    ConfigurationClass,
    ImportStack,
    ParseState,
    configuration_kind,
    is_configuration_candidate,
)
from .parser import ConfigurationClassParser, is_framework_class

__all__ = [
    "BeanMethod",
    "ComponentScanDirectiveParser",
    "ConfigurationClass",
    "ConfigurationClassParser",
    "ImportStack",
    "ParseState",
    "configuration_kind",
    "is_configuration_candidate",
    "is_framework_class",
]
