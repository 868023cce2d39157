# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Properties and profiles consulted while resolving configuration."""

from __future__ import annotations

from .resolver import ACTIVE_PROFILES_PROPERTY, Environment
from .sources import EnvironPropertySource, MapPropertySource, PropertySource, load_property_source

__all__ = [
    "ACTIVE_PROFILES_PROPERTY",
    "Environment",
    "EnvironPropertySource",
    "MapPropertySource",
    "PropertySource",
    "load_property_source",
]
