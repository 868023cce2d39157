# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Evaluate ``@profile`` conditions on classes and bean methods."""

from __future__ import annotations

import logging

from .environment import Environment
from .models import CandidateMetadata, MethodMetadata

LOGGER = logging.getLogger(__name__)


class ConditionEvaluator:
    """Decide whether a declaration is skipped for the active profiles."""

    def __init__(self, environment: Environment) -> None:
        self._environment = environment

    @property
    def environment(self) -> Environment:
        return self._environment

    def should_skip(self, metadata: CandidateMetadata | MethodMetadata) -> bool:
        """Return whether ``metadata`` is excluded by its ``@profile`` declarations.

        Every ``@profile`` declaration must accept the active profiles; within
        one declaration any listed profile is enough.

        Args:
            metadata: Class or method metadata.

        Returns:
            bool: ``True`` when the declaration must be ignored.
        """

        for attributes in metadata.all_attributes("profile"):
            profiles = attributes.get("value", ())
            if profiles and not self._environment.accepts_profiles(profiles):
                LOGGER.debug("skipping %s: profiles %s are not active", _subject(metadata), ", ".join(profiles))
                return True
        return False


def _subject(metadata: CandidateMetadata | MethodMetadata) -> str:
    if isinstance(metadata, MethodMetadata):
        return f"{metadata.declaring_class}.{metadata.name}"
    return metadata.class_name


__all__ = ["ConditionEvaluator"]
