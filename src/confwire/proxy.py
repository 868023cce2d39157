# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Split scoped definitions into a proxy entry and its target entry."""

from __future__ import annotations

from typing import Final

from .models import SINGLETON_SCOPE, ComponentDefinition, ProxyMode

SCOPED_TARGET_PREFIX: Final[str] = "scopedTarget."


def scoped_target_name(name: str) -> str:
    """Return the registry key of the target behind the proxy ``name``."""

    return f"{SCOPED_TARGET_PREFIX}{name}"


def is_scoped_target(name: str) -> bool:
    """Return whether ``name`` is the registry key of a proxied target."""

    return name.startswith(SCOPED_TARGET_PREFIX)


def create_scoped_proxy(definition: ComponentDefinition) -> tuple[ComponentDefinition, ComponentDefinition]:
    """Return the proxy and target definitions replacing ``definition``.

    The proxy keeps the original name, aliases and primary flag and links to
    the target through ``proxy_target``. The target keeps the declared scope,
    moves to ``scopedTarget.<name>`` and is hidden from autowiring.

    Args:
        definition: Definition with a concrete proxy mode other than ``NO``.

    Returns:
        tuple[ComponentDefinition, ComponentDefinition]: ``(proxy, target)``.

    Raises:
        ValueError: If ``definition`` does not request a proxy.
    """

    if definition.proxy_mode in (ProxyMode.NO, ProxyMode.DEFAULT):
        raise ValueError(f"definition '{definition.name}' does not request a scoped proxy")
    target_name = scoped_target_name(definition.name)
    target = definition.model_copy(
        update={
            "name": target_name,
            "aliases": (),
            "primary": False,
            "autowire_candidate": False,
            "proxy_mode": ProxyMode.NO,
            "attributes": dict(definition.attributes),
        },
    )
    proxy = definition.model_copy(
        update={
            "scope": SINGLETON_SCOPE,
            "lazy_init": False,
            "depends_on": (),
            "proxy_target": target_name,
            "attributes": {},
        },
    )
    return proxy, target


__all__ = ["SCOPED_TARGET_PREFIX", "create_scoped_proxy", "is_scoped_target", "scoped_target_name"]
