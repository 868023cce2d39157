# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Scope and proxy policy resolution for scan candidates."""

from __future__ import annotations

from dataclasses import dataclass

from .interfaces.strategies import ScopeResolver
from .models import SINGLETON_SCOPE, CandidateMetadata, ProxyMode


@dataclass(frozen=True, slots=True)
class ScopeMetadata:
    """Concrete scope name and proxy mode for one definition."""

    scope_name: str = SINGLETON_SCOPE
    proxy_mode: ProxyMode = ProxyMode.NO

    def __post_init__(self) -> None:
        if self.proxy_mode is ProxyMode.DEFAULT:
            raise ValueError("scope metadata requires a concrete proxy mode")


class AnnotationScopeResolver(ScopeResolver):
    """Resolve scope from the ``@scope`` declaration on a candidate.

    Candidates without a declaration are singletons without a proxy. A declared
    ``ProxyMode.DEFAULT`` is replaced by the resolver's default proxy mode, which
    lets a scan switch every scoped candidate to proxies at once.
    """

    def __init__(self, default_proxy_mode: ProxyMode = ProxyMode.NO) -> None:
        if default_proxy_mode is ProxyMode.DEFAULT:
            raise ValueError("the default proxy mode must be concrete")
        self._default_proxy_mode = default_proxy_mode

    @property
    def default_proxy_mode(self) -> ProxyMode:
        """Return the proxy mode substituted for ``ProxyMode.DEFAULT``."""

        return self._default_proxy_mode

    def resolve(self, candidate: CandidateMetadata) -> ScopeMetadata:
        attributes = candidate.attributes("scope")
        if attributes is None:
            return ScopeMetadata()
        proxy_mode = attributes.get("proxy_mode", ProxyMode.DEFAULT)
        if proxy_mode is ProxyMode.DEFAULT:
            proxy_mode = self._default_proxy_mode
        return ScopeMetadata(scope_name=attributes.get("value") or SINGLETON_SCOPE, proxy_mode=proxy_mode)

    def __repr__(self) -> str:
        return f"AnnotationScopeResolver(default_proxy_mode={self._default_proxy_mode.value!r})"


__all__ = ["AnnotationScopeResolver", "ScopeMetadata"]
