# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

from __future__ import annotations

import pytest

from confwire.models import CandidateMetadata, ProxyMode
from confwire.scope import AnnotationScopeResolver, ScopeMetadata


def _candidate(**annotations: tuple[dict, ...]) -> CandidateMetadata:
    return CandidateMetadata(
        class_name="shop.Cart",
        module="shop",
        package_name="shop",
        qualname="Cart",
        annotations=annotations,
    )


def test_undeclared_scope_is_singleton_without_proxy() -> None:
    assert AnnotationScopeResolver(ProxyMode.INTERFACES).resolve(_candidate()) == ScopeMetadata("singleton", ProxyMode.NO)


def test_declared_default_proxy_uses_resolver_default() -> None:
    candidate = _candidate(scope=({"value": "session", "proxy_mode": ProxyMode.DEFAULT},))

    assert AnnotationScopeResolver().resolve(candidate) == ScopeMetadata("session", ProxyMode.NO)
    assert AnnotationScopeResolver(ProxyMode.TARGET_CLASS).resolve(candidate) == ScopeMetadata(
        "session",
        ProxyMode.TARGET_CLASS,
    )


def test_explicit_proxy_mode_is_kept() -> None:
    candidate = _candidate(scope=({"value": "request", "proxy_mode": ProxyMode.INTERFACES},))

    assert AnnotationScopeResolver(ProxyMode.TARGET_CLASS).resolve(candidate).proxy_mode is ProxyMode.INTERFACES


def test_default_is_never_a_resolved_mode() -> None:
    with pytest.raises(ValueError):
        ScopeMetadata("singleton", ProxyMode.DEFAULT)
    with pytest.raises(ValueError):
        AnnotationScopeResolver(ProxyMode.DEFAULT)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("interfaces", ProxyMode.INTERFACES), ("TARGET_CLASS", ProxyMode.TARGET_CLASS), (ProxyMode.NO, ProxyMode.NO)],
)
def test_proxy_mode_parsing(raw: object, expected: ProxyMode) -> None:
    assert ProxyMode.from_value(raw) is expected
