# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Attach a rich log handler to the confwire logger for verbose CLI runs."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER = logging.getLogger("confwire")
_CONFIGURED_FLAG = "_confwire_verbose_configured"


def configure_logging(*, verbose: bool, console: Console | None = None) -> None:
    """Stream confwire debug logs to stderr when ``verbose`` is set."""

    if not verbose or getattr(LOGGER, _CONFIGURED_FLAG, False):
        return
    handler = RichHandler(console=console or Console(stderr=True), show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.DEBUG)
    LOGGER.propagate = False
    setattr(LOGGER, _CONFIGURED_FLAG, True)


__all__ = ["configure_logging"]
