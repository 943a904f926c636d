"""Run-wide switches selected once per preprocessing run."""

from __future__ import annotations

import enum


class RunMode(enum.StrEnum):
    """How admonition blocks are transformed for one run."""

    HTML = "html"
    STRIP = "strip"
    PRESERVE = "preserve"


class OnFailure(enum.StrEnum):
    """What to do when a block fails to parse."""

    CONTINUE = "continue"
    BAIL = "bail"


__all__ = ["OnFailure", "RunMode"]
