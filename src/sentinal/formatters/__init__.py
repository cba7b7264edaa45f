# SPDX-License-Identifier: MIT
"""Output formatters: render issues and executed rules as text, selected by name."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from sentinal.core.base import Issue
from sentinal.errors import FormatterLoadError
from sentinal.formatters import base, summary, verbose

Formatter = Callable[[Sequence[Issue], Sequence[str]], str]

FORMATTERS: dict[str, Formatter] = {
    "base": base.render,
    "summary": summary.render,
    "verbose": verbose.render,
}

__all__ = ["FORMATTERS", "Formatter", "get_formatter"]


def get_formatter(name: str) -> Formatter:
    """Return the formatter registered under ``name``.

    Raises:
        FormatterLoadError: If no formatter has that name.
    """
    try:
        return FORMATTERS[name]
    except KeyError:
        raise FormatterLoadError(name, FORMATTERS.keys()) from None
