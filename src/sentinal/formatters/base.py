# SPDX-License-Identifier: MIT
"""Default formatter: one line per issue and a totals line."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sentinal.core.base import Issue, Severity

_MAX_VALUE_CHARS = 80


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def describe_params(params: Mapping[str, Any]) -> str:
    """Short, single-line description of an issue's params."""
    message = params.get("message")
    if isinstance(message, str) and message:
        return message
    parts = []
    for key, value in params.items():
        text = repr(value) if isinstance(value, str) else str(value)
        if len(text) > _MAX_VALUE_CHARS:
            text = text[: _MAX_VALUE_CHARS - 3] + "..."
        parts.append(f"{key}={text}")
    return ", ".join(parts)


def render(issues: Sequence[Issue], rules: Sequence[str]) -> str:
    if not issues:
        return ""

    width = max(len(issue.rule_id) for issue in issues)
    lines = []
    for issue in issues:
        detail = describe_params(issue.params)
        line = f"  {str(issue.severity):<5}  {issue.rule_id:<{width}}"
        lines.append(f"{line}  {detail}".rstrip())

    errors = sum(1 for issue in issues if issue.severity is Severity.ERROR)
    warnings = len(issues) - errors
    lines.append("")
    lines.append(
        f"{_plural(len(issues), 'problem')} "
        f"({_plural(errors, 'error')}, {_plural(warnings, 'warning')})"
    )
    return "\n".join(lines)
