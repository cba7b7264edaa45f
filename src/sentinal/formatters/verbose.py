# SPDX-License-Identifier: MIT
"""Verbose formatter: every issue with its full params."""

from __future__ import annotations

import json
from collections.abc import Sequence

from sentinal.core.base import Issue


def render(issues: Sequence[Issue], rules: Sequence[str]) -> str:
    if not issues:
        return ""

    blocks = []
    for index, issue in enumerate(issues, start=1):
        params = json.dumps(dict(issue.params), indent=2, sort_keys=True, default=str)
        blocks.append(
            f"[{index}] {issue.rule_id} ({issue.severity})\n"
            f"  plugin: {issue.plugin_name}\n"
            f"  rule:   {issue.rule_name}\n"
            f"  params: " + params.replace("\n", "\n  ")
        )
    return "\n\n".join(blocks)
