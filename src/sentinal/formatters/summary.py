# SPDX-License-Identifier: MIT
"""Summary formatter: issue counts for every rule that ran."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from sentinal.core.base import Issue


def render(issues: Sequence[Issue], rules: Sequence[str]) -> str:
    if not rules:
        return ""

    counts = Counter(issue.rule_id for issue in issues)
    width = max(len(rule_id) for rule_id in rules)
    lines = [f"Rules executed: {len(rules)}"]
    for rule_id in rules:
        found = counts.get(rule_id, 0)
        status = "ok" if found == 0 else f"{found} issue{'' if found == 1 else 's'}"
        lines.append(f"  {rule_id:<{width}}  {status}")
    return "\n".join(lines)
