# SPDX-License-Identifier: MIT
"""Per-rule invocation context and the run-scoped issue collector."""

from __future__ import annotations

import copy
import logging
import threading
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from sentinal.core.base import Issue, ResolvedRule, Severity

log = logging.getLogger(__name__)


class IssueCollector:
    """Append-only, run-scoped sequence of issues."""

    def __init__(self) -> None:
        self._issues: list[Issue] = []
        self._lock = threading.Lock()

    def append(self, issue: Issue) -> None:
        with self._lock:
            self._issues.append(issue)

    @property
    def issues(self) -> tuple[Issue, ...]:
        with self._lock:
            return tuple(self._issues)

    def __len__(self) -> int:
        return len(self._issues)


class RuleContext:
    """What a running rule sees: its options, the working directory, and ``report``.

    Every rule gets its own context. Options are deep-copied so rules never
    share mutable state through them.
    """

    def __init__(
        self,
        rule: ResolvedRule,
        collector: IssueCollector,
        *,
        cwd: Path,
        timeout: float | None = None,
    ) -> None:
        self.rule_id = rule.rule_id
        self.plugin_name = rule.plugin_name
        self.rule_name = rule.rule_name
        self.severity: Severity = rule.severity
        self.options: dict[str, Any] = copy.deepcopy(dict(rule.options))
        self.cwd = Path(cwd)
        self.timeout = timeout
        self.deadline = time.monotonic() + timeout if timeout is not None else None
        self._collector = collector
        self._closed = False

    def report(self, params: Mapping[str, Any] | None = None, **extra: Any) -> None:
        """Record one issue for this rule; keyword arguments are merged into params."""
        if self._closed:
            log.warning("Dropping late report from %s after it finished", self.rule_id)
            return
        payload = dict(params or {})
        payload.update(extra)
        self._collector.append(
            Issue(
                plugin_name=self.plugin_name,
                rule_name=self.rule_name,
                severity=self.severity,
                params=payload,
            )
        )

    def time_remaining(self) -> float | None:
        """Seconds left before the deadline, or None when the rule has no deadline."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True
