# SPDX-License-Identifier: MIT
"""Engine options from CLI flags and environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from sentinal.core.engine import EngineOptions, Strategy

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _env_bool(name: str) -> bool | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    msg = f"Invalid {name}: {raw!r}. Expected one of {sorted(_TRUTHY | (_FALSY - {''}))}"
    raise ValueError(msg)


def _env_number(name: str, kind: type[int] | type[float]) -> int | float | None:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return kind(raw)
    except ValueError:
        msg = f"Invalid {name}: {raw!r}. Expected a number"
        raise ValueError(msg) from None


def load_engine_options(
    *,
    cwd: Path | None = None,
    strategy: str | None = None,
    max_concurrency: int | None = None,
    rule_timeout: float | None = None,
    fail_on_rule_error: bool | None = None,
) -> EngineOptions:
    """Build EngineOptions with CLI > env > default priority.

    Environment variables: ``SENTINAL_STRATEGY``, ``SENTINAL_MAX_CONCURRENCY``,
    ``SENTINAL_RULE_TIMEOUT`` (seconds, 0 = no timeout) and
    ``SENTINAL_FAIL_ON_RULE_ERROR``.

    Raises:
        ValueError: If any value is not recognized.
    """
    strategy_name = strategy or os.environ.get("SENTINAL_STRATEGY") or Strategy.SEQUENTIAL.value
    try:
        resolved_strategy = Strategy(strategy_name.strip().lower())
    except ValueError:
        valid = sorted(s.value for s in Strategy)
        msg = f"Unknown strategy: {strategy_name!r}. Valid strategies: {valid}"
        raise ValueError(msg) from None

    if max_concurrency is None:
        max_concurrency = _env_number("SENTINAL_MAX_CONCURRENCY", int)  # type: ignore[assignment]
    if rule_timeout is None:
        rule_timeout = _env_number("SENTINAL_RULE_TIMEOUT", float)
    if fail_on_rule_error is None:
        fail_on_rule_error = _env_bool("SENTINAL_FAIL_ON_RULE_ERROR")

    return EngineOptions(
        cwd=Path(cwd) if cwd is not None else Path.cwd(),
        strategy=resolved_strategy,
        max_concurrency=max_concurrency if max_concurrency is not None else 4,
        rule_timeout=rule_timeout or None,
        fail_on_rule_error=bool(fail_on_rule_error),
    )
