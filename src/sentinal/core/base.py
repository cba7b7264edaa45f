# SPDX-License-Identifier: MIT
"""Severity scale, issue record, and the rule/plugin contracts."""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from sentinal.errors import InvalidRuleNameError

if TYPE_CHECKING:
    from sentinal.core.context import RuleContext

RULE_SEPARATOR = "/"


class Severity(IntEnum):
    """Canonical rule severity, ordered off < warn < error."""

    OFF = 0
    WARN = 1
    ERROR = 2

    def __str__(self) -> str:
        return self.name.lower()


def normalize_severity(value: Any) -> Severity:
    """Map a severity token or numeric alias onto the canonical scale.

    ``"error"``/``2`` -> ERROR, ``"warn"``/``1`` -> WARN, anything else -> OFF.
    Numeric aliases match across types (``2``, ``2.0`` and ``"2"`` agree);
    booleans are never numeric.
    """
    if isinstance(value, Severity):
        return value
    token = value.strip().lower() if isinstance(value, str) else None
    number = _as_number(value)

    if token == "error" or number == 2:
        return Severity.ERROR
    if token == "warn" or number == 1:
        return Severity.WARN
    return Severity.OFF


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def split_rule_id(rule_id: str) -> tuple[str, str]:
    """Split ``<plugin>/<rule>`` into its two segments.

    Raises:
        InvalidRuleNameError: If the key does not hold exactly one separator
            with non-empty segments on both sides.
    """
    if not isinstance(rule_id, str) or rule_id.count(RULE_SEPARATOR) != 1:
        raise InvalidRuleNameError(str(rule_id))
    plugin_name, rule_name = rule_id.split(RULE_SEPARATOR, 1)
    if not plugin_name or not rule_name:
        raise InvalidRuleNameError(rule_id)
    return plugin_name, rule_name


@dataclass(frozen=True)
class Issue:
    """A single finding reported by a rule during a run."""

    plugin_name: str
    rule_name: str
    severity: Severity
    params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def rule_id(self) -> str:
        return f"{self.plugin_name}{RULE_SEPARATOR}{self.rule_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "pluginName": self.plugin_name,
            "ruleName": self.rule_name,
            "severity": str(self.severity),
            "params": dict(self.params),
        }


@runtime_checkable
class Rule(Protocol):
    """Protocol that every rule exported by a plugin must satisfy.

    ``create`` runs once per run. It may return an awaitable, which the engine
    awaits; any return value is otherwise ignored. Findings go through
    ``context.report``.
    """

    def create(self, context: RuleContext) -> Awaitable[None] | None: ...


def is_rule(obj: Any) -> bool:
    """Return True if ``obj`` (a rule class or instance) satisfies Rule with a callable ``create``."""
    return isinstance(obj, Rule) and callable(obj.create)


@dataclass(frozen=True)
class PluginModule:
    """A loaded plugin: its name and the rules it exports by local id."""

    name: str
    rules: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))


@dataclass(frozen=True)
class ResolvedRule:
    """A configured rule key bound to its implementation, severity, and options."""

    rule_id: str
    implementation: Any
    severity: Severity
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    @property
    def plugin_name(self) -> str:
        return split_rule_id(self.rule_id)[0]

    @property
    def rule_name(self) -> str:
        return split_rule_id(self.rule_id)[1]

    @property
    def active(self) -> bool:
        return self.severity is not Severity.OFF
