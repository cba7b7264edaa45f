# SPDX-License-Identifier: MIT
"""Binds configured ``<plugin>/<rule>`` keys to the rules the plugins export."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sentinal.core.base import ResolvedRule, normalize_severity, split_rule_id
from sentinal.core.plugins import PluginRegistry
from sentinal.errors import InvalidRuleDefinitionError, InvalidRuleError, ResolutionErrors

log = logging.getLogger(__name__)


def split_declaration(declaration: Any) -> tuple[Any, dict[str, Any]]:
    """Split a rule declaration into ``(severity, options)``.

    A bare token has no options; a ``[severity, options]`` pair carries them.
    """
    if isinstance(declaration, (list, tuple)):
        severity = declaration[0] if declaration else None
        options = declaration[1] if len(declaration) > 1 else None
        return severity, dict(options) if isinstance(options, Mapping) else {}
    return declaration, {}


class RuleResolver:
    """Resolves rule declarations against the plugins held by a registry."""

    def __init__(self, registry: PluginRegistry) -> None:
        self.registry = registry

    def resolve(
        self, declarations: Mapping[str, Any], *, fail_fast: bool = True
    ) -> list[ResolvedRule]:
        """Return one ResolvedRule per declared key, in declaration order.

        Raises:
            InvalidRuleNameError: A key is not shaped ``<plugin>/<rule>``.
            InvalidRuleDefinitionError: A key names a plugin or rule that was not loaded.
            ResolutionErrors: Every binding error, when not ``fail_fast``.
        """
        resolved: list[ResolvedRule] = []
        errors: list[InvalidRuleError] = []
        for rule_id, declaration in declarations.items():
            try:
                resolved.append(self.resolve_one(rule_id, declaration))
            except InvalidRuleError as exc:
                if fail_fast:
                    raise
                errors.append(exc)
        if errors:
            raise ResolutionErrors(errors)
        return resolved

    def resolve_one(self, rule_id: str, declaration: Any) -> ResolvedRule:
        split_rule_id(rule_id)
        implementation = self.registry.lookup(rule_id)
        if implementation is None:
            raise InvalidRuleDefinitionError(rule_id)
        severity, options = split_declaration(declaration)
        rule = ResolvedRule(
            rule_id=rule_id,
            implementation=implementation,
            severity=normalize_severity(severity),
            options=options,
        )
        log.debug("Resolved rule %s (severity=%s)", rule_id, rule.severity)
        return rule
