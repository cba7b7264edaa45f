# SPDX-License-Identifier: MIT
"""Rule resolution and execution core: config -> plugins -> rules -> engine."""

from pathlib import Path

from sentinal.core.base import (
    Issue,
    PluginModule,
    ResolvedRule,
    Rule,
    Severity,
    normalize_severity,
    split_rule_id,
)
from sentinal.core.config import (
    ConfigResolver,
    ConfigSource,
    FileConfigSource,
    LoadedConfig,
    ValidatedConfig,
)
from sentinal.core.context import IssueCollector, RuleContext
from sentinal.core.engine import Engine, EngineOptions, RuleFailure, RunResult, Strategy
from sentinal.core.plugins import (
    ImportPluginLoader,
    PluginLoader,
    PluginRegistry,
    StaticPluginLoader,
)
from sentinal.core.resolver import RuleResolver
from sentinal.core.schema import FieldError, validate_config

__all__ = [
    "ConfigResolver",
    "ConfigSource",
    "Engine",
    "EngineOptions",
    "FieldError",
    "FileConfigSource",
    "ImportPluginLoader",
    "Issue",
    "IssueCollector",
    "LoadedConfig",
    "PluginLoader",
    "PluginModule",
    "PluginRegistry",
    "ResolvedRule",
    "Rule",
    "RuleContext",
    "RuleFailure",
    "RuleResolver",
    "RunResult",
    "Severity",
    "StaticPluginLoader",
    "Strategy",
    "ValidatedConfig",
    "normalize_severity",
    "resolve_rules",
    "run_project",
    "split_rule_id",
    "validate_config",
]


def resolve_rules(
    config: ValidatedConfig,
    loader: PluginLoader | None = None,
    *,
    fail_fast: bool = True,
) -> list[ResolvedRule]:
    """Convenience: load the config's plugins and bind its rules."""
    registry = PluginRegistry(loader)
    registry.load(config.plugins, fail_fast=fail_fast)
    return RuleResolver(registry).resolve(config.rules, fail_fast=fail_fast)


def run_project(
    config_path: Path | str | None = None,
    *,
    source: ConfigSource | None = None,
    loader: PluginLoader | None = None,
    options: EngineOptions | None = None,
    fail_fast: bool = True,
) -> RunResult:
    """Convenience: resolve config, plugins, and rules, then run the engine.

    Every resolution step completes before any rule runs.
    """
    config = ConfigResolver(source).resolve(config_path)
    rules = resolve_rules(config, loader, fail_fast=fail_fast)
    return Engine(options).run(rules)
