"""sentinal: pluggable rule runner. Plugins export rules, a config file turns them on."""

__version__ = "0.1.0"

from sentinal.core import (  # noqa: E402
    Engine,
    EngineOptions,
    Issue,
    PluginModule,
    Rule,
    RuleContext,
    RunResult,
    Severity,
    normalize_severity,
    run_project,
)
from sentinal.errors import (  # noqa: E402
    ConfigNotFoundError,
    ConfigPathNotFoundError,
    ConfigValidationError,
    FormatterLoadError,
    InvalidRuleDefinitionError,
    InvalidRuleNameError,
    PluginLoadError,
    ResolutionErrors,
    RuleExecutionFailure,
    SentinalError,
)

__all__ = [
    "ConfigNotFoundError",
    "ConfigPathNotFoundError",
    "ConfigValidationError",
    "Engine",
    "EngineOptions",
    "FormatterLoadError",
    "InvalidRuleDefinitionError",
    "InvalidRuleNameError",
    "Issue",
    "PluginLoadError",
    "PluginModule",
    "ResolutionErrors",
    "Rule",
    "RuleContext",
    "RuleExecutionFailure",
    "RunResult",
    "SentinalError",
    "Severity",
    "normalize_severity",
    "run_project",
]
