# SPDX-License-Identifier: MIT
"""Exception hierarchy for configuration, resolution, and execution failures."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sentinal.core.engine import RuleFailure, RunResult
    from sentinal.core.schema import FieldError


class SentinalError(Exception):
    """Base class for every error raised by sentinal."""


class ConfigError(SentinalError):
    """Base class for configuration file errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when searching a directory tree finds no configuration file."""

    def __init__(self, search_path: Path | str) -> None:
        self.search_path = Path(search_path)
        super().__init__(
            f"No configuration file found from {self.search_path}. "
            "Run 'sentinal --init' to create one."
        )


class ConfigPathNotFoundError(ConfigError):
    """Raised when an explicitly given configuration path cannot be loaded."""

    def __init__(self, path: Path | str, reason: str | None = None) -> None:
        self.path = Path(path)
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Configuration file not found at {self.path}{detail}")


class ConfigValidationError(ConfigError):
    """Raised when a configuration file fails schema validation.

    Carries every field error, not just the first one.
    """

    def __init__(
        self, message: str, filepath: Path | str | None, errors: Sequence[FieldError]
    ) -> None:
        self.filepath = Path(filepath) if filepath is not None else None
        self.errors = list(errors)
        location = f" ({self.filepath})" if self.filepath else ""
        super().__init__(f"{message}{location}: {len(self.errors)} error(s)")


class InvalidRuleError(SentinalError):
    """Base class for configured rule keys that cannot be bound."""

    def __init__(self, message: str, rule_id: str) -> None:
        self.rule_id = rule_id
        super().__init__(f"{message}: {rule_id!r}")


class InvalidRuleNameError(InvalidRuleError):
    """A configured rule key is not shaped ``<plugin>/<rule>``."""

    def __init__(self, rule_id: str) -> None:
        super().__init__("Invalid rule name", rule_id)


class InvalidRuleDefinitionError(InvalidRuleError):
    """A well-shaped rule key does not match any rule exported by a loaded plugin."""

    def __init__(self, rule_id: str) -> None:
        super().__init__("Rule definition is invalid", rule_id)


class PluginLoadError(SentinalError):
    """A declared plugin could not be loaded or exported a malformed shape."""

    def __init__(self, plugin_name: str, cause: BaseException | str) -> None:
        self.plugin_name = plugin_name
        self.cause = cause
        super().__init__(f"Failed to load plugin {plugin_name!r}: {cause}")


class ResolutionErrors(SentinalError):
    """Aggregate of resolution-phase errors collected in non-fail-fast mode."""

    def __init__(self, errors: Sequence[SentinalError]) -> None:
        self.errors = list(errors)
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} resolution error(s):\n{lines}")


class FormatterLoadError(SentinalError):
    """The requested output format does not exist."""

    def __init__(self, format_name: str, available: Sequence[str]) -> None:
        self.format_name = format_name
        self.available = sorted(available)
        super().__init__(
            f"There was a problem loading formatter: {format_name!r}. "
            f"Valid formats: {self.available}"
        )


class RuleExecutionFailure(SentinalError):
    """One or more rules failed while the caller required all of them to succeed."""

    def __init__(self, failures: Sequence[RuleFailure], result: RunResult) -> None:
        self.failures = list(failures)
        self.result = result
        names = ", ".join(f.rule_id for f in self.failures)
        super().__init__(f"{len(self.failures)} rule(s) failed: {names}")
