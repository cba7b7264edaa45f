# SPDX-License-Identifier: MIT
"""Configuration file schema: pydantic models plus a field-error validator.

The schema is the contract other tools read and write::

    {
        "plugins": ["audit"],
        "rules": {
            "audit/min-vulns": ["error", {"threshold": 5}],
            "audit/licenses": "warn"
        }
    }
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError


def is_severity_token(value: Any) -> bool:
    """Return True if ``value`` is one of the six accepted severity tokens."""
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        return value in ("off", "warn", "error")
    return isinstance(value, int) and value in (0, 1, 2)


def _check_rule_declaration(value: Any) -> Any:
    if is_severity_token(value):
        return value
    if isinstance(value, (list, tuple)):
        if len(value) != 2:
            raise PydanticCustomError(
                "rule_declaration",
                "Rule declaration must be a severity or a [severity, options] pair, "
                "got {length} element(s)",
                {"length": len(value)},
            )
        severity, options = value
        if not is_severity_token(severity):
            raise PydanticCustomError(
                "rule_severity",
                "Severity must be one of 'off', 'warn', 'error', 0, 1, 2; got {severity}",
                {"severity": repr(severity)},
            )
        if not isinstance(options, Mapping):
            raise PydanticCustomError(
                "rule_options",
                "Rule options must be an object, got {kind}",
                {"kind": type(options).__name__},
            )
        return [severity, dict(options)]
    raise PydanticCustomError(
        "rule_severity",
        "Severity must be one of 'off', 'warn', 'error', 0, 1, 2; got {severity}",
        {"severity": repr(value)},
    )


RuleDeclaration = Annotated[Any, AfterValidator(_check_rule_declaration)]


class ConfigFile(BaseModel):
    """Top-level configuration object."""

    model_config = ConfigDict(extra="forbid")

    plugins: list[str] = Field(default_factory=list)
    rules: dict[str, RuleDeclaration] = Field(default_factory=dict)

    @field_validator("plugins")
    @classmethod
    def _unique_plugins(cls, value: list[str]) -> list[str]:
        duplicates = sorted({name for name in value if value.count(name) > 1})
        if duplicates:
            raise PydanticCustomError(
                "duplicate_plugin",
                "Plugins must be unique, duplicated: {names}",
                {"names": ", ".join(duplicates)},
            )
        return value


@dataclass(frozen=True)
class FieldError:
    """One schema violation: a JSON pointer into the config and a message."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path or '/'}: {self.message}"


def _escape_pointer(segment: str | int) -> str:
    return str(segment).replace("~", "~0").replace("/", "~1")


def _pointer(loc: tuple[str | int, ...]) -> str:
    # Dict key errors end with a "[key]" marker; the key itself is the location.
    parts = [p for p in loc if p != "[key]"]
    return "".join(f"/{_escape_pointer(p)}" for p in parts)


def validate_config(config: Any) -> list[FieldError]:
    """Validate a raw configuration object; return every field error found.

    Raises:
        TypeError: If ``config`` is not a mapping at all.
    """
    if not isinstance(config, Mapping):
        msg = f"Configuration must be an object, got {type(config).__name__}"
        raise TypeError(msg)
    try:
        ConfigFile.model_validate(dict(config))
    except ValidationError as exc:
        return [FieldError(path=_pointer(err["loc"]), message=err["msg"]) for err in exc.errors()]
    return []


def parse_config(config: Mapping[str, Any]) -> ConfigFile:
    """Parse an already-validated configuration into the schema model."""
    return ConfigFile.model_validate(dict(config))
