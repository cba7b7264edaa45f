# SPDX-License-Identifier: MIT
"""Configuration loading: locate a config file, parse it, validate it."""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

import yaml

from sentinal.core.schema import FieldError, parse_config, validate_config
from sentinal.errors import ConfigNotFoundError, ConfigPathNotFoundError, ConfigValidationError

log = logging.getLogger(__name__)

MODULE_NAME = "sentinal"
RC_FILENAME = f".{MODULE_NAME}rc"

# Checked in order inside each directory while walking up the tree.
SEARCH_PLACES: tuple[str, ...] = (
    RC_FILENAME,
    f"{RC_FILENAME}.json",
    f"{RC_FILENAME}.yaml",
    f"{RC_FILENAME}.yml",
    f"{MODULE_NAME}.config.json",
    "pyproject.toml",
)

INIT_TEMPLATE: dict[str, Any] = {
    "plugins": [],
    "rules": {},
}


@dataclass(frozen=True)
class LoadedConfig:
    """A raw, not yet validated configuration object and the file it came from."""

    config: Any
    filepath: Path


@runtime_checkable
class ConfigSource(Protocol):
    """Locates and parses configuration files."""

    def load_exact(self, path: Path) -> LoadedConfig: ...

    def search(self, start_dir: Path) -> LoadedConfig: ...


def _parse_error(path: Path, exc: Exception) -> ConfigValidationError:
    return ConfigValidationError(
        "Invalid sentinal configuration file",
        path,
        [FieldError(path="", message=f"Could not parse configuration: {exc}")],
    )


class FileConfigSource:
    """Default ConfigSource: rc files (YAML/JSON) and ``[tool.sentinal]`` in pyproject.toml."""

    def __init__(
        self,
        module_name: str = MODULE_NAME,
        search_places: tuple[str, ...] = SEARCH_PLACES,
        stop_dir: Path | None = None,
    ) -> None:
        self.module_name = module_name
        self.search_places = search_places
        self.stop_dir = Path(stop_dir).resolve() if stop_dir is not None else None

    def load_exact(self, path: Path) -> LoadedConfig:
        target = Path(path).resolve()
        if not target.is_file():
            raise ConfigPathNotFoundError(target)
        try:
            config = self._read(target)
        except OSError as exc:
            raise ConfigPathNotFoundError(target, str(exc)) from exc
        if config is None:
            raise ConfigPathNotFoundError(target, f"no [tool.{self.module_name}] table")
        return LoadedConfig(config=config, filepath=target)

    def search(self, start_dir: Path) -> LoadedConfig:
        start = Path(start_dir).resolve()
        for directory in (start, *start.parents):
            for name in self.search_places:
                candidate = directory / name
                if not candidate.is_file():
                    continue
                try:
                    config = self._read(candidate)
                except OSError as exc:
                    raise ConfigPathNotFoundError(candidate, str(exc)) from exc
                if config is None:
                    continue
                log.debug("Found configuration file %s", candidate)
                return LoadedConfig(config=config, filepath=candidate)
            if directory == self.stop_dir:
                break
        raise ConfigNotFoundError(start)

    def _read(self, path: Path) -> Any:
        """Parse one candidate file. Returns None when it holds no sentinal section."""
        try:
            text = path.read_text(encoding="utf-8")
            if path.name == "pyproject.toml":
                return tomllib.loads(text).get("tool", {}).get(self.module_name)
            if path.suffix == ".json":
                return json.loads(text)
            # Extensionless rc files may hold YAML or JSON; YAML parses both.
            data = yaml.safe_load(text)
        except (
            UnicodeDecodeError,
            json.JSONDecodeError,
            tomllib.TOMLDecodeError,
            yaml.YAMLError,
        ) as exc:
            raise _parse_error(path, exc) from exc
        return {} if data is None else data


@dataclass(frozen=True)
class ValidatedConfig:
    """Schema-valid configuration: declared plugins and rule declarations, in file order."""

    plugins: tuple[str, ...] = ()
    rules: Mapping[str, Any] = field(default_factory=dict)
    filepath: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))


class ConfigResolver:
    """Loads a configuration through a ConfigSource and validates it.

    A directory (or no path) is searched; anything else is loaded as an exact
    file path.
    """

    def __init__(self, source: ConfigSource | None = None) -> None:
        self.source = source or FileConfigSource()

    def resolve(self, start_path: Path | str | None = None) -> ValidatedConfig:
        path = Path(start_path) if start_path is not None else Path.cwd()
        if path.is_dir():
            loaded = self.source.search(path)
        else:
            loaded = self.source.load_exact(path)
        log.debug("Config file %s loaded, validating schema", loaded.filepath)
        return self.validate(loaded)

    def validate(self, loaded: LoadedConfig) -> ValidatedConfig:
        if not isinstance(loaded.config, Mapping):
            errors = [
                FieldError(
                    path="",
                    message=f"Configuration must be an object, got {type(loaded.config).__name__}",
                )
            ]
        else:
            errors = validate_config(loaded.config)
        if errors:
            raise ConfigValidationError(
                "Invalid sentinal configuration file", loaded.filepath, errors
            )
        model = parse_config(loaded.config)
        return ValidatedConfig(
            plugins=tuple(model.plugins),
            rules=model.rules,
            filepath=loaded.filepath,
        )


def write_init_config(directory: Path | str) -> Path:
    """Write the starter ``.sentinalrc`` into ``directory``.

    Raises:
        FileExistsError: If the directory already holds one.
    """
    target = Path(directory) / RC_FILENAME
    if target.exists():
        msg = f"{target} already exists"
        raise FileExistsError(msg)
    target.write_text(json.dumps(INIT_TEMPLATE, indent=4) + "\n", encoding="utf-8")
    return target
