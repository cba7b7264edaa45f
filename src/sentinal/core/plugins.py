# SPDX-License-Identifier: MIT
"""Plugin loading and the memoizing plugin registry."""

from __future__ import annotations

import asyncio
import importlib
import inspect
import logging
import threading
from collections.abc import Iterable, Mapping
from importlib.metadata import entry_points
from types import ModuleType
from typing import Any, Protocol, runtime_checkable

from sentinal.core.base import PluginModule, is_rule, split_rule_id
from sentinal.errors import PluginLoadError, ResolutionErrors, SentinalError

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "sentinal.plugins"
MODULE_PREFIX = "sentinal_plugin_"


@runtime_checkable
class PluginLoader(Protocol):
    """Turns a plugin name into a plugin (a PluginModule or a module-like object).

    ``load`` may also return an awaitable; the async registry path awaits it.
    """

    def load(self, name: str) -> Any: ...


class StaticPluginLoader:
    """Serves plugins from an in-memory mapping of name -> plugin."""

    def __init__(self, plugins: Mapping[str, Any]) -> None:
        self._plugins = dict(plugins)

    def load(self, name: str) -> Any:
        try:
            return self._plugins[name]
        except KeyError:
            msg = f"no plugin named {name!r} is registered"
            raise LookupError(msg) from None


class ImportPluginLoader:
    """Loads plugins from installed Python packages.

    Lookup order: the ``sentinal.plugins`` entry-point group, then the module
    ``sentinal_plugin_<name>`` (dashes become underscores), then ``name`` as a
    dotted module path.
    """

    def __init__(self, group: str = ENTRY_POINT_GROUP, prefix: str = MODULE_PREFIX) -> None:
        self.group = group
        self.prefix = prefix

    def load(self, name: str) -> Any:
        for ep in entry_points(group=self.group):
            if ep.name == name:
                log.debug("Loading plugin %s from entry point %s", name, ep.value)
                return ep.load()

        candidates = [f"{self.prefix}{name.replace('-', '_')}"]
        if name.replace(".", "").replace("_", "").isalnum():
            candidates.append(name)
        for module_name in candidates:
            try:
                module = importlib.import_module(module_name)
            except ModuleNotFoundError as exc:
                # Only a miss on the candidate itself means "try the next one".
                if exc.name != module_name and not module_name.startswith(f"{exc.name}."):
                    raise
                continue
            log.debug("Loading plugin %s from module %s", name, module_name)
            return module
        msg = f"no entry point or module found (tried: {', '.join(candidates)})"
        raise ModuleNotFoundError(msg)


def coerce_plugin(name: str, raw: Any) -> PluginModule:
    """Validate a loader's export and return it as a PluginModule.

    Accepts a PluginModule, a module (or object) exposing ``plugin`` or
    ``rules``, or a mapping with a ``rules`` key.

    Raises:
        PluginLoadError: If the export is missing ``rules``, ``rules`` is not a
            mapping, or any rule lacks a callable ``create``.
    """
    if isinstance(raw, PluginModule):
        plugin = raw if raw.name == name else PluginModule(name=name, rules=raw.rules)
    else:
        if isinstance(raw, ModuleType) and isinstance(getattr(raw, "plugin", None), PluginModule):
            return coerce_plugin(name, raw.plugin)
        rules = raw.get("rules") if isinstance(raw, Mapping) else getattr(raw, "rules", None)
        if rules is None:
            raise PluginLoadError(name, "plugin does not export 'rules'")
        if not isinstance(rules, Mapping):
            raise PluginLoadError(
                name, f"'rules' must be a mapping, got {type(rules).__name__}"
            )
        plugin = PluginModule(name=name, rules=rules)

    for rule_name, rule in plugin.rules.items():
        if not isinstance(rule_name, str):
            raise PluginLoadError(name, f"rule id {rule_name!r} is not a string")
        if not is_rule(rule):
            raise PluginLoadError(name, f"rule {rule_name!r} has no callable 'create'")
    return plugin


class PluginRegistry:
    """Loads each plugin at most once and answers rule lookups.

    Both successes and failures are memoized, so the loader is called exactly
    once per distinct name for the registry's lifetime.
    """

    def __init__(self, loader: PluginLoader | None = None) -> None:
        self.loader = loader or ImportPluginLoader()
        self._modules: dict[str, PluginModule] = {}
        self._failures: dict[str, PluginLoadError] = {}
        self._pending: dict[str, asyncio.Future[PluginModule]] = {}
        self._lock = threading.Lock()

    # --- Loading ---

    def load(self, names: Iterable[str], *, fail_fast: bool = True) -> dict[str, PluginModule]:
        """Load every named plugin, in order.

        Raises:
            PluginLoadError: First failure, when ``fail_fast`` (the default).
            ResolutionErrors: Every failure, when not ``fail_fast``.
        """
        loaded: dict[str, PluginModule] = {}
        errors: list[SentinalError] = []
        for name in names:
            try:
                loaded[name] = self.load_plugin(name)
            except PluginLoadError as exc:
                if fail_fast:
                    raise
                errors.append(exc)
        if errors:
            raise ResolutionErrors(errors)
        return loaded

    def load_plugin(self, name: str) -> PluginModule:
        with self._lock:
            cached = self._cached(name)
            if cached is not None:
                return cached
            try:
                raw = self.loader.load(name)
                if inspect.isawaitable(raw):
                    if inspect.iscoroutine(raw):
                        raw.close()
                    msg = "loader returned an awaitable; use load_plugin_async"
                    raise TypeError(msg)
                return self._store(name, raw)
            except Exception as exc:
                error = self._fail(name, exc)
                if error is exc:
                    raise
                raise error from exc

    async def load_plugin_async(self, name: str) -> PluginModule:
        """Load a plugin from async code; concurrent callers share one in-flight load."""
        with self._lock:
            cached = self._cached(name)
            if cached is not None:
                return cached
            pending = self._pending.get(name)
            if pending is None:
                pending = asyncio.get_running_loop().create_future()
                self._pending[name] = pending
                owner = True
            else:
                owner = False
        if not owner:
            return await asyncio.shield(pending)

        try:
            raw = self.loader.load(name)
            if inspect.isawaitable(raw):
                raw = await raw
            with self._lock:
                module = self._store(name, raw)
        except Exception as exc:
            with self._lock:
                error = self._fail(name, exc)
            pending.set_exception(error)
            # Mark retrieved so a load nobody else awaited does not warn.
            pending.exception()
            if error is exc:
                raise
            raise error from exc
        else:
            pending.set_result(module)
            return module
        finally:
            if not pending.done():
                # Owner was cancelled mid-load; release the waiters but do not
                # memoize, so a later call can retry.
                pending.set_exception(PluginLoadError(name, "load was cancelled"))
                pending.exception()
            with self._lock:
                self._pending.pop(name, None)

    def _cached(self, name: str) -> PluginModule | None:
        if name in self._failures:
            raise self._failures[name]
        return self._modules.get(name)

    def _store(self, name: str, raw: Any) -> PluginModule:
        module = coerce_plugin(name, raw)
        self._modules[name] = module
        log.debug("Loaded plugin %s with %d rule(s)", name, len(module.rules))
        return module

    def _fail(self, name: str, exc: Exception) -> PluginLoadError:
        error = exc if isinstance(exc, PluginLoadError) else PluginLoadError(name, exc)
        self._failures[name] = error
        return error

    # --- Lookup ---

    @property
    def plugins(self) -> dict[str, PluginModule]:
        return dict(self._modules)

    def get(self, name: str) -> PluginModule | None:
        return self._modules.get(name)

    def lookup(self, rule_id: str) -> Any | None:
        """Return the implementation for ``<plugin>/<rule>``, or None if nothing exports it.

        Raises:
            InvalidRuleNameError: If ``rule_id`` is not shaped ``<plugin>/<rule>``.
        """
        plugin_name, rule_name = split_rule_id(rule_id)
        module = self._modules.get(plugin_name)
        if module is None:
            return None
        return module.rules.get(rule_name)

    def rule_ids(self) -> list[str]:
        """All loaded rule ids, namespaced by plugin, in load order."""
        return [
            f"{plugin_name}/{rule_name}"
            for plugin_name, module in self._modules.items()
            for rule_name in module.rules
        ]
