# SPDX-License-Identifier: MIT
"""Rule engine: runs resolved rules with isolated contexts and collects issues."""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

from sentinal.core.base import Issue, ResolvedRule
from sentinal.core.context import IssueCollector, RuleContext
from sentinal.errors import RuleExecutionFailure

log = logging.getLogger(__name__)


class Strategy(StrEnum):
    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


@dataclass(frozen=True)
class EngineOptions:
    """How the engine schedules rules and treats their failures."""

    cwd: Path = field(default_factory=Path.cwd)
    strategy: Strategy = Strategy.SEQUENTIAL
    max_concurrency: int = 4
    rule_timeout: float | None = None
    fail_on_rule_error: bool = False

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            msg = f"max_concurrency must be >= 1, got {self.max_concurrency}"
            raise ValueError(msg)
        if self.rule_timeout is not None and self.rule_timeout <= 0:
            msg = f"rule_timeout must be > 0, got {self.rule_timeout}"
            raise ValueError(msg)


@dataclass(frozen=True)
class RuleFailure:
    """A rule whose invocation raised, rejected, or ran past its deadline."""

    rule_id: str
    plugin_name: str
    rule_name: str
    cause: BaseException

    @property
    def timed_out(self) -> bool:
        return isinstance(self.cause, TimeoutError)

    @property
    def message(self) -> str:
        if self.timed_out:
            return "timed out"
        return f"{type(self.cause).__name__}: {self.cause}"


@dataclass(frozen=True)
class RunResult:
    """Issues reported during a run, the rules that ran, and the rules that failed."""

    issues: tuple[Issue, ...] = ()
    executed_rules: tuple[str, ...] = ()
    failures: tuple[RuleFailure, ...] = ()

    @property
    def has_issues(self) -> bool:
        return len(self.issues) > 0

    @property
    def has_failures(self) -> bool:
        return len(self.failures) > 0


class Engine:
    """Executes resolved rules and aggregates what they report.

    Rules with severity ``off`` are not executed. A failing rule is recorded as
    a RuleFailure and the remaining rules still run.
    """

    def __init__(self, options: EngineOptions | None = None) -> None:
        self.options = options or EngineOptions()

    def run(self, rules: Sequence[ResolvedRule]) -> RunResult:
        """Run from synchronous code (starts its own event loop)."""
        return asyncio.run(self.run_async(rules))

    async def run_async(self, rules: Sequence[ResolvedRule]) -> RunResult:
        active = [rule for rule in rules if rule.active]
        skipped = len(rules) - len(active)
        if skipped:
            log.debug("Skipping %d rule(s) with severity off", skipped)

        collector = IssueCollector()
        if self.options.strategy is Strategy.CONCURRENT:
            semaphore = asyncio.Semaphore(self.options.max_concurrency)

            async def _bounded(rule: ResolvedRule) -> RuleFailure | None:
                async with semaphore:
                    return await self._invoke(rule, collector, in_thread=True)

            outcomes = await asyncio.gather(*(_bounded(rule) for rule in active))
        else:
            outcomes = []
            for rule in active:
                in_thread = self.options.rule_timeout is not None
                outcomes.append(await self._invoke(rule, collector, in_thread=in_thread))

        result = RunResult(
            issues=collector.issues,
            executed_rules=tuple(rule.rule_id for rule in active),
            failures=tuple(f for f in outcomes if f is not None),
        )
        if result.failures and self.options.fail_on_rule_error:
            raise RuleExecutionFailure(result.failures, result)
        return result

    async def _invoke(
        self, rule: ResolvedRule, collector: IssueCollector, *, in_thread: bool
    ) -> RuleFailure | None:
        """Run one rule; return a RuleFailure instead of raising."""
        ctx = RuleContext(
            rule, collector, cwd=self.options.cwd, timeout=self.options.rule_timeout
        )
        log.debug("Running rule %s (severity=%s)", rule.rule_id, rule.severity)
        try:
            await asyncio.wait_for(self._call(rule, ctx, in_thread=in_thread), ctx.timeout)
        except Exception as exc:
            if isinstance(exc, TimeoutError):
                log.warning("Rule %s timed out after %ss", rule.rule_id, ctx.timeout)
            else:
                log.warning("Rule %s failed: %s", rule.rule_id, exc, exc_info=True)
            return RuleFailure(
                rule_id=rule.rule_id,
                plugin_name=rule.plugin_name,
                rule_name=rule.rule_name,
                cause=exc,
            )
        finally:
            ctx.close()
        return None

    async def _call(self, rule: ResolvedRule, ctx: RuleContext, *, in_thread: bool) -> None:
        target = rule.implementation
        if inspect.isclass(target):
            target = target()
        create = target.create
        if in_thread and not inspect.iscoroutinefunction(create):
            outcome: Any = await _run_in_thread(create, ctx)
        else:
            outcome = create(ctx)
        if inspect.isawaitable(outcome):
            await outcome


def _run_in_thread(fn: Callable[[RuleContext], Any], ctx: RuleContext) -> asyncio.Future[Any]:
    """Run a synchronous ``create`` on a daemon thread.

    Unlike the loop's default executor, an abandoned (timed-out) thread never
    holds up event loop shutdown.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def _settle(result: Any, error: BaseException | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def _target() -> None:
        result: Any = None
        error: BaseException | None = None
        try:
            result = fn(ctx)
        except Exception as exc:
            error = exc
        except BaseException as exc:
            error = RuntimeError(f"rule raised {type(exc).__name__}")
            error.__cause__ = exc
        try:
            loop.call_soon_threadsafe(_settle, result, error)
        except RuntimeError:
            log.debug("Event loop closed before %s finished", ctx.rule_id)

    threading.Thread(target=_target, name=f"sentinal-{ctx.rule_id}", daemon=True).start()
    return future
