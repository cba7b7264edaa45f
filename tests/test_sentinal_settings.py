# SPDX-License-Identifier: MIT
"""Tests for sentinal.core.settings: engine options from flags and environment."""

from __future__ import annotations

from pathlib import Path

import pytest

from sentinal.core.engine import Strategy
from sentinal.core.settings import load_engine_options

_ENV_VARS = (
    "SENTINAL_STRATEGY",
    "SENTINAL_MAX_CONCURRENCY",
    "SENTINAL_RULE_TIMEOUT",
    "SENTINAL_FAIL_ON_RULE_ERROR",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestLoadEngineOptions:
    def test_defaults(self, tmp_path: Path) -> None:
        options = load_engine_options(cwd=tmp_path)
        assert options.cwd == tmp_path
        assert options.strategy is Strategy.SEQUENTIAL
        assert options.max_concurrency == 4
        assert options.rule_timeout is None
        assert options.fail_on_rule_error is False

    def test_env_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SENTINAL_STRATEGY", "Concurrent")
        monkeypatch.setenv("SENTINAL_MAX_CONCURRENCY", "8")
        monkeypatch.setenv("SENTINAL_RULE_TIMEOUT", "2.5")
        monkeypatch.setenv("SENTINAL_FAIL_ON_RULE_ERROR", "yes")
        options = load_engine_options()
        assert options.strategy is Strategy.CONCURRENT
        assert options.max_concurrency == 8
        assert options.rule_timeout == 2.5
        assert options.fail_on_rule_error is True

    def test_cli_overrides_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SENTINAL_STRATEGY", "concurrent")
        monkeypatch.setenv("SENTINAL_MAX_CONCURRENCY", "8")
        monkeypatch.setenv("SENTINAL_FAIL_ON_RULE_ERROR", "true")
        options = load_engine_options(
            strategy="sequential", max_concurrency=2, fail_on_rule_error=False
        )
        assert options.strategy is Strategy.SEQUENTIAL
        assert options.max_concurrency == 2
        assert options.fail_on_rule_error is False

    def test_zero_timeout_means_none(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SENTINAL_RULE_TIMEOUT", "0")
        assert load_engine_options().rule_timeout is None

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ValueError, match="Unknown strategy"):
            load_engine_options(strategy="parallel")

    def test_unknown_env_strategy(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SENTINAL_STRATEGY", "random")
        with pytest.raises(ValueError, match="Unknown strategy"):
            load_engine_options()

    def test_non_numeric_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SENTINAL_MAX_CONCURRENCY", "many")
        with pytest.raises(ValueError, match="SENTINAL_MAX_CONCURRENCY"):
            load_engine_options()

    def test_unrecognized_bool_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SENTINAL_FAIL_ON_RULE_ERROR", "maybe")
        with pytest.raises(ValueError, match="SENTINAL_FAIL_ON_RULE_ERROR"):
            load_engine_options()

    def test_out_of_range_concurrency(self) -> None:
        with pytest.raises(ValueError, match="max_concurrency"):
            load_engine_options(max_concurrency=0)
