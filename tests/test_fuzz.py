# SPDX-License-Identifier: MIT
"""Property-based fuzz tests for config validation and rule-key parsing.

Uses hypothesis to generate arbitrary JSON-shaped configs and rule keys and
verify that validation never crashes and that accepted configs resolve cleanly.
"""

from __future__ import annotations

import os

from hypothesis import given, settings
from hypothesis import strategies as st

from sentinal.core.base import RULE_SEPARATOR, Severity, normalize_severity, split_rule_id
from sentinal.core.resolver import split_declaration
from sentinal.core.schema import FieldError, validate_config
from sentinal.errors import InvalidRuleNameError

# Set FUZZ_SLOW=1 for a deeper local run
_MAX_EXAMPLES = 5_000 if os.environ.get("FUZZ_SLOW") else 500

_JSON = st.recursive(
    st.none() | st.booleans() | st.integers() | st.floats(allow_nan=False) | st.text(max_size=20),
    lambda children: st.lists(children, max_size=4)
    | st.dictionaries(st.text(max_size=10), children, max_size=4),
    max_leaves=20,
)

_SEVERITY = st.sampled_from(["off", "warn", "error", 0, 1, 2])
_SEGMENT = st.text(alphabet="abcdefghijklmnopqrstuvwxyz-_", min_size=1, max_size=12)
_DECLARATION = _SEVERITY | st.tuples(
    _SEVERITY, st.dictionaries(st.text(max_size=8), _JSON, max_size=3)
).map(list)
_VALID_CONFIG = st.fixed_dictionaries(
    {
        "plugins": st.lists(_SEGMENT, unique=True, max_size=4),
        "rules": st.dictionaries(
            st.builds(lambda p, r: f"{p}/{r}", _SEGMENT, _SEGMENT), _DECLARATION, max_size=5
        ),
    }
)


class TestValidateConfigFuzz:
    @given(config=st.dictionaries(st.text(max_size=12), _JSON, max_size=5))
    @settings(max_examples=_MAX_EXAMPLES)
    def test_never_crashes(self, config: dict[str, object]) -> None:
        errors = validate_config(config)
        assert isinstance(errors, list)
        for error in errors:
            assert isinstance(error, FieldError)
            assert error.path == "" or error.path.startswith("/")

    @given(config=_VALID_CONFIG)
    @settings(max_examples=_MAX_EXAMPLES)
    def test_well_formed_configs_pass(self, config: dict[str, object]) -> None:
        assert validate_config(config) == []

    @given(config=_VALID_CONFIG)
    @settings(max_examples=_MAX_EXAMPLES)
    def test_valid_declarations_normalize(self, config: dict[str, dict[str, object]]) -> None:
        for declaration in config["rules"].values():
            severity, options = split_declaration(declaration)
            assert normalize_severity(severity) in set(Severity)
            assert isinstance(options, dict)


class TestSplitRuleIdFuzz:
    @given(rule_id=st.text(max_size=30))
    @settings(max_examples=_MAX_EXAMPLES)
    def test_accepts_exactly_one_separator(self, rule_id: str) -> None:
        parts = rule_id.split(RULE_SEPARATOR)
        well_formed = len(parts) == 2 and all(parts)
        try:
            plugin_name, rule_name = split_rule_id(rule_id)
        except InvalidRuleNameError:
            assert not well_formed
        else:
            assert well_formed
            assert f"{plugin_name}{RULE_SEPARATOR}{rule_name}" == rule_id
