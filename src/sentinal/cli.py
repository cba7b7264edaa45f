# SPDX-License-Identifier: MIT
"""Command-line entry point: parse flags, run the engine, print the report.

Exit codes:
    0 -- no issues found
    1 -- configuration, plugin, or rule resolution error
    2 -- issues found, or invalid command-line arguments
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from sentinal import __version__
from sentinal.core import Engine, RunResult, resolve_rules
from sentinal.core.config import ConfigResolver, write_init_config
from sentinal.core.engine import Strategy
from sentinal.core.settings import load_engine_options
from sentinal.errors import ConfigValidationError, RuleExecutionFailure, SentinalError
from sentinal.formatters import FORMATTERS, get_formatter

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ISSUES = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sentinal",
        description="Run the rules declared in a sentinal configuration file.",
        epilog="Run 'sentinal --init' to create a starter .sentinalrc.",
    )
    parser.add_argument("--version", action="version", version=f"v{__version__}")
    parser.add_argument(
        "--init",
        action="store_true",
        help="Write a default .sentinalrc in the current directory and exit",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Configuration file, or directory to search from (default: current directory)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Also print every issue in full and a per-rule summary",
    )
    parser.add_argument(
        "--format",
        choices=sorted(FORMATTERS),
        default="base",
        help="Output format (default: base)",
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in Strategy],
        default=None,
        help="Rule scheduling strategy (overrides SENTINAL_STRATEGY)",
    )
    parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        metavar="N",
        help="Rules in flight at once with --strategy concurrent",
    )
    parser.add_argument(
        "--rule-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Fail any rule that runs longer than this",
    )
    parser.add_argument(
        "--fail-on-rule-error",
        action="store_true",
        default=None,
        help="Exit non-zero when any rule raises instead of reporting",
    )
    return parser


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )


def print_results(result: RunResult, fmt: str) -> None:
    output = get_formatter(fmt)(result.issues, result.executed_rules)
    if output:
        print(output)


def _print_error(exc: SentinalError | ValueError) -> None:
    print(f"error: {exc}", file=sys.stderr)
    if isinstance(exc, ConfigValidationError):
        for field_error in exc.errors:
            print(f"  {field_error}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        # --help and --version exit 0; usage errors exit 2.
        return int(exc.code or 0)

    _configure_logging(args.debug)

    if args.init:
        try:
            target = write_init_config(Path.cwd())
        except FileExistsError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return EXIT_ERROR
        print(f"Created configuration file {target.name}")
        return EXIT_OK

    exit_code = EXIT_OK
    try:
        options = load_engine_options(
            strategy=args.strategy,
            max_concurrency=args.max_concurrency,
            rule_timeout=args.rule_timeout,
            fail_on_rule_error=args.fail_on_rule_error,
        )
        config = ConfigResolver().resolve(args.config)
        rules = resolve_rules(config)
    except (SentinalError, ValueError) as exc:
        _print_error(exc)
        return EXIT_ERROR

    try:
        result = Engine(options).run(rules)
    except RuleExecutionFailure as exc:
        result = exc.result
        exit_code = EXIT_ERROR

    for failure in result.failures:
        print(f"warning: rule {failure.rule_id} failed: {failure.message}", file=sys.stderr)

    if result.has_issues:
        print_results(result, args.format)
    if args.verbose:
        if result.has_issues:
            print_results(result, "verbose")
        if result.executed_rules:
            print_results(result, "summary")

    if exit_code:
        return exit_code
    return EXIT_ISSUES if result.has_issues else EXIT_OK
