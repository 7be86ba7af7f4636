#!/usr/bin/env python3
"""
Artifact Validators - Run All Validators

Runs the agent, command, rule, skill and hook validators over one project
root and prints each section in turn, then a combined summary. The run
fails if any validator failed.

Usage:
    uv run python scripts/validate_all.py
    uv run python scripts/validate_all.py --root path/to/project --verbose
    uv run python scripts/validate_all.py --json
"""

from __future__ import annotations

import json
import sys

from artifact_validation_common import (
    EXIT_FAILED,
    ConfigError,
    ValidationReport,
    ValidatorConfig,
    build_arg_parser,
    config_from_args,
    print_results,
)
from validate_agents import validate_agents_directory
from validate_commands import build_reference_index, validate_commands_directory
from validate_hooks import validate_hooks_file
from validate_rules import validate_rules_directory
from validate_skills import validate_skills_directory


def run_all(config: ValidatorConfig) -> dict[str, ValidationReport]:
    """Run every validator. Keys are section names in output order."""
    index = build_reference_index(config.commands_dir, config.agents_dir, config.skills_dir)
    return {
        "agents": validate_agents_directory(config.agents_dir),
        "commands": validate_commands_directory(config.commands_dir, index),
        "rules": validate_rules_directory(config.rules_dir),
        "skills": validate_skills_directory(config.skills_dir),
        "hooks": validate_hooks_file(config.hooks_file),
    }


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_arg_parser("Run every artifact validator")
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    reports = run_all(config)
    total = ValidationReport(subject="artifacts")
    for report in reports.values():
        total.merge(report)

    if args.json:
        output = {
            "exit_code": total.exit_code,
            "summary": total.summary(),
            "sections": {name: report.to_dict() for name, report in reports.items()},
        }
        print(json.dumps(output, indent=2))
        return total.exit_code

    for name, report in reports.items():
        print(f"== {name} ==")
        print_results(report, args.verbose)

    print(f"== total ==\n{total.summary()}")
    return total.exit_code


if __name__ == "__main__":
    sys.exit(main())
