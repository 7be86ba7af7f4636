#!/usr/bin/env python3
"""
Artifact Validators - Rules Validator

Validates rule documents (.md) anywhere under the rules/ directory.
Rules are plain markdown; the only structural requirement is that a rule
file has content. Nested directories are walked, symlinks are followed, and
entries that are not regular files (a directory named `x.md`, a FIFO) are
skipped.

Usage:
    uv run python scripts/validate_rules.py
    uv run python scripts/validate_rules.py --root path/to/project --verbose
    uv run python scripts/validate_rules.py --json

Exit codes:
    0 - All rules valid (or no rules/ directory)
    1 - At least one rule is empty or unreadable
"""

from __future__ import annotations

import stat
import sys
from pathlib import Path

from artifact_validation_common import (
    EXIT_FAILED,
    ConfigError,
    ValidationReport,
    build_arg_parser,
    config_from_args,
    describe_read_error,
    emit_report,
    read_artifact,
)


def validate_rule_file(rule_path: Path, rel_path: str, report: ValidationReport) -> None:
    """Validate a single rule document, which is known to be a regular file."""
    report.checked += 1
    try:
        content = read_artifact(rule_path)
    except (OSError, UnicodeDecodeError) as e:
        report.error(f"Cannot read file: {describe_read_error(e)}", rel_path)
        return

    if not content.strip():
        report.error("Empty rule file", rel_path)
        return

    report.add_valid_item(rel_path)
    report.passed("Rule has content", rel_path)


def validate_rules_directory(rules_dir: Path) -> ValidationReport:
    """Validate every rule document under rules_dir, recursively."""
    report = ValidationReport(subject="rule files")
    if not rules_dir.is_dir():
        report.skipped = "No rules directory found, skipping validation"
        return report

    for rule_path in sorted(rules_dir.rglob("*.md")):
        rel_path = rule_path.relative_to(rules_dir).as_posix()

        # stat() follows symlinks, so a dangling link fails here
        try:
            mode = rule_path.stat().st_mode
        except OSError as e:
            report.error(f"Cannot stat file: {describe_read_error(e)}", rel_path)
            continue

        if not stat.S_ISREG(mode):
            report.info("Not a regular file, skipped", rel_path)
            continue

        validate_rule_file(rule_path, rel_path, report)

    return report


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_arg_parser("Validate rule documents")
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    return emit_report(validate_rules_directory(config.rules_dir), args)


if __name__ == "__main__":
    sys.exit(main())
