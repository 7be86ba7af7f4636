#!/usr/bin/env python3
"""
Artifact Validators - Skill Validator

Validates skill bundles in the skills/ directory. Every immediate
subdirectory is a bundle and must contain a non-empty SKILL.md. Plain files
sitting directly in skills/ are not bundles and are ignored.

Usage:
    uv run python scripts/validate_skills.py
    uv run python scripts/validate_skills.py --root path/to/project --verbose
    uv run python scripts/validate_skills.py --json

Exit codes:
    0 - All skill bundles valid (or no skills/ directory)
    1 - At least one bundle is missing or has an empty/unreadable SKILL.md
"""

from __future__ import annotations

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

SKILL_FILENAME = "SKILL.md"


def list_skill_dirs(skills_dir: Path) -> list[Path]:
    """Skill bundle directories, sorted by name.

    is_dir() follows symlinks, so a link to a bundle counts and a dangling
    link does not.
    """
    if not skills_dir.is_dir():
        return []
    return sorted(entry for entry in skills_dir.iterdir() if entry.is_dir())


def list_skill_names(skills_dir: Path) -> frozenset[str]:
    """Names other artifacts may refer to skills by (bundle directory names)."""
    return frozenset(entry.name for entry in list_skill_dirs(skills_dir))


def validate_skill_dir(skill_dir: Path, report: ValidationReport) -> None:
    """Validate one skill bundle."""
    name = skill_dir.name
    skill_md = skill_dir / SKILL_FILENAME
    report.checked += 1

    if not skill_md.exists() and not skill_md.is_symlink():
        report.error(f"Missing {SKILL_FILENAME}", f"{name}/")
        return

    location = f"{name}/{SKILL_FILENAME}"
    try:
        content = read_artifact(skill_md)
    except (OSError, UnicodeDecodeError) as e:
        report.error(describe_read_error(e), location)
        return

    if not content.strip():
        report.error("Empty file", location)
        return

    report.add_valid_item(name)
    report.passed("Valid skill bundle", f"{name}/")


def validate_skills_directory(skills_dir: Path) -> ValidationReport:
    """Validate every skill bundle under skills_dir."""
    report = ValidationReport(subject="skill directories")
    if not skills_dir.is_dir():
        report.skipped = "No skills directory found, skipping validation"
        return report

    for skill_dir in list_skill_dirs(skills_dir):
        validate_skill_dir(skill_dir, report)

    return report


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_arg_parser("Validate skill bundles")
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    return emit_report(validate_skills_directory(config.skills_dir), args)


if __name__ == "__main__":
    sys.exit(main())
