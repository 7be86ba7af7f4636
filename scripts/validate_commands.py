#!/usr/bin/env python3
"""
Artifact Validators - Command Validator

Validates command documents (*.md) in the commands/ directory: each must be
non-empty, and every slash command, agent path, workflow chain and skill
directory it mentions must exist. See reference_scanner.py for the
reference shapes and the fence/hypothetical-output exclusions.

The set of existing artifacts is built once per run from the commands/,
agents/ and skills/ directories. Missing directories contribute nothing.

Usage:
    uv run python scripts/validate_commands.py
    uv run python scripts/validate_commands.py --root path/to/project --verbose
    uv run python scripts/validate_commands.py --json

Exit codes:
    0 - All commands valid (or no commands/ directory); skill warnings allowed
    1 - At least one command is empty, unreadable, or has a dangling reference
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
from reference_scanner import ReferenceIndex, check_references
from validate_agents import list_agent_names
from validate_skills import list_skill_names


def list_command_files(commands_dir: Path) -> list[Path]:
    if not commands_dir.is_dir():
        return []
    return sorted(commands_dir.glob("*.md"))


def build_reference_index(commands_dir: Path, agents_dir: Path, skills_dir: Path) -> ReferenceIndex:
    """Snapshot of the artifacts that exist right now."""
    return ReferenceIndex(
        commands=frozenset(path.stem for path in list_command_files(commands_dir)),
        agents=list_agent_names(agents_dir),
        skills=list_skill_names(skills_dir),
    )


def validate_command_file(command_path: Path, index: ReferenceIndex, report: ValidationReport) -> None:
    """Validate one command document and its references."""
    filename = command_path.name
    report.checked += 1
    try:
        content = read_artifact(command_path)
    except (OSError, UnicodeDecodeError) as e:
        report.error(f"Cannot read file: {describe_read_error(e)}", filename)
        return

    if not content.strip():
        report.error("Empty command file", filename)
        return

    if check_references(content, filename, index, report):
        report.add_valid_item(command_path.stem)
        report.passed("All references resolve", filename)


def validate_commands_directory(commands_dir: Path, index: ReferenceIndex) -> ValidationReport:
    """Validate every command document in commands_dir against index."""
    report = ValidationReport(subject="command files")
    if not commands_dir.is_dir():
        report.skipped = "No commands directory found, skipping validation"
        return report

    for command_path in list_command_files(commands_dir):
        validate_command_file(command_path, index, report)

    return report


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_arg_parser("Validate command documents and their cross-references")
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    index = build_reference_index(config.commands_dir, config.agents_dir, config.skills_dir)
    return emit_report(validate_commands_directory(config.commands_dir, index), args)


if __name__ == "__main__":
    sys.exit(main())
