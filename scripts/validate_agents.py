#!/usr/bin/env python3
"""
Artifact Validators - Agent Validator

Validates agent descriptor files (*.md) in the agents/ directory.
Each descriptor must open with a frontmatter block that declares a `model`
(one of haiku, sonnet, opus) and a non-empty `tools` list. Other fields are
allowed and ignored.

Usage:
    uv run python scripts/validate_agents.py
    uv run python scripts/validate_agents.py --root path/to/project --verbose
    uv run python scripts/validate_agents.py --json

Exit codes:
    0 - All agents valid (or no agents/ directory)
    1 - At least one agent is invalid
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
    extract_frontmatter,
    read_artifact,
)

# =============================================================================
# Constants
# =============================================================================

REQUIRED_FIELDS = ("model", "tools")

# Case-sensitive
VALID_MODELS = frozenset({"haiku", "sonnet", "opus"})


# =============================================================================
# Validation Functions
# =============================================================================


def list_agent_files(agents_dir: Path) -> list[Path]:
    """Agent descriptors directly inside agents_dir, sorted by name."""
    if not agents_dir.is_dir():
        return []
    return sorted(agents_dir.glob("*.md"))


def list_agent_names(agents_dir: Path) -> frozenset[str]:
    """Names other artifacts may refer to agents by (filename stems)."""
    return frozenset(path.stem for path in list_agent_files(agents_dir))


def validate_agent_content(content: str, filename: str, report: ValidationReport) -> bool:
    """Check one agent document. Returns True if it passed every check."""
    frontmatter = extract_frontmatter(content)
    if frontmatter is None:
        report.error("Missing frontmatter", filename)
        return False

    valid = True
    for name in REQUIRED_FIELDS:
        if not frontmatter.get(name, ""):
            report.error(f"Missing required field: {name}", filename)
            valid = False

    model = frontmatter.get("model", "")
    if model and model not in VALID_MODELS:
        report.error(f"Invalid model '{model}'. Must be one of: {', '.join(sorted(VALID_MODELS))}", filename)
        valid = False

    return valid


def validate_agents_directory(agents_dir: Path) -> ValidationReport:
    """Validate every agent descriptor in a directory.

    A missing directory is not an error: the report is marked skipped.
    """
    report = ValidationReport(subject="agent files")
    if not agents_dir.is_dir():
        report.skipped = "No agents directory found, skipping validation"
        return report

    for agent_path in list_agent_files(agents_dir):
        report.checked += 1
        try:
            content = read_artifact(agent_path)
        except (OSError, UnicodeDecodeError) as e:
            report.error(f"Cannot read file: {describe_read_error(e)}", agent_path.name)
            continue

        if validate_agent_content(content, agent_path.name, report):
            report.add_valid_item(agent_path.stem)
            report.passed("Valid agent descriptor", agent_path.name)

    return report


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_arg_parser("Validate agent descriptor files")
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    return emit_report(validate_agents_directory(config.agents_dir), args)


if __name__ == "__main__":
    sys.exit(main())
