#!/usr/bin/env python3
"""
Artifact Validators - Common Module

Shared validation infrastructure for all artifact validators.
This module contains:
- Type definitions (Level, ValidationResult, ValidationReport)
- Exit codes and terminal output helpers
- The frontmatter extractor shared by agent and skill documents
- Configuration loading (artifact-validators.yaml) and shared CLI options

All individual validators should import from this module to ensure consistency.
"""

from __future__ import annotations

import argparse
import json
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, TextIO

import yaml

# =============================================================================
# Type Definitions
# =============================================================================

# Validation result severity levels
# - ERROR: blocks validation (non-zero exit code)
# - WARNING: never blocks, always reported
# - INFO: informational only, shown in verbose mode
# - PASSED: check passed, shown in verbose mode
Level = Literal["ERROR", "WARNING", "INFO", "PASSED"]

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_OK = 0  # No violations (or target absent, or only warnings)
EXIT_FAILED = 1  # At least one violation, or a fatal input error

# =============================================================================
# Conventional Locations
# =============================================================================

CONFIG_FILENAME = "artifact-validators.yaml"
ROOT_ENV_VAR = "ARTIFACT_VALIDATORS_ROOT"

DEFAULT_LOCATIONS = {
    "agents_dir": "agents",
    "commands_dir": "commands",
    "rules_dir": "rules",
    "skills_dir": "skills",
    "hooks_file": "hooks/hooks.json",
}

# =============================================================================
# Exceptions
# =============================================================================


class ConfigError(Exception):
    """Raised when artifact-validators.yaml cannot be used."""


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ValidationResult:
    """Single validation check result.

    Attributes:
        level: Severity level (ERROR, WARNING, INFO, PASSED)
        message: Human-readable description of the result
        file: Optional artifact the result is attributed to
        line: Optional line number in the artifact
    """

    level: Level
    message: str
    file: str | None = None
    line: int | None = None

    @property
    def location(self) -> str | None:
        if self.file is None:
            return None
        if self.line is not None:
            return f"{self.file}:{self.line}"
        return self.file

    def to_dict(self) -> dict[str, str | int | None]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, str | int | None] = {"level": self.level, "message": self.message}
        if self.file is not None:
            result["file"] = self.file
        if self.line is not None:
            result["line"] = self.line
        return result


@dataclass
class ValidationReport:
    """Accumulated outcome of one validation pass.

    Every validator returns one of these instead of printing as it goes, so
    callers can merge passes (see validate_all.py) and decide the exit status
    from the aggregate.

    Attributes:
        subject: Plural noun for what was checked ("agent files")
        results: Ordered results of every check
        valid_items: Identities of artifacts that passed every check
        checked: Number of artifacts examined
        skipped: Reason the pass did nothing (target absent), if any
    """

    subject: str = "artifacts"
    results: list[ValidationResult] = field(default_factory=list)
    valid_items: list[str] = field(default_factory=list)
    checked: int = 0
    skipped: str | None = None

    def add(self, level: Level, message: str, file: str | None = None, line: int | None = None) -> None:
        """Add a validation result."""
        self.results.append(ValidationResult(level, message, file, line))

    def error(self, message: str, file: str | None = None, line: int | None = None) -> None:
        """Add a violation."""
        self.add("ERROR", message, file, line)

    def warning(self, message: str, file: str | None = None, line: int | None = None) -> None:
        """Add a warning. Always reported, never blocks validation."""
        self.add("WARNING", message, file, line)

    def info(self, message: str, file: str | None = None) -> None:
        self.add("INFO", message, file)

    def passed(self, message: str, file: str | None = None) -> None:
        self.add("PASSED", message, file)

    def add_valid_item(self, item: str) -> None:
        self.valid_items.append(item)

    @property
    def has_errors(self) -> bool:
        return any(r.level == "ERROR" for r in self.results)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if r.level == "ERROR")

    @property
    def warning_count(self) -> int:
        return sum(1 for r in self.results if r.level == "WARNING")

    @property
    def exit_code(self) -> int:
        """Exit code for this report. Warnings never affect it."""
        return EXIT_FAILED if self.has_errors else EXIT_OK

    def count_by_level(self) -> dict[str, int]:
        """Get count of results by level."""
        counts: dict[str, int] = {"ERROR": 0, "WARNING": 0, "INFO": 0, "PASSED": 0}
        for r in self.results:
            counts[r.level] += 1
        return counts

    def merge(self, other: ValidationReport) -> None:
        """Merge results and counters from another report into this one."""
        self.results.extend(other.results)
        self.valid_items.extend(other.valid_items)
        self.checked += other.checked

    def summary(self) -> str:
        """One-line outcome for stdout."""
        if self.has_errors:
            return f"Validation failed: {self.error_count} error(s) in {self.checked} {self.subject}"
        text = f"Validated {self.checked} {self.subject}"
        if self.warning_count:
            text += f" ({self.warning_count} warnings)"
        return text

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "subject": self.subject,
            "exit_code": self.exit_code,
            "checked": self.checked,
            "skipped": self.skipped,
            "summary": self.summary(),
            "counts": self.count_by_level(),
            "results": [r.to_dict() for r in self.results],
            "valid_items": self.valid_items,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# =============================================================================
# Frontmatter Extraction
# =============================================================================

BOM = "\ufeff"
FRONTMATTER_PATTERN = re.compile(r"\A---\n(.*?)\n---", re.DOTALL)


def normalize_newlines(text: str) -> str:
    """Drop a leading BOM and convert CRLF line endings to LF."""
    if text.startswith(BOM):
        text = text[len(BOM) :]
    return text.replace("\r\n", "\n")


def extract_frontmatter(content: str) -> dict[str, str] | None:
    """Extract the leading ``key: value`` block of a markdown document.

    The block must start on the first line with ``---`` and end at the next
    ``---`` line. Values are not interpreted: everything after the first colon
    is kept as a trimmed string. Lines without a colon, or starting with one,
    are ignored.

    Args:
        content: Raw document text (BOM and CRLF tolerated)

    Returns:
        Ordered mapping of fields, or None if the document has no block.
        A block with no usable lines yields an empty mapping, which is
        different from None.
    """
    match = FRONTMATTER_PATTERN.match(normalize_newlines(content))
    if match is None:
        return None

    fields: dict[str, str] = {}
    for line in match.group(1).split("\n"):
        key, sep, value = line.partition(":")
        if not sep or not key:
            continue
        fields[key.strip()] = value.strip()
    return fields


def read_artifact(path: Path) -> str:
    """Read an artifact as UTF-8 text.

    Raises:
        OSError: The path cannot be read (missing, directory, permissions)
        UnicodeDecodeError: The file is not valid UTF-8
    """
    return path.read_text(encoding="utf-8")


def describe_read_error(error: Exception) -> str:
    """Short description of a read failure for error output."""
    if isinstance(error, UnicodeDecodeError):
        return f"not valid UTF-8 ({error.reason})"
    if isinstance(error, OSError) and error.strerror:
        return error.strerror
    return str(error)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class ValidatorConfig:
    """Resolved locations of every artifact kind under one project root."""

    root: Path
    agents_dir: Path
    commands_dir: Path
    rules_dir: Path
    skills_dir: Path
    hooks_file: Path


def resolve_root(cli_root: str | None) -> Path:
    """Project root: --root, then $ARTIFACT_VALIDATORS_ROOT, then the cwd."""
    if cli_root:
        return Path(cli_root)
    env_root = os.environ.get(ROOT_ENV_VAR, "").strip()
    if env_root:
        return Path(env_root)
    return Path.cwd()


def load_config(root: Path) -> ValidatorConfig:
    """Build the location config for a project root.

    Reads the optional artifact-validators.yaml at the root. Only the keys
    in DEFAULT_LOCATIONS are accepted, each as a path relative to the root.

    Raises:
        ConfigError: The file is unreadable, not valid YAML, not a mapping,
            or contains unknown keys or non-string values
    """
    locations = dict(DEFAULT_LOCATIONS)
    config_path = root / CONFIG_FILENAME

    if config_path.is_file():
        try:
            data: Any = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read {CONFIG_FILENAME}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {CONFIG_FILENAME}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"{CONFIG_FILENAME} must be a mapping, got {type(data).__name__}")

        for key, value in data.items():
            if key not in DEFAULT_LOCATIONS:
                raise ConfigError(f"Unknown key '{key}' in {CONFIG_FILENAME}. Valid keys: {sorted(DEFAULT_LOCATIONS)}")
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"'{key}' in {CONFIG_FILENAME} must be a non-empty string")
            locations[key] = value.strip()

    return ValidatorConfig(root=root, **{key: root / value for key, value in locations.items()})


def build_arg_parser(description: str) -> argparse.ArgumentParser:
    """Argument parser with the options every validator accepts."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--root", help=f"Project root (default: ${ROOT_ENV_VAR} or the current directory)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show all results including passed checks")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    return parser


def config_from_args(args: argparse.Namespace) -> ValidatorConfig:
    return load_config(resolve_root(args.root))


# =============================================================================
# Color Formatting (for terminal output)
# =============================================================================

# ANSI color codes
COLORS = {
    "ERROR": "\033[91m",  # Red
    "WARNING": "\033[95m",  # Magenta
    "INFO": "\033[90m",  # Gray
    "PASSED": "\033[92m",  # Green
    "RESET": "\033[0m",
    "BOLD": "\033[1m",
}

# Prefix printed in front of each result line
LEVEL_PREFIX = {"ERROR": "ERROR", "WARNING": "WARN", "INFO": "INFO", "PASSED": "OK"}


def colorize(text: str, level: str, stream: TextIO) -> str:
    """Apply color to text based on level, only when writing to a terminal."""
    color = COLORS.get(level, "")
    if not color or not stream.isatty():
        return text
    return f"{color}{text}{COLORS['RESET']}"


def format_result(result: ValidationResult) -> str:
    """Format a result as ``PREFIX: <where> - <what>``."""
    prefix = LEVEL_PREFIX[result.level]
    location = result.location
    if location is None:
        return f"{prefix}: {result.message}"
    return f"{prefix}: {location} - {result.message}"


def print_results(report: ValidationReport, verbose: bool = False) -> None:
    """Print a report in human-readable form.

    Errors and warnings go to stderr, the summary line to stdout. INFO and
    PASSED results are printed to stdout only in verbose mode.
    """
    for result in report.results:
        if result.level in ("ERROR", "WARNING"):
            print(colorize(format_result(result), result.level, sys.stderr), file=sys.stderr)
        elif verbose:
            print(colorize(format_result(result), result.level, sys.stdout))

    if report.skipped:
        print(report.skipped)
    level = "ERROR" if report.has_errors else "PASSED"
    print(colorize(report.summary(), level, sys.stdout))


def emit_report(report: ValidationReport, args: argparse.Namespace) -> int:
    """Print a report the way the CLI flags ask for and return its exit code."""
    if args.json:
        print(report.to_json())
    else:
        print_results(report, args.verbose)
    return report.exit_code
