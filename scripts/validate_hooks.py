#!/usr/bin/env python3
"""
Artifact Validators - Hook Registry Validator

Validates the hook registry (hooks/hooks.json). Two layouts are accepted:

Keyed (current)::

    {"hooks": {"PreToolUse": [{"matcher": "Bash", "hooks": [{"type": "command", "command": "..."}]}]}}

Flat (legacy)::

    [{"matcher": "Bash", "hooks": [{"type": "command", "command": "..."}]}]

The `hooks` wrapper key is optional for both. Every hook action needs a
`type` and a `command`; `async` and `timeout` are optional but typed. When a
command runs an inline script (`node -e "..."`, `python3 -c "..."`), the
script is parsed, never executed, and syntax errors are reported.

Usage:
    uv run python scripts/validate_hooks.py
    uv run python scripts/validate_hooks.py --root path/to/project --verbose
    uv run python scripts/validate_hooks.py --json

Exit codes:
    0 - Registry valid (or no hooks.json)
    1 - Invalid JSON, unsupported layout, or at least one invalid matcher/action
"""

from __future__ import annotations

import ast
import json
import math
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Union

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

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

# =============================================================================
# Constants
# =============================================================================

VALID_HOOK_EVENTS = frozenset(
    {
        "PreToolUse",
        "PostToolUse",
        "PreCompact",
        "SessionStart",
        "SessionEnd",
        "Stop",
        "Notification",
        "SubagentStop",
    }
)

JS_PARSER = Parser(Language(tree_sitter_javascript.language()))


# =============================================================================
# Registry Shape
# =============================================================================


class RegistryShapeError(ValueError):
    """The registry's top level is neither an object nor an array."""


@dataclass(frozen=True)
class KeyedRegistry:
    """Current layout: event name -> list of matchers."""

    events: dict[str, Any]


@dataclass(frozen=True)
class FlatRegistry:
    """Legacy layout: a single list of matchers with no event grouping."""

    matchers: list[Any]


HookRegistry = Union[KeyedRegistry, FlatRegistry]


def resolve_registry_shape(data: Any) -> HookRegistry:
    """Decide which layout a parsed registry uses.

    Raises:
        RegistryShapeError: Neither layout applies
    """
    hooks = data
    if isinstance(data, dict) and data.get("hooks") is not None:
        hooks = data["hooks"]

    if isinstance(hooks, dict):
        return KeyedRegistry(events=hooks)
    if isinstance(hooks, list):
        return FlatRegistry(matchers=hooks)
    raise RegistryShapeError("hooks.json must be an object or array")


# =============================================================================
# Hook Actions
# =============================================================================


@dataclass(frozen=True)
class HookAction:
    """A hook action whose fields have all been checked."""

    type: str
    command: str | tuple[str, ...]
    is_async: bool | None = None
    timeout: float | None = None


@dataclass
class ActionCheck:
    """Result of checking one raw hook action.

    `action` is set only when `violations` is empty.
    """

    action: HookAction | None
    violations: list[str] = field(default_factory=list)


def _is_valid_command(command: Any) -> bool:
    if isinstance(command, str):
        return bool(command.strip())
    if isinstance(command, list):
        return bool(command) and all(isinstance(part, str) and part.strip() for part in command)
    return False


def _is_valid_timeout(timeout: Any) -> bool:
    # bool is a subclass of int but not a duration
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        return False
    return math.isfinite(timeout) and timeout >= 0


def parse_hook_action(raw: Any) -> ActionCheck:
    """Check a raw hook action field by field. Nothing is coerced."""
    if not isinstance(raw, dict):
        return ActionCheck(None, ["is not an object"])

    violations: list[str] = []
    hook_type = raw.get("type")
    if not isinstance(hook_type, str) or not hook_type:
        violations.append("missing or invalid 'type' field")

    command = raw.get("command")
    if not _is_valid_command(command):
        violations.append("missing or invalid 'command' field")

    if "async" in raw and not isinstance(raw["async"], bool):
        violations.append("'async' must be a boolean")

    if "timeout" in raw and not _is_valid_timeout(raw["timeout"]):
        violations.append("'timeout' must be a non-negative number")

    if violations:
        return ActionCheck(None, violations)

    return ActionCheck(
        HookAction(
            type=hook_type,
            command=command if isinstance(command, str) else tuple(command),
            is_async=raw.get("async"),
            timeout=raw.get("timeout"),
        )
    )


# =============================================================================
# Inline Scripts
# =============================================================================


def unescape_inline_script(script: str) -> str:
    """Undo the escaping a script picks up inside a JSON shell string.

    The replacements run in this order; changing it changes the result.
    """
    return script.replace("\\\\", "\\").replace('\\"', '"').replace("\\n", "\n").replace("\\t", "\t")


def _first_syntax_error(node: Node) -> Node | None:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.is_error or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_syntax_error(child)
        if found is not None:
            return found
    return None


def check_js_syntax(source: str) -> str | None:
    """Parse JavaScript without running it. Returns the error, if any.

    tree-sitter recovers from syntax errors instead of raising, so the
    tree is searched for the nodes it inserts at the point of failure.
    """
    tree = JS_PARSER.parse(source.encode("utf-8"))
    if not tree.root_node.has_error:
        return None

    node = _first_syntax_error(tree.root_node)
    if node is None:
        return "Line 1: syntax error"
    row, column = node.start_point
    if node.is_missing:
        return f"Line {row + 1}: missing '{node.type}' at column {column + 1}"
    return f"Line {row + 1}: unexpected input at column {column + 1}"


def check_python_syntax(source: str) -> str | None:
    """Parse Python without running it. Returns the error, if any."""
    try:
        ast.parse(source)
    except SyntaxError as e:
        return f"{e.msg} (line {e.lineno})"
    except ValueError as e:
        return str(e)
    return None


# (command pattern, language, syntax checker)
INLINE_RUNNERS: tuple[tuple[re.Pattern[str], str, Callable[[str], str | None]], ...] = (
    (re.compile(r'node -e "(.*)"', re.DOTALL), "JS", check_js_syntax),
    (re.compile(r'python3? -c "(.*)"', re.DOTALL), "Python", check_python_syntax),
)


def check_inline_script(command: str) -> tuple[str, str] | None:
    """Syntax-check a command that runs an inline script.

    Returns:
        (language, error) if the command carries an inline script that does
        not parse, otherwise None
    """
    for pattern, language, checker in INLINE_RUNNERS:
        match = pattern.fullmatch(command)
        if match is None:
            continue
        error = checker(unescape_inline_script(match.group(1)))
        if error is not None:
            return language, error
        return None
    return None


# =============================================================================
# Matchers
# =============================================================================


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def validate_matcher(raw: Any, label: str, report: ValidationReport) -> None:
    """Validate one matcher entry and each of its hook actions."""
    if not isinstance(raw, dict):
        report.error(f"{label} is not an object")
        return

    report.checked += 1
    valid = True

    if _is_missing(raw.get("matcher")):
        report.error(f"{label} missing 'matcher' field")
        valid = False

    actions = raw.get("hooks")
    if not isinstance(actions, list):
        report.error(f"{label} missing 'hooks' array")
        return

    for j, raw_action in enumerate(actions):
        action_label = f"{label}.hooks[{j}]"
        check = parse_hook_action(raw_action)
        for violation in check.violations:
            report.error(f"{action_label} {violation}")
            valid = False

        # A broken inline script is reported even when other fields are bad
        command = raw_action.get("command") if isinstance(raw_action, dict) else None
        if isinstance(command, str) and _is_valid_command(command):
            failure = check_inline_script(command)
            if failure is not None:
                language, error = failure
                report.error(f"{action_label} has invalid inline {language}: {error}")
                valid = False

    if valid:
        report.add_valid_item(label)
        report.passed(f"{label} valid ({len(actions)} hook(s))")


def validate_keyed_registry(registry: KeyedRegistry, report: ValidationReport) -> None:
    for event_name, matchers in registry.events.items():
        if event_name not in VALID_HOOK_EVENTS:
            report.error(f"Invalid event type: {event_name}")
            continue

        if not isinstance(matchers, list):
            report.error(f"{event_name} must be an array")
            continue

        for i, raw in enumerate(matchers):
            validate_matcher(raw, f"{event_name}[{i}]", report)


def validate_flat_registry(registry: FlatRegistry, report: ValidationReport) -> None:
    for i, raw in enumerate(registry.matchers):
        validate_matcher(raw, f"Hook {i}", report)


def validate_registry(data: Any, report: ValidationReport) -> None:
    """Validate a parsed registry of either layout.

    Raises:
        RegistryShapeError: Neither layout applies
    """
    registry = resolve_registry_shape(data)
    if isinstance(registry, KeyedRegistry):
        validate_keyed_registry(registry, report)
    else:
        validate_flat_registry(registry, report)


def validate_hooks_file(hooks_file: Path) -> ValidationReport:
    """Validate a hook registry file.

    JSON and layout errors stop validation immediately. Past that point every
    matcher and action is checked.
    """
    report = ValidationReport(subject="hook matchers")
    if not hooks_file.exists():
        report.skipped = "No hooks.json found, skipping validation"
        return report

    try:
        data = json.loads(read_artifact(hooks_file))
    except json.JSONDecodeError as e:
        report.error(f"Invalid JSON in hooks.json: {e}")
        return report
    except (OSError, UnicodeDecodeError) as e:
        report.error(f"Cannot read hooks.json: {describe_read_error(e)}")
        return report

    try:
        validate_registry(data, report)
    except RegistryShapeError as e:
        report.error(str(e))

    return report


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_arg_parser("Validate the hook registry (hooks.json)")
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILED

    return emit_report(validate_hooks_file(config.hooks_file), args)


if __name__ == "__main__":
    sys.exit(main())
