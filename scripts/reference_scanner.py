#!/usr/bin/env python3
"""
Artifact Validators - Reference Scanner

Finds the references a command document makes to other artifacts and
resolves them against the set of artifacts that actually exist.

Reference shapes:
- command:  an inline code span holding a slash command, e.g. `/plan`
- agent:    a path to an agent descriptor, e.g. agents/planner.md
- workflow: a line that is only a chain of agent names, e.g. planner -> tdd-guide
- skill:    a path to a skill bundle directory, e.g. skills/tdd-workflow/

Text inside closed ``` fences is example material and never scanned. A
fence with no closing marker does not hide anything. Lines that describe
hypothetical output ("creates:", "would create:") contribute no command
references.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from artifact_validation_common import ValidationReport, normalize_newlines

# =============================================================================
# Patterns
# =============================================================================

FENCE = "```"

IDENTIFIER = r"[a-z][-a-z0-9]*"

COMMAND_REF_PATTERN = re.compile(rf"`/({IDENTIFIER})`")
AGENT_PATH_PATTERN = re.compile(rf"agents/({IDENTIFIER})\.md")
SKILL_DIR_PATTERN = re.compile(rf"skills/({IDENTIFIER})/")
WORKFLOW_LINE_PATTERN = re.compile(rf"{IDENTIFIER}(?:[ \t]*->[ \t]*{IDENTIFIER})+")
WORKFLOW_ARROW_PATTERN = re.compile(r"[ \t]*->[ \t]*")
HYPOTHETICAL_OUTPUT_PATTERN = re.compile(r"creates:|would create:", re.IGNORECASE)

ReferenceKind = Literal["command", "agent", "workflow", "skill"]


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class Span:
    """A run of document text, either scannable or inside a closed fence."""

    text: str
    suppressed: bool


@dataclass(frozen=True)
class Reference:
    """One outbound reference found in a document."""

    kind: ReferenceKind
    name: str
    line: int


@dataclass(frozen=True)
class ReferenceIndex:
    """Identities of every artifact a command document may refer to."""

    commands: frozenset[str] = frozenset()
    agents: frozenset[str] = frozenset()
    skills: frozenset[str] = frozenset()

    def resolves(self, reference: Reference) -> bool:
        if reference.kind == "command":
            return reference.name in self.commands
        if reference.kind == "skill":
            return reference.name in self.skills
        return reference.name in self.agents


# =============================================================================
# Fence Handling
# =============================================================================


def split_fenced_spans(text: str) -> list[Span]:
    """Split text into scannable spans and closed fenced regions.

    A fence opens at a ``` marker and closes at the next one. An opening
    marker with no closer leaves the rest of the text scannable.
    """
    spans: list[Span] = []
    pos = 0
    while True:
        start = text.find(FENCE, pos)
        if start == -1:
            break
        end = text.find(FENCE, start + len(FENCE))
        if end == -1:
            break
        end += len(FENCE)
        if start > pos:
            spans.append(Span(text[pos:start], suppressed=False))
        spans.append(Span(text[start:end], suppressed=True))
        pos = end

    if pos < len(text):
        spans.append(Span(text[pos:], suppressed=False))
    return spans


def strip_fenced_regions(text: str) -> str:
    """Blank out closed fenced regions, keeping their newlines.

    Line numbers in the result match the input.
    """
    return "".join("\n" * span.text.count("\n") if span.suppressed else span.text for span in split_fenced_spans(text))


# =============================================================================
# Scanning
# =============================================================================


def scan_line(line: str, lineno: int) -> list[Reference]:
    """All references on one line of fence-stripped text."""
    refs: list[Reference] = []

    if not HYPOTHETICAL_OUTPUT_PATTERN.search(line):
        refs.extend(Reference("command", m.group(1), lineno) for m in COMMAND_REF_PATTERN.finditer(line))

    refs.extend(Reference("agent", m.group(1), lineno) for m in AGENT_PATH_PATTERN.finditer(line))

    if WORKFLOW_LINE_PATTERN.fullmatch(line):
        refs.extend(Reference("workflow", name, lineno) for name in WORKFLOW_ARROW_PATTERN.split(line))

    refs.extend(Reference("skill", m.group(1), lineno) for m in SKILL_DIR_PATTERN.finditer(line))
    return refs


def scan_references(content: str) -> list[Reference]:
    """Every reference in a document, in document order."""
    text = strip_fenced_regions(normalize_newlines(content))
    refs: list[Reference] = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        refs.extend(scan_line(line, lineno))
    return refs


# =============================================================================
# Resolution
# =============================================================================


def describe_unresolved(reference: Reference) -> str:
    if reference.kind == "command":
        return f"references non-existent command /{reference.name}"
    if reference.kind == "agent":
        return f"references non-existent agent agents/{reference.name}.md"
    if reference.kind == "workflow":
        return f'workflow references non-existent agent "{reference.name}"'
    return f"references skill directory skills/{reference.name}/ (not found locally)"


def check_references(content: str, filename: str, index: ReferenceIndex, report: ValidationReport) -> bool:
    """Resolve every reference in a document against the index.

    Unresolved skill references are warnings. Every other unresolved
    reference is an error. Returns True if no error was reported.
    """
    valid = True
    for reference in scan_references(content):
        if index.resolves(reference):
            continue
        if reference.kind == "skill":
            report.warning(describe_unresolved(reference), filename, reference.line)
        else:
            report.error(describe_unresolved(reference), filename, reference.line)
            valid = False
    return valid
