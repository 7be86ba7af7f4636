#!/usr/bin/env python3
"""Tests for artifact_validation_common.py - frontmatter, reports and configuration."""

import json
from pathlib import Path

import pytest

from artifact_validation_common import (
    EXIT_FAILED,
    EXIT_OK,
    ConfigError,
    ValidationReport,
    extract_frontmatter,
    format_result,
    load_config,
)


class TestExtractFrontmatter:
    """Parsing of the leading key: value block."""

    def test_simple_block(self) -> None:
        """Fields are returned as trimmed strings in document order."""
        content = "---\nmodel: sonnet\ntools: Read, Grep\n---\n# Body\n"
        assert extract_frontmatter(content) == {"model": "sonnet", "tools": "Read, Grep"}

    def test_no_block_returns_none(self) -> None:
        """A document that does not open with --- has no frontmatter."""
        assert extract_frontmatter("# Just a heading\nmodel: sonnet\n") is None

    def test_adjacent_markers_are_absent(self) -> None:
        """---/--- with nothing between them does not form a block."""
        assert extract_frontmatter("---\n---\n# Body") is None

    def test_blank_line_between_markers_is_empty_block(self) -> None:
        """A single blank line between markers is a present but empty block."""
        assert extract_frontmatter("---\n\n---\n# Body") == {}

    def test_bom_and_crlf_match_lf_twin(self) -> None:
        """BOM and CRLF line endings do not change the result."""
        lf = "---\nmodel: opus\ntools: Read\n---\nBody\n"
        crlf = "\ufeff" + lf.replace("\n", "\r\n")
        assert extract_frontmatter(crlf) == extract_frontmatter(lf)

    def test_lines_without_colon_are_ignored(self) -> None:
        """Lines with no colon, or a leading colon, are skipped silently."""
        content = "---\njust text\n:sonnet\nmodel: haiku\n---\n"
        assert extract_frontmatter(content) == {"model": "haiku"}

    def test_value_keeps_later_colons(self) -> None:
        """Only the first colon splits key from value."""
        assert extract_frontmatter("---\ndescription: a: b: c\n---\n") == {"description": "a: b: c"}

    def test_space_before_colon_is_trimmed(self) -> None:
        """Whitespace around the key is trimmed."""
        assert extract_frontmatter("---\nmodel : sonnet\n---\n") == {"model": "sonnet"}

    def test_block_must_start_document(self) -> None:
        """A --- block further down the document is not frontmatter."""
        assert extract_frontmatter("# Title\n---\nmodel: sonnet\n---\n") is None


class TestValidationReport:
    """Accumulation, exit codes and summaries."""

    def test_warnings_do_not_fail(self) -> None:
        """Warnings are counted in the summary but keep exit code 0."""
        report = ValidationReport(subject="command files", checked=2)
        report.warning("references skill directory skills/x/ (not found locally)", "a.md")
        assert report.exit_code == EXIT_OK
        assert report.summary() == "Validated 2 command files (1 warnings)"

    def test_error_fails(self) -> None:
        """Any error makes the exit code non-zero."""
        report = ValidationReport(subject="rule files", checked=1)
        report.error("Empty rule file", "bad.md")
        assert report.exit_code == EXIT_FAILED
        assert "1 error(s)" in report.summary()

    def test_merge_sums_counts(self) -> None:
        """Merging carries results, valid items and checked counts."""
        first = ValidationReport(checked=2, valid_items=["a"])
        second = ValidationReport(checked=3)
        second.error("boom", "b.md")
        first.merge(second)
        assert first.checked == 5
        assert first.valid_items == ["a"]
        assert first.error_count == 1

    def test_to_json_round_trips(self) -> None:
        """JSON output carries the exit code and each result."""
        report = ValidationReport(subject="agent files", checked=1)
        report.error("Missing frontmatter", "x.md")
        data = json.loads(report.to_json())
        assert data["exit_code"] == EXIT_FAILED
        assert data["results"] == [{"level": "ERROR", "message": "Missing frontmatter", "file": "x.md"}]

    def test_format_result_with_line(self) -> None:
        """Location includes the line number when known."""
        report = ValidationReport()
        report.error("references non-existent command /zz", "c.md", 3)
        assert format_result(report.results[0]) == "ERROR: c.md:3 - references non-existent command /zz"


class TestLoadConfig:
    """artifact-validators.yaml handling."""

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        """Without a config file the conventional locations are used."""
        config = load_config(tmp_path)
        assert config.agents_dir == tmp_path / "agents"
        assert config.hooks_file == tmp_path / "hooks" / "hooks.json"

    def test_override_location(self, tmp_path: Path) -> None:
        """A key in the config file replaces one location."""
        (tmp_path / "artifact-validators.yaml").write_text("agents_dir: .claude/agents\n")
        config = load_config(tmp_path)
        assert config.agents_dir == tmp_path / ".claude" / "agents"
        assert config.rules_dir == tmp_path / "rules"

    def test_unknown_key_rejected(self, tmp_path: Path) -> None:
        """Typos in key names are reported instead of ignored."""
        (tmp_path / "artifact-validators.yaml").write_text("agent_dir: x\n")
        with pytest.raises(ConfigError, match="agent_dir"):
            load_config(tmp_path)

    def test_malformed_yaml_rejected(self, tmp_path: Path) -> None:
        """Invalid YAML is a configuration error."""
        (tmp_path / "artifact-validators.yaml").write_text("agents_dir: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(tmp_path)

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        """The top level must be a mapping."""
        (tmp_path / "artifact-validators.yaml").write_text("- agents\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(tmp_path)

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        """An empty config file is the same as no file."""
        (tmp_path / "artifact-validators.yaml").write_text("")
        assert load_config(tmp_path).skills_dir == tmp_path / "skills"
