#!/usr/bin/env python3
"""Tests for validate_rules.py - rule document validation."""

import os
import subprocess
import sys
from pathlib import Path

from validate_rules import validate_rules_directory

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SCRIPT_PATH = PROJECT_ROOT / "scripts" / "validate_rules.py"


def run_validator(root: Path, *args: str) -> subprocess.CompletedProcess[str]:
    """Run validate_rules.py against a project root and return result."""
    cmd = [sys.executable, str(SCRIPT_PATH), "--root", str(root)] + list(args)
    return subprocess.run(cmd, capture_output=True, text=True, timeout=30)


class TestRulesDirectory:
    """Walking and content checks."""

    def test_good_and_bad_rule(self, tmp_path: Path) -> None:
        """Only the whitespace-only rule is reported."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        (rules_dir / "good.md").write_text("# Good Rule\nContent.")
        (rules_dir / "bad.md").write_text("   \n\t\n")

        result = run_validator(tmp_path)
        assert result.returncode == 1
        assert "bad.md" in result.stderr
        assert "good.md" not in result.stderr
        assert result.stdout.strip()

    def test_nested_rules_use_relative_paths(self, tmp_path: Path) -> None:
        """Rules in subdirectories are found and reported by relative path."""
        nested = tmp_path / "rules" / "python" / "style"
        nested.mkdir(parents=True)
        (nested / "empty.md").write_text("")
        (tmp_path / "rules" / "top.md").write_text("Always test.")

        report = validate_rules_directory(tmp_path / "rules")
        assert [r.file for r in report.results if r.level == "ERROR"] == ["python/style/empty.md"]
        assert report.checked == 2

    def test_fenced_only_rule_passes(self, tmp_path: Path) -> None:
        """A rule that is only a code block still has content."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        (rules_dir / "code.md").write_text("```python\nprint('hi')\n```\n")
        assert validate_rules_directory(rules_dir).exit_code == 0

    def test_directory_named_md_is_skipped(self, tmp_path: Path) -> None:
        """A directory whose name ends in .md is not a rule."""
        rules_dir = tmp_path / "rules"
        (rules_dir / "tricky.md").mkdir(parents=True)
        (rules_dir / "real.md").write_text("Content")
        report = validate_rules_directory(rules_dir)
        assert report.exit_code == 0
        assert report.checked == 1

    def test_broken_symlink_is_error(self, tmp_path: Path) -> None:
        """A dangling symlink is reported against its name."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        os.symlink(tmp_path / "does-not-exist.md", rules_dir / "dangling.md")
        report = validate_rules_directory(rules_dir)
        assert report.exit_code == 1
        assert [r.file for r in report.results if r.level == "ERROR"] == ["dangling.md"]

    def test_symlink_to_file_is_followed(self, tmp_path: Path) -> None:
        """A symlink to a real rule is validated through the link."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        target = tmp_path / "shared.md"
        target.write_text("Shared rule")
        os.symlink(target, rules_dir / "linked.md")
        report = validate_rules_directory(rules_dir)
        assert report.exit_code == 0
        assert report.valid_items == ["linked.md"]

    def test_no_markdown_validates_zero(self, tmp_path: Path) -> None:
        """A rules directory with no .md files succeeds with a zero count."""
        rules_dir = tmp_path / "rules"
        rules_dir.mkdir()
        (rules_dir / "README.txt").write_text("not a rule")
        result = run_validator(tmp_path)
        assert result.returncode == 0
        assert "Validated 0 rule files" in result.stdout

    def test_missing_directory_skips(self, tmp_path: Path) -> None:
        """No rules/ directory exits 0."""
        result = run_validator(tmp_path)
        assert result.returncode == 0
        assert "No rules directory found" in result.stdout
