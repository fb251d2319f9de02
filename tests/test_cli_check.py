"""Tests for `layerlint check` CLI command."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from layerlint import __version__
from layerlint.cli import main
from layerlint.source.php_parser import get_php_language

if TYPE_CHECKING:
    from pathlib import Path

requires_grammar = pytest.mark.skipif(
    get_php_language() is None, reason="tree-sitter-php not installed"
)


def _write_config(project: Path, *, ignore_interfaces: bool = False) -> Path:
    config = project / "layerlint.yml"
    flag = "true" if ignore_interfaces else "false"
    config.write_text(
        "version: 1\n"
        "paths: [src]\n"
        "components:\n"
        "  Logic: App\\Logic\n"
        "  IO: App\\IO\n"
        "rules:\n"
        f"  - forbid: {{ from: Logic, to: IO, ignore_interfaces: {flag} }}\n",
        encoding="utf-8",
    )
    return config


def test_version() -> None:
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@requires_grammar
class TestCheckCommand:
    def test_porcelain_lists_violations(self, tmp_project: Path) -> None:
        config = _write_config(tmp_project)
        result = CliRunner().invoke(
            main, ["check", "--config", str(config), "--format", "porcelain"]
        )
        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert len(lines) == 2
        assert all(line.startswith("forbid:Logic:IO:") for line in lines)

    def test_strict_exits_one_on_violations(self, tmp_project: Path) -> None:
        config = _write_config(tmp_project)
        result = CliRunner().invoke(
            main, ["check", "--config", str(config), "--format", "json", "--strict"]
        )
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["summary"]["violations_count"] == 2

    def test_strict_clean_exits_zero(self, tmp_project: Path) -> None:
        config = _write_config(tmp_project)
        result = CliRunner().invoke(
            main,
            [
                "check",
                "--config",
                str(config),
                "--format",
                "rich",
                "--strict",
                str(tmp_project / "src" / "IO"),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "No violations found" in result.output

    def test_ignore_interfaces(self, tmp_project: Path) -> None:
        config = _write_config(tmp_project, ignore_interfaces=True)
        result = CliRunner().invoke(
            main, ["check", "--config", str(config), "--format", "porcelain"]
        )
        assert result.exit_code == 0
        assert result.output.strip().endswith("App\\IO\\Writer")
        assert "WriterInterface" not in result.output

    def test_default_config_in_cwd(self, tmp_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_config(tmp_project)
        monkeypatch.chdir(tmp_project)
        result = CliRunner().invoke(main, ["check", "--format", "json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["summary"]["files_scanned"] == 3


class TestCheckErrors:
    def test_missing_config_exits_two(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            main, ["check", "--config", str(tmp_path / "missing.yml"), "--format", "json"]
        )
        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_invalid_config_exits_two(self, tmp_path: Path) -> None:
        config = tmp_path / "layerlint.yml"
        config.write_text("version: 1\nrules: {}\n", encoding="utf-8")
        result = CliRunner().invoke(main, ["check", "--config", str(config)])
        assert result.exit_code == 2
        assert "'rules' must be a list" in result.output
