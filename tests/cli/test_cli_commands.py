"""Tests for the kinetix-tools command line."""

import json

import pytest
from typer.testing import CliRunner

from kinetix_tools import __version__
from kinetix_tools.cli import app
from kinetix_tools.scanning import CSHARP_AVAILABLE

runner = CliRunner()

requires_csharp = pytest.mark.skipif(not CSHARP_AVAILABLE, reason="tree-sitter-c-sharp not installed")


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """No kinetix-tools.toml from the working directory leaks into the runs."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("KINETIX_STRATEGY", raising=False)
    monkeypatch.delenv("KINETIX_DISABLED_RULES", raising=False)


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"version {__version__}" in result.output

    def test_commands_listed(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "analyze" in result.output
        assert "generate-tests" in result.output


class TestAnalyzeCommand:
    def test_missing_solution(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "Missing.sln")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_invalid_format(self, dal_solution):
        result = runner.invoke(app, ["analyze", str(dal_solution), "--format", "xml"])
        assert result.exit_code != 0
        assert "is not one of" in result.output

    def test_error_goes_to_stderr(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "Missing.sln"), "--format", "json"])
        assert result.exit_code == 1
        assert "Error" in result.stderr
        assert "Error" not in result.stdout

    @requires_csharp
    def test_empty_solution_keeps_json_clean(self, tmp_path):
        solution = tmp_path / "Empty.sln"
        solution.write_text("Microsoft Visual Studio Solution File, Format Version 12.00\n")
        result = runner.invoke(app, ["analyze", str(solution), "--format", "json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == []
        assert "No C# projects found" in result.stderr

    @requires_csharp
    def test_hidden_filtered_by_default(self, dal_solution):
        result = runner.invoke(app, ["analyze", str(dal_solution), "--format", "json", "-w", "1"])
        assert result.exit_code == 0
        assert [d["id"] for d in json.loads(result.stdout)] == ["KTA1103"]

    @requires_csharp
    def test_show_hidden(self, dal_solution):
        result = runner.invoke(
            app, ["analyze", str(dal_solution), "--format", "json", "--show-hidden", "-w", "1"]
        )
        ids = [d["id"] for d in json.loads(result.stdout)]
        assert ids.count("KTA1300") == 3

    @requires_csharp
    def test_fail_on_warning(self, dal_solution):
        result = runner.invoke(
            app, ["analyze", str(dal_solution), "--format", "quiet", "--fail-on", "warning"]
        )
        assert result.exit_code == 1
        assert "KTA1103" in result.stdout

    @requires_csharp
    def test_fail_on_error_passes(self, dal_solution):
        result = runner.invoke(app, ["analyze", str(dal_solution), "--format", "quiet", "--fail-on", "error"])
        assert result.exit_code == 0

    @requires_csharp
    def test_config_file(self, dal_solution, tmp_path):
        config = tmp_path / "rules.toml"
        config.write_text('disabled_rules = ["KTA1103"]\n')
        result = runner.invoke(
            app, ["analyze", str(dal_solution), "--format", "json", "-c", str(config)]
        )
        assert json.loads(result.stdout) == []

    @requires_csharp
    def test_rich_output(self, dal_solution):
        result = runner.invoke(app, ["analyze", str(dal_solution)])
        assert result.exit_code == 0
        assert "1 diagnostics (1 warning)" in result.stdout


@requires_csharp
class TestGenerateCommand:
    def test_generates(self, dal_solution, paired_test_dir):
        result = runner.invoke(app, ["generate-tests", str(dal_solution), "-w", "1"])
        assert result.exit_code == 0
        assert "DAL/DalOrder/DalOrderGetOrdersTest generated" in result.stdout
        assert (paired_test_dir / "DAL" / "DalOrder" / "DalOrderSaveTest.cs").is_file()

    def test_dry_run(self, dal_solution, paired_test_dir):
        result = runner.invoke(app, ["generate-tests", str(dal_solution), "--dry-run"])
        assert result.exit_code == 0
        assert "would generate DAL/DalOrder/DalOrderSaveTest" in result.stdout
        assert not (paired_test_dir / "DAL").exists()

    def test_syntax_strategy(self, dal_solution, paired_test_dir):
        result = runner.invoke(app, ["generate-tests", str(dal_solution), "--strategy", "syntax"])
        assert result.exit_code == 0
        text = (paired_test_dir / "DAL" / "DalOrder" / "DalOrderGetOrdersTest.cs").read_text(encoding="utf-8")
        assert "CheckSqlSyntax" in text

    def test_rerun_generates_nothing(self, dal_solution):
        runner.invoke(app, ["generate-tests", str(dal_solution)])
        result = runner.invoke(app, ["generate-tests", str(dal_solution)])
        assert result.exit_code == 0
        assert " generated" not in result.stdout
