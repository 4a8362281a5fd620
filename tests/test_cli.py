"""Tests for CLI commands."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fiplan.cli import app, load_household
from fiplan.exceptions import HouseholdLoadError

runner = CliRunner()


class TestCLI:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "project" in result.output
        assert "summary" in result.output

    def test_project_help(self):
        result = runner.invoke(app, ["project", "--help"])
        assert result.exit_code == 0

    def test_validate_help(self):
        result = runner.invoke(app, ["validate", "--help"])
        assert result.exit_code == 0

    def test_summary_help(self):
        result = runner.invoke(app, ["summary", "--help"])
        assert result.exit_code == 0


class TestLoadHousehold:
    def test_loads_json(self, household_file: Path):
        household = load_household(household_file)
        assert household.id == "hh-001"
        assert household.accounts[0].id == "brokerage"

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(HouseholdLoadError, match="file not found"):
            load_household(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(HouseholdLoadError, match="invalid JSON"):
            load_household(path)

    def test_schema_errors(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"id": "h"}))
        with pytest.raises(HouseholdLoadError):
            load_household(path)


class TestProjectCommand:
    def test_prints_table_and_milestones(self, household_file: Path):
        result = runner.invoke(app, ["project", str(household_file), "--horizon", "3"])
        assert result.exit_code == 0
        assert "FI number:" in result.output
        assert "$2,400,000" in result.output

    def test_unknown_scenario(self, household_file: Path):
        result = runner.invoke(app, ["project", str(household_file), "--scenario", "nope"])
        assert result.exit_code == 1
        assert "does not define 'nope'" in result.output

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["project", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_blocking_errors_exit_nonzero(self, tmp_path: Path, household_file: Path):
        data = json.loads(household_file.read_text())
        data["scenarios"][0]["swr"] = "0"
        path = tmp_path / "blocked.json"
        path.write_text(json.dumps(data))
        result = runner.invoke(app, ["project", str(path)])
        assert result.exit_code == 1
        assert "INVALID_SWR" in result.output


class TestValidateCommand:
    def test_valid_household(self, household_file: Path):
        result = runner.invoke(app, ["validate", str(household_file)])
        assert result.exit_code == 0
        assert "Assumptions" in result.output

    def test_invalid_household(self, tmp_path: Path, household_file: Path):
        data = json.loads(household_file.read_text())
        data["out_of_pocket_investing"] = [{"account_id": "missing", "amount_annual": "1000"}]
        path = tmp_path / "invalid.json"
        path.write_text(json.dumps(data))
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "MISSING_ACCOUNT_REF" in result.output


class TestSummaryCommand:
    def test_stdout(self, household_file: Path):
        result = runner.invoke(app, ["summary", str(household_file), "-y", "2"])
        assert result.exit_code == 0
        assert "FI Projection Summary: Sample Household" in result.output

    def test_output_file(self, tmp_path: Path, household_file: Path):
        output = tmp_path / "reports" / "summary.txt"
        result = runner.invoke(
            app, ["summary", str(household_file), "-y", "2", "--output", str(output)]
        )
        assert result.exit_code == 0
        assert output.exists()
        assert "MILESTONES" in output.read_text()
        assert "Summary written to" in result.output
