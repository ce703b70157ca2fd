"""Unit tests for CLI commands."""

import pytest
import yaml
from unittest.mock import patch
from typer.testing import CliRunner

from scenario_engine.cli.main import app
from scenario_engine.runner.results import RunResult


@pytest.fixture
def cli_runner():
    """Provide CLI test runner."""
    return CliRunner()


@pytest.mark.unit
class TestMainCommands:
    """Test top-level options."""

    def test_version(self, cli_runner):
        result = cli_runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "scenario-engine version" in result.stdout

    def test_verbose_and_quiet_conflict(self, cli_runner, passing_scenario_file):
        result = cli_runner.invoke(app, ["-v", "-q", "run", str(passing_scenario_file)])

        assert result.exit_code == 1


@pytest.mark.unit
class TestRunCommand:
    """Test the run command."""

    def test_passing_run_exits_zero(self, cli_runner, passing_scenario_file):
        result = cli_runner.invoke(app, ["run", str(passing_scenario_file)])

        assert result.exit_code == 0

    def test_failures_exit_one_and_results_written(self, cli_runner, scenario_file, tmp_path):
        output = tmp_path / "results.yaml"

        result = cli_runner.invoke(app, ["run", str(scenario_file), "--output", str(output)])

        assert result.exit_code == 1
        data = yaml.safe_load(output.read_text())
        assert data["summary"]["total"] == 3
        assert data["summary"]["passed"] == 1
        assert data["summary"]["failed"] == 1
        assert data["summary"]["skipped"] == 1
        assert [s["name"] for s in data["scenarios"]] == ["passing", "failing", "skipping"]

    def test_select_filters_scenarios(self, cli_runner, scenario_file, tmp_path):
        output = tmp_path / "results.yaml"

        result = cli_runner.invoke(app, [
            "run", str(scenario_file), "--select", "tag:smoke", "--output", str(output),
        ])

        assert result.exit_code == 0
        data = yaml.safe_load(output.read_text())
        assert [s["name"] for s in data["scenarios"]] == ["passing"]

    def test_no_matching_scenarios(self, cli_runner, scenario_file):
        result = cli_runner.invoke(app, ["run", str(scenario_file), "-s", "name:does-not-exist"])

        assert result.exit_code == 1

    def test_options_override_config(self, cli_runner, scenario_file, config_file):
        with patch("scenario_engine.cli.commands.run.run_scenarios_async") as mock_run:
            mock_run.return_value = None
            cli_runner.invoke(app, [
                "run", str(scenario_file),
                "--config", str(config_file),
                "--max-concurrency", "5",
                "--max-failures", "0",
                "--timeout", "3",
                "--step-timeout", "1.5",
            ])

        config = mock_run.call_args.args[1]
        assert config.runner.max_concurrency == 5
        assert config.runner.max_failures == 0
        assert config.runner.timeout == 3.0
        assert config.step_defaults.timeout == 1.5
        # Untouched values still come from the file
        assert config.step_defaults.backoff == "exponential"

    def test_invalid_option_value(self, cli_runner, scenario_file):
        result = cli_runner.invoke(app, ["run", str(scenario_file), "--max-failures", "-1"])

        assert result.exit_code == 1

    def test_fail_fast_option(self, cli_runner, scenario_file, tmp_path):
        output = tmp_path / "results.yaml"

        cli_runner.invoke(app, [
            "run", str(scenario_file), "--max-concurrency", "1", "--max-failures", "1", "-o", str(output),
        ])

        data = yaml.safe_load(output.read_text())
        statuses = [s["status"] for s in data["scenarios"]]
        assert statuses == ["passed", "failed", "skipped"]
        assert data["scenarios"][2]["error"]["type"] == "RunAbortedError"

    def test_missing_path(self, cli_runner, tmp_path):
        result = cli_runner.invoke(app, ["run", str(tmp_path / "missing")])

        assert result.exit_code == 1


@pytest.mark.unit
class TestListCommand:
    """Test the list command."""

    def test_lists_scenarios(self, cli_runner, scenario_file):
        result = cli_runner.invoke(app, ["list", str(scenario_file), "-s", "tag:api"])

        assert result.exit_code == 0
        assert "passing" in result.stdout
        assert "failing" in result.stdout
        assert "skipping" not in result.stdout


@pytest.mark.unit
class TestValidateCommands:
    """Test validation commands."""

    def test_validate_config(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["validate", "config", str(config_file)])

        assert result.exit_code == 0
        assert "Configuration validation successful" in result.stdout

    def test_validate_invalid_config(self, cli_runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"step_defaults": {"backoff": "never"}}))

        result = cli_runner.invoke(app, ["validate", "config", str(path)])

        assert result.exit_code == 1

    def test_validate_missing_config(self, cli_runner, tmp_path):
        result = cli_runner.invoke(app, ["validate", "config", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1

    def test_validate_scenarios(self, cli_runner, scenario_file):
        result = cli_runner.invoke(app, ["validate", "scenarios", str(scenario_file)])

        assert result.exit_code == 0
        assert "3 scenarios in 1 files are valid" in result.stdout

    def test_validate_broken_scenarios(self, cli_runner, tmp_path):
        path = tmp_path / "broken_scenario.py"
        path.write_text("this is not python\n")

        result = cli_runner.invoke(app, ["validate", "scenarios", str(path)])

        assert result.exit_code == 1
