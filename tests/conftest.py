# tests/conftest.py
"""Pytest configuration and shared fixtures."""

import logging
from pathlib import Path

import pytest
import yaml

from tests.mocks import RecordingReporter

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SCE_* variables from the developer shell out of the tests."""
    import os
    for key in list(os.environ):
        if key.startswith("SCE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def reporter():
    """Provide a reporter that records notifications."""
    return RecordingReporter()


@pytest.fixture
def quiet_logger():
    """Logger injected into runners in tests that assert on logging."""
    logger = logging.getLogger("tests.runner")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def examples_dir():
    return EXAMPLES_DIR


@pytest.fixture
def config_file(tmp_path):
    """Create a temporary configuration file."""
    config_path = tmp_path / "test_config.yaml"

    config_data = {
        "runner": {
            "max_concurrency": 2,
            "max_failures": 1,
            "timeout": 10.0,
        },
        "step_defaults": {
            "timeout": 5.0,
            "max_attempts": 2,
            "backoff": "exponential",
            "base_delay": 0.01,
        },
        "metrics": {
            "job_name": "test_job",
        },
        "output": {
            "results_path": str(tmp_path / "out" / "results.yaml"),
            "log_level": "DEBUG",
        },
    }

    with open(config_path, 'w') as f:
        yaml.dump(config_data, f)

    return config_path


SCENARIO_FILE_TEMPLATE = '''
from scenario_engine import scenario, step, Skip


def ok(ctx):
    return "ok"


def boom(ctx):
    raise RuntimeError("boom")


def skipped(ctx):
    raise Skip("not today")


passing = scenario("passing", [step("ok", ok)], tags=("smoke", "api"))
failing = scenario("failing", [step("boom", boom)], tags=("api",))
skipping = scenario("skipping", [step("skip", skipped)], tags=("slow",))
'''


@pytest.fixture
def scenario_file(tmp_path):
    """Create a temporary scenario file with a passing, failing and skipping scenario."""
    path = tmp_path / "sample_scenario.py"
    path.write_text(SCENARIO_FILE_TEMPLATE)
    return path


@pytest.fixture
def passing_scenario_file(tmp_path):
    path = tmp_path / "passing_scenario.py"
    path.write_text(
        "from scenario_engine import scenario, step\n"
        "only = scenario('only', [step('ok', lambda ctx: 1)], tags=('smoke',))\n"
    )
    return path
