"""Scenario execution engine."""

from .context import ScenarioContext, StepContext, create_scenario_context, create_step_context
from .errors import (
    AttemptTimeoutError,
    OperationCancelled,
    RunAbortedError,
    ScenarioTimeoutError,
    Skip,
    StepTimeoutError,
    is_timeout_error,
)
from .results import RunOptions, RunResult, ScenarioResult, Status, StepResult
from .runner import FAIL_FAST_REASON, Runner
from .scenario_runner import ScenarioRunner
from .step_runner import DEFAULT_RETRY, DEFAULT_STEP_TIMEOUT, StepRunner

__all__ = [
    # Runners
    "Runner",
    "ScenarioRunner",
    "StepRunner",
    "FAIL_FAST_REASON",
    "DEFAULT_RETRY",
    "DEFAULT_STEP_TIMEOUT",

    # Contexts
    "ScenarioContext",
    "StepContext",
    "create_scenario_context",
    "create_step_context",

    # Errors
    "AttemptTimeoutError",
    "OperationCancelled",
    "RunAbortedError",
    "ScenarioTimeoutError",
    "Skip",
    "StepTimeoutError",
    "is_timeout_error",

    # Results
    "RunOptions",
    "RunResult",
    "ScenarioResult",
    "Status",
    "StepResult",
]
