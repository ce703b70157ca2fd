"""Scenario execution engine with retries, timeouts and fail-fast."""

__version__ = "0.1.0"

from .runner import (
    Runner,
    ScenarioRunner,
    StepRunner,
    RunOptions,
    RunResult,
    ScenarioResult,
    StepResult,
    Status,
    Skip,
    StepTimeoutError,
    ScenarioTimeoutError,
    RunAbortedError,
    ScenarioContext,
    StepContext,
)
from .scenarios import (
    Backoff,
    RetryPolicy,
    ScenarioDefinition,
    StepDefinition,
    StepKind,
    StepOptions,
    resource,
    scenario,
    setup,
    step,
)
from .utils import CancellationController, CancellationSignal, merge_signals, retry, timeout_signal

__all__ = [
    "__version__",
    "Runner",
    "ScenarioRunner",
    "StepRunner",
    "RunOptions",
    "RunResult",
    "ScenarioResult",
    "StepResult",
    "Status",
    "Skip",
    "StepTimeoutError",
    "ScenarioTimeoutError",
    "RunAbortedError",
    "ScenarioContext",
    "StepContext",
    "Backoff",
    "RetryPolicy",
    "ScenarioDefinition",
    "StepDefinition",
    "StepKind",
    "StepOptions",
    "resource",
    "scenario",
    "setup",
    "step",
    "CancellationController",
    "CancellationSignal",
    "merge_signals",
    "retry",
    "timeout_signal",
]
