# src/scenario_engine/runner/scenario_runner.py
"""Runs the steps of a single scenario in order."""

from __future__ import annotations

import logging
import time
from contextlib import AsyncExitStack
from typing import Any, List, Optional

from .context import create_scenario_context
from .errors import ScenarioTimeoutError, Skip
from .results import ScenarioResult, Status, StepResult
from .step_runner import StepRunner
from ..reporting.base import notify
from ..scenarios.models import ScenarioDefinition, StepOptions, to_scenario_metadata
from ..utils.signal import CancellationSignal

logger = logging.getLogger(__name__)


class ScenarioRunner:
    """Executes scenarios step by step, releasing their resources afterwards."""

    def __init__(self,
                 reporter: Optional[Any] = None,
                 step_defaults: Optional[StepOptions] = None,
                 logger: Optional[logging.Logger] = None):
        self.reporter = reporter
        self.step_defaults = step_defaults
        self.logger = logger or logging.getLogger(__name__)

    async def run(self,
                  scenario: ScenarioDefinition,
                  signal: Optional[CancellationSignal] = None,
                  abort_signal: Optional[CancellationSignal] = None) -> ScenarioResult:
        """
        Execute a complete scenario.

        ``abort_signal`` is the run-level cancellation. When it has fired by the
        time a timed-out scenario finishes unwinding, its reason replaces the
        timeout, so the scenario is reported as skipped.

        The first step that does not pass ends the scenario and its error
        becomes the scenario error. Resources and setup cleanups are released
        in reverse order on every exit path; a cleanup failure fails an
        otherwise passing scenario.
        """
        metadata = to_scenario_metadata(scenario)
        await notify(self.reporter, "on_scenario_start", metadata)
        self.logger.info(f"Starting scenario: {scenario.name}")

        ctx = create_scenario_context(scenario, signal)
        step_runner = StepRunner(ctx, metadata, self.reporter, self.step_defaults, self.logger)
        steps: List[StepResult] = []
        error: Optional[BaseException] = None

        start_time = time.perf_counter()
        stack = AsyncExitStack()
        try:
            for i, step in enumerate(scenario.steps):
                if signal is not None and signal.fired:
                    error = signal.reason
                    if isinstance(error, ScenarioTimeoutError) and error.current_step_name is None:
                        error.current_step_name = step.name
                        error.current_step_index = i
                    break

                self.logger.debug(f"Executing step {i + 1}/{len(scenario.steps)}: {step.name}")
                step_result = await step_runner.run(step, stack, index=i + 1)
                steps.append(step_result)

                if step_result.status is not Status.PASSED:
                    error = step_result.error
                    break
        finally:
            try:
                await stack.aclose()
            except Exception as e:
                self.logger.error(f"Cleanup failed for scenario {scenario.name}: {e}")
                if error is None:
                    error = e

        if (isinstance(error, ScenarioTimeoutError)
                and abort_signal is not None and abort_signal.fired):
            self.logger.debug(f"Scenario {scenario.name} timed out while the run was cancelled")
            error = abort_signal.reason

        duration = time.perf_counter() - start_time

        if error is None:
            status = Status.PASSED
            self.logger.info(f"Scenario {scenario.name} passed in {duration:.3f}s")
        elif isinstance(error, Skip):
            status = Status.SKIPPED
            self.logger.info(f"Scenario {scenario.name} skipped: {error}")
        else:
            status = Status.FAILED
            self.logger.error(f"Scenario {scenario.name} failed: {error}")

        result = ScenarioResult(
            status=status,
            duration=duration,
            metadata=metadata,
            steps=steps,
            error=error,
        )
        await notify(self.reporter, "on_scenario_end", metadata, result)
        return result
