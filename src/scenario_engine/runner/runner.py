# src/scenario_engine/runner/runner.py
"""Top-level orchestration of many scenarios."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Iterable, List, Optional

from .errors import RunAbortedError, ScenarioTimeoutError, Skip
from .results import RunOptions, RunResult, ScenarioResult, Status
from .scenario_runner import ScenarioRunner
from ..reporting.base import notify
from ..scenarios.models import ScenarioDefinition, ScenarioMetadata, to_scenario_metadata
from ..utils.signal import CancellationController, merge_signals, timeout_signal

logger = logging.getLogger(__name__)

FAIL_FAST_REASON = "Skipped due to previous failures"


class Runner:
    """
    Runs scenarios in batches with optional fail-fast.

    Scenarios inside a batch run concurrently; batches run one after another.
    Results are always reported in input order, and every scenario gets a
    result, including the ones that never started.
    """

    def __init__(self,
                 reporter: Optional[Any] = None,
                 logger: Optional[logging.Logger] = None):
        self.reporter = reporter
        self.logger = logger or logging.getLogger(__name__)

    async def run(self,
                  scenarios: Iterable[ScenarioDefinition],
                  options: Optional[RunOptions] = None) -> RunResult:
        """
        Execute scenarios and aggregate their results.

        Args:
            scenarios: Scenario definitions to run
            options: Concurrency, fail-fast, timeout, cancellation and step defaults

        Returns:
            RunResult. Scenario failures never raise.
        """
        options = options or RunOptions()
        options.validate()

        scenarios = list(scenarios)
        metadata = [to_scenario_metadata(s) for s in scenarios]
        slots: List[Optional[ScenarioResult]] = [None] * len(scenarios)

        await notify(self.reporter, "on_run_start", metadata)
        self.logger.info(
            f"Starting run of {len(scenarios)} scenarios "
            f"(max_concurrency={options.max_concurrency or 'unbounded'}, "
            f"max_failures={options.max_failures or 'unbounded'})"
        )

        controller = CancellationController()

        def forward(reason: BaseException) -> None:
            if not isinstance(reason, Skip):
                reason = RunAbortedError(f"Run aborted: {reason}")
            self.logger.warning(f"Run cancelled: {reason}")
            controller.cancel(reason)

        external = options.signal
        if external is not None:
            external.add_callback(forward)

        scenario_runner = ScenarioRunner(self.reporter, options.step_defaults, self.logger)
        failures = 0

        async def run_one(i: int) -> None:
            nonlocal failures
            scenario = scenarios[i]

            if controller.signal.fired:
                slots[i] = await self._skipped(metadata[i], controller.signal.reason)
                return

            timeout = scenario.timeout if scenario.timeout is not None else options.timeout
            timer = None
            if timeout:
                started = time.perf_counter()
                timer = timeout_signal(
                    timeout,
                    lambda: ScenarioTimeoutError(scenario.name, timeout, time.perf_counter() - started),
                )
            signal = merge_signals(controller.signal, timer)

            try:
                result = await scenario_runner.run(scenario, signal, controller.signal)
            finally:
                signal.close()
                if timer is not None:
                    timer.close()

            slots[i] = result
            if result.status is Status.FAILED:
                failures += 1
                if options.max_failures and failures >= options.max_failures and not controller.cancelled:
                    self.logger.warning(
                        f"Reached {failures} failures (max_failures={options.max_failures}); "
                        f"skipping remaining scenarios"
                    )
                    controller.cancel(RunAbortedError(FAIL_FAST_REASON))

        batch_size = options.max_concurrency or max(1, len(scenarios))
        start_time = time.perf_counter()

        try:
            for offset in range(0, len(scenarios), batch_size):
                if controller.signal.fired:
                    break
                batch = range(offset, min(offset + batch_size, len(scenarios)))
                await asyncio.gather(*(run_one(i) for i in batch))

            for i, slot in enumerate(slots):
                if slot is None:
                    slots[i] = await self._skipped(metadata[i], controller.signal.reason)
        finally:
            if external is not None:
                external.remove_callback(forward)

        results: List[ScenarioResult] = list(slots)
        run_result = RunResult(
            total=len(results),
            passed=sum(1 for r in results if r.status is Status.PASSED),
            failed=sum(1 for r in results if r.status is Status.FAILED),
            skipped=sum(1 for r in results if r.status is Status.SKIPPED),
            duration=time.perf_counter() - start_time,
            scenarios=results,
        )

        self.logger.info(
            f"Run completed in {run_result.duration:.3f}s: {run_result.passed} passed, "
            f"{run_result.failed} failed, {run_result.skipped} skipped"
        )
        await notify(self.reporter, "on_run_end", metadata, run_result)
        return run_result

    async def _skipped(self, metadata: ScenarioMetadata, reason: Optional[BaseException]) -> ScenarioResult:
        """Result for a scenario that was never started."""
        if reason is None:
            reason = RunAbortedError(FAIL_FAST_REASON)

        await notify(self.reporter, "on_scenario_start", metadata)
        result = ScenarioResult(
            status=Status.SKIPPED,
            duration=0.0,
            metadata=metadata,
            steps=[],
            error=reason,
        )
        await notify(self.reporter, "on_scenario_end", metadata, result)
        return result
