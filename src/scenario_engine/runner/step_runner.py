# src/scenario_engine/runner/step_runner.py
"""Executes a single step with timeout, retry and resource registration."""

from __future__ import annotations

import inspect
import logging
import time
from contextlib import AsyncExitStack
from typing import Any, Callable, Optional

from .context import ScenarioContext, StepContext, create_step_context
from .errors import (
    AttemptTimeoutError,
    ScenarioTimeoutError,
    Skip,
    StepTimeoutError,
    is_timeout_error,
)
from .results import Status, StepResult
from ..reporting.base import notify
from ..scenarios.models import (
    Backoff,
    RetryPolicy,
    ScenarioMetadata,
    StepDefinition,
    StepKind,
    StepOptions,
    to_step_metadata,
)
from ..utils.retry import retry
from ..utils.signal import merge_signals, race, timeout_signal
from ..utils.timeit import timeit

logger = logging.getLogger(__name__)

DEFAULT_STEP_TIMEOUT = 30.0
DEFAULT_RETRY = RetryPolicy(max_attempts=1, backoff=Backoff.LINEAR, base_delay=1.0)


async def _release(func: Callable[..., Any], *args: Any) -> None:
    result = func(*args)
    if inspect.isawaitable(result):
        await result


def register_disposal(stack: AsyncExitStack, value: Any) -> bool:
    """
    Push the release of ``value`` onto ``stack`` if it is disposable.

    The value is probed structurally: async context manager, sync context
    manager, ``aclose()`` then ``close()``. Returns False when nothing matched.
    """
    if value is None:
        return False

    if hasattr(value, "__aexit__"):
        stack.push_async_callback(_release, value.__aexit__, None, None, None)
    elif hasattr(value, "__exit__"):
        stack.push_async_callback(_release, value.__exit__, None, None, None)
    elif callable(getattr(value, "aclose", None)):
        stack.push_async_callback(_release, value.aclose)
    elif callable(getattr(value, "close", None)):
        stack.push_async_callback(_release, value.close)
    else:
        return False

    return True


def resolve_timeout(step: StepDefinition, defaults: Optional[StepOptions]) -> float:
    if step.timeout is not None:
        return step.timeout
    if defaults is not None and defaults.timeout is not None:
        return defaults.timeout
    return DEFAULT_STEP_TIMEOUT


def resolve_retry(step: StepDefinition, defaults: Optional[StepOptions]) -> RetryPolicy:
    """Resolve each retry field: step override, then run default, then built-in."""
    layers = [step.retry, defaults.retry if defaults is not None else None, DEFAULT_RETRY]

    def pick(attr: str) -> Any:
        for layer in layers:
            if layer is not None and getattr(layer, attr) is not None:
                return getattr(layer, attr)
        return None

    return RetryPolicy(
        max_attempts=pick("max_attempts"),
        backoff=pick("backoff"),
        base_delay=pick("base_delay"),
    )


def _should_retry(error: BaseException, next_attempt: int) -> bool:
    return not is_timeout_error(error) and not isinstance(error, Skip)


class StepRunner:
    """Runs steps of one scenario against its shared context."""

    def __init__(self,
                 scenario_ctx: ScenarioContext,
                 scenario_metadata: ScenarioMetadata,
                 reporter: Optional[Any] = None,
                 step_defaults: Optional[StepOptions] = None,
                 logger: Optional[logging.Logger] = None):
        self.scenario_ctx = scenario_ctx
        self.scenario_metadata = scenario_metadata
        self.reporter = reporter
        self.step_defaults = step_defaults
        self.logger = logger or logging.getLogger(__name__)

    async def run(self,
                  step: StepDefinition,
                  stack: AsyncExitStack,
                  index: Optional[int] = None) -> StepResult:
        """
        Execute ``step`` and classify its outcome.

        Args:
            step: Step definition to run
            stack: Disposal stack of the scenario; resources are pushed here
            index: 1-based position of the step in its scenario

        Returns:
            StepResult with status passed, failed or skipped. Never raises
            for step errors.
        """
        if index is None:
            index = len(self.scenario_ctx.results) + 1

        step_metadata = to_step_metadata(step)
        timeout = resolve_timeout(step, self.step_defaults)
        policy = resolve_retry(step, self.step_defaults)
        scenario_signal = self.scenario_ctx.signal

        await notify(self.reporter, "on_step_start", self.scenario_metadata, step_metadata)
        self.logger.debug(f"Executing step {index}: {step.name} ({step.kind.value})")

        started = time.perf_counter()

        async def attempt(number: int) -> Any:
            attempt_timeout = None
            if timeout > 0:
                attempt_timeout = timeout_signal(
                    timeout, lambda: AttemptTimeoutError(timeout, number)
                )
            signal = merge_signals(scenario_signal, attempt_timeout)
            try:
                ctx = create_step_context(self.scenario_ctx, index, number, signal)
                return await race(self._dispatch(step, ctx, stack), signal)
            finally:
                signal.close()
                if attempt_timeout is not None:
                    attempt_timeout.close()

        def on_retry(next_attempt: int, error: BaseException, delay: float) -> None:
            self.logger.warning(
                f"Step {step.name} failed on attempt {next_attempt - 1}/{policy.max_attempts}: "
                f"{error}; retrying in {delay:g}s"
            )

        outcome = await timeit(lambda: retry(
            attempt,
            max_attempts=policy.max_attempts,
            backoff=policy.backoff,
            base_delay=policy.base_delay,
            should_retry=_should_retry,
            signal=scenario_signal,
            on_retry=on_retry,
        ))

        if outcome.error is None:
            result = StepResult(
                status=Status.PASSED,
                duration=outcome.duration,
                metadata=step_metadata,
                value=outcome.value,
            )
            self.logger.debug(f"Step {step.name} passed in {outcome.duration:.3f}s")
        else:
            error = self._enrich(outcome.error, step, index, time.perf_counter() - started)
            if isinstance(error, Skip):
                status = Status.SKIPPED
                self.logger.info(f"Step {step.name} skipped: {error}")
            else:
                status = Status.FAILED
                self.logger.warning(f"Step {step.name} failed: {error}")
            result = StepResult(
                status=status,
                duration=outcome.duration,
                metadata=step_metadata,
                error=error,
            )

        await notify(self.reporter, "on_step_end", self.scenario_metadata, step_metadata, result)
        return result

    async def _dispatch(self, step: StepDefinition, ctx: StepContext, stack: AsyncExitStack) -> Any:
        value = step.fn(ctx)
        if inspect.isawaitable(value):
            value = await value

        if step.kind is StepKind.RESOURCE:
            self.scenario_ctx.resources[step.name] = value
            if register_disposal(stack, value):
                self.logger.debug(f"Registered disposal for resource {step.name}")
            return value

        elif step.kind is StepKind.SETUP:
            if register_disposal(stack, value):
                self.logger.debug(f"Registered disposal for setup {step.name}")
            elif callable(value):
                stack.push_async_callback(_release, value)
                self.logger.debug(f"Registered cleanup for setup {step.name}")
            return None

        elif step.kind is StepKind.STEP:
            self.scenario_ctx.results.append(value)
            return value

        raise ValueError(f"Unknown step kind: {step.kind}")

    @staticmethod
    def _enrich(error: BaseException, step: StepDefinition, index: int, elapsed: float) -> BaseException:
        if isinstance(error, ScenarioTimeoutError):
            if error.current_step_name is None:
                error.current_step_name = step.name
            if error.current_step_index is None:
                error.current_step_index = index - 1
            return error

        if isinstance(error, AttemptTimeoutError):
            enriched = StepTimeoutError(
                step_name=step.name,
                timeout=error.timeout,
                attempt_number=error.attempt_number,
                elapsed=elapsed,
            )
            enriched.__cause__ = error
            return enriched

        return error
