# src/scenario_engine/runner/errors.py
"""Error taxonomy used to classify step and scenario outcomes."""

from __future__ import annotations

from typing import Optional

from ..utils.signal import OperationCancelled


def _seconds(value: float) -> str:
    return f"{value:.3f}".rstrip("0").rstrip(".") + "s"


class Skip(Exception):
    """
    Raised from a step to end the scenario as skipped rather than failed.

    Also used as the cancellation reason when the engine itself skips work.
    """

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(reason or "Skipped")


class RunAbortedError(Skip):
    """Run cancelled externally or by the fail-fast threshold."""


class AttemptTimeoutError(TimeoutError):
    """A single step attempt exceeded its budget. Converted before reporting."""

    def __init__(self, timeout: float, attempt_number: int = 1):
        self.timeout = timeout
        self.attempt_number = attempt_number
        super().__init__(f"Attempt {attempt_number} timed out after {_seconds(timeout)}")


class StepTimeoutError(TimeoutError):
    """A step attempt exceeded the step timeout."""

    def __init__(self,
                 step_name: str,
                 timeout: float,
                 attempt_number: int = 1,
                 elapsed: Optional[float] = None):
        self.step_name = step_name
        self.timeout = timeout
        self.attempt_number = attempt_number
        self.elapsed = timeout if elapsed is None else elapsed

        message = f'Step "{step_name}" timed out after {_seconds(timeout)}'
        if attempt_number > 1:
            message += f" (attempt {attempt_number})"
        if _seconds(self.elapsed) != _seconds(timeout):
            message += f", total elapsed: {_seconds(self.elapsed)}"
        super().__init__(message)


class ScenarioTimeoutError(TimeoutError):
    """
    The whole scenario exceeded its time budget.

    ``current_step_name`` and ``current_step_index`` (0-based) identify the
    step that was active at expiry; they are filled in by the step runner when
    the timer itself could not know them.
    """

    def __init__(self,
                 scenario_name: str,
                 timeout: float,
                 elapsed: Optional[float] = None,
                 current_step_name: Optional[str] = None,
                 current_step_index: Optional[int] = None):
        super().__init__(scenario_name, timeout)
        self.scenario_name = scenario_name
        self.timeout = timeout
        self.elapsed = timeout if elapsed is None else elapsed
        self.current_step_name = current_step_name
        self.current_step_index = current_step_index

    def __str__(self) -> str:
        message = f'Scenario "{self.scenario_name}" timed out after {_seconds(self.timeout)}'
        if self.current_step_name is not None:
            message += f' while executing step "{self.current_step_name}"'
            if self.current_step_index is not None:
                message += f" (step {self.current_step_index + 1})"
        if _seconds(self.elapsed) != _seconds(self.timeout):
            message += f", total elapsed: {_seconds(self.elapsed)}"
        return message


def is_timeout_error(error: BaseException) -> bool:
    """True for step, scenario and attempt timeouts (and any other TimeoutError)."""
    return isinstance(error, TimeoutError)


def is_skip(error: BaseException) -> bool:
    return isinstance(error, Skip)


__all__ = [
    "AttemptTimeoutError",
    "OperationCancelled",
    "RunAbortedError",
    "ScenarioTimeoutError",
    "Skip",
    "StepTimeoutError",
    "is_skip",
    "is_timeout_error",
]
