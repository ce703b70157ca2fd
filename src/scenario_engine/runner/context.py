"""Execution contexts handed to step functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..scenarios.models import ScenarioDefinition
from ..utils.signal import CancellationSignal


@dataclass
class ScenarioContext:
    """Mutable state shared by every step of one scenario run."""
    name: str
    tags: Tuple[str, ...] = ()
    store: Dict[str, Any] = field(default_factory=dict)
    resources: Dict[str, Any] = field(default_factory=dict)
    results: List[Any] = field(default_factory=list)
    signal: Optional[CancellationSignal] = None


class StepContext:
    """
    View over a ``ScenarioContext`` for a single step attempt.

    ``store``, ``resources`` and ``results`` are the scenario's own objects,
    so mutations made by one step are visible to the next. ``signal`` is the
    attempt-scoped signal, which also fires when the scenario's does.
    """

    def __init__(self,
                 scenario: ScenarioContext,
                 index: int,
                 attempt: int = 1,
                 signal: Optional[CancellationSignal] = None):
        self.scenario = scenario
        self.index = index
        self.attempt = attempt
        self.signal = signal if signal is not None else scenario.signal

    @property
    def name(self) -> str:
        return self.scenario.name

    @property
    def tags(self) -> Tuple[str, ...]:
        return self.scenario.tags

    @property
    def store(self) -> Dict[str, Any]:
        return self.scenario.store

    @property
    def resources(self) -> Dict[str, Any]:
        return self.scenario.resources

    @property
    def results(self) -> List[Any]:
        return self.scenario.results

    @property
    def previous(self) -> Any:
        """Value of the most recent regular step, or None."""
        return self.scenario.results[-1] if self.scenario.results else None

    def __repr__(self) -> str:
        return f"<StepContext scenario={self.name!r} index={self.index} attempt={self.attempt}>"


def create_scenario_context(scenario: ScenarioDefinition,
                            signal: Optional[CancellationSignal] = None) -> ScenarioContext:
    return ScenarioContext(name=scenario.name, tags=tuple(scenario.tags), signal=signal)


def create_step_context(scenario_ctx: ScenarioContext,
                        index: Optional[int] = None,
                        attempt: int = 1,
                        signal: Optional[CancellationSignal] = None) -> StepContext:
    """Build a step view; ``index`` defaults to the next result position."""
    if index is None:
        index = len(scenario_ctx.results) + 1
    return StepContext(scenario_ctx, index=index, attempt=attempt, signal=signal)
