"""Reporter interface and fan-out."""

from __future__ import annotations

import inspect
import logging
from typing import Any, List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..runner.results import RunResult, ScenarioResult, StepResult
    from ..scenarios.models import ScenarioMetadata, StepMetadata

logger = logging.getLogger(__name__)


class Reporter:
    """
    Receives lifecycle notifications from the runners.

    Every hook is optional; subclasses override what they need. Hooks may be
    plain or async methods. Exceptions raised by a hook are logged and do
    not affect the run.
    """

    async def on_run_start(self, scenarios: Sequence["ScenarioMetadata"]) -> None:
        pass

    async def on_scenario_start(self, scenario: "ScenarioMetadata") -> None:
        pass

    async def on_step_start(self, scenario: "ScenarioMetadata", step: "StepMetadata") -> None:
        pass

    async def on_step_end(self,
                          scenario: "ScenarioMetadata",
                          step: "StepMetadata",
                          result: "StepResult") -> None:
        pass

    async def on_scenario_end(self, scenario: "ScenarioMetadata", result: "ScenarioResult") -> None:
        pass

    async def on_run_end(self, scenarios: Sequence["ScenarioMetadata"], result: "RunResult") -> None:
        pass


async def notify(reporter: Optional[Any], hook: str, *args: Any) -> None:
    """Call ``reporter.<hook>(*args)`` if it exists, awaiting async hooks."""
    if reporter is None:
        return

    method = getattr(reporter, hook, None)
    if method is None:
        return

    try:
        result = method(*args)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.error(f"Reporter {type(reporter).__name__}.{hook} failed: {e}")


class CompositeReporter(Reporter):
    """Forwards every notification to each wrapped reporter in order."""

    def __init__(self, reporters: Optional[List[Any]] = None):
        self.reporters: List[Any] = [r for r in (reporters or []) if r is not None]

    def add(self, reporter: Any) -> None:
        self.reporters.append(reporter)

    async def _broadcast(self, hook: str, *args: Any) -> None:
        for reporter in self.reporters:
            await notify(reporter, hook, *args)

    async def on_run_start(self, scenarios):
        await self._broadcast("on_run_start", scenarios)

    async def on_scenario_start(self, scenario):
        await self._broadcast("on_scenario_start", scenario)

    async def on_step_start(self, scenario, step):
        await self._broadcast("on_step_start", scenario, step)

    async def on_step_end(self, scenario, step, result):
        await self._broadcast("on_step_end", scenario, step, result)

    async def on_scenario_end(self, scenario, result):
        await self._broadcast("on_scenario_end", scenario, result)

    async def on_run_end(self, scenarios, result):
        await self._broadcast("on_run_end", scenarios, result)
