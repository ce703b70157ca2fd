# tests/mocks.py
"""Test doubles and definition factories shared by the test suite."""

import asyncio
from typing import Any, Callable, List, Optional, Tuple

from scenario_engine.scenarios.models import (
    RetryPolicy,
    ScenarioDefinition,
    StepDefinition,
    StepKind,
)


class RecordingReporter:
    """Reporter that records every notification as (hook, *names)."""

    def __init__(self):
        self.events: List[Tuple[Any, ...]] = []
        self.step_results = []
        self.scenario_results = []
        self.run_result = None

    async def on_run_start(self, scenarios):
        self.events.append(("run_start", len(scenarios)))

    async def on_scenario_start(self, scenario):
        self.events.append(("scenario_start", scenario.name))

    async def on_step_start(self, scenario, step):
        self.events.append(("step_start", scenario.name, step.name))

    async def on_step_end(self, scenario, step, result):
        self.events.append(("step_end", scenario.name, step.name, result.status.value))
        self.step_results.append(result)

    async def on_scenario_end(self, scenario, result):
        self.events.append(("scenario_end", scenario.name, result.status.value))
        self.scenario_results.append(result)

    async def on_run_end(self, scenarios, result):
        self.events.append(("run_end", result.total))
        self.run_result = result

    def hooks(self, name: str) -> List[Tuple[Any, ...]]:
        return [event for event in self.events if event[0] == name]


class SyncDisposable:
    """Sync context-manager resource that logs its release."""

    def __init__(self, name: str, log: List[str]):
        self.name = name
        self.log = log
        self.released = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.released += 1
        self.log.append(f"release:{self.name}")
        return False


class AsyncDisposable:
    """Async context-manager resource that logs its release."""

    def __init__(self, name: str, log: List[str]):
        self.name = name
        self.log = log
        self.released = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await asyncio.sleep(0)
        self.released += 1
        self.log.append(f"release:{self.name}")
        return False


class ClosableClient:
    """Resource exposing only aclose()."""

    def __init__(self):
        self.closed = 0

    async def aclose(self):
        self.closed += 1


class FailingDisposable:
    """Resource whose release raises."""

    def close(self):
        raise RuntimeError("release failed")


def make_step(name: str,
              fn: Optional[Callable] = None,
              kind: StepKind = StepKind.STEP,
              timeout: Optional[float] = None,
              retry: Optional[RetryPolicy] = None) -> StepDefinition:
    """Build a step definition; the default body returns the step name."""
    if fn is None:
        fn = lambda ctx: name
    return StepDefinition(kind=kind, name=name, fn=fn, timeout=timeout, retry=retry)


def make_scenario(name: str,
                  steps: Optional[List[StepDefinition]] = None,
                  tags: Tuple[str, ...] = (),
                  timeout: Optional[float] = None) -> ScenarioDefinition:
    return ScenarioDefinition(
        name=name,
        steps=tuple(steps if steps is not None else [make_step("only")]),
        tags=tags,
        timeout=timeout,
    )


def sleeping_scenario(name: str, delay: float, fail: bool = False, log: Optional[List[str]] = None) -> ScenarioDefinition:
    """Scenario with one step that sleeps, then passes or raises."""

    async def body(ctx):
        if log is not None:
            log.append(f"start:{name}")
        await asyncio.sleep(delay)
        if log is not None:
            log.append(f"end:{name}")
        if fail:
            raise RuntimeError(f"{name} failed")
        return name

    return make_scenario(name, [make_step(f"{name}-step", body)])
