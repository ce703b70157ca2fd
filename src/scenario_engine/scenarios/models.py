"""Data models for scenario definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple


class StepKind(Enum):
    """Kinds of scenario steps."""
    RESOURCE = "resource"
    SETUP = "setup"
    STEP = "step"


class Backoff(Enum):
    """Delay growth between retry attempts."""
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class RetryPolicy:
    """Retry settings; unset fields fall back to the run defaults."""
    max_attempts: Optional[int] = None
    backoff: Optional[Backoff] = None
    base_delay: Optional[float] = None

    def validate(self) -> bool:
        if self.max_attempts is not None and self.max_attempts < 1:
            return False
        if self.base_delay is not None and self.base_delay < 0:
            return False
        if self.backoff is not None and not isinstance(self.backoff, Backoff):
            return False
        return True


@dataclass(frozen=True)
class StepOptions:
    """Run-wide step defaults."""
    timeout: Optional[float] = None
    retry: Optional[RetryPolicy] = None


@dataclass(frozen=True)
class StepDefinition:
    """Single step of a scenario."""
    kind: StepKind
    name: str
    fn: Callable[..., Any]
    timeout: Optional[float] = None
    retry: Optional[RetryPolicy] = None
    origin: Optional[Path] = None

    def validate(self) -> bool:
        """Validate step definition."""
        if not self.name or not isinstance(self.kind, StepKind):
            return False
        if not callable(self.fn):
            return False
        if self.timeout is not None and self.timeout < 0:
            return False
        if self.retry is not None and not self.retry.validate():
            return False
        return True


@dataclass(frozen=True)
class ScenarioDefinition:
    """Complete scenario definition."""
    name: str
    steps: Tuple[StepDefinition, ...]
    tags: Tuple[str, ...] = ()
    timeout: Optional[float] = None
    description: Optional[str] = None
    origin: Optional[Path] = None

    def __post_init__(self) -> None:
        # Accept lists for convenience while keeping the definition immutable
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "tags", tuple(self.tags))

    def validate(self) -> bool:
        """Validate scenario definition."""
        if not self.name:
            return False
        if self.timeout is not None and self.timeout < 0:
            return False

        for step in self.steps:
            if not step.validate():
                return False

        return True

    def with_origin(self, origin: Path) -> "ScenarioDefinition":
        """Copy of this definition tagged with the file it was loaded from."""
        return ScenarioDefinition(
            name=self.name,
            steps=self.steps,
            tags=self.tags,
            timeout=self.timeout,
            description=self.description,
            origin=origin,
        )


@dataclass(frozen=True)
class StepMetadata:
    """Serializable view of a step definition."""
    kind: StepKind
    name: str
    timeout: Optional[float] = None
    retry: Optional[RetryPolicy] = None
    origin: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind.value, "name": self.name}
        if self.timeout is not None:
            data["timeout"] = self.timeout
        if self.retry is not None:
            data["retry"] = {
                "max_attempts": self.retry.max_attempts,
                "backoff": self.retry.backoff.value if self.retry.backoff else None,
                "base_delay": self.retry.base_delay,
            }
        if self.origin is not None:
            data["origin"] = self.origin
        return data


@dataclass(frozen=True)
class ScenarioMetadata:
    """Serializable view of a scenario definition."""
    name: str
    tags: Tuple[str, ...] = ()
    steps: Tuple[StepMetadata, ...] = field(default_factory=tuple)
    timeout: Optional[float] = None
    description: Optional[str] = None
    origin: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "tags": list(self.tags),
            "steps": [step.to_dict() for step in self.steps],
        }
        if self.timeout is not None:
            data["timeout"] = self.timeout
        if self.description:
            data["description"] = self.description
        if self.origin is not None:
            data["origin"] = self.origin
        return data


def to_step_metadata(step: StepDefinition) -> StepMetadata:
    return StepMetadata(
        kind=step.kind,
        name=step.name,
        timeout=step.timeout,
        retry=step.retry,
        origin=str(step.origin) if step.origin is not None else None,
    )


def to_scenario_metadata(scenario: ScenarioDefinition) -> ScenarioMetadata:
    """Strip callables from a definition, keeping everything reporters need."""
    return ScenarioMetadata(
        name=scenario.name,
        tags=scenario.tags,
        steps=tuple(to_step_metadata(step) for step in scenario.steps),
        timeout=scenario.timeout,
        description=scenario.description,
        origin=str(scenario.origin) if scenario.origin is not None else None,
    )


def resource(name: str, fn: Callable[..., Any], **options: Any) -> StepDefinition:
    """Shorthand for a resource step."""
    return StepDefinition(StepKind.RESOURCE, name, fn, **options)


def setup(name: str, fn: Callable[..., Any], **options: Any) -> StepDefinition:
    """Shorthand for a setup step."""
    return StepDefinition(StepKind.SETUP, name, fn, **options)


def step(name: str, fn: Callable[..., Any], **options: Any) -> StepDefinition:
    """Shorthand for a regular step."""
    return StepDefinition(StepKind.STEP, name, fn, **options)


def scenario(name: str, steps: List[StepDefinition], **options: Any) -> ScenarioDefinition:
    """Shorthand for a scenario definition."""
    return ScenarioDefinition(name=name, steps=tuple(steps), **options)
