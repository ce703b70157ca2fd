# src/scenario_engine/runner/results.py
"""Result types and run options."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..scenarios.models import ScenarioMetadata, StepMetadata, StepOptions
from ..utils.signal import CancellationSignal


class Status(str, Enum):
    """Outcome of a step or scenario."""
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


def _error_to_dict(error: Optional[BaseException]) -> Optional[Dict[str, str]]:
    if error is None:
        return None
    return {"type": type(error).__name__, "message": str(error)}


def _value_to_dict(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_value_to_dict(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _value_to_dict(v) for k, v in value.items()}
    return repr(value)


@dataclass
class StepResult:
    """Outcome of one step."""
    status: Status
    duration: float
    metadata: StepMetadata
    value: Any = None
    error: Optional[BaseException] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.metadata.name,
            "kind": self.metadata.kind.value,
            "status": self.status.value,
            "duration": round(self.duration, 6),
        }
        if self.status == Status.PASSED:
            data["value"] = _value_to_dict(self.value)
        else:
            data["error"] = _error_to_dict(self.error)
        return data


@dataclass
class ScenarioResult:
    """Outcome of one scenario."""
    status: Status
    duration: float
    metadata: ScenarioMetadata
    steps: List[StepResult] = field(default_factory=list)
    error: Optional[BaseException] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.metadata.name,
            "tags": list(self.metadata.tags),
            "status": self.status.value,
            "duration": round(self.duration, 6),
            "steps": [step.to_dict() for step in self.steps],
        }
        if self.error is not None:
            data["error"] = _error_to_dict(self.error)
        return data


@dataclass
class RunResult:
    """Aggregate outcome of a run; ``scenarios`` follows input order."""
    total: int
    passed: int
    failed: int
    skipped: int
    duration: float
    scenarios: List[ScenarioResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "total": self.total,
                "passed": self.passed,
                "failed": self.failed,
                "skipped": self.skipped,
                "duration": round(self.duration, 6),
            },
            "scenarios": [scenario.to_dict() for scenario in self.scenarios],
        }


@dataclass
class RunOptions:
    """Options for ``Runner.run``."""
    max_concurrency: int = 0
    max_failures: int = 0
    timeout: Optional[float] = None
    signal: Optional[CancellationSignal] = None
    step_defaults: Optional[StepOptions] = None

    def validate(self) -> None:
        """Validate run options."""
        if self.max_concurrency < 0:
            raise ValueError(f"max_concurrency must be non-negative: {self.max_concurrency}")
        if self.max_failures < 0:
            raise ValueError(f"max_failures must be non-negative: {self.max_failures}")
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be non-negative: {self.timeout}")
