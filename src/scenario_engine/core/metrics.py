# src/scenario_engine/core/metrics.py
"""Duration statistics for scenarios and steps."""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Any, Dict, List, Tuple, TYPE_CHECKING
import logging

import numpy as np

if TYPE_CHECKING:
    from ..runner.results import RunResult, ScenarioResult

logger = logging.getLogger(__name__)

SCENARIO_KEY = "scenario"


def step_key(kind: str) -> str:
    return f"step:{kind}"


class DurationAggregator:
    """Aggregates durations (seconds) per key and computes percentiles."""

    def __init__(self, window_size: int = 10000):
        """Initialize aggregator."""
        self.window_size = window_size
        self.duration_windows: Dict[str, deque] = defaultdict(lambda: deque(maxlen=window_size))
        self.status_counts: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))

    def add_sample(self, key: str, duration: float, status: str = "passed") -> None:
        """Add a duration sample under ``key``."""
        self.duration_windows[key].append(duration)
        self.status_counts[key][status] += 1

    def add_scenario_result(self, result: "ScenarioResult") -> None:
        self.add_sample(SCENARIO_KEY, result.duration, result.status.value)
        for step in result.steps:
            self.add_sample(step_key(step.metadata.kind.value), step.duration, step.status.value)

    def add_run_result(self, result: "RunResult") -> None:
        """Add every scenario and step duration of a finished run."""
        for scenario in result.scenarios:
            self.add_scenario_result(scenario)

    def calculate_percentiles(self, key: str) -> Tuple[float, float, float]:
        """Calculate p50, p95, p99 for a key."""
        samples = list(self.duration_windows.get(key, []))

        if not samples:
            return 0.0, 0.0, 0.0

        sorted_samples = np.sort(samples)
        p50 = float(np.percentile(sorted_samples, 50))
        p95 = float(np.percentile(sorted_samples, 95))
        p99 = float(np.percentile(sorted_samples, 99))

        return p50, p95, p99

    def get_stats(self, key: str) -> Dict[str, float]:
        """Get comprehensive stats for a key."""
        samples = list(self.duration_windows.get(key, []))

        if not samples:
            return {
                "count": 0,
                "mean": 0.0,
                "std": 0.0,
                "min": 0.0,
                "max": 0.0,
                "p50": 0.0,
                "p95": 0.0,
                "p99": 0.0,
            }

        p50, p95, p99 = self.calculate_percentiles(key)

        return {
            "count": len(samples),
            "mean": float(np.mean(samples)),
            "std": float(np.std(samples)),
            "min": float(np.min(samples)),
            "max": float(np.max(samples)),
            "p50": p50,
            "p95": p95,
            "p99": p99,
        }

    def keys(self) -> List[str]:
        return sorted(self.duration_windows)

    def reset(self) -> None:
        self.duration_windows.clear()
        self.status_counts.clear()

    def get_summary_statistics(self) -> Dict[str, Any]:
        """Get overall summary statistics."""
        summary: Dict[str, Any] = {}
        for key in self.keys():
            stats: Dict[str, Any] = dict(self.get_stats(key))
            stats["statuses"] = dict(self.status_counts[key])
            summary[key] = stats
        return summary
