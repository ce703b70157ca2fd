# src/scenario_engine/core/__init__.py
"""Configuration and metrics."""

from .metrics import DurationAggregator
from .config import (
    Config,
    ConfigValidator,
    RunnerConfig,
    StepDefaultsConfig,
    DiscoveryConfig,
    MetricsConfig,
    OutputConfig,
)

__all__ = [
    # Metrics
    "DurationAggregator",

    # Configuration
    "Config",
    "ConfigValidator",
    "RunnerConfig",
    "StepDefaultsConfig",
    "DiscoveryConfig",
    "MetricsConfig",
    "OutputConfig",
]
