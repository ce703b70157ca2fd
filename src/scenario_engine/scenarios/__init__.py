"""Scenario definitions, loading and selection."""

from .models import (
    Backoff,
    RetryPolicy,
    ScenarioDefinition,
    ScenarioMetadata,
    StepDefinition,
    StepKind,
    StepMetadata,
    StepOptions,
    resource,
    scenario,
    setup,
    step,
    to_scenario_metadata,
    to_step_metadata,
)
from .loader import ScenarioLoader
from .selector import Selector, apply_selectors, matches_selector, parse_selector

__all__ = [
    "Backoff",
    "RetryPolicy",
    "ScenarioDefinition",
    "ScenarioMetadata",
    "StepDefinition",
    "StepKind",
    "StepMetadata",
    "StepOptions",
    "resource",
    "scenario",
    "setup",
    "step",
    "to_scenario_metadata",
    "to_step_metadata",
    "ScenarioLoader",
    "Selector",
    "apply_selectors",
    "matches_selector",
    "parse_selector",
]
