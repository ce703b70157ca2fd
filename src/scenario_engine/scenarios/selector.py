"""Scenario selection by name or tag.

Selector syntax::

    "login"              name matches /login/i
    "tag:api"            some tag matches /api/i
    "!tag:slow"          no tag matches /slow/i
    "tag:api,!name:v1"   comma joins terms with AND

Several selector strings are combined with OR.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, TypeVar

from .models import ScenarioDefinition, ScenarioMetadata

SELECTOR_TYPES = ("tag", "name")

S = TypeVar("S", ScenarioDefinition, ScenarioMetadata)


@dataclass(frozen=True)
class Selector:
    """Single selector term."""
    type: str
    pattern: re.Pattern
    negated: bool = False
    source: str = ""

    def matches(self, scenario: S) -> bool:
        if self.type == "tag":
            hit = any(self.pattern.search(tag) for tag in scenario.tags)
        else:
            hit = bool(self.pattern.search(scenario.name))
        return not hit if self.negated else hit


def parse_selector(text: str) -> List[Selector]:
    """Parse one selector string into its AND-ed terms."""
    selectors: List[Selector] = []
    for raw in text.split(","):
        term = raw.strip()
        if not term:
            continue

        negated = term.startswith("!")
        if negated:
            term = term[1:].strip()

        type_, sep, value = term.partition(":")
        if sep:
            type_ = type_.strip().lower()
            if type_ not in SELECTOR_TYPES:
                raise ValueError(f"Invalid selector type '{type_}' in '{raw.strip()}'. Must be tag or name")
        else:
            type_, value = "name", term

        value = value.strip()
        if not value:
            raise ValueError(f"Empty selector value in '{raw.strip()}'")

        try:
            pattern = re.compile(value, re.IGNORECASE)
        except re.error as e:
            raise ValueError(f"Invalid selector pattern '{value}': {e}") from e

        selectors.append(Selector(type=type_, pattern=pattern, negated=negated, source=raw.strip()))

    return selectors


def matches_selector(scenario: S, selectors: Sequence[Selector]) -> bool:
    """True when every term matches."""
    return all(selector.matches(scenario) for selector in selectors)


def apply_selectors(scenarios: Iterable[S], inputs: Optional[Sequence[str]]) -> List[S]:
    """Keep scenarios matching any of the selector strings, preserving order."""
    scenarios = list(scenarios)
    if not inputs:
        return scenarios

    groups = [parse_selector(text) for text in inputs]
    groups = [group for group in groups if group]
    if not groups:
        return scenarios

    return [s for s in scenarios if any(matches_selector(s, group) for group in groups)]
