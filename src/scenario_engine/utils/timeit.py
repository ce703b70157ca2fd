"""Measure a call and capture its outcome instead of raising."""

from __future__ import annotations

import inspect
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass
class TimeitResult:
    """Outcome of a timed call."""
    status: str
    duration: float
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status == "passed"


async def timeit(func: Callable[[], Any]) -> TimeitResult:
    """Run ``func`` (sync or async) and return its result with elapsed seconds."""
    start = time.perf_counter()
    try:
        value = func()
        if inspect.isawaitable(value):
            value = await value
    except Exception as e:
        return TimeitResult(status="failed", duration=time.perf_counter() - start, error=e)
    return TimeitResult(status="passed", duration=time.perf_counter() - start, value=value)
