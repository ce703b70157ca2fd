# src/scenario_engine/utils/retry.py
"""Generic retry loop with linear or exponential backoff."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional, TypeVar

from .signal import CancellationSignal, sleep

logger = logging.getLogger(__name__)

T = TypeVar("T")

LINEAR = "linear"
EXPONENTIAL = "exponential"
BACKOFF_STRATEGIES = (LINEAR, EXPONENTIAL)


def compute_backoff_delay(attempt: int, backoff: Any = LINEAR, base_delay: float = 1.0) -> float:
    """
    Delay to wait after failed attempt ``attempt`` (1-based).

    linear:      attempt * base_delay
    exponential: 2 ** (attempt - 1) * base_delay
    """
    strategy = getattr(backoff, "value", backoff)
    if strategy == EXPONENTIAL:
        return (2 ** (attempt - 1)) * base_delay
    if strategy == LINEAR:
        return attempt * base_delay
    raise ValueError(f"Invalid backoff strategy: {backoff}")


async def retry(func: Callable[[int], Any],
                max_attempts: int = 1,
                backoff: Any = LINEAR,
                base_delay: float = 1.0,
                should_retry: Optional[Callable[[BaseException, int], bool]] = None,
                signal: Optional[CancellationSignal] = None,
                on_retry: Optional[Callable[[int, BaseException, float], Any]] = None) -> Any:
    """
    Invoke ``func(attempt)`` until it succeeds or attempts run out.

    Args:
        func: Sync or async callable receiving the 1-based attempt number
        max_attempts: Upper bound on attempts (values below 1 mean 1)
        backoff: "linear" or "exponential"
        base_delay: Delay unit in seconds
        should_retry: Predicate called with the error and the number of the
            attempt about to be made; returning False stops retrying
        signal: Cancels the wait between attempts and any attempt not yet started
        on_retry: Observer called with (next_attempt, error, delay)

    Returns:
        The first successful result.

    Raises:
        The most recent error once retrying stops, or the signal's reason.
    """
    attempts = max(1, int(max_attempts))
    last_error: Optional[BaseException] = None

    for attempt in range(1, attempts + 1):
        if signal is not None:
            signal.raise_if_fired()

        try:
            result = func(attempt)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            last_error = e

            if attempt >= attempts:
                break
            if should_retry is not None and not should_retry(e, attempt + 1):
                logger.debug(f"Not retrying after attempt {attempt}: {e}")
                break

            delay = compute_backoff_delay(attempt, backoff, base_delay)
            if on_retry is not None:
                on_retry(attempt + 1, e, delay)
            else:
                logger.debug(f"Attempt {attempt} failed ({e}); retrying in {delay:g}s")

            await sleep(delay, signal)

    raise last_error
