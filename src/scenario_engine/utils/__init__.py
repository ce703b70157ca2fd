"""Execution primitives: cancellation signals, retry and timing."""

from .signal import (
    CancellationController,
    CancellationSignal,
    MergedSignal,
    OperationCancelled,
    TimeoutSignal,
    merge_signals,
    race,
    sleep,
    timeout_signal,
)
from .retry import BACKOFF_STRATEGIES, compute_backoff_delay, retry
from .timeit import TimeitResult, timeit

__all__ = [
    # Signals
    "CancellationController",
    "CancellationSignal",
    "MergedSignal",
    "OperationCancelled",
    "TimeoutSignal",
    "merge_signals",
    "race",
    "sleep",
    "timeout_signal",

    # Retry
    "BACKOFF_STRATEGIES",
    "compute_backoff_delay",
    "retry",

    # Timing
    "TimeitResult",
    "timeit",
]
