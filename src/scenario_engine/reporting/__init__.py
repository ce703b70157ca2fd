"""Run reporters."""

from .base import CompositeReporter, Reporter, notify
from .console import ConsoleReporter
from .prometheus import PrometheusReporter

__all__ = [
    "CompositeReporter",
    "ConsoleReporter",
    "PrometheusReporter",
    "Reporter",
    "notify",
]
