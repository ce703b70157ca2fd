# src/scenario_engine/reporting/prometheus.py
"""Prometheus metrics for scenario runs."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, push_to_gateway
from prometheus_client.exposition import basic_auth_handler, default_handler

from .base import Reporter

logger = logging.getLogger(__name__)

DURATION_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0)


class PrometheusReporter(Reporter):
    """Records run outcomes into a private registry and optionally pushes them."""

    def __init__(self,
                 pushgateway_url: Optional[str] = None,
                 job_name: str = "scenario_engine",
                 instance: Optional[str] = None,
                 username: Optional[str] = None,
                 password: Optional[str] = None):
        """
        Initialize Prometheus reporter.

        Args:
            pushgateway_url: URL of Prometheus pushgateway; nothing is pushed when unset
            job_name: Job name for grouping metrics
            instance: Instance label
            username: Basic auth username
            password: Basic auth password
        """
        self.pushgateway_url = pushgateway_url
        self.job_name = job_name
        self.instance = instance or "scenario_engine"

        self.auth_handler = default_handler
        if username and password:
            def _auth_handler(url, method, timeout, headers, data):
                return basic_auth_handler(url, method, timeout, headers, data, username, password)
            self.auth_handler = _auth_handler

        self.registry = CollectorRegistry()
        self._define_metrics()

        logger.debug(f"Initialized Prometheus reporter (pushgateway={pushgateway_url})")

    def _define_metrics(self) -> None:
        """Define Prometheus metrics."""
        self.scenarios_total = Counter(
            'scenario_engine_scenarios_total',
            'Scenarios finished, by status',
            ['status'],
            registry=self.registry
        )
        self.steps_total = Counter(
            'scenario_engine_steps_total',
            'Steps finished, by kind and status',
            ['kind', 'status'],
            registry=self.registry
        )

        self.scenario_duration = Histogram(
            'scenario_engine_scenario_duration_seconds',
            'Scenario duration in seconds',
            buckets=DURATION_BUCKETS,
            registry=self.registry
        )
        self.step_duration = Histogram(
            'scenario_engine_step_duration_seconds',
            'Step duration in seconds',
            ['kind'],
            buckets=DURATION_BUCKETS,
            registry=self.registry
        )

        self.last_run_total = Gauge(
            'scenario_engine_last_run_scenarios',
            'Scenarios in the last run, by status',
            ['status'],
            registry=self.registry
        )
        self.last_run_duration = Gauge(
            'scenario_engine_last_run_duration_seconds',
            'Duration of the last run in seconds',
            registry=self.registry
        )

    def on_step_end(self, scenario, step, result) -> None:
        self.steps_total.labels(kind=step.kind.value, status=result.status.value).inc()
        self.step_duration.labels(kind=step.kind.value).observe(result.duration)

    def on_scenario_end(self, scenario, result) -> None:
        self.scenarios_total.labels(status=result.status.value).inc()
        self.scenario_duration.observe(result.duration)

    async def on_run_end(self, scenarios, result) -> None:
        self.last_run_total.labels(status="total").set(result.total)
        self.last_run_total.labels(status="passed").set(result.passed)
        self.last_run_total.labels(status="failed").set(result.failed)
        self.last_run_total.labels(status="skipped").set(result.skipped)
        self.last_run_duration.set(result.duration)

        if self.pushgateway_url:
            # push_to_gateway blocks on HTTP
            await asyncio.to_thread(self.push_metrics)

    def push_metrics(self) -> None:
        """Push metrics to Prometheus pushgateway."""
        try:
            grouping_key = {'instance': self.instance}

            push_to_gateway(
                self.pushgateway_url,
                job=self.job_name,
                registry=self.registry,
                grouping_key=grouping_key,
                handler=self.auth_handler
            )

            logger.debug("Pushed metrics to Prometheus pushgateway")

        except Exception as e:
            logger.error(f"Failed to push metrics to Prometheus: {e}")
