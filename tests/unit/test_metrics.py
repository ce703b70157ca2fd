# tests/unit/test_metrics.py
"""Unit tests for duration statistics."""

import pytest

from scenario_engine.core.metrics import SCENARIO_KEY, DurationAggregator, step_key
from scenario_engine.runner.runner import Runner

from tests.mocks import make_scenario, make_step


@pytest.mark.unit
class TestDurationAggregator:
    """Test aggregation and percentiles."""

    def test_empty_stats(self):
        stats = DurationAggregator().get_stats("nothing")

        assert stats["count"] == 0
        assert stats["p99"] == 0.0

    def test_percentiles(self):
        aggregator = DurationAggregator()
        for value in range(1, 101):
            aggregator.add_sample("op", float(value))

        p50, p95, p99 = aggregator.calculate_percentiles("op")
        stats = aggregator.get_stats("op")

        assert p50 == pytest.approx(50.5)
        assert p95 == pytest.approx(95.05)
        assert p99 == pytest.approx(99.01)
        assert stats["count"] == 100
        assert stats["min"] == 1.0
        assert stats["max"] == 100.0
        assert stats["mean"] == pytest.approx(50.5)

    def test_window_size(self):
        aggregator = DurationAggregator(window_size=3)
        for value in [100.0, 1.0, 2.0, 3.0]:
            aggregator.add_sample("op", value)

        assert aggregator.get_stats("op")["max"] == 3.0

    @pytest.mark.asyncio
    async def test_add_run_result(self):
        def boom(c):
            raise RuntimeError("boom")

        result = await Runner().run([
            make_scenario("ok", [make_step("a"), make_step("b")]),
            make_scenario("bad", [make_step("boom", boom)]),
        ])

        aggregator = DurationAggregator()
        aggregator.add_run_result(result)
        summary = aggregator.get_summary_statistics()

        assert summary[SCENARIO_KEY]["count"] == 2
        assert summary[SCENARIO_KEY]["statuses"] == {"passed": 1, "failed": 1}
        assert summary[step_key("step")]["count"] == 3

    def test_reset(self):
        aggregator = DurationAggregator()
        aggregator.add_sample("op", 1.0)
        aggregator.reset()

        assert aggregator.keys() == []
