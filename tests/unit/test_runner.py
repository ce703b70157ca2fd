# tests/unit/test_runner.py
"""Unit tests for the top-level runner."""

import asyncio
import time

import pytest

from scenario_engine.runner.errors import RunAbortedError, ScenarioTimeoutError, Skip, StepTimeoutError
from scenario_engine.runner.results import RunOptions, Status
from scenario_engine.runner.runner import FAIL_FAST_REASON, Runner
from scenario_engine.scenarios.models import StepKind, StepOptions
from scenario_engine.utils.signal import CancellationController

from tests.mocks import RecordingReporter, make_scenario, make_step, sleeping_scenario


@pytest.mark.unit
class TestRunner:
    """Test batching, fail-fast, timeouts and cancellation."""

    @pytest.mark.asyncio
    async def test_empty_run(self):
        result = await Runner().run([])

        assert (result.total, result.passed, result.failed, result.skipped) == (0, 0, 0, 0)
        assert result.scenarios == []

    @pytest.mark.asyncio
    async def test_fail_fast_unbounded_concurrency(self):
        """Pass at 0s, fail at 50ms, cancel the 100ms scenario."""
        scenarios = [
            sleeping_scenario("fast", 0.0),
            sleeping_scenario("failing", 0.05, fail=True),
            sleeping_scenario("slow", 0.1),
        ]

        result = await Runner().run(scenarios, RunOptions(max_failures=1))

        assert (result.total, result.passed, result.failed, result.skipped) == (3, 1, 1, 1)
        assert [s.status for s in result.scenarios] == [Status.PASSED, Status.FAILED, Status.SKIPPED]
        assert isinstance(result.scenarios[2].error, RunAbortedError)
        assert str(result.scenarios[2].error) == FAIL_FAST_REASON

    @pytest.mark.asyncio
    async def test_fail_fast_sequential_never_starts_later_scenarios(self):
        log = []
        reporter = RecordingReporter()
        scenarios = [
            sleeping_scenario("first", 0.0, log=log),
            sleeping_scenario("second", 0.0, fail=True, log=log),
            sleeping_scenario("third", 0.0, log=log),
        ]

        result = await Runner(reporter=reporter).run(
            scenarios, RunOptions(max_concurrency=1, max_failures=1)
        )

        assert [s.status for s in result.scenarios] == [Status.PASSED, Status.FAILED, Status.SKIPPED]
        assert "start:third" not in log
        assert isinstance(result.scenarios[2].error, Skip)
        assert result.scenarios[2].steps == []
        # Never-started scenarios are still announced to reporters
        assert ("scenario_start", "third") in reporter.events
        assert ("scenario_end", "third", "skipped") in reporter.events

    @pytest.mark.asyncio
    async def test_without_threshold_all_scenarios_run(self):
        scenarios = [sleeping_scenario(f"s{i}", 0.0, fail=True) for i in range(3)]

        result = await Runner().run(scenarios, RunOptions(max_concurrency=1))

        assert result.failed == 3
        assert result.skipped == 0

    @pytest.mark.asyncio
    async def test_batches_run_one_after_another(self):
        log = []
        scenarios = [sleeping_scenario(f"s{i}", 0.02, log=log) for i in range(4)]

        await Runner().run(scenarios, RunOptions(max_concurrency=2))

        first_batch_ends = max(log.index("end:s0"), log.index("end:s1"))
        second_batch_starts = min(log.index("start:s2"), log.index("start:s3"))
        assert first_batch_ends < second_batch_starts
        # Scenarios inside a batch overlap
        assert log.index("start:s1") < log.index("end:s0")

    @pytest.mark.asyncio
    async def test_sequential_run_never_overlaps(self):
        """With one slot, each scenario ends before the next one starts."""
        log = []

        def timed_scenario(i):
            async def body(ctx):
                log.append(("start", i, time.perf_counter()))
                await asyncio.sleep(0.01)
                log.append(("end", i, time.perf_counter()))

            return make_scenario(f"s{i}", [make_step("body", body)])

        result = await Runner().run([timed_scenario(i) for i in range(4)], RunOptions(max_concurrency=1))

        assert result.passed == 4
        assert [(event, i) for event, i, _ in log] == [
            (event, i) for i in range(4) for event in ("start", "end")
        ]
        for previous_end, next_start in zip(log[1::2], log[2::2]):
            assert next_start[2] >= previous_end[2]

    @pytest.mark.asyncio
    async def test_fail_fast_outranks_timeout_seen_while_unwinding(self):
        """A cancel arriving during a timed-out scenario's cleanup reports it as skipped."""

        async def slow_cleanup():
            await asyncio.sleep(0.1)

        async def hang(c):
            await asyncio.sleep(5)

        timed = make_scenario("timed", [
            make_step("cleanup", lambda ctx: slow_cleanup, kind=StepKind.SETUP),
            make_step("hang", hang),
        ], timeout=0.05)
        failing = sleeping_scenario("failing", 0.08, fail=True)

        result = await Runner().run([timed, failing], RunOptions(max_failures=1))

        assert [s.status for s in result.scenarios] == [Status.SKIPPED, Status.FAILED]
        assert isinstance(result.scenarios[0].error, RunAbortedError)
        assert str(result.scenarios[0].error) == FAIL_FAST_REASON
        assert (result.passed, result.failed, result.skipped) == (0, 1, 1)

    @pytest.mark.asyncio
    async def test_results_follow_input_order(self):
        scenarios = [sleeping_scenario(f"s{i}", 0.03 - i * 0.01) for i in range(3)]

        result = await Runner().run(scenarios)

        assert [s.metadata.name for s in result.scenarios] == ["s0", "s1", "s2"]
        assert result.passed == 3

    @pytest.mark.asyncio
    async def test_scenario_timeout(self):
        """The scenario budget cancels the active step and names it."""

        async def hang(c):
            await asyncio.sleep(5)

        timed = make_scenario("timed", [make_step("first"), make_step("slow-step", hang)], timeout=0.05)
        other = make_scenario("other")

        result = await Runner().run([timed, other])

        timed_result = result.scenarios[0]
        assert timed_result.status == Status.FAILED
        assert isinstance(timed_result.error, ScenarioTimeoutError)
        assert timed_result.error.scenario_name == "timed"
        assert timed_result.error.current_step_name == "slow-step"
        assert timed_result.error.current_step_index == 1
        assert result.scenarios[1].status == Status.PASSED

    @pytest.mark.asyncio
    async def test_scenario_timeout_takes_precedence_over_step_timeout(self):
        async def hang(c):
            await asyncio.sleep(5)

        scenario = make_scenario("timed", [make_step("hang", hang, timeout=1.0)], timeout=0.03)

        result = await Runner().run([scenario])

        assert isinstance(result.scenarios[0].error, ScenarioTimeoutError)
        assert not isinstance(result.scenarios[0].error, StepTimeoutError)

    @pytest.mark.asyncio
    async def test_run_timeout_default_and_override(self):
        async def medium(c):
            await asyncio.sleep(0.06)

        default_timed = make_scenario("default", [make_step("m", medium)])
        overridden = make_scenario("override", [make_step("m", medium)], timeout=1.0)

        result = await Runner().run([default_timed, overridden], RunOptions(timeout=0.02))

        assert isinstance(result.scenarios[0].error, ScenarioTimeoutError)
        assert result.scenarios[1].status == Status.PASSED

    @pytest.mark.asyncio
    async def test_step_defaults_forwarded(self):
        async def hang(c):
            await asyncio.sleep(5)

        result = await Runner().run(
            [make_scenario("s", [make_step("hang", hang)])],
            RunOptions(step_defaults=StepOptions(timeout=0.02)),
        )

        assert isinstance(result.scenarios[0].error, StepTimeoutError)

    @pytest.mark.asyncio
    async def test_external_signal_already_fired(self):
        controller = CancellationController()
        controller.cancel("shutdown")
        invoked = []

        scenarios = [make_scenario(f"s{i}", [make_step("s", lambda c: invoked.append(1))]) for i in range(2)]
        result = await Runner().run(scenarios, RunOptions(signal=controller.signal))

        assert result.skipped == 2
        assert invoked == []
        assert all(isinstance(s.error, RunAbortedError) for s in result.scenarios)
        assert "shutdown" in str(result.scenarios[0].error)

    @pytest.mark.asyncio
    async def test_external_signal_mid_run(self):
        controller = CancellationController()
        asyncio.get_running_loop().call_later(0.02, controller.cancel, Skip("stop requested"))

        scenarios = [sleeping_scenario("hang", 5.0), sleeping_scenario("later", 0.0)]
        result = await Runner().run(scenarios, RunOptions(max_concurrency=1, signal=controller.signal))

        assert [s.status for s in result.scenarios] == [Status.SKIPPED, Status.SKIPPED]
        assert str(result.scenarios[1].error) == "stop requested"

    @pytest.mark.asyncio
    async def test_rejects_negative_options(self):
        with pytest.raises(ValueError, match="max_concurrency"):
            await Runner().run([], RunOptions(max_concurrency=-1))

        with pytest.raises(ValueError, match="max_failures"):
            await Runner().run([], RunOptions(max_failures=-1))

    @pytest.mark.asyncio
    async def test_reporter_run_events(self):
        reporter = RecordingReporter()

        result = await Runner(reporter=reporter).run([make_scenario("a"), make_scenario("b")])

        assert reporter.events[0] == ("run_start", 2)
        assert reporter.events[-1] == ("run_end", 2)
        assert reporter.run_result is result
        assert len(reporter.hooks("scenario_end")) == 2

    @pytest.mark.asyncio
    async def test_result_serialization(self):
        def boom(c):
            raise RuntimeError("boom")

        result = await Runner().run([make_scenario("ok"), make_scenario("bad", [make_step("boom", boom)])])
        data = result.to_dict()

        assert data["summary"] == {
            "total": 2,
            "passed": 1,
            "failed": 1,
            "skipped": 0,
            "duration": data["summary"]["duration"],
        }
        assert data["scenarios"][0]["steps"][0]["value"] == "only"
        assert data["scenarios"][1]["error"] == {"type": "RuntimeError", "message": "boom"}
