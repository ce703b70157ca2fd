"""Terminal reporter built on rich."""

from __future__ import annotations

from typing import Optional

import rich.console
import rich.table
from rich.markup import escape

from .base import Reporter
from ..core.metrics import SCENARIO_KEY, DurationAggregator

STATUS_STYLES = {
    "passed": "green",
    "failed": "red",
    "skipped": "yellow",
}

STATUS_MARKS = {
    "passed": "✓",
    "failed": "✗",
    "skipped": "-",
}


class ConsoleReporter(Reporter):
    """Prints one line per scenario and a summary table at the end of the run."""

    def __init__(self,
                 console: Optional[rich.console.Console] = None,
                 show_steps: bool = False):
        self.console = console or rich.console.Console(stderr=True)
        self.show_steps = show_steps
        self.aggregator = DurationAggregator()

    def on_run_start(self, scenarios) -> None:
        self.aggregator.reset()
        self.console.print(f"[blue]Running {len(scenarios)} scenarios[/blue]")

    def on_step_end(self, scenario, step, result) -> None:
        if not self.show_steps:
            return
        status = result.status.value
        style = STATUS_STYLES[status]
        self.console.print(
            f"    [{style}]{STATUS_MARKS[status]}[/{style}] {escape(step.name)} "
            f"[dim]({step.kind.value}, {result.duration:.3f}s)[/dim]"
        )

    def on_scenario_end(self, scenario, result) -> None:
        self.aggregator.add_scenario_result(result)

        status = result.status.value
        style = STATUS_STYLES[status]
        self.console.print(
            f"[{style}]{STATUS_MARKS[status]} {escape(scenario.name)}[/{style}] "
            f"[dim]{result.duration:.3f}s[/dim]"
        )

        if result.error is not None and status != "passed":
            failed_step = next((s for s in result.steps if s.status.value != "passed"), None)
            where = f"step '{escape(failed_step.metadata.name)}': " if failed_step else ""
            self.console.print(f"    [{style}]{where}{escape(str(result.error))}[/{style}]")

    def on_run_end(self, scenarios, result) -> None:
        stats = self.aggregator.get_stats(SCENARIO_KEY)

        table = rich.table.Table(show_header=True, header_style="bold magenta", title="Run summary")
        table.add_column("Total", justify="right")
        table.add_column("Passed", justify="right", style="green")
        table.add_column("Failed", justify="right", style="red")
        table.add_column("Skipped", justify="right", style="yellow")
        table.add_column("Duration", justify="right")
        table.add_column("p50", justify="right", style="cyan")
        table.add_column("p95", justify="right", style="cyan")
        table.add_column("p99", justify="right", style="cyan")

        table.add_row(
            str(result.total),
            str(result.passed),
            str(result.failed),
            str(result.skipped),
            f"{result.duration:.3f}s",
            f"{stats['p50']:.3f}s",
            f"{stats['p95']:.3f}s",
            f"{stats['p99']:.3f}s",
        )

        self.console.print(table)
