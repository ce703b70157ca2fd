"""List discovered scenarios."""

import typer
from pathlib import Path
from typing import List, Optional

import rich.console
import rich.table

from ...core import Config
from ...scenarios import ScenarioLoader, apply_selectors

console = rich.console.Console()


def list_scenarios(
    paths: List[Path] = typer.Argument(..., help="Scenario files or directories"),
    select: Optional[List[str]] = typer.Option(None, "--select", "-s", help="Selector (repeatable)"),
):
    """List scenarios without running them."""
    try:
        config = Config()
        loader = ScenarioLoader(config.discovery.includes, config.discovery.excludes)
        scenarios = apply_selectors(loader.load(paths), select)
    except Exception as e:
        typer.echo(f"Failed to load scenarios: {e}", err=True)
        raise typer.Exit(1)

    if not scenarios:
        console.print("[yellow]No scenarios found[/yellow]")
        return

    table = rich.table.Table(show_header=True, header_style="bold magenta")
    table.add_column("Scenario", style="cyan")
    table.add_column("Tags", style="green")
    table.add_column("Steps", justify="right")
    table.add_column("Origin", style="blue")

    for scenario in scenarios:
        table.add_row(
            scenario.name,
            ", ".join(scenario.tags),
            str(len(scenario.steps)),
            str(scenario.origin) if scenario.origin else "",
        )

    console.print(table)
